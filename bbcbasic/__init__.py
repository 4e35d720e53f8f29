"""
BBC-BASIC - BBC BASIC interpreter

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

from .basic import NAME, VERSION, LONG_VERSION, COPYRIGHT
from .basic import Session, BASICError
from .main import main, script_entry_point_guard
