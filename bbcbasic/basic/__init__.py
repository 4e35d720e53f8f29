"""
BBC-BASIC - basic package
BBC BASIC interpreter session

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

from .base.error import BASICError, Exit
from .api import Session
from .data import NAME, VERSION, LONG_VERSION, COPYRIGHT
