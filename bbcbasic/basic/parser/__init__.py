"""
BBC-BASIC - parser package
Statement and expression parsers

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

from .statements import Parser
