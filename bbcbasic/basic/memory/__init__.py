"""
BBC-BASIC - memory package
Emulated memory and variable storage

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

from .memory import MemoryManager
from .variables import Variables
