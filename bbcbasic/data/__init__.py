"""
BBC-BASIC - application data package
Command-line usage text

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

import importlib_resources as _resources


def read_usage():
    """Usage description for the command line."""
    return _resources.files(__package__).joinpath('USAGE.txt').read_text(errors='replace')
