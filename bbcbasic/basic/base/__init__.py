"""
BBC-BASIC - base package
Error definitions, token tables and token streams

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""
