"""
BBC-BASIC - converter package
Conversion between plain-text and tokenised program lines

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

from ..base.codestream import TokenisedLine
from .tokeniser import Tokeniser
from .lister import Lister


def tokenise(text):
    """Convert a plain-text line to a TokenisedLine."""
    return Tokeniser().tokenise_line(text)

def detokenise(line):
    """Convert a TokenisedLine, or its binary encoding, to plain text."""
    if isinstance(line, (bytes, bytearray)):
        line = TokenisedLine.from_bytes(line)
    return Lister().detokenise_line(line)
