"""
BBC-BASIC - lister.py
Convert tokenised to plain-text format

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

from ..base import tokens as tk
from ..base.tokens import ALPHANUMERIC
from ..base import codestream


# chars that end a word when listed; a word after them needs a space
WORD_END = ALPHANUMERIC + u'_$%")'
# chars that start a word when listed
WORD_START = ALPHANUMERIC + u'_"&.@'
# function tokens: no space between these and a following operator
FUNCTION_TOKENS = tuple(
    _t for _t in tk.KEYWORDS if len(_t) == 1 and tk.OPENIN <= _t <= tk.EOF
) + (tk.SUM, tk.BEAT)


class Lister(object):
    """BASIC detokeniser."""

    def __init__(self, keyword_dict=None):
        """Initialise lister."""
        self._token_to_keyword = (keyword_dict or tk.TokenKeywordDict()).to_keyword

    def detokenise_line(self, line):
        """Convert a TokenisedLine to plain text."""
        output = []
        if line.line_number is not None:
            output.append(u'%d ' % (line.line_number,))
        body = self.detokenise_statements(line.tokens)
        return u''.join(output) + body

    def detokenise_statements(self, tokens):
        """Convert a token sequence to plain text."""
        output = u''
        last = None
        for token in tokens:
            if token.kind == codestream.END_OF_LINE:
                break
            text = self._token_to_text(token)
            if self._needs_space(last, token, output, text):
                output += u' '
            output += text
            last = token
        return output

    def _token_to_text(self, token):
        """Text representation of a single token."""
        kind, value = token
        if kind in (codestream.KEYWORD, codestream.EXTENDED):
            return self._token_to_keyword.get(value, u'')
        elif kind in (codestream.LINE_NUMBER, codestream.INTEGER):
            return u'%d' % (value,)
        elif kind == codestream.HEX_INTEGER:
            return u'&%X' % (value & 0xffffffff,)
        elif kind == codestream.STRING:
            return u'"%s"' % (value.replace(u'"', u'""'),)
        # real spelling, identifiers, operators, separators and verbatim text
        return value

    def _needs_space(self, last, token, output, text):
        """A space separates the previous token from this one."""
        if last is None or not output or not text:
            return False
        if token.kind == codestream.TEXT:
            # REM and DATA text keeps its own spacing
            return False
        if last.is_keyword:
            if last.value in tk.NAME_KEYWORDS:
                # PROCfoo, FNbar
                return False
            if token.kind == codestream.SEPARATOR or text in (u'(', u')'):
                return False
            if token.kind == codestream.OPERATOR and last.value in FUNCTION_TOKENS:
                return False
            return True
        if token.is_keyword:
            return output[-1] in WORD_END
        return output[-1] in WORD_END and text[0] in WORD_START
