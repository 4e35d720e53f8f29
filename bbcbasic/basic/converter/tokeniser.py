"""
BBC-BASIC - tokeniser.py
Convert plain-text BASIC code to tokenised form

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

from ..base import error
from ..base import tokens as tk
from ..base.tokens import DIGITS, HEXDIGITS, LETTERS, NAME_CHARS
from ..base import codestream
from ..base.codestream import Token, TokenisedLine


# largest value stored as an integer literal
MAX_INT = 0x7fffffff
# largest value stored as a line number reference
MAX_LINE_REF = 0xffff
# highest line number that can be stored
MAX_LINE_NUMBER = 32767


class PlainTextStream(object):
    """Stream of plain-text BASIC code."""

    blanks = u' \t'

    def __init__(self, text):
        """Initialise the stream."""
        self._text = text
        self._pos = 0

    def peek(self, n=1):
        """Peek next chars in stream."""
        return self._text[self._pos:self._pos+n]

    def read(self, n=1):
        """Read next chars in stream."""
        d = self._text[self._pos:self._pos+n]
        self._pos += len(d)
        return d

    def unread(self, n):
        """Step back over chars already read."""
        self._pos = max(0, self._pos - n)

    def read_rest(self):
        """Read to end of line."""
        return self.read(len(self._text) - self._pos)

    def skip_blank(self):
        """Skip whitespace, then peek next."""
        while self.peek() and self.peek() in self.blanks:
            self._pos += 1
        return self.peek()

    def read_while(self, in_range):
        """Read as long as chars are in range."""
        start = self._pos
        while self.peek() and self.peek() in in_range:
            self._pos += 1
        return self._text[start:self._pos]

    def read_number(self):
        """Read a decimal literal; return its spelling."""
        start = self._pos
        self.read_while(DIGITS)
        if self.peek() == u'.':
            self.read()
            self.read_while(DIGITS)
        if self.peek() in (u'E', u'e'):
            # exponent only if digits follow, otherwise E starts a word
            mark = self._pos
            self.read()
            if self.peek() in (u'+', u'-'):
                self.read()
            if not self.read_while(DIGITS):
                self._pos = mark
        return self._text[start:self._pos]

    def read_string(self):
        """Read a quoted string literal with doubled quotes; return its contents."""
        self.read()
        value = []
        while True:
            c = self.read()
            if c == u'':
                raise error.BASICError(error.SYNTAX_ERROR, detail=u'Missing "')
            if c == u'"':
                if self.peek() != u'"':
                    break
                self.read()
            value.append(c)
        return u''.join(value)


def _check_text(text):
    """Reject characters that don't fit in a byte of quoted or verbatim text."""
    for c in text:
        if ord(c) > 0xff:
            raise error.BASICError(
                error.SYNTAX_ERROR, detail=u'Bad character &%X' % (ord(c),)
            )
    return text


class Tokeniser(object):
    """BASIC tokeniser."""

    def __init__(self, keyword_dict=None):
        """Initialise tokeniser."""
        self._keywords = keyword_dict or tk.TokenKeywordDict()

    def tokenise_line(self, line):
        """Convert a plain-text program line to a TokenisedLine."""
        ins = PlainTextStream(line.rstrip(u'\r\n'))
        ins.skip_blank()
        line_number = self._tokenise_line_number(ins)
        tokens = []
        # expect line numbers after GOTO and friends
        jump_mode = False
        # statement-form keywords at statement start
        statement_start = True
        while True:
            c = ins.skip_blank()
            if c == u'':
                break
            was_start, statement_start = statement_start, False
            if c == u'"':
                tokens.append(Token(codestream.STRING, _check_text(ins.read_string())))
                jump_mode = False
            elif c in DIGITS or (c == u'.' and ins.peek(2)[1:] in tuple(DIGITS)):
                tokens.append(self._tokenise_number(ins, jump_mode))
            elif c == u'&':
                ins.read()
                digits = ins.read_while(HEXDIGITS)
                if not digits:
                    tokens.append(Token(codestream.OPERATOR, u'&'))
                else:
                    value = int(digits, 16)
                    if value > 0xffffffff:
                        raise error.BASICError(error.BAD_HEX)
                    # &80000000 and above wrap to negative
                    if value > MAX_INT:
                        value -= 0x100000000
                    tokens.append(Token(codestream.HEX_INTEGER, value))
                jump_mode = False
            elif c in LETTERS or c == u'_':
                token = self._tokenise_word(ins, was_start)
                tokens.append(token)
                if token.is_keyword:
                    if token.value in tk.TEXT_KEYWORDS:
                        text = _check_text(ins.read_rest())
                        if text:
                            tokens.append(Token(codestream.TEXT, text))
                        break
                    jump_mode = token.value in tk.JUMP_KEYWORDS
                    statement_start = token.value in (tk.THEN, tk.ELSE)
                else:
                    jump_mode = False
            elif c == u'@' and ins.peek(2) == u'@%':
                ins.read(2)
                tokens.append(Token(codestream.IDENTIFIER, u'@%'))
                jump_mode = False
            elif c in tk.SEPARATORS:
                ins.read()
                tokens.append(Token(codestream.SEPARATOR, c))
                statement_start = (c == u':')
                # ON x GOTO 10,20,30
                jump_mode = jump_mode and c == u','
            elif ord(c) < 32 or ord(c) >= 127:
                raise error.BASICError(
                    error.SYNTAX_ERROR, detail=u'Bad character &%02X' % (ord(c),)
                )
            else:
                ins.read()
                tokens.append(Token(codestream.OPERATOR, c))
                jump_mode = False
        tokens.append(codestream.EOL)
        return TokenisedLine(line_number, tuple(tokens))

    def _tokenise_line_number(self, ins):
        """Read a leading line number, if any."""
        if not ins.peek() or ins.peek() not in DIGITS:
            return None
        digits = ins.read_while(DIGITS)
        number = int(digits)
        if number > MAX_LINE_NUMBER:
            raise error.BASICError(error.SYNTAX_ERROR, detail=u'Bad line number')
        return number

    def _tokenise_number(self, ins, jump_mode):
        """Convert a decimal literal to an integer, real or line number token."""
        spelling = ins.read_number()
        if all(_c in DIGITS for _c in spelling):
            value = int(spelling)
            if jump_mode and value <= MAX_LINE_REF:
                return Token(codestream.LINE_NUMBER, value)
            # leading zeros are kept in the spelling of a real literal
            if value <= MAX_INT and (spelling == u'0' or spelling[0] != u'0'):
                return Token(codestream.INTEGER, value)
        return Token(codestream.REAL, spelling.upper())

    def _tokenise_word(self, ins, statement_start):
        """Convert a keyword or identifier."""
        word = ins.read_while(NAME_CHARS)
        sigil = ins.peek()
        if sigil not in tk.SIGILS:
            sigil = u''
        # keywords in any case, as whole words
        token = self._keywords.to_token.get((word + sigil).upper())
        if token is not None:
            ins.read(len(sigil))
            return self._keyword_token(token, statement_start)
        # upper-case keywords also as abbreviations: PRINTA is PRINT A, PROCfoo is PROC foo
        capitals = 0
        while capitals < len(word) and word[capitals] in tk.UPPERCASE:
            capitals += 1
        keyword, token = self._keywords.match_prefix(word[:capitals])
        if token is not None:
            ins.unread(len(word) - len(keyword))
            return self._keyword_token(token, statement_start)
        ins.read(len(sigil))
        return Token(codestream.IDENTIFIER, word + sigil)

    def _keyword_token(self, token, statement_start):
        """Keyword token, selecting the statement form at statement start."""
        if statement_start:
            token = tk.STATEMENT_FORMS.get(token, token)
        if len(token) == 2:
            return Token(codestream.EXTENDED, token)
        return Token(codestream.KEYWORD, token)
