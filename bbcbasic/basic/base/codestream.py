"""
BBC-BASIC - codestream.py
Tokens, tokenised lines and token streams

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

import struct
from collections import namedtuple

from . import error
from . import tokens as tk


# token kinds
KEYWORD = u'keyword'
EXTENDED = u'extended'
LINE_NUMBER = u'line number'
INTEGER = u'integer'
HEX_INTEGER = u'hex integer'
REAL = u'real'
STRING = u'string'
IDENTIFIER = u'identifier'
OPERATOR = u'operator'
SEPARATOR = u'separator'
TEXT = u'text'
END_OF_LINE = u'end of line'

# kinds compared by their symbol value
SYMBOLIC = (KEYWORD, EXTENDED, OPERATOR, SEPARATOR)
# kinds that hold a numeric literal
NUMERIC = (INTEGER, HEX_INTEGER, REAL)


class Token(namedtuple('Token', ['kind', 'value'])):
    """A single immutable token."""

    __slots__ = ()

    def __repr__(self):
        """Debugging representation."""
        if self.kind in (KEYWORD, EXTENDED):
            return u'<%s>' % tk.KEYWORDS.get(self.value, self.value)
        return u'%s(%r)' % (self.kind, self.value)

    def matches(self, *values):
        """Token is a keyword, operator or separator in the given values."""
        return self.kind in SYMBOLIC and self.value in values

    @property
    def is_keyword(self):
        """Token is a single-byte or extended keyword."""
        return self.kind in (KEYWORD, EXTENDED)


EOL = Token(END_OF_LINE, None)


class TokenisedLine(namedtuple('TokenisedLine', ['line_number', 'tokens'])):
    """Optional line number and the line's tokens, ending in END_OF_LINE."""

    __slots__ = ()

    def to_bytes(self):
        """Encode to the binary tokenised format."""
        return encode_line(self)

    @classmethod
    def from_bytes(cls, data):
        """Decode from the binary tokenised format."""
        return decode_line(data)


###############################################################################
# binary codec

def encode_line(line):
    """Encode a TokenisedLine to bytes."""
    out = bytearray()
    if line.line_number is not None:
        out += tk.T_LINE + struct.pack('<H', line.line_number)
    for token in line.tokens:
        if token.kind in (KEYWORD, EXTENDED):
            out += token.value
        elif token.kind == LINE_NUMBER:
            out += tk.T_LINE + struct.pack('<H', token.value)
        elif token.kind == INTEGER:
            out += tk.T_INT + struct.pack('<i', token.value)
        elif token.kind == HEX_INTEGER:
            out += tk.T_HEX + struct.pack('<i', token.value)
        elif token.kind == REAL:
            spelling = token.value.encode('ascii')
            out += tk.T_REAL + struct.pack('<B', len(spelling)) + spelling
        elif token.kind == STRING:
            out += b'"' + token.value.replace(u'"', u'""').encode('latin-1') + b'"'
        elif token.kind in (IDENTIFIER, OPERATOR, SEPARATOR, TEXT):
            out += token.value.encode('latin-1')
        elif token.kind == END_OF_LINE:
            break
    out += tk.T_EOL
    return bytes(out)

def decode_line(data):
    """Decode bytes in the binary tokenised format to a TokenisedLine."""
    data = bytes(data)
    pos, line_number = 0, None
    if data[:1] == tk.T_LINE:
        line_number, = struct.unpack_from('<H', data, 1)
        pos = 3
    tokens = []
    try:
        while True:
            c = data[pos:pos+1]
            if c in (tk.T_EOL, b''):
                break
            if c == tk.T_LINE:
                tokens.append(Token(LINE_NUMBER, struct.unpack_from('<H', data, pos+1)[0]))
                pos += 3
            elif c == tk.T_INT:
                tokens.append(Token(INTEGER, struct.unpack_from('<i', data, pos+1)[0]))
                pos += 5
            elif c == tk.T_HEX:
                tokens.append(Token(HEX_INTEGER, struct.unpack_from('<i', data, pos+1)[0]))
                pos += 5
            elif c == tk.T_REAL:
                length = data[pos+1]
                tokens.append(Token(REAL, data[pos+2:pos+2+length].decode('ascii')))
                pos += 2 + length
            elif c == b'"':
                pos = _decode_string(data, pos, tokens)
            elif c in tk.PREFIXES:
                tokens.append(Token(EXTENDED, data[pos:pos+2]))
                pos += 2
            elif ord(c) >= 0x80:
                tokens.append(Token(KEYWORD, c))
                pos += 1
                if c in tk.TEXT_KEYWORDS:
                    end = data.find(tk.T_EOL, pos)
                    if end < 0:
                        end = len(data)
                    if end > pos:
                        tokens.append(Token(TEXT, data[pos:end].decode('latin-1')))
                    pos = end
            else:
                pos = _decode_char(data, pos, tokens)
    except (struct.error, IndexError, UnicodeDecodeError):
        raise error.BASICError(error.BAD_PROGRAM)
    tokens.append(EOL)
    return TokenisedLine(line_number, tuple(tokens))

def _decode_string(data, pos, tokens):
    """Decode a quoted string literal; return new position."""
    value = bytearray()
    pos += 1
    while True:
        c = data[pos:pos+1]
        if c in (b'', tk.T_EOL):
            raise error.BASICError(error.BAD_PROGRAM)
        if c == b'"':
            if data[pos+1:pos+2] != b'"':
                break
            pos += 1
        value += c
        pos += 1
    tokens.append(Token(STRING, value.decode('latin-1')))
    return pos + 1

def _decode_char(data, pos, tokens):
    """Decode an identifier, operator or separator; return new position."""
    c = data[pos:pos+1].decode('latin-1')
    if c == u'@' and data[pos+1:pos+2] == b'%':
        tokens.append(Token(IDENTIFIER, u'@%'))
        return pos + 2
    if c in tk.NAME_CHARS:
        end = pos
        while data[end:end+1] and data[end:end+1].decode('latin-1') in tk.NAME_CHARS:
            end += 1
        if data[end:end+1] in (b'%', b'$'):
            end += 1
        tokens.append(Token(IDENTIFIER, data[pos:end].decode('latin-1')))
        return end
    if c in tk.SEPARATORS:
        tokens.append(Token(SEPARATOR, c))
    else:
        tokens.append(Token(OPERATOR, c))
    return pos + 1


###############################################################################
# token stream

class TokenStream(object):
    """Stream of tokens from a tokenised line."""

    def __init__(self, tokens):
        """Initialise the stream."""
        self._tokens = tuple(tokens)
        self._pos = 0

    def __repr__(self):
        """Debugging representation."""
        return u'TokenStream(%s | %s)' % (
            u' '.join(repr(_t) for _t in self._tokens[:self._pos]),
            u' '.join(repr(_t) for _t in self._tokens[self._pos:]),
        )

    def tell(self):
        """Current position."""
        return self._pos

    def seek(self, pos):
        """Move to position."""
        self._pos = pos

    def peek(self, offset=0):
        """Peek at a token without consuming it."""
        try:
            return self._tokens[self._pos + offset]
        except IndexError:
            return EOL

    def read(self):
        """Read next token."""
        token = self.peek()
        if self._pos < len(self._tokens):
            self._pos += 1
        return token

    def peek_keyword(self):
        """Next keyword token value, or None if the next token is not a keyword."""
        token = self.peek()
        if token.is_keyword:
            return token.value
        return None

    def read_if(self, *values):
        """Read if next token is a keyword, operator or separator in values."""
        token = self.peek()
        if token.matches(*values):
            self._pos += 1
            return token.value
        return None

    def read_kind_if(self, kind):
        """Read if next token is of given kind."""
        token = self.peek()
        if token.kind == kind:
            self._pos += 1
            return token
        return None

    def require_read(self, in_range, err=error.STX):
        """Read and raise error if not in range."""
        value = self.read_if(*in_range)
        if value is None:
            raise error.BASICError(err)
        return value

    def read_name(self):
        """Read an identifier, return its name; raise Mistake if absent."""
        token = self.read_kind_if(IDENTIFIER)
        if token is None:
            raise error.BASICError(error.MISTAKE)
        return token.value

    def at_end_statement(self):
        """At end of line, statement separator or ELSE."""
        token = self.peek()
        return token.kind == END_OF_LINE or token.matches(u':', tk.ELSE)

    def require_end(self, err=error.STX):
        """Raise error if not at end of statement."""
        if not self.at_end_statement():
            raise error.BASICError(err)

    def skip_to_end(self):
        """Skip to end of statement."""
        while not self.at_end_statement():
            self._pos += 1
