"""
BBC-BASIC - error.py
Error constants and exceptions

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

# error constants
# numbers follow BBC BASIC II where it has one
NO_ROOM = 0
MISTAKE = 4
MISSING_COMMA = 5
TYPE_MISMATCH = 6
NO_FN = 7
MISSING_QUOTE = 9
BAD_DIM = 10
NOT_LOCAL = 12
NO_PROC = 13
ARRAY = 14
SUBSCRIPT = 15
SYNTAX_ERROR = 16
ESCAPE = 17
DIVISION_BY_ZERO = 18
STRING_TOO_LONG = 19
TOO_BIG = 20
NEGATIVE_ROOT = 21
LOG_RANGE = 22
EXP_RANGE = 24
NO_SUCH_VARIABLE = 26
MISSING_BRACKET = 27
BAD_HEX = 28
NO_SUCH_PROC = 29
BAD_CALL = 30
ARGUMENTS = 31
NO_FOR = 32
CANT_MATCH_FOR = 33
NO_TO = 36
NO_GOSUB = 38
ON_SYNTAX = 39
ON_RANGE = 40
NO_SUCH_LINE = 41
OUT_OF_DATA = 42
NO_REPEAT = 43
# no BBC equivalent
NO_ENDWHILE = 48
NO_WHILE = 49
DISK_ERROR = 199
FILE_NOT_FOUND = 214
MEMORY_EXHAUSTED = 252
INVALID_ADDRESS = 253
BAD_PROGRAM = 254

# shorthand
STX = SYNTAX_ERROR
ILLEGAL_FUNCTION = ARGUMENTS


class Interrupt(Exception):
    """Base type for exceptions."""

    message = u''

    def __repr__(self):
        """String representation of exception."""
        return self.message

    def get_message(self):
        """Error message."""
        return self.message


class Exit(Interrupt):
    """Exit interpreter."""
    message = u'Exit'


class BASICError(Interrupt):
    """Runtime error."""

    default_message = u'Unprintable error'
    messages = {
        0: u'No room',
        4: u'Mistake',
        5: u'Missing ,',
        6: u'Type mismatch',
        7: u'No FN',
        9: u'Missing "',
        10: u'Bad DIM',
        12: u'Not LOCAL',
        13: u'No PROC',
        14: u'Array',
        15: u'Subscript',
        16: u'Syntax error',
        17: u'Escape',
        18: u'Division by zero',
        19: u'String too long',
        20: u'Too big',
        21: u'-ve root',
        22: u'Log range',
        24: u'Exp range',
        26: u'No such variable',
        27: u'Missing )',
        28: u'Bad HEX',
        29: u'No such FN/PROC',
        30: u'Bad call',
        31: u'Arguments',
        32: u'No FOR',
        33: u"Can't match FOR",
        36: u'No TO',
        38: u'RETURN without GOSUB',
        39: u'ON syntax',
        40: u'ON range',
        41: u'No such line',
        42: u'Out of DATA',
        43: u'No REPEAT',
        48: u'Missing ENDWHILE',
        49: u'No WHILE',
        199: u'Disc error',
        214: u'File not found',
        252: u'Memory exhausted',
        253: u'Invalid address',
        254: u'Bad program',
    }

    def __init__(self, value, line=None, detail=None):
        """Set up BASIC error."""
        Interrupt.__init__(self)
        self.err = value
        # line number where the error occurred, None if unknown or direct mode
        self.line = line
        # variable name, address or other specifics
        self.detail = detail
        self.message = self.messages.get(self.err, self.default_message)

    def __str__(self):
        """String representation of exception."""
        return self.get_message()

    def get_message(self):
        """Error message including detail and line number."""
        message = self.message
        if self.detail is not None:
            if self.err == INVALID_ADDRESS:
                message = u'%s: $%04X' % (message, self.detail)
            else:
                message = u'%s: %s' % (message, self.detail)
        if self.line is not None:
            message = u'%s at line %d' % (message, self.line)
        return message


class UserError(BASICError):
    """Error raised by the program with ERROR n, message."""

    def __init__(self, value, message, line=None):
        """Set up user-defined error."""
        BASICError.__init__(self, value, line)
        self.message = message


def range_check(lower, upper, *allvars):
    """Check if all variables in list are within the given inclusive range."""
    for v in allvars:
        if v is not None and not (lower <= v <= upper):
            raise BASICError(ARGUMENTS)

def throw_if(bool, err=SYNTAX_ERROR):
    """Raise BASICError if condition is met."""
    if bool:
        raise BASICError(err)
