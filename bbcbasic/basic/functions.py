"""
BBC-BASIC - functions.py
Built-in functions and number formatting

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

import logging
import math
import random
import re

from .base import error
from .memory.variables import INTEGER, REAL, STRING, MAX_STRING, check_int


# result type follows the type of the argument
ARGUMENT = u'argument'
# any numeric argument, evaluated by its own type
NUMBER = u'number'
# arguments are not evaluated
UNEVALUATED = u'unevaluated'

# result type and argument types by function name
SIGNATURES = {
    u'PI': (REAL, ()),
    u'TRUE': (INTEGER, ()),
    u'FALSE': (INTEGER, ()),
    u'ERR': (INTEGER, ()),
    u'ERL': (INTEGER, ()),
    u'TIME': (INTEGER, ()),
    u'PAGE': (INTEGER, ()),
    u'HIMEM': (INTEGER, ()),
    u'LOMEM': (INTEGER, ()),
    u'COUNT': (INTEGER, ()),
    u'POS': (INTEGER, ()),
    u'VPOS': (INTEGER, ()),
    u'GET': (INTEGER, ()),
    u'GET$': (STRING, ()),
    u'RND': (REAL, (INTEGER,)),
    u'ABS': (ARGUMENT, (NUMBER,)),
    u'SGN': (INTEGER, (NUMBER,)),
    u'INT': (INTEGER, (REAL,)),
    u'ACS': (REAL, (REAL,)),
    u'ASN': (REAL, (REAL,)),
    u'ATN': (REAL, (REAL,)),
    u'COS': (REAL, (REAL,)),
    u'SIN': (REAL, (REAL,)),
    u'TAN': (REAL, (REAL,)),
    u'DEG': (REAL, (REAL,)),
    u'RAD': (REAL, (REAL,)),
    u'EXP': (REAL, (REAL,)),
    u'LN': (REAL, (REAL,)),
    u'LOG': (REAL, (REAL,)),
    u'SQR': (REAL, (REAL,)),
    u'ASC': (INTEGER, (STRING,)),
    u'LEN': (INTEGER, (STRING,)),
    u'VAL': (REAL, (STRING,)),
    u'INSTR': (INTEGER, (STRING, STRING, INTEGER)),
    u'INKEY': (INTEGER, (INTEGER,)),
    u'INKEY$': (STRING, (INTEGER,)),
    u'CHR$': (STRING, (INTEGER,)),
    u'LEFT$': (STRING, (STRING, INTEGER)),
    u'RIGHT$': (STRING, (STRING, INTEGER)),
    u'MID$': (STRING, (STRING, INTEGER, INTEGER)),
    u'STRING$': (STRING, (INTEGER, STRING)),
    u'STR$': (STRING, (NUMBER,)),
    u'STR$~': (STRING, (INTEGER,)),
    u'UPPER$': (STRING, (STRING,)),
    u'LOWER$': (STRING, (STRING,)),
}

# functions that need hardware, files or an assembler
BOUNDARY_FUNCTIONS = (
    u'ADVAL', u'POINT', u'USR', u'OPENIN', u'OPENOUT', u'OPENUP', u'BGET', u'EOF', u'EXT',
    u'PTR', u'SUM', u'BEAT', u'EVAL',
)
for _name in BOUNDARY_FUNCTIONS:
    SIGNATURES[_name] = (INTEGER, (UNEVALUATED,)*3)

# leading numeric part of a string, for VAL and READ
NUMBER_PATTERN = re.compile(r'\s*[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?')


def result_type(name, arg_types):
    """Static result type of a function, given the static types of its arguments."""
    result, _ = SIGNATURES[name]
    if result == ARGUMENT:
        return arg_types[0] if arg_types else REAL
    if name == u'RND' and not arg_types:
        # plain RND is a random integer
        return INTEGER
    return result


###############################################################################
# number formatting

def format_number(value, digits=9):
    """Representation of a number with up to the given number of significant digits."""
    if isinstance(value, int):
        return u'%d' % (value,)
    if value == 0:
        return u'0'
    text = u'%.*G' % (digits, value)
    if u'E' in text:
        mantissa, exponent = text.split(u'E')
        return u'%sE%d' % (mantissa, int(exponent))
    return text

def format_hex(value):
    """Hexadecimal representation of a 32-bit value."""
    return u'%X' % (value & 0xffffffff,)

def to_number(text):
    """Numeric value of the leading part of a string; zero if there is none."""
    match = NUMBER_PATTERN.match(text)
    if not match:
        return 0.
    return float(match.group(0))


###############################################################################
# numeric functions

def _float_function(fn, *args):
    """Call a real function, converting overflow to Too big."""
    try:
        result = fn(*args)
    except OverflowError:
        raise error.BASICError(error.TOO_BIG)
    if math.isinf(result) or math.isnan(result):
        raise error.BASICError(error.TOO_BIG)
    return result

def abs_(args):
    """ABS: absolute value."""
    num, = args
    if isinstance(num, int):
        return check_int(abs(num))
    return abs(num)

def sgn_(args):
    """SGN: sign."""
    num, = args
    return (num > 0) - (num < 0)

def int_(args):
    """INT: largest integer not greater than the argument."""
    num, = args
    return check_int(int(math.floor(num)))

def acs_(args):
    """ACS: arc cosine."""
    num, = args
    if not -1 <= num <= 1:
        raise error.BASICError(error.ARGUMENTS)
    return math.acos(num)

def asn_(args):
    """ASN: arc sine."""
    num, = args
    if not -1 <= num <= 1:
        raise error.BASICError(error.ARGUMENTS)
    return math.asin(num)

def atn_(args):
    """ATN: arc tangent."""
    num, = args
    return math.atan(num)

def cos_(args):
    """COS: cosine."""
    num, = args
    return _float_function(math.cos, num)

def sin_(args):
    """SIN: sine."""
    num, = args
    return _float_function(math.sin, num)

def tan_(args):
    """TAN: tangent."""
    num, = args
    return _float_function(math.tan, num)

def deg_(args):
    """DEG: radians to degrees."""
    num, = args
    return _float_function(math.degrees, num)

def rad_(args):
    """RAD: degrees to radians."""
    num, = args
    return math.radians(num)

def exp_(args):
    """EXP: exponential."""
    num, = args
    try:
        return _float_function(math.exp, num)
    except error.BASICError:
        raise error.BASICError(error.EXP_RANGE)

def ln_(args):
    """LN: natural logarithm."""
    num, = args
    if num <= 0:
        raise error.BASICError(error.LOG_RANGE)
    return math.log(num)

def log_(args):
    """LOG: common logarithm."""
    num, = args
    if num <= 0:
        raise error.BASICError(error.LOG_RANGE)
    return math.log10(num)

def sqr_(args):
    """SQR: square root."""
    num, = args
    if num < 0:
        raise error.BASICError(error.NEGATIVE_ROOT)
    return math.sqrt(num)

def pi_(args):
    """PI."""
    return math.pi

def true_(args):
    """TRUE."""
    return -1

def false_(args):
    """FALSE."""
    return 0


###############################################################################
# string functions

def _check_length(s):
    """Raise String too long if over the limit."""
    if len(s) > MAX_STRING:
        raise error.BASICError(error.STRING_TOO_LONG)
    return s

def asc_(args):
    """ASC: code of first character, -1 for empty string."""
    s, = args
    if not s:
        return -1
    return ord(s[0])

def len_(args):
    """LEN: length of string."""
    s, = args
    return len(s)

def val_(args):
    """VAL: numeric value of string."""
    s, = args
    return to_number(s)

def chr_(args):
    """CHR$: character with given code."""
    num, = args
    return chr(num & 0xff)

def left_(args):
    """LEFT$: substring at the start of string; all but the last char if no length."""
    s, num = (list(args) + [None])[:2]
    if num is None:
        return s[:-1]
    if num < 0:
        return s
    return s[:num]

def right_(args):
    """RIGHT$: substring at the end of string; the last char if no length."""
    s, num = (list(args) + [None])[:2]
    if num is None:
        return s[-1:]
    if num <= 0:
        return u''
    return s[-num:]

def mid_(args):
    """MID$: substring starting at 1-based position."""
    s, start, num = (list(args) + [None])[:3]
    start = max(start, 1) - 1
    if num is None or num < 0:
        return s[start:]
    return s[start:start+num]

def string_(args):
    """STRING$: repeated string."""
    num, s = args
    if num <= 0:
        return u''
    return _check_length(s * num)

def instr_(args):
    """INSTR: 1-based position of substring, 0 if not found."""
    s, sub, start = (list(args) + [None])[:3]
    if start is None or start < 1:
        start = 1
    if start > len(s) + 1:
        return 0
    return s.find(sub, start-1) + 1

def str_(args):
    """STR$: decimal representation."""
    num, = args
    return format_number(num)

def str_hex_(args):
    """STR$~: hexadecimal representation."""
    num, = args
    return format_hex(num)

def upper_(args):
    """UPPER$: convert to upper case."""
    s, = args
    return s.upper()

def lower_(args):
    """LOWER$: convert to lower case."""
    s, = args
    return s.lower()


###############################################################################
# functions with session state

class Functions(object):
    """Built-in function dispatcher."""

    def __init__(self, memory, console, machine, seed=None):
        """Initialise function callbacks."""
        self._memory = memory
        self._console = console
        self._machine = machine
        self._random = random.Random(seed)
        self._last_rnd = self._random.random()
        # error state is owned by the executor
        self._errors = None
        self._callbacks = {
            u'PI': pi_,
            u'TRUE': true_,
            u'FALSE': false_,
            u'ABS': abs_,
            u'SGN': sgn_,
            u'INT': int_,
            u'ACS': acs_,
            u'ASN': asn_,
            u'ATN': atn_,
            u'COS': cos_,
            u'SIN': sin_,
            u'TAN': tan_,
            u'DEG': deg_,
            u'RAD': rad_,
            u'EXP': exp_,
            u'LN': ln_,
            u'LOG': log_,
            u'SQR': sqr_,
            u'ASC': asc_,
            u'LEN': len_,
            u'VAL': val_,
            u'INSTR': instr_,
            u'CHR$': chr_,
            u'LEFT$': left_,
            u'RIGHT$': right_,
            u'MID$': mid_,
            u'STRING$': string_,
            u'STR$': str_,
            u'STR$~': str_hex_,
            u'UPPER$': upper_,
            u'LOWER$': lower_,
            u'RND': self.rnd_,
            u'ERR': self.err_,
            u'ERL': self.erl_,
            u'TIME': self.time_,
            u'PAGE': self.page_,
            u'HIMEM': self.himem_,
            u'LOMEM': self.lomem_,
            u'COUNT': self.count_,
            u'POS': self.pos_,
            u'VPOS': self.vpos_,
            u'GET': self.get_,
            u'GET$': self.get_str_,
            u'INKEY': self.inkey_,
            u'INKEY$': self.inkey_str_,
        }

    def init_callbacks(self, executor):
        """Attach the owner of the error state."""
        self._errors = executor

    def call(self, name, args):
        """Call a function with evaluated arguments."""
        if name in BOUNDARY_FUNCTIONS:
            return self._machine.function_(name)
        return self._callbacks[name](args)

    def rnd_(self, args):
        """RND: random number."""
        if not args:
            return self._random.randint(-0x80000000, 0x7fffffff)
        num, = args
        if num < 0:
            # reseed
            self._random.seed(num)
            return float(num)
        elif num == 0:
            return self._last_rnd
        elif num == 1:
            self._last_rnd = self._random.random()
            return self._last_rnd
        return float(self._random.randint(1, num))

    def err_(self, args):
        """ERR: number of last error."""
        return self._errors.err

    def erl_(self, args):
        """ERL: line number of last error."""
        return self._errors.erl

    def time_(self, args):
        """TIME: centisecond clock."""
        return self._machine.get_time()

    def page_(self, args):
        """PAGE: start of program."""
        return self._memory.page

    def himem_(self, args):
        """HIMEM: end of user memory."""
        return self._memory.himem

    def lomem_(self, args):
        """LOMEM: start of variables."""
        return self._memory.lomem

    def count_(self, args):
        """COUNT: characters printed since the last newline."""
        return self._console.count

    def pos_(self, args):
        """POS: cursor column."""
        return self._console.column

    def vpos_(self, args):
        """VPOS: cursor row."""
        return self._console.row

    def get_(self, args):
        """GET: wait for a key, return its code."""
        return ord(self._console.get_char())

    def get_str_(self, args):
        """GET$: wait for a key, return it."""
        return self._console.get_char()

    def inkey_(self, args):
        """INKEY: key code within time limit, -1 if none."""
        num, = args
        if num < 0:
            logging.warning('INKEY(%d) keyboard scan not emulated', num)
            return 0
        char = self._console.inkey(num)
        return ord(char) if char else -1

    def inkey_str_(self, args):
        """INKEY$: key within time limit, empty if none."""
        num, = args
        if num < 0:
            logging.warning('INKEY$(%d) keyboard scan not emulated', num)
            return u''
        return self._console.inkey(num)
