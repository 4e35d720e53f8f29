"""
BBC-BASIC - tokens.py
BASIC keyword tokens

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

# ascii constants
DIGITS = u'0123456789'
UPPERCASE = u'ABCDEFGHIJKLMNOPQRSTUVWXYZ'
LOWERCASE = UPPERCASE.lower()
LETTERS = UPPERCASE + LOWERCASE
ALPHANUMERIC = LETTERS + DIGITS
HEXDIGITS = DIGITS + u'abcdefABCDEF'

# allowable as chars 2.. in a variable name (first char must be a letter or _)
NAME_CHARS = ALPHANUMERIC + u'_'
# type characters
SIGILS = (u'%', u'$')

# tokenised line markers
T_LINE = b'\x8d'
T_INT = b'\x1c'
T_REAL = b'\x1d'
T_HEX = b'\x1e'
T_EOL = b'\x0d'

# extension prefixes
P_FUNCTION = b'\xc6'
P_COMMAND = b'\xc7'
P_STATEMENT = b'\xc8'
PREFIXES = (P_FUNCTION, P_COMMAND, P_STATEMENT)

# operators and logical functions
AND = b'\x80'
DIV = b'\x81'
EOR = b'\x82'
MOD = b'\x83'
OR = b'\x84'
ERROR = b'\x85'
LINE = b'\x86'
OFF = b'\x87'
STEP = b'\x88'
SPC = b'\x89'
TAB = b'\x8a'
ELSE = b'\x8b'
THEN = b'\x8c'
# functions and pseudo-variables
OPENIN = b'\x8e'
PTR = b'\x8f'
PAGE = b'\x90'
TIME = b'\x91'
LOMEM = b'\x92'
HIMEM = b'\x93'
ABS = b'\x94'
ACS = b'\x95'
ADVAL = b'\x96'
ASC = b'\x97'
ASN = b'\x98'
ATN = b'\x99'
BGET = b'\x9a'
COS = b'\x9b'
COUNT = b'\x9c'
DEG = b'\x9d'
ERL = b'\x9e'
ERR = b'\x9f'
EVAL = b'\xa0'
EXP = b'\xa1'
EXT = b'\xa2'
FALSE = b'\xa3'
FN = b'\xa4'
GET = b'\xa5'
INKEY = b'\xa6'
INSTR = b'\xa7'
INT = b'\xa8'
LEN = b'\xa9'
LN = b'\xaa'
LOG = b'\xab'
NOT = b'\xac'
OPENOUT = b'\xad'
OPENUP = b'\xae'
PI = b'\xaf'
POINT = b'\xb0'
POS = b'\xb1'
RAD = b'\xb2'
RND = b'\xb3'
SGN = b'\xb4'
SIN = b'\xb5'
SQR = b'\xb6'
TAN = b'\xb7'
TO = b'\xb8'
TRUE = b'\xb9'
USR = b'\xba'
VAL = b'\xbb'
VPOS = b'\xbc'
CHR = b'\xbd'
GET_STR = b'\xbe'
INKEY_STR = b'\xbf'
LEFT = b'\xc0'
MID = b'\xc1'
RIGHT = b'\xc2'
STR = b'\xc3'
STRING = b'\xc4'
EOF = b'\xc5'
# commands; 0xc6..0xc8 are taken by the extension prefixes
LIST = b'\xc9'
NEW = b'\xca'
OLD = b'\xcb'
RENUMBER = b'\xcc'
SAVE = b'\xcd'
EDIT = b'\xce'
# pseudo-variables in statement position
PTR_ST = b'\xcf'
PAGE_ST = b'\xd0'
TIME_ST = b'\xd1'
LOMEM_ST = b'\xd2'
HIMEM_ST = b'\xd3'
# statements
SOUND = b'\xd4'
BPUT = b'\xd5'
CALL = b'\xd6'
CHAIN = b'\xd7'
CLEAR = b'\xd8'
CLOSE = b'\xd9'
CLG = b'\xda'
CLS = b'\xdb'
DATA = b'\xdc'
DEF = b'\xdd'
DIM = b'\xde'
DRAW = b'\xdf'
END = b'\xe0'
ENDPROC = b'\xe1'
ENVELOPE = b'\xe2'
FOR = b'\xe3'
GOSUB = b'\xe4'
GOTO = b'\xe5'
GCOL = b'\xe6'
IF = b'\xe7'
INPUT = b'\xe8'
LET = b'\xe9'
LOCAL = b'\xea'
MODE = b'\xeb'
MOVE = b'\xec'
NEXT = b'\xed'
ON = b'\xee'
VDU = b'\xef'
PLOT = b'\xf0'
PRINT = b'\xf1'
PROC = b'\xf2'
READ = b'\xf3'
REM = b'\xf4'
REPEAT = b'\xf5'
REPORT = b'\xf6'
RESTORE = b'\xf7'
RETURN = b'\xf8'
RUN = b'\xf9'
STOP = b'\xfa'
COLOUR = b'\xfb'
TRACE = b'\xfc'
UNTIL = b'\xfd'
WIDTH = b'\xfe'
OSCLI = b'\xff'

# extended functions
SUM = P_FUNCTION + b'\x8e'
BEAT = P_FUNCTION + b'\x8f'

# extended commands
APPEND = P_COMMAND + b'\x8e'
AUTO = P_COMMAND + b'\x8f'
CRUNCH = P_COMMAND + b'\x90'
DELETE = P_COMMAND + b'\x91'
X_EDIT = P_COMMAND + b'\x92'
HELP = P_COMMAND + b'\x93'
X_LIST = P_COMMAND + b'\x94'
LOAD = P_COMMAND + b'\x95'
LVAR = P_COMMAND + b'\x96'
X_NEW = P_COMMAND + b'\x97'
X_OLD = P_COMMAND + b'\x98'
X_RENUMBER = P_COMMAND + b'\x99'
X_SAVE = P_COMMAND + b'\x9a'
TEXTLOAD = P_COMMAND + b'\x9b'
TEXTSAVE = P_COMMAND + b'\x9c'
TWIN = P_COMMAND + b'\x9d'
TWINO = P_COMMAND + b'\x9e'

# extended statements
CASE = P_STATEMENT + b'\x8e'
CIRCLE = P_STATEMENT + b'\x8f'
FILL = P_STATEMENT + b'\x90'
ORIGIN = P_STATEMENT + b'\x91'
POINT_ST = P_STATEMENT + b'\x92'
RECTANGLE = P_STATEMENT + b'\x93'
SWAP = P_STATEMENT + b'\x94'
WHILE = P_STATEMENT + b'\x95'
WAIT = P_STATEMENT + b'\x96'
MOUSE = P_STATEMENT + b'\x97'
QUIT = P_STATEMENT + b'\x98'
SYS = P_STATEMENT + b'\x99'
INSTALL = P_STATEMENT + b'\x9a'
LIBRARY = P_STATEMENT + b'\x9b'
TINT = P_STATEMENT + b'\x9c'
ELLIPSE = P_STATEMENT + b'\x9d'
BEATS = P_STATEMENT + b'\x9e'
TEMPO = P_STATEMENT + b'\x9f'
VOICES = P_STATEMENT + b'\xa0'
VOICE = P_STATEMENT + b'\xa1'
STEREO = P_STATEMENT + b'\xa2'
OVERLAY = P_STATEMENT + b'\xa3'
ENDWHILE = P_STATEMENT + b'\xa4'


# keyword dictionary, in table order
KEYWORDS = {
    AND: u'AND', DIV: u'DIV', EOR: u'EOR', MOD: u'MOD', OR: u'OR', ERROR: u'ERROR',
    LINE: u'LINE', OFF: u'OFF', STEP: u'STEP', SPC: u'SPC', TAB: u'TAB', ELSE: u'ELSE',
    THEN: u'THEN',
    OPENIN: u'OPENIN', PTR: u'PTR', PAGE: u'PAGE', TIME: u'TIME', LOMEM: u'LOMEM',
    HIMEM: u'HIMEM', ABS: u'ABS', ACS: u'ACS', ADVAL: u'ADVAL', ASC: u'ASC', ASN: u'ASN',
    ATN: u'ATN', BGET: u'BGET', COS: u'COS', COUNT: u'COUNT', DEG: u'DEG', ERL: u'ERL',
    ERR: u'ERR', EVAL: u'EVAL', EXP: u'EXP', EXT: u'EXT', FALSE: u'FALSE', FN: u'FN',
    GET: u'GET', INKEY: u'INKEY', INSTR: u'INSTR', INT: u'INT', LEN: u'LEN', LN: u'LN',
    LOG: u'LOG', NOT: u'NOT', OPENOUT: u'OPENOUT', OPENUP: u'OPENUP', PI: u'PI',
    POINT: u'POINT', POS: u'POS', RAD: u'RAD', RND: u'RND', SGN: u'SGN', SIN: u'SIN',
    SQR: u'SQR', TAN: u'TAN', TO: u'TO', TRUE: u'TRUE', USR: u'USR', VAL: u'VAL',
    VPOS: u'VPOS', CHR: u'CHR$', GET_STR: u'GET$', INKEY_STR: u'INKEY$', LEFT: u'LEFT$',
    MID: u'MID$', RIGHT: u'RIGHT$', STR: u'STR$', STRING: u'STRING$', EOF: u'EOF',
    LIST: u'LIST', NEW: u'NEW', OLD: u'OLD', RENUMBER: u'RENUMBER', SAVE: u'SAVE',
    EDIT: u'EDIT',
    PTR_ST: u'PTR', PAGE_ST: u'PAGE', TIME_ST: u'TIME', LOMEM_ST: u'LOMEM',
    HIMEM_ST: u'HIMEM',
    SOUND: u'SOUND', BPUT: u'BPUT', CALL: u'CALL', CHAIN: u'CHAIN', CLEAR: u'CLEAR',
    CLOSE: u'CLOSE', CLG: u'CLG', CLS: u'CLS', DATA: u'DATA', DEF: u'DEF', DIM: u'DIM',
    DRAW: u'DRAW', END: u'END', ENDPROC: u'ENDPROC', ENVELOPE: u'ENVELOPE', FOR: u'FOR',
    GOSUB: u'GOSUB', GOTO: u'GOTO', GCOL: u'GCOL', IF: u'IF', INPUT: u'INPUT', LET: u'LET',
    LOCAL: u'LOCAL', MODE: u'MODE', MOVE: u'MOVE', NEXT: u'NEXT', ON: u'ON', VDU: u'VDU',
    PLOT: u'PLOT', PRINT: u'PRINT', PROC: u'PROC', READ: u'READ', REM: u'REM',
    REPEAT: u'REPEAT', REPORT: u'REPORT', RESTORE: u'RESTORE', RETURN: u'RETURN',
    RUN: u'RUN', STOP: u'STOP', COLOUR: u'COLOUR', TRACE: u'TRACE', UNTIL: u'UNTIL',
    WIDTH: u'WIDTH', OSCLI: u'OSCLI',
    SUM: u'SUM', BEAT: u'BEAT',
    APPEND: u'APPEND', AUTO: u'AUTO', CRUNCH: u'CRUNCH', DELETE: u'DELETE', X_EDIT: u'EDIT',
    HELP: u'HELP', X_LIST: u'LIST', LOAD: u'LOAD', LVAR: u'LVAR', X_NEW: u'NEW',
    X_OLD: u'OLD', X_RENUMBER: u'RENUMBER', X_SAVE: u'SAVE', TEXTLOAD: u'TEXTLOAD',
    TEXTSAVE: u'TEXTSAVE', TWIN: u'TWIN', TWINO: u'TWINO',
    CASE: u'CASE', CIRCLE: u'CIRCLE', FILL: u'FILL', ORIGIN: u'ORIGIN', POINT_ST: u'POINT',
    RECTANGLE: u'RECTANGLE', SWAP: u'SWAP', WHILE: u'WHILE', WAIT: u'WAIT', MOUSE: u'MOUSE',
    QUIT: u'QUIT', SYS: u'SYS', INSTALL: u'INSTALL', LIBRARY: u'LIBRARY', TINT: u'TINT',
    ELLIPSE: u'ELLIPSE', BEATS: u'BEATS', TEMPO: u'TEMPO', VOICES: u'VOICES',
    VOICE: u'VOICE', STEREO: u'STEREO', OVERLAY: u'OVERLAY', ENDWHILE: u'ENDWHILE',
}

# pseudo-variables and statements with a separate token at the start of a statement
STATEMENT_FORMS = {
    PTR: PTR_ST, PAGE: PAGE_ST, TIME: TIME_ST, LOMEM: LOMEM_ST, HIMEM: HIMEM_ST,
    POINT: POINT_ST,
}
FUNCTION_FORMS = dict((_st, _fn) for _fn, _st in STATEMENT_FORMS.items())

# duplicate command tokens from the extension table
COMMAND_ALIASES = {
    X_EDIT: EDIT, X_LIST: LIST, X_NEW: NEW, X_OLD: OLD, X_RENUMBER: RENUMBER, X_SAVE: SAVE,
}

# tokens followed by a line number rather than an integer
JUMP_KEYWORDS = (GOTO, GOSUB, THEN, ELSE, RESTORE)
# tokens followed by verbatim text
TEXT_KEYWORDS = (REM, DATA)
# tokens which glue to the following name when listed
NAME_KEYWORDS = (PROC, FN)

# separators
SEPARATORS = (u',', u';', u':', u"'")
# line ending tokens
END_STATEMENT = (u':',)
# operator characters that combine with each other
COMBINABLE = (u'<', u'=', u'>')


class TokenKeywordDict(object):
    """Token to keyword conversion."""

    def __init__(self):
        """Build dictionaries."""
        self.to_keyword = dict(KEYWORDS)
        # main table keywords take precedence over extension duplicates,
        # and the statement forms are only selected by position
        self.to_token = {}
        for token, keyword in KEYWORDS.items():
            if token in COMMAND_ALIASES or token in FUNCTION_FORMS:
                continue
            self.to_token[keyword] = token
        # length of the longest keyword
        self.longest = max(len(_kw) for _kw in self.to_token)

    def match_prefix(self, word):
        """Find the longest keyword that starts the given word."""
        for length in range(min(len(word), self.longest), 0, -1):
            token = self.to_token.get(word[:length])
            if token is not None:
                return word[:length], token
        return u'', None
