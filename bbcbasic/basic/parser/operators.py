"""
BBC-BASIC - operators.py
Operator precedence and tree builders

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

from ..base import tokens as tk
from . import nodes


# operator names by keyword token
KEYWORD_OPERATORS = {
    tk.AND: u'AND',
    tk.OR: u'OR',
    tk.EOR: u'EOR',
    tk.DIV: u'DIV',
    tk.MOD: u'MOD',
    tk.NOT: u'NOT',
}

# operators and precedence
# key is tuple (operator, nargs)
PRECEDENCE = {
    # a?b and a!b are indirections at a+b
    (u'?', 2): 8,
    (u'!', 2): 8,
    (u'-', 1): 7,
    (u'+', 1): 7,
    (u'NOT', 1): 7,
    (u'?', 1): 7,
    (u'!', 1): 7,
    (u'^', 2): 6,
    (u'*', 2): 5,
    (u'/', 2): 5,
    (u'DIV', 2): 5,
    (u'MOD', 2): 5,
    (u'+', 2): 4,
    (u'-', 2): 4,
    (u'=', 2): 3,
    (u'<>', 2): 3,
    (u'<', 2): 3,
    (u'>', 2): 3,
    (u'<=', 2): 3,
    (u'>=', 2): 3,
    (u'AND', 2): 2,
    (u'OR', 2): 1,
    (u'EOR', 2): 1,
}
OPERATORS = set(operator_arity[0] for operator_arity in PRECEDENCE)

# bind to the right: 2^3^2 is 2^(3^2)
RIGHT_ASSOCIATIVE = (u'^',)

# can be combined like <> >=
COMBINABLE = tk.COMBINABLE
COMBINATIONS = (u'<>', u'<=', u'>=')

# result is an integer truth value
RELATIONAL = (u'=', u'<>', u'<', u'>', u'<=', u'>=')
# operate on integers
BITWISE = (u'AND', u'OR', u'EOR')
INTEGER_DIVISION = (u'DIV', u'MOD')


def _indirect(op):
    """Builder for a?b and a!b."""
    return lambda left, right: nodes.Indirection(op, nodes.BinaryOp(left, u'+', right))

def _binary(op):
    """Builder for a binary operation."""
    return lambda left, right: nodes.BinaryOp(left, op, right)

def _unary(op):
    """Builder for a unary operation."""
    return lambda operand: nodes.UnaryOp(op, operand)


# unary operators
UNARY = {
    u'-': _unary(u'-'),
    u'+': lambda x: x,
    u'NOT': _unary(u'NOT'),
    u'?': lambda x: nodes.Indirection(u'?', x),
    u'!': lambda x: nodes.Indirection(u'!', x),
}

# binary operators
BINARY = dict(
    (_op, _binary(_op)) for (_op, _nargs) in PRECEDENCE if _nargs == 2 and _op not in (u'?', u'!')
)
BINARY.update({
    u'?': _indirect(u'?'),
    u'!': _indirect(u'!'),
})
