"""
BBC-BASIC - expressions.py
Expression parser

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

from collections import deque
from functools import partial

from ..base import error
from ..base import tokens as tk
from ..base import codestream
from . import nodes
from . import operators as op


# functions that are not in the keyword table, called by name
EXTENSION_FUNCTIONS = (u'UPPER$', u'LOWER$')


class ExpressionParser(object):
    """Expression parser."""

    def __init__(self):
        """Initialise empty expression."""
        self._init_syntax()

    def _init_syntax(self):
        """Initialise function syntax tables."""
        self._functions = {
            tk.PI: self._no_argument,
            tk.TRUE: self._no_argument,
            tk.FALSE: self._no_argument,
            tk.ERR: self._no_argument,
            tk.ERL: self._no_argument,
            tk.TIME: self._no_argument,
            tk.PAGE: self._no_argument,
            tk.HIMEM: self._no_argument,
            tk.LOMEM: self._no_argument,
            tk.COUNT: self._no_argument,
            tk.POS: self._no_argument,
            tk.VPOS: self._no_argument,
            tk.GET: self._no_argument,
            tk.GET_STR: self._no_argument,
            tk.BEAT: self._no_argument,
            tk.RND: self._parse_optional_argument,
            tk.ABS: self._parse_argument,
            tk.ACS: self._parse_argument,
            tk.ASN: self._parse_argument,
            tk.ATN: self._parse_argument,
            tk.COS: self._parse_argument,
            tk.SIN: self._parse_argument,
            tk.TAN: self._parse_argument,
            tk.DEG: self._parse_argument,
            tk.RAD: self._parse_argument,
            tk.EXP: self._parse_argument,
            tk.LN: self._parse_argument,
            tk.LOG: self._parse_argument,
            tk.SQR: self._parse_argument,
            tk.INT: self._parse_argument,
            tk.SGN: self._parse_argument,
            tk.ASC: self._parse_argument,
            tk.LEN: self._parse_argument,
            tk.VAL: self._parse_argument,
            tk.CHR: self._parse_argument,
            tk.STR: self._parse_argument,
            tk.INKEY: self._parse_argument,
            tk.INKEY_STR: self._parse_argument,
            tk.EVAL: self._parse_argument,
            tk.ADVAL: self._parse_argument,
            tk.USR: self._parse_argument,
            tk.OPENIN: self._parse_argument,
            tk.OPENOUT: self._parse_argument,
            tk.OPENUP: self._parse_argument,
            tk.SUM: self._parse_argument,
            tk.BGET: self._parse_channel,
            tk.EOF: self._parse_channel,
            tk.EXT: self._parse_channel,
            tk.PTR: self._parse_channel,
            tk.LEFT: partial(self._parse_bracketed_arguments, minimum=1, maximum=2),
            tk.RIGHT: partial(self._parse_bracketed_arguments, minimum=1, maximum=2),
            tk.MID: partial(self._parse_bracketed_arguments, minimum=2, maximum=3),
            tk.STRING: partial(self._parse_bracketed_arguments, minimum=2, maximum=2),
            tk.INSTR: partial(self._parse_bracketed_arguments, minimum=2, maximum=3),
            tk.POINT: partial(self._parse_bracketed_arguments, minimum=2, maximum=2),
        }

    def parse(self, ins):
        """Parse a (sub-)expression from a token stream."""
        operations = deque()
        units = deque()
        # see https://en.wikipedia.org/wiki/Shunting-yard_algorithm
        last_was_unit = False
        while True:
            token = ins.peek()
            oper = self._peek_operator(ins)
            if oper == u'NOT' and last_was_unit:
                # NOT can't follow a unit
                break
            elif last_was_unit:
                if oper not in op.BINARY:
                    # repeated unit or other token ends expression
                    break
                self._read_operator(ins, oper)
                prec = op.PRECEDENCE[(oper, 2)]
                self._drain(prec, operations, units, oper in op.RIGHT_ASSOCIATIVE)
                operations.append((op.BINARY[oper], 2, prec))
                last_was_unit = False
            elif oper in op.UNARY:
                self._read_operator(ins, oper)
                operations.append((op.UNARY[oper], 1, op.PRECEDENCE[(oper, 1)]))
            elif token.matches(u'('):
                ins.read()
                units.append(self.parse(ins))
                ins.require_read((u')',), error.MISSING_BRACKET)
                last_was_unit = True
            else:
                unit = self._parse_unit(ins)
                if unit is None:
                    # missing operand
                    raise error.BASICError(error.STX)
                units.append(unit)
                last_was_unit = True
        if not last_was_unit:
            raise error.BASICError(error.STX)
        self._drain(0, operations, units)
        return units[0]

    def _drain(self, precedence, operations, units, right_associative=False):
        """Drain evaluation stack until an operator of low precedence on top."""
        while operations:
            top = operations[-1][2]
            if precedence > top or (right_associative and precedence == top):
                break
            oper, narity, _ = operations.pop()
            args = reversed([units.pop() for _ in range(narity)])
            units.append(oper(*args))

    def _peek_operator(self, ins):
        """Name of the operator at the current position, if any."""
        token = ins.peek()
        if token.kind == codestream.OPERATOR:
            following = ins.peek(1)
            if token.value in op.COMBINABLE and following.kind == codestream.OPERATOR:
                combined = token.value + following.value
                if combined in op.COMBINATIONS:
                    return combined
            if token.value in op.OPERATORS:
                return token.value
            return None
        if token.kind == codestream.KEYWORD:
            return op.KEYWORD_OPERATORS.get(token.value)
        return None

    def _read_operator(self, ins, oper):
        """Consume the tokens of an operator."""
        ins.read()
        if oper in op.COMBINATIONS:
            ins.read()

    def _parse_unit(self, ins):
        """Parse a literal, variable or function; None if no unit follows."""
        token = ins.peek()
        if token.kind in (codestream.INTEGER, codestream.HEX_INTEGER, codestream.LINE_NUMBER):
            ins.read()
            return nodes.IntegerLiteral(token.value)
        elif token.kind == codestream.REAL:
            ins.read()
            try:
                return nodes.RealLiteral(float(token.value))
            except ValueError:
                raise error.BASICError(error.STX)
        elif token.kind == codestream.STRING:
            ins.read()
            return nodes.StringLiteral(token.value)
        elif token.kind == codestream.IDENTIFIER:
            ins.read()
            return self._parse_name(ins, token.value)
        elif token.matches(tk.FN):
            ins.read()
            name = ins.read_name()
            return nodes.FnCall(name, self.parse_argument_list(ins))
        elif token.is_keyword and token.value in self._functions:
            ins.read()
            return self._parse_function(ins, token.value)
        return None

    def _parse_name(self, ins, name):
        """Parse a variable, array element or extension function call."""
        if ins.peek().matches(u'('):
            if name in EXTENSION_FUNCTIONS:
                return nodes.FunctionCall(name, self.parse_argument_list(ins))
            return nodes.ArrayAccess(name, self.parse_indices(ins))
        return nodes.Variable(name)

    def parse_indices(self, ins):
        """Parse bracketed array indices."""
        ins.require_read((u'(',))
        indices = [self.parse(ins)]
        while ins.read_if(u','):
            indices.append(self.parse(ins))
        ins.require_read((u')',), error.MISSING_BRACKET)
        return tuple(indices)

    def parse_argument_list(self, ins):
        """Parse an optional bracketed list of arguments."""
        if not ins.read_if(u'('):
            return ()
        args = [self.parse(ins)]
        while ins.read_if(u','):
            args.append(self.parse(ins))
        ins.require_read((u')',), error.MISSING_BRACKET)
        return tuple(args)

    def parse_primary(self, ins):
        """Parse a single operand with its prefix operators: the argument of SIN X."""
        oper = self._peek_operator(ins)
        if oper in op.UNARY:
            self._read_operator(ins, oper)
            return op.UNARY[oper](self.parse_primary(ins))
        if ins.read_if(u'('):
            expr = self.parse(ins)
            ins.require_read((u')',), error.MISSING_BRACKET)
            return expr
        unit = self._parse_unit(ins)
        if unit is None:
            raise error.BASICError(error.STX)
        return unit

    ###########################################################################
    # function and argument handling

    def _parse_function(self, ins, token):
        """Parse a function starting with the given token."""
        name = tk.KEYWORDS[token]
        if token == tk.STR and ins.read_if(u'~'):
            name += u'~'
        return nodes.FunctionCall(name, tuple(self._functions[token](ins)))

    def _no_argument(self, ins):
        """No arguments to parse."""
        return ()

    def _parse_argument(self, ins):
        """Parse a single argument, brackets optional."""
        return (self.parse_primary(ins),)

    def _parse_optional_argument(self, ins):
        """Parse a single, optional bracketed argument."""
        if ins.read_if(u'('):
            arg = self.parse(ins)
            ins.require_read((u')',), error.MISSING_BRACKET)
            return (arg,)
        return ()

    def _parse_channel(self, ins):
        """Parse a file channel #n."""
        ins.read_if(u'#')
        return (self.parse_primary(ins),)

    def _parse_bracketed_arguments(self, ins, minimum, maximum):
        """Parse a comma-separated, bracketed list of arguments."""
        ins.require_read((u'(',))
        args = [self.parse(ins)]
        while len(args) < maximum and ins.read_if(u','):
            args.append(self.parse(ins))
        if len(args) < minimum:
            raise error.BASICError(error.MISSING_COMMA)
        ins.require_read((u')',), error.MISSING_BRACKET)
        return args
