"""
BBC-BASIC - evaluator.py
Typed expression evaluators

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

import math
import operator

from .base import error
from .parser import nodes
from .parser import operators as op
from .memory.variables import INTEGER, REAL, STRING, MAX_STRING, check_int, type_of
from . import functions


COMPARISONS = {
    u'=': operator.eq,
    u'<>': operator.ne,
    u'<': operator.lt,
    u'>': operator.gt,
    u'<=': operator.le,
    u'>=': operator.ge,
}


def expression_type(node):
    """Static type of an expression tree."""
    kind = type(node)
    if kind == nodes.IntegerLiteral:
        return INTEGER
    elif kind == nodes.RealLiteral:
        return REAL
    elif kind == nodes.StringLiteral:
        return STRING
    elif kind in (nodes.Variable, nodes.ArrayAccess, nodes.FnCall):
        return type_of(node.name)
    elif kind == nodes.Indirection:
        return INTEGER
    elif kind == nodes.FunctionCall:
        return functions.result_type(node.name, [expression_type(_arg) for _arg in node.args])
    elif kind == nodes.UnaryOp:
        if node.op == u'NOT':
            return INTEGER
        return expression_type(node.operand)
    elif kind == nodes.BinaryOp:
        if node.op in op.RELATIONAL or node.op in op.BITWISE or node.op in op.INTEGER_DIVISION:
            return INTEGER
        if node.op == u'/':
            return REAL
        left, right = expression_type(node.left), expression_type(node.right)
        if STRING in (left, right):
            return STRING
        if left == INTEGER and right == INTEGER:
            return INTEGER
        return REAL
    raise error.BASICError(error.STX)


def truncate(value):
    """Truncate a real towards zero into the integer range."""
    if math.isnan(value) or math.isinf(value):
        raise error.BASICError(error.TOO_BIG)
    return check_int(int(value))


class Evaluator(object):
    """Expression evaluator dispatching to typed evaluators."""

    def __init__(self, variables, memory, functions):
        """Initialise the typed evaluators."""
        self._variables = variables
        self._memory = memory
        self._functions = functions
        self.integer = IntegerEvaluator(self)
        self.real = RealEvaluator(self)
        self.string = StringEvaluator(self)
        self._evaluators = {INTEGER: self.integer, REAL: self.real, STRING: self.string}
        # user-defined functions are run by the executor
        self._fn_caller = None

    def init_callbacks(self, fn_caller):
        """Set the callback for FN calls."""
        self._fn_caller = fn_caller

    def type_of(self, node):
        """Static type of an expression."""
        return expression_type(node)

    def evaluate(self, node):
        """Evaluate an expression by its own static type."""
        return self._evaluators[expression_type(node)].evaluate(node)

    def evaluate_as(self, node, vartype):
        """Evaluate an expression for a target of the given type."""
        return self._evaluators[vartype].evaluate(node)

    def evaluate_int(self, node):
        """Evaluate to integer."""
        return self.integer.evaluate(node)

    def evaluate_real(self, node):
        """Evaluate to real."""
        return self.real.evaluate(node)

    def evaluate_string(self, node):
        """Evaluate to string."""
        return self.string.evaluate(node)

    def evaluate_number(self, node):
        """Evaluate a numeric expression, keeping integers integer."""
        vartype = expression_type(node)
        if vartype == STRING:
            raise error.BASICError(error.TYPE_MISMATCH)
        return self._evaluators[vartype].evaluate(node)

    def truth(self, node):
        """Evaluate a condition: nonzero is true."""
        return self.evaluate_number(node) != 0

    ###########################################################################
    # shared operations

    def get_variable(self, node):
        """Value of a scalar variable."""
        value = self._variables.get_scalar(node.name)
        if value is None:
            raise error.BASICError(error.NO_SUCH_VARIABLE, detail=node.name)
        return value

    def get_element(self, node):
        """Value of an array element."""
        indices = [self.integer.evaluate(_index) for _index in node.indices]
        return self._variables.get_array_element(node.name, indices)

    def get_indirection(self, node):
        """Value at an address: ?byte or !word."""
        address = self.integer.evaluate(node.address)
        if node.op == u'?':
            return self._memory.peek(address)
        return self._memory.peek_long(address)

    def call_function(self, node):
        """Evaluate arguments and call a built-in function."""
        _, arg_types = functions.SIGNATURES[node.name]
        args = []
        for arg, arg_type in zip(node.args, arg_types):
            if arg_type == functions.UNEVALUATED:
                continue
            elif arg_type == functions.NUMBER:
                args.append(self.evaluate_number(arg))
            else:
                args.append(self._evaluators[arg_type].evaluate(arg))
        return self._functions.call(node.name, args)

    def call_fn(self, node):
        """Call a user-defined function."""
        return self._fn_caller(node.name, node.args)

    def compare(self, node):
        """Relational operator, on operands of their common type."""
        left, right = expression_type(node.left), expression_type(node.right)
        if STRING in (left, right):
            evaluate = self.string.evaluate
        elif REAL in (left, right):
            evaluate = self.real.evaluate
        else:
            evaluate = self.integer.evaluate
        return COMPARISONS[node.op](evaluate(node.left), evaluate(node.right))


class TypedEvaluator(object):
    """Evaluator for expressions of one type."""

    type = None

    def __init__(self, parent):
        """Set up the dispatch table."""
        self._parent = parent
        self._dispatch = {
            nodes.Variable: parent.get_variable,
            nodes.ArrayAccess: parent.get_element,
            nodes.FunctionCall: parent.call_function,
            nodes.FnCall: parent.call_fn,
            nodes.BinaryOp: self._binary,
            nodes.UnaryOp: self._unary,
        }

    def evaluate(self, node):
        """Evaluate an expression to this evaluator's type."""
        node_type = expression_type(node)
        if node_type != self.type:
            return self._convert(node, node_type)
        kind = type(node)
        if kind in nodes.LITERALS:
            return node.value
        return self._dispatch[kind](node)

    def _convert(self, node, node_type):
        """Evaluate an expression of another type."""
        raise error.BASICError(error.TYPE_MISMATCH)

    def _binary(self, node):
        raise error.BASICError(error.TYPE_MISMATCH)

    def _unary(self, node):
        raise error.BASICError(error.TYPE_MISMATCH)


class IntegerEvaluator(TypedEvaluator):
    """32-bit integer arithmetic."""

    type = INTEGER

    def __init__(self, parent):
        """Set up the dispatch table."""
        TypedEvaluator.__init__(self, parent)
        self._dispatch[nodes.Indirection] = parent.get_indirection
        self._operations = {
            u'+': lambda x, y: check_int(x + y),
            u'-': lambda x, y: check_int(x - y),
            u'*': lambda x, y: check_int(x * y),
            u'^': self._power,
            u'DIV': self._div,
            u'MOD': self._mod,
            u'AND': lambda x, y: x & y,
            u'OR': lambda x, y: x | y,
            u'EOR': lambda x, y: x ^ y,
        }

    def _convert(self, node, node_type):
        """Truncate reals; strings don't convert."""
        if node_type == REAL:
            return truncate(self._parent.real.evaluate(node))
        raise error.BASICError(error.TYPE_MISMATCH)

    def _binary(self, node):
        """Evaluate an integer-valued binary operation."""
        if node.op in op.RELATIONAL:
            return -1 if self._parent.compare(node) else 0
        left, right = self.evaluate(node.left), self.evaluate(node.right)
        return self._operations[node.op](left, right)

    def _unary(self, node):
        """Evaluate negation or NOT."""
        value = self.evaluate(node.operand)
        if node.op == u'NOT':
            return ~value
        return check_int(-value)

    def _power(self, base, exponent):
        """Integer power; a negative exponent truncates the real result."""
        if exponent < 0:
            if base == 0:
                raise error.BASICError(error.DIVISION_BY_ZERO)
            return truncate(float(base) ** exponent)
        # these bases never overflow, so don't multiply them out
        if base == 0:
            return 0 if exponent else 1
        elif base == 1:
            return 1
        elif base == -1:
            return -1 if exponent % 2 else 1
        result = 1
        for _ in range(exponent):
            result = check_int(result * base)
        return result

    def _div(self, dividend, divisor):
        """Integer division, truncating towards zero."""
        if divisor == 0:
            raise error.BASICError(error.DIVISION_BY_ZERO)
        quotient = abs(dividend) // abs(divisor)
        if (dividend < 0) != (divisor < 0):
            quotient = -quotient
        return check_int(quotient)

    def _mod(self, dividend, divisor):
        """Remainder with the sign of the dividend."""
        return dividend - divisor * self._div(dividend, divisor)


class RealEvaluator(TypedEvaluator):
    """Floating-point arithmetic."""

    type = REAL

    def __init__(self, parent):
        """Set up the operations."""
        TypedEvaluator.__init__(self, parent)
        self._operations = {
            u'+': operator.add,
            u'-': operator.sub,
            u'*': operator.mul,
            u'/': self._divide,
            u'^': self._power,
        }

    def _convert(self, node, node_type):
        """Widen integers; strings don't convert."""
        if node_type == INTEGER:
            return float(self._parent.integer.evaluate(node))
        raise error.BASICError(error.TYPE_MISMATCH)

    def _check(self, value):
        """Raise Too big on overflow."""
        if math.isinf(value) or math.isnan(value):
            raise error.BASICError(error.TOO_BIG)
        return value

    def _binary(self, node):
        """Evaluate a real binary operation."""
        left, right = self.evaluate(node.left), self.evaluate(node.right)
        try:
            return self._check(self._operations[node.op](left, right))
        except OverflowError:
            raise error.BASICError(error.TOO_BIG)

    def _unary(self, node):
        """Evaluate negation."""
        return -self.evaluate(node.operand)

    def _divide(self, left, right):
        """Real division."""
        if right == 0:
            raise error.BASICError(error.DIVISION_BY_ZERO)
        return left / right

    def _power(self, base, exponent):
        """Real power."""
        try:
            result = math.pow(base, exponent)
        except ZeroDivisionError:
            raise error.BASICError(error.DIVISION_BY_ZERO)
        except ValueError:
            if base == 0:
                raise error.BASICError(error.DIVISION_BY_ZERO)
            raise error.BASICError(error.LOG_RANGE)
        return result


class StringEvaluator(TypedEvaluator):
    """String concatenation."""

    type = STRING

    def _binary(self, node):
        """Only + works on strings."""
        if node.op != u'+':
            raise error.BASICError(error.TYPE_MISMATCH)
        result = self.evaluate(node.left) + self.evaluate(node.right)
        if len(result) > MAX_STRING:
            raise error.BASICError(error.STRING_TOO_LONG)
        return result
