"""
BBC-BASIC - formatter.py
PRINT output formatting

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

import logging

from .parser import nodes
from .functions import format_number, format_hex
from .evaluator import truncate


# print format variable
PRINT_FORMAT = u'@%'
# initial value of @%: general format, 9 digits, 10-column field
DEFAULT_PRINT_FORMAT = 0x90a

# number format selector in @%
GENERAL = 0
EXPONENT = 1
FIXED = 2


def format_with(value, print_format):
    """Format a number according to an @% value."""
    if isinstance(value, int):
        return format_number(value)
    digits = (print_format >> 8) & 0xff
    kind = (print_format >> 16) & 0xff
    if kind == FIXED:
        return u'%.*f' % (min(digits, 10), value)
    if not 0 < digits <= 10:
        digits = 10
    if kind == EXPONENT:
        mantissa, exponent = (u'%.*E' % (max(digits-1, 0), value)).split(u'E')
        return u'%sE%d' % (mantissa, int(exponent))
    return format_number(value, digits)


class Formatter(object):
    """PRINT formatter."""

    def __init__(self, console, evaluator, variables):
        """Initialise."""
        self._console = console
        self._evaluator = evaluator
        self._variables = variables

    def format(self, items):
        """PRINT: write expressions to the console."""
        print_format = self._variables.get_int_var(PRINT_FORMAT)
        width = print_format & 0xff
        right_justify, hexadecimal, newline = True, False, True
        for item in items:
            newline = True
            kind = type(item)
            if kind == nodes.Separator:
                if item.char == u';':
                    right_justify, newline = False, False
                elif item.char == u',':
                    self._print_comma(width)
                    right_justify, hexadecimal, newline = True, False, False
                else:
                    self._console.write_line()
            elif kind == nodes.Hex:
                hexadecimal = True
            elif kind == nodes.Tab:
                self._print_tab(item)
            elif kind == nodes.Spc:
                self._console.write(u' ' * max(0, self._evaluator.evaluate_int(item.count)))
            else:
                self._print_value(item, print_format, width, right_justify, hexadecimal)
        if newline:
            self._console.write_line()

    def _print_value(self, expr, print_format, width, right_justify, hexadecimal):
        """Print a string, or a number in its field."""
        value = self._evaluator.evaluate(expr)
        if isinstance(value, str):
            self._console.write(value)
            return
        if hexadecimal:
            word = format_hex(value if isinstance(value, int) else truncate(value))
        else:
            word = format_with(value, print_format)
        if right_justify:
            word = word.rjust(width)
        self._console.write(word)

    def _print_comma(self, width):
        """Skip to the next output zone."""
        if width:
            self._console.write(u' ' * ((-self._console.column) % width))

    def _print_tab(self, item):
        """TAB(column) or TAB(column, row)."""
        column = self._evaluator.evaluate_int(item.column)
        if item.row is not None:
            logging.warning('TAB(x,y) cursor positioning not implemented.')
            self._evaluator.evaluate_int(item.row)
        if column < self._console.column:
            self._console.write_line()
        self._console.write(u' ' * max(0, column - self._console.column))
