"""
BBC-BASIC - api.py
Session API

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

from .base import error
from . import implementation
from .memory.variables import type_of, STRING, INTEGER


class Session(object):
    """Public API to BASIC session."""

    def __init__(self, **kwargs):
        """Set up session object."""
        self._kwargs = kwargs
        self._impl = None

    def __enter__(self):
        """Context guard."""
        return self

    def __exit__(self, ex_type, ex_val, tb):
        """Context guard."""
        self.close()
        # catch Exit events
        if ex_type == error.Exit:
            return True

    def start(self):
        """Start the session."""
        if not self._impl:
            self._impl = implementation.Implementation(**self._kwargs)
            return True
        return False

    def execute(self, command):
        """Execute BASIC lines; return the output they produced."""
        self.start()
        for cmd in command.splitlines():
            self._impl.execute(cmd)
        return self._impl.console.get_output()

    def run(self):
        """Run the stored program; return its output."""
        return self.execute(u'RUN')

    def evaluate(self, expression):
        """Evaluate a BASIC expression."""
        self.start()
        return self._impl.evaluate(expression)

    def set_variable(self, name, value):
        """Set a variable in memory."""
        self.start()
        self._check_value(name, value)
        self._impl.set_variable(name, value)

    def get_variable(self, name):
        """Get a variable in memory."""
        self.start()
        return self._impl.get_variable(name)

    def list_program(self):
        """The program listing, as a list of lines."""
        self.start()
        return self._impl.list_program()

    def press_keys(self, keys):
        """Insert keypresses for GET and INKEY."""
        self.start()
        self._impl.console.feed_keys(keys)

    def input_lines(self, *lines):
        """Queue lines for INPUT."""
        self.start()
        self._impl.console.feed_lines(*lines)

    def interact(self):
        """Interactive interpreter session."""
        self.start()
        self._impl.interact()

    def close(self):
        """Close the session."""
        if self._impl:
            self._impl.close()

    def _check_value(self, name, value):
        """Raise ValueError if a value does not fit the variable's sigil."""
        vartype = type_of(name.split(u'(', 1)[0])
        while isinstance(value, (list, tuple)):
            if not value:
                raise ValueError('Arrays must not be empty')
            value = value[0]
        if (vartype == STRING) != isinstance(value, str):
            raise ValueError('Type of %r does not fit variable %s' % (value, name))
        if vartype == INTEGER and isinstance(value, float):
            raise ValueError('Type of %r does not fit variable %s' % (value, name))
