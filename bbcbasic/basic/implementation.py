"""
BBC-BASIC - implementation.py
Top-level implementation and main interpreter loop

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

import io
import logging
from contextlib import contextmanager

from .base import error
from .base import codestream
from .base.codestream import TokenisedLine
from .converter import Tokeniser, Lister
from .memory import MemoryManager, Variables
from .parser import Parser
from .program import Program
from .console import Console
from .machine import Machine
from .functions import Functions
from .evaluator import Evaluator
from .formatter import Formatter, PRINT_FORMAT, DEFAULT_PRINT_FORMAT
from .executor import Executor, Jump, Stop
from .interpreter import Interpreter


# direct-mode prompt
PROMPT = u'>'
# plain-text program files
ENCODING = 'latin-1'


class Implementation(object):
    """Interpreter session, implementation class."""

    def __init__(
            self, output_stream=None, input_stream=None, step_limit=0, trace=False, seed=None
        ):
        """Initialise the interpreter session."""
        # emulated memory and variables
        self.memory = MemoryManager()
        self.variables = Variables(self.memory)
        self.variables.set_int_var(PRINT_FORMAT, DEFAULT_PRINT_FORMAT)
        self.program = Program(self.memory)
        # program conversion
        self.tokeniser = Tokeniser()
        self.lister = Lister()
        self.parser = Parser()
        # boundary
        self.console = Console(output_stream, input_stream)
        self.machine = Machine(self.console)
        # evaluation and execution
        self.functions = Functions(self.memory, self.console, self.machine, seed)
        self.evaluator = Evaluator(self.variables, self.memory, self.functions)
        self.formatter = Formatter(self.console, self.evaluator, self.variables)
        self.executor = Executor(
            self.program, self.memory, self.variables, self.evaluator,
            self.formatter, self.console, self.machine
        )
        self.functions.init_callbacks(self.executor)
        self.executor.init_callbacks(command_handler=self._command)
        self.executor.trace = trace
        self.interpreter = Interpreter(
            self.program, self.parser, self.executor, self.console, step_limit
        )
        # program erased by NEW, for OLD
        self._old_program = []
        self._commands = {
            u'RUN': self.run_,
            u'LIST': self.list_,
            u'NEW': self.new_,
            u'OLD': self.old_,
            u'DELETE': self.delete_,
            u'RENUMBER': self.renumber_,
            u'LOAD': self.load_,
            u'SAVE': self.save_,
            u'CHAIN': self.chain_,
        }

    def execute(self, command):
        """Store a program line or execute a direct-mode line."""
        with self._handle_exceptions():
            self._store_line(command)

    def evaluate(self, expression):
        """Evaluate a BASIC expression."""
        with self._handle_exceptions():
            # prefix with = so that a leading number isn't taken as a line number
            line = self.tokeniser.tokenise_line(u'=' + expression)
            ins = codestream.TokenStream(line.tokens)
            ins.read()
            node = self.parser.parse_expression(ins)
            ins.require_end()
            self.interpreter.ensure_scanned()
            return self.evaluator.evaluate(node)
        return None

    def set_variable(self, name, value):
        """Set a scalar or, with name(), an array from a nested list."""
        if isinstance(value, bool):
            value = -1 if value else 0
        if u'(' in name:
            name = name.split(u'(', 1)[0]
            self._array_from_list(name, value)
        else:
            self.variables.set_scalar(name, value)

    def _array_from_list(self, name, value):
        """Dimension an array to fit a nested list and fill it."""
        dimensions = []
        level = value
        while isinstance(level, (list, tuple)):
            dimensions.append(len(level))
            level = level[0] if level else None
        self.variables.dim_array(name, dimensions)

        def _fill(values, indices):
            for index, item in enumerate(values):
                if isinstance(item, (list, tuple)):
                    _fill(item, indices + [index])
                else:
                    self.variables.set_array_element(name, indices + [index], item)

        _fill(value, [])

    def get_variable(self, name):
        """Value of a scalar, or with name() the nested list of an array; None if not found."""
        if u'(' in name:
            name = name.split(u'(', 1)[0]
            if not self.variables.has_array(name):
                return None
            return self.variables.get_array(name).to_list()
        return self.variables.get_scalar(name)

    def list_program(self):
        """The program listing as a list of text lines."""
        return [self.lister.detokenise_line(_line) for _, _line in self.program.list()]

    def interact(self):
        """Interactive interpreter session."""
        while True:
            try:
                line = self.console.read_line(PROMPT)
            except error.BASICError:
                # end of input
                raise error.Exit()
            self.execute(line)
            # output has been shown
            self.console.get_output()

    def close(self):
        """Close the session."""
        logging.debug('Session closed')

    def _store_line(self, text):
        """Store a program line or execute a direct-mode line."""
        line = self.tokeniser.tokenise_line(text)
        if line.line_number is not None:
            self.program.store_line(line)
            # storing a line loses the variables
            self._clear_all()
            return
        statements = self.parser.parse_line(line)
        if not statements:
            return
        try:
            result = self.interpreter.run(None, statements)
        finally:
            self.program.stop_execution()
        if isinstance(result, Stop) and result.message:
            self.console.start_line()
            if self.interpreter.current_line is None:
                self.console.write_line(result.message)
            else:
                self.console.write_line(
                    u'%s at line %d' % (result.message, self.interpreter.current_line)
                )

    def _clear_all(self):
        """Clear variables, stacks and cached program state."""
        self.variables.clear()
        self.executor.clear_stacks()
        self.interpreter.invalidate()

    ###########################################################################
    # error handling

    @contextmanager
    def _handle_exceptions(self):
        """Context guard to handle BASIC exceptions."""
        try:
            yield
        except KeyboardInterrupt:
            self._handle_error(error.BASICError(error.ESCAPE, self.interpreter.current_line))
        except error.BASICError as e:
            self._handle_error(e)
        except error.Exit:
            raise

    def _handle_error(self, e):
        """Handle a BASIC error through error message."""
        # not handled by ON ERROR, stop execution
        self.console.start_line()
        self.console.write_line(e.get_message())

    ###########################################################################
    # commands

    def _command(self, keyword, args):
        """Execute a command; return an instruction for the run-loop."""
        try:
            handler = self._commands[keyword]
        except KeyError:
            logging.warning('%s command not implemented.', keyword)
            raise error.BASICError(error.MISTAKE, detail=keyword)
        return handler(args)

    def _get_int(self, value, default=None):
        """Integer command argument."""
        if value is None:
            return default
        if isinstance(value, str):
            raise error.BASICError(error.TYPE_MISMATCH)
        return int(value)

    def _get_name(self, args):
        """File name command argument."""
        if not args or not isinstance(args[0], str):
            raise error.BASICError(error.TYPE_MISMATCH)
        return args[0]

    def run_(self, args):
        """RUN [line]: start program execution with cleared variables."""
        start = self._get_int(args[0]) if args else None
        self._clear_all()
        self.executor.reset()
        self.interpreter.ensure_scanned()
        start = self.program.start_execution(start)
        if start is None:
            return Stop(None)
        return Jump(start)

    def list_(self, args):
        """LIST [from][,to]: output program lines."""
        from_line = self._get_int(args[0]) if args else None
        to_line = self._get_int(args[1]) if len(args) > 1 else from_line
        if len(args) > 1 and args[1] is None:
            to_line = None
        for _, line in self.program.list(from_line, to_line):
            self.console.write_line(self.lister.detokenise_line(line))
        return Stop(None)

    def new_(self, args):
        """NEW: clear program from memory."""
        self._old_program = [
            self.program.get_bytes(_number) for _number in self.program.get_line_numbers()
        ]
        self.program.erase()
        self._clear_all()
        self.executor.reset()
        return Stop(None)

    def old_(self, args):
        """OLD: recover the program removed by NEW."""
        if self.program.is_empty():
            for data in self._old_program:
                self.program.store_line(TokenisedLine.from_bytes(data))
            self._clear_all()
        return Stop(None)

    def delete_(self, args):
        """DELETE from, to: delete a range of lines."""
        if len(args) != 2 or None in args:
            raise error.BASICError(error.SYNTAX_ERROR)
        self.program.delete_range(self._get_int(args[0]), self._get_int(args[1]))
        self._clear_all()
        return Stop(None)

    def renumber_(self, args):
        """RENUMBER [start[, step]]."""
        start = self._get_int(args[0], 10) if args else 10
        step = self._get_int(args[1], 10) if len(args) > 1 else 10
        self.program.renumber(start, step)
        self._clear_all()
        return Stop(None)

    def load_(self, args):
        """LOAD "file": load a plain-text program."""
        self._load(self._get_name(args))
        return Stop(None)

    def chain_(self, args):
        """CHAIN "file": load and run a plain-text program."""
        self._load(self._get_name(args))
        return self.run_(())

    def save_(self, args):
        """SAVE "file": save the program as plain text."""
        name = self._get_name(args)
        try:
            with io.open(name, 'w', encoding=ENCODING, errors='replace') as f:
                for text in self.list_program():
                    f.write(text + u'\n')
        except EnvironmentError as e:
            raise error.BASICError(error.DISK_ERROR, detail=e.strerror)
        return Stop(None)

    def _load(self, name):
        """Replace the program with the numbered lines in a text file."""
        try:
            with io.open(name, 'r', encoding=ENCODING) as f:
                text = f.read()
        except FileNotFoundError:
            raise error.BASICError(error.FILE_NOT_FOUND, detail=name)
        except EnvironmentError as e:
            raise error.BASICError(error.DISK_ERROR, detail=e.strerror)
        lines = []
        for text_line in text.splitlines():
            if not text_line.strip():
                continue
            line = self.tokeniser.tokenise_line(text_line)
            if line.line_number is None:
                raise error.BASICError(error.BAD_PROGRAM, detail=name)
            lines.append(line)
        self.program.erase()
        for line in lines:
            self.program.store_line(line)
        self._clear_all()
        self.executor.reset()
