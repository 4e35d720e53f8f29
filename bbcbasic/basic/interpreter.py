"""
BBC-BASIC - interpreter.py
Run-loop: applies the executor's control-flow decisions to the program

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

import logging
from collections import deque

from .base import error
from .parser import nodes
from . import executor as ex


class Interpreter(object):
    """BASIC interpreter."""

    def __init__(self, program, parser, executor, console, step_limit=0):
        """Initialise interpreter."""
        self._program = program
        self._parser = parser
        self._executor = executor
        self._console = console
        # maximum number of statements per run; 0 is unlimited
        self.step_limit = step_limit
        self._steps = 0
        # parsed statements by line number
        self._cache = {}
        # DATA and DEF have been collected for the current program
        self._scanned = False
        # line being executed, None in direct mode
        self.current_line = None
        executor.init_callbacks(fn_runner=self.run_function)

    def invalidate(self):
        """The program has changed: forget parsed lines and pre-scan results."""
        self._cache = {}
        self._scanned = False

    def get_statements(self, line_number):
        """Parsed statements of a program line."""
        try:
            return self._cache[line_number]
        except KeyError:
            pass
        try:
            statements = self._parser.parse_line(self._program.get_line(line_number))
        except error.BASICError as e:
            e.line = line_number
            raise
        self._cache[line_number] = statements
        return statements

    def scan(self):
        """Collect DATA and DEF PROC/FN from the whole program."""
        self._executor.reset_data()
        for number in self._program.get_line_numbers():
            try:
                statements = self.get_statements(number)
            except error.BASICError as e:
                # reported when the line is executed
                logging.debug('Not scanned: %s', e.get_message())
                continue
            self._executor.collect_data(number, statements)
            self._executor.scan_definitions(number, statements)
        self._scanned = True

    def ensure_scanned(self):
        """Pre-scan the program if it has changed since the last scan."""
        if not self._scanned:
            self.scan()

    ###########################################################################
    # running

    def run(self, line=None, statements=()):
        """
        Execute statements in the given line, then continue with the following lines.
        With line None, the statements are a direct-mode line. Errors are trapped by ON ERROR
        if a handler is set; untrapped errors propagate with their line number set.
        Returns the Stop instruction that ended the run, or None at the end of the program.
        """
        self.ensure_scanned()
        self._steps = 0
        while True:
            try:
                result = self._loop(line, statements)
            except error.BASICError as e:
                if e.line is None:
                    e.line = self.current_line
                if self.step_limit and self._steps > self.step_limit:
                    # not trappable
                    raise
                resume = self._executor.trap_error(e)
                if resume is None:
                    raise
                line, statements = resume
                continue
            if isinstance(result, ex.FnResult):
                # =expr outside a function call
                raise error.BASICError(error.NO_FN, self.current_line)
            return result

    def run_function(self, line, statements):
        """Run the body of a function until =expr; called from within an expression."""
        saved_line = self.current_line
        result = self._loop(line, statements)
        self.current_line = saved_line
        return result

    def _loop(self, line, statements):
        """Run statements until the end of the program or a Stop or FnResult instruction."""
        self.current_line = line
        statements = deque(statements)
        while True:
            if not statements:
                line = self._program.line_after(line)
                if line is None:
                    return None
                statements = self._enter_line(line)
                continue
            stmt = statements.popleft()
            self._step()
            instruction = self._executor.execute_statement(stmt, line, statements)
            if instruction is None:
                continue
            kind = type(instruction)
            if kind == ex.Jump:
                line = instruction.line
                if line not in self._program:
                    raise error.BASICError(error.NO_SUCH_LINE, self.current_line, detail=line)
                statements = self._enter_line(line)
            elif kind == ex.Resume:
                line, statements = instruction.line, deque(instruction.statements)
                self.current_line = line
            elif kind == ex.SkipWhile:
                line, statements = self._skip_while(line, statements)
                self.current_line = line
            else:
                return instruction

    def _enter_line(self, line):
        """Start executing a program line."""
        self.current_line = line
        if self._program.running:
            self._program.goto_line(line)
        if self._executor.trace:
            logging.debug('TRACE line %d', line)
            self._console.write(u'[%d]' % (line,))
        return deque(self.get_statements(line))

    def _step(self):
        """Count a statement against the step limit."""
        self._steps += 1
        if self.step_limit and self._steps > self.step_limit:
            raise error.BASICError(error.ESCAPE, detail=u'step limit reached')

    def _skip_while(self, line, statements):
        """Find the statement after the ENDWHILE matching a WHILE."""
        depth = 1
        while True:
            while statements:
                stmt = statements.popleft()
                if isinstance(stmt, nodes.While):
                    depth += 1
                elif isinstance(stmt, nodes.EndWhile):
                    depth -= 1
                    if not depth:
                        return line, statements
            line = self._program.line_after(line)
            if line is None:
                raise error.BASICError(error.NO_ENDWHILE)
            statements = deque(self.get_statements(line))
