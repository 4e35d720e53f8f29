"""
BBC-BASIC - executor.py
Statement executor and control-flow stacks

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

import bisect
import logging
from collections import namedtuple

from .base import error
from .parser import nodes
from .memory.variables import INTEGER, REAL, STRING, type_of
from .evaluator import truncate
from .functions import to_number


###############################################################################
# instructions to the run-loop

# continue at the start of a line
Jump = namedtuple('Jump', ['line'])
# continue with the given statements in a line; if none are left, with the next line
Resume = namedtuple('Resume', ['line', 'statements'])
# skip to after the matching ENDWHILE
SkipWhile = namedtuple('SkipWhile', [])
# end the run; message is None for END
Stop = namedtuple('Stop', ['message'])
# =expr returning from a function
FnResult = namedtuple('FnResult', ['value'])


###############################################################################
# stack frames

# where to go back to: a line and the statements following in it
Continuation = namedtuple('Continuation', ['line', 'following'])
ForFrame = namedtuple('ForFrame', ['name', 'end', 'step', 'line', 'following'])
WhileFrame = namedtuple('WhileFrame', ['condition', 'line', 'following'])
# kind is PROC or FN; saved holds (name, old value) pairs; depths are the other stacks' sizes
ProcFrame = namedtuple('ProcFrame', ['kind', 'name', 'saved', 'return_to', 'depths'])
# body is the statements after the DEF on its line
Definition = namedtuple('Definition', ['kind', 'name', 'params', 'line', 'body'])

# zero values, by type
ZERO = {INTEGER: 0, REAL: 0., STRING: u''}


def coerce(value, vartype):
    """Convert a value for storage in a variable of the given type."""
    if vartype == STRING:
        if not isinstance(value, str):
            raise error.BASICError(error.TYPE_MISMATCH)
        return value
    if isinstance(value, str):
        raise error.BASICError(error.TYPE_MISMATCH)
    if vartype == INTEGER:
        return value if isinstance(value, int) else truncate(value)
    return float(value)


class Executor(object):
    """Executes parsed statements; reports control-flow decisions to the run-loop."""

    def __init__(self, program, memory, variables, evaluator, formatter, console, machine):
        """Initialise the executor."""
        self._program = program
        self._memory = memory
        self._variables = variables
        self._evaluator = evaluator
        self._formatter = formatter
        self._console = console
        self._machine = machine
        self._evaluator.init_callbacks(self.call_fn)
        # set by the interpreter
        self._fn_runner = None
        # set by the session
        self._command_handler = None
        self.trace = False
        self.definitions = {}
        self.reset()
        self._init_statements()

    def init_callbacks(self, fn_runner=None, command_handler=None):
        """Set the run-loop entry for functions or the session's command handler."""
        if fn_runner:
            self._fn_runner = fn_runner
        if command_handler:
            self._command_handler = command_handler

    def _init_statements(self):
        """Initialise the statement dispatch table."""
        self._statements = {
            nodes.Empty: self._exec_nothing,
            nodes.Rem: self._exec_nothing,
            nodes.Data: self._exec_nothing,
            nodes.Assignment: self._exec_assignment,
            nodes.ArrayAssignment: self._exec_array_assignment,
            nodes.IndirectAssignment: self._exec_indirect_assignment,
            nodes.PseudoAssignment: self._exec_pseudo_assignment,
            nodes.Print: self._exec_print,
            nodes.Input: self._exec_input,
            nodes.For: self._exec_for,
            nodes.Next: self._exec_next,
            nodes.If: self._exec_if,
            nodes.Goto: self._exec_goto,
            nodes.Gosub: self._exec_gosub,
            nodes.Return: self._exec_return,
            nodes.OnGoto: self._exec_on_jump,
            nodes.OnGosub: self._exec_on_jump,
            nodes.Dim: self._exec_dim,
            nodes.End: self._exec_end,
            nodes.Stop: self._exec_stop,
            nodes.Quit: self._exec_quit,
            nodes.ProcCall: self._exec_proc,
            nodes.DefProc: self._exec_def,
            nodes.DefFn: self._exec_def,
            nodes.FnReturn: self._exec_fn_return,
            nodes.EndProc: self._exec_endproc,
            nodes.Local: self._exec_local,
            nodes.Read: self._exec_read,
            nodes.Restore: self._exec_restore,
            nodes.Repeat: self._exec_repeat,
            nodes.Until: self._exec_until,
            nodes.While: self._exec_while,
            nodes.EndWhile: self._exec_endwhile,
            nodes.OnError: self._exec_on_error,
            nodes.OnErrorOff: self._exec_on_error_off,
            nodes.Error: self._exec_error,
            nodes.Report: self._exec_report,
            nodes.Clear: self._exec_clear,
            nodes.Swap: self._exec_swap,
            nodes.Trace: self._exec_trace,
            nodes.Command: self._exec_command,
            nodes.OsCall: self._exec_os_call,
        }

    def reset(self):
        """Reset all run state."""
        self.clear_stacks()
        self.on_error = None
        self.err = 0
        self.erl = 0
        self.report = u''
        self.reset_data()

    def clear_stacks(self):
        """Empty the control-flow stacks."""
        self._gosub_stack = []
        self._for_stack = []
        self._repeat_stack = []
        self._while_stack = []
        self._proc_stack = []

    def execute_statement(self, stmt, line=None, following=()):
        """Execute a statement; return an instruction for the run-loop or None to continue."""
        return self._statements[type(stmt)](stmt, line, tuple(following))

    ###########################################################################
    # pre-scan of the program

    def reset_data(self):
        """Empty the DATA list and definitions table."""
        self._data = []
        # (line number, index of its first datum)
        self._data_lines = []
        self._data_pointer = 0
        self.definitions = {}

    def collect_data(self, line, statements):
        """Add the DATA items in a line to the DATA list."""
        items = [
            _value for _stmt in statements if isinstance(_stmt, nodes.Data)
            for _value in _stmt.values
        ]
        if items:
            self._data_lines.append((line, len(self._data)))
            self._data.extend(items)

    def scan_definitions(self, line, statements):
        """Record a DEF PROC or DEF FN starting the line."""
        if not statements:
            return
        first = statements[0]
        if isinstance(first, nodes.DefProc):
            kind = u'PROC'
        elif isinstance(first, nodes.DefFn):
            kind = u'FN'
        else:
            return
        self.definitions[(kind, first.name)] = Definition(
            kind, first.name, first.params, line, tuple(statements[1:])
        )

    ###########################################################################
    # control-flow contract

    def push_gosub_return(self, line, following=()):
        """Record where RETURN goes back to."""
        self._gosub_stack.append(Continuation(line, tuple(following)))

    def pop_gosub_return(self):
        """Retrieve where to go back to; raise RETURN without GOSUB if none."""
        if not self._gosub_stack:
            raise error.BASICError(error.NO_GOSUB)
        return self._gosub_stack.pop()

    def set_for_loop_line(self, name, end, step, line, following=()):
        """Open a FOR loop; an open loop on the same variable is closed with all loops inside it."""
        for index, frame in enumerate(self._for_stack):
            if frame.name == name:
                del self._for_stack[index:]
                break
        self._for_stack.append(ForFrame(name, end, step, line, tuple(following)))

    def should_loop_back(self, name=None):
        """Step the loop variable; return the loop body's continuation or None if done."""
        if not self._for_stack:
            raise error.BASICError(error.NO_FOR)
        if name is not None:
            for index in range(len(self._for_stack)-1, -1, -1):
                if self._for_stack[index].name == name:
                    del self._for_stack[index+1:]
                    break
            else:
                raise error.BASICError(error.CANT_MATCH_FOR, detail=name)
        frame = self._for_stack[-1]
        value = self._variables.get_scalar(frame.name)
        if value is None:
            raise error.BASICError(error.NO_SUCH_VARIABLE, detail=frame.name)
        value = coerce(value + frame.step, type_of(frame.name))
        self._variables.set_scalar(frame.name, value)
        if (frame.step >= 0 and value <= frame.end) or (frame.step < 0 and value >= frame.end):
            return Continuation(frame.line, frame.following)
        self._for_stack.pop()
        return None

    def push_repeat(self, line, following=()):
        """Record the start of a REPEAT loop."""
        self._repeat_stack.append(Continuation(line, tuple(following)))

    def check_until(self, condition):
        """Return the loop body's continuation if the condition is false; else close the loop."""
        if not self._repeat_stack:
            raise error.BASICError(error.NO_REPEAT)
        if condition:
            self._repeat_stack.pop()
            return None
        return self._repeat_stack[-1]

    ###########################################################################
    # errors

    def trap_error(self, e):
        """Record an error; return where the ON ERROR handler runs, or None if not trapped."""
        self.err = e.err
        self.erl = e.line or 0
        self.report = e.message
        if self.on_error is None:
            return None
        logging.debug('Error %d trapped: %s', e.err, e.get_message())
        self.clear_stacks()
        return Resume(*self.on_error)

    ###########################################################################
    # assignment

    def assign(self, target, value):
        """Store a value in a variable, array element or memory location."""
        kind = type(target)
        if kind == nodes.Variable:
            self._variables.set_scalar(target.name, coerce(value, type_of(target.name)))
        elif kind == nodes.ArrayAccess:
            indices = [self._evaluator.evaluate_int(_index) for _index in target.indices]
            value = coerce(value, type_of(target.name))
            self._variables.set_array_element(target.name, indices, value)
        else:
            self._poke(target.op, self._evaluator.evaluate_int(target.address), coerce(value, INTEGER))

    def _poke(self, oper, address, value):
        """Write a byte or a word."""
        if oper == u'?':
            self._memory.poke(address, value)
        else:
            self._memory.poke_long(address, value)

    def _exec_nothing(self, stmt, line, following):
        """Statements without effect."""

    def _exec_assignment(self, stmt, line, following):
        """LET name=expr."""
        value = self._evaluator.evaluate_as(stmt.expression, type_of(stmt.name))
        self._variables.set_scalar(stmt.name, value)

    def _exec_array_assignment(self, stmt, line, following):
        """LET name(i)=expr: the value is evaluated before the element is written."""
        value = self._evaluator.evaluate_as(stmt.expression, type_of(stmt.name))
        indices = [self._evaluator.evaluate_int(_index) for _index in stmt.indices]
        self._variables.set_array_element(stmt.name, indices, value)

    def _exec_indirect_assignment(self, stmt, line, following):
        """?address=expr or !address=expr."""
        value = self._evaluator.evaluate_int(stmt.expression)
        self._poke(stmt.op, self._evaluator.evaluate_int(stmt.address), value)

    def _exec_pseudo_assignment(self, stmt, line, following):
        """TIME=, HIMEM=, PAGE=, LOMEM=."""
        value = self._evaluator.evaluate_int(stmt.expression)
        if stmt.name == u'TIME':
            self._machine.set_time(value)
        elif stmt.name == u'HIMEM':
            self._memory.set_himem(value)
        else:
            logging.warning('%s= not implemented.', stmt.name)

    def _exec_swap(self, stmt, line, following):
        """SWAP a, b."""
        first, second = self._read_target(stmt.first), self._read_target(stmt.second)
        if isinstance(first, str) != isinstance(second, str):
            raise error.BASICError(error.TYPE_MISMATCH)
        self.assign(stmt.first, second)
        self.assign(stmt.second, first)

    def _read_target(self, target):
        """Current value of an assignable target."""
        if isinstance(target, nodes.Variable):
            return self._evaluator.get_variable(target)
        return self._evaluator.evaluate(target)

    def _exec_dim(self, stmt, line, following):
        """DIM arrays and byte blocks."""
        for item in stmt.items:
            if isinstance(item, nodes.DimArray):
                dimensions = [self._evaluator.evaluate_int(_dim) + 1 for _dim in item.dimensions]
                self._variables.dim_array(item.name, dimensions)
            else:
                self._variables.dim_block(item.name, self._evaluator.evaluate_int(item.size))

    def _exec_clear(self, stmt, line, following):
        """CLEAR: remove all variables except the resident integers."""
        self._variables.clear()

    ###########################################################################
    # input and output

    def _exec_print(self, stmt, line, following):
        """PRINT."""
        self._formatter.format(stmt.items)

    def _exec_input(self, stmt, line, following):
        """INPUT and INPUT LINE."""
        prompt, question = u'', True
        values = []
        for item in stmt.items:
            kind = type(item)
            if kind == nodes.StringLiteral:
                prompt += item.value
                question = False
            elif kind == nodes.Separator:
                if item.char == u',':
                    question = True
                elif item.char == u"'":
                    prompt += u'\n'
            else:
                if not values:
                    text = self._console.read_line(prompt + (u'?' if question else u''))
                    values = [text] if stmt.line else text.split(u',')
                self._input_value(item, values.pop(0), stmt.line)
                prompt, question = u'', True

    def _input_value(self, target, text, whole_line):
        """Assign an input item to a target."""
        vartype = INTEGER if isinstance(target, nodes.Indirection) else type_of(target.name)
        if vartype == STRING:
            self.assign(target, text if whole_line else text.strip())
        else:
            self.assign(target, to_number(text))

    def _exec_report(self, stmt, line, following):
        """REPORT: print the last error message."""
        self._console.write(self.report)

    def _exec_trace(self, stmt, line, following):
        """TRACE ON|OFF."""
        self.trace = stmt.on

    def _exec_os_call(self, stmt, line, following):
        """Statements at the machine boundary."""
        args = []
        for arg in stmt.args:
            value = self._evaluator.evaluate(arg)
            if isinstance(value, float):
                value = truncate(value)
            args.append(value)
        self._machine.call(stmt.keyword, args)

    def _exec_command(self, stmt, line, following):
        """Commands are handled by the session."""
        args = [
            None if _arg is None else self._evaluator.evaluate(_arg)
            for _arg in stmt.args
        ]
        return self._command_handler(stmt.keyword, args)

    ###########################################################################
    # jumps and branches

    def _exec_end(self, stmt, line, following):
        """END."""
        return Stop(None)

    def _exec_stop(self, stmt, line, following):
        """STOP."""
        return Stop(u'STOP')

    def _exec_quit(self, stmt, line, following):
        """QUIT."""
        raise error.Exit()

    def _exec_goto(self, stmt, line, following):
        """GOTO."""
        return Jump(self._evaluator.evaluate_int(stmt.target))

    def _exec_gosub(self, stmt, line, following):
        """GOSUB: the calling position is recorded before jumping."""
        target = self._evaluator.evaluate_int(stmt.target)
        self.push_gosub_return(line, following)
        return Jump(target)

    def _exec_return(self, stmt, line, following):
        """RETURN."""
        return Resume(*self.pop_gosub_return())

    def _exec_if(self, stmt, line, following):
        """IF: the chosen branch replaces the rest of the line."""
        if self._evaluator.truth(stmt.condition):
            return Resume(line, stmt.then_branch)
        return Resume(line, stmt.else_branch or ())

    def _exec_on_jump(self, stmt, line, following):
        """ON expr GOTO/GOSUB targets [ELSE statements]."""
        selector = self._evaluator.evaluate_int(stmt.selector)
        if not 1 <= selector <= len(stmt.targets):
            if stmt.else_branch is None:
                raise error.BASICError(error.ON_RANGE)
            return Resume(line, stmt.else_branch)
        target = self._evaluator.evaluate_int(stmt.targets[selector-1])
        if isinstance(stmt, nodes.OnGosub):
            self.push_gosub_return(line, following)
        return Jump(target)

    ###########################################################################
    # loops

    def _exec_for(self, stmt, line, following):
        """FOR: the body runs at least once."""
        vartype = type_of(stmt.name)
        if vartype == STRING:
            raise error.BASICError(error.TYPE_MISMATCH)
        start = self._evaluator.evaluate_as(stmt.start, vartype)
        end = self._evaluator.evaluate_as(stmt.end, vartype)
        step = 1
        if stmt.step is not None:
            step = self._evaluator.evaluate_as(stmt.step, vartype)
        self._variables.set_scalar(stmt.name, start)
        self.set_for_loop_line(stmt.name, end, step, line, following)

    def _exec_next(self, stmt, line, following):
        """NEXT [name, ...]: closes the loops in order."""
        for name in stmt.names or (None,):
            continuation = self.should_loop_back(name)
            if continuation:
                return Resume(*continuation)
        return None

    def _exec_repeat(self, stmt, line, following):
        """REPEAT."""
        self.push_repeat(line, following)

    def _exec_until(self, stmt, line, following):
        """UNTIL condition."""
        continuation = self.check_until(self._evaluator.truth(stmt.condition))
        if continuation:
            return Resume(*continuation)
        return None

    def _exec_while(self, stmt, line, following):
        """WHILE: a false condition skips the loop."""
        if not self._evaluator.truth(stmt.condition):
            return SkipWhile()
        self._while_stack.append(WhileFrame(stmt.condition, line, following))
        return None

    def _exec_endwhile(self, stmt, line, following):
        """ENDWHILE: re-test the condition of the innermost loop."""
        if not self._while_stack:
            raise error.BASICError(error.NO_WHILE)
        frame = self._while_stack[-1]
        if self._evaluator.truth(frame.condition):
            return Resume(frame.line, frame.following)
        self._while_stack.pop()
        return None

    ###########################################################################
    # DATA

    def _exec_read(self, stmt, line, following):
        """READ targets."""
        for target in stmt.targets:
            if self._data_pointer >= len(self._data):
                raise error.BASICError(error.OUT_OF_DATA)
            text = self._data[self._data_pointer]
            self._data_pointer += 1
            self._input_value(target, text, whole_line=True)

    def _exec_restore(self, stmt, line, following):
        """RESTORE [line]."""
        if stmt.target is None:
            self._data_pointer = 0
            return
        target = self._evaluator.evaluate_int(stmt.target)
        if target not in self._program:
            raise error.BASICError(error.NO_SUCH_LINE, detail=target)
        numbers = [_line for _line, _ in self._data_lines]
        index = bisect.bisect_left(numbers, target)
        if index < len(self._data_lines):
            self._data_pointer = self._data_lines[index][1]
        else:
            self._data_pointer = len(self._data)

    ###########################################################################
    # procedures and functions

    def _get_definition(self, kind, name):
        """Look up a procedure or function."""
        try:
            return self.definitions[(kind, name)]
        except KeyError:
            raise error.BASICError(error.NO_SUCH_PROC, detail=kind + name)

    def _enter(self, definition, args, return_to):
        """Bind parameters and push a frame for a PROC or FN call."""
        if len(args) != len(definition.params):
            raise error.BASICError(error.ARGUMENTS)
        # arguments are evaluated in the caller's context
        values = [
            self._evaluator.evaluate_as(_arg, type_of(_param))
            for _arg, _param in zip(args, definition.params)
        ]
        saved = [(_param, self._variables.get_scalar(_param)) for _param in definition.params]
        depths = (
            len(self._gosub_stack), len(self._for_stack),
            len(self._repeat_stack), len(self._while_stack)
        )
        self._proc_stack.append(ProcFrame(definition.kind, definition.name, saved, return_to, depths))
        for param, value in zip(definition.params, values):
            self._variables.set_scalar(param, value)

    def _leave(self, kind):
        """Pop a PROC or FN frame, restoring LOCAL variables and parameters."""
        if not self._proc_stack or self._proc_stack[-1].kind != kind:
            raise error.BASICError(error.NO_PROC if kind == u'PROC' else error.NO_FN)
        frame = self._proc_stack.pop()
        for name, value in reversed(frame.saved):
            if value is None:
                self._variables.delete_scalar(name)
            else:
                self._variables.set_scalar(name, value)
        gosubs, fors, repeats, whiles = frame.depths
        del self._gosub_stack[gosubs:]
        del self._for_stack[fors:]
        del self._repeat_stack[repeats:]
        del self._while_stack[whiles:]
        return frame

    def _exec_proc(self, stmt, line, following):
        """PROCname(args)."""
        definition = self._get_definition(u'PROC', stmt.name)
        self._enter(definition, stmt.args, Continuation(line, following))
        return Resume(definition.line, definition.body)

    def _exec_endproc(self, stmt, line, following):
        """ENDPROC."""
        return Resume(*self._leave(u'PROC').return_to)

    def _exec_def(self, stmt, line, following):
        """DEF is skipped with the rest of its line when met in sequence."""
        return Resume(line, ())

    def _exec_local(self, stmt, line, following):
        """LOCAL: save variables to be restored on return, then zero them."""
        if not self._proc_stack:
            raise error.BASICError(error.NOT_LOCAL)
        saved = self._proc_stack[-1].saved
        for name in stmt.names:
            saved.append((name, self._variables.get_scalar(name)))
            self._variables.set_scalar(name, ZERO[type_of(name)])

    def _exec_fn_return(self, stmt, line, following):
        """=expr ends a function."""
        if not self._proc_stack or self._proc_stack[-1].kind != u'FN':
            raise error.BASICError(error.NO_FN)
        vartype = type_of(self._proc_stack[-1].name)
        return FnResult(self._evaluator.evaluate_as(stmt.expression, vartype))

    def call_fn(self, name, args):
        """Run a user-defined function and return its value."""
        definition = self._get_definition(u'FN', name)
        self._enter(definition, args, None)
        result = self._fn_runner(definition.line, definition.body)
        if not isinstance(result, FnResult):
            raise error.BASICError(error.NO_FN)
        self._leave(u'FN')
        return coerce(result.value, type_of(name))

    ###########################################################################
    # error handling

    def _exec_on_error(self, stmt, line, following):
        """ON ERROR statements: the rest of the line is the handler."""
        self.on_error = (line, stmt.statements)

    def _exec_on_error_off(self, stmt, line, following):
        """ON ERROR OFF."""
        self.on_error = None

    def _exec_error(self, stmt, line, following):
        """ERROR number, message."""
        number = self._evaluator.evaluate_int(stmt.number)
        message = self._evaluator.evaluate_string(stmt.message)
        raise error.UserError(number, message)
