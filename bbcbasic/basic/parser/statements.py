"""
BBC-BASIC - statements.py
Statement parser

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

from functools import partial

from ..base import error
from ..base import tokens as tk
from ..base import codestream
from . import expressions
from . import nodes


# statements that are passed to the machine boundary
OS_STATEMENTS = {
    tk.CLS: u'CLS', tk.CLG: u'CLG', tk.MODE: u'MODE', tk.GCOL: u'GCOL', tk.COLOUR: u'COLOUR',
    tk.PLOT: u'PLOT', tk.MOVE: u'MOVE', tk.DRAW: u'DRAW', tk.VDU: u'VDU', tk.SOUND: u'SOUND',
    tk.ENVELOPE: u'ENVELOPE', tk.CIRCLE: u'CIRCLE', tk.ELLIPSE: u'ELLIPSE',
    tk.RECTANGLE: u'RECTANGLE', tk.FILL: u'FILL', tk.ORIGIN: u'ORIGIN', tk.TINT: u'TINT',
    tk.WAIT: u'WAIT', tk.OSCLI: u'OSCLI', tk.CALL: u'CALL', tk.WIDTH: u'WIDTH',
    tk.POINT_ST: u'POINT', tk.BPUT: u'BPUT', tk.CLOSE: u'CLOSE',
}

# commands handled by the session
COMMANDS = {
    tk.RUN: u'RUN', tk.LIST: u'LIST', tk.NEW: u'NEW', tk.OLD: u'OLD', tk.DELETE: u'DELETE',
    tk.RENUMBER: u'RENUMBER', tk.LOAD: u'LOAD', tk.SAVE: u'SAVE', tk.CHAIN: u'CHAIN',
    tk.AUTO: u'AUTO', tk.EDIT: u'EDIT',
}

# pseudo-variables that can be assigned
PSEUDO_VARIABLES = {
    tk.TIME_ST: u'TIME', tk.TIME: u'TIME',
    tk.PAGE_ST: u'PAGE', tk.PAGE: u'PAGE',
    tk.HIMEM_ST: u'HIMEM', tk.HIMEM: u'HIMEM',
    tk.LOMEM_ST: u'LOMEM', tk.LOMEM: u'LOMEM',
}


def split_data(text):
    """Split the text of a DATA statement into its items."""
    items = []
    item, quoted, in_quotes = [], False, False
    pos = 0
    while pos <= len(text):
        c = text[pos:pos+1]
        if in_quotes:
            if c == u'"' and text[pos+1:pos+2] == u'"':
                item.append(c)
                pos += 1
            elif c == u'"':
                in_quotes = False
            elif c:
                item.append(c)
        elif c == u'"' and not u''.join(item).strip():
            item, quoted, in_quotes = [], True, True
        elif c in (u',', u''):
            value = u''.join(item)
            items.append(value if quoted else value.strip())
            item, quoted = [], False
        else:
            item.append(c)
        pos += 1
    return tuple(items)


class Parser(object):
    """BASIC statement parser."""

    def __init__(self):
        """Initialise statement context."""
        # expression parser
        self.expression_parser = expressions.ExpressionParser()
        # initialise syntax parser tables
        self._init_syntax()

    def _init_syntax(self):
        """Initialise syntax parsers."""
        self._simple = {
            tk.LET: self._parse_let,
            tk.PRINT: self._parse_print,
            tk.INPUT: self._parse_input,
            tk.FOR: self._parse_for,
            tk.NEXT: self._parse_next,
            tk.IF: self._parse_if,
            tk.GOTO: partial(self._parse_jump, nodes.Goto),
            tk.GOSUB: partial(self._parse_jump, nodes.Gosub),
            tk.RETURN: partial(self._parse_nothing, nodes.Return),
            tk.ON: self._parse_on,
            tk.DIM: self._parse_dim,
            tk.REM: self._parse_rem,
            tk.ELSE: self._parse_else,
            tk.END: partial(self._parse_nothing, nodes.End),
            tk.STOP: partial(self._parse_nothing, nodes.Stop),
            tk.QUIT: self._parse_quit,
            tk.PROC: self._parse_proc,
            tk.DEF: self._parse_def,
            tk.ENDPROC: partial(self._parse_nothing, nodes.EndProc),
            tk.LOCAL: self._parse_local,
            tk.DATA: self._parse_data,
            tk.READ: self._parse_read,
            tk.RESTORE: self._parse_restore,
            tk.REPEAT: partial(self._parse_nothing, nodes.Repeat),
            tk.UNTIL: partial(self._parse_condition, nodes.Until),
            tk.WHILE: partial(self._parse_condition, nodes.While),
            tk.ENDWHILE: partial(self._parse_nothing, nodes.EndWhile),
            tk.ERROR: self._parse_error,
            tk.REPORT: partial(self._parse_nothing, nodes.Report),
            tk.CLEAR: partial(self._parse_nothing, nodes.Clear),
            tk.SWAP: self._parse_swap,
            tk.TRACE: self._parse_trace,
            tk.PTR_ST: self._parse_ptr,
        }
        for token, name in PSEUDO_VARIABLES.items():
            self._simple[token] = partial(self._parse_pseudo_assignment, name)
        for token, name in OS_STATEMENTS.items():
            self._simple[token] = partial(self._parse_os_call, name)
        for token, name in COMMANDS.items():
            self._simple[token] = partial(self._parse_command, name)

    def parse_line(self, line):
        """Parse a TokenisedLine or token sequence into a tuple of statements."""
        tokens = line.tokens if isinstance(line, codestream.TokenisedLine) else line
        return self.parse_statements(codestream.TokenStream(tokens))

    def parse_statements(self, ins, stop_at_else=False):
        """Parse colon-separated statements up to end of line or ELSE."""
        statements = []
        while True:
            while ins.read_if(u':'):
                pass
            token = ins.peek()
            if token.kind == codestream.END_OF_LINE:
                break
            if stop_at_else and token.matches(tk.ELSE):
                break
            statement = self.parse_statement(ins)
            statements.append(statement)
            if isinstance(statement, nodes.DefFn) and ins.peek().matches(u'='):
                # single-line DEF FNname(x)=expr
                continue
            ins.require_end()
        return tuple(statements)

    def parse_statement(self, ins):
        """Parse a single statement."""
        token = ins.peek()
        if token.kind == codestream.END_OF_LINE or token.matches(u':'):
            return nodes.Empty()
        if token.kind == codestream.IDENTIFIER:
            # implicit LET
            return self._parse_assignment(ins)
        if token.matches(u'?', u'!'):
            return self._parse_indirect_assignment(ins)
        if token.matches(u'='):
            ins.read()
            return nodes.FnReturn(self.parse_expression(ins))
        if token.is_keyword:
            ins.read()
            keyword = tk.COMMAND_ALIASES.get(token.value, token.value)
            try:
                parse = self._simple[keyword]
            except KeyError:
                raise error.BASICError(error.MISTAKE)
            return parse(ins)
        raise error.BASICError(error.MISTAKE)

    def parse_expression(self, ins):
        """Parse an expression at the current position."""
        return self.expression_parser.parse(ins)

    def _parse_optional_expression(self, ins):
        """Parse an expression, or None at end of statement."""
        if ins.at_end_statement() or ins.peek().matches(u','):
            return None
        return self.parse_expression(ins)

    def _parse_target(self, ins):
        """Parse an assignable variable, array element or indirection."""
        oper = ins.read_if(u'?', u'!')
        if oper:
            return nodes.Indirection(oper, self.expression_parser.parse_primary(ins))
        name = ins.read_name()
        if ins.peek().matches(u'('):
            return nodes.ArrayAccess(name, self.expression_parser.parse_indices(ins))
        return nodes.Variable(name)

    def _parse_names(self, ins):
        """Parse a comma-separated list of variable names."""
        names = [ins.read_name()]
        while ins.read_if(u','):
            names.append(ins.read_name())
        return tuple(names)

    ###########################################################################
    # assignment

    def _parse_let(self, ins):
        """Parse LET statement."""
        if ins.peek().matches(u'?', u'!'):
            return self._parse_indirect_assignment(ins)
        return self._parse_assignment(ins)

    def _parse_assignment(self, ins):
        """Parse name=expr, name(i)=expr, name?i=expr and the += and -= forms."""
        name = ins.read_name()
        if ins.peek().matches(u'('):
            indices = self.expression_parser.parse_indices(ins)
            target = nodes.ArrayAccess(name, indices)
            expr = self._parse_assigned_value(ins, target)
            return nodes.ArrayAssignment(name, indices, expr)
        oper = ins.read_if(u'?', u'!')
        if oper:
            offset = self.expression_parser.parse_primary(ins)
            address = nodes.BinaryOp(nodes.Variable(name), u'+', offset)
            expr = self._parse_assigned_value(ins, nodes.Indirection(oper, address))
            return nodes.IndirectAssignment(oper, address, expr)
        return nodes.Assignment(name, self._parse_assigned_value(ins, nodes.Variable(name)))

    def _parse_indirect_assignment(self, ins):
        """Parse ?address=expr or !address=expr."""
        oper = ins.read()
        address = self.expression_parser.parse_primary(ins)
        expr = self._parse_assigned_value(ins, nodes.Indirection(oper.value, address))
        return nodes.IndirectAssignment(oper.value, address, expr)

    def _parse_assigned_value(self, ins, target):
        """Parse =expr, +=expr or -=expr."""
        if ins.read_if(u'='):
            return self.parse_expression(ins)
        if ins.peek().matches(u'+', u'-') and ins.peek(1).matches(u'='):
            oper = ins.read().value
            ins.read()
            return nodes.BinaryOp(target, oper, self.parse_expression(ins))
        raise error.BASICError(error.MISTAKE)

    def _parse_pseudo_assignment(self, name, ins):
        """Parse TIME=, PAGE=, HIMEM=, LOMEM=."""
        ins.require_read((u'=',), error.MISTAKE)
        return nodes.PseudoAssignment(name, self.parse_expression(ins))

    def _parse_ptr(self, ins):
        """Parse PTR#channel=expr."""
        ins.require_read((u'#',), error.MISTAKE)
        channel = self.expression_parser.parse_primary(ins)
        ins.require_read((u'=',), error.MISTAKE)
        return nodes.OsCall(u'PTR', (channel, self.parse_expression(ins)))

    ###########################################################################
    # input and output

    def _parse_print(self, ins):
        """Parse PRINT statement."""
        items = []
        while not ins.at_end_statement():
            token = ins.peek()
            if token.matches(u',', u';', u"'"):
                ins.read()
                items.append(nodes.Separator(token.value))
            elif token.matches(u'~'):
                ins.read()
                items.append(nodes.Hex())
            elif token.matches(tk.TAB):
                ins.read()
                ins.require_read((u'(',))
                column = self.parse_expression(ins)
                row = self.parse_expression(ins) if ins.read_if(u',') else None
                ins.require_read((u')',), error.MISSING_BRACKET)
                items.append(nodes.Tab(column, row))
            elif token.matches(tk.SPC):
                ins.read()
                items.append(nodes.Spc(self.expression_parser.parse_primary(ins)))
            else:
                items.append(self.parse_expression(ins))
        return nodes.Print(tuple(items))

    def _parse_input(self, ins):
        """Parse INPUT and INPUT LINE statements."""
        line = bool(ins.read_if(tk.LINE))
        items = []
        while not ins.at_end_statement():
            token = ins.peek()
            if token.matches(u',', u';', u"'"):
                ins.read()
                items.append(nodes.Separator(token.value))
            elif token.kind == codestream.STRING:
                ins.read()
                items.append(nodes.StringLiteral(token.value))
            else:
                items.append(self._parse_target(ins))
        return nodes.Input(line, tuple(items))

    ###########################################################################
    # flow control

    def _parse_nothing(self, node, ins):
        """Parse a statement without arguments."""
        return node()

    def _parse_condition(self, node, ins):
        """Parse UNTIL or WHILE condition."""
        return node(self.parse_expression(ins))

    def _parse_jump(self, node, ins):
        """Parse GOTO or GOSUB."""
        return node(self.parse_expression(ins))

    def _parse_quit(self, ins):
        """Parse QUIT statement."""
        # exit code is accepted and ignored
        self._parse_optional_expression(ins)
        return nodes.Quit()

    def _parse_for(self, ins):
        """Parse FOR statement."""
        name = ins.read_name()
        ins.require_read((u'=',), error.MISTAKE)
        start = self.parse_expression(ins)
        ins.require_read((tk.TO,), error.NO_TO)
        end = self.parse_expression(ins)
        step = None
        if ins.read_if(tk.STEP):
            step = self.parse_expression(ins)
        return nodes.For(name, start, end, step)

    def _parse_next(self, ins):
        """Parse NEXT statement."""
        if ins.at_end_statement():
            return nodes.Next(())
        return nodes.Next(self._parse_names(ins))

    def _parse_branch(self, ins, stop_at_else):
        """Parse the statements after THEN or ELSE; a bare line number is a GOTO."""
        token = ins.read_kind_if(codestream.LINE_NUMBER)
        if token:
            return (nodes.Goto(nodes.IntegerLiteral(token.value)),)
        return self.parse_statements(ins, stop_at_else)

    def _parse_if(self, ins):
        """Parse IF statement."""
        condition = self.parse_expression(ins)
        ins.read_if(tk.THEN)
        then_branch = self._parse_branch(ins, stop_at_else=True)
        else_branch = None
        if ins.read_if(tk.ELSE):
            else_branch = self._parse_branch(ins, stop_at_else=False)
        return nodes.If(condition, then_branch, else_branch)

    def _parse_else(self, ins):
        """ELSE outside an IF skips the rest of the line."""
        while ins.peek().kind != codestream.END_OF_LINE:
            ins.read()
        return nodes.Rem(u'')

    def _parse_on(self, ins):
        """Parse ON ERROR, ON ERROR OFF and ON GOTO/GOSUB."""
        if ins.read_if(tk.ERROR):
            if ins.read_if(tk.OFF):
                return nodes.OnErrorOff()
            return nodes.OnError(self.parse_statements(ins))
        selector = self.parse_expression(ins)
        jump = ins.require_read((tk.GOTO, tk.GOSUB), error.ON_SYNTAX)
        targets = [self.parse_expression(ins)]
        while ins.read_if(u','):
            targets.append(self.parse_expression(ins))
        else_branch = None
        if ins.read_if(tk.ELSE):
            else_branch = self.parse_statements(ins)
        node = nodes.OnGoto if jump == tk.GOTO else nodes.OnGosub
        return node(selector, tuple(targets), else_branch)

    def _parse_error(self, ins):
        """Parse ERROR n, message."""
        number = self.parse_expression(ins)
        ins.require_read((u',',), error.MISSING_COMMA)
        return nodes.Error(number, self.parse_expression(ins))

    def _parse_trace(self, ins):
        """Parse TRACE ON or TRACE OFF."""
        if ins.read_if(tk.ON):
            return nodes.Trace(True)
        ins.require_read((tk.OFF,))
        return nodes.Trace(False)

    ###########################################################################
    # procedures and functions

    def _parse_proc(self, ins):
        """Parse PROCname(args)."""
        name = ins.read_name()
        return nodes.ProcCall(name, self.expression_parser.parse_argument_list(ins))

    def _parse_def(self, ins):
        """Parse DEF PROC and DEF FN."""
        keyword = ins.require_read((tk.PROC, tk.FN), error.MISTAKE)
        name = ins.read_name()
        params = ()
        if ins.read_if(u'('):
            params = self._parse_names(ins)
            ins.require_read((u')',), error.MISSING_BRACKET)
        if keyword == tk.PROC:
            return nodes.DefProc(name, params)
        return nodes.DefFn(name, params)

    def _parse_local(self, ins):
        """Parse LOCAL statement."""
        return nodes.Local(self._parse_names(ins))

    ###########################################################################
    # variables and data

    def _parse_dim(self, ins):
        """Parse DIM statement."""
        items = []
        while True:
            name = ins.read_name()
            if ins.peek().matches(u'('):
                items.append(nodes.DimArray(name, self.expression_parser.parse_indices(ins)))
            else:
                items.append(nodes.DimBlock(name, self.parse_expression(ins)))
            if not ins.read_if(u','):
                break
        return nodes.Dim(tuple(items))

    def _parse_rem(self, ins):
        """Parse REM statement."""
        token = ins.read_kind_if(codestream.TEXT)
        return nodes.Rem(token.value if token else u'')

    def _parse_data(self, ins):
        """Parse DATA statement."""
        token = ins.read_kind_if(codestream.TEXT)
        return nodes.Data(split_data(token.value if token else u''))

    def _parse_read(self, ins):
        """Parse READ statement."""
        targets = [self._parse_target(ins)]
        while ins.read_if(u','):
            targets.append(self._parse_target(ins))
        return nodes.Read(tuple(targets))

    def _parse_restore(self, ins):
        """Parse RESTORE statement."""
        return nodes.Restore(self._parse_optional_expression(ins))

    def _parse_swap(self, ins):
        """Parse SWAP statement."""
        first = self._parse_target(ins)
        ins.require_read((u',',), error.MISSING_COMMA)
        return nodes.Swap(first, self._parse_target(ins))

    ###########################################################################
    # commands and machine calls

    def _parse_command(self, keyword, ins):
        """Parse a command with optional comma-separated arguments."""
        args = []
        if not ins.at_end_statement():
            args.append(self._parse_optional_expression(ins))
            while ins.read_if(u','):
                args.append(self._parse_optional_expression(ins))
        return nodes.Command(keyword, tuple(args))

    def _parse_os_call(self, keyword, ins):
        """Parse a statement for the machine boundary."""
        if ins.read_if(tk.FILL):
            keyword += u' FILL'
        args = []
        while not ins.at_end_statement():
            if ins.read_if(u',', u';', u'|', u'#', tk.TO):
                continue
            args.append(self.parse_expression(ins))
        return nodes.OsCall(keyword, tuple(args))
