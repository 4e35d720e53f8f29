"""
BBC-BASIC tests.test_statements
Tests for statements and program flow

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

from bbcbasic import Session
from tests.unit.utils import TestCase, run_tests


class StatementsTest(TestCase):
    """Unit tests for statements."""

    tag = u'statements'

    def _run(self, session, *lines):
        """Store a program and run it."""
        for line in lines:
            session.execute(line)
        return session.run()

    ###########################################################################
    # assignment

    def test_let(self):
        """Assignment with and without LET."""
        with Session() as s:
            s.execute(u'LET a=1.5')
            s.execute(u'b$="text"')
            s.execute(u'A%=2+3*4')
            assert s.get_variable(u'a') == 1.5
            assert s.get_variable(u'b$') == u'text'
            assert s.get_variable(u'A%') == 14

    def test_let_integer_truncates(self):
        """Reals assigned to integers truncate towards zero."""
        with Session() as s:
            s.execute(u'A%=7.9')
            assert s.get_variable(u'A%') == 7
            s.execute(u'A%=-7.9')
            assert s.get_variable(u'A%') == -7

    def test_let_errors(self):
        """Type and range errors in assignment."""
        with Session() as s:
            assert s.execute(u'a$=1') == u'Type mismatch\n'
            assert s.execute(u'a=""') == u'Type mismatch\n'
            assert s.execute(u'A%=&7FFFFFFF+1') == u'Too big\n'
            assert s.execute(u'A%=1E10') == u'Too big\n'

    def test_compound_assignment(self):
        """+= and -=."""
        with Session() as s:
            s.execute(u'A%=5:A%+=3')
            assert s.get_variable(u'A%') == 8
            s.execute(u'A%-=10')
            assert s.get_variable(u'A%') == -2
            s.execute(u's$="a":s$+="b"')
            assert s.get_variable(u's$') == u'ab'

    def test_indirection(self):
        """? and ! read and write memory."""
        with Session() as s:
            assert s.execute(u'?&3000=65:PRINT ?&3000') == u'        65\n'
            assert s.execute(u'!&3000=&12345678:PRINT ~!&3000') == u'  12345678\n'
            assert s.execute(u'PRINT ?&3000') == u'       120\n'
            assert s.execute(u'?&100=1') == u'Invalid address: $0100\n'

    def test_resident_integers(self):
        """Resident integers live in memory at &400."""
        with Session() as s:
            s.execute(u'B%=&01020304')
            assert s.evaluate(u'!&408') == 0x01020304
            s.execute(u'!&40C=99')
            assert s.get_variable(u'C%') == 99

    def test_swap(self):
        """SWAP exchanges values of the same kind."""
        with Session() as s:
            s.execute(u'a=1:b=2:SWAP a,b')
            assert s.get_variable(u'a') == 2.
            assert s.get_variable(u'b') == 1.
            assert s.execute(u's$="x":SWAP a,s$') == u'Type mismatch\n'

    def test_clear(self):
        """CLEAR removes variables but not resident integers."""
        with Session() as s:
            s.execute(u'a=1:A%=3:CLEAR')
            assert s.get_variable(u'a') is None
            assert s.get_variable(u'A%') == 3

    def test_storing_line_clears_variables(self):
        """Editing the program loses the variables."""
        with Session() as s:
            s.execute(u'a=1')
            s.execute(u'10 REM')
            assert s.execute(u'PRINT a') == u'No such variable: a\n'

    ###########################################################################
    # arrays

    def test_dim(self):
        """DIM and array elements."""
        with Session() as s:
            assert s.execute(u'DIM a%(3):a%(3)=7:PRINT a%(3)') == u'         7\n'
            assert s.execute(u'PRINT a%(4)') == u'Subscript\n'
            s.execute(u'DIM m$(1,2):m$(1,2)="x"')
            assert s.get_variable(u'm$()') == [[u'', u'', u''], [u'', u'', u'x']]

    def test_dim_errors(self):
        """Bad dimensions and missing arrays."""
        with Session() as s:
            assert s.execute(u'DIM b%(-1)').startswith(u'Bad DIM')
            assert s.execute(u'PRINT z(1)') == u'Array: z\n'

    def test_dim_block(self):
        """DIM name size reserves a byte block."""
        with Session() as s:
            s.execute(u'DIM blk% 10')
            address = s.get_variable(u'blk%')
            assert address >= 0x1900
            assert s.execute(u'?blk%=5:PRINT ?blk%') == u'         5\n'

    ###########################################################################
    # output

    def test_print_numbers(self):
        """Numbers are right-justified in a 10-column field."""
        with Session() as s:
            assert s.execute(u'PRINT 14') == u'        14\n'
            assert s.execute(u'PRINT -3') == u'        -3\n'
            assert s.execute(u'PRINT 2.5') == u'       2.5\n'
            assert s.execute(u'PRINT 1E10') == u'      1E10\n'
            assert s.execute(u'PRINT 1/3') == u'0.333333333\n'
            assert s.execute(u'PRINT ~255') == u'        FF\n'
            assert s.execute(u'PRINT') == u'\n'

    def test_print_separators(self):
        """Semicolons, commas and apostrophes."""
        with Session() as s:
            assert s.execute(u'PRINT 1;2') == u'         12\n'
            assert s.execute(u'PRINT 1,2') == u'         1         2\n'
            assert s.execute(u'PRINT "A","B"') == u'A         B\n'
            assert s.execute(u'PRINT "A"\'"B"') == u'A\nB\n'
            assert s.execute(u'PRINT "A";') == u'A'
            assert s.execute(u'PRINT "B"') == u'B\n'

    def test_print_tab_spc(self):
        """TAB and SPC."""
        with Session() as s:
            assert s.execute(u'PRINT TAB(5)"x"') == u'     x\n'
            assert s.execute(u'PRINT "abc";TAB(1)"x"') == u'abc\n x\n'
            assert s.execute(u'PRINT SPC(3)"x"') == u'   x\n'

    def test_print_format(self):
        """@% controls number format and field width."""
        with Session() as s:
            assert s.evaluate(u'@%') == 0x90a
            s.execute(u'@%=&20205')
            assert s.execute(u'PRINT 1.5') == u' 1.50\n'
            s.execute(u'@%=&10305')
            assert s.execute(u'PRINT 1234.5') == u'1.23E3\n'
            s.execute(u'@%=&00303')
            assert s.execute(u'PRINT 3.14159') == u'3.14\n'

    def test_vdu(self):
        """VDU writes character codes."""
        with Session() as s:
            assert s.execute(u'VDU 72,105') == u'Hi'
            assert s.execute(u'CLS') == u''

    ###########################################################################
    # jumps

    def test_goto(self):
        """GOTO with a computed target."""
        with Session() as s:
            output = self._run(
                s, u'10 GOTO 5*6', u'20 PRINT "skipped"', u'30 PRINT "here"'
            )
        assert output == u'here\n'

    def test_gosub(self):
        """GOSUB returns to the next line."""
        with Session() as s:
            output = self._run(
                s, u'10 GOSUB 100', u'20 PRINT "back"', u'30 END',
                u'100 PRINT "sub"', u'110 RETURN'
            )
        assert output == u'sub\nback\n'

    def test_gosub_mid_line(self):
        """RETURN continues after the GOSUB statement."""
        with Session() as s:
            output = self._run(
                s, u'10 GOSUB 100:PRINT "back"', u'20 END', u'100 PRINT "sub":RETURN'
            )
        assert output == u'sub\nback\n'

    def test_return_without_gosub(self):
        """RETURN without GOSUB."""
        with Session() as s:
            assert self._run(s, u'10 RETURN') == u'RETURN without GOSUB at line 10\n'

    def test_if(self):
        """IF THEN ELSE."""
        with Session() as s:
            assert s.execute(u'IF 1 THEN PRINT "a" ELSE PRINT "b"') == u'a\n'
            assert s.execute(u'IF 0 THEN PRINT "a" ELSE PRINT "b"') == u'b\n'
            assert s.execute(u'IF 0 THEN PRINT "a":PRINT "c"') == u''
            assert s.execute(u'IF 2>1 PRINT "no then"') == u'no then\n'

    def test_if_line_number(self):
        """IF THEN line number."""
        with Session() as s:
            output = self._run(
                s, u'10 A%=5', u'20 IF A%>3 THEN 40', u'30 PRINT "no"', u'40 PRINT "yes"'
            )
        assert output == u'yes\n'

    def test_on_goto(self):
        """ON GOTO selects a target."""
        with Session() as s:
            output = self._run(
                s, u'10 ON 2 GOTO 100,200', u'100 PRINT "one":END', u'200 PRINT "two":END'
            )
        assert output == u'two\n'

    def test_on_goto_range(self):
        """ON GOTO out of range."""
        with Session() as s:
            output = self._run(s, u'10 ON 3 GOTO 100,200', u'100 END', u'200 END')
            assert output == u'ON range at line 10\n'
            s.execute(u'10 ON 3 GOTO 100,200 ELSE PRINT "else"')
            s.execute(u'20 END')
            assert s.run() == u'else\n'

    def test_on_gosub(self):
        """ON GOSUB returns after the ON statement."""
        with Session() as s:
            output = self._run(
                s, u'10 ON 1 GOSUB 100:PRINT "back"', u'20 END', u'100 PRINT "sub":RETURN'
            )
        assert output == u'sub\nback\n'

    def test_end_stop(self):
        """END is silent; STOP reports the line."""
        with Session() as s:
            assert self._run(s, u'10 PRINT "A"', u'20 END', u'30 PRINT "B"') == u'A\n'
            s.execute(u'20 STOP')
            assert s.run() == u'A\nSTOP at line 20\n'

    def test_missing_line(self):
        """Jump to a line that does not exist."""
        with Session() as s:
            assert self._run(s, u'10 GOTO 99') == u'No such line: 99 at line 10\n'

    ###########################################################################
    # loops

    def test_for_negative_step(self):
        """FOR with a negative step."""
        with Session() as s:
            self._run(
                s, u'10 N%=0', u'20 FOR I%=10 TO 1 STEP -1', u'30 N%=N%+1', u'40 NEXT'
            )
            assert s.get_variable(u'N%') == 10
            assert s.get_variable(u'I%') == 0

    def test_for_real(self):
        """FOR with a real loop variable."""
        with Session() as s:
            self._run(s, u'10 c%=0', u'20 FOR x=0 TO 1 STEP 0.25:c%=c%+1:NEXT x')
            assert s.get_variable(u'c%') == 5
            assert s.get_variable(u'x') == 1.25

    def test_for_runs_once(self):
        """The body of a FOR loop runs at least once."""
        with Session() as s:
            assert s.execute(u'FOR I%=5 TO 1:PRINT "once":NEXT') == u'once\n'

    def test_for_nested(self):
        """NEXT with several names closes inner and outer loops."""
        with Session() as s:
            self._run(s, u'10 C%=0', u'20 FOR I%=1 TO 2:FOR J%=1 TO 3:C%=C%+1:NEXT J%,I%')
            assert s.get_variable(u'C%') == 6

    def test_for_errors(self):
        """NEXT without FOR; mismatched NEXT; string loop variable."""
        with Session() as s:
            assert s.execute(u'NEXT') == u'No FOR\n'
            assert s.execute(u'FOR I%=1 TO 2:NEXT J%') == u"Can't match FOR: J%\n"
            assert s.execute(u'FOR a$=1 TO 2') == u'Type mismatch\n'

    def test_repeat(self):
        """REPEAT UNTIL."""
        with Session() as s:
            output = self._run(s, u'10 I%=0', u'20 REPEAT I%=I%+1:UNTIL I%=5', u'30 PRINT I%')
        assert output == u'         5\n'

    def test_until_without_repeat(self):
        """UNTIL without REPEAT."""
        with Session() as s:
            assert s.execute(u'UNTIL TRUE') == u'No REPEAT\n'

    def test_while(self):
        """WHILE ENDWHILE."""
        with Session() as s:
            output = self._run(
                s, u'10 I%=0', u'20 WHILE I%<3', u'30 I%=I%+1', u'40 ENDWHILE', u'50 PRINT I%'
            )
        assert output == u'         3\n'

    def test_while_false(self):
        """A false WHILE skips the loop."""
        with Session() as s:
            assert s.execute(u'WHILE FALSE:PRINT "no":ENDWHILE:PRINT "yes"') == u'yes\n'
            output = self._run(
                s, u'10 WHILE FALSE', u'20 WHILE TRUE', u'30 PRINT "no"', u'40 ENDWHILE',
                u'50 ENDWHILE', u'60 PRINT "after"'
            )
            assert output == u'after\n'

    def test_while_errors(self):
        """Unmatched WHILE and ENDWHILE."""
        with Session() as s:
            assert s.execute(u'ENDWHILE') == u'No WHILE\n'
            assert self._run(s, u'10 WHILE FALSE') == u'Missing ENDWHILE at line 10\n'

    ###########################################################################
    # procedures and functions

    def test_proc_local(self):
        """PROC with parameters and LOCAL."""
        with Session() as s:
            output = self._run(
                s, u'10 x=1', u'20 PROCdouble(5)', u'30 PRINT x', u'40 END',
                u'100 DEF PROCdouble(x)', u'110 LOCAL y', u'120 y=x*2', u'130 PRINT y',
                u'140 ENDPROC'
            )
            assert output == u'        10\n         1\n'
            assert s.get_variable(u'x') == 1.
            assert s.get_variable(u'y') is None

    def test_fn_single_line(self):
        """Single-line DEF FN."""
        with Session() as s:
            output = self._run(
                s, u'10 PRINT FNsq(7)', u'20 PRINT FNgreet$("Ann")', u'30 END',
                u'40 DEF FNsq(n%)=n%*n%', u'50 DEF FNgreet$(n$)="Hi "+n$'
            )
        assert output == u'        49\nHi Ann\n'

    def test_fn_recursive(self):
        """Multi-line recursive FN."""
        with Session() as s:
            output = self._run(
                s, u'10 PRINT FNfact(5)', u'20 END',
                u'100 DEF FNfact(n%)', u'110 IF n%<=1 THEN =1', u'120 =n%*FNfact(n%-1)'
            )
            assert output == u'       120\n'
            assert s.get_variable(u'n%') is None

    def test_fn_in_direct_mode(self):
        """Functions defined in the program can be called in direct mode."""
        with Session() as s:
            s.execute(u'10 DEF FNtwice(a)=2*a')
            assert s.evaluate(u'FNtwice(4)') == 8.
            assert s.execute(u'PRINT FNtwice(1)') == u'         2\n'

    def test_def_skipped(self):
        """DEF met in sequence is skipped with the rest of its line."""
        with Session() as s:
            output = self._run(
                s, u'10 DEF PROCa:PRINT "in proc":ENDPROC', u'20 PRINT "main"'
            )
        assert output == u'main\n'

    def test_proc_errors(self):
        """Procedure errors."""
        with Session() as s:
            assert s.execute(u'PROCnone') == u'No such FN/PROC: PROCnone\n'
            assert s.execute(u'LOCAL a') == u'Not LOCAL\n'
            assert s.execute(u'ENDPROC') == u'No PROC\n'
            assert s.execute(u'=1') == u'No FN\n'
            output = self._run(s, u'10 PROCa(1,2)', u'20 END', u'30 DEF PROCa(x)', u'40 ENDPROC')
            assert output == u'Arguments at line 10\n'

    ###########################################################################
    # DATA

    def test_read_data(self):
        """READ, DATA and RESTORE."""
        with Session() as s:
            self._run(
                s, u'10 READ a%, b$, c', u'20 RESTORE 70', u'30 READ d$', u'40 RESTORE',
                u'50 READ e%', u'60 DATA 12, "hello, world", 2.5', u'70 DATA last'
            )
            assert s.get_variable(u'a%') == 12
            assert s.get_variable(u'b$') == u'hello, world'
            assert s.get_variable(u'c') == 2.5
            assert s.get_variable(u'd$') == u'last'
            assert s.get_variable(u'e%') == 12

    def test_read_errors(self):
        """Out of DATA and RESTORE to a missing line."""
        with Session() as s:
            assert self._run(s, u'10 READ a, b', u'20 DATA 1') == u'Out of DATA at line 10\n'
            s.execute(u'NEW')
            assert self._run(s, u'10 RESTORE 99') == u'No such line: 99 at line 10\n'

    ###########################################################################
    # errors

    def test_on_error(self):
        """ON ERROR with ERR and ERL."""
        with Session() as s:
            output = self._run(
                s, u'10 ON ERROR PRINT "Error ";ERR;" at ";ERL:END', u'20 PRINT 1/0'
            )
            assert output == u'Error 18 at 20\n'
            assert s.evaluate(u'ERR') == 18
            assert s.evaluate(u'ERL') == 20

    def test_on_error_continue(self):
        """Execution continues from the handler."""
        with Session() as s:
            output = self._run(
                s, u'10 ON ERROR PRINT "caught":GOTO 40', u'20 PRINT 1/0',
                u'30 PRINT "skipped"', u'40 PRINT "done"'
            )
        assert output == u'caught\ndone\n'

    def test_on_error_off(self):
        """ON ERROR OFF restores default handling."""
        with Session() as s:
            output = self._run(
                s, u'10 ON ERROR PRINT "caught":END', u'20 ON ERROR OFF', u'30 PRINT 1/0'
            )
        assert output == u'Division by zero at line 30\n'

    def test_error_report(self):
        """ERROR raises a user error; REPORT prints its message."""
        with Session() as s:
            output = self._run(
                s, u'10 ON ERROR REPORT:PRINT:PRINT ERR:END', u'20 ERROR 100, "Custom"'
            )
            assert output == u'Custom\n       100\n'
        with Session() as s:
            assert s.execute(u'ERROR 1, "Direct"') == u'Direct\n'

    ###########################################################################
    # commands

    def test_list(self):
        """LIST with ranges."""
        with Session() as s:
            for line in (u'10 PRINT "A"', u'20 PRINT "B"', u'30 PRINT "C"'):
                s.execute(line)
            assert s.execute(u'LIST') == u'10 PRINT "A"\n20 PRINT "B"\n30 PRINT "C"\n'
            assert s.execute(u'LIST 20') == u'20 PRINT "B"\n'
            assert s.execute(u'LIST 20,30') == u'20 PRINT "B"\n30 PRINT "C"\n'

    def test_delete_line(self):
        """A line number on its own deletes the line."""
        with Session() as s:
            s.execute(u'10 PRINT "A"')
            s.execute(u'20 PRINT "B"')
            s.execute(u'10')
            assert s.list_program() == [u'20 PRINT "B"']

    def test_new_old(self):
        """NEW erases the program; OLD recovers it."""
        with Session() as s:
            s.execute(u'10 PRINT "A"')
            s.execute(u'NEW')
            assert s.list_program() == []
            s.execute(u'OLD')
            assert s.list_program() == [u'10 PRINT "A"']

    def test_renumber(self):
        """RENUMBER updates line references."""
        with Session() as s:
            s.execute(u'1 PRINT "A"')
            s.execute(u'2 GOTO 1')
            s.execute(u'RENUMBER')
            assert s.list_program() == [u'10 PRINT "A"', u'20 GOTO 10']
            s.execute(u'RENUMBER 100,5')
            assert s.list_program() == [u'100 PRINT "A"', u'105 GOTO 100']

    def test_delete_range(self):
        """DELETE removes a range of lines."""
        with Session() as s:
            for line in (u'10 REM', u'20 REM', u'30 REM', u'40 REM'):
                s.execute(line)
            s.execute(u'DELETE 20,30')
            assert s.list_program() == [u'10 REM', u'40 REM']

    def test_run_from_line(self):
        """RUN with a start line."""
        with Session() as s:
            s.execute(u'10 PRINT "A"')
            s.execute(u'20 PRINT "B"')
            assert s.execute(u'RUN 20') == u'B\n'

    def test_trace(self):
        """TRACE ON shows line numbers."""
        with Session() as s:
            output = self._run(
                s, u'10 TRACE ON', u'20 PRINT "A"', u'30 TRACE OFF', u'40 PRINT "B"'
            )
        assert output == u'[20]A\n[30]B\n'

    def test_rem(self):
        """REM ignores the rest of the line."""
        with Session() as s:
            assert s.execute(u'REM hello:PRINT "x"') == u''

    def test_time(self):
        """TIME can be set."""
        with Session() as s:
            s.execute(u'TIME=1000')
            assert 1000 <= s.evaluate(u'TIME') < 1100

    def test_himem(self):
        """HIMEM can be lowered."""
        with Session() as s:
            s.execute(u'HIMEM=&7000')
            assert s.evaluate(u'HIMEM') == 0x7000
            assert s.execute(u'HIMEM=&100') == u'No room\n'

    def test_unimplemented_command(self):
        """Commands without an implementation are a Mistake."""
        with Session() as s:
            assert s.execute(u'AUTO').startswith(u'Mistake')


if __name__ == '__main__':
    run_tests()
