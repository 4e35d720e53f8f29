"""
BBC-BASIC test.tokeniser
unit tests for tokeniser and lister

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

from bbcbasic.basic.converter import tokenise, detokenise, Tokeniser, Lister
from bbcbasic.basic.base.codestream import TokenisedLine, Token
from bbcbasic.basic.base import codestream
from bbcbasic.basic.base import tokens as tk
from bbcbasic.basic.base import error
from tests.unit.utils import TestCase, run_tests


def kinds(text):
    """Kinds of the tokens in a line, without the end marker."""
    return [_t.kind for _t in tokenise(text).tokens[:-1]]


class TokeniserTest(TestCase):
    """Unit tests for tokenising and listing."""

    tag = u'tokeniser'

    def test_binary_format(self):
        """Encoding of a numbered line."""
        line = tokenise(u'10 PRINT "HELLO"')
        assert line.line_number == 10
        assert line.to_bytes() == b'\x8d\x0a\x00\xf1"HELLO"\x0d'

    def test_keyword_bytes(self):
        """Published keyword values."""
        assert tokenise(u'FOR').to_bytes() == b'\xe3\x0d'
        assert tokenise(u'GOTO').to_bytes() == b'\xe5\x0d'
        assert tokenise(u'PRINT 1 AND 2').to_bytes() == b'\xf1\x1c\x01\x00\x00\x00\x80\x1c\x02\x00\x00\x00\x0d'

    def test_extended_tokens(self):
        """Keywords from the extension tables use a prefix byte."""
        assert tokenise(u'SWAP A,B').to_bytes() == b'\xc8\x94A,B\x0d'
        assert tokenise(u'DELETE').to_bytes() == b'\xc7\x91\x0d'
        assert tokenise(u'ENDWHILE').tokens[0] == Token(codestream.EXTENDED, tk.ENDWHILE)

    def test_statement_forms(self):
        """Pseudo-variables have a separate token at the start of a statement."""
        assert tokenise(u'TIME=0').tokens[0].value == tk.TIME_ST
        assert tokenise(u'PRINT TIME').tokens[1].value == tk.TIME
        assert tokenise(u'A=1:HIMEM=&7000').tokens[4].value == tk.HIMEM_ST
        assert tokenise(u'IF 1 THEN PAGE=&2000').tokens[3].value == tk.PAGE_ST

    def test_literals(self):
        """Integer, hex and real literals."""
        line = tokenise(u'A=5')
        assert line.tokens[2] == Token(codestream.INTEGER, 5)
        assert tokenise(u'A=&FF').tokens[2] == Token(codestream.HEX_INTEGER, 255)
        assert tokenise(u'A=&FFFFFFFF').tokens[2] == Token(codestream.HEX_INTEGER, -1)
        assert tokenise(u'A=1.5').tokens[2] == Token(codestream.REAL, u'1.5')
        assert tokenise(u'A=1E10').tokens[2] == Token(codestream.REAL, u'1E10')
        assert tokenise(u'A=3000000000').tokens[2] == Token(codestream.REAL, u'3000000000')
        assert tokenise(u'A=1.5').to_bytes() == b'A=\x1d\x031.5\x0d'
        with self.assertRaises(error.BASICError) as cm:
            tokenise(u'A=&100000000')
        assert cm.exception.err == error.BAD_HEX

    def test_line_number_references(self):
        """Numbers after GOTO, GOSUB, THEN, ELSE and RESTORE are line numbers."""
        assert kinds(u'GOTO 100') == [codestream.KEYWORD, codestream.LINE_NUMBER]
        assert kinds(u'ON X GOSUB 10,20') == [
            codestream.KEYWORD, codestream.IDENTIFIER, codestream.KEYWORD,
            codestream.LINE_NUMBER, codestream.SEPARATOR, codestream.LINE_NUMBER
        ]
        assert kinds(u'IF A THEN 20 ELSE 30')[3] == codestream.LINE_NUMBER
        assert kinds(u'PRINT 100') == [codestream.KEYWORD, codestream.INTEGER]

    def test_strings(self):
        """Quoted strings with doubled quotes."""
        line = tokenise(u'PRINT "say ""hi"""')
        assert line.tokens[1] == Token(codestream.STRING, u'say "hi"')
        with self.assertRaises(error.BASICError) as cm:
            tokenise(u'PRINT "open')
        assert cm.exception.err == error.SYNTAX_ERROR

    def test_rem_and_data_text(self):
        """Text after REM and DATA is kept verbatim."""
        line = tokenise(u'REM PRINT "x" : GOTO 10')
        assert line.tokens[1] == Token(codestream.TEXT, u' PRINT "x" : GOTO 10')
        line = tokenise(u'DATA 1, two ,"3"')
        assert line.tokens[1] == Token(codestream.TEXT, u' 1, two ,"3"')

    def test_wide_characters(self):
        """Characters beyond a byte are rejected in strings and verbatim text."""
        assert tokenise(u'PRINT "\xa3"').to_bytes() == b'\xf1"\xa3"\x0d'
        for text in (u'10 PRINT "\u20ac"', u'REM \u20ac', u'DATA \u20ac'):
            with self.assertRaises(error.BASICError) as cm:
                tokenise(text)
            assert cm.exception.err == error.SYNTAX_ERROR
            assert cm.exception.get_message() == u'Syntax error: Bad character &20AC'

    def test_leading_zeros(self):
        """Integers written with leading zeros keep their spelling."""
        assert tokenise(u'A=007').tokens[2] == Token(codestream.REAL, u'007')
        assert tokenise(u'A=0').tokens[2] == Token(codestream.INTEGER, 0)
        assert detokenise(tokenise(u'A=007')) == u'A=007'

    def test_keyword_case(self):
        """Keywords match in any case as whole words; identifiers keep their case."""
        line = tokenise(u'print Total')
        assert line.tokens[0] == Token(codestream.KEYWORD, tk.PRINT)
        assert line.tokens[1] == Token(codestream.IDENTIFIER, u'Total')
        line = tokenise(u'printer=1')
        assert line.tokens[0] == Token(codestream.IDENTIFIER, u'printer')

    def test_keyword_prefixes(self):
        """Upper-case keywords are recognised at the start of a word."""
        line = tokenise(u'PROCfoo')
        assert line.tokens[0] == Token(codestream.KEYWORD, tk.PROC)
        assert line.tokens[1] == Token(codestream.IDENTIFIER, u'foo')
        line = tokenise(u'PRINTA')
        assert line.tokens[0] == Token(codestream.KEYWORD, tk.PRINT)
        assert line.tokens[1] == Token(codestream.IDENTIFIER, u'A')
        line = tokenise(u'X=FNsquare(2)')
        assert line.tokens[2] == Token(codestream.KEYWORD, tk.FN)
        assert line.tokens[3] == Token(codestream.IDENTIFIER, u'square')

    def test_sigils(self):
        """Sigils belong to the name."""
        line = tokenise(u'A%=B$')
        assert line.tokens[0] == Token(codestream.IDENTIFIER, u'A%')
        assert line.tokens[2] == Token(codestream.IDENTIFIER, u'B$')
        assert tokenise(u'@%=10').tokens[0] == Token(codestream.IDENTIFIER, u'@%')
        assert tokenise(u'A$=CHR$65').tokens[2] == Token(codestream.KEYWORD, tk.CHR)

    def test_bad_line_number(self):
        """Line numbers above 32767 are refused."""
        with self.assertRaises(error.BASICError):
            tokenise(u'40000 PRINT')

    def test_decode(self):
        """Binary lines decode to the same tokens."""
        line = tokenise(u'10 IF A%<>2 THEN GOTO 100 ELSE PRINT "X";&1F,1.25:REM end')
        assert TokenisedLine.from_bytes(line.to_bytes()) == line

    def test_decode_errors(self):
        """Truncated binary lines are bad programs."""
        with self.assertRaises(error.BASICError) as cm:
            TokenisedLine.from_bytes(b'\x1c\x01')
        assert cm.exception.err == error.BAD_PROGRAM
        with self.assertRaises(error.BASICError) as cm:
            TokenisedLine.from_bytes(b'"abc\x0d')
        assert cm.exception.err == error.BAD_PROGRAM

    def test_round_trip(self):
        """Listing a tokenised line gives back the source."""
        for text in (
                u'10 PRINT "HELLO"',
                u'20 GOTO 10',
                u'A%=2+3*4',
                u'FOR I%=10 TO 1 STEP -1',
                u'IF X>0 THEN PRINT "POS" ELSE PRINT "NEG"',
                u'PRINT "A";B$,C',
                u'DEF PROCfoo(A%)',
                u'REM hello  world',
                u'X=&FF',
                u'Y=1.5E3',
                u'DATA 1,2, three',
                u'NEXT',
                u'A$=LEFT$(B$,2)',
                u'PRINT ~255',
                u'ON ERROR PRINT "oops":END',
                u'SWAP A,B',
                u'WHILE A<10:A=A+1:ENDWHILE',
                u'B%=007+00',
            ):
            assert detokenise(tokenise(text)) == text, (text, detokenise(tokenise(text)))

    def test_round_trip_modulo_case(self):
        """Keywords list in upper case, blanks are normalised."""
        assert detokenise(tokenise(u'10 print  "hi"')) == u'10 PRINT "hi"'
        assert detokenise(tokenise(u'for i = 1 to 3')) == u'FOR i=1 TO 3'

    def test_detokenise_bytes(self):
        """The lister accepts the binary format."""
        assert detokenise(b'\x8d\x14\x00\xe5\x8d\x0a\x00\x0d') == u'20 GOTO 10'

    def test_instances(self):
        """Tokeniser and lister classes."""
        line = Tokeniser().tokenise_line(u'LIST 10,20')
        assert Lister().detokenise_line(line) == u'LIST 10,20'


if __name__ == '__main__':
    run_tests()
