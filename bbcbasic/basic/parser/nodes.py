"""
BBC-BASIC - nodes.py
Expression and statement trees

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

from collections import namedtuple


###############################################################################
# expressions

IntegerLiteral = namedtuple('IntegerLiteral', ['value'])
RealLiteral = namedtuple('RealLiteral', ['value'])
StringLiteral = namedtuple('StringLiteral', ['value'])
Variable = namedtuple('Variable', ['name'])
ArrayAccess = namedtuple('ArrayAccess', ['name', 'indices'])
# built-in function, by keyword
FunctionCall = namedtuple('FunctionCall', ['name', 'args'])
# user-defined function FNname
FnCall = namedtuple('FnCall', ['name', 'args'])
BinaryOp = namedtuple('BinaryOp', ['left', 'op', 'right'])
UnaryOp = namedtuple('UnaryOp', ['op', 'operand'])
# ?address (byte) and !address (word)
Indirection = namedtuple('Indirection', ['op', 'address'])

LITERALS = (IntegerLiteral, RealLiteral, StringLiteral)
# expressions that can be assigned to
TARGETS = (Variable, ArrayAccess, Indirection)


###############################################################################
# print and input items

Tab = namedtuple('Tab', ['column', 'row'])
Spc = namedtuple('Spc', ['count'])
Separator = namedtuple('Separator', ['char'])
# ~ switches numbers to hexadecimal
Hex = namedtuple('Hex', [])


###############################################################################
# statements

Empty = namedtuple('Empty', [])
Assignment = namedtuple('Assignment', ['name', 'expression'])
ArrayAssignment = namedtuple('ArrayAssignment', ['name', 'indices', 'expression'])
IndirectAssignment = namedtuple('IndirectAssignment', ['op', 'address', 'expression'])
# TIME=, PAGE=, HIMEM=, LOMEM=, PTR=
PseudoAssignment = namedtuple('PseudoAssignment', ['name', 'expression'])
Print = namedtuple('Print', ['items'])
Input = namedtuple('Input', ['line', 'items'])
For = namedtuple('For', ['name', 'start', 'end', 'step'])
Next = namedtuple('Next', ['names'])
If = namedtuple('If', ['condition', 'then_branch', 'else_branch'])
Goto = namedtuple('Goto', ['target'])
Gosub = namedtuple('Gosub', ['target'])
Return = namedtuple('Return', [])
OnGoto = namedtuple('OnGoto', ['selector', 'targets', 'else_branch'])
OnGosub = namedtuple('OnGosub', ['selector', 'targets', 'else_branch'])
Dim = namedtuple('Dim', ['items'])
DimArray = namedtuple('DimArray', ['name', 'dimensions'])
DimBlock = namedtuple('DimBlock', ['name', 'size'])
Rem = namedtuple('Rem', ['text'])
End = namedtuple('End', [])
Stop = namedtuple('Stop', [])
Quit = namedtuple('Quit', [])
ProcCall = namedtuple('ProcCall', ['name', 'args'])
DefProc = namedtuple('DefProc', ['name', 'params'])
DefFn = namedtuple('DefFn', ['name', 'params'])
# =expr ending a function body
FnReturn = namedtuple('FnReturn', ['expression'])
EndProc = namedtuple('EndProc', [])
Local = namedtuple('Local', ['names'])
Data = namedtuple('Data', ['values'])
Read = namedtuple('Read', ['targets'])
Restore = namedtuple('Restore', ['target'])
Repeat = namedtuple('Repeat', [])
Until = namedtuple('Until', ['condition'])
While = namedtuple('While', ['condition'])
EndWhile = namedtuple('EndWhile', [])
OnError = namedtuple('OnError', ['statements'])
OnErrorOff = namedtuple('OnErrorOff', [])
Error = namedtuple('Error', ['number', 'message'])
Report = namedtuple('Report', [])
Clear = namedtuple('Clear', [])
Swap = namedtuple('Swap', ['first', 'second'])
Trace = namedtuple('Trace', ['on'])
# RUN, LIST, NEW, OLD, DELETE, RENUMBER, LOAD, SAVE, CHAIN, AUTO, EDIT
Command = namedtuple('Command', ['keyword', 'args'])
# statements that reach the machine boundary: graphics, sound, VDU, OSCLI, CALL
OsCall = namedtuple('OsCall', ['keyword', 'args'])
