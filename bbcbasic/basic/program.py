"""
BBC-BASIC - program.py
Program store

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

import binascii
import bisect
import logging

from .base import error
from .base import codestream
from .base.codestream import Token, TokenisedLine
from .memory import memory as mem


# highest storable line number
MAX_LINE_NUMBER = 32767
# marker after the last line in the program image
END_OF_PROGRAM = b'\xff'


class Program(object):
    """BASIC program: tokenised lines keyed by line number."""

    def __init__(self, memory):
        """Initialise program."""
        self._memory = memory
        self.erase()

    def __repr__(self):
        """Return a marked-up hex dump of the program (for debugging)."""
        output = []
        for number in self.line_numbers:
            output.append('[%05d] %s' % (
                number, binascii.hexlify(self._lines[number]).decode('ascii')
            ))
        return '\n'.join(output)

    def __len__(self):
        """Number of stored lines."""
        return len(self.line_numbers)

    def __contains__(self, line_number):
        """Line exists in program."""
        return line_number in self._lines

    def erase(self):
        """Erase the program from memory."""
        self._lines = {}
        self.line_numbers = []
        # execution cursor
        self.running = False
        self._current = None
        self._write_image(END_OF_PROGRAM)

    clear = erase

    def is_empty(self):
        """No lines are stored."""
        return not self.line_numbers

    ###########################################################################
    # editing

    def store_line(self, line):
        """Store a numbered TokenisedLine; an empty body deletes the line."""
        number = line.line_number
        if number is None or not (0 <= number <= MAX_LINE_NUMBER):
            raise error.BASICError(error.SYNTAX_ERROR, detail=u'Bad line number')
        if all(_t.kind == codestream.END_OF_LINE for _t in line.tokens):
            self.delete_line(number)
            return
        lines = dict(self._lines)
        lines[number] = line.to_bytes()
        self._commit(lines)

    def delete_line(self, line_number):
        """Delete a line; return True if it existed."""
        if line_number not in self._lines:
            return False
        lines = dict(self._lines)
        del lines[line_number]
        self._commit(lines)
        return True

    def delete_range(self, from_line, to_line):
        """Delete all lines in an inclusive range."""
        lines = dict(
            (_n, _bytes) for _n, _bytes in self._lines.items()
            if not from_line <= _n <= to_line
        )
        doomed = len(self._lines) - len(lines)
        self._commit(lines)
        return doomed

    def renumber(self, start=10, step=10):
        """Renumber all lines and rewrite inline line-number references."""
        if step <= 0 or start < 0:
            raise error.BASICError(error.SYNTAX_ERROR)
        if self.line_numbers and start + step * (len(self.line_numbers)-1) > MAX_LINE_NUMBER:
            raise error.BASICError(error.SYNTAX_ERROR, detail=u'Bad line number')
        old_to_new = dict(
            (_old, start + _i*step) for _i, _old in enumerate(self.line_numbers)
        )
        new_lines = {}
        for old in self.line_numbers:
            line = self.get_line(old)
            tokens = []
            for token in line.tokens:
                if token.kind == codestream.LINE_NUMBER:
                    try:
                        token = Token(codestream.LINE_NUMBER, old_to_new[token.value])
                    except KeyError:
                        logging.warning('Failed at line %d: no line %d', old, token.value)
                tokens.append(token)
            new_lines[old_to_new[old]] = TokenisedLine(old_to_new[old], tuple(tokens)).to_bytes()
        self._commit(new_lines)
        return old_to_new

    def _commit(self, lines):
        """Replace the stored lines if their image fits below HIMEM; raise No room if not."""
        numbers = sorted(lines)
        image = b''.join(lines[_n] for _n in numbers) + END_OF_PROGRAM
        # program and variable space are rebuilt from PAGE upwards
        floor = max(
            (_a.start + _a.size for _a in self._memory.get_allocations()
            if _a.purpose not in (mem.PROGRAM, mem.VARIABLES)),
            default=self._memory.page
        )
        if len(image) > self._memory.himem - floor:
            raise error.BASICError(error.NO_ROOM)
        self._lines = lines
        self.line_numbers = numbers
        self._write_image(image)

    def _write_image(self, image):
        """Write the program image at PAGE and account for it in memory."""
        # the image grows into variable space, which is lost
        self._memory.free_allocations(mem.VARIABLES)
        self._memory.free_allocations(mem.PROGRAM)
        self._memory.allocate(len(image), mem.PROGRAM)
        self._memory.write_bytes(self._memory.page, image)

    ###########################################################################
    # retrieval

    def get_line(self, line_number):
        """Decoded TokenisedLine, or None if absent."""
        try:
            return TokenisedLine.from_bytes(self._lines[line_number])
        except KeyError:
            return None

    def get_bytes(self, line_number):
        """Raw tokenised bytes of a line, or None if absent."""
        return self._lines.get(line_number)

    def get_line_numbers(self):
        """Line numbers in ascending order."""
        return list(self.line_numbers)

    def list(self, from_line=None, to_line=None):
        """Stored lines in ascending order as (line number, TokenisedLine) pairs."""
        return [
            (_n, self.get_line(_n)) for _n in self.line_numbers
            if (from_line is None or _n >= from_line) and (to_line is None or _n <= to_line)
        ]

    ###########################################################################
    # execution cursor

    def start_execution(self, line_number=None):
        """Set the cursor to the given or the first line; return it or None if empty."""
        self.running = True
        if line_number is None:
            self._current = self.line_numbers[0] if self.line_numbers else None
        else:
            self.goto_line(line_number)
        return self._current

    def stop_execution(self):
        """Clear the cursor."""
        self.running = False
        self._current = None

    def get_current_line(self):
        """Line number under the cursor, None if not running."""
        return self._current

    def goto_line(self, line_number):
        """Move the cursor; raise No such line if absent."""
        if line_number not in self._lines:
            raise error.BASICError(error.NO_SUCH_LINE, detail=line_number)
        self._current = line_number
        return line_number

    def next_line(self):
        """Advance the cursor to the following line; return it or None at the end."""
        self._current = self.line_after(self._current)
        return self._current

    def line_after(self, line_number):
        """Number of the line following the given one, None if last."""
        if line_number is None:
            return None
        index = bisect.bisect_right(self.line_numbers, line_number)
        if index < len(self.line_numbers):
            return self.line_numbers[index]
        return None
