"""
BBC-BASIC - console.py
Text console with output capture and keyboard buffer

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

import logging
import time
from collections import deque

from .base import error


class Console(object):
    """Text console: tracks the cursor, captures output and buffers input."""

    def __init__(self, output_stream=None, input_stream=None):
        """Initialise console."""
        # echo to this stream if given
        self._output_stream = output_stream
        # read lines and keys from this stream when the buffers are empty
        self._input_stream = input_stream
        self._captured = []
        # queued input lines and keystrokes
        self._lines = deque()
        self._keys = deque()
        self.column = 0
        self.row = 0
        # characters since the last newline
        self.count = 0

    ##########################################################################
    # output

    def write(self, s):
        """Write a string at the current position."""
        if not s:
            return
        for c in s:
            if c == u'\n':
                self.column = 0
                self.count = 0
                self.row += 1
            elif c == u'\r':
                self.column = 0
            else:
                self.column += 1
                self.count += 1
        self._captured.append(s)
        if self._output_stream:
            self._output_stream.write(s)
            self._output_stream.flush()

    def write_line(self, s=u''):
        """Write a string and end with a newline."""
        self.write(s + u'\n')

    def start_line(self):
        """Move to the start of the next line, unless at the start of this one."""
        if self.column:
            self.write_line()

    def clear(self):
        """Clear the screen and home the cursor."""
        logging.debug('Screen cleared')
        self.column = 0
        self.row = 0
        self.count = 0

    def get_output(self):
        """Return and discard the captured output."""
        output = u''.join(self._captured)
        self._captured = []
        return output

    ##########################################################################
    # input

    def feed_lines(self, *lines):
        """Queue lines for INPUT."""
        self._lines.extend(lines)

    def feed_keys(self, keys):
        """Queue keystrokes for GET and INKEY."""
        self._keys.extend(keys)

    def read_line(self, prompt=u''):
        """Show a prompt and read a line; raise Escape at end of input."""
        self.write(prompt)
        if self._lines:
            line = self._lines.popleft()
            self.write_line(line)
            return line
        if self._input_stream:
            line = self._input_stream.readline()
            if line:
                # the terminal has echoed the line
                self.column, self.count = 0, 0
                self.row += 1
                return line.rstrip(u'\r\n')
        raise error.BASICError(error.ESCAPE)

    def get_char(self):
        """Wait for a keystroke; raise Escape at end of input."""
        if self._keys:
            return self._keys.popleft()
        if self._input_stream:
            char = self._input_stream.read(1)
            if char:
                return char
        raise error.BASICError(error.ESCAPE)

    def inkey(self, centiseconds):
        """Keystroke from the buffer within a time limit, empty if none."""
        if self._keys:
            return self._keys.popleft()
        if centiseconds:
            time.sleep(centiseconds / 100.)
        if self._keys:
            return self._keys.popleft()
        return u''
