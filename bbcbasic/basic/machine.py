"""
BBC-BASIC - machine.py
Clock and operating system boundary

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

import datetime
import logging
import time

from .base import error


# VDU codes that move the text cursor or clear the screen
VDU_NEWLINE = 10
VDU_CLEAR = 12
VDU_RETURN = 13


class Machine(object):
    """Operating system calls, as far as they are emulated."""

    def __init__(self, console):
        """Initialise the machine."""
        self._console = console
        self._start = datetime.datetime.now()
        # centiseconds added by TIME=
        self.time_offset = 0
        self._calls = {
            u'CLS': self._cls,
            u'MODE': self._mode,
            u'VDU': self._vdu,
            u'WAIT': self._wait,
        }

    def get_time(self):
        """Centiseconds since start, as a 32-bit value."""
        diff = datetime.datetime.now() - self._start
        centis = diff.days * 8640000 + diff.seconds * 100 + diff.microseconds // 10000
        value = (centis + self.time_offset) & 0xffffffff
        return value - 0x100000000 if value > 0x7fffffff else value

    def set_time(self, value):
        """Set the centisecond clock."""
        self.time_offset += value - self.get_time()

    def call(self, keyword, args):
        """Perform a statement at the machine boundary."""
        try:
            handler = self._calls[keyword]
        except KeyError:
            logging.warning('%s statement not implemented.', keyword)
            return
        handler(args)

    def function_(self, name):
        """Boundary-only function: not available."""
        logging.warning('%s function not implemented.', name)
        raise error.BASICError(error.MISTAKE, detail=name)

    def _cls(self, args):
        """CLS: clear the text screen."""
        self._console.clear()

    def _mode(self, args):
        """MODE: screen modes are not emulated beyond clearing the screen."""
        self._console.clear()

    def _vdu(self, args):
        """VDU: printable codes and newlines go to the console."""
        for code in args:
            code &= 0xff
            if code == VDU_CLEAR:
                self._console.clear()
            elif code == VDU_NEWLINE:
                self._console.write(u'\n')
            elif code == VDU_RETURN:
                self._console.write(u'\r')
            elif 32 <= code < 127:
                self._console.write(chr(code))
            else:
                logging.warning('VDU %d not implemented.', code)

    def _wait(self, args):
        """WAIT [centiseconds]."""
        if args:
            time.sleep(max(args[0], 0) / 100.)
