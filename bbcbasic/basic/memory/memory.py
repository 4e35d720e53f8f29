"""
BBC-BASIC - memory.py
Emulated address space and allocation ledger

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

import binascii
import logging
import struct
from collections import namedtuple

import numpy

from ..base import error


# memory map
MEMORY_SIZE = 0x8000
ZERO_PAGE_START = 0x0000
ZERO_PAGE_SIZE = 0x0100
STACK_START = 0x0100
STACK_SIZE = 0x0100
# writes below this address are refused
PROTECTED_END = 0x0200
# resident integer variables @%, A%..Z%
RESIDENT_START = 0x0400
# start of user program and variables
PAGE = 0x1900
# end of user memory
HIMEM = 0x8000

# allocation purposes
PROGRAM = u'program'
VARIABLES = u'variables'
STACK = u'stack'
SYSTEM = u'system'
PURPOSES = (PROGRAM, VARIABLES, STACK, SYSTEM)


Allocation = namedtuple('Allocation', ['start', 'size', 'purpose'])


class MemoryManager(object):
    """Byte-addressable memory with a bump allocator."""

    def __init__(self, size=MEMORY_SIZE, page=PAGE, himem=HIMEM):
        """Initialise memory."""
        self.size = size
        self.page = page
        self.himem = himem
        self._buffer = numpy.zeros(size, dtype=numpy.uint8)
        self._allocations = []
        # first free byte above the allocated area
        self.top = page

    def __repr__(self):
        """Hex dump of allocated user memory (for debugging)."""
        output = []
        for alloc in self._allocations:
            output.append('%04X+%04X %-9s %s' % (
                alloc.start, alloc.size, alloc.purpose,
                binascii.hexlify(self.read_bytes(alloc.start, min(alloc.size, 32))).decode('ascii')
            ))
        output.append('TOP=%04X HIMEM=%04X' % (self.top, self.himem))
        return '\n'.join(output)

    ###########################################################################
    # byte access

    def _check(self, addr):
        """Raise Invalid address if outside the address space."""
        if not (0 <= addr < self.size):
            raise error.BASICError(error.INVALID_ADDRESS, detail=addr & 0xffffffff)

    def peek(self, addr):
        """Read a byte."""
        self._check(addr)
        return int(self._buffer[addr])

    def poke(self, addr, value):
        """Write a byte; the zero page and stack are off limits."""
        self._check(addr)
        if addr < PROTECTED_END:
            raise error.BASICError(error.INVALID_ADDRESS, detail=addr)
        self._buffer[addr] = value & 0xff

    def peek_word(self, addr):
        """Read a little-endian 16-bit word."""
        return self.peek(addr) | (self.peek(addr+1) << 8)

    def poke_word(self, addr, value):
        """Write a little-endian 16-bit word."""
        self.poke(addr, value & 0xff)
        self.poke(addr+1, (value >> 8) & 0xff)

    def peek_long(self, addr):
        """Read a signed little-endian 32-bit value."""
        value = self.peek_word(addr) | (self.peek_word(addr+2) << 16)
        return struct.unpack('<i', struct.pack('<I', value))[0]

    def poke_long(self, addr, value):
        """Write a 32-bit value in little-endian order."""
        value &= 0xffffffff
        self.poke_word(addr, value & 0xffff)
        self.poke_word(addr+2, value >> 16)

    def read_bytes(self, addr, length):
        """Read a block of memory."""
        self._check(addr)
        if length:
            self._check(addr + length - 1)
        return self._buffer[addr:addr+length].tobytes()

    def write_bytes(self, addr, data):
        """Write a block of memory."""
        self._check(addr)
        if data:
            self._check(addr + len(data) - 1)
        if addr < PROTECTED_END:
            raise error.BASICError(error.INVALID_ADDRESS, detail=addr)
        self._buffer[addr:addr+len(data)] = numpy.frombuffer(bytes(data), dtype=numpy.uint8)

    ###########################################################################
    # allocation

    def allocate(self, size, purpose):
        """Reserve a block at the top of used memory; return its address."""
        if purpose not in PURPOSES:
            raise ValueError('Unknown allocation purpose %r' % (purpose,))
        if size < 0:
            raise error.BASICError(error.BAD_DIM)
        if size > self.himem - self.top:
            raise error.BASICError(error.NO_ROOM)
        start = self.top
        self._allocations.append(Allocation(start, size, purpose))
        self.top += size
        return start

    def free_allocations(self, purpose):
        """Free all blocks of the given purpose and rescan for the top of memory."""
        self._allocations = [_a for _a in self._allocations if _a.purpose != purpose]
        self.top = max(
            (_a.start + _a.size for _a in self._allocations), default=self.page
        )

    def get_allocations(self, purpose=None):
        """List the live allocations, optionally of one purpose only."""
        return [_a for _a in self._allocations if purpose is None or _a.purpose == purpose]

    def available_memory(self):
        """Number of bytes free between the top of used memory and HIMEM."""
        return self.himem - self.top

    @property
    def lomem(self):
        """Start of variable space: end of the program image."""
        return max(
            (_a.start + _a.size for _a in self._allocations if _a.purpose == PROGRAM),
            default=self.page
        )

    def clear_user_memory(self):
        """Zero the user area from PAGE to HIMEM."""
        self._buffer[self.page:self.himem] = 0

    def set_himem(self, addr):
        """Move the end of user memory."""
        if not (self.top <= addr <= self.size):
            raise error.BASICError(error.NO_ROOM)
        logging.debug('HIMEM moved from &%04X to &%04X', self.himem, addr)
        self.himem = addr
