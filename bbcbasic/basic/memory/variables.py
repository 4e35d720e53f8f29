"""
BBC-BASIC - variables.py
Scalar and array variable store

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

import binascii

import numpy

from ..base import error
from ..base.tokens import UPPERCASE
from . import memory as mem


# variable types, by sigil
INTEGER = u'%'
REAL = u''
STRING = u'$'
TYPES = (INTEGER, REAL, STRING)

# limits
MAX_STRING = 255
MIN_INT = -0x80000000
MAX_INT = 0x7fffffff

# bytes used in variable memory per element
SIZES = {INTEGER: 4, REAL: 5, STRING: 4}
# bytes used per variable for the name record and link
RECORD_OVERHEAD = 4

# resident integer variables live in page 4
RESIDENT = dict(
    (_name + u'%', mem.RESIDENT_START + 4*_i) for _i, _name in enumerate(u'@' + UPPERCASE)
)


def type_of(name):
    """Variable type from its sigil."""
    sigil = name[-1:]
    if sigil in (INTEGER, STRING):
        return sigil
    return REAL

def check_int(value):
    """Raise Too big if the value is outside the 32-bit range."""
    if not (MIN_INT <= value <= MAX_INT):
        raise error.BASICError(error.TOO_BIG)
    return value


class Array(object):
    """Multidimensional array with a flat value buffer."""

    def __init__(self, dimensions, vartype):
        """Allocate the buffer."""
        self.dimensions = tuple(dimensions)
        self.type = vartype
        length = 1
        for size in self.dimensions:
            length *= size
        if vartype == INTEGER:
            self.buffer = numpy.zeros(length, dtype=numpy.int32)
        elif vartype == REAL:
            self.buffer = numpy.zeros(length, dtype=numpy.float64)
        else:
            self.buffer = numpy.full(length, u'', dtype=object)

    def __len__(self):
        """Number of elements."""
        return len(self.buffer)

    def index(self, indices):
        """Linear offset for an index tuple, walking the dimensions in reverse."""
        if len(indices) != len(self.dimensions):
            raise error.BASICError(error.SUBSCRIPT)
        offset, multiplier = 0, 1
        for index, size in reversed(list(zip(indices, self.dimensions))):
            if not (0 <= index < size):
                raise error.BASICError(error.SUBSCRIPT)
            offset += index * multiplier
            multiplier *= size
        return offset

    def get(self, offset):
        """Python value at offset."""
        value = self.buffer[offset]
        if self.type == INTEGER:
            return int(value)
        elif self.type == REAL:
            return float(value)
        return value

    def to_list(self):
        """Nested list of values."""
        def _nest(flat, dims):
            if len(dims) == 1:
                return flat
            step = len(flat) // dims[0]
            return [_nest(flat[_i*step:(_i+1)*step], dims[1:]) for _i in range(dims[0])]
        return _nest([self.get(_i) for _i in range(len(self))], self.dimensions)


class Variables(object):
    """Name-keyed store of typed variables."""

    def __init__(self, memory):
        """Initialise the store."""
        self._memory = memory
        self.clear()

    def __repr__(self):
        """Debugging representation of the variable table."""
        lines = [u'%s: %r' % (_k, _v) for _k, _v in sorted(self._scalars.items())]
        lines += [
            u'%s%r: %s' % (_k, _v.dimensions, binascii.hexlify(_v.buffer.tobytes()[:32]))
            for _k, _v in sorted(self._arrays.items())
            if _v.type != STRING
        ]
        return u'\n'.join(lines)

    def clear(self):
        """Remove all variables except the resident integers."""
        self._scalars = {}
        self._arrays = {}
        self._memory.free_allocations(mem.VARIABLES)

    def __contains__(self, name):
        """Scalar variable exists."""
        return name in self._scalars or name in RESIDENT

    def _reserve(self, name, nbytes):
        """Account for a new variable in memory."""
        return self._memory.allocate(RECORD_OVERHEAD + len(name) + nbytes, mem.VARIABLES)

    def _set(self, name, value, vartype):
        """Store a scalar, creating it if needed."""
        if name not in self._scalars:
            self._reserve(name, SIZES[vartype])
        self._scalars[name] = value

    ###########################################################################
    # scalars

    def get_int_var(self, name):
        """Integer value of a variable, None if not found or not an integer."""
        if name in RESIDENT:
            return self._memory.peek_long(RESIDENT[name])
        value = self._scalars.get(name)
        if isinstance(value, int):
            return value
        return None

    def set_int_var(self, name, value):
        """Set an integer variable."""
        check_int(value)
        if name in RESIDENT:
            self._memory.poke_long(RESIDENT[name], value)
        else:
            self._set(name, int(value), INTEGER)

    def get_real_var(self, name):
        """Real value of a variable, None if not found or not a real."""
        value = self._scalars.get(name)
        if isinstance(value, float):
            return value
        return None

    def set_real_var(self, name, value):
        """Set a real variable."""
        self._set(name, float(value), REAL)

    def get_string_var(self, name):
        """String value of a variable, None if not found or not a string."""
        value = self._scalars.get(name)
        if isinstance(value, str):
            return value
        return None

    def set_string_var(self, name, value):
        """Set a string variable."""
        if len(value) > MAX_STRING:
            raise error.BASICError(error.STRING_TOO_LONG)
        self._set(name, value, STRING)

    def get_scalar(self, name):
        """Value of a variable of the type its sigil names; None if not found."""
        vartype = type_of(name)
        if vartype == INTEGER:
            return self.get_int_var(name)
        elif vartype == STRING:
            return self.get_string_var(name)
        return self.get_real_var(name)

    def set_scalar(self, name, value):
        """Set a variable of the type its sigil names."""
        vartype = type_of(name)
        if vartype == INTEGER:
            self.set_int_var(name, value)
        elif vartype == STRING:
            self.set_string_var(name, value)
        else:
            self.set_real_var(name, value)

    def delete_scalar(self, name):
        """Remove a scalar binding; used to restore LOCAL variables."""
        self._scalars.pop(name, None)

    ###########################################################################
    # arrays

    def dim_array(self, name, dimensions, vartype=None):
        """Create an array; replaces any array of the same name."""
        if vartype is None:
            vartype = type_of(name)
        if not dimensions:
            raise error.BASICError(error.BAD_DIM, detail=name)
        if any(_size < 1 for _size in dimensions):
            raise error.BASICError(error.BAD_DIM, detail=name)
        length = 1
        for size in dimensions:
            length *= size
        # raises No room before any buffer is built
        self._reserve(name, length * SIZES[vartype] + 2*len(dimensions))
        array = Array(dimensions, vartype)
        self._arrays[name] = array
        return array

    def has_array(self, name):
        """Array of this name exists."""
        return name in self._arrays

    def get_array(self, name):
        """Array object; raise Array error if not dimensioned."""
        try:
            return self._arrays[name]
        except KeyError:
            raise error.BASICError(error.ARRAY, detail=name)

    def calculate_index(self, name, indices):
        """Linear offset of an element; validates arity and bounds."""
        return self.get_array(name).index(indices)

    def get_array_element(self, name, indices):
        """Value of an array element."""
        array = self.get_array(name)
        return array.get(array.index(indices))

    def set_array_element(self, name, indices, value):
        """Set an array element."""
        array = self.get_array(name)
        offset = array.index(indices)
        if array.type == STRING:
            if not isinstance(value, str):
                raise error.BASICError(error.TYPE_MISMATCH)
            if len(value) > MAX_STRING:
                raise error.BASICError(error.STRING_TOO_LONG)
        elif isinstance(value, str):
            raise error.BASICError(error.TYPE_MISMATCH)
        elif array.type == INTEGER:
            value = check_int(int(value))
        array.buffer[offset] = value

    ###########################################################################
    # byte blocks

    def dim_block(self, name, size):
        """DIM name size: reserve size+1 bytes and store the address in the variable."""
        if size < -1:
            raise error.BASICError(error.BAD_DIM, detail=name)
        if type_of(name) == STRING:
            raise error.BASICError(error.TYPE_MISMATCH)
        address = self._memory.allocate(size + 1, mem.VARIABLES)
        self.set_scalar(name, address)
        return address
