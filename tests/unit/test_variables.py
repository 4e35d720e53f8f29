"""
BBC-BASIC test.variables
unit tests for the variable store

(c) 2026 The BBC-BASIC authors
This file is released under the GNU GPL version 3 or later.
"""

from bbcbasic.basic.memory import MemoryManager, Variables
from bbcbasic.basic.memory import memory as mem
from bbcbasic.basic.memory.variables import type_of, INTEGER, REAL, STRING
from bbcbasic.basic.base import error
from tests.unit.utils import TestCase, run_tests


class VariablesTest(TestCase):
    """Unit tests for Variables."""

    tag = u'variables'

    def setUp(self):
        """Fresh memory and variables."""
        TestCase.setUp(self)
        self.memory = MemoryManager()
        self.variables = Variables(self.memory)

    def test_type_of(self):
        """Sigils determine the type."""
        assert type_of(u'A%') == INTEGER
        assert type_of(u'name$') == STRING
        assert type_of(u'x') == REAL

    def test_scalars(self):
        """Typed scalar access."""
        v = self.variables
        v.set_int_var(u'count%', 3)
        v.set_real_var(u'x', 1.5)
        v.set_string_var(u'name$', u'BBC')
        assert v.get_int_var(u'count%') == 3
        assert v.get_real_var(u'x') == 1.5
        assert v.get_string_var(u'name$') == u'BBC'
        assert v.get_scalar(u'x') == 1.5
        # not found
        assert v.get_int_var(u'other%') is None
        assert v.get_scalar(u'y') is None
        # wrong type
        assert v.get_real_var(u'name$') is None

    def test_scalar_memory(self):
        """New variables are accounted in variable memory, updates are not."""
        v = self.variables
        before = self.memory.available_memory()
        v.set_real_var(u'x', 1.)
        used = before - self.memory.available_memory()
        assert used > 0
        v.set_real_var(u'x', 2.)
        assert before - self.memory.available_memory() == used
        v.clear()
        assert self.memory.available_memory() == before

    def test_integer_range(self):
        """Integers are limited to 32 bits."""
        v = self.variables
        v.set_int_var(u'i%', 0x7fffffff)
        v.set_int_var(u'j%', -0x80000000)
        with self.assertRaises(error.BASICError) as cm:
            v.set_int_var(u'k%', 0x80000000)
        assert cm.exception.err == error.TOO_BIG

    def test_string_limit(self):
        """A 255-character string round-trips, 256 is too long."""
        v = self.variables
        value = u''.join(chr(32 + _i % 95) for _i in range(255))
        v.set_string_var(u'a$', value)
        assert v.get_string_var(u'a$') == value
        with self.assertRaises(error.BASICError) as cm:
            v.set_string_var(u'a$', value + u'!')
        assert cm.exception.err == error.STRING_TOO_LONG
        # unchanged
        assert v.get_string_var(u'a$') == value

    def test_resident_integers(self):
        """@% and A%..Z% live in memory and survive clear."""
        v = self.variables
        assert v.get_int_var(u'A%') == 0
        v.set_int_var(u'B%', 258)
        assert self.memory.peek_word(mem.RESIDENT_START + 8) == 258
        self.memory.poke_long(mem.RESIDENT_START + 12, 77)
        assert v.get_int_var(u'C%') == 77
        v.clear()
        assert v.get_int_var(u'B%') == 258
        assert u'Z%' in v

    def test_delete_scalar(self):
        """Deleting a binding makes the variable unknown."""
        v = self.variables
        v.set_scalar(u'x', 1.)
        assert u'x' in v
        v.delete_scalar(u'x')
        assert u'x' not in v

    def test_array_bounds(self):
        """DIM A%(3,3) allows indices 0..3 in each dimension."""
        v = self.variables
        v.dim_array(u'A%', [4, 4])
        for i in range(4):
            for j in range(4):
                v.set_array_element(u'A%', [i, j], i*10 + j)
        assert v.get_array_element(u'A%', [3, 3]) == 33
        assert v.get_array_element(u'A%', [1, 2]) == 12
        with self.assertRaises(error.BASICError) as cm:
            v.get_array_element(u'A%', [4, 0])
        assert cm.exception.err == error.SUBSCRIPT
        with self.assertRaises(error.BASICError) as cm:
            v.set_array_element(u'A%', [4, 0], 1)
        assert cm.exception.err == error.SUBSCRIPT
        with self.assertRaises(error.BASICError) as cm:
            v.get_array_element(u'A%', [1])
        assert cm.exception.err == error.SUBSCRIPT

    def test_calculate_index(self):
        """The last index varies fastest."""
        v = self.variables
        v.dim_array(u'b', [2, 3])
        assert v.calculate_index(u'b', [0, 0]) == 0
        assert v.calculate_index(u'b', [0, 2]) == 2
        assert v.calculate_index(u'b', [1, 0]) == 3
        assert v.calculate_index(u'b', [1, 2]) == 5

    def test_array_types(self):
        """Array elements keep their type."""
        v = self.variables
        v.dim_array(u'n$', [3])
        v.set_array_element(u'n$', [1], u'two')
        assert v.get_array_element(u'n$', [1]) == u'two'
        assert v.get_array_element(u'n$', [0]) == u''
        with self.assertRaises(error.BASICError) as cm:
            v.set_array_element(u'n$', [1], 2)
        assert cm.exception.err == error.TYPE_MISMATCH
        v.dim_array(u'r', [2])
        v.set_array_element(u'r', [0], 2.5)
        assert v.get_array_element(u'r', [0]) == 2.5
        with self.assertRaises(error.BASICError) as cm:
            v.set_array_element(u'r', [0], u'x')
        assert cm.exception.err == error.TYPE_MISMATCH
        assert v.get_array(u'r').to_list() == [2.5, 0.]

    def test_array_errors(self):
        """Undimensioned and badly dimensioned arrays."""
        v = self.variables
        with self.assertRaises(error.BASICError) as cm:
            v.get_array_element(u'z', [0])
        assert cm.exception.err == error.ARRAY
        assert cm.exception.detail == u'z'
        with self.assertRaises(error.BASICError) as cm:
            v.dim_array(u'z', [0])
        assert cm.exception.err == error.BAD_DIM
        with self.assertRaises(error.BASICError) as cm:
            v.dim_array(u'z%', [1000, 1000])
        assert cm.exception.err == error.NO_ROOM
        assert not v.has_array(u'z%')

    def test_to_list(self):
        """Nested list of a two-dimensional array."""
        v = self.variables
        v.dim_array(u'm%', [2, 2])
        v.set_array_element(u'm%', [1, 0], 5)
        assert v.get_array(u'm%').to_list() == [[0, 0], [5, 0]]

    def test_dim_block(self):
        """DIM name size reserves size+1 bytes."""
        v = self.variables
        top = self.memory.top
        address = v.dim_block(u'buf%', 9)
        assert v.get_int_var(u'buf%') == address
        assert self.memory.top >= address + 10
        assert address >= top
        with self.assertRaises(error.BASICError):
            v.dim_block(u'b$', 9)


if __name__ == '__main__':
    run_tests()
