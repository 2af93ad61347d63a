"""
Memory models for the Mostek machine.

Memory maps 32-bit addresses to 8-bit words. Two interchangeable backing
strategies answer the same read/write/reset contract:

* ``DenseMemory``: a constant default plus a chain of functional overrides.
  Reads unfold into nested ``If`` terms, which the solver discharges quickly.
* ``ArrayMemory``: the solver's own array theory (``K``/``Store``/``Select``).
"""
from __future__ import annotations

from abc import ABC, abstractmethod

import z3

ADDRESS_WIDTH = 32
VALUE_WIDTH = 8

ADDRESS_SORT = z3.BitVecSort(ADDRESS_WIDTH)
VALUE_SORT = z3.BitVecSort(VALUE_WIDTH)


def as_address(addr):
    """Coerce an int or 32-bit bit-vector into an address term"""
    if isinstance(addr, int):
        return z3.BitVecVal(addr, ADDRESS_WIDTH)
    if not z3.is_bv(addr) or addr.size() != ADDRESS_WIDTH:
        raise TypeError(f"Address must be a {ADDRESS_WIDTH}-bit bit-vector: {addr!r}")
    return addr


def as_value(value):
    """Coerce an int or 8-bit bit-vector into a data word"""
    if isinstance(value, int):
        return z3.BitVecVal(value, VALUE_WIDTH)
    if not z3.is_bv(value) or value.size() != VALUE_WIDTH:
        raise TypeError(f"Value must be a {VALUE_WIDTH}-bit bit-vector: {value!r}")
    return value


class Memory(ABC):
    """Common contract of the backing strategies"""

    kind = None

    @abstractmethod
    def read(self, addr):
        """Most recent write to addr, or the reset value"""

    @abstractmethod
    def write(self, addr, value):
        """New memory differing from this one only at addr"""

    @abstractmethod
    def reset(self, base):
        """Memory answering base at every address"""

    @abstractmethod
    def merge(self, cond, other):
        """Memory reading as self where cond holds and as other elsewhere"""


class _Base:
    __slots__ = ("value",)

    def __init__(self, value):
        self.value = value

    def read(self, addr):
        return self.value


class _Override:
    __slots__ = ("parent", "addr", "value")

    def __init__(self, parent, addr, value):
        self.parent = parent
        self.addr = addr
        self.value = value

    def read(self, addr):
        node = self
        # Distinct literal addresses never alias; skip them without recursing
        while isinstance(node, _Override):
            if addr.eq(node.addr):
                return node.value
            if not (z3.is_bv_value(addr) and z3.is_bv_value(node.addr)):
                return z3.If(addr == node.addr, node.value, node.parent.read(addr))
            node = node.parent
        return node.read(addr)


class _Join:
    __slots__ = ("cond", "left", "right")

    def __init__(self, cond, left, right):
        self.cond = cond
        self.left = left
        self.right = right

    def read(self, addr):
        return z3.If(self.cond, self.left.read(addr), self.right.read(addr))


class DenseMemory(Memory):
    """Total function from addresses to values, built from overrides over a constant"""

    kind = "dense"

    def __init__(self, base=0, _node=None):
        self._node = _node if _node is not None else _Base(as_value(base))

    def read(self, addr):
        return self._node.read(as_address(addr))

    def write(self, addr, value):
        return DenseMemory(_node=_Override(self._node, as_address(addr), as_value(value)))

    def reset(self, base):
        return DenseMemory(base)

    def merge(self, cond, other):
        if not isinstance(other, DenseMemory):
            raise TypeError(f"Cannot merge dense memory with {type(other).__name__}")
        if self._node is other._node:
            return self
        return DenseMemory(_node=_Join(cond, self._node, other._node))


class ArrayMemory(Memory):
    """Memory as an SMT-Lib array term"""

    kind = "array"

    def __init__(self, base=0, _array=None):
        if _array is None:
            _array = z3.K(ADDRESS_SORT, as_value(base))
        self.array = _array

    def read(self, addr):
        return z3.Select(self.array, as_address(addr))

    def write(self, addr, value):
        return ArrayMemory(_array=z3.Store(self.array, as_address(addr), as_value(value)))

    def reset(self, base):
        return ArrayMemory(base)

    def merge(self, cond, other):
        if not isinstance(other, ArrayMemory):
            raise TypeError(f"Cannot merge array memory with {type(other).__name__}")
        if self.array.eq(other.array):
            return self
        return ArrayMemory(_array=z3.If(cond, self.array, other.array))


MEMORY_MODELS = {
    DenseMemory.kind: DenseMemory,
    ArrayMemory.kind: ArrayMemory,
}


def make_memory(kind="dense", base=0):
    """Create an empty memory of the named backing strategy"""
    try:
        model = MEMORY_MODELS[kind]
    except KeyError:
        raise ValueError(f"Unknown memory model: {kind}") from None
    return model(base)
