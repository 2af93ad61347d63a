"""
Mostek instruction set.

Each instruction is a small immutable value. Straight-line instructions
implement ``step(state)``, returning the successor state. Branches expose
``condition(state)`` and the label they jump to; the evaluator decides how
to follow them.
"""
from __future__ import annotations

from dataclasses import dataclass

import z3

from .machine import Flag, Register
from .memory import VALUE_WIDTH, as_address, as_value


#############################################################
# Bit-level semantics
#############################################################

def _is_literal(*exprs):
    return all(z3.is_bv_value(e) or z3.is_true(e) or z3.is_false(e) for e in exprs)


def _fold(inputs, outputs):
    """Reduce outputs to literals when every input is one"""
    if _is_literal(*inputs):
        return tuple(z3.simplify(out) for out in outputs)
    return outputs


def rotate_right_through_carry(value, carry):
    """
    Rotate an 8-bit value right by one, using the carry as the ninth bit

    Returns:
        (value', carry'): bit 0 of the input moves into the carry, the old
        carry moves into bit 7
    """
    value = as_value(value)
    high = z3.If(carry, z3.BitVecVal(1 << (VALUE_WIDTH - 1), VALUE_WIDTH), z3.BitVecVal(0, VALUE_WIDTH))
    rotated = z3.LShR(value, 1) | high
    carry_out = z3.Extract(0, 0, value) == 1
    return _fold((value, carry), (rotated, carry_out))


def add_with_carry(lhs, rhs, carry):
    """
    8-bit addition with carry-in

    Returns:
        (sum, carry'): the wrapped sum and the carry out of bit 7

    The carry is the ninth bit of the unwrapped sum, not bit 7 of the
    wrapped one; the multiplier needs the true overflow.
    """
    lhs = as_value(lhs)
    rhs = as_value(rhs)
    carry_in = z3.If(carry, z3.BitVecVal(1, VALUE_WIDTH + 1), z3.BitVecVal(0, VALUE_WIDTH + 1))
    wide = z3.ZeroExt(1, lhs) + z3.ZeroExt(1, rhs) + carry_in
    result = z3.Extract(VALUE_WIDTH - 1, 0, wide)
    carry_out = z3.Extract(VALUE_WIDTH, VALUE_WIDTH, wide) == 1
    return _fold((lhs, rhs, carry), (result, carry_out))


def _operand(value):
    """Render a value as an assembly operand"""
    simplified = z3.simplify(value)
    if z3.is_bv_value(simplified):
        return str(simplified.as_long())
    return str(value)


#############################################################
# Instructions
#############################################################

class Instruction:
    """Base class of the closed instruction set"""

    is_branch = False

    def step(self, state):
        raise NotImplementedError(f"{type(self).__name__} is not a straight-line instruction")

    def mnemonic(self, symbols=None):
        raise NotImplementedError

    def __str__(self):
        return self.mnemonic()


def _address_name(addr, symbols):
    if symbols:
        for name, candidate in symbols.items():
            if as_address(candidate).eq(addr):
                return name
    return _operand(addr)


@dataclass(frozen=True, eq=False)
class Load(Instruction):
    """LDX/LDA: set a register"""
    reg: Register
    value: z3.BitVecRef

    def __post_init__(self):
        if not isinstance(self.reg, Register):
            raise ValueError(f"Unknown register: {self.reg!r}")
        object.__setattr__(self, "value", as_value(self.value))

    def step(self, state):
        return state.set_reg(self.reg, self.value)

    def mnemonic(self, symbols=None):
        return f"LD{self.reg.value} #{_operand(self.value)}"


@dataclass(frozen=True, eq=False)
class ClearCarry(Instruction):
    """CLC"""

    def step(self, state):
        return state.set_flag(Flag.C, False)

    def mnemonic(self, symbols=None):
        return "CLC"


@dataclass(frozen=True, eq=False)
class RotateMemory(Instruction):
    """ROR, memory version"""
    addr: z3.BitVecRef

    def __post_init__(self):
        object.__setattr__(self, "addr", as_address(self.addr))

    def step(self, state):
        value, carry = rotate_right_through_carry(state.peek(self.addr), state.get_flag(Flag.C))
        return state.poke(self.addr, value).set_flag(Flag.C, carry)

    def mnemonic(self, symbols=None):
        return f"ROR {_address_name(self.addr, symbols)}"


@dataclass(frozen=True, eq=False)
class RotateRegister(Instruction):
    """ROR, register version"""
    reg: Register

    def __post_init__(self):
        if not isinstance(self.reg, Register):
            raise ValueError(f"Unknown register: {self.reg!r}")

    def step(self, state):
        value, carry = rotate_right_through_carry(state.get_reg(self.reg), state.get_flag(Flag.C))
        return state.set_reg(self.reg, value).set_flag(Flag.C, carry)

    def mnemonic(self, symbols=None):
        return f"ROR {self.reg.value}"


@dataclass(frozen=True, eq=False)
class AddWithCarry(Instruction):
    """ADC: A := A + M[addr] + C"""
    addr: z3.BitVecRef

    def __post_init__(self):
        object.__setattr__(self, "addr", as_address(self.addr))

    def step(self, state):
        total, carry = add_with_carry(state.get_reg(Register.A), state.peek(self.addr), state.get_flag(Flag.C))
        return (state.set_reg(Register.A, total)
                .set_flag(Flag.C, carry)
                .set_flag(Flag.Z, total == 0))

    def mnemonic(self, symbols=None):
        return f"ADC {_address_name(self.addr, symbols)}"


@dataclass(frozen=True, eq=False)
class Decrement(Instruction):
    """DEX: decrement, then test for zero"""
    reg: Register = Register.X

    def __post_init__(self):
        if not isinstance(self.reg, Register):
            raise ValueError(f"Unknown register: {self.reg!r}")

    def step(self, state):
        value = z3.simplify(state.get_reg(self.reg) - 1)
        return state.set_reg(self.reg, value).set_flag(Flag.Z, value == 0)

    def mnemonic(self, symbols=None):
        return f"DE{self.reg.value}"


@dataclass(frozen=True, eq=False)
class BranchIfCarryClear(Instruction):
    """BCC"""
    label: str
    is_branch = True

    def condition(self, state):
        return z3.Not(state.get_flag(Flag.C))

    def mnemonic(self, symbols=None):
        return f"BCC {self.label}"


@dataclass(frozen=True, eq=False)
class BranchIfNotZero(Instruction):
    """BNE"""
    label: str
    is_branch = True

    def condition(self, state):
        return z3.Not(state.get_flag(Flag.Z))

    def mnemonic(self, symbols=None):
        return f"BNE {self.label}"


@dataclass(frozen=True, eq=False)
class Halt(Instruction):
    """End of program: the identity continuation"""

    def step(self, state):
        return state

    def mnemonic(self, symbols=None):
        return "HALT"


def ldx(value):
    return Load(Register.X, value)


def lda(value):
    return Load(Register.A, value)


def clc():
    return ClearCarry()


def ror_m(addr):
    return RotateMemory(addr)


def ror_r(reg):
    return RotateRegister(reg)


def adc(addr):
    return AddWithCarry(addr)


def dex():
    return Decrement(Register.X)


def bcc(label):
    return BranchIfCarryClear(label)


def bne(label):
    return BranchIfNotZero(label)


def end():
    return Halt()
