"""
Symbolic machine state for the Mostek CPU
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Mapping, NamedTuple

import z3

from .memory import VALUE_WIDTH, Memory, as_value


class Register(enum.Enum):
    X = "X"
    A = "A"


class Flag(enum.Enum):
    C = "C"  # carry
    Z = "Z"  # zero


def as_bit(bit):
    """Coerce a Python bool or z3 Bool into a flag value"""
    if isinstance(bit, bool):
        return z3.BoolVal(bit)
    if not z3.is_bool(bit):
        raise TypeError(f"Flag value must be a boolean: {bit!r}")
    return bit


def _check_register(reg):
    if not isinstance(reg, Register):
        raise ValueError(f"Unknown register: {reg!r}")


def _check_flag(flag):
    if not isinstance(flag, Flag):
        raise ValueError(f"Unknown flag: {flag!r}")


class InitialValues(NamedTuple):
    """Free inputs that seed a run"""
    reg_x: z3.BitVecRef
    reg_a: z3.BitVecRef
    mem_fill: z3.BitVecRef
    flag_c: z3.BoolRef
    flag_z: z3.BoolRef

    @classmethod
    def symbolic(cls, prefix=""):
        return cls(
            z3.BitVec(f"{prefix}regX", VALUE_WIDTH),
            z3.BitVec(f"{prefix}regA", VALUE_WIDTH),
            z3.BitVec(f"{prefix}memVals", VALUE_WIDTH),
            z3.Bool(f"{prefix}flagC"),
            z3.Bool(f"{prefix}flagZ"),
        )


@dataclass(frozen=True, eq=False)
class MachineState:
    """
    Memory, register file and flag file.

    The program itself lives outside this memory, so self-modifying code
    cannot be expressed. Every update returns a new state.
    """
    memory: Memory
    registers: Mapping[Register, z3.BitVecRef]
    flags: Mapping[Flag, z3.BoolRef]

    def __post_init__(self):
        if set(self.registers) != set(Register):
            raise ValueError(f"Register file must define {sorted(r.value for r in Register)}")
        if set(self.flags) != set(Flag):
            raise ValueError(f"Flag file must define {sorted(f.value for f in Flag)}")

    def get_reg(self, reg):
        _check_register(reg)
        return self.registers[reg]

    def set_reg(self, reg, value):
        _check_register(reg)
        registers = dict(self.registers)
        registers[reg] = as_value(value)
        return replace(self, registers=registers)

    def get_flag(self, flag):
        _check_flag(flag)
        return self.flags[flag]

    def set_flag(self, flag, bit):
        _check_flag(flag)
        flags = dict(self.flags)
        flags[flag] = as_bit(bit)
        return replace(self, flags=flags)

    def peek(self, addr):
        return self.memory.read(addr)

    def poke(self, addr, value):
        return replace(self, memory=self.memory.write(addr, value))

    def describe(self):
        """Get a string representation of the current state"""
        result = "Registers:\n"
        for reg in Register:
            result += f"  {reg.value}: {z3.simplify(self.registers[reg])}\n"

        result += "\nFlags:\n"
        for flag in Flag:
            result += f"  {flag.value}: {z3.simplify(self.flags[flag])}\n"

        result += f"\nMemory: {self.memory.kind}\n"
        return result


def merge(cond, taken, fallthrough):
    """Pointwise conditional select of two machine states"""
    cond = as_bit(cond)
    registers = {
        reg: z3.If(cond, taken.registers[reg], fallthrough.registers[reg])
        for reg in Register
    }
    flags = {
        flag: z3.If(cond, taken.flags[flag], fallthrough.flags[flag])
        for flag in Flag
    }
    return MachineState(
        memory=taken.memory.merge(cond, fallthrough.memory),
        registers=registers,
        flags=flags,
    )


def init_machine(memory, initial_values):
    """Reset memory to the fill value and load registers and flags from the bundle"""
    reg_x, reg_a, mem_fill, flag_c, flag_z = initial_values
    return MachineState(
        memory=memory.reset(as_value(mem_fill)),
        registers={Register.X: as_value(reg_x), Register.A: as_value(reg_a)},
        flags={Flag.C: as_bit(flag_c), Flag.Z: as_bit(flag_z)},
    )


def is_concrete(expr):
    """True when the expression simplifies to a literal"""
    simplified = z3.simplify(expr)
    return z3.is_bv_value(simplified) or z3.is_true(simplified) or z3.is_false(simplified)


def concrete_value(expr):
    """Return the Python int/bool a literal expression denotes, or None"""
    simplified = z3.simplify(expr)
    if z3.is_bv_value(simplified):
        return simplified.as_long()
    if z3.is_true(simplified):
        return True
    if z3.is_false(simplified):
        return False
    return None
