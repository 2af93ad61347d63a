"""
Program assembly: Legato's multiplier in Mostek assembly.

    step1 :       LDX #8         ; load X immediate with the integer 8
    step2 :       LDA #0         ; load A immediate with the integer 0
    step3 :       CLC            ; set C to 0
    step4 : LOOP  ROR F1         ; rotate F1 right circular through C
    step5 :       BCC ZCOEF      ; branch to ZCOEF if C = 0
    step6 :       CLC            ; set C to 0
    step7 :       ADC F2         ; set A to A+F2+C and C to the carry
    step8 : ZCOEF ROR A          ; rotate A right circular through C
    step9 :       ROR LOW        ; rotate LOW right circular through C
    step10:       DEX            ; set X to X-1
    step11:       BNE LOOP       ; branch to LOOP if Z = 0

The CLC in step3 was added by Warren Hunt; without it the algorithm does
not work for all starting states.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple

from . import instructions as ins
from .machine import Register


@dataclass(frozen=True, eq=False)
class Program:
    """Instruction sequence with a label table mapping names to indices"""
    instructions: Tuple[ins.Instruction, ...]
    labels: Dict[str, int] = field(default_factory=dict)
    symbols: Dict[str, object] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "instructions", tuple(self.instructions))
        if not self.instructions or not isinstance(self.instructions[-1], ins.Halt):
            raise ValueError("Program must end with HALT")
        for name, index in self.labels.items():
            if not 0 <= index < len(self.instructions):
                raise ValueError(f"Label {name} points outside the program: {index}")
        for index, instruction in enumerate(self.instructions):
            if not isinstance(instruction, ins.Instruction):
                raise TypeError(f"Not an instruction at {index}: {instruction!r}")
            if instruction.is_branch and instruction.label not in self.labels:
                raise ValueError(f"Unknown label at {index}: {instruction.label}")

    def __len__(self):
        return len(self.instructions)

    def __getitem__(self, index):
        return self.instructions[index]

    def target(self, label):
        return self.labels[label]

    def listing(self):
        """Render the program as Mostek assembly text"""
        names = {}
        for name, index in self.labels.items():
            names.setdefault(index, name)
        width = max([len(name) for name in self.labels] + [0])
        lines = []
        for index, instruction in enumerate(self.instructions):
            label = names.get(index, "")
            lines.append(f"step{index + 1:<3}: {label:<{width}} {instruction.mnemonic(self.symbols)}")
        return "\n".join(lines)


class Assembler:
    """Collects instructions and labels in program order"""

    def __init__(self):
        self.instructions = []
        self.labels = {}
        self.symbols = {}

    def label(self, name):
        if name in self.labels:
            raise ValueError(f"Duplicate label: {name}")
        self.labels[name] = len(self.instructions)
        return self

    def symbol(self, name, addr):
        self.symbols[name] = addr
        return self

    def emit(self, *instructions):
        self.instructions.extend(instructions)
        return self

    def assemble(self):
        return Program(tuple(self.instructions), dict(self.labels), dict(self.symbols))


def legato(f1_addr, f2_addr, low_addr):
    """
    Multiply the bytes at f1_addr and f2_addr.

    The low byte of the product ends up at low_addr and the high byte in
    register A.
    """
    asm = Assembler()
    asm.symbol("F1", f1_addr).symbol("F2", f2_addr).symbol("LOW", low_addr)
    asm.emit(ins.ldx(8), ins.lda(0), ins.clc())
    asm.label("LOOP")
    asm.emit(ins.ror_m(f1_addr), ins.bcc("ZCOEF"), ins.clc(), ins.adc(f2_addr))
    asm.label("ZCOEF")
    asm.emit(ins.ror_r(Register.A), ins.ror_m(low_addr), ins.dex(), ins.bne("LOOP"))
    asm.emit(ins.end())
    return asm.assemble()
