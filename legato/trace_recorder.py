import json
from datetime import datetime

import z3

from .machine import Flag, Register


class TraceRecord:
    def __init__(self):
        self.trace_info = {
            "timestamp": datetime.now().isoformat(),
            "steps": [],
            "final_state": None
        }

    @property
    def steps(self):
        return self.trace_info["steps"]

    def add_step(self, pc, instruction, state):
        """
        Record an instruction and the state it executes in

        Args:
            pc: Index of the instruction in the program
            instruction: Instruction about to execute
            state: MachineState before the instruction
        """
        step = {
            "pc": pc,
            "instruction": str(instruction),
            "registers": self._serialize_registers(state.registers),
            "flags": self._serialize_flags(state.flags),
        }
        self.trace_info["steps"].append(step)

    def set_final_state(self, state):
        self.trace_info["final_state"] = {
            "registers": self._serialize_registers(state.registers),
            "flags": self._serialize_flags(state.flags),
            "memory": state.memory.kind,
        }

    def visits(self, pc):
        """Number of times the instruction at pc was reached"""
        return sum(1 for step in self.steps if step["pc"] == pc)

    def _serialize_registers(self, registers):
        """Convert register values to serializable format"""
        return {reg.value: str(z3.simplify(registers[reg])) for reg in Register}

    def _serialize_flags(self, flags):
        """Convert flag values to serializable format"""
        return {flag.value: str(z3.simplify(flags[flag])) for flag in Flag}


def save_trace(trace_record, filename):
    """
    Save trace record to file

    Args:
        trace_record: TraceRecord object
        filename: Output filename
    """
    with open(filename, 'w') as f:
        json.dump(trace_record.trace_info, f, indent=2)
