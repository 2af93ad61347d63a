"""
Symbolic execution engine for Mostek programs
"""
from __future__ import annotations

import logging

from .instructions import Halt
from .machine import concrete_value, merge

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 100_000


class ExecutionLimitExceeded(RuntimeError):
    """Raised when a program does not halt within the step budget"""


class _Budget:
    __slots__ = ("limit", "used")

    def __init__(self, limit):
        self.limit = limit
        self.used = 0

    def spend(self):
        self.used += 1
        if self.used > self.limit:
            raise ExecutionLimitExceeded(f"Program did not halt within {self.limit} steps")


def _entry_point(program, entry):
    if isinstance(entry, str):
        try:
            return program.target(entry)
        except KeyError:
            raise ValueError(f"Unknown label: {entry}") from None
    if not 0 <= entry < len(program):
        raise ValueError(f"Entry point outside the program: {entry}")
    return entry


def execute(program, state, entry=0, max_steps=DEFAULT_MAX_STEPS, recorder=None):
    """
    Run a program from the given state until it halts

    Args:
        program: Assembled Program
        state: Initial MachineState
        entry: Instruction index or label to start from
        max_steps: Step budget shared by every explored path
        recorder: Optional TraceRecord receiving each executed step

    Returns:
        MachineState: Final state, merged over every feasible path
    """
    budget = _Budget(max_steps)
    final = _run(program, state, _entry_point(program, entry), budget, recorder)
    LOGGER.debug("Program halted after %d steps", budget.used)
    return final


class _Join:
    """Pending merge of the two arms of a symbolic branch"""
    __slots__ = ("cond", "parent", "slot", "states")

    def __init__(self, cond=None, parent=None, slot=0):
        self.cond = cond
        self.parent = parent
        self.slot = slot
        self.states = [None, None]


def _deliver(join, slot, state):
    """Hand a halted state to its join, merging upwards while both arms are done"""
    while True:
        join.states[slot] = state
        if join.cond is None or join.states[0] is None or join.states[1] is None:
            return
        state = merge(join.cond, join.states[0], join.states[1])
        join, slot = join.parent, join.slot


def _run(program, state, pc, budget, recorder):
    root = _Join()
    worklist = [(pc, state, root, 0)]
    while worklist:
        pc, state, join, slot = worklist.pop()
        while True:
            budget.spend()
            instruction = program[pc]
            if recorder is not None:
                recorder.add_step(pc, instruction, state)

            if isinstance(instruction, Halt):
                _deliver(join, slot, state)
                break

            if not instruction.is_branch:
                state = instruction.step(state)
                pc += 1
                continue

            cond = instruction.condition(state)
            target = program.target(instruction.label)
            known = concrete_value(cond)
            if known is True:
                pc = target
            elif known is False:
                pc += 1
            else:
                # Neither arm can be ruled out: run both to HALT, then select
                LOGGER.debug("Forking at %d (%s)", pc, instruction.mnemonic(program.symbols))
                fork = _Join(cond, join, slot)
                worklist.append((pc + 1, state, fork, 1))
                worklist.append((target, state, fork, 0))
                break
    return root.states[0]
