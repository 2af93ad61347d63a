"""
Verification driver: runs Legato's multiplier over a symbolic machine and
builds the correctness theorem.
"""
from __future__ import annotations

import logging

import z3

from .config import VerificationConfig
from .execution import execute
from .machine import InitialValues, Register, init_machine
from .memory import ADDRESS_WIDTH, VALUE_WIDTH, as_address, as_value, make_memory
from .program import legato
from .solver_integration import SMTSolver

LOGGER = logging.getLogger(__name__)

RESULT_WIDTH = 2 * VALUE_WIDTH


def run_legato(f1, f2, low_addr, state, max_steps=None, recorder=None):
    """
    Multiply two factors on the given machine

    Args:
        f1: (address, value) of the first factor
        f2: (address, value) of the second factor
        low_addr: where the low byte of the product goes
        state: MachineState to start from
        recorder: Optional TraceRecord receiving every executed step

    Returns:
        (hi, lo): register A and the byte at low_addr after the program halts
    """
    f1_addr, f1_val = f1
    f2_addr, f2_val = f2
    seeded = state.poke(f2_addr, f2_val).poke(f1_addr, f1_val)
    program = legato(f1_addr, f2_addr, low_addr)
    options = {"recorder": recorder}
    if max_steps is not None:
        options["max_steps"] = max_steps
    final = execute(program, seeded, **options)
    if recorder is not None:
        recorder.set_final_state(final)
    return final.get_reg(Register.A), final.peek(low_addr)


def product_matches(hi, lo, x, y):
    """256*hi + lo == x*y, evaluated in 16 bits so neither side wraps"""
    widen = RESULT_WIDTH - VALUE_WIDTH
    x, y = as_value(x), as_value(y)
    result = z3.ZeroExt(widen, hi) * 256 + z3.ZeroExt(widen, lo)
    expected = z3.ZeroExt(widen, x) * z3.ZeroExt(widen, y)
    return result == expected


def legato_is_correct(memory, f1, f2, low_addr, initial_values, max_steps=None):
    """
    Correctness claim for one machine configuration.

    The factor and output addresses must be pairwise distinct; when they
    alias the implication holds vacuously.
    """
    (addr_x, x), (addr_y, y) = f1, f2
    addr_x, addr_y, low_addr = as_address(addr_x), as_address(addr_y), as_address(low_addr)
    machine = init_machine(memory, initial_values)
    hi, lo = run_legato((addr_x, x), (addr_y, y), low_addr, machine, max_steps=max_steps)
    return z3.Implies(z3.Distinct(addr_x, addr_y, low_addr), product_matches(hi, lo, x, y))


def symbolic_inputs(prefix=""):
    """Fresh free variables for the universally quantified inputs of the theorem"""
    return {
        "f1": (z3.BitVec(f"{prefix}addrX", ADDRESS_WIDTH), z3.BitVec(f"{prefix}x", VALUE_WIDTH)),
        "f2": (z3.BitVec(f"{prefix}addrY", ADDRESS_WIDTH), z3.BitVec(f"{prefix}y", VALUE_WIDTH)),
        "low_addr": z3.BitVec(f"{prefix}addrLow", ADDRESS_WIDTH),
        "initial_values": InitialValues.symbolic(prefix),
    }


def correctness_obligation(config=None):
    """The full theorem over free symbolic inputs"""
    config = config or VerificationConfig()
    inputs = symbolic_inputs()
    memory = make_memory(config.memory_model)
    return legato_is_correct(memory, inputs["f1"], inputs["f2"], inputs["low_addr"],
                             inputs["initial_values"], max_steps=config.max_steps)


def correctness_theorem(config=None):
    """
    Prove Legato's multiplier correct for every memory fill, factor,
    address and initial register/flag assignment.

    Returns:
        ProofResult
    """
    config = config or VerificationConfig()
    LOGGER.info("Building correctness obligation (memory model: %s)", config.memory_model)
    claim = correctness_obligation(config)
    LOGGER.info("Handing obligation to the solver")
    result = SMTSolver(config.timeout_ms).prove(claim)
    if config.timing:
        LOGGER.info("Solver time: %.2fs", result.elapsed)
    return result
