import pytest
import z3

from legato.config import VerificationConfig
from legato.machine import InitialValues, init_machine
from legato.memory import make_memory
from legato.solver_integration import COUNTEREXAMPLE
from legato.vectors import evaluate_counterexample
from legato.verification import (correctness_theorem, legato_is_correct, product_matches, run_legato,
                                 symbolic_inputs)

from conftest import as_int


def test_three_times_five(zeroed_machine):
    hi, lo = run_legato((0x10, 0x03), (0x20, 0x05), 0x30, zeroed_machine)
    assert as_int(hi) == 0x00
    assert as_int(lo) == 0x0F


@pytest.mark.parametrize("x, y", [(0, 0), (255, 255), (0x80, 2), (17, 15), (1, 200)])
def test_concrete_products(memory_model, x, y):
    machine = init_machine(make_memory(memory_model), InitialValues(0x55, 0xAA, 0x33, True, True))
    hi, lo = run_legato((7, x), (8, y), 9, machine)
    assert 256 * as_int(hi) + as_int(lo) == x * y


def test_aliased_output_makes_claim_vacuous(prove):
    inputs = symbolic_inputs()
    (_, x), (_, y) = inputs["f1"], inputs["f2"]
    claim = legato_is_correct(make_memory(), (0x10, x), (0x20, y), 0x10, inputs["initial_values"])

    precondition = claim.arg(0)
    assert z3.is_false(z3.simplify(precondition))
    assert prove(claim).proved


def test_aliased_output_is_not_a_correctness_claim(prove):
    inputs = symbolic_inputs()
    (_, x), (_, y) = inputs["f1"], inputs["f2"]
    machine = init_machine(make_memory(), inputs["initial_values"])
    hi, lo = run_legato((0x10, x), (0x20, y), 0x10, machine)

    result = prove(product_matches(hi, lo, x, y))
    assert result.status == COUNTEREXAMPLE

    replay = evaluate_counterexample({**result.counterexample, "addrX": 0x10, "addrY": 0x20, "addrLow": 0x10})
    outputs, inputs = replay.outputs, replay.inputs
    assert 256 * outputs["hi"] + outputs["lo"] != inputs["x"] * inputs["y"]


def test_claim_holds_for_fixed_addresses_and_multiplier(prove):
    inputs = symbolic_inputs()
    (_, x) = inputs["f1"]
    claim = legato_is_correct(make_memory(), (0x10, x), (0x20, 0xA7), 0x30, inputs["initial_values"])
    assert prove(claim).proved


@pytest.mark.slow
def test_claim_holds_for_fixed_addresses(memory_model, prove):
    inputs = symbolic_inputs()
    (_, x), (_, y) = inputs["f1"], inputs["f2"]
    claim = legato_is_correct(make_memory(memory_model), (0x10, x), (0x20, y), 0x30, inputs["initial_values"])
    assert prove(claim).proved


@pytest.mark.slow
def test_correctness_theorem():
    result = correctness_theorem(VerificationConfig(memory_model="dense"))
    assert result.proved, str(result)
