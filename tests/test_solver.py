import pytest
import z3

from legato.config import VerificationConfig
from legato.solver_integration import COUNTEREXAMPLE, PROVED, SMTSolver, model_to_dict


def test_valid_claim_is_proved():
    x = z3.BitVec("x", 8)
    result = SMTSolver().prove(x ^ x == 0)
    assert result.status == PROVED
    assert result.proved
    assert str(result).startswith("Q.E.D.")


def test_invalid_claim_has_counterexample():
    x = z3.BitVec("x", 8)
    flag = z3.Bool("flag")
    result = SMTSolver(timeout_ms=10_000).prove(z3.Implies(flag, x != 3))
    assert result.status == COUNTEREXAMPLE
    assert result.counterexample == {"x": 3, "flag": True}
    assert "Falsifiable" in str(result)


def test_check_sat_resets_between_calls():
    x = z3.BitVec("x", 8)
    solver = SMTSolver()
    assert solver.check_sat([x == 1, x == 2]) == z3.unsat
    assert solver.check_sat([x == 1]) == z3.sat
    assert model_to_dict(solver.get_model()) == {"x": 1}


@pytest.mark.parametrize("options", [
    {"memory_model": "sparse"},
    {"timeout_ms": 0},
    {"max_steps": 0},
])
def test_invalid_config(options):
    with pytest.raises(ValueError):
        VerificationConfig(**options)


def test_default_config():
    config = VerificationConfig()
    assert config.memory_model == "dense"
    assert config.timeout_ms is None
