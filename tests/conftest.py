import pytest
import z3

from legato.machine import InitialValues, init_machine
from legato.memory import MEMORY_MODELS, make_memory
from legato.solver_integration import SMTSolver


def pytest_addoption(parser):  # pragma: no cover - pytest hook
    parser.addoption("--runslow", action="store_true", default=False, help="run full symbolic proofs")


def pytest_configure(config):  # pragma: no cover - pytest hook
    config.addinivalue_line("markers", "slow: full symbolic proofs that take a long time")


def pytest_collection_modifyitems(config, items):  # pragma: no cover - pytest hook
    if config.getoption("--runslow"):
        return
    skip_slow = pytest.mark.skip(reason="needs --runslow")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture(params=sorted(MEMORY_MODELS))
def memory_model(request) -> str:
    return request.param


@pytest.fixture
def zeroed_machine(memory_model):
    """Machine with X=8, A=0, C=0, Z=0 and memory filled with zeros"""
    return init_machine(make_memory(memory_model), InitialValues(8, 0, 0, False, False))


@pytest.fixture
def symbolic_machine(memory_model):
    return init_machine(make_memory(memory_model), InitialValues.symbolic("init_"))


@pytest.fixture
def prove():
    def _prove(claim):
        return SMTSolver().prove(claim)
    return _prove


def as_int(expr):
    simplified = z3.simplify(expr)
    assert z3.is_bv_value(simplified), f"expected a literal, got {simplified}"
    return simplified.as_long()
