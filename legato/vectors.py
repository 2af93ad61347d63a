"""
Concrete test vectors drawn from the symbolic model.

Rendering vectors into other languages is left to downstream tools; this
module only produces the (inputs, outputs) pairs and stores them as JSON.
"""
from __future__ import annotations

import json
import logging
import random
from dataclasses import asdict, dataclass, field
from typing import Dict, List

import z3

from .machine import InitialValues, concrete_value, init_machine
from .memory import ADDRESS_WIDTH, VALUE_WIDTH, make_memory
from .verification import run_legato

LOGGER = logging.getLogger(__name__)

INPUT_NAMES = ("addrX", "x", "addrY", "y", "addrLow", "regX", "regA", "memVals", "flagC", "flagZ")


@dataclass
class TestVector:
    __test__ = False

    inputs: Dict[str, object]
    outputs: Dict[str, int]


@dataclass
class TestVectors:
    __test__ = False

    vectors: List[TestVector] = field(default_factory=list)

    def __len__(self):
        return len(self.vectors)

    def __iter__(self):
        return iter(self.vectors)

    def values(self):
        """The vectors as plain (inputs, outputs) tuples"""
        return [(tuple(v.inputs.values()), tuple(v.outputs.values())) for v in self.vectors]

    def to_json(self):
        return json.dumps([asdict(v) for v in self.vectors], indent=2)


def _word(value, width):
    return value if z3.is_expr(value) else z3.BitVecVal(value, width)


def _bit(value):
    return value if z3.is_expr(value) else z3.BoolVal(bool(value))


def evaluate(inputs, memory_model="dense", recorder=None):
    """
    Run the multiplier on one concrete input assignment

    Args:
        inputs: dict keyed by INPUT_NAMES; missing entries default to zero/False

    Returns:
        TestVector
    """
    inputs = {name: inputs.get(name, False if name.startswith("flag") else 0) for name in INPUT_NAMES}
    initial_values = InitialValues(
        _word(inputs["regX"], VALUE_WIDTH),
        _word(inputs["regA"], VALUE_WIDTH),
        _word(inputs["memVals"], VALUE_WIDTH),
        _bit(inputs["flagC"]),
        _bit(inputs["flagZ"]),
    )
    machine = init_machine(make_memory(memory_model), initial_values)
    hi, lo = run_legato(
        (_word(inputs["addrX"], ADDRESS_WIDTH), _word(inputs["x"], VALUE_WIDTH)),
        (_word(inputs["addrY"], ADDRESS_WIDTH), _word(inputs["y"], VALUE_WIDTH)),
        _word(inputs["addrLow"], ADDRESS_WIDTH),
        machine,
        recorder=recorder,
    )
    outputs = {"hi": concrete_value(hi), "lo": concrete_value(lo)}
    if None in outputs.values():
        raise ValueError("Inputs do not determine the outputs; supply concrete values")
    return TestVector(inputs, outputs)


def evaluate_counterexample(assignment, memory_model="dense"):
    """Replay a solver counterexample through the model"""
    return evaluate({name: assignment[name] for name in INPUT_NAMES if name in assignment}, memory_model)


def generate_test_vectors(count, seed=None, memory_model="dense"):
    """
    Draw random inputs with pairwise distinct addresses and record the outputs

    Returns:
        TestVectors
    """
    rng = random.Random(seed)
    vectors = TestVectors()
    for _ in range(count):
        addr_x, addr_y, addr_low = rng.sample(range(1 << ADDRESS_WIDTH), 3)
        inputs = {
            "addrX": addr_x,
            "x": rng.randrange(1 << VALUE_WIDTH),
            "addrY": addr_y,
            "y": rng.randrange(1 << VALUE_WIDTH),
            "addrLow": addr_low,
            "regX": rng.randrange(1 << VALUE_WIDTH),
            "regA": rng.randrange(1 << VALUE_WIDTH),
            "memVals": rng.randrange(1 << VALUE_WIDTH),
            "flagC": rng.random() < 0.5,
            "flagZ": rng.random() < 0.5,
        }
        vectors.vectors.append(evaluate(inputs, memory_model))
    LOGGER.info("Generated %d test vectors", len(vectors))
    return vectors


def save_vectors(vectors, filename):
    with open(filename, 'w') as f:
        f.write(vectors.to_json())
