"""
Solver oracle: discharges proof obligations with Z3
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

import z3

LOGGER = logging.getLogger(__name__)

PROVED = "proved"
COUNTEREXAMPLE = "counterexample"
UNKNOWN = "unknown"


@dataclass
class ProofResult:
    status: str
    counterexample: Dict[str, object] = field(default_factory=dict)
    reason: Optional[str] = None
    elapsed: float = 0.0

    @property
    def proved(self):
        return self.status == PROVED

    def __str__(self):
        if self.status == PROVED:
            return f"Q.E.D. ({self.elapsed:.2f}s)"
        if self.status == COUNTEREXAMPLE:
            assignment = ", ".join(f"{k} = {v}" for k, v in sorted(self.counterexample.items()))
            return f"Falsifiable. Counter-example: {assignment}"
        return f"Unknown: {self.reason}"


def model_to_dict(model):
    """Convert a Z3 model over constants into Python ints and bools"""
    assignment = {}
    for decl in model.decls():
        if decl.arity() != 0:
            continue
        value = model[decl]
        if z3.is_bv_value(value):
            assignment[decl.name()] = value.as_long()
        elif z3.is_true(value) or z3.is_false(value):
            assignment[decl.name()] = z3.is_true(value)
        else:
            assignment[decl.name()] = str(value)
    return assignment


class SMTSolver:
    def __init__(self, timeout_ms=None):
        self.timeout_ms = timeout_ms
        self.solver = z3.Solver()
        if timeout_ms is not None:
            self.solver.set("timeout", timeout_ms)

    def reset(self):
        """Reset the solver state"""
        self.solver.reset()
        if self.timeout_ms is not None:
            self.solver.set("timeout", self.timeout_ms)

    def check_sat(self, constraints):
        """
        Check if constraints are satisfiable

        Returns:
            z3.CheckSatResult: sat, unsat or unknown
        """
        self.reset()
        for constraint in constraints:
            self.solver.add(constraint)
        return self.solver.check()

    def get_model(self):
        """Model of the last satisfiable check"""
        return self.solver.model()

    def prove(self, claim):
        """
        Check a claim for validity by refuting its negation

        Returns:
            ProofResult: proved, a counterexample over the free variables,
            or unknown with the solver's own reason
        """
        start = time.perf_counter()
        result = self.check_sat([z3.Not(claim)])
        elapsed = time.perf_counter() - start

        if result == z3.unsat:
            LOGGER.info("Proved in %.2fs", elapsed)
            return ProofResult(PROVED, elapsed=elapsed)
        if result == z3.sat:
            assignment = model_to_dict(self.get_model())
            LOGGER.info("Counterexample found in %.2fs: %s", elapsed, assignment)
            return ProofResult(COUNTEREXAMPLE, counterexample=assignment, elapsed=elapsed)

        reason = self.solver.reason_unknown()
        LOGGER.warning("Solver gave up after %.2fs: %s", elapsed, reason)
        return ProofResult(UNKNOWN, reason=reason, elapsed=elapsed)
