"""Symbolic model of the Mostek CPU and a correctness proof of Legato's multiplier."""

__all__ = [
    "memory", "machine", "instructions", "program", "execution",
    "verification", "solver_integration", "vectors", "trace_recorder", "config",
]

from . import memory, machine, instructions, program, execution  # noqa: E402
from . import config, solver_integration, verification  # noqa: E402
from . import trace_recorder, vectors  # noqa: E402

__version__ = "0.1.0"
