"""Configuration for a verification run."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .execution import DEFAULT_MAX_STEPS
from .memory import MEMORY_MODELS

LOGGER = logging.getLogger(__name__)


@dataclass
class VerificationConfig:
    """
    memory_model: backing strategy of the machine memory ("dense" or "array").
        The dense model proves in seconds, the array model takes far longer.
    timeout_ms: solver timeout, None for no limit
    max_steps: step budget of the evaluator
    timing: log how long the solver took
    """
    memory_model: str = "dense"
    timeout_ms: Optional[int] = None
    max_steps: int = DEFAULT_MAX_STEPS
    timing: bool = True

    def __post_init__(self):
        if self.memory_model not in MEMORY_MODELS:
            raise ValueError(f"Unknown memory model: {self.memory_model}")
        if self.timeout_ms is not None and self.timeout_ms <= 0:
            raise ValueError(f"Timeout must be positive: {self.timeout_ms}")
        if self.max_steps <= 0:
            raise ValueError(f"Step budget must be positive: {self.max_steps}")
        if self.memory_model == "array":
            LOGGER.info("Array memory model selected; expect a much slower proof")
