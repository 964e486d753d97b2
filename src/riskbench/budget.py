# Copyright (c) Syntropy Systems
"""Turn measured execution times into a time budget for the next run."""
from __future__ import annotations

import math
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

# Smallest measurable duration (1 ns); shorter runs are clamped to it for the
# geometric mean
MIN_DURATION_MS = 1e-6


class MeanPolicy(str, Enum):
    """How repeated execution times are aggregated into a budget."""

    ARITHMETIC = "arithmetic"
    GEOMETRIC = "geometric"


def arithmetic_mean(values: Sequence[float]) -> float:
    """Return sum / N."""
    if not values:
        msg = "Cannot average an empty sequence"
        raise ValueError(msg)
    return math.fsum(values) / len(values)


def geometric_mean(values: Sequence[float]) -> float:
    """Return the N-th root of the product, computed in log space."""
    if not values:
        msg = "Cannot average an empty sequence"
        raise ValueError(msg)
    if any(v <= 0 for v in values):
        msg = f"Geometric mean needs positive values, got {list(values)}"
        raise ValueError(msg)
    return math.exp(math.fsum(math.log(v) for v in values) / len(values))


class RuntimeBudgetPropagator:
    """Aggregates repeated execution times into a millisecond time limit."""

    policy: MeanPolicy

    def __init__(self, policy: MeanPolicy | str = MeanPolicy.ARITHMETIC) -> None:
        self.policy = MeanPolicy(policy)

    def aggregate(self, times_ms: Sequence[float]) -> float:
        """Mean of the times under the configured policy."""
        if any(t < 0 for t in times_ms):
            msg = f"Durations can't be negative: {list(times_ms)}"
            raise ValueError(msg)
        if self.policy is MeanPolicy.GEOMETRIC:
            return geometric_mean([max(t, MIN_DURATION_MS) for t in times_ms])
        return arithmetic_mean(times_ms)

    def propagate(self, times_ms: Sequence[float]) -> int:
        """Budget for the next comparable run, at least one millisecond."""
        return max(1, round(self.aggregate(times_ms)))
