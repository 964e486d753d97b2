# Copyright (c) Syntropy Systems
"""Progress traces collected from a running anonymization search."""
from __future__ import annotations

import time
from typing import TYPE_CHECKING

from riskbench.models.results import ProgressPoint, RunMeasurement

if TYPE_CHECKING:
    from collections.abc import Callable

# Reported for discovery time and information loss when no solution was found
NO_SOLUTION_FOUND = 0.0


def now_ms() -> int:
    """Wall-clock time in milliseconds."""
    return time.time_ns() // 1_000_000


class ProgressTrace:
    """Passive listener recording each improvement a search reports.

    The trace starts with a sentinel point (creation time, no loss). The
    engine calls ``transformation_found`` whenever it finds a better solution.
    """

    _points: list[ProgressPoint]

    def __init__(self, clock: Callable[[], int] = now_ms) -> None:
        self._points = [ProgressPoint(timestamp_ms=clock())]

    def transformation_found(self, timestamp_ms: int, loss: float) -> None:
        """Record an improvement event."""
        self._points.append(
            ProgressPoint(timestamp_ms=timestamp_ms, information_loss=loss)
        )

    @property
    def points(self) -> tuple[ProgressPoint, ...]:
        return tuple(self._points)

    def has_solution(self) -> bool:
        """Whether at least one real improvement was reported."""
        return len(self._points) > 1

    def discovery_time(self) -> float:
        """Milliseconds from the start of the run to the last improvement."""
        if not self.has_solution():
            return NO_SOLUTION_FOUND
        return float(self._points[-1].timestamp_ms - self._points[0].timestamp_ms)

    def best_loss(self) -> float:
        """Information loss of the last improvement."""
        if not self.has_solution():
            return NO_SOLUTION_FOUND
        loss = self._points[-1].information_loss
        return NO_SOLUTION_FOUND if loss is None else loss

    def first_improvement_time(self) -> float:
        """Milliseconds from the start of the run to the first improvement."""
        if not self.has_solution():
            return NO_SOLUTION_FOUND
        return float(self._points[1].timestamp_ms - self._points[0].timestamp_ms)

    def measurement(self, execution_time_ns: int) -> RunMeasurement:
        """Summarize this trace together with the measured execution time."""
        return RunMeasurement(
            execution_time_ns=execution_time_ns,
            discovery_time_ms=self.discovery_time(),
            information_loss_minimum=self.best_loss(),
        )
