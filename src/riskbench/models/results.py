# Copyright (c) Syntropy Systems
"""Models for progress samples, run measurements and recorded rows."""

from __future__ import annotations

from pydantic import Field

from .base import BenchBaseModel, CSVValue, FrozenModel


class ProgressPoint(FrozenModel):
    """A timestamped sample of a running search.

    The sentinel that opens every trace has no information loss.
    """

    timestamp_ms: int
    information_loss: float | None = None


class RunMeasurement(FrozenModel):
    """Measurements of one repetition of one benchmark run."""

    execution_time_ns: int = Field(ge=0)
    discovery_time_ms: float = 0.0
    information_loss_minimum: float = 0.0

    @property
    def execution_time_ms(self) -> float:
        return self.execution_time_ns / 1_000_000


class ResultRow(BenchBaseModel):
    """One aggregated row of a result file."""

    key: tuple[CSVValue, ...]
    values: dict[str, float | None] = Field(default_factory=dict)

    def get(self, measure: str) -> float | None:
        """Return the aggregate of a measure, None if never recorded."""
        return self.values.get(measure)
