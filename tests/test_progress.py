# Copyright (c) Syntropy Systems
"""Tests for progress traces."""

from riskbench.engine import ProgressListener
from riskbench.progress import NO_SOLUTION_FOUND, ProgressTrace


class TestProgressTrace:
    """Tests for recording improvement events."""

    def test_starts_with_sentinel(self) -> None:
        """Test the sentinel point at creation time."""
        trace = ProgressTrace(clock=lambda: 1000)

        assert len(trace.points) == 1
        assert trace.points[0].timestamp_ms == 1000
        assert trace.points[0].information_loss is None
        assert not trace.has_solution()

    def test_no_solution(self) -> None:
        """Test the reported values when nothing was found."""
        trace = ProgressTrace(clock=lambda: 1000)

        assert trace.discovery_time() == NO_SOLUTION_FOUND
        assert trace.best_loss() == NO_SOLUTION_FOUND
        assert trace.first_improvement_time() == NO_SOLUTION_FOUND

    def test_improvements(self) -> None:
        """Test discovery time and loss of the last improvement."""
        trace = ProgressTrace(clock=lambda: 1000)

        trace.transformation_found(1040, 0.5)
        trace.transformation_found(1070, 0.3)

        assert trace.has_solution()
        assert trace.discovery_time() == 70.0
        assert trace.first_improvement_time() == 40.0
        assert trace.best_loss() == 0.3

    def test_measurement(self) -> None:
        trace = ProgressTrace(clock=lambda: 0)
        trace.transformation_found(25, 0.75)

        measurement = trace.measurement(3_000_000)

        assert measurement.execution_time_ns == 3_000_000
        assert measurement.discovery_time_ms == 25.0
        assert measurement.information_loss_minimum == 0.75

    def test_is_a_progress_listener(self) -> None:
        assert isinstance(ProgressTrace(), ProgressListener)
