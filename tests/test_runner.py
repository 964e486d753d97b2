# Copyright (c) Syntropy Systems
"""Tests for the benchmark driver."""

import io
import itertools
from pathlib import Path

import pytest
from fake_engine import FakeEngine
from rich.console import Console

from riskbench.config import BenchConfig
from riskbench.models.setup import Flash, Heurakles
from riskbench.recorder import (
    DISCOVERY_TIME,
    EXECUTION_TIME,
    INFORMATION_LOSS_MINIMUM,
    read_results,
)
from riskbench.runner import ExperimentRunner, prepare_configuration
from riskbench.sweep import ExperimentMatrix


def _stepping_timer(durations_ms):
    """Timer whose start/stop pairs measure the given durations in turn."""
    ticks = itertools.chain.from_iterable(
        (0, d * 1_000_000) for d in itertools.cycle(durations_ms)
    )
    return ticks.__next__


def _runner(config: BenchConfig, engine: FakeEngine) -> tuple[ExperimentRunner, io.StringIO]:
    out = io.StringIO()
    runner = ExperimentRunner(
        config,
        engine,
        console=Console(file=out, width=200),
        clock=lambda: 1000,
        timer=_stepping_timer([100, 120]),
    )
    return runner, out


class TestPrepareConfiguration:
    """Tests for building the engine configuration."""

    def test_from_point(self, bench_config: BenchConfig) -> None:
        cell = next(ExperimentMatrix(bench_config.suites).flash_comparison())

        config = prepare_configuration(cell.point(Heurakles(time_limit_ms=7)))

        assert config.criteria == (cell.criterion,)
        assert config.metric == cell.metric
        assert config.max_outliers == 0.0
        assert config.time_limit_ms == 7


class TestRunCell:
    """Tests for one Flash comparison cell."""

    def test_budget_from_flash_times(self, bench_config: BenchConfig) -> None:
        """Test that Flash runs of 100 ms and 120 ms give Heurakles 110 ms."""
        engine = FakeEngine()
        runner, _ = _runner(bench_config, engine)
        cell = next(runner.matrix.flash_comparison())

        with runner.new_context() as context:
            budget = runner.run_cell(cell, context)

        assert budget == 110
        algorithms = [config.algorithm for _, config in engine.calls]
        assert algorithms == [
            Flash(),
            Flash(),
            Heurakles(time_limit_ms=110),
            Heurakles(time_limit_ms=110),
            Heurakles(),
            Heurakles(),
        ]

    def test_without_reference_runs(self, bench_config: BenchConfig) -> None:
        config = bench_config.model_copy(update={"reference_runs": False})
        engine = FakeEngine()
        runner, _ = _runner(config, engine)
        cell = next(runner.matrix.flash_comparison())

        with runner.new_context() as context:
            _ = runner.run_cell(cell, context)

        assert len(engine.calls) == 4
        assert set(context.recorders) == {config.flash_result_file}
        assert not (config.results_dir / config.reference_result_file).exists()


class TestRunAll:
    """Tests for running both suites end to end."""

    def test_result_files(self, bench_config: BenchConfig) -> None:
        """Test the rows and means of every result file."""
        runner, _ = _runner(bench_config, FakeEngine())

        _ = runner.run_all()

        results = bench_config.results_dir
        flash_rows = read_results(results / bench_config.flash_result_file)
        assert [row.key for row in flash_rows] == [
            ("(2)-Anonymity", "Adult", 2, "Loss", 0.0, "Flash"),
            ("(2)-Anonymity", "Adult", 2, "Loss", 0.0, "Heurakles"),
        ]
        for row in flash_rows:
            assert row.get(EXECUTION_TIME) == 110_000_000
            assert row.get(DISCOVERY_TIME) == 70.0
            assert row.get(INFORMATION_LOSS_MINIMUM) == 0.3

        reference_rows = read_results(results / bench_config.reference_result_file)
        assert len(reference_rows) == 1

        self_rows = read_results(results / bench_config.self_result_file)
        assert [row.key[2] for row in self_rows] == [1, 2]
        assert {row.key[1] for row in self_rows} == {"ACS13"}

    def test_self_comparison_limit(self, bench_config: BenchConfig) -> None:
        engine = FakeEngine()
        runner, _ = _runner(bench_config, engine)

        _ = runner.run_all()

        self_calls = engine.calls[6:]
        assert len(self_calls) == 4
        assert {config.time_limit_ms for _, config in self_calls} == {500}
        assert [dataset.custom_qi_count for dataset, _ in self_calls] == [1, 1, 2, 2]

    def test_console_output(self, bench_config: BenchConfig) -> None:
        runner, out = _runner(bench_config, FakeEngine())

        _ = runner.run_all()

        lines = out.getvalue().splitlines()
        assert lines[0] == "Starting Flash comparison"
        assert lines[1] == "Benchmarking (Flash / (2)-Anonymity / Adult / 2 / Loss / 0.0)"
        assert "Starting self comparison" in lines
        assert lines[-1] == "done."

    def test_no_solution_reported(self, bench_config: BenchConfig) -> None:
        """Test that runs without improvements record zeros."""
        runner, _ = _runner(bench_config, FakeEngine(events=()))

        _ = runner.run_all()

        rows = read_results(bench_config.results_dir / bench_config.flash_result_file)
        assert rows[0].get(DISCOVERY_TIME) == 0.0
        assert rows[0].get(INFORMATION_LOSS_MINIMUM) == 0.0

    def test_failure_keeps_finished_rows(
        self, bench_project: Path, bench_config: BenchConfig
    ) -> None:
        """Test that a failing run aborts the sweep after earlier rows were written."""
        (bench_project / "hierarchies" / "ss13acs_hierarchy_o_CIT.csv").unlink()
        runner, _ = _runner(bench_config, FakeEngine())

        with pytest.raises(FileNotFoundError):
            _ = runner.run_all()

        self_rows = read_results(bench_config.results_dir / bench_config.self_result_file)
        assert [row.key[2] for row in self_rows] == [1]
        assert (bench_config.results_dir / bench_config.flash_result_file).exists()
