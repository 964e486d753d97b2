# Copyright (c) Syntropy Systems
"""Sequential driver of the benchmark suites."""
from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from rich.console import Console

from riskbench.budget import RuntimeBudgetPropagator
from riskbench.datasets import DatasetCatalog
from riskbench.engine import AnonymizationConfig
from riskbench.models.setup import Flash, Heurakles
from riskbench.progress import ProgressTrace, now_ms
from riskbench.recorder import (
    DISCOVERY_TIME,
    EXECUTION_TIME,
    INFORMATION_LOSS_MINIMUM,
    BenchmarkContext,
    ResultRecorder,
)
from riskbench.sweep import ExperimentMatrix

if TYPE_CHECKING:
    from collections.abc import Callable

    from riskbench.config import BenchConfig
    from riskbench.engine import Anonymizer
    from riskbench.models.setup import ExperimentPoint
    from riskbench.sweep import ComparisonCell

logger = logging.getLogger(__name__)


def prepare_configuration(point: ExperimentPoint) -> AnonymizationConfig:
    """Engine configuration for an experiment point."""
    return AnonymizationConfig(
        criteria=(point.criterion,),
        metric=point.metric,
        max_outliers=point.suppression,
        algorithm=point.algorithm,
    )


class ExperimentRunner:
    """Runs the Flash comparison and the Heurakles self comparison.

    Runs happen one at a time, depth first through the experiment matrix.
    Every run is repeated ``config.repetitions`` times and its result file
    is rewritten after each run.
    """

    config: BenchConfig
    engine: Anonymizer
    catalog: DatasetCatalog
    matrix: ExperimentMatrix
    propagator: RuntimeBudgetPropagator
    console: Console
    _clock: Callable[[], int]
    _timer: Callable[[], int]

    def __init__(
        self,
        config: BenchConfig,
        engine: Anonymizer,
        catalog: DatasetCatalog | None = None,
        console: Console | None = None,
        clock: Callable[[], int] = now_ms,
        timer: Callable[[], int] = time.perf_counter_ns,
    ) -> None:
        self.config = config
        self.engine = engine
        self.catalog = catalog or DatasetCatalog(config.data_dir, config.hierarchy_dir)
        self.matrix = ExperimentMatrix(config.suites)
        self.propagator = RuntimeBudgetPropagator(config.budget_policy)
        self.console = console or Console()
        self._clock = clock
        self._timer = timer

    def new_context(self) -> BenchmarkContext:
        return BenchmarkContext(
            repetitions=self.config.repetitions,
            results_dir=self.config.results_dir,
            timer=self._timer,
        )

    def run_and_record(
        self, point: ExperimentPoint, recorder: ResultRecorder
    ) -> list[float]:
        """Run one experiment point repeatedly and record the measurements.

        Returns the execution time of each repetition in milliseconds.
        """
        self.console.print(f"Benchmarking ({point.describe()})")

        anon_config = prepare_configuration(point)
        times_ms: list[float] = []
        for repetition in range(self.config.repetitions):
            dataset = self.catalog.resolve(point.dataset)
            recorder.add_run(point)
            trace = ProgressTrace(self._clock)

            recorder.start_timer(EXECUTION_TIME)
            result = self.engine.anonymize(dataset, anon_config, trace)
            elapsed_ns = recorder.stop_timer(EXECUTION_TIME)

            measurement = trace.measurement(elapsed_ns)
            recorder.add_value(DISCOVERY_TIME, measurement.discovery_time_ms)
            recorder.add_value(
                INFORMATION_LOSS_MINIMUM, measurement.information_loss_minimum
            )
            times_ms.append(measurement.execution_time_ms)

            if not trace.has_solution():
                logger.debug("No improvement reported for %s", point.describe())
            logger.debug(
                "Repetition %d: %.1f ms, %d outliers, %d checked nodes",
                repetition + 1,
                measurement.execution_time_ms,
                result.outlier_count,
                result.lattice.checked_count(),
            )

        if recorder.path is not None:
            _ = recorder.write()
        return times_ms

    def run_cell(self, cell: ComparisonCell, context: BenchmarkContext) -> int:
        """Flash, then Heurakles bounded by Flash's time, then the reference run.

        Returns the Heurakles time limit in milliseconds.
        """
        flash_recorder = context.recorder(self.config.flash_result_file)
        flash_times = self.run_and_record(cell.point(Flash()), flash_recorder)

        budget_ms = self.propagator.propagate(flash_times)
        logger.debug("Heurakles budget %d ms from %s", budget_ms, flash_times)
        _ = self.run_and_record(
            cell.point(Heurakles(time_limit_ms=budget_ms)), flash_recorder
        )

        if self.config.reference_runs:
            _ = self.run_and_record(
                cell.point(Heurakles()),
                context.recorder(self.config.reference_result_file),
            )
        return budget_ms

    def run_flash_comparison(self, context: BenchmarkContext) -> None:
        for cell in self.matrix.flash_comparison():
            _ = self.run_cell(cell, context)

    def run_self_comparison(self, context: BenchmarkContext) -> None:
        recorder = context.recorder(self.config.self_result_file)
        for point in self.matrix.self_comparison():
            _ = self.run_and_record(point, recorder)

    def run_all(self) -> BenchmarkContext:
        """Run both suites; result files are flushed even if a run fails."""
        with self.new_context() as context:
            self.console.print("Starting Flash comparison")
            self.run_flash_comparison(context)

            self.console.print("\nStarting self comparison")
            self.run_self_comparison(context)

            self.console.print("\ndone.")
        return context
