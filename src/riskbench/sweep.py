# Copyright (c) Syntropy Systems
"""Experiment matrix of the two benchmark suites."""
from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import TYPE_CHECKING

from riskbench.models.setup import (
    DatasetConfig,
    ExperimentPoint,
    Flash,
    Heurakles,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from riskbench.config import SuiteConfig
    from riskbench.models.setup import Algorithm, PrivacyCriterion, UtilityMetric


@dataclass(frozen=True)
class ComparisonCell:
    """One innermost tuple of the Flash comparison.

    Each cell is run with Flash first; Heurakles then gets the Flash time as
    its budget.
    """

    criterion: PrivacyCriterion
    dataset: DatasetConfig
    metric: UtilityMetric
    suppression: float

    def point(self, algorithm: Algorithm) -> ExperimentPoint:
        """Experiment point of this cell for an algorithm."""
        return ExperimentPoint(
            criterion=self.criterion,
            dataset=self.dataset,
            metric=self.metric,
            suppression=self.suppression,
            algorithm=algorithm,
        )


class ExperimentMatrix:
    """Enumerates both suites in a fixed nested order.

    Flash comparison: criterion > dataset > metric > suppression.
    Self comparison: criterion > datafile > metric > suppression > QI count.
    """

    suites: SuiteConfig

    def __init__(self, suites: SuiteConfig) -> None:
        self.suites = suites

    def flash_comparison(self) -> Iterator[ComparisonCell]:
        """Cells of the Flash-vs-Heurakles comparison."""
        s = self.suites
        for criterion, dataset, metric, suppression in itertools.product(
            s.criteria, s.flash_datasets, s.metrics, s.suppression_values
        ):
            yield ComparisonCell(criterion, dataset, metric, suppression)

    def self_comparison(self) -> Iterator[ExperimentPoint]:
        """Points of the Heurakles self comparison across QI counts."""
        s = self.suites
        algorithm = Heurakles(time_limit_ms=s.self_time_limit_ms)
        for criterion, datafile, metric, suppression, qi_count in itertools.product(
            s.criteria, s.self_datafiles, s.metrics, s.suppression_values, s.self_qi_counts
        ):
            yield ExperimentPoint(
                criterion=criterion,
                dataset=DatasetConfig(datafile=datafile, custom_qi_count=qi_count),
                metric=metric,
                suppression=suppression,
                algorithm=algorithm,
            )

    def plan(self, *, reference_runs: bool = True) -> list[ExperimentPoint]:
        """Every run of both suites in execution order.

        The Heurakles budget of comparison runs is only known at runtime and
        is left unset here.
        """
        points: list[ExperimentPoint] = []
        for cell in self.flash_comparison():
            points.append(cell.point(Flash()))
            points.append(cell.point(Heurakles()))
            if reference_runs:
                points.append(cell.point(Heurakles()))
        points.extend(self.self_comparison())
        return points

