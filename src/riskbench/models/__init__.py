# Copyright (c) Syntropy Systems
"""Pydantic models for benchmark setup and results."""

from riskbench.models.results import ProgressPoint, ResultRow, RunMeasurement
from riskbench.models.setup import (
    AECS,
    Algorithm,
    AverageEquivalenceClassSize,
    Datafile,
    DatasetConfig,
    ExperimentPoint,
    Flash,
    Heurakles,
    KAnonymity,
    Loss,
    PopulationUniqueness,
    PrivacyCriterion,
    UtilityMetric,
)

__all__ = [
    "AECS",
    "Algorithm",
    "AverageEquivalenceClassSize",
    "Datafile",
    "DatasetConfig",
    "ExperimentPoint",
    "Flash",
    "Heurakles",
    "KAnonymity",
    "Loss",
    "PopulationUniqueness",
    "PrivacyCriterion",
    "ProgressPoint",
    "ResultRow",
    "RunMeasurement",
    "UtilityMetric",
]
