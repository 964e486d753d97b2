# Copyright (c) Syntropy Systems
"""Configuration management for riskbench."""
from __future__ import annotations

from pathlib import Path
from typing import Annotated, cast

import yaml
from pydantic import Field, PositiveInt, ValidationError

from riskbench.budget import MeanPolicy
from riskbench.errors import BenchmarkConfigError
from riskbench.models.base import BenchBaseModel
from riskbench.models.setup import (
    AECS,
    Datafile,
    DatasetConfig,
    KAnonymity,
    Loss,
    PopulationUniqueness,
    PrivacyCriterion,
    UtilityMetric,
)

CONFIG_FILENAME = "riskbench.yaml"

FLASH_RESULT_FILE = "resultFlashCompare.csv"
REFERENCE_RESULT_FILE = "resultsHeuraklesExhaustive.csv"
SELF_RESULT_FILE = "resultSelfCompare.csv"

# ACS13 is truncated in the Flash comparison to keep the exhaustive search feasible
FLASH_ACS13_QI_COUNT = 10


def _default_criteria() -> list[PrivacyCriterion]:
    return [KAnonymity(k=5), PopulationUniqueness(threshold=0.01)]


def _default_metrics() -> list[UtilityMetric]:
    return [Loss(), AECS()]


def _default_flash_datasets() -> list[DatasetConfig]:
    return [
        DatasetConfig(datafile=Datafile.ADULT),
        DatasetConfig(datafile=Datafile.CUP),
        DatasetConfig(datafile=Datafile.FARS),
        DatasetConfig(datafile=Datafile.ATUS),
        DatasetConfig(datafile=Datafile.IHIS),
        DatasetConfig(datafile=Datafile.ACS13, custom_qi_count=FLASH_ACS13_QI_COUNT),
    ]


class SuiteConfig(BenchBaseModel):
    """Parameter lists both benchmark suites iterate over."""

    criteria: list[PrivacyCriterion] = Field(default_factory=_default_criteria)
    metrics: list[UtilityMetric] = Field(default_factory=_default_metrics)
    suppression_values: list[Annotated[float, Field(ge=0.0, le=1.0)]] = Field(
        default_factory=lambda: [0.0, 1.0]
    )
    flash_datasets: list[DatasetConfig] = Field(default_factory=_default_flash_datasets)
    self_datafiles: list[Datafile] = Field(default_factory=lambda: [Datafile.ACS13])
    self_qi_counts: list[PositiveInt] = Field(default_factory=lambda: [5, 6, 7, 8])
    self_time_limit_ms: int = Field(default=600_000, gt=0)


class BenchConfig(BenchBaseModel):
    """Configuration for a benchmark sweep."""

    # Directory holding <stem>.csv data files
    data_dir: Path = Path("data")
    # Directory holding hierarchy tables and interval templates
    hierarchy_dir: Path = Path("hierarchies")
    # Where result files are written
    results_dir: Path = Path()
    # Repetitions per experiment point, averaged in the result files
    repetitions: int = Field(default=2, ge=1)
    # How Flash execution times become the Heurakles time limit
    budget_policy: MeanPolicy = MeanPolicy.ARITHMETIC
    # Also run an unbounded Heurakles search per Flash comparison cell
    reference_runs: bool = True
    # Anonymization engine as "module:factory"
    engine: str | None = None

    flash_result_file: str = FLASH_RESULT_FILE
    reference_result_file: str = REFERENCE_RESULT_FILE
    self_result_file: str = SELF_RESULT_FILE

    suites: SuiteConfig = Field(default_factory=SuiteConfig)

    def resolve_paths(self, base: Path) -> BenchConfig:
        """Return a copy with relative directories anchored at ``base``."""
        return self.model_copy(
            update={
                "data_dir": base / self.data_dir,
                "hierarchy_dir": base / self.hierarchy_dir,
                "results_dir": base / self.results_dir,
            }
        )


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find the nearest riskbench.yaml by walking up from start_path.

    Returns None if no config file is found.
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()

    while current != current.parent:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        current = current.parent

    # Check root
    candidate = current / CONFIG_FILENAME
    if candidate.is_file():
        return candidate

    return None


def load_config(config_path: Path | None = None) -> BenchConfig:
    """Load configuration from a YAML file or defaults.

    Looks for config in:
    1. Provided config_path
    2. Nearest riskbench.yaml walking up from the working directory
    3. Defaults, relative to the working directory
    """
    if config_path is None:
        config_path = find_config_file()

    if config_path is None:
        return BenchConfig().resolve_paths(Path.cwd())

    try:
        with config_path.open() as f:
            data = cast("object", yaml.safe_load(f) or {})
    except yaml.YAMLError as e:
        msg = f"Malformed config {config_path}: {e}"
        raise BenchmarkConfigError(msg, str(config_path)) from e

    if not isinstance(data, dict):
        msg = f"Config file {config_path} must contain a mapping"
        raise BenchmarkConfigError(msg, str(config_path))

    try:
        config = BenchConfig.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid config {config_path}: {e}"
        raise BenchmarkConfigError(msg, str(config_path)) from e

    return config.resolve_paths(config_path.resolve().parent)


def default_config_data() -> dict[str, object]:
    """Default configuration as plain YAML-serializable data."""
    return cast("dict[str, object]", BenchConfig().model_dump(mode="json"))

