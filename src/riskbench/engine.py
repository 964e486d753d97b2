# Copyright (c) Syntropy Systems
"""Contract with the external anonymization engine."""
from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, cast, runtime_checkable

from riskbench.errors import BenchmarkConfigError
from riskbench.models.setup import Flash

if TYPE_CHECKING:
    from collections.abc import Callable

    from riskbench.datasets import LoadedDataset
    from riskbench.models.setup import Algorithm, PrivacyCriterion, UtilityMetric

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnonymizationConfig:
    """Everything the engine needs to know about one run."""

    criteria: tuple[PrivacyCriterion, ...]
    metric: UtilityMetric
    max_outliers: float
    algorithm: Algorithm = field(default_factory=Flash)

    @property
    def time_limit_ms(self) -> int | None:
        """Runtime limit for bounded searches, None for unbounded."""
        return self.algorithm.time_limit_ms


@dataclass(frozen=True)
class OutputRow:
    """A row of the anonymized output."""

    values: tuple[str, ...]
    is_outlier: bool = False


@dataclass(frozen=True)
class LatticeNode:
    """A transformation in the search space."""

    transformation: tuple[int, ...]
    checked: bool = False
    information_loss: float | None = None


@dataclass(frozen=True)
class Lattice:
    """Transformation nodes grouped by level."""

    levels: tuple[tuple[LatticeNode, ...], ...] = ()

    def nodes(self) -> list[LatticeNode]:
        return [node for level in self.levels for node in level]

    def checked_count(self) -> int:
        return sum(1 for node in self.nodes() if node.checked)


@dataclass(frozen=True)
class AnonymizationResult:
    """What the engine returns for one run."""

    output: tuple[OutputRow, ...] = ()
    lattice: Lattice = field(default_factory=Lattice)
    optimum: LatticeNode | None = None

    @property
    def outlier_count(self) -> int:
        return sum(1 for row in self.output if row.is_outlier)

    @property
    def minimum_information_loss(self) -> float | None:
        if self.optimum is None:
            return None
        return self.optimum.information_loss


@runtime_checkable
class ProgressListener(Protocol):
    """Receives improvement events while the engine searches."""

    def transformation_found(self, timestamp_ms: int, loss: float) -> None:
        ...


@runtime_checkable
class Anonymizer(Protocol):
    """The external anonymization engine.

    ``anonymize`` blocks until the search is done. The engine must report
    every solution improvement to ``listener``.
    """

    def anonymize(
        self,
        dataset: LoadedDataset,
        config: AnonymizationConfig,
        listener: ProgressListener,
    ) -> AnonymizationResult:
        ...


def load_engine(spec: str | None) -> Anonymizer:
    """Import and instantiate an engine from a ``module:factory`` string."""
    if not spec:
        msg = "No anonymization engine configured (set 'engine: module:factory')"
        raise BenchmarkConfigError(msg, spec)

    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        msg = f"Engine must be given as 'module:factory', got {spec!r}"
        raise BenchmarkConfigError(msg, spec)

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        msg = f"Cannot import engine module {module_name!r}: {e}"
        raise BenchmarkConfigError(msg, spec) from e

    factory = cast("Callable[[], object] | None", getattr(module, attr, None))
    if factory is None or not callable(factory):
        msg = f"Engine factory {attr!r} not found in {module_name!r}"
        raise BenchmarkConfigError(msg, spec)

    engine = factory()
    if not isinstance(engine, Anonymizer):
        msg = f"Engine {spec!r} has no anonymize() method"
        raise BenchmarkConfigError(msg, spec)
    logger.debug("Loaded anonymization engine %s", spec)
    return engine
