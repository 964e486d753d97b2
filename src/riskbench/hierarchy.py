# Copyright (c) Syntropy Systems
"""Generalization hierarchies: explicit tables and interval templates."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Literal, cast

import yaml
from pydantic import Field, ValidationError, model_validator
from typing_extensions import Self

from riskbench.errors import BenchmarkConfigError
from riskbench.models.base import BenchBaseModel
from riskbench.models.setup import (
    Datafile,
    HierarchyType,
    acs13_hierarchy_type,
    datafile_info,
)
from riskbench.table import Table, load_table, read_rows

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

logger = logging.getLogger(__name__)

SUPPRESSED = "*"


@dataclass(frozen=True)
class Hierarchy:
    """A generalization hierarchy.

    Each row maps one input value (first column) to its generalizations,
    one column per level.
    """

    rows: tuple[tuple[str, ...], ...]

    @classmethod
    def from_file(cls, path: Path) -> Hierarchy:
        """Load an explicit hierarchy table (no header row)."""
        rows = read_rows(path)
        if not rows:
            msg = f"Empty hierarchy file: {path}"
            raise BenchmarkConfigError(msg, str(path))
        return cls(rows=tuple(rows))

    @property
    def height(self) -> int:
        """Number of levels, including the input values."""
        return max((len(row) for row in self.rows), default=0)

    def values(self) -> list[str]:
        """Input values covered by the hierarchy."""
        return [row[0] for row in self.rows]

    def generalize(self, value: str, level: int) -> str:
        """Return the generalization of a value at a level."""
        for row in self.rows:
            if row[0] == value:
                return row[min(level, len(row) - 1)]
        raise KeyError(value)


class IntervalSpec(BenchBaseModel):
    """A base interval, lower bound inclusive, upper bound exclusive."""

    lower: float
    upper: float
    label: str | None = None

    @model_validator(mode="after")
    def _check_bounds(self) -> Self:
        if self.upper <= self.lower:
            msg = f"Interval upper bound {self.upper} must exceed lower bound {self.lower}"
            raise ValueError(msg)
        return self


class RangeSpec(BenchBaseModel):
    """Values outside this range are snapped to an open-ended label."""

    lower: float
    upper: float


class HierarchyTemplate(BenchBaseModel):
    """Contents of an ``.ahs`` hierarchy template file."""

    type: str
    datatype: Literal["integer", "decimal"] = "integer"
    intervals: list[IntervalSpec] = Field(default_factory=list)
    levels: list[int] = Field(default_factory=list)
    range: RangeSpec | None = None

    @model_validator(mode="after")
    def _check_intervals(self) -> Self:
        if self.type != "interval":
            return self
        if not self.intervals:
            msg = "Interval template needs at least one interval"
            raise ValueError(msg)
        for prev, cur in zip(self.intervals, self.intervals[1:]):
            if cur.lower != prev.upper:
                msg = f"Intervals must be contiguous: {prev.upper} != {cur.lower}"
                raise ValueError(msg)
        if any(size < 1 for size in self.levels):
            msg = "Group sizes must be positive"
            raise ValueError(msg)
        return self


def load_template(path: Path) -> HierarchyTemplate:
    """Load an ``.ahs`` hierarchy template."""
    try:
        with path.open() as f:
            data = cast("object", yaml.safe_load(f))
    except yaml.YAMLError as e:
        msg = f"Malformed hierarchy template {path}: {e}"
        raise BenchmarkConfigError(msg, str(path)) from e
    try:
        return HierarchyTemplate.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid hierarchy template {path}: {e}"
        raise BenchmarkConfigError(msg, str(path)) from e


class IntervalHierarchyBuilder:
    """Builds an interval-based hierarchy from a template and observed values.

    The template describes one period of intervals; ``prepare`` supplies the
    column's distinct values and the period is repeated as far as needed to
    cover them. ``build`` then materializes one row per value.
    """

    template: HierarchyTemplate
    _base: list[tuple[Decimal, Decimal, str | None]]
    _values: list[tuple[Decimal, str]] | None

    def __init__(self, template: HierarchyTemplate) -> None:
        if template.type != "interval":
            msg = (
                "Inconsistent hierarchy types. Expected: interval-based, "
                f"found: {template.type}"
            )
            raise BenchmarkConfigError(msg, template.type)
        self.template = template
        # Bounds are kept exact so values on a repeated lower bound stay in it
        self._base = [
            (_exact(i.lower), _exact(i.upper), i.label) for i in template.intervals
        ]
        self._values = None

    @property
    def _origin(self) -> Decimal:
        return self._base[0][0]

    @property
    def _period(self) -> Decimal:
        return self._base[-1][1] - self._origin

    def prepare(self, values: Iterable[str]) -> None:
        """Supply the distinct values the hierarchy has to cover."""
        parsed: dict[str, Decimal] = {}
        for value in values:
            try:
                parsed[value] = Decimal(value)
            except InvalidOperation as e:
                msg = f"Not a numeric value for an interval hierarchy: {value!r}"
                raise BenchmarkConfigError(msg, value) from e
            if not parsed[value].is_finite():
                msg = f"NaN or infinity in interval hierarchy input: {value!r}"
                raise BenchmarkConfigError(msg, value)
        self._values = sorted(((num, raw) for raw, num in parsed.items()))

    def build(self) -> Hierarchy:
        """Materialize the hierarchy for the prepared values."""
        if self._values is None:
            msg = "prepare() must be called before build()"
            raise RuntimeError(msg)
        rows = tuple(self._row(num, raw) for num, raw in self._values)
        logger.debug("Built interval hierarchy with %d rows", len(rows))
        return Hierarchy(rows=rows)

    def _row(self, num: Decimal, raw: str) -> tuple[str, ...]:
        depth = 1 + len(self.template.levels)
        bounds = self.template.range
        if bounds is not None and num < _exact(bounds.lower):
            return (raw, *[f"<{self._fmt(_exact(bounds.lower))}"] * depth, SUPPRESSED)
        if bounds is not None and num >= _exact(bounds.upper):
            return (raw, *[f">={self._fmt(_exact(bounds.upper))}"] * depth, SUPPRESSED)

        index = self._interval_index(num)
        labels = [self._interval_label(index)]
        group = 1
        for size in self.template.levels:
            group *= size
            first = (index // group) * group
            labels.append(self._span_label(first, first + group - 1))
        return (raw, *labels, SUPPRESSED)

    def _interval_index(self, num: Decimal) -> int:
        period = math.floor((num - self._origin) / self._period)
        index = period * len(self._base)
        # Division rounds at the context precision; settle on the shifted bounds
        lower, upper = self._bounds(index)
        while num < lower:
            index -= 1
            lower, upper = self._bounds(index)
        while num >= upper:
            index += 1
            lower, upper = self._bounds(index)
        return index

    def _bounds(self, index: int) -> tuple[Decimal, Decimal]:
        period, i = divmod(index, len(self._base))
        lower, upper, _ = self._base[i]
        shift = period * self._period
        return lower + shift, upper + shift

    def _interval_label(self, index: int) -> str:
        period, i = divmod(index, len(self._base))
        label = self._base[i][2]
        if label is not None and period == 0:
            return label
        return self._span_label(index, index)

    def _span_label(self, first: int, last: int) -> str:
        lower, _ = self._bounds(first)
        _, upper = self._bounds(last)
        return f"[{self._fmt(lower)}, {self._fmt(upper)}["

    def _fmt(self, bound: Decimal) -> str:
        if self.template.datatype == "integer":
            return str(int(bound))
        return f"{float(bound):g}"


def _exact(bound: float) -> Decimal:
    """Decimal of the shortest repr, so 0.1 becomes exactly 0.1."""
    return Decimal(repr(bound))


def acs13_file_stem(attribute: str) -> str:
    """File stem suffix of an ACS13 hierarchy, e.g. ``i_AGEP``."""
    return f"{acs13_hierarchy_type(attribute).letter}_{attribute}"


class HierarchyResolver:
    """Locates and loads the hierarchy of a datafile attribute."""

    data_dir: Path
    hierarchy_dir: Path

    def __init__(self, data_dir: Path, hierarchy_dir: Path) -> None:
        self.data_dir = data_dir
        self.hierarchy_dir = hierarchy_dir

    def data_path(self, datafile: Datafile) -> Path:
        return self.data_dir / f"{datafile_info(datafile).stem}.csv"

    def hierarchy_path(self, datafile: Datafile, attribute: str) -> Path:
        """Path of the hierarchy file for an attribute."""
        stem = datafile_info(datafile).stem
        if datafile is not Datafile.ACS13:
            return self.hierarchy_dir / f"{stem}_hierarchy_{attribute}.csv"
        suffix = (
            ".ahs"
            if acs13_hierarchy_type(attribute) is HierarchyType.INTERVAL
            else ".csv"
        )
        return self.hierarchy_dir / f"{stem}_hierarchy_{acs13_file_stem(attribute)}{suffix}"

    def resolve(
        self,
        datafile: Datafile,
        attribute: str,
        table: Table | None = None,
    ) -> Hierarchy:
        """Return the hierarchy for an attribute of a datafile.

        For ACS13 interval attributes the dataset is loaded to extract the
        column's distinct values, unless an already loaded table is passed.
        """
        path = self.hierarchy_path(datafile, attribute)
        if datafile is not Datafile.ACS13:
            return Hierarchy.from_file(path)

        if acs13_hierarchy_type(attribute) is HierarchyType.ORDER:
            return Hierarchy.from_file(path)

        builder = IntervalHierarchyBuilder(load_template(path))
        if table is None:
            logger.debug("Loading %s to prepare %s", datafile.value, attribute)
            table = load_table(self.data_path(datafile))
        builder.prepare(table.distinct_values(attribute))
        return builder.build()
