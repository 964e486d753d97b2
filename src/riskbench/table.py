# Copyright (c) Syntropy Systems
"""Delimited tabular files: raw datasets and explicit hierarchy tables."""
from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from riskbench.errors import BenchmarkConfigError

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

DELIMITER = ";"


@dataclass(frozen=True)
class Table:
    """A header row plus data rows, all values kept as strings."""

    header: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.rows)

    def column_index(self, name: str) -> int:
        """Index of a column by attribute name."""
        try:
            return self.header.index(name)
        except ValueError as e:
            msg = f"No such attribute: {name}"
            raise BenchmarkConfigError(msg, name) from e

    def column(self, name: str) -> list[str]:
        """All values of a column, in row order."""
        index = self.column_index(name)
        return [row[index] for row in self.rows]

    def distinct_values(self, name: str) -> tuple[str, ...]:
        """Distinct values of a column in order of first appearance."""
        return tuple(dict.fromkeys(self.column(name)))


def read_rows(path: Path, delimiter: str = DELIMITER) -> list[tuple[str, ...]]:
    """Read all non-empty rows of a delimited file.

    Raises FileNotFoundError (or another OSError) when the file can't be read.
    """
    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.reader(f, delimiter=delimiter)
        return [tuple(row) for row in reader if row]


def load_table(path: Path, delimiter: str = DELIMITER) -> Table:
    """Load a delimited file whose first row is the header."""
    rows = read_rows(path, delimiter)
    if not rows:
        msg = f"Empty data file: {path}"
        raise BenchmarkConfigError(msg, str(path))

    header, data = rows[0], rows[1:]
    width = len(header)
    for line_no, row in enumerate(data, start=2):
        if len(row) != width:
            msg = f"{path}:{line_no}: expected {width} fields, found {len(row)}"
            raise BenchmarkConfigError(msg, str(path))

    logger.debug("Loaded %d rows x %d columns from %s", len(data), width, path)
    return Table(header=header, rows=tuple(data))
