# Copyright (c) Syntropy Systems
"""Recording, averaging and persisting benchmark measurements."""
from __future__ import annotations

import csv
import logging
import time
from collections import deque
from typing import TYPE_CHECKING

from typing_extensions import Self

from riskbench.models.results import ResultRow
from riskbench.models.setup import KEY_FIELDS

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence
    from pathlib import Path
    from types import TracebackType

    from riskbench.models.base import CSVValue
    from riskbench.models.setup import ExperimentPoint

logger = logging.getLogger(__name__)

EXECUTION_TIME = "Execution time"
DISCOVERY_TIME = "Solution discovery time"
INFORMATION_LOSS_MINIMUM = "Information loss minimum"
DEFAULT_MEASURES: tuple[str, ...] = (
    EXECUTION_TIME,
    DISCOVERY_TIME,
    INFORMATION_LOSS_MINIMUM,
)

RESULT_DELIMITER = ";"
MEAN_SUFFIX = " (mean)"


class BufferedArithmeticMeanAnalyzer:
    """Arithmetic mean over the last ``size`` values."""

    size: int
    _buffer: deque[float]

    def __init__(self, size: int) -> None:
        if size < 1:
            msg = f"Buffer size must be positive, got {size}"
            raise ValueError(msg)
        self.size = size
        self._buffer = deque(maxlen=size)

    def add(self, value: float) -> None:
        self._buffer.append(float(value))

    @property
    def count(self) -> int:
        return len(self._buffer)

    @property
    def complete(self) -> bool:
        """Whether the buffer holds all repetitions."""
        return len(self._buffer) == self.size

    def value(self) -> float | None:
        """Mean of the buffered values, None if nothing was added."""
        if not self._buffer:
            return None
        return sum(self._buffer) / len(self._buffer)


class _Bucket:
    """Analyzers of all measures for one parameter tuple."""

    key: tuple[CSVValue, ...]
    analyzers: dict[str, BufferedArithmeticMeanAnalyzer]

    def __init__(
        self, key: tuple[CSVValue, ...], measures: Sequence[str], repetitions: int
    ) -> None:
        self.key = key
        self.analyzers = {
            measure: BufferedArithmeticMeanAnalyzer(repetitions) for measure in measures
        }

    def to_row(self) -> ResultRow:
        return ResultRow(
            key=self.key,
            values={name: analyzer.value() for name, analyzer in self.analyzers.items()},
        )


class ResultRecorder:
    """Accumulates measurements per experiment point.

    ``add_run`` opens (or reopens) the bucket for a point; values fed with
    ``add_value`` go to that bucket. ``write`` rewrites the whole result file
    with every bucket seen so far, in insertion order.
    """

    measures: tuple[str, ...]
    repetitions: int
    path: Path | None
    _buckets: dict[tuple[CSVValue, ...], _Bucket]
    _active: _Bucket | None
    _timers: dict[str, int]
    _timer: Callable[[], int]

    def __init__(
        self,
        measures: Sequence[str] = DEFAULT_MEASURES,
        repetitions: int = 2,
        path: Path | None = None,
        timer: Callable[[], int] = time.perf_counter_ns,
    ) -> None:
        self.measures = tuple(measures)
        self.repetitions = repetitions
        self.path = path
        self._buckets = {}
        self._active = None
        self._timers = {}
        self._timer = timer

    def __len__(self) -> int:
        return len(self._buckets)

    def add_run(self, point: ExperimentPoint) -> None:
        """Make the bucket of this point the active one."""
        key = point.key()
        bucket = self._buckets.get(key)
        if bucket is None:
            bucket = _Bucket(key, self.measures, self.repetitions)
            self._buckets[key] = bucket
        self._active = bucket

    def _analyzer(self, measure: str) -> BufferedArithmeticMeanAnalyzer:
        if self._active is None:
            msg = "No active run, call add_run() first"
            raise RuntimeError(msg)
        try:
            return self._active.analyzers[measure]
        except KeyError:
            msg = f"Unknown measure: {measure}"
            raise KeyError(msg) from None

    def add_value(self, measure: str, value: float) -> None:
        """Feed one repetition's sample of a measure to the active bucket."""
        analyzer = self._analyzer(measure)
        if analyzer.complete and self._active is not None:
            logger.warning(
                "%s of %s already has %d samples, dropping the oldest",
                measure,
                self._active.key,
                analyzer.size,
            )
        analyzer.add(value)

    def start_timer(self, measure: str) -> None:
        """Start timing a measure, in nanoseconds."""
        _ = self._analyzer(measure)
        self._timers[measure] = self._timer()

    def stop_timer(self, measure: str) -> int:
        """Record the nanoseconds elapsed since ``start_timer``."""
        started = self._timers.pop(measure, None)
        if started is None:
            msg = f"Timer for {measure} was not started"
            raise RuntimeError(msg)
        elapsed = self._timer() - started
        self.add_value(measure, elapsed)
        return elapsed

    def last_value(self, measure: str) -> float | None:
        """Aggregate of a measure in the most recently opened bucket."""
        return self._analyzer(measure).value()

    def rows(self) -> Iterator[ResultRow]:
        for bucket in self._buckets.values():
            yield bucket.to_row()

    def header(self) -> list[str]:
        return [*KEY_FIELDS, *(f"{m}{MEAN_SUFFIX}" for m in self.measures)]

    def write(self, path: Path | None = None) -> Path:
        """Rewrite the result file with all buckets recorded so far."""
        target = path or self.path
        if target is None:
            msg = "No result file path given"
            raise ValueError(msg)
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f, delimiter=RESULT_DELIMITER)
            writer.writerow(self.header())
            for row in self.rows():
                values = [row.get(m) for m in self.measures]
                writer.writerow(
                    ["" if v is None else v for v in (*row.key, *values)]
                )
        logger.debug("Wrote %d result rows to %s", len(self), target)
        return target


def _parse_key(fields: Sequence[str]) -> tuple[CSVValue, ...]:
    criterion, dataset, qi_count, metric, suppression, algorithm = fields
    return (
        criterion,
        dataset,
        int(qi_count) if qi_count else None,
        metric,
        float(suppression),
        algorithm,
    )


def read_results(path: Path) -> list[ResultRow]:
    """Parse a result file written by ``ResultRecorder.write``."""
    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.reader(f, delimiter=RESULT_DELIMITER)
        header = next(reader, None)
        if header is None:
            return []
        measures = [
            name.removesuffix(MEAN_SUFFIX) for name in header[len(KEY_FIELDS):]
        ]
        rows: list[ResultRow] = []
        for line in reader:
            if not line:
                continue
            key_fields = line[: len(KEY_FIELDS)]
            value_fields = line[len(KEY_FIELDS):]
            rows.append(
                ResultRow(
                    key=_parse_key(key_fields),
                    values={
                        m: float(v) if v else None
                        for m, v in zip(measures, value_fields)
                    },
                )
            )
    return rows


class BenchmarkContext:
    """Measures, repetitions and result recorders of one sweep.

    Created once at the start of a sweep and closed at its end; closing
    writes every recorder's file.
    """

    repetitions: int
    measures: tuple[str, ...]
    results_dir: Path | None
    _recorders: dict[str, ResultRecorder]
    _closed: bool
    _timer: Callable[[], int]

    def __init__(
        self,
        repetitions: int = 2,
        measures: Sequence[str] = DEFAULT_MEASURES,
        results_dir: Path | None = None,
        timer: Callable[[], int] = time.perf_counter_ns,
    ) -> None:
        if repetitions < 1:
            msg = f"Repetitions must be positive, got {repetitions}"
            raise ValueError(msg)
        self.repetitions = repetitions
        self.measures = tuple(measures)
        self.results_dir = results_dir
        self._recorders = {}
        self._closed = False
        self._timer = timer

    def recorder(self, filename: str) -> ResultRecorder:
        """The recorder writing to ``filename``, created on first use."""
        if self._closed:
            msg = "Benchmark context is closed"
            raise RuntimeError(msg)
        recorder = self._recorders.get(filename)
        if recorder is None:
            path = None
            if self.results_dir is not None:
                path = self.results_dir / filename
            recorder = ResultRecorder(
                self.measures, self.repetitions, path, timer=self._timer
            )
            self._recorders[filename] = recorder
        return recorder

    @property
    def recorders(self) -> dict[str, ResultRecorder]:
        return dict(self._recorders)

    def flush(self) -> list[Path]:
        """Write every recorder that has a file path."""
        return [
            recorder.write()
            for recorder in self._recorders.values()
            if recorder.path is not None
        ]

    def close(self) -> None:
        if self._closed:
            return
        _ = self.flush()
        self._closed = True

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
