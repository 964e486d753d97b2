# Copyright (c) Syntropy Systems
"""Error types shared across riskbench."""
from __future__ import annotations


class BenchmarkConfigError(Exception):
    """Raised for unrecognized or inconsistent benchmark configuration.

    The offending value is kept on ``value`` so callers can report it.
    """

    value: object

    def __init__(self, message: str, value: object = None) -> None:
        super().__init__(message)
        self.value = value
