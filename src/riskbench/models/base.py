# Copyright (c) Syntropy Systems
"""Shared Pydantic model helpers for riskbench."""

from __future__ import annotations

from typing import ClassVar, Union

from pydantic import BaseModel, ConfigDict
from typing_extensions import TypeAlias

CSVValue: TypeAlias = Union[str, int, float, None]


class BenchBaseModel(BaseModel):
    """Base model with shared config for riskbench schemas."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        extra="forbid",
        populate_by_name=True,
    )


class FrozenModel(BaseModel):
    """Immutable, hashable model used for parameter values and keys."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        extra="forbid",
        frozen=True,
        populate_by_name=True,
    )
