# Copyright (c) Syntropy Systems
"""CLI commands for riskbench."""
from __future__ import annotations

from pathlib import Path

import typer


def config_from_context(ctx: typer.Context, config_file: Path | None) -> Path | None:
    """The command's own --config, else the one given before the command."""
    if config_file is not None:
        return config_file
    if isinstance(ctx.obj, Path):
        return ctx.obj
    return None
