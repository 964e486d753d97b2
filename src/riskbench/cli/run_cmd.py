# Copyright (c) Syntropy Systems
"""riskbench run command."""
from __future__ import annotations

from enum import Enum
from pathlib import Path

import typer
from rich.console import Console

from riskbench.cli import config_from_context
from riskbench.config import load_config
from riskbench.engine import load_engine
from riskbench.runner import ExperimentRunner

console = Console()


class Suite(str, Enum):
    """Which benchmark suites to run."""

    ALL = "all"
    FLASH = "flash"
    SELF = "self"


def run(
    ctx: typer.Context,
    config_file: Path | None = typer.Option(
        None,
        "--config", "-c",
        help="Path to riskbench.yaml (default: nearest one upwards)",
        exists=True,
        dir_okay=False,
    ),
    suite: Suite = typer.Option(
        Suite.ALL,
        "--suite", "-s",
        help="Suites to run: all, flash or self",
    ),
) -> None:
    """Run the benchmark suites and write the result files.

    Configuration, data and I/O errors abort the sweep with a traceback.
    """
    config = load_config(config_from_context(ctx, config_file))
    engine = load_engine(config.engine)
    runner = ExperimentRunner(config, engine, console=console)

    if suite is Suite.ALL:
        context = runner.run_all()
    else:
        with runner.new_context() as context:
            if suite is Suite.FLASH:
                console.print("Starting Flash comparison")
                runner.run_flash_comparison(context)
            else:
                console.print("Starting self comparison")
                runner.run_self_comparison(context)
            console.print("\ndone.")

    for recorder in context.recorders.values():
        console.print(f"  [dim]{len(recorder)} rows:[/dim] {recorder.path}")
