# Copyright (c) Syntropy Systems
"""riskbench plan command."""
from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from riskbench.cli import config_from_context
from riskbench.config import load_config
from riskbench.errors import BenchmarkConfigError
from riskbench.models.setup import Flash
from riskbench.sweep import ExperimentMatrix

console = Console()


def plan(
    ctx: typer.Context,
    config_file: Path | None = typer.Option(
        None,
        "--config", "-c",
        help="Path to riskbench.yaml (default: nearest one upwards)",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """Preview every run of both suites without running anything."""
    try:
        config = load_config(config_from_context(ctx, config_file))
        matrix = ExperimentMatrix(config.suites)
        points = matrix.plan(reference_runs=config.reference_runs)
    except (OSError, BenchmarkConfigError) as e:
        console.print(f"[red]Error loading config:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e

    if not points:
        console.print("[yellow]No runs in the experiment matrix[/yellow]")
        return

    table = Table(title="Experiment matrix")
    table.add_column("#", style="dim")
    table.add_column("Algorithm")
    table.add_column("Budget")
    table.add_column("Criterion")
    table.add_column("Dataset")
    table.add_column("QIs")
    table.add_column("Metric")
    table.add_column("Suppression")

    for i, point in enumerate(points):
        if isinstance(point.algorithm, Flash):
            budget = "-"
        elif point.algorithm.time_limit_ms is not None:
            budget = f"{point.algorithm.time_limit_ms} ms"
        else:
            budget = "[dim]from Flash / none[/dim]"
        table.add_row(
            str(i),
            point.algorithm.label,
            budget,
            point.criterion.label,
            point.dataset.display_name,
            str(len(point.dataset.active_qis())),
            point.metric.label,
            str(point.suppression),
        )

    console.print(table)
    total = len(points) * config.repetitions
    console.print(
        f"\n[bold]{len(points)} runs[/bold] x {config.repetitions} repetitions "
        f"= {total} engine calls"
    )
