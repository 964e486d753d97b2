# Copyright (c) Syntropy Systems
"""riskbench show command - display a result file."""
from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from riskbench.models.setup import KEY_FIELDS
from riskbench.recorder import EXECUTION_TIME, read_results

console = Console()


def _format_value(measure: str, value: float | None) -> str:
    if value is None:
        return "-"
    if measure == EXECUTION_TIME:
        # Recorded in nanoseconds
        return f"{value / 1_000_000:.1f} ms"
    return f"{value:.4f}"


def show(
    result_file: Path = typer.Argument(
        ...,
        help="Result file written by a benchmark run",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """Show the aggregated rows of a result file.

    Example:
        riskbench show resultFlashCompare.csv

    """
    try:
        rows = read_results(result_file)
    except (OSError, ValueError) as e:
        console.print(f"[red]Error reading {result_file}:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e

    if not rows:
        console.print("[dim]No results recorded[/dim]")
        return

    measures = list(rows[0].values)
    table = Table(title=result_file.name, show_header=True, header_style="bold")
    for name in KEY_FIELDS:
        table.add_column(name, style="dim" if name == "Criterion" else None)
    for measure in measures:
        table.add_column(measure, justify="right")

    for row in rows:
        key = ["-" if v is None else str(v) for v in row.key]
        values = [_format_value(m, row.get(m)) for m in measures]
        table.add_row(*key, *values)

    console.print(table)
