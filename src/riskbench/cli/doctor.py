# Copyright (c) Syntropy Systems
"""riskbench doctor command."""
from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from riskbench.cli import config_from_context
from riskbench.config import find_config_file, load_config
from riskbench.datasets import DatasetCatalog
from riskbench.engine import load_engine
from riskbench.errors import BenchmarkConfigError
from riskbench.models.setup import DatasetConfig

console = Console()


def doctor(
    ctx: typer.Context,
    config_file: Path | None = typer.Option(
        None,
        "--config", "-c",
        help="Path to riskbench.yaml (default: nearest one upwards)",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """Check the benchmark setup and diagnose issues.

    Verifies:
    - configuration file is valid
    - the anonymization engine can be loaded
    - data and hierarchy files of every configured dataset exist
    """
    issues: list[str] = []
    warnings: list[str] = []

    found = config_from_context(ctx, config_file) or find_config_file()
    if found is None:
        console.print("[yellow]\u26a0[/yellow] No riskbench.yaml found, using defaults")
        warnings.append("No config file")
    else:
        console.print(f"[green]\u2713[/green] Config file: {found}")

    try:
        config = load_config(found)
    except (OSError, BenchmarkConfigError) as e:
        console.print(f"[red]\u2717[/red] Config error: {escape(str(e))}")
        raise typer.Exit(1) from e

    # Check engine
    try:
        _ = load_engine(config.engine)
    except BenchmarkConfigError as e:
        console.print(f"[red]\u2717[/red] Engine: {escape(str(e))}")
        issues.append("Engine not loadable")
    else:
        console.print(f"[green]\u2713[/green] Engine: {config.engine}")

    # Check data and hierarchy files, widest QI selection per datafile
    datasets = list(config.suites.flash_datasets)
    if config.suites.self_qi_counts:
        widest = max(config.suites.self_qi_counts)
        try:
            datasets.extend(
                DatasetConfig(datafile=datafile, custom_qi_count=widest)
                for datafile in config.suites.self_datafiles
            )
        except BenchmarkConfigError as e:
            console.print(f"[red]\u2717[/red] Self comparison: {escape(str(e))}")
            issues.append(f"Self comparison: {escape(str(e))}")

    catalog = DatasetCatalog(config.data_dir, config.hierarchy_dir)
    for dataset in datasets:
        missing = catalog.missing_files(dataset)
        qi_count = len(dataset.active_qis())
        if missing:
            console.print(
                f"[red]\u2717[/red] {dataset.display_name} ({qi_count} QIs): "
                f"{len(missing)} file(s) missing"
            )
            for path in missing:
                console.print(f"    [dim]{path}[/dim]")
            issues.append(f"{dataset.display_name}: missing files")
        else:
            console.print(
                f"[green]\u2713[/green] {dataset.display_name} ({qi_count} QIs): all files present"
            )

    # Check results directory
    if config.results_dir.exists():
        console.print(f"[green]\u2713[/green] Results directory: {config.results_dir}")
    else:
        console.print(
            f"[dim]\u2022[/dim] Results directory will be created: {config.results_dir}"
        )

    # Summary
    console.print()
    if issues:
        console.print(f"[red]Found {len(issues)} issue(s)[/red]")
        for issue in issues:
            console.print(f"  - {issue}")
        raise typer.Exit(1)
    if warnings:
        console.print(f"[yellow]Found {len(warnings)} warning(s)[/yellow]")
        for warning in warnings:
            console.print(f"  - {warning}")
    else:
        console.print("[green]All checks passed[/green]")
