# Copyright (c) Syntropy Systems
"""riskbench init command."""

from pathlib import Path

import typer
import yaml
from rich.console import Console

from riskbench.config import CONFIG_FILENAME, default_config_data

console = Console()


def init(
    path: Path = typer.Argument(
        Path(),
        help="Directory to initialize (default: current directory)",
    ),
) -> None:
    """Create a riskbench.yaml with the default suites.

    Also creates empty data and hierarchy directories.
    """
    target = path.resolve()
    config_path = target / CONFIG_FILENAME

    if config_path.exists():
        console.print(f"[yellow]Already initialized:[/yellow] {config_path}")
        return

    config = default_config_data()
    target.mkdir(parents=True, exist_ok=True)
    with config_path.open("w") as f:
        yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False)

    data_dir = target / str(config["data_dir"])
    hierarchy_dir = target / str(config["hierarchy_dir"])
    data_dir.mkdir(parents=True, exist_ok=True)
    hierarchy_dir.mkdir(parents=True, exist_ok=True)

    console.print(f"[green]Initialized riskbench project:[/green] {target}")
    console.print(f"  [dim]config:[/dim] {config_path}")
    console.print(f"  [dim]data:[/dim] {data_dir}")
    console.print(f"  [dim]hierarchies:[/dim] {hierarchy_dir}")
    console.print("  Set [bold]engine: module:factory[/bold] before running")
