# Copyright (c) Syntropy Systems
"""Main CLI entry point for riskbench."""

from pathlib import Path
from typing import Optional

import typer

from riskbench.cli.doctor import doctor
from riskbench.cli.init_cmd import init
from riskbench.cli.plan import plan
from riskbench.cli.run_cmd import Suite, run
from riskbench.cli.show import show

app = typer.Typer(
    name="riskbench",
    help=(
        "Benchmark exhaustive (Flash) against time-bounded (Heurakles) "
        "anonymization search. Without a command, runs both suites."
    ),
    add_completion=False,
)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config_file: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="Path to riskbench.yaml (default: nearest one upwards)",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """Run both benchmark suites when no command is given."""
    # Commands fall back to this --config when they get none of their own
    ctx.obj = config_file
    if ctx.invoked_subcommand is None:
        run(ctx, config_file=config_file, suite=Suite.ALL)


# Register commands
_ = app.command()(run)
_ = app.command()(plan)
_ = app.command()(show)
_ = app.command()(doctor)
_ = app.command()(init)


if __name__ == "__main__":
    app()
