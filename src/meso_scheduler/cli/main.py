"""
CLI entry point using Typer.

Provides commands for mesocycle management:
- init: Create a cycle file from a catalog
- plan: Generate or regenerate the plan
- show: Display planned weeks
- log-set: Record an actual set
- feedback: Record soreness/performance/stimulus/fatigue
- complete: Mark a session complete
- weights: Print a weight ladder
"""

import typer

from . import views
from .app import app
from .commands import equipment, planning, sessions  # noqa: F401  (registers commands)


@app.callback(invoke_without_command=True)
def main_callback(ctx: typer.Context) -> None:
    """
    Mesocycle planner. Run with --help to list commands.
    """
    if ctx.invoked_subcommand is not None:
        return
    views.console.print("[bold cyan]meso-scheduler[/bold cyan]: mesocycle planner")
    typer.echo(ctx.get_help())


def main() -> None:
    app()


if __name__ == "__main__":
    main()
