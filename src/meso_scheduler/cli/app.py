"""Shared Typer app object, shared option types, and store utility."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..io.cycle_store import CycleStore, get_default_cycle_path

# Shared --cycle-path option type used across all commands
CyclePathOption = Annotated[
    Optional[Path],
    typer.Option("--cycle-path", "-p", help="Path to cycle JSON file"),
]

app = typer.Typer(
    name="meso-scheduler",
    help="Mesocycle planner: weekly sets, reps and loads with volume autoregulation.",
    no_args_is_help=False,
    invoke_without_command=True,
)


def get_store(cycle_path: Path | None) -> CycleStore:
    """Get cycle store from path or default location."""
    if cycle_path is None:
        cycle_path = get_default_cycle_path()
    return CycleStore(cycle_path)
