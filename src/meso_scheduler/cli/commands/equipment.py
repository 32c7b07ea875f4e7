"""Equipment commands: weights."""

from typing import Annotated, Optional

import typer

from ...core.equipment import ROUNDING_MODES, find_nearest_weight, generate_weight_options
from .. import views
from ..app import app


@app.command()
def weights(
    minimum: Annotated[float, typer.Option("--min", help="Lightest weight")],
    increment: Annotated[float, typer.Option("--increment", "-i", help="Step between weights")],
    maximum: Annotated[float, typer.Option("--max", help="Heaviest weight")],
    target: Annotated[
        Optional[float],
        typer.Option("--round", "-r", help="Round this weight onto the ladder"),
    ] = None,
    mode: Annotated[
        str,
        typer.Option("--mode", "-m", help="up, down, nearest, prefer-down, prefer-up"),
    ] = "nearest",
) -> None:
    """
    Print a weight ladder, optionally rounding a target onto it.
    """
    if mode not in ROUNDING_MODES:
        views.print_error(f"Unknown mode '{mode}'. Valid: {', '.join(ROUNDING_MODES)}")
        raise typer.Exit(1)
    try:
        options = generate_weight_options(minimum, increment, maximum)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.console.print(views.format_ladder_table(options))

    if target is not None:
        rounded = find_nearest_weight(options, target, mode)  # type: ignore[arg-type]
        if rounded is None:
            views.print_warning(f"No weight satisfies '{mode}' for {target:g}")
        else:
            views.print_info(f"{target:g} → {rounded:g} ({mode})")
