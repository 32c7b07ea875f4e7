"""Planning commands: init, plan, show."""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer

from ...core.engine.config_loader import load_settings
from ...core.errors import PlanningError
from ...core.planner import generate_or_update_cycle
from ...io.cycle_store import apply_plan_result, load_catalog, planning_input
from ...io.serializers import ValidationError, plan_to_dict, validate_date
from .. import views
from ..app import CyclePathOption, app, get_store


@app.command()
def init(
    catalog: Annotated[
        Path,
        typer.Option("--catalog", "-c", help="YAML/JSON file with equipment, exercises, calibrations and cycle"),
    ],
    cycle_path: CyclePathOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing cycle file"),
    ] = False,
) -> None:
    """
    Create a cycle file from a catalog.
    """
    store = get_store(cycle_path)
    if store.exists() and not force:
        views.print_error(f"Cycle file already exists: {store.cycle_path}")
        views.print_info("Use --force to overwrite it.")
        raise typer.Exit(1)

    try:
        document = load_catalog(catalog)
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    store.save(document)
    views.print_success(
        f"Initialized cycle '{document.cycle.cycle_id}' with "
        f"{len(document.cycle.calibration_ids)} exercise(s) at {store.cycle_path}"
    )


@app.command()
def plan(
    cycle_path: CyclePathOption = None,
    start_date: Annotated[
        Optional[str],
        typer.Option("--start-date", "-s", help="First week start (YYYY-MM-DD) when nothing is planned yet"),
    ] = None,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", help="Planner YAML override (default ~/.meso-scheduler/planner.yaml)"),
    ] = None,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Do not print the plan table"),
    ] = False,
) -> None:
    """
    Generate the plan, or regenerate every week that has not been started.
    """
    store = get_store(cycle_path)
    try:
        if start_date is not None:
            validate_date(start_date)
        document = store.load()
        settings = load_settings(config_path)
        result = generate_or_update_cycle(planning_input(document), start_date, settings)
    except (FileNotFoundError, ValidationError, PlanningError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if document.cycle.cycle_type == "FreeForm":
        views.print_warning("FreeForm cycles are not planned; log sessions directly.")
        return

    document = apply_plan_result(document, result)
    store.save(document)
    views.print_plan_result(result)
    if not quiet:
        views.print_plan(document)


@app.command()
def show(
    cycle_path: CyclePathOption = None,
    week: Annotated[
        Optional[int],
        typer.Option("--week", "-w", help="Only show this week (1-based)"),
    ] = None,
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON for machine processing"),
    ] = False,
) -> None:
    """
    Show the planned weeks.
    """
    store = get_store(cycle_path)
    try:
        document = store.load()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps(plan_to_dict(document.plan), indent=2))
        return

    views.print_plan(document, week - 1 if week is not None else None)
