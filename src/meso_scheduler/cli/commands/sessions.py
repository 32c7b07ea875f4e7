"""Session commands: log-set, feedback, complete."""

from typing import Annotated, Optional

import typer

from ...core.history import is_session_logged
from ...io.serializers import ValidationError
from .. import views
from ..app import CyclePathOption, app, get_store

_STIMULUS_KEYS = ("mind_muscle_connection", "pump", "disruption")
_FATIGUE_KEYS = ("joint_and_tissue_disruption", "perceived_effort", "unused_muscle_performance")


def _parse_scores(raw: str | None, keys: tuple[str, ...], label: str) -> dict | None:
    """
    Parse "a,b,c" into a sub-score dict.

    Raises:
        ValidationError: If the string does not hold three integers
    """
    if raw is None:
        return None
    parts = [p.strip() for p in raw.split(",")]
    if len(parts) != len(keys):
        raise ValidationError(f"{label} needs {len(keys)} comma-separated scores, got '{raw}'")
    try:
        return {k: int(p) for k, p in zip(keys, parts)}
    except ValueError as e:
        raise ValidationError(f"{label} scores must be integers: '{raw}'") from e


@app.command("log-set")
def log_set(
    set_id: Annotated[str, typer.Argument(help="Set id (see 'show --json')")],
    reps: Annotated[int, typer.Option("--reps", "-r", help="Reps performed")],
    weight: Annotated[float, typer.Option("--weight", "-w", help="Weight used")],
    rir: Annotated[
        Optional[int],
        typer.Option("--rir", help="Reps in reserve at the end of the set"),
    ] = None,
    cycle_path: CyclePathOption = None,
) -> None:
    """
    Record the actual result of a planned set.
    """
    store = get_store(cycle_path)
    try:
        updated = store.log_set(set_id, reps, weight, rir)
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    state = "complete" if updated.is_completed else "logged (RIR still expected)"
    views.print_success(f"Set {set_id}: {reps} reps @ {weight:g} {state}")


@app.command()
def feedback(
    session_exercise_id: Annotated[str, typer.Argument(help="Session-exercise id")],
    soreness: Annotated[
        Optional[int],
        typer.Option("--soreness", help="0 = never sore ... 3 = still sore next session"),
    ] = None,
    performance: Annotated[
        Optional[int],
        typer.Option("--performance", help="0 = beat targets easily ... 3 = missed targets"),
    ] = None,
    stimulus: Annotated[
        Optional[str],
        typer.Option("--stimulus", help="mind-muscle,pump,disruption e.g. 2,3,1"),
    ] = None,
    fatigue: Annotated[
        Optional[str],
        typer.Option("--fatigue", help="joints,effort,unused-performance e.g. 1,2,1"),
    ] = None,
    cycle_path: CyclePathOption = None,
) -> None:
    """
    Record post-session feedback used to plan the next week.
    """
    store = get_store(cycle_path)
    try:
        updated = store.record_feedback(
            session_exercise_id,
            soreness=soreness,
            performance=performance,
            stimulus=_parse_scores(stimulus, _STIMULUS_KEYS, "stimulus"),
            fatigue=_parse_scores(fatigue, _FATIGUE_KEYS, "fatigue"),
        )
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(
        f"Feedback saved for {updated.session_exercise_id} "
        f"(soreness={updated.soreness}, performance={updated.performance})"
    )


@app.command()
def complete(
    session_id: Annotated[str, typer.Argument(help="Session id")],
    reopen: Annotated[
        bool,
        typer.Option("--reopen", help="Mark the session incomplete again"),
    ] = False,
    cycle_path: CyclePathOption = None,
) -> None:
    """
    Mark a session complete.
    """
    store = get_store(cycle_path)
    try:
        updated = store.complete_session(session_id, complete=not reopen)
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    verb = "reopened" if reopen else "completed"
    views.print_success(f"{updated.title} {verb}")

    if not reopen:
        plan = store.load().plan
        se_by_id = {se.session_exercise_id: se for se in plan.session_exercises}
        sets_by_id = {s.set_id: s for s in plan.sets}
        if not is_session_logged(updated, se_by_id, sets_by_id):
            views.print_warning("Some sets of this session have not been logged.")
