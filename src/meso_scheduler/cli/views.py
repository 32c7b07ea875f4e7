"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of plan data.
"""

from rich.console import Console
from rich.table import Table

from ..core.metrics import stimulus_to_fatigue_ratio
from ..core.models import CycleDocument, WorkoutSet
from ..core.planner import PlanResult

console = Console()


def _fmt_weight(weight: float | None) -> str:
    if weight is None:
        return "-"
    return f"{weight:g}"


def _fmt_sets(sets: list[WorkoutSet]) -> str:
    """
    Format a session exercise's sets as a compact string.

    Consecutive identical sets collapse: "12@60 ×2, 10@60, 10@57.5".
    """
    if not sets:
        return "(no sets)"
    parts: list[str] = []
    prev: tuple[int, float] | None = None
    run = 0
    for s in sets:
        key = (s.planned_reps, s.planned_weight)
        if key == prev:
            run += 1
            continue
        if prev is not None:
            parts.append(f"{prev[0]}@{_fmt_weight(prev[1])}" + (f" ×{run}" if run > 1 else ""))
        prev, run = key, 1
    parts.append(f"{prev[0]}@{_fmt_weight(prev[1])}" + (f" ×{run}" if run > 1 else ""))  # type: ignore[index]
    return ", ".join(parts)


def _fmt_actual(sets: list[WorkoutSet]) -> str:
    done = [s for s in sets if s.is_completed]
    if not done:
        return "-"
    return ", ".join(f"{s.actual_reps}@{_fmt_weight(s.actual_weight)}" for s in done)


def format_plan_table(document: CycleDocument, week_index: int | None = None) -> Table:
    """
    Create a Rich table of the planned weeks.

    Args:
        document: Cycle document to display
        week_index: Only show this zero-based week (all weeks if None)

    Returns:
        Rich Table object
    """
    cycle = document.cycle
    title = cycle.title or cycle.cycle_id
    table = Table(title=f"Mesocycle: {title} ({cycle.cycle_type})")

    table.add_column("Wk", justify="right", style="dim", width=3)
    table.add_column("Date", style="cyan")
    table.add_column("Session", style="magenta")
    table.add_column("Exercise", style="green")
    table.add_column("Sets", justify="right")
    table.add_column("Plan (reps@weight)")
    table.add_column("RIR", justify="right")
    table.add_column("Done")
    table.add_column("SFR", justify="right")

    exercises = {e.exercise_id: e for e in document.exercises}
    sessions = {s.session_id: s for s in document.plan.sessions}
    session_exercises = {se.session_exercise_id: se for se in document.plan.session_exercises}
    sets = {s.set_id: s for s in document.plan.sets}

    for week in sorted(document.plan.weeks, key=lambda w: w.index):
        if week_index is not None and week.index != week_index:
            continue
        for session_id in week.session_ids:
            session = sessions.get(session_id)
            if session is None:
                continue
            status = "[green]✓[/green]" if session.complete else ""
            for se_id in session.session_exercise_ids:
                se = session_exercises.get(se_id)
                if se is None:
                    continue
                se_sets = [sets[sid] for sid in se.set_ids if sid in sets]
                exercise = exercises.get(se.exercise_id)
                name = exercise.name if exercise else se.exercise_id
                if se.is_recovery:
                    name += " [yellow](recovery)[/yellow]"
                rir = se_sets[0].planned_rir if se_sets else None
                ratio = stimulus_to_fatigue_ratio(se.stimulus, se.fatigue)
                table.add_row(
                    str(week.index + 1),
                    session.start_date,
                    f"{session.title} {status}".strip(),
                    name,
                    str(len(se_sets)),
                    _fmt_sets(se_sets),
                    "deload" if rir is None else str(rir),
                    _fmt_actual(se_sets),
                    f"{ratio:.2f}" if ratio is not None else "-",
                )
        table.add_section()

    return table


def print_plan(document: CycleDocument, week_index: int | None = None) -> None:
    """Print the plan, or a note when nothing is planned yet."""
    if not document.plan.weeks:
        console.print("[yellow]No weeks planned yet. Run 'plan' first.[/yellow]")
        return
    console.print(format_plan_table(document, week_index))


def print_plan_result(result: PlanResult) -> None:
    """Summarise what a planning pass created and deleted."""
    created = result.create
    console.print(
        f"Kept {result.kept_week_count} completed week(s); "
        f"planned {len(created.weeks)} week(s), {len(created.sessions)} session(s), "
        f"{len(created.sets)} set(s)."
    )
    if result.delete_ids:
        console.print(f"[dim]Replaced {len(result.delete_ids)} unstarted record(s).[/dim]")


def format_ladder_table(options: list[float]) -> Table:
    """Create a one-row-per-weight table of a weight ladder."""
    table = Table(title="Weight options")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Weight", justify="right", style="bold")
    for i, w in enumerate(options, 1):
        table.add_row(str(i), _fmt_weight(w))
    return table


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
