"""
Mesocycle plan generation for meso-scheduler.

Generates deterministic multi-week plans from a cycle configuration, the
athlete's calibrations, and feedback recorded on already-completed weeks.
Weeks are planned strictly in ascending order: each week's volume depends
on the weeks before it.

The planning state is a frozen PlanContext.  Each step returns a new
context via dataclasses.replace(); nothing is mutated in place.
"""

import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta

from .config import DEFAULT_SETTINGS, REP_RANGE_ORDER, PlannerSettings, week_rir
from .equipment import require_weight_options
from .errors import ConfigurationError, InvalidReferenceError, PlanStateError
from .history import (
    ExerciseWeekEntry,
    WeekSnapshot,
    build_history,
    is_week_complete,
    is_week_started,
)
from .models import (
    Calibration,
    CycleConfig,
    EquipmentType,
    Exercise,
    PlanRecords,
    Session,
    SessionExercise,
    Week,
    WorkoutSet,
)
from .sets import first_set_target, generate_sets
from .volume import plan_group_volume

_ID_NAMESPACE = uuid.UUID("6f1c2a9e-5d1b-4c53-9a0e-2f7d8b3c4e51")

DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class PlanningInput:
    """Everything the engine reads: catalog, cycle, and existing records."""

    cycle: CycleConfig
    calibrations: Sequence[Calibration]
    exercises: Sequence[Exercise]
    equipment: Sequence[EquipmentType]
    existing: PlanRecords = field(default_factory=PlanRecords)


@dataclass(frozen=True)
class PlannedExercise:
    """A calibration with its exercise and legal weights resolved."""

    calibration: Calibration
    exercise: Exercise
    weight_options: tuple[float, ...]


@dataclass
class PlanResult:
    """Records to create and record ids to delete, in that order of effect."""

    create: PlanRecords = field(default_factory=PlanRecords)
    delete_ids: list[str] = field(default_factory=list)
    kept_week_count: int = 0

    def is_empty(self) -> bool:
        return self.create.is_empty() and not self.delete_ids


@dataclass(frozen=True)
class PlanContext:
    """
    Immutable planning accumulator.

    session_layout[i] holds the exercise ids trained in session i of every
    week.  history holds a snapshot per week before the one being planned;
    previous_counts/previous_first_sets describe the week just before it.
    """

    cycle: CycleConfig
    planned: tuple[PlannedExercise, ...]
    session_layout: tuple[tuple[str, ...], ...]
    day_offsets: tuple[int, ...]
    week_count: int
    first_start: date
    first_index: int
    settings: PlannerSettings = DEFAULT_SETTINGS
    history: tuple[WeekSnapshot, ...] = ()
    previous_counts: Mapping[str, int] = field(default_factory=dict)
    previous_first_sets: Mapping[str, tuple[int, float]] = field(default_factory=dict)
    weeks: tuple[Week, ...] = ()
    sessions: tuple[Session, ...] = ()
    session_exercises: tuple[SessionExercise, ...] = ()
    sets: tuple[WorkoutSet, ...] = ()

    def planned_by_id(self) -> dict[str, PlannedExercise]:
        return {p.exercise.exercise_id: p for p in self.planned}

    def records(self) -> PlanRecords:
        return PlanRecords(
            weeks=list(self.weeks),
            sessions=list(self.sessions),
            session_exercises=list(self.session_exercises),
            sets=list(self.sets),
        )


# ---------------------------------------------------------------------------
# Validation and reference resolution
# ---------------------------------------------------------------------------


def planned_week_count(cycle: CycleConfig, settings: PlannerSettings = DEFAULT_SETTINGS) -> int:
    """
    Number of weeks in the cycle, including the final deload week.

    Raises:
        ConfigurationError: If the count lies outside [min_week_count, max_week_count]
    """
    count = cycle.planned_week_count
    if count is None:
        return settings.default_week_count
    if not settings.min_week_count <= count <= settings.max_week_count:
        raise ConfigurationError(
            f"planned_week_count must be between {settings.min_week_count} and "
            f"{settings.max_week_count}, got {count}"
        )
    return count


def resolve_planned_exercises(data: PlanningInput) -> tuple[PlannedExercise, ...]:
    """
    Resolve every calibration id of the cycle to its exercise and equipment.

    Raises:
        InvalidReferenceError: If any calibration, exercise or equipment is missing
        ConfigurationError: If an exercise's equipment has no weight options
    """
    calibrations = {c.calibration_id: c for c in data.calibrations}
    exercises = {e.exercise_id: e for e in data.exercises}
    equipment = {e.equipment_id: e for e in data.equipment}

    planned: list[PlannedExercise] = []
    seen: set[str] = set()
    for cal_id in data.cycle.calibration_ids:
        calibration = calibrations.get(cal_id)
        if calibration is None:
            raise InvalidReferenceError("calibration", cal_id, f"cycle {data.cycle.cycle_id}")
        exercise = exercises.get(calibration.exercise_id)
        if exercise is None:
            raise InvalidReferenceError("exercise", calibration.exercise_id, f"calibration {cal_id}")
        equip = equipment.get(exercise.equipment_id)
        if equip is None:
            raise InvalidReferenceError("equipment", exercise.equipment_id, f"exercise {exercise.exercise_id}")
        if exercise.exercise_id in seen:
            raise ConfigurationError(
                f"Exercise {exercise.exercise_id} is calibrated more than once in cycle "
                f"{data.cycle.cycle_id}"
            )
        seen.add(exercise.exercise_id)
        options = require_weight_options(equip, exercise)
        planned.append(PlannedExercise(calibration, exercise, tuple(options)))
    return tuple(planned)


# ---------------------------------------------------------------------------
# Weekly structure
# ---------------------------------------------------------------------------


def distribute_exercises(
    planned: Sequence[PlannedExercise],
    sessions_per_week: int,
) -> tuple[tuple[str, ...], ...]:
    """
    Split exercises across a week's sessions.

    Exercises are sorted Heavy, Medium, Light (stable) and dealt round-robin.

    Returns:
        Exercise ids per session index
    """
    ordered = sorted(planned, key=lambda p: REP_RANGE_ORDER.index(p.exercise.rep_range))
    layout: list[list[str]] = [[] for _ in range(sessions_per_week)]
    for i, p in enumerate(ordered):
        layout[i % sessions_per_week].append(p.exercise.exercise_id)
    return tuple(tuple(ids) for ids in layout)


def session_day_offsets(sessions_per_week: int, week_length_days: int, rest_days: Sequence[int]) -> tuple[int, ...]:
    """
    Day offset of each session within the week.

    Sessions take the non-rest days in order; when there are more sessions
    than training days they wrap, so the earliest days carry two sessions.
    """
    training_days = [d for d in range(week_length_days) if d not in set(rest_days)]
    offsets = [training_days[i % len(training_days)] for i in range(sessions_per_week)]
    return tuple(sorted(offsets))


def _record_id(cycle_id: str, *path: object) -> str:
    name = "/".join([cycle_id, *(str(p) for p in path)])
    return str(uuid.uuid5(_ID_NAMESPACE, name))


def _muscle_groups(planned: Sequence[PlannedExercise]) -> dict[str, list[str]]:
    groups: dict[str, list[str]] = {}
    for p in planned:
        groups.setdefault(p.exercise.muscle_group, []).append(p.exercise.exercise_id)
    return groups


# ---------------------------------------------------------------------------
# Planning one week
# ---------------------------------------------------------------------------


def plan_week(context: PlanContext, week_index: int) -> PlanContext:
    """
    Plan one week and return the context extended with its records.

    Args:
        context: Accumulator holding every week before week_index
        week_index: Zero-based index; must follow the last planned week

    Returns:
        New PlanContext including this week's records and snapshot
    """
    cycle = context.cycle
    settings = context.settings
    is_deload = week_index == context.week_count - 1
    rir = None if is_deload else week_rir(week_index, settings.first_week_rir)

    session_of = {
        ex_id: s_idx for s_idx, ids in enumerate(context.session_layout) for ex_id in ids
    }

    set_counts: dict[str, int] = {}
    recovery_ids: set[str] = set()
    for ex_ids in _muscle_groups(context.planned).values():
        volume = plan_group_volume(
            week_index,
            ex_ids,
            session_of,
            context.history,
            is_deload=is_deload,
            previous_counts=context.previous_counts,
            settings=settings,
        )
        set_counts.update(volume.set_counts)
        recovery_ids.update(volume.recovery_ids)

    week_id = _record_id(cycle.cycle_id, "week", week_index)
    week_start = context.first_start + timedelta(
        days=(week_index - context.first_index) * cycle.week_length_days
    )
    week_end = week_start + timedelta(days=cycle.week_length_days)

    planned_by_id = context.planned_by_id()
    sessions: list[Session] = []
    session_exercises: list[SessionExercise] = []
    sets: list[WorkoutSet] = []
    first_sets: dict[str, tuple[int, float]] = {}
    entries: dict[str, ExerciseWeekEntry] = {}

    for s_idx, ex_ids in enumerate(context.session_layout):
        session_id = _record_id(cycle.cycle_id, "week", week_index, "session", s_idx)
        session_date = week_start + timedelta(days=context.day_offsets[s_idx])
        se_ids: list[str] = []

        for ex_id in ex_ids:
            p = planned_by_id[ex_id]
            se_id = _record_id(cycle.cycle_id, "week", week_index, "session", s_idx, "exercise", ex_id)

            if is_deload and ex_id in context.previous_first_sets:
                first_reps, first_weight = context.previous_first_sets[ex_id]
            else:
                first_reps, first_weight = first_set_target(
                    p.exercise,
                    p.calibration,
                    p.weight_options,
                    week_index - 1 if is_deload else week_index,
                    settings,
                )

            targets = generate_sets(
                first_reps,
                first_weight,
                set_counts[ex_id],
                settings.rep_range(p.exercise.rep_range),
                p.weight_options,
                rir,
                is_deload=is_deload,
                session_index=s_idx,
                sessions_per_week=cycle.sessions_per_week,
                settings=settings,
            )
            set_ids = [_record_id(cycle.cycle_id, se_id, "set", k) for k in range(len(targets))]
            sets.extend(
                WorkoutSet(
                    set_id=set_id,
                    session_exercise_id=se_id,
                    exercise_id=ex_id,
                    planned_reps=t.reps,
                    planned_weight=t.weight,
                    planned_rir=t.rir,
                )
                for set_id, t in zip(set_ids, targets)
            )
            session_exercises.append(
                SessionExercise(
                    session_exercise_id=se_id,
                    session_id=session_id,
                    exercise_id=ex_id,
                    set_ids=set_ids,
                    is_recovery=ex_id in recovery_ids,
                )
            )
            se_ids.append(se_id)
            if targets:
                first_sets[ex_id] = (targets[0].reps, targets[0].weight)
            entries[ex_id] = ExerciseWeekEntry(
                exercise_id=ex_id,
                set_count=len(targets),
                session_index=s_idx,
                is_recovery=ex_id in recovery_ids,
            )

        sessions.append(
            Session(
                session_id=session_id,
                week_id=week_id,
                title=f"Week {week_index + 1} · Session {s_idx + 1}",
                start_date=session_date.strftime(DATE_FORMAT),
                session_exercise_ids=se_ids,
            )
        )

    week = Week(
        week_id=week_id,
        cycle_id=cycle.cycle_id,
        index=week_index,
        start_date=week_start.strftime(DATE_FORMAT),
        end_date=week_end.strftime(DATE_FORMAT),
        session_ids=[s.session_id for s in sessions],
    )

    return replace(
        context,
        history=context.history + (WeekSnapshot(index=week_index, complete=False, entries=entries),),
        previous_counts=set_counts,
        previous_first_sets=first_sets,
        weeks=context.weeks + (week,),
        sessions=context.sessions + tuple(sessions),
        session_exercises=context.session_exercises + tuple(session_exercises),
        sets=context.sets + tuple(sets),
    )


# ---------------------------------------------------------------------------
# Existing records
# ---------------------------------------------------------------------------


def _cascade_ids(week: Week, sessions_by_id: Mapping[str, Session], se_by_id: Mapping[str, SessionExercise]) -> list[str]:
    ids = [week.week_id]
    for session_id in week.session_ids:
        ids.append(session_id)
        session = sessions_by_id.get(session_id)
        if session is None:
            continue
        for se_id in session.session_exercise_ids:
            ids.append(se_id)
            se = se_by_id.get(se_id)
            if se is not None:
                ids.extend(se.set_ids)
    return ids


def split_existing_weeks(
    cycle: CycleConfig,
    existing: PlanRecords,
) -> tuple[list[Week], list[str]]:
    """
    Separate kept (complete) weeks from weeks to delete and regenerate.

    Returns:
        (kept weeks in index order, ids to delete including cascaded children)

    Raises:
        PlanStateError: If a week has started but is not complete, or a
            complete week follows one that will be regenerated
    """
    sessions_by_id = {s.session_id: s for s in existing.sessions}
    se_by_id = {se.session_exercise_id: se for se in existing.session_exercises}
    weeks = sorted((w for w in existing.weeks if w.cycle_id == cycle.cycle_id), key=lambda w: w.index)

    kept: list[Week] = []
    delete_ids: list[str] = []
    for week in weeks:
        complete = is_week_complete(week, sessions_by_id)
        if not complete and is_week_started(week, sessions_by_id):
            raise PlanStateError(
                f"Week {week.index + 1} of cycle {cycle.cycle_id} has started but is not complete"
            )
        if complete and not delete_ids:
            kept.append(week)
        elif complete:
            raise PlanStateError(
                f"Week {week.index + 1} of cycle {cycle.cycle_id} is complete but follows "
                "a week that has not been completed"
            )
        else:
            delete_ids.extend(_cascade_ids(week, sessions_by_id, se_by_id))
    return kept, delete_ids


def _last_week_state(
    week: Week,
    existing: PlanRecords,
) -> tuple[dict[str, int], dict[str, tuple[int, float]]]:
    sessions_by_id = {s.session_id: s for s in existing.sessions}
    se_by_id = {se.session_exercise_id: se for se in existing.session_exercises}
    sets_by_id = {s.set_id: s for s in existing.sets}
    counts: dict[str, int] = {}
    first_sets: dict[str, tuple[int, float]] = {}
    for session_id in week.session_ids:
        session = sessions_by_id.get(session_id)
        if session is None:
            continue
        for se_id in session.session_exercise_ids:
            se = se_by_id.get(se_id)
            if se is None:
                continue
            counts[se.exercise_id] = counts.get(se.exercise_id, 0) + len(se.set_ids)
            if se.set_ids and se.exercise_id not in first_sets and se.set_ids[0] in sets_by_id:
                first = sets_by_id[se.set_ids[0]]
                first_sets[se.exercise_id] = (first.planned_reps, first.planned_weight)
    return counts, first_sets


def _parse_date(value: str) -> date:
    return datetime.strptime(value, DATE_FORMAT).date()


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


def generate_or_update_cycle(
    data: PlanningInput,
    start_date: str | None = None,
    settings: PlannerSettings = DEFAULT_SETTINGS,
) -> PlanResult:
    """
    Plan every remaining week of a mesocycle.

    Complete weeks already stored are kept and used as history.  Weeks
    that have not been started are deleted (with their sessions, session
    exercises and sets) and regenerated.  New weeks continue from the end
    of the last kept week, or from start_date / cycle.start_date / today
    when nothing is kept.

    Args:
        data: Cycle, catalog, and existing records
        start_date: YYYY-MM-DD override for the first week's start
        settings: Planner settings

    Returns:
        PlanResult with records to create and ids to delete

    Raises:
        ConfigurationError: Invalid cycle or equipment configuration
        InvalidReferenceError: Unresolvable calibration/exercise/equipment
        PlanStateError: A week has started but is not complete
    """
    cycle = data.cycle
    if cycle.cycle_type == "FreeForm":
        return PlanResult()

    week_count = planned_week_count(cycle, settings)
    if len(cycle.calibration_ids) < cycle.sessions_per_week:
        raise ConfigurationError(
            f"Cycle {cycle.cycle_id} has {len(cycle.calibration_ids)} calibrations but "
            f"{cycle.sessions_per_week} sessions per week; need at least one per session"
        )
    planned = resolve_planned_exercises(data)

    kept, delete_ids = split_existing_weeks(cycle, data.existing)
    first_index = len(kept)

    if kept:
        first_start = _parse_date(kept[-1].end_date)
        previous_counts, previous_first_sets = _last_week_state(kept[-1], data.existing)
    else:
        raw = start_date or cycle.start_date
        first_start = _parse_date(raw) if raw else date.today()
        previous_counts, previous_first_sets = {}, {}

    history = build_history(kept, data.existing.sessions, data.existing.session_exercises)

    context = PlanContext(
        cycle=cycle,
        planned=planned,
        session_layout=distribute_exercises(planned, cycle.sessions_per_week),
        day_offsets=session_day_offsets(
            cycle.sessions_per_week, cycle.week_length_days, cycle.rest_days
        ),
        week_count=week_count,
        first_start=first_start,
        first_index=first_index,
        settings=settings,
        history=tuple(history),
        previous_counts=previous_counts,
        previous_first_sets=previous_first_sets,
    )
    for week_index in range(first_index, week_count):
        context = plan_week(context, week_index)

    return PlanResult(create=context.records(), delete_ids=delete_ids, kept_week_count=len(kept))
