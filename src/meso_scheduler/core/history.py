"""
Historical lookback over earlier weeks of a cycle.

The volume planner needs, for each exercise, the most recent week in which
that exercise was trained normally (not recovery-flagged).  This module
turns stored records into a time-ordered sequence of WeekSnapshot values and
applies that selection as an explicit predicate:

    usable_weeks()   newest-first run of complete weeks, stopping at the
                     first incomplete week
    find_baseline()  first entry in that run accepted by the predicate
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from itertools import takewhile

from .models import (
    FatigueScore,
    Session,
    SessionExercise,
    StimulusScore,
    Week,
    WorkoutSet,
)


@dataclass(frozen=True)
class ExerciseWeekEntry:
    """What one exercise looked like in one past week."""

    exercise_id: str
    set_count: int
    session_index: int | None = None
    stimulus: StimulusScore | None = None
    fatigue: FatigueScore | None = None
    soreness: int | None = None
    performance: int | None = None
    is_recovery: bool = False


@dataclass(frozen=True)
class WeekSnapshot:
    """All exercise entries of one past week, keyed by exercise id."""

    index: int
    complete: bool
    entries: Mapping[str, ExerciseWeekEntry] = field(default_factory=dict)


@dataclass(frozen=True)
class Baseline:
    """The entry an exercise's next-week volume is derived from."""

    entry: ExerciseWeekEntry
    week_index: int


EntryPredicate = Callable[[ExerciseWeekEntry], bool]


def is_normal_week(entry: ExerciseWeekEntry) -> bool:
    """Baseline predicate: the exercise was not in recovery that week."""
    return not entry.is_recovery


def usable_weeks(history: Sequence[WeekSnapshot]) -> Iterator[WeekSnapshot]:
    """
    Yield complete weeks newest-first, stopping at the first incomplete one.

    Args:
        history: Week snapshots in ascending index order

    Yields:
        Complete weeks, most recent first
    """
    return takewhile(lambda week: week.complete, reversed(history))


def find_baseline(
    history: Sequence[WeekSnapshot],
    exercise_id: str,
    predicate: EntryPredicate = is_normal_week,
) -> Baseline | None:
    """
    Locate the most recent usable entry for an exercise.

    Weeks whose entry fails the predicate (recovery weeks by default) are
    skipped even when they are more recent.

    Args:
        history: Week snapshots in ascending index order
        exercise_id: Exercise to look up
        predicate: Acceptance test for an entry

    Returns:
        Baseline, or None if no usable week contains an accepted entry
    """
    for week in usable_weeks(history):
        entry = week.entries.get(exercise_id)
        if entry is not None and predicate(entry):
            return Baseline(entry=entry, week_index=week.index)
    return None


def is_session_logged(
    session: Session,
    session_exercises_by_id: Mapping[str, SessionExercise],
    sets_by_id: Mapping[str, WorkoutSet],
) -> bool:
    """True if every planned set of the session has been logged."""
    set_ids = [
        set_id
        for se_id in session.session_exercise_ids
        if se_id in session_exercises_by_id
        for set_id in session_exercises_by_id[se_id].set_ids
    ]
    return all(sid in sets_by_id and sets_by_id[sid].is_completed for sid in set_ids)


def is_week_complete(week: Week, sessions_by_id: Mapping[str, Session]) -> bool:
    """A week is complete once it has sessions and every one is complete."""
    if not week.session_ids:
        return False
    return all(
        sid in sessions_by_id and sessions_by_id[sid].complete for sid in week.session_ids
    )


def is_week_started(week: Week, sessions_by_id: Mapping[str, Session]) -> bool:
    """True if any session of the week has been completed."""
    return any(
        sessions_by_id[sid].complete for sid in week.session_ids if sid in sessions_by_id
    )


def _merge(existing: ExerciseWeekEntry | None, new: ExerciseWeekEntry) -> ExerciseWeekEntry:
    # Same exercise twice in one week: sum sets, latest feedback wins.
    if existing is None:
        return new
    return ExerciseWeekEntry(
        exercise_id=new.exercise_id,
        set_count=existing.set_count + new.set_count,
        session_index=existing.session_index,
        stimulus=new.stimulus if new.stimulus is not None else existing.stimulus,
        fatigue=new.fatigue if new.fatigue is not None else existing.fatigue,
        soreness=new.soreness if new.soreness is not None else existing.soreness,
        performance=new.performance if new.performance is not None else existing.performance,
        is_recovery=existing.is_recovery or new.is_recovery,
    )


def snapshot_week(
    week: Week,
    sessions_by_id: Mapping[str, Session],
    session_exercises_by_id: Mapping[str, SessionExercise],
) -> WeekSnapshot:
    """Flatten one stored week into a WeekSnapshot."""
    entries: dict[str, ExerciseWeekEntry] = {}
    for session_index, session_id in enumerate(week.session_ids):
        session = sessions_by_id.get(session_id)
        if session is None:
            continue
        for se_id in session.session_exercise_ids:
            se = session_exercises_by_id.get(se_id)
            if se is None:
                continue
            entry = ExerciseWeekEntry(
                exercise_id=se.exercise_id,
                set_count=len(se.set_ids),
                session_index=session_index,
                stimulus=se.stimulus,
                fatigue=se.fatigue,
                soreness=se.soreness,
                performance=se.performance,
                is_recovery=se.is_recovery,
            )
            entries[se.exercise_id] = _merge(entries.get(se.exercise_id), entry)
    return WeekSnapshot(
        index=week.index,
        complete=is_week_complete(week, sessions_by_id),
        entries=entries,
    )


def build_history(
    weeks: Iterable[Week],
    sessions: Iterable[Session],
    session_exercises: Iterable[SessionExercise],
) -> list[WeekSnapshot]:
    """
    Convert stored records into week snapshots in ascending index order.

    Args:
        weeks: Week records of one cycle
        sessions: Session records referenced by those weeks
        session_exercises: Session-exercise records referenced by those sessions

    Returns:
        Snapshots sorted by week index
    """
    sessions_by_id = {s.session_id: s for s in sessions}
    se_by_id = {se.session_exercise_id: se for se in session_exercises}
    return [
        snapshot_week(week, sessions_by_id, se_by_id)
        for week in sorted(weeks, key=lambda w: w.index)
    ]
