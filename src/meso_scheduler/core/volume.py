"""
Weekly set-count planning for one muscle group.

Two regimes:

Baseline (no usable history)
    The group gets 2 sets per exercise plus one extra set per week index,
    split evenly with the remainder going to earlier exercises.

Autoregulated (history available)
    Each exercise starts from its baseline week's set count.  Feedback
    from that week either triggers recovery (halve, min 1) or yields a
    non-negative delta.  Deltas are applied one set at a time in SFR
    order under two caps:

        MAX_SETS_PER_EXERCISE                 per exercise per week
        MAX_SETS_PER_SESSION_MUSCLE_GROUP     per session, summed over the group

    A set its own exercise cannot absorb moves to the next ranked exercise
    with room under both caps (wrapping around); if none has room it is
    dropped.

The deload week halves each exercise's previous-week count (min 1).
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from .adaptation import is_recovery, recommend_set_delta, recovery_set_count
from .config import DEFAULT_SETTINGS, PlannerSettings
from .errors import ConfigurationError
from .history import Baseline, WeekSnapshot, find_baseline
from .metrics import stimulus_to_fatigue_ratio


@dataclass(frozen=True)
class VolumePlan:
    """Set counts for one muscle group in one week."""

    set_counts: dict[str, int]
    recovery_ids: frozenset[str] = field(default_factory=frozenset)

    @property
    def total_sets(self) -> int:
        return sum(self.set_counts.values())


def baseline_set_counts(
    week_index: int,
    exercise_count: int,
    settings: PlannerSettings = DEFAULT_SETTINGS,
) -> list[int]:
    """
    Default per-exercise set counts for a group with no usable history.

    total = baseline_sets * n + week_index, split evenly, remainder to the
    earliest exercises; each count capped at MAX_SETS_PER_EXERCISE.

    Args:
        week_index: Zero-based week index
        exercise_count: Exercises in the group

    Returns:
        Set count per exercise, in group order
    """
    if exercise_count <= 0:
        return []
    total = settings.baseline_sets_per_exercise * exercise_count + week_index
    base, remainder = divmod(total, exercise_count)
    return [
        min(base + (1 if i < remainder else 0), settings.max_sets_per_exercise)
        for i in range(exercise_count)
    ]


def _check_session_capacity(
    exercise_ids: Sequence[str],
    session_of: Mapping[str, int],
    settings: PlannerSettings,
) -> None:
    """
    Raises:
        ConfigurationError: If a session holds more of the group's exercises
            than the group cap leaves one set each for
    """
    per_session = Counter(session_of[ex_id] for ex_id in exercise_ids if ex_id in session_of)
    for session, count in sorted(per_session.items()):
        if count > settings.max_sets_per_session_muscle_group:
            raise ConfigurationError(
                f"Session {session} holds {count} exercises of one muscle group; "
                f"at most {settings.max_sets_per_session_muscle_group} fit under the "
                f"per-session set cap"
            )


def _fit_session_cap(
    exercise_ids: Sequence[str],
    counts: Mapping[str, int],
    session_of: Mapping[str, int],
    settings: PlannerSettings,
) -> dict[str, int]:
    # Trim in group order so each session stays within the group cap,
    # keeping 1 set for every exercise still to come in that session.
    pending = Counter(session_of[ex_id] for ex_id in exercise_ids if ex_id in session_of)
    session_totals: Counter = Counter()
    fitted: dict[str, int] = {}
    for ex_id in exercise_ids:
        session = session_of.get(ex_id)
        wanted = counts[ex_id]
        if session is not None:
            pending[session] -= 1
            room = (
                settings.max_sets_per_session_muscle_group
                - session_totals[session]
                - pending[session]
            )
            wanted = max(1, min(wanted, room))
            session_totals[session] += wanted
        fitted[ex_id] = wanted
    return fitted


def _rank(exercise_ids: Sequence[str], ratios: Mapping[str, float | None]) -> list[str]:
    """Sort by SFR descending; unknown SFR last; ties keep group order."""
    return sorted(
        exercise_ids,
        key=lambda ex_id: (ratios[ex_id] is None, -(ratios[ex_id] or 0.0)),
    )


def distribute_deltas(
    counts: Mapping[str, int],
    ranked: Sequence[str],
    deltas: Mapping[str, int],
    session_of: Mapping[str, int],
    settings: PlannerSettings = DEFAULT_SETTINGS,
) -> dict[str, int]:
    """
    Apply set deltas one unit at a time under both caps.

    Args:
        counts: Starting set count for every exercise in the group,
            including recovery exercises (they count toward session totals)
        ranked: Exercises eligible for extra sets, best SFR first
        deltas: Requested extra sets per ranked exercise
        session_of: Session index per exercise; exercises without one are
            only bound by the per-exercise cap

    Returns:
        New set counts for every exercise in counts
    """
    result = dict(counts)
    session_totals: Counter = Counter()
    for ex_id, count in result.items():
        if ex_id in session_of:
            session_totals[session_of[ex_id]] += count

    def has_room(ex_id: str) -> bool:
        if result[ex_id] >= settings.max_sets_per_exercise:
            return False
        session = session_of.get(ex_id)
        if session is None:
            return True
        return session_totals[session] < settings.max_sets_per_session_muscle_group

    for pos, origin in enumerate(ranked):
        order = list(ranked[pos:]) + list(ranked[:pos])
        for _ in range(deltas.get(origin, 0)):
            receiver = next((ex_id for ex_id in order if has_room(ex_id)), None)
            if receiver is None:
                break
            result[receiver] += 1
            if receiver in session_of:
                session_totals[session_of[receiver]] += 1
    return result


def plan_group_volume(
    week_index: int,
    exercise_ids: Sequence[str],
    session_of: Mapping[str, int],
    history: Sequence[WeekSnapshot] = (),
    *,
    is_deload: bool = False,
    previous_counts: Mapping[str, int] | None = None,
    settings: PlannerSettings = DEFAULT_SETTINGS,
) -> VolumePlan:
    """
    Compute set counts for one muscle group's exercises in one week.

    Args:
        week_index: Zero-based week being planned
        exercise_ids: Exercises of the group, in group order
        session_of: Session index (within the week) of each exercise
        history: Snapshots of weeks before week_index, ascending
        is_deload: True for the cycle's deload week
        previous_counts: Set counts planned for the prior week, used by the
            deload week
        settings: Planner caps and baseline sizes

    Returns:
        VolumePlan with a count for every exercise and the recovery set
    """
    exercise_ids = list(exercise_ids)
    if not exercise_ids:
        return VolumePlan(set_counts={})
    _check_session_capacity(exercise_ids, session_of, settings)

    if is_deload:
        fallback = dict(
            zip(exercise_ids, baseline_set_counts(max(0, week_index - 1), len(exercise_ids), settings))
        )
        prior = previous_counts or {}
        halved = {ex_id: max(1, prior.get(ex_id, fallback[ex_id]) // 2) for ex_id in exercise_ids}
        return VolumePlan(set_counts=_fit_session_cap(exercise_ids, halved, session_of, settings))

    seeded = dict(zip(exercise_ids, baseline_set_counts(week_index, len(exercise_ids), settings)))

    baselines: dict[str, Baseline] = {}
    if week_index > 0:
        for ex_id in exercise_ids:
            found = find_baseline(history, ex_id)
            if found is not None:
                baselines[ex_id] = found

    if not baselines:
        return VolumePlan(set_counts=_fit_session_cap(exercise_ids, seeded, session_of, settings))

    counts: dict[str, int] = {}
    deltas: dict[str, int] = {}
    ratios: dict[str, float | None] = {}
    recovery: set[str] = set()
    candidates: list[str] = []

    for ex_id in exercise_ids:
        baseline = baselines.get(ex_id)
        if baseline is None:
            # New to the group: seed, no feedback to act on.
            counts[ex_id] = seeded[ex_id]
            deltas[ex_id] = 0
            ratios[ex_id] = None
            candidates.append(ex_id)
            continue

        entry = baseline.entry
        counts[ex_id] = min(entry.set_count, settings.max_sets_per_exercise)
        ratios[ex_id] = stimulus_to_fatigue_ratio(entry.stimulus, entry.fatigue)

        if baseline.week_index < week_index - 1:
            # Returning from recovery: hold volume for one week.
            deltas[ex_id] = 0
            candidates.append(ex_id)
            continue

        recommendation = recommend_set_delta(entry.soreness, entry.performance)
        if is_recovery(recommendation):
            counts[ex_id] = recovery_set_count(entry.set_count)
            recovery.add(ex_id)
            continue

        deltas[ex_id] = recommendation if isinstance(recommendation, int) else 0
        candidates.append(ex_id)

    # Seeded newcomers and shifted layouts can overfill a session.
    counts = _fit_session_cap(exercise_ids, counts, session_of, settings)
    ranked = _rank(candidates, ratios)
    final = distribute_deltas(counts, ranked, deltas, session_of, settings)
    return VolumePlan(set_counts=final, recovery_ids=frozenset(recovery))
