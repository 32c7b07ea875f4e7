"""
Set-level prescription: first-set progression and per-set targets.

first_set_target() progresses a calibration through the cycle's weeks;
generate_sets() expands a first set into a session's ordered sets.
Every weight returned is a member of the equipment's weight options.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from .config import DEFAULT_SETTINGS, PlannerSettings
from .equipment import find_nearest_weight, next_weight_above
from .errors import ConfigurationError
from .metrics import target_weight
from .models import Calibration, Exercise


@dataclass(frozen=True)
class SetTarget:
    """Planned reps, weight and RIR for one set."""

    reps: int
    weight: float
    rir: int | None


def _progress_rep(
    reps: int,
    weight: float,
    options: Sequence[float],
    base_reps: int,
    rep_max: int,
    settings: PlannerSettings,
) -> tuple[int, float]:
    # Add reps until the window is exhausted, then take the next plate and restart.
    if reps + settings.rep_progression_per_week <= rep_max:
        return reps + settings.rep_progression_per_week, weight
    heavier = next_weight_above(options, weight)
    if heavier is None:
        return rep_max, weight
    return base_reps, heavier


def _progress_load(
    reps: int,
    weight: float,
    options: Sequence[float],
    rep_max: int,
    settings: PlannerSettings,
) -> tuple[int, float]:
    # The larger of one increment or +2%, both rounded onto the ladder.
    steps = [
        w
        for w in (
            next_weight_above(options, weight),
            find_nearest_weight(options, weight * (1 + settings.load_progression_rate), "up"),
        )
        if w is not None and w > weight
    ]
    if not steps:
        return min(reps + settings.rep_progression_per_week, rep_max), weight
    return reps, max(steps)


def first_set_target(
    exercise: Exercise,
    calibration: Calibration,
    options: Sequence[float],
    week_index: int,
    settings: PlannerSettings = DEFAULT_SETTINGS,
) -> tuple[int, float]:
    """
    Progressed reps and weight for the first set of an exercise in a week.

    Week 0 starts at (rep_max - FIRST_WEEK_RIR) reps with the weight the
    calibration predicts for rep_max reps, rounded prefer-down.  Each later
    week applies one progression step:

    Rep mode
        +2 reps while that stays within rep_max; otherwise the next legal
        weight with reps reset to the week-0 count.  At the top of the ladder
        reps are capped at rep_max.
    Load mode
        weight rises to the larger of the next legal weight and the legal
        weight at or above +2%.  At the top of the ladder +2 reps, capped
        at rep_max.

    Args:
        exercise: Exercise being prescribed
        calibration: Locked calibration for that exercise
        options: Ascending legal weights
        week_index: Zero-based week index
        settings: Rep ranges and progression rates

    Returns:
        (reps, weight)

    Raises:
        ConfigurationError: If no legal weight can be found
    """
    rep_min, rep_max = settings.rep_range(exercise.rep_range)
    base_reps = max(rep_min, rep_max - settings.first_week_rir)

    weight = find_nearest_weight(options, target_weight(calibration, rep_max), "prefer-down")
    if weight is None:
        raise ConfigurationError(
            f"No weight options available for exercise '{exercise.name}' "
            f"(equipment {exercise.equipment_id})"
        )

    reps = base_reps
    for _ in range(week_index):
        if exercise.preferred_progression == "Load":
            reps, weight = _progress_load(reps, weight, options, rep_max, settings)
        else:
            reps, weight = _progress_rep(reps, weight, options, base_reps, rep_max, settings)
    return reps, weight


def _next_set(
    reps: int,
    weight: float,
    rep_min: int,
    options: Sequence[float],
    settings: PlannerSettings,
) -> tuple[int, float]:
    dropped = reps - settings.rep_drop_per_set
    if dropped >= rep_min:
        return dropped, weight
    lighter = find_nearest_weight(options, weight / settings.weight_drop_factor, "down")
    if lighter is not None:
        return reps, lighter
    return min(reps, rep_min), weight


def generate_sets(
    first_reps: int,
    first_weight: float,
    set_count: int,
    rep_range: tuple[int, int],
    options: Sequence[float],
    rir: int | None,
    *,
    is_deload: bool = False,
    session_index: int = 0,
    sessions_per_week: int = 1,
    settings: PlannerSettings = DEFAULT_SETTINGS,
) -> list[SetTarget]:
    """
    Expand a first set into a session's ordered set targets.

    Each set after the first drops 2 reps.  When that would fall below the
    rep-range minimum the weight is lowered instead (previous / 1.02, rounded
    down onto the ladder); with no lighter weight, reps hold at the minimum.

    On a deload week first_reps/first_weight are the previous week's first
    set: reps are halved, and sessions in the second half of the week
    (session_index >= sessions_per_week // 2) also halve the weight.  Deload
    sets carry no RIR target.

    Args:
        first_reps: Reps for the first set (previous week's on deload)
        first_weight: Weight for the first set (previous week's on deload)
        set_count: Number of sets
        rep_range: (min, max) reps of the exercise
        options: Ascending legal weights
        rir: Week RIR target
        is_deload: Apply deload modifications
        session_index: Position of the session within the week
        sessions_per_week: Planned sessions per week

    Returns:
        SetTarget per set, in order
    """
    rep_min, _ = rep_range
    planned_rir = None if is_deload else rir
    targets: list[SetTarget] = []

    reps, weight = first_reps, first_weight
    for set_index in range(set_count):
        if set_index > 0:
            reps, weight = _next_set(reps, weight, rep_min, options, settings)
        elif is_deload:
            reps = reps // 2
            if session_index >= sessions_per_week // 2:
                halved = find_nearest_weight(options, math.floor(weight / 2), "prefer-down")
                if halved is not None:
                    weight = halved
        targets.append(SetTarget(reps=reps, weight=weight, rir=planned_rir))
    return targets
