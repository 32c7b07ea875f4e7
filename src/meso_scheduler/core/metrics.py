"""
Pure metric computation functions.

Stimulus/fatigue aggregation (SFR) and calibration-based load targets.
All functions are pure and typed for testability.
"""

from typing import Sequence

from .config import NASM_1RM_DIVISOR, PCT_1RM_AT_5_REPS, PCT_1RM_PER_REP
from .models import Calibration, FatigueScore, StimulusScore


def _total(parts: Sequence[int | None]) -> int | None:
    if any(p is None for p in parts):
        return None
    return sum(parts)  # type: ignore[arg-type]


def stimulus_total(score: StimulusScore | None) -> int | None:
    """
    Raw stimulus magnitude: sum of the three sub-scores (0-9).

    Returns None when the score is missing or any sub-score is unset.
    """
    if score is None:
        return None
    return _total(score.parts())


def fatigue_total(score: FatigueScore | None) -> int | None:
    """Fatigue total (0-9); None when missing or incomplete."""
    if score is None:
        return None
    return _total(score.parts())


def stimulus_to_fatigue_ratio(
    stimulus: StimulusScore | None,
    fatigue: FatigueScore | None,
) -> float | None:
    """
    Calculate the stimulus-to-fatigue ratio (SFR).

    SFR = stimulus_total / fatigue_total

    Args:
        stimulus: Stimulus sub-scores
        fatigue: Fatigue sub-scores

    Returns:
        SFR, or None if either total is unavailable or fatigue_total is 0
    """
    s_total = stimulus_total(stimulus)
    f_total = fatigue_total(fatigue)
    if s_total is None or f_total is None or f_total == 0:
        return None
    return s_total / f_total


def estimated_1rm(weight: float, reps: int) -> float:
    """
    Estimate 1RM using the NASM formula.

    1RM = weight * reps / 30.48 + weight

    Args:
        weight: Load lifted
        reps: Reps performed at that load

    Returns:
        Estimated 1RM in the same unit as weight
    """
    if reps <= 0:
        return 0.0
    return weight * reps / NASM_1RM_DIVISOR + weight


def target_percentage(reps: int) -> float:
    """Percent of 1RM that can be lifted for the given reps: 30 + (reps - 5) * 2.2."""
    return PCT_1RM_AT_5_REPS + (reps - 5) * PCT_1RM_PER_REP


def target_weight(calibration: Calibration, reps: int) -> float:
    """
    Unrounded weight an athlete should handle for ``reps`` reps.

    target = 1RM(calibration) * target_percentage(reps) / 100
    """
    one_rm = estimated_1rm(calibration.weight, calibration.reps)
    return one_rm * target_percentage(reps) / 100
