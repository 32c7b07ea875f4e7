"""
Adaptation rules: soreness/performance feedback to next-week volume.

recommend_set_delta() reads the fixed recovery table.  A result is either a
non-negative set delta, the RECOVERY marker (halve volume next week), or
None when feedback is missing.
"""

from typing import Final, Literal, Union

Recovery = Literal["recovery"]
Recommendation = Union[int, Recovery, None]

RECOVERY: Final[Recovery] = "recovery"

# Rows: soreness 0-3.  Columns: performance 0-3.
RECOVERY_TABLE: Final[tuple[tuple[Union[int, Recovery], ...], ...]] = (
    (2, 1, 0, RECOVERY),
    (1, 0, 0, RECOVERY),
    (0, 0, 0, RECOVERY),
    (0, 0, 0, RECOVERY),
)


def recommend_set_delta(soreness: int | None, performance: int | None) -> Recommendation:
    """
    Recommend next week's set-count change for one exercise.

    Args:
        soreness: 0 (never sore) to 3 (still sore at next session), or None
        performance: 0 (beat targets easily) to 3 (could not match targets), or None

    Returns:
        Non-negative int delta, RECOVERY, or None when either score is missing

    Raises:
        ValueError: If a score lies outside [0, 3]
    """
    if soreness is None or performance is None:
        return None
    if not 0 <= soreness <= 3:
        raise ValueError(f"soreness must be in [0, 3], got {soreness}")
    if not 0 <= performance <= 3:
        raise ValueError(f"performance must be in [0, 3], got {performance}")
    return RECOVERY_TABLE[soreness][performance]


def is_recovery(recommendation: Recommendation) -> bool:
    return recommendation == RECOVERY


def recovery_set_count(baseline_sets: int) -> int:
    """Set count for a recovery week: max(1, floor(baseline / 2))."""
    return max(1, baseline_sets // 2)
