"""
Configuration constants for the mesocycle planning engine.

All adjustable parameters are centralized here.  The bundled planner.yaml
mirrors these values; a user override in ~/.meso-scheduler/planner.yaml is
merged over them by core.engine.config_loader.load_settings().
"""

from dataclasses import dataclass, field
from typing import Final

# =============================================================================
# VOLUME CAPS
# =============================================================================

MAX_SETS_PER_EXERCISE: Final[int] = 8  # Hard ceiling per exercise per week
MAX_SETS_PER_SESSION_MUSCLE_GROUP: Final[int] = 10  # Per session, per muscle group
BASELINE_SETS_PER_EXERCISE: Final[int] = 2  # Week 0 seed

# =============================================================================
# CYCLE SHAPE
# =============================================================================

DEFAULT_WEEK_COUNT: Final[int] = 6  # 5 progressive weeks + 1 deload
MIN_WEEK_COUNT: Final[int] = 2
MAX_WEEK_COUNT: Final[int] = 20
DEFAULT_WEEK_LENGTH_DAYS: Final[int] = 7

# =============================================================================
# PROXIMITY TO FAILURE
# =============================================================================

FIRST_WEEK_RIR: Final[int] = 4  # Sequence 4, 3, 2, 1, 0, 0, ...

# =============================================================================
# REP RANGES
# =============================================================================

REP_RANGES: Final[dict[str, tuple[int, int]]] = {
    "Heavy": (5, 15),
    "Medium": (10, 20),
    "Light": (15, 30),
}

REP_RANGE_ORDER: Final[tuple[str, ...]] = ("Heavy", "Medium", "Light")

# =============================================================================
# SET PROGRESSION
# =============================================================================

REP_DROP_PER_SET: Final[int] = 2  # Reps lost from one set to the next
WEIGHT_DROP_FACTOR: Final[float] = 1.02  # prev / 1.02 when reps hit the floor
LOAD_PROGRESSION_RATE: Final[float] = 0.02  # Load mode: +2% per week minimum
REP_PROGRESSION_PER_WEEK: Final[int] = 2  # Rep mode: +2 reps per week

# =============================================================================
# CALIBRATION (NASM 1RM)
# =============================================================================

NASM_1RM_DIVISOR: Final[float] = 30.48
PCT_1RM_AT_5_REPS: Final[float] = 30.0
PCT_1RM_PER_REP: Final[float] = 2.2


@dataclass(frozen=True)
class PlannerSettings:
    """Tunable planner parameters, one value per constant above."""

    max_sets_per_exercise: int = MAX_SETS_PER_EXERCISE
    max_sets_per_session_muscle_group: int = MAX_SETS_PER_SESSION_MUSCLE_GROUP
    baseline_sets_per_exercise: int = BASELINE_SETS_PER_EXERCISE
    default_week_count: int = DEFAULT_WEEK_COUNT
    min_week_count: int = MIN_WEEK_COUNT
    max_week_count: int = MAX_WEEK_COUNT
    first_week_rir: int = FIRST_WEEK_RIR
    rep_drop_per_set: int = REP_DROP_PER_SET
    weight_drop_factor: float = WEIGHT_DROP_FACTOR
    load_progression_rate: float = LOAD_PROGRESSION_RATE
    rep_progression_per_week: int = REP_PROGRESSION_PER_WEEK
    rep_ranges: dict[str, tuple[int, int]] = field(default_factory=lambda: dict(REP_RANGES))

    def __post_init__(self) -> None:
        """Validate settings."""
        if self.max_sets_per_exercise < 1:
            raise ValueError("max_sets_per_exercise must be >= 1")
        if self.max_sets_per_session_muscle_group < 1:
            raise ValueError("max_sets_per_session_muscle_group must be >= 1")
        if self.baseline_sets_per_exercise < 1:
            raise ValueError("baseline_sets_per_exercise must be >= 1")
        if not self.min_week_count <= self.default_week_count <= self.max_week_count:
            raise ValueError("default_week_count must lie within [min_week_count, max_week_count]")
        if self.first_week_rir < 0:
            raise ValueError("first_week_rir must be non-negative")
        if self.weight_drop_factor <= 1.0:
            raise ValueError("weight_drop_factor must be > 1")
        if self.load_progression_rate < 0:
            raise ValueError("load_progression_rate must be non-negative")
        for name, (low, high) in self.rep_ranges.items():
            if low < 1 or high < low:
                raise ValueError(f"Invalid rep range for {name}: [{low}, {high}]")

    def rep_range(self, rep_range_class: str) -> tuple[int, int]:
        """Return the (min, max) rep window for a rep-range class."""
        if rep_range_class not in self.rep_ranges:
            valid = ", ".join(self.rep_ranges)
            raise ValueError(f"Unknown rep range '{rep_range_class}'. Valid: {valid}")
        return self.rep_ranges[rep_range_class]


DEFAULT_SETTINGS: Final[PlannerSettings] = PlannerSettings()


def week_rir(week_index: int, first_week_rir: int = FIRST_WEEK_RIR) -> int:
    """
    Target reps-in-reserve for a non-deload week.

    Args:
        week_index: Zero-based week index
        first_week_rir: RIR of week 0

    Returns:
        max(0, first_week_rir - min(week_index, first_week_rir))
    """
    return max(0, first_week_rir - min(week_index, first_week_rir))
