"""
Data models for meso-scheduler.

All core dataclasses representing catalog data (equipment, exercises,
calibrations), the cycle configuration, and the planned records the engine
produces (weeks, sessions, session exercises, sets).  Dates are stored as
YYYY-MM-DD strings.
"""

from dataclasses import dataclass, field
from typing import Literal

from .config import DEFAULT_WEEK_LENGTH_DAYS

RepRange = Literal["Heavy", "Medium", "Light"]
ProgressionType = Literal["Rep", "Load"]
CycleType = Literal["MuscleGain", "Resensitization", "Cut", "FreeForm"]

REP_RANGE_VALUES: tuple[str, ...] = ("Heavy", "Medium", "Light")
PROGRESSION_VALUES: tuple[str, ...] = ("Rep", "Load")
CYCLE_TYPE_VALUES: tuple[str, ...] = ("MuscleGain", "Resensitization", "Cut", "FreeForm")


def _check_subscore(value: int | None, name: str) -> None:
    if value is not None and not 0 <= value <= 3:
        raise ValueError(f"{name} must be in [0, 3], got {value}")


@dataclass
class StimulusScore:
    """Raw stimulus magnitude (RSM) sub-scores, each 0-3."""

    mind_muscle_connection: int | None = None
    pump: int | None = None
    disruption: int | None = None

    def __post_init__(self) -> None:
        _check_subscore(self.mind_muscle_connection, "mind_muscle_connection")
        _check_subscore(self.pump, "pump")
        _check_subscore(self.disruption, "disruption")

    def parts(self) -> tuple[int | None, int | None, int | None]:
        return (self.mind_muscle_connection, self.pump, self.disruption)


@dataclass
class FatigueScore:
    """Fatigue sub-scores, each 0-3."""

    joint_and_tissue_disruption: int | None = None
    perceived_effort: int | None = None
    unused_muscle_performance: int | None = None

    def __post_init__(self) -> None:
        _check_subscore(self.joint_and_tissue_disruption, "joint_and_tissue_disruption")
        _check_subscore(self.perceived_effort, "perceived_effort")
        _check_subscore(self.unused_muscle_performance, "unused_muscle_performance")

    def parts(self) -> tuple[int | None, int | None, int | None]:
        return (
            self.joint_and_tissue_disruption,
            self.perceived_effort,
            self.unused_muscle_performance,
        )


@dataclass
class EquipmentType:
    """
    A piece of equipment and the discrete weights it can be loaded to.

    weight_options must be ascending; the planner never emits a weight
    outside this list.
    """

    equipment_id: str
    title: str
    weight_options: list[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate equipment data."""
        if not self.equipment_id:
            raise ValueError("equipment_id must be non-empty")
        for lo, hi in zip(self.weight_options, self.weight_options[1:]):
            if hi <= lo:
                raise ValueError(
                    f"weight_options for {self.equipment_id} must be strictly ascending"
                )
        if any(w < 0 for w in self.weight_options):
            raise ValueError("weight_options must be non-negative")


@dataclass
class Exercise:
    """
    An exercise definition.

    The first entry of primary_muscle_groups is the muscle group the volume
    planner groups this exercise under.
    """

    exercise_id: str
    name: str
    equipment_id: str
    rep_range: RepRange
    primary_muscle_groups: list[str]
    secondary_muscle_groups: list[str] = field(default_factory=list)
    preferred_progression: ProgressionType = "Rep"

    def __post_init__(self) -> None:
        """Validate exercise data."""
        if not self.exercise_id:
            raise ValueError("exercise_id must be non-empty")
        if self.rep_range not in REP_RANGE_VALUES:
            raise ValueError(f"rep_range must be one of {REP_RANGE_VALUES}")
        if self.preferred_progression not in PROGRESSION_VALUES:
            raise ValueError(f"preferred_progression must be one of {PROGRESSION_VALUES}")
        if not self.primary_muscle_groups:
            raise ValueError(f"Exercise {self.exercise_id} needs a primary muscle group")

    @property
    def muscle_group(self) -> str:
        return self.primary_muscle_groups[0]


@dataclass
class Calibration:
    """A reference weight/reps pair for one exercise, locked at cycle start."""

    calibration_id: str
    exercise_id: str
    weight: float
    reps: int

    def __post_init__(self) -> None:
        """Validate calibration data."""
        if self.weight < 0:
            raise ValueError("weight must be non-negative")
        if self.reps < 1:
            raise ValueError("reps must be >= 1")


@dataclass
class CycleConfig:
    """
    A mesocycle configuration.

    planned_week_count=None means the default (5 progressive weeks + deload).
    rest_days holds day offsets within the week on which no session is placed.
    """

    cycle_id: str
    user_id: str
    calibration_ids: list[str]
    cycle_type: CycleType
    sessions_per_week: int
    week_length_days: int = DEFAULT_WEEK_LENGTH_DAYS
    rest_days: list[int] = field(default_factory=list)
    planned_week_count: int | None = None
    start_date: str | None = None
    title: str = ""

    def __post_init__(self) -> None:
        """Validate cycle data."""
        if self.cycle_type not in CYCLE_TYPE_VALUES:
            raise ValueError(f"cycle_type must be one of {CYCLE_TYPE_VALUES}")
        if self.sessions_per_week < 1:
            raise ValueError("sessions_per_week must be >= 1")
        if self.week_length_days < 1:
            raise ValueError("week_length_days must be >= 1")
        for day in self.rest_days:
            if not 0 <= day < self.week_length_days:
                raise ValueError(
                    f"rest day {day} outside week of {self.week_length_days} days"
                )
        if len(set(self.rest_days)) >= self.week_length_days:
            raise ValueError("at least one non-rest day is required")


@dataclass
class WorkoutSet:
    """
    A single set.

    planned_* fields are written by the planner; actual_* fields are filled
    in by the athlete.  planned_rir is None on deload sets.
    """

    set_id: str
    session_exercise_id: str
    exercise_id: str
    planned_reps: int
    planned_weight: float
    planned_rir: int | None = None
    actual_reps: int | None = None
    actual_weight: float | None = None
    actual_rir: int | None = None

    def __post_init__(self) -> None:
        """Validate set data."""
        if self.planned_reps < 0:
            raise ValueError("planned_reps must be non-negative")
        if self.planned_weight < 0:
            raise ValueError("planned_weight must be non-negative")
        if self.planned_rir is not None and self.planned_rir < 0:
            raise ValueError("planned_rir must be non-negative")
        if self.actual_reps is not None and self.actual_reps < 0:
            raise ValueError("actual_reps must be non-negative")
        if self.actual_weight is not None and self.actual_weight < 0:
            raise ValueError("actual_weight must be non-negative")
        if self.actual_rir is not None and self.actual_rir < 0:
            raise ValueError("actual_rir must be non-negative")

    @property
    def is_completed(self) -> bool:
        """Logged with reps and weight, and RIR when one was planned."""
        return (
            self.actual_reps is not None
            and self.actual_weight is not None
            and (self.actual_rir is not None or self.planned_rir is None)
        )


@dataclass
class SessionExercise:
    """
    An exercise slotted into a session, with the athlete's feedback.

    soreness and performance are 0-3 scores reported after the session;
    is_recovery marks that the planner halved this exercise's volume.
    """

    session_exercise_id: str
    session_id: str
    exercise_id: str
    set_ids: list[str] = field(default_factory=list)
    stimulus: StimulusScore | None = None
    fatigue: FatigueScore | None = None
    soreness: int | None = None
    performance: int | None = None
    is_recovery: bool = False

    def __post_init__(self) -> None:
        _check_subscore(self.soreness, "soreness")
        _check_subscore(self.performance, "performance")


@dataclass
class Session:
    """A training session on one day of a week."""

    session_id: str
    week_id: str
    title: str
    start_date: str
    session_exercise_ids: list[str] = field(default_factory=list)
    complete: bool = False


@dataclass
class Week:
    """A microcycle.  end_date is exclusive: the next week starts on it."""

    week_id: str
    cycle_id: str
    index: int
    start_date: str
    end_date: str
    session_ids: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError("index must be non-negative")
        if self.end_date < self.start_date:
            raise ValueError("end_date must not precede start_date")


@dataclass
class PlanRecords:
    """A flat bundle of week/session/session-exercise/set records."""

    weeks: list[Week] = field(default_factory=list)
    sessions: list[Session] = field(default_factory=list)
    session_exercises: list[SessionExercise] = field(default_factory=list)
    sets: list[WorkoutSet] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.weeks or self.sessions or self.session_exercises or self.sets)


@dataclass
class CycleDocument:
    """
    Everything stored for one cycle: catalog, configuration, and plan.

    Analogous to a saved workspace; the CLI loads one, plans, and saves it.
    """

    cycle: CycleConfig
    equipment: list[EquipmentType] = field(default_factory=list)
    exercises: list[Exercise] = field(default_factory=list)
    calibrations: list[Calibration] = field(default_factory=list)
    plan: PlanRecords = field(default_factory=PlanRecords)
