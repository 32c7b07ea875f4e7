"""
JSON serialization for planning data models.

Handles conversion between dataclasses and JSON-compatible dicts.
"""

import re
from datetime import datetime
from typing import Any

from ..core.config import DEFAULT_WEEK_LENGTH_DAYS
from ..core.equipment import generate_weight_options
from ..core.models import (
    Calibration,
    CycleConfig,
    CycleDocument,
    EquipmentType,
    Exercise,
    FatigueScore,
    PlanRecords,
    Session,
    SessionExercise,
    StimulusScore,
    Week,
    WorkoutSet,
)

DOCUMENT_VERSION = 1


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_date(date_str: str) -> str:
    """
    Validate and normalize date string to ISO format.

    Args:
        date_str: Date string to validate

    Returns:
        Normalized YYYY-MM-DD string

    Raises:
        ValidationError: If date format is invalid
    """
    if not isinstance(date_str, str) or not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ValidationError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")

    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError as e:
        raise ValidationError(f"Invalid date: {date_str}") from e

    return date_str


def _require(data: dict[str, Any], key: str, record: str) -> Any:
    if key not in data:
        raise ValidationError(f"{record} is missing required field '{key}'")
    return data[key]


def _optional_int(value: Any) -> int | None:
    return int(value) if value is not None else None


def _optional_float(value: Any) -> float | None:
    return float(value) if value is not None else None


def _build(record: str, factory, **kwargs):
    # Model __post_init__ raises ValueError; surface it as ValidationError.
    try:
        return factory(**kwargs)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid {record}: {e}") from e


# ---------------------------------------------------------------------------
# Scores
# ---------------------------------------------------------------------------


def stimulus_to_dict(score: StimulusScore | None) -> dict[str, Any] | None:
    if score is None:
        return None
    return {
        "mind_muscle_connection": score.mind_muscle_connection,
        "pump": score.pump,
        "disruption": score.disruption,
    }


def dict_to_stimulus(data: dict[str, Any] | None) -> StimulusScore | None:
    if data is None:
        return None
    return _build(
        "stimulus score",
        StimulusScore,
        mind_muscle_connection=_optional_int(data.get("mind_muscle_connection")),
        pump=_optional_int(data.get("pump")),
        disruption=_optional_int(data.get("disruption")),
    )


def fatigue_to_dict(score: FatigueScore | None) -> dict[str, Any] | None:
    if score is None:
        return None
    return {
        "joint_and_tissue_disruption": score.joint_and_tissue_disruption,
        "perceived_effort": score.perceived_effort,
        "unused_muscle_performance": score.unused_muscle_performance,
    }


def dict_to_fatigue(data: dict[str, Any] | None) -> FatigueScore | None:
    if data is None:
        return None
    return _build(
        "fatigue score",
        FatigueScore,
        joint_and_tissue_disruption=_optional_int(data.get("joint_and_tissue_disruption")),
        perceived_effort=_optional_int(data.get("perceived_effort")),
        unused_muscle_performance=_optional_int(data.get("unused_muscle_performance")),
    )


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


def equipment_to_dict(equipment: EquipmentType) -> dict[str, Any]:
    return {
        "equipment_id": equipment.equipment_id,
        "title": equipment.title,
        "weight_options": list(equipment.weight_options),
    }


def dict_to_equipment(data: dict[str, Any]) -> EquipmentType:
    """
    Convert dict to EquipmentType.

    Accepts either an explicit weight_options list or a ladder definition
    (min_weight, increment, max_weight) that is expanded here.

    Raises:
        ValidationError: If data is invalid
    """
    options = data.get("weight_options")
    if options is None and "increment" in data:
        try:
            options = generate_weight_options(
                float(_require(data, "min_weight", "equipment")),
                float(data["increment"]),
                float(_require(data, "max_weight", "equipment")),
            )
        except ValueError as e:
            raise ValidationError(f"Invalid weight ladder: {e}") from e

    return _build(
        "equipment",
        EquipmentType,
        equipment_id=str(_require(data, "equipment_id", "equipment")),
        title=str(data.get("title", data["equipment_id"])),
        weight_options=[float(w) for w in (options or [])],
    )


def exercise_to_dict(exercise: Exercise) -> dict[str, Any]:
    return {
        "exercise_id": exercise.exercise_id,
        "name": exercise.name,
        "equipment_id": exercise.equipment_id,
        "rep_range": exercise.rep_range,
        "primary_muscle_groups": list(exercise.primary_muscle_groups),
        "secondary_muscle_groups": list(exercise.secondary_muscle_groups),
        "preferred_progression": exercise.preferred_progression,
    }


def dict_to_exercise(data: dict[str, Any]) -> Exercise:
    return _build(
        "exercise",
        Exercise,
        exercise_id=str(_require(data, "exercise_id", "exercise")),
        name=str(data.get("name", data["exercise_id"])),
        equipment_id=str(_require(data, "equipment_id", "exercise")),
        rep_range=_require(data, "rep_range", "exercise"),
        primary_muscle_groups=list(_require(data, "primary_muscle_groups", "exercise")),
        secondary_muscle_groups=list(data.get("secondary_muscle_groups", [])),
        preferred_progression=data.get("preferred_progression", "Rep"),
    )


def calibration_to_dict(calibration: Calibration) -> dict[str, Any]:
    return {
        "calibration_id": calibration.calibration_id,
        "exercise_id": calibration.exercise_id,
        "weight": calibration.weight,
        "reps": calibration.reps,
    }


def dict_to_calibration(data: dict[str, Any]) -> Calibration:
    return _build(
        "calibration",
        Calibration,
        calibration_id=str(_require(data, "calibration_id", "calibration")),
        exercise_id=str(_require(data, "exercise_id", "calibration")),
        weight=float(_require(data, "weight", "calibration")),
        reps=int(_require(data, "reps", "calibration")),
    )


def cycle_to_dict(cycle: CycleConfig) -> dict[str, Any]:
    return {
        "cycle_id": cycle.cycle_id,
        "user_id": cycle.user_id,
        "title": cycle.title,
        "calibration_ids": list(cycle.calibration_ids),
        "cycle_type": cycle.cycle_type,
        "sessions_per_week": cycle.sessions_per_week,
        "week_length_days": cycle.week_length_days,
        "rest_days": list(cycle.rest_days),
        "planned_week_count": cycle.planned_week_count,
        "start_date": cycle.start_date,
    }


def dict_to_cycle(data: dict[str, Any]) -> CycleConfig:
    """
    Convert dict to CycleConfig.

    Raises:
        ValidationError: If data is invalid
    """
    start_date = data.get("start_date")
    if start_date is not None:
        validate_date(start_date)
    return _build(
        "cycle",
        CycleConfig,
        cycle_id=str(_require(data, "cycle_id", "cycle")),
        user_id=str(data.get("user_id", "")),
        title=str(data.get("title", "")),
        calibration_ids=[str(c) for c in _require(data, "calibration_ids", "cycle")],
        cycle_type=data.get("cycle_type", "MuscleGain"),
        sessions_per_week=int(_require(data, "sessions_per_week", "cycle")),
        week_length_days=int(data.get("week_length_days", DEFAULT_WEEK_LENGTH_DAYS)),
        rest_days=[int(d) for d in data.get("rest_days", [])],
        planned_week_count=_optional_int(data.get("planned_week_count")),
        start_date=start_date,
    )


# ---------------------------------------------------------------------------
# Plan records
# ---------------------------------------------------------------------------


def week_to_dict(week: Week) -> dict[str, Any]:
    return {
        "week_id": week.week_id,
        "cycle_id": week.cycle_id,
        "index": week.index,
        "start_date": week.start_date,
        "end_date": week.end_date,
        "session_ids": list(week.session_ids),
    }


def dict_to_week(data: dict[str, Any]) -> Week:
    return _build(
        "week",
        Week,
        week_id=str(_require(data, "week_id", "week")),
        cycle_id=str(_require(data, "cycle_id", "week")),
        index=int(_require(data, "index", "week")),
        start_date=validate_date(_require(data, "start_date", "week")),
        end_date=validate_date(_require(data, "end_date", "week")),
        session_ids=list(data.get("session_ids", [])),
    )


def session_to_dict(session: Session) -> dict[str, Any]:
    return {
        "session_id": session.session_id,
        "week_id": session.week_id,
        "title": session.title,
        "start_date": session.start_date,
        "session_exercise_ids": list(session.session_exercise_ids),
        "complete": session.complete,
    }


def dict_to_session(data: dict[str, Any]) -> Session:
    return _build(
        "session",
        Session,
        session_id=str(_require(data, "session_id", "session")),
        week_id=str(_require(data, "week_id", "session")),
        title=str(data.get("title", "")),
        start_date=validate_date(_require(data, "start_date", "session")),
        session_exercise_ids=list(data.get("session_exercise_ids", [])),
        complete=bool(data.get("complete", False)),
    )


def session_exercise_to_dict(se: SessionExercise) -> dict[str, Any]:
    d: dict[str, Any] = {
        "session_exercise_id": se.session_exercise_id,
        "session_id": se.session_id,
        "exercise_id": se.exercise_id,
        "set_ids": list(se.set_ids),
        "is_recovery": se.is_recovery,
    }
    # Feedback fields only once the athlete has reported them
    if se.stimulus is not None:
        d["stimulus"] = stimulus_to_dict(se.stimulus)
    if se.fatigue is not None:
        d["fatigue"] = fatigue_to_dict(se.fatigue)
    if se.soreness is not None:
        d["soreness"] = se.soreness
    if se.performance is not None:
        d["performance"] = se.performance
    return d


def dict_to_session_exercise(data: dict[str, Any]) -> SessionExercise:
    return _build(
        "session exercise",
        SessionExercise,
        session_exercise_id=str(_require(data, "session_exercise_id", "session exercise")),
        session_id=str(_require(data, "session_id", "session exercise")),
        exercise_id=str(_require(data, "exercise_id", "session exercise")),
        set_ids=list(data.get("set_ids", [])),
        stimulus=dict_to_stimulus(data.get("stimulus")),
        fatigue=dict_to_fatigue(data.get("fatigue")),
        soreness=_optional_int(data.get("soreness")),
        performance=_optional_int(data.get("performance")),
        is_recovery=bool(data.get("is_recovery", False)),
    )


def set_to_dict(workout_set: WorkoutSet) -> dict[str, Any]:
    d: dict[str, Any] = {
        "set_id": workout_set.set_id,
        "session_exercise_id": workout_set.session_exercise_id,
        "exercise_id": workout_set.exercise_id,
        "planned_reps": workout_set.planned_reps,
        "planned_weight": workout_set.planned_weight,
        "planned_rir": workout_set.planned_rir,
    }
    if workout_set.actual_reps is not None:
        d["actual_reps"] = workout_set.actual_reps
    if workout_set.actual_weight is not None:
        d["actual_weight"] = workout_set.actual_weight
    if workout_set.actual_rir is not None:
        d["actual_rir"] = workout_set.actual_rir
    return d


def dict_to_set(data: dict[str, Any]) -> WorkoutSet:
    return _build(
        "set",
        WorkoutSet,
        set_id=str(_require(data, "set_id", "set")),
        session_exercise_id=str(_require(data, "session_exercise_id", "set")),
        exercise_id=str(_require(data, "exercise_id", "set")),
        planned_reps=int(_require(data, "planned_reps", "set")),
        planned_weight=float(_require(data, "planned_weight", "set")),
        planned_rir=_optional_int(data.get("planned_rir")),
        actual_reps=_optional_int(data.get("actual_reps")),
        actual_weight=_optional_float(data.get("actual_weight")),
        actual_rir=_optional_int(data.get("actual_rir")),
    )


def plan_to_dict(plan: PlanRecords) -> dict[str, Any]:
    return {
        "weeks": [week_to_dict(w) for w in plan.weeks],
        "sessions": [session_to_dict(s) for s in plan.sessions],
        "session_exercises": [session_exercise_to_dict(se) for se in plan.session_exercises],
        "sets": [set_to_dict(s) for s in plan.sets],
    }


def dict_to_plan(data: dict[str, Any] | None) -> PlanRecords:
    data = data or {}
    return PlanRecords(
        weeks=[dict_to_week(w) for w in data.get("weeks", [])],
        sessions=[dict_to_session(s) for s in data.get("sessions", [])],
        session_exercises=[dict_to_session_exercise(se) for se in data.get("session_exercises", [])],
        sets=[dict_to_set(s) for s in data.get("sets", [])],
    )


# ---------------------------------------------------------------------------
# Whole document
# ---------------------------------------------------------------------------


def document_to_dict(document: CycleDocument) -> dict[str, Any]:
    """
    Convert a CycleDocument to a JSON-compatible dict.

    Args:
        document: CycleDocument to convert

    Returns:
        Dict representation including a format version
    """
    return {
        "version": DOCUMENT_VERSION,
        "cycle": cycle_to_dict(document.cycle),
        "equipment": [equipment_to_dict(e) for e in document.equipment],
        "exercises": [exercise_to_dict(e) for e in document.exercises],
        "calibrations": [calibration_to_dict(c) for c in document.calibrations],
        "plan": plan_to_dict(document.plan),
    }


def dict_to_document(data: dict[str, Any]) -> CycleDocument:
    """
    Convert dict to CycleDocument.

    Raises:
        ValidationError: If data is invalid or of an unsupported version
    """
    if not isinstance(data, dict):
        raise ValidationError("Cycle document must be a JSON object")
    version = data.get("version", DOCUMENT_VERSION)
    if version != DOCUMENT_VERSION:
        raise ValidationError(f"Unsupported cycle document version: {version}")

    # Field coercion (int("eight")) runs before _build, so catch it here too.
    try:
        return CycleDocument(
            cycle=dict_to_cycle(_require(data, "cycle", "cycle document")),
            equipment=[dict_to_equipment(e) for e in data.get("equipment", [])],
            exercises=[dict_to_exercise(e) for e in data.get("exercises", [])],
            calibrations=[dict_to_calibration(c) for c in data.get("calibrations", [])],
            plan=dict_to_plan(data.get("plan")),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid cycle document: {e}") from e
