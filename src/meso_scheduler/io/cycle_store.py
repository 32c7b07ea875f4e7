"""
JSON-based storage for a cycle document.

Handles reading, writing, and updating the cycle file: catalog data, the
cycle configuration, and every planned week/session/set record.
"""

import json
from dataclasses import replace
from pathlib import Path

import yaml

from ..core.models import CycleDocument, PlanRecords, Session, SessionExercise, WorkoutSet
from ..core.planner import PlanningInput, PlanResult
from .serializers import (
    ValidationError,
    dict_to_document,
    dict_to_fatigue,
    dict_to_stimulus,
    document_to_dict,
)


class CycleStore:
    """
    Manages one cycle stored as a single JSON document.

    The document holds equipment, exercises, calibrations, the cycle
    configuration and the plan records.  Every mutation rewrites the file.
    """

    def __init__(self, cycle_path: str | Path):
        """
        Initialize the cycle store.

        Args:
            cycle_path: Path to the cycle JSON file
        """
        self.cycle_path = Path(cycle_path)

    def exists(self) -> bool:
        """Check if the cycle file exists."""
        return self.cycle_path.exists()

    def load(self) -> CycleDocument:
        """
        Load the cycle document.

        Raises:
            FileNotFoundError: If the cycle file doesn't exist
            ValidationError: If the file is not a valid cycle document
        """
        if not self.cycle_path.exists():
            raise FileNotFoundError(f"Cycle file not found: {self.cycle_path}. Run 'init' first.")
        try:
            with open(self.cycle_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Error parsing {self.cycle_path}: {e}") from e
        return dict_to_document(data)

    def save(self, document: CycleDocument) -> None:
        """Write the cycle document, creating parent directories if needed."""
        self.cycle_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.cycle_path.with_suffix(self.cycle_path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(document_to_dict(document), f, indent=2)
        tmp_path.replace(self.cycle_path)

    # ------------------------------------------------------------------
    # Athlete input
    # ------------------------------------------------------------------

    def log_set(
        self,
        set_id: str,
        actual_reps: int,
        actual_weight: float,
        actual_rir: int | None = None,
    ) -> WorkoutSet:
        """
        Record what was actually performed for a planned set.

        Raises:
            ValidationError: If the set does not exist or values are invalid
        """
        document = self.load()
        for i, s in enumerate(document.plan.sets):
            if s.set_id == set_id:
                try:
                    updated = replace(
                        s,
                        actual_reps=actual_reps,
                        actual_weight=actual_weight,
                        actual_rir=actual_rir,
                    )
                except ValueError as e:
                    raise ValidationError(str(e)) from e
                document.plan.sets[i] = updated
                self.save(document)
                return updated
        raise ValidationError(f"Set not found: {set_id}")

    def record_feedback(
        self,
        session_exercise_id: str,
        soreness: int | None = None,
        performance: int | None = None,
        stimulus: dict | None = None,
        fatigue: dict | None = None,
    ) -> SessionExercise:
        """
        Record soreness/performance and stimulus/fatigue scores.

        Only the arguments that are not None are changed.

        Raises:
            ValidationError: If the session exercise does not exist or values are invalid
        """
        document = self.load()
        for i, se in enumerate(document.plan.session_exercises):
            if se.session_exercise_id != session_exercise_id:
                continue
            changes: dict = {}
            if soreness is not None:
                changes["soreness"] = soreness
            if performance is not None:
                changes["performance"] = performance
            if stimulus is not None:
                changes["stimulus"] = dict_to_stimulus(stimulus)
            if fatigue is not None:
                changes["fatigue"] = dict_to_fatigue(fatigue)
            try:
                updated = replace(se, **changes)
            except ValueError as e:
                raise ValidationError(str(e)) from e
            document.plan.session_exercises[i] = updated
            self.save(document)
            return updated
        raise ValidationError(f"Session exercise not found: {session_exercise_id}")

    def complete_session(self, session_id: str, complete: bool = True) -> Session:
        """
        Mark a session complete (or reopen it).

        Raises:
            ValidationError: If the session does not exist
        """
        document = self.load()
        for i, session in enumerate(document.plan.sessions):
            if session.session_id == session_id:
                updated = replace(session, complete=complete)
                document.plan.sessions[i] = updated
                self.save(document)
                return updated
        raise ValidationError(f"Session not found: {session_id}")


def planning_input(document: CycleDocument) -> PlanningInput:
    """Wrap a stored document as engine input."""
    return PlanningInput(
        cycle=document.cycle,
        calibrations=document.calibrations,
        exercises=document.exercises,
        equipment=document.equipment,
        existing=document.plan,
    )


def apply_plan_result(document: CycleDocument, result: PlanResult) -> CycleDocument:
    """
    Return a new document with the result's deletions and creations applied.

    Deletions are applied first so regenerated records may reuse ids.
    """
    doomed = set(result.delete_ids)
    plan = document.plan
    merged = PlanRecords(
        weeks=[w for w in plan.weeks if w.week_id not in doomed] + result.create.weeks,
        sessions=[s for s in plan.sessions if s.session_id not in doomed] + result.create.sessions,
        session_exercises=[
            se for se in plan.session_exercises if se.session_exercise_id not in doomed
        ]
        + result.create.session_exercises,
        sets=[s for s in plan.sets if s.set_id not in doomed] + result.create.sets,
    )
    merged.weeks.sort(key=lambda w: w.index)
    return replace(document, plan=merged)


def load_catalog(path: str | Path) -> CycleDocument:
    """
    Load a catalog file (YAML or JSON) describing equipment, exercises,
    calibrations and the cycle.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the content is invalid
    """
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValidationError(f"Error parsing {path}: {e}") from e
    return dict_to_document(data)


def get_default_cycle_path() -> Path:
    """Get the default cycle file path (~/.meso-scheduler/cycle.json)."""
    return Path.home() / ".meso-scheduler" / "cycle.json"
