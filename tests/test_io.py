"""
Tests for the JSON cycle store and its serializers.
"""

import json
from pathlib import Path

import pytest

from meso_scheduler.core.models import (
    Calibration,
    CycleConfig,
    CycleDocument,
    EquipmentType,
    Exercise,
)
from meso_scheduler.core.planner import generate_or_update_cycle
from meso_scheduler.io.cycle_store import (
    CycleStore,
    apply_plan_result,
    load_catalog,
    planning_input,
)
from meso_scheduler.io.serializers import (
    ValidationError,
    dict_to_cycle,
    dict_to_document,
    dict_to_equipment,
    dict_to_exercise,
    dict_to_session_exercise,
    set_to_dict,
    validate_date,
)

CATALOG = Path(__file__).parent.parent / "examples" / "catalog.yaml"

BAD_REPS_CATALOG = """\
cycle: {cycle_id: c, calibration_ids: [cal-bench], sessions_per_week: 1}
equipment:
  - {equipment_id: bar, weight_options: [20, 40]}
exercises:
  - {exercise_id: bench, equipment_id: bar, rep_range: Heavy, primary_muscle_groups: [chest]}
calibrations:
  - {calibration_id: cal-bench, exercise_id: bench, weight: 40, reps: eight}
"""


def _document() -> CycleDocument:
    return CycleDocument(
        cycle=CycleConfig(
            cycle_id="c1",
            user_id="u1",
            calibration_ids=["cal-bench", "cal-row"],
            cycle_type="MuscleGain",
            sessions_per_week=2,
            planned_week_count=3,
        ),
        equipment=[EquipmentType("bar", "Barbell", [20.0, 40.0, 60.0, 80.0, 100.0])],
        exercises=[
            Exercise("bench", "Bench", "bar", "Heavy", ["chest"]),
            Exercise("row", "Row", "bar", "Medium", ["back"]),
        ],
        calibrations=[
            Calibration("cal-bench", "bench", 80, 8),
            Calibration("cal-row", "row", 60, 10),
        ],
    )


@pytest.fixture
def store(tmp_path):
    """A store holding a freshly planned three-week cycle."""
    document = _document()
    document = apply_plan_result(
        document, generate_or_update_cycle(planning_input(document), "2026-01-05")
    )
    s = CycleStore(tmp_path / "cycle.json")
    s.save(document)
    return s


# ===========================================================================
# Serializers
# ===========================================================================


class TestSerializers:
    def test_validate_date(self):
        assert validate_date("2026-01-05") == "2026-01-05"
        with pytest.raises(ValidationError):
            validate_date("05/01/2026")
        with pytest.raises(ValidationError):
            validate_date("2026-02-30")

    def test_equipment_ladder_expanded(self):
        equipment = dict_to_equipment(
            {"equipment_id": "bar", "min_weight": 45, "increment": 5, "max_weight": 60}
        )
        assert equipment.weight_options == [45, 50, 55, 60]
        assert equipment.title == "bar"

    def test_equipment_bad_ladder(self):
        with pytest.raises(ValidationError, match="weight ladder"):
            dict_to_equipment(
                {"equipment_id": "bar", "min_weight": 45, "increment": 0, "max_weight": 60}
            )

    def test_missing_required_field(self):
        with pytest.raises(ValidationError, match="rep_range"):
            dict_to_exercise({"exercise_id": "x", "equipment_id": "bar", "primary_muscle_groups": []})

    def test_model_error_surfaces_as_validation_error(self):
        with pytest.raises(ValidationError, match="Invalid exercise"):
            dict_to_exercise(
                {
                    "exercise_id": "x",
                    "equipment_id": "bar",
                    "rep_range": "Extreme",
                    "primary_muscle_groups": ["chest"],
                }
            )

    def test_cycle_bad_start_date(self):
        with pytest.raises(ValidationError):
            dict_to_cycle(
                {"cycle_id": "c", "calibration_ids": ["a"], "sessions_per_week": 1, "start_date": "soon"}
            )

    def test_feedback_omitted_until_reported(self):
        se = dict_to_session_exercise(
            {"session_exercise_id": "se", "session_id": "s", "exercise_id": "x", "set_ids": ["a"]}
        )
        assert se.soreness is None
        assert se.stimulus is None

    def test_actuals_omitted_until_logged(self, store):
        workout_set = store.load().plan.sets[0]
        d = set_to_dict(workout_set)
        assert "actual_reps" not in d
        assert d["planned_rir"] == 4

    def test_unsupported_version(self):
        with pytest.raises(ValidationError, match="version"):
            dict_to_document({"version": 99, "cycle": {}})

    def test_not_an_object(self):
        with pytest.raises(ValidationError):
            dict_to_document([])  # type: ignore[arg-type]


# ===========================================================================
# Store
# ===========================================================================


class TestCycleStore:
    def test_save_and_load(self, store):
        document = store.load()
        assert len(document.plan.weeks) == 3
        raw = json.loads(store.cycle_path.read_text(encoding="utf-8"))
        assert raw["version"] == 1
        assert raw["cycle"]["cycle_id"] == "c1"

    def test_load_is_lossless(self, tmp_path, store):
        document = store.load()
        other = CycleStore(tmp_path / "copy.json")
        other.save(document)
        assert other.load() == document

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            CycleStore(tmp_path / "none.json").load()

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "cycle.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValidationError):
            CycleStore(path).load()

    def test_log_set(self, store):
        set_id = store.load().plan.sets[0].set_id
        updated = store.log_set(set_id, 10, 60, 3)
        assert updated.is_completed
        reloaded = next(s for s in store.load().plan.sets if s.set_id == set_id)
        assert (reloaded.actual_reps, reloaded.actual_weight, reloaded.actual_rir) == (10, 60, 3)

    def test_log_set_without_rir_is_incomplete_when_rir_planned(self, store):
        set_id = store.load().plan.sets[0].set_id
        assert not store.log_set(set_id, 10, 60).is_completed

    def test_log_unknown_set(self, store):
        with pytest.raises(ValidationError, match="Set not found"):
            store.log_set("nope", 10, 60)

    def test_log_negative_reps(self, store):
        set_id = store.load().plan.sets[0].set_id
        with pytest.raises(ValidationError):
            store.log_set(set_id, -1, 60)

    def test_record_feedback(self, store):
        se_id = store.load().plan.session_exercises[0].session_exercise_id
        store.record_feedback(
            se_id,
            soreness=1,
            performance=2,
            stimulus={"mind_muscle_connection": 2, "pump": 3, "disruption": 1},
        )
        se = next(
            s for s in store.load().plan.session_exercises if s.session_exercise_id == se_id
        )
        assert (se.soreness, se.performance) == (1, 2)
        assert se.stimulus.pump == 3
        assert se.fatigue is None

    def test_record_feedback_out_of_range(self, store):
        se_id = store.load().plan.session_exercises[0].session_exercise_id
        with pytest.raises(ValidationError):
            store.record_feedback(se_id, soreness=4)

    def test_complete_and_reopen_session(self, store):
        session_id = store.load().plan.sessions[0].session_id
        assert store.complete_session(session_id).complete
        assert not store.complete_session(session_id, complete=False).complete

    def test_complete_unknown_session(self, store):
        with pytest.raises(ValidationError):
            store.complete_session("nope")


class TestApplyPlanResult:
    def test_replan_replaces_unstarted_weeks(self, store):
        document = store.load()
        result = generate_or_update_cycle(planning_input(document), "2026-02-02")
        updated = apply_plan_result(document, result)
        assert [w.index for w in updated.plan.weeks] == [0, 1, 2]
        assert updated.plan.weeks[0].start_date == "2026-02-02"
        assert len(updated.plan.sets) == len(result.create.sets)

    def test_original_document_untouched(self, store):
        document = store.load()
        before = len(document.plan.weeks)
        apply_plan_result(document, generate_or_update_cycle(planning_input(document), "2026-02-02"))
        assert len(document.plan.weeks) == before


class TestCatalog:
    def test_sample_catalog_loads(self):
        document = load_catalog(CATALOG)
        assert document.cycle.cycle_id == "spring-block"
        barbell = next(e for e in document.equipment if e.equipment_id == "barbell")
        assert barbell.weight_options[0] == 20
        assert barbell.weight_options[-1] == 200
        assert document.plan.is_empty()

    def test_sample_catalog_plans(self):
        document = load_catalog(CATALOG)
        result = generate_or_update_cycle(planning_input(document), "2026-01-05")
        assert len(result.create.weeks) == 6

    def test_bad_yaml(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text("cycle: [oops\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_catalog(path)

    def test_non_numeric_field(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text(BAD_REPS_CATALOG, encoding="utf-8")
        with pytest.raises(ValidationError, match="eight"):
            load_catalog(path)

    def test_non_numeric_field_in_stored_document(self):
        data = {"cycle": {"cycle_id": "c", "calibration_ids": [], "sessions_per_week": "two"}}
        with pytest.raises(ValidationError, match="Invalid cycle document"):
            dict_to_document(data)
