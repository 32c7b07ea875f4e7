"""
Minimal smoke tests for meso-scheduler CLI.

Tests basic functionality:
- App runs without errors
- Cycle file is created from a catalog
- Plan is generated and shown
- Sets, feedback and session completion are recorded
- Weight ladders are printed
"""

import json
import tempfile
from pathlib import Path

import pytest
from typer.testing import CliRunner

from meso_scheduler.cli.main import app
from meso_scheduler.io.cycle_store import CycleStore

CATALOG = Path(__file__).parent.parent / "examples" / "catalog.yaml"

runner = CliRunner()


@pytest.fixture
def temp_cycle_dir(monkeypatch):
    """Create a temporary directory for test files, also used as HOME."""
    with tempfile.TemporaryDirectory() as tmpdir:
        monkeypatch.setenv("HOME", tmpdir)
        yield Path(tmpdir)


def _init(cycle_path: Path):
    return runner.invoke(app, ["init", "--catalog", str(CATALOG), "--cycle-path", str(cycle_path)])


def _init_and_plan(cycle_path: Path):
    _init(cycle_path)
    return runner.invoke(app, [
        "plan",
        "--cycle-path", str(cycle_path),
        "--start-date", "2026-01-05",
        "--quiet",
    ])


class TestCLISmoke:
    """Basic smoke tests for CLI commands."""

    def test_app_help(self):
        """Test that app runs and shows help."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "Mesocycle planner" in result.output

    def test_no_command_prints_help(self):
        """Test bare invocation prints the header and usage."""
        result = runner.invoke(app, [])
        assert result.exit_code == 0
        assert "meso-scheduler" in result.output

    def test_init_creates_cycle_file(self, temp_cycle_dir):
        """Test init writes the cycle document."""
        cycle_path = temp_cycle_dir / "cycle.json"

        result = _init(cycle_path)

        assert result.exit_code == 0
        assert "spring-block" in result.output
        assert cycle_path.exists()

    def test_init_refuses_to_overwrite(self, temp_cycle_dir):
        """Test init without --force keeps an existing file."""
        cycle_path = temp_cycle_dir / "cycle.json"
        _init(cycle_path)

        result = _init(cycle_path)
        assert result.exit_code == 1

        forced = runner.invoke(app, [
            "init", "--catalog", str(CATALOG), "--cycle-path", str(cycle_path), "--force",
        ])
        assert forced.exit_code == 0

    def test_init_missing_catalog(self, temp_cycle_dir):
        """Test init reports a missing catalog file."""
        result = runner.invoke(app, [
            "init",
            "--catalog", str(temp_cycle_dir / "missing.yaml"),
            "--cycle-path", str(temp_cycle_dir / "cycle.json"),
        ])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_init_non_numeric_catalog_value(self, temp_cycle_dir):
        """Test init reports a non-numeric catalog field without a traceback."""
        catalog = temp_cycle_dir / "catalog.yaml"
        catalog.write_text(
            CATALOG.read_text(encoding="utf-8").replace("reps: 8}", "reps: eight}", 1),
            encoding="utf-8",
        )
        result = runner.invoke(app, [
            "init",
            "--catalog", str(catalog),
            "--cycle-path", str(temp_cycle_dir / "cycle.json"),
        ])
        assert result.exit_code == 1
        assert "Error" in result.output
        assert not (temp_cycle_dir / "cycle.json").exists()

    def test_plan_generates_weeks(self, temp_cycle_dir):
        """Test plan creates six weeks with the deload last."""
        cycle_path = temp_cycle_dir / "cycle.json"

        result = _init_and_plan(cycle_path)

        assert result.exit_code == 0
        assert "planned 6 week(s)" in result.output
        document = CycleStore(cycle_path).load()
        assert len(document.plan.weeks) == 6

    def test_plan_prints_table(self, temp_cycle_dir):
        """Test plan prints the plan table unless --quiet."""
        cycle_path = temp_cycle_dir / "cycle.json"
        _init(cycle_path)

        result = runner.invoke(app, [
            "plan", "--cycle-path", str(cycle_path), "--start-date", "2026-01-05",
        ])

        assert result.exit_code == 0
        assert "Mesocycle" in result.output

    def test_plan_without_init_fails(self, temp_cycle_dir):
        """Test plan reports a missing cycle file."""
        result = runner.invoke(app, ["plan", "--cycle-path", str(temp_cycle_dir / "none.json")])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_plan_rejects_bad_date(self, temp_cycle_dir):
        """Test plan validates --start-date."""
        cycle_path = temp_cycle_dir / "cycle.json"
        _init(cycle_path)

        result = runner.invoke(app, [
            "plan", "--cycle-path", str(cycle_path), "--start-date", "next monday",
        ])
        assert result.exit_code == 1

    def test_show_json(self, temp_cycle_dir):
        """Test show --json emits the plan records."""
        cycle_path = temp_cycle_dir / "cycle.json"
        _init_and_plan(cycle_path)

        result = runner.invoke(app, ["show", "--cycle-path", str(cycle_path), "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert len(data["weeks"]) == 6
        assert data["sets"]

    def test_show_single_week(self, temp_cycle_dir):
        """Test show --week renders one week."""
        cycle_path = temp_cycle_dir / "cycle.json"
        _init_and_plan(cycle_path)

        result = runner.invoke(app, ["show", "--cycle-path", str(cycle_path), "--week", "1"])

        assert result.exit_code == 0
        assert "Mesocycle" in result.output

    def test_log_feedback_complete_and_replan(self, temp_cycle_dir):
        """Test the weekly loop: log sets, give feedback, complete, re-plan."""
        cycle_path = temp_cycle_dir / "cycle.json"
        _init_and_plan(cycle_path)
        store = CycleStore(cycle_path)
        document = store.load()
        week0 = document.plan.weeks[0]

        first_set = document.plan.sets[0]
        result = runner.invoke(app, [
            "log-set", first_set.set_id,
            "--cycle-path", str(cycle_path),
            "--reps", "10", "--weight", "60", "--rir", "3",
        ])
        assert result.exit_code == 0
        assert "complete" in result.output

        se_id = document.plan.session_exercises[0].session_exercise_id
        result = runner.invoke(app, [
            "feedback", se_id,
            "--cycle-path", str(cycle_path),
            "--soreness", "0", "--performance", "0",
            "--stimulus", "2,3,2", "--fatigue", "1,1,1",
        ])
        assert result.exit_code == 0

        for session_id in week0.session_ids:
            result = runner.invoke(app, ["complete", session_id, "--cycle-path", str(cycle_path)])
            assert result.exit_code == 0
            assert "completed" in result.output

        result = runner.invoke(app, ["plan", "--cycle-path", str(cycle_path), "--quiet"])
        assert result.exit_code == 0
        assert "Kept 1 completed week(s)" in result.output

        replanned = store.load()
        assert [w.index for w in replanned.plan.weeks] == [0, 1, 2, 3, 4, 5]
        assert replanned.plan.weeks[1].start_date == "2026-01-12"

    def test_feedback_rejects_bad_scores(self, temp_cycle_dir):
        """Test feedback validates the score string."""
        cycle_path = temp_cycle_dir / "cycle.json"
        _init_and_plan(cycle_path)
        se_id = CycleStore(cycle_path).load().plan.session_exercises[0].session_exercise_id

        result = runner.invoke(app, [
            "feedback", se_id, "--cycle-path", str(cycle_path), "--stimulus", "2,3",
        ])
        assert result.exit_code == 1

    def test_log_unknown_set(self, temp_cycle_dir):
        """Test log-set reports an unknown id."""
        cycle_path = temp_cycle_dir / "cycle.json"
        _init_and_plan(cycle_path)

        result = runner.invoke(app, [
            "log-set", "nope", "--cycle-path", str(cycle_path), "--reps", "5", "--weight", "50",
        ])
        assert result.exit_code == 1

    def test_weights_ladder(self):
        """Test weights prints a ladder and rounds a target."""
        result = runner.invoke(app, [
            "weights", "--min", "45", "--increment", "5", "--max", "70",
            "--round", "62", "--mode", "up",
        ])
        assert result.exit_code == 0
        assert "Weight options" in result.output
        assert "65" in result.output

    def test_weights_bad_mode(self):
        """Test weights rejects an unknown rounding mode."""
        result = runner.invoke(app, [
            "weights", "--min", "45", "--increment", "5", "--max", "70", "--mode", "sideways",
        ])
        assert result.exit_code == 1
