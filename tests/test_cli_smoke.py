"""
Smoke tests for the iron-stride CLI.

Every test points IRON_STRIDE_HOME at a temporary directory so the state
file lands there:
- App runs and shows the plan
- Onboarding writes a profile and plan
- Sets can be logged and days completed
- Export/import round-trips through a file
"""

import json

import pytest
import typer
from typer.testing import CliRunner

from iron_stride.cli.main import app
from iron_stride.cli.commands.sessions import parse_duration


runner = CliRunner()


@pytest.fixture
def app_home(tmp_path, monkeypatch):
    """Isolated application directory with sync unconfigured."""
    monkeypatch.setenv("IRON_STRIDE_HOME", str(tmp_path))
    for var in ("IRON_STRIDE_USER", "IRON_STRIDE_API_URL", "IRON_STRIDE_TOKEN"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path


def _state(app_home) -> dict:
    blob = json.loads((app_home / "iron-stride-storage.anonymous.json").read_text())
    return blob["state"]


def _onboard(*extra: str):
    return runner.invoke(app, ["onboard", "--name", "Sam", "--force", *extra])


class TestCLISmoke:
    """Basic smoke tests for CLI commands."""

    def test_app_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "iron-stride" in result.output or "planner" in result.output.lower()

    def test_no_command_shows_plan(self, app_home):
        result = runner.invoke(app, [])
        assert result.exit_code == 0
        assert "onboard" in result.output
        assert "Weekly Plan" in result.output

    def test_onboard_writes_state(self, app_home):
        result = _onboard("--goal", "Get stronger", "--equipment", "dumbbell,bench")
        assert result.exit_code == 0, result.output
        state = _state(app_home)
        assert state["profile"]["onboardingCompleted"] is True
        assert state["profile"]["goalType"] == "strength"
        assert state["profile"]["equipment"] == ["dumbbell", "bench", "bodyweight"]
        assert state["currentPlan"][0]["exercises"][0]["name"] == "Dumbbell Bench Press"

    def test_onboard_rejects_bad_units(self, app_home):
        result = _onboard("--units", "furlongs")
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_profile_and_update(self, app_home):
        _onboard()
        result = runner.invoke(app, ["update-profile", "--weight", "180", "--units", "metric"])
        assert result.exit_code == 0, result.output
        assert _state(app_home)["profile"]["weight"] == 180.0
        result = runner.invoke(app, ["profile"])
        assert result.exit_code == 0
        assert "Sam" in result.output

    def test_plan_day_detail(self, app_home):
        _onboard()
        result = runner.invoke(app, ["plan", "--day", "1"])
        assert result.exit_code == 0
        assert "Push-Ups" in result.output

    def test_unknown_day(self, app_home):
        result = runner.invoke(app, ["plan", "--day", "day-99"])
        assert result.exit_code == 1


class TestCLITraining:
    """Logging, completing and undoing through the CLI."""

    def test_quick_log_fills_next_set(self, app_home):
        _onboard()
        result = runner.invoke(app, ["quick-log", "day-1", "1", "--weight", "135", "--reps", "8"])
        assert result.exit_code == 0, result.output
        state = _state(app_home)
        first = state["currentPlan"][0]["exercises"][0]["sets"][0]
        assert (first["weight"], first["actualReps"], first["completed"]) == (135.0, 8, True)
        assert len(state["setLogs"]) == 1

    def test_log_set(self, app_home):
        _onboard()
        result = runner.invoke(app, ["log-set", "1", "d1-e2", "2", "--reps", "10", "--done"])
        assert result.exit_code == 0, result.output
        s = _state(app_home)["currentPlan"][0]["exercises"][1]["sets"][1]
        assert (s["actualReps"], s["completed"]) == (10, True)

    def test_complete_and_undo(self, app_home):
        _onboard()
        result = runner.invoke(app, ["complete", "day-4-run", "--distance", "2.1", "--time", "21:30", "--calves"])
        assert result.exit_code == 0, result.output
        entry = _state(app_home)["history"][0]
        assert entry["runActual"] == {"distance": 2.1, "timeSeconds": 1290.0}
        assert entry["calvesStretched"] is True

        result = runner.invoke(app, ["undo", "day-4-run"])
        assert result.exit_code == 0
        state = _state(app_home)
        assert state["history"] == []
        assert state["currentPlan"][3]["completed"] is False

    def test_history_lists_completed(self, app_home):
        _onboard()
        runner.invoke(app, ["complete", "1", "--notes", "felt strong"])
        result = runner.invoke(app, ["history", "--exercise", "Push-Ups"])
        assert result.exit_code == 0
        assert "History" in result.output
        assert "Push-Ups" in result.output

    def test_swap_and_back(self, app_home):
        _onboard()
        result = runner.invoke(app, ["swap", "1", "1", "Dumbbell Floor Press"])
        assert result.exit_code == 0, result.output
        ex = _state(app_home)["currentPlan"][0]["exercises"][0]
        assert ex["name"] == "Dumbbell Floor Press"
        assert ex["primary"]["name"] == "Push-Ups"

        runner.invoke(app, ["swap", "1", "1", "push-ups"])
        ex = _state(app_home)["currentPlan"][0]["exercises"][0]
        assert ex["name"] == "Push-Ups"
        assert "primary" not in ex

    def test_add_and_remove_exercise(self, app_home):
        _onboard()
        result = runner.invoke(app, ["add-exercise", "1", "Dips", "--sets", "2", "--reps", "10"])
        assert result.exit_code == 0, result.output
        added = _state(app_home)["currentPlan"][0]["exercises"][-1]
        assert added["id"] == "day-1-custom-dips"
        assert [s["targetReps"] for s in added["sets"]] == ["10", "10"]

        runner.invoke(app, ["remove-exercise", "1", "day-1-custom-dips"])
        assert len(_state(app_home)["currentPlan"][0]["exercises"]) == 5

    def test_add_exercise_to_run_day_fails(self, app_home):
        _onboard()
        result = runner.invoke(app, ["add-exercise", "day-4-run", "Dips"])
        assert result.exit_code == 1

    def test_run_draft(self, app_home):
        _onboard()
        runner.invoke(app, ["run", "4", "--distance", "1.5", "--time", "900"])
        assert _state(app_home)["currentPlan"][3]["runActual"] == {"distance": 1.5, "timeSeconds": 900.0}
        runner.invoke(app, ["run", "4", "--distance", "0", "--time", "0"])
        assert "runActual" not in _state(app_home)["currentPlan"][3]


class TestCLIData:
    def test_export_import_round_trip(self, app_home, tmp_path):
        _onboard()
        runner.invoke(app, ["complete", "1"])
        export_path = tmp_path / "backup.json"
        result = runner.invoke(app, ["export", "--output", str(export_path)])
        assert result.exit_code == 0, result.output
        assert json.loads(export_path.read_text())["schemaVersion"] == 2

        runner.invoke(app, ["reset-data", "--force"])
        assert _state(app_home)["history"] == []

        result = runner.invoke(app, ["import", str(export_path), "--force"])
        assert result.exit_code == 0, result.output
        state = _state(app_home)
        assert state["profile"]["name"] == "Sam"
        assert len(state["history"]) == 1

    def test_import_invalid_file(self, app_home, tmp_path):
        _onboard()
        bad = tmp_path / "bad.json"
        bad.write_text('{"profile": 3}')
        result = runner.invoke(app, ["import", str(bad), "--force"])
        assert result.exit_code == 1
        assert _state(app_home)["profile"]["name"] == "Sam"

    def test_sync_requires_configuration(self, app_home):
        result = runner.invoke(app, ["sync"])
        assert result.exit_code == 1
        assert "IRON_STRIDE_API_URL" in result.output


class TestParseDuration:
    @pytest.mark.parametrize(
        "text, seconds",
        [("1500", 1500.0), ("21:30", 1290.0), ("1:02:03", 3723.0)],
    )
    def test_formats(self, text, seconds):
        assert parse_duration(text) == seconds

    def test_invalid(self):
        with pytest.raises(typer.BadParameter):
            parse_duration("ten minutes")
