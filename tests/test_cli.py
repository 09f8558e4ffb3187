"""End-to-end tests of the click commands against a temporary workspace."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from main import cli


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch) -> Path:
    """Empty working directory; data files land under tmp_path/data."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _invoke(runner: CliRunner, workspace: Path, *args: str):
    config = str(workspace / "planner_config.yaml")
    return runner.invoke(cli, ["--config", config, *args], obj={})


@pytest.fixture
def configured(runner: CliRunner, workspace: Path) -> Path:
    result = _invoke(runner, workspace, "setup", "--defaults")
    assert result.exit_code == 0, result.output
    return workspace


class TestCli:
    def test_commands_require_setup(self, runner, workspace):
        result = _invoke(runner, workspace, "grid")
        assert result.exit_code == 1
        assert "No configuration found" in result.output

    def test_setup_writes_config(self, configured):
        assert (configured / "planner_config.yaml").exists()

    def test_constraint_blocks_check(self, runner, configured):
        result = _invoke(runner, configured, "constraints", "add", "--preset", "lunch_mid",
                         "-g", "all", "--scope", "schoolwide", "--role", "admin",
                         "--user", "admin1")
        assert result.exit_code == 0, result.output
        assert (configured / "data" / "constraints.json").exists()

        blocked = _invoke(runner, configured, "check", "2025-03-03", "11:30")
        assert blocked.exit_code == 2
        assert "Lunch (Mid)" in blocked.output

        free = _invoke(runner, configured, "check", "2025-03-03", "09:00")
        assert free.exit_code == 0

    def test_schoolwide_denied_for_interventionist(self, runner, configured):
        result = _invoke(runner, configured, "constraints", "add", "--preset", "lunch_early",
                         "-g", "K", "--scope", "schoolwide", "--user", "int-1")
        assert result.exit_code == 1

    def test_plan_series_then_occupied(self, runner, configured):
        result = _invoke(runner, configured, "plan", "2025-03-07", "09:00", "--days", "2",
                         "--group", "g1")
        assert result.exit_code == 0, result.output

        stored = json.loads((configured / "data" / "sessions.json").read_text(encoding="utf-8"))
        assert [s["date"] for s in stored] == ["2025-03-07", "2025-03-10"]
        assert stored[0]["series_id"] == stored[1]["series_id"]

        again = _invoke(runner, configured, "check", "2025-03-10", "09:00")
        assert again.exit_code == 2

        report = _invoke(runner, configured, "validate")
        assert report.exit_code == 0

    def test_dry_run_saves_nothing(self, runner, configured):
        result = _invoke(runner, configured, "plan", "2025-03-03", "09:00", "--days", "3",
                         "--lesson", "1.1", "--lesson-days", "3", "--dry-run")
        assert result.exit_code == 0, result.output
        assert not (configured / "data" / "sessions.json").exists()

    def test_malformed_time(self, runner, configured):
        result = _invoke(runner, configured, "check", "2025-03-03", "9am")
        assert result.exit_code == 1

    def test_generate_and_save(self, runner, configured):
        result = _invoke(runner, configured, "generate", "--seed", "3",
                         "--week-of", "2025-03-05", "--save")
        assert result.exit_code == 0, result.output
        assert (configured / "data" / "interventionists.json").exists()

        grid = _invoke(runner, configured, "grid", "-i", "int-1")
        assert grid.exit_code == 0, grid.output
