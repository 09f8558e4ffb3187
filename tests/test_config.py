"""Tests for the configuration system and defaults."""

from pathlib import Path

import pytest

from config.defaults import (
    CONSTRAINT_PRESETS,
    DEFAULT_2_DAY,
    DEFAULT_3_DAY,
    LESSON_COMPONENTS,
    default_grid,
    default_planner_config,
)
from config.manager import ConfigManager
from config.schema import GridConfig, LogLevel, PlannerConfig, SeriesConfig
from models.constraint import ConstraintType
from scheduling.time_utils import minutes_of


# ─── DEFAULT CONFIGURATION ────────────────────────────────────────────────────

class TestDefaultConfig:
    def test_default_grid(self):
        grid = default_grid()
        assert grid.start_hour == 7
        assert grid.end_hour == 17
        assert grid.step_minutes == 30
        assert grid.default_duration_minutes == 30

    def test_default_planner_config(self):
        config = default_planner_config()
        assert config.school_name == "Sample Elementary"
        assert config.series.skip_weekends is True
        assert config.series.repeat_activities is True
        assert config.suggestions.max_results == 20
        assert config.suggestions.conflict_penalty == 10
        assert config.log_level == LogLevel.INFO

    def test_presets_are_valid_intervals(self):
        for name, preset in CONSTRAINT_PRESETS.items():
            assert minutes_of(preset["start_time"]) < minutes_of(preset["end_time"]), name
            assert preset["label"]

    def test_lunch_presets_do_not_overlap(self):
        lunches = [p for p in CONSTRAINT_PRESETS.values() if p["type"] == ConstraintType.LUNCH]
        assert [(p["start_time"], p["end_time"]) for p in lunches] == [
            ("11:00", "11:30"), ("11:30", "12:00"), ("12:00", "12:30"),
        ]

    def test_day_tables_cover_all_components(self):
        assert set(DEFAULT_2_DAY) == set(LESSON_COMPONENTS)
        assert set(DEFAULT_3_DAY) == set(LESSON_COMPONENTS)
        assert set(DEFAULT_2_DAY.values()) == {1, 2}
        assert set(DEFAULT_3_DAY.values()) == {1, 2, 3}


# ─── SCHEMA VALIDATION ────────────────────────────────────────────────────────

class TestSchemaValidation:
    def test_grid_start_after_end(self):
        with pytest.raises(ValueError):
            GridConfig(start_hour=17, end_hour=7)

    def test_step_too_small(self):
        with pytest.raises(ValueError):
            GridConfig(step_minutes=1)

    def test_series_max_days_bounds(self):
        with pytest.raises(ValueError):
            SeriesConfig(max_days=0)

    def test_unknown_log_level(self):
        with pytest.raises(ValueError):
            PlannerConfig(log_level="LOUD")


# ─── CONFIG MANAGER ───────────────────────────────────────────────────────────

class TestConfigManager:
    def test_save_and_load_roundtrip(self, tmp_path: Path):
        """Save, load and validate: complete YAML round trip."""
        config = default_planner_config().model_copy(update={"school_name": "Lincoln Elementary"})
        mgr = ConfigManager(tmp_path / "planner_config.yaml")

        mgr.save(config, quiet=True)
        assert mgr.path.exists()

        loaded = mgr.load()
        assert loaded == config

    def test_yaml_has_header_and_section_comments(self, tmp_path: Path):
        mgr = ConfigManager(tmp_path / "planner_config.yaml")
        mgr.save(default_planner_config(), quiet=True)
        text = mgr.path.read_text(encoding="utf-8")
        assert text.startswith("# ====")
        assert "─── Planning grid ───" in text
        assert "─── Multi-day series ───" in text

    def test_first_run_check(self, tmp_path: Path):
        mgr = ConfigManager(tmp_path / "planner_config.yaml")
        assert mgr.first_run_check() is True
        mgr.save(default_planner_config(), quiet=True)
        assert mgr.first_run_check() is False

    def test_load_nonexistent_raises(self, tmp_path: Path):
        mgr = ConfigManager()
        with pytest.raises(FileNotFoundError, match="setup"):
            mgr.load(tmp_path / "not_there.yaml")

    def test_load_invalid_raises_value_error(self, tmp_path: Path):
        path = tmp_path / "broken.yaml"
        path.write_text("grid:\n  start_hour: 18\n  end_hour: 7\n", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid configuration"):
            ConfigManager(path).load()

    def test_partial_file_uses_defaults(self, tmp_path: Path):
        path = tmp_path / "partial.yaml"
        path.write_text("school_name: Oak Ridge\nseries:\n  skip_weekends: false\n",
                        encoding="utf-8")
        config = ConfigManager(path).load()
        assert config.school_name == "Oak Ridge"
        assert config.series.skip_weekends is False
        assert config.grid == default_grid()
