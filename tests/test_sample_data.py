"""Tests for the sample data generator."""

from datetime import date
from pathlib import Path

import pytest

from analysis.series_validator import SeriesValidator
from config.defaults import default_planner_config
from config.schema import DataPaths
from models.constraint import ConstraintScope
from scheduling.repositories import (
    JsonConstraintRepository,
    JsonSessionRepository,
    load_interventionists,
)
from data.sample_data import SampleDataGenerator

WEEK = date(2025, 3, 5)  # Wednesday


@pytest.fixture
def generator() -> SampleDataGenerator:
    return SampleDataGenerator(default_planner_config(), seed=42)


class TestSampleData:
    def test_week_starts_monday(self, generator: SampleDataGenerator):
        data = generator.generate(WEEK)
        assert data.week_of == date(2025, 3, 3)

    def test_contents(self, generator: SampleDataGenerator):
        data = generator.generate(WEEK)
        assert len(data.interventionists) == 4
        assert sum(1 for p in data.interventionists if not p.has_declared_availability) == 1
        schoolwide = [c for c in data.constraints if c.scope == ConstraintScope.SCHOOLWIDE]
        assert len(schoolwide) == 4
        assert len(data.constraints) == 6

    def test_series_spans_weekend(self, generator: SampleDataGenerator):
        data = generator.generate(WEEK)
        series = sorted((s for s in data.sessions if s.series_id), key=lambda s: s.series_order)
        assert [s.date for s in series] == [date(2025, 3, 6), date(2025, 3, 7), date(2025, 3, 10)]
        assert all(s.lesson_plan is not None for s in series)

    def test_generated_sessions_validate(self, generator: SampleDataGenerator):
        data = generator.generate(WEEK)
        report = SeriesValidator().validate(data.sessions)
        assert report.is_valid, report.violations

    def test_same_seed_same_shape(self):
        a = SampleDataGenerator(default_planner_config(), seed=7).generate(WEEK)
        b = SampleDataGenerator(default_planner_config(), seed=7).generate(WEEK)
        assert [(s.date, s.time) for s in a.sessions] == [(s.date, s.time) for s in b.sessions]
        assert [p.name for p in a.interventionists] == [p.name for p in b.interventionists]

    def test_summary(self, generator: SampleDataGenerator):
        summary = generator.generate(WEEK).summary()
        assert "Week of 2025-03-03" in summary
        assert "1 series" in summary

    def test_save_writes_data_files(self, tmp_path: Path):
        config = default_planner_config().model_copy(update={"data": DataPaths(
            constraints_file=str(tmp_path / "constraints.json"),
            sessions_file=str(tmp_path / "sessions.json"),
            interventionists_file=str(tmp_path / "interventionists.json"),
        )})
        gen = SampleDataGenerator(config, seed=1)
        data = gen.generate(WEEK)
        paths = gen.save(data)

        assert all(p.exists() for p in paths)
        assert len(JsonConstraintRepository(paths[0]).load()) == len(data.constraints)
        assert [s.id for s in JsonSessionRepository(paths[1]).list_sessions()] == [
            s.id for s in data.sessions
        ]
        assert len(load_interventionists(paths[2])) == 4
