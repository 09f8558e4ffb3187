"""Tests for series generation, lesson distribution and series emission."""

from datetime import date

import pytest

from models.lesson_plan import LessonPlan, LessonSection
from models.session import AnticipatedError, PracticeItem, SessionPayload
from scheduling.errors import MalformedTime, PartialSeriesFailure, ValidationError
from scheduling.lesson_split import (
    assign_default_days,
    build_lesson_plan,
    default_day_assignments,
    sections_for_day,
    split_lesson_plan,
)
from scheduling.repositories import InMemorySessionRepository
from scheduling.series import SeriesGenerator, SeriesRequest, emit_series, series_dates

FRIDAY = date(2025, 3, 7)
MONDAY = date(2025, 3, 10)


def _request(**overrides) -> SeriesRequest:
    fields = dict(
        start_date=MONDAY,
        time="09:00",
        group_id="g1",
        curriculum_position="1.1",
        planned_practice_items=[PracticeItem(item="ship", type="new")],
        anticipated_errors=[AnticipatedError(id="e1", error_pattern="sh → s")],
    )
    fields.update(overrides)
    return SeriesRequest(**fields)


@pytest.fixture
def generator() -> SeriesGenerator:
    return SeriesGenerator()


# ─── DATES ────────────────────────────────────────────────────────────────────

class TestSeriesDates:
    def test_friday_start_skips_weekend(self):
        assert series_dates(FRIDAY, 3, True) == [
            date(2025, 3, 7), date(2025, 3, 10), date(2025, 3, 11),
        ]

    def test_keep_weekends(self):
        assert series_dates(FRIDAY, 3, False) == [
            date(2025, 3, 7), date(2025, 3, 8), date(2025, 3, 9),
        ]

    def test_saturday_start_moves_to_monday(self):
        assert series_dates("2025-03-08", 1, True) == [MONDAY]

    def test_strictly_increasing(self):
        dates = series_dates(FRIDAY, 10, True)
        assert all(a < b for a, b in zip(dates, dates[1:]))
        assert all(d.weekday() < 5 for d in dates)


# ─── GENERATION ───────────────────────────────────────────────────────────────

class TestGenerate:
    def test_single_day_has_no_series_fields(self, generator: SeriesGenerator):
        payloads = generator.generate(_request(notes="Focus on digraphs"))
        assert len(payloads) == 1
        p = payloads[0]
        assert p.series_id is None and p.series_order is None and p.series_total is None
        assert p.notes == "Focus on digraphs"
        assert p.date == MONDAY

    def test_generic_series_linkage(self, generator: SeriesGenerator):
        payloads = generator.generate(_request(start_date=FRIDAY, number_of_days=3))
        assert [p.date for p in payloads] == [date(2025, 3, 7), date(2025, 3, 10), date(2025, 3, 11)]
        assert len({p.series_id for p in payloads}) == 1
        assert payloads[0].series_id is not None
        assert [p.series_order for p in payloads] == [1, 2, 3]
        assert {p.series_total for p in payloads} == {3}
        assert all(p.time == "09:00" for p in payloads)

    def test_each_series_gets_a_fresh_id(self, generator: SeriesGenerator):
        a = generator.generate(_request(number_of_days=2))
        b = generator.generate(_request(number_of_days=2))
        assert a[0].series_id != b[0].series_id

    def test_day_notes(self, generator: SeriesGenerator):
        with_notes = generator.generate(_request(number_of_days=2, notes="Unit 1"))
        assert [p.notes for p in with_notes] == ["Unit 1 (Day 1/2)", "Unit 1 (Day 2/2)"]
        without = generator.generate(_request(number_of_days=2))
        assert [p.notes for p in without] == ["Day 1/2", "Day 2/2"]

    def test_repeat_activities(self, generator: SeriesGenerator):
        payloads = generator.generate(_request(number_of_days=3))
        assert all(len(p.planned_practice_items) == 1 for p in payloads)
        assert all(len(p.anticipated_errors) == 1 for p in payloads)

    def test_no_repeat_keeps_day_one_only(self, generator: SeriesGenerator):
        payloads = generator.generate(_request(number_of_days=3, repeat_activities=False))
        assert len(payloads[0].planned_practice_items) == 1
        assert len(payloads[0].anticipated_errors) == 1
        for p in payloads[1:]:
            assert p.planned_practice_items == []
            assert p.anticipated_errors == []

    def test_single_day_lesson_plan_on_day_one_only(self, generator: SeriesGenerator):
        plan = build_lesson_plan("1.1", days=1)
        payloads = generator.generate(_request(number_of_days=3, lesson_plan=plan))
        assert payloads[0].lesson_plan == plan
        assert payloads[1].lesson_plan is None
        assert payloads[2].lesson_plan is None

    def test_malformed_time_before_anything(self, generator: SeriesGenerator):
        with pytest.raises(MalformedTime):
            generator.generate(_request(time="9am", number_of_days=0))

    def test_zero_days_rejected(self, generator: SeriesGenerator):
        with pytest.raises(ValidationError):
            generator.generate(_request(number_of_days=0))


# ─── MULTI-DAY LESSON PLANS ───────────────────────────────────────────────────

class TestLessonPlanSeries:
    def test_three_day_lesson_partition(self, generator: SeriesGenerator):
        """Every section lands on exactly one day; day 3 gets the connected text."""
        plan = build_lesson_plan("1.1: Closed syllables", days=3)
        payloads = generator.generate(_request(start_date=FRIDAY, lesson_plan=plan))

        assert len(payloads) == 3
        assert [p.date for p in payloads] == [date(2025, 3, 7), date(2025, 3, 10), date(2025, 3, 11)]
        components = [[s.component for s in p.lesson_plan.sections] for p in payloads]
        assert components[0] == ["sounds-quick-drill", "teach-review-reading", "word-cards",
                                 "wordlist-reading", "sentence-reading"]
        assert components[1] == ["quick-drill-reverse", "teach-review-spelling", "dictation"]
        assert components[2] == ["passage-reading", "listening-comprehension"]
        flat = [c for day in components for c in day]
        assert sorted(flat) == sorted(s.component for s in plan.sections)

    def test_lesson_days_override_number_of_days(self, generator: SeriesGenerator):
        plan = build_lesson_plan("1.1", days=2)
        payloads = generator.generate(_request(number_of_days=5, lesson_plan=plan))
        assert len(payloads) == 2
        assert {p.series_total for p in payloads} == {2}

    def test_unassigned_sections_go_to_day_one(self, generator: SeriesGenerator):
        plan = LessonPlan(title="custom", days=2, sections=[
            LessonSection(component="word-cards", name="Word Cards"),
            LessonSection(component="dictation", name="Dictation", day=2),
        ])
        payloads = generator.generate(_request(lesson_plan=plan))
        assert [s.component for s in payloads[0].lesson_plan.sections] == ["word-cards"]
        assert [s.component for s in payloads[1].lesson_plan.sections] == ["dictation"]

    def test_lesson_series_keeps_activities_every_day(self, generator: SeriesGenerator):
        """repeat_activities only applies to series without a lesson plan."""
        plan = build_lesson_plan("1.1", days=3)
        payloads = generator.generate(_request(lesson_plan=plan, repeat_activities=False))
        assert [len(p.planned_practice_items) for p in payloads] == [1, 1, 1]
        assert [len(p.anticipated_errors) for p in payloads] == [1, 1, 1]

    def test_assignment_out_of_range(self, generator: SeriesGenerator):
        plan = LessonPlan(title="bad", days=2, sections=[
            LessonSection(component="dictation", day=3),
        ])
        with pytest.raises(ValidationError):
            generator.generate(_request(lesson_plan=plan))


class TestLessonSplit:
    def test_default_tables(self):
        assert default_day_assignments(2)["passage-reading"] == 2
        assert default_day_assignments(2)["dictation"] == 1
        assert default_day_assignments(3)["dictation"] == 2
        assert set(default_day_assignments(4).values()) == {1}

    def test_tables_are_copies(self):
        default_day_assignments(2)["dictation"] = 2
        assert default_day_assignments(2)["dictation"] == 1

    def test_assign_default_days_keeps_explicit(self):
        plan = LessonPlan(title="x", days=2, sections=[
            LessonSection(component="dictation", day=2),
            LessonSection(component="passage-reading"),
        ])
        assigned = assign_default_days(plan)
        assert [s.day for s in assigned.sections] == [2, 2]
        assert [s.day for s in assign_default_days(plan, overwrite=True).sections] == [1, 2]

    def test_sections_for_day(self):
        plan = build_lesson_plan("x", days=3)
        assert [s.component for s in sections_for_day(plan, 3)] == [
            "passage-reading", "listening-comprehension",
        ]
        with pytest.raises(ValidationError):
            sections_for_day(plan, 4)

    def test_split_plans_are_single_day(self):
        parts = split_lesson_plan(build_lesson_plan("x", days=2))
        assert [p.days for p in parts] == [1, 1]
        assert sum(p.total_duration for p in parts) == 60

    def test_unknown_component(self):
        with pytest.raises(ValidationError):
            build_lesson_plan("x", components=["juggling"])


# ─── EMISSION ─────────────────────────────────────────────────────────────────

class _FlakyRepository(InMemorySessionRepository):
    """Fails on the n-th create call."""

    def __init__(self, fail_on: int) -> None:
        super().__init__()
        self.fail_on = fail_on
        self.calls = 0

    def create(self, payload: SessionPayload):
        self.calls += 1
        if self.calls == self.fail_on:
            raise ConnectionError("session store unavailable")
        return super().create(payload)


class TestEmitSeries:
    def test_all_saved_in_order(self, generator: SeriesGenerator):
        repo = InMemorySessionRepository()
        payloads = generator.generate(_request(number_of_days=3))
        created = emit_series(list(reversed(payloads)), repo)
        assert [s.series_order for s in created] == [1, 2, 3]
        assert len(repo) == 3
        assert all(s.id for s in created)

    def test_partial_failure_reports_progress(self, generator: SeriesGenerator):
        repo = _FlakyRepository(fail_on=3)
        payloads = generator.generate(_request(number_of_days=5))
        with pytest.raises(PartialSeriesFailure) as exc:
            emit_series(payloads, repo)

        err = exc.value
        assert err.series_id == payloads[0].series_id
        assert err.succeeded_orders == [1, 2]
        assert err.failed_order == 3
        assert err.pending_orders == [4, 5]
        assert isinstance(err.__cause__, ConnectionError)
        # No rollback and nothing issued after the failure
        assert len(repo) == 2
        assert repo.calls == 3
