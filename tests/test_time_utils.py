"""Tests for time arithmetic, weekday mapping and slot generation."""

from datetime import date

import pytest

from scheduling.errors import MalformedTime, ValidationError
from scheduling.time_utils import (
    ALL_GRADES,
    WEEKDAYS,
    WeekDay,
    add_minutes,
    contains,
    format_grades,
    format_time_display,
    generate_slots,
    generate_time_blocks,
    minutes_of,
    minutes_to_time,
    overlaps,
    week_dates,
    weekday_of,
)


# ─── MINUTES ──────────────────────────────────────────────────────────────────

class TestMinutes:
    def test_minutes_of_basic(self):
        assert minutes_of("00:00") == 0
        assert minutes_of("09:30") == 570
        assert minutes_of("9:30") == 570
        assert minutes_of("23:59") == 1439

    @pytest.mark.parametrize("bad", ["24:00", "12:60", "noon", "", "9.30", "12:3", "-1:00",
                                     "١٠:٣٠", "０９:３０"])
    def test_minutes_of_malformed(self, bad):
        """Everything outside H:MM / HH:MM within a day is rejected."""
        with pytest.raises(MalformedTime):
            minutes_of(bad)

    def test_malformed_time_is_value_error(self):
        with pytest.raises(ValueError):
            minutes_of("25:00")

    def test_minutes_to_time_roundtrip(self):
        for t in ["00:00", "07:05", "12:30", "23:59"]:
            assert minutes_to_time(minutes_of(t)) == t

    def test_add_minutes(self):
        assert add_minutes("11:45", 30) == "12:15"


# ─── OVERLAP ──────────────────────────────────────────────────────────────────

class TestOverlap:
    def test_touching_intervals_do_not_overlap(self):
        """A session ending exactly when lunch begins is not blocked."""
        assert overlaps("11:00", "11:30", "11:30", "12:00") is False
        assert overlaps("12:00", "12:30", "11:30", "12:00") is False

    def test_partial_overlap(self):
        assert overlaps("11:15", "11:45", "11:30", "12:00") is True

    def test_overlap_is_symmetric(self):
        pairs = [
            (("09:00", "10:00"), ("09:30", "11:00")),
            (("09:00", "10:00"), ("10:00", "11:00")),
            (("08:00", "12:00"), ("09:00", "09:30")),
        ]
        for a, b in pairs:
            assert overlaps(*a, *b) == overlaps(*b, *a)

    def test_accepts_minutes(self):
        assert overlaps(600, 630, 615, 700) is True

    def test_contains(self):
        assert contains("08:00", "12:00", "08:00", "12:00") is True
        assert contains("08:00", "12:00", "11:45", "12:15") is False


# ─── WEEKDAYS ─────────────────────────────────────────────────────────────────

class TestWeekdays:
    def test_weekday_of(self):
        assert weekday_of(date(2025, 3, 3)) == WeekDay.MONDAY
        assert weekday_of("2025-03-07") == WeekDay.FRIDAY

    def test_weekend_gives_none(self):
        assert weekday_of("2025-03-08") is None
        assert weekday_of("2025-03-09") is None

    def test_malformed_date(self):
        with pytest.raises(MalformedTime):
            weekday_of("2025-13-01")

    def test_week_dates_monday_based(self):
        week = week_dates("2025-03-05")
        assert week[WeekDay.MONDAY] == date(2025, 3, 3)
        assert week[WeekDay.FRIDAY] == date(2025, 3, 7)

    def test_week_dates_sunday_belongs_to_previous_week(self):
        assert week_dates("2025-03-09")[WeekDay.MONDAY] == date(2025, 3, 3)

    def test_fixed_order(self):
        assert [d.value for d in WEEKDAYS] == [
            "monday", "tuesday", "wednesday", "thursday", "friday",
        ]


# ─── SLOTS ────────────────────────────────────────────────────────────────────

class TestSlots:
    def test_default_grid(self):
        """07:00 to 17:00 in 30-minute steps, end inclusive."""
        slots = generate_slots(7, 17, 30)
        assert slots[0] == "07:00"
        assert slots[-1] == "17:00"
        assert len(slots) == 21
        assert slots == sorted(slots, key=minutes_of)

    def test_fresh_list_each_call(self):
        a = generate_slots()
        a.append("99:99")
        assert "99:99" not in generate_slots()

    def test_invalid_hours(self):
        with pytest.raises(ValidationError):
            generate_slots(17, 7, 30)
        with pytest.raises(ValidationError):
            generate_slots(7, 17, 0)

    def test_time_blocks_fit_before_end(self):
        blocks = generate_time_blocks(30, 15, 16, 15)
        assert blocks == [("15:00", "15:30"), ("15:15", "15:45"), ("15:30", "16:00")]


# ─── DISPLAY ──────────────────────────────────────────────────────────────────

class TestDisplay:
    def test_format_time_display(self):
        assert format_time_display("09:00") == "9:00 AM"
        assert format_time_display("12:00") == "12:00 PM"
        assert format_time_display("13:05") == "1:05 PM"
        assert format_time_display("00:15") == "12:15 AM"

    def test_format_grades(self):
        assert format_grades(ALL_GRADES) == "All grades"
        assert format_grades([2, 0, 1]) == "K, 1, 2"
        assert format_grades([]) == "No grades"
