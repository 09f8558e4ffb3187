"""Time utilities: weekdays, minute arithmetic, slot generation, display formatting.

All interval comparisons run on integer minutes since midnight. Intervals are
half-open ``[start, end)``: a slot ending exactly when a constraint begins does
NOT overlap it.
"""

import re
from datetime import date, timedelta
from enum import Enum
from typing import Union

from scheduling.errors import MalformedTime, ValidationError


class WeekDay(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"


# Fixed, total ordering of the school week
WEEKDAYS: list[WeekDay] = [
    WeekDay.MONDAY,
    WeekDay.TUESDAY,
    WeekDay.WEDNESDAY,
    WeekDay.THURSDAY,
    WeekDay.FRIDAY,
]

_DAY_NAMES = {
    WeekDay.MONDAY: "Monday",
    WeekDay.TUESDAY: "Tuesday",
    WeekDay.WEDNESDAY: "Wednesday",
    WeekDay.THURSDAY: "Thursday",
    WeekDay.FRIDAY: "Friday",
}

# Grades K-8, K encoded as 0
ALL_GRADES: list[int] = list(range(0, 9))

_TIME_RE = re.compile(r"^([0-9]{1,2}):([0-9]{2})$")

TimeLike = Union[str, int]


# ─── Minute arithmetic ─────────────────────────────────────────────────────────

def minutes_of(time: str) -> int:
    """Converts ``HH:MM`` (24h) to minutes since midnight.

    Raises MalformedTime for anything else; never returns a partial value.
    """
    if not isinstance(time, str):
        raise MalformedTime(time)
    match = _TIME_RE.match(time.strip())
    if not match:
        raise MalformedTime(time)
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise MalformedTime(time)
    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    """Minutes since midnight → ``HH:MM``."""
    if minutes < 0 or minutes >= 24 * 60:
        raise MalformedTime(minutes, "0..1439 minutes")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def add_minutes(time: str, minutes: int) -> str:
    return minutes_to_time(minutes_of(time) + minutes)


def _as_minutes(value: TimeLike) -> int:
    if isinstance(value, bool):
        raise MalformedTime(value)
    if isinstance(value, int):
        return value
    return minutes_of(value)


def overlaps(a_start: TimeLike, a_end: TimeLike, b_start: TimeLike, b_end: TimeLike) -> bool:
    """Half-open overlap test ``a_start < b_end and a_end > b_start``.

    Accepts minutes or ``HH:MM`` strings. Symmetric; touching intervals are
    not overlapping.
    """
    a0, a1 = _as_minutes(a_start), _as_minutes(a_end)
    b0, b1 = _as_minutes(b_start), _as_minutes(b_end)
    return a0 < b1 and a1 > b0


def contains(outer_start: TimeLike, outer_end: TimeLike,
             inner_start: TimeLike, inner_end: TimeLike) -> bool:
    """True if ``[inner_start, inner_end)`` lies completely inside the outer interval."""
    return (_as_minutes(inner_start) >= _as_minutes(outer_start)
            and _as_minutes(inner_end) <= _as_minutes(outer_end))


# ─── Weekdays ─────────────────────────────────────────────────────────────────

def parse_date(value: Union[date, str]) -> date:
    """Accepts a ``date`` or an ISO string ``YYYY-MM-DD``."""
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise MalformedTime(value, "YYYY-MM-DD") from None


def weekday_of(value: Union[date, str]) -> WeekDay | None:
    """Maps a calendar date to its WeekDay; Saturday and Sunday give None."""
    index = parse_date(value).weekday()   # 0=Mon … 6=Sun
    if index > 4:
        return None
    return WEEKDAYS[index]


def week_dates(reference: Union[date, str]) -> dict[WeekDay, date]:
    """Monday–Friday dates of the week containing ``reference``.

    A Sunday belongs to the week that started six days earlier.
    """
    ref = parse_date(reference)
    monday = ref - timedelta(days=ref.weekday())
    return {day: monday + timedelta(days=i) for i, day in enumerate(WEEKDAYS)}


# ─── Slot generation ─────────────────────────────────────────────────────────

def _check_hours(start_hour: int, end_hour: int, step_minutes: int) -> None:
    problems = []
    if step_minutes <= 0:
        problems.append(f"step must be positive (got {step_minutes})")
    if not 0 <= start_hour <= 24 or not 0 <= end_hour <= 24:
        problems.append(f"hours must be within 0..24 (got {start_hour}..{end_hour})")
    elif start_hour > end_hour:
        problems.append(f"start hour {start_hour} is after end hour {end_hour}")
    if problems:
        raise ValidationError(problems)


def generate_slots(start_hour: int = 7, end_hour: int = 17, step_minutes: int = 30) -> list[str]:
    """Start times from ``start_hour:00`` up to and including ``end_hour:00``.

    Returns a new list on every call; e.g. (7, 17, 30) → 07:00, 07:30, …, 17:00.
    """
    _check_hours(start_hour, end_hour, step_minutes)
    last = min(end_hour * 60, 24 * 60 - 1)
    return [minutes_to_time(m) for m in range(start_hour * 60, last + 1, step_minutes)]


def generate_time_blocks(
    duration: int,
    start_hour: int = 7,
    end_hour: int = 17,
    interval: int = 15,
) -> list[tuple[str, str]]:
    """Candidate ``(start, end)`` pairs of ``duration`` minutes that end by ``end_hour``."""
    _check_hours(start_hour, end_hour, interval)
    if duration <= 0:
        raise ValidationError(f"duration must be positive (got {duration})")
    blocks = []
    start = start_hour * 60
    while start + duration <= end_hour * 60 and start + duration < 24 * 60:
        blocks.append((minutes_to_time(start), minutes_to_time(start + duration)))
        start += interval
    return blocks


# ─── Display ──────────────────────────────────────────────────────────────────

def format_time_display(time: str) -> str:
    """``13:05`` → ``1:05 PM``."""
    total = minutes_of(time)
    hours, mins = divmod(total, 60)
    period = "PM" if hours >= 12 else "AM"
    display_hours = hours % 12 or 12
    return f"{display_hours}:{mins:02d} {period}"


def day_display_name(day: WeekDay) -> str:
    return _DAY_NAMES[WeekDay(day)]


def day_short_name(day: WeekDay) -> str:
    return _DAY_NAMES[WeekDay(day)][:3]


def grade_label(grade: int) -> str:
    return "K" if grade == 0 else str(grade)


def format_grades(grades: list[int] | set[int]) -> str:
    """Display form of a grade set: ``All grades``, ``K, 1, 2`` or ``No grades``."""
    unique = sorted(set(grades))
    if not unique:
        return "No grades"
    if unique == ALL_GRADES:
        return "All grades"
    return ", ".join(grade_label(g) for g in unique)
