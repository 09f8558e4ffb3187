"""Data models for time intervals in the weekly view (Pydantic v2)."""

from pydantic import BaseModel, field_validator, model_validator

from scheduling.time_utils import WeekDay, minutes_of, overlaps, contains


class TimeBlock(BaseModel):
    """A contiguous interval ``[start_time, end_time)`` within one day."""

    start_time: str   # "HH:MM", 24h
    end_time: str     # "HH:MM", strictly after start_time

    @model_validator(mode="after")
    def _check_order(self):
        if minutes_of(self.start_time) >= minutes_of(self.end_time):
            raise ValueError(
                f"start_time ({self.start_time}) must be before end_time ({self.end_time})"
            )
        return self

    @property
    def start_minutes(self) -> int:
        return minutes_of(self.start_time)

    @property
    def end_minutes(self) -> int:
        return minutes_of(self.end_time)

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    def overlaps(self, other: "TimeBlock") -> bool:
        return overlaps(self.start_minutes, self.end_minutes,
                        other.start_minutes, other.end_minutes)

    def contains(self, start: int, end: int) -> bool:
        """True if the minute interval ``[start, end)`` fits inside this block."""
        return contains(self.start_minutes, self.end_minutes, start, end)

    def __str__(self) -> str:
        return f"{self.start_time}-{self.end_time}"


class AvailabilityBlock(TimeBlock):
    """A recurring weekly interval during which a staff member may be scheduled."""

    days: list[WeekDay]

    @field_validator("days")
    @classmethod
    def _days_not_empty(cls, v: list[WeekDay]) -> list[WeekDay]:
        if not v:
            raise ValueError("an availability block needs at least one day")
        return v

    def applies_to(self, day: WeekDay) -> bool:
        return day in self.days
