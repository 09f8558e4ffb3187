"""Lesson plan model with per-section day assignment (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, Field


class LessonSection(BaseModel):
    """One component of a lesson (e.g. "Sound Cards", "Dictation")."""

    component: str                 # "sounds-quick-drill", "passage-reading", ...
    name: str = ""                 # display name
    duration: int = Field(0, ge=0)  # minutes
    elements: list[str] = []       # sounds / words / sentences picked for this part
    activities: list[str] = []
    notes: Optional[str] = None
    day: Optional[int] = None      # target day 1..N; None = day 1

    @property
    def assigned_day(self) -> int:
        return self.day if self.day is not None else 1


class LessonPlan(BaseModel):
    """A lesson, possibly spread across several days."""

    title: str = ""                # e.g. "1.1: Closed syllables"
    days: int = Field(1, ge=1)
    sections: list[LessonSection] = []

    @property
    def total_duration(self) -> int:
        return sum(s.duration for s in self.sections)

    @property
    def is_multi_day(self) -> bool:
        return self.days > 1
