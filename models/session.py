"""Session records consumed from and produced for the session store (Pydantic v2)."""

import datetime as dt
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field

from models.lesson_plan import LessonPlan


class SessionStatus(str, Enum):
    PLANNED = "planned"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PracticeItem(BaseModel):
    """A freeform practice item planned for a session."""

    item: str
    type: Literal["review", "new", "cumulative"] = "review"


class AnticipatedError(BaseModel):
    """An error pattern the interventionist expects, with its correction."""

    id: str
    error_pattern: str
    correction_protocol: str = ""


class SessionPayload(BaseModel):
    """Session-creation payload handed verbatim to the session store."""

    group_id: Optional[str] = None
    date: dt.date
    time: str                                       # "HH:MM"
    curriculum_position: Optional[str] = None       # e.g. "1.1" (step.substep)
    planned_otr_target: Optional[int] = Field(None, ge=0)
    planned_practice_items: list[PracticeItem] = []
    planned_response_formats: list[str] = []
    anticipated_errors: list[AnticipatedError] = []
    notes: Optional[str] = None
    lesson_plan: Optional[LessonPlan] = None
    # Multi-day series linkage (only set when generated together)
    series_id: Optional[str] = None
    series_order: Optional[int] = None
    series_total: Optional[int] = None

    @property
    def is_series(self) -> bool:
        return self.series_id is not None


class Session(SessionPayload):
    """A persisted session as returned by the session store."""

    id: str
    status: SessionStatus = SessionStatus.PLANNED

    @property
    def is_active(self) -> bool:
        """Cancelled sessions never occupy a slot."""
        return self.status != SessionStatus.CANCELLED
