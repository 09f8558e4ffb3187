"""Final accept/reject decision for one candidate session placement.

Checks run in a fixed order and the first failing one wins:
occupied → not a school day → blocked by a constraint → outside availability.
A rejection is a regular verdict, never an exception.
"""

import datetime as dt
import logging
from enum import Enum
from typing import Iterable, Optional, Union

from pydantic import BaseModel

from models.interventionist import Interventionist
from models.session import Session
from scheduling.availability import AvailabilityResolver
from scheduling.repositories import SessionRepository
from scheduling.time_utils import minutes_of, parse_date, weekday_of

logger = logging.getLogger(__name__)

REASON_OCCUPIED = "slot occupied"
REASON_NOT_SCHOOL_DAY = "not a school day"
REASON_UNAVAILABLE = "outside declared availability"


class PlacementOutcome(str, Enum):
    ACCEPTED = "accepted"
    OCCUPIED = "occupied"
    NOT_SCHOOL_DAY = "not_school_day"
    BLOCKED = "blocked"
    UNAVAILABLE = "unavailable"


class PlacementVerdict(BaseModel):
    accepted: bool
    outcome: PlacementOutcome
    reason: Optional[str] = None          # display text; constraint label when blocked
    constraint_id: Optional[str] = None   # only for BLOCKED

    @classmethod
    def accept(cls) -> "PlacementVerdict":
        return cls(accepted=True, outcome=PlacementOutcome.ACCEPTED)

    @classmethod
    def reject(cls, outcome: PlacementOutcome, reason: str,
               constraint_id: Optional[str] = None) -> "PlacementVerdict":
        return cls(accepted=False, outcome=outcome, reason=reason, constraint_id=constraint_id)


def is_occupied(sessions: Iterable[Session], date: dt.date, time: str) -> bool:
    """A non-cancelled session already starts at exactly this date and time."""
    start = minutes_of(time)
    return any(
        s.is_active and s.date == date and minutes_of(s.time) == start
        for s in sessions
    )


class PlacementValidator:
    """Validates candidate slots against sessions, constraints and availability.

    ``sessions`` may be a SessionRepository (queried on every call) or a plain
    list of sessions.
    """

    def __init__(
        self,
        resolver: AvailabilityResolver,
        sessions: Union[SessionRepository, list[Session], None] = None,
    ) -> None:
        self.resolver = resolver
        self._sessions = sessions if sessions is not None else []

    def _current_sessions(self) -> list[Session]:
        if isinstance(self._sessions, list):
            return self._sessions
        return self._sessions.list_sessions()

    def validate(
        self,
        date: Union[dt.date, str],
        time: str,
        duration_minutes: int,
        visible_grades: Iterable[int] = (),
        interventionist: Optional[Interventionist] = None,
    ) -> PlacementVerdict:
        date = parse_date(date)
        minutes_of(time)  # MalformedTime before any check

        if is_occupied(self._current_sessions(), date, time):
            return PlacementVerdict.reject(PlacementOutcome.OCCUPIED, REASON_OCCUPIED)

        day = weekday_of(date)
        if day is None:
            return PlacementVerdict.reject(PlacementOutcome.NOT_SCHOOL_DAY, REASON_NOT_SCHOOL_DAY)

        constraint = self.resolver.blocking_constraint(day, time, duration_minutes, visible_grades)
        if constraint is not None:
            logger.debug(f"{date} {time} blocked by '{constraint.label}'")
            return PlacementVerdict.reject(
                PlacementOutcome.BLOCKED, constraint.label, constraint_id=constraint.id
            )

        if interventionist is not None and not self.resolver.is_available(
            interventionist, day, time, duration_minutes
        ):
            return PlacementVerdict.reject(PlacementOutcome.UNAVAILABLE, REASON_UNAVAILABLE)

        return PlacementVerdict.accept()
