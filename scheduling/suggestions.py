"""Ranked time-slot suggestions for a group's weekly sessions.

Every candidate block on every preferred day is scored:
    score = time-of-day preference (0 best … 3) + penalty × number of conflicts
Lower is better; ties keep day-then-time order.
"""

import datetime as dt
from enum import Enum
from typing import Iterable, Optional, Union

from pydantic import BaseModel

from models.interventionist import Interventionist
from models.session import Session
from scheduling.availability import AvailabilityResolver
from scheduling.repositories import SessionRepository
from scheduling.time_utils import (
    WEEKDAYS,
    WeekDay,
    generate_time_blocks,
    minutes_of,
    overlaps,
    week_dates,
    weekday_of,
)

# Length assumed for already planned sessions (sessions carry no end time)
EXISTING_SESSION_MINUTES = 30


class ConflictType(str, Enum):
    INTERVENTIONIST_UNAVAILABLE = "interventionist_unavailable"
    CONSTRAINT = "constraint"
    EXISTING_SESSION = "existing_session"


class ScheduleConflict(BaseModel):
    type: ConflictType
    description: str
    constraint_id: Optional[str] = None


class SuggestedSlot(BaseModel):
    day: WeekDay
    start_time: str
    end_time: str
    score: int
    conflicts: list[ScheduleConflict] = []

    @property
    def is_conflict_free(self) -> bool:
        return not self.conflicts


def score_time_slot(start_time: str) -> int:
    """Time-of-day preference: mornings best, late afternoon/early morning worst."""
    hour = minutes_of(start_time) / 60
    if 8 <= hour < 11:
        return 0
    if 11 <= hour < 14:
        return 1
    if 14 <= hour < 15:
        return 2
    return 3


def select_best_slots(slots: list[SuggestedSlot], count: int) -> list[SuggestedSlot]:
    """Picks ``count`` slots, one per day first, then fills up in rank order."""
    selected: list[SuggestedSlot] = []
    used_days: set[WeekDay] = set()
    for slot in slots:
        if len(selected) >= count:
            break
        if slot.day not in used_days:
            selected.append(slot)
            used_days.add(slot.day)
    for slot in slots:
        if len(selected) >= count:
            break
        if not any(slot is s for s in selected):
            selected.append(slot)
    return selected[:count]


class SlotSuggester:
    def __init__(
        self,
        resolver: AvailabilityResolver,
        sessions: Union[SessionRepository, list[Session], None] = None,
        conflict_penalty: int = 10,
        max_results: int = 20,
        interval_minutes: int = 15,
    ) -> None:
        self.resolver = resolver
        self._sessions = sessions if sessions is not None else []
        self.conflict_penalty = conflict_penalty
        self.max_results = max_results
        self.interval_minutes = interval_minutes

    def _current_sessions(self) -> list[Session]:
        if isinstance(self._sessions, list):
            return self._sessions
        return self._sessions.list_sessions()

    def _session_blocks(self, day: WeekDay, week_of: Optional[dt.date]) -> list[tuple[int, int]]:
        """Minute intervals of active sessions on ``day`` (optionally only in one week)."""
        week = set(week_dates(week_of).values()) if week_of else None
        blocks = []
        for s in self._current_sessions():
            if not s.is_active or weekday_of(s.date) != day:
                continue
            if week is not None and s.date not in week:
                continue
            start = minutes_of(s.time)
            blocks.append((start, start + EXISTING_SESSION_MINUTES))
        return blocks

    def suggest_slots(
        self,
        duration_minutes: int,
        interventionist: Optional[Interventionist] = None,
        visible_grades: Iterable[int] = (),
        preferred_days: Optional[list[WeekDay]] = None,
        start_hour: int = 7,
        end_hour: int = 17,
        week_of: Optional[dt.date] = None,
    ) -> list[SuggestedSlot]:
        """Top-ranked candidate slots (at most ``max_results``)."""
        grades = list(visible_grades)
        candidates = generate_time_blocks(duration_minutes, start_hour, end_hour,
                                          self.interval_minutes)
        suggestions: list[SuggestedSlot] = []

        for day in preferred_days or WEEKDAYS:
            day = WeekDay(day)
            booked = self._session_blocks(day, week_of)
            for start, end in candidates:
                conflicts: list[ScheduleConflict] = []

                if interventionist is not None and not self.resolver.is_available(
                    interventionist, day, start, duration_minutes
                ):
                    conflicts.append(ScheduleConflict(
                        type=ConflictType.INTERVENTIONIST_UNAVAILABLE,
                        description=f"{interventionist.name} is not available",
                    ))

                constraint = self.resolver.blocking_constraint(day, start, duration_minutes, grades)
                if constraint is not None:
                    conflicts.append(ScheduleConflict(
                        type=ConflictType.CONSTRAINT,
                        description=f"Blocked by {constraint.label}",
                        constraint_id=constraint.id,
                    ))

                if any(overlaps(start, end, b0, b1) for b0, b1 in booked):
                    conflicts.append(ScheduleConflict(
                        type=ConflictType.EXISTING_SESSION,
                        description="Another session is already scheduled",
                    ))

                suggestions.append(SuggestedSlot(
                    day=day,
                    start_time=start,
                    end_time=end,
                    score=score_time_slot(start) + self.conflict_penalty * len(conflicts),
                    conflicts=conflicts,
                ))

        suggestions.sort(key=lambda s: s.score)
        return suggestions[:self.max_results]

    def suggest_schedule(self, sessions_per_week: int, duration_minutes: int, **kwargs) -> list[SuggestedSlot]:
        """``sessions_per_week`` slots spread over the week.

        Conflict-free slots are used when there are enough of them; otherwise
        slots with at most one conflict are allowed.
        """
        ranked = self.suggest_slots(duration_minutes, **kwargs)
        perfect = [s for s in ranked if s.is_conflict_free]
        if len(perfect) >= sessions_per_week:
            return select_best_slots(perfect, sessions_per_week)
        acceptable = [s for s in ranked if s.score < 2 * self.conflict_penalty]
        return select_best_slots(acceptable, sessions_per_week)
