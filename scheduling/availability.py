"""Availability resolver: is a weekly slot open for an interventionist and not blocked?

Both questions are pure queries over the interventionist's declared blocks and
the ConstraintStore. Availability is default-open: an interventionist without
any declared blocks is available at all times.
"""

from typing import Iterable, Optional, Union

from pydantic import BaseModel

from models.constraint import PersonalConstraint, SchoolwideConstraint
from models.interventionist import Interventionist
from scheduling.constraint_store import ConstraintStore
from scheduling.time_utils import WEEKDAYS, WeekDay, generate_slots, minutes_of

Constraint = Union[SchoolwideConstraint, PersonalConstraint]


class SlotStatus(BaseModel):
    """One cell of the weekly planning grid."""

    day: WeekDay
    time: str                                 # slot start "HH:MM"
    available: bool                           # interventionist can take it
    blocked: bool                             # a constraint is active
    constraint_label: Optional[str] = None    # label of the first blocking constraint

    @property
    def usable(self) -> bool:
        return self.available and not self.blocked


class AvailabilityResolver:
    def __init__(self, store: ConstraintStore) -> None:
        self.store = store

    @staticmethod
    def is_available(
        interventionist: Optional[Interventionist],
        day: WeekDay,
        time: str,
        duration_minutes: int,
    ) -> bool:
        """True iff one of the day's blocks fully contains ``[time, time+duration)``.

        No interventionist or no declared blocks at all → True. Declared blocks
        that simply don't cover ``day`` → False.
        """
        start = minutes_of(time)
        end = start + duration_minutes
        if interventionist is None or not interventionist.has_declared_availability:
            return True
        return any(block.contains(start, end) for block in interventionist.blocks_for(WeekDay(day)))

    def blocking_constraint(
        self,
        day: WeekDay,
        time: str,
        duration_minutes: int,
        visible_grades: Iterable[int] = (),
    ) -> Optional[Constraint]:
        active = self.store.active_constraints_for(day, time, duration_minutes, visible_grades)
        return active[0] if active else None

    def is_blocked(
        self,
        day: WeekDay,
        time: str,
        duration_minutes: int,
        visible_grades: Iterable[int] = (),
    ) -> bool:
        return self.blocking_constraint(day, time, duration_minutes, visible_grades) is not None

    def slot_grid(
        self,
        interventionist: Optional[Interventionist],
        days: Optional[list[WeekDay]] = None,
        visible_grades: Iterable[int] = (),
        start_hour: int = 7,
        end_hour: int = 17,
        step_minutes: int = 30,
        duration_minutes: Optional[int] = None,
    ) -> list[SlotStatus]:
        """Status of every generated slot on every requested day (day-major order).

        ``duration_minutes`` defaults to the step, i.e. one grid cell.
        """
        grades = list(visible_grades)
        duration = duration_minutes or step_minutes
        slots = generate_slots(start_hour, end_hour, step_minutes)
        grid: list[SlotStatus] = []
        for day in days or WEEKDAYS:
            day = WeekDay(day)
            for time in slots:
                constraint = self.blocking_constraint(day, time, duration, grades)
                grid.append(SlotStatus(
                    day=day,
                    time=time,
                    available=self.is_available(interventionist, day, time, duration),
                    blocked=constraint is not None,
                    constraint_label=constraint.label if constraint else None,
                ))
        return grid
