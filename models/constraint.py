"""Schedule constraints as a tagged variant (Pydantic v2 discriminated union).

A constraint is a recurring weekly interval during which scheduling is
disallowed. ``SchoolwideConstraint`` binds every grade; ``PersonalConstraint``
binds only the grades it lists. ``constraint_is_active`` is the single place
that evaluates a constraint against a (day, interval, grades) context.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from scheduling.time_utils import WeekDay, format_grades, minutes_of, overlaps


class ConstraintScope(str, Enum):
    SCHOOLWIDE = "schoolwide"
    PERSONAL = "personal"


class ConstraintType(str, Enum):
    LUNCH = "lunch"
    CORE_INSTRUCTION = "core_instruction"
    SPECIALS = "specials"
    THERAPY = "therapy"
    OTHER = "other"


class _ConstraintBase(BaseModel):
    id: str
    applicable_grades: list[int]      # 0=K … 8
    label: str                        # "Lunch (Mid)"
    type: ConstraintType = ConstraintType.OTHER
    days: list[WeekDay]
    start_time: str                   # "HH:MM"
    end_time: str                     # "HH:MM"
    created_by: str                   # actor id of the creator
    created_at: Optional[datetime] = None

    @property
    def start_minutes(self) -> int:
        return minutes_of(self.start_time)

    @property
    def end_minutes(self) -> int:
        return minutes_of(self.end_time)

    @property
    def grades_display(self) -> str:
        return format_grades(self.applicable_grades)


class SchoolwideConstraint(_ConstraintBase):
    """Binds everyone, regardless of the grades in view."""

    scope: Literal["schoolwide"] = "schoolwide"


class PersonalConstraint(_ConstraintBase):
    """Binds only its own grades (and its creator's view)."""

    scope: Literal["personal"] = "personal"


ScheduleConstraint = Annotated[
    Union[SchoolwideConstraint, PersonalConstraint],
    Field(discriminator="scope"),
]

constraint_adapter = TypeAdapter(ScheduleConstraint)
constraint_list_adapter = TypeAdapter(list[ScheduleConstraint])

_VARIANTS = {
    ConstraintScope.SCHOOLWIDE: SchoolwideConstraint,
    ConstraintScope.PERSONAL: PersonalConstraint,
}


class ConstraintDraft(BaseModel):
    """Unsaved constraint as entered by a user (no id, no creator yet).

    ``scope=None`` means "use the default scope for the actor's role".
    Content rules (grades, days, time order) are enforced by the
    ConstraintStore so that they surface as engine errors.
    """

    scope: Optional[ConstraintScope] = None
    applicable_grades: list[int] = []
    label: str = ""
    type: ConstraintType = ConstraintType.OTHER
    days: list[WeekDay] = []
    start_time: str = "11:30"
    end_time: str = "12:00"


class ConstraintDisplay(BaseModel):
    """Per-constraint display info for the planning UI."""

    label: str
    applicable_grades_display: str


def build_constraint(
    scope: ConstraintScope,
    *,
    id: str,
    created_by: str,
    **fields,
) -> Union[SchoolwideConstraint, PersonalConstraint]:
    """Instantiates the variant matching ``scope``."""
    cls = _VARIANTS[ConstraintScope(scope)]
    return cls(id=id, created_by=created_by, **fields)


def binds_grades(
    constraint: Union[SchoolwideConstraint, PersonalConstraint],
    visible_grades: list[int] | set[int],
) -> bool:
    """Does the constraint bind the grades currently in view?

    Schoolwide always binds. Personal binds when no grades are in view or
    when its grade set intersects the visible ones.
    """
    if isinstance(constraint, SchoolwideConstraint):
        return True
    if not visible_grades:
        return True
    return not set(constraint.applicable_grades).isdisjoint(visible_grades)


def constraint_is_active(
    constraint: Union[SchoolwideConstraint, PersonalConstraint],
    day: WeekDay,
    start_minutes: int,
    end_minutes: int,
    visible_grades: list[int] | set[int],
) -> bool:
    """Day matches, ``[start, end)`` overlaps the constraint, and the grades bind."""
    if day not in constraint.days:
        return False
    if not overlaps(start_minutes, end_minutes,
                    constraint.start_minutes, constraint.end_minutes):
        return False
    return binds_grades(constraint, visible_grades)
