from models.timeslot import TimeBlock, AvailabilityBlock
from models.interventionist import Interventionist
from models.actor import Actor, Role
from models.constraint import (
    ConstraintScope,
    ConstraintType,
    ConstraintDraft,
    ConstraintDisplay,
    SchoolwideConstraint,
    PersonalConstraint,
    ScheduleConstraint,
)
from models.lesson_plan import LessonPlan, LessonSection
from models.session import (
    Session,
    SessionPayload,
    SessionStatus,
    PracticeItem,
    AnticipatedError,
)

__all__ = [
    "TimeBlock",
    "AvailabilityBlock",
    "Interventionist",
    "Actor",
    "Role",
    "ConstraintScope",
    "ConstraintType",
    "ConstraintDraft",
    "ConstraintDisplay",
    "SchoolwideConstraint",
    "PersonalConstraint",
    "ScheduleConstraint",
    "LessonPlan",
    "LessonSection",
    "Session",
    "SessionPayload",
    "SessionStatus",
    "PracticeItem",
    "AnticipatedError",
]
