"""ConstraintStore: schedule constraints with role-based authorization and scope-aware queries.

Visibility rules:
  - Schoolwide constraints bind everyone and only admins may create them.
  - Personal constraints bind only their own grades.
  - A constraint may be edited/deleted by its creator or by an admin.

Mutations are serialized by a lock and swap the whole collection at once, so a
reader sees either the old or the new set of constraints, never a half-written one.
"""

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Iterable, Optional, Union

from models.actor import Role, is_elevated
from models.constraint import (
    ConstraintDisplay,
    ConstraintDraft,
    ConstraintScope,
    PersonalConstraint,
    SchoolwideConstraint,
    binds_grades,
    build_constraint,
    constraint_is_active,
)
from scheduling.errors import AuthorizationDenied, ConstraintNotFound, ValidationError
from scheduling.repositories import ConstraintRepository, InMemoryConstraintRepository
from scheduling.time_utils import ALL_GRADES, WEEKDAYS, WeekDay, minutes_of, minutes_to_time

logger = logging.getLogger(__name__)

Constraint = Union[SchoolwideConstraint, PersonalConstraint]

_EDITABLE_FIELDS = frozenset(ConstraintDraft.model_fields)


# ─── Permission helpers ───────────────────────────────────────────────────────

def can_create_schoolwide(role: Role | str) -> bool:
    """Only admins may create schoolwide constraints."""
    return is_elevated(role)


def default_scope_for(role: Role | str) -> ConstraintScope:
    """Scope preselected in the UI: admins → schoolwide, everyone else → personal."""
    return ConstraintScope.SCHOOLWIDE if is_elevated(role) else ConstraintScope.PERSONAL


def can_modify(constraint: Constraint, actor_id: str, role: Role | str) -> bool:
    """Creators may edit/delete their own constraints; admins may edit any."""
    return constraint.created_by == actor_id or is_elevated(role)


# ─── Validation ───────────────────────────────────────────────────────────────

def _normalized_fields(draft: ConstraintDraft) -> dict:
    """Checks a draft and returns the cleaned fields.

    Raises MalformedTime for unparseable times, ValidationError for everything else.
    """
    start = minutes_of(draft.start_time)
    end = minutes_of(draft.end_time)

    problems: list[str] = []
    if not draft.applicable_grades:
        problems.append("At least one grade must be selected.")
    bad_grades = sorted({g for g in draft.applicable_grades if g not in ALL_GRADES})
    if bad_grades:
        problems.append(f"Unknown grade(s) {bad_grades}; allowed are 0 (K) to 8.")
    if not draft.days:
        problems.append("At least one day must be selected.")
    if not draft.label.strip():
        problems.append("A label is required.")
    if start >= end:
        problems.append(
            f"Start time ({draft.start_time}) must be before end time ({draft.end_time})."
        )
    if problems:
        raise ValidationError(problems)

    return {
        "applicable_grades": sorted(set(draft.applicable_grades)),
        "label": draft.label.strip(),
        "type": draft.type,
        "days": [d for d in WEEKDAYS if d in set(draft.days)],
        "start_time": minutes_to_time(start),
        "end_time": minutes_to_time(end),
    }


# ─── Store ────────────────────────────────────────────────────────────────────

class ConstraintStore:
    """In-memory constraint collection backed by a ConstraintRepository.

    Usage:
        store = ConstraintStore(JsonConstraintRepository(path))
        c = store.create(ConstraintDraft(...), actor_id="u1", role=Role.ADMIN)
        store.active_constraints_for(WeekDay.MONDAY, "11:30", 30, [3])
    """

    def __init__(self, repository: Optional[ConstraintRepository] = None) -> None:
        self._repository = repository or InMemoryConstraintRepository()
        self._lock = threading.Lock()
        self._constraints: tuple[Constraint, ...] = tuple(self._repository.load())

    def reload(self) -> None:
        with self._lock:
            self._constraints = tuple(self._repository.load())

    # ── Reading ──────────────────────────────────────────────────────────────

    def all(self) -> list[Constraint]:
        return list(self._constraints)

    def get(self, constraint_id: str) -> Constraint:
        for c in self._constraints:
            if c.id == constraint_id:
                return c
        raise ConstraintNotFound(constraint_id)

    def by_creator(self, actor_id: str) -> list[Constraint]:
        return [c for c in self._constraints if c.created_by == actor_id]

    def visible_constraints(self, visible_grades: Iterable[int] = ()) -> list[Constraint]:
        """Constraints relevant to the grades in view (schoolwide always)."""
        grades = set(visible_grades)
        return _schoolwide_first(c for c in self._constraints if binds_grades(c, grades))

    def active_constraints_for(
        self,
        day: WeekDay,
        time: str,
        duration_minutes: int,
        visible_grades: Iterable[int] = (),
    ) -> list[Constraint]:
        """Constraints blocking ``[time, time+duration)`` on ``day`` for the given grades.

        Schoolwide constraints come first, otherwise insertion order.
        """
        start = minutes_of(time)
        end = start + duration_minutes
        grades = set(visible_grades)
        day = WeekDay(day)
        return _schoolwide_first(
            c for c in self._constraints
            if constraint_is_active(c, day, start, end, grades)
        )

    @staticmethod
    def display_info(constraint: Constraint) -> ConstraintDisplay:
        return ConstraintDisplay(
            label=constraint.label,
            applicable_grades_display=constraint.grades_display,
        )

    # ── Writing ──────────────────────────────────────────────────────────────

    def create(self, draft: ConstraintDraft, actor_id: str, role: Role | str) -> Constraint:
        """Validates and stores a new constraint; ``created_by`` is the actor."""
        fields = _normalized_fields(draft)
        scope = draft.scope or default_scope_for(role)
        if scope == ConstraintScope.SCHOOLWIDE and not can_create_schoolwide(role):
            logger.warning(f"Denied schoolwide constraint '{fields['label']}' for {actor_id} ({role})")
            raise AuthorizationDenied(actor_id, "create schoolwide constraints")

        constraint = build_constraint(
            scope,
            id=str(uuid.uuid4()),
            created_by=actor_id,
            created_at=datetime.now(timezone.utc),
            **fields,
        )
        with self._lock:
            updated = self._constraints + (constraint,)
            self._repository.save_all(list(updated))
            self._constraints = updated
        logger.info(
            f"Constraint created: {constraint.label} ({constraint.scope}, "
            f"grades {constraint.grades_display}) by {actor_id}"
        )
        return constraint

    def update(self, constraint_id: str, changes: dict, actor_id: str, role: Role | str) -> Constraint:
        """Applies field changes; same validation and authorization rules as ``create``."""
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be changed: {sorted(unknown)}")

        with self._lock:
            current = self.get(constraint_id)
            if not can_modify(current, actor_id, role):
                logger.warning(f"Denied update of constraint {constraint_id} for {actor_id}")
                raise AuthorizationDenied(actor_id, f"modify constraint {constraint_id}")

            merged = current.model_dump(include=set(_EDITABLE_FIELDS))
            merged.update(changes)
            draft = ConstraintDraft.model_validate(merged)
            fields = _normalized_fields(draft)
            scope = draft.scope or default_scope_for(role)
            if (scope == ConstraintScope.SCHOOLWIDE and current.scope != scope
                    and not can_create_schoolwide(role)):
                raise AuthorizationDenied(actor_id, "make a constraint schoolwide")

            replacement = build_constraint(
                scope,
                id=current.id,
                created_by=current.created_by,
                created_at=current.created_at,
                **fields,
            )
            updated = tuple(replacement if c.id == constraint_id else c for c in self._constraints)
            self._repository.save_all(list(updated))
            self._constraints = updated
        logger.info(f"Constraint updated: {replacement.label} by {actor_id}")
        return replacement

    def delete(self, constraint_id: str, actor_id: str, role: Role | str) -> None:
        with self._lock:
            current = self.get(constraint_id)
            if not can_modify(current, actor_id, role):
                logger.warning(f"Denied deletion of constraint {constraint_id} for {actor_id}")
                raise AuthorizationDenied(actor_id, f"delete constraint {constraint_id}")
            updated = tuple(c for c in self._constraints if c.id != constraint_id)
            self._repository.save_all(list(updated))
            self._constraints = updated
        logger.info(f"Constraint deleted: {current.label} by {actor_id}")

    def __len__(self) -> int:
        return len(self._constraints)

    def __repr__(self) -> str:
        return f"ConstraintStore({len(self._constraints)} constraints)"


def _schoolwide_first(constraints: Iterable[Constraint]) -> list[Constraint]:
    # sorted() is stable: insertion order survives within each scope
    return sorted(constraints, key=lambda c: 0 if c.scope == ConstraintScope.SCHOOLWIDE else 1)
