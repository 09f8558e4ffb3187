"""Error taxonomy of the scheduling engine.

Parsing and validation errors are raised before any payload is produced.
Authorization errors go straight back to the caller for display.
A rejected placement is NOT an exception but a regular ``PlacementVerdict``.
"""

from typing import Optional


class SchedulingError(Exception):
    """Base class for all engine errors."""


class MalformedTime(SchedulingError, ValueError):
    """A time (or date) string could not be parsed."""

    def __init__(self, value: object, expected: str = "HH:MM") -> None:
        self.value = value
        self.expected = expected
        super().__init__(f"Malformed time {value!r} (expected {expected})")


class ValidationError(SchedulingError, ValueError):
    """Input rejected before anything was persisted or generated."""

    def __init__(self, problems: list[str] | str) -> None:
        if isinstance(problems, str):
            problems = [problems]
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


class AuthorizationDenied(SchedulingError, PermissionError):
    """The actor lacks the privilege for the requested constraint operation."""

    def __init__(self, actor_id: str, action: str) -> None:
        self.actor_id = actor_id
        self.action = action
        super().__init__(f"User {actor_id!r} is not allowed to {action}")


class ConstraintNotFound(SchedulingError, LookupError):
    """No constraint with the given id exists."""

    def __init__(self, constraint_id: str) -> None:
        self.constraint_id = constraint_id
        super().__init__(f"Constraint not found: {constraint_id}")


class PartialSeriesFailure(SchedulingError):
    """Persisting a generated series stopped part-way.

    Sessions for ``succeeded_orders`` already exist in the session store and
    are NOT rolled back. ``pending_orders`` were never issued.
    """

    def __init__(
        self,
        series_id: Optional[str],
        succeeded_orders: list[int],
        failed_order: int,
        pending_orders: list[int],
    ) -> None:
        self.series_id = series_id
        self.succeeded_orders = list(succeeded_orders)
        self.failed_order = failed_order
        self.pending_orders = list(pending_orders)
        super().__init__(
            f"Series {series_id or '-'}: day {failed_order} failed "
            f"({len(self.succeeded_orders)} saved, {len(self.pending_orders)} not attempted)"
        )
