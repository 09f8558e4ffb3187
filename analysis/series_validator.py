"""Consistency checks over stored sessions.

Verifies series linkage independently of the generator and flags sessions
that no longer fit the current constraints (e.g. a constraint created after
the session was planned).
"""

from collections import defaultdict
from typing import Literal, Optional, Union

from pydantic import BaseModel

from models.session import Session, SessionPayload
from scheduling.availability import AvailabilityResolver
from scheduling.time_utils import minutes_of, minutes_to_time, weekday_of

SessionLike = Union[Session, SessionPayload]


class ValidationViolation(BaseModel):
    """A single finding."""

    severity: Literal["error", "warning"]
    check: str           # e.g. "series_order_gap"
    description: str
    entity: str          # series_id or "<date> <time>"


class ValidationReport(BaseModel):
    """Result of a session validation run."""

    violations: list[ValidationViolation]
    is_valid: bool       # True when there are no errors (warnings are fine)
    sessions_checked: int = 0
    series_checked: int = 0

    def print_rich(self) -> None:
        """Prints the report via Rich."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        errors = [v for v in self.violations if v.severity == "error"]
        warnings = [v for v in self.violations if v.severity == "warning"]

        status = (
            "[bold green]✓ VALID[/bold green]"
            if self.is_valid
            else "[bold red]✗ PROBLEMS FOUND[/bold red]"
        )
        lines = [
            status,
            f"Sessions: {self.sessions_checked} | Series: {self.series_checked}",
            f"Errors: {len(errors)} | Warnings: {len(warnings)}",
        ]
        console.print(Panel("\n".join(lines), title="Session validation", border_style="cyan"))

        if not self.violations:
            console.print("[dim]No problems found.[/dim]")
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Type", width=8)
        table.add_column("Check", width=24)
        table.add_column("Entity", width=20)
        table.add_column("Description")

        for v in self.violations:
            color = "red" if v.severity == "error" else "yellow"
            table.add_row(
                f"[{color}]{v.severity.upper()}[/{color}]",
                v.check,
                v.entity,
                v.description,
            )
        console.print(table)


class SeriesValidator:
    """Checks a list of sessions for broken series and misplaced sessions.

    With a resolver, sessions are also checked against the active constraints
    (for ``visible_grades``) using ``duration_minutes`` as session length.
    """

    def __init__(
        self,
        resolver: Optional[AvailabilityResolver] = None,
        duration_minutes: int = 30,
        visible_grades: Optional[list[int]] = None,
    ) -> None:
        self.resolver = resolver
        self.duration_minutes = duration_minutes
        self.visible_grades = visible_grades or []

    def validate(self, sessions: list[SessionLike]) -> ValidationReport:
        violations: list[ValidationViolation] = []
        active = [s for s in sessions if getattr(s, "is_active", True)]

        violations.extend(self._check_series_linkage(sessions))
        violations.extend(self._check_double_booking(active))
        violations.extend(self._check_weekend_dates(active))
        if self.resolver is not None:
            violations.extend(self._check_constraints(active))

        series_ids = {s.series_id for s in sessions if s.series_id}
        has_errors = any(v.severity == "error" for v in violations)
        return ValidationReport(
            violations=violations,
            is_valid=not has_errors,
            sessions_checked=len(sessions),
            series_checked=len(series_ids),
        )

    # ── Individual checks ─────────────────────────────────────────────────────

    def _check_series_linkage(self, sessions: list[SessionLike]) -> list[ValidationViolation]:
        """Shared series_id → same total, orders 1..N, ascending with date."""
        violations: list[ValidationViolation] = []
        by_series: dict[str, list[SessionLike]] = defaultdict(list)

        for s in sessions:
            if s.series_id:
                by_series[s.series_id].append(s)
            elif s.series_order is not None or s.series_total is not None:
                violations.append(ValidationViolation(
                    severity="error",
                    check="series_orphan_fields",
                    entity=f"{s.date} {s.time}",
                    description="series_order/series_total set without a series_id",
                ))

        for series_id, members in by_series.items():
            totals = {m.series_total for m in members}
            if totals != {len(members)}:
                violations.append(ValidationViolation(
                    severity="error",
                    check="series_total_mismatch",
                    entity=series_id,
                    description=(
                        f"{len(members)} session(s) stored, "
                        f"series_total says {sorted(t for t in totals if t is not None) or 'nothing'}"
                    ),
                ))

            orders = sorted(m.series_order for m in members if m.series_order is not None)
            if orders != list(range(1, len(members) + 1)):
                violations.append(ValidationViolation(
                    severity="error",
                    check="series_order_gap",
                    entity=series_id,
                    description=f"Orders {orders} are not contiguous 1..{len(members)}",
                ))
                continue

            by_order = sorted(members, key=lambda m: m.series_order)
            for prev, nxt in zip(by_order, by_order[1:]):
                if nxt.date <= prev.date:
                    violations.append(ValidationViolation(
                        severity="error",
                        check="series_date_order",
                        entity=series_id,
                        description=(
                            f"Day {nxt.series_order} ({nxt.date}) is not after "
                            f"day {prev.series_order} ({prev.date})"
                        ),
                    ))
        return violations

    def _check_double_booking(self, sessions: list[SessionLike]) -> list[ValidationViolation]:
        """No two active sessions start at the same date and time."""
        seen: dict[tuple, int] = defaultdict(int)
        for s in sessions:
            seen[(s.date, minutes_of(s.time))] += 1
        return [
            ValidationViolation(
                severity="error",
                check="double_booking",
                entity=f"{date} {minutes_to_time(start)}",
                description=f"{count} sessions start at the same time",
            )
            for (date, start), count in seen.items()
            if count > 1
        ]

    def _check_weekend_dates(self, sessions: list[SessionLike]) -> list[ValidationViolation]:
        return [
            ValidationViolation(
                severity="warning",
                check="weekend_session",
                entity=f"{s.date} {s.time}",
                description="Session is planned on a weekend",
            )
            for s in sessions
            if weekday_of(s.date) is None
        ]

    def _check_constraints(self, sessions: list[SessionLike]) -> list[ValidationViolation]:
        violations: list[ValidationViolation] = []
        for s in sessions:
            day = weekday_of(s.date)
            if day is None:
                continue
            constraint = self.resolver.blocking_constraint(
                day, s.time, self.duration_minutes, self.visible_grades
            )
            if constraint is not None:
                violations.append(ValidationViolation(
                    severity="warning",
                    check="blocked_by_constraint",
                    entity=f"{s.date} {s.time}",
                    description=f"Overlaps '{constraint.label}' ({constraint.start_time}-{constraint.end_time})",
                ))
        return violations
