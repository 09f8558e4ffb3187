"""Series generator: expands one planning action into dated, linked session payloads.

Three shapes:
  - multi-day lesson plan (``lesson_plan.days > 1``): one payload per lesson day,
    each carrying only the sections assigned to that day
  - generic multi-day (``number_of_days > 1``): one payload per date
  - single day: one payload without series fields

Multi-day output shares a fresh ``series_id``; ``series_order`` runs 1..N in
date order and every payload carries ``series_total = N``.
"""

import datetime as dt
import logging
import uuid
from datetime import timedelta
from typing import Optional, Union

from pydantic import BaseModel, Field

from models.lesson_plan import LessonPlan
from models.session import AnticipatedError, PracticeItem, Session, SessionPayload
from scheduling.errors import PartialSeriesFailure, ValidationError
from scheduling.lesson_split import split_lesson_plan
from scheduling.repositories import SessionRepository
from scheduling.time_utils import minutes_of, parse_date

logger = logging.getLogger(__name__)


class SeriesRequest(BaseModel):
    """Everything one "plan sessions" action supplies."""

    start_date: dt.date
    time: str                                       # "HH:MM", same for every day
    number_of_days: int = 1
    skip_weekends: bool = True
    repeat_activities: bool = True                  # practice content on every day (no lesson plan)
    group_id: Optional[str] = None
    curriculum_position: Optional[str] = None
    planned_otr_target: Optional[int] = Field(None, ge=0)
    planned_practice_items: list[PracticeItem] = []
    planned_response_formats: list[str] = []
    anticipated_errors: list[AnticipatedError] = []
    notes: Optional[str] = None
    lesson_plan: Optional[LessonPlan] = None


def series_dates(
    start: Union[dt.date, str],
    number_of_days: int,
    skip_weekends: bool = True,
) -> list[dt.date]:
    """``number_of_days`` dates scanning forward from ``start`` (inclusive).

    With ``skip_weekends`` Saturdays and Sundays are passed over without
    counting, so a Friday start continues on Monday.
    """
    if number_of_days < 1:
        raise ValidationError(f"Number of days must be at least 1 (got {number_of_days})")
    current = parse_date(start)
    dates: list[dt.date] = []
    while len(dates) < number_of_days:
        if not (skip_weekends and current.weekday() >= 5):
            dates.append(current)
        current += timedelta(days=1)
    return dates


def _day_notes(notes: Optional[str], day: int, total: int) -> str:
    suffix = f"Day {day}/{total}"
    return f"{notes} ({suffix})" if notes else suffix


class SeriesGenerator:
    """Builds SessionPayloads; persisting them is left to ``emit_series``.

    Usage:
        payloads = SeriesGenerator().generate(SeriesRequest(
            start_date=date(2025, 3, 7), time="09:00", number_of_days=3))
    """

    def generate(self, request: SeriesRequest) -> list[SessionPayload]:
        minutes_of(request.time)
        if request.number_of_days < 1:
            raise ValidationError(
                f"Number of days must be at least 1 (got {request.number_of_days})"
            )

        plan = request.lesson_plan
        if plan is not None and plan.is_multi_day:
            payloads = self._lesson_plan_series(request, plan)
        elif request.number_of_days > 1:
            payloads = self._generic_series(request)
        else:
            payloads = [self._payload(request, request.start_date, notes=request.notes,
                                      lesson_plan=plan)]

        if len(payloads) > 1:
            logger.info(
                f"Series {payloads[0].series_id}: {len(payloads)} sessions "
                f"{payloads[0].date} → {payloads[-1].date} at {request.time}"
            )
        return payloads

    # ─── Shapes ───────────────────────────────────────────────────────────────

    def _lesson_plan_series(self, request: SeriesRequest, plan: LessonPlan) -> list[SessionPayload]:
        day_plans = split_lesson_plan(plan)
        dates = series_dates(request.start_date, plan.days, request.skip_weekends)
        return self._link([
            self._payload(
                request, date,
                notes=_day_notes(request.notes, i + 1, plan.days),
                lesson_plan=day_plans[i],
            )
            for i, date in enumerate(dates)
        ])

    def _generic_series(self, request: SeriesRequest) -> list[SessionPayload]:
        total = request.number_of_days
        dates = series_dates(request.start_date, total, request.skip_weekends)
        return self._link([
            self._payload(
                request, date,
                notes=_day_notes(request.notes, i + 1, total),
                lesson_plan=request.lesson_plan if i == 0 else None,
                with_activities=request.repeat_activities or i == 0,
            )
            for i, date in enumerate(dates)
        ])

    # ─── Helpers ──────────────────────────────────────────────────────────────

    @staticmethod
    def _payload(
        request: SeriesRequest,
        date: dt.date,
        notes: Optional[str],
        lesson_plan: Optional[LessonPlan],
        with_activities: bool = True,
    ) -> SessionPayload:
        return SessionPayload(
            group_id=request.group_id,
            date=date,
            time=request.time,
            curriculum_position=request.curriculum_position,
            planned_otr_target=request.planned_otr_target,
            planned_practice_items=list(request.planned_practice_items) if with_activities else [],
            planned_response_formats=list(request.planned_response_formats),
            anticipated_errors=list(request.anticipated_errors) if with_activities else [],
            notes=notes,
            lesson_plan=lesson_plan,
        )

    @staticmethod
    def _link(payloads: list[SessionPayload]) -> list[SessionPayload]:
        series_id = str(uuid.uuid4())
        total = len(payloads)
        return [
            p.model_copy(update={"series_id": series_id, "series_order": i + 1, "series_total": total})
            for i, p in enumerate(payloads)
        ]


# ─── Emission ─────────────────────────────────────────────────────────────────

def emit_series(payloads: list[SessionPayload], repository: SessionRepository) -> list[Session]:
    """Persists payloads in ascending ``series_order``.

    Stops at the first failing create and raises PartialSeriesFailure (chained
    to the cause). Sessions created before the failure stay in the store.
    """
    ordered = sorted(payloads, key=lambda p: p.series_order or 0)
    orders = [p.series_order or 1 for p in ordered]
    series_id = ordered[0].series_id if ordered else None
    created: list[Session] = []
    for i, payload in enumerate(ordered):
        try:
            created.append(repository.create(payload))
        except Exception as exc:
            logger.warning(
                f"Series {series_id or '-'}: saving day {orders[i]} failed after "
                f"{len(created)} session(s): {exc}"
            )
            raise PartialSeriesFailure(
                series_id,
                succeeded_orders=orders[:i],
                failed_order=orders[i],
                pending_orders=orders[i + 1:],
            ) from exc
    logger.info(f"Saved {len(created)} session(s)" + (f" for series {series_id}" if series_id else ""))
    return created
