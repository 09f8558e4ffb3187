"""Distribution of lesson sections across the days of a multi-day lesson."""

from typing import Iterable, Optional

from config.defaults import DEFAULT_2_DAY, DEFAULT_3_DAY, LESSON_COMPONENTS
from models.lesson_plan import LessonPlan, LessonSection
from scheduling.errors import ValidationError


def default_day_assignments(days: int) -> dict[str, int]:
    """component → day for a lesson spread over ``days`` days.

    Two and three days use the fixed front-loaded tables; any other count puts
    every component on day 1.
    """
    if days == 2:
        return dict(DEFAULT_2_DAY)
    if days == 3:
        return dict(DEFAULT_3_DAY)
    return {component: 1 for component in LESSON_COMPONENTS}


def validate_day_assignments(plan: LessonPlan) -> None:
    problems = [
        f"Section '{s.name or s.component}' is assigned to day {s.day}, "
        f"but the lesson has {plan.days} day(s)."
        for s in plan.sections
        if s.day is not None and not 1 <= s.day <= plan.days
    ]
    if problems:
        raise ValidationError(problems)


def assign_default_days(plan: LessonPlan, overwrite: bool = False) -> LessonPlan:
    """Returns a copy with default days filled in.

    Sections that already carry a day keep it unless ``overwrite`` is set.
    Components missing from the table land on day 1.
    """
    table = default_day_assignments(plan.days)
    sections = [
        s if (s.day is not None and not overwrite)
        else s.model_copy(update={"day": table.get(s.component, 1)})
        for s in plan.sections
    ]
    return plan.model_copy(update={"sections": sections})


def sections_for_day(plan: LessonPlan, day: int) -> list[LessonSection]:
    """Sections taught on ``day`` (1-based); unassigned sections belong to day 1."""
    validate_day_assignments(plan)
    if not 1 <= day <= plan.days:
        raise ValidationError(f"Day {day} is outside 1..{plan.days}")
    return [s for s in plan.sections if s.assigned_day == day]


def split_lesson_plan(plan: LessonPlan) -> list[LessonPlan]:
    """One single-day plan per lesson day, in day order.

    Every section appears in exactly one of the returned plans.
    """
    validate_day_assignments(plan)
    return [
        LessonPlan(
            title=plan.title,
            days=1,
            sections=[s for s in plan.sections if s.assigned_day == day],
        )
        for day in range(1, plan.days + 1)
    ]


def build_lesson_plan(
    title: str,
    days: int = 1,
    components: Optional[Iterable[str]] = None,
) -> LessonPlan:
    """Lesson plan from the standard components, with default day assignments."""
    chosen = list(components) if components is not None else list(LESSON_COMPONENTS)
    unknown = [c for c in chosen if c not in LESSON_COMPONENTS]
    if unknown:
        raise ValidationError(f"Unknown lesson component(s): {', '.join(unknown)}")
    table = default_day_assignments(days)
    sections = []
    for component in chosen:
        name, duration = LESSON_COMPONENTS[component]
        sections.append(LessonSection(
            component=component,
            name=name,
            duration=duration,
            day=table.get(component, 1) if days > 1 else None,
        ))
    return LessonPlan(title=title, days=days, sections=sections)
