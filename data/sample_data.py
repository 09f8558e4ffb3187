"""Sample data generator for the session planner.

Builds a small, reproducible school week through the engine itself:

  1. Schoolwide lunch/specials constraints created by an admin
  2. Personal core-block constraints created by interventionists
  3. Interventionists with realistic availability (one without any, i.e. open)
  4. A week of single sessions placed only where the placement check accepts
  5. One three-day lesson series that runs over a weekend

Choices depend only on the seed; generated ids are random UUIDs.
"""

import datetime as dt
import random
from datetime import timedelta
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel

from config.defaults import CONSTRAINT_PRESETS
from config.schema import PlannerConfig
from models.actor import Role
from models.constraint import ConstraintDraft, ConstraintScope, PersonalConstraint, SchoolwideConstraint
from models.interventionist import Interventionist
from models.session import PracticeItem, Session
from models.timeslot import AvailabilityBlock
from scheduling.availability import AvailabilityResolver
from scheduling.constraint_store import ConstraintStore
from scheduling.lesson_split import build_lesson_plan
from scheduling.placement import PlacementValidator
from scheduling.repositories import (
    InMemorySessionRepository,
    JsonConstraintRepository,
    JsonSessionRepository,
    save_interventionists,
)
from scheduling.series import SeriesGenerator, SeriesRequest, emit_series
from scheduling.time_utils import WEEKDAYS, generate_slots, week_dates

ADMIN_ID = "admin"

# ─── Name lists ───────────────────────────────────────────────────────────────

_FIRST_NAMES = [
    "Ana", "Ben", "Carla", "Dev", "Elena", "Femi", "Grace", "Hiro",
    "Imani", "Jonah", "Keiko", "Luis", "Maya", "Noah", "Priya", "Sam",
]

_LAST_NAMES = [
    "Rivera", "Okafor", "Nguyen", "Schmidt", "Patel", "Kowalski",
    "Haddad", "Johnson", "Tanaka", "Moreau", "Silva", "Brooks",
]

_COLORS = ["#6366f1", "#ec4899", "#14b8a6", "#f59e0b", "#8b5cf6", "#0ea5e9"]

_PRACTICE_WORDS = ["cat", "ship", "thin", "chop", "bath", "fish", "mask", "when"]

# (display name of the availability pattern, blocks)
_AVAILABILITY_PATTERNS: list[tuple[str, list[dict]]] = [
    ("mornings", [
        {"start_time": "08:00", "end_time": "12:00", "days": list(WEEKDAYS)},
    ]),
    ("split day", [
        {"start_time": "08:30", "end_time": "11:00", "days": list(WEEKDAYS)},
        {"start_time": "13:00", "end_time": "15:30", "days": list(WEEKDAYS)},
    ]),
    ("part time", [
        {"start_time": "09:00", "end_time": "14:00", "days": list(WEEKDAYS[:3])},
    ]),
    ("open", []),   # no declared availability → available at all times
]


class SampleData(BaseModel):
    interventionists: list[Interventionist]
    constraints: list[Union[SchoolwideConstraint, PersonalConstraint]]
    sessions: list[Session]
    week_of: dt.date

    def summary(self) -> str:
        series = {s.series_id for s in self.sessions if s.series_id}
        schoolwide = sum(1 for c in self.constraints if c.scope == ConstraintScope.SCHOOLWIDE)
        return "\n".join([
            f"Week of {self.week_of.isoformat()}",
            f"Interventionists: {len(self.interventionists)}",
            f"Constraints: {len(self.constraints)} "
            f"({schoolwide} schoolwide, {len(self.constraints) - schoolwide} personal)",
            f"Sessions: {len(self.sessions)} ({len(series)} series)",
        ])


class SampleDataGenerator:
    """Generates sample data based on the PlannerConfig."""

    def __init__(self, config: PlannerConfig, seed: Optional[int] = None) -> None:
        self.config = config
        self.rng = random.Random(seed)

    # ─── Constraints ──────────────────────────────────────────────────────────

    def _generate_constraints(self, store: ConstraintStore, staff: list[Interventionist]) -> None:
        # Staggered lunches: K-2 early, 3-5 mid, 6-8 late
        for preset, grades in (("lunch_early", [0, 1, 2]),
                               ("lunch_mid", [3, 4, 5]),
                               ("lunch_late", [6, 7, 8])):
            store.create(
                ConstraintDraft(scope=ConstraintScope.SCHOOLWIDE, applicable_grades=grades,
                                days=list(WEEKDAYS), **CONSTRAINT_PRESETS[preset]),
                actor_id=ADMIN_ID, role=Role.ADMIN,
            )
        specials_days = self.rng.sample(WEEKDAYS, 2)
        store.create(
            ConstraintDraft(scope=ConstraintScope.SCHOOLWIDE, applicable_grades=list(range(0, 9)),
                            days=[d for d in WEEKDAYS if d in specials_days],
                            **CONSTRAINT_PRESETS["specials"]),
            actor_id=ADMIN_ID, role=Role.ADMIN,
        )
        for person in staff[:2]:
            preset = self.rng.choice(["core_reading", "core_math"])
            store.create(
                ConstraintDraft(applicable_grades=sorted(self.rng.sample(range(0, 9), 3)),
                                days=list(WEEKDAYS), **CONSTRAINT_PRESETS[preset]),
                actor_id=person.id, role=Role.INTERVENTIONIST,
            )

    # ─── Interventionists ─────────────────────────────────────────────────────

    def _generate_interventionists(self) -> list[Interventionist]:
        firsts = self.rng.sample(_FIRST_NAMES, len(_AVAILABILITY_PATTERNS))
        lasts = self.rng.sample(_LAST_NAMES, len(_AVAILABILITY_PATTERNS))
        staff = []
        for i, (_, blocks) in enumerate(_AVAILABILITY_PATTERNS):
            staff.append(Interventionist(
                id=f"int-{i + 1}",
                name=f"{lasts[i]}, {firsts[i]}",
                email=f"{firsts[i].lower()}.{lasts[i].lower()}@school.example",
                color=_COLORS[i % len(_COLORS)],
                availability=[AvailabilityBlock(**b) for b in blocks],
            ))
        return staff

    # ─── Sessions ─────────────────────────────────────────────────────────────

    def _place_sessions(
        self,
        validator: PlacementValidator,
        repo: InMemorySessionRepository,
        staff: list[Interventionist],
        week: dict,
        per_person: int = 4,
    ) -> None:
        grid = self.config.grid
        slots = generate_slots(grid.start_hour, grid.end_hour, grid.step_minutes)
        for person in staff:
            grade = self.rng.randint(0, 8)
            placed, attempts = 0, 0
            while placed < per_person and attempts < 50:
                attempts += 1
                day = self.rng.choice(WEEKDAYS)
                time = self.rng.choice(slots)
                verdict = validator.validate(week[day], time, grid.default_duration_minutes,
                                             [grade], person)
                if not verdict.accepted:
                    continue
                repo.create(SeriesGenerator().generate(SeriesRequest(
                    start_date=week[day],
                    time=time,
                    group_id=f"{person.id}-g{grade}",
                    planned_otr_target=self.rng.choice([20, 30, 40]),
                    notes=f"Grade {grade if grade else 'K'} group",
                ))[0])
                placed += 1

    def _generate_series(self, repo: InMemorySessionRepository, monday: dt.date) -> None:
        plan = build_lesson_plan("1.1: Closed syllables", days=3)
        words = self.rng.sample(_PRACTICE_WORDS, 3)
        payloads = SeriesGenerator().generate(SeriesRequest(
            start_date=monday + timedelta(days=3),    # Thursday, Friday, then Monday
            time="08:00",
            number_of_days=3,
            skip_weekends=self.config.series.skip_weekends,
            group_id="series-demo",
            curriculum_position="1.1",
            planned_practice_items=[PracticeItem(item=w, type="new") for w in words],
            notes="Wilson lesson",
            lesson_plan=plan,
        ))
        emit_series(payloads, repo)

    # ─── Entry point ──────────────────────────────────────────────────────────

    def generate(self, week_of: Optional[dt.date] = None) -> SampleData:
        """Builds the complete sample dataset for the week containing ``week_of``."""
        week = week_dates(week_of or dt.date.today())
        staff = self._generate_interventionists()
        store = ConstraintStore()
        self._generate_constraints(store, staff)

        repo = InMemorySessionRepository()
        validator = PlacementValidator(AvailabilityResolver(store), repo)
        self._generate_series(repo, week[WEEKDAYS[0]])
        self._place_sessions(validator, repo, staff, week)

        return SampleData(
            interventionists=staff,
            constraints=store.all(),
            sessions=repo.list_sessions(),
            week_of=week[WEEKDAYS[0]],
        )

    def save(self, data: SampleData) -> list[Path]:
        """Writes the dataset to the data files named in the config."""
        paths = self.config.data
        JsonConstraintRepository(Path(paths.constraints_file)).save_all(data.constraints)
        sessions_path = Path(paths.sessions_file)
        JsonSessionRepository(sessions_path).save_all(data.sessions)
        save_interventionists(Path(paths.interventionists_file), data.interventionists)
        return [Path(paths.constraints_file), sessions_path, Path(paths.interventionists_file)]

    # ─── Output ───────────────────────────────────────────────────────────────

    def print_summary(self, data: SampleData) -> None:
        """Prints a Rich table summarising the generated data."""
        from rich.console import Console
        from rich.table import Table
        from rich import box

        console = Console()
        table = Table(title="Generated sample data", box=box.ROUNDED)
        table.add_column("Category", style="bold cyan")
        table.add_column("Count", justify="right")
        table.add_column("Details")

        open_staff = sum(1 for p in data.interventionists if not p.has_declared_availability)
        schoolwide = sum(1 for c in data.constraints if c.scope == ConstraintScope.SCHOOLWIDE)
        series = {s.series_id for s in data.sessions if s.series_id}
        table.add_row("Interventionists", str(len(data.interventionists)),
                      f"{open_staff} without declared availability")
        table.add_row("Constraints", str(len(data.constraints)),
                      f"{schoolwide} schoolwide, {len(data.constraints) - schoolwide} personal")
        table.add_row("Sessions", str(len(data.sessions)), f"{len(series)} series")

        console.print(table)
