"""Intervention session planner: main CLI.

Usage:
  python main.py setup                          First-run setup (wizard)
  python main.py config show                    Show configuration
  python main.py constraints list               List constraints
  python main.py constraints add ...            Add a constraint (or --preset)
  python main.py constraints remove <id>        Delete a constraint
  python main.py grid                           Weekly slot grid
  python main.py check <date> <time>            Placement check for one slot
  python main.py suggest                        Ranked slot suggestions
  python main.py plan <date> <time>             Plan a session or series
  python main.py validate                       Check stored sessions
  python main.py generate                       Generate sample data
"""

import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

from scheduling.errors import SchedulingError

console = Console()


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, rich_tracebacks=True)],
        force=True,
    )


def _load_config_or_abort(ctx: click.Context):
    """Loads the configuration or aborts with an error message."""
    from config.manager import ConfigManager
    mgr = ConfigManager(ctx.obj.get("config_path"))
    if mgr.first_run_check():
        console.print(
            "[red]No configuration found.[/red]\n"
            "Run [bold]python main.py setup[/bold] first."
        )
        sys.exit(1)
    try:
        config = mgr.load()
    except ValueError as e:
        console.print(f"[red bold]Configuration error:[/red bold]\n{e}")
        sys.exit(1)
    _configure_logging("DEBUG" if ctx.obj.get("verbose") else config.log_level.value)
    return mgr, config


def _fail(error: Exception) -> None:
    console.print(f"[red bold]Error:[/red bold] {error}")
    sys.exit(1)


def _parse_grades(value: Optional[str]) -> list[int]:
    """Parses "K,1,2" → [0, 1, 2]; "all" → every grade."""
    from scheduling.time_utils import ALL_GRADES
    if not value:
        return []
    if value.strip().lower() == "all":
        return list(ALL_GRADES)
    grades = []
    for part in value.split(","):
        part = part.strip().upper()
        if not part:
            continue
        try:
            grades.append(0 if part == "K" else int(part))
        except ValueError:
            raise click.BadParameter(f"Unknown grade '{part}'", param_hint="--grades")
    return grades


def _parse_days(value: Optional[str]) -> list:
    """Parses "mon,wed" → [MONDAY, WEDNESDAY]; empty → whole week."""
    from scheduling.time_utils import WEEKDAYS
    if not value:
        return list(WEEKDAYS)
    days = []
    for part in value.split(","):
        part = part.strip().lower()
        match = [d for d in WEEKDAYS if d.value.startswith(part)] if len(part) >= 2 else []
        if len(match) != 1:
            raise click.BadParameter(f"Unknown day '{part}'", param_hint="--days")
        days.append(match[0])
    return days


def _constraint_store(config):
    from scheduling.constraint_store import ConstraintStore
    from scheduling.repositories import JsonConstraintRepository
    return ConstraintStore(JsonConstraintRepository(Path(config.data.constraints_file)))


def _session_repo(config):
    from scheduling.repositories import JsonSessionRepository
    return JsonSessionRepository(Path(config.data.sessions_file))


def _find_interventionist(config, interventionist_id: Optional[str]):
    """The interventionist with that id, or None when no id was given."""
    from scheduling.repositories import load_interventionists
    if not interventionist_id:
        return None
    try:
        staff = load_interventionists(Path(config.data.interventionists_file))
    except FileNotFoundError as e:
        console.print(
            f"[red]{e}[/red]\n"
            "Use [bold]python main.py generate --save[/bold] to create sample data."
        )
        sys.exit(1)
    for person in staff:
        if person.id == interventionist_id:
            return person
    console.print(f"[red]Unknown interventionist: {interventionist_id}[/red]")
    sys.exit(1)


# ─── SETUP ────────────────────────────────────────────────────────────────────

@click.command("setup")
@click.option("--defaults", "use_defaults", is_flag=True, default=False,
              help="Write the default configuration without asking.")
@click.pass_context
def cmd_setup(ctx: click.Context, use_defaults: bool):
    """First-run setup: create the planner configuration."""
    from config.defaults import default_planner_config
    from config.manager import ConfigManager
    from config.wizard import run_wizard

    mgr = ConfigManager(ctx.obj.get("config_path"))
    if not mgr.first_run_check():
        console.print("[yellow]A configuration already exists.[/yellow]")
        if not click.confirm("Set up again anyway?", default=False):
            return

    config = default_planner_config() if use_defaults else run_wizard()
    if config is not None:
        mgr.save(config)
        console.print("[bold green]Setup complete![/bold green]")
        console.print("Run [bold]python main.py generate --save[/bold] for sample data.")


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Show the configuration."""


@cmd_config.command("show")
@click.pass_context
def config_show(ctx: click.Context):
    """Shows the current configuration."""
    from config.wizard import show_grid_table

    mgr, config = _load_config_or_abort(ctx)
    console.print(Panel(
        f"[bold]{config.school_name}[/bold]  |  log level {config.log_level.value}",
        title="Planner configuration",
        border_style="cyan",
    ))
    show_grid_table(config.grid)

    sc = config.series
    console.print(
        f"\n[bold]Series:[/bold] skip weekends {'yes' if sc.skip_weekends else 'no'} | "
        f"repeat activities {'yes' if sc.repeat_activities else 'no'} | "
        f"max {sc.max_days} days"
    )
    sg = config.suggestions
    console.print(
        f"[bold]Suggestions:[/bold] every {sg.interval_minutes} min | "
        f"top {sg.max_results} | +{sg.conflict_penalty} per conflict"
    )
    table = Table(title="Data files", box=box.SIMPLE)
    table.add_column("Kind", style="bold")
    table.add_column("Path")
    table.add_column("Exists")
    for kind, path in config.data.model_dump().items():
        exists = Path(path).exists()
        table.add_row(kind, path, "[green]yes[/green]" if exists else "[dim]no[/dim]")
    console.print(table)


# ─── CONSTRAINTS ──────────────────────────────────────────────────────────────

@click.group("constraints")
def cmd_constraints():
    """Manage schoolwide and personal schedule constraints."""


@cmd_constraints.command("list")
@click.option("--grades", "-g", default=None, help="Only constraints relevant to these grades (e.g. K,1,2).")
@click.pass_context
def constraints_list(ctx: click.Context, grades: Optional[str]):
    """Lists constraints (schoolwide first)."""
    from scheduling.time_utils import day_short_name

    mgr, config = _load_config_or_abort(ctx)
    store = _constraint_store(config)
    constraints = store.visible_constraints(_parse_grades(grades))
    if not constraints:
        console.print("[dim]No constraints.[/dim]")
        return

    table = Table(title="Schedule constraints", box=box.ROUNDED)
    table.add_column("ID", style="dim", max_width=10)
    table.add_column("Label", style="bold")
    table.add_column("Scope")
    table.add_column("Grades")
    table.add_column("Days")
    table.add_column("Time")
    table.add_column("Created by")
    for c in constraints:
        info = store.display_info(c)
        scope_color = "magenta" if c.scope == "schoolwide" else "cyan"
        table.add_row(
            c.id[:8],
            info.label,
            f"[{scope_color}]{c.scope}[/{scope_color}]",
            info.applicable_grades_display,
            ", ".join(day_short_name(d) for d in c.days),
            f"{c.start_time}-{c.end_time}",
            c.created_by,
        )
    console.print(table)


@cmd_constraints.command("add")
@click.option("--preset", type=click.Choice(["lunch_early", "lunch_mid", "lunch_late",
                                             "core_reading", "core_math", "specials"]),
              default=None, help="Fill label, type and times from a preset.")
@click.option("--label", default=None)
@click.option("--type", "ctype", default=None,
              type=click.Choice(["lunch", "core_instruction", "specials", "therapy", "other"]))
@click.option("--grades", "-g", required=True, help="Grades, e.g. K,1,2 or all.")
@click.option("--days", "-d", default=None, help="Days, e.g. mon,wed (default: whole week).")
@click.option("--start", default=None, help="Start time HH:MM.")
@click.option("--end", default=None, help="End time HH:MM.")
@click.option("--scope", type=click.Choice(["schoolwide", "personal"]), default=None,
              help="Default: schoolwide for admins, personal otherwise.")
@click.option("--user", "actor_id", default=None, help="Acting user id.")
@click.option("--role", type=click.Choice(["admin", "interventionist", "teacher"]),
              default="interventionist")
@click.pass_context
def constraints_add(ctx: click.Context, preset, label, ctype, grades, days, start, end,
                    scope, actor_id, role):
    """Creates a new constraint."""
    from config.defaults import CONSTRAINT_PRESETS
    from models.constraint import ConstraintDraft

    mgr, config = _load_config_or_abort(ctx)
    fields = dict(CONSTRAINT_PRESETS[preset]) if preset else {}
    overrides = {"label": label, "type": ctype, "start_time": start, "end_time": end}
    fields.update({k: v for k, v in overrides.items() if v is not None})

    draft = ConstraintDraft(
        scope=scope,
        applicable_grades=_parse_grades(grades),
        days=_parse_days(days),
        **fields,
    )
    store = _constraint_store(config)
    try:
        constraint = store.create(draft, actor_id or config.default_actor or "cli", role)
    except SchedulingError as e:
        _fail(e)
    console.print(
        f"[green]✓[/green] Constraint created: [bold]{constraint.label}[/bold] "
        f"({constraint.scope}, {constraint.grades_display}) [dim]{constraint.id}[/dim]"
    )


@cmd_constraints.command("remove")
@click.argument("constraint_id")
@click.option("--user", "actor_id", default=None, help="Acting user id.")
@click.option("--role", type=click.Choice(["admin", "interventionist", "teacher"]),
              default="interventionist")
@click.pass_context
def constraints_remove(ctx: click.Context, constraint_id: str, actor_id, role):
    """Deletes a constraint (creator or admin only). Accepts an id prefix."""
    mgr, config = _load_config_or_abort(ctx)
    store = _constraint_store(config)
    matches = [c for c in store.all() if c.id.startswith(constraint_id)]
    if len(matches) == 1:
        constraint_id = matches[0].id
    try:
        store.delete(constraint_id, actor_id or config.default_actor or "cli", role)
    except (SchedulingError, LookupError) as e:
        _fail(e)
    console.print("[green]✓[/green] Constraint deleted.")


# ─── GRID ─────────────────────────────────────────────────────────────────────

@click.command("grid")
@click.option("--interventionist", "-i", "interventionist_id", default=None)
@click.option("--grades", "-g", default=None, help="Grades in view, e.g. 3,4.")
@click.option("--duration", type=int, default=None, help="Session length in minutes.")
@click.pass_context
def cmd_grid(ctx: click.Context, interventionist_id, grades, duration):
    """Shows the weekly slot grid (✓ free, ✗ blocked, · unavailable)."""
    from scheduling.availability import AvailabilityResolver
    from scheduling.time_utils import WEEKDAYS, day_short_name, generate_slots

    mgr, config = _load_config_or_abort(ctx)
    person = _find_interventionist(config, interventionist_id)
    resolver = AvailabilityResolver(_constraint_store(config))
    g = config.grid
    grid = resolver.slot_grid(
        person, WEEKDAYS, _parse_grades(grades),
        start_hour=g.start_hour, end_hour=g.end_hour, step_minutes=g.step_minutes,
        duration_minutes=duration or g.default_duration_minutes,
    )
    cells = {(s.day, s.time): s for s in grid}

    title = f"Week grid{f' – {person.name}' if person else ''}"
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Time", style="bold")
    for day in WEEKDAYS:
        table.add_column(day_short_name(day), justify="center")
    for time in generate_slots(g.start_hour, g.end_hour, g.step_minutes):
        row = [time]
        for day in WEEKDAYS:
            s = cells[(day, time)]
            if s.blocked:
                row.append(f"[red]✗ {s.constraint_label}[/red]")
            elif not s.available:
                row.append("[dim]·[/dim]")
            else:
                row.append("[green]✓[/green]")
        table.add_row(*row)
    console.print(table)


# ─── CHECK ────────────────────────────────────────────────────────────────────

@click.command("check")
@click.argument("day", metavar="DATE")
@click.argument("time")
@click.option("--duration", type=int, default=None, help="Session length in minutes.")
@click.option("--grades", "-g", default=None)
@click.option("--interventionist", "-i", "interventionist_id", default=None)
@click.pass_context
def cmd_check(ctx: click.Context, day: str, time: str, duration, grades, interventionist_id):
    """Checks whether a session may be placed at DATE (YYYY-MM-DD) TIME (HH:MM)."""
    from scheduling.availability import AvailabilityResolver
    from scheduling.placement import PlacementValidator

    mgr, config = _load_config_or_abort(ctx)
    person = _find_interventionist(config, interventionist_id)
    validator = PlacementValidator(AvailabilityResolver(_constraint_store(config)),
                                   _session_repo(config))
    try:
        verdict = validator.validate(day, time, duration or config.grid.default_duration_minutes,
                                     _parse_grades(grades), person)
    except SchedulingError as e:
        _fail(e)

    if verdict.accepted:
        console.print(f"[bold green]✓ {day} {time} is free.[/bold green]")
    else:
        console.print(f"[bold red]✗ {day} {time} rejected:[/bold red] {verdict.reason}")
        sys.exit(2)


# ─── SUGGEST ──────────────────────────────────────────────────────────────────

@click.command("suggest")
@click.option("--per-week", type=int, default=None,
              help="Pick this many slots spread over the week instead of a ranking.")
@click.option("--duration", type=int, default=None)
@click.option("--grades", "-g", default=None)
@click.option("--days", "-d", default=None, help="Preferred days, e.g. mon,tue.")
@click.option("--interventionist", "-i", "interventionist_id", default=None)
@click.option("--week-of", default=None, help="Only count sessions in the week of this date.")
@click.pass_context
def cmd_suggest(ctx: click.Context, per_week, duration, grades, days, interventionist_id, week_of):
    """Ranks candidate slots (lower score = better)."""
    from scheduling.availability import AvailabilityResolver
    from scheduling.suggestions import SlotSuggester
    from scheduling.time_utils import day_display_name, parse_date

    mgr, config = _load_config_or_abort(ctx)
    person = _find_interventionist(config, interventionist_id)
    sg = config.suggestions
    suggester = SlotSuggester(
        AvailabilityResolver(_constraint_store(config)), _session_repo(config),
        conflict_penalty=sg.conflict_penalty, max_results=sg.max_results,
        interval_minutes=sg.interval_minutes,
    )
    kwargs = dict(
        interventionist=person,
        visible_grades=_parse_grades(grades),
        preferred_days=_parse_days(days),
        start_hour=config.grid.start_hour,
        end_hour=config.grid.end_hour,
    )
    length = duration or config.grid.default_duration_minutes
    try:
        kwargs["week_of"] = parse_date(week_of) if week_of else None
        if per_week:
            slots = suggester.suggest_schedule(per_week, length, **kwargs)
        else:
            slots = suggester.suggest_slots(length, **kwargs)
    except SchedulingError as e:
        _fail(e)

    if not slots:
        console.print("[yellow]No suitable slots found.[/yellow]")
        return
    table = Table(title="Suggested slots", box=box.ROUNDED)
    table.add_column("#", justify="right")
    table.add_column("Day", style="bold")
    table.add_column("Time")
    table.add_column("Score", justify="right")
    table.add_column("Conflicts")
    for i, s in enumerate(slots, start=1):
        conflicts = "; ".join(c.description for c in s.conflicts) or "[green]none[/green]"
        table.add_row(str(i), day_display_name(s.day), f"{s.start_time}-{s.end_time}",
                      str(s.score), conflicts)
    console.print(table)


# ─── PLAN ─────────────────────────────────────────────────────────────────────

@click.command("plan")
@click.argument("start", metavar="DATE")
@click.argument("time")
@click.option("--days", "number_of_days", type=int, default=1, help="Number of consecutive days.")
@click.option("--group", "group_id", default=None)
@click.option("--notes", default=None)
@click.option("--position", "curriculum_position", default=None, help="Curriculum position, e.g. 1.1.")
@click.option("--lesson", "lesson_title", default=None,
              help="Attach a standard lesson plan with this title.")
@click.option("--lesson-days", type=int, default=1, help="Spread the lesson over this many days.")
@click.option("--practice", multiple=True, help="Practice item (repeatable).")
@click.option("--skip-weekends/--keep-weekends", default=None)
@click.option("--repeat/--no-repeat", "repeat_activities", default=None,
              help="Repeat practice items on every day (series without --lesson).")
@click.option("--grades", "-g", default=None, help="Grades for the placement check.")
@click.option("--interventionist", "-i", "interventionist_id", default=None)
@click.option("--dry-run", is_flag=True, default=False, help="Show the series without saving.")
@click.pass_context
def cmd_plan(ctx: click.Context, start, time, number_of_days, group_id, notes,
             curriculum_position, lesson_title, lesson_days, practice, skip_weekends,
             repeat_activities, grades, interventionist_id, dry_run):
    """Plans one session or a multi-day series starting at DATE TIME."""
    from models.session import PracticeItem
    from scheduling.availability import AvailabilityResolver
    from scheduling.lesson_split import build_lesson_plan
    from scheduling.placement import PlacementValidator
    from scheduling.series import SeriesGenerator, SeriesRequest, emit_series
    from scheduling.time_utils import parse_date

    mgr, config = _load_config_or_abort(ctx)
    if number_of_days > config.series.max_days or lesson_days > config.series.max_days:
        _fail(ValueError(f"A series may have at most {config.series.max_days} days"))
    person = _find_interventionist(config, interventionist_id)
    repo = _session_repo(config)

    try:
        request = SeriesRequest(
            start_date=parse_date(start),
            time=time,
            number_of_days=number_of_days,
            skip_weekends=config.series.skip_weekends if skip_weekends is None else skip_weekends,
            repeat_activities=(config.series.repeat_activities
                               if repeat_activities is None else repeat_activities),
            group_id=group_id,
            curriculum_position=curriculum_position,
            planned_practice_items=[PracticeItem(item=p) for p in practice],
            notes=notes,
            lesson_plan=build_lesson_plan(lesson_title, lesson_days) if lesson_title else None,
        )
        payloads = SeriesGenerator().generate(request)
    except SchedulingError as e:
        _fail(e)

    validator = PlacementValidator(AvailabilityResolver(_constraint_store(config)), repo)
    table = Table(title="Planned sessions", box=box.ROUNDED)
    table.add_column("Day", justify="right")
    table.add_column("Date", style="bold")
    table.add_column("Time")
    table.add_column("Sections")
    table.add_column("Check")
    rejected = 0
    for p in payloads:
        verdict = validator.validate(p.date, p.time, config.grid.default_duration_minutes,
                                     _parse_grades(grades), person)
        rejected += 0 if verdict.accepted else 1
        sections = ", ".join(s.name for s in p.lesson_plan.sections) if p.lesson_plan else ""
        table.add_row(
            f"{p.series_order or 1}/{p.series_total or 1}",
            p.date.strftime("%a %Y-%m-%d"),
            p.time,
            sections,
            "[green]ok[/green]" if verdict.accepted else f"[red]{verdict.reason}[/red]",
        )
    console.print(table)

    if rejected:
        console.print(f"[red]{rejected} session(s) cannot be placed; nothing saved.[/red]")
        sys.exit(2)
    if dry_run:
        console.print("[dim]Dry run: nothing saved.[/dim]")
        return
    try:
        created = emit_series(payloads, repo)
    except SchedulingError as e:
        _fail(e)
    console.print(f"[green]✓[/green] {len(created)} session(s) saved: {config.data.sessions_file}")


# ─── VALIDATE ─────────────────────────────────────────────────────────────────

@click.command("validate")
@click.option("--grades", "-g", default=None, help="Also check sessions against constraints for these grades.")
@click.pass_context
def cmd_validate(ctx: click.Context, grades):
    """Checks stored sessions for broken series and conflicts."""
    from analysis.series_validator import SeriesValidator
    from scheduling.availability import AvailabilityResolver

    mgr, config = _load_config_or_abort(ctx)
    p = Path(config.data.sessions_file)
    if not p.exists():
        console.print(
            f"[red]No session file found: {p}[/red]\n"
            "Use [bold]python main.py generate --save[/bold] or plan sessions first."
        )
        sys.exit(1)
    sessions = _session_repo(config).list_sessions()
    resolver = AvailabilityResolver(_constraint_store(config)) if grades else None
    report = SeriesValidator(resolver, config.grid.default_duration_minutes,
                             _parse_grades(grades)).validate(sessions)
    report.print_rich()
    sys.exit(0 if report.is_valid else 1)


# ─── GENERATE ─────────────────────────────────────────────────────────────────

@click.command("generate")
@click.option("--seed", default=42, help="Random seed for reproducible data.")
@click.option("--week-of", default=None, help="Date inside the week to fill (default: today).")
@click.option("--save", is_flag=True, default=False,
              help="Write the data files named in the configuration.")
@click.option("--validate/--no-validate", "run_validate", default=True,
              help="Validate the generated sessions.")
@click.pass_context
def cmd_generate(ctx: click.Context, seed: int, week_of: Optional[str], save: bool,
                 run_validate: bool):
    """Generates sample interventionists, constraints and sessions."""
    from analysis.series_validator import SeriesValidator
    from data.sample_data import SampleDataGenerator
    from scheduling.time_utils import parse_date

    mgr, config = _load_config_or_abort(ctx)
    console.print("[bold]Generating sample data...[/bold]")
    gen = SampleDataGenerator(config, seed=seed)
    try:
        data = gen.generate(parse_date(week_of) if week_of else date.today())
    except SchedulingError as e:
        _fail(e)
    gen.print_summary(data)
    console.print(f"\n[dim]{data.summary()}[/dim]")

    if run_validate:
        SeriesValidator().validate(data.sessions).print_rich()

    if save:
        for path in gen.save(data):
            console.print(f"[green]✓[/green] Saved: {path}")


# ─── MAIN CLI ─────────────────────────────────────────────────────────────────

@click.group()
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None,
              help="Path to the YAML configuration.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug logging.")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool):
    """Intervention session planner.

    Start with: python main.py setup
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose
    _configure_logging("DEBUG" if verbose else "WARNING")


def main():
    """Entry point. Starts the setup wizard automatically on first run."""
    from config.manager import ConfigManager
    mgr = ConfigManager()

    if len(sys.argv) == 1 and mgr.first_run_check():
        console.print(Panel(
            "[bold]Welcome to the intervention session planner![/bold]\n\n"
            "No configuration found.\n"
            "Starting the setup wizard...",
            border_style="cyan",
        ))
        sys.argv.append("setup")

    cli(obj={})


# Register commands
cli.add_command(cmd_setup)
cli.add_command(cmd_config)
cli.add_command(cmd_constraints)
cli.add_command(cmd_grid)
cli.add_command(cmd_check)
cli.add_command(cmd_suggest)
cli.add_command(cmd_plan)
cli.add_command(cmd_validate)
cli.add_command(cmd_generate)


if __name__ == "__main__":
    main()
