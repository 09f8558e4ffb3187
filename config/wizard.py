"""Interactive setup wizard for the first run of the session planner.

Walks through the school, planning grid and series defaults.
Press Enter to accept a default value.
"""

from typing import Optional

from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table
from rich import box

from config.schema import GridConfig, PlannerConfig, SeriesConfig
from config.defaults import default_planner_config
from scheduling.time_utils import generate_slots

console = Console()


def _header(title: str) -> None:
    console.print()
    console.print(Panel(f"[bold cyan]{title}[/bold cyan]", expand=False))


def _info(text: str) -> None:
    console.print(f"[dim]{text}[/dim]")


def _success(text: str) -> None:
    console.print(f"[green]✓[/green] {text}")


def _warn(text: str) -> None:
    console.print(f"[yellow]⚠[/yellow]  {text}")


def show_grid_table(grid: GridConfig) -> None:
    """Prints the grid's slot times as a compact rich table."""
    slots = generate_slots(grid.start_hour, grid.end_hour, grid.step_minutes)
    table = Table(title="Planning grid", box=box.ROUNDED)
    table.add_column("First slot")
    table.add_column("Last slot")
    table.add_column("Step")
    table.add_column("Slots/day", justify="right")
    table.add_column("Session length")
    table.add_row(
        slots[0], slots[-1], f"{grid.step_minutes} min", str(len(slots)),
        f"{grid.default_duration_minutes} min",
    )
    console.print(table)


def _wizard_grid(defaults: GridConfig) -> GridConfig:
    _header("Step 2: Planning grid")
    _info("Slots run from the first to the last hour, both inclusive.")
    show_grid_table(defaults)

    if Confirm.ask("Use the standard grid?", default=True):
        return defaults

    while True:
        start = IntPrompt.ask("First hour", default=defaults.start_hour)
        end = IntPrompt.ask("Last hour", default=defaults.end_hour)
        step = IntPrompt.ask("Step (minutes)", default=defaults.step_minutes)
        duration = IntPrompt.ask("Default session length (minutes)",
                                 default=defaults.default_duration_minutes)
        try:
            grid = GridConfig(start_hour=start, end_hour=end, step_minutes=step,
                              default_duration_minutes=duration)
        except PydanticValidationError as e:
            _warn(f"Invalid grid: {e.errors()[0]['msg']}")
            continue
        show_grid_table(grid)
        return grid


def _wizard_series(defaults: SeriesConfig) -> SeriesConfig:
    _header("Step 3: Multi-day series")
    skip = Confirm.ask("Skip weekends when planning consecutive days?",
                       default=defaults.skip_weekends)
    repeat = Confirm.ask("Repeat practice items on every day of a series?",
                         default=defaults.repeat_activities)
    max_days = IntPrompt.ask("Maximum days per series", default=defaults.max_days)
    return SeriesConfig(skip_weekends=skip, repeat_activities=repeat, max_days=max_days)


def run_wizard() -> Optional[PlannerConfig]:
    """Runs the interactive setup.

    Returns:
        The finished PlannerConfig, or None if the user cancels.
    """
    defaults = default_planner_config()
    console.print()
    console.print(Panel(
        "[bold]Welcome to the intervention session planner![/bold]\n\n"
        "The wizard sets up the school, the weekly planning grid and\n"
        "the defaults for multi-day session series.\n"
        "[dim]Press Enter to accept a default value.[/dim]",
        title="[bold cyan]Session planner setup[/bold cyan]",
        border_style="cyan",
    ))

    if not Confirm.ask("\nSet up the school now?", default=True):
        console.print("[yellow]Setup cancelled.[/yellow]")
        return None

    try:
        _header("Step 1: School")
        name = Prompt.ask("School name", default=defaults.school_name)
        grid = _wizard_grid(defaults.grid)
        series = _wizard_series(defaults.series)
    except KeyboardInterrupt:
        console.print("\n[yellow]Wizard cancelled.[/yellow]")
        return None

    config = defaults.model_copy(update={"school_name": name, "grid": grid, "series": series})
    if not Confirm.ask("\nSave configuration?", default=True):
        console.print("[yellow]Configuration not saved.[/yellow]")
        return None
    _success("Saving configuration...")
    return config
