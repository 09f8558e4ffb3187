"""Configuration manager: load, save and validate the planner configuration.

Uses ruamel.yaml for YAML serialization with comments.
"""

import json
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.schema import PlannerConfig

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── YAML COMMENTS ───

def _yaml_header() -> str:
    return (
        "# ============================================\n"
        "# Intervention session planner - configuration\n"
        f"# Created: {date.today().isoformat()}\n"
        "# ============================================\n"
    )


_SECTION_COMMENTS = {
    "grid": (
        "Planning grid",
        "Slots from start_hour to end_hour (inclusive) every step_minutes.",
    ),
    "series": (
        "Multi-day series",
        None,
    ),
    "suggestions": (
        "Slot suggestions",
        "Score = time-of-day preference + conflict_penalty per conflict (lower is better).",
    ),
    "data": (
        "Data files",
        None,
    ),
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "planner_config.yaml"

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path else self.DEFAULT_CONFIG

    def first_run_check(self) -> bool:
        """True if no configuration exists yet (first run)."""
        return not self.path.exists()

    # ─── Loading ───

    def load(self, path: Optional[Path] = None) -> PlannerConfig:
        """Loads the YAML config and validates it via Pydantic."""
        target = Path(path) if path else self.path
        if not target.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {target}\n"
                f"Run 'python main.py setup' to set up the planner."
            )
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        try:
            return PlannerConfig.model_validate(dict(raw or {}))
        except PydanticValidationError as e:
            raise ValueError(
                f"Invalid configuration file: {target}\n"
                f"Pydantic error: {e}"
            ) from e

    # ─── Saving ───

    def save(self, config: PlannerConfig, path: Optional[Path] = None, quiet: bool = False) -> None:
        """Writes the config as commented YAML."""
        target = Path(path) if path else self.path
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_yaml_header() + "\n")
            yaml.dump(data, f)

        if not quiet:
            console.print(f"[green]✓[/green] Configuration saved: {target}")

    def _build_commented_yaml(self, config: PlannerConfig) -> CommentedMap:
        """Builds the YAML structure including section comments."""
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )

        grid_map = CommentedMap(cm["grid"])
        grid_map.yaml_add_eol_comment("inclusive", "end_hour")
        cm["grid"] = grid_map

        return cm
