from config.schema import (
    DataPaths,
    GridConfig,
    PlannerConfig,
    SeriesConfig,
    SuggestionConfig,
)
from models.constraint import ConstraintType


def default_grid() -> GridConfig:
    """Standard planning grid of an elementary school.

    Slots every 30 minutes from 07:00 to 17:00 (both inclusive):
    07:00, 07:30, ..., 16:30, 17:00 → 21 slots per day.
    Sessions default to 30 minutes, i.e. exactly one grid cell.
    """
    return GridConfig(
        start_hour=7,
        end_hour=17,
        step_minutes=30,
        default_duration_minutes=30,
    )


def default_planner_config() -> PlannerConfig:
    """Complete default configuration (used by `main.py setup`)."""
    return PlannerConfig(
        school_name="Sample Elementary",
        grid=default_grid(),
        series=SeriesConfig(),
        suggestions=SuggestionConfig(),
        data=DataPaths(),
    )


# ─── Constraint presets ───
# Quick-add entries for the most common blackout periods. Grades and days are
# chosen when the preset is applied.

CONSTRAINT_PRESETS: dict[str, dict] = {
    "lunch_early": {
        "label": "Lunch (Early)",
        "type": ConstraintType.LUNCH,
        "start_time": "11:00",
        "end_time": "11:30",
    },
    "lunch_mid": {
        "label": "Lunch (Mid)",
        "type": ConstraintType.LUNCH,
        "start_time": "11:30",
        "end_time": "12:00",
    },
    "lunch_late": {
        "label": "Lunch (Late)",
        "type": ConstraintType.LUNCH,
        "start_time": "12:00",
        "end_time": "12:30",
    },
    "core_reading": {
        "label": "Core Reading Block",
        "type": ConstraintType.CORE_INSTRUCTION,
        "start_time": "09:00",
        "end_time": "10:30",
    },
    "core_math": {
        "label": "Core Math Block",
        "type": ConstraintType.CORE_INSTRUCTION,
        "start_time": "10:30",
        "end_time": "11:30",
    },
    "specials": {
        "label": "Specials (Art/Music/PE)",
        "type": ConstraintType.SPECIALS,
        "start_time": "13:00",
        "end_time": "13:45",
    },
}


# ─── Lesson components ───
# component → (display name, minutes), in lesson order

LESSON_COMPONENTS: dict[str, tuple[str, int]] = {
    "sounds-quick-drill": ("Sound Cards - Quick Drill", 2),
    "teach-review-reading": ("Teach/Review - New Learning for Reading", 10),
    "word-cards": ("Word Cards", 3),
    "wordlist-reading": ("Wordlist Reading", 5),
    "sentence-reading": ("Sentence Reading", 5),
    "quick-drill-reverse": ("Quick Drill - Reverse (Sounds to Letters)", 2),
    "teach-review-spelling": ("Teach/Review - New Learning for Spelling", 10),
    "dictation": ("Dictation", 8),
    "passage-reading": ("Passage/Story Reading", 10),
    "listening-comprehension": ("Listening Comprehension", 5),
}

# Front-loaded distribution: decoding work first, connected text last
DEFAULT_2_DAY: dict[str, int] = {
    "sounds-quick-drill": 1, "teach-review-reading": 1, "word-cards": 1,
    "wordlist-reading": 1, "sentence-reading": 1,
    "quick-drill-reverse": 1, "teach-review-spelling": 1, "dictation": 1,
    "passage-reading": 2, "listening-comprehension": 2,
}

DEFAULT_3_DAY: dict[str, int] = {
    "sounds-quick-drill": 1, "teach-review-reading": 1, "word-cards": 1,
    "wordlist-reading": 1, "sentence-reading": 1,
    "quick-drill-reverse": 2, "teach-review-spelling": 2, "dictation": 2,
    "passage-reading": 3, "listening-comprehension": 3,
}
