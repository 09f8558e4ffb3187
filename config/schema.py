from pydantic import BaseModel, Field, model_validator
from typing import Optional
from enum import Enum


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


# ─── PLANNING GRID ───

class GridConfig(BaseModel):
    """Weekly planning grid shown to interventionists.

    The grid defines:
    - the first and last slot of the day (whole hours, last slot inclusive)
    - the slot step in minutes
    - the default session length used for placement checks
    """
    # First slot of the day, e.g. 7 → "07:00"
    start_hour: int = Field(7, ge=0, le=23,
        description="First grid hour")
    # Last slot of the day (inclusive), e.g. 17 → "17:00"
    end_hour: int = Field(17, ge=1, le=23,
        description="Last grid hour (inclusive)")
    # Distance between two slots in minutes
    step_minutes: int = Field(30, ge=5, le=120,
        description="Slot step in minutes")
    # Session length used when no duration is given
    default_duration_minutes: int = Field(30, ge=5, le=240,
        description="Default session length in minutes")

    @model_validator(mode='after')
    def validate_hours(self):
        """Start hour must come before end hour."""
        if self.start_hour >= self.end_hour:
            raise ValueError(
                f"start_hour ({self.start_hour}) must be before end_hour ({self.end_hour})")
        return self


# ─── SERIES ───

class SeriesConfig(BaseModel):
    """Defaults for multi-day session series."""
    # Skip Saturdays and Sundays when laying out consecutive days
    skip_weekends: bool = Field(True,
        description="Skip weekend dates in a series")
    # Repeat practice items and anticipated errors on every day
    repeat_activities: bool = Field(True,
        description="Carry practice content to every day of a series")
    # Upper bound for a single planning action
    max_days: int = Field(10, ge=1, le=30,
        description="Maximum number of days in one series")


# ─── SUGGESTIONS ───

class SuggestionConfig(BaseModel):
    """Ranking of suggested time slots."""
    # Spacing between candidate start times
    interval_minutes: int = Field(15, ge=5, le=60,
        description="Candidate start-time interval")
    # Number of ranked candidates returned
    max_results: int = Field(20, ge=1, le=200,
        description="Number of suggestions returned")
    # Score penalty for every conflict a slot carries
    conflict_penalty: int = Field(10, ge=1,
        description="Score added per conflict")


# ─── DATA FILES ───

class DataPaths(BaseModel):
    """JSON files the CLI reads and writes."""
    # Schedule constraints (schoolwide and personal)
    constraints_file: str = Field("data/constraints.json")
    # Planned sessions
    sessions_file: str = Field("data/sessions.json")
    # Interventionists with availability blocks
    interventionists_file: str = Field("data/interventionists.json")


class PlannerConfig(BaseModel):
    """Overall planner configuration."""
    # School name shown in headers
    school_name: str = Field("Sample Elementary",
        description="Name of the school")
    # Planning grid (hours, step, default duration)
    grid: GridConfig = Field(default_factory=GridConfig)
    # Multi-day series defaults
    series: SeriesConfig = Field(default_factory=SeriesConfig)
    # Slot suggestion ranking
    suggestions: SuggestionConfig = Field(default_factory=SuggestionConfig)
    # Data file locations
    data: DataPaths = Field(default_factory=DataPaths)
    # Log level for the CLI (overridden by --verbose)
    log_level: LogLevel = Field(LogLevel.INFO)
    # Actor used by the CLI when --user is not given
    default_actor: Optional[str] = Field(None,
        description="Default actor id for CLI commands")
