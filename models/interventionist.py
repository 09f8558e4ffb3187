"""Data model for an interventionist (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, field_validator

from models.timeslot import AvailabilityBlock, TimeBlock
from scheduling.time_utils import WeekDay


class Interventionist(BaseModel):
    """A reading/math specialist whose weekly availability gates placement."""

    id: str
    name: str                                     # "Rivera, Ana"
    email: Optional[str] = None
    color: str = "#6366f1"                        # calendar colour
    availability: list[AvailabilityBlock] = []    # empty = no restriction declared

    @field_validator("id")
    @classmethod
    def normalize_id(cls, v: str) -> str:
        return v.strip()

    @property
    def has_declared_availability(self) -> bool:
        return len(self.availability) > 0

    def blocks_for(self, day: WeekDay) -> list[TimeBlock]:
        """Availability blocks for one day, sorted by start time."""
        blocks = [
            TimeBlock(start_time=b.start_time, end_time=b.end_time)
            for b in self.availability
            if b.applies_to(day)
        ]
        return sorted(blocks, key=lambda b: b.start_minutes)
