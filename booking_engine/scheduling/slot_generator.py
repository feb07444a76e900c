"""Canonical grid of candidate start times for a business day."""

from datetime import time
from typing import Optional

from booking_engine.schemas.scheduling_schema import BusinessHours

DEFAULT_GRANULARITY_MINUTES = 60


class SlotGenerator:
    """Produces start times covering ``[start_hour, end_hour)`` at a fixed step."""

    def __init__(
        self,
        hours: BusinessHours,
        granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES,
    ) -> None:
        self.hours = hours
        self.granularity_minutes = granularity_minutes

    def generate_day_slots(self, granularity_minutes: Optional[int] = None) -> tuple[time, ...]:
        """Ascending start times for one day.

        Returns a tuple so the grid can be iterated any number of times.
        """
        step = self.granularity_minutes if granularity_minutes is None else granularity_minutes
        if step <= 0:
            raise ValueError(f"granularity_minutes must be > 0, got {step}")

        start_min = self.hours.start_hour * 60
        end_min = self.hours.end_hour * 60
        return tuple(
            time(hour=t // 60, minute=t % 60) for t in range(start_min, end_min, step)
        )
