"""
Slot availability against already-booked calendar events.

A job starting at ``s`` occupies the calendar for the service itself, a
fixed changeover buffer, and the travel time to the next job:

    occupied = [s, s + service + buffer + travel)

A candidate is unavailable when that window overlaps a booked interval,
or when the service itself (buffer excluded) would run to or past closing.
Every grid point is returned with its verdict; callers decide whether to
filter.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from booking_engine.config import AppConfig, settings
from booking_engine.scheduling.business_rules import BusinessRulesEngine
from booking_engine.scheduling.formatting import format_clock
from booking_engine.scheduling.slot_generator import SlotGenerator
from booking_engine.schemas.scheduling_schema import (
    BookedInterval,
    BusinessHours,
    CandidateSlot,
    TimeInterval,
)

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_MINUTES = 30
REASON_CONFLICT = "Conflicts with existing booking"
REASON_PAST_CLOSE = "Service would extend past close"


def find_conflict(
    window: TimeInterval, booked_intervals: Iterable[BookedInterval]
) -> Optional[BookedInterval]:
    """Return the first booked interval overlapping ``window``, if any."""
    for booked in booked_intervals:
        if window.overlaps(booked):
            return booked
    return None


def available_slots(slots: Iterable[CandidateSlot]) -> list[CandidateSlot]:
    """Filter to the bookable slots only."""
    return [slot for slot in slots if slot.available]


class ConflictResolver:
    """Partitions a day's candidate slots into available and unavailable."""

    def __init__(
        self,
        rules: BusinessRulesEngine,
        buffer_minutes: int = DEFAULT_BUFFER_MINUTES,
        granularity_minutes: int = 60,
    ) -> None:
        self.rules = rules
        self.buffer_minutes = buffer_minutes
        self.granularity_minutes = granularity_minutes

    @classmethod
    def from_config(
        cls,
        rules: BusinessRulesEngine,
        config: Optional[AppConfig] = None,
    ) -> "ConflictResolver":
        config = config or settings
        return cls(
            rules,
            buffer_minutes=config.scheduling.job_buffer_minutes,
            granularity_minutes=config.scheduling.slot_granularity_minutes,
        )

    def occupied_window(
        self, start: datetime, service_minutes: int, travel_minutes: int = 0
    ) -> TimeInterval:
        """The calendar time a job blocks: service + fixed buffer + travel."""
        start_utc = self.rules.localize(start).astimezone(timezone.utc)
        total = service_minutes + self.buffer_minutes + travel_minutes
        return TimeInterval.from_duration(start_utc, total)

    def slot_start(self, day: date, slot_time: time) -> datetime:
        """Local wall-clock start of a grid slot on ``day``."""
        return datetime.combine(day, slot_time, tzinfo=self.rules.zone)

    def compute_availability(
        self,
        day: date,
        service_duration_minutes: int,
        travel_buffer_minutes: int,
        booked_intervals: Sequence[BookedInterval],
        granularity_minutes: Optional[int] = None,
        hours: Optional[BusinessHours] = None,
    ) -> tuple[CandidateSlot, ...]:
        """Annotate every grid slot of ``day`` with availability and a reason.

        ``hours`` narrows the day to a per-query window; it defaults to the
        business hours of the rules engine.
        """
        hours = hours or self.rules.hours
        step = self.granularity_minutes if granularity_minutes is None else granularity_minutes
        generator = SlotGenerator(hours, step)
        close = datetime.combine(day, time(0), tzinfo=self.rules.zone) + timedelta(
            hours=hours.end_hour
        )

        slots = []
        for slot_time in generator.generate_day_slots():
            local_start = self.slot_start(day, slot_time)
            window = self.occupied_window(
                local_start, service_duration_minutes, travel_buffer_minutes
            )
            label = format_clock(slot_time)

            conflict = find_conflict(window, booked_intervals)
            if conflict is not None:
                logger.debug(
                    "%s conflicts with '%s' (%s - %s)",
                    label,
                    conflict.label,
                    conflict.start.isoformat(),
                    conflict.end.isoformat(),
                )
                slots.append(
                    CandidateSlot(slot_time, label, available=False, reason=REASON_CONFLICT)
                )
                continue

            service_end = local_start + timedelta(minutes=service_duration_minutes)
            if service_end >= close:
                slots.append(
                    CandidateSlot(slot_time, label, available=False, reason=REASON_PAST_CLOSE)
                )
                continue

            slots.append(CandidateSlot(slot_time, label))

        return tuple(slots)
