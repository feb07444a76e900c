"""
Calendar gateway boundary.

The only I/O the scheduler performs: reading busy intervals for a time
range and writing a confirmed booking. Both are coroutines. Failures are
raised as CalendarError subclasses so callers never mistake an outage for
"no availability"; nothing here retries.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from booking_engine.schemas.scheduling_schema import BookedInterval


class CalendarError(Exception):
    """The external calendar could not serve the request."""


class CalendarAuthError(CalendarError):
    """Credentials are missing, invalid, or lack access to the calendar."""


class CalendarUnavailableError(CalendarError):
    """Network failure or an unexpected response from the calendar API."""


class MalformedCalendarDataError(CalendarError):
    """The calendar returned an event the scheduler cannot interpret."""


@dataclass(frozen=True)
class CalendarEvent:
    """A booking to be written to the calendar."""

    summary: str
    start: datetime
    end: datetime
    time_zone: str
    description: Optional[str] = None
    attendee_email: Optional[str] = None
    attendee_name: Optional[str] = None
    properties: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class CreatedEvent:
    """Calendar-side identity of a written booking."""

    event_id: str
    start: datetime
    end: datetime
    html_link: Optional[str] = None


class CalendarGateway(ABC):
    @abstractmethod
    async def list_busy_intervals(
        self, start: datetime, end: datetime
    ) -> list[BookedInterval]:
        """Busy intervals overlapping ``[start, end)``, ordered by start."""
        raise NotImplementedError

    @abstractmethod
    async def create_event(
        self, event: CalendarEvent, request_id: Optional[str] = None
    ) -> CreatedEvent:
        """Write a booking. Retrying with the same ``request_id`` returns the same event."""
        raise NotImplementedError
