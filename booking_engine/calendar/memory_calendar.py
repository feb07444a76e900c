import logging
import uuid
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Optional

from booking_engine.calendar.gateway import CalendarEvent, CalendarGateway, CreatedEvent
from booking_engine.schemas.scheduling_schema import BookedInterval

logger = logging.getLogger(__name__)


class InMemoryCalendar(CalendarGateway):
    """Process-local calendar for development, the CLI, and tests."""

    def __init__(self, events: Iterable[BookedInterval] = ()) -> None:
        self._events: dict[str, BookedInterval] = {}
        self._by_request_id: dict[str, CreatedEvent] = {}
        for booked in events:
            self._events[f"seed_{len(self._events) + 1}"] = booked

    async def list_busy_intervals(
        self, start: datetime, end: datetime
    ) -> list[BookedInterval]:
        start_utc = start.astimezone(timezone.utc)
        end_utc = end.astimezone(timezone.utc)
        busy = [
            booked
            for booked in self._events.values()
            if booked.start < end_utc and booked.end > start_utc
        ]
        return sorted(busy, key=lambda b: b.start)

    async def create_event(
        self, event: CalendarEvent, request_id: Optional[str] = None
    ) -> CreatedEvent:
        if request_id and request_id in self._by_request_id:
            logger.info("Duplicate request %s, returning existing event", request_id)
            return self._by_request_id[request_id]

        event_id = f"mem_{uuid.uuid4().hex[:10]}"
        self._events[event_id] = BookedInterval(
            start=event.start, end=event.end, label=event.summary
        )
        created = CreatedEvent(event_id=event_id, start=event.start, end=event.end)
        if request_id:
            self._by_request_id[request_id] = created

        logger.info(
            "In-memory calendar event created",
            extra={
                "event_id": event_id,
                "start": event.start.isoformat(),
                "end": event.end.isoformat(),
                "summary": event.summary,
            },
        )
        return created

    @property
    def event_count(self) -> int:
        return len(self._events)
