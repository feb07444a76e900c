import logging
from typing import Optional

from booking_engine.calendar.gateway import (
    CalendarAuthError,
    CalendarError,
    CalendarEvent,
    CalendarGateway,
    CalendarUnavailableError,
    CreatedEvent,
    MalformedCalendarDataError,
)
from booking_engine.calendar.memory_calendar import InMemoryCalendar
from booking_engine.config import AppConfig, settings

logger = logging.getLogger(__name__)


def gateway_from_config(config: Optional[AppConfig] = None) -> CalendarGateway:
    """Google Calendar when credentials are configured, the in-memory calendar otherwise."""
    config = config or settings
    if not config.calendar.is_configured:
        logger.warning("Google Calendar not configured, using the in-memory calendar")
        return InMemoryCalendar()

    from booking_engine.calendar.google_calendar import (
        GoogleCalendarGateway,
        build_calendar_service,
    )

    return GoogleCalendarGateway(
        build_calendar_service(config.calendar),
        calendar_id=config.calendar.calendar_id,
        zone=config.business.zone,
        include_shared_calendars=config.calendar.include_shared_calendars,
    )


__all__ = [
    "CalendarGateway",
    "CalendarEvent",
    "CreatedEvent",
    "CalendarError",
    "CalendarAuthError",
    "CalendarUnavailableError",
    "MalformedCalendarDataError",
    "InMemoryCalendar",
    "gateway_from_config",
]
