"""Display labels for slots and suggestions.

Labels are built by hand rather than with locale-dependent ``strftime``
codes so they are identical on every platform.
"""

from collections.abc import Sequence
from datetime import datetime, time

from booking_engine.schemas.scheduling_schema import CandidateSlot, Suggestion

_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def weekday_name(day: datetime) -> str:
    return _WEEKDAYS[day.weekday()]


def format_clock(value: time) -> str:
    """12-hour clock, e.g. ``7:00 AM``, ``12:30 PM``."""
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {suffix}"


def format_hour(hour: int) -> str:
    """Whole-hour label used in policy messages, e.g. ``7 AM``, ``6 PM``, ``12 AM``."""
    hour = hour % 24
    display = hour % 12 or 12
    suffix = "AM" if hour < 12 else "PM"
    return f"{display} {suffix}"


def format_day_label(local_start: datetime) -> str:
    """Weekday plus month/day, e.g. ``Saturday, Mar 15``."""
    return f"{weekday_name(local_start)}, {_MONTHS[local_start.month - 1]} {local_start.day}"


def format_time_range(local_start: datetime, local_end: datetime) -> str:
    """Start and end on a 12-hour clock, e.g. ``7:00 AM - 8:30 AM``."""
    return f"{format_clock(local_start.time())} - {format_clock(local_end.time())}"


def format_suggested_times(suggestions: Sequence[Suggestion], search_days: int = 60) -> str:
    """Numbered list of suggestions for a rejection message."""
    if not suggestions:
        return f"No alternative times available in the next {search_days} days."
    return "\n".join(
        f"{i}. {s.day_label}: {s.time_range_label}" for i, s in enumerate(suggestions, start=1)
    )


def format_slot_summary(
    slots: Sequence[CandidateSlot],
    service_duration_minutes: int,
    travel_minutes: int,
    buffer_minutes: int = 30,
) -> str:
    available = sum(1 for slot in slots if slot.available)
    return (
        f"{available} of {len(slots)} time slots available "
        f"(Service: {service_duration_minutes}min + Travel: {travel_minutes}min "
        f"+ {buffer_minutes}min buffer)"
    )
