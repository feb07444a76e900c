"""Scheduling value objects shared by the rules, resolver, and suggester.

All of these are request-scoped and immutable: every transformation
produces a new value.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def _require_aware(value: datetime, name: str) -> datetime:
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"{name} must be timezone-aware, got naive {value.isoformat()}")
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class TimeInterval:
    """Half-open ``[start, end)`` interval, normalized to UTC."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        start = _require_aware(self.start, "start")
        end = _require_aware(self.end, "end")
        if not start < end:
            raise ValueError(
                f"Interval start must be before end: {start.isoformat()} >= {end.isoformat()}"
            )
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    @classmethod
    def from_duration(cls, start: datetime, minutes: int) -> "TimeInterval":
        return cls(start=start, end=start + timedelta(minutes=minutes))

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    def overlaps(self, other: "TimeInterval") -> bool:
        """Standard half-open overlap test; symmetric in its arguments."""
        return self.start < other.end and self.end > other.start


@dataclass(frozen=True)
class BookedInterval(TimeInterval):
    """A busy period already committed on the external calendar."""

    label: str = ""


@dataclass(frozen=True)
class CandidateSlot:
    """A start-of-day-relative time considered for booking."""

    start_time: time
    label: str
    available: bool = True
    reason: Optional[str] = None


@dataclass(frozen=True)
class BookingRequest:
    """A request to book ``duration_minutes`` starting at ``requested_start``.

    The duration is computed by the caller (cart totals); the engine
    never invents it.
    """

    requested_start: datetime
    time_zone: str
    duration_minutes: int

    def __post_init__(self) -> None:
        if self.duration_minutes <= 0:
            raise ValueError(f"duration_minutes must be > 0, got {self.duration_minutes}")
        try:
            ZoneInfo(self.time_zone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown time zone: {self.time_zone!r}") from None

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.time_zone)


@dataclass(frozen=True)
class Suggestion:
    """An alternative start time, with labels ready for display."""

    start: datetime
    end: datetime
    day_label: str
    time_range_label: str


class RejectionKind(str, Enum):
    """Why a requested window was refused."""

    POLICY = "policy"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class Valid:
    """The requested window may be booked."""

    valid: bool = field(default=True, init=False)


@dataclass(frozen=True)
class Invalid:
    """The requested window was refused; ``reason`` is shown to the customer."""

    reason: str
    suggestions: tuple[Suggestion, ...] = ()
    kind: RejectionKind = RejectionKind.POLICY
    valid: bool = field(default=False, init=False)


ValidationResult = Union[Valid, Invalid]


@dataclass(frozen=True)
class WindowCheck:
    """Outcome of a day/hour policy check."""

    valid: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class Holiday:
    """A non-weekend date the business works."""

    date: date
    name: str


@dataclass(frozen=True)
class BusinessHours:
    """Opening hours as ``[start_hour, end_hour)`` in the business time zone."""

    start_hour: int
    end_hour: int

    def __post_init__(self) -> None:
        if not 0 <= self.start_hour < self.end_hour <= 24:
            raise ValueError(
                "Business hours must satisfy 0 <= start_hour < end_hour <= 24, "
                f"got {self.start_hour}-{self.end_hour}"
            )

    def contains_hour(self, hour: int) -> bool:
        return self.start_hour <= hour < self.end_hour
