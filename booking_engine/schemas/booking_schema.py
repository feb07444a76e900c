"""Availability and booking request/response models.

Field names serialize in camelCase (``model_dump(by_alias=True)``) because
that is the shape the booking submission flow reads; Python code uses the
snake_case names.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from booking_engine.schemas.scheduling_schema import BusinessHours


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _TravelModel(_CamelModel):
    """Travel either given in minutes or estimated from the customer's coordinates."""
    travel_minutes: Optional[int] = Field(default=None, ge=0)
    customer_latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    customer_longitude: Optional[float] = Field(default=None, ge=-180, le=180)

    @model_validator(mode="after")
    def _check_location(self):
        if (self.customer_latitude is None) != (self.customer_longitude is None):
            raise ValueError("customerLatitude and customerLongitude must be given together")
        return self


class AvailabilityQuery(_TravelModel):
    """Read-path query for one day's slots."""
    date: date
    business_hours_start: Optional[int] = Field(default=None, ge=0, le=23)
    business_hours_end: Optional[int] = Field(default=None, ge=1, le=24)
    slot_duration_minutes: Optional[int] = Field(default=None, gt=0)
    service_duration_minutes: Optional[int] = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _check_hours(self) -> "AvailabilityQuery":
        start, end = self.business_hours_start, self.business_hours_end
        if start is not None and end is not None and start >= end:
            raise ValueError("businessHoursStart must be before businessHoursEnd")
        return self

    def resolve_hours(self, default_start: int, default_end: int) -> BusinessHours:
        """Merge the per-query hours over the configured ones.

        Raises:
            ValueError: If the merged window is empty, e.g. only
                ``businessHoursStart`` is given and it is past the configured close.
        """
        start = default_start if self.business_hours_start is None else self.business_hours_start
        end = default_end if self.business_hours_end is None else self.business_hours_end
        if start >= end:
            raise ValueError(
                f"businessHoursStart ({start}) must be before businessHoursEnd ({end})"
            )
        return BusinessHours(start, end)


class AvailabilitySlot(_CamelModel):
    """Single grid slot with its verdict."""
    start: str
    end: str
    available: bool
    reason: Optional[str] = None


class AvailabilityResponse(_CamelModel):
    """Calendar availability for one day."""
    date: date
    slots: list[AvailabilitySlot] = Field(default_factory=list)
    summary: str = ""


class BookingValidationRequest(_TravelModel):
    """Pre-commit booking request; the duration comes from the cart."""
    requested_start: datetime
    duration_minutes: int = Field(gt=0)
    time_zone: Optional[str] = None
    request_id: Optional[str] = None
    summary: str = "Cleaning appointment"
    description: Optional[str] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None


class SuggestedTime(_CamelModel):
    """One alternative start time, labelled for display."""
    date: str
    day_name: str
    time_range: str


class BookingRejection(_CamelModel):
    """Returned when the requested window cannot be booked."""
    error: str
    kind: str = "policy"
    suggested_times: list[SuggestedTime] = Field(default_factory=list)
    suggested_times_text: str = ""


class BookingConfirmation(_CamelModel):
    """Returned once the calendar event has been written."""
    event_id: str
    start_time: str
    duration_minutes: int
    html_link: Optional[str] = None
