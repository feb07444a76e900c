"""
Booking flow facade: availability query, validation, and submission.

This is the only place the pure scheduling components meet the calendar
gateway. Busy intervals are fetched fresh for every call and only when a
policy needs them; calendar failures propagate as CalendarError so an
outage is never reported as "no availability".
"""

from datetime import date, datetime, time, timedelta
from typing import Optional, Union

from booking_engine.calendar import CalendarEvent, CalendarGateway, gateway_from_config
from booking_engine.config import AppConfig, settings
from booking_engine.logging_context import get_request_logger, new_request_id, set_request_id
from booking_engine.scheduling.booking_validator import BookingValidator
from booking_engine.scheduling.business_rules import BusinessRulesEngine
from booking_engine.scheduling.conflict_resolver import ConflictResolver
from booking_engine.scheduling.formatting import (
    format_slot_summary,
    format_suggested_times,
    weekday_name,
)
from booking_engine.schemas.booking_schema import (
    AvailabilityQuery,
    AvailabilityResponse,
    AvailabilitySlot,
    BookingConfirmation,
    BookingRejection,
    BookingValidationRequest,
    SuggestedTime,
)
from booking_engine.schemas.scheduling_schema import (
    BookedInterval,
    BookingRequest,
    Invalid,
)
from booking_engine.tools.travel import Location, estimate_travel, format_travel_info
from booking_engine.utils import isoformat_z, to_local

logger = get_request_logger(__name__)


class BookingService:
    """Async entry point used by the booking submission flow."""

    def __init__(
        self,
        gateway: CalendarGateway,
        validator: BookingValidator,
        config: Optional[AppConfig] = None,
    ) -> None:
        self.gateway = gateway
        self.validator = validator
        self.config = config or settings

    @classmethod
    def from_config(
        cls,
        config: Optional[AppConfig] = None,
        gateway: Optional[CalendarGateway] = None,
    ) -> "BookingService":
        config = config or settings
        return cls(
            gateway=gateway or gateway_from_config(config),
            validator=BookingValidator.from_config(config),
            config=config,
        )

    @property
    def rules(self) -> BusinessRulesEngine:
        return self.validator.rules

    @property
    def resolver(self) -> ConflictResolver:
        return self.validator.resolver

    def _day_start(self, day: date) -> datetime:
        return datetime.combine(day, time(0), tzinfo=self.rules.zone)

    def _travel_minutes(self, request: Union[AvailabilityQuery, BookingValidationRequest]) -> int:
        """Explicit travel minutes, else an estimate from the customer's coordinates."""
        if request.travel_minutes is not None:
            return request.travel_minutes
        if request.customer_latitude is None or request.customer_longitude is None:
            return 0
        estimate = estimate_travel(
            Location("Customer", request.customer_latitude, request.customer_longitude),
            config=self.config,
        )
        logger.info("Travel estimate: %s", format_travel_info(estimate))
        return estimate.time_minutes

    # ------------------------------------------------------------------ #
    # Read path
    # ------------------------------------------------------------------ #

    async def check_availability(self, query: AvailabilityQuery) -> AvailabilityResponse:
        """Slots for one day, blocked by existing bookings and closing time."""
        new_request_id()
        scheduling = self.config.scheduling
        hours = query.resolve_hours(
            scheduling.business_start_hour, scheduling.business_end_hour
        )
        travel_minutes = self._travel_minutes(query)
        slot_minutes = query.slot_duration_minutes or scheduling.slot_granularity_minutes
        service_minutes = query.service_duration_minutes or slot_minutes

        day_start = self._day_start(query.date)
        busy = await self.gateway.list_busy_intervals(day_start, day_start + timedelta(days=1))
        logger.info("Found %d busy interval(s) on %s", len(busy), query.date.isoformat())

        candidates = self.resolver.compute_availability(
            query.date,
            service_minutes,
            travel_minutes,
            busy,
            granularity_minutes=slot_minutes,
            hours=hours,
        )
        closed_reason = None
        if not self.rules.is_bookable_day(query.date):
            closed_reason = f"Closed on {weekday_name(day_start)}s"

        slots = []
        for candidate in candidates:
            start = self.resolver.slot_start(query.date, candidate.start_time)
            slots.append(
                AvailabilitySlot(
                    start=isoformat_z(start),
                    end=isoformat_z(start + timedelta(minutes=slot_minutes)),
                    available=candidate.available and closed_reason is None,
                    reason=candidate.reason or closed_reason,
                )
            )

        return AvailabilityResponse(
            date=query.date,
            slots=slots,
            summary=format_slot_summary(
                candidates,
                service_minutes,
                travel_minutes,
                self.resolver.buffer_minutes,
            ),
        )

    # ------------------------------------------------------------------ #
    # Write path
    # ------------------------------------------------------------------ #

    def _booking_request(self, request: BookingValidationRequest) -> BookingRequest:
        return BookingRequest(
            requested_start=request.requested_start,
            time_zone=request.time_zone or self.config.business.time_zone,
            duration_minutes=request.duration_minutes,
        )

    async def _busy_for(
        self, start: datetime, duration_minutes: int, travel_minutes: int
    ) -> list[BookedInterval]:
        """Busy intervals covering the requested day and, if needed, the suggestion horizon."""
        day_start = self._day_start(self.rules.localize(start).date())
        span = timedelta(
            days=1, minutes=duration_minutes + self.resolver.buffer_minutes + travel_minutes
        )
        if self.validator.suggester.check_conflicts:
            span += timedelta(days=self.validator.suggester.search_days)
        return await self.gateway.list_busy_intervals(day_start, day_start + span)

    def _rejection(self, result: Invalid) -> BookingRejection:
        return BookingRejection(
            error=result.reason,
            kind=result.kind.value,
            suggested_times=[
                SuggestedTime(
                    date=isoformat_z(s.start),
                    day_name=s.day_label,
                    time_range=s.time_range_label,
                )
                for s in result.suggestions
            ],
            suggested_times_text=format_suggested_times(
                result.suggestions, self.validator.suggester.search_days
            ),
        )

    async def validate_booking(
        self, request: BookingValidationRequest
    ) -> Optional[BookingRejection]:
        """None when the window may be booked, otherwise a rejection with suggestions."""
        booking = self._booking_request(request)
        start = to_local(booking.requested_start, booking.zone)
        travel_minutes = self._travel_minutes(request)

        busy = None
        if self.validator.needs_booked_intervals:
            busy = await self._busy_for(start, booking.duration_minutes, travel_minutes)

        result = self.validator.validate_request(booking, busy, travel_minutes)
        if isinstance(result, Invalid):
            logger.info("Booking rejected (%s): %s", result.kind.value, result.reason)
            return self._rejection(result)
        return None

    async def submit_booking(
        self, request: BookingValidationRequest
    ) -> Union[BookingRejection, BookingConfirmation]:
        """Validate, then write the event with ``request_id`` as idempotency key."""
        request_id = request.request_id or new_request_id()
        set_request_id(request_id)

        rejection = await self.validate_booking(request)
        if rejection is not None:
            return rejection

        booking = self._booking_request(request)
        start = to_local(booking.requested_start, booking.zone)
        end = start + timedelta(minutes=booking.duration_minutes)
        created = await self.gateway.create_event(
            CalendarEvent(
                summary=request.summary,
                start=start,
                end=end,
                time_zone=booking.time_zone,
                description=request.description,
                attendee_email=request.customer_email,
                attendee_name=request.customer_name,
                properties={
                    "bookingId": request_id,
                    "durationMinutes": str(booking.duration_minutes),
                },
            ),
            request_id=request_id,
        )
        logger.info("Booking confirmed: %s at %s", created.event_id, start.isoformat())
        return BookingConfirmation(
            event_id=created.event_id,
            start_time=isoformat_z(start),
            duration_minutes=booking.duration_minutes,
            html_link=created.html_link,
        )
