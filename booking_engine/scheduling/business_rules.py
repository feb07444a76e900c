"""
Day and hour policy for bookings.

The business only takes weekend and holiday work: Saturday, Sunday, and
any date in the holiday table are bookable, every other weekday is not.
Within a bookable day, service must start and finish inside business
hours. All checks are pure and return values rather than raising.
"""

import logging
from datetime import date, datetime, tzinfo
from typing import Optional

from booking_engine.config import AppConfig, settings
from booking_engine.scheduling.formatting import format_clock, format_hour, weekday_name
from booking_engine.scheduling.holidays import HolidayCalendar, holiday_calendar_from_config
from booking_engine.schemas.scheduling_schema import BusinessHours, WindowCheck
from booking_engine.utils import to_local

logger = logging.getLogger(__name__)

SATURDAY = 5
SUNDAY = 6


class BusinessRulesEngine:
    """Answers "may this window be booked?" for one business."""

    def __init__(
        self,
        hours: BusinessHours,
        holidays: HolidayCalendar,
        zone: tzinfo,
    ) -> None:
        self.hours = hours
        self.holidays = holidays
        self.zone = zone

    @classmethod
    def from_config(cls, config: Optional[AppConfig] = None) -> "BusinessRulesEngine":
        config = config or settings
        return cls(
            hours=BusinessHours(
                config.scheduling.business_start_hour,
                config.scheduling.business_end_hour,
            ),
            holidays=holiday_calendar_from_config(config.scheduling.holidays_file),
            zone=config.business.zone,
        )

    def localize(self, instant: datetime) -> datetime:
        return to_local(instant, self.zone)

    def is_bookable_day(self, day: date) -> bool:
        """True for Saturdays, Sundays, and holidays; False for any other weekday."""
        if isinstance(day, datetime):
            day = self.localize(day).date()
        if day.weekday() in (SATURDAY, SUNDAY):
            return True
        return self.holidays.is_holiday(day)

    def is_within_business_hours(
        self, instant: datetime, hours: Optional[BusinessHours] = None
    ) -> bool:
        hours = hours or self.hours
        return hours.contains_hour(self.localize(instant).hour)

    def validate_booking_window(self, start: datetime, end: datetime) -> WindowCheck:
        """Check that a job from ``start`` to ``end`` fits the day and hour rules.

        The reason distinguishes a closed day, a start before opening, a
        start after closing, and a finish past closing, because it is shown
        to the customer verbatim.
        """
        local_start = self.localize(start)
        local_end = self.localize(end)
        open_label = format_hour(self.hours.start_hour)
        close_label = format_hour(self.hours.end_hour)

        if not self.is_bookable_day(local_start.date()):
            day_name = weekday_name(local_start)
            return WindowCheck(
                valid=False,
                reason=(
                    f"We are closed on {day_name}s. "
                    "Please select a weekend date or federal holiday."
                ),
            )

        if local_start.hour < self.hours.start_hour:
            return WindowCheck(
                valid=False,
                reason=(
                    f"Bookings must be between {open_label} and {close_label}. "
                    f"Your selected time {format_clock(local_start.time())} "
                    f"is before we open at {open_label}."
                ),
            )

        if not self.hours.contains_hour(local_start.hour):
            return WindowCheck(
                valid=False,
                reason=(
                    f"Bookings must be between {open_label} and {close_label}. "
                    f"Your selected time {format_clock(local_start.time())} "
                    f"is after we close at {close_label}."
                ),
            )

        if local_end.date() != local_start.date() or not self.hours.contains_hour(local_end.hour):
            return WindowCheck(
                valid=False,
                reason=(
                    f"Service must complete by {close_label}. "
                    f"Your selected end time {format_clock(local_end.time())} "
                    "extends past business hours."
                ),
            )

        return WindowCheck(valid=True)
