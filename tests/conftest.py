"""Shared test fixtures and helpers."""

from dataclasses import replace
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

import pytest

from booking_engine.calendar.memory_calendar import InMemoryCalendar
from booking_engine.config import AppConfig, BusinessConfig, CalendarConfig, SchedulingConfig
from booking_engine.scheduling.alternative_suggester import AlternativeSuggester
from booking_engine.scheduling.booking_validator import BookingValidator
from booking_engine.scheduling.business_rules import BusinessRulesEngine
from booking_engine.scheduling.conflict_resolver import ConflictResolver
from booking_engine.booking_service import BookingService
from booking_engine.schemas.scheduling_schema import BookedInterval

ZONE = ZoneInfo("America/New_York")

# March 2025: the 15th/16th are a weekend, the 17th is St. Patrick's Day
# (Monday, in the holiday table), the 18th is an ordinary Tuesday.
SATURDAY = date(2025, 3, 15)
SUNDAY = date(2025, 3, 16)
HOLIDAY_MONDAY = date(2025, 3, 17)
TUESDAY = date(2025, 3, 18)


def local(day: date, hour: int, minute: int = 0) -> datetime:
    """Aware wall-clock datetime in the business zone."""
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=ZONE)


def make_booked(
    day: date,
    start: tuple[int, int],
    end: tuple[int, int],
    label: str = "Existing job",
) -> BookedInterval:
    return BookedInterval(start=local(day, *start), end=local(day, *end), label=label)


def make_config(**scheduling_overrides) -> AppConfig:
    """Explicit configuration, independent of the test environment's variables."""
    scheduling = SchedulingConfig(
        business_start_hour=7,
        business_end_hour=18,
        slot_granularity_minutes=60,
        job_buffer_minutes=30,
        max_suggestions=3,
        suggestion_search_days=60,
        enforce_booking_conflicts=False,
        suggestions_check_conflicts=False,
        holidays_file=None,
    )
    return AppConfig(
        business=BusinessConfig(name="Test Cleaning Co", time_zone="America/New_York"),
        scheduling=replace(scheduling, **scheduling_overrides),
        calendar=CalendarConfig(
            calendar_id=None,
            service_account_key_path=None,
            client_email=None,
            private_key=None,
            project_id=None,
        ),
        log_level="DEBUG",
    )


@pytest.fixture
def app_config() -> AppConfig:
    return make_config()


@pytest.fixture
def rules(app_config) -> BusinessRulesEngine:
    return BusinessRulesEngine.from_config(app_config)


@pytest.fixture
def resolver(rules, app_config) -> ConflictResolver:
    return ConflictResolver.from_config(rules, app_config)


@pytest.fixture
def suggester(rules, resolver, app_config) -> AlternativeSuggester:
    return AlternativeSuggester.from_config(rules, resolver, app_config)


@pytest.fixture
def validator(app_config) -> BookingValidator:
    return BookingValidator.from_config(app_config)


@pytest.fixture
def memory_calendar() -> InMemoryCalendar:
    return InMemoryCalendar()


def make_service(
    calendar: Optional[InMemoryCalendar] = None, **scheduling_overrides
) -> BookingService:
    config = make_config(**scheduling_overrides)
    return BookingService.from_config(config, gateway=calendar or InMemoryCalendar())
