"""
Centralized configuration with environment variable overrides.

Business hours, the inter-job buffer, the holiday table, and the calendar
credentials are all configurable here. Nothing is hardcoded in the
scheduling rules or the calendar gateways.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from booking_engine.logging_context import RequestIdFilter

load_dotenv()

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s [%(request_id)s]: %(message)s"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag (true/false, yes/no, 1/0, on/off)."""
    raw = os.getenv(env_var, default)
    normalized = raw.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


def _optional_str(env_var: str) -> Optional[str]:
    value = os.getenv(env_var, "").strip()
    return value or None


@dataclass(frozen=True)
class BusinessConfig:
    """Business identity, home time zone, and base location for travel estimates."""

    name: str = os.getenv("BUSINESS_NAME", "Steam Powered Cleaning")
    time_zone: str = os.getenv("BUSINESS_TIMEZONE", "America/New_York")
    base_address: str = os.getenv("BUSINESS_ADDRESS", "46 Monmouth Road, Monroe, NJ")
    base_latitude: float = _safe_float("BUSINESS_LATITUDE", "40.4208")
    base_longitude: float = _safe_float("BUSINESS_LONGITUDE", "-74.1908")

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.time_zone)


@dataclass(frozen=True)
class SchedulingConfig:
    """Booking rules shared by the availability and booking paths.

    ``business_start_hour`` / ``business_end_hour`` is the single source of
    truth for opening hours; the availability query may narrow it per call.
    """

    business_start_hour: int = _safe_int("BUSINESS_HOURS_START", "7")
    business_end_hour: int = _safe_int("BUSINESS_HOURS_END", "18")
    slot_granularity_minutes: int = _safe_int("SLOT_GRANULARITY_MINUTES", "60")
    job_buffer_minutes: int = _safe_int("JOB_BUFFER_MINUTES", "30")
    max_suggestions: int = _safe_int("MAX_SUGGESTIONS", "3")
    suggestion_search_days: int = _safe_int("SUGGESTION_SEARCH_DAYS", "60")
    enforce_booking_conflicts: bool = _safe_bool("ENFORCE_BOOKING_CONFLICTS", "false")
    suggestions_check_conflicts: bool = _safe_bool("SUGGESTIONS_CHECK_CONFLICTS", "false")
    holidays_file: Optional[str] = _optional_str("HOLIDAYS_FILE")


@dataclass(frozen=True)
class CalendarConfig:
    """Google Calendar service-account settings."""

    calendar_id: Optional[str] = _optional_str("GOOGLE_CALENDAR_ID")
    service_account_key_path: Optional[str] = _optional_str("GOOGLE_SERVICE_ACCOUNT_KEY_PATH")
    client_email: Optional[str] = _optional_str("GOOGLE_CLIENT_EMAIL")
    private_key: Optional[str] = _optional_str("GOOGLE_PRIVATE_KEY")
    project_id: Optional[str] = _optional_str("GOOGLE_PROJECT_ID") or _optional_str(
        "GOOGLE_PROJECT_NUMBER"
    )
    include_shared_calendars: bool = _safe_bool("CALENDAR_CHECK_SHARED", "false")

    @property
    def is_configured(self) -> bool:
        """True when a calendar id and some form of credentials are present."""
        if not self.calendar_id:
            return False
        if self.service_account_key_path and os.path.exists(self.service_account_key_path):
            return True
        return bool(self.client_email and self.private_key)


@dataclass(frozen=True)
class TravelConfig:
    """Assumptions for the straight-line travel estimate."""

    average_speed_mph: float = _safe_float("TRAVEL_AVERAGE_SPEED_MPH", "30")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    business: BusinessConfig = field(default_factory=BusinessConfig)
    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    calendar: CalendarConfig = field(default_factory=CalendarConfig)
    travel: TravelConfig = field(default_factory=TravelConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    service_name: str = os.getenv("SERVICE_NAME", "booking-scheduler")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    scheduling = config.scheduling
    if not 0 <= scheduling.business_start_hour < scheduling.business_end_hour <= 24:
        raise ValueError(
            "BUSINESS_HOURS_START/BUSINESS_HOURS_END must satisfy 0 <= start < end <= 24, "
            f"got {scheduling.business_start_hour}-{scheduling.business_end_hour}"
        )
    if scheduling.slot_granularity_minutes < 1:
        raise ValueError(
            "SLOT_GRANULARITY_MINUTES must be >= 1, "
            f"got {scheduling.slot_granularity_minutes}"
        )
    if scheduling.job_buffer_minutes < 0:
        raise ValueError(
            f"JOB_BUFFER_MINUTES must be >= 0, got {scheduling.job_buffer_minutes}"
        )
    if scheduling.max_suggestions < 0:
        raise ValueError(
            f"MAX_SUGGESTIONS must be >= 0, got {scheduling.max_suggestions}"
        )
    if scheduling.suggestion_search_days < 1:
        raise ValueError(
            "SUGGESTION_SEARCH_DAYS must be >= 1, "
            f"got {scheduling.suggestion_search_days}"
        )
    if config.travel.average_speed_mph <= 0:
        raise ValueError(
            "TRAVEL_AVERAGE_SPEED_MPH must be > 0, "
            f"got {config.travel.average_speed_mph}"
        )
    try:
        ZoneInfo(config.business.time_zone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(
            f"BUSINESS_TIMEZONE is not a known IANA zone: {config.business.time_zone!r}"
        ) from None


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())
    logger.info("Configuration loaded for '%s'", config.business.name)
    return config


# Singleton instance
settings = load_config()
