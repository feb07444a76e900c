"""
End-to-end validation of a requested booking window.

Flow: policy check -> (optional) conflict check -> Valid, or Invalid with
alternatives. Double bookings are allowed on this path unless
``check_conflicts`` is switched on; the availability query always blocks
on conflicts. Outcomes are returned as values, never raised.
"""

import logging
from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Optional

from booking_engine.config import AppConfig, settings
from booking_engine.scheduling.alternative_suggester import AlternativeSuggester
from booking_engine.scheduling.business_rules import BusinessRulesEngine
from booking_engine.scheduling.conflict_resolver import (
    REASON_CONFLICT,
    ConflictResolver,
    find_conflict,
)
from booking_engine.schemas.scheduling_schema import (
    BookedInterval,
    BookingRequest,
    Invalid,
    RejectionKind,
    Valid,
    ValidationResult,
)
from booking_engine.utils import to_local

logger = logging.getLogger(__name__)


class BookingValidator:
    """Accepts or rejects a (start, duration) pair, with suggestions on rejection."""

    def __init__(
        self,
        rules: BusinessRulesEngine,
        resolver: ConflictResolver,
        suggester: AlternativeSuggester,
        max_suggestions: int = 3,
        check_conflicts: bool = False,
    ) -> None:
        self.rules = rules
        self.resolver = resolver
        self.suggester = suggester
        self.max_suggestions = max_suggestions
        self.check_conflicts = check_conflicts

    @classmethod
    def from_config(cls, config: Optional[AppConfig] = None) -> "BookingValidator":
        """Wire the rules, resolver, and suggester from one configuration."""
        config = config or settings
        rules = BusinessRulesEngine.from_config(config)
        resolver = ConflictResolver.from_config(rules, config)
        suggester = AlternativeSuggester.from_config(rules, resolver, config)
        return cls(
            rules,
            resolver,
            suggester,
            max_suggestions=config.scheduling.max_suggestions,
            check_conflicts=config.scheduling.enforce_booking_conflicts,
        )

    @property
    def needs_booked_intervals(self) -> bool:
        """True when either policy switch requires the calendar's busy intervals."""
        return self.check_conflicts or self.suggester.check_conflicts

    def validate(
        self,
        requested_start: datetime,
        duration_minutes: int,
        booked_intervals: Optional[Sequence[BookedInterval]] = None,
        travel_minutes: int = 0,
    ) -> ValidationResult:
        if duration_minutes <= 0:
            raise ValueError(f"duration_minutes must be > 0, got {duration_minutes}")
        if self.check_conflicts and booked_intervals is None:
            raise ValueError("booked_intervals are required when conflict checking is enabled")

        requested_end = requested_start + timedelta(minutes=duration_minutes)

        window_check = self.rules.validate_booking_window(requested_start, requested_end)
        if not window_check.valid:
            logger.info(
                "Rejected %s (%d min): %s",
                requested_start.isoformat(),
                duration_minutes,
                window_check.reason,
            )
            return Invalid(
                reason=window_check.reason or "Requested time is not bookable.",
                suggestions=self._suggest(
                    requested_start,
                    requested_end,
                    duration_minutes,
                    booked_intervals,
                    travel_minutes,
                ),
                kind=RejectionKind.POLICY,
            )

        if self.check_conflicts:
            window = self.resolver.occupied_window(
                requested_start, duration_minutes, travel_minutes
            )
            conflict = find_conflict(window, booked_intervals or ())
            if conflict is not None:
                logger.info(
                    "Rejected %s (%d min): overlaps '%s'",
                    requested_start.isoformat(),
                    duration_minutes,
                    conflict.label,
                )
                return Invalid(
                    reason=REASON_CONFLICT,
                    suggestions=self._suggest(
                        requested_start,
                        requested_end,
                        duration_minutes,
                        booked_intervals,
                        travel_minutes,
                    ),
                    kind=RejectionKind.CONFLICT,
                )

        return Valid()

    def validate_request(
        self,
        request: BookingRequest,
        booked_intervals: Optional[Sequence[BookedInterval]] = None,
        travel_minutes: int = 0,
    ) -> ValidationResult:
        """Validate a BookingRequest, reading naive starts in the request's zone."""
        start = to_local(request.requested_start, request.zone)
        return self.validate(start, request.duration_minutes, booked_intervals, travel_minutes)

    def _suggest(
        self,
        requested_start: datetime,
        requested_end: datetime,
        duration_minutes: int,
        booked_intervals: Optional[Sequence[BookedInterval]],
        travel_minutes: int = 0,
    ):
        return self.suggester.suggest_alternatives(
            requested_start,
            requested_end,
            duration_minutes,
            max_suggestions=self.max_suggestions,
            booked_intervals=booked_intervals,
            travel_minutes=travel_minutes,
        )
