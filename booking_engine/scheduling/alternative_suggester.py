"""
Alternative start times for a rejected booking.

Search order:
  1. one hour after the requested start
  2. two hours after the requested start
  3. opening time on each following calendar day, up to ``search_days``

A candidate is kept when it passes the day/hour policy. Busy intervals are
consulted only when ``check_conflicts`` is on; by default suggestions are
policy-valid but not guaranteed collision-free.
"""

import logging
from collections.abc import Iterator, Sequence
from datetime import datetime, time, timedelta
from typing import Optional

from booking_engine.config import AppConfig, settings
from booking_engine.scheduling.business_rules import BusinessRulesEngine
from booking_engine.scheduling.conflict_resolver import ConflictResolver, find_conflict
from booking_engine.scheduling.formatting import format_day_label, format_time_range
from booking_engine.schemas.scheduling_schema import BookedInterval, Suggestion

logger = logging.getLogger(__name__)

DEFAULT_MAX_SUGGESTIONS = 3
DEFAULT_SEARCH_DAYS = 60


class AlternativeSuggester:
    """Finds a short, ordered list of bookable alternatives."""

    def __init__(
        self,
        rules: BusinessRulesEngine,
        resolver: ConflictResolver,
        search_days: int = DEFAULT_SEARCH_DAYS,
        check_conflicts: bool = False,
    ) -> None:
        self.rules = rules
        self.resolver = resolver
        self.search_days = search_days
        self.check_conflicts = check_conflicts

    @classmethod
    def from_config(
        cls,
        rules: BusinessRulesEngine,
        resolver: ConflictResolver,
        config: Optional[AppConfig] = None,
    ) -> "AlternativeSuggester":
        config = config or settings
        return cls(
            rules,
            resolver,
            search_days=config.scheduling.suggestion_search_days,
            check_conflicts=config.scheduling.suggestions_check_conflicts,
        )

    def _candidates(self, requested_start: datetime) -> Iterator[datetime]:
        local_start = self.rules.localize(requested_start)
        yield local_start + timedelta(hours=1)
        yield local_start + timedelta(hours=2)

        opening = time(hour=self.rules.hours.start_hour)
        for offset in range(1, self.search_days + 1):
            day = local_start.date() + timedelta(days=offset)
            yield datetime.combine(day, opening, tzinfo=self.rules.zone)

    def _is_free(
        self,
        start: datetime,
        duration_minutes: int,
        booked_intervals: Sequence[BookedInterval],
        travel_minutes: int = 0,
    ) -> bool:
        window = self.resolver.occupied_window(start, duration_minutes, travel_minutes)
        return find_conflict(window, booked_intervals) is None

    def suggest_alternatives(
        self,
        requested_start: datetime,
        requested_end: datetime,
        duration_minutes: int,
        max_suggestions: int = DEFAULT_MAX_SUGGESTIONS,
        booked_intervals: Optional[Sequence[BookedInterval]] = None,
        travel_minutes: int = 0,
    ) -> tuple[Suggestion, ...]:
        """Return up to ``max_suggestions`` alternatives, earliest search step first.

        ``travel_minutes`` widens the occupied window used by the conflict
        check the same way it does for the requested slot.

        An empty tuple means nothing was found within the search budget,
        which callers must treat as a normal outcome.
        """
        suggestions: list[Suggestion] = []
        if max_suggestions <= 0:
            return ()

        for candidate in self._candidates(requested_start):
            candidate_end = candidate + timedelta(minutes=duration_minutes)
            if not self.rules.validate_booking_window(candidate, candidate_end).valid:
                continue
            if (
                self.check_conflicts
                and booked_intervals
                and not self._is_free(
                    candidate, duration_minutes, booked_intervals, travel_minutes
                )
            ):
                continue

            suggestions.append(
                Suggestion(
                    start=candidate,
                    end=candidate_end,
                    day_label=format_day_label(candidate),
                    time_range_label=format_time_range(candidate, candidate_end),
                )
            )
            if len(suggestions) >= max_suggestions:
                break

        logger.debug(
            "Found %d alternative(s) for %s - %s",
            len(suggestions),
            requested_start.isoformat(),
            requested_end.isoformat(),
        )
        return tuple(suggestions)
