"""Holiday tables for the weekday dates the business opens.

The built-in tables cover US federal holidays plus the extra days the
business observes (St. Patrick's Day and the Friday after Thanksgiving).
Other markets or years are supplied as a JSON file::

    [{"date": "2027-01-01", "name": "New Year's Day"}, ...]
"""

import json
import logging
from collections.abc import Iterable, Iterator
from datetime import date
from pathlib import Path
from typing import Optional, Union

from booking_engine.schemas.scheduling_schema import Holiday

logger = logging.getLogger(__name__)

FEDERAL_HOLIDAYS_2025: tuple[Holiday, ...] = (
    Holiday(date(2025, 1, 1), "New Year's Day"),
    Holiday(date(2025, 1, 20), "MLK Jr. Day"),
    Holiday(date(2025, 2, 17), "Presidents' Day"),
    Holiday(date(2025, 3, 17), "St. Patrick's Day"),
    Holiday(date(2025, 5, 26), "Memorial Day"),
    Holiday(date(2025, 6, 19), "Juneteenth"),
    Holiday(date(2025, 7, 4), "Independence Day"),
    Holiday(date(2025, 9, 1), "Labor Day"),
    Holiday(date(2025, 10, 13), "Columbus Day"),
    Holiday(date(2025, 11, 11), "Veterans Day"),
    Holiday(date(2025, 11, 27), "Thanksgiving"),
    Holiday(date(2025, 11, 28), "Thanksgiving (Friday)"),
    Holiday(date(2025, 12, 25), "Christmas"),
)

FEDERAL_HOLIDAYS_2026: tuple[Holiday, ...] = (
    Holiday(date(2026, 1, 1), "New Year's Day"),
    Holiday(date(2026, 1, 19), "MLK Jr. Day"),
    Holiday(date(2026, 2, 16), "Presidents' Day"),
    Holiday(date(2026, 3, 17), "St. Patrick's Day"),
    Holiday(date(2026, 5, 25), "Memorial Day"),
    Holiday(date(2026, 6, 19), "Juneteenth"),
    Holiday(date(2026, 7, 3), "Independence Day (observed)"),
    Holiday(date(2026, 9, 7), "Labor Day"),
    Holiday(date(2026, 10, 12), "Columbus Day"),
    Holiday(date(2026, 11, 11), "Veterans Day"),
    Holiday(date(2026, 11, 26), "Thanksgiving"),
    Holiday(date(2026, 11, 27), "Thanksgiving (Friday)"),
    Holiday(date(2026, 12, 25), "Christmas"),
)


class HolidayCalendar:
    """Immutable, date-ordered set of holidays."""

    def __init__(self, holidays: Iterable[Holiday] = ()) -> None:
        by_date: dict[date, Holiday] = {}
        for holiday in holidays:
            by_date.setdefault(holiday.date, holiday)
        self._by_date = dict(sorted(by_date.items()))

    def __contains__(self, day: object) -> bool:
        return day in self._by_date

    def __iter__(self) -> Iterator[Holiday]:
        return iter(self._by_date.values())

    def __len__(self) -> int:
        return len(self._by_date)

    def __repr__(self) -> str:
        return f"HolidayCalendar({len(self)} holidays)"

    def is_holiday(self, day: date) -> bool:
        return day in self._by_date

    def name_for(self, day: date) -> Optional[str]:
        holiday = self._by_date.get(day)
        return holiday.name if holiday else None


def default_holiday_calendar() -> HolidayCalendar:
    return HolidayCalendar(FEDERAL_HOLIDAYS_2025 + FEDERAL_HOLIDAYS_2026)


def load_holiday_calendar(path: Union[str, Path]) -> HolidayCalendar:
    """Load a holiday table from a JSON file of ``{"date", "name"}`` objects.

    Raises:
        ValueError: If the file is not a list of well-formed entries.
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Holiday file {path} is not valid JSON: {e}") from None

    if not isinstance(raw, list):
        raise ValueError(f"Holiday file {path} must contain a JSON list")

    holidays = []
    for index, entry in enumerate(raw):
        try:
            holidays.append(
                Holiday(date=date.fromisoformat(entry["date"]), name=str(entry["name"]))
            )
        except (KeyError, TypeError, ValueError):
            raise ValueError(f"Invalid holiday entry #{index} in {path}: {entry!r}") from None

    logger.info("Loaded %d holidays from %s", len(holidays), path)
    return HolidayCalendar(holidays)


def holiday_calendar_from_config(holidays_file: Optional[str]) -> HolidayCalendar:
    """Built-in tables, replaced by ``holidays_file`` when one is configured."""
    if holidays_file:
        return load_holiday_calendar(holidays_file)
    return default_holiday_calendar()
