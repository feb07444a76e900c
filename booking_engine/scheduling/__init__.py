from booking_engine.scheduling.alternative_suggester import AlternativeSuggester
from booking_engine.scheduling.booking_validator import BookingValidator
from booking_engine.scheduling.business_rules import BusinessRulesEngine
from booking_engine.scheduling.conflict_resolver import ConflictResolver, available_slots
from booking_engine.scheduling.holidays import HolidayCalendar, load_holiday_calendar
from booking_engine.scheduling.slot_generator import SlotGenerator

__all__ = [
    "BusinessRulesEngine",
    "SlotGenerator",
    "ConflictResolver",
    "AlternativeSuggester",
    "BookingValidator",
    "HolidayCalendar",
    "available_slots",
    "load_holiday_calendar",
]
