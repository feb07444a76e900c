"""
Command-line entry point for the booking scheduler.

Runs the availability query and booking validation against Google Calendar
when it is configured, or against an empty in-memory calendar otherwise.

Usage:
    Availability: python main.py availability 2025-03-15 --service-minutes 90 --travel 20
    Validation:   python main.py validate 2025-03-18T10:00 --duration 60
    Booking:      python main.py book 2025-03-15T09:00 --duration 60 --summary "Carpet cleaning"
    From a cart:  python main.py validate 2025-03-15T09:00 --cart carpet-room:3 area-rug
    With travel:  python main.py availability 2025-03-15 --lat 40.35 --lon -74.07 --verbose
"""

import argparse
import asyncio
import logging
import sys
from datetime import date, datetime
from typing import Optional

from booking_engine.booking_service import BookingService
from booking_engine.calendar import CalendarError
from booking_engine.config import settings
from booking_engine.schemas.booking_schema import AvailabilityQuery, BookingValidationRequest
from booking_engine.tools.services import calculate_cart_totals, resolve_cart_items

logger = logging.getLogger(__name__)


def _parse_cart(entries: list[str]) -> list[dict]:
    """``service-id[:quantity]`` strings to cart items."""
    items = []
    for entry in entries:
        service_id, _, quantity = entry.partition(":")
        items.append({"serviceId": service_id, "quantity": quantity or 1})
    return items


def _resolve_duration(args: argparse.Namespace) -> int:
    if args.cart:
        totals = calculate_cart_totals(resolve_cart_items(_parse_cart(args.cart)))
        logger.info("Cart duration: %d minutes", totals.total_duration_minutes)
        return totals.total_duration_minutes
    if args.duration is None:
        raise ValueError("Either --duration or --cart is required.")
    return args.duration


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    common.add_argument("--travel", type=int, default=None, help="Travel minutes.")
    common.add_argument("--lat", type=float, default=None, help="Customer latitude.")
    common.add_argument("--lon", type=float, default=None, help="Customer longitude.")

    parser = argparse.ArgumentParser(
        description=f"Availability and booking checks for {settings.business.name}."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    availability = subparsers.add_parser(
        "availability", parents=[common], help="Show one day's slots."
    )
    availability.add_argument("date", type=date.fromisoformat, help="Day to check (YYYY-MM-DD).")
    availability.add_argument("--start-hour", type=int, default=None)
    availability.add_argument("--end-hour", type=int, default=None)
    availability.add_argument("--slot-minutes", type=int, default=None)
    availability.add_argument("--service-minutes", type=int, default=None)

    for name, help_text in (
        ("validate", "Validate a requested start time."),
        ("book", "Validate and write the booking to the calendar."),
    ):
        sub = subparsers.add_parser(name, parents=[common], help=help_text)
        sub.add_argument("start", type=datetime.fromisoformat, help="Requested start (ISO-8601).")
        sub.add_argument("--duration", type=int, default=None, help="Service minutes.")
        sub.add_argument("--cart", nargs="+", default=None, help="service-id[:quantity] items.")
        sub.add_argument("--time-zone", default=None, help="IANA zone for a naive start.")
        sub.add_argument("--summary", default="Cleaning appointment")
        sub.add_argument("--request-id", default=None, help="Idempotency key for retries.")

    return parser


async def _run(args: argparse.Namespace, service: BookingService) -> str:
    if args.command == "availability":
        response = await service.check_availability(
            AvailabilityQuery(
                date=args.date,
                business_hours_start=args.start_hour,
                business_hours_end=args.end_hour,
                slot_duration_minutes=args.slot_minutes,
                service_duration_minutes=args.service_minutes,
                travel_minutes=args.travel,
                customer_latitude=args.lat,
                customer_longitude=args.lon,
            )
        )
        return response.model_dump_json(by_alias=True, indent=2)

    request = BookingValidationRequest(
        requested_start=args.start,
        duration_minutes=_resolve_duration(args),
        time_zone=args.time_zone,
        travel_minutes=args.travel,
        customer_latitude=args.lat,
        customer_longitude=args.lon,
        request_id=args.request_id,
        summary=args.summary,
    )
    if args.command == "validate":
        rejection = await service.validate_booking(request)
        if rejection is None:
            return '{"valid": true}'
        return rejection.model_dump_json(by_alias=True, indent=2)

    result = await service.submit_booking(request)
    return result.model_dump_json(by_alias=True, indent=2)


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        service = BookingService.from_config()
        output = asyncio.run(_run(args, service))
    except CalendarError as e:
        logger.error("Calendar unavailable: %s", e)
        return 2
    except ValueError as e:
        logger.error("%s", e)
        return 1

    sys.stdout.write(output + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
