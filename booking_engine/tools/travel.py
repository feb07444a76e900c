"""
Drive-time estimate from the business base to a customer location.

Straight-line (haversine) distance at an average city speed. Geocoding the
customer address happens upstream; this module only takes coordinates.
"""

import math
from dataclasses import dataclass
from typing import Optional

from booking_engine.config import AppConfig, settings

EARTH_RADIUS_MILES = 3959.0


@dataclass(frozen=True)
class Location:
    address: str
    latitude: float
    longitude: float


@dataclass(frozen=True)
class TravelEstimate:
    distance_miles: float
    time_minutes: int


def base_location(config: Optional[AppConfig] = None) -> Location:
    config = config or settings
    return Location(
        address=config.business.base_address,
        latitude=config.business.base_latitude,
        longitude=config.business.base_longitude,
    )


def haversine_miles(origin: Location, destination: Location) -> float:
    d_lat = math.radians(destination.latitude - origin.latitude)
    d_lon = math.radians(destination.longitude - origin.longitude)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(origin.latitude))
        * math.cos(math.radians(destination.latitude))
        * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_MILES * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def estimate_travel(
    destination: Location,
    origin: Optional[Location] = None,
    average_speed_mph: Optional[float] = None,
    config: Optional[AppConfig] = None,
) -> TravelEstimate:
    """Distance and whole minutes (rounded up) to reach ``destination``.

    The minutes feed ``travel_buffer_minutes`` in the conflict check.
    """
    config = config or settings
    origin = origin or base_location(config)
    speed = average_speed_mph or config.travel.average_speed_mph
    distance = haversine_miles(origin, destination)
    return TravelEstimate(
        distance_miles=distance,
        time_minutes=math.ceil(distance / speed * 60),
    )


def format_travel_info(estimate: TravelEstimate) -> str:
    return f"{estimate.distance_miles:.1f} mi, ~{estimate.time_minutes} min"
