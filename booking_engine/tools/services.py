"""Service catalog with prices and durations, and cart totals.

The total cart duration is what the scheduler receives as
``duration_minutes``; the scheduler itself never estimates it.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

SERVICE_CATALOG: dict[str, dict] = {
    "carpet-room": {
        "name": "Carpet Steam Cleaning (per room)",
        "category": "indoor",
        "service_type": "carpet",
        "price_cents": 6500,
        "duration_minutes": 45,
    },
    "tile-floor": {
        "name": "Tile & Grout Cleaning (up to 300 sq ft)",
        "category": "indoor",
        "service_type": "tile",
        "price_cents": 15000,
        "duration_minutes": 90,
    },
    "upholstery-sofa": {
        "name": "Sofa Upholstery Cleaning",
        "category": "indoor",
        "service_type": "upholstery",
        "price_cents": 12000,
        "duration_minutes": 60,
    },
    "area-rug": {
        "name": "Area Rug Cleaning",
        "category": "indoor",
        "service_type": "area_rug",
        "price_cents": 8000,
        "duration_minutes": 30,
    },
    "windows-house": {
        "name": "Window Washing (whole house)",
        "category": "outdoor",
        "service_type": "windows",
        "price_cents": 25000,
        "duration_minutes": 120,
    },
    "powerwash-driveway": {
        "name": "Driveway Power Washing",
        "category": "outdoor",
        "service_type": "powerwash",
        "price_cents": 18000,
        "duration_minutes": 90,
    },
    "auto-detail": {
        "name": "Interior Auto Detailing",
        "category": "automotive",
        "service_type": "detailing",
        "price_cents": 15000,
        "duration_minutes": 120,
    },
    "stain-protector": {
        "name": "Stain Protector Add-on",
        "category": "addons",
        "service_type": "products",
        "price_cents": 3000,
        "duration_minutes": 15,
    },
    "commercial-quote": {
        "name": "Commercial Cleaning (custom quote)",
        "category": "indoor",
        "service_type": "carpet",
        "price_cents": None,
        "duration_minutes": 180,
    },
}


@dataclass(frozen=True)
class CartLineItem:
    service_id: str
    service: dict
    quantity: int


@dataclass(frozen=True)
class CartTotals:
    total_price_cents: int
    total_duration_minutes: int


def get_service(service_id: str) -> Optional[dict]:
    """Get full details for a service by id."""
    info = SERVICE_CATALOG.get(service_id)
    if info is None:
        return None
    return {"id": service_id, **info}


def get_all_services() -> list[dict]:
    """Return all services with basic info."""
    return [
        {"id": sid, "name": info["name"], "price_cents": info["price_cents"]}
        for sid, info in SERVICE_CATALOG.items()
    ]


def _coerce_quantity(raw: object) -> int:
    """Whole quantity of at least 1; anything unreadable counts as 1."""
    try:
        quantity = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 1
    if not math.isfinite(quantity):
        return 1
    return max(1, math.floor(quantity))


def resolve_cart_items(items: list[dict]) -> list[CartLineItem]:
    """
    Resolve ``[{"serviceId": ..., "quantity": ...}]`` against the catalog.

    Raises:
        ValueError: If a service id is not in the catalog
    """
    resolved = []
    for item in items:
        service_id = item.get("serviceId") or item.get("service_id")
        service = get_service(service_id) if service_id else None
        if service is None:
            raise ValueError(f"Service not found: {service_id}")
        resolved.append(
            CartLineItem(
                service_id=service_id,
                service=service,
                quantity=_coerce_quantity(item.get("quantity", 1)),
            )
        )
    return resolved


def calculate_cart_totals(line_items: list[CartLineItem]) -> CartTotals:
    """Sum price and duration; custom-quote services contribute no price."""
    total_price = 0
    total_minutes = 0
    for item in line_items:
        total_price += (item.service.get("price_cents") or 0) * item.quantity
        total_minutes += (item.service.get("duration_minutes") or 0) * item.quantity
    logger.debug("Cart totals: %d cents, %d minutes", total_price, total_minutes)
    return CartTotals(total_price_cents=total_price, total_duration_minutes=total_minutes)
