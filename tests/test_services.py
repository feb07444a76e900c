"""Tests for the service catalog, cart resolution, and travel estimates."""

import pytest

from booking_engine.tools.services import (
    SERVICE_CATALOG,
    calculate_cart_totals,
    get_all_services,
    get_service,
    resolve_cart_items,
)
from booking_engine.tools.travel import (
    Location,
    estimate_travel,
    format_travel_info,
    haversine_miles,
)


class TestCatalog:
    def test_get_service(self):
        service = get_service("carpet-room")
        assert service["id"] == "carpet-room"
        assert service["duration_minutes"] == 45

    def test_get_unknown_service(self):
        assert get_service("moon-polishing") is None

    def test_all_services_listed(self):
        assert {s["id"] for s in get_all_services()} == set(SERVICE_CATALOG)

    def test_every_service_has_positive_duration(self):
        assert all(info["duration_minutes"] > 0 for info in SERVICE_CATALOG.values())


class TestCartTotals:
    def test_quantities_multiply(self):
        items = resolve_cart_items([
            {"serviceId": "carpet-room", "quantity": 3},
            {"serviceId": "stain-protector"},
        ])
        totals = calculate_cart_totals(items)
        assert totals.total_duration_minutes == 3 * 45 + 15
        assert totals.total_price_cents == 3 * 6500 + 3000

    def test_snake_case_key_accepted(self):
        items = resolve_cart_items([{"service_id": "area-rug", "quantity": 2}])
        assert items[0].quantity == 2

    @pytest.mark.parametrize("raw,expected", [
        (0, 1), (-4, 1), ("2", 2), (2.9, 2), ("abc", 1), (None, 1), (float("inf"), 1),
    ])
    def test_quantity_coercion(self, raw, expected):
        items = resolve_cart_items([{"serviceId": "area-rug", "quantity": raw}])
        assert items[0].quantity == expected

    def test_custom_quote_adds_time_not_price(self):
        totals = calculate_cart_totals(resolve_cart_items([{"serviceId": "commercial-quote"}]))
        assert totals.total_price_cents == 0
        assert totals.total_duration_minutes == 180

    def test_unknown_service_raises(self):
        with pytest.raises(ValueError, match="Service not found: moon-polishing"):
            resolve_cart_items([{"serviceId": "moon-polishing"}])

    def test_empty_cart(self):
        totals = calculate_cart_totals([])
        assert totals.total_duration_minutes == 0


class TestTravel:
    BASE = Location("Base", 40.4208, -74.1908)

    def test_same_point_is_zero(self):
        assert haversine_miles(self.BASE, self.BASE) == pytest.approx(0.0)
        assert estimate_travel(self.BASE, origin=self.BASE).time_minutes == 0

    def test_one_degree_of_latitude(self):
        north = Location("North", 41.4208, -74.1908)
        assert haversine_miles(self.BASE, north) == pytest.approx(69.1, abs=0.2)

    def test_minutes_round_up(self):
        north = Location("North", 41.4208, -74.1908)
        estimate = estimate_travel(north, origin=self.BASE, average_speed_mph=30)
        # ~69.1 miles at 30 mph is ~138.2 minutes
        assert estimate.time_minutes == 139

    def test_format_travel_info(self):
        north = Location("North", 41.4208, -74.1908)
        estimate = estimate_travel(north, origin=self.BASE, average_speed_mph=30)
        assert format_travel_info(estimate) == "69.1 mi, ~139 min"

    def test_injected_config_sets_origin_and_speed(self):
        from dataclasses import replace

        from booking_engine.config import BusinessConfig, TravelConfig
        from tests.conftest import make_config

        config = replace(
            make_config(),
            business=BusinessConfig(base_latitude=41.4208, base_longitude=-74.1908),
            travel=TravelConfig(average_speed_mph=60),
        )
        estimate = estimate_travel(Location("Customer", 40.4208, -74.1908), config=config)
        # ~69.1 miles at 60 mph is ~69.1 minutes
        assert estimate.time_minutes == 70
