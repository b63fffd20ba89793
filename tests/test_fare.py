"""Unit tests for fare computation.

Tests cover:
- The deterministic string hash and mock estimator
- Rules per booking type
- Round-trip doubling and extras
- Missing inputs suppressing the quote
"""

import pytest

from bookingform.config import load_config
from bookingform.fare import (
    FareCalculator,
    FareQuote,
    HashDistanceEstimator,
    RouteEstimate,
    parse_hours,
    string_hash,
    trip_endpoints,
)
from bookingform.types import BookingType


class FixedEstimator:
    """Estimator returning one fixed route."""

    def __init__(self, distance_km=10.0, duration_min=20.0):
        self.calls = []
        self.result = RouteEstimate(distance_km=distance_km, duration_min=duration_min)

    def estimate(self, origin, destination):
        self.calls.append((origin, destination))
        return self.result


@pytest.fixture
def calculator(fleet_config):
    return FareCalculator(fleet_config.customizations, FixedEstimator())


class TestStringHash:
    """Test the rolling hash behind the mock estimator."""

    def test_known_values(self):
        assert string_hash("") == 0
        assert string_hash("a") == 97
        assert string_hash("ab") == 97 * 31 + 98

    def test_wraps_to_32_bits(self):
        value = string_hash("12 Main St" * 20)
        assert 0 <= value <= 2 ** 31

    def test_non_bmp_characters_hash_as_surrogate_pairs(self):
        assert string_hash("\U0001F695") == (0xD83D * 31 + 0xDE95)

    def test_estimator_ranges(self):
        """Should stay within 5-54 km and 10-99 minutes."""
        estimator = HashDistanceEstimator()
        for origin in ("A", "12 Main St", "Gare du Nord", "JFK"):
            estimate = estimator.estimate(origin, "Times Square")
            assert 5 <= estimate.distance_km <= 54
            assert 10 <= estimate.duration_min <= 99

    def test_estimator_is_deterministic(self):
        estimator = HashDistanceEstimator()
        assert estimator.estimate("A", "B") == HashDistanceEstimator().estimate("A", "B")


class TestDistanceRule:
    """Test the base + distance + duration rule."""

    def test_distance_fare(self, calculator):
        quote = calculator.quote(BookingType.DISTANCE, {
            "pickup_location": "12 Main St", "dropoff_location": "JFK",
        })
        assert quote.total == pytest.approx(5 + 10 * 2 + 20 * 0.5)
        assert quote.estimate == RouteEstimate(10.0, 20.0)

    @pytest.mark.parametrize("booking_type", [
        BookingType.ON_DEMAND, BookingType.CHARTER, BookingType.EVENT_SHUTTLE,
    ])
    def test_other_distance_types(self, calculator, booking_type):
        quote = calculator.quote(booking_type, {"pickup_location": "A", "dropoff_location": "B"})
        assert quote.display == "35.00"

    def test_missing_endpoint_gives_no_quote(self, calculator):
        """Should suppress the fare until both endpoints are known."""
        assert calculator.quote(BookingType.DISTANCE, {"pickup_location": "A"}) is None
        assert calculator.quote(BookingType.DISTANCE, {"pickup_location": "A", "dropoff_location": "  "}) is None

    def test_airport_name_fills_hidden_endpoint(self):
        estimator = FixedEstimator()
        calculator = FareCalculator(load_config({}).customizations, estimator)
        calculator.quote(BookingType.AIRPORT_TRANSFER, {"airport_name": "JFK", "dropoff_location": "5th Avenue"})
        assert estimator.calls == [("JFK", "5th Avenue")]

    def test_endpoints_are_trimmed(self):
        assert trip_endpoints(BookingType.DISTANCE, {"pickup_location": " A ", "dropoff_location": "B"}) == ("A", "B")


class TestHourlyRule:
    """Test the cost-per-hour rule."""

    def test_hourly_fare(self, default_config):
        calculator = FareCalculator(default_config.customizations)
        assert calculator.quote(BookingType.HOURLY, {"rental_hours": "3"}).display == "150.00"

    def test_fractional_hours(self, default_config):
        calculator = FareCalculator(default_config.customizations)
        assert calculator.quote(BookingType.HOURLY, {"rental_hours": 2.5}).total == pytest.approx(125.0)

    @pytest.mark.parametrize("hours", [None, "", "0", "-2", "many"])
    def test_unusable_hours(self, default_config, hours):
        calculator = FareCalculator(default_config.customizations)
        assert calculator.quote(BookingType.HOURLY, {"rental_hours": hours}) is None

    def test_round_trip_never_doubles_hourly(self, default_config):
        calculator = FareCalculator(default_config.customizations)
        quote = calculator.quote(BookingType.HOURLY, {"rental_hours": "3"}, round_trip=True)
        assert quote.round_trip is False
        assert quote.display == "150.00"

    def test_parse_hours(self):
        assert parse_hours(" 4 ") == 4.0
        assert parse_hours("x") is None


class TestFlatRateRule:
    """Test the fixed route price rule."""

    def test_route_price(self, calculator):
        assert calculator.quote(BookingType.FLAT_RATE, {"route_id": "r1"}).total == 45.0

    def test_unknown_route(self, calculator):
        assert calculator.quote(BookingType.FLAT_RATE, {"route_id": "r9"}) is None
        assert calculator.quote(BookingType.FLAT_RATE, {}) is None


class TestRoundTripAndExtras:
    """Test doubling and extras."""

    def test_round_trip_doubles_before_extras(self, calculator):
        """Should add extras after the round-trip doubling."""
        quote = calculator.quote(BookingType.FLAT_RATE, {"route_id": "r2"}, round_trip=True,
                                 extras={"Child Seat": 2, "Bottled Water": 1})
        assert quote.trip == pytest.approx(61.0)
        assert quote.extras == pytest.approx(32.0)
        assert quote.display == "93.00"

    def test_unknown_and_zero_extras_ignored(self, calculator):
        quote = calculator.quote(BookingType.FLAT_RATE, {"route_id": "r1"},
                                 extras={"Champagne": 3, "Child Seat": 0})
        assert quote.extras == 0.0

    def test_disabled_extra_ignored(self):
        config = load_config({
            "customizations": {"extraOptions": [{"name": "Wifi", "price": 3, "enabled": False}]},
            "routes": [{"id": "r1", "route_name": "Loop", "fixed_price": 10}],
        })
        quote = FareCalculator(config.customizations).quote(BookingType.FLAT_RATE, {"route_id": "r1"},
                                                            extras={"Wifi": 1})
        assert quote.total == 10.0

    def test_quote_to_dict(self, calculator):
        quote = calculator.quote(BookingType.DISTANCE, {"pickup_location": "A", "dropoff_location": "B"},
                                 round_trip=True)
        data = quote.to_dict()
        assert data["roundTrip"] is True
        assert data["total"] == 70.0
        assert data["distanceKm"] == 10.0

    def test_display_rounds_to_cents(self):
        assert FareQuote(BookingType.DISTANCE, base=10.005 + 0.001).display == "10.01"
