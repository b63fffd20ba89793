"""Shared fixtures for the booking-form test suite."""

from typing import Any, Dict, List, Optional

import pytest

from bookingform.config import load_config
from bookingform.gateway import BookingRequest, CheckoutRequest
from bookingform.settings import CompilerSettings


VEHICLES = [
    {"id": "v1", "name": "Sedan", "model": "Toyota Camry", "rate_per_km": 1.8,
     "max_passengers": 3, "max_luggage": 2, "max_carry_on": 2},
    {"id": "v2", "name": "SUV", "model": "", "image_url": "https://cdn.example.com/suv.png",
     "rate_per_km": 2.4, "max_passengers": 6, "max_luggage": 4, "max_carry_on": 4},
]

ROUTES = [
    {"id": "r1", "route_name": "Downtown to Airport", "fixed_price": 45},
    {"id": "r2", "route_name": "Harbor to Stadium", "fixed_price": 30.5},
]


class FakeGateway:
    """In-memory BookingGateway recording every call."""

    def __init__(
        self,
        booking_id: str = "bk_001",
        stripe_response: Optional[Dict[str, Any]] = None,
        paypal_response: Optional[Dict[str, Any]] = None,
        fail_booking: Optional[Exception] = None,
        fail_checkout: Optional[Exception] = None,
        fail_confirmation: Optional[Exception] = None,
    ):
        self.booking_id = booking_id
        self.stripe_response = stripe_response if stripe_response is not None else {
            "sessionUrl": "https://checkout.stripe.test/s/123"
        }
        self.paypal_response = paypal_response if paypal_response is not None else {
            "approvalUrl": "https://paypal.test/approve/123"
        }
        self.fail_booking = fail_booking
        self.fail_checkout = fail_checkout
        self.fail_confirmation = fail_confirmation
        self.bookings: List[BookingRequest] = []
        self.checkouts: List[CheckoutRequest] = []
        self.confirmations: List[tuple] = []

    async def create_booking(self, request: BookingRequest) -> str:
        if self.fail_booking is not None:
            raise self.fail_booking
        self.bookings.append(request)
        return self.booking_id

    async def create_stripe_checkout(self, request: CheckoutRequest) -> Dict[str, Any]:
        self.checkouts.append(request)
        if self.fail_checkout is not None:
            raise self.fail_checkout
        return self.stripe_response

    async def create_paypal_order(self, request: CheckoutRequest) -> Dict[str, Any]:
        self.checkouts.append(request)
        if self.fail_checkout is not None:
            raise self.fail_checkout
        return self.paypal_response

    async def send_booking_confirmation(self, booking_id: str, tenant_id: str) -> None:
        if self.fail_confirmation is not None:
            raise self.fail_confirmation
        self.confirmations.append((booking_id, tenant_id))


@pytest.fixture
def default_config():
    return load_config({})


@pytest.fixture
def fleet_config():
    """Configuration with vehicles, routes and every booking type enabled."""
    return load_config({
        "customizations": {
            "enabledBookingTypes": [
                "distance", "hourly", "flat_rate", "on_demand",
                "charter", "airport_transfer", "event_shuttle",
            ],
        },
        "pricing": {"base_fare": 5, "cost_per_km": 2, "cost_per_min": 0.5, "cost_per_hour": 50},
        "routes": ROUTES,
        "vehicles": VEHICLES,
    })


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def settings():
    return CompilerSettings(
        geocoder_access_token="pk.test-token",
        api_base_url="https://api.example.com",
        api_anon_key="anon-key",
        _env_file=None,
    )
