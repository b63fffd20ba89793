"""Integration tests for the complete booking lifecycle.

Tests cover end-to-end scenarios combining:
- Configuration loading and the compiled public page
- BookingSession orchestration over the compiled configuration
- State machine transitions and event emission
- Fare calculation, extras and payment redirection
"""

import asyncio
import json
import re

import pytest

from bookingform.compiler import CONFIG_SCRIPT_ID, compile_form, render_public_form
from bookingform.config import load_config
from bookingform.events import EventEmitter
from bookingform.session import BookingSession
from bookingform.types import BookingType, EventType, PaymentMethod, WizardStep

from tests.conftest import ROUTES, VEHICLES, FakeGateway


RAW_CONFIG = {
    "customizations": {
        "title": "Metro Cars",
        "color": "#2563eb",
        "enabledBookingTypes": ["distance", "flat_rate", "airport_transfer"],
        "selectedLanguages": ["en", "es"],
        "paymentIcons": ["visa", "cash"],
        "extraOptions": [{"name": "Child Seat", "price": 15, "min": 0, "max": 2, "enabled": True}],
    },
    "routes": ROUTES,
    "vehicles": VEHICLES,
}


def payload_of(html):
    match = re.search(rf'id="{CONFIG_SCRIPT_ID}">(.*?)</script>', html, re.DOTALL)
    return json.loads(match.group(1))


class TestCompiledPageToSession:
    """Test that the compiled payload drives an equivalent session."""

    def test_payload_reloads_to_same_configuration(self, settings):
        html = render_public_form(RAW_CONFIG, {"lang": "es"}, tenant_id="tenant-1", settings=settings)
        payload = payload_of(html)
        reloaded = load_config({"fields": payload["fields"], "customizations": payload["customizations"]})
        original = load_config(RAW_CONFIG)
        assert reloaded.to_payload() == original.to_payload()
        assert payload["lang"] == "es"

    def test_compiled_sections_match_session_types(self, settings):
        config = load_config(RAW_CONFIG)
        compiled = compile_form(config, settings)
        sections = [s.get("data-booking-type") for s in compiled.body.by_class("booking-type-section")]
        session = BookingSession(config)
        assert sections == [bt.value for bt in config.enabled_booking_types]
        assert session.booking_type.value == sections[0]


class TestHappyPath:
    """Test complete bookings from trip details to confirmation."""

    def test_flat_rate_cash_booking(self):
        """Should create a booking for the route price and confirm without payment."""
        config = load_config(RAW_CONFIG)
        gateway = FakeGateway(booking_id="bk_flat")
        emitter = EventEmitter()
        events = []
        emitter.on_any(events.append)
        session = BookingSession(config, gateway, tenant_id="tenant-1", emitter=emitter)

        session.switch_booking_type(BookingType.FLAT_RATE)
        session.set_value("route_id", "r1")
        session.set_value("datetime", "2030-05-01T09:30")
        assert session.fare_display == "$45.00"
        assert session.next()
        session.select_vehicle("v2")
        assert session.next()
        session.set_value("full_name", "Ada Lovelace")
        session.set_value("email", "ada@example.com")
        session.set_value("phone_number", "+1 555 0100")
        session.select_payment(PaymentMethod.CASH)
        assert session.next()

        result = asyncio.run(session.submit())

        assert result.booking_id == "bk_flat"
        assert result.redirect_url is None
        assert session.step == WizardStep.CONFIRMATION
        request = gateway.bookings[0]
        assert request.pickup == "Downtown to Airport"
        assert request.amount == "45.00"
        assert request.booking_type == BookingType.FLAT_RATE
        assert gateway.confirmations == [("bk_flat", "tenant-1")]
        event_types = [event.type for event in events]
        assert event_types[0] == EventType.SESSION_STARTED
        assert EventType.BOOKING_CREATED in event_types
        assert event_types[-1] == EventType.BOOKING_CONFIRMED

    def test_card_booking_with_extras_redirects(self):
        config = load_config(RAW_CONFIG)
        gateway = FakeGateway()
        session = BookingSession(config, gateway, tenant_id="tenant-1")

        session.set_value("pickup_location", "12 Main St")
        session.set_value("dropoff_location", "JFK Terminal 4")
        session.set_value("datetime", "2030-05-01T09:30")
        base_total = session.fare.total
        session.change_extra("Child Seat", 1)
        assert session.fare.total == pytest.approx(base_total + 15)
        assert session.next()
        assert session.next()
        session.set_value("full_name", "Ada Lovelace")
        session.set_value("email", "ada@example.com")
        session.set_value("phone_number", "+1 555 0100")
        session.select_payment(PaymentMethod.CREDIT_CARD)
        assert session.next()

        result = asyncio.run(session.submit())

        assert result.redirect_url == "https://checkout.stripe.test/s/123"
        assert session.step == WizardStep.SUMMARY
        checkout = gateway.checkouts[0]
        assert checkout.customer_email == "ada@example.com"
        assert checkout.amount == round(session.fare.total, 2)
        assert gateway.bookings[0].payment_method == PaymentMethod.CREDIT_CARD


class TestErrorRecovery:
    """Test that failures keep the session usable."""

    def test_failed_booking_then_retry(self):
        config = load_config(RAW_CONFIG)
        gateway = FakeGateway(fail_booking=ConnectionError("backend unavailable"))
        session = BookingSession(config, gateway, tenant_id="tenant-1")
        session.set_value("pickup_location", "12 Main St")
        session.set_value("dropoff_location", "JFK Terminal 4")
        session.set_value("datetime", "2030-05-01T09:30")
        session.next()
        session.next()
        session.set_value("full_name", "Ada Lovelace")
        session.set_value("email", "ada@example.com")
        session.set_value("phone_number", "+1 555 0100")
        session.select_payment(PaymentMethod.CASH)
        session.next()

        assert asyncio.run(session.submit()) is None
        assert session.validation_error == "backend unavailable"
        assert session.value("full_name") == "Ada Lovelace"

        gateway.fail_booking = None
        result = asyncio.run(session.submit())
        assert result.booking_id == "bk_001"
        assert session.step == WizardStep.CONFIRMATION
