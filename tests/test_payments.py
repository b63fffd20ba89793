"""Unit tests for payment categories and checkout dispatch."""

import asyncio

import pytest

from bookingform.errors import PaymentRedirectError, SubmissionError
from bookingform.gateway import BookingRequest, CheckoutRequest
from bookingform.payments import (
    PaymentDispatcher,
    accepted_payment_icons,
    default_payment_method,
    enabled_payment_methods,
)
from bookingform.types import BookingType, ErrorType, PaymentMethod

from tests.conftest import FakeGateway

CHECKOUT = CheckoutRequest(tenant_id="tenant-1", booking_id="bk_001", amount=61.0,
                           customer_email="ada@example.com")


class TestPaymentCategories:
    """Test category derivation from the icon set."""

    def test_card_icons_enable_credit_card(self):
        assert enabled_payment_methods(["amex"]) == [PaymentMethod.CREDIT_CARD]

    def test_display_order_is_fixed(self):
        assert enabled_payment_methods(["cash", "paypal", "visa"]) == [
            PaymentMethod.CREDIT_CARD, PaymentMethod.PAYPAL, PaymentMethod.CASH,
        ]

    def test_unknown_icons_enable_nothing(self):
        assert enabled_payment_methods(["bitcoin"]) == []

    def test_cash_preselected(self):
        assert default_payment_method([PaymentMethod.PAYPAL, PaymentMethod.CASH]) == PaymentMethod.CASH

    def test_first_category_without_cash(self):
        assert default_payment_method([PaymentMethod.PAYPAL]) == PaymentMethod.PAYPAL

    def test_accepted_icons_skip_unknown_names(self):
        icons = accepted_payment_icons(["visa", "bitcoin", "cash"])
        assert [icon["name"] for icon in icons] == ["visa", "cash"]
        assert icons[0]["icon"]


class TestPaymentDispatcher:
    """Test checkout dispatch per category."""

    def test_cash_makes_no_call(self):
        gateway = FakeGateway()
        assert asyncio.run(PaymentDispatcher(gateway).dispatch(PaymentMethod.CASH, CHECKOUT)) is None
        assert gateway.checkouts == []

    def test_card_returns_session_url(self):
        gateway = FakeGateway()
        url = asyncio.run(PaymentDispatcher(gateway).dispatch(PaymentMethod.CREDIT_CARD, CHECKOUT))
        assert url == "https://checkout.stripe.test/s/123"
        assert gateway.checkouts == [CHECKOUT]

    def test_paypal_returns_approval_url(self):
        url = asyncio.run(PaymentDispatcher(FakeGateway()).dispatch(PaymentMethod.PAYPAL, CHECKOUT))
        assert url == "https://paypal.test/approve/123"

    def test_card_error_field(self):
        """Should surface the provider's error message."""
        gateway = FakeGateway(stripe_response={"error": "Stripe account not connected"})
        with pytest.raises(PaymentRedirectError) as exc_info:
            asyncio.run(PaymentDispatcher(gateway).dispatch(PaymentMethod.CREDIT_CARD, CHECKOUT))
        assert exc_info.value.message == "Stripe account not connected"
        assert exc_info.value.detail.type == ErrorType.PAYMENT_REDIRECT

    def test_paypal_missing_url(self):
        gateway = FakeGateway(paypal_response={})
        with pytest.raises(PaymentRedirectError) as exc_info:
            asyncio.run(PaymentDispatcher(gateway).dispatch(PaymentMethod.PAYPAL, CHECKOUT))
        assert exc_info.value.message == "Could not retrieve PayPal payment link."

    def test_gateway_exception_wrapped(self):
        gateway = FakeGateway(fail_checkout=TimeoutError("provider timeout"))
        with pytest.raises(PaymentRedirectError) as exc_info:
            asyncio.run(PaymentDispatcher(gateway).dispatch(PaymentMethod.CREDIT_CARD, CHECKOUT))
        assert isinstance(exc_info.value, SubmissionError)
        assert exc_info.value.detail.retryable is True


class TestRequests:
    """Test backend request records."""

    def test_booking_request_to_dict(self):
        request = BookingRequest(
            tenant_id="tenant-1", customer="Ada Lovelace", pickup="12 Main St", dropoff="JFK",
            amount="35.00", booking_type=BookingType.DISTANCE, payment_method=PaymentMethod.CASH,
        )
        data = request.to_dict()
        assert data["uid"] == "tenant-1"
        assert data["driver"] == "Unassigned"
        assert data["status"] == "Scheduled"
        assert data["booking_type"] == "distance"
        assert data["payment_method"] == "cash"

    def test_checkout_request_to_dict(self):
        assert CHECKOUT.to_dict() == {
            "uid": "tenant-1", "amount": 61.0, "bookingId": "bk_001", "customerEmail": "ada@example.com",
        }
        assert "customerEmail" not in CheckoutRequest("t", "b", 1.0).to_dict()
