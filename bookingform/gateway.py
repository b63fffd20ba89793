"""Submission contract between the runtime and the booking backend.

The backend itself (booking persistence, payment providers, e-mail) is an
external collaborator. BookingGateway names the four calls the runtime
makes; request records define what it sends.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from typing_extensions import Protocol

from bookingform.types import BookingType, PaymentMethod

DEFAULT_DRIVER = "Unassigned"
DEFAULT_BOOKING_STATUS = "Scheduled"


@dataclass(frozen=True)
class BookingRequest:
    """Booking record sent to ``create_booking``.

    Attributes:
        tenant_id: Owner of the booking form
        customer: Customer name (the ``full_name`` value)
        pickup: Trip origin
        dropoff: Trip destination
        amount: Computed fare with two decimals
        booking_type: Active booking type
        payment_method: Selected payment category
        form_data: Every collected value, including promo code and extras
        rental_hours: Hours for hourly bookings
    """
    tenant_id: str
    customer: str
    pickup: str
    dropoff: str
    amount: str
    booking_type: BookingType
    payment_method: Optional[PaymentMethod] = None
    form_data: Dict[str, Any] = field(default_factory=dict)
    rental_hours: Optional[float] = None
    driver: str = DEFAULT_DRIVER
    status: str = DEFAULT_BOOKING_STATUS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uid": self.tenant_id,
            "customer": self.customer,
            "driver": self.driver,
            "pickup": self.pickup,
            "dropoff": self.dropoff,
            "status": self.status,
            "amount": self.amount,
            "booking_type": self.booking_type.value,
            "payment_method": self.payment_method.value if self.payment_method else None,
            "form_data": self.form_data,
            "rental_hours": self.rental_hours,
        }


@dataclass(frozen=True)
class CheckoutRequest:
    """Exchange of a booking id and amount for a provider redirect URL."""
    tenant_id: str
    booking_id: str
    amount: float
    customer_email: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "uid": self.tenant_id,
            "amount": self.amount,
            "bookingId": self.booking_id,
        }
        if self.customer_email:
            result["customerEmail"] = self.customer_email
        return result


class BookingGateway(Protocol):
    """Backend calls made during submission.

    Implementations may raise any exception; the runtime reports it as a
    recoverable submission failure.
    """

    async def create_booking(self, request: BookingRequest) -> str:
        """Create the booking record and return its identifier."""
        ...

    async def create_stripe_checkout(self, request: CheckoutRequest) -> Mapping[str, Any]:
        """Start a card checkout. The response carries ``sessionUrl`` or ``error``."""
        ...

    async def create_paypal_order(self, request: CheckoutRequest) -> Mapping[str, Any]:
        """Start a PayPal order. The response carries ``approvalUrl``."""
        ...

    async def send_booking_confirmation(self, booking_id: str, tenant_id: str) -> None:
        """Ask the backend to notify the customer about a new booking."""
        ...


__all__ = [
    "DEFAULT_DRIVER",
    "DEFAULT_BOOKING_STATUS",
    "BookingRequest",
    "CheckoutRequest",
    "BookingGateway",
]
