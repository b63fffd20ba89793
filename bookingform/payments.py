"""Payment categories and checkout dispatch.

A payment category is offered only when at least one of its icon names is
in the configured payment-icon set. Cash is pre-selected when offered,
otherwise the first offered category.

Dispatch on submission:
- cash: no external call, the booking is confirmed directly
- credit_card: card checkout, redirect to the returned ``sessionUrl``
- paypal: PayPal order, redirect to the returned ``approvalUrl``
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from bookingform.errors import PaymentRedirectError, SubmissionError
from bookingform.gateway import BookingGateway, CheckoutRequest
from bookingform.icons import PAYMENT_ICONS
from bookingform.types import PaymentMethod

logger = logging.getLogger(__name__)

PAYMENT_CATEGORIES: Dict[PaymentMethod, Tuple[str, ...]] = {
    PaymentMethod.CREDIT_CARD: ("visa", "mastercard", "amex", "stripe", "googlepay", "applepay"),
    PaymentMethod.PAYPAL: ("paypal",),
    PaymentMethod.CASH: ("cash",),
}

# Translation keys of the submit label while redirecting
REDIRECT_LABEL_KEYS: Dict[PaymentMethod, str] = {
    PaymentMethod.CREDIT_CARD: "redirecting_to_payment",
    PaymentMethod.PAYPAL: "redirecting_to_paypal",
}


def enabled_payment_methods(payment_icons: Iterable[str]) -> List[PaymentMethod]:
    """Categories offered for a payment-icon set, in display order.

    Examples:
        >>> enabled_payment_methods(["visa", "cash"])
        [<PaymentMethod.CREDIT_CARD: 'credit_card'>, <PaymentMethod.CASH: 'cash'>]
        >>> enabled_payment_methods(["paypal"])
        [<PaymentMethod.PAYPAL: 'paypal'>]
    """
    icons = set(payment_icons)
    return [method for method, names in PAYMENT_CATEGORIES.items() if icons.intersection(names)]


def default_payment_method(methods: Iterable[PaymentMethod]) -> Optional[PaymentMethod]:
    """Cash when offered, otherwise the first offered category.

    Examples:
        >>> default_payment_method([PaymentMethod.CREDIT_CARD, PaymentMethod.CASH])
        <PaymentMethod.CASH: 'cash'>
        >>> default_payment_method([]) is None
        True
    """
    methods = list(methods)
    if PaymentMethod.CASH in methods:
        return PaymentMethod.CASH
    return methods[0] if methods else None


def accepted_payment_icons(payment_icons: Iterable[str]) -> List[Dict[str, str]]:
    """Known icons of the configured set, for the accepted-payments footer."""
    return [
        {"name": name, "label": PAYMENT_ICONS[name]["label"], "icon": PAYMENT_ICONS[name]["icon"]}
        for name in payment_icons
        if name in PAYMENT_ICONS
    ]


class PaymentDispatcher:
    """Starts the provider checkout for a created booking.

    Args:
        gateway: Backend used for checkout-initiation calls
    """

    def __init__(self, gateway: BookingGateway):
        self.gateway = gateway

    async def dispatch(
        self,
        method: Optional[PaymentMethod],
        request: CheckoutRequest,
    ) -> Optional[str]:
        """Start checkout for ``method``.

        Returns:
            The provider redirect URL, or None for cash

        Raises:
            PaymentRedirectError: If the call fails or returns no URL
        """
        if method is None or method == PaymentMethod.CASH:
            return None
        if method == PaymentMethod.CREDIT_CARD:
            data = await self._call(self.gateway.create_stripe_checkout, request)
            if data.get("error"):
                raise PaymentRedirectError(str(data["error"]))
            url = data.get("sessionUrl")
            if not url:
                raise PaymentRedirectError("Could not retrieve payment link.")
        elif method == PaymentMethod.PAYPAL:
            data = await self._call(self.gateway.create_paypal_order, request)
            url = data.get("approvalUrl")
            if not url:
                raise PaymentRedirectError("Could not retrieve PayPal payment link.")
        else:
            raise PaymentRedirectError(f"Unsupported payment method: {method}")
        logger.info("Checkout started for booking %s via %s", request.booking_id, method.value)
        return str(url)

    async def _call(self, func: Any, request: CheckoutRequest) -> Mapping[str, Any]:
        try:
            data = await func(request)
        except SubmissionError:
            raise
        except Exception as exc:
            logger.error("Checkout initiation failed for booking %s: %s", request.booking_id, exc)
            raise PaymentRedirectError(str(exc) or "Payment could not be started.") from exc
        return data or {}


__all__ = [
    "PAYMENT_CATEGORIES",
    "REDIRECT_LABEL_KEYS",
    "enabled_payment_methods",
    "default_payment_method",
    "accepted_payment_icons",
    "PaymentDispatcher",
]
