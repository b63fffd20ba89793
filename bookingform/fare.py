"""Fare computation.

Rules per booking type:
- distance, on_demand, charter, event_shuttle: base fare plus distance and
  duration rates; needs both trip endpoints
- airport_transfer: distance rule, the airport name standing in for the
  endpoint the transfer direction hides
- hourly: cost per hour times rental hours (hours > 0)
- flat_rate: fixed price of the selected route

Round trip doubles the fare of every type except hourly. Extra options
(price x quantity) are added after doubling. When the inputs a rule needs
are missing no quote is produced and the fare display is suppressed.

Distance and duration come from a DistanceEstimator. The default
HashDistanceEstimator derives stable mock values from the addresses and is
meant to be replaced by a routing service.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from typing_extensions import Protocol

from bookingform.config import CustomizationOptions, ExtraOption
from bookingform.schema import ROUTE_FIELD_KEY
from bookingform.types import BookingType
from bookingform.validation import is_empty_value

PICKUP_KEY = "pickup_location"
DROPOFF_KEY = "dropoff_location"
RENTAL_HOURS_KEY = "rental_hours"
AIRPORT_NAME_KEY = "airport_name"

DISTANCE_RULE_TYPES = frozenset({
    BookingType.DISTANCE,
    BookingType.ON_DEMAND,
    BookingType.CHARTER,
    BookingType.AIRPORT_TRANSFER,
    BookingType.EVENT_SHUTTLE,
})


@dataclass(frozen=True)
class RouteEstimate:
    distance_km: float
    duration_min: float


class DistanceEstimator(Protocol):
    """Source of trip distance and duration."""

    def estimate(self, origin: str, destination: str) -> RouteEstimate:
        ...


def string_hash(text: str) -> int:
    """Non-negative 32-bit rolling hash (``h * 31 + unit``) over UTF-16 code units.

    Examples:
        >>> string_hash("")
        0
        >>> string_hash("ab")
        3105
    """
    value = 0
    for unit in _utf16_units(text):
        value = ((value << 5) - value + unit) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return abs(value)


def _utf16_units(text: str) -> Iterable[int]:
    for char in text:
        code = ord(char)
        if code > 0xFFFF:
            code -= 0x10000
            yield 0xD800 + (code >> 10)
            yield 0xDC00 + (code & 0x3FF)
        else:
            yield code


class HashDistanceEstimator:
    """Deterministic mock estimator: 5-54 km and 10-99 minutes.

    Examples:
        >>> estimator = HashDistanceEstimator()
        >>> estimator.estimate("A", "B") == estimator.estimate("A", "B")
        True
    """

    def estimate(self, origin: str, destination: str) -> RouteEstimate:
        value = string_hash(f"{origin}{destination}")
        return RouteEstimate(distance_km=float(5 + value % 50), duration_min=float(10 + value % 90))


@dataclass(frozen=True)
class FareQuote:
    """A computed fare.

    Attributes:
        booking_type: Booking type the rule was applied for
        base: Fare from the booking-type rule, before round-trip doubling
        round_trip: Whether doubling was applied
        extras: Sum of selected extra options
        estimate: Distance and duration used, for distance rules
    """
    booking_type: BookingType
    base: float
    round_trip: bool = False
    extras: float = 0.0
    estimate: Optional[RouteEstimate] = None

    @property
    def trip(self) -> float:
        return self.base * 2 if self.round_trip else self.base

    @property
    def total(self) -> float:
        return self.trip + self.extras

    @property
    def display(self) -> str:
        """Total with two decimals.

        Examples:
            >>> FareQuote(BookingType.HOURLY, base=150.0).display
            '150.00'
        """
        return f"{self.total:.2f}"

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "bookingType": self.booking_type.value,
            "base": self.base,
            "roundTrip": self.round_trip,
            "extras": self.extras,
            "total": round(self.total, 2),
        }
        if self.estimate is not None:
            result["distanceKm"] = self.estimate.distance_km
            result["durationMin"] = self.estimate.duration_min
        return result


def _text(values: Mapping[str, Any], key: str) -> str:
    value = values.get(key)
    return "" if is_empty_value(value) else str(value).strip()


def trip_endpoints(booking_type: BookingType, values: Mapping[str, Any]) -> Tuple[str, str]:
    """Origin and destination of a trip, empty when unknown.

    Examples:
        >>> trip_endpoints(BookingType.AIRPORT_TRANSFER,
        ...                {"pickup_location": "12 Main St", "airport_name": "JFK"})
        ('12 Main St', 'JFK')
    """
    origin = _text(values, PICKUP_KEY)
    destination = _text(values, DROPOFF_KEY)
    if booking_type == BookingType.AIRPORT_TRANSFER:
        airport = _text(values, AIRPORT_NAME_KEY)
        origin = origin or airport
        destination = destination or airport
    return origin, destination


def parse_hours(value: Any) -> Optional[float]:
    """Rental hours as a number, None when missing or not numeric."""
    if is_empty_value(value):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass
class FareCalculator:
    """Applies the fare rules of one customization set.

    Examples:
        >>> from bookingform.config import load_config
        >>> calculator = FareCalculator(load_config({}).customizations)
        >>> calculator.quote(BookingType.HOURLY, {"rental_hours": "3"}).display
        '150.00'
        >>> calculator.quote(BookingType.DISTANCE, {"pickup_location": "A"}) is None
        True
    """

    customizations: CustomizationOptions
    estimator: DistanceEstimator = field(default_factory=HashDistanceEstimator)

    def base_fare(self, booking_type: BookingType, values: Mapping[str, Any]) -> Tuple[Optional[float], Optional[RouteEstimate]]:
        pricing = self.customizations.pricing
        if booking_type in DISTANCE_RULE_TYPES:
            origin, destination = trip_endpoints(booking_type, values)
            if not origin or not destination:
                return None, None
            estimate = self.estimator.estimate(origin, destination)
            fare = (
                pricing.base_fare
                + estimate.distance_km * pricing.cost_per_km
                + estimate.duration_min * pricing.cost_per_min
            )
            return fare, estimate
        if booking_type == BookingType.HOURLY:
            hours = parse_hours(values.get(RENTAL_HOURS_KEY))
            if hours is None or hours <= 0:
                return None, None
            return pricing.cost_per_hour * hours, None
        if booking_type == BookingType.FLAT_RATE:
            route_id = _text(values, ROUTE_FIELD_KEY)
            route = self.customizations.route(route_id) if route_id else None
            if route is None:
                return None, None
            return route.fixed_price, None
        raise ValueError(f"No fare rule for booking type {booking_type}")

    def extras_total(self, extras: Mapping[str, int]) -> float:
        total = 0.0
        for name, quantity in extras.items():
            option: Optional[ExtraOption] = self.customizations.extra_option(name)
            if option is None or not option.enabled or quantity <= 0:
                continue
            total += option.price * quantity
        return total

    def quote(
        self,
        booking_type: BookingType,
        values: Mapping[str, Any],
        round_trip: bool = False,
        extras: Optional[Mapping[str, int]] = None,
    ) -> Optional[FareQuote]:
        """Compute the fare, or None when the rule's inputs are missing.

        ``values`` must hold only the visible fields of the booking type's
        section.
        """
        booking_type = BookingType(booking_type)
        base, estimate = self.base_fare(booking_type, values)
        if base is None:
            return None
        return FareQuote(
            booking_type=booking_type,
            base=base,
            round_trip=round_trip and booking_type != BookingType.HOURLY,
            extras=self.extras_total(extras or {}),
            estimate=estimate,
        )


__all__ = [
    "PICKUP_KEY",
    "DROPOFF_KEY",
    "RENTAL_HOURS_KEY",
    "AIRPORT_NAME_KEY",
    "RouteEstimate",
    "DistanceEstimator",
    "string_hash",
    "HashDistanceEstimator",
    "FareQuote",
    "trip_endpoints",
    "parse_hours",
    "FareCalculator",
]
