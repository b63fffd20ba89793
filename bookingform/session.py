"""Runtime booking session.

BookingSession is the Python model of the state machine the compiled
document runs in the browser (static/booking-runtime.js). It holds the
ephemeral session state (step, booking type, language, per-section
values, waypoints, round trip, extras, vehicle, payment method, fare)
and implements the transitions, guards, conditional visibility, fare
recomputation and payment dispatch.

Usage:
    >>> from bookingform.config import load_config
    >>> session = BookingSession(load_config({}), preview=True)
    >>> session.step
    <WizardStep.TRIP_DETAILS: 1>
    >>> session.next()
    False
    >>> session.validation_error
    'Please fill out all required fields.'
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple, Union

from bookingform.assembler import return_dropoff_id, supports_waypoints
from bookingform.config import BookingFormConfig, ExtraOption
from bookingform.datetime_picker import (
    CalendarDay,
    calendar_month,
    display_date,
    display_time,
    parse_value,
    pick_date,
    pick_time,
    shift_month,
)
from bookingform.errors import StepValidationError, SubmissionError
from bookingform.events import EventEmitter, WizardEvent
from bookingform.fare import (
    DROPOFF_KEY,
    PICKUP_KEY,
    RENTAL_HOURS_KEY,
    DistanceEstimator,
    FareCalculator,
    FareQuote,
    HashDistanceEstimator,
    parse_hours,
    trip_endpoints,
)
from bookingform.gateway import BookingGateway, BookingRequest, CheckoutRequest
from bookingform.i18n import Translator
from bookingform.payments import (
    REDIRECT_LABEL_KEYS,
    PaymentDispatcher,
    default_payment_method,
    enabled_payment_methods,
)
from bookingform.schema import FormField
from bookingform.state_machine import InvalidStepTransitionError, WizardStateMachine
from bookingform.types import (
    COMMON_SECTION,
    SECTION_KEYS,
    BookingType,
    EventType,
    FieldKind,
    PaymentMethod,
    WizardStep,
)
from bookingform.validation import StepValidator, is_empty_value

logger = logging.getLogger(__name__)

CUSTOMER_NAME_KEY = "full_name"
CUSTOMER_EMAIL_KEY = "email"


def waypoint_widget_id(booking_type: BookingType, index: int, return_trip: bool = False) -> str:
    """Geocoder widget id of a waypoint input.

    Examples:
        >>> waypoint_widget_id(BookingType.DISTANCE, 0)
        'waypoint_distance_0'
        >>> waypoint_widget_id(BookingType.DISTANCE, 1, return_trip=True)
        'return_waypoint_distance_1'
    """
    prefix = "return_waypoint" if return_trip else "waypoint"
    return f"{prefix}_{booking_type.value}_{index}"


@dataclass(frozen=True)
class SummaryItem:
    label: str
    value: str

    def to_dict(self) -> Dict[str, str]:
        return {"label": self.label, "value": self.value}


@dataclass(frozen=True)
class ExtraLine:
    name: str
    quantity: int
    unit_price: float

    @property
    def total(self) -> float:
        return self.unit_price * self.quantity

    @property
    def text(self) -> str:
        """
        Examples:
            >>> ExtraLine("Child Seat", 2, 15.0).text
            '2 x Child Seat (+$30.00)'
        """
        return f"{self.quantity} x {self.name} (+${self.total:.2f})"


@dataclass(frozen=True)
class BookingSummary:
    """Content of the summary step."""
    trip: List[SummaryItem]
    waypoints: List[str]
    return_leg: List[SummaryItem]
    vehicle: Optional[str]
    passenger: List[SummaryItem]
    extras: List[ExtraLine]
    payment_method: Optional[str]
    promo_code: str
    total_fare: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trip": [item.to_dict() for item in self.trip],
            "waypoints": list(self.waypoints),
            "returnLeg": [item.to_dict() for item in self.return_leg],
            "vehicle": self.vehicle,
            "passenger": [item.to_dict() for item in self.passenger],
            "extras": [line.text for line in self.extras],
            "paymentMethod": self.payment_method,
            "promoCode": self.promo_code,
            "totalFare": self.total_fare,
        }


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of an accepted submission.

    Attributes:
        booking_id: Created booking (None in preview mode)
        redirect_url: Provider checkout URL for card and PayPal payments
        preview: Whether the submission ran in builder preview mode
    """
    booking_id: Optional[str] = None
    redirect_url: Optional[str] = None
    preview: bool = False


@dataclass
class _TypeState:
    waypoints: List[str] = field(default_factory=list)
    return_waypoints: List[str] = field(default_factory=list)
    return_dropoff: str = ""


class BookingSession:
    """Ephemeral state of one booking wizard.

    Args:
        config: Normalized configuration
        gateway: Backend used on public submission
        preview: Builder preview mode; submission makes no external calls
        tenant_id: Owner of the form, required for public submission
        lang: Active language; defaults to the configured default
        booking_type: Initial booking type; defaults to the first enabled type
        estimator: Distance/duration source for distance-based fares
        emitter: Receives every session event
    """

    def __init__(
        self,
        config: BookingFormConfig,
        gateway: Optional[BookingGateway] = None,
        *,
        preview: bool = False,
        tenant_id: Optional[str] = None,
        lang: Optional[str] = None,
        booking_type: Optional[Union[str, BookingType]] = None,
        estimator: Optional[DistanceEstimator] = None,
        emitter: Optional[EventEmitter] = None,
    ):
        self.config = config
        self.customizations = config.customizations
        self.gateway = gateway
        self.preview = preview
        self.tenant_id = tenant_id
        self.emitter = emitter or EventEmitter()
        self.machine = WizardStateMachine(emitter=self.emitter)
        self.calculator = FareCalculator(self.customizations, estimator or HashDistanceEstimator())
        self.validator = StepValidator()

        self.booking_type = BookingType(booking_type) if booking_type else config.enabled_booking_types[0]
        if self.booking_type not in config.enabled_booking_types:
            raise ValueError(f"Booking type {self.booking_type.value} is not enabled")
        self.lang = lang or self.customizations.default_language
        self.t = Translator(self.lang)

        self.values: Dict[str, Dict[str, Any]] = {name: {} for name in SECTION_KEYS}
        self._types: Dict[BookingType, _TypeState] = {bt: _TypeState() for bt in BookingType}
        self.round_trip = False
        self.extras: Dict[str, int] = {}
        vehicles = self.customizations.vehicles
        self.vehicle_id: Optional[str] = vehicles[0].id if vehicles else None
        self.payment_methods = enabled_payment_methods(self.customizations.payment_icons)
        self.payment_method = default_payment_method(self.payment_methods)
        self.promo_code = ""

        self.validation_error: Optional[str] = None
        self.last_error: Optional[SubmissionError] = None
        self.fare: Optional[FareQuote] = None
        self.is_submitting = False
        self.submit_label = self.default_submit_label()
        self.notice: Optional[str] = None
        self.booking_id: Optional[str] = None
        self.redirect_url: Optional[str] = None
        self.initialized_geocoders: Set[str] = set()
        self._shown_months: Dict[Tuple[str, str], Tuple[int, int]] = {}

        self._emit(EventType.SESSION_STARTED, {"preview": preview})
        self.initialize_geocoders()
        self.recompute_fare()

    # State accessors

    @property
    def step(self) -> WizardStep:
        return self.machine.step

    @property
    def section(self) -> str:
        return self.booking_type.value

    def waypoints(self, booking_type: Optional[BookingType] = None) -> List[str]:
        return list(self._types[booking_type or self.booking_type].waypoints)

    def return_waypoints(self, booking_type: Optional[BookingType] = None) -> List[str]:
        return list(self._types[booking_type or self.booking_type].return_waypoints)

    def return_dropoff(self, booking_type: Optional[BookingType] = None) -> str:
        return self._types[booking_type or self.booking_type].return_dropoff

    @property
    def fare_display(self) -> Optional[str]:
        return f"${self.fare.display}" if self.fare is not None else None

    def _emit(self, event_type: EventType, payload: Optional[Dict[str, Any]] = None) -> None:
        self.emitter.emit(WizardEvent.create(event_type, self.step, self.booking_type, payload))

    # Field values and conditional visibility

    def _section_name(self, section: Optional[Union[str, BookingType]]) -> str:
        if section is None:
            return self.section
        name = section.value if isinstance(section, BookingType) else str(section)
        if name not in self.values:
            raise KeyError(f"Unknown section: {name}")
        return name

    def _field(self, section: str, key: str) -> Optional[FormField]:
        for form_field in self.config.fields.section(section):
            if form_field.value_key == key:
                return form_field
        return None

    def resolve_section(self, key: str) -> str:
        """Section that owns ``key``: the active type's section, then common."""
        if self._field(self.section, key) is not None:
            return self.section
        if self._field(COMMON_SECTION, key) is not None:
            return COMMON_SECTION
        raise KeyError(f"No field '{key}' in section '{self.section}' or '{COMMON_SECTION}'")

    def value(self, key: str, section: Optional[Union[str, BookingType]] = None) -> Any:
        name = self._section_name(section) if section is not None else self.resolve_section(key)
        return self.values[name].get(key)

    def set_value(self, key: str, value: Any, section: Optional[Union[str, BookingType]] = None) -> None:
        """Store a field value.

        Dependents of ``key`` are re-evaluated on the next visibility query;
        a change to the active type's section recomputes the fare.
        """
        name = self._section_name(section) if section is not None else self.resolve_section(key)
        if self._field(name, key) is None:
            raise KeyError(f"No field '{key}' in section '{name}'")
        self.values[name][key] = value
        self._emit(EventType.FIELD_UPDATED, {"section": name, "key": key})
        if name == self.section:
            self.recompute_fare()

    def clear_value(self, key: str, section: Optional[Union[str, BookingType]] = None) -> None:
        self.set_value(key, "", section)

    def geocoding_failed(self, key: str, section: Optional[Union[str, BookingType]] = None) -> None:
        """A geocoder error degrades to an empty address."""
        logger.warning("Geocoding failed for %s; clearing the address", key)
        self.set_value(key, "", section)

    # Date-time picker

    def _picker_key(self, key: str, section: Optional[Union[str, BookingType]]) -> Tuple[str, str]:
        name = self._section_name(section) if section is not None else self.resolve_section(key)
        return name, key

    def shown_month(self, key: str, section: Optional[Union[str, BookingType]] = None,
                    today: Optional[date] = None) -> Tuple[int, int]:
        """Month the picker displays: the last one navigated to, else the selected or current month."""
        name, key = self._picker_key(key, section)
        if (name, key) in self._shown_months:
            return self._shown_months[(name, key)]
        selected = parse_value(self.values[name].get(key))
        anchor = selected.date() if selected else (today or date.today())
        return anchor.year, anchor.month

    def shift_calendar(self, key: str, delta: int, section: Optional[Union[str, BookingType]] = None,
                       today: Optional[date] = None) -> Tuple[int, int]:
        name, key = self._picker_key(key, section)
        year, month = self.shown_month(key, name, today=today)
        self._shown_months[(name, key)] = shift_month(year, month, delta)
        return self._shown_months[(name, key)]

    def calendar(self, key: str, section: Optional[Union[str, BookingType]] = None,
                 today: Optional[date] = None) -> List[List[CalendarDay]]:
        name, key = self._picker_key(key, section)
        year, month = self.shown_month(key, name, today=today)
        return calendar_month(year, month, today=today, selected=self.values[name].get(key))

    def pick_date(self, key: str, day: date, section: Optional[Union[str, BookingType]] = None,
                  today: Optional[date] = None) -> str:
        """Choose a calendar day, keeping the time already picked.

        Past days are refused the way the calendar disables them.
        """
        name, key = self._picker_key(key, section)
        if day < (today or date.today()):
            raise ValueError(f"{day.isoformat()} is in the past")
        value = pick_date(self.values[name].get(key), day)
        self.set_value(key, value, name)
        self._shown_months.pop((name, key), None)
        return value

    def pick_time(self, key: str, slot_value: str, section: Optional[Union[str, BookingType]] = None,
                  today: Optional[date] = None) -> str:
        name, key = self._picker_key(key, section)
        value = pick_time(self.values[name].get(key), slot_value, today=today)
        self.set_value(key, value, name)
        return value

    def is_visible(self, form_field: FormField, section: Optional[Union[str, BookingType]] = None) -> bool:
        """Whether a field is currently shown.

        A field with conditional logic is visible iff its controlling field
        is visible and currently equals the configured value.
        """
        return self._is_visible(form_field, self._section_name(section), set())

    def _is_visible(self, form_field: FormField, section: str, seen: Set[str]) -> bool:
        logic = form_field.conditional_logic
        if logic is None:
            return True
        if form_field.id in seen:
            return False
        seen.add(form_field.id)
        controller = self.config.fields.field_by_key(section, logic.field_key)
        if controller is None or not self._is_visible(controller, section, seen):
            return False
        return logic.matches(self.values[section].get(logic.field_key))

    def visible_fields(self, section: Optional[Union[str, BookingType]] = None) -> List[FormField]:
        name = self._section_name(section)
        return [f for f in self.config.fields.section(name) if self._is_visible(f, name, set())]

    def required_fields(self, section: Optional[Union[str, BookingType]] = None) -> List[FormField]:
        """Required fields subject to the step guard (visible ones only)."""
        return [f for f in self.visible_fields(section) if f.required]

    def visible_values(self, section: Optional[Union[str, BookingType]] = None) -> Dict[str, Any]:
        name = self._section_name(section)
        stored = self.values[name]
        return {f.value_key: stored[f.value_key] for f in self.visible_fields(name) if f.value_key in stored}

    # Guards

    def validate_step(self, step: WizardStep) -> None:
        """Check the guard of leaving ``step`` forwards.

        Raises:
            StepValidationError: With the inline message and missing fields
        """
        step = WizardStep(step)
        if step == WizardStep.TRIP_DETAILS:
            self._validate_section(self.section)
        elif step == WizardStep.VEHICLE:
            if self.customizations.vehicles and self.vehicle_id is None:
                raise StepValidationError(self.t("select_vehicle_to_continue"))
        elif step == WizardStep.PASSENGER_PAYMENT:
            self._validate_section(COMMON_SECTION)

    def _validate_section(self, section: str) -> None:
        result = self.validator.validate(self.required_fields(section), self.values[section])
        if not result.is_valid:
            raise StepValidationError(self.t("fill_required_fields"), fields=result.errors)

    def can_advance(self, step: Optional[WizardStep] = None) -> bool:
        try:
            self.validate_step(step or self.step)
        except StepValidationError:
            return False
        return True

    def _fail_validation(self, error: StepValidationError) -> None:
        self.validation_error = error.message
        self._emit(EventType.VALIDATION_FAILED, {
            "message": error.message,
            "fields": [f.path for f in error.fields],
        })

    # Transitions

    def next(self) -> bool:
        """Advance from steps 1-3 when the current guard holds.

        Returns:
            True if the step advanced; False with ``validation_error`` set
        """
        if self.step >= WizardStep.SUMMARY:
            raise InvalidStepTransitionError(
                self.step, None, "Invalid step transition: use submit() from the summary"
            )
        try:
            self.validate_step(self.step)
        except StepValidationError as exc:
            self._fail_validation(exc)
            return False
        self.validation_error = None
        self.machine.next(self.booking_type)
        return True

    def back(self) -> None:
        self.validation_error = None
        self.machine.back(self.booking_type)

    def edit(self, step: Union[int, WizardStep]) -> None:
        """Jump from the summary to step 1, 2 or 3."""
        self.validation_error = None
        self.machine.edit(WizardStep(step), self.booking_type)

    def switch_booking_type(self, booking_type: Union[str, BookingType]) -> None:
        """Make another enabled booking type active.

        Values entered in other sections are kept. Geocoders of the new
        section are initialized unless already attached.
        """
        booking_type = BookingType(booking_type)
        if booking_type not in self.config.enabled_booking_types:
            raise ValueError(f"Booking type {booking_type.value} is not enabled")
        if booking_type == self.booking_type:
            return
        previous = self.booking_type
        self.booking_type = booking_type
        self.validation_error = None
        self._emit(EventType.BOOKING_TYPE_CHANGED, {"from": previous.value, "to": booking_type.value})
        self.initialize_geocoders()
        self.recompute_fare()

    def set_language(self, lang: str) -> None:
        if lang not in self.customizations.selected_languages:
            raise ValueError(f"Language {lang!r} is not selected for this form")
        self.lang = lang
        self.t = Translator(lang)
        if not self.is_submitting:
            self.submit_label = self.default_submit_label()
        self._emit(EventType.LANGUAGE_CHANGED, {"lang": lang})

    # Geocoders

    def geocoder_ids(self, booking_type: Optional[BookingType] = None) -> List[str]:
        """Geocoder widgets of a booking type's section."""
        booking_type = booking_type or self.booking_type
        state = self._types[booking_type]
        ids = [
            f"geocoder-container-{f.id}"
            for f in self.config.fields.section(booking_type)
            if f.kind == FieldKind.ADDRESS
        ]
        ids.extend(waypoint_widget_id(booking_type, i) for i in range(len(state.waypoints)))
        if self.round_trip and booking_type != BookingType.HOURLY:
            ids.extend(waypoint_widget_id(booking_type, i, True) for i in range(len(state.return_waypoints)))
            ids.append(f"geocoder-container-{return_dropoff_id(booking_type)}")
        return ids

    def initialize_geocoders(self) -> List[str]:
        """Attach the active section's geocoders that are not attached yet."""
        created = []
        for widget_id in self.geocoder_ids():
            if widget_id in self.initialized_geocoders:
                continue
            self.initialized_geocoders.add(widget_id)
            created.append(widget_id)
            self._emit(EventType.GEOCODER_INITIALIZED, {"widget": widget_id})
        return created

    def _forget_waypoint_widgets(self, booking_type: BookingType, return_trip: bool) -> None:
        prefix = waypoint_widget_id(booking_type, 0, return_trip)[:-1]
        self.initialized_geocoders = {w for w in self.initialized_geocoders if not w.startswith(prefix)}

    # Waypoints and round trip

    def _waypoint_type(self, booking_type: Optional[Union[str, BookingType]]) -> BookingType:
        booking_type = BookingType(booking_type) if booking_type else self.booking_type
        if not supports_waypoints(self.config, booking_type):
            raise ValueError(f"Waypoints are not available for {booking_type.value}")
        return booking_type

    def add_waypoint(self, booking_type: Optional[Union[str, BookingType]] = None) -> int:
        """Append an empty waypoint and return its index."""
        booking_type = self._waypoint_type(booking_type)
        waypoints = self._types[booking_type].waypoints
        waypoints.append("")
        self._emit(EventType.WAYPOINT_ADDED, {"index": len(waypoints) - 1})
        self.initialize_geocoders()
        return len(waypoints) - 1

    def set_waypoint(self, index: int, value: str, booking_type: Optional[Union[str, BookingType]] = None) -> None:
        booking_type = self._waypoint_type(booking_type)
        self._types[booking_type].waypoints[index] = value or ""

    def remove_waypoint(self, index: int, booking_type: Optional[Union[str, BookingType]] = None) -> str:
        booking_type = self._waypoint_type(booking_type)
        removed = self._types[booking_type].waypoints.pop(index)
        self._forget_waypoint_widgets(booking_type, return_trip=False)
        self._emit(EventType.WAYPOINT_REMOVED, {"index": index})
        self.initialize_geocoders()
        return removed

    def _require_round_trip(self) -> None:
        if not self.round_trip or self.booking_type == BookingType.HOURLY:
            raise ValueError("Round trip is not enabled")

    def add_return_waypoint(self) -> int:
        self._require_round_trip()
        waypoints = self._types[self.booking_type].return_waypoints
        waypoints.append("")
        self._emit(EventType.WAYPOINT_ADDED, {"index": len(waypoints) - 1, "returnTrip": True})
        self.initialize_geocoders()
        return len(waypoints) - 1

    def set_return_waypoint(self, index: int, value: str) -> None:
        self._require_round_trip()
        self._types[self.booking_type].return_waypoints[index] = value or ""

    def remove_return_waypoint(self, index: int) -> str:
        self._require_round_trip()
        removed = self._types[self.booking_type].return_waypoints.pop(index)
        self._forget_waypoint_widgets(self.booking_type, return_trip=True)
        self._emit(EventType.WAYPOINT_REMOVED, {"index": index, "returnTrip": True})
        self.initialize_geocoders()
        return removed

    def set_return_dropoff(self, value: str) -> None:
        self._require_round_trip()
        self._types[self.booking_type].return_dropoff = value or ""

    def toggle_round_trip(self, enabled: Optional[bool] = None) -> bool:
        """Turn the round trip on or off (flip when ``enabled`` is None).

        Turning it off clears the return dropoff and return waypoints of
        every booking type. Hourly bookings offer no round trip.

        Raises:
            ValueError: If turned on while the hourly type is active
        """
        enabled = (not self.round_trip) if enabled is None else bool(enabled)
        if enabled and self.booking_type == BookingType.HOURLY:
            raise ValueError("Round trip is not available for hourly bookings")
        self.round_trip = enabled
        if not self.round_trip:
            for booking_type, state in self._types.items():
                state.return_dropoff = ""
                state.return_waypoints.clear()
                self._forget_waypoint_widgets(booking_type, return_trip=True)
                self.initialized_geocoders.discard(f"geocoder-container-{return_dropoff_id(booking_type)}")
        self._emit(EventType.ROUND_TRIP_TOGGLED, {"enabled": self.round_trip})
        self.initialize_geocoders()
        self.recompute_fare()
        return self.round_trip

    # Extras

    def _extra_option(self, name: str) -> ExtraOption:
        option = self.customizations.extra_option(name)
        if option is None or not option.enabled:
            raise KeyError(f"Unknown extra option: {name}")
        return option

    def change_extra(self, name: str, delta: int) -> int:
        """Step an extra option's quantity by ``delta``.

        The first increase selects ``max(min, 1)``; further steps stay in
        ``[min, max]``. Stepping below ``min`` (or reaching 0) removes the
        option from the selection.

        Returns:
            The selected quantity (0 when removed)
        """
        option = self._extra_option(name)
        current = self.extras.get(name, 0)
        if current == 0:
            target = max(option.min, 1) if delta > 0 else 0
        else:
            target = current + delta
        return self._apply_extra(option, target)

    def set_extra(self, name: str, quantity: int) -> int:
        """Set a quantity directly, clamped to the option's bounds."""
        return self._apply_extra(self._extra_option(name), int(quantity))

    def _apply_extra(self, option: ExtraOption, target: int) -> int:
        if target <= 0 or target < option.min:
            quantity = 0
            self.extras.pop(option.name, None)
        else:
            quantity = option.clamp(target)
            self.extras[option.name] = quantity
        self._emit(EventType.EXTRA_CHANGED, {"name": option.name, "quantity": quantity})
        self.recompute_fare()
        return quantity

    # Vehicle, payment and promo code

    def select_vehicle(self, vehicle_id: str) -> None:
        if self.customizations.vehicle(vehicle_id) is None:
            raise ValueError(f"Unknown vehicle: {vehicle_id}")
        self.vehicle_id = str(vehicle_id)
        self._emit(EventType.VEHICLE_SELECTED, {"vehicleId": self.vehicle_id})

    def select_payment(self, method: Union[str, PaymentMethod]) -> None:
        method = PaymentMethod(method)
        if method not in self.payment_methods:
            raise ValueError(f"Payment method {method.value} is not offered")
        self.payment_method = method
        if not self.is_submitting:
            self.submit_label = self.default_submit_label()
        self._emit(EventType.PAYMENT_SELECTED, {"method": method.value})

    def set_promo_code(self, code: str) -> None:
        self.promo_code = (code or "").strip()

    def default_submit_label(self) -> str:
        if self.payment_method in (None, PaymentMethod.CASH):
            return self.t("confirm_booking")
        return self.t("make_payment")

    # Fare

    def recompute_fare(self) -> Optional[FareQuote]:
        """Recompute the fare from the active section's visible values."""
        quote = self.calculator.quote(
            self.booking_type,
            self.visible_values(),
            round_trip=self.round_trip,
            extras=self.extras,
        )
        if quote != self.fare:
            self.fare = quote
            self._emit(EventType.FARE_UPDATED, {"fare": quote.display if quote else None})
        return quote

    # Summary

    def _display_value(self, form_field: FormField, value: Any) -> str:
        if form_field.kind == FieldKind.DATETIME:
            day, time_of_day = display_date(str(value)), display_time(str(value))
            if day and time_of_day:
                return f"{day}, {time_of_day}"
        if form_field.kind == FieldKind.ROUTE:
            route = self.customizations.route(str(value))
            if route is not None:
                return route.route_name
        if form_field.kind == FieldKind.VEHICLE:
            vehicle = self.customizations.vehicle(str(value))
            if vehicle is not None:
                return vehicle.name
        if isinstance(value, (list, tuple)):
            return ", ".join(str(v) for v in value)
        if isinstance(value, bool):
            return self.t("yes", "Yes") if value else self.t("no", "No")
        return str(value)

    def _items(self, section: str) -> List[SummaryItem]:
        stored = self.values[section]
        return [
            SummaryItem(label=self.t.label(f.key, f.label), value=self._display_value(f, stored[f.value_key]))
            for f in self.visible_fields(section)
            if not is_empty_value(stored.get(f.value_key))
        ]

    def summary(self) -> BookingSummary:
        """Build the summary step content from the current state."""
        state = self._types[self.booking_type]
        return_leg: List[SummaryItem] = []
        if self.round_trip and self.booking_type != BookingType.HOURLY:
            _, dropoff = trip_endpoints(self.booking_type, self.visible_values())
            if dropoff:
                return_leg.append(SummaryItem(self.t("return_pickup"), dropoff))
            stops = [w for w in state.return_waypoints if w.strip()]
            if stops:
                return_leg.append(SummaryItem(self.t("return_waypoints"), ", ".join(stops)))
            if state.return_dropoff:
                return_leg.append(SummaryItem(self.t("return_dropoff"), state.return_dropoff))

        vehicle = self.customizations.vehicle(self.vehicle_id) if self.vehicle_id else None
        extras = []
        for name, quantity in self.extras.items():
            option = self.customizations.extra_option(name)
            if option is not None:
                extras.append(ExtraLine(name=name, quantity=quantity, unit_price=option.price))

        return BookingSummary(
            trip=self._items(self.section),
            waypoints=[w for w in state.waypoints if w.strip()],
            return_leg=return_leg,
            vehicle=(f"{vehicle.name} ({vehicle.model})" if vehicle.model else vehicle.name) if vehicle else None,
            passenger=self._items(COMMON_SECTION),
            extras=extras,
            payment_method=self.t(self.payment_method.value) if self.payment_method else None,
            promo_code=self.promo_code,
            total_fare=self.fare_display,
        )

    # Submission

    def form_data(self) -> Dict[str, Any]:
        """Every value submitted with the booking."""
        state = self._types[self.booking_type]
        data: Dict[str, Any] = dict(self.visible_values())
        data.update(self.visible_values(COMMON_SECTION))
        data["booking_type"] = self.booking_type.value
        data["waypoints"] = [w for w in state.waypoints if w.strip()]
        data["round_trip"] = self.round_trip and self.booking_type != BookingType.HOURLY
        if data["round_trip"]:
            data["return_waypoints"] = [w for w in state.return_waypoints if w.strip()]
            data["return_dropoff"] = state.return_dropoff
        data["extras"] = dict(self.extras)
        data["vehicle_id"] = self.vehicle_id
        data["payment_method"] = self.payment_method.value if self.payment_method else None
        data["promo_code"] = self.promo_code
        return data

    def booking_request(self) -> BookingRequest:
        values = self.visible_values()
        pickup, dropoff = trip_endpoints(self.booking_type, values)
        if self.booking_type == BookingType.FLAT_RATE and not pickup:
            route = self.customizations.route(str(values.get("route_id") or ""))
            pickup = route.route_name if route else ""
        amount = self.fare.total if self.fare is not None else 0.0
        hours = parse_hours(values.get(RENTAL_HOURS_KEY)) if self.booking_type == BookingType.HOURLY else None
        return BookingRequest(
            tenant_id=self.tenant_id or "",
            customer=str(self.values[COMMON_SECTION].get(CUSTOMER_NAME_KEY) or ""),
            pickup=pickup or str(values.get(PICKUP_KEY) or ""),
            dropoff=dropoff or str(values.get(DROPOFF_KEY) or ""),
            amount=f"{amount:.2f}",
            booking_type=self.booking_type,
            payment_method=self.payment_method,
            form_data=self.form_data(),
            rental_hours=hours,
        )

    def _validate_all(self) -> None:
        for step in (WizardStep.TRIP_DETAILS, WizardStep.VEHICLE, WizardStep.PASSENGER_PAYMENT):
            self.validate_step(step)

    async def submit(self) -> Optional[SubmissionResult]:
        """Submit the booking from the summary step.

        Returns:
            The result of an accepted submission, or None when the call was
            ignored (already submitting) or failed. Failures leave the
            session on the summary with ``validation_error`` set, the submit
            label on "Try Again" and every entered value intact.
        """
        if self.is_submitting:
            logger.debug("Submission already in progress; ignoring")
            return None
        if self.step != WizardStep.SUMMARY:
            raise InvalidStepTransitionError(
                self.step, WizardStep.CONFIRMATION, "Invalid step transition: submit is only available from the summary"
            )
        try:
            self._validate_all()
        except StepValidationError as exc:
            self._fail_validation(exc)
            return None
        self.validation_error = None

        if self.preview:
            self.notice = self.t("preview_notice")
            self.machine.transition_to(WizardStep.CONFIRMATION, self.booking_type)
            self._emit(EventType.BOOKING_CONFIRMED, {"preview": True})
            return SubmissionResult(preview=True)

        self.is_submitting = True
        self.submit_label = self.t("submitting")
        self._emit(EventType.SUBMISSION_STARTED, {"paymentMethod": self.payment_method.value
                                                  if self.payment_method else None})
        try:
            return await self._submit_public()
        except SubmissionError as exc:
            logger.error("Booking submission failed: %s", exc.message)
            self.last_error = exc
            self.validation_error = exc.message
            self.submit_label = self.t("try_again")
            self._emit(EventType.SUBMISSION_FAILED, exc.detail.to_dict())
            return None
        finally:
            self.is_submitting = False

    async def _submit_public(self) -> SubmissionResult:
        if not self.tenant_id:
            raise SubmissionError("This booking form is not linked to an account.")
        if self.gateway is None:
            raise SubmissionError("Bookings cannot be submitted from this page.")

        request = self.booking_request()
        try:
            booking_id = await self.gateway.create_booking(request)
        except SubmissionError:
            raise
        except Exception as exc:
            raise SubmissionError(str(exc) or "The booking could not be created.") from exc
        if not booking_id:
            raise SubmissionError("The booking could not be created.")
        self.booking_id = str(booking_id)
        logger.info("Created booking %s (%s)", self.booking_id, self.booking_type.value)
        self._emit(EventType.BOOKING_CREATED, {"bookingId": self.booking_id})

        try:
            await self.gateway.send_booking_confirmation(self.booking_id, self.tenant_id)
        except Exception:
            logger.warning("Confirmation notification failed for booking %s", self.booking_id, exc_info=True)

        if self.payment_method in (None, PaymentMethod.CASH):
            self.machine.transition_to(WizardStep.CONFIRMATION, self.booking_type)
            self.submit_label = self.default_submit_label()
            self._emit(EventType.BOOKING_CONFIRMED, {"bookingId": self.booking_id})
            return SubmissionResult(booking_id=self.booking_id)

        self.submit_label = self.t(REDIRECT_LABEL_KEYS[self.payment_method])
        checkout = CheckoutRequest(
            tenant_id=self.tenant_id,
            booking_id=self.booking_id,
            amount=round(self.fare.total, 2) if self.fare is not None else 0.0,
            customer_email=self.values[COMMON_SECTION].get(CUSTOMER_EMAIL_KEY) or None,
        )
        url = await PaymentDispatcher(self.gateway).dispatch(self.payment_method, checkout)
        self.redirect_url = url
        self._emit(EventType.PAYMENT_REDIRECT, {"bookingId": self.booking_id, "url": url})
        return SubmissionResult(booking_id=self.booking_id, redirect_url=url)


__all__ = [
    "BookingSession",
    "BookingSummary",
    "SummaryItem",
    "ExtraLine",
    "SubmissionResult",
    "waypoint_widget_id",
]
