"""Core type definitions for the booking-form compiler and runtime.

This module defines the fundamental enumerations shared by the compiler
(renderer, assembler, style compiler) and the runtime session:
- FieldType: Declared input type of a form field
- FieldKind: Rendering capability resolved once per field at load time
- BookingType: Booking categories, each with its own field section
- PaymentMethod: Payment categories offered on the passenger step
- WizardStep: The five wizard states
- Layout enums: container style, button skin/position, visibility
- EventType / ErrorType / FieldErrorCode: runtime events and error taxonomy
"""

from enum import Enum, IntEnum
from typing import Dict, Tuple, Union


class FieldType(str, Enum):
    """Declared type of a form field.

    Legacy spellings found in stored schemas are accepted through
    FieldType.parse (e.g. "text", "textarea", "datetime").
    """
    SHORT_TEXT = "short-text"
    LONG_TEXT = "long-text"
    DROPDOWN = "dropdown"
    DATE_TIME = "date-time"
    NUMBER = "number"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    VEHICLE_TYPE = "vehicle-type"

    @classmethod
    def parse(cls, value: Union[str, "FieldType"]) -> "FieldType":
        """Parse a field type, accepting legacy aliases."""
        if isinstance(value, FieldType):
            return value
        normalized = str(value).strip().lower()
        alias = FIELD_TYPE_ALIASES.get(normalized)
        if alias is not None:
            return alias
        return cls(normalized)


FIELD_TYPE_ALIASES: Dict[str, FieldType] = {
    "text": FieldType.SHORT_TEXT,
    "textarea": FieldType.LONG_TEXT,
    "select": FieldType.DROPDOWN,
    "datetime": FieldType.DATE_TIME,
    "datetime-local": FieldType.DATE_TIME,
    "vehicle": FieldType.VEHICLE_TYPE,
}


class FieldKind(str, Enum):
    """Rendering capability of a field.

    The renderer dispatches on the kind, never on the key text. A kind is
    either declared on the raw field or resolved once when the schema is
    loaded (see bookingform.schema.resolve_field_kind).
    """
    ADDRESS = "address"
    DATETIME = "datetime"
    SELECT = "select"
    TEXTAREA = "textarea"
    TEXT = "text"
    NUMBER = "number"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    VEHICLE = "vehicle"
    ROUTE = "route"


class BookingType(str, Enum):
    """Booking categories. Each has its own field section and fare rule."""
    DISTANCE = "distance"
    HOURLY = "hourly"
    FLAT_RATE = "flat_rate"
    ON_DEMAND = "on_demand"
    CHARTER = "charter"
    AIRPORT_TRANSFER = "airport_transfer"
    EVENT_SHUTTLE = "event_shuttle"


# Section holding passenger fields rendered on step 3 for every booking type
COMMON_SECTION = "common"

SECTION_KEYS: Tuple[str, ...] = (COMMON_SECTION,) + tuple(bt.value for bt in BookingType)

# Booking types that always reserve a waypoint container while the
# add-waypoint component is visible, regardless of the waypoint button config
WAYPOINT_CAPABLE_TYPES: Tuple[BookingType, ...] = (
    BookingType.DISTANCE,
    BookingType.HOURLY,
    BookingType.ON_DEMAND,
)


class PaymentMethod(str, Enum):
    """Payment categories, in the order they are offered."""
    CREDIT_CARD = "credit_card"
    PAYPAL = "paypal"
    CASH = "cash"


class WizardStep(IntEnum):
    """Wizard states. Steps 1-4 appear on the progress bar."""
    TRIP_DETAILS = 1
    VEHICLE = 2
    PASSENGER_PAYMENT = 3
    SUMMARY = 4
    CONFIRMATION = 5


class ContainerStyle(str, Enum):
    CARD_WITH_SHADOW = "card_with_shadow"
    FLAT = "flat"


class ButtonStyle(str, Enum):
    """Primary action skin. Any stored value other than filled_rounded is an outline."""
    FILLED_ROUNDED = "filled_rounded"
    OUTLINE_SQUARE = "outline_square"

    @classmethod
    def parse(cls, value: Union[str, "ButtonStyle"]) -> "ButtonStyle":
        if isinstance(value, ButtonStyle):
            return value
        if str(value) == cls.FILLED_ROUNDED.value:
            return cls.FILLED_ROUNDED
        return cls.OUTLINE_SQUARE


class SecondaryButtonStyle(str, Enum):
    FILLED = "filled"
    OUTLINE = "outline"


class ButtonPosition(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    SPACE_BETWEEN = "space_between"


class Visibility(str, Enum):
    VISIBLE = "visible"
    HIDDEN = "hidden"


class EventType(str, Enum):
    """Runtime session event types.

    Every step transition and significant user action emits a typed event.
    """
    SESSION_STARTED = "session.started"
    STEP_CHANGED = "step.changed"
    FIELD_UPDATED = "field.updated"
    VALIDATION_FAILED = "validation.failed"
    BOOKING_TYPE_CHANGED = "booking_type.changed"
    LANGUAGE_CHANGED = "language.changed"
    FARE_UPDATED = "fare.updated"
    WAYPOINT_ADDED = "waypoint.added"
    WAYPOINT_REMOVED = "waypoint.removed"
    ROUND_TRIP_TOGGLED = "round_trip.toggled"
    EXTRA_CHANGED = "extra.changed"
    VEHICLE_SELECTED = "vehicle.selected"
    PAYMENT_SELECTED = "payment.selected"
    GEOCODER_INITIALIZED = "geocoder.initialized"
    SUBMISSION_STARTED = "submission.started"
    BOOKING_CREATED = "booking.created"
    PAYMENT_REDIRECT = "payment.redirect"
    BOOKING_CONFIRMED = "booking.confirmed"
    SUBMISSION_FAILED = "submission.failed"


class ErrorType(str, Enum):
    """Error taxonomy.

    Only CONFIG_LOAD is non-recoverable; every other error requires an
    explicit user action (edit a field, press retry) to proceed.
    """
    CONFIG_LOAD = "config_load"
    VALIDATION = "validation"
    SUBMISSION = "submission"
    PAYMENT_REDIRECT = "payment_redirect"
    GEOCODING = "geocoding"


class FieldErrorCode(str, Enum):
    """Validation error codes for individual field failures."""
    REQUIRED = "required"
    INVALID_TYPE = "invalid_type"
    INVALID_FORMAT = "invalid_format"
    INVALID_VALUE = "invalid_value"
    CUSTOM = "custom"


__all__ = [
    "FieldType",
    "FIELD_TYPE_ALIASES",
    "FieldKind",
    "BookingType",
    "COMMON_SECTION",
    "SECTION_KEYS",
    "WAYPOINT_CAPABLE_TYPES",
    "PaymentMethod",
    "WizardStep",
    "ContainerStyle",
    "ButtonStyle",
    "SecondaryButtonStyle",
    "ButtonPosition",
    "Visibility",
    "EventType",
    "ErrorType",
    "FieldErrorCode",
]
