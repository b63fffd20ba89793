"""Configuration loading and normalization.

load_config is the single place raw configuration records are merged over
the defaults. Every compiler and runtime component takes the resulting
BookingFormConfig as an explicit argument and never reads defaults itself.

Merge precedence (deep_merge):
- loaded values win over defaults, never the reverse
- nested mappings merge recursively (layout_settings,
  components_visibility, waypoint_button_config, hourlyNotes)
- lists replace the default list wholesale
- a loaded ``None`` counts as absent
"""

import copy
import logging
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from bookingform.defaults import (
    DEFAULT_CUSTOMIZATIONS,
    DEFAULT_EXTRA_MAX,
    DEFAULT_EXTRA_MIN,
    DEFAULT_FORM_FIELDS,
)
from bookingform.errors import ConfigLoadError
from bookingform.schema import ROUTE_FIELD_KEY, FormStructure
from bookingform.types import (
    BookingType,
    ButtonPosition,
    ButtonStyle,
    ContainerStyle,
    SecondaryButtonStyle,
    Visibility,
)
from bookingform.validation import ValidationEngine

logger = logging.getLogger(__name__)

_BOOKING_TYPE_VALUES = [bt.value for bt in BookingType]

_NUMBER_OR_NUMERIC_STRING = {
    "anyOf": [{"type": "number"}, {"type": "string", "pattern": r"^\s*-?\d+(\.\d+)?\s*$"}]
}

# Shape of the raw configuration record. Only structure is checked here;
# values are normalized afterwards.
CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "fields": {
            "type": ["object", "null"],
            "additionalProperties": {
                "type": ["array", "null"],
                "items": {
                    "type": "object",
                    "properties": {
                        "id": {"type": ["string", "number"]},
                        "key": {"type": ["string", "null"]},
                        "type": {"type": "string"},
                        "label": {"type": "string"},
                        "placeholder": {"type": ["string", "null"]},
                        "options": {"type": ["array", "null"], "items": {"type": ["string", "number"]}},
                        "required": {"type": "boolean"},
                        "conditionalLogic": {
                            "type": ["object", "null"],
                            "properties": {"fieldKey": {"type": "string"}},
                            "required": ["fieldKey"],
                        },
                    },
                    "required": ["id", "type"],
                },
            },
        },
        "customizations": {
            "type": ["object", "null"],
            "properties": {
                "title": {"type": ["string", "null"]},
                "logo": {"type": ["string", "null"]},
                "defaultLanguage": {"type": ["string", "null"]},
                "selectedLanguages": {"type": ["array", "null"], "items": {"type": "string"}},
                "paymentIcons": {"type": ["array", "null"], "items": {"type": "string"}},
                "color": {"type": ["string", "null"]},
                "enabledBookingTypes": {
                    "type": ["array", "null"],
                    "items": {"enum": _BOOKING_TYPE_VALUES},
                },
                "hourlyNotes": {"type": ["object", "null"]},
                "extraOptions": {
                    "type": ["array", "null"],
                    "items": {
                        "type": "object",
                        "properties": {
                            "name": {"type": "string"},
                            "price": _NUMBER_OR_NUMERIC_STRING,
                            "enabled": {"type": "boolean"},
                            "min": {"type": ["integer", "null"], "minimum": 0},
                            "max": {"type": ["integer", "null"], "minimum": 0},
                        },
                        "required": ["name"],
                    },
                },
                "layout_settings": {
                    "type": ["object", "null"],
                    "properties": {
                        "container_style": {"enum": [s.value for s in ContainerStyle] + [None]},
                        "container_border_radius": {"type": ["number", "null"], "minimum": 0},
                        "button_style": {"type": ["string", "null"]},
                        "button_position": {"enum": [p.value for p in ButtonPosition] + [None]},
                        "progress_bar_visibility": {"enum": [v.value for v in Visibility] + [None]},
                        "step_titles_visibility": {"enum": [v.value for v in Visibility] + [None]},
                        "secondary_button_style": {
                            "enum": [s.value for s in SecondaryButtonStyle] + [None]
                        },
                        "components_visibility": {
                            "type": ["object", "null"],
                            "additionalProperties": {"type": ["boolean", "null"]},
                        },
                        "waypoint_button_config": {
                            "type": ["object", "null"],
                            "properties": {
                                "enabled_for_types": {
                                    "type": ["array", "null"],
                                    "items": {"enum": _BOOKING_TYPE_VALUES},
                                },
                                "display_after_field": {"type": ["string", "null"]},
                            },
                        },
                    },
                },
            },
        },
        "pricing": {
            "type": ["object", "null"],
            "additionalProperties": {"anyOf": [_NUMBER_OR_NUMERIC_STRING, {"type": "null"}]},
        },
        "routes": {
            "type": ["array", "null"],
            "items": {
                "type": "object",
                "properties": {
                    "id": {"type": ["string", "number"]},
                    "route_name": {"type": "string"},
                    "fixed_price": _NUMBER_OR_NUMERIC_STRING,
                },
                "required": ["id", "route_name", "fixed_price"],
            },
        },
        "vehicles": {
            "type": ["array", "null"],
            "items": {
                "type": "object",
                "properties": {
                    "id": {"type": ["string", "number"]},
                    "name": {"type": "string"},
                },
                "required": ["id", "name"],
            },
        },
    },
}


def deep_merge(default: Any, loaded: Any) -> Any:
    """Merge ``loaded`` over ``default`` without mutating either.

    Examples:
        >>> deep_merge({"a": {"x": 1, "y": 2}, "b": [1, 2]}, {"a": {"y": 3}, "b": [9]})
        {'a': {'x': 1, 'y': 3}, 'b': [9]}
        >>> deep_merge({"a": 1}, {"a": None})
        {'a': 1}
    """
    if loaded is None:
        return copy.deepcopy(default)
    if isinstance(default, Mapping) and isinstance(loaded, Mapping):
        merged = {key: copy.deepcopy(value) for key, value in default.items()}
        for key, value in loaded.items():
            if key in merged:
                merged[key] = deep_merge(merged[key], value)
            elif value is not None:
                merged[key] = copy.deepcopy(value)
        return merged
    return copy.deepcopy(loaded)


def _to_float(value: Any, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    return float(value)


def _to_int(value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    return int(value)


@dataclass(frozen=True)
class ExtraOption:
    """Optional add-on with a per-unit price and a bounded quantity."""
    name: str
    price: float
    enabled: bool = True
    min: int = DEFAULT_EXTRA_MIN
    max: int = DEFAULT_EXTRA_MAX

    def clamp(self, quantity: int) -> int:
        """Clamp a quantity to ``[min, max]``.

        Examples:
            >>> ExtraOption(name="Child Seat", price=15.0, min=0, max=2).clamp(5)
            2
        """
        return max(self.min, min(self.max, quantity))

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "price": self.price, "enabled": self.enabled,
                "min": self.min, "max": self.max}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExtraOption":
        low = _to_int(data.get("min"), DEFAULT_EXTRA_MIN)
        high = _to_int(data.get("max"), DEFAULT_EXTRA_MAX)
        if high < low:
            raise ValueError(f"Extra option '{data.get('name')}' has max {high} below min {low}")
        return cls(
            name=str(data["name"]),
            price=_to_float(data.get("price")),
            enabled=bool(data.get("enabled", True)),
            min=low,
            max=high,
        )


@dataclass(frozen=True)
class Pricing:
    base_fare: float
    cost_per_km: float
    cost_per_min: float
    cost_per_hour: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "base_fare": self.base_fare,
            "cost_per_km": self.cost_per_km,
            "cost_per_min": self.cost_per_min,
            "cost_per_hour": self.cost_per_hour,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Pricing":
        return cls(
            base_fare=_to_float(data.get("base_fare")),
            cost_per_km=_to_float(data.get("cost_per_km")),
            cost_per_min=_to_float(data.get("cost_per_min")),
            cost_per_hour=_to_float(data.get("cost_per_hour")),
        )


@dataclass(frozen=True)
class FlatRateRoute:
    id: str
    route_name: str
    fixed_price: float

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "route_name": self.route_name, "fixed_price": self.fixed_price}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FlatRateRoute":
        return cls(
            id=str(data["id"]),
            route_name=str(data["route_name"]),
            fixed_price=_to_float(data["fixed_price"]),
        )


@dataclass(frozen=True)
class Vehicle:
    """Vehicle snapshot supplied by the persistence layer."""
    id: str
    name: str
    model: str = ""
    image_url: Optional[str] = None
    rate_per_km: float = 0.0
    max_passengers: int = 0
    max_luggage: int = 0
    max_carry_on: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "model": self.model,
            "image_url": self.image_url,
            "rate_per_km": self.rate_per_km,
            "max_passengers": self.max_passengers,
            "max_luggage": self.max_luggage,
            "max_carry_on": self.max_carry_on,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Vehicle":
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            model=data.get("model") or "",
            image_url=data.get("image_url") or None,
            rate_per_km=_to_float(data.get("rate_per_km")),
            max_passengers=_to_int(data.get("max_passengers"), 0),
            max_luggage=_to_int(data.get("max_luggage"), 0),
            max_carry_on=_to_int(data.get("max_carry_on"), 0),
        )


@dataclass(frozen=True)
class ComponentsVisibility:
    booking_type_selector: bool = True
    language_selector: bool = True
    vehicle_selector: bool = True
    round_trip_button: bool = True
    add_waypoint_button: bool = True
    extra_options_button: bool = True
    notes_button: bool = True
    payment_icons: bool = True
    map_visibility: bool = True
    show_logo: bool = True

    def to_dict(self) -> Dict[str, bool]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ComponentsVisibility":
        known = cls.__dataclass_fields__
        return cls(**{k: bool(v) for k, v in data.items() if k in known})


@dataclass(frozen=True)
class WaypointButtonConfig:
    enabled_for_types: Tuple[BookingType, ...] = (BookingType.DISTANCE,)
    display_after_field: str = "dropoff_location"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled_for_types": [bt.value for bt in self.enabled_for_types],
            "display_after_field": self.display_after_field,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WaypointButtonConfig":
        return cls(
            enabled_for_types=tuple(BookingType(v) for v in data.get("enabled_for_types") or ()),
            display_after_field=data.get("display_after_field") or "",
        )


@dataclass(frozen=True)
class LayoutSettings:
    """Visual presentation settings, independent of form content."""
    container_style: ContainerStyle = ContainerStyle.CARD_WITH_SHADOW
    container_color: str = "rgba(255,255,255,1)"
    container_color_dark: str = "rgba(30,41,59,1)"
    container_border_radius: float = 8
    button_style: ButtonStyle = ButtonStyle.FILLED_ROUNDED
    button_position: ButtonPosition = ButtonPosition.RIGHT
    progress_bar_visibility: Visibility = Visibility.VISIBLE
    step_titles_visibility: Visibility = Visibility.VISIBLE
    secondary_button_style: SecondaryButtonStyle = SecondaryButtonStyle.FILLED
    custom_css: str = ""
    components_visibility: ComponentsVisibility = field(default_factory=ComponentsVisibility)
    waypoint_button_config: WaypointButtonConfig = field(default_factory=WaypointButtonConfig)

    @property
    def show_progress_bar(self) -> bool:
        return self.progress_bar_visibility == Visibility.VISIBLE

    @property
    def show_step_titles(self) -> bool:
        return self.step_titles_visibility == Visibility.VISIBLE

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "container_style": self.container_style.value,
            "container_color": self.container_color,
            "container_color_dark": self.container_color_dark,
            "container_border_radius": self.container_border_radius,
            "button_style": self.button_style.value,
            "button_position": self.button_position.value,
            "progress_bar_visibility": self.progress_bar_visibility.value,
            "step_titles_visibility": self.step_titles_visibility.value,
            "secondary_button_style": self.secondary_button_style.value,
            "components_visibility": self.components_visibility.to_dict(),
            "waypoint_button_config": self.waypoint_button_config.to_dict(),
        }
        if self.custom_css:
            result["custom_css"] = self.custom_css
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LayoutSettings":
        return cls(
            container_style=ContainerStyle(data["container_style"]),
            container_color=data["container_color"],
            container_color_dark=data["container_color_dark"],
            container_border_radius=_to_float(data.get("container_border_radius"), 8),
            button_style=ButtonStyle.parse(data["button_style"]),
            button_position=ButtonPosition(data["button_position"]),
            progress_bar_visibility=Visibility(data["progress_bar_visibility"]),
            step_titles_visibility=Visibility(data["step_titles_visibility"]),
            secondary_button_style=SecondaryButtonStyle(data["secondary_button_style"]),
            custom_css=data.get("custom_css") or "",
            components_visibility=ComponentsVisibility.from_dict(data["components_visibility"]),
            waypoint_button_config=WaypointButtonConfig.from_dict(data["waypoint_button_config"]),
        )


@dataclass(frozen=True)
class CustomizationOptions:
    """Fully populated customization options.

    Built only by load_config (or from_dict on an already merged record);
    every attribute is present.
    """
    title: str
    logo: Optional[str]
    default_language: str
    selected_languages: Tuple[str, ...]
    payment_icons: Tuple[str, ...]
    color: str
    enabled_booking_types: Tuple[BookingType, ...]
    hourly_notes: Dict[str, str]
    extra_options: Tuple[ExtraOption, ...]
    layout: LayoutSettings
    pricing: Pricing
    routes: Tuple[FlatRateRoute, ...] = ()
    vehicles: Tuple[Vehicle, ...] = ()

    def __post_init__(self):
        if not self.enabled_booking_types:
            raise ValueError("At least one booking type must be enabled")

    @property
    def enabled_extra_options(self) -> List[ExtraOption]:
        return [option for option in self.extra_options if option.enabled]

    def extra_option(self, name: str) -> Optional[ExtraOption]:
        for option in self.extra_options:
            if option.name == name:
                return option
        return None

    def route(self, route_id: str) -> Optional[FlatRateRoute]:
        for route in self.routes:
            if route.id == str(route_id):
                return route
        return None

    def vehicle(self, vehicle_id: str) -> Optional[Vehicle]:
        for vehicle in self.vehicles:
            if vehicle.id == str(vehicle_id):
                return vehicle
        return None

    def with_booking_type_toggled(self, booking_type: Union[str, BookingType]) -> "CustomizationOptions":
        """Enable or disable a booking type.

        Enabling appends the type; disabling removes it unless it is the
        last enabled type, in which case the options are returned unchanged.

        Examples:
            >>> from bookingform.config import load_config
            >>> options = load_config({"customizations": {"enabledBookingTypes": ["hourly"]}}).customizations
            >>> options.with_booking_type_toggled("hourly") is options
            True
        """
        booking_type = BookingType(booking_type)
        enabled = list(self.enabled_booking_types)
        if booking_type in enabled:
            if len(enabled) == 1:
                return self
            enabled.remove(booking_type)
        else:
            enabled.append(booking_type)
        return replace(self, enabled_booking_types=tuple(enabled))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted customization format."""
        return {
            "title": self.title,
            "logo": self.logo,
            "defaultLanguage": self.default_language,
            "selectedLanguages": list(self.selected_languages),
            "paymentIcons": list(self.payment_icons),
            "color": self.color,
            "enabledBookingTypes": [bt.value for bt in self.enabled_booking_types],
            "hourlyNotes": dict(self.hourly_notes),
            "extraOptions": [o.to_dict() for o in self.extra_options],
            "layout_settings": self.layout.to_dict(),
            "pricing": self.pricing.to_dict(),
            "routes": [r.to_dict() for r in self.routes],
            "vehicles": [v.to_dict() for v in self.vehicles],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CustomizationOptions":
        """Build from a fully merged customization record."""
        return cls(
            title=data.get("title") or "",
            logo=data.get("logo") or None,
            default_language=data["defaultLanguage"],
            selected_languages=tuple(data["selectedLanguages"]),
            payment_icons=tuple(data.get("paymentIcons") or ()),
            color=data["color"],
            enabled_booking_types=tuple(BookingType(v) for v in data["enabledBookingTypes"]),
            hourly_notes={str(k): str(v) for k, v in (data.get("hourlyNotes") or {}).items()},
            extra_options=tuple(ExtraOption.from_dict(o) for o in data.get("extraOptions") or ()),
            layout=LayoutSettings.from_dict(data["layout_settings"]),
            pricing=Pricing.from_dict(data["pricing"]),
            routes=tuple(FlatRateRoute.from_dict(r) for r in data.get("routes") or ()),
            vehicles=tuple(Vehicle.from_dict(v) for v in data.get("vehicles") or ()),
        )


@dataclass(frozen=True)
class BookingFormConfig:
    """Normalized configuration consumed by the compiler and the runtime."""
    fields: FormStructure
    customizations: CustomizationOptions

    @property
    def enabled_booking_types(self) -> Tuple[BookingType, ...]:
        return self.customizations.enabled_booking_types

    @property
    def layout(self) -> LayoutSettings:
        return self.customizations.layout

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to the single payload the browser runtime reads."""
        return {
            "fields": self.fields.to_dict(),
            "customizations": self.customizations.to_dict(),
        }


def _ensure_route_field(sections: Dict[str, Any]) -> None:
    flat_rate = list(sections.get(BookingType.FLAT_RATE.value) or [])
    if any((f.get("key") or "") == ROUTE_FIELD_KEY for f in flat_rate):
        return
    flat_rate.insert(0, {
        "id": "field_flat_rate_route",
        "key": ROUTE_FIELD_KEY,
        "type": "dropdown",
        "label": "Select a Route",
        "required": True,
        "options": [],
    })
    sections[BookingType.FLAT_RATE.value] = flat_rate


def _normalize_languages(merged: Dict[str, Any]) -> None:
    languages = [lang for lang in merged.get("selectedLanguages") or [] if lang]
    if not languages:
        logger.warning("No languages selected; falling back to %s",
                       DEFAULT_CUSTOMIZATIONS["selectedLanguages"])
        languages = list(DEFAULT_CUSTOMIZATIONS["selectedLanguages"])
    merged["selectedLanguages"] = languages
    if merged.get("defaultLanguage") not in languages:
        logger.warning("Default language %r is not selected; using %r",
                       merged.get("defaultLanguage"), languages[0])
        merged["defaultLanguage"] = languages[0]


def load_config(raw: Optional[Mapping[str, Any]]) -> BookingFormConfig:
    """Load and normalize a raw configuration record.

    Args:
        raw: Record with optional ``fields``, ``customizations``, ``pricing``,
            ``routes`` and ``vehicles`` entries. Top-level pricing, routes and
            vehicles override the snapshots inside ``customizations``.

    Returns:
        A fully populated BookingFormConfig

    Raises:
        ConfigLoadError: If the record has the wrong shape or cannot be
            normalized (InvalidSchemaError for form structure violations)

    Examples:
        >>> config = load_config({})
        >>> config.enabled_booking_types[0]
        <BookingType.DISTANCE: 'distance'>
        >>> config.customizations.pricing.cost_per_hour
        50.0
    """
    raw = raw if raw is not None else {}
    if not isinstance(raw, Mapping):
        raise ConfigLoadError(f"Configuration must be an object, got {type(raw).__name__}")

    result = ValidationEngine(CONFIG_SCHEMA).validate(dict(raw))
    if not result.is_valid:
        logger.error("Configuration failed shape validation: %s", result.invalid_fields)
        raise ConfigLoadError("Configuration has an invalid shape", fields=result.errors)

    merged = deep_merge(DEFAULT_CUSTOMIZATIONS, raw.get("customizations"))
    merged["pricing"] = deep_merge(merged["pricing"], raw.get("pricing"))
    for snapshot in ("routes", "vehicles"):
        if raw.get(snapshot) is not None:
            merged[snapshot] = copy.deepcopy(list(raw[snapshot]))

    if not merged.get("enabledBookingTypes"):
        logger.warning("No booking types enabled; falling back to %s",
                       DEFAULT_CUSTOMIZATIONS["enabledBookingTypes"])
        merged["enabledBookingTypes"] = list(DEFAULT_CUSTOMIZATIONS["enabledBookingTypes"])
    merged["enabledBookingTypes"] = list(dict.fromkeys(merged["enabledBookingTypes"]))
    _normalize_languages(merged)

    sections = deep_merge(DEFAULT_FORM_FIELDS, {})
    for name, fields in (raw.get("fields") or {}).items():
        if fields is not None:
            sections[name] = copy.deepcopy(list(fields))
    _ensure_route_field(sections)

    try:
        structure = FormStructure.from_dict(sections)
        customizations = CustomizationOptions.from_dict(merged)
    except (KeyError, TypeError, ValueError) as exc:
        logger.error("Could not normalize configuration: %s", exc)
        raise ConfigLoadError(f"Could not normalize configuration: {exc}") from exc

    logger.debug(
        "Loaded booking form config with types %s",
        [bt.value for bt in customizations.enabled_booking_types],
    )
    return BookingFormConfig(fields=structure, customizations=customizations)


__all__ = [
    "CONFIG_SCHEMA",
    "deep_merge",
    "ExtraOption",
    "Pricing",
    "FlatRateRoute",
    "Vehicle",
    "ComponentsVisibility",
    "WaypointButtonConfig",
    "LayoutSettings",
    "CustomizationOptions",
    "BookingFormConfig",
    "load_config",
]
