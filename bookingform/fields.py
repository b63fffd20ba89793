"""Field renderer: compiles one FormField into a markup fragment.

The representation is selected by the field's resolved kind:
- ADDRESS: geocoder container plus a hidden input the runtime fills
- DATETIME: date and time sub-buttons, two popovers, hidden value
- SELECT / ROUTE / VEHICLE: select with an empty first entry
- RADIO / CHECKBOX: one input per option (single checkbox without options)
- TEXT / NUMBER / TEXTAREA: single control with a clear button

Every fragment exposes the element id ``field-<id>`` and ``name`` equal to
the field key, and reports which runtime hooks it carries.

Usage:
    >>> from bookingform.config import load_config
    >>> config = load_config({})
    >>> renderer = FieldRenderer(config.customizations, "en")
    >>> dropoff = config.fields.field_by_key("distance", "dropoff_location")
    >>> rendered = renderer.render(dropoff, "distance")
    >>> rendered.element_id
    'field-field_distance_2'
    >>> sorted(rendered.hooks)
    ['add-waypoint', 'geocoder']
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple, Union

from bookingform import icons
from bookingform.config import CustomizationOptions
from bookingform.datetime_picker import time_slots
from bookingform.i18n import Translator, lookup
from bookingform.markup import Element, h, svg_icon
from bookingform.schema import FormField
from bookingform.types import BookingType, FieldKind

HOOK_GEOCODER = "geocoder"
HOOK_DATETIME_PICKER = "datetime-picker"
HOOK_CLEAR_BUTTON = "clear-button"
HOOK_ADD_WAYPOINT = "add-waypoint"
HOOK_CONDITIONAL = "conditional"

# Kinds that get a clear button
CLEARABLE_KINDS = frozenset({FieldKind.TEXT, FieldKind.NUMBER, FieldKind.TEXTAREA})

INPUT_TYPE_BY_KEY = {"email": "email", "phone_number": "tel"}


@dataclass(frozen=True)
class RenderedField:
    """A rendered field fragment and the wiring it exposes to the runtime.

    Attributes:
        field: The source field definition
        node: Root element of the fragment
        element_id: Id of the element holding the value (``field-<id>``)
        name: Submission name (the field key)
        hooks: Runtime hooks present in the fragment
    """
    field: FormField
    node: Element
    element_id: str
    name: str
    hooks: Tuple[str, ...] = ()

    def has_hook(self, hook: str) -> bool:
        return hook in self.hooks

    def render(self) -> str:
        return self.node.render()


def conditional_value_attr(value: Any) -> str:
    """Serialize a conditional value for a data attribute.

    Examples:
        >>> conditional_value_attr(True)
        'true'
        >>> conditional_value_attr("To Airport")
        'To Airport'
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def waypoint_button(booking_type: BookingType, translator: Translator, return_trip: bool = False) -> Element:
    """The inline "add waypoint" affordance."""
    label = translator("add_waypoint")
    return h(
        "button",
        {
            "type": "button",
            "class": "add-waypoint-btn",
            "data-action": "add-return-waypoint" if return_trip else "add-waypoint",
            "data-booking-type": booking_type.value,
            "title": label,
            "aria-label": label,
        },
        svg_icon(icons.ADD_WAYPOINT),
        h("span", {"class": "add-waypoint-text"}, label),
    )


class FieldRenderer:
    """Renders form fields for one language and customization set.

    Args:
        customizations: Normalized customization options
        lang: Active language code
    """

    def __init__(self, customizations: CustomizationOptions, lang: str):
        self.customizations = customizations
        self.lang = lang
        self.t = Translator(lang)

    def label_text(self, form_field: FormField) -> str:
        return self.t.label(form_field.key, form_field.label)

    def placeholder(self, form_field: FormField) -> str:
        """Explicit placeholder, then ``placeholder_<key>``, then "Enter <label>".

        Examples:
            >>> from bookingform.config import load_config
            >>> renderer = FieldRenderer(load_config({}).customizations, "en")
            >>> renderer.placeholder(FormField(id="x", key="flight_number",
            ...                                type="short-text", label="Flight Number"))
            'Enter flight number'
        """
        if form_field.placeholder:
            return form_field.placeholder
        if form_field.key:
            translated = lookup(f"placeholder_{form_field.key}", self.lang)
            if translated:
                return translated
        return f"Enter {self.label_text(form_field).lower()}"

    def shows_waypoint_button(self, form_field: FormField, booking_type: BookingType) -> bool:
        """Whether the add-waypoint affordance is attached to this field."""
        layout = self.customizations.layout
        config = layout.waypoint_button_config
        return (
            layout.components_visibility.add_waypoint_button
            and form_field.has_key
            and booking_type in config.enabled_for_types
            and form_field.key == config.display_after_field
        )

    def render(self, form_field: FormField, booking_type: Union[str, BookingType]) -> RenderedField:
        """Render one field of ``booking_type``'s section (or the common section)."""
        booking_type = BookingType(booking_type)
        hooks: List[str] = []
        with_waypoint = self.shows_waypoint_button(form_field, booking_type)

        kind = form_field.kind
        if kind == FieldKind.ADDRESS:
            control = self._address(form_field)
            hooks.append(HOOK_GEOCODER)
        elif kind == FieldKind.DATETIME:
            control = self._datetime(form_field)
            hooks.append(HOOK_DATETIME_PICKER)
        elif kind == FieldKind.SELECT:
            control = self._select(form_field)
        elif kind == FieldKind.ROUTE:
            control = self._route_select(form_field)
        elif kind == FieldKind.VEHICLE:
            control = self._vehicle_select(form_field)
        elif kind == FieldKind.RADIO:
            control = self._radio_group(form_field)
        elif kind == FieldKind.CHECKBOX:
            control = self._checkbox(form_field)
        elif kind in CLEARABLE_KINDS:
            control = self._text_input(form_field)
            hooks.append(HOOK_CLEAR_BUTTON)
        else:
            raise ValueError(f"Unsupported field kind: {kind}")

        if with_waypoint:
            hooks.append(HOOK_ADD_WAYPOINT)
            button = waypoint_button(booking_type, self.t)
            if kind == FieldKind.ADDRESS:
                control = [control, button]
            else:
                trailing = control.find(lambda e: e.has_class("input-trailing"))
                if trailing is None:
                    trailing = h("div", {"class": "input-trailing"})
                    control = h("div", {"class": "input-wrapper"}, control, trailing)
                trailing.append(button)

        attrs = {
            "class": ["form-field", f"form-field-{kind.value}"],
            "data-field-id": form_field.id,
            "data-field-key": form_field.key or None,
            "data-kind": kind.value,
        }
        logic = form_field.conditional_logic
        if logic is not None:
            hooks.append(HOOK_CONDITIONAL)
            attrs["data-conditional-field"] = logic.field_key
            attrs["data-conditional-value"] = conditional_value_attr(logic.value)
            if not logic.matches(None):
                attrs["hidden"] = True

        node = h("div", attrs, self._label(form_field), control)
        return RenderedField(
            field=form_field,
            node=node,
            element_id=form_field.element_id,
            name=form_field.key,
            hooks=tuple(hooks),
        )

    def _label(self, form_field: FormField) -> Element:
        if form_field.required:
            suffix = h("span", {"class": "required-marker", "aria-hidden": "true"}, "*")
        else:
            suffix = h("span", {"class": "optional-suffix"}, f"({self.t('optional')})")
        grouped = form_field.kind == FieldKind.RADIO or (
            form_field.kind == FieldKind.CHECKBOX and form_field.options
        )
        return h(
            "label",
            {"class": "form-label", "for": None if grouped else form_field.element_id},
            self.label_text(form_field),
            " ",
            suffix,
        )

    def _control_attrs(self, form_field: FormField, **extra: Any) -> dict:
        attrs = {
            "id": form_field.element_id,
            "name": form_field.value_key,
            "required": form_field.required,
        }
        attrs.update(extra)
        return attrs

    def _address(self, form_field: FormField) -> Element:
        return h(
            "div",
            {"class": "geocoder-wrapper"},
            h("div", {
                "id": f"geocoder-container-{form_field.id}",
                "class": "geocoder-container",
                "data-geocoder-for": form_field.element_id,
                "data-placeholder": self.placeholder(form_field),
            }),
            h("input", self._control_attrs(form_field, type="hidden", value="")),
        )

    def _datetime(self, form_field: FormField) -> Element:
        element_id = form_field.element_id
        slots = [
            h("button", {"type": "button", "class": "time-slot", "data-time": slot.value}, slot.label)
            for slot in time_slots()
        ]
        return h(
            "div",
            {"class": "datetime-picker", "data-datetime-for": element_id},
            h("div", {"class": "datetime-triggers"},
              h("button", {"type": "button", "class": "datetime-trigger date-trigger",
                           "data-action": "open-date-popover", "aria-controls": f"{element_id}-date-popover"},
                svg_icon(icons.CALENDAR),
                h("span", {"class": "datetime-display"}, self.t("select_date"))),
              h("button", {"type": "button", "class": "datetime-trigger time-trigger",
                           "data-action": "open-time-popover", "aria-controls": f"{element_id}-time-popover"},
                svg_icon(icons.CLOCK),
                h("span", {"class": "datetime-display"}, self.t("select_time")))),
            h("div", {"id": f"{element_id}-date-popover", "class": "form-popover date-popover", "hidden": True},
              h("div", {"class": "calendar"})),
            h("div", {"id": f"{element_id}-time-popover", "class": "form-popover time-popover", "hidden": True},
              h("div", {"class": "time-slots"}, slots)),
            h("input", self._control_attrs(form_field, type="hidden", value="")),
        )

    def _select(self, form_field: FormField) -> Element:
        options = [h("option", {"value": ""}, self.t("select_an_option"))]
        options.extend(
            h("option", {"value": option}, self.t(option, option))
            for option in form_field.options or ()
        )
        return h("select", self._control_attrs(form_field, **{"class": "form-select"}), options)

    def _route_select(self, form_field: FormField) -> Element:
        options = [h("option", {"value": ""}, self.t("select_a_route"))]
        options.extend(
            h("option", {"value": route.id}, f"{route.route_name} (${route.fixed_price:.2f})")
            for route in self.customizations.routes
        )
        return h("select", self._control_attrs(form_field, **{"class": "form-select"}), options)

    def _vehicle_select(self, form_field: FormField) -> Element:
        options = [h("option", {"value": ""}, self.t("select_vehicle"))]
        for vehicle in self.customizations.vehicles:
            text = f"{vehicle.name} ({vehicle.model})" if vehicle.model else vehicle.name
            options.append(h("option", {"value": vehicle.id}, text))
        return h("select", self._control_attrs(form_field, **{"class": "form-select"}), options)

    def _radio_group(self, form_field: FormField) -> Element:
        group = h("div", {"id": form_field.element_id, "class": "radio-group", "role": "radiogroup"})
        for index, option in enumerate(form_field.options or ()):
            group.append(h(
                "label",
                {"class": "radio-option"},
                h("input", {
                    "type": "radio",
                    "id": f"{form_field.element_id}-{index}",
                    "name": form_field.value_key,
                    "value": option,
                    "required": form_field.required,
                }),
                h("span", {}, self.t(option, option)),
            ))
        return group

    def _checkbox(self, form_field: FormField) -> Element:
        if not form_field.options:
            return h(
                "label",
                {"class": "checkbox-option"},
                h("input", self._control_attrs(form_field, type="checkbox", value="true")),
                h("span", {}, self.label_text(form_field)),
            )
        group = h("div", {"id": form_field.element_id, "class": "checkbox-group"})
        for index, option in enumerate(form_field.options):
            group.append(h(
                "label",
                {"class": "checkbox-option"},
                h("input", {
                    "type": "checkbox",
                    "id": f"{form_field.element_id}-{index}",
                    "name": form_field.value_key,
                    "value": option,
                }),
                h("span", {}, self.t(option, option)),
            ))
        return group

    def _text_input(self, form_field: FormField) -> Element:
        placeholder = self.placeholder(form_field)
        if form_field.kind == FieldKind.TEXTAREA:
            control = h("textarea", self._control_attrs(
                form_field, rows="3", placeholder=placeholder, **{"class": "form-input"}))
        elif form_field.kind == FieldKind.NUMBER:
            control = h("input", self._control_attrs(
                form_field, type="number", min="0", step="any", placeholder=placeholder,
                **{"class": "form-input"}))
        else:
            input_type = INPUT_TYPE_BY_KEY.get(form_field.key, "text")
            control = h("input", self._control_attrs(
                form_field, type=input_type, placeholder=placeholder, **{"class": "form-input"}))
        clear = h(
            "button",
            {
                "type": "button",
                "class": "clear-btn",
                "data-action": "clear-field",
                "data-target": form_field.element_id,
                "aria-label": self.t("clear"),
                "hidden": True,
            },
            svg_icon(icons.REMOVE),
        )
        return h("div", {"class": "input-wrapper"}, control, h("div", {"class": "input-trailing"}, clear))


__all__ = [
    "HOOK_GEOCODER",
    "HOOK_DATETIME_PICKER",
    "HOOK_CLEAR_BUTTON",
    "HOOK_ADD_WAYPOINT",
    "HOOK_CONDITIONAL",
    "RenderedField",
    "FieldRenderer",
    "conditional_value_attr",
    "waypoint_button",
]
