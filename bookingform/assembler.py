"""Form assembler: composes rendered fields into the five-step wizard.

The assembled tree contains, in order: the language selector, logo and
title, booking-type selector, progress bar, the five step containers,
validation message, navigation buttons and accepted-payments footer.

Step 1 holds one section per enabled booking type. Only the active type's
section is visible; switching types toggles visibility without
re-creating the fields, so entered values survive. Each section carries at
most one waypoint container, placed after the configured anchor field or
appended at the end when the type supports waypoints.

Usage:
    >>> from bookingform.config import load_config
    >>> root = FormAssembler(load_config({})).assemble()
    >>> root.get("id")
    'booking-form-root'
    >>> len(root.by_class("booking-type-section"))
    4
"""

import logging
from typing import Dict, List, Optional, Union
from urllib.parse import quote

from bookingform import icons
from bookingform.config import BookingFormConfig, ExtraOption, Vehicle
from bookingform.fields import FieldRenderer, RenderedField, waypoint_button
from bookingform.i18n import LANGUAGE_FLAG_SVGS, language_name
from bookingform.markup import Element, Raw, h, svg_icon
from bookingform.payments import accepted_payment_icons, default_payment_method, enabled_payment_methods
from bookingform.schema import FormField
from bookingform.types import (
    WAYPOINT_CAPABLE_TYPES,
    BookingType,
    ButtonPosition,
    FieldKind,
    PaymentMethod,
    WizardStep,
)

logger = logging.getLogger(__name__)

ROOT_ID = "booking-form-root"

# Translation keys of the four progress steps
PROGRESS_STEPS = (
    (WizardStep.TRIP_DETAILS, "trip_details"),
    (WizardStep.VEHICLE, "vehicle"),
    (WizardStep.PASSENGER_PAYMENT, "passenger"),
    (WizardStep.SUMMARY, "summary"),
)

PAYMENT_METHOD_ICONS = {
    PaymentMethod.CREDIT_CARD: icons.CREDIT_CARD,
    PaymentMethod.PAYPAL: icons.PAYMENT_ICONS["paypal"]["icon"],
    PaymentMethod.CASH: icons.PAYMENT_ICONS["cash"]["icon"],
}

AVATAR_URL = "https://ui-avatars.com/api/?name={name}&background=random&size=256"


def waypoints_container_id(booking_type: BookingType) -> str:
    return f"waypoints-container-{booking_type.value}"


def return_dropoff_id(booking_type: BookingType) -> str:
    return f"return_dropoff_{booking_type.value}"


def supports_waypoints(config: BookingFormConfig, booking_type: BookingType) -> bool:
    """Whether a booking type gets a waypoint container.

    Types named in the waypoint button config always qualify; distance,
    hourly and on-demand qualify as well. Nothing qualifies while the
    add-waypoint component is hidden.
    """
    layout = config.layout
    if not layout.components_visibility.add_waypoint_button:
        return False
    return (
        booking_type in WAYPOINT_CAPABLE_TYPES
        or booking_type in layout.waypoint_button_config.enabled_for_types
    )


def vehicle_image_url(vehicle: Vehicle) -> str:
    """Vehicle photo, or a generated avatar when none is configured.

    Examples:
        >>> vehicle_image_url(Vehicle(id="1", name="Sedan XL"))
        'https://ui-avatars.com/api/?name=Sedan%20XL&background=random&size=256'
    """
    return vehicle.image_url or AVATAR_URL.format(name=quote(vehicle.name))


class FormAssembler:
    """Builds the wizard markup tree for a normalized configuration.

    Args:
        config: Normalized configuration
        lang: Active language; defaults to the configured default language
        booking_type: Restrict the form to one enabled booking type
    """

    def __init__(
        self,
        config: BookingFormConfig,
        lang: Optional[str] = None,
        booking_type: Optional[Union[str, BookingType]] = None,
    ):
        self.config = config
        self.customizations = config.customizations
        self.layout = config.layout
        self.visibility = config.layout.components_visibility
        self.lang = lang or self.customizations.default_language
        self.renderer = FieldRenderer(self.customizations, self.lang)
        self.t = self.renderer.t
        self.forced_type: Optional[BookingType] = None
        if booking_type is not None:
            forced = BookingType(booking_type)
            if forced in config.enabled_booking_types:
                self.forced_type = forced
            else:
                logger.warning("Booking type %s is not enabled; showing all enabled types", forced.value)
        self.rendered: Dict[str, List[RenderedField]] = {}

    @property
    def booking_types(self) -> List[BookingType]:
        if self.forced_type is not None:
            return [self.forced_type]
        return list(self.config.enabled_booking_types)

    @property
    def active_type(self) -> BookingType:
        return self.booking_types[0]

    @property
    def payment_methods(self) -> List[PaymentMethod]:
        return enabled_payment_methods(self.customizations.payment_icons)

    def show_booking_type_selector(self) -> bool:
        return (
            self.forced_type is None
            and self.visibility.booking_type_selector
            and len(self.config.enabled_booking_types) > 1
        )

    def show_language_selector(self) -> bool:
        return len(self.customizations.selected_languages) > 1 and self.visibility.language_selector

    def assemble(self) -> Element:
        """Build the complete wizard tree."""
        self.rendered = {}
        root = h("div", {
            "id": ROOT_ID,
            "class": "form-container",
            "data-step": str(int(WizardStep.TRIP_DETAILS)),
            "data-booking-type": self.active_type.value,
            "data-lang": self.lang,
        })
        if self.show_language_selector():
            root.append(self.language_selector())
        root.append(self.header())
        if self.show_booking_type_selector():
            root.append(self.booking_type_selector())
        if self.layout.show_progress_bar:
            root.append(self.progress_bar())
        root.append(
            self.trip_details_step(),
            self.vehicle_step(),
            self.passenger_step(),
            self.summary_step(),
            self.confirmation_step(),
            h("div", {"id": "validation-message", "class": "validation-message", "role": "alert",
                      "hidden": True}),
            self.navigation(),
        )
        footer = self.accepted_payments_footer()
        if footer is not None:
            root.append(footer)
        return root

    # Header

    def language_selector(self) -> Element:
        menu = h("ul", {"id": "language-menu", "class": "language-menu", "role": "menu", "hidden": True})
        for code in self.customizations.selected_languages:
            menu.append(h("li", {},
                          h("button", {"type": "button", "class": "language-option",
                                       "data-action": "select-language", "data-lang": code,
                                       "aria-current": "true" if code == self.lang else None},
                            self._flag(code), h("span", {}, language_name(code)))))
        return h(
            "div",
            {"class": "language-selector"},
            h("button", {"type": "button", "class": "language-toggle", "data-action": "toggle-language-menu",
                         "aria-haspopup": "menu", "aria-label": language_name(self.lang)},
              self._flag(self.lang)),
            menu,
        )

    def _flag(self, code: str) -> Element:
        return h("svg", {"class": "flag", "viewBox": "0 0 21 15", "xmlns": "http://www.w3.org/2000/svg",
                         "aria-hidden": "true"}, Raw(LANGUAGE_FLAG_SVGS.get(code, "")))

    def header(self) -> Element:
        header = h("div", {"class": "form-header"})
        if self.customizations.logo and self.visibility.show_logo:
            header.append(h("img", {"class": "form-logo", "src": self.customizations.logo,
                                    "alt": self.customizations.title or "Logo"}))
        if self.customizations.title:
            header.append(h("h2", {"class": "form-title"}, self.customizations.title))
        return header

    def booking_type_selector(self) -> Element:
        selector = h("div", {"id": "booking-type-selector", "class": "booking-type-selector", "role": "tablist"})
        for booking_type in self.booking_types:
            active = booking_type == self.active_type
            selector.append(h(
                "button",
                {
                    "type": "button",
                    "class": ["booking-type-btn", "active" if active else None],
                    "role": "tab",
                    "aria-selected": "true" if active else "false",
                    "data-action": "select-booking-type",
                    "data-booking-type": booking_type.value,
                },
                svg_icon(icons.BOOKING_TYPE_ICONS[booking_type.value]),
                h("span", {}, self.t(booking_type.value)),
            ))
        return selector

    def progress_bar(self) -> Element:
        bar = h("div", {"id": "progress-bar", "class": "progress-bar"})
        for step, key in PROGRESS_STEPS:
            item = h("div", {
                "class": ["progress-step", "active" if step == WizardStep.TRIP_DETAILS else None],
                "data-step": str(int(step)),
            }, h("span", {"class": "progress-dot"}, str(int(step))))
            if self.layout.show_step_titles:
                item.append(h("span", {"class": "progress-label"}, self.t(key)))
            bar.append(item)
        return bar

    # Steps

    def _step(self, step: WizardStep, *children) -> Element:
        return h("div", {
            "id": f"step-{int(step)}",
            "class": "form-step",
            "data-step": str(int(step)),
            "hidden": step != WizardStep.TRIP_DETAILS,
        }, *children)

    def trip_details_step(self) -> Element:
        sections = [self.booking_type_section(bt) for bt in self.booking_types]
        fare = h(
            "div",
            {"id": "fare-display", "class": "fare-display", "hidden": True},
            h("span", {"class": "fare-label"}, self.t("estimated_fare"),
              h("small", {"class": "fare-note"}, self.t("fare_is_estimate"))),
            h("span", {"id": "fare-amount", "class": "fare-amount"}),
        )
        return self._step(WizardStep.TRIP_DETAILS, sections, fare)

    def ordered_fields(self, booking_type: BookingType) -> List[FormField]:
        """Section fields with route selectors first."""
        fields = list(self.config.fields.section(booking_type))
        routes = [f for f in fields if f.kind == FieldKind.ROUTE]
        return routes + [f for f in fields if f.kind != FieldKind.ROUTE]

    def booking_type_section(self, booking_type: BookingType) -> Element:
        """Fields of one booking type plus its waypoint container and options."""
        fields = self.ordered_fields(booking_type)
        rendered = [self.renderer.render(f, booking_type) for f in fields]
        self.rendered[booking_type.value] = rendered

        children: List[Element] = [r.node for r in rendered]
        if supports_waypoints(self.config, booking_type):
            container = h("div", {
                "id": waypoints_container_id(booking_type),
                "class": "waypoints-container",
                "data-booking-type": booking_type.value,
            })
            anchor = self.layout.waypoint_button_config.display_after_field
            index = next((i for i, f in enumerate(fields) if anchor and f.key == anchor), None)
            if index is None:
                children.append(container)
            else:
                children.insert(index + 1, container)

        section = h(
            "div",
            {
                "id": f"section-{booking_type.value}",
                "class": "booking-type-section",
                "data-booking-type": booking_type.value,
                "hidden": booking_type != self.active_type,
            },
            children,
        )
        options = self.trip_options(booking_type)
        if options is not None:
            section.append(options)
        if booking_type != BookingType.HOURLY and self.visibility.round_trip_button:
            section.append(self.return_trip_section(booking_type))
        return section

    def trip_options(self, booking_type: BookingType) -> Optional[Element]:
        """Round-trip, notes and extras cluster of one booking type.

        Hourly bookings get notes and extras and never a round trip; every
        other type gets round trip and extras.
        """
        body = h("div", {"class": "advanced-options-body", "hidden": True})
        if booking_type == BookingType.HOURLY:
            notes = self.hourly_notes()
            if notes is not None:
                body.append(notes)
        elif self.visibility.round_trip_button:
            body.append(self.round_trip_toggle(booking_type))
        extras = self.extra_options()
        if extras is not None:
            body.append(extras)
        if not body.children:
            return None
        return h(
            "div",
            {"class": "collapsible-options", "data-booking-type": booking_type.value},
            h("button", {"type": "button", "class": "advanced-options-toggle",
                         "data-action": "toggle-advanced-options", "aria-expanded": "false"},
              h("span", {}, self.t("advanced_options")), svg_icon(icons.CHEVRON_DOWN)),
            body,
        )

    def round_trip_toggle(self, booking_type: BookingType) -> Element:
        return h(
            "label",
            {"class": "round-trip-toggle"},
            h("input", {"type": "checkbox", "id": f"round-trip-{booking_type.value}",
                        "data-action": "toggle-round-trip", "data-booking-type": booking_type.value}),
            svg_icon(icons.ROUND_TRIP),
            h("span", {}, self.t("round_trip")),
        )

    def hourly_notes(self) -> Optional[Element]:
        if not self.visibility.notes_button:
            return None
        notes = [(key, value) for key, value in self.customizations.hourly_notes.items() if value.strip()]
        if not notes:
            return None
        return h(
            "div",
            {"class": "hourly-notes"},
            h("h4", {}, svg_icon(icons.NOTES), self.t("hourly_booking_notes_title")),
            h("ul", {}, [h("li", {}, h("strong", {}, f"{self.t(key)}: "), value) for key, value in notes]),
        )

    def extra_options(self) -> Optional[Element]:
        options = self.customizations.enabled_extra_options
        if not self.visibility.extra_options_button or not options:
            return None
        return h(
            "div",
            {"class": "extra-options"},
            h("h4", {}, svg_icon(icons.EXTRAS), self.t("extra_options")),
            [self.extra_option(option) for option in options],
        )

    def extra_option(self, option: ExtraOption) -> Element:
        return h(
            "div",
            {"class": "extra-option", "data-extra-name": option.name,
             "data-min": str(option.min), "data-max": str(option.max)},
            h("span", {"class": "extra-name"}, option.name,
              h("small", {"class": "extra-price"}, f" (+${option.price:.2f})")),
            h("div", {"class": "extra-stepper"},
              h("button", {"type": "button", "data-action": "extra-decrement", "data-extra-name": option.name,
                           "aria-label": f"- {option.name}"}, "-"),
              h("span", {"class": "extra-quantity"}, "0"),
              h("button", {"type": "button", "data-action": "extra-increment", "data-extra-name": option.name,
                           "aria-label": f"+ {option.name}"}, "+")),
        )

    def return_trip_section(self, booking_type: BookingType) -> Element:
        """Return leg: waypoints and final destination, shown while round trip is on."""
        element_id = return_dropoff_id(booking_type)
        section = h(
            "div",
            {"id": f"return-trip-{booking_type.value}", "class": "return-trip-section",
             "data-booking-type": booking_type.value, "hidden": True},
            h("h4", {}, self.t("return_trip")),
            h("div", {"id": f"return-waypoints-container-{booking_type.value}",
                      "class": "return-waypoints-container", "data-booking-type": booking_type.value}),
        )
        if self.visibility.add_waypoint_button:
            section.append(waypoint_button(booking_type, self.t, return_trip=True))
        section.append(h(
            "div",
            {"class": "form-field form-field-address"},
            h("label", {"class": "form-label", "for": element_id}, self.t("return_dropoff")),
            h("div", {"id": f"geocoder-container-{element_id}", "class": "geocoder-container",
                      "data-geocoder-for": element_id, "data-placeholder": self.t("enter_final_destination")}),
            h("input", {"type": "hidden", "id": element_id, "name": "return_dropoff", "value": ""}),
        ))
        return section

    def vehicle_step(self) -> Element:
        step = self._step(WizardStep.VEHICLE, h("h3", {"class": "step-title"}, self.t("select_vehicle")))
        if self.visibility.vehicle_selector:
            vehicles = self.customizations.vehicles
            step.append(h("div", {"id": "vehicle-list", "class": "vehicle-list"},
                          [self.vehicle_card(v, selected=i == 0) for i, v in enumerate(vehicles)]))
        return step

    def vehicle_card(self, vehicle: Vehicle, selected: bool = False) -> Element:
        specs = [
            (icons.PASSENGERS, vehicle.max_passengers, "passengers"),
            (icons.LUGGAGE, vehicle.max_luggage, "luggage"),
            (icons.CARRY_ON, vehicle.max_carry_on, "carry_on"),
        ]
        return h(
            "div",
            {
                "class": ["vehicle-card", "selected" if selected else None],
                "data-action": "select-vehicle",
                "data-vehicle-id": vehicle.id,
                "role": "button",
                "tabindex": "0",
            },
            h("img", {"src": vehicle_image_url(vehicle), "alt": vehicle.name, "loading": "lazy"}),
            h("h4", {"class": "vehicle-name"}, vehicle.name),
            h("p", {"class": "vehicle-model"}, vehicle.model) if vehicle.model else None,
            h("p", {"class": "vehicle-rate"}, f"${vehicle.rate_per_km:.2f}{self.t('rate_per_km_label')}"),
            h("div", {"class": "vehicle-specs"},
              [h("span", {"title": self.t(key)}, svg_icon(icon), str(count)) for icon, count, key in specs]),
        )

    def passenger_step(self) -> Element:
        common = [self.renderer.render(f, self.active_type) for f in self.config.fields.common]
        self.rendered["common"] = common
        return self._step(
            WizardStep.PASSENGER_PAYMENT,
            h("h3", {"class": "step-title"}, self.t("passenger_details")),
            h("div", {"class": "common-fields"}, [r.node for r in common]),
            self.payment_section(),
        )

    def payment_section(self) -> Optional[Element]:
        methods = self.payment_methods
        if not methods:
            return None
        selected = default_payment_method(methods)
        return h(
            "div",
            {"class": "payment-section"},
            h("h3", {"class": "step-title"}, self.t("payment_method")),
            h("div", {"class": "payment-methods"}, [
                h("button", {
                    "type": "button",
                    "class": ["payment-btn", "selected" if method == selected else None],
                    "data-action": "select-payment",
                    "data-payment-method": method.value,
                    "aria-pressed": "true" if method == selected else "false",
                }, svg_icon(PAYMENT_METHOD_ICONS[method], css_class="icon payment-method-icon"),
                    h("span", {}, self.t(method.value)))
                for method in methods
            ]),
        )

    def summary_step(self) -> Element:
        return self._step(
            WizardStep.SUMMARY,
            h("h3", {"class": "step-title"}, self.t("booking_summary")),
            h("div", {"id": "summary-container", "class": "summary-container"}),
            h("div", {"class": "promo-code"},
              h("label", {"class": "form-label", "for": "promo-code"}, self.t("promo_code")),
              h("div", {"class": "promo-code-row"},
                h("input", {"type": "text", "id": "promo-code", "name": "promo_code", "class": "form-input",
                            "placeholder": self.t("enter_promo_code")}),
                h("button", {"type": "button", "class": "btn-secondary", "data-action": "apply-promo"},
                  self.t("apply")))),
        )

    def confirmation_step(self) -> Element:
        return self._step(
            WizardStep.CONFIRMATION,
            h("div", {"class": "confirmation"},
              svg_icon(icons.CHECK),
              h("h3", {}, self.t("booking_confirmed")),
              h("p", {}, self.t("booking_confirmed_message")),
              h("p", {"id": "preview-notice", "class": "preview-notice", "hidden": True},
                self.t("preview_notice"))),
        )

    # Footer

    def navigation(self) -> Element:
        back = h("button", {"type": "button", "id": "back-btn", "class": "btn-secondary",
                            "data-action": "back", "hidden": True}, self.t("back_button"))
        main = h("button", {"type": "button", "id": "next-btn", "class": "btn-primary",
                            "data-action": "next"}, self.t("next_button"))
        position = self.layout.button_position
        ordered = [back, main] if position == ButtonPosition.RIGHT else [main, back]
        return h("div", {"id": "nav-container", "class": "nav-container",
                         "data-position": position.value}, ordered)

    def accepted_payments_footer(self) -> Optional[Element]:
        accepted = accepted_payment_icons(self.customizations.payment_icons)
        if not self.visibility.payment_icons or not accepted:
            return None
        return h(
            "div",
            {"class": "accepted-payments"},
            h("span", {}, self.t("we_accept")),
            [
                svg_icon(item["icon"], css_class="payment-icon", fill=None, stroke=None,
                         title=item["label"], **{"stroke-width": None, "data-icon": item["name"]})
                for item in accepted
            ],
        )


def assemble_form(
    config: BookingFormConfig,
    lang: Optional[str] = None,
    booking_type: Optional[Union[str, BookingType]] = None,
) -> Element:
    """Assemble the wizard tree for ``config``."""
    return FormAssembler(config, lang=lang, booking_type=booking_type).assemble()


__all__ = [
    "ROOT_ID",
    "PROGRESS_STEPS",
    "FormAssembler",
    "assemble_form",
    "supports_waypoints",
    "vehicle_image_url",
    "waypoints_container_id",
    "return_dropoff_id",
]
