"""Unit tests for the field renderer.

Tests cover:
- Representation chosen by field kind
- Element ids, names and required markers
- Placeholder precedence and localization
- Waypoint affordance attachment
- Conditional wiring
"""

import pytest

from bookingform.config import load_config
from bookingform.fields import (
    HOOK_ADD_WAYPOINT,
    HOOK_CLEAR_BUTTON,
    HOOK_CONDITIONAL,
    HOOK_DATETIME_PICKER,
    HOOK_GEOCODER,
    FieldRenderer,
)
from bookingform.schema import FormField
from bookingform.types import BookingType


@pytest.fixture
def renderer(fleet_config):
    return FieldRenderer(fleet_config.customizations, "en")


def section_field(config, section, key):
    return config.fields.field_by_key(section, key)


class TestAddressFields:
    """Test geocoded address fields."""

    def test_geocoder_container_and_hidden_input(self, renderer, fleet_config):
        rendered = renderer.render(section_field(fleet_config, "distance", "pickup_location"), "distance")
        container = rendered.node.by_id("geocoder-container-field_distance_1")
        assert container is not None
        assert container.get("data-placeholder") == "Enter pickup address"
        hidden = rendered.node.by_id("field-field_distance_1")
        assert hidden.get("type") == "hidden"
        assert hidden.get("name") == "pickup_location"
        assert rendered.has_hook(HOOK_GEOCODER)
        assert not rendered.has_hook(HOOK_ADD_WAYPOINT)

    def test_dropoff_carries_waypoint_button(self, renderer, fleet_config):
        """Should attach the waypoint affordance after the configured field."""
        rendered = renderer.render(section_field(fleet_config, "distance", "dropoff_location"), "distance")
        assert rendered.has_hook(HOOK_ADD_WAYPOINT)
        button = rendered.node.by_attr("data-action", "add-waypoint")[0]
        assert button.get("data-booking-type") == "distance"

    def test_waypoint_button_only_for_enabled_types(self, renderer, fleet_config):
        rendered = renderer.render(section_field(fleet_config, "on_demand", "dropoff_location"), "on_demand")
        assert not rendered.has_hook(HOOK_ADD_WAYPOINT)

    def test_hidden_component_suppresses_waypoint_button(self):
        config = load_config({"customizations": {"layout_settings": {
            "components_visibility": {"add_waypoint_button": False},
        }}})
        renderer = FieldRenderer(config.customizations, "en")
        rendered = renderer.render(section_field(config, "distance", "dropoff_location"), "distance")
        assert not rendered.has_hook(HOOK_ADD_WAYPOINT)

    def test_waypoint_button_after_text_field(self):
        config = load_config({"customizations": {"layout_settings": {
            "waypoint_button_config": {"enabled_for_types": ["charter"], "display_after_field": "event_details"},
        }}})
        renderer = FieldRenderer(config.customizations, "en")
        rendered = renderer.render(section_field(config, "charter", "event_details"), "charter")
        trailing = rendered.node.by_class("input-trailing")[0]
        assert trailing.by_attr("data-action", "add-waypoint")
        assert trailing.by_attr("data-action", "clear-field")


class TestDateTimeFields:
    """Test the composite date-time control."""

    def test_picker_structure(self, renderer, fleet_config):
        rendered = renderer.render(section_field(fleet_config, "distance", "datetime"), "distance")
        node = rendered.node
        assert rendered.has_hook(HOOK_DATETIME_PICKER)
        assert node.by_id("field-field_distance_3").get("type") == "hidden"
        assert node.by_id("field-field_distance_3-date-popover").get("hidden") is True
        assert len(node.by_class("time-slot")) == 48
        assert node.by_attr("data-action", "open-time-popover")


class TestSelectFields:
    """Test dropdown, route and vehicle selectors."""

    def test_route_selector_lists_routes(self, renderer, fleet_config):
        rendered = renderer.render(section_field(fleet_config, "flat_rate", "route_id"), "flat_rate")
        options = rendered.node.find_all(lambda e: e.tag == "option")
        assert [o.get("value") for o in options] == ["", "r1", "r2"]
        assert options[0].text() == "Select a Route"
        assert options[2].text() == "Harbor to Stadium ($30.50)"

    def test_dropdown_has_empty_first_entry(self, renderer):
        form_field = FormField(id="x", key="luggage_size", type="dropdown", label="Luggage",
                               options=("Small", "Large"))
        options = renderer.render(form_field, "charter").node.find_all(lambda e: e.tag == "option")
        assert [o.get("value") for o in options] == ["", "Small", "Large"]

    def test_vehicle_selector(self, renderer):
        form_field = FormField(id="v", key="vehicle", type="vehicle-type", label="Vehicle")
        options = renderer.render(form_field, "distance").node.find_all(lambda e: e.tag == "option")
        assert [o.text() for o in options] == ["Select a Vehicle", "Sedan (Toyota Camry)", "SUV"]


class TestChoiceFields:
    """Test radio and checkbox groups."""

    def test_radio_group(self, renderer, fleet_config):
        rendered = renderer.render(section_field(fleet_config, "airport_transfer", "transfer_direction"),
                                   "airport_transfer")
        radios = rendered.node.by_attr("type", "radio")
        assert [r.get("value") for r in radios] == ["From Airport", "To Airport"]
        assert all(r.get("name") == "transfer_direction" for r in radios)
        assert rendered.node.by_id("field-field_airport_1").has_class("radio-group")
        assert rendered.node.find(lambda e: e.tag == "label").get("for") is None

    def test_single_checkbox(self, renderer):
        form_field = FormField(id="c", key="accept_terms", type="checkbox", label="Accept terms")
        node = renderer.render(form_field, "charter").node
        box = node.by_id("field-c")
        assert box.get("type") == "checkbox"
        assert box.get("value") == "true"

    def test_checkbox_group(self, renderer):
        form_field = FormField(id="c", key="amenities", type="checkbox", label="Amenities",
                               options=("Wifi", "Snacks"))
        boxes = renderer.render(form_field, "charter").node.by_attr("type", "checkbox")
        assert [b.get("id") for b in boxes] == ["field-c-0", "field-c-1"]


class TestTextFields:
    """Test text, number and textarea controls."""

    def test_email_input_type(self, renderer, fleet_config):
        rendered = renderer.render(section_field(fleet_config, "common", "email"), "distance")
        control = rendered.node.by_id("field-field_common_2")
        assert control.get("type") == "email"
        assert control.get("required") is True
        assert rendered.has_hook(HOOK_CLEAR_BUTTON)

    def test_phone_input_type(self, renderer, fleet_config):
        rendered = renderer.render(section_field(fleet_config, "common", "phone_number"), "distance")
        assert rendered.node.by_id("field-field_common_3").get("type") == "tel"

    def test_number_input(self, renderer, fleet_config):
        rendered = renderer.render(section_field(fleet_config, "hourly", "rental_hours"), "hourly")
        control = rendered.node.by_id("field-field_hourly_2")
        assert control.get("type") == "number"
        assert control.get("placeholder") == "e.g., 3"

    def test_textarea_optional_suffix(self, renderer, fleet_config):
        rendered = renderer.render(section_field(fleet_config, "common", "special_instructions"), "distance")
        assert rendered.node.by_id("field-field_common_4").tag == "textarea"
        assert rendered.node.by_class("optional-suffix")[0].text() == "(Optional)"
        assert not rendered.node.by_class("required-marker")

    def test_clear_button_targets_control(self, renderer, fleet_config):
        rendered = renderer.render(section_field(fleet_config, "common", "full_name"), "distance")
        clear = rendered.node.by_attr("data-action", "clear-field")[0]
        assert clear.get("data-target") == "field-field_common_1"
        assert clear.get("hidden") is True


class TestPlaceholders:
    """Test placeholder precedence."""

    def test_translated_placeholder(self, fleet_config):
        renderer = FieldRenderer(fleet_config.customizations, "es")
        form_field = FormField(id="p", key="pickup_location", type="short-text", label="Pickup")
        assert renderer.placeholder(form_field) == "Dirección de recogida"

    def test_explicit_placeholder_wins(self, renderer):
        form_field = FormField(id="p", key="pickup_location", type="short-text", label="Pickup",
                               placeholder="Hotel or address")
        assert renderer.placeholder(form_field) == "Hotel or address"

    def test_generated_placeholder(self, renderer):
        form_field = FormField(id="n", key="event_name", type="short-text", label="Event Name")
        assert renderer.placeholder(form_field) == "Enter event name"

    def test_localized_label(self, fleet_config):
        renderer = FieldRenderer(fleet_config.customizations, "fr")
        rendered = renderer.render(section_field(fleet_config, "common", "full_name"), "distance")
        assert rendered.node.find(lambda e: e.tag == "label").text().startswith("Nom complet")


class TestConditionalFields:
    """Test conditional wiring."""

    def test_conditional_attributes(self, renderer, fleet_config):
        rendered = renderer.render(section_field(fleet_config, "airport_transfer", "pickup_location"),
                                   BookingType.AIRPORT_TRANSFER)
        assert rendered.has_hook(HOOK_CONDITIONAL)
        assert rendered.node.get("data-conditional-field") == "transfer_direction"
        assert rendered.node.get("data-conditional-value") == "To Airport"
        assert rendered.node.get("hidden") is True

    def test_unconditional_field_visible(self, renderer, fleet_config):
        rendered = renderer.render(section_field(fleet_config, "airport_transfer", "airport_name"),
                                   "airport_transfer")
        assert "hidden" not in rendered.node.attrs
        assert rendered.name == "airport_name"
        assert rendered.element_id == "field-field_airport_2"
