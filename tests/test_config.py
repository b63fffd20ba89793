"""Unit tests for configuration loading and normalization.

Tests cover:
- Defaults for an empty record
- Deep merge precedence
- Shape validation failures
- Languages, booking types and extra-option normalization
- Pricing, routes and vehicle snapshots
- Payload serialization
"""

import pytest

from bookingform.config import ExtraOption, deep_merge, load_config
from bookingform.errors import ConfigLoadError, InvalidSchemaError
from bookingform.types import (
    BookingType,
    ButtonPosition,
    ButtonStyle,
    ContainerStyle,
    ErrorType,
    Visibility,
)


class TestDefaults:
    """Test loading an empty configuration."""

    def test_empty_record_gets_defaults(self, default_config):
        options = default_config.customizations
        assert options.title == "Book Your Ride"
        assert options.default_language == "en"
        assert options.selected_languages == ("en", "es", "fr")
        assert default_config.enabled_booking_types == (
            BookingType.DISTANCE, BookingType.HOURLY, BookingType.FLAT_RATE, BookingType.ON_DEMAND,
        )
        assert [o.name for o in options.extra_options] == ["Child Seat", "Bottled Water"]
        assert options.pricing.base_fare == 2.5
        assert options.routes == ()
        assert options.vehicles == ()

    def test_none_record_is_empty(self):
        assert load_config(None) == load_config({})

    def test_default_layout(self, default_config):
        layout = default_config.layout
        assert layout.container_style == ContainerStyle.CARD_WITH_SHADOW
        assert layout.button_style == ButtonStyle.FILLED_ROUNDED
        assert layout.button_position == ButtonPosition.RIGHT
        assert layout.show_progress_bar
        assert layout.components_visibility.map_visibility
        assert layout.waypoint_button_config.enabled_for_types == (BookingType.DISTANCE,)

    def test_every_section_has_default_fields(self, default_config):
        for booking_type in BookingType:
            assert default_config.fields.section(booking_type), booking_type


class TestDeepMerge:
    """Test deep_merge precedence."""

    def test_nested_mappings_merge(self):
        merged = deep_merge(
            {"layout_settings": {"button_position": "right", "components_visibility": {"show_logo": True, "map_visibility": True}}},
            {"layout_settings": {"components_visibility": {"map_visibility": False}}},
        )
        assert merged["layout_settings"]["button_position"] == "right"
        assert merged["layout_settings"]["components_visibility"] == {"show_logo": True, "map_visibility": False}

    def test_lists_replace(self):
        assert deep_merge({"icons": ["visa", "cash"]}, {"icons": ["paypal"]}) == {"icons": ["paypal"]}

    def test_none_counts_as_absent(self):
        assert deep_merge({"title": "Default"}, {"title": None}) == {"title": "Default"}

    def test_inputs_not_mutated(self):
        default = {"a": {"b": [1]}}
        loaded = {"a": {"c": 2}}
        merged = deep_merge(default, loaded)
        merged["a"]["b"].append(9)
        assert default == {"a": {"b": [1]}}
        assert loaded == {"a": {"c": 2}}


class TestLoadedValues:
    """Test values loaded over the defaults."""

    def test_partial_layout_keeps_other_defaults(self):
        config = load_config({"customizations": {"layout_settings": {
            "button_position": "space_between",
            "components_visibility": {"map_visibility": False},
        }}})
        layout = config.layout
        assert layout.button_position == ButtonPosition.SPACE_BETWEEN
        assert layout.components_visibility.map_visibility is False
        assert layout.components_visibility.show_logo is True
        assert layout.progress_bar_visibility == Visibility.VISIBLE

    def test_unknown_button_style_is_outline(self):
        """Should treat any non filled_rounded skin as an outline."""
        config = load_config({"customizations": {"layout_settings": {"button_style": "ghost"}}})
        assert config.layout.button_style == ButtonStyle.OUTLINE_SQUARE

    def test_top_level_snapshots_override(self):
        config = load_config({
            "customizations": {"routes": [{"id": "old", "route_name": "Old", "fixed_price": 1}]},
            "routes": [{"id": 7, "route_name": "City Loop", "fixed_price": "25.5"}],
            "pricing": {"cost_per_hour": "80"},
        })
        assert [r.id for r in config.customizations.routes] == ["7"]
        assert config.customizations.route("7").fixed_price == 25.5
        assert config.customizations.pricing.cost_per_hour == 80.0
        assert config.customizations.pricing.base_fare == 2.5

    def test_vehicle_snapshot(self, fleet_config):
        suv = fleet_config.customizations.vehicle("v2")
        assert suv.name == "SUV"
        assert suv.model == ""
        assert suv.max_passengers == 6
        assert fleet_config.customizations.vehicle("missing") is None

    def test_duplicate_booking_types_collapsed(self):
        config = load_config({"customizations": {"enabledBookingTypes": ["hourly", "hourly", "charter"]}})
        assert config.enabled_booking_types == (BookingType.HOURLY, BookingType.CHARTER)

    def test_empty_booking_types_fall_back(self):
        config = load_config({"customizations": {"enabledBookingTypes": []}})
        assert config.enabled_booking_types[0] == BookingType.DISTANCE

    def test_default_language_must_be_selected(self):
        config = load_config({"customizations": {"selectedLanguages": ["fr", "es"], "defaultLanguage": "en"}})
        assert config.customizations.default_language == "fr"

    def test_empty_languages_fall_back(self):
        config = load_config({"customizations": {"selectedLanguages": []}})
        assert config.customizations.selected_languages == ("en", "es", "fr")

    def test_route_field_inserted_when_missing(self):
        """Should always give the flat-rate section a route selector."""
        config = load_config({"fields": {"flat_rate": [
            {"id": "x1", "key": "notes", "type": "long-text", "label": "Notes"},
        ]}})
        keys = [f.key for f in config.fields.section(BookingType.FLAT_RATE)]
        assert keys == ["route_id", "notes"]

    def test_loaded_section_replaces_default_fields(self):
        config = load_config({"fields": {"common": [
            {"id": "c1", "key": "full_name", "type": "text", "label": "Name", "required": True},
        ]}})
        assert [f.key for f in config.fields.common] == ["full_name"]
        assert len(config.fields.section(BookingType.DISTANCE)) == 3


class TestExtraOptions:
    """Test extra-option normalization."""

    def test_missing_bounds_use_defaults(self):
        option = ExtraOption.from_dict({"name": "Blanket", "price": "4"})
        assert (option.min, option.max, option.price) == (0, 5, 4.0)
        assert option.enabled

    def test_max_below_min_rejected(self):
        with pytest.raises(ValueError):
            ExtraOption.from_dict({"name": "Blanket", "price": 4, "min": 3, "max": 1})

    def test_max_below_min_in_config_is_load_error(self):
        with pytest.raises(ConfigLoadError):
            load_config({"customizations": {"extraOptions": [{"name": "Blanket", "min": 3, "max": 1}]}})

    def test_enabled_extra_options(self):
        config = load_config({"customizations": {"extraOptions": [
            {"name": "Blanket", "price": 4, "enabled": False},
            {"name": "Wifi", "price": 3},
        ]}})
        assert [o.name for o in config.customizations.enabled_extra_options] == ["Wifi"]


class TestShapeErrors:
    """Test records that cannot be loaded."""

    def test_non_mapping_record(self):
        with pytest.raises(ConfigLoadError):
            load_config(["not", "a", "record"])

    def test_wrong_type_reports_field_path(self):
        with pytest.raises(ConfigLoadError) as exc_info:
            load_config({"customizations": {"selectedLanguages": "en"}})
        error = exc_info.value
        assert error.detail.type == ErrorType.CONFIG_LOAD
        assert error.detail.retryable is False
        assert error.fields[0].path == "customizations.selectedLanguages"

    def test_unknown_booking_type(self):
        with pytest.raises(ConfigLoadError):
            load_config({"customizations": {"enabledBookingTypes": ["helicopter"]}})

    def test_invalid_container_style(self):
        with pytest.raises(ConfigLoadError):
            load_config({"customizations": {"layout_settings": {"container_style": "glass"}}})

    def test_route_without_price(self):
        with pytest.raises(ConfigLoadError):
            load_config({"routes": [{"id": "r1", "route_name": "Loop"}]})

    def test_schema_violation_is_reported(self):
        with pytest.raises(InvalidSchemaError):
            load_config({"fields": {"common": [
                {"id": "a", "key": "email", "type": "text", "label": "Email"},
                {"id": "b", "key": "email", "type": "text", "label": "Email again"},
            ]}})


class TestCustomizationOptions:
    """Test booking-type toggling and serialization."""

    def test_toggle_disables_type(self, default_config):
        options = default_config.customizations.with_booking_type_toggled("hourly")
        assert BookingType.HOURLY not in options.enabled_booking_types
        assert BookingType.HOURLY in default_config.enabled_booking_types

    def test_toggle_enables_type_at_end(self, default_config):
        options = default_config.customizations.with_booking_type_toggled(BookingType.CHARTER)
        assert options.enabled_booking_types[-1] == BookingType.CHARTER

    def test_last_enabled_type_stays(self):
        options = load_config({"customizations": {"enabledBookingTypes": ["hourly"]}}).customizations
        assert options.with_booking_type_toggled("hourly") is options

    def test_payload_round_trips_through_loader(self, fleet_config):
        """Should reload its own payload into an equal configuration."""
        payload = fleet_config.to_payload()
        reloaded = load_config({"fields": payload["fields"], "customizations": payload["customizations"]})
        assert reloaded.customizations == fleet_config.customizations
        assert reloaded.fields == fleet_config.fields
