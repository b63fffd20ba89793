"""Unit tests for the form schema model.

Tests cover:
- Field kind resolution from key, type and declared kind
- Legacy field type aliases
- Conditional logic matching
- Structural invariants of FormStructure
"""

import pytest

from bookingform.errors import ConfigLoadError, InvalidSchemaError
from bookingform.schema import ConditionalLogic, FormField, FormStructure, resolve_field_kind
from bookingform.types import FieldErrorCode, FieldKind, FieldType


class TestFieldKindResolution:
    """Test resolve_field_kind."""

    @pytest.mark.parametrize("key", ["pickup_location", "dropoff_location", "waypoint_1", "return_pickup_location"])
    def test_address_keys(self, key):
        assert resolve_field_kind(key, FieldType.SHORT_TEXT) == FieldKind.ADDRESS

    def test_route_selector(self):
        assert resolve_field_kind("route_id", FieldType.DROPDOWN) == FieldKind.ROUTE

    def test_route_key_on_text_is_plain_text(self):
        assert resolve_field_kind("route_id", FieldType.SHORT_TEXT) == FieldKind.TEXT

    @pytest.mark.parametrize("field_type,kind", [
        (FieldType.LONG_TEXT, FieldKind.TEXTAREA),
        (FieldType.DATE_TIME, FieldKind.DATETIME),
        (FieldType.NUMBER, FieldKind.NUMBER),
        (FieldType.RADIO, FieldKind.RADIO),
        (FieldType.CHECKBOX, FieldKind.CHECKBOX),
        (FieldType.VEHICLE_TYPE, FieldKind.VEHICLE),
    ])
    def test_type_mapping(self, field_type, kind):
        assert resolve_field_kind("notes", field_type) == kind

    def test_declared_kind_wins(self):
        """Should never infer when a kind is declared."""
        assert resolve_field_kind("pickup_location", FieldType.SHORT_TEXT, "text") == FieldKind.TEXT


class TestFormField:
    """Test FormField normalization and serialization."""

    @pytest.mark.parametrize("legacy,expected", [
        ("text", FieldType.SHORT_TEXT),
        ("textarea", FieldType.LONG_TEXT),
        ("select", FieldType.DROPDOWN),
        ("datetime", FieldType.DATE_TIME),
        ("Date-Time", FieldType.DATE_TIME),
    ])
    def test_legacy_type_aliases(self, legacy, expected):
        form_field = FormField.from_dict({"id": "1", "key": "x", "type": legacy, "label": "X"})
        assert form_field.type == expected

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            FormField.from_dict({"id": "1", "key": "x", "type": "signature", "label": "X"})

    def test_element_id_and_value_key(self):
        form_field = FormField(id="field_distance_2", key="", type="short-text", label="Notes")
        assert form_field.element_id == "field-field_distance_2"
        assert form_field.value_key == "field_distance_2"
        assert not form_field.has_key

    def test_options_normalized_to_strings(self):
        form_field = FormField.from_dict({"id": "1", "key": "seats", "type": "radio", "label": "Seats",
                                          "options": [1, 2, 3]})
        assert form_field.options == ("1", "2", "3")

    def test_to_dict_round_trip(self):
        raw = {
            "id": "field_airport_3", "key": "pickup_location", "type": "short-text",
            "label": "Pickup Address", "required": True, "placeholder": "Enter pickup address",
            "conditionalLogic": {"fieldKey": "transfer_direction", "value": "To Airport"},
        }
        form_field = FormField.from_dict(raw)
        data = form_field.to_dict()
        assert data["kind"] == "address"
        assert data["conditionalLogic"] == {"fieldKey": "transfer_direction", "value": "To Airport"}
        assert FormField.from_dict(data) == form_field


class TestConditionalLogic:
    """Test ConditionalLogic.matches."""

    def test_string_equality(self):
        logic = ConditionalLogic(field_key="transfer_direction", value="From Airport")
        assert logic.matches("From Airport")
        assert not logic.matches("To Airport")
        assert not logic.matches(None)

    def test_boolean_rule(self):
        """Should compare checkbox values as booleans."""
        logic = ConditionalLogic(field_key="needs_seat", value=True)
        assert logic.matches(True)
        assert logic.matches("true")
        assert not logic.matches(False)
        assert not logic.matches(None)

    def test_number_option_matches_text(self):
        logic = ConditionalLogic(field_key="seats", value=2)
        assert logic.matches("2")


def _raw(key, field_type="short-text", **kwargs):
    data = {"id": f"f_{key}", "key": key, "type": field_type, "label": key}
    data.update(kwargs)
    return data


class TestFormStructure:
    """Test FormStructure invariants."""

    def test_every_section_present(self):
        structure = FormStructure.from_dict({"distance": [_raw("pickup_location")]})
        assert len(structure.section("distance")) == 1
        assert structure.section("hourly") == ()
        assert structure.common == ()
        assert list(structure)[0] == "common"

    def test_loaded_section_replaces_default(self):
        structure = FormStructure.from_dict(
            {"common": [_raw("full_name")]},
            defaults={"common": [_raw("email"), _raw("phone_number")], "hourly": [_raw("rental_hours", "number")]},
        )
        assert [f.key for f in structure.common] == ["full_name"]
        assert [f.key for f in structure.section("hourly")] == ["rental_hours"]

    def test_unknown_section_rejected(self):
        with pytest.raises(InvalidSchemaError) as exc_info:
            FormStructure.from_dict({"limo": []})
        assert exc_info.value.fields[0].path == "limo"

    def test_duplicate_keys_rejected(self):
        """Should reject two fields with one key in the same section."""
        with pytest.raises(InvalidSchemaError) as exc_info:
            FormStructure.from_dict({"distance": [
                _raw("pickup_location"),
                dict(_raw("pickup_location"), id="f_other"),
            ]})
        assert "Duplicate key" in exc_info.value.fields[0].message

    def test_same_key_in_different_sections_allowed(self):
        structure = FormStructure.from_dict({
            "distance": [_raw("pickup_location")],
            "hourly": [_raw("pickup_location")],
        })
        assert structure.field_by_key("hourly", "pickup_location") is not None

    def test_invalid_key_format(self):
        with pytest.raises(InvalidSchemaError) as exc_info:
            FormStructure.from_dict({"common": [_raw("Full Name")]})
        assert exc_info.value.fields[0].code == FieldErrorCode.INVALID_FORMAT

    def test_self_referencing_logic_rejected(self):
        raw = _raw("direction", "radio", options=["A", "B"],
                   conditionalLogic={"fieldKey": "direction", "value": "A"})
        with pytest.raises(InvalidSchemaError):
            FormStructure.from_dict({"charter": [raw]})

    def test_logic_referencing_other_section_rejected(self):
        """Should only allow controllers from the same section."""
        with pytest.raises(InvalidSchemaError):
            FormStructure.from_dict({
                "common": [_raw("direction", "radio", options=["A", "B"])],
                "charter": [_raw("notes", conditionalLogic={"fieldKey": "direction", "value": "A"})],
            })

    def test_controller_without_options_rejected(self):
        with pytest.raises(InvalidSchemaError) as exc_info:
            FormStructure.from_dict({"charter": [
                _raw("event_name"),
                _raw("notes", conditionalLogic={"fieldKey": "event_name", "value": "Gala"}),
            ]})
        assert "options or be boolean-like" in exc_info.value.fields[0].message

    def test_boolean_controller_allowed(self):
        structure = FormStructure.from_dict({"charter": [
            _raw("needs_catering", "checkbox"),
            _raw("menu", conditionalLogic={"fieldKey": "needs_catering", "value": True}),
        ]})
        assert structure.dependents_of("charter", "needs_catering")[0].key == "menu"

    def test_schema_error_is_config_load_error(self):
        assert issubclass(InvalidSchemaError, ConfigLoadError)

    def test_to_dict_lists_every_section(self):
        data = FormStructure.from_dict({}).to_dict()
        assert set(data) >= {"common", "distance", "airport_transfer"}
