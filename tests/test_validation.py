"""Unit tests for the validation engine and step validator.

Tests cover:
- jsonschema error translation into FieldError codes
- Missing versus invalid field reporting
- Empty-value semantics for required checks
- Per-step schemas built from required fields
"""

import jsonschema
import pytest

from bookingform.schema import FormField
from bookingform.types import FieldErrorCode
from bookingform.validation import StepValidator, ValidationEngine, is_empty_value


class TestValidationEngine:
    """Test ValidationEngine error translation."""

    def test_valid_data(self):
        engine = ValidationEngine({"type": "object", "properties": {"title": {"type": "string"}}})
        result = engine.validate({"title": "Book Your Ride"})
        assert result.is_valid
        assert result.errors == []
        assert result.missing_fields == []

    def test_missing_required_field(self):
        """Should report a missing property as REQUIRED with its path."""
        engine = ValidationEngine({"type": "object", "required": ["email"]})
        result = engine.validate({})
        assert not result.is_valid
        assert result.errors[0].code == FieldErrorCode.REQUIRED
        assert result.missing_fields == ["email"]
        assert result.invalid_fields == []

    def test_nested_required_path(self):
        engine = ValidationEngine({
            "type": "object",
            "properties": {"pricing": {"type": "object", "required": ["base_fare"]}},
        })
        result = engine.validate({"pricing": {}})
        assert result.missing_fields == ["pricing.base_fare"]

    def test_type_mismatch(self):
        engine = ValidationEngine({"type": "object", "properties": {"routes": {"type": "array"}}})
        error = engine.validate({"routes": "r1"}).errors[0]
        assert error.code == FieldErrorCode.INVALID_TYPE
        assert error.received == "str"

    def test_pattern_mismatch(self):
        engine = ValidationEngine({"type": "object", "properties": {"key": {"type": "string", "pattern": "^[a-z]+$"}}})
        error = engine.validate({"key": "Pickup"}).errors[0]
        assert error.code == FieldErrorCode.INVALID_FORMAT
        assert error.path == "key"

    def test_enum_mismatch(self):
        engine = ValidationEngine({"type": "object", "properties": {"style": {"enum": ["flat"]}}})
        error = engine.validate({"style": "glass"}).errors[0]
        assert error.code == FieldErrorCode.INVALID_VALUE
        assert error.received == "glass"

    def test_minimum_violation(self):
        engine = ValidationEngine({"type": "object", "properties": {"max": {"type": "integer", "minimum": 0}}})
        error = engine.validate({"max": -1}).errors[0]
        assert error.code == FieldErrorCode.INVALID_VALUE

    def test_empty_string_with_min_length_is_required(self):
        engine = ValidationEngine({"type": "object", "properties": {"name": {"type": "string", "minLength": 1}}})
        assert engine.validate({"name": ""}).errors[0].code == FieldErrorCode.REQUIRED

    def test_invalid_schema_rejected(self):
        """Should refuse to build an engine around an invalid schema."""
        with pytest.raises(jsonschema.SchemaError):
            ValidationEngine({"type": "not-a-type"})

    def test_result_to_dict(self):
        engine = ValidationEngine({"type": "object", "required": ["email"]})
        data = engine.validate({}).to_dict()
        assert data["isValid"] is False
        assert data["missingFields"] == ["email"]
        assert data["errors"][0]["code"] == "required"


class TestIsEmptyValue:
    """Test empty-value semantics used by required checks."""

    @pytest.mark.parametrize("value", [None, "", "   ", False, [], {}])
    def test_empty(self, value):
        assert is_empty_value(value)

    @pytest.mark.parametrize("value", ["a", 0, 3.5, True, ["x"]])
    def test_not_empty(self, value):
        assert not is_empty_value(value)


def _field(key, field_type="short-text", required=True, **kwargs):
    return FormField(id=f"f_{key}", key=key, type=field_type, label=key.title(), required=required, **kwargs)


class TestStepValidator:
    """Test per-step validation of collected values."""

    def test_schema_contains_only_required_fields(self):
        schema = StepValidator.build_schema([
            _field("pickup_location"),
            _field("flight_number", required=False),
        ])
        assert schema["required"] == ["pickup_location"]
        assert list(schema["properties"]) == ["pickup_location"]

    def test_all_present(self):
        fields = [_field("pickup_location"), _field("datetime", "date-time")]
        result = StepValidator().validate(fields, {
            "pickup_location": "12 Main St",
            "datetime": "2030-05-01T09:30",
        })
        assert result.is_valid

    def test_empty_values_reported_as_missing(self):
        """Should treat blank strings as missing rather than malformed."""
        fields = [_field("pickup_location"), _field("dropoff_location")]
        result = StepValidator().validate(fields, {"pickup_location": "  ", "dropoff_location": ""})
        assert sorted(result.missing_fields) == ["dropoff_location", "pickup_location"]
        assert result.invalid_fields == []

    @pytest.mark.parametrize("value", ["2030-05-01T09:30:00", "05/01/2030"])
    def test_datetime_presence_only(self, value):
        """Should accept any non-empty date-time value."""
        result = StepValidator().validate([_field("datetime", "date-time")], {"datetime": value})
        assert result.is_valid

    @pytest.mark.parametrize("value,valid", [("3", True), (4, True), ("-1", True), (0, True), ("  ", False), (None, False)])
    def test_number_values(self, value, valid):
        result = StepValidator().validate([_field("rental_hours", "number")], {"rental_hours": value})
        assert result.is_valid is valid

    def test_required_checkbox_must_be_checked(self):
        fields = [_field("accept_terms", "checkbox")]
        assert not StepValidator().validate(fields, {"accept_terms": False}).is_valid
        assert StepValidator().validate(fields, {"accept_terms": True}).is_valid

    def test_fields_not_passed_are_ignored(self):
        """Should not check fields the caller considers hidden."""
        result = StepValidator().validate([_field("dropoff_location")], {"dropoff_location": "5th Avenue"})
        assert result.is_valid

    def test_field_without_key_uses_id(self):
        form_field = FormField(id="field_x", key="", type="short-text", label="Notes", required=True)
        result = StepValidator().validate([form_field], {})
        assert result.missing_fields == ["field_x"]
