"""JSON Schema validation for booking-form configurations and wizard steps.

Two consumers share the ValidationEngine:
- config.load_config checks the raw configuration record shape before
  normalization
- StepValidator builds a per-step schema from the visible required fields
  and checks the collected values against it

jsonschema errors are translated into FieldError values so callers get
field paths and error codes instead of library exceptions.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

import jsonschema
from jsonschema import Draft7Validator

from bookingform.errors import FieldError
from bookingform.schema import FormField
from bookingform.types import FieldErrorCode


@dataclass(frozen=True)
class ValidationResult:
    """Result of validating data against a JSON Schema.

    Attributes:
        is_valid: Whether the data passed all validation checks
        errors: Field-level validation errors (empty if valid)
        missing_fields: Paths of required values that are missing
        invalid_fields: Paths of values that are present but malformed
    """
    is_valid: bool
    errors: List[FieldError]
    missing_fields: Optional[List[str]] = None
    invalid_fields: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "isValid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
        }
        if self.missing_fields is not None:
            result["missingFields"] = self.missing_fields
        if self.invalid_fields is not None:
            result["invalidFields"] = self.invalid_fields
        return result


class ValidationEngine:
    """Draft 7 validator that reports FieldError values.

    Examples:
        >>> engine = ValidationEngine({
        ...     "type": "object",
        ...     "properties": {"title": {"type": "string"}},
        ...     "required": ["title"],
        ... })
        >>> engine.validate({"title": "Book Your Ride"}).is_valid
        True
        >>> engine.validate({}).errors[0].code
        <FieldErrorCode.REQUIRED: 'required'>
    """

    def __init__(self, schema: Dict[str, Any]) -> None:
        """Initialize the engine.

        Raises:
            jsonschema.SchemaError: If the provided schema is invalid
        """
        self.schema = schema
        Draft7Validator.check_schema(schema)
        self.validator = Draft7Validator(schema)

    def validate(self, data: Any) -> ValidationResult:
        """Validate data against the schema, collecting every error."""
        errors = sorted(self.validator.iter_errors(data), key=lambda e: list(e.absolute_path))
        if not errors:
            return ValidationResult(is_valid=True, errors=[], missing_fields=[], invalid_fields=[])

        field_errors: List[FieldError] = []
        missing_fields: List[str] = []
        invalid_fields: List[str] = []
        for error in errors:
            field_error = self._translate_error(error)
            field_errors.append(field_error)
            if field_error.code == FieldErrorCode.REQUIRED:
                missing_fields.append(field_error.path)
            else:
                invalid_fields.append(field_error.path)

        return ValidationResult(
            is_valid=False,
            errors=field_errors,
            missing_fields=missing_fields,
            invalid_fields=invalid_fields,
        )

    def _translate_error(self, error: jsonschema.ValidationError) -> FieldError:
        """Map a jsonschema error onto a FieldError.

        Error mapping:
            - 'required' -> REQUIRED
            - 'minLength' on an empty string -> REQUIRED
            - 'type' -> INVALID_TYPE
            - 'format' / 'pattern' -> INVALID_FORMAT
            - 'enum' / 'const' / numeric bounds -> INVALID_VALUE
            - anything else -> CUSTOM
        """
        path = ".".join(str(p) for p in error.absolute_path)

        if error.validator == "required":
            missing_prop = error.message.split("'")[1] if "'" in error.message else "field"
            full_path = f"{path}.{missing_prop}" if path else missing_prop
            return FieldError(
                path=full_path,
                code=FieldErrorCode.REQUIRED,
                message=f"Field '{full_path}' is required but was not provided",
                expected="required field",
            )

        if error.validator == "minLength":
            return FieldError(
                path=path,
                code=FieldErrorCode.REQUIRED,
                message=f"Field '{path}' must not be empty",
                expected=f"minimum {error.validator_value} characters",
                received=error.instance,
            )

        if error.validator == "type":
            received_type = type(error.instance).__name__
            return FieldError(
                path=path,
                code=FieldErrorCode.INVALID_TYPE,
                message=f"Field '{path}' has invalid type. Expected {error.validator_value}, got {received_type}",
                expected=error.validator_value,
                received=received_type,
            )

        if error.validator in ("format", "pattern"):
            expected = error.validator_value
            if error.validator == "pattern":
                expected = f"pattern: {expected}"
            return FieldError(
                path=path,
                code=FieldErrorCode.INVALID_FORMAT,
                message=f"Field '{path}' has invalid format. Expected {expected}",
                expected=expected,
                received=error.instance,
            )

        if error.validator in ("enum", "const"):
            return FieldError(
                path=path,
                code=FieldErrorCode.INVALID_VALUE,
                message=f"Field '{path}' has invalid value. Must be one of: {error.validator_value}",
                expected=error.validator_value,
                received=error.instance,
            )

        if error.validator in ("minimum", "maximum", "exclusiveMinimum", "exclusiveMaximum", "minItems"):
            return FieldError(
                path=path,
                code=FieldErrorCode.INVALID_VALUE,
                message=f"Field '{path}' violates {error.validator} constraint: {error.validator_value}",
                expected=f"{error.validator}: {error.validator_value}",
                received=error.instance,
            )

        return FieldError(
            path=path,
            code=FieldErrorCode.CUSTOM,
            message=f"Field '{path}' validation failed: {error.message}",
            expected=error.validator_value,
            received=error.instance,
        )


def is_empty_value(value: Any) -> bool:
    """Whether a collected value counts as empty for a required check.

    Examples:
        >>> is_empty_value("   ")
        True
        >>> is_empty_value(0)
        False
        >>> is_empty_value(False)
        True
    """
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


class StepValidator:
    """Validates the values collected for one wizard step.

    Only the fields passed in are checked, so callers decide visibility:
    a conditionally hidden field is simply not passed.

    Examples:
        >>> from bookingform.schema import FormField
        >>> fields = [FormField(id="1", key="dropoff_location", type="short-text",
        ...                     label="Dropoff", required=True)]
        >>> StepValidator.build_schema(fields)["required"]
        ['dropoff_location']
    """

    @staticmethod
    def build_schema(fields: Iterable[FormField]) -> Dict[str, Any]:
        """Build the JSON Schema for the required fields in ``fields``."""
        properties: Dict[str, Any] = {}
        required: List[str] = []
        for form_field in fields:
            if not form_field.required:
                continue
            properties[form_field.value_key] = {}
            required.append(form_field.value_key)
        return {"type": "object", "properties": properties, "required": required}

    def validate(self, fields: Iterable[FormField], values: Mapping[str, Any]) -> ValidationResult:
        """Check that every required field in ``fields`` holds a non-empty value.

        Empty values are dropped before validation so they surface as
        REQUIRED errors. Values are not format-checked; the browser runtime
        applies the same presence-only guard.
        """
        fields = list(fields)
        schema = self.build_schema(fields)
        data = {
            key: value for key, value in values.items()
            if key in schema["properties"] and not is_empty_value(value)
        }
        return ValidationEngine(schema).validate(data)


__all__ = [
    "ValidationEngine",
    "ValidationResult",
    "StepValidator",
    "is_empty_value",
]
