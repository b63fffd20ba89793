"""Structured error types for the booking-form compiler and runtime.

All configuration, validation and submission failures carry a single
envelope structure (ErrorDetail) with optional field-level errors
(FieldError). The exception classes below wrap that envelope so callers can
either catch them or serialize ``exc.detail`` for the client.

Error taxonomy:
- ConfigLoadError: configuration could not be loaded; non-recoverable
- InvalidSchemaError: a form schema violates a structural invariant
- StepValidationError: a wizard step guard failed; recoverable inline
- SubmissionError: booking creation failed; recoverable through retry
- PaymentRedirectError: checkout initiation failed; a SubmissionError
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from bookingform.types import ErrorType, FieldErrorCode


@dataclass(frozen=True)
class FieldError:
    """Per-field validation error details.

    Attributes:
        path: Field key, or dot-notation path for configuration errors
            (e.g. "customizations.layout_settings.button_style")
        code: Specific validation error code
        message: Human-readable error description
        expected: Optional - what was expected
        received: Optional - what was actually received

    Examples:
        >>> err = FieldError(
        ...     path="dropoff_location",
        ...     code=FieldErrorCode.REQUIRED,
        ...     message="Field 'dropoff_location' is required",
        ... )
        >>> err.path
        'dropoff_location'
    """
    path: str
    code: FieldErrorCode
    message: str
    expected: Optional[Any] = None
    received: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "path": self.path,
            "code": self.code.value if isinstance(self.code, FieldErrorCode) else self.code,
            "message": self.message,
        }
        if self.expected is not None:
            result["expected"] = self.expected
        if self.received is not None:
            result["received"] = self.received
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldError":
        """Create FieldError from dict."""
        code = data["code"]
        if isinstance(code, str):
            code = FieldErrorCode(code)
        return cls(
            path=data["path"],
            code=code,
            message=data["message"],
            expected=data.get("expected"),
            received=data.get("received"),
        )


@dataclass(frozen=True)
class ErrorDetail:
    """Error envelope shared by every failure the package reports.

    Attributes:
        type: Category of error (config_load, validation, submission, ...)
        retryable: Whether an explicit user action can resolve the error
        message: Human-readable summary shown to the customer
        fields: Optional list of per-field errors
    """
    type: ErrorType
    retryable: bool
    message: Optional[str] = None
    fields: Optional[List[FieldError]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "type": self.type.value if isinstance(self.type, ErrorType) else self.type,
            "retryable": self.retryable,
        }
        if self.message is not None:
            result["message"] = self.message
        if self.fields is not None:
            result["fields"] = [f.to_dict() for f in self.fields]
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ErrorDetail":
        """Create ErrorDetail from dict."""
        error_type = data["type"]
        if isinstance(error_type, str):
            error_type = ErrorType(error_type)

        fields = None
        if data.get("fields") is not None:
            fields = [FieldError.from_dict(f) for f in data["fields"]]

        return cls(
            type=error_type,
            retryable=data["retryable"],
            message=data.get("message"),
            fields=fields,
        )


class BookingFormError(Exception):
    """Base class for every error raised by the package.

    Attributes:
        detail: Structured error envelope
    """

    error_type: ErrorType = ErrorType.SUBMISSION
    retryable: bool = True

    def __init__(self, message: str, fields: Optional[List[FieldError]] = None):
        self.detail = ErrorDetail(
            type=self.error_type,
            retryable=self.retryable,
            message=message,
            fields=fields,
        )
        super().__init__(message)

    @property
    def message(self) -> str:
        return self.detail.message or ""

    @property
    def fields(self) -> List[FieldError]:
        return list(self.detail.fields or [])


class ConfigLoadError(BookingFormError):
    """Raised when a booking-form configuration cannot be loaded or normalized.

    Surfaced as a full-page error state; a page reload is the only recovery.
    """

    error_type = ErrorType.CONFIG_LOAD
    retryable = False


class InvalidSchemaError(ConfigLoadError):
    """Raised when a form structure violates a schema invariant.

    Examples: duplicate keys within a section, conditional logic that
    references the field itself or a field outside its section.
    """


class StepValidationError(BookingFormError):
    """Raised when a wizard step guard fails.

    The step does not advance; the message is shown inline.
    """

    error_type = ErrorType.VALIDATION
    retryable = True


class SubmissionError(BookingFormError):
    """Raised when booking creation fails.

    The submit control resets to a retry state and entered data is kept.
    """

    error_type = ErrorType.SUBMISSION
    retryable = True


class PaymentRedirectError(SubmissionError):
    """Raised when a checkout-initiation call fails or returns no redirect URL."""

    error_type = ErrorType.PAYMENT_REDIRECT


__all__ = [
    "FieldError",
    "ErrorDetail",
    "BookingFormError",
    "ConfigLoadError",
    "InvalidSchemaError",
    "StepValidationError",
    "SubmissionError",
    "PaymentRedirectError",
]
