"""Form schema model: fields, conditional logic and form structures.

A FormStructure maps every section (``common`` plus one per booking type)
to an ordered tuple of FormField. Structural invariants are enforced when
the structure is built:

- keys are lowercase/underscore and unique within a section
- conditional logic never references the field itself
- conditional logic references a field of the same section that has
  options or is boolean-like

Usage:
    >>> structure = FormStructure.from_dict({
    ...     "distance": [{"id": "f1", "key": "pickup_location", "type": "text",
    ...                   "label": "Pickup", "required": True}],
    ... })
    >>> structure.section("distance")[0].kind
    <FieldKind.ADDRESS: 'address'>
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from bookingform.errors import FieldError, InvalidSchemaError
from bookingform.types import (
    COMMON_SECTION,
    SECTION_KEYS,
    BookingType,
    FieldErrorCode,
    FieldKind,
    FieldType,
)

# Key fragments that mark a text field as a geocoded address
ADDRESS_KEY_MARKERS: Tuple[str, ...] = ("pickup_location", "dropoff_location", "waypoint")

# Submission name of the flat-rate route selector
ROUTE_FIELD_KEY = "route_id"

KEY_PATTERN = re.compile(r"^[a-z0-9_]*$")

TYPE_TO_KIND: Dict[FieldType, FieldKind] = {
    FieldType.SHORT_TEXT: FieldKind.TEXT,
    FieldType.LONG_TEXT: FieldKind.TEXTAREA,
    FieldType.DROPDOWN: FieldKind.SELECT,
    FieldType.DATE_TIME: FieldKind.DATETIME,
    FieldType.NUMBER: FieldKind.NUMBER,
    FieldType.CHECKBOX: FieldKind.CHECKBOX,
    FieldType.RADIO: FieldKind.RADIO,
    FieldType.VEHICLE_TYPE: FieldKind.VEHICLE,
}


def resolve_field_kind(
    key: str,
    field_type: FieldType,
    declared: Optional[Union[str, FieldKind]] = None,
) -> FieldKind:
    """Resolve the rendering kind of a field.

    A declared kind always wins. Otherwise text fields whose key names an
    address become ADDRESS, a dropdown keyed ``route_id`` becomes ROUTE and
    every other field maps from its type.

    Examples:
        >>> resolve_field_kind("dropoff_location", FieldType.SHORT_TEXT)
        <FieldKind.ADDRESS: 'address'>
        >>> resolve_field_kind("notes", FieldType.LONG_TEXT)
        <FieldKind.TEXTAREA: 'textarea'>
        >>> resolve_field_kind("notes", FieldType.SHORT_TEXT, declared="address")
        <FieldKind.ADDRESS: 'address'>
    """
    if declared is not None:
        return FieldKind(declared)
    key = key or ""
    if field_type in (FieldType.SHORT_TEXT, FieldType.LONG_TEXT):
        if any(marker in key for marker in ADDRESS_KEY_MARKERS):
            return FieldKind.ADDRESS
    if field_type == FieldType.DROPDOWN and key == ROUTE_FIELD_KEY:
        return FieldKind.ROUTE
    return TYPE_TO_KIND[field_type]


@dataclass(frozen=True)
class ConditionalLogic:
    """Visibility rule: the owning field is shown only while the field
    named ``field_key`` currently equals ``value``.
    """
    field_key: str
    value: Any

    def matches(self, current: Any) -> bool:
        """Check whether the controlling field's current value satisfies the rule."""
        if isinstance(self.value, bool) or isinstance(current, bool):
            return _as_bool(current) == _as_bool(self.value)
        return _as_text(current) == _as_text(self.value)

    def to_dict(self) -> Dict[str, Any]:
        return {"fieldKey": self.field_key, "value": self.value}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConditionalLogic":
        return cls(field_key=data["fieldKey"], value=data.get("value"))


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "on", "1")
    return bool(value)


@dataclass(frozen=True)
class FormField:
    """A single field of a form section.

    Attributes:
        id: Stable identifier; element ids derive from it (``field-<id>``)
        key: Submission name, lowercase/underscore; empty means the field
            takes no part in conditional or fare logic
        type: Declared field type
        label: Display label (also the translation fallback)
        placeholder: Optional explicit placeholder
        options: Ordered option labels for dropdown/radio/checkbox groups
        required: Whether a visible instance must hold a non-empty value
        conditional_logic: Optional visibility rule
        kind: Rendering capability; resolved from key/type when omitted
    """
    id: str
    key: str
    type: FieldType
    label: str
    placeholder: Optional[str] = None
    options: Optional[Tuple[str, ...]] = None
    required: bool = False
    conditional_logic: Optional[ConditionalLogic] = None
    kind: Optional[FieldKind] = None

    def __post_init__(self):
        """Normalize enum and sequence values."""
        object.__setattr__(self, "type", FieldType.parse(self.type))
        if self.key is None:
            object.__setattr__(self, "key", "")
        if self.options is not None and not isinstance(self.options, tuple):
            object.__setattr__(self, "options", tuple(str(o) for o in self.options))
        if isinstance(self.conditional_logic, Mapping):
            object.__setattr__(
                self, "conditional_logic", ConditionalLogic.from_dict(self.conditional_logic)
            )
        object.__setattr__(self, "kind", resolve_field_kind(self.key, self.type, self.kind))

    @property
    def has_key(self) -> bool:
        return bool(self.key)

    @property
    def value_key(self) -> str:
        """Name the field's value is stored and submitted under."""
        return self.key or self.id

    @property
    def is_boolean_like(self) -> bool:
        return self.kind == FieldKind.CHECKBOX and not self.options

    @property
    def element_id(self) -> str:
        return f"field-{self.id}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization (persisted wire format)."""
        result: Dict[str, Any] = {
            "id": self.id,
            "key": self.key,
            "type": self.type.value,
            "label": self.label,
            "required": self.required,
            "kind": self.kind.value,
        }
        if self.placeholder is not None:
            result["placeholder"] = self.placeholder
        if self.options is not None:
            result["options"] = list(self.options)
        if self.conditional_logic is not None:
            result["conditionalLogic"] = self.conditional_logic.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FormField":
        """Create FormField from dict."""
        logic = data.get("conditionalLogic")
        options = data.get("options")
        return cls(
            id=str(data["id"]),
            key=data.get("key") or "",
            type=FieldType.parse(data["type"]),
            label=data.get("label", ""),
            placeholder=data.get("placeholder") or None,
            options=tuple(str(o) for o in options) if options is not None else None,
            required=bool(data.get("required", False)),
            conditional_logic=ConditionalLogic.from_dict(logic) if logic else None,
            kind=data.get("kind"),
        )


def _section_name(section: Union[str, BookingType]) -> str:
    return section.value if isinstance(section, BookingType) else str(section)


class FormStructure:
    """Fixed mapping from section name to an ordered sequence of FormField.

    Every section key in SECTION_KEYS is always present (possibly empty).
    Construction validates the structural invariants and raises
    InvalidSchemaError listing every violation.

    Examples:
        >>> structure = FormStructure({"common": []})
        >>> structure.section("distance")
        ()
    """

    def __init__(self, sections: Mapping[str, Sequence[FormField]]):
        unknown = sorted(set(sections) - set(SECTION_KEYS))
        if unknown:
            raise InvalidSchemaError(
                f"Unknown form sections: {', '.join(unknown)}",
                fields=[
                    FieldError(
                        path=name,
                        code=FieldErrorCode.INVALID_VALUE,
                        message=f"Section '{name}' is not a booking type",
                        expected=list(SECTION_KEYS),
                        received=name,
                    )
                    for name in unknown
                ],
            )
        self._sections: Dict[str, Tuple[FormField, ...]] = {
            name: tuple(sections.get(name, ())) for name in SECTION_KEYS
        }
        self.validate()

    def section(self, section: Union[str, BookingType]) -> Tuple[FormField, ...]:
        """Get the ordered fields of a section."""
        return self._sections.get(_section_name(section), ())

    def __getitem__(self, section: Union[str, BookingType]) -> Tuple[FormField, ...]:
        return self.section(section)

    def __iter__(self) -> Iterator[str]:
        return iter(SECTION_KEYS)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FormStructure):
            return NotImplemented
        return self._sections == other._sections

    def items(self) -> Iterator[Tuple[str, Tuple[FormField, ...]]]:
        for name in SECTION_KEYS:
            yield name, self._sections[name]

    @property
    def common(self) -> Tuple[FormField, ...]:
        return self._sections[COMMON_SECTION]

    def field_by_key(self, section: Union[str, BookingType], key: str) -> Optional[FormField]:
        """Find the field with ``key`` in a section (None for empty keys)."""
        if not key:
            return None
        for form_field in self.section(section):
            if form_field.key == key:
                return form_field
        return None

    def dependents_of(self, section: Union[str, BookingType], key: str) -> List[FormField]:
        """Fields of a section whose visibility is controlled by ``key``."""
        return [
            f for f in self.section(section)
            if f.conditional_logic is not None and f.conditional_logic.field_key == key
        ]

    def validate(self) -> None:
        """Check structural invariants of every section.

        Raises:
            InvalidSchemaError: If any section violates an invariant
        """
        errors: List[FieldError] = []
        for name, fields in self._sections.items():
            seen: Dict[str, str] = {}
            for form_field in fields:
                path = f"{name}.{form_field.key or form_field.id}"
                if not KEY_PATTERN.match(form_field.key):
                    errors.append(FieldError(
                        path=path,
                        code=FieldErrorCode.INVALID_FORMAT,
                        message=f"Field key '{form_field.key}' must be lowercase letters, digits or underscores",
                        expected="pattern: ^[a-z0-9_]*$",
                        received=form_field.key,
                    ))
                if form_field.key:
                    if form_field.key in seen:
                        errors.append(FieldError(
                            path=path,
                            code=FieldErrorCode.INVALID_VALUE,
                            message=f"Duplicate key '{form_field.key}' in section '{name}'",
                            received=form_field.id,
                        ))
                    seen[form_field.key] = form_field.id
            for form_field in fields:
                errors.extend(self._check_conditional_logic(name, form_field))

        if errors:
            raise InvalidSchemaError(
                f"Form structure has {len(errors)} invalid field definition(s)",
                fields=errors,
            )

    def _check_conditional_logic(self, section: str, form_field: FormField) -> List[FieldError]:
        logic = form_field.conditional_logic
        if logic is None:
            return []
        path = f"{section}.{form_field.key or form_field.id}.conditionalLogic"
        if not logic.field_key:
            return [FieldError(
                path=path,
                code=FieldErrorCode.REQUIRED,
                message="Conditional logic must name a controlling field key",
            )]
        if logic.field_key == form_field.key:
            return [FieldError(
                path=path,
                code=FieldErrorCode.INVALID_VALUE,
                message=f"Field '{form_field.key}' cannot declare conditional logic on itself",
                received=logic.field_key,
            )]
        controller = self.field_by_key(section, logic.field_key)
        if controller is None:
            return [FieldError(
                path=path,
                code=FieldErrorCode.INVALID_VALUE,
                message=f"Conditional logic references unknown field '{logic.field_key}' in section '{section}'",
                received=logic.field_key,
            )]
        if not controller.options and not controller.is_boolean_like:
            return [FieldError(
                path=path,
                code=FieldErrorCode.INVALID_VALUE,
                message=(
                    f"Controlling field '{logic.field_key}' must have options or be boolean-like"
                ),
                received=controller.type.value,
            )]
        return []

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        """Serialize every section to the persisted wire format."""
        return {name: [f.to_dict() for f in fields] for name, fields in self._sections.items()}

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        defaults: Optional[Mapping[str, Any]] = None,
    ) -> "FormStructure":
        """Build a structure from raw sections merged over defaults.

        A loaded section replaces the default section wholesale; sections
        absent from ``data`` (or null) fall back to ``defaults``.
        """
        merged: Dict[str, Any] = dict(defaults or {})
        for name, fields in data.items():
            if fields is not None:
                merged[name] = fields
        return cls({
            name: [FormField.from_dict(raw) for raw in (fields or [])]
            for name, fields in merged.items()
        })


__all__ = [
    "ADDRESS_KEY_MARKERS",
    "ROUTE_FIELD_KEY",
    "resolve_field_kind",
    "ConditionalLogic",
    "FormField",
    "FormStructure",
]
