"""The ``@jsonSchema`` annotation: validated attributes that shape a generated schema."""

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from cdckit.naming import is_ident, is_json_type, is_package_type, is_self_ref

ANNOTATION_NAME = "jsonSchema"

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)


class AnnotationError(ValueError):
    """An annotation attribute is unknown or holds a bad value."""


@dataclass
class BoolOrPath:
    """Either a boolean or a type path, as used by ``additionalProperties``."""

    is_bool: bool = False
    boolean: bool = False
    path: str = ""


@dataclass
class SchemaAnnotation:
    """The attributes of a parsed ``@jsonSchema`` annotation."""

    attrs: dict[str, list[str]] = field(default_factory=dict)
    required: bool = False
    id: str = ""
    description: str = ""
    definition: str = ""
    format: str = ""
    title: str = ""
    default_value: str = ""
    const_value: str = ""
    maximum: float = 0.0
    exclusive_maximum: bool = False
    minimum: float = 0.0
    exclusive_minimum: bool = False
    max_length: int = 0
    min_length: int = 0
    pattern: str = ""
    max_items: int = 0
    min_items: int = 0
    unique_items: bool = False
    multiple_of: float = 0.0
    max_properties: int = 0
    min_properties: int = 0
    enum: list[str] = field(default_factory=list)
    all_of: list[str] = field(default_factory=list)
    one_of: list[str] = field(default_factory=list)
    any_of: list[str] = field(default_factory=list)
    schema_type: list[str] = field(default_factory=list)
    not_: str = ""
    additional_properties: BoolOrPath | None = None
    additional_items: bool = False

    @property
    def name(self) -> str:
        return ANNOTATION_NAME

    def has_xof(self) -> bool:
        """Tell whether any of allOf, anyOf or oneOf is set."""
        return bool(self.all_of or self.any_of or self.one_of)


def _parse_bool(text: str) -> bool:
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"invalid syntax: {text!r}")


def _parse_float(text: str) -> float:
    if not _FLOAT_PATTERN.fullmatch(text):
        raise ValueError(f"invalid syntax: {text!r}")
    value = float(text)
    if math.isinf(value) and "inf" not in text.lower():
        raise ValueError(f"value out of range: {text!r}")
    return value


def _parse_int(text: str) -> int:
    if not _INT_PATTERN.fullmatch(text):
        raise ValueError(f"invalid syntax: {text!r}")
    value = int(text)
    if not -(2**63) <= value <= 2**63 - 1:
        raise ValueError(f"value out of range: {text!r}")
    return value


_STRING_ATTRS = {
    "id": "id",
    "description": "description",
    "definition": "definition",
    "title": "title",
    "format": "format",
    "default": "default_value",
    "const": "const_value",
    "pattern": "pattern",
}

_BOOL_ATTRS = {
    "required": ("required", "required"),
    "exclusivemaximum": ("exclusive_maximum", "exclusiveMaximum"),
    "exclusiveminimum": ("exclusive_minimum", "exclusiveMinimum"),
    "uniqueitems": ("unique_items", "uniqueItems"),
    "additionalitems": ("additional_items", "additionalItems"),
}

_FLOAT_ATTRS = {
    "maximum": ("maximum", "maximum"),
    "minimum": ("minimum", "minimum"),
    "multipleof": ("multiple_of", "multipleOf"),
}

_INT_ATTRS = {
    "maxlength": ("max_length", "maxLength"),
    "minlength": ("min_length", "minLength"),
    "maxitems": ("max_items", "maxItems"),
    "minitems": ("min_items", "minItems"),
    "maxproperties": ("max_properties", "maxProperties"),
    "minproperties": ("min_properties", "minProperties"),
}

_XOF_ATTRS = {
    "allof": ("all_of", "allOf"),
    "anyof": ("any_of", "anyOf"),
    "oneof": ("one_of", "oneOf"),
}


def _values(key: str, value: str | Sequence[str]) -> list[str]:
    values = [value] if isinstance(value, str) else list(value)
    if not values:
        raise AnnotationError(f"@{ANNOTATION_NAME} attribute '{key}' has no value")
    return values


def create_annotation(attrs: Mapping[str, str | Sequence[str]]) -> SchemaAnnotation:
    """Validate annotation attributes and build a :class:`SchemaAnnotation`.

    Attribute names are matched case-insensitively. Raises
    :class:`AnnotationError` for unknown attributes or bad values.
    """
    normalized = {key: _values(key, value) for key, value in attrs.items()}
    anno = SchemaAnnotation(attrs=normalized)

    for raw_key, values in normalized.items():
        key = raw_key.lower()
        first = values[0]

        if key in _STRING_ATTRS:
            if first:
                setattr(anno, _STRING_ATTRS[key], first)
        elif key in _BOOL_ATTRS:
            attr, label = _BOOL_ATTRS[key]
            try:
                setattr(anno, attr, _parse_bool(first))
            except ValueError as exc:
                raise AnnotationError(f"error setting @jsonSchema '{label}': {exc}") from exc
        elif key in _FLOAT_ATTRS:
            attr, label = _FLOAT_ATTRS[key]
            try:
                setattr(anno, attr, _parse_float(first))
            except ValueError as exc:
                raise AnnotationError(f"error setting @jsonSchema '{label}': {exc}") from exc
        elif key in _INT_ATTRS:
            attr, label = _INT_ATTRS[key]
            try:
                setattr(anno, attr, _parse_int(first))
            except ValueError as exc:
                raise AnnotationError(f"error setting @jsonSchema '{label}': {exc}") from exc
        elif key == "enum":
            for item in values:
                if is_self_ref(item) or is_package_type(item):
                    raise AnnotationError(
                        f"error setting '{item}' @jsonSchema 'enum': "
                        "enum can not be a type selector"
                    )
                anno.enum.append(item)
        elif key in _XOF_ATTRS:
            attr, label = _XOF_ATTRS[key]
            target = getattr(anno, attr)
            for item in values:
                if is_self_ref(item) or is_ident(item) or is_package_type(item):
                    target.append(item)
                else:
                    raise AnnotationError(
                        f"error setting @jsonSchema '{label}': "
                        f"'{item}' is not a valid ident or type selector"
                    )
        elif key == "type":
            for item in values:
                if not is_json_type(item):
                    raise AnnotationError(
                        f"error setting @jsonSchema 'type': '{item}' is not a valid JSON type"
                    )
                anno.schema_type.append(item)
        elif key == "not":
            if is_ident(first) or is_package_type(first):
                anno.not_ = first
            else:
                raise AnnotationError(
                    f"error setting @jsonSchema 'not': "
                    f"'{first}' is not a valid ident or type selector"
                )
        elif key == "additionalproperties":
            try:
                anno.additional_properties = BoolOrPath(is_bool=True, boolean=_parse_bool(first))
            except ValueError:
                if is_package_type(first) or is_json_type(first):
                    anno.additional_properties = BoolOrPath(is_bool=False, path=first)
                else:
                    raise AnnotationError(
                        "error setting @jsonSchema 'additionalProperties': "
                        "must be a bool, jsonType, or typePath"
                    ) from None
        else:
            raise AnnotationError(f"unknown @jsonSchema attribute '{raw_key}'")

    return anno