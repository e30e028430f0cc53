"""Schemas for simple JSON values: booleans, strings by format, and numbers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from cdckit.schema.base import BasicSchema, _enum_items

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT_MIN = -(2**63)
_INT_MAX = 2**63 - 1


def _parse_int(text: str) -> int:
    """Parse a base-10 64-bit integer strictly, with an optional sign."""
    if not _INT_PATTERN.fullmatch(text):
        raise ValueError(f"invalid syntax: {text!r}")
    value = int(text)
    if not _INT_MIN <= value <= _INT_MAX:
        raise ValueError(f"value out of range: {text!r}")
    return value


@dataclass(kw_only=True)
class SimpleSchema(BasicSchema):
    """Schema for a simple JSON type, with an optional format."""

    format: str = ""

    def set_enum(self, items: list[str]) -> bool:
        """Check the items; simple schemas keep no enum, so return False.

        Raises TypeError when an item is not a string.
        """
        _enum_items(items)
        return False

    def set_int_enum(self, items: list[str]) -> bool:
        """Check the items; simple schemas keep no enum, so return False.

        Raises TypeError when an item is not a string.
        """
        _enum_items(items)
        return False

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        if self.format:
            out["format"] = self.format
        return out


@dataclass(kw_only=True)
class NumericSchema(SimpleSchema):
    """Schema for a JSON number or integer."""

    maximum: float = 0.0
    minimum: float = 0.0
    enum: list[int] = field(default_factory=list)
    multiple_of: float = 0.0
    exclusive_maximum: bool = False
    exclusive_minimum: bool = False

    def set_int_enum(self, items: list[str]) -> bool:
        """Append the given items, parsed as integers, to the enum and return True.

        Raises ValueError when an item is not an integer.
        """
        parsed = []
        for item in items:
            try:
                parsed.append(_parse_int(item))
            except ValueError as exc:
                raise ValueError(f"failed to parse enum[{item}] in integer: {exc}") from exc
        self.enum.extend(parsed)
        return True

    def set_default(self, value: str) -> None:
        """Set the default, which must be an integer; raises ValueError otherwise."""
        try:
            self.default = _parse_int(value)
        except ValueError as exc:
            raise ValueError(f"failed to convert default to int: {exc}") from exc

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        if self.maximum:
            out["maximum"] = self.maximum
        if self.minimum:
            out["minimum"] = self.minimum
        if self.enum:
            out["enum"] = list(self.enum)
        if self.multiple_of:
            out["multipleOf"] = self.multiple_of
        if self.exclusive_maximum:
            out["exclusiveMaximum"] = True
        if self.exclusive_minimum:
            out["exclusiveMinimum"] = True
        return out