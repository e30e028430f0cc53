"""Core JSON-schema model shared by every schema kind."""

from __future__ import annotations

import copy
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DEFINITION_ROOT = "#/definitions/"

SCHEMA_TYPE_OBJECT = "object"
SCHEMA_TYPE_INTEGER = "integer"
SCHEMA_TYPE_NUMBER = "number"
SCHEMA_TYPE_BOOLEAN = "boolean"
SCHEMA_TYPE_STRING = "string"
SCHEMA_TYPE_ARRAY = "array"


class SpecVersion(str, Enum):
    """URIs of the JSON-schema specification versions."""

    CURRENT = "http://json-schema.org/schema#"
    CURRENT_HYPER = "http://json-schema.org/hyper-schema#"
    DRAFT_V4 = "http://json-schema.org/draft-04/schema#"
    V2020_12 = "https://json-schema.org/draft/2020-12/schema"
    DRAFT_V4_HYPER = "http://json-schema.org/draft-04/hyper-schema#"

    def __str__(self) -> str:
        return self.value


@dataclass
class StringOrArray:
    """A value that is either a single string or a list of strings, such as ``type``."""

    string: str = ""
    array: list[str] = field(default_factory=list)

    @classmethod
    def parse(cls, value: Any) -> StringOrArray:
        """Build from a string or a sequence of strings; anything else gives an empty value."""
        if isinstance(value, str):
            return cls(string=value)
        if isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value):
            return cls(array=list(value))
        return cls()

    def to_json(self) -> str | list[str]:
        """Return the JSON form: the list when it has items, otherwise the string."""
        if self.array:
            return list(self.array)
        return self.string


def _put(out: dict[str, Any], key: str, value: Any) -> None:
    if value:
        out[key] = value


def _enum_items(items: Iterable[str]) -> list[str]:
    """Return the enum items as a list, raising TypeError for non-string items."""
    checked = list(items)
    bad = [item for item in checked if not isinstance(item, str)]
    if bad:
        raise TypeError(f"enum items must be strings, got {bad[0]!r}")
    return checked


@dataclass(kw_only=True)
class BasicSchema:
    """Attributes common to every JSON schema.

    ``json_type`` may be given as a comma separated string, which is
    turned into a :class:`StringOrArray` the same way :meth:`set_type` does.
    """

    schema_uri: str = ""
    id: str = ""
    ref: str = ""
    json_type: StringOrArray | str | None = None
    title: str = ""
    description: str = ""
    all_of: list[BasicSchema] = field(default_factory=list)
    any_of: list[BasicSchema] = field(default_factory=list)
    one_of: list[BasicSchema] = field(default_factory=list)
    not_: BasicSchema | None = None
    definitions: dict[str, BasicSchema] = field(default_factory=dict)
    default: Any = None
    const: Any = None

    def __post_init__(self) -> None:
        if isinstance(self.json_type, str):
            type_list = self.json_type
            self.json_type = None
            self.set_type(type_list)

    def clone(self) -> BasicSchema:
        """Return a shallow copy; nested lists and maps are shared."""
        return copy.copy(self)

    def add_definition(self, key: str, definition: BasicSchema) -> None:
        """Register a schema under ``key`` in the definitions map."""
        self.definitions[key] = definition

    def set_type(self, type_list: str) -> None:
        """Set the type from a comma separated list; blank input leaves it unchanged."""
        if not type_list.strip():
            return
        parts = type_list.split(",")
        if len(parts) > 1:
            self.json_type = StringOrArray(array=parts)
        else:
            self.json_type = StringOrArray(string=parts[0])

    def set_default(self, value: str) -> None:
        """Set the default value."""
        self.default = value

    def set_enum(self, items: list[str]) -> bool:
        """Check the items; this schema kind keeps no string enum, so return False.

        Raises TypeError when an item is not a string.
        """
        _enum_items(items)
        return False

    def set_int_enum(self, items: list[str]) -> bool:
        """Check the items; this schema kind keeps no integer enum, so return False.

        Raises TypeError when an item is not a string.
        """
        _enum_items(items)
        return False

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready mapping, leaving out empty attributes."""
        out: dict[str, Any] = {}
        _put(out, "$schema", str(self.schema_uri) if self.schema_uri else "")
        _put(out, "id", self.id)
        _put(out, "$ref", self.ref)
        if isinstance(self.json_type, StringOrArray):
            out["type"] = self.json_type.to_json()
        _put(out, "title", self.title)
        _put(out, "description", self.description)
        _put(out, "allOf", [item.to_dict() for item in self.all_of])
        _put(out, "anyOf", [item.to_dict() for item in self.any_of])
        _put(out, "oneOf", [item.to_dict() for item in self.one_of])
        if self.not_ is not None:
            out["not"] = self.not_.to_dict()
        _put(
            out,
            "definitions",
            {key: self.definitions[key].to_dict() for key in sorted(self.definitions)},
        )
        if self.default is not None:
            out["default"] = self.default
        if self.const is not None:
            out["const"] = self.const
        return out