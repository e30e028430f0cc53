"""Schemas for JSON containers: arrays, objects and free-form maps."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from cdckit.schema.base import (
    SCHEMA_TYPE_ARRAY,
    SCHEMA_TYPE_OBJECT,
    BasicSchema,
    StringOrArray,
)


@dataclass
class BoolOrSchema:
    """A value that is either a boolean or a schema, such as ``additionalProperties``."""

    boolean: bool = False
    schema: BasicSchema | None = None

    @classmethod
    def parse(cls, value: Any) -> BoolOrSchema:
        """Build from a schema or a bool; anything else gives an empty (false) value."""
        if isinstance(value, BasicSchema):
            return cls(schema=value)
        if isinstance(value, bool):
            return cls(boolean=value)
        return cls()

    def to_json(self) -> bool | dict[str, Any]:
        """Return the schema's mapping when there is one, otherwise the boolean."""
        if self.schema is not None:
            return self.schema.to_dict()
        return bool(self.boolean)


@dataclass(kw_only=True)
class ArraySchema(BasicSchema):
    """Schema for a JSON array."""

    json_type: StringOrArray | str | None = SCHEMA_TYPE_ARRAY
    items: BasicSchema | None = None
    max_items: int = 0
    min_items: int = 0
    additional_items: bool = False
    unique_items: bool = False

    def clone(self) -> ArraySchema:
        """Return a shallow copy; the item schema is shared."""
        return copy.copy(self)

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        if self.items is not None:
            out["items"] = self.items.to_dict()
        if self.max_items:
            out["maxItems"] = self.max_items
        if self.min_items:
            out["minItems"] = self.min_items
        if self.additional_items:
            out["additionalItems"] = True
        if self.unique_items:
            out["uniqueItems"] = True
        return out


@dataclass(kw_only=True)
class ObjectSchema(BasicSchema):
    """Schema for a JSON object.

    When ``suppress_x_attrs`` is set, the non-standard ``x-go-path``
    attribute is never emitted.
    """

    json_type: StringOrArray | str | None = SCHEMA_TYPE_OBJECT
    properties: dict[str, BasicSchema] = field(default_factory=dict)
    required: list[str] = field(default_factory=list)
    max_properties: int = 0
    min_properties: int = 0
    additional_properties: BoolOrSchema | None = None
    go_path: str = ""
    suppress_x_attrs: bool = False

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.suppress_x_attrs:
            self.go_path = ""

    def add_required_field(self, field_name: str) -> None:
        """Append a property name to the required list."""
        self.required.append(field_name)

    def clone(self) -> ObjectSchema:
        """Return a shallow copy; properties and required are shared."""
        return copy.copy(self)

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        if self.properties:
            out["properties"] = {
                key: self.properties[key].to_dict() for key in sorted(self.properties)
            }
        if self.required:
            out["required"] = list(self.required)
        if self.max_properties:
            out["maxProperties"] = self.max_properties
        if self.min_properties:
            out["minProperties"] = self.min_properties
        if self.additional_properties is not None:
            out["additionalProperties"] = self.additional_properties.to_json()
        if self.go_path and not self.suppress_x_attrs:
            out["x-go-path"] = self.go_path
        return out


def new_map_schema(suppress_x_attrs: bool = False) -> ObjectSchema:
    """Create an object schema that accepts any additional properties."""
    return ObjectSchema(
        suppress_x_attrs=suppress_x_attrs,
        additional_properties=BoolOrSchema(boolean=True),
    )