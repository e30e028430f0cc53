"""Reading schemas back from JSON and writing them out."""

from __future__ import annotations

import json
from typing import Any

from cdckit.schema.base import (
    SCHEMA_TYPE_ARRAY,
    SCHEMA_TYPE_BOOLEAN,
    SCHEMA_TYPE_INTEGER,
    SCHEMA_TYPE_NUMBER,
    SCHEMA_TYPE_OBJECT,
    SCHEMA_TYPE_STRING,
    BasicSchema,
    StringOrArray,
)
from cdckit.schema.containers import ArraySchema, BoolOrSchema, ObjectSchema
from cdckit.schema.simple import NumericSchema, SimpleSchema


def _expect(key: str, value: Any, kinds: type | tuple[type, ...]) -> Any:
    if isinstance(value, bool) and bool not in (kinds if isinstance(kinds, tuple) else (kinds,)):
        raise ValueError(f"schema attribute {key!r} has the wrong type: {value!r}")
    if not isinstance(value, kinds):
        raise ValueError(f"schema attribute {key!r} has the wrong type: {value!r}")
    return value


def _number(key: str, value: Any) -> float:
    return float(_expect(key, value, (int, float)))


def _schema_list(key: str, value: Any) -> list[BasicSchema]:
    items = (from_dict(_expect(key, item, dict)) for item in _expect(key, value, list))
    return [item for item in items if item is not None]


def _basic_fields(obj: dict[str, Any]) -> dict[str, Any]:
    """Collect the attributes every schema kind shares."""
    fields: dict[str, Any] = {"json_type": None}
    for key, value in obj.items():
        if key == "$schema":
            fields["schema_uri"] = _expect(key, value, str)
        elif key == "id":
            fields["id"] = _expect(key, value, str)
        elif key == "$ref":
            fields["ref"] = _expect(key, value, str)
        elif key == "type":
            fields["json_type"] = StringOrArray.parse(value)
        elif key == "title":
            fields["title"] = _expect(key, value, str)
        elif key == "description":
            fields["description"] = _expect(key, value, str)
        elif key == "allOf":
            fields["all_of"] = _schema_list(key, value)
        elif key == "anyOf":
            fields["any_of"] = _schema_list(key, value)
        elif key == "oneOf":
            fields["one_of"] = _schema_list(key, value)
        elif key == "not":
            fields["not_"] = from_dict(_expect(key, value, dict))
        elif key == "definitions":
            definitions = {}
            for name, item in _expect(key, value, dict).items():
                loaded = from_dict(_expect(key, item, dict))
                if loaded is not None:
                    definitions[name] = loaded
            fields["definitions"] = definitions
    return fields


def _simple_fields(obj: dict[str, Any]) -> dict[str, Any]:
    fields = _basic_fields(obj)
    if "format" in obj:
        fields["format"] = _expect("format", obj["format"], str)
    return fields


def _numeric(obj: dict[str, Any]) -> NumericSchema:
    fields = _simple_fields(obj)
    for key, name in (("maximum", "maximum"), ("minimum", "minimum"), ("multipleOf", "multiple_of")):
        if key in obj:
            fields[name] = _number(key, obj[key])
    for key, name in (
        ("exclusiveMaximum", "exclusive_maximum"),
        ("exclusiveMinimum", "exclusive_minimum"),
    ):
        if key in obj:
            fields[name] = _expect(key, obj[key], bool)
    return NumericSchema(**fields)


def _array(obj: dict[str, Any]) -> ArraySchema:
    fields = _basic_fields(obj)
    if "items" in obj:
        fields["items"] = from_dict(_expect("items", obj["items"], dict))
    for key, name in (("maxItems", "max_items"), ("minItems", "min_items")):
        if key in obj:
            fields[name] = int(_number(key, obj[key]))
    for key, name in (("additionalItems", "additional_items"), ("uniqueItems", "unique_items")):
        if key in obj:
            fields[name] = _expect(key, obj[key], bool)
    return ArraySchema(**fields)


def _object(obj: dict[str, Any]) -> ObjectSchema:
    fields = _basic_fields(obj)
    for key, name in (("maxProperties", "max_properties"), ("minProperties", "min_properties")):
        if key in obj:
            fields[name] = int(_number(key, obj[key]))
    if "additionalProperties" in obj:
        value = obj["additionalProperties"]
        if isinstance(value, dict):
            value = from_dict(value)
        fields["additional_properties"] = BoolOrSchema.parse(value)
    if "properties" in obj:
        properties = {}
        for name, item in _expect("properties", obj["properties"], dict).items():
            loaded = from_dict(_expect("properties", item, dict))
            if loaded is not None:
                properties[name] = loaded
        fields["properties"] = properties
    if "required" in obj:
        fields["required"] = [
            _expect("required", item, str) for item in _expect("required", obj["required"], list)
        ]
    if "x-go-path" in obj:
        fields["go_path"] = _expect("x-go-path", obj["x-go-path"], str)
    return ObjectSchema(**fields)


def from_dict(obj: dict[str, Any]) -> BasicSchema | None:
    """Build a schema from a decoded JSON object.

    The kind is chosen from ``type``; a ``$ref`` gives a bare reference
    schema instead. Returns None when the mapping has neither.
    Raises ValueError when an attribute has the wrong type.
    """
    if not isinstance(obj, dict):
        raise ValueError(f"schema must be a JSON object, got {type(obj).__name__}")

    result: BasicSchema | None = None
    if "type" in obj:
        json_type = obj["type"]
        if json_type == SCHEMA_TYPE_OBJECT:
            return _object(obj)
        if json_type == SCHEMA_TYPE_ARRAY:
            result = _array(obj)
        elif json_type in (SCHEMA_TYPE_INTEGER, SCHEMA_TYPE_NUMBER):
            result = _numeric(obj)
        elif json_type in (SCHEMA_TYPE_STRING, SCHEMA_TYPE_BOOLEAN):
            result = SimpleSchema(**_simple_fields(obj))
        else:
            result = SimpleSchema(**_simple_fields(obj))

    if "$ref" in obj:
        result = BasicSchema(ref=_expect("$ref", obj["$ref"], str))

    return result


def from_json(data: str | bytes) -> BasicSchema | None:
    """Parse JSON text into a schema; raises ValueError on malformed input."""
    return from_dict(json.loads(data))


def to_json(schema: BasicSchema, indent: int | None = None) -> str:
    """Serialise a schema; compact unless ``indent`` is given."""
    if indent is None:
        return json.dumps(schema.to_dict(), separators=(",", ":"), ensure_ascii=False)
    return json.dumps(schema.to_dict(), indent=indent, ensure_ascii=False)