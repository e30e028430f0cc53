import pytest

from cdckit.annotation import (
    AnnotationError,
    BoolOrPath,
    SchemaAnnotation,
    create_annotation,
)


def test_attrs_map():
    anno = create_annotation({"additionalProperties": ["true"]})
    assert len(anno.attrs) == 1
    assert anno.additional_properties == BoolOrPath(is_bool=True, boolean=True)


def test_single_id_attribute():
    anno = create_annotation({"id": ["me"]})
    assert len(anno.attrs) == 1
    assert anno.id == "me"


@pytest.mark.parametrize(
    "attrs",
    [
        {"maximum": ["!"]},
        {"minimum": ["!"]},
        {"maximum": ["2"], "exclusiveMaximum": ["yup"]},
        {"minimum": ["1"], "exclusiveMinimum": ["yup"]},
        {"multipleOf": ["five"]},
        {"maxLength": ["one"]},
        {"minLength": ["one"]},
        {"maxItems": ["one"]},
        {"minItems": ["one"]},
        {"uniqueItems": ["yup"]},
        {"additionalItems": ["yup"]},
        {"required": ["yup"]},
        {"maxProperties": ["two"]},
        {"minProperties": ["one"]},
        {"additionalProperties": ["yup"]},
        {"thisIsNotARealAttr": ["yup"]},
        {"not": ["!this is not a package type"]},
        {"allOf": ["!this is not a package type"]},
        {"anyOf": ["!this is not a package type"]},
        {"oneOf": ["!this is not a package type"]},
    ],
)
def test_error_cases(attrs):
    with pytest.raises(AnnotationError):
        create_annotation(attrs)


def test_unknown_attribute_message():
    with pytest.raises(AnnotationError, match="unknown @jsonSchema attribute 'thisIsNotARealAttr'"):
        create_annotation({"thisIsNotARealAttr": "yup"})


def test_numeric_and_bool_values():
    anno = create_annotation(
        {
            "minimum": "0",
            "maximum": "5",
            "exclusiveMinimum": "true",
            "multipleOf": "5",
            "required": "true",
        }
    )
    assert anno.minimum == 0.0
    assert anno.maximum == 5.0
    assert anno.exclusive_minimum is True
    assert anno.exclusive_maximum is False
    assert anno.multiple_of == 5.0
    assert anno.required is True


def test_array_and_string_values():
    anno = create_annotation(
        {
            "maxItems": "50",
            "minItems": "1",
            "uniqueItems": "true",
            "minLength": "2",
            "maxLength": "200",
            "pattern": "[A-Za-z0-9]",
            "format": "email",
        }
    )
    assert (anno.max_items, anno.min_items, anno.unique_items) == (50, 1, True)
    assert (anno.min_length, anno.max_length) == (2, 200)
    assert anno.pattern == "[A-Za-z0-9]"
    assert anno.format == "email"


def test_object_values():
    anno = create_annotation({"minProperties": "1", "maxProperties": "20"})
    assert (anno.min_properties, anno.max_properties) == (1, 20)


def test_type_list():
    anno = create_annotation({"type": ["string", "number", "integer"]})
    assert anno.schema_type == ["string", "number", "integer"]
    with pytest.raises(AnnotationError):
        create_annotation({"type": ["thing"]})


def test_xof_and_not():
    path = "github.com/brainicorn/schematestobjects/xof/AThing"
    anno = create_annotation({"allOf": [path, "#"], "not": "github.com/x/AnotherThing"})
    assert anno.all_of == [path, "#"]
    assert anno.not_ == "github.com/x/AnotherThing"
    assert anno.has_xof() is True
    assert SchemaAnnotation().has_xof() is False
    assert create_annotation({"oneOf": "string"}).has_xof() is True


def test_enum_rejects_type_selectors():
    assert create_annotation({"enum": ["a", "b"]}).enum == ["a", "b"]
    with pytest.raises(AnnotationError):
        create_annotation({"enum": ["#"]})
    with pytest.raises(AnnotationError):
        create_annotation({"enum": ["github.com/x/Thing"]})


def test_additional_properties_path():
    anno = create_annotation({"additionalProperties": "github.com/x/Thing"})
    assert anno.additional_properties == BoolOrPath(is_bool=False, path="github.com/x/Thing")
    anno = create_annotation({"additionalProperties": "string"})
    assert anno.additional_properties.path == "string"


def test_empty_string_values_are_ignored():
    anno = create_annotation({"title": "", "description": "A thing"})
    assert anno.title == ""
    assert anno.description == "A thing"


def test_empty_value_list_is_error():
    with pytest.raises(AnnotationError):
        create_annotation({"id": []})