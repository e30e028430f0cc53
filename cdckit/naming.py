"""Type-name checks and conversions between type paths, definition keys and file names."""

from __future__ import annotations

import json
import unicodedata

DEFINITION_PREFIX = "#/definitions/"

BUILTIN_TYPES: dict[str, str] = {
    "string": "string",
    "bool": "boolean",
    "float32": "number",
    "float64": "number",
    "int": "integer",
    "int8": "integer",
    "int16": "integer",
    "int32": "integer",
    "int64": "integer",
    "uint": "integer",
    "uint8": "integer",
    "uint16": "integer",
    "uint32": "integer",
    "uint64": "integer",
    "time.Time": "string",
    "net.IP": "string",
    "url.URL": "string",
    "[]byte": "string",
}

JSON_TYPES: dict[str, tuple[str, ...]] = {
    "string": ("string", "time.Time", "net.IP", "url.URL", "[]byte"),
    "boolean": ("bool",),
    "number": ("float32", "float64"),
    "integer": (
        "int", "int8", "int16", "int32", "int64",
        "uint", "uint8", "uint16", "uint32", "uint64",
    ),
    "array": (),
}


def is_json_type(name: str) -> bool:
    """Tell whether ``name`` is one of the JSON types."""
    return name in JSON_TYPES


def is_self_ref(name: str) -> bool:
    """Tell whether ``name`` refers to the schema itself."""
    return name == "#"


def _is_ident_char(ch: str) -> bool:
    return ch.isalpha() or ch.isdecimal() or ch == "_"


def is_ident(name: str) -> bool:
    """Tell whether ``name`` holds only letters, digits and underscores."""
    return all(_is_ident_char(ch) for ch in name)


def is_package_type(name: str) -> bool:
    """Tell whether ``name`` looks like ``some/package/ExportedType``."""
    if name.startswith("/") or "/" not in name:
        return False
    type_name = name.rsplit("/", 1)[1]
    if not type_name or not is_ident(type_name):
        return False
    return unicodedata.category(type_name[0]) == "Lu"


def split_package_type_path(path: str) -> tuple[str, str]:
    """Split a package type path into package and type; ``("", "")`` if it is not one."""
    if not is_package_type(path):
        return "", ""
    package, type_name = path.rsplit("/", 1)
    return package, type_name


def _lookup_tag(tag: str, key: str) -> str | None:
    """Find ``key`` in a struct tag of the form ``key:"value" other:"value"``."""
    rest = tag
    while rest:
        rest = rest.lstrip(" ")
        if not rest:
            break
        end = 0
        while end < len(rest) and rest[end] > " " and rest[end] not in ':"' and rest[end] != "\x7f":
            end += 1
        if end == 0 or end + 1 >= len(rest) or rest[end] != ":" or rest[end + 1] != '"':
            break
        name = rest[:end]
        rest = rest[end + 1:]
        pos = 1
        while pos < len(rest) and rest[pos] != '"':
            if rest[pos] == "\\":
                pos += 1
            pos += 1
        if pos >= len(rest):
            break
        quoted = rest[: pos + 1]
        rest = rest[pos + 1:]
        if name == key:
            try:
                value = json.loads(quoted)
            except ValueError:
                break
            return value if isinstance(value, str) else None
    return None


def json_tag_info(name: str, tag: str | None) -> tuple[str, bool]:
    """Return the JSON property name for a field and whether it is ignored.

    ``tag`` is the field's tag text, e.g. ``json:"id,omitempty"``.
    """
    if tag is None or not tag.strip():
        return name, False
    json_tag = _lookup_tag(tag, "json") or ""
    if json_tag == "-":
        return "", True
    json_name = json_tag.split(",", 1)[0]
    return (json_name or name), False


def def_key_from_path(path: str, prefix: str = "") -> str:
    """Turn a package type path into a definition key; other paths pass through."""
    if not is_package_type(path):
        return path
    return (prefix + path).replace(".", "_").replace("/", "-")


def ref_to_package_and_type(ref: str) -> tuple[str, str]:
    """Turn a definition key back into a package path and type name."""
    text = ref.replace("_", ".").replace("-", "/")
    if "/" not in text:
        raise ValueError(f"reference {ref!r} has no package part")
    package, type_name = text.rsplit("/", 1)
    return package, type_name


def ref_to_filename(ref: str) -> str:
    """Return the JSON file name for a reference or type path."""
    text = ref.replace(DEFINITION_PREFIX, "").replace(".", "_").replace("/", "-")
    return text + ".json"


def _is_title_separator(ch: str) -> bool:
    if ch.isascii():
        return not (ch.isalnum() or ch == "_")
    if ch.isalpha() or ch.isdecimal():
        return False
    return ch.isspace()


def ref_to_var_name(ref: str) -> str:
    """Return a camel-case identifier for a reference or type path."""
    text = ref.replace(DEFINITION_PREFIX, "")
    for sep in "_-./":
        text = text.replace(sep, " ")
    titled = []
    previous = " "
    for ch in text:
        titled.append(ch.upper() if _is_title_separator(previous) else ch)
        previous = ch
    return "".join(ch for ch in titled if not ch.isspace())


def package_from_output_dir(directory: str) -> str:
    """Return the last element of a directory path, ignoring one trailing slash."""
    path = directory[:-1] if directory.endswith("/") else directory
    return path.rsplit("/", 1)[-1]