"""Schema normalizer.

Rewrites per-property ``"required": true`` flags into the array-of-names
form used by JSON Schema and OpenAPI, recursing into nested objects and
arrays of objects. Normalized input passes through unchanged.
"""

import logging
from pathlib import Path

from schema_compiler.errors import SchemaShapeError

from .base import (
    NormalizedRequiredList,
    SchemaNode,
    is_array_of_objects,
    is_object,
    is_required_flag,
    required_list,
)
from .schema import load_schema, read_document_config, write_schema

logger = logging.getLogger(__name__)


def normalize(schema_path: Path, write: bool = True) -> SchemaNode:
    """Normalize one schema file and, by default, write it back in place."""
    schema = load_schema(schema_path)
    normalize_schema(schema, schema_path)

    if write:
        write_schema(schema_path, schema)
        logger.debug("Normalized %s", schema_path)
    return schema


def normalize_schema(schema: SchemaNode, source: Path | str | None = None) -> SchemaNode:
    """Normalize a loaded schema in place and return it."""
    read_document_config(schema, source)
    # A resource root with properties but no type is an object
    if "type" not in schema and isinstance(schema.get("properties"), dict):
        schema["type"] = "object"
    if not is_object(schema):
        raise SchemaShapeError("Schema root must be of type object", source, "type")

    schema["required"] = flatten_required(schema, source)
    return schema


def flatten_required(
    node: SchemaNode,
    source: Path | str | None = None,
    location: str = "",
) -> NormalizedRequiredList | None:
    """Compute the required-names list of an object node.

    Arrays of objects get their list assigned on ``items`` and yield None,
    as does any other non-object node. Nested object properties get their
    own list assigned and are named in the parent's list when that nested
    list is non-empty or they carry their own ``required: true`` flag.
    """
    if is_array_of_objects(node):
        items = node["items"]
        items["required"] = flatten_required(items, source, f"{location}.items")
        return None
    if not is_object(node):
        return None

    properties = node.get("properties")
    if not isinstance(properties, dict):
        raise SchemaShapeError("Invalid schema.properties", source, f"{location}.properties".lstrip("."))

    # An existing list means the node was already normalized; keep only
    # names that are still direct children and not switched off
    required = [
        name for name in dict.fromkeys(required_list(node.get("required")))
        if isinstance(properties.get(name), dict) and properties[name].get("required") is not False
    ]

    for name, prop in properties.items():
        prop_location = f"{location}.properties.{name}".lstrip(".")
        if not isinstance(prop, dict):
            raise SchemaShapeError("Property must be a schema object", source, prop_location)

        if is_object(prop):
            own_flag = is_required_flag(prop.get("required"))
            nested = flatten_required(prop, source, prop_location)
            prop["required"] = nested
            if (nested or own_flag) and name not in required:
                required.append(name)
            continue

        if is_required_flag(prop.get("required")) and name not in required:
            required.append(name)
        if is_array_of_objects(prop):
            flatten_required(prop, source, prop_location)

    return required
