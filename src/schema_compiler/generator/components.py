"""Component schema synthesizer.

Builds the body and response schema variants of one resource and
registers the ones each document method needs. ``getList`` also yields
query parameters; these are returned as patches against the collection
route rather than written into a path item directly.
"""

import copy
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from schema_compiler.config import CompilerOptions
from schema_compiler.errors import SchemaCompileError
from schema_compiler.parser.base import RANGE_FILTER_FORMAT, SchemaNode, http_method, required_list
from schema_compiler.parser.schema import read_document_config, schema_properties

from .document import OpenApiDocument
from .paths import collection_route, scalar_schema

MARKER_KEYS = ("index", "unique", "required")


class ParameterPatch(BaseModel):
    """Parameters to set on the ``verb`` operation of ``route``."""

    route: str
    verb: str
    parameters: list[dict[str, Any]]


class ComponentFragment(BaseModel):
    schemas: dict[str, dict[str, Any]] = {}
    patches: list[ParameterPatch] = []


def clean_schema(
    node: SchemaNode,
    drop_keys: tuple[str, ...] = (),
    drop_flags: tuple[str, ...] = (),
) -> SchemaNode:
    """Return a copy of a schema node without ``x-`` keys and the given keywords.

    ``drop_keys`` are removed whatever their value; ``drop_flags`` only when
    they hold a boolean. Empty ``required`` lists are dropped as well. The
    walk follows ``properties`` and ``items`` so a property that happens to
    be named like a keyword is kept.
    """
    cleaned: SchemaNode = {}
    for key, value in node.items():
        if key.startswith("x-") or key in drop_keys:
            continue
        if key in drop_flags and isinstance(value, bool):
            continue
        if key == "required" and not value:
            continue

        if key == "properties" and isinstance(value, dict):
            cleaned[key] = clean_properties(value, drop_keys, drop_flags)
        elif key == "items" and isinstance(value, dict):
            cleaned[key] = clean_schema(value, drop_keys, drop_flags)
        else:
            cleaned[key] = copy.deepcopy(value)
    return cleaned


def clean_properties(
    properties: dict[str, SchemaNode],
    drop_keys: tuple[str, ...] = (),
    drop_flags: tuple[str, ...] = (),
) -> dict[str, SchemaNode]:
    return {
        name: clean_schema(prop, drop_keys, drop_flags) if isinstance(prop, dict) else copy.deepcopy(prop)
        for name, prop in properties.items()
    }


def response_variant(properties: dict[str, SchemaNode]) -> SchemaNode:
    return {"type": "object", "properties": clean_properties(properties, drop_keys=MARKER_KEYS)}


def body_required_variant(properties: dict[str, SchemaNode], required: list[str]) -> SchemaNode:
    schema: SchemaNode = {"type": "object", "properties": clean_properties(properties, drop_flags=MARKER_KEYS)}
    if required:
        schema["required"] = list(required)
    return schema


def without_id_variant(body_required: SchemaNode) -> SchemaNode:
    schema: SchemaNode = {
        "type": "object",
        "properties": {k: copy.deepcopy(v) for k, v in body_required["properties"].items() if k != "_id"},
    }
    required = [name for name in body_required.get("required", []) if name != "_id"]
    if required:
        schema["required"] = required
    return schema


def partial_body_variant(body_without_id: SchemaNode) -> SchemaNode:
    """Nothing is mandatory in a partial update."""
    return {"type": "object", "properties": clean_properties(body_without_id["properties"], drop_keys=("required",))}


def _query_param(name: str, schema: dict[str, Any], description: str | None = None) -> dict[str, Any]:
    param: dict[str, Any] = {"name": name, "in": "query", "required": False, "schema": copy.deepcopy(schema)}
    if description:
        param["description"] = description
    return param


def query_parameters(properties: dict[str, SchemaNode]) -> list[dict[str, Any]]:
    """Build getList query parameters from the top-level properties.

    Objects cannot be expressed as flat query values and are skipped;
    arrays are accepted as strings. A ``minMax`` property also gets
    ``min_<name>`` and ``max_<name>`` range filters.
    """
    params = []
    for name, prop in properties.items():
        if not isinstance(prop, dict) or prop.get("type") == "object":
            continue

        schema = scalar_schema(prop)
        if prop.get("type") == "array":
            schema["type"] = "string"

        params.append(_query_param(name, schema, prop.get("description")))
        if prop.get("x-format") == RANGE_FILTER_FORMAT:
            params.append(_query_param(f"min_{name}", schema))
            params.append(_query_param(f"max_{name}", schema))
    return params


def build_components(
    schema: SchemaNode,
    options: CompilerOptions | None = None,
    source: Path | str | None = None,
) -> ComponentFragment:
    """Build the component schemas and parameter patches of one resource."""
    options = options or CompilerOptions()
    config = read_document_config(schema, source)
    properties = schema_properties(schema, source)
    name = config.interface_name

    response = response_variant(properties)
    body_required = body_required_variant(properties, required_list(schema.get("required")))
    body_required_without_id = without_id_variant(body_required)
    body = partial_body_variant(body_required_without_id)
    # Create and full replace share one policy for a caller-supplied _id
    write_body = body_required if options.allow_api_create_update_id else body_required_without_id

    schemas: dict[str, dict[str, Any]] = {}
    patches: list[ParameterPatch] = []
    for method in config.methods:
        verb = http_method(method, source)

        if method == "get":
            schemas[f"{verb}{name}Response"] = copy.deepcopy(response)
        elif method == "getList":
            schemas[f"{verb}{name}Response"] = copy.deepcopy(response)
            schemas[f"{verb}{name}ResponseList"] = {"type": "array", "items": copy.deepcopy(response)}
            patches.append(ParameterPatch(
                route=collection_route(config, options.route_prefix),
                verb=verb,
                parameters=query_parameters(properties),
            ))
        elif method == "patch":
            schemas[f"{verb}{name}Body"] = copy.deepcopy(body)
            schemas[f"{verb}{name}Response"] = copy.deepcopy(response)
        elif method in ("post", "put"):
            schemas[f"{verb}{name}Body"] = copy.deepcopy(write_body)
            schemas[f"{verb}{name}Response"] = copy.deepcopy(response)
        # delete, options, head and trace have no component schemas

    return ComponentFragment(schemas=schemas, patches=patches)


def apply_parameter_patches(
    paths: dict[str, dict[str, Any]],
    patches: list[ParameterPatch],
    source: Path | str | None = None,
) -> dict[str, dict[str, Any]]:
    """Return patched copies of the targeted path items; ``paths`` is left untouched."""
    patched: dict[str, dict[str, Any]] = {}
    for patch in patches:
        item = patched.get(patch.route) or copy.deepcopy(paths.get(patch.route))
        if not item or patch.verb not in item:
            raise SchemaCompileError(
                f"No {patch.verb.upper()} operation on {patch.route} to attach parameters to", source, "paths"
            )
        item[patch.verb]["parameters"] = copy.deepcopy(patch.parameters)
        patched[patch.route] = item
    return patched


def synthesize_components(
    document: OpenApiDocument,
    schema: SchemaNode,
    options: CompilerOptions | None = None,
    source: Path | str | None = None,
) -> OpenApiDocument:
    """Return ``document`` with the resource's component schemas merged in.

    The resource's paths must already be in ``document``; getList query
    parameters are attached to its collection GET operation.
    """
    fragment = build_components(schema, options, source)
    paths = apply_parameter_patches(document.paths, fragment.patches, source)
    return document.merge(paths=paths, schemas=fragment.schemas)
