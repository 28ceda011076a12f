"""Path synthesizer.

Each resource gets exactly two routes, ``/<name>`` and ``/<name>/{id}``,
with one operation per document method:

  get      -> GET    /<name>/{id}
  getList  -> GET    /<name>
  post     -> POST   /<name>
  put      -> PUT    /<name>/{id}
  patch    -> PATCH  /<name>/{id}
  delete   -> DELETE /<name>/{id}
  options, head, trace -> on /<name>
"""

import copy
from pathlib import Path
from typing import Any

from schema_compiler.parser.base import (
    BODY_METHODS,
    ITEM_ROUTE_METHODS,
    DocumentConfig,
    SchemaNode,
    http_method,
)
from schema_compiler.parser.schema import read_document_config, schema_properties

from .document import OpenApiDocument

ERROR_RESPONSES: dict[str, dict[str, str]] = {
    "400": {"description": "Bad Request"},
    "401": {"description": "Unauthorized"},
    "403": {"description": "Forbidden"},
    "404": {"description": "Not Found"},
    "405": {"description": "Method Not Allowed"},
    "413": {"description": "Payload Too Large"},
    "429": {"description": "Too Many Requests"},
    "500": {"description": "Internal Server Error"},
    "502": {"description": "Bad Gateway"},
    "503": {"description": "Service Unavailable"},
}

# Keys copied from a property into a parameter schema
SCALAR_CONSTRAINTS = ("type", "format", "x-format", "minLength", "maxLength", "minimum", "maximum", "enum")


def collection_route(config: DocumentConfig, route_prefix: str = "") -> str:
    return f"{route_prefix.rstrip('/')}/{config.lower_name}"


def item_route(config: DocumentConfig, route_prefix: str = "") -> str:
    return collection_route(config, route_prefix) + "/{id}"


def component_ref(name: str) -> dict[str, str]:
    return {"$ref": f"#/components/schemas/{name}"}


def json_content(component_name: str) -> dict[str, Any]:
    return {"application/json": {"schema": component_ref(component_name)}}


def scalar_schema(prop: SchemaNode) -> dict[str, Any]:
    """Copy the scalar constraints of a property, skipping absent ones."""
    return {key: copy.deepcopy(prop[key]) for key in SCALAR_CONSTRAINTS if prop.get(key) is not None}


def id_parameter(id_prop: SchemaNode) -> dict[str, Any]:
    param: dict[str, Any] = {"name": "id", "in": "path", "required": True, "schema": scalar_schema(id_prop)}
    if id_prop.get("description"):
        param["description"] = id_prop["description"]
    return param


def build_operation(
    method: str,
    verb: str,
    config: DocumentConfig,
    properties: dict[str, SchemaNode],
    with_id: bool,
) -> dict[str, Any]:
    """Build the operation object for one document method."""
    name = config.interface_name
    parameters = []
    id_prop = properties.get("_id")
    if with_id and isinstance(id_prop, dict):
        parameters.append(id_parameter(id_prop))

    success: dict[str, dict[str, Any]]
    if verb == "post":
        success = {"201": {"description": "Created", "content": json_content(f"{verb}{name}Response")}}
    elif verb == "delete":
        success = {"200": {"description": "OK"}}
    else:
        success = {"200": {"description": "OK", "content": json_content(f"{verb}{name}Response")}}

    operation: dict[str, Any] = {
        "operationId": f"{method}{name}",
        "tags": [config.lower_name],
        "parameters": parameters,
    }
    if method in BODY_METHODS:
        operation["requestBody"] = {
            "description": f"{verb} {config.document_name}",
            "required": False,
            "content": json_content(f"{verb}{name}Body"),
        }

    responses = {**copy.deepcopy(ERROR_RESPONSES), **success}
    operation["responses"] = dict(sorted(responses.items(), key=lambda item: int(item[0])))
    return operation


def build_paths(
    schema: SchemaNode,
    source: Path | str | None = None,
    route_prefix: str = "",
) -> dict[str, dict[str, Any]]:
    """Build the two path items of one resource."""
    config = read_document_config(schema, source)
    properties = schema_properties(schema, source)

    collection = collection_route(config, route_prefix)
    item = item_route(config, route_prefix)
    routes: dict[str, dict[str, Any]] = {
        route: {"x-documentName": config.document_name, "x-interfaceName": config.interface_name}
        for route in (collection, item)
    }

    for method in config.methods:
        verb = http_method(method, source)
        with_id = method in ITEM_ROUTE_METHODS
        route = item if with_id else collection
        routes[route][verb] = build_operation(method, verb, config, properties, with_id)

    return routes


def synthesize_paths(
    document: OpenApiDocument,
    schema: SchemaNode,
    source: Path | str | None = None,
    route_prefix: str = "",
) -> OpenApiDocument:
    """Return ``document`` with the resource's path items merged in."""
    return document.merge(paths=build_paths(schema, source, route_prefix))
