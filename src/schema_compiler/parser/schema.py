"""JSON Schema file reading and writing.

Loads one annotated schema file per resource and validates its
x-documentConfig block into a DocumentConfig model.
"""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from schema_compiler.errors import DocumentConfigError, SchemaLoadError, SchemaShapeError

from .base import SCHEMA_METHODS, DocumentConfig, SchemaNode

logger = logging.getLogger(__name__)

DOCUMENT_CONFIG_KEY = "x-documentConfig"


def load_schema(file_path: Path) -> SchemaNode:
    """Read a schema file into a JSON mapping."""
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise SchemaLoadError(f"Cannot read schema file: {e.strerror}", file_path) from e

    try:
        schema = json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaLoadError(f"Invalid JSON at line {e.lineno} column {e.colno}: {e.msg}", file_path) from e

    if not isinstance(schema, dict):
        raise SchemaShapeError("Schema document must be a JSON object", file_path)
    return schema


def write_schema(file_path: Path, schema: SchemaNode) -> None:
    """Persist a schema back to its source path as pretty-printed JSON."""
    file_path.write_text(json.dumps(schema, indent=4, ensure_ascii=False) + "\n", encoding="utf-8")


def read_document_config(schema: SchemaNode, source: Path | str | None = None) -> DocumentConfig:
    """Validate the x-documentConfig block of a schema.

    A missing methods list is filled in with the full method vocabulary,
    both on the returned model and on the raw block, and logged as a warning.
    """
    config = schema.get(DOCUMENT_CONFIG_KEY)
    if not isinstance(config, dict):
        raise DocumentConfigError(f"{DOCUMENT_CONFIG_KEY} not found", source, DOCUMENT_CONFIG_KEY)

    for key in ("documentName", "interfaceName"):
        if not config.get(key):
            raise DocumentConfigError(f"{DOCUMENT_CONFIG_KEY}.{key} not found", source, f"{DOCUMENT_CONFIG_KEY}.{key}")

    if config.get("methods") is None:
        logger.warning(
            "%s.methods not found in %s, using all supported methods", DOCUMENT_CONFIG_KEY, source
        )
        config["methods"] = list(SCHEMA_METHODS)

    try:
        return DocumentConfig.model_validate(config)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise DocumentConfigError(first["msg"], source, f"{DOCUMENT_CONFIG_KEY}.{field}") from e


def schema_properties(schema: SchemaNode, source: Path | str | None = None) -> dict[str, SchemaNode]:
    """Return the top-level properties mapping, which every resource must have."""
    properties = schema.get("properties")
    if not isinstance(properties, dict):
        raise SchemaShapeError("Invalid schema.properties", source, "properties")
    return properties
