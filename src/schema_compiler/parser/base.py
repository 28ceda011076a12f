"""Data models for annotated JSON Schema documents.

Schema files stay plain JSON mappings. These models cover the parts the
compiler attaches meaning to: the x-documentConfig block, the document
method vocabulary and the two forms a "required" declaration can take.
"""

from pathlib import Path
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from schema_compiler.errors import UnknownMethodError

SchemaNode = dict[str, Any]

# Input form: boolean flag on a single property
RawRequiredFlag = bool
# Output form: names of direct child properties, on an object or items node
NormalizedRequiredList = list[str]
RequiredDecl = Union[RawRequiredFlag, NormalizedRequiredList]

SCHEMA_METHODS: tuple[str, ...] = (
    "get", "getList", "post", "put", "patch", "delete", "options", "head", "trace",
)

HTTP_METHODS: dict[str, str] = {
    "get": "get",
    "getList": "get",
    "post": "post",
    "put": "put",
    "patch": "patch",
    "delete": "delete",
    "options": "options",
    "head": "head",
    "trace": "trace",
}

ITEM_ROUTE_METHODS = {"get", "put", "patch", "delete"}
BODY_METHODS = {"post", "put", "patch"}

RANGE_FILTER_FORMAT = "minMax"


class DocumentConfig(BaseModel):
    """The x-documentConfig block of one schema file."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    document_name: str = Field(alias="documentName")
    interface_name: str = Field(alias="interfaceName")
    methods: list[str] = Field(default_factory=lambda: list(SCHEMA_METHODS))
    document_type: Literal["primary", "secondary"] | None = Field(default=None, alias="documentType")
    key_prefix: str | None = Field(default=None, alias="keyPrefix")

    @property
    def lower_name(self) -> str:
        return self.document_name.lower()


def http_method(method: Any, source: Path | str | None = None) -> str:
    """Resolve a document method token to its HTTP verb."""
    try:
        return HTTP_METHODS[method]
    except (KeyError, TypeError):
        raise UnknownMethodError(
            f"Unknown document method {method!r}", source, "x-documentConfig.methods"
        ) from None


def is_required_flag(value: RequiredDecl | None) -> bool:
    """True only for the input form ``"required": true``."""
    return value is True


def required_list(value: RequiredDecl | None) -> NormalizedRequiredList:
    """Return a copy of an already-normalized declaration, or an empty list."""
    if isinstance(value, list):
        return [name for name in value if isinstance(name, str)]
    return []


def is_object(node: Any) -> bool:
    return isinstance(node, dict) and node.get("type") == "object"


def is_array_of_objects(node: Any) -> bool:
    return isinstance(node, dict) and node.get("type") == "array" and is_object(node.get("items"))
