"""The OpenAPI document accumulated across schema files."""

from typing import Any

from pydantic import BaseModel, Field

from schema_compiler.config import ApiInfo

OPENAPI_VERSION = "3.0.0"


class OpenApiDocument(BaseModel):
    """Paths and component schemas collected so far.

    Documents are treated as values: ``merge`` returns a new document and
    a later fragment overwrites earlier entries that share a key.
    """

    openapi: str = OPENAPI_VERSION
    info: ApiInfo = Field(default_factory=ApiInfo)
    paths: dict[str, dict[str, Any]] = {}
    schemas: dict[str, dict[str, Any]] = {}

    def merge(
        self,
        paths: dict[str, dict[str, Any]] | None = None,
        schemas: dict[str, dict[str, Any]] | None = None,
    ) -> "OpenApiDocument":
        return self.model_copy(update={
            "paths": {**self.paths, **(paths or {})},
            "schemas": {**self.schemas, **(schemas or {})},
        })

    def to_dict(self) -> dict[str, Any]:
        return {
            "openapi": self.openapi,
            "info": self.info.model_dump(),
            "paths": self.paths,
            "components": {"schemas": self.schemas},
        }
