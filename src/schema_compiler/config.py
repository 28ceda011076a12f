"""Compiler options.

Options can be given on the command line or loaded from a YAML/JSON
file; keys are accepted in snake_case or in the camelCase used by
existing project configs (``jsonSchemaDir``, ``allowApiCreateUpdate_id``).
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

DEFAULT_OPENAPI_FILE = "openapi.gen.yaml"


class ApiInfo(BaseModel):
    """The ``info`` block of the produced OpenAPI document."""

    title: str = "Generated API server"
    description: str = "OpenAPI spec generated from JSON Schema"
    version: str = "1.0.0"


class CompilerOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    json_schema_dir: Path = Field(default=Path("./jsonSchema"), alias="jsonSchemaDir")
    openapi_dir: Path = Field(default=Path("./openapi"), alias="openapiDir")
    openapi_file: str = Field(default=DEFAULT_OPENAPI_FILE, alias="openapiFile")
    # post/put bodies may carry a caller-supplied _id
    allow_api_create_update_id: bool = Field(default=False, alias="allowApiCreateUpdate_id")
    route_prefix: str = Field(default="", alias="routePrefix")
    write_normalized: bool = Field(default=True, alias="writeNormalized")
    info: ApiInfo = Field(default_factory=ApiInfo)

    @property
    def openapi_path(self) -> Path:
        return self.openapi_dir / self.openapi_file


def load_options(file_path: Path, **overrides) -> CompilerOptions:
    """Load options from a YAML or JSON file, then apply non-None overrides.

    Relative directories in the file are resolved against the file's folder.
    """
    data = yaml.safe_load(file_path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Options file must contain a mapping: {file_path}")

    # Older configs nest the id option under an "app" section
    app = data.pop("app", None)
    if isinstance(app, dict) and "allowApiCreateUpdate_id" in app:
        data.setdefault("allowApiCreateUpdate_id", app["allowApiCreateUpdate_id"])

    try:
        options = CompilerOptions.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid options in {file_path}: {e}") from e

    base_dir = file_path.parent
    updates = {}
    for key in ("json_schema_dir", "openapi_dir"):
        value = getattr(options, key)
        if key in options.model_fields_set and not value.is_absolute():
            updates[key] = base_dir / value
    updates.update({k: v for k, v in overrides.items() if v is not None})
    return options.model_copy(update=updates)
