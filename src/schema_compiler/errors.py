"""Errors raised while compiling JSON Schema documents.

Every per-file error carries the offending source path and field so the
driver can report it and move on to the next schema file.
"""

from pathlib import Path


class SchemaCompileError(Exception):
    """Base class for errors that abort the current schema file."""

    def __init__(self, message: str, source: Path | str | None = None, field: str | None = None):
        self.source = str(source) if source is not None else None
        self.field = field
        detail = message
        if field:
            detail = f"{detail} (field: {field})"
        if self.source:
            detail = f"{detail} in {self.source}"
        super().__init__(detail)


class SchemaLoadError(SchemaCompileError):
    """The schema file could not be read or is not valid JSON."""


class DocumentConfigError(SchemaCompileError):
    """The x-documentConfig block or one of its identifying fields is missing."""


class SchemaShapeError(SchemaCompileError):
    """A node is not shaped the way the extension dialect requires."""


class UnknownMethodError(SchemaCompileError):
    """A document method token is outside the supported vocabulary."""


class OpenApiShapeError(SchemaCompileError):
    """The accumulated OpenAPI document failed shape validation."""


class CompilationError(Exception):
    """Every schema file failed; nothing was compiled."""
