"""Compile a directory of JSON Schema files into one OpenAPI document.

Files are processed one at a time in file-name order. Each file is
normalized, turned into a path/component fragment and merged into the
document; a file that fails is logged and contributes nothing.
"""

import logging
from functools import reduce
from pathlib import Path
from typing import Any, Iterable

import yaml
from pydantic import BaseModel

from schema_compiler.config import CompilerOptions
from schema_compiler.errors import CompilationError, SchemaCompileError
from schema_compiler.parser.base import SchemaNode
from schema_compiler.parser.normalizer import normalize

from .components import apply_parameter_patches, build_components
from .document import OpenApiDocument
from .paths import build_paths
from .validator import coerce_openapi

logger = logging.getLogger(__name__)


class CompileResult(BaseModel):
    document: OpenApiDocument
    compiled: list[Path] = []
    failed: dict[str, str] = {}
    output: Path | None = None


class _NoAliasDumper(yaml.SafeDumper):
    def ignore_aliases(self, data):
        return True


def compile_schema(
    document: OpenApiDocument,
    schema: SchemaNode,
    options: CompilerOptions,
    source: Path | str | None = None,
) -> OpenApiDocument:
    """Merge one normalized schema's paths and components into ``document``."""
    paths = build_paths(schema, source, options.route_prefix)
    fragment = build_components(schema, options, source)
    paths.update(apply_parameter_patches(paths, fragment.patches, source))
    return document.merge(paths=paths, schemas=fragment.schemas)


def compile_file(document: OpenApiDocument, schema_path: Path, options: CompilerOptions) -> OpenApiDocument:
    schema = normalize(schema_path, write=options.write_normalized)
    return compile_schema(document, schema, options, schema_path)


def compile_schemas(
    schema_paths: Iterable[Path],
    options: CompilerOptions | None = None,
    document: OpenApiDocument | None = None,
) -> CompileResult:
    """Fold schema files into a document, in the given order.

    Raises CompilationError when files were given and all of them failed.
    """
    options = options or CompilerOptions()
    schema_paths = list(schema_paths)
    result = CompileResult(document=document or OpenApiDocument(info=options.info))

    def step(doc: OpenApiDocument, schema_path: Path) -> OpenApiDocument:
        logger.info("OpenApi : %s", schema_path)
        try:
            doc = compile_file(doc, schema_path, options)
        except SchemaCompileError as e:
            logger.error("Skipping %s: %s", schema_path, e)
            result.failed[str(schema_path)] = str(e)
            return doc
        result.compiled.append(schema_path)
        return doc

    result.document = reduce(step, schema_paths, result.document)

    if schema_paths and not result.compiled:
        raise CompilationError(f"All {len(schema_paths)} schema files failed to compile")
    return result


def find_schema_files(schema_dir: Path) -> list[Path]:
    """List the JSON schema files of a directory, sorted by name."""
    files = []
    for path in sorted(schema_dir.iterdir()):
        if path.is_dir():
            continue
        if path.suffix != ".json":
            logger.warning("Skipping non-JSON file: %s", path)
            continue
        files.append(path)
    return files


def finalize(document: OpenApiDocument) -> dict[str, Any]:
    """Validate the accumulated document and return it as a plain mapping."""
    return coerce_openapi(document.to_dict())


def dump_yaml(data: dict[str, Any]) -> str:
    return yaml.dump(data, Dumper=_NoAliasDumper, sort_keys=False, allow_unicode=True)


def write_openapi(document: OpenApiDocument, options: CompilerOptions) -> Path:
    output_path = options.openapi_path
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(dump_yaml(finalize(document)), encoding="utf-8")
    logger.info("Writing OpenApi : %s", output_path)
    return output_path


def compile_dir(options: CompilerOptions) -> CompileResult:
    """Compile every schema file of ``options.json_schema_dir`` and write the YAML output."""
    result = compile_schemas(find_schema_files(options.json_schema_dir), options)
    result.output = write_openapi(result.document, options)
    return result
