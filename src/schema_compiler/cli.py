"""CLI entry point for schema-compiler."""

import logging
from pathlib import Path

import click

from schema_compiler.config import CompilerOptions, load_options
from schema_compiler.errors import CompilationError, SchemaCompileError
from schema_compiler.generator.compiler import compile_dir
from schema_compiler.parser.normalizer import normalize
from schema_compiler.parser.schema import load_schema


def _build_options(config_path: Path | None, **overrides) -> CompilerOptions:
    """Load options from a config file (if any) and apply CLI overrides."""
    if config_path is not None:
        try:
            return load_options(config_path, **overrides)
        except ValueError as e:
            raise click.ClickException(str(e))
    return CompilerOptions().model_copy(update={k: v for k, v in overrides.items() if v is not None})


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
def main(verbose: bool):
    """Schema Compiler: build an OpenAPI spec from annotated JSON Schema files."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command("compile")
@click.argument("schema_dir", required=False, type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("-c", "--config", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="YAML or JSON options file.")
@click.option("-o", "--output", type=click.Path(file_okay=False, path_type=Path), help="Output directory for the OpenAPI file.")
@click.option("--allow-id/--no-allow-id", "allow_id", default=None, help="Let post/put bodies carry a caller-supplied _id.")
@click.option("--prefix", "route_prefix", default=None, help="Prefix for every route, e.g. /api.")
@click.option("--no-write", is_flag=True, help="Do not rewrite schema files with normalized required lists.")
def compile_cmd(
    schema_dir: Path | None,
    config_path: Path | None,
    output: Path | None,
    allow_id: bool | None,
    route_prefix: str | None,
    no_write: bool,
):
    """Compile every schema file of SCHEMA_DIR into one OpenAPI document."""
    options = _build_options(
        config_path,
        json_schema_dir=schema_dir,
        openapi_dir=output,
        allow_api_create_update_id=allow_id,
        route_prefix=route_prefix,
        write_normalized=False if no_write else None,
    )
    if not options.json_schema_dir.is_dir():
        raise click.ClickException(f"Schema directory not found: {options.json_schema_dir}")

    click.echo(f"Compiling schemas in {options.json_schema_dir}...")
    try:
        result = compile_dir(options)
    except (CompilationError, SchemaCompileError) as e:
        raise click.ClickException(str(e))

    for path, message in result.failed.items():
        click.echo(f"  Failed {path}: {message}", err=True)

    click.echo(
        f"Compiled {len(result.compiled)} schemas "
        f"({len(result.document.paths)} paths, {len(result.document.schemas)} component schemas)."
    )
    click.echo(f"OpenAPI spec saved to {result.output}")


@main.command("normalize")
@click.argument("schema_files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--check", is_flag=True, help="Report files that are not normalized instead of rewriting them.")
def normalize_cmd(schema_files: tuple[Path, ...], check: bool):
    """Rewrite required flags of SCHEMA_FILES into required lists."""
    pending = []
    for schema_file in schema_files:
        try:
            before = load_schema(schema_file)
            after = normalize(schema_file, write=not check)
        except SchemaCompileError as e:
            raise click.ClickException(str(e))

        if before != after:
            pending.append(schema_file)
            click.echo(f"  {'Needs normalizing' if check else 'Normalized'}: {schema_file}")

    if check and pending:
        raise click.ClickException(f"{len(pending)} of {len(schema_files)} files are not normalized")
    click.echo(f"Checked {len(schema_files)} files, {len(pending)} changed.")
