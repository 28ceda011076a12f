import json
import shutil
from pathlib import Path

import pytest
import yaml

from schema_compiler.config import CompilerOptions
from schema_compiler.errors import CompilationError
from schema_compiler.generator.compiler import (
    compile_dir,
    compile_schema,
    compile_schemas,
    dump_yaml,
    finalize,
    find_schema_files,
)
from schema_compiler.generator.document import OpenApiDocument
from schema_compiler.parser.normalizer import normalize_schema

FIXTURES = Path(__file__).parent / "fixtures"


def _schema_dir(tmp_path: Path, *names: str) -> Path:
    schema_dir = tmp_path / "schemas"
    schema_dir.mkdir()
    for name in names:
        shutil.copy(FIXTURES / name, schema_dir / name)
    return schema_dir


def _write_schema(path: Path, name: str, methods: list[str], properties: dict) -> Path:
    path.write_text(json.dumps({
        "type": "object",
        "x-documentConfig": {"documentName": name, "interfaceName": name, "methods": methods},
        "properties": properties,
    }), encoding="utf-8")
    return path


class TestOrderExample:
    def test_paths_and_components(self, tmp_path):
        schema_dir = _schema_dir(tmp_path, "order.json")
        result = compile_schemas([schema_dir / "order.json"])
        document = result.document

        assert set(document.paths) == {"/order", "/order/{id}"}
        assert "post" in document.paths["/order"]
        assert "get" not in document.paths["/order"]
        assert "get" in document.paths["/order/{id}"]
        assert document.paths["/order/{id}"]["get"]["parameters"][0]["name"] == "id"

        assert set(document.schemas) == {"postOrderBody", "postOrderResponse", "getOrderResponse"}
        assert document.schemas["postOrderBody"] == {
            "type": "object",
            "properties": {"total": {"type": "number"}},
            "required": ["total"],
        }
        assert not any("List" in name for name in document.schemas)
        for item in document.paths.values():
            assert "delete" not in item

    def test_schema_file_is_normalized(self, tmp_path):
        schema_dir = _schema_dir(tmp_path, "order.json")
        compile_schemas([schema_dir / "order.json"])
        on_disk = json.loads((schema_dir / "order.json").read_text(encoding="utf-8"))
        assert on_disk["required"] == ["total"]

    def test_write_normalized_disabled(self, tmp_path):
        schema_dir = _schema_dir(tmp_path, "order.json")
        before = (schema_dir / "order.json").read_text(encoding="utf-8")
        compile_schemas([schema_dir / "order.json"], CompilerOptions(write_normalized=False))
        assert (schema_dir / "order.json").read_text(encoding="utf-8") == before


class TestFold:
    def test_resources_accumulate(self, tmp_path):
        schema_dir = _schema_dir(tmp_path, "order.json", "product.json")
        result = compile_schemas(find_schema_files(schema_dir))

        assert result.compiled == [schema_dir / "order.json", schema_dir / "product.json"]
        assert {"/order", "/order/{id}", "/product", "/product/{id}"} == set(result.document.paths)
        assert "getProductResponseList" in result.document.schemas
        assert len(result.document.paths["/product"]["get"]["parameters"]) == 11

    def test_start_document_is_not_modified(self, tmp_path):
        schema_dir = _schema_dir(tmp_path, "order.json")
        start = OpenApiDocument()
        result = compile_schemas([schema_dir / "order.json"], document=start)
        assert start.paths == {}
        assert result.document.paths

    def test_collision_last_write_wins(self, tmp_path):
        first = _write_schema(tmp_path / "a.json", "Item", ["get", "delete"], {"color": {"type": "string"}})
        second = _write_schema(tmp_path / "b.json", "Item", ["get"], {"size": {"type": "integer"}})

        document = compile_schemas([first, second]).document
        assert set(document.schemas["getItemResponse"]["properties"]) == {"size"}
        assert "delete" not in document.paths["/item/{id}"]

        document = compile_schemas([second, first]).document
        assert set(document.schemas["getItemResponse"]["properties"]) == {"color"}
        assert "delete" in document.paths["/item/{id}"]

    def test_failed_file_contributes_nothing(self, tmp_path, caplog):
        good = _write_schema(tmp_path / "a.json", "Good", ["get"], {"x": {"type": "string"}})
        bad = _write_schema(tmp_path / "b.json", "Bad", ["get", "getList", "fetch"], {"x": {"type": "string"}})

        with caplog.at_level("ERROR"):
            result = compile_schemas([good, bad])

        assert result.compiled == [good]
        assert str(bad) in result.failed
        assert "fetch" in result.failed[str(bad)]
        assert not any(path.startswith("/bad") for path in result.document.paths)
        assert not any(name.endswith("BadResponse") for name in result.document.schemas)
        assert str(bad) in caplog.text

    def test_missing_config_is_skipped(self, tmp_path):
        good = _write_schema(tmp_path / "a.json", "Good", ["get"], {"x": {"type": "string"}})
        bad = tmp_path / "b.json"
        bad.write_text(json.dumps({"type": "object", "properties": {}}), encoding="utf-8")

        result = compile_schemas([good, bad])
        assert "x-documentConfig" in result.failed[str(bad)]

    def test_all_files_failing_aborts(self, tmp_path):
        bad = tmp_path / "b.json"
        bad.write_text("[]", encoding="utf-8")
        with pytest.raises(CompilationError):
            compile_schemas([bad])

    def test_no_files(self):
        result = compile_schemas([])
        assert result.document.paths == {}


class TestCompileSchema:
    def test_route_prefix_and_patch(self):
        schema = normalize_schema(json.loads((FIXTURES / "product.json").read_text(encoding="utf-8")))
        document = compile_schema(OpenApiDocument(), schema, CompilerOptions(route_prefix="/api"))
        assert len(document.paths["/api/product"]["get"]["parameters"]) == 11


class TestFindSchemaFiles:
    def test_sorted_json_only(self, tmp_path, caplog):
        (tmp_path / "b.json").write_text("{}")
        (tmp_path / "a.json").write_text("{}")
        (tmp_path / "notes.txt").write_text("x")
        (tmp_path / "nested").mkdir()

        with caplog.at_level("WARNING"):
            files = find_schema_files(tmp_path)
        assert [f.name for f in files] == ["a.json", "b.json"]
        assert "notes.txt" in caplog.text


class TestOutput:
    def test_finalize_keeps_structure(self, tmp_path):
        schema_dir = _schema_dir(tmp_path, "product.json")
        document = compile_schemas([schema_dir / "product.json"]).document
        data = finalize(document)

        assert data["openapi"] == "3.0.0"
        assert data["info"]["version"] == "1.0.0"
        assert set(data["paths"]) == {"/product", "/product/{id}"}
        assert data["paths"]["/product"]["x-documentName"] == "Product"
        post = data["paths"]["/product"]["post"]
        assert post["requestBody"]["content"]["application/json"]["schema"] == {
            "$ref": "#/components/schemas/postProductBody"
        }
        assert "200" not in post["responses"]
        names = {p["name"] for p in data["paths"]["/product"]["get"]["parameters"]}
        assert {"min_price", "max_price", "min_stock", "max_stock"} <= names
        assert data["components"]["schemas"]["getProductResponseList"]["type"] == "array"

    def test_yaml_has_no_anchors(self):
        shared = {"type": "string"}
        text = dump_yaml({"a": shared, "b": shared})
        assert "&" not in text and "*" not in text
        assert yaml.safe_load(text) == {"a": {"type": "string"}, "b": {"type": "string"}}

    def test_compile_dir_writes_yaml(self, tmp_path):
        schema_dir = _schema_dir(tmp_path, "order.json", "product.json")
        (schema_dir / "README.md").write_text("notes")
        options = CompilerOptions(json_schema_dir=schema_dir, openapi_dir=tmp_path / "out")

        result = compile_dir(options)

        assert result.output == tmp_path / "out" / "openapi.gen.yaml"
        data = yaml.safe_load(result.output.read_text(encoding="utf-8"))
        assert "/order" in data["paths"]
        assert "postOrderBody" in data["components"]["schemas"]
        assert data["paths"]["/order"]["post"]["responses"]["201"]["description"] == "Created"

    def test_finalize_keeps_integer_bounds(self, tmp_path):
        schema_dir = _schema_dir(tmp_path, "product.json")
        data = finalize(compile_schemas([schema_dir / "product.json"]).document)

        stock = data["components"]["schemas"]["getProductResponse"]["properties"]["stock"]
        assert stock == {"type": "integer", "minimum": 0}
        assert type(stock["minimum"]) is int

        params = {p["name"]: p for p in data["paths"]["/product"]["get"]["parameters"]}
        assert type(params["min_stock"]["schema"]["minimum"]) is int
        assert type(params["price"]["schema"]["minimum"]) is int

    def test_finalize_keeps_key_order(self, tmp_path):
        schema_dir = _schema_dir(tmp_path, "order.json")
        data = finalize(compile_schemas([schema_dir / "order.json"]).document)

        (param,) = data["paths"]["/order/{id}"]["get"]["parameters"]
        assert list(param) == ["name", "in", "required", "schema"]
        assert list(data) == ["openapi", "info", "paths", "components"]
