"""
tests/test_pipeline.py
Integration tests for crudforge.pipeline and crudforge.exporters.

Tests cover:
- Model document loading (JSON, YAML, unknown extensions, failures)
- Document parsing into models and configuration
- Per-model generation, output layout and barrels
- Error isolation between models
- Full file -> disk pipeline, dry runs and the export manifest
"""

from __future__ import annotations

import json
import pathlib
from typing import Any, Dict

import pytest
import yaml

from crudforge.errors import ConfigurationError
from crudforge.exporters import MANIFEST_FILE, ProjectExporter
from crudforge.models import GenerationConfig, ParsedModel
from crudforge.pipeline import (
    CodeGenerator,
    GenerationReport,
    load_model_file,
    parse_raw_document,
)
from crudforge.utils import sha256_hex


# ===========================================================================
# Loading
# ===========================================================================


class TestLoadModelFile:
    def test_yaml(self, document_yaml_path: pathlib.Path) -> None:
        data = load_model_file(document_yaml_path)
        assert [m["name"] for m in data["models"]] == ["Post", "Tag"]

    def test_json(self, document_json_path: pathlib.Path) -> None:
        data = load_model_file(document_json_path)
        assert data["config"]["framework"] == "express"

    def test_unknown_extension_falls_back(
        self, document_dict: Dict[str, Any], tmp_path: pathlib.Path
    ) -> None:
        path = tmp_path / "models.txt"
        path.write_text(json.dumps(document_dict), encoding="utf-8")
        assert len(load_model_file(path)["models"]) == 2

    def test_missing_file(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_model_file(tmp_path / "nope.yaml")

    def test_directory(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(ValueError, match="not a file"):
            load_model_file(tmp_path)

    def test_list_top_level(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_model_file(path)

    def test_broken_json(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid JSON"):
            load_model_file(path)

    def test_reference_document(self, example_document: Dict[str, Any]) -> None:
        models, config = parse_raw_document(example_document)
        assert [m.name for m in models] == ["User", "Post", "Category"]
        assert config.framework == "express"


# ===========================================================================
# Parsing
# ===========================================================================


class TestParseRawDocument:
    def test_defaults_without_config(self, post_dict: Dict[str, Any]) -> None:
        models, config = parse_raw_document({"models": [post_dict]})
        assert models[0].name == "Post"
        assert config == GenerationConfig()

    @pytest.mark.parametrize("raw", [{}, {"models": []}, {"models": "Post"}])
    def test_models_required(self, raw: Dict[str, Any]) -> None:
        with pytest.raises(ValueError, match="non-empty 'models' list"):
            parse_raw_document(raw)

    def test_config_must_be_mapping(self, post_dict: Dict[str, Any]) -> None:
        with pytest.raises(ValueError, match="'config' must be a mapping"):
            parse_raw_document({"models": [post_dict], "config": ["express"]})

    def test_bad_model(self) -> None:
        with pytest.raises(ValueError, match="Model Broken failed validation"):
            parse_raw_document({"models": [{"name": "Broken", "fields": "x"}]})

    def test_duplicate_model(self, post_dict: Dict[str, Any]) -> None:
        with pytest.raises(ValueError, match="Duplicate model name 'Post'"):
            parse_raw_document({"models": [post_dict, post_dict]})

    def test_duplicate_model_ignores_case(self, post_dict: Dict[str, Any]) -> None:
        shouted = {**post_dict, "name": "POST"}
        with pytest.raises(ValueError, match=r"Duplicate model name 'POST' \(entries #0 and #1\)"):
            parse_raw_document({"models": [post_dict, shouted]})

    def test_bad_config(self, post_dict: Dict[str, Any]) -> None:
        with pytest.raises(ValueError, match="Config validation failed"):
            parse_raw_document({
                "models": [post_dict],
                "config": {"default_page_size": 500, "max_page_size": 50},
            })


# ===========================================================================
# In-memory generation
# ===========================================================================


class TestGenerateModel:
    def test_layout(self, post_model: ParsedModel, config: GenerationConfig) -> None:
        files = CodeGenerator().generate_model(post_model, config)
        assert sorted(files) == [
            "contracts/post/index.ts",
            "contracts/post/post.create.dto.ts",
            "contracts/post/post.query.dto.ts",
            "contracts/post/post.read.dto.ts",
            "contracts/post/post.update.dto.ts",
            "controllers/post/index.ts",
            "controllers/post/post.controller.ts",
            "routes/post/index.ts",
            "routes/post/post.routes.ts",
            "services/post/index.ts",
            "services/post/post.service.ts",
            "validators/post/index.ts",
            "validators/post/post.bulk.zod.ts",
            "validators/post/post.create.zod.ts",
            "validators/post/post.query.zod.ts",
            "validators/post/post.update.zod.ts",
        ]

    def test_barrels(self, post_model: ParsedModel, config: GenerationConfig) -> None:
        files = CodeGenerator().generate_model(post_model, config)
        assert "export * from './post.controller.js'" in files["controllers/post/index.ts"]
        validators = files["validators/post/index.ts"]
        assert validators.index("post.create.zod.js") < validators.index("post.bulk.zod.js")

    def test_error_names_model(self, composite_model: ParsedModel, config: GenerationConfig) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            CodeGenerator().generate_model(composite_model, config)
        assert exc_info.value.model_name == "PostTag"


class TestGenerate:
    def test_isolates_failures(
        self,
        post_model: ParsedModel,
        composite_model: ParsedModel,
        tag_model: ParsedModel,
        config: GenerationConfig,
    ) -> None:
        files, errors = CodeGenerator().generate(
            [post_model, composite_model, tag_model], config
        )
        assert len(errors) == 1
        assert errors[0].model_name == "PostTag"
        assert "controllers/post/post.controller.ts" in files
        assert "controllers/tag/tag.controller.ts" in files
        assert not any("posttag" in path for path in files)


# ===========================================================================
# File -> disk
# ===========================================================================


class TestGenerateFromFile:
    def test_writes_files_and_manifest(
        self, document_yaml_path: pathlib.Path, tmp_path: pathlib.Path
    ) -> None:
        out = tmp_path / "out"
        report = CodeGenerator().generate_from_file(document_yaml_path, out)
        assert report.success is True
        assert report.total_files == 32
        assert report.generated_models == ["Post", "Tag"]
        assert (out / "services/tag/tag.service.ts").is_file()

        manifest = json.loads((out / MANIFEST_FILE).read_text(encoding="utf-8"))
        assert manifest["models"] == ["Post", "Tag"]
        assert manifest["total_files"] == 32
        assert manifest["framework"] == "express"

    def test_dry_run_writes_nothing(
        self, document_yaml_path: pathlib.Path, tmp_path: pathlib.Path
    ) -> None:
        out = tmp_path / "out"
        report = CodeGenerator().generate_from_file(document_yaml_path, out, dry_run=True)
        assert report.success is True
        assert report.total_files == 32
        assert report.total_lines > 0
        assert not out.exists()
        assert "(dry run)" in report.summary()

    def test_config_override(
        self, document_json_path: pathlib.Path, tmp_path: pathlib.Path
    ) -> None:
        out = tmp_path / "out"
        report = CodeGenerator().generate_from_file(
            document_json_path,
            out,
            config_overrides={"framework": "fastify", "enable_bulk_operations": False},
        )
        assert report.framework == "fastify"
        routes = (out / "routes/post/post.routes.ts").read_text(encoding="utf-8")
        assert "export async function postRoutes(fastify: FastifyInstance) {" in routes
        assert not (out / "validators/post/post.bulk.zod.ts").exists()
        assert report.total_files == 30

    def test_model_error_reported(
        self, mixed_document_yaml_path: pathlib.Path, tmp_path: pathlib.Path
    ) -> None:
        out = tmp_path / "out"
        report = CodeGenerator().generate_from_file(mixed_document_yaml_path, out)
        assert report.success is False
        assert report.skipped_models == ["PostTag"]
        assert report.generated_models == ["Post"]
        assert len(report.model_errors) == 1
        assert (out / "controllers/post/post.controller.ts").is_file()
        summary = report.summary()
        assert "Model Errors (1):" in summary
        assert "Skipped Models (1):" in summary

    def test_missing_input(self, tmp_path: pathlib.Path) -> None:
        report = CodeGenerator().generate_from_file(tmp_path / "nope.yaml", tmp_path / "out")
        assert report.success is False
        assert report.input_errors
        assert report.step_metrics[-1].step_name == "Load Model File"
        assert "Input Errors (1):" in report.summary()

    def test_invalid_config(
        self, invalid_document_yaml_path: pathlib.Path, tmp_path: pathlib.Path
    ) -> None:
        report = CodeGenerator().generate_from_file(
            invalid_document_yaml_path, tmp_path / "out"
        )
        assert report.success is False
        assert report.step_metrics[-1].step_name == "Parse Models"
        assert "Config validation failed" in report.input_errors[0]

    def test_non_mapping_config_with_overrides(
        self, post_dict: Dict[str, Any], tmp_path: pathlib.Path
    ) -> None:
        path = tmp_path / "models.yaml"
        path.write_text(
            yaml.safe_dump({"models": [post_dict], "config": [1, 2]}), encoding="utf-8"
        )
        report = CodeGenerator().generate_from_file(
            path, tmp_path / "out", config_overrides={"framework": "fastify"}
        )
        assert report.success is False
        assert report.step_metrics[-1].step_name == "Parse Models"
        assert "'config' must be a mapping, got list" in report.input_errors[0]
        assert not (tmp_path / "out").exists()

    def test_exported_symbols(
        self, document_yaml_path: pathlib.Path, tmp_path: pathlib.Path
    ) -> None:
        report = CodeGenerator().generate_from_file(
            document_yaml_path, tmp_path / "out", dry_run=True
        )
        assert sorted(report.exported_symbols) == ["Post", "Tag"]
        post = report.exported_symbols["Post"]
        for symbol in ("PostCreateDTO", "PostListResponse", "postService", "postRouter"):
            assert symbol in post
        assert not any("." in symbol for symbol in post)
        total = sum(len(s) for s in report.exported_symbols.values())
        assert f"Exported symbols: {total}" in report.summary()


class TestGenerationReport:
    def test_summary(self) -> None:
        report = GenerationReport(success=True, framework="express", total_files=3)
        summary = report.summary()
        assert "crudforge - Generation Report" in summary
        assert "Status:           SUCCESS" in summary
        assert "Files generated:  3" in summary

    def test_failed_status(self) -> None:
        report = GenerationReport(success=False, export_errors=["disk full"])
        summary = report.summary()
        assert "FAILED" in summary
        assert "✗ disk full" in summary


# ===========================================================================
# Exporter
# ===========================================================================


class TestProjectExporter:
    def test_checksums(self, tmp_path: pathlib.Path) -> None:
        exporter = ProjectExporter(tmp_path / "out", framework="express")
        result = exporter.export({"b/x.ts": "b\n", "a/y.ts": "a\nb\n"}, ["Post"])
        assert result.success is True
        paths = [f.relative_path for f in result.manifest.files]
        assert paths == ["a/y.ts", "b/x.ts"]
        assert result.manifest.files[0].sha256 == sha256_hex("a\nb\n")
        assert result.manifest.total_lines == 3
        assert (tmp_path / "out" / "b" / "x.ts").read_text(encoding="utf-8") == "b\n"

    def test_clean_keeps_git(self, tmp_path: pathlib.Path) -> None:
        out = tmp_path / "out"
        (out / ".git").mkdir(parents=True)
        (out / "stale.ts").write_text("old", encoding="utf-8")
        exporter = ProjectExporter(out, clean_before_export=True)
        exporter.export({"fresh.ts": "new\n"})
        assert not (out / "stale.ts").exists()
        assert (out / ".git").is_dir()
        assert (out / "fresh.ts").is_file()

    def test_without_manifest(self, tmp_path: pathlib.Path) -> None:
        out = tmp_path / "out"
        ProjectExporter(out, generate_manifest=False).export({"a.ts": "a\n"})
        assert not (out / MANIFEST_FILE).exists()

    def test_non_atomic(self, tmp_path: pathlib.Path) -> None:
        out = tmp_path / "out"
        result = ProjectExporter(out, atomic_writes=False).export({"a.ts": "a\n"})
        assert result.success is True
        assert result.manifest.total_bytes == 2

    def test_manifest_json_round_trip(self, tmp_path: pathlib.Path) -> None:
        result = ProjectExporter(tmp_path).export({"a.ts": "a\n"}, ["Tag"])
        data = json.loads(result.manifest.to_json())
        assert data["files"][0]["relative_path"] == "a.ts"
        assert data["models"] == ["Tag"]
