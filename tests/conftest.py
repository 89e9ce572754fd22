"""
tests/conftest.py
Shared fixtures for the crudforge test suite.

Model fixtures come in two flavours: raw dicts (what a YAML/JSON document
holds) and validated ``ParsedModel`` objects.  File fixtures write real
documents into pytest's ``tmp_path``; no mocking libraries are used.
"""

from __future__ import annotations

import copy
import json
import pathlib
from typing import Any, Dict, List

import pytest
import yaml

from crudforge.features import FeatureResolution, resolve_features
from crudforge.models import GenerationConfig, ParsedModel


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

ROOT_DIR: pathlib.Path = pathlib.Path(__file__).resolve().parent.parent
MODELS_EXAMPLE_PATH: pathlib.Path = ROOT_DIR / "models_example.yaml"


# ---------------------------------------------------------------------------
# Reference document
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def raw_example_document() -> Dict[str, Any]:
    """Load models_example.yaml once per session."""
    assert MODELS_EXAMPLE_PATH.exists(), (
        f"Reference document not found at {MODELS_EXAMPLE_PATH}."
    )
    with open(MODELS_EXAMPLE_PATH, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    assert isinstance(data, dict), "Top-level YAML must be a mapping."
    return data


@pytest.fixture()
def example_document(raw_example_document: Dict[str, Any]) -> Dict[str, Any]:
    """Deep copy so each test can mutate freely."""
    return copy.deepcopy(raw_example_document)


# ---------------------------------------------------------------------------
# Raw model dicts
# ---------------------------------------------------------------------------


@pytest.fixture()
def post_dict() -> Dict[str, Any]:
    """Integer id, unique slug, published flag, timestamps and a relation."""
    return {
        "name": "Post",
        "fields": [
            {"name": "id", "type": "int", "is_id": True, "default_function": "autoincrement"},
            {"name": "title", "type": "string"},
            {"name": "slug", "type": "string", "is_unique": True},
            {"name": "content", "type": "string", "is_required": False},
            {"name": "published", "type": "boolean", "default": False},
            {"name": "createdAt", "type": "datetime", "default_function": "now"},
            {"name": "updatedAt", "type": "datetime", "is_updated_at": True},
            {
                "name": "author",
                "type": "relation",
                "relation_target": "User",
                "relation_from_fields": ["authorId"],
            },
            {"name": "authorId", "type": "int"},
        ],
    }


@pytest.fixture()
def tag_dict() -> Dict[str, Any]:
    """UUID id, no slug, no published flag."""
    return {
        "name": "Tag",
        "fields": [
            {"name": "id", "type": "string", "is_id": True, "default_function": "uuid"},
            {"name": "name", "type": "string", "is_unique": True},
            {"name": "color", "type": "string", "is_required": False},
        ],
    }


@pytest.fixture()
def composite_dict() -> Dict[str, Any]:
    """Join table keyed by two columns."""
    return {
        "name": "PostTag",
        "primary_key": ["postId", "tagId"],
        "fields": [
            {"name": "postId", "type": "int"},
            {"name": "tagId", "type": "string"},
        ],
    }


@pytest.fixture()
def no_id_dict() -> Dict[str, Any]:
    return {
        "name": "Setting",
        "fields": [
            {"name": "key", "type": "string"},
            {"name": "value", "type": "json"},
        ],
    }


@pytest.fixture()
def article_dict() -> Dict[str, Any]:
    """Native enum (no inline values), snake-case published flag, cuid id."""
    return {
        "name": "Article",
        "fields": [
            {"name": "id", "type": "string", "is_id": True, "default_function": "cuid"},
            {"name": "headline", "type": "string"},
            {"name": "status", "type": "enum", "enum_name": "ArticleStatus"},
            {"name": "is_published", "type": "boolean", "default": False},
            {"name": "views", "type": "bigint", "default": 0},
        ],
    }


# ---------------------------------------------------------------------------
# Validated models & configuration
# ---------------------------------------------------------------------------


@pytest.fixture()
def post_model(post_dict: Dict[str, Any]) -> ParsedModel:
    return ParsedModel.model_validate(post_dict)


@pytest.fixture()
def tag_model(tag_dict: Dict[str, Any]) -> ParsedModel:
    return ParsedModel.model_validate(tag_dict)


@pytest.fixture()
def composite_model(composite_dict: Dict[str, Any]) -> ParsedModel:
    return ParsedModel.model_validate(composite_dict)


@pytest.fixture()
def no_id_model(no_id_dict: Dict[str, Any]) -> ParsedModel:
    return ParsedModel.model_validate(no_id_dict)


@pytest.fixture()
def article_model(article_dict: Dict[str, Any]) -> ParsedModel:
    return ParsedModel.model_validate(article_dict)


@pytest.fixture()
def config() -> GenerationConfig:
    return GenerationConfig()


@pytest.fixture()
def fastify_config() -> GenerationConfig:
    return GenerationConfig(framework="fastify")


@pytest.fixture()
def post_features(post_model: ParsedModel, config: GenerationConfig) -> FeatureResolution:
    return resolve_features(post_model, config)


@pytest.fixture()
def tag_features(tag_model: ParsedModel, config: GenerationConfig) -> FeatureResolution:
    return resolve_features(tag_model, config)


# ---------------------------------------------------------------------------
# Document files
# ---------------------------------------------------------------------------


def _write_yaml(path: pathlib.Path, data: Dict[str, Any]) -> pathlib.Path:
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(data, fh, default_flow_style=False, sort_keys=False)
    return path


@pytest.fixture()
def document_dict(post_dict: Dict[str, Any], tag_dict: Dict[str, Any]) -> Dict[str, Any]:
    return {"config": {"framework": "express"}, "models": [post_dict, tag_dict]}


@pytest.fixture()
def document_yaml_path(
    document_dict: Dict[str, Any], tmp_path: pathlib.Path
) -> pathlib.Path:
    """Post + Tag document as YAML."""
    return _write_yaml(tmp_path / "models.yaml", document_dict)


@pytest.fixture()
def document_json_path(
    document_dict: Dict[str, Any], tmp_path: pathlib.Path
) -> pathlib.Path:
    """Post + Tag document as JSON."""
    path = tmp_path / "models.json"
    path.write_text(json.dumps(document_dict, indent=2), encoding="utf-8")
    return path


@pytest.fixture()
def mixed_document_yaml_path(
    post_dict: Dict[str, Any],
    composite_dict: Dict[str, Any],
    tmp_path: pathlib.Path,
) -> pathlib.Path:
    """One good model and one that fails generation."""
    models: List[Dict[str, Any]] = [post_dict, composite_dict]
    return _write_yaml(tmp_path / "mixed.yaml", {"models": models})


@pytest.fixture()
def invalid_document_yaml_path(tmp_path: pathlib.Path) -> pathlib.Path:
    """Document whose config cannot be validated."""
    return _write_yaml(
        tmp_path / "invalid.yaml",
        {
            "config": {"default_page_size": 500, "max_page_size": 50},
            "models": [{"name": "Thing", "fields": [{"name": "id", "type": "int", "is_id": True}]}],
        },
    )
