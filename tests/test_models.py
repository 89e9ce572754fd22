"""
tests/test_models.py
Unit tests for crudforge.models.

Tests cover:
- ParsedField derived flags and metadata validators
- ParsedModel partitions (create / update / read / relation fields)
- Slug and published detection
- Model-level validators (duplicate fields, primary key references)
- GenerationConfig defaults and cross-field checks
"""

from __future__ import annotations

from typing import Any, Dict, List

import pytest
from pydantic import ValidationError as PydanticValidationError

from crudforge.models import (
    FieldType,
    GenerationConfig,
    GeneratorOutput,
    IdStrategy,
    ParsedField,
    ParsedModel,
)


def _names(fields: List[ParsedField]) -> List[str]:
    return [f.name for f in fields]


# ===========================================================================
# ParsedField
# ===========================================================================


class TestParsedField:
    """Derived flags and validation of a single field."""

    def test_defaults(self) -> None:
        field = ParsedField(name="title", type=FieldType.STRING)
        assert field.is_required is True
        assert field.is_list is False
        assert field.has_default is False
        assert field.is_scalar is True
        assert field.is_relation is False

    def test_type_parsed_from_string(self) -> None:
        field = ParsedField.model_validate({"name": "n", "type": "bigint"})
        assert field.type is FieldType.BIGINT

    def test_false_literal_counts_as_default(self) -> None:
        field = ParsedField(name="published", type=FieldType.BOOLEAN, default=False)
        assert field.has_default is True
        assert field.has_db_default is False

    def test_optional_for_create_rules(self) -> None:
        assert ParsedField(name="a", type=FieldType.STRING).is_optional_for_create is False
        assert ParsedField(
            name="a", type=FieldType.STRING, is_required=False
        ).is_optional_for_create is True
        assert ParsedField(
            name="a", type=FieldType.STRING, is_list=True
        ).is_optional_for_create is True
        assert ParsedField(
            name="a", type=FieldType.DATETIME, is_updated_at=True
        ).is_optional_for_create is True
        assert ParsedField(
            name="a", type=FieldType.INT, default=3
        ).is_optional_for_create is True

    def test_db_managed_timestamp(self) -> None:
        created = ParsedField.model_validate(
            {"name": "createdAt", "type": "datetime", "default_function": "now"}
        )
        other = ParsedField.model_validate(
            {"name": "startsAt", "type": "datetime", "default_function": "now"}
        )
        assert created.is_db_managed_timestamp is True
        assert other.is_db_managed_timestamp is False

    def test_unsupported_counts_as_scalar(self) -> None:
        field = ParsedField(name="geom", type=FieldType.UNSUPPORTED)
        assert field.is_scalar is True

    def test_enum_requires_enum_name(self) -> None:
        with pytest.raises(PydanticValidationError, match="enum_name"):
            ParsedField(name="status", type=FieldType.ENUM)

    def test_relation_requires_target(self) -> None:
        with pytest.raises(PydanticValidationError, match="relation_target"):
            ParsedField(name="author", type=FieldType.RELATION)

    def test_invalid_identifier_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            ParsedField(name="my field", type=FieldType.STRING)

    def test_unknown_key_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            ParsedField.model_validate({"name": "a", "type": "string", "nullable": True})

    def test_frozen(self) -> None:
        field = ParsedField(name="a", type=FieldType.STRING)
        with pytest.raises(PydanticValidationError):
            field.name = "b"  # type: ignore[misc]


# ===========================================================================
# ParsedModel
# ===========================================================================


class TestParsedModelPartitions:
    """create / update / read / relation views over the field list."""

    def test_create_fields(self, post_model: ParsedModel) -> None:
        assert _names(post_model.create_fields) == [
            "title", "slug", "content", "published", "authorId",
        ]

    def test_update_fields_equal_create_fields(self, post_model: ParsedModel) -> None:
        assert _names(post_model.update_fields) == _names(post_model.create_fields)

    def test_read_fields_are_all_scalars(self, post_model: ParsedModel) -> None:
        assert _names(post_model.read_fields) == [
            "id", "title", "slug", "content", "published",
            "createdAt", "updatedAt", "authorId",
        ]

    def test_relation_fields(self, post_model: ParsedModel) -> None:
        assert _names(post_model.relation_fields) == ["author"]

    def test_read_only_excluded_from_create(self) -> None:
        model = ParsedModel.model_validate({
            "name": "Invoice",
            "fields": [
                {"name": "id", "type": "int", "is_id": True},
                {"name": "total", "type": "decimal", "is_read_only": True},
                {"name": "note", "type": "string"},
            ],
        })
        assert _names(model.create_fields) == ["note"]

    def test_create_without_default_keeps_created_at(self) -> None:
        model = ParsedModel.model_validate({
            "name": "Event",
            "fields": [
                {"name": "id", "type": "int", "is_id": True},
                {"name": "createdAt", "type": "datetime"},
            ],
        })
        assert _names(model.create_fields) == ["createdAt"]

    def test_declaration_order_preserved(self, tag_model: ParsedModel) -> None:
        assert _names(tag_model.scalar_fields) == ["id", "name", "color"]


class TestParsedModelIdentifier:
    """Single and composite identifier detection."""

    def test_single_id(self, post_model: ParsedModel) -> None:
        assert post_model.id_field is not None
        assert post_model.id_field.name == "id"
        assert post_model.has_composite_id is False

    def test_composite_from_primary_key(self, composite_model: ParsedModel) -> None:
        assert composite_model.has_composite_id is True
        assert composite_model.id_field is None
        assert _names(composite_model.id_fields) == ["postId", "tagId"]

    def test_composite_from_two_id_flags(self) -> None:
        model = ParsedModel.model_validate({
            "name": "Pair",
            "fields": [
                {"name": "a", "type": "int", "is_id": True},
                {"name": "b", "type": "int", "is_id": True},
            ],
        })
        assert model.has_composite_id is True

    def test_no_id(self, no_id_model: ParsedModel) -> None:
        assert no_id_model.id_field is None
        assert no_id_model.has_composite_id is False

    def test_single_column_primary_key(self) -> None:
        model = ParsedModel.model_validate({
            "name": "Label",
            "primary_key": ["id"],
            "fields": [
                {"name": "id", "type": "int", "default_function": "autoincrement"},
                {"name": "text", "type": "string"},
            ],
        })
        assert model.id_field is not None
        assert model.id_field.name == "id"
        assert model.has_composite_id is False
        assert _names(model.create_fields) == ["text"]
        assert _names(model.update_fields) == ["text"]
        assert _names(model.read_fields) == ["id", "text"]


class TestDerivedFlags:
    """Slug and published detection."""

    def test_post_has_slug_and_published(self, post_model: ParsedModel) -> None:
        assert post_model.slug_field == "slug"
        assert post_model.published_field == "published"
        assert post_model.has_slug_field is True
        assert post_model.has_published_field is True

    def test_tag_has_neither(self, tag_model: ParsedModel) -> None:
        assert tag_model.slug_field is None
        assert tag_model.published_field is None

    @pytest.mark.parametrize("name", ["is_published", "isPublished", "published", "IsPublished"])
    def test_published_name_variants(self, name: str) -> None:
        model = ParsedModel.model_validate({
            "name": "Page",
            "fields": [
                {"name": "id", "type": "int", "is_id": True},
                {"name": name, "type": "boolean"},
            ],
        })
        assert model.published_field == name

    def test_published_must_be_boolean(self) -> None:
        model = ParsedModel.model_validate({
            "name": "Page",
            "fields": [
                {"name": "id", "type": "int", "is_id": True},
                {"name": "published", "type": "datetime"},
            ],
        })
        assert model.published_field is None

    def test_slug_must_be_string(self) -> None:
        model = ParsedModel.model_validate({
            "name": "Page",
            "fields": [
                {"name": "id", "type": "int", "is_id": True},
                {"name": "slug", "type": "int"},
            ],
        })
        assert model.has_slug_field is False

    def test_enum_types(self, article_model: ParsedModel) -> None:
        assert article_model.enum_types == ["ArticleStatus"]

    def test_get_field(self, post_model: ParsedModel) -> None:
        assert post_model.get_field("slug") is not None
        assert post_model.get_field("missing") is None


class TestParsedModelValidation:
    """Model-level validators."""

    def test_duplicate_field_names(self, tag_dict: Dict[str, Any]) -> None:
        tag_dict["fields"].append({"name": "name", "type": "string"})
        with pytest.raises(PydanticValidationError, match="duplicate fields"):
            ParsedModel.model_validate(tag_dict)

    def test_primary_key_unknown_field(self, composite_dict: Dict[str, Any]) -> None:
        composite_dict["primary_key"] = ["postId", "nope"]
        with pytest.raises(PydanticValidationError, match="unknown fields"):
            ParsedModel.model_validate(composite_dict)

    def test_empty_fields_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            ParsedModel.model_validate({"name": "Empty", "fields": []})

    def test_invalid_model_name(self, tag_dict: Dict[str, Any]) -> None:
        tag_dict["name"] = "Bad-Name"
        with pytest.raises(PydanticValidationError):
            ParsedModel.model_validate(tag_dict)


# ===========================================================================
# GenerationConfig & GeneratorOutput
# ===========================================================================


class TestGenerationConfig:
    """Defaults and cross-field validation."""

    def test_defaults(self) -> None:
        config = GenerationConfig()
        assert config.framework == "express"
        assert config.enable_domain_methods is True
        assert config.enable_bulk_operations is True
        assert config.max_batch_size == 100
        assert config.id_strategy is None
        assert config.sanitize_error_messages is True

    def test_page_size_cross_check(self) -> None:
        with pytest.raises(PydanticValidationError, match="exceeds"):
            GenerationConfig(default_page_size=50, max_page_size=20)

    def test_batch_size_must_be_positive(self) -> None:
        with pytest.raises(PydanticValidationError):
            GenerationConfig(max_batch_size=0)

    def test_id_strategy_parsed(self) -> None:
        config = GenerationConfig.model_validate({"id_strategy": "composite"})
        assert config.id_strategy is IdStrategy.COMPOSITE

    def test_unknown_key_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            GenerationConfig.model_validate({"dialect": "postgresql"})


class TestGeneratorOutput:
    def test_empty_defaults(self) -> None:
        output = GeneratorOutput()
        assert output.files == {}
        assert output.exports == []
        assert output.metadata.file_count == 0
