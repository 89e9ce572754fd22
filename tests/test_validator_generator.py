"""
tests/test_validator_generator.py
Unit tests for crudforge.generators.validator.

Tests cover:
- Create / Update / Query zod schemas
- Bulk schemas and their gating on configuration
- Identifier schemas per identifier type
- Native enum imports
"""

from __future__ import annotations

from typing import Dict

import pytest

from crudforge.features import FeatureResolution, resolve_features
from crudforge.generators.validator import ValidatorGenerator
from crudforge.models import GenerationConfig, ParsedModel


def _files(model: ParsedModel, features: FeatureResolution) -> Dict[str, str]:
    return ValidatorGenerator(model, features).generate().files


class TestValidatorFiles:
    """Which files exist and what they export."""

    def test_files_with_bulk(self, post_model: ParsedModel, post_features: FeatureResolution) -> None:
        assert list(_files(post_model, post_features)) == [
            "post.create.zod.ts",
            "post.update.zod.ts",
            "post.query.zod.ts",
            "post.bulk.zod.ts",
        ]

    def test_files_without_bulk(self, post_model: ParsedModel) -> None:
        features = resolve_features(post_model, GenerationConfig(enable_bulk_operations=False))
        files = _files(post_model, features)
        assert "post.bulk.zod.ts" not in files
        assert len(files) == 3

    def test_exports(self, post_model: ParsedModel, post_features: FeatureResolution) -> None:
        exports = ValidatorGenerator(post_model, post_features).generate().exports
        assert exports[:6] == [
            "PostCreateSchema",
            "PostCreateInput",
            "PostUpdateSchema",
            "PostUpdateInput",
            "PostQuerySchema",
            "PostQueryInput",
        ]
        assert "BulkDeletePostSchema" in exports
        assert "BulkDeletePostInput" in exports

    def test_schema_names_follow_bulk_switch(self, post_model: ParsedModel) -> None:
        on = ValidatorGenerator.from_config(post_model, GenerationConfig())
        off = ValidatorGenerator.from_config(
            post_model, GenerationConfig(enable_bulk_operations=False)
        )
        assert len(on.schema_names()) == 6  # type: ignore[attr-defined]
        assert off.schema_names() == [  # type: ignore[attr-defined]
            "PostCreateSchema", "PostUpdateSchema", "PostQuerySchema",
        ]


class TestCreateAndUpdateSchemas:
    """Body schemas mirror the DTO optionality."""

    def test_create_schema(self, post_model: ParsedModel, post_features: FeatureResolution) -> None:
        text = _files(post_model, post_features)["post.create.zod.ts"]
        assert "import { z } from 'zod'" in text
        assert "\n".join([
            "export const PostCreateSchema = z.object({",
            "  title: z.string(),",
            "  slug: z.string(),",
            "  content: z.string().nullable().optional(),",
            "  published: z.boolean().optional(),",
            "  authorId: z.number().int(),",
            "})",
        ]) in text
        assert "export type PostCreateInput = z.infer<typeof PostCreateSchema>" in text

    def test_update_is_partial_create(
        self, post_model: ParsedModel, post_features: FeatureResolution
    ) -> None:
        text = _files(post_model, post_features)["post.update.zod.ts"]
        assert "import { PostCreateSchema } from './post.create.zod.js'" in text
        assert "export const PostUpdateSchema = PostCreateSchema.partial()" in text

    def test_list_field(self, config: GenerationConfig) -> None:
        model = ParsedModel.model_validate({
            "name": "Note",
            "fields": [
                {"name": "id", "type": "int", "is_id": True},
                {"name": "labels", "type": "string", "is_list": True},
            ],
        })
        text = _files(model, resolve_features(model, config))["note.create.zod.ts"]
        assert "  labels: z.array(z.string()).optional()," in text

    def test_native_enum(self, article_model: ParsedModel, config: GenerationConfig) -> None:
        files = _files(article_model, resolve_features(article_model, config))
        assert "import { ArticleStatus } from '@prisma/client'" in files["article.create.zod.ts"]
        assert "  status: z.nativeEnum(ArticleStatus)," in files["article.create.zod.ts"]

    def test_inline_enum_needs_no_import(self, config: GenerationConfig) -> None:
        model = ParsedModel.model_validate({
            "name": "Member",
            "fields": [
                {"name": "id", "type": "int", "is_id": True},
                {"name": "role", "type": "enum", "enum_name": "Role", "enum_values": ["A", "B"]},
            ],
        })
        text = _files(model, resolve_features(model, config))["member.create.zod.ts"]
        assert "@prisma/client" not in text
        assert "  role: z.enum(['A', 'B'])," in text


class TestQuerySchema:
    """Pagination bounds and coerced query-string filters."""

    def test_pagination_bounds(self, post_model: ParsedModel) -> None:
        features = resolve_features(
            post_model, GenerationConfig(default_page_size=10, max_page_size=50)
        )
        text = _files(post_model, features)["post.query.zod.ts"]
        assert "  skip: z.coerce.number().int().min(0).default(0)," in text
        assert "  take: z.coerce.number().int().min(1).max(50).default(10)," in text

    def test_where_filters(self, post_model: ParsedModel, post_features: FeatureResolution) -> None:
        text = _files(post_model, post_features)["post.query.zod.ts"]
        assert "      title: z\n        .object({\n          equals: z.string()," in text
        assert "          gt: z.coerce.number().int()," in text
        assert (
            "      published: z.enum(['true', 'false'])"
            ".transform((v) => v === 'true').optional(),"
        ) in text

    def test_order_include_select(
        self, post_model: ParsedModel, post_features: FeatureResolution
    ) -> None:
        text = _files(post_model, post_features)["post.query.zod.ts"]
        assert "const SortOrder = z.enum(['asc', 'desc'])" in text
        assert "      title: SortOrder.optional()," in text
        assert "      author: z.record(z.string(), SortOrder).optional()," in text
        assert "  include: z\n    .object({\n      author: BooleanParam.optional()," in text
        assert "      author: BooleanParam.optional()," in text.split("  select: z")[1]

    def test_no_include_without_relations(
        self, tag_model: ParsedModel, tag_features: FeatureResolution
    ) -> None:
        assert "include" not in _files(tag_model, tag_features)["tag.query.zod.ts"]


class TestBulkSchemas:
    """Array bounds and identifier schemas."""

    def test_post_bulk(self, post_model: ParsedModel) -> None:
        features = resolve_features(post_model, GenerationConfig(max_batch_size=25))
        text = _files(post_model, features)["post.bulk.zod.ts"]
        assert "export const BulkCreatePostSchema = z.array(PostCreateSchema).min(1).max(25)" in text
        assert "      id: z.number().int().nonnegative(),\n      data: PostUpdateSchema," in text
        assert "  ids: z.array(z.number().int().nonnegative()).min(1).max(25)," in text
        assert "export type BulkUpdatePostInput = z.infer<typeof BulkUpdatePostSchema>" in text

    @pytest.mark.parametrize(
        ("id_field_def", "expected"),
        [
            ({"type": "string", "default_function": "uuid"}, "z.string().uuid()"),
            ({"type": "string", "default_function": "cuid"}, "z.string().cuid()"),
            ({"type": "string"}, "z.string().min(1)"),
            ({"type": "bigint"}, "z.coerce.bigint()"),
        ],
    )
    def test_id_schema_per_type(
        self, id_field_def: dict, expected: str, config: GenerationConfig
    ) -> None:
        model = ParsedModel.model_validate({
            "name": "Item",
            "fields": [dict({"name": "id", "is_id": True}, **id_field_def), {"name": "x", "type": "int"}],
        })
        text = _files(model, resolve_features(model, config))["item.bulk.zod.ts"]
        assert f"  ids: z.array({expected})" in text
