# File: crudforge/generators/validator.py
"""
crudforge - Validator Generator
=================================
zod schemas whose accepted shapes mirror the DTO contracts.

    <lower>.create.zod.ts   PostCreateSchema   (+ PostCreateInput)
    <lower>.update.zod.ts   PostUpdateSchema   PostCreateSchema.partial()
    <lower>.query.zod.ts    PostQuerySchema    coerced query-string values
    <lower>.bulk.zod.ts     BulkCreate/BulkUpdate/BulkDeletePostSchema
                            only when bulk operations are enabled

The controller imports exactly these names, so the export list reported
here is what the consistency checks compare against.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Tuple

from crudforge.generators.base import BaseGenerator, TemplateBuilder
from crudforge.models import FieldType, GeneratorOutput, IdType, ParsedField
from crudforge.type_mapper import filter_operators, zod_base_type

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("crudforge.generators.validator")

ZOD_IMPORT: str = "import { z } from 'zod'"

# Identifier schemas for JSON bodies (bulk update / delete).
ID_BODY_SCHEMAS: Dict[IdType, str] = {
    IdType.NUMBER: "z.number().int().nonnegative()",
    IdType.BIGINT: "z.coerce.bigint()",
    IdType.UUID: "z.string().uuid()",
    IdType.CUID: "z.string().cuid()",
    IdType.STRING: "z.string().min(1)",
}

_BOOLEAN_PARAM: str = (
    "z.union([z.boolean(), z.enum(['true', 'false']).transform((v) => v === 'true')])"
)


class ValidatorGenerator(BaseGenerator):
    """zod request schemas for one model."""

    artifact_kind = "validator"

    # -- Names --------------------------------------------------------------

    @property
    def create_schema(self) -> str:
        return f"{self.model_name}CreateSchema"

    @property
    def update_schema(self) -> str:
        return f"{self.model_name}UpdateSchema"

    @property
    def query_schema(self) -> str:
        return f"{self.model_name}QuerySchema"

    @property
    def bulk_create_schema(self) -> str:
        return f"BulkCreate{self.model_name}Schema"

    @property
    def bulk_update_schema(self) -> str:
        return f"BulkUpdate{self.model_name}Schema"

    @property
    def bulk_delete_schema(self) -> str:
        return f"BulkDelete{self.model_name}Schema"

    def schema_names(self) -> List[str]:
        """Schema symbols the controller may import."""
        names: List[str] = [self.create_schema, self.update_schema, self.query_schema]
        if self.features.bulk_operations:
            names.extend([
                self.bulk_create_schema,
                self.bulk_update_schema,
                self.bulk_delete_schema,
            ])
        return names

    # -- Entry point --------------------------------------------------------

    def generate(self) -> GeneratorOutput:
        files: Dict[str, str] = {}
        imports: List[str] = []
        exports: List[str] = []

        parts: List[Tuple[str, Tuple[str, List[str], List[str]]]] = [
            ("create.zod", self._create_file()),
            ("update.zod", self._update_file()),
            ("query.zod", self._query_file()),
        ]
        if self.features.bulk_operations:
            parts.append(("bulk.zod", self._bulk_file()))

        for kind, (text, file_imports, file_exports) in parts:
            files[self.file_name(kind)] = text
            imports.extend(file_imports)
            exports.extend(file_exports)

        return self.build_output(files, imports, exports)

    # -- Files --------------------------------------------------------------

    def _create_file(self) -> Tuple[str, List[str], List[str]]:
        fields: List[ParsedField] = self.model.create_fields
        builder = TemplateBuilder()
        builder.import_line(ZOD_IMPORT)
        builder.imports(self._native_enum_imports(fields))

        lines: List[str] = [f"export const {self.create_schema} = z.object({{"]
        for f in fields:
            lines.append(f"  {f.name}: {self._body_schema(f)},")
        lines.append("})")
        input_type: str = f"{self.model_name}CreateInput"
        builder.block("\n".join(lines))
        builder.block(
            f"export type {input_type} = z.infer<typeof {self.create_schema}>"
        )
        return builder.build(), builder.import_lines, [self.create_schema, input_type]

    def _update_file(self) -> Tuple[str, List[str], List[str]]:
        builder = TemplateBuilder()
        builder.import_line(ZOD_IMPORT)
        builder.import_line(
            f"import {{ {self.create_schema} }} from "
            f"'./{self.file_name('create.zod', 'js')}'"
        )
        input_type: str = f"{self.model_name}UpdateInput"
        builder.block(
            "\n".join([
                "// Partial update: every field is optional.",
                f"export const {self.update_schema} = {self.create_schema}.partial()",
            ])
        )
        builder.block(
            f"export type {input_type} = z.infer<typeof {self.update_schema}>"
        )
        return builder.build(), builder.import_lines, [self.update_schema, input_type]

    def _query_file(self) -> Tuple[str, List[str], List[str]]:
        scalars: List[ParsedField] = self.model.scalar_fields
        relations: List[ParsedField] = self.model.relation_fields
        builder = TemplateBuilder()
        builder.import_line(ZOD_IMPORT)
        builder.imports(self._native_enum_imports(scalars))

        helpers: List[str] = [
            "const SortOrder = z.enum(['asc', 'desc'])",
            f"const BooleanParam = {_BOOLEAN_PARAM}",
        ]

        lines: List[str] = [f"export const {self.query_schema} = z.object({{"]
        lines.append("  skip: z.coerce.number().int().min(0).default(0),")
        lines.append(
            f"  take: z.coerce.number().int().min(1)"
            f".max({self.features.max_page_size})"
            f".default({self.features.default_page_size}),"
        )

        # orderBy
        lines.append("  orderBy: z")
        lines.append("    .object({")
        for f in scalars:
            lines.append(f"      {f.name}: SortOrder.optional(),")
        for f in relations:
            if f.is_list:
                lines.append(f"      {f.name}: z.object({{ _count: SortOrder }}).optional(),")
            else:
                lines.append(f"      {f.name}: z.record(z.string(), SortOrder).optional(),")
        lines.append("    })")
        lines.append("    .optional(),")

        # where
        lines.append("  where: z")
        lines.append("    .object({")
        for f in scalars:
            lines.extend(self._where_entry(f))
        lines.append("    })")
        lines.append("    .optional(),")

        # include / select
        if relations:
            lines.append("  include: z")
            lines.append("    .object({")
            for f in relations:
                lines.append(f"      {f.name}: BooleanParam.optional(),")
            lines.append("    })")
            lines.append("    .optional(),")
        lines.append("  select: z")
        lines.append("    .object({")
        for f in self.model.fields:
            lines.append(f"      {f.name}: BooleanParam.optional(),")
        lines.append("    })")
        lines.append("    .optional(),")
        lines.append("})")

        input_type: str = f"{self.model_name}QueryInput"
        builder.block("\n".join(helpers))
        builder.block("\n".join(lines))
        builder.block(
            f"export type {input_type} = z.infer<typeof {self.query_schema}>"
        )
        return builder.build(), builder.import_lines, [self.query_schema, input_type]

    def _bulk_file(self) -> Tuple[str, List[str], List[str]]:
        limit: int = self.features.max_batch_size
        id_schema: str = ID_BODY_SCHEMAS[self.id_type]
        builder = TemplateBuilder()
        builder.import_line(ZOD_IMPORT)
        builder.import_line(
            f"import {{ {self.create_schema} }} from "
            f"'./{self.file_name('create.zod', 'js')}'"
        )
        builder.import_line(
            f"import {{ {self.update_schema} }} from "
            f"'./{self.file_name('update.zod', 'js')}'"
        )

        builder.block(
            f"export const {self.bulk_create_schema} = "
            f"z.array({self.create_schema}).min(1).max({limit})"
        )
        builder.block(
            "\n".join([
                f"export const {self.bulk_update_schema} = z",
                "  .array(",
                "    z.object({",
                f"      id: {id_schema},",
                f"      data: {self.update_schema},",
                "    }),",
                "  )",
                "  .min(1)",
                f"  .max({limit})",
            ])
        )
        builder.block(
            "\n".join([
                f"export const {self.bulk_delete_schema} = z.object({{",
                f"  ids: z.array({id_schema}).min(1).max({limit}),",
                "})",
            ])
        )
        type_lines: List[str] = []
        exports: List[str] = [
            self.bulk_create_schema,
            self.bulk_update_schema,
            self.bulk_delete_schema,
        ]
        for schema in list(exports):
            input_type: str = schema.replace("Schema", "Input")
            type_lines.append(f"export type {input_type} = z.infer<typeof {schema}>")
            exports.append(input_type)
        builder.block("\n".join(type_lines))
        return builder.build(), builder.import_lines, exports

    # -- Helpers ------------------------------------------------------------

    def _body_schema(self, field: ParsedField) -> str:
        schema: str = zod_base_type(field, self.model_name)
        if field.is_list:
            schema = f"z.array({schema})"
        if not field.is_required:
            schema = f"{schema}.nullable()"
        if field.is_optional_for_create:
            schema = f"{schema}.optional()"
        return schema

    def _where_entry(self, field: ParsedField) -> List[str]:
        value: str = zod_base_type(field, self.model_name, query=True)
        if field.is_list:
            return [f"      {field.name}: z.array({value}).optional(),"]
        operators: Tuple[str, ...] = filter_operators(field)
        if not operators:
            return [f"      {field.name}: {value}.optional(),"]
        lines: List[str] = [f"      {field.name}: z"]
        lines.append("        .object({")
        for op in operators:
            lines.append(f"          {op}: {value},")
        lines.append("        })")
        lines.append("        .partial()")
        lines.append("        .optional(),")
        return lines

    def _native_enum_imports(self, fields: List[ParsedField]) -> List[str]:
        names: List[str] = []
        for f in fields:
            if (
                f.type == FieldType.ENUM
                and not f.enum_values
                and f.enum_name
                and f.enum_name not in names
            ):
                names.append(f.enum_name)
        if not names:
            return []
        return [f"import {{ {', '.join(names)} }} from '@prisma/client'"]


__all__ = ["ValidatorGenerator", "ID_BODY_SCHEMAS", "ZOD_IMPORT"]

logger.debug("crudforge.generators.validator loaded")
