# File: crudforge/generators/dto.py
"""
crudforge - DTO Generator
===========================
Emits the four data-transfer contracts of a model as TypeScript interfaces:

    <lower>.create.dto.ts   PostCreateDTO    createFields, optional-for-create
    <lower>.update.dto.ts   PostUpdateDTO    updateFields, all optional
    <lower>.read.dto.ts     PostReadDTO      readFields, optional iff nullable
    <lower>.query.dto.ts    PostQueryDTO     skip/take/orderBy/where/include/select
                            PostListResponse data + pagination meta

Where-filters are built from ``FILTER_OPERATORS``; a field whose type has
an empty operator set (and every list field) gets a bare equality filter.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Tuple

from crudforge.generators.base import BaseGenerator, TemplateBuilder
from crudforge.models import FieldType, GeneratorOutput, ParsedField
from crudforge.type_mapper import filter_operators, ts_type

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("crudforge.generators.dto")

SORT_ORDER: str = "'asc' | 'desc'"


def has_more(total: int, skip: int, take: int) -> bool:
    """Pagination rule shared by the ListResponse contract and the service."""
    return skip + take < total


class DTOGenerator(BaseGenerator):
    """Create / Update / Read / Query contracts for one model."""

    artifact_kind = "dto"

    # -- Names --------------------------------------------------------------

    @property
    def create_name(self) -> str:
        return f"{self.model_name}CreateDTO"

    @property
    def update_name(self) -> str:
        return f"{self.model_name}UpdateDTO"

    @property
    def read_name(self) -> str:
        return f"{self.model_name}ReadDTO"

    @property
    def query_name(self) -> str:
        return f"{self.model_name}QueryDTO"

    @property
    def list_response_name(self) -> str:
        return f"{self.model_name}ListResponse"

    # -- Entry point --------------------------------------------------------

    def generate(self) -> GeneratorOutput:
        files: Dict[str, str] = {}
        imports: List[str] = []

        for kind, builder in (
            ("create", self._create_dto),
            ("update", self._update_dto),
            ("read", self._read_dto),
            ("query", self._query_dto),
        ):
            text, file_imports = builder()
            files[self.file_name(f"{kind}.dto")] = text
            imports.extend(file_imports)

        exports: List[str] = [
            self.create_name,
            self.update_name,
            self.read_name,
            self.query_name,
            self.list_response_name,
        ]
        return self.build_output(files, imports, exports)

    # -- Contracts ----------------------------------------------------------

    def _create_dto(self) -> Tuple[str, List[str]]:
        fields: List[ParsedField] = self.model.create_fields
        body: List[str] = [
            self._property(f, optional=f.is_optional_for_create) for f in fields
        ]
        return self._interface_file(self.create_name, fields, body)

    def _update_dto(self) -> Tuple[str, List[str]]:
        fields: List[ParsedField] = self.model.update_fields
        body: List[str] = [self._property(f, optional=True) for f in fields]
        return self._interface_file(self.update_name, fields, body)

    def _read_dto(self) -> Tuple[str, List[str]]:
        fields: List[ParsedField] = self.model.read_fields
        body: List[str] = [self._property(f, optional=not f.is_required) for f in fields]
        return self._interface_file(self.read_name, fields, body)

    def _query_dto(self) -> Tuple[str, List[str]]:
        builder = TemplateBuilder()
        builder.imports(self._enum_imports(self.model.scalar_fields))
        builder.import_line(
            f"import type {{ {self.read_name} }} from './{self.file_name('read.dto', 'js')}'"
        )

        lines: List[str] = [f"export interface {self.query_name} {{"]
        lines.append("  skip?: number")
        lines.append("  take?: number")
        lines.extend(self._order_by_block())
        lines.extend(self._where_block())
        lines.extend(self._include_block())
        lines.extend(self._select_block())
        lines.append("}")

        response: List[str] = [
            f"export interface {self.list_response_name} {{",
            f"  data: {self.read_name}[]",
            "  meta: {",
            "    total: number",
            "    skip: number",
            "    take: number",
            "    hasMore: boolean",
            "  }",
            "}",
        ]
        builder.block("\n".join(lines))
        builder.block("\n".join(response))
        return builder.build(), builder.import_lines

    # -- Query pieces -------------------------------------------------------

    def _order_by_block(self) -> List[str]:
        lines: List[str] = ["  orderBy?: {"]
        for f in self.model.scalar_fields:
            lines.append(f"    {f.name}?: {SORT_ORDER}")
        for f in self.model.relation_fields:
            if f.is_list:
                lines.append(f"    {f.name}?: {{ _count?: {SORT_ORDER} }}")
            else:
                lines.append(f"    {f.name}?: Record<string, {SORT_ORDER}>")
        lines.append("  }")
        return lines

    def _where_block(self) -> List[str]:
        lines: List[str] = ["  where?: {"]
        for f in self.model.scalar_fields:
            value_type: str = ts_type(f, self.model_name)
            operators: Tuple[str, ...] = () if f.is_list else filter_operators(f)
            if not operators:
                lines.append(f"    {f.name}?: {value_type}")
                continue
            lines.append(f"    {f.name}?: {{")
            for op in operators:
                lines.append(f"      {op}?: {value_type}")
            lines.append("    }")
        lines.append("  }")
        return lines

    def _include_block(self) -> List[str]:
        if not self.model.relation_fields:
            return []
        lines: List[str] = ["  include?: {"]
        lines.extend(f"    {f.name}?: boolean" for f in self.model.relation_fields)
        lines.append("  }")
        return lines

    def _select_block(self) -> List[str]:
        lines: List[str] = ["  select?: {"]
        lines.extend(f"    {f.name}?: boolean" for f in self.model.fields)
        lines.append("  }")
        return lines

    # -- Helpers ------------------------------------------------------------

    def _property(self, field: ParsedField, optional: bool) -> str:
        value_type: str = ts_type(field, self.model_name)
        if not field.is_required:
            value_type = f"{value_type} | null"
        marker: str = "?" if optional else ""
        return f"  {field.name}{marker}: {value_type}"

    def _enum_imports(self, fields: List[ParsedField]) -> List[str]:
        used = {f.enum_name for f in fields if f.type == FieldType.ENUM}
        names: List[str] = [n for n in self.model.enum_types if n in used]
        if not names:
            return []
        return [f"import type {{ {', '.join(names)} }} from '@prisma/client'"]

    def _interface_file(
        self, name: str, fields: List[ParsedField], body: List[str]
    ) -> Tuple[str, List[str]]:
        enum_imports: List[str] = self._enum_imports(fields)
        builder = TemplateBuilder()
        builder.imports(enum_imports)
        if body:
            builder.block("\n".join([f"export interface {name} {{", *body, "}"]))
        else:
            builder.block(f"export type {name} = Record<string, never>")
        return builder.build(), enum_imports


__all__ = ["DTOGenerator", "has_more", "SORT_ORDER"]

logger.debug("crudforge.generators.dto loaded")
