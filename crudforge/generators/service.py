# File: crudforge/generators/service.py
"""
crudforge - Service Generator
===============================
Emits ``<lower>.service.ts``: a Prisma-backed persistence facade exported as
``<lower>Service``.

Always present:  list, findById, create, update, delete, count, exists
Slug field:      findBySlug
Published field: listPublished, publish, unpublish
Bulk enabled:    createMany, updateMany, deleteMany

``update``/``publish``/``unpublish`` resolve to ``null`` and ``delete`` to
``false`` when the record does not exist (Prisma error ``P2025``), which is
what lets the controller answer 404 instead of 500.

The export list carries the facade symbol plus one dotted
``<lower>Service.<method>`` entry per member.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List

from crudforge.generators.base import BaseGenerator, TemplateBuilder
from crudforge.models import GeneratorOutput
from crudforge.utils import indent_lines

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("crudforge.generators.service")

CORE_METHODS: List[str] = [
    "list",
    "findById",
    "create",
    "update",
    "delete",
    "count",
    "exists",
]
SLUG_METHODS: List[str] = ["findBySlug"]
PUBLISH_METHODS: List[str] = ["listPublished", "publish", "unpublish"]
BULK_METHODS: List[str] = ["createMany", "updateMany", "deleteMany"]

_NOT_FOUND_HELPER: str = "\n".join([
    "// Prisma raises P2025 when the record to update or delete does not exist.",
    "function isNotFound(error: unknown): boolean {",
    "  return (",
    "    typeof error === 'object' &&",
    "    error !== null &&",
    "    'code' in error &&",
    "    (error as { code?: unknown }).code === 'P2025'",
    "  )",
    "}",
])


class ServiceGenerator(BaseGenerator):
    """Persistence facade for one model."""

    artifact_kind = "service"

    @property
    def service_name(self) -> str:
        return f"{self.model_lower}Service"

    @property
    def delegate(self) -> str:
        """Prisma client delegate, e.g. ``prisma.blogPost``."""
        return f"prisma.{self.model_camel}"

    def method_names(self) -> List[str]:
        """Members of the emitted facade, in emission order."""
        names: List[str] = list(CORE_METHODS)
        if self.features.slug_methods:
            names.extend(SLUG_METHODS)
        if self.features.publish_methods:
            names.extend(PUBLISH_METHODS)
        if self.features.bulk_operations:
            names.extend(BULK_METHODS)
        return names

    # -- Entry point --------------------------------------------------------

    def generate(self) -> GeneratorOutput:
        builder = TemplateBuilder()
        builder.import_line("import type { Prisma } from '@prisma/client'")
        builder.import_line(f"import {{ prisma }} from '{self.alias}/db'")
        builder.import_line(
            "import type { "
            f"{self.model_name}CreateDTO, {self.model_name}UpdateDTO, "
            f"{self.model_name}QueryDTO, {self.model_name}ListResponse"
            f" }} from '{self.module_path('contracts')}'"
        )

        renderers: Dict[str, Callable[[], List[str]]] = {
            "list": self._list,
            "findById": self._find_by_id,
            "create": self._create,
            "update": self._update,
            "delete": self._delete,
            "count": self._count,
            "exists": self._exists,
            "findBySlug": self._find_by_slug,
            "listPublished": self._list_published,
            "publish": lambda: self._set_published("publish", True),
            "unpublish": lambda: self._set_published("unpublish", False),
            "createMany": self._create_many,
            "updateMany": self._update_many,
            "deleteMany": self._delete_many,
        }

        methods: List[str] = self.method_names()
        body: List[str] = [f"export const {self.service_name} = {{"]
        for index, name in enumerate(methods):
            if index:
                body.append("")
            body.extend(indent_lines(renderers[name]()))
        body.append("}")

        builder.block(_NOT_FOUND_HELPER)
        builder.block("\n".join(body))

        exports: List[str] = [self.service_name]
        exports.extend(f"{self.service_name}.{name}" for name in methods)
        files: Dict[str, str] = {self.file_name("service"): builder.build()}
        return self.build_output(files, builder.import_lines, exports)

    # -- Members ------------------------------------------------------------

    def _list(self) -> List[str]:
        include: List[str] = []
        if self.model.relation_fields:
            include = ["      include: query.include,"]
        return [
            f"async list(query: {self.model_name}QueryDTO = {{}}): "
            f"Promise<{self.model_name}ListResponse> {{",
            "  const skip = query.skip ?? 0",
            f"  const take = Math.min(query.take ?? {self.features.default_page_size}, "
            f"{self.features.max_page_size})",
            f"  const where = query.where as Prisma.{self.model_name}WhereInput | undefined",
            "  const [data, total] = await Promise.all([",
            f"    {self.delegate}.findMany({{",
            "      skip,",
            "      take,",
            "      where,",
            f"      orderBy: query.orderBy as Prisma.{self.model_name}OrderByWithRelationInput | undefined,",
            *include,
            "    }),",
            f"    {self.delegate}.count({{ where }}),",
            "  ])",
            "  return {",
            "    data,",
            "    meta: { total, skip, take, hasMore: skip + take < total },",
            "  }",
            "},",
        ]

    def _find_by_id(self) -> List[str]:
        return [
            f"async findById(id: {self.id_ts_type}) {{",
            f"  return {self.delegate}.findUnique({{ where: {{ {self.id_field}: id }} }})",
            "},",
        ]

    def _create(self) -> List[str]:
        return [
            f"async create(data: {self.model_name}CreateDTO) {{",
            f"  return {self.delegate}.create({{",
            f"    data: data as Prisma.{self.model_name}UncheckedCreateInput,",
            "  })",
            "},",
        ]

    def _update(self) -> List[str]:
        return [
            f"async update(id: {self.id_ts_type}, data: {self.model_name}UpdateDTO) {{",
            "  try {",
            f"    return await {self.delegate}.update({{",
            f"      where: {{ {self.id_field}: id }},",
            f"      data: data as Prisma.{self.model_name}UncheckedUpdateInput,",
            "    })",
            "  } catch (error) {",
            "    if (isNotFound(error)) return null",
            "    throw error",
            "  }",
            "},",
        ]

    def _delete(self) -> List[str]:
        return [
            f"async delete(id: {self.id_ts_type}): Promise<boolean> {{",
            "  try {",
            f"    await {self.delegate}.delete({{ where: {{ {self.id_field}: id }} }})",
            "    return true",
            "  } catch (error) {",
            "    if (isNotFound(error)) return false",
            "    throw error",
            "  }",
            "},",
        ]

    def _count(self) -> List[str]:
        return [
            f"async count(where?: {self.model_name}QueryDTO['where']): Promise<number> {{",
            f"  return {self.delegate}.count({{",
            f"    where: where as Prisma.{self.model_name}WhereInput | undefined,",
            "  })",
            "},",
        ]

    def _exists(self) -> List[str]:
        return [
            f"async exists(id: {self.id_ts_type}): Promise<boolean> {{",
            f"  const found = await {self.delegate}.findUnique({{",
            f"    where: {{ {self.id_field}: id }},",
            f"    select: {{ {self.id_field}: true }},",
            "  })",
            "  return found !== null",
            "},",
        ]

    def _find_by_slug(self) -> List[str]:
        slug: str = self.features.slug_field or "slug"
        field = self.model.get_field(slug)
        finder: str = "findUnique" if field is not None and field.is_unique else "findFirst"
        return [
            "async findBySlug(slug: string) {",
            f"  return {self.delegate}.{finder}({{ where: {{ {slug}: slug }} }})",
            "},",
        ]

    def _list_published(self) -> List[str]:
        published: str = self.features.published_field or "published"
        return [
            f"async listPublished(query: {self.model_name}QueryDTO = {{}}) {{",
            f"  return {self.service_name}.list({{",
            "    ...query,",
            f"    where: {{ ...query.where, {published}: true }},",
            "  })",
            "},",
        ]

    def _set_published(self, name: str, value: bool) -> List[str]:
        published: str = self.features.published_field or "published"
        flag: str = "true" if value else "false"
        return [
            f"async {name}(id: {self.id_ts_type}) {{",
            "  try {",
            f"    return await {self.delegate}.update({{",
            f"      where: {{ {self.id_field}: id }},",
            f"      data: {{ {published}: {flag} }},",
            "    })",
            "  } catch (error) {",
            "    if (isNotFound(error)) return null",
            "    throw error",
            "  }",
            "},",
        ]

    def _create_many(self) -> List[str]:
        return [
            f"async createMany(items: {self.model_name}CreateDTO[]) {{",
            f"  const result = await {self.delegate}.createMany({{",
            f"    data: items as Prisma.{self.model_name}CreateManyInput[],",
            "  })",
            "  return { count: result.count }",
            "},",
        ]

    def _update_many(self) -> List[str]:
        return [
            "async updateMany(",
            f"  items: Array<{{ id: {self.id_ts_type}; data: {self.model_name}UpdateDTO }}>,",
            ") {",
            "  const results = await prisma.$transaction(",
            "    items.map(({ id, data }) =>",
            f"      {self.delegate}.update({{",
            f"        where: {{ {self.id_field}: id }},",
            f"        data: data as Prisma.{self.model_name}UncheckedUpdateInput,",
            "      }),",
            "    ),",
            "  )",
            "  return { count: results.length }",
            "},",
        ]

    def _delete_many(self) -> List[str]:
        return [
            f"async deleteMany(ids: {self.id_ts_type}[]) {{",
            f"  const result = await {self.delegate}.deleteMany({{",
            f"    where: {{ {self.id_field}: {{ in: ids }} }},",
            "  })",
            "  return { count: result.count }",
            "},",
        ]


__all__ = [
    "ServiceGenerator",
    "CORE_METHODS",
    "SLUG_METHODS",
    "PUBLISH_METHODS",
    "BULK_METHODS",
]

logger.debug("crudforge.generators.service loaded")
