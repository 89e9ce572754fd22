# File: crudforge/generators/controller.py
"""
crudforge - Controller Generator
==================================
Emits ``<lower>.controller.ts`` with one exported request handler per entry
of the endpoint plan (see ``crudforge.features.plan_endpoints``).

Every handler has the same shape::

    <signature> {
      try {
        [parse id param  -> 400 on failure, before any service call]
        [parse body/query with the zod schema; ZodError -> 400 + details]
        <call service>
        [absent result   -> 404]
        <success response>
      } catch (error) {
        return handleError(error, <response>, '<context>')
      }
    }

Request access and response statements come exclusively from the
``FrameworkStrategy``; nothing in here knows which backend it targets.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from crudforge.features import (
    EndpointKind,
    EndpointSpec,
    FeatureResolution,
    plan_endpoints,
)
from crudforge.generators.base import BaseGenerator, TemplateBuilder
from crudforge.generators.validator import ValidatorGenerator
from crudforge.models import GeneratorOutput, IdType, ParsedModel
from crudforge.utils import indent_lines, ts_string

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("crudforge.generators.controller")

ID_PARAMS_SHAPE: str = "{ id: string }"
SLUG_PARAMS_SHAPE: str = "{ slug: string }"

_UUID_PATTERN: str = (
    "/^[0-9a-f]{8}-[0-9a-f]{4}-[1-8][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$/i"
)
_CUID_PATTERN: str = "/^c[a-z0-9]{20,32}$/"

_ID_EXPECTATIONS: Dict[IdType, str] = {
    IdType.NUMBER: "expected a non-negative integer",
    IdType.BIGINT: "expected a non-negative integer",
    IdType.UUID: "expected a UUID",
    IdType.CUID: "expected a CUID",
    IdType.STRING: "expected a non-empty string",
}


class ControllerGenerator(BaseGenerator):
    """Request handlers for one model."""

    artifact_kind = "controller"

    def __init__(self, model: ParsedModel, features: FeatureResolution) -> None:
        super().__init__(model, features)
        self.endpoints: List[EndpointSpec] = plan_endpoints(self.model_name, self.features)
        self._schemas = ValidatorGenerator(self.model, self.features)

    # -- Introspection ------------------------------------------------------

    def handler_names(self) -> List[str]:
        return [ep.handler for ep in self.endpoints]

    def referenced_service_methods(self) -> List[str]:
        """Service members called by the emitted handlers."""
        return [ep.service_method for ep in self.endpoints]

    def referenced_schemas(self) -> List[str]:
        kinds = {ep.kind for ep in self.endpoints}
        names: List[str] = []
        if kinds & {EndpointKind.LIST, EndpointKind.LIST_PUBLISHED}:
            names.append(self._schemas.query_schema)
        if EndpointKind.CREATE in kinds:
            names.append(self._schemas.create_schema)
        if EndpointKind.UPDATE in kinds:
            names.append(self._schemas.update_schema)
        if EndpointKind.BULK_CREATE in kinds:
            names.append(self._schemas.bulk_create_schema)
        if EndpointKind.BULK_UPDATE in kinds:
            names.append(self._schemas.bulk_update_schema)
        if EndpointKind.BULK_DELETE in kinds:
            names.append(self._schemas.bulk_delete_schema)
        return names

    # -- Entry point --------------------------------------------------------

    def generate(self) -> GeneratorOutput:
        builder = TemplateBuilder()
        builder.imports(self.strategy.get_imports(self.model_lower, self.alias))
        builder.import_line("import { ZodError } from 'zod'")
        builder.import_line(f"import {{ logger }} from '{self.alias}/logger'")
        builder.import_line(
            f"import {{ {', '.join(self.referenced_schemas())} }} "
            f"from '{self.module_path('validators')}'"
        )

        builder.block(self._id_parser())
        builder.block(self._error_handler())

        renderers: Dict[EndpointKind, Callable[[EndpointSpec], str]] = {
            EndpointKind.LIST: self._list_handler,
            EndpointKind.GET: self._get_handler,
            EndpointKind.CREATE: self._create_handler,
            EndpointKind.UPDATE: self._update_handler,
            EndpointKind.DELETE: self._delete_handler,
            EndpointKind.COUNT: self._count_handler,
            EndpointKind.GET_BY_SLUG: self._slug_handler,
            EndpointKind.LIST_PUBLISHED: self._list_handler,
            EndpointKind.PUBLISH: self._publish_handler,
            EndpointKind.UNPUBLISH: self._publish_handler,
            EndpointKind.BULK_CREATE: self._bulk_create_handler,
            EndpointKind.BULK_UPDATE: self._bulk_update_handler,
            EndpointKind.BULK_DELETE: self._bulk_delete_handler,
        }
        for ep in self.endpoints:
            builder.block(renderers[ep.kind](ep))

        files: Dict[str, str] = {self.file_name("controller"): builder.build()}
        return self.build_output(files, builder.import_lines, self.handler_names())

    # -- Shared helpers (emitted) -------------------------------------------

    def _id_error(self) -> str:
        expectation: str = _ID_EXPECTATIONS[self.id_type]
        if self.features.sanitize_error_messages:
            return ts_string(f"Invalid id: {expectation}")
        return f"`Invalid id '${{raw}}': {expectation}`"

    def _id_parser(self) -> str:
        invalid: str = f"return {{ valid: false, error: {self._id_error()} }}"
        lines: List[str] = [
            "type IdParseResult =",
            f"  | {{ valid: true; id: {self.id_ts_type} }}",
            "  | { valid: false; error: string }",
            "",
        ]
        if self.id_type == IdType.UUID:
            lines.extend([f"const UUID_PATTERN = {_UUID_PATTERN}", ""])
        elif self.id_type == IdType.CUID:
            lines.extend([f"const CUID_PATTERN = {_CUID_PATTERN}", ""])

        lines.append("function parseIdParam(raw: string): IdParseResult {")
        if self.id_type == IdType.NUMBER:
            lines.extend([
                "  if (!/^\\d+$/.test(raw)) {",
                f"    {invalid}",
                "  }",
                "  const id = parseInt(raw, 10)",
                "  if (Number.isNaN(id) || !Number.isSafeInteger(id)) {",
                f"    {invalid}",
                "  }",
                "  return { valid: true, id }",
            ])
        elif self.id_type == IdType.BIGINT:
            lines.extend([
                "  if (!/^\\d+$/.test(raw)) {",
                f"    {invalid}",
                "  }",
                "  return { valid: true, id: BigInt(raw) }",
            ])
        elif self.id_type in (IdType.UUID, IdType.CUID):
            pattern: str = "UUID_PATTERN" if self.id_type == IdType.UUID else "CUID_PATTERN"
            lines.extend([
                f"  if (!{pattern}.test(raw)) {{",
                f"    {invalid}",
                "  }",
                "  return { valid: true, id: raw }",
            ])
        else:
            lines.extend([
                "  const id = raw.trim()",
                "  if (!id) {",
                f"    {invalid}",
                "  }",
                "  return { valid: true, id }",
            ])
        lines.append("}")
        return "\n".join(lines)

    def _error_handler(self) -> str:
        s = self.strategy
        return "\n".join([
            f"function handleError(error: unknown, {s.response_parameter()}, context: string) {{",
            "  if (error instanceof ZodError) {",
            "    "
            + s.generate_status_response(
                400, "{ error: 'Validation Error', details: error.issues }"
            ),
            "  }",
            "  logger.error({ err: error }, `Error ${context}`)",
            "  " + s.generate_status_response(500, "{ error: 'Internal Server Error' }"),
            "}",
        ])

    # -- Handler skeleton ---------------------------------------------------

    def _handler(
        self,
        ep: EndpointSpec,
        body: List[str],
        context: str,
        params_shape: Optional[str] = None,
    ) -> str:
        s = self.strategy
        if params_shape is None and ep.has_id_param:
            params_shape = ID_PARAMS_SHAPE
        lines: List[str] = [
            f"{s.generate_handler_signature(ep.handler, params_shape)} {{",
            "  try {",
        ]
        lines.extend(indent_lines(body, level=2))
        lines.extend([
            "  } catch (error) {",
            f"    return handleError(error, {s.response_var}, {ts_string(context)})",
            "  }",
            "}",
        ])
        return "\n".join(lines)

    def _parse_id(self) -> List[str]:
        s = self.strategy
        return [
            f"const idResult = parseIdParam({s.get_request_param('id')})",
            "if (!idResult.valid) {",
            f"  {s.generate_status_response(400, '{ error: idResult.error }')}",
            "}",
        ]

    def _not_found(self, variable: str) -> List[str]:
        message: str = ts_string(f"{self.model_name} not found")
        return [
            f"if (!{variable}) {{",
            f"  {self.strategy.generate_status_response(404, f'{{ error: {message} }}')}",
            "}",
        ]

    def _call(self, ep: EndpointSpec, args: str) -> str:
        return f"await {self.model_lower}Service.{ep.service_method}({args})"

    # -- Handlers -----------------------------------------------------------

    def _list_handler(self, ep: EndpointSpec) -> str:
        s = self.strategy
        body: List[str] = [
            f"const query = {self._schemas.query_schema}.parse({s.get_request_query()})",
            f"const result = {self._call(ep, 'query')}",
            s.generate_json_response("result"),
        ]
        label: str = (
            f"listing published {self.model_plural}"
            if ep.kind == EndpointKind.LIST_PUBLISHED
            else f"listing {self.model_plural}"
        )
        return self._handler(ep, body, label)

    def _get_handler(self, ep: EndpointSpec) -> str:
        body: List[str] = self._parse_id()
        body.append(f"const item = {self._call(ep, 'idResult.id')}")
        body.extend(self._not_found("item"))
        body.append(self.strategy.generate_json_response("item"))
        return self._handler(ep, body, f"getting {self.model_name}")

    def _create_handler(self, ep: EndpointSpec) -> str:
        s = self.strategy
        body: List[str] = [
            f"const data = {self._schemas.create_schema}.parse({s.get_request_body()})",
            f"const item = {self._call(ep, 'data')}",
            s.generate_status_response(201, "item"),
        ]
        return self._handler(ep, body, f"creating {self.model_name}")

    def _update_handler(self, ep: EndpointSpec) -> str:
        s = self.strategy
        body: List[str] = self._parse_id()
        body.append(
            f"const data = {self._schemas.update_schema}.parse({s.get_request_body()})"
        )
        body.append(f"const item = {self._call(ep, 'idResult.id, data')}")
        body.extend(self._not_found("item"))
        body.append(s.generate_json_response("item"))
        return self._handler(ep, body, f"updating {self.model_name}")

    def _delete_handler(self, ep: EndpointSpec) -> str:
        body: List[str] = self._parse_id()
        body.append(f"const deleted = {self._call(ep, 'idResult.id')}")
        body.extend(self._not_found("deleted"))
        body.append(self.strategy.generate_status_response(204))
        return self._handler(ep, body, f"deleting {self.model_name}")

    def _count_handler(self, ep: EndpointSpec) -> str:
        body: List[str] = [
            f"const total = {self._call(ep, '')}",
            self.strategy.generate_json_response("{ total }"),
        ]
        return self._handler(ep, body, f"counting {self.model_plural}")

    def _slug_handler(self, ep: EndpointSpec) -> str:
        body: List[str] = [
            f"const item = {self._call(ep, self.strategy.get_request_param('slug'))}",
        ]
        body.extend(self._not_found("item"))
        body.append(self.strategy.generate_json_response("item"))
        return self._handler(
            ep, body, f"getting {self.model_name} by slug", SLUG_PARAMS_SHAPE
        )

    def _publish_handler(self, ep: EndpointSpec) -> str:
        body: List[str] = self._parse_id()
        body.append(f"const item = {self._call(ep, 'idResult.id')}")
        body.extend(self._not_found("item"))
        body.append(self.strategy.generate_json_response("item"))
        verb: str = "publishing" if ep.kind == EndpointKind.PUBLISH else "unpublishing"
        return self._handler(ep, body, f"{verb} {self.model_name}")

    def _bulk_create_handler(self, ep: EndpointSpec) -> str:
        s = self.strategy
        body: List[str] = [
            f"const items = {self._schemas.bulk_create_schema}.parse({s.get_request_body()})",
            f"const result = {self._call(ep, 'items')}",
            s.generate_status_response(201, "result"),
        ]
        return self._handler(ep, body, f"bulk creating {self.model_plural}")

    def _bulk_update_handler(self, ep: EndpointSpec) -> str:
        s = self.strategy
        body: List[str] = [
            f"const items = {self._schemas.bulk_update_schema}.parse({s.get_request_body()})",
            f"const result = {self._call(ep, 'items')}",
            s.generate_json_response("result"),
        ]
        return self._handler(ep, body, f"bulk updating {self.model_plural}")

    def _bulk_delete_handler(self, ep: EndpointSpec) -> str:
        s = self.strategy
        body: List[str] = [
            f"const {{ ids }} = {self._schemas.bulk_delete_schema}.parse({s.get_request_body()})",
            f"const result = {self._call(ep, 'ids')}",
            s.generate_json_response("result"),
        ]
        return self._handler(ep, body, f"bulk deleting {self.model_plural}")


__all__ = ["ControllerGenerator", "ID_PARAMS_SHAPE", "SLUG_PARAMS_SHAPE"]

logger.debug("crudforge.generators.controller loaded")
