# File: crudforge/generators/routes.py
"""
crudforge - Routes Generator
==============================
Emits ``<lower>.routes.ts`` registering every planned endpoint through the
strategy.  Static paths are registered before parameterised ones so that
``/meta/count`` or ``/bulk`` are never swallowed by ``/:id``.
"""

from __future__ import annotations

import logging
from typing import Dict, List

from crudforge.features import EndpointSpec, plan_endpoints, route_order
from crudforge.generators.base import BaseGenerator, TemplateBuilder
from crudforge.models import GeneratorOutput
from crudforge.utils import to_kebab_case

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("crudforge.generators.routes")


class RoutesGenerator(BaseGenerator):
    artifact_kind = "routes"

    def routes(self) -> List[EndpointSpec]:
        return route_order(plan_endpoints(self.model_name, self.features))

    def generate(self) -> GeneratorOutput:
        s = self.strategy
        builder = TemplateBuilder()
        builder.imports(s.get_router_imports(self.model_lower, self.alias))

        lines: List[str] = [
            f"// Mount under /{to_kebab_case(self.model_plural)}",
            s.generate_router_open(self.model_lower),
        ]
        for ep in self.routes():
            for method in ep.methods:
                lines.append(s.generate_route(self.model_lower, method, ep.path, ep.handler))
        close: str = s.generate_router_close()
        if close:
            lines.append(close)
        builder.block("\n".join(lines))

        router: str = s.router_name(self.model_lower)
        files: Dict[str, str] = {self.file_name("routes"): builder.build()}
        return self.build_output(files, builder.import_lines, [router])


__all__ = ["RoutesGenerator"]

logger.debug("crudforge.generators.routes loaded")
