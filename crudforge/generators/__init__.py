# File: crudforge/generators/__init__.py
"""
crudforge - Artifact Generators
=================================

Each generator takes one ``ParsedModel`` and the ``FeatureResolution``
computed for it, and returns a ``GeneratorOutput``.

    GENERATORS maps the output directory of an artifact kind to its class;
    the pipeline walks it in order.
"""

from __future__ import annotations

from typing import Dict, Type

from crudforge.generators.barrel import BARREL_FILE, build_barrel, collect_exports
from crudforge.generators.base import BaseGenerator, TemplateBuilder, assemble
from crudforge.generators.controller import ControllerGenerator
from crudforge.generators.dto import DTOGenerator, has_more
from crudforge.generators.routes import RoutesGenerator
from crudforge.generators.service import ServiceGenerator
from crudforge.generators.validator import ValidatorGenerator

GENERATORS: Dict[str, Type[BaseGenerator]] = {
    "contracts": DTOGenerator,
    "validators": ValidatorGenerator,
    "services": ServiceGenerator,
    "controllers": ControllerGenerator,
    "routes": RoutesGenerator,
}

__all__ = [
    "GENERATORS",
    "BARREL_FILE",
    "BaseGenerator",
    "TemplateBuilder",
    "assemble",
    "build_barrel",
    "collect_exports",
    "ControllerGenerator",
    "DTOGenerator",
    "RoutesGenerator",
    "ServiceGenerator",
    "ValidatorGenerator",
    "has_more",
]
