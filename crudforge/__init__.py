# File: crudforge/__init__.py
"""
crudforge - CRUD Layer Generator
==================================

Turns data-model documents (JSON/YAML) into a coordinated TypeScript CRUD
layer: DTO contracts, zod validators, Prisma services, controllers and
route registration, for express or fastify.

Architecture overview::

    ┌──────────────┐     ┌────────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│  CodeGenerator │────▶│    generators    │
    │   (cli.py)   │     │ (pipeline.py)  │     │   (generators/)  │
    └──────────────┘     └───────┬────────┘     └──────────────────┘
                                 │
                    ┌────────────┼────────────┐
                    ▼            ▼            ▼
             ┌──────────┐ ┌────────────┐ ┌───────────┐
             │ features │ │ strategies │ │ exporters │
             │  (.py)   │ │   (.py)    │ │   (.py)   │
             └──────────┘ └────────────┘ └───────────┘

Usage::

    # As a library
    from crudforge import CodeGenerator, GenerationConfig, ParsedModel
    files, errors = CodeGenerator().generate([model], GenerationConfig())

    # From the command line
    python -m crudforge --schema models.yaml --output ./src --verbose
"""

from __future__ import annotations

__version__: str = "0.1.0"
__author__: str = "Diegoproggramer"
__license__: str = "MIT"

from crudforge.errors import (
    ConfigurationError,
    GenerationError,
    TypeMappingError,
    ValidationError,
)
from crudforge.models import (
    FieldType,
    GenerationConfig,
    GeneratorOutput,
    IdStrategy,
    IdType,
    ParsedField,
    ParsedModel,
)
from crudforge.strategies import (
    ExpressStrategy,
    FastifyStrategy,
    FrameworkStrategy,
    get_strategy,
    register_strategy,
)
from crudforge.features import FeatureResolution, plan_endpoints, resolve_features
from crudforge.generators import (
    ControllerGenerator,
    DTOGenerator,
    RoutesGenerator,
    ServiceGenerator,
    ValidatorGenerator,
    build_barrel,
    collect_exports,
)
from crudforge.exporters import ExportManifest, ExportResult, ProjectExporter
from crudforge.pipeline import (
    CodeGenerator,
    GenerationReport,
    load_model_file,
    parse_raw_document,
)

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    "__version__",
    # Errors
    "GenerationError",
    "ConfigurationError",
    "TypeMappingError",
    "ValidationError",
    # Models
    "FieldType",
    "IdType",
    "IdStrategy",
    "ParsedField",
    "ParsedModel",
    "GenerationConfig",
    "GeneratorOutput",
    # Strategies
    "FrameworkStrategy",
    "ExpressStrategy",
    "FastifyStrategy",
    "get_strategy",
    "register_strategy",
    # Features
    "FeatureResolution",
    "resolve_features",
    "plan_endpoints",
    # Generators
    "DTOGenerator",
    "ValidatorGenerator",
    "ServiceGenerator",
    "ControllerGenerator",
    "RoutesGenerator",
    "build_barrel",
    "collect_exports",
    # Pipeline
    "CodeGenerator",
    "GenerationReport",
    "load_model_file",
    "parse_raw_document",
    "ProjectExporter",
    "ExportManifest",
    "ExportResult",
]
