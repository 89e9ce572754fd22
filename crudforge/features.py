# File: crudforge/features.py
"""
crudforge - Feature Resolution
================================
Every optional piece of generated output (slug lookup, publish workflow,
bulk operations) is decided exactly once per (model, configuration) pair by
``resolve_features``.  The resulting ``FeatureResolution`` is handed by
reference to every generator for that model, so the validator, service,
controller and routes for one model can never disagree about which symbols
exist.

Gating rules:

    service / validator side         controller / routes side
    ------------------------         ------------------------------------
    slug_methods    = has slug       slug_endpoints    = slug_methods and domain
    publish_methods = has published  publish_endpoints = publish_methods and domain
    bulk_operations = config         bulk_operations   = config

Endpoints are a subset of methods by construction.

The endpoint plan (``plan_endpoints``) is also computed here, because the
controller and the routes file must agree on handler names.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from crudforge.errors import ConfigurationError, ValidationError
from crudforge.models import (
    DefaultFunction,
    FieldType,
    GenerationConfig,
    IdStrategy,
    IdType,
    ParsedField,
    ParsedModel,
)
from crudforge.strategies import FrameworkStrategy, get_strategy
from crudforge.utils import to_plural

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("crudforge.features")


# ---------------------------------------------------------------------------
# Identifier resolution
# ---------------------------------------------------------------------------

_NUMERIC_ID_TYPES: Tuple[FieldType, ...] = (
    FieldType.INT,
    FieldType.FLOAT,
    FieldType.DECIMAL,
)


def detect_id_type(model: ParsedModel) -> IdType:
    """
    Infer the identifier type from the model's single id field.

    Raises:
        ConfigurationError: The model declares a composite key.
        ValidationError: The model has no id field, or its type cannot
            be used as an identifier.
    """
    if model.has_composite_id:
        names: List[str] = [f.name for f in model.id_fields] or list(model.primary_key)
        raise ConfigurationError(
            f"Composite primary keys are not supported ({', '.join(names)}). "
            "Add a single surrogate id field to the model.",
            model_name=model.name,
        )
    id_field: Optional[ParsedField] = model.id_field
    if id_field is None:
        raise ValidationError("Model has no identifier field.", model_name=model.name)

    if id_field.type in _NUMERIC_ID_TYPES:
        return IdType.NUMBER
    if id_field.type == FieldType.BIGINT:
        return IdType.BIGINT
    if id_field.type == FieldType.STRING:
        if id_field.default_function == DefaultFunction.UUID:
            return IdType.UUID
        if id_field.default_function == DefaultFunction.CUID:
            return IdType.CUID
        return IdType.STRING
    raise ValidationError(
        f"Identifier field '{id_field.name}' has unsupported type "
        f"'{id_field.type.value}'.",
        model_name=model.name,
    )


def resolve_id_type(model: ParsedModel, config: GenerationConfig) -> IdType:
    """Detected identifier type, or the configured override."""
    detected: IdType = detect_id_type(model)
    if config.id_strategy is None:
        return detected
    if config.id_strategy == IdStrategy.COMPOSITE:
        raise ConfigurationError(
            "id_strategy 'composite' is not supported.", model_name=model.name
        )
    return IdType(config.id_strategy.value)


# ---------------------------------------------------------------------------
# Feature resolution
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FeatureResolution:
    """Resolved switches for one (model, configuration) pair."""

    model_name: str
    strategy: FrameworkStrategy
    id_type: IdType
    id_field: str
    slug_field: Optional[str]
    published_field: Optional[str]
    domain_methods: bool
    bulk_operations: bool
    max_batch_size: int
    default_page_size: int
    max_page_size: int
    sanitize_error_messages: bool
    import_alias: str

    @property
    def framework(self) -> str:
        return self.strategy.name

    @property
    def slug_methods(self) -> bool:
        return self.slug_field is not None

    @property
    def publish_methods(self) -> bool:
        return self.published_field is not None

    @property
    def slug_endpoints(self) -> bool:
        return self.slug_methods and self.domain_methods

    @property
    def publish_endpoints(self) -> bool:
        return self.publish_methods and self.domain_methods


def resolve_features(model: ParsedModel, config: GenerationConfig) -> FeatureResolution:
    """
    Compute the single ``FeatureResolution`` for *model* under *config*.

    Raises:
        ConfigurationError: Unknown framework or composite identifiers.
        ValidationError: No usable identifier field.
    """
    strategy: FrameworkStrategy = get_strategy(config.framework)
    id_type: IdType = resolve_id_type(model, config)
    id_field: ParsedField = model.id_field  # type: ignore[assignment]

    features = FeatureResolution(
        model_name=model.name,
        strategy=strategy,
        id_type=id_type,
        id_field=id_field.name,
        slug_field=model.slug_field,
        published_field=model.published_field,
        domain_methods=config.enable_domain_methods,
        bulk_operations=config.enable_bulk_operations,
        max_batch_size=config.max_batch_size,
        default_page_size=config.default_page_size,
        max_page_size=config.max_page_size,
        sanitize_error_messages=config.sanitize_error_messages,
        import_alias=config.import_alias,
    )
    logger.debug(
        "Resolved features for %s: framework=%s id=%s slug=%s published=%s "
        "domain=%s bulk=%s",
        model.name,
        features.framework,
        id_type.value,
        features.slug_methods,
        features.publish_methods,
        features.domain_methods,
        features.bulk_operations,
    )
    return features


# ---------------------------------------------------------------------------
# Endpoint plan
# ---------------------------------------------------------------------------


class EndpointKind(str, Enum):
    LIST = "list"
    GET = "get"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    COUNT = "count"
    GET_BY_SLUG = "get_by_slug"
    LIST_PUBLISHED = "list_published"
    PUBLISH = "publish"
    UNPUBLISH = "unpublish"
    BULK_CREATE = "bulk_create"
    BULK_UPDATE = "bulk_update"
    BULK_DELETE = "bulk_delete"


@dataclass(frozen=True, slots=True)
class EndpointSpec:
    """One controller handler and the routes that reach it."""

    kind: EndpointKind
    handler: str
    service_method: str
    methods: Tuple[str, ...]
    path: str

    @property
    def has_id_param(self) -> bool:
        return ":id" in self.path


def plan_endpoints(model_name: str, features: FeatureResolution) -> List[EndpointSpec]:
    """Ordered handler plan: CRUD first, then domain, then bulk endpoints."""
    plural: str = to_plural(model_name)
    plan: List[EndpointSpec] = [
        EndpointSpec(EndpointKind.LIST, f"list{plural}", "list", ("get",), "/"),
        EndpointSpec(EndpointKind.GET, f"get{model_name}", "findById", ("get",), "/:id"),
        EndpointSpec(EndpointKind.CREATE, f"create{model_name}", "create", ("post",), "/"),
        EndpointSpec(
            EndpointKind.UPDATE, f"update{model_name}", "update", ("put", "patch"), "/:id"
        ),
        EndpointSpec(EndpointKind.DELETE, f"delete{model_name}", "delete", ("delete",), "/:id"),
        EndpointSpec(EndpointKind.COUNT, f"count{plural}", "count", ("get",), "/meta/count"),
    ]

    if features.slug_endpoints:
        plan.append(
            EndpointSpec(
                EndpointKind.GET_BY_SLUG,
                f"get{model_name}BySlug",
                "findBySlug",
                ("get",),
                "/slug/:slug",
            )
        )
    if features.publish_endpoints:
        plan.extend([
            EndpointSpec(
                EndpointKind.LIST_PUBLISHED,
                f"listPublished{plural}",
                "listPublished",
                ("get",),
                "/published",
            ),
            EndpointSpec(
                EndpointKind.PUBLISH, f"publish{model_name}", "publish", ("post",), "/:id/publish"
            ),
            EndpointSpec(
                EndpointKind.UNPUBLISH,
                f"unpublish{model_name}",
                "unpublish",
                ("post",),
                "/:id/unpublish",
            ),
        ])
    if features.bulk_operations:
        plan.extend([
            EndpointSpec(
                EndpointKind.BULK_CREATE, f"bulkCreate{plural}", "createMany", ("post",), "/bulk"
            ),
            EndpointSpec(
                EndpointKind.BULK_UPDATE, f"bulkUpdate{plural}", "updateMany", ("put",), "/bulk"
            ),
            EndpointSpec(
                EndpointKind.BULK_DELETE,
                f"bulkDelete{plural}",
                "deleteMany",
                ("post",),
                "/bulk/delete",
            ),
        ])
    return plan


def route_order(plan: List[EndpointSpec]) -> List[EndpointSpec]:
    """Plan reordered so static paths register before parameterised ones."""
    return sorted(plan, key=lambda ep: ":" in ep.path)


__all__ = [
    "detect_id_type",
    "resolve_id_type",
    "FeatureResolution",
    "resolve_features",
    "EndpointKind",
    "EndpointSpec",
    "plan_endpoints",
    "route_order",
]

logger.debug("crudforge.features loaded")
