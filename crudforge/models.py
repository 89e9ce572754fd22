# File: crudforge/models.py
"""
crudforge - Core Data Models
==============================
Pydantic V2 models describing the data models we generate for and the
generation settings.  These models are the single source of truth for the
whole pipeline:

    Model Document → ParsedModel → FeatureResolution → Generators → Export

Every model here is frozen.  Partitions (create / update / read fields) and
derived flags (slug, published) are recomputed from ``fields`` on access,
so they can never drift out of sync with the field list.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("crudforge.models")

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class FieldType(str, Enum):
    """Abstract field types understood by every generator."""

    STRING = "string"
    INT = "int"
    BIGINT = "bigint"
    FLOAT = "float"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    JSON = "json"
    BYTES = "bytes"
    ENUM = "enum"
    RELATION = "relation"
    UNSUPPORTED = "unsupported"


class IdType(str, Enum):
    """How a primary-key value is represented and parsed from a request."""

    NUMBER = "number"
    BIGINT = "bigint"
    UUID = "uuid"
    CUID = "cuid"
    STRING = "string"


class IdStrategy(str, Enum):
    """Identifier override accepted in configuration."""

    NUMBER = "number"
    BIGINT = "bigint"
    UUID = "uuid"
    CUID = "cuid"
    STRING = "string"
    COMPOSITE = "composite"


class DefaultFunction(str, Enum):
    """Default value functions evaluated by the database."""

    AUTOINCREMENT = "autoincrement"
    UUID = "uuid"
    CUID = "cuid"
    NOW = "now"
    DBGENERATED = "dbgenerated"


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SYSTEM_TIMESTAMP_FIELDS: Tuple[str, ...] = ("createdAt", "updatedAt")

_SLUG_NAME_RE: re.Pattern[str] = re.compile(r"^slug$")
_PUBLISHED_NAME_RE: re.Pattern[str] = re.compile(r"^(is)?published$")
_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _normalize_name(name: str) -> str:
    """Lower-case and strip separators: ``is_published`` -> ``ispublished``."""
    return name.replace("_", "").replace("-", "").lower()


# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    frozen=True,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Fields & models
# ---------------------------------------------------------------------------


class ParsedField(BaseModel):
    """
    A single field of a data model.

    Scalar, enum and relation fields share this shape; ``type`` decides
    which optional attributes are meaningful.
    """

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Field identifier.")
    type: FieldType = Field(..., description="Abstract field type.")
    is_required: bool = Field(default=True, description="Non-nullable field.")
    is_read_only: bool = Field(
        default=False, description="Computed field, never written by clients."
    )
    is_updated_at: bool = Field(
        default=False, description="Maintained by the ORM on every update."
    )
    is_id: bool = Field(default=False, description="Primary key field.")
    is_list: bool = Field(default=False, description="Array valued field.")
    is_unique: bool = Field(default=False, description="Unique constraint.")
    default: Optional[Any] = Field(
        default=None, description="Literal default value."
    )
    default_function: Optional[DefaultFunction] = Field(
        default=None, description="Database evaluated default function."
    )
    enum_name: Optional[str] = Field(
        default=None, description="Enum type name (enum fields only)."
    )
    enum_values: List[str] = Field(
        default_factory=list, description="Enum members (enum fields only)."
    )
    relation_target: Optional[str] = Field(
        default=None, description="Target model name (relation fields only)."
    )
    relation_from_fields: List[str] = Field(
        default_factory=list, description="Foreign key fields backing a relation."
    )
    documentation: Optional[str] = Field(default=None, description="Field doc.")

    # -- Derived helpers ----------------------------------------------------

    @computed_field  # type: ignore[misc]
    @property
    def has_default(self) -> bool:
        return self.default is not None or self.default_function is not None

    @computed_field  # type: ignore[misc]
    @property
    def has_db_default(self) -> bool:
        return self.default_function is not None

    @computed_field  # type: ignore[misc]
    @property
    def is_relation(self) -> bool:
        return self.type == FieldType.RELATION

    @computed_field  # type: ignore[misc]
    @property
    def is_scalar(self) -> bool:
        """Everything but relations; unsupported types count as scalar."""
        return self.type != FieldType.RELATION

    @computed_field  # type: ignore[misc]
    @property
    def is_optional_for_create(self) -> bool:
        """May be omitted when creating: nullable, defaulted, list or ORM-managed."""
        return (
            not self.is_required
            or self.has_default
            or self.is_list
            or self.is_updated_at
        )

    @property
    def is_db_managed_timestamp(self) -> bool:
        return self.has_db_default and self.name in SYSTEM_TIMESTAMP_FIELDS

    # -- Validators ---------------------------------------------------------

    @field_validator("name")
    @classmethod
    def _valid_identifier(cls, v: str) -> str:
        if not _IDENTIFIER_RE.match(v):
            raise ValueError(f"Field name '{v}' is not a valid identifier.")
        return v

    @model_validator(mode="after")
    def _validate_enum_has_name(self) -> "ParsedField":
        if self.type == FieldType.ENUM and not self.enum_name:
            raise ValueError(
                f"Field '{self.name}' is of type ENUM but 'enum_name' is missing."
            )
        return self

    @model_validator(mode="after")
    def _validate_relation_has_target(self) -> "ParsedField":
        if self.type == FieldType.RELATION and not self.relation_target:
            raise ValueError(
                f"Field '{self.name}' is a RELATION but 'relation_target' is missing."
            )
        return self

    def __repr__(self) -> str:
        req: str = "" if self.is_required else "?"
        lst: str = "[]" if self.is_list else ""
        pk: str = " @id" if self.is_id else ""
        return f"<Field {self.name} {self.type.value}{lst}{req}{pk}>"


class ParsedModel(BaseModel):
    """
    A data model: named, ordered collection of fields.

    All partitions are views over ``fields`` in declaration order.
    """

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Model name (PascalCase).")
    fields: List[ParsedField] = Field(
        ..., min_length=1, description="Ordered field list."
    )
    primary_key: List[str] = Field(
        default_factory=list,
        description="Explicit compound primary key (@@id), if any.",
    )
    documentation: Optional[str] = Field(default=None, description="Model doc.")

    # -- Partitions ---------------------------------------------------------

    @property
    def scalar_fields(self) -> List[ParsedField]:
        return [f for f in self.fields if f.is_scalar]

    @property
    def relation_fields(self) -> List[ParsedField]:
        return [f for f in self.fields if f.is_relation]

    @property
    def create_fields(self) -> List[ParsedField]:
        """Client-writable scalar fields."""
        id_names = {f.name for f in self.id_fields}
        return [
            f
            for f in self.scalar_fields
            if not f.is_id
            and f.name not in id_names
            and not f.is_read_only
            and not f.is_updated_at
            and not f.is_db_managed_timestamp
        ]

    @property
    def update_fields(self) -> List[ParsedField]:
        return self.create_fields

    @property
    def read_fields(self) -> List[ParsedField]:
        return self.scalar_fields

    # -- Identifier ---------------------------------------------------------

    @property
    def id_fields(self) -> List[ParsedField]:
        if self.primary_key:
            by_name: Dict[str, ParsedField] = {f.name: f for f in self.fields}
            return [by_name[n] for n in self.primary_key if n in by_name]
        return [f for f in self.fields if f.is_id]

    @property
    def has_composite_id(self) -> bool:
        return len(self.primary_key) > 1 or len(self.id_fields) > 1

    @property
    def id_field(self) -> Optional[ParsedField]:
        ids: List[ParsedField] = self.id_fields
        return ids[0] if len(ids) == 1 else None

    # -- Derived flags --------------------------------------------------------

    @property
    def slug_field(self) -> Optional[str]:
        for f in self.fields:
            if f.type == FieldType.STRING and _SLUG_NAME_RE.match(
                _normalize_name(f.name)
            ):
                return f.name
        return None

    @property
    def published_field(self) -> Optional[str]:
        for f in self.fields:
            if f.type == FieldType.BOOLEAN and _PUBLISHED_NAME_RE.match(
                _normalize_name(f.name)
            ):
                return f.name
        return None

    @computed_field  # type: ignore[misc]
    @property
    def has_slug_field(self) -> bool:
        return self.slug_field is not None

    @computed_field  # type: ignore[misc]
    @property
    def has_published_field(self) -> bool:
        return self.published_field is not None

    @property
    def enum_types(self) -> List[str]:
        """Enum type names referenced by scalar fields, first-seen order."""
        seen: Dict[str, None] = {}
        for f in self.scalar_fields:
            if f.type == FieldType.ENUM and f.enum_name:
                seen.setdefault(f.enum_name, None)
        return list(seen)

    def get_field(self, name: str) -> Optional[ParsedField]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    # -- Validators ---------------------------------------------------------

    @field_validator("name")
    @classmethod
    def _valid_model_name(cls, v: str) -> str:
        if not _IDENTIFIER_RE.match(v):
            raise ValueError(f"Model name '{v}' is not a valid identifier.")
        return v

    @model_validator(mode="after")
    def _validate_unique_field_names(self) -> "ParsedModel":
        names: List[str] = [f.name for f in self.fields]
        if len(names) != len(set(names)):
            dupes: List[str] = sorted({n for n in names if names.count(n) > 1})
            raise ValueError(f"Model '{self.name}' has duplicate fields: {dupes}")
        return self

    @model_validator(mode="after")
    def _validate_primary_key_refs(self) -> "ParsedModel":
        known = {f.name for f in self.fields}
        missing: List[str] = [n for n in self.primary_key if n not in known]
        if missing:
            raise ValueError(
                f"Model '{self.name}' primary_key references unknown fields: {missing}"
            )
        return self

    def __repr__(self) -> str:
        return f"<Model {self.name} ({len(self.fields)} fields)>"


# ---------------------------------------------------------------------------
# Generation configuration
# ---------------------------------------------------------------------------


class GenerationConfig(BaseModel):
    """Run-wide settings, built once and shared by every generator."""

    model_config = _SHARED_CONFIG

    framework: str = Field(
        default="express", min_length=1, description="Backend identifier."
    )
    enable_domain_methods: bool = Field(
        default=True, description="Emit slug and publish endpoints."
    )
    enable_bulk_operations: bool = Field(
        default=True, description="Emit batch validators, service methods and endpoints."
    )
    max_batch_size: int = Field(
        default=100, ge=1, description="Upper bound for batch request arrays."
    )
    id_strategy: Optional[IdStrategy] = Field(
        default=None, description="Identifier type override."
    )
    default_page_size: int = Field(default=20, ge=1, description="Default 'take'.")
    max_page_size: int = Field(default=100, ge=1, description="Maximum 'take'.")
    sanitize_error_messages: bool = Field(
        default=True,
        description="Emit generic messages for identifier parse failures.",
    )
    import_alias: str = Field(
        default="@", min_length=1, description="Module alias prefix in imports."
    )

    @model_validator(mode="after")
    def _validate_page_sizes(self) -> "GenerationConfig":
        if self.default_page_size > self.max_page_size:
            raise ValueError(
                f"default_page_size ({self.default_page_size}) exceeds "
                f"max_page_size ({self.max_page_size})."
            )
        return self


# ---------------------------------------------------------------------------
# Generator output
# ---------------------------------------------------------------------------


class OutputMetadata(BaseModel):
    model_config = _SHARED_CONFIG

    file_count: int = Field(default=0, ge=0)
    line_count: int = Field(default=0, ge=0)


class GeneratorOutput(BaseModel):
    """Everything one generator produced for one model."""

    model_config = _SHARED_CONFIG

    files: Dict[str, str] = Field(
        default_factory=dict, description="Relative filename -> source text."
    )
    imports: List[str] = Field(
        default_factory=list, description="Import declarations the files rely on."
    )
    exports: List[str] = Field(
        default_factory=list, description="Symbols exported by the files."
    )
    metadata: OutputMetadata = Field(default_factory=OutputMetadata)


__all__ = [
    "FieldType",
    "IdType",
    "IdStrategy",
    "DefaultFunction",
    "SYSTEM_TIMESTAMP_FIELDS",
    "ParsedField",
    "ParsedModel",
    "GenerationConfig",
    "OutputMetadata",
    "GeneratorOutput",
]

logger.debug("crudforge.models loaded")
