# File: crudforge/type_mapper.py
"""
crudforge - Field Type Tables
===============================
Closed lookup tables from ``FieldType`` to target-language fragments.

Each table is keyed by the full ``FieldType`` enum and is checked for
exhaustiveness when this module is imported, so adding an enum member
without extending every table fails immediately instead of silently
falling back to some default representation.

A ``None`` entry means "no representation"; asking for it raises
``TypeMappingError`` naming the model and field.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Tuple

from crudforge.errors import TypeMappingError
from crudforge.models import FieldType, ParsedField

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("crudforge.type_mapper")

# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

TS_TYPES: Dict[FieldType, Optional[str]] = {
    FieldType.STRING: "string",
    FieldType.INT: "number",
    FieldType.BIGINT: "bigint",
    FieldType.FLOAT: "number",
    FieldType.DECIMAL: "number",
    FieldType.BOOLEAN: "boolean",
    FieldType.DATETIME: "Date",
    FieldType.JSON: "unknown",
    FieldType.BYTES: "Buffer",
    FieldType.ENUM: None,  # resolved from enum_name
    FieldType.RELATION: None,  # resolved from relation_target
    FieldType.UNSUPPORTED: None,
}

ZOD_TYPES: Dict[FieldType, Optional[str]] = {
    FieldType.STRING: "z.string()",
    FieldType.INT: "z.number().int()",
    FieldType.BIGINT: "z.coerce.bigint()",
    FieldType.FLOAT: "z.number()",
    FieldType.DECIMAL: "z.number()",
    FieldType.BOOLEAN: "z.boolean()",
    FieldType.DATETIME: "z.coerce.date()",
    FieldType.JSON: "z.unknown()",
    FieldType.BYTES: "z.instanceof(Buffer)",
    FieldType.ENUM: None,  # resolved from enum_name
    FieldType.RELATION: None,
    FieldType.UNSUPPORTED: None,
}

# Query-string input is always text, so everything but strings is coerced.
ZOD_QUERY_TYPES: Dict[FieldType, Optional[str]] = {
    FieldType.STRING: "z.string()",
    FieldType.INT: "z.coerce.number().int()",
    FieldType.BIGINT: "z.coerce.bigint()",
    FieldType.FLOAT: "z.coerce.number()",
    FieldType.DECIMAL: "z.coerce.number()",
    FieldType.BOOLEAN: "z.enum(['true', 'false']).transform((v) => v === 'true')",
    FieldType.DATETIME: "z.coerce.date()",
    FieldType.JSON: "z.unknown()",
    FieldType.BYTES: "z.instanceof(Buffer)",
    FieldType.ENUM: None,  # resolved from enum_name
    FieldType.RELATION: None,
    FieldType.UNSUPPORTED: None,
}

FILTER_OPERATORS: Dict[FieldType, Tuple[str, ...]] = {
    FieldType.STRING: ("equals", "contains", "startsWith", "endsWith"),
    FieldType.INT: ("equals", "gt", "gte", "lt", "lte"),
    FieldType.BIGINT: ("equals", "gt", "gte", "lt", "lte"),
    FieldType.FLOAT: ("equals", "gt", "gte", "lt", "lte"),
    FieldType.DECIMAL: ("equals", "gt", "gte", "lt", "lte"),
    FieldType.DATETIME: ("equals", "gt", "gte", "lt", "lte"),
    FieldType.BOOLEAN: (),
    FieldType.JSON: (),
    FieldType.BYTES: (),
    FieldType.ENUM: (),
    FieldType.RELATION: (),
    FieldType.UNSUPPORTED: (),
}


def _check_exhaustive(name: str, table: Mapping[FieldType, object]) -> None:
    missing: List[str] = [t.value for t in FieldType if t not in table]
    if missing:
        raise RuntimeError(f"{name} is missing entries for: {missing}")


for _name, _table in (
    ("TS_TYPES", TS_TYPES),
    ("ZOD_TYPES", ZOD_TYPES),
    ("ZOD_QUERY_TYPES", ZOD_QUERY_TYPES),
    ("FILTER_OPERATORS", FILTER_OPERATORS),
):
    _check_exhaustive(_name, _table)


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def ts_base_type(field: ParsedField, model_name: Optional[str] = None) -> str:
    """TypeScript type of a single value of *field*, without list or null."""
    if field.type == FieldType.ENUM:
        return field.enum_name  # type: ignore[return-value]
    if field.type == FieldType.RELATION:
        return field.relation_target  # type: ignore[return-value]
    mapped: Optional[str] = TS_TYPES[field.type]
    if mapped is None:
        raise TypeMappingError(
            f"type '{field.type.value}' has no TypeScript representation",
            model_name=model_name,
            field_name=field.name,
        )
    return mapped


def ts_type(field: ParsedField, model_name: Optional[str] = None) -> str:
    """TypeScript type of *field* including list suffix."""
    base: str = ts_base_type(field, model_name)
    return f"{base}[]" if field.is_list else base


def zod_base_type(
    field: ParsedField,
    model_name: Optional[str] = None,
    query: bool = False,
) -> str:
    """zod schema expression for one value of *field* (body or query string)."""
    if field.type == FieldType.ENUM:
        if field.enum_values:
            members: str = ", ".join(f"'{v}'" for v in field.enum_values)
            return f"z.enum([{members}])"
        return f"z.nativeEnum({field.enum_name})"
    table: Dict[FieldType, Optional[str]] = ZOD_QUERY_TYPES if query else ZOD_TYPES
    mapped: Optional[str] = table[field.type]
    if mapped is None:
        raise TypeMappingError(
            f"type '{field.type.value}' has no zod representation",
            model_name=model_name,
            field_name=field.name,
        )
    return mapped


def filter_operators(field: ParsedField) -> Tuple[str, ...]:
    return FILTER_OPERATORS[field.type]


__all__ = [
    "TS_TYPES",
    "ZOD_TYPES",
    "ZOD_QUERY_TYPES",
    "FILTER_OPERATORS",
    "ts_base_type",
    "ts_type",
    "zod_base_type",
    "filter_operators",
]

logger.debug("crudforge.type_mapper loaded")
