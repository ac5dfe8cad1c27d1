"""Mapping engine: header auto-mapping and per-row coercion/validation."""

from suite_ingestion.mapping.engine import (
    CoercionResult,
    coerce_value,
    map_row,
    validate_cells,
    validate_row,
)
from suite_ingestion.mapping.resolver import candidate_names, normalize_header, resolve_headers

__all__ = [
    "CoercionResult",
    "candidate_names",
    "coerce_value",
    "map_row",
    "normalize_header",
    "resolve_headers",
    "validate_cells",
    "validate_row",
]
