"""
Mapping engine: pure transformation from a raw row to a typed partial record.

Resolves each field's mapped header to a cell, then applies the field's
coercion rule (text, number, date, boolean, enum). Errors are collected,
never raised, and every error carries the key of the field it belongs to.
ZERO I/O.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

from suite_config.schema import FieldDescriptor, FieldKind
from suite_kernel.domain.dtos import ValidationError

from suite_ingestion.domain.types import ValidationOutcome

_ISO_DATE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")
_TRUE_VALUES = frozenset({"true", "yes", "1"})
_FALSE_VALUES = frozenset({"false", "no", "0"})


# -----------------------------------------------------------------------------
# Result types
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class CoercionResult:
    """Result of coercing one non-empty cell to its field's type."""

    success: bool
    value: Any = None
    error: ValidationError | None = None


def _failure(descriptor: FieldDescriptor, code: str, message: str) -> CoercionResult:
    return CoercionResult(
        success=False,
        error=ValidationError(code=code, message=f"{descriptor.label} {message}", field=descriptor.key),
    )


# -----------------------------------------------------------------------------
# Coercion: string -> typed
# -----------------------------------------------------------------------------


def _parse_number(s: str) -> float | None:
    # float() would accept digit-group underscores ("1_000")
    if "_" in s:
        return None
    try:
        value = float(s)
    except ValueError:
        return None
    return None if math.isnan(value) else value


def _parse_date(s: str) -> date | None:
    if not _ISO_DATE.match(s):
        return None
    try:
        return date.fromisoformat(s)
    except ValueError:
        return None


def coerce_value(raw: str, descriptor: FieldDescriptor) -> CoercionResult:
    """
    Coerce a non-empty cell to the descriptor's kind. Pure function.

    Text is returned unchanged; the other kinds ignore surrounding whitespace.
    """
    kind = descriptor.kind
    s = raw.strip()

    if kind == FieldKind.TEXT:
        return CoercionResult(success=True, value=raw)

    if kind == FieldKind.NUMBER:
        number = _parse_number(s)
        if number is None:
            return _failure(descriptor, "INVALID_NUMBER", "must be a valid number")
        return CoercionResult(success=True, value=number)

    if kind == FieldKind.DATE:
        parsed = _parse_date(s)
        if parsed is None:
            return _failure(descriptor, "INVALID_DATE", "must be a valid date (YYYY-MM-DD)")
        return CoercionResult(success=True, value=parsed)

    if kind == FieldKind.BOOLEAN:
        low = s.lower()
        if low in _TRUE_VALUES:
            return CoercionResult(success=True, value=True)
        if low in _FALSE_VALUES:
            return CoercionResult(success=True, value=False)
        return _failure(descriptor, "INVALID_BOOLEAN", "must be true/false, yes/no, or 1/0")

    if kind == FieldKind.ENUM:
        low = s.lower()
        if low in {v.lower() for v in descriptor.enum_values}:
            return CoercionResult(success=True, value=low)
        return _failure(
            descriptor,
            "INVALID_ENUM_VALUE",
            f"must be one of: {', '.join(descriptor.enum_values)}",
        )

    return _failure(descriptor, "UNSUPPORTED_KIND", f"has unsupported kind {kind!r}")


# -----------------------------------------------------------------------------
# Header -> cell lookup
# -----------------------------------------------------------------------------


def map_row(
    mapping: Mapping[str, str],
    headers: Sequence[str],
    row: Sequence[str],
    fields: Sequence[FieldDescriptor],
) -> dict[str, str]:
    """
    Resolve each field's mapped header to its cell.

    Unmapped fields, unknown headers, and columns beyond a short (ragged)
    row all yield "". Duplicate headers resolve to the first occurrence.
    """
    index: dict[str, int] = {}
    for i, header in enumerate(headers):
        index.setdefault(header, i)

    cells: dict[str, str] = {}
    for descriptor in fields:
        header = mapping.get(descriptor.key)
        col = index.get(header) if header else None
        cells[descriptor.key] = row[col] if col is not None and col < len(row) else ""
    return cells


# -----------------------------------------------------------------------------
# Row validation (pure)
# -----------------------------------------------------------------------------


def validate_cells(
    cells: Mapping[str, str],
    fields: Sequence[FieldDescriptor],
) -> ValidationOutcome:
    """Validate a field-key -> raw cell dict against the descriptors."""
    issues: list[ValidationError] = []
    data: dict[str, Any] = {}

    for descriptor in fields:
        raw = cells.get(descriptor.key, "")

        if not raw.strip():
            if descriptor.required:
                issues.append(ValidationError(
                    code="MISSING_REQUIRED_FIELD",
                    message=f"{descriptor.label} is required",
                    field=descriptor.key,
                ))
            elif descriptor.has_default:
                data[descriptor.key] = descriptor.default_value
            continue

        coerced = coerce_value(raw, descriptor)
        if not coerced.success:
            issues.append(coerced.error)
            continue
        data[descriptor.key] = coerced.value

    return ValidationOutcome(
        valid=not issues,
        errors=tuple(e.message for e in issues),
        data=data,
        issues=tuple(issues),
    )


def validate_row(
    mapping: Mapping[str, str],
    headers: Sequence[str],
    row: Sequence[str],
    fields: Sequence[FieldDescriptor],
) -> ValidationOutcome:
    """Map one data row through the column mapping and validate it. Pure function."""
    return validate_cells(map_row(mapping, headers, row, fields), fields)
