"""
suite_ingestion.domain.types -- Pure frozen dataclasses for the import system.

ZERO I/O. Imports only from suite_kernel.domain and suite_config.schema.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Any

from suite_kernel.domain.dtos import ValidationError

# Field key -> chosen source header. A missing key means "skip this field".
ColumnMapping = dict[str, str]


# =============================================================================
# Session lifecycle
# =============================================================================


@unique
class ImportStage(str, Enum):
    """Wizard stage of one import session."""

    UPLOADING = "uploading"
    MAPPED = "mapped"
    PREVIEWED = "previewed"
    COMMITTED = "committed"  # Terminal
    CANCELLED = "cancelled"  # Terminal


# Allowed stage transitions (from -> set of valid next stages)
ALLOWED_TRANSITIONS: dict[ImportStage, frozenset[ImportStage]] = {
    ImportStage.UPLOADING: frozenset({ImportStage.MAPPED, ImportStage.CANCELLED}),
    ImportStage.MAPPED: frozenset({ImportStage.MAPPED, ImportStage.PREVIEWED, ImportStage.CANCELLED}),
    ImportStage.PREVIEWED: frozenset(
        {ImportStage.MAPPED, ImportStage.PREVIEWED, ImportStage.COMMITTED, ImportStage.CANCELLED}
    ),
    ImportStage.COMMITTED: frozenset(),
    ImportStage.CANCELLED: frozenset(),
}


def validate_transition(current: ImportStage, target: ImportStage) -> bool:
    """Check if a stage transition is valid."""
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


# =============================================================================
# Validation
# =============================================================================


@dataclass(frozen=True)
class ValidationOutcome:
    """Per-row result of coercing mapped cells into typed values."""

    valid: bool
    errors: tuple[str, ...] = ()
    data: dict[str, Any] = field(default_factory=dict)
    issues: tuple[ValidationError, ...] = ()

    @property
    def error_fields(self) -> frozenset[str]:
        """Keys of the fields that produced an error."""
        return frozenset(e.field for e in self.issues if e.field is not None)


# =============================================================================
# Preview
# =============================================================================


@dataclass(frozen=True)
class PreviewRow:
    """One rendered preview row. row_number is 1-based among data rows."""

    row_number: int
    cells: tuple[str, ...]
    outcome: ValidationOutcome

    @property
    def error_fields(self) -> frozenset[str]:
        return self.outcome.error_fields


@dataclass(frozen=True)
class ImportPreview:
    """Exact counts over every row plus a bounded rendering sample."""

    valid_count: int
    error_count: int
    rows: tuple[PreviewRow, ...] = ()

    @property
    def total_count(self) -> int:
        return self.valid_count + self.error_count
