"""Pure domain types for the import pipeline. Zero I/O."""

from suite_ingestion.domain.types import (
    ALLOWED_TRANSITIONS,
    ColumnMapping,
    ImportPreview,
    ImportStage,
    PreviewRow,
    ValidationOutcome,
    validate_transition,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "ColumnMapping",
    "ImportPreview",
    "ImportStage",
    "PreviewRow",
    "ValidationOutcome",
    "validate_transition",
]
