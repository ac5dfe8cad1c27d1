"""Import services: session orchestration (upload -> map -> preview -> commit)."""

from suite_ingestion.services.import_session import (
    ImportService,
    ImportSession,
    decode_source,
    source_size,
)

__all__ = [
    "ImportService",
    "ImportSession",
    "decode_source",
    "source_size",
]
