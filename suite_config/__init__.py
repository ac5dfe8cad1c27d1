"""
suite_config -- field schemas and settings for the bulk import pipeline.

Responsibility:
    Exposes the per-entity field schemas (read-only registry) and the
    import pipeline settings. Both are authored as YAML inside this package
    and parsed into frozen dataclasses.

Architecture position:
    Configuration -- sits above ``suite_kernel`` and below
    ``suite_ingestion``. Nothing here imports from ingestion.
"""

from suite_config.loader import load_import_settings
from suite_config.registry import entity_names, get_entity_schema, get_registry
from suite_config.schema import (
    EntitySchema,
    FieldDescriptor,
    FieldKind,
    ImportSettings,
    SampleDocument,
)

__all__ = [
    "EntitySchema",
    "FieldDescriptor",
    "FieldKind",
    "ImportSettings",
    "SampleDocument",
    "entity_names",
    "get_entity_schema",
    "get_registry",
    "load_import_settings",
]
