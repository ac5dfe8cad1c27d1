"""
Entity field-schema registry.

A read-only table of ``EntitySchema`` keyed by entity name, built once per
process from the packaged YAML files. There is no registration API: the
table cannot be mutated at runtime.
"""

from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType

from suite_config.loader import SCHEMAS_DIR, load_entity_schemas
from suite_config.schema import EntitySchema
from suite_config.validator import validate_entity_schema
from suite_kernel.exceptions import SchemaDefinitionError, UnknownEntityError
from suite_kernel.logging_config import get_logger

logger = get_logger("config.schema_registry")


def build_registry(directory: Path = SCHEMAS_DIR) -> Mapping[str, EntitySchema]:
    """Load, validate and freeze every schema of a directory."""
    table: dict[str, EntitySchema] = {}
    for schema in load_entity_schemas(directory):
        validate_entity_schema(schema)
        if schema.name in table:
            raise SchemaDefinitionError(schema.name, ["entity defined more than once"])
        table[schema.name] = schema
    logger.info(
        "schema_registry_loaded",
        extra={"entities": sorted(table), "directory": str(directory)},
    )
    return MappingProxyType(table)


@lru_cache(maxsize=1)
def get_registry() -> Mapping[str, EntitySchema]:
    """The process-wide registry of packaged schemas."""
    return build_registry()


def entity_names() -> tuple[str, ...]:
    return tuple(sorted(get_registry()))


def get_entity_schema(name: str) -> EntitySchema:
    """Look up a schema by entity name (case-insensitive)."""
    registry = get_registry()
    key = name.strip().lower()
    try:
        return registry[key]
    except KeyError:
        logger.warning("schema_not_found", extra={"entity_name": name})
        raise UnknownEntityError(name, tuple(sorted(registry))) from None
