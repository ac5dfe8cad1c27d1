"""
Import configuration schema.

Defines the human-authored, reviewable source artifacts for the bulk import
pipeline: per-entity field schemas and pipeline settings. YAML files are
parsed into these types by the loader, checked by the validator, and exposed
read-only by the registry.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Any

SAMPLE_CONTENT_TYPE = "text/csv"
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024


@unique
class FieldKind(str, Enum):
    """Value-coercion rule applied to one importable field."""

    TEXT = "text"
    NUMBER = "number"
    DATE = "date"  # YYYY-MM-DD
    BOOLEAN = "boolean"
    ENUM = "enum"


# ---------------------------------------------------------------------------
# Field schemas
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldDescriptor:
    """Schema entry for one importable attribute of an entity."""

    key: str
    label: str
    kind: FieldKind = FieldKind.TEXT
    required: bool = False
    enum_values: tuple[str, ...] = ()
    default_value: Any = None
    aliases: tuple[str, ...] = ()

    @property
    def has_default(self) -> bool:
        return self.default_value is not None


@dataclass(frozen=True)
class SampleDocument:
    """Downloadable example document for one entity kind."""

    filename: str
    content_type: str
    content: str


@dataclass(frozen=True)
class EntitySchema:
    """Ordered field descriptors plus a literal sample document for one entity kind."""

    name: str
    display_name: str
    fields: tuple[FieldDescriptor, ...]
    sample_csv: str = ""

    def field(self, key: str) -> FieldDescriptor:
        for fd in self.fields:
            if fd.key == key:
                return fd
        raise KeyError(key)

    @property
    def field_keys(self) -> tuple[str, ...]:
        return tuple(fd.key for fd in self.fields)

    @property
    def required_fields(self) -> tuple[FieldDescriptor, ...]:
        return tuple(fd for fd in self.fields if fd.required)

    def sample_document(self) -> SampleDocument:
        return SampleDocument(
            filename=f"{self.name}-sample.csv",
            content_type=SAMPLE_CONTENT_TYPE,
            content=self.sample_csv,
        )


# ---------------------------------------------------------------------------
# Pipeline settings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ImportSettings:
    """Upload limits and default tokenizer options for import sessions."""

    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    allowed_extensions: tuple[str, ...] = (".csv",)
    preview_rows: int = 10
    delimiter: str = ","
    has_headers: bool = True
    trim_values: bool = True
