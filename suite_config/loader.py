"""
Configuration Loader (``suite_config.loader``).

Responsibility
--------------
Loads YAML files and parses them into typed ``suite_config.schema``
dataclass instances. Callers obtain schemas through the registry
(``suite_config.get_entity_schema``) rather than calling the loader.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys in a field entry  -> ``KeyError`` propagates.
* Unknown field kind  -> ``ValueError`` from ``FieldKind``.
* Unknown or mistyped settings keys  -> ``ConfigError``.
"""

from __future__ import annotations

from dataclasses import fields as dataclass_fields
from pathlib import Path
from typing import Any

import yaml

from suite_config.schema import EntitySchema, FieldDescriptor, FieldKind, ImportSettings
from suite_kernel.exceptions import ConfigError

SCHEMAS_DIR = Path(__file__).parent / "schemas"
SETTINGS_PATH = Path(__file__).parent / "settings.yaml"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _as_str_tuple(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value)


def parse_field(data: dict[str, Any]) -> FieldDescriptor:
    """Parse a FieldDescriptor from a dict."""
    return FieldDescriptor(
        key=str(data["key"]),
        label=str(data["label"]),
        kind=FieldKind(data.get("kind", "text")),
        required=bool(data.get("required", False)),
        enum_values=_as_str_tuple(data.get("enum_values")),
        default_value=data.get("default"),
        aliases=_as_str_tuple(data.get("aliases")),
    )


def parse_entity_schema(data: dict[str, Any]) -> EntitySchema:
    """Parse an EntitySchema from a dict. Does not check invariants (see validator)."""
    name = str(data["name"]).strip().lower()
    return EntitySchema(
        name=name,
        display_name=str(data.get("display_name") or name.title()),
        fields=tuple(parse_field(f) for f in data.get("fields", ())),
        sample_csv=str(data.get("sample_csv", "")).rstrip("\n"),
    )


def load_entity_schemas(directory: Path = SCHEMAS_DIR) -> list[EntitySchema]:
    """Parse every ``*.yaml`` file of a directory, in filename order."""
    return [parse_entity_schema(load_yaml_file(p)) for p in sorted(directory.glob("*.yaml"))]


_SETTINGS_TYPES: dict[str, type | tuple[type, ...]] = {
    "max_file_size": int,
    "allowed_extensions": (list, tuple),
    "preview_rows": int,
    "delimiter": str,
    "has_headers": bool,
    "trim_values": bool,
}


def parse_settings(data: dict[str, Any]) -> ImportSettings:
    """Parse ImportSettings from a dict. Missing keys take the dataclass defaults."""
    known = {f.name for f in dataclass_fields(ImportSettings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown import settings: {', '.join(unknown)}")

    values: dict[str, Any] = {}
    for key, value in data.items():
        expected = _SETTINGS_TYPES[key]
        # bool is an int subclass; reject it for numeric settings
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            raise ConfigError(f"Import setting {key!r} has invalid value {value!r}")
        values[key] = value

    if "allowed_extensions" in values:
        values["allowed_extensions"] = tuple(
            ext.lower() if ext.startswith(".") else f".{ext.lower()}"
            for ext in values["allowed_extensions"]
        )
    settings = ImportSettings(**values)
    if settings.max_file_size <= 0 or settings.preview_rows < 0:
        raise ConfigError("max_file_size must be positive and preview_rows non-negative")
    return settings


def load_import_settings(path: Path | None = None) -> ImportSettings:
    """Load ImportSettings from a YAML file (default: the packaged settings.yaml)."""
    data = load_yaml_file(path or SETTINGS_PATH)
    section = data.get("import", data)
    return parse_settings(section)
