"""
Field schema validator (``suite_config.validator``).

Checks an ``EntitySchema`` at load time, before it enters the registry.

Invariants enforced
-------------------
* Field keys are non-empty and unique within a schema.
* Every field has a label.
* ``enum`` fields declare at least one value, and only ``enum`` fields
  declare values.
* A declared default on an ``enum`` field is one of its values.
* Required fields do not declare defaults (defaults apply to optional
  fields only).
"""

from __future__ import annotations

from suite_config.schema import EntitySchema, FieldKind
from suite_kernel.exceptions import SchemaDefinitionError


def schema_problems(schema: EntitySchema) -> list[str]:
    """Return every invariant violation of a schema (empty when valid)."""
    problems: list[str] = []
    if not schema.fields:
        problems.append("schema declares no fields")

    seen: set[str] = set()
    for fd in schema.fields:
        if not fd.key:
            problems.append("field with empty key")
        elif fd.key in seen:
            problems.append(f"duplicate field key {fd.key!r}")
        seen.add(fd.key)

        if not fd.label:
            problems.append(f"field {fd.key!r} has no label")

        if fd.kind == FieldKind.ENUM:
            if not fd.enum_values:
                problems.append(f"enum field {fd.key!r} declares no enum_values")
            elif fd.has_default and str(fd.default_value).lower() not in {
                v.lower() for v in fd.enum_values
            }:
                problems.append(f"default of enum field {fd.key!r} is not one of its values")
        elif fd.enum_values:
            problems.append(f"non-enum field {fd.key!r} declares enum_values")

        if fd.required and fd.has_default:
            problems.append(f"required field {fd.key!r} declares a default")
    return problems


def validate_entity_schema(schema: EntitySchema) -> None:
    """Raise SchemaDefinitionError when the schema violates any invariant."""
    problems = schema_problems(schema)
    if problems:
        raise SchemaDefinitionError(schema.name, problems)
