"""
Header resolver: pure auto-mapping from source headers to schema fields.

Each field's candidate set is {key, label, aliases}, normalized by
lowercasing and removing everything outside [a-z0-9]. Headers are tested in
document order; the first match binds and the search for that field stops.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from suite_config.schema import FieldDescriptor
from suite_ingestion.domain.types import ColumnMapping

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_header(text: str) -> str:
    """'E-mail Address' -> 'emailaddress'."""
    return _NON_ALNUM.sub("", text.lower())


def candidate_names(descriptor: FieldDescriptor) -> frozenset[str]:
    """Normalized spellings that auto-map to this field."""
    return frozenset(
        normalize_header(name)
        for name in (descriptor.key, descriptor.label, *descriptor.aliases)
    )


def resolve_headers(
    csv_headers: Sequence[str],
    fields: Sequence[FieldDescriptor],
    *,
    exclusive: bool = False,
) -> ColumnMapping:
    """
    Auto-map headers to fields. Pure function.

    By default a header may bind several fields. With exclusive=True a
    header is claimed by the first field (schema order) that binds it.
    Unmatched fields are absent from the result.
    """
    normalized = [(header, normalize_header(header)) for header in csv_headers]
    claimed: set[str] = set()
    mapping: ColumnMapping = {}

    for descriptor in fields:
        candidates = candidate_names(descriptor)
        for header, norm in normalized:
            if exclusive and header in claimed:
                continue
            if norm in candidates:
                mapping[descriptor.key] = header
                claimed.add(header)
                break

    return mapping
