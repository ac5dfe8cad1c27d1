"""
RecordInserter protocol: the boundary to the store that persists imported records.

An import session calls insert() exactly once, at commit, with the final
filtered records. Atomicity of that call belongs to the implementation.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class RecordInserter(Protocol):
    """Protocol for persisting one committed batch of partial typed records."""

    def insert(self, records: Sequence[dict[str, Any]]) -> None:
        """Persist every record in order. May raise; the caller does not retry."""
        ...
