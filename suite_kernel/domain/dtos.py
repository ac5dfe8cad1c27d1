"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable error representation shared by the import pipeline
    and any other package that validates user-supplied data.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ValidationError:
    """
    A single validation error.

    Contract:
        Carries a machine-readable code, human-readable message, the key of
        the field it belongs to, and an optional details dict.

    Guarantees:
        - Immutable (frozen dataclass)
        - code is always present

    Non-goals:
        - Does NOT raise exceptions -- it IS the error representation.
    """

    code: str
    message: str
    field: str | None = None
    details: dict[str, Any] | None = None
