"""Pure domain DTOs for the suite kernel. Zero I/O."""

from suite_kernel.domain.dtos import ValidationError

__all__ = ["ValidationError"]
