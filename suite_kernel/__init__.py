"""
Suite Kernel - shared infrastructure for the business suite's Python services.

Provides:
- Structured JSON logging with request-scoped context
- Typed exception hierarchy with machine-readable codes
- Pure domain DTOs shared across packages
"""

__version__ = "0.1.0"
