"""
Typed exception hierarchy for the suite services.

Every error has a typed exception class (catch by type, not message), a
class-level ``code`` attribute (machine-readable, API-safe), and carries its
context as structured attributes rather than only inside the message.

    SuiteError (base)
    |
    +-- IngestionError
    |   +-- UploadRejectedError
    |   |   +-- UnsupportedFileTypeError
    |   |   +-- FileTooLargeError
    |   +-- IllegalTransitionError
    |
    +-- ConfigError
        +-- UnknownEntityError
        +-- SchemaDefinitionError

Category        | Code                   | When Raised
----------------|------------------------|-----------------------------------------
Ingestion       | UPLOAD_REJECTED        | Upload refused before any parse attempt
                | UNSUPPORTED_FILE_TYPE  | Filename lacks an allowed extension
                | FILE_TOO_LARGE         | Source exceeds the configured size cap
                | ILLEGAL_TRANSITION     | Wizard action not allowed in this stage
----------------|------------------------|-----------------------------------------
Config          | CONFIG_ERROR           | Settings file has unknown keys/bad types
                | UNKNOWN_ENTITY         | No field schema for the entity name
                | SCHEMA_DEFINITION      | Field schema violates its invariants

Validation failures of individual rows are NOT exceptions. They are
collected as ``suite_kernel.domain.dtos.ValidationError`` values.
"""


class SuiteError(Exception):
    """
    Base exception for all suite errors.

    All subclasses must have a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "SUITE_ERROR"


# Ingestion-related exceptions


class IngestionError(SuiteError):
    """Base exception for bulk import errors."""

    code: str = "INGESTION_ERROR"


class UploadRejectedError(IngestionError):
    """Uploaded source was refused before parsing. The session stays in UPLOADING."""

    code: str = "UPLOAD_REJECTED"

    def __init__(self, filename: str, message: str):
        self.filename = filename
        super().__init__(message)


class UnsupportedFileTypeError(UploadRejectedError):
    """Filename does not end with an allowed extension."""

    code: str = "UNSUPPORTED_FILE_TYPE"

    def __init__(self, filename: str, allowed_extensions: tuple[str, ...]):
        self.allowed_extensions = allowed_extensions
        super().__init__(filename, "Please upload a CSV file")


class FileTooLargeError(UploadRejectedError):
    """Source size exceeds the configured maximum."""

    code: str = "FILE_TOO_LARGE"

    def __init__(self, filename: str, size: int, max_size: int):
        self.size = size
        self.max_size = max_size
        limit_mb = max_size / (1024 * 1024)
        limit = f"{limit_mb:g}MB" if limit_mb >= 1 else f"{max_size} bytes"
        super().__init__(filename, f"File is too large. Maximum size is {limit}")


class IllegalTransitionError(IngestionError):
    """A wizard action was requested in a stage that does not allow it."""

    code: str = "ILLEGAL_TRANSITION"

    def __init__(self, action: str, current: str, target: str | None = None):
        self.action = action
        self.current = current
        self.target = target
        msg = f"Cannot {action} while session is {current}"
        if target is not None:
            msg += f" (transition to {target} not allowed)"
        super().__init__(msg)


# Configuration-related exceptions


class ConfigError(SuiteError):
    """Base exception for configuration errors."""

    code: str = "CONFIG_ERROR"


class UnknownEntityError(ConfigError):
    """No field schema registered for the entity name."""

    code: str = "UNKNOWN_ENTITY"

    def __init__(self, entity: str, available: tuple[str, ...] = ()):
        self.entity = entity
        self.available = available
        msg = f"No import schema for entity: {entity}"
        if available:
            msg += f" (available: {', '.join(available)})"
        super().__init__(msg)


class SchemaDefinitionError(ConfigError):
    """A field schema violates its structural invariants."""

    code: str = "SCHEMA_DEFINITION"

    def __init__(self, entity: str, problems: list[str]):
        self.entity = entity
        self.problems = tuple(problems)
        super().__init__(f"Invalid field schema for {entity}: " + "; ".join(problems))
