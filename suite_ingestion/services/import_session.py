"""
Import session: upload -> map -> preview -> commit (or cancel).

Orchestrates the tokenizer, header resolver and row validator for one
wizard flow, and calls the Insert collaborator exactly once, at commit.
Everything before commit is pure computation on in-memory text.
Uses structured logging (LogContext, get_logger("ingestion.*")).

Stage rules (ALLOWED_TRANSITIONS):
    UPLOADING -> MAPPED -> PREVIEWED -> COMMITTED
    PREVIEWED -> MAPPED (back), any non-terminal -> CANCELLED
Every action checks the table and raises IllegalTransitionError otherwise.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any
from uuid import UUID, uuid4

from suite_config.loader import load_import_settings
from suite_config.registry import get_entity_schema
from suite_config.schema import EntitySchema, ImportSettings
from suite_kernel.exceptions import (
    FileTooLargeError,
    IllegalTransitionError,
    UnsupportedFileTypeError,
)
from suite_kernel.logging_config import LogContext, get_logger

from suite_ingestion.adapters.csv_tokenizer import ParseOptions, ParseResult, parse
from suite_ingestion.domain.types import (
    ColumnMapping,
    ImportPreview,
    ImportStage,
    PreviewRow,
    ValidationOutcome,
    validate_transition,
)
from suite_ingestion.inserters.base import RecordInserter
from suite_ingestion.mapping.engine import validate_row
from suite_ingestion.mapping.resolver import resolve_headers

logger = get_logger("ingestion.import_session")


def decode_source(source: str | bytes) -> str:
    """Bytes are read as UTF-8 (BOM stripped); undecodable bytes become U+FFFD."""
    if isinstance(source, str):
        return source.removeprefix("\ufeff")
    return source.decode("utf-8-sig", errors="replace")


def source_size(source: str | bytes) -> int:
    """Byte size of a source; text is measured as UTF-8."""
    if isinstance(source, str):
        return len(source.encode("utf-8"))
    return len(source)


class ImportSession:
    """
    One import wizard flow for one entity schema.

    Exclusively owned by its caller; never shared or persisted. The parse
    result exists from MAPPED on, the preview from PREVIEWED on.
    """

    def __init__(
        self,
        schema: EntitySchema,
        settings: ImportSettings | None = None,
        parse_options: ParseOptions | None = None,
    ):
        self.session_id: UUID = uuid4()
        self.schema = schema
        self.settings = settings or ImportSettings()
        self._parse_options = parse_options or ParseOptions.from_settings(self.settings)
        self._stage = ImportStage.UPLOADING
        self.filename: str | None = None
        self.parse_result: ParseResult | None = None
        self._mapping: ColumnMapping = {}
        self.preview_result: ImportPreview | None = None
        self.include_invalid_rows = False
        self.imported_count: int | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def stage(self) -> ImportStage:
        return self._stage

    @property
    def is_terminal(self) -> bool:
        return self._stage in (ImportStage.COMMITTED, ImportStage.CANCELLED)

    @property
    def mapping(self) -> ColumnMapping:
        """Copy of the current column mapping."""
        return dict(self._mapping)

    @property
    def valid_count(self) -> int:
        return self.preview_result.valid_count if self.preview_result else 0

    @property
    def error_count(self) -> int:
        return self.preview_result.error_count if self.preview_result else 0

    def _require(self, action: str, target: ImportStage) -> None:
        if not validate_transition(self._stage, target):
            logger.warning(
                "illegal_transition",
                extra={"action": action, "stage": self._stage.value, "target": target.value},
            )
            raise IllegalTransitionError(action, self._stage.value, target.value)

    def _require_stage(self, action: str, *stages: ImportStage) -> None:
        if self._stage not in stages:
            logger.warning("illegal_transition", extra={"action": action, "stage": self._stage.value})
            raise IllegalTransitionError(action, self._stage.value)

    def _parsed(self) -> ParseResult:
        if self.parse_result is None:
            raise IllegalTransitionError("use parsed rows", self._stage.value)
        return self.parse_result

    def _log_context(self) -> Any:
        return LogContext.bind(session_id=str(self.session_id), entity=self.schema.name)

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def upload(self, source: str | bytes, filename: str) -> ParseResult:
        """
        Check, parse and auto-map an uploaded document.

        Extension and size are checked before any parse attempt; a rejection
        raises an UploadRejectedError subclass and leaves the stage unchanged.
        """
        self._require_stage("upload", ImportStage.UPLOADING)
        with self._log_context():
            allowed = self.settings.allowed_extensions
            if not filename.lower().endswith(allowed):
                logger.info("upload_rejected", extra={"source_filename": filename, "reason": "extension"})
                raise UnsupportedFileTypeError(filename, allowed)

            size = source_size(source)
            if size > self.settings.max_file_size:
                logger.info(
                    "upload_rejected",
                    extra={"source_filename": filename, "reason": "size", "size": size},
                )
                raise FileTooLargeError(filename, size, self.settings.max_file_size)

            result = parse(decode_source(source), self._parse_options)
            self.filename = filename
            self.parse_result = result
            self._mapping = resolve_headers(result.headers, self.schema.fields)
            self._stage = ImportStage.MAPPED
            logger.info(
                "upload_parsed",
                extra={
                    "source_filename": filename,
                    "size": size,
                    "total_rows": result.total_rows,
                    "parse_error_count": len(result.parse_errors),
                    "mapped_fields": sorted(self._mapping),
                },
            )
            return result

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    def set_mapping(self, field_key: str, header: str | None) -> ColumnMapping:
        """Assign a header to a field, or unmap it with None / "". Recomputes an active preview."""
        self._require_stage("change mapping", ImportStage.MAPPED, ImportStage.PREVIEWED)
        self.schema.field(field_key)  # KeyError for unknown fields
        if header and header not in self._parsed().headers:
            raise ValueError(f"Unknown header: {header!r}")

        if header:
            self._mapping[field_key] = header
        else:
            self._mapping.pop(field_key, None)

        with self._log_context():
            logger.info("mapping_changed", extra={"field_key": field_key, "header": header or None})
        if self._stage is ImportStage.PREVIEWED:
            self.preview_result = self._compute_preview()
        return self.mapping

    def reset_mapping(self) -> ColumnMapping:
        """Discard manual changes and auto-map again."""
        self._require_stage("reset mapping", ImportStage.MAPPED, ImportStage.PREVIEWED)
        self._mapping = resolve_headers(self._parsed().headers, self.schema.fields)
        if self._stage is ImportStage.PREVIEWED:
            self.preview_result = self._compute_preview()
        return self.mapping

    # ------------------------------------------------------------------
    # Preview
    # ------------------------------------------------------------------

    def validate_all(self) -> list[ValidationOutcome]:
        """Outcome of every parsed row under the current mapping."""
        parsed = self._parsed()
        fields = self.schema.fields
        return [validate_row(self._mapping, parsed.headers, row, fields) for row in parsed.rows]

    def _compute_preview(self) -> ImportPreview:
        rows = self._parsed().rows
        outcomes = self.validate_all()
        valid = sum(1 for o in outcomes if o.valid)
        sample = tuple(
            PreviewRow(row_number=i, cells=row, outcome=outcome)
            for i, (row, outcome) in enumerate(
                zip(rows[: self.settings.preview_rows], outcomes), start=1
            )
        )
        return ImportPreview(valid_count=valid, error_count=len(outcomes) - valid, rows=sample)

    def preview(self) -> ImportPreview:
        """Validate every row for exact counts; keep the first rows as a rendering sample."""
        self._require("preview", ImportStage.PREVIEWED)
        with self._log_context():
            self.preview_result = self._compute_preview()
            self._stage = ImportStage.PREVIEWED
            logger.info(
                "preview_computed",
                extra={
                    "valid_count": self.preview_result.valid_count,
                    "error_count": self.preview_result.error_count,
                    "sample_rows": len(self.preview_result.rows),
                },
            )
        return self.preview_result

    def back_to_mapping(self) -> None:
        """Return from the preview to the mapping step."""
        self._require_stage("go back to mapping", ImportStage.PREVIEWED)
        self._stage = ImportStage.MAPPED
        self.preview_result = None

    # ------------------------------------------------------------------
    # Commit / cancel
    # ------------------------------------------------------------------

    def records_for_commit(self, include_invalid_rows: bool = False) -> list[dict[str, Any]]:
        """Typed partial records in row order; invalid rows only when requested."""
        return [
            dict(outcome.data)
            for outcome in self.validate_all()
            if outcome.valid or include_invalid_rows
        ]

    def commit(self, inserter: RecordInserter, include_invalid_rows: bool = False) -> int:
        """
        Re-validate every row and submit the result in one insert() call.

        Returns the number of records submitted. If the inserter raises, the
        error propagates and the session stays PREVIEWED.
        """
        self._require("commit", ImportStage.COMMITTED)
        self.include_invalid_rows = include_invalid_rows
        with self._log_context():
            records = self.records_for_commit(include_invalid_rows)
            try:
                inserter.insert(records)
            except Exception:
                logger.error("commit_failed", extra={"record_count": len(records)}, exc_info=True)
                raise
            self.imported_count = len(records)
            self._stage = ImportStage.COMMITTED
            logger.info(
                "commit_submitted",
                extra={
                    "record_count": self.imported_count,
                    "include_invalid_rows": include_invalid_rows,
                },
            )
        return self.imported_count

    def cancel(self) -> None:
        """Drop all in-memory state. Nothing has been written."""
        self._require("cancel", ImportStage.CANCELLED)
        self.parse_result = None
        self._mapping = {}
        self.preview_result = None
        self._stage = ImportStage.CANCELLED
        with self._log_context():
            logger.info("session_cancelled")


class ImportService:
    """Starts import sessions for registry schemas. Holds at most one live session."""

    def __init__(
        self,
        settings: ImportSettings | None = None,
        schema_lookup: Callable[[str], EntitySchema] | None = None,
    ):
        self._settings = settings or load_import_settings()
        self._lookup = schema_lookup or get_entity_schema
        self._current: ImportSession | None = None

    @property
    def settings(self) -> ImportSettings:
        return self._settings

    @property
    def current(self) -> ImportSession | None:
        return self._current

    def start(
        self,
        entity_name: str,
        parse_options: ParseOptions | None = None,
    ) -> ImportSession:
        """New session for an entity; a previous live session is cancelled."""
        schema = self._lookup(entity_name)
        previous = self._current
        if previous is not None and not previous.is_terminal:
            previous.cancel()
        session = ImportSession(schema, self._settings, parse_options)
        self._current = session
        with LogContext.bind(session_id=str(session.session_id), entity=schema.name):
            logger.info(
                "session_started",
                extra={"replaced_session": str(previous.session_id) if previous else None},
            )
        return session

    def run(
        self,
        entity_name: str,
        source: str | bytes,
        filename: str,
        inserter: RecordInserter,
        include_invalid_rows: bool = False,
        overrides: Sequence[tuple[str, str | None]] = (),
    ) -> ImportSession:
        """Non-interactive flow: upload, apply mapping overrides, preview, commit."""
        session = self.start(entity_name)
        session.upload(source, filename)
        for field_key, header in overrides:
            session.set_mapping(field_key, header)
        session.preview()
        session.commit(inserter, include_invalid_rows)
        return session
