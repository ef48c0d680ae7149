"""Shared constants and enums used across the application."""

from enum import StrEnum


class ProcessingStatus(StrEnum):
    """Lifecycle status of a single document."""

    PENDING = "PENDING"
    VALIDATING = "VALIDATING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


TERMINAL_STATUSES = frozenset(
    {ProcessingStatus.COMPLETED, ProcessingStatus.FAILED, ProcessingStatus.CANCELLED}
)


class RecoveryStrategy(StrEnum):
    """What happens to a document after a failure has been caught."""

    FAIL_FAST = "FAIL_FAST"
    SKIP_AND_CONTINUE = "SKIP_AND_CONTINUE"
    RETRY = "RETRY"
    LOG_AND_CONTINUE = "LOG_AND_CONTINUE"


class RecoveryAction(StrEnum):
    """Outcome of applying a recovery strategy."""

    ESCALATE = "ESCALATE"
    SKIP = "SKIP"
    CONTINUE = "CONTINUE"


class ProgressEvent(StrEnum):
    """Events broadcast to progress observers."""

    STARTED = "STARTED"
    PROGRESS = "PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class FileType(StrEnum):
    """Document types recognised by the type classifier."""

    XLSX = "XLSX"
    XLS = "XLS"
    PDF = "PDF"
    DOCX = "DOCX"
    DOC = "DOC"
    ZIP = "ZIP"
    UNKNOWN = "UNKNOWN"


class DocumentKind(StrEnum):
    """Coarse document families used to filter input."""

    SPREADSHEET = "SPREADSHEET"
    PDF = "PDF"
    WORD = "WORD"


class ExportFormat(StrEnum):
    """Target formats supported by the record exporter."""

    SPREADSHEET = "spreadsheet"
    EXCEL = "excel"
    WORD = "word"
    PDF = "pdf"
