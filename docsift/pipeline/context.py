"""
ProcessingContext — per-document state carried through the pipeline.

One context exists per submitted document.  The engine owns it for the
document's lifetime: it moves the status along the state machine,
records metadata and accumulates errors.  Once a terminal status is
reached the status, counters and metadata are frozen; only the error
list stays open so the recovery policy can record what happened.

State machine::

    PENDING → VALIDATING → PROCESSING → COMPLETED
        └──────────┴────────────┴─────→ FAILED | CANCELLED
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from docsift.core.constants import TERMINAL_STATUSES, ProcessingStatus
from docsift.pipeline.errors import InvalidTransitionError
from docsift.pipeline.record import Record

_FORWARD_TRANSITIONS: dict[ProcessingStatus, ProcessingStatus] = {
    ProcessingStatus.PENDING: ProcessingStatus.VALIDATING,
    ProcessingStatus.VALIDATING: ProcessingStatus.PROCESSING,
    ProcessingStatus.PROCESSING: ProcessingStatus.COMPLETED,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ═══════════════════════════════════════════════════════════
#  ProcessingError
# ═══════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ProcessingError:
    """A timestamped error entry on a context."""

    message: str
    cause: BaseException | None = None
    timestamp: datetime = field(default_factory=_utcnow)

    def __str__(self) -> str:
        suffix = f" - {self.cause}" if self.cause is not None else ""
        return f"[{self.timestamp.isoformat()}] {self.message}{suffix}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "cause": repr(self.cause) if self.cause is not None else None,
            "timestamp": self.timestamp.isoformat(),
        }


# ═══════════════════════════════════════════════════════════
#  DocumentMetadata
# ═══════════════════════════════════════════════════════════

@dataclass
class DocumentMetadata:
    """
    Known per-document metadata, with an open ``extra`` bag for
    application data that has no dedicated field.
    """

    file_name: str | None = None
    file_path: str | None = None
    file_size: int | None = None
    extractor: str | None = None
    detected_type: str | None = None
    excluded: bool = False
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_name": self.file_name,
            "file_path": self.file_path,
            "file_size": self.file_size,
            "extractor": self.extractor,
            "detected_type": self.detected_type,
            "excluded": self.excluded,
            "extra": dict(self.extra),
        }


# ═══════════════════════════════════════════════════════════
#  ProcessingContext
# ═══════════════════════════════════════════════════════════

@dataclass
class ProcessingContext:
    """Mutable state of one document while it is being processed."""

    source: Path
    keywords: frozenset[str] = frozenset()
    status: ProcessingStatus = ProcessingStatus.PENDING
    errors: list[ProcessingError] = field(default_factory=list)
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)
    processed_items: int = 0
    total_items: int = 0
    started_at: datetime = field(default_factory=_utcnow)
    completed_at: datetime | None = None

    def __post_init__(self) -> None:
        self.source = Path(self.source)
        # Snapshot: later changes to the caller's set never leak in.
        self.keywords = frozenset(self.keywords or ())

    # ─── Status ────────────────────────────────────────

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_complete(self) -> bool:
        return self.status == ProcessingStatus.COMPLETED

    @property
    def is_failed(self) -> bool:
        return self.status == ProcessingStatus.FAILED

    @property
    def is_cancelled(self) -> bool:
        return self.status == ProcessingStatus.CANCELLED

    def set_status(self, status: ProcessingStatus) -> None:
        """
        Move to ``status``.

        Re-entering the current terminal status is a no-op, so the end
        time is stamped exactly once.

        Raises:
            InvalidTransitionError: If the state machine forbids the move.
        """
        status = ProcessingStatus(status)

        if self.is_terminal:
            if status == self.status:
                return
            raise InvalidTransitionError(
                f"Context for {self.source.name} is already {self.status}, cannot move to {status}",
                document=self.source,
            )

        allowed = (
            status in (ProcessingStatus.FAILED, ProcessingStatus.CANCELLED)
            or _FORWARD_TRANSITIONS.get(self.status) == status
        )
        if not allowed:
            raise InvalidTransitionError(
                f"Illegal transition {self.status} → {status} for {self.source.name}",
                document=self.source,
            )

        self.status = status
        if status in TERMINAL_STATUSES:
            self.completed_at = _utcnow()

    def _ensure_open(self, what: str) -> None:
        if self.is_terminal:
            raise InvalidTransitionError(
                f"Cannot change {what} of {self.source.name}: context is {self.status}",
                document=self.source,
            )

    # ─── Progress ──────────────────────────────────────

    def set_total_items(self, total: int) -> None:
        self._ensure_open("total items")
        self.total_items = max(0, total)

    def set_processed_items(self, processed: int) -> None:
        self._ensure_open("processed items")
        self.processed_items = max(0, processed)

    def increment_processed_items(self) -> None:
        self.set_processed_items(self.processed_items + 1)

    @property
    def progress(self) -> float:
        """Percentage in [0, 100]; 0 when nothing is expected."""
        if self.total_items == 0:
            return 0.0
        return min(100.0, max(0.0, self.processed_items / self.total_items * 100.0))

    @property
    def processing_time_ms(self) -> int:
        end = self.completed_at or _utcnow()
        return int((end - self.started_at).total_seconds() * 1000)

    # ─── Metadata ──────────────────────────────────────

    def update_metadata(self, **fields: Any) -> None:
        """Set known metadata fields, e.g. ``update_metadata(extractor="pdf")``."""
        self._ensure_open("metadata")
        for key, value in fields.items():
            if key == "extra" or not hasattr(self.metadata, key):
                raise KeyError(f"Unknown metadata field: {key}")
            setattr(self.metadata, key, value)

    def mark_excluded(self) -> None:
        """
        Flag the document as left out of further processing.

        Allowed after the terminal transition: the recovery policy runs
        once the document has already failed.
        """
        self.metadata.excluded = True

    def set_extra(self, key: str, value: Any) -> None:
        """Store application data that has no dedicated metadata field."""
        self._ensure_open("metadata")
        self.metadata.extra[key] = value

    def get_extra(self, key: str, default: Any = None) -> Any:
        return self.metadata.extra.get(key, default)

    # ─── Errors ────────────────────────────────────────

    def add_error(self, message: str, cause: BaseException | None = None) -> ProcessingError:
        """Append an error entry.  The list is append-only."""
        entry = ProcessingError(message=message, cause=cause)
        self.errors.append(entry)
        return entry

    def has_error_for(self, cause: BaseException) -> bool:
        """True if ``cause`` (or an exception it wraps) is already recorded."""
        seen = {id(cause)}
        inner = cause.__cause__
        while inner is not None:
            seen.add(id(inner))
            inner = inner.__cause__
        return any(e.cause is not None and id(e.cause) in seen for e in self.errors)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    # ─── Serialisation ────────────────────────────────

    def to_summary_dict(self) -> dict[str, Any]:
        """Compact summary for logging / CLI output."""
        return {
            "source": str(self.source),
            "status": str(self.status),
            "keywords": sorted(self.keywords),
            "progress": self.progress,
            "processed_items": self.processed_items,
            "total_items": self.total_items,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "processing_time_ms": self.processing_time_ms,
            "metadata": self.metadata.to_dict(),
            "errors": [e.to_dict() for e in self.errors],
        }

    def __str__(self) -> str:
        return (
            f"ProcessingContext(file={self.source.name}, status={self.status}, "
            f"progress={self.progress:.1f}%, errors={len(self.errors)}, "
            f"time={self.processing_time_ms}ms)"
        )


# ═══════════════════════════════════════════════════════════
#  ProcessingResult
# ═══════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ProcessingResult:
    """A terminal context paired with the records it produced."""

    context: ProcessingContext
    records: tuple[Record, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "records", tuple(self.records))

    @property
    def status(self) -> ProcessingStatus:
        return self.context.status

    @property
    def success(self) -> bool:
        return self.context.is_complete and not self.context.has_errors

    @property
    def has_errors(self) -> bool:
        return self.context.has_errors
