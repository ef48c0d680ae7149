"""
Domain-specific exception hierarchy for the processing pipeline.

All pipeline exceptions inherit from PipelineError so callers can
catch broadly or narrowly as needed.  Each exception carries the
offending document and a free-form details dict for logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from docsift.pipeline.context import ProcessingContext


class PipelineError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(
        self,
        message: str,
        *,
        document: str | Path | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.document = str(document) if document is not None else None
        self.details = details or {}
        super().__init__(message)


class PreconditionError(PipelineError):
    """The document is missing, unreadable, empty or was rejected by a validator."""
    pass


class UnsupportedDocumentError(PipelineError):
    """No registered extractor accepts the document."""
    pass


class ExtractionError(PipelineError):
    """Format-specific decoding of a document failed."""
    pass


class InvalidTransitionError(PipelineError):
    """A context was moved along an edge the state machine does not allow."""
    pass


class PipelineClosedError(PipelineError):
    """Work was submitted after the engine was shut down."""
    pass


class DocumentProcessingError(PipelineError):
    """
    Wrapped failure surfaced by the single-document path.

    The failed context travels with the exception so batch callers can
    turn it into a FAILED result without rebuilding state.
    """

    def __init__(
        self,
        message: str,
        *,
        context: ProcessingContext | None = None,
        **kwargs: Any,
    ) -> None:
        self.context = context
        super().__init__(message, **kwargs)
