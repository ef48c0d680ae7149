"""
ErrorRecoveryPolicy — decides what happens to a document after a failure.

The policy is applied by whichever component catches the failure (the
engine's corpus path, or a caller of the single-document path).  It
records the error on the context, notifies error listeners, then applies
the configured strategy:

    FAIL_FAST          → mark FAILED and raise DocumentProcessingError
    SKIP_AND_CONTINUE  → mark the document excluded, carry on
    RETRY              → not implemented; logged and treated as skip
    LOG_AND_CONTINUE   → record only, document is not excluded
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from docsift.core.config import settings
from docsift.core.constants import ProcessingStatus, RecoveryAction, RecoveryStrategy
from docsift.core.logging import get_logger
from docsift.pipeline.context import ProcessingContext
from docsift.pipeline.errors import (
    DocumentProcessingError,
    ExtractionError,
    PreconditionError,
    UnsupportedDocumentError,
)

logger = get_logger(__name__)

ErrorListener = Callable[[ProcessingContext, BaseException, Path], None]


class ErrorRecoveryPolicy:
    """Applies a RecoveryStrategy to failed documents."""

    def __init__(self, strategy: RecoveryStrategy | str | None = None) -> None:
        self._strategy = RecoveryStrategy(strategy or settings.RECOVERY_STRATEGY)
        self._listeners: list[ErrorListener] = []

    @property
    def strategy(self) -> RecoveryStrategy:
        return self._strategy

    @strategy.setter
    def strategy(self, value: RecoveryStrategy | str) -> None:
        self._strategy = RecoveryStrategy(value)
        logger.info("Recovery strategy changed", strategy=str(self._strategy))

    def add_error_listener(self, listener: ErrorListener) -> None:
        """Register a callable invoked for every handled error, before the strategy runs."""
        self._listeners.append(listener)

    # ─── Handling ─────────────────────────────────────

    def handle(
        self,
        context: ProcessingContext,
        error: BaseException,
        document: str | Path | None = None,
    ) -> RecoveryAction:
        """
        Record ``error`` against ``context`` and apply the strategy.

        Returns:
            SKIP, or CONTINUE.

        Raises:
            DocumentProcessingError: Under FAIL_FAST.
        """
        document = Path(document) if document is not None else context.source
        log = logger.bind(document=document.name, strategy=str(self._strategy))
        log.warning(
            "Handling document error",
            error=str(error),
            error_type=type(error).__name__,
            recoverable=self.is_recoverable(error),
        )

        if not context.has_error_for(error):
            context.add_error(f"Error processing {document.name}: {error}", error)

        self._notify_listeners(context, error, document)

        if self._strategy == RecoveryStrategy.FAIL_FAST:
            context.set_status(ProcessingStatus.FAILED)
            raise DocumentProcessingError(
                f"Processing of {document.name} failed: {error}",
                document=document,
                context=context,
            ) from error

        if self._strategy == RecoveryStrategy.RETRY:
            log.warning("Retry not implemented, skipping document")
            context.mark_excluded()
            return RecoveryAction.SKIP

        if self._strategy == RecoveryStrategy.SKIP_AND_CONTINUE:
            context.mark_excluded()
            log.info("Document excluded from further processing")
            return RecoveryAction.SKIP

        return RecoveryAction.CONTINUE

    def handle_validation_error(
        self,
        context: ProcessingContext,
        message: str,
        document: str | Path | None = None,
    ) -> RecoveryAction:
        """Handle a validation failure that has no exception of its own."""
        error = PreconditionError(message, document=document or context.source)
        return self.handle(context, error, document)

    def _notify_listeners(
        self, context: ProcessingContext, error: BaseException, document: Path
    ) -> None:
        for listener in list(self._listeners):
            try:
                listener(context, error, document)
            except Exception as exc:
                logger.warning(
                    "Error listener raised, continuing",
                    listener=getattr(listener, "__name__", repr(listener)),
                    document=document.name,
                    error=str(exc),
                )

    # ─── Classification ───────────────────────────────

    @staticmethod
    def is_recoverable(error: BaseException) -> bool:
        """
        Whether retrying could plausibly succeed.

        Missing / unreadable documents, unsupported types and parse
        failures are not recoverable; other I/O errors are.
        """
        if isinstance(error, (FileNotFoundError, PermissionError)):
            return False
        if isinstance(error, (PreconditionError, UnsupportedDocumentError)):
            return False
        if isinstance(error, ExtractionError) and error.__cause__ is not None:
            return ErrorRecoveryPolicy.is_recoverable(error.__cause__)
        if isinstance(error, OSError):
            return True
        return "parse" not in str(error).lower()
