"""
Progress observation — fan-out of lifecycle events to registered observers.

Observers are notified synchronously on the thread processing the
document.  A failing observer never affects the pipeline or the other
observers: its exception is logged and kept on the broadcaster's
``failures`` list so it can be inspected afterwards.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Iterable

from docsift.core.constants import ProgressEvent
from docsift.core.logging import get_logger
from docsift.pipeline.context import ProcessingContext

logger = get_logger(__name__)


class ProgressObserver:
    """Base observer.  Override only the hooks you need; the rest do nothing."""

    def on_started(self, context: ProcessingContext) -> None:
        pass

    def on_progress(self, context: ProcessingContext) -> None:
        pass

    def on_completed(self, context: ProcessingContext) -> None:
        pass

    def on_failed(self, context: ProcessingContext, error: BaseException) -> None:
        pass


class _CallbackObserver(ProgressObserver):
    def __init__(self, on_started, on_progress, on_completed, on_failed) -> None:
        self._started = on_started
        self._progress = on_progress
        self._completed = on_completed
        self._failed = on_failed

    def on_started(self, context: ProcessingContext) -> None:
        if self._started:
            self._started(context)

    def on_progress(self, context: ProcessingContext) -> None:
        if self._progress:
            self._progress(context)

    def on_completed(self, context: ProcessingContext) -> None:
        if self._completed:
            self._completed(context)

    def on_failed(self, context: ProcessingContext, error: BaseException) -> None:
        if self._failed:
            self._failed(context, error)


def callback_observer(
    on_completed: Callable[[ProcessingContext], None] | None = None,
    *,
    on_started: Callable[[ProcessingContext], None] | None = None,
    on_progress: Callable[[ProcessingContext], None] | None = None,
    on_failed: Callable[[ProcessingContext, BaseException], None] | None = None,
) -> ProgressObserver:
    """Build an observer from plain callables."""
    return _CallbackObserver(on_started, on_progress, on_completed, on_failed)


class LoggingObserver(ProgressObserver):
    """Writes every lifecycle event to the structured log."""

    def __init__(self, logger_name: str = "docsift.progress") -> None:
        self.logger = get_logger(logger_name)

    def on_started(self, context: ProcessingContext) -> None:
        self.logger.info("Document started", document=context.source.name)

    def on_progress(self, context: ProcessingContext) -> None:
        self.logger.debug(
            "Document progress",
            document=context.source.name,
            progress=round(context.progress, 1),
        )

    def on_completed(self, context: ProcessingContext) -> None:
        self.logger.info(
            "Document completed",
            document=context.source.name,
            items=context.processed_items,
            duration_ms=context.processing_time_ms,
        )

    def on_failed(self, context: ProcessingContext, error: BaseException) -> None:
        self.logger.warning("Document failed", document=context.source.name, error=str(error))


@dataclass(frozen=True)
class ObserverFailure:
    """An exception raised by an observer and swallowed by the broadcaster."""

    observer: ProgressObserver
    event: ProgressEvent
    document: str
    error: BaseException
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ProgressBroadcaster:
    """Notifies every registered observer of lifecycle events."""

    def __init__(self, observers: Iterable[ProgressObserver] = ()) -> None:
        self._observers: list[ProgressObserver] = list(observers)
        self._failures: list[ObserverFailure] = []
        self._lock = threading.Lock()

    def add(self, observer: ProgressObserver) -> None:
        with self._lock:
            self._observers = [*self._observers, observer]

    @property
    def observers(self) -> list[ProgressObserver]:
        return list(self._observers)

    @property
    def failures(self) -> list[ObserverFailure]:
        """Observer exceptions swallowed so far, oldest first."""
        with self._lock:
            return list(self._failures)

    def clear_failures(self) -> None:
        with self._lock:
            self._failures.clear()

    # ─── Events ───────────────────────────────────────

    def started(self, context: ProcessingContext) -> None:
        self._notify(ProgressEvent.STARTED, context, lambda o: o.on_started(context))

    def progress(self, context: ProcessingContext) -> None:
        self._notify(ProgressEvent.PROGRESS, context, lambda o: o.on_progress(context))

    def completed(self, context: ProcessingContext) -> None:
        self._notify(ProgressEvent.COMPLETED, context, lambda o: o.on_completed(context))

    def failed(self, context: ProcessingContext, error: BaseException) -> None:
        self._notify(ProgressEvent.FAILED, context, lambda o: o.on_failed(context, error))

    def _notify(
        self,
        event: ProgressEvent,
        context: ProcessingContext,
        action: Callable[[ProgressObserver], None],
    ) -> None:
        for observer in self._observers:
            try:
                action(observer)
            except Exception as exc:
                logger.warning(
                    "Observer raised, continuing",
                    observer=type(observer).__name__,
                    progress_event=str(event),
                    document=context.source.name,
                    error=str(exc),
                )
                with self._lock:
                    self._failures.append(
                        ObserverFailure(
                            observer=observer,
                            event=event,
                            document=str(context.source),
                            error=exc,
                        )
                    )
