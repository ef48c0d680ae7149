"""
PipelineEngine — the orchestrator that runs documents through extraction.

Responsibilities:
    - Validate each document before extraction
    - Resolve the extractor via the ExtractorRegistry
    - Drive the ProcessingContext state machine and notify observers
    - Process corpora on a bounded worker pool, never failing fast
    - Apply the ErrorRecoveryPolicy to per-document failures
    - Shut the worker pool down on every exit path
"""

from __future__ import annotations

import os
import threading
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Callable, Iterable

import structlog

from docsift.core.config import settings
from docsift.core.constants import ProcessingStatus, RecoveryStrategy
from docsift.pipeline.context import ProcessingContext, ProcessingResult
from docsift.pipeline.errors import (
    DocumentProcessingError,
    PipelineClosedError,
    PreconditionError,
    UnsupportedDocumentError,
)
from docsift.pipeline.extractor import BaseExtractor, validate_document
from docsift.pipeline.observers import ProgressBroadcaster, ProgressObserver
from docsift.pipeline.recovery import ErrorRecoveryPolicy
from docsift.pipeline.registry import ExtractorRegistry
from docsift.processing.extractors.fields import normalize_keywords
from docsift.processing.format_detector import detect_file_type

Validator = Callable[[Path], None]
PathLike = str | os.PathLike


class PipelineEngine:
    """
    Runs documents through validation, extractor resolution and extraction.

    Usage (single document)::

        with PipelineEngine() as engine:
            result = engine.process_one("candidates.xlsx", {"python"})

    Usage (corpus)::

        with PipelineEngine(max_workers=8) as engine:
            results = engine.process_many(paths, {"python", "django"})
            records = deduplicate_results(results)

    The single-document path raises DocumentProcessingError on failure.
    The corpus path turns every per-document failure into a FAILED result
    and returns one result per submitted document, in submission order.
    """

    def __init__(
        self,
        registry: ExtractorRegistry | None = None,
        max_workers: int | None = None,
        recovery: ErrorRecoveryPolicy | None = None,
        observers: Iterable[ProgressObserver] = (),
        validators: Iterable[Validator] = (),
        shutdown_timeout: float | None = None,
    ) -> None:
        self.registry = registry if registry is not None else ExtractorRegistry.with_defaults()
        self.max_workers = max_workers if max_workers is not None else settings.MAX_WORKERS
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")
        self.recovery = recovery if recovery is not None else ErrorRecoveryPolicy()
        self.broadcaster = ProgressBroadcaster(observers)
        self.validators: list[Validator] = list(validators)
        self.shutdown_timeout = (
            shutdown_timeout if shutdown_timeout is not None else settings.SHUTDOWN_TIMEOUT_SECONDS
        )

        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="docsift-worker"
        )
        self._lock = threading.Lock()
        self._closed = False
        self._cancelled = threading.Event()
        self._futures: set[Future] = set()
        self.logger = structlog.get_logger("docsift.engine")

    # ═══════════════════════════════════════════════════════
    #  Configuration
    # ═══════════════════════════════════════════════════════

    def register_extractor(self, extractor: BaseExtractor) -> bool:
        return self.registry.register(extractor)

    def add_observer(self, observer: ProgressObserver) -> None:
        self.broadcaster.add(observer)

    def add_validator(self, validator: Validator) -> None:
        self.validators.append(validator)

    def configure_recovery(self, strategy: RecoveryStrategy | str) -> None:
        self.recovery.strategy = strategy

    @property
    def is_shutdown(self) -> bool:
        return self._closed

    # ═══════════════════════════════════════════════════════
    #  Caller-facing entry points
    # ═══════════════════════════════════════════════════════

    def submit(
        self,
        documents: PathLike | Iterable[PathLike],
        keywords: Iterable[str] | None = None,
    ) -> ProcessingResult | list[ProcessingResult]:
        """Process one document (path) or many (iterable of paths)."""
        if isinstance(documents, (str, os.PathLike)):
            return self.process_one(documents, keywords)
        return self.process_many(documents, keywords)

    def process_one(
        self, document: PathLike, keywords: Iterable[str] | None = None
    ) -> ProcessingResult:
        """
        Process a single document.

        Raises:
            DocumentProcessingError: On any failure, chained to the cause
                and carrying the FAILED context.
        """
        context = ProcessingContext(source=Path(document), keywords=normalize_keywords(keywords))
        return self._run(context)

    def process_many(
        self,
        documents: Iterable[PathLike],
        keywords: Iterable[str] | None = None,
    ) -> list[ProcessingResult]:
        """
        Process a corpus on the worker pool.

        Raises:
            PipelineClosedError: If the engine was shut down; nothing is
                left running in that case.
        """
        if isinstance(documents, (str, os.PathLike)):
            documents = [documents]
        paths = [Path(d) for d in documents]
        normalized = normalize_keywords(keywords)
        log = self.logger.bind(documents=len(paths), workers=self.max_workers)
        log.info("Corpus processing started", keywords=sorted(normalized))

        futures: list[Future] = []
        try:
            for path in paths:
                futures.append(self._submit_task(path, normalized))
        except (PipelineClosedError, RuntimeError) as exc:
            for future in futures:
                future.cancel()
            log.error("Submission rejected", submitted=len(futures), error=str(exc))
            if isinstance(exc, PipelineClosedError):
                raise
            raise PipelineClosedError("Engine is shut down", details={"submitted": len(futures)}) from exc

        # Positional collection keeps results in submission order.
        results: list[ProcessingResult] = []
        for path, future in zip(paths, futures):
            try:
                results.append(future.result())
            except CancelledError:
                log.warning("Document cancelled before it started", document=path.name)
            except Exception as exc:
                log.error("Result collection failed", document=path.name, error=str(exc))

        failed = sum(1 for r in results if r.status == ProcessingStatus.FAILED)
        log.info(
            "Corpus processing finished",
            results=len(results),
            failed=failed,
            records=sum(len(r.records) for r in results),
        )
        return results

    # ═══════════════════════════════════════════════════════
    #  Shutdown
    # ═══════════════════════════════════════════════════════

    def shutdown(self, timeout: float | None = None) -> None:
        """
        Stop accepting work, wait for outstanding documents up to
        ``timeout`` seconds, then cancel whatever has not started.

        Safe to call more than once.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            outstanding = [f for f in self._futures if not f.done()]

        timeout = self.shutdown_timeout if timeout is None else timeout
        self.logger.info("Engine shutting down", outstanding=len(outstanding), timeout=timeout)

        _, not_done = wait(outstanding, timeout=timeout)
        if not_done:
            self._cancelled.set()
            self.logger.warning("Shutdown timed out, cancelling pending work", pending=len(not_done))
        self._executor.shutdown(wait=not not_done, cancel_futures=True)
        self.logger.info("Engine shut down")

    def __enter__(self) -> PipelineEngine:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    # ═══════════════════════════════════════════════════════
    #  Internals
    # ═══════════════════════════════════════════════════════

    def _submit_task(self, path: Path, keywords: frozenset[str]) -> Future:
        with self._lock:
            if self._closed:
                raise PipelineClosedError(
                    f"Engine is shut down, cannot accept {path.name}", document=path
                )
            future = self._executor.submit(self._process_in_worker, path, keywords)
            self._futures.add(future)
        future.add_done_callback(self._forget_future)
        return future

    def _forget_future(self, future: Future) -> None:
        with self._lock:
            self._futures.discard(future)

    def _process_in_worker(self, path: Path, keywords: frozenset[str]) -> ProcessingResult:
        """Corpus worker: one context per document, failures become FAILED results."""
        context = ProcessingContext(source=path, keywords=keywords)

        if self._cancelled.is_set():
            context.set_status(ProcessingStatus.CANCELLED)
            self.logger.info("Document cancelled", document=path.name)
            return ProcessingResult(context)

        try:
            return self._run(context)
        except DocumentProcessingError as exc:
            cause = exc.__cause__ or exc
            try:
                self.recovery.handle(context, cause, path)
            except DocumentProcessingError:
                self.logger.error(
                    "Document failed under fail-fast strategy",
                    document=path.name,
                    error=str(cause),
                )
            return ProcessingResult(context)

    def _validate(self, path: Path) -> None:
        validate_document(path)
        for validator in self.validators:
            try:
                validator(path)
            except PreconditionError:
                raise
            except Exception as exc:
                raise PreconditionError(
                    f"Validation rejected {path.name}: {exc}", document=path
                ) from exc

    def _run(self, context: ProcessingContext) -> ProcessingResult:
        path = context.source
        log = self.logger.bind(document=path.name, keywords=sorted(context.keywords))

        self.broadcaster.started(context)
        log.debug("Document started")

        try:
            context.set_status(ProcessingStatus.VALIDATING)
            self._validate(path)

            extractor = self.registry.resolve(path)
            file_type = detect_file_type(path)
            if extractor is None:
                raise UnsupportedDocumentError(
                    f"No extractor supports {path.name} (detected type {file_type})",
                    document=path,
                    details={"detected_type": str(file_type)},
                )

            context.update_metadata(
                file_name=path.name,
                file_path=str(path),
                file_size=path.stat().st_size,
                extractor=extractor.name,
                detected_type=str(file_type),
            )
            log = log.bind(extractor=extractor.name)

            context.set_status(ProcessingStatus.PROCESSING)
            records = extractor.extract(path, context.keywords)

            context.set_total_items(len(records))
            context.set_processed_items(len(records))
            self.broadcaster.progress(context)

            context.set_status(ProcessingStatus.COMPLETED)
        except Exception as exc:
            if not context.is_terminal:
                context.set_status(ProcessingStatus.FAILED)
            context.add_error(f"Failed to process {path.name}: {exc}", exc)
            log.warning(
                "Document failed",
                status=str(context.status),
                error=str(exc),
                error_type=type(exc).__name__,
            )
            self.broadcaster.failed(context, exc)
            raise DocumentProcessingError(
                f"Failed to process {path.name}: {exc}",
                document=path,
                context=context,
            ) from exc

        self.broadcaster.completed(context)
        log.info(
            "Document completed",
            records=len(records),
            duration_ms=context.processing_time_ms,
        )
        return ProcessingResult(context, records)
