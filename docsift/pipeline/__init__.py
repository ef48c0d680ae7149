"""
Pipeline Engine — concurrent keyword extraction over document corpora.

This package provides the orchestrator that validates documents,
selects a format extractor from an ordered registry, extracts records
matching a keyword set and reports progress and errors per document,
plus corpus-level deduplication of the extracted records.
"""

from docsift.pipeline.context import DocumentMetadata, ProcessingContext, ProcessingError, ProcessingResult
from docsift.pipeline.dedup import collect_records, deduplicate_records, deduplicate_results
from docsift.pipeline.engine import PipelineEngine
from docsift.pipeline.errors import (
    DocumentProcessingError,
    ExtractionError,
    InvalidTransitionError,
    PipelineClosedError,
    PipelineError,
    PreconditionError,
    UnsupportedDocumentError,
)
from docsift.pipeline.extractor import BaseExtractor, validate_document
from docsift.pipeline.observers import LoggingObserver, ProgressBroadcaster, ProgressObserver, callback_observer
from docsift.pipeline.record import Record
from docsift.pipeline.recovery import ErrorRecoveryPolicy
from docsift.pipeline.registry import ExtractorRegistry

__all__ = [
    "BaseExtractor",
    "DocumentMetadata",
    "DocumentProcessingError",
    "ErrorRecoveryPolicy",
    "ExtractionError",
    "ExtractorRegistry",
    "InvalidTransitionError",
    "LoggingObserver",
    "PipelineClosedError",
    "PipelineEngine",
    "PipelineError",
    "PreconditionError",
    "ProcessingContext",
    "ProcessingError",
    "ProcessingResult",
    "ProgressBroadcaster",
    "ProgressObserver",
    "Record",
    "UnsupportedDocumentError",
    "callback_observer",
    "collect_records",
    "deduplicate_records",
    "deduplicate_results",
    "validate_document",
]
