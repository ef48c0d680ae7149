"""
Search service — the end-to-end "find these keywords in these files" call.

Expands inputs (directories, ZIP archives), runs the corpus through the
engine and deduplicates the resulting records.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Iterable

from docsift.core.constants import DocumentKind, ProcessingStatus
from docsift.core.logging import get_logger
from docsift.pipeline.context import ProcessingResult
from docsift.pipeline.dedup import collect_records, deduplicate_records
from docsift.pipeline.engine import PipelineEngine
from docsift.pipeline.record import Record
from docsift.processing.collector import expand_documents

logger = get_logger(__name__)


@dataclass
class SearchReport:
    """Outcome of a search across a corpus."""

    results: list[ProcessingResult] = field(default_factory=list)
    records: list[Record] = field(default_factory=list)
    duplicates_removed: int = 0

    @property
    def failed(self) -> list[ProcessingResult]:
        return [r for r in self.results if r.status == ProcessingStatus.FAILED]

    @property
    def completed(self) -> list[ProcessingResult]:
        return [r for r in self.results if r.status == ProcessingStatus.COMPLETED]

    def to_dict(self) -> dict[str, Any]:
        return {
            "documents": len(self.results),
            "completed": len(self.completed),
            "failed": len(self.failed),
            "duplicates_removed": self.duplicates_removed,
            "records": [r.to_dict() for r in self.records],
            "results": [r.context.to_summary_dict() for r in self.results],
        }


def search_documents(
    engine: PipelineEngine,
    paths: Iterable[str | os.PathLike],
    keywords: Iterable[str] | None = None,
    kinds: Iterable[DocumentKind | str] | None = None,
) -> SearchReport:
    """Expand ``paths``, process every document and deduplicate the records."""
    with expand_documents(paths, kinds) as documents:
        results = engine.process_many(documents, keywords)

    all_records = collect_records(results)
    unique = deduplicate_records(all_records)
    report = SearchReport(
        results=results,
        records=unique,
        duplicates_removed=len(all_records) - len(unique),
    )
    logger.info(
        "Search finished",
        documents=len(results),
        failed=len(report.failed),
        records=len(unique),
        duplicates_removed=report.duplicates_removed,
    )
    return report
