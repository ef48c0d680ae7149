"""
Corpus deduplication.

Records are scanned in order; a record is kept unless it is equivalent
(Record.is_equivalent) to one already kept.  Only kept records are
compared against, so equivalence is not chained: if A~B and B~C but not
A~C, and A is kept, B is dropped and C is still kept.
"""

from __future__ import annotations

from typing import Iterable

from docsift.core.logging import get_logger
from docsift.pipeline.context import ProcessingResult
from docsift.pipeline.record import Record

logger = get_logger(__name__)


def deduplicate_records(records: Iterable[Record]) -> list[Record]:
    """Order-preserving, first-wins deduplication."""
    unique: list[Record] = []
    dropped = 0
    for record in records:
        if any(record.is_equivalent(kept) for kept in unique):
            dropped += 1
            continue
        unique.append(record)

    if dropped:
        logger.debug("Duplicate records removed", kept=len(unique), dropped=dropped)
    return unique


def collect_records(results: Iterable[ProcessingResult]) -> list[Record]:
    """Concatenate the records of every result, in result order."""
    records: list[Record] = []
    for result in results:
        records.extend(result.records)
    return records


def deduplicate_results(results: Iterable[ProcessingResult]) -> list[Record]:
    return deduplicate_records(collect_records(results))
