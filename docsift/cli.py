"""
docsift command line — search documents for keywords.

Usage:
    docsift cvs/ archive.zip -k python -k django
    docsift cvs/ -k python --kind spreadsheet --export matches.xlsx
    docsift report.pdf --json
"""

from __future__ import annotations

import argparse
import json
import sys

from docsift.core.config import settings
from docsift.core.constants import DocumentKind, ExportFormat, RecoveryStrategy
from docsift.core.logging import get_logger, setup_logging
from docsift.export import export_records
from docsift.pipeline.engine import PipelineEngine
from docsift.pipeline.errors import PipelineError
from docsift.pipeline.recovery import ErrorRecoveryPolicy
from docsift.pipeline.service import search_documents

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docsift",
        description="Extract keyword-matching records from spreadsheets, PDFs and Word documents.",
    )
    parser.add_argument("paths", nargs="+", help="Files, directories or ZIP archives")
    parser.add_argument(
        "-k", "--keyword", dest="keywords", action="append", default=[],
        help="Keyword to match (repeatable); no keywords extracts everything",
    )
    parser.add_argument(
        "--kind", dest="kinds", action="append", default=[],
        choices=[k.value.lower() for k in DocumentKind],
        help="Only process documents of this kind (repeatable)",
    )
    parser.add_argument("--workers", type=int, default=settings.MAX_WORKERS, help="Worker pool size")
    parser.add_argument(
        "--strategy",
        default=str(settings.RECOVERY_STRATEGY),
        choices=[s.value for s in RecoveryStrategy],
        help="Error recovery strategy",
    )
    parser.add_argument("--export", metavar="PATH", help="Write the deduplicated records to PATH")
    parser.add_argument(
        "--format",
        dest="export_format",
        default=ExportFormat.SPREADSHEET.value,
        choices=[f.value for f in ExportFormat],
        help="Export format",
    )
    parser.add_argument("--json", action="store_true", help="Print the full report as JSON")
    parser.add_argument("--log-level", default=None, help="Override DOCSIFT_LOG_LEVEL")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        with PipelineEngine(
            max_workers=args.workers,
            recovery=ErrorRecoveryPolicy(args.strategy),
        ) as engine:
            report = search_documents(engine, args.paths, args.keywords, args.kinds)
    except (PipelineError, ValueError) as exc:
        logger.error("Search failed", error=str(exc))
        return 2

    if args.export:
        export_records(report.records, args.export, args.export_format)

    if args.json:
        print(json.dumps(report.to_dict(), indent=2, default=str))
    else:
        for record in report.records:
            location = f"{record.source}" + (f" [{record.section}]" if record.section else "")
            print(f"{location} #{record.position}: {record.content}")
        print(
            f"\n{len(report.records)} record(s) from {len(report.completed)} document(s); "
            f"{len(report.failed)} failed, {report.duplicates_removed} duplicate(s) removed",
            file=sys.stderr,
        )

    return 1 if report.failed else 0


if __name__ == "__main__":
    sys.exit(main())
