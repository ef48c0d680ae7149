"""
Word extractor — matching paragraphs and table rows from .docx files
(python-docx).

Paragraphs come first, in document order, then every table.  The first
row of a table is treated as its header: columns named like email / ID /
name / phone fill the corresponding record fields, and pattern matching
fills email and contact where the headers do not.
"""

from __future__ import annotations

from pathlib import Path
from typing import AbstractSet, Iterator

from docx import Document

from docsift.core.constants import FileType
from docsift.core.logging import get_logger
from docsift.pipeline.errors import ExtractionError
from docsift.pipeline.extractor import BaseExtractor
from docsift.pipeline.record import Record
from docsift.processing.extractors.fields import (
    fields_from_row,
    find_email,
    find_phone,
    matches_keywords,
)
from docsift.processing.format_detector import detect_file_type

logger = get_logger(__name__)


class DocxExtractor(BaseExtractor):
    """Extract matching paragraphs and table rows from Word documents."""

    name = "word"

    def supports(self, path: Path) -> bool:
        # Legacy binary .doc files are not readable by python-docx.
        return detect_file_type(path) == FileType.DOCX

    def extract(self, path: Path, keywords: AbstractSet[str]) -> list[Record]:
        path = self.validate(path)

        try:
            document = Document(str(path))
        except Exception as exc:
            raise ExtractionError(
                f"Failed to parse Word document {path.name}: {exc}",
                document=path,
            ) from exc

        records = list(self._extract_paragraphs(document, path.name, keywords))
        for table_number, table in enumerate(document.tables, start=1):
            records.extend(self._extract_table(table, path.name, table_number, keywords))

        logger.info(
            "Word extraction complete",
            document=path.name,
            tables=len(document.tables),
            records=len(records),
        )
        return records

    @staticmethod
    def _extract_paragraphs(
        document, source: str, keywords: AbstractSet[str]
    ) -> Iterator[Record]:
        for index, paragraph in enumerate(document.paragraphs, start=1):
            text = (paragraph.text or "").strip()
            if not text or not matches_keywords([text], keywords):
                continue
            email = find_email(text)
            contact = find_phone(text)
            yield Record(
                source=source,
                position=index,
                email=email,
                contact=contact,
                content=text,
                filled_fields=1 + (email is not None) + (contact is not None),
            )

    @staticmethod
    def _extract_table(
        table, source: str, table_number: int, keywords: AbstractSet[str]
    ) -> Iterator[Record]:
        rows = table.rows
        if not rows:
            return

        headers = [cell.text.strip() for cell in rows[0].cells]
        for row_index in range(1, len(rows)):
            values = [cell.text.strip() for cell in rows[row_index].cells]
            if not any(values) or not matches_keywords(values, keywords):
                continue

            content = " | ".join(values)
            fields = fields_from_row(headers, values)
            filled = sum(1 for value in values if value)

            # Values only found by pattern count as extra fields
            email = fields.get("email")
            if email is None:
                email = find_email(content)
                filled += email is not None
            contact = fields.get("contact")
            if contact is None:
                contact = find_phone(content)
                filled += contact is not None

            yield Record(
                source=source,
                section=f"Table {table_number}",
                position=row_index,
                identifier=fields.get("identifier"),
                name=fields.get("name"),
                email=email,
                contact=contact,
                content=content,
                filled_fields=filled,
            )
