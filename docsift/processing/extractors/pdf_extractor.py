"""
PDF extractor — matching paragraphs from a PDF text layer (pdfplumber).

Text lines are grouped into paragraphs by vertical whitespace: a gap
larger than PARAGRAPH_GAP_RATIO × the previous line's height starts a
new paragraph.  Emails and phone numbers are pulled out of each
paragraph by pattern.
"""

from __future__ import annotations

from pathlib import Path
from typing import AbstractSet, Any

import pdfplumber

from docsift.core.constants import FileType
from docsift.core.logging import get_logger
from docsift.pipeline.errors import ExtractionError
from docsift.pipeline.extractor import BaseExtractor
from docsift.pipeline.record import Record
from docsift.processing.extractors.fields import find_email, find_phone, matches_keywords
from docsift.processing.format_detector import detect_file_type

logger = get_logger(__name__)

PARAGRAPH_GAP_RATIO = 0.8


def group_paragraphs(lines: list[dict[str, Any]]) -> list[str]:
    """
    Join pdfplumber text lines (dicts with text/top/bottom) into paragraphs.
    """
    paragraphs: list[list[str]] = []
    previous = None
    for line in lines:
        text = (line.get("text") or "").strip()
        if not text:
            continue
        if previous is None:
            paragraphs.append([text])
        else:
            height = max(previous["bottom"] - previous["top"], 1.0)
            gap = line["top"] - previous["bottom"]
            if gap > height * PARAGRAPH_GAP_RATIO:
                paragraphs.append([text])
            else:
                paragraphs[-1].append(text)
        previous = line
    return ["\n".join(chunk) for chunk in paragraphs]


class PdfExtractor(BaseExtractor):
    """Extract matching paragraphs from PDF documents."""

    name = "pdf"

    def supports(self, path: Path) -> bool:
        return detect_file_type(path) == FileType.PDF

    def extract(self, path: Path, keywords: AbstractSet[str]) -> list[Record]:
        path = self.validate(path)
        records: list[Record] = []
        position = 0

        try:
            with pdfplumber.open(path) as pdf:
                for page_number, page in enumerate(pdf.pages, start=1):
                    for paragraph in group_paragraphs(page.extract_text_lines()):
                        position += 1
                        if not matches_keywords([paragraph], keywords):
                            continue
                        records.append(
                            self._build_record(paragraph, path.name, page_number, position)
                        )
        except Exception as exc:
            raise ExtractionError(
                f"Failed to parse PDF {path.name}: {exc}",
                document=path,
            ) from exc

        logger.info("PDF extraction complete", document=path.name, records=len(records))
        return records

    @staticmethod
    def _build_record(paragraph: str, source: str, page_number: int, position: int) -> Record:
        email = find_email(paragraph)
        contact = find_phone(paragraph)
        filled = 1 + (email is not None) + (contact is not None)
        return Record(
            source=source,
            section=f"Page {page_number}",
            position=position,
            email=email,
            contact=contact,
            content=paragraph,
            filled_fields=filled,
        )
