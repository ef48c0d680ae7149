"""
Format-specific extractors.

Each extractor implements BaseExtractor; the default set is, in
precedence order, spreadsheet → PDF → Word.
"""

from docsift.pipeline.extractor import BaseExtractor, validate_document
from docsift.processing.extractors.docx_extractor import DocxExtractor
from docsift.processing.extractors.pdf_extractor import PdfExtractor
from docsift.processing.extractors.spreadsheet_extractor import SpreadsheetExtractor


def default_extractors() -> list[BaseExtractor]:
    """Fresh instances of the built-in extractors, in precedence order."""
    return [SpreadsheetExtractor(), PdfExtractor(), DocxExtractor()]


__all__ = [
    "BaseExtractor",
    "DocxExtractor",
    "PdfExtractor",
    "SpreadsheetExtractor",
    "default_extractors",
    "validate_document",
]
