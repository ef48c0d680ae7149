"""
Spreadsheet extractor — matching rows from every sheet of an XLS/XLSX file.

The first row of each sheet is the header.  Column headers decide which
record fields a value fills (email, identifier, name, contact); every
non-empty cell contributes to the record's content and filled-field count.

Supports both .xls (via xlrd) and .xlsx (via openpyxl) formats.
"""

from __future__ import annotations

from pathlib import Path
from typing import AbstractSet, Any, Iterator

import xlrd
from openpyxl import load_workbook

from docsift.core.constants import FileType
from docsift.core.logging import get_logger
from docsift.pipeline.errors import ExtractionError
from docsift.pipeline.extractor import BaseExtractor
from docsift.pipeline.record import Record
from docsift.processing.extractors.fields import cell_text, fields_from_row, matches_keywords
from docsift.processing.format_detector import detect_file_type

logger = get_logger(__name__)


# ═══════════════════════════════════════════════════════════
#  Sheet Adapters — uniform interface over xlrd / openpyxl
# ═══════════════════════════════════════════════════════════

class XlrdSheetAdapter:
    """Adapter for xlrd sheets (0-based indexing)."""

    def __init__(self, sheet) -> None:
        self._s = sheet
        self.title = sheet.name
        self.nrows = sheet.nrows
        self.ncols = sheet.ncols

    def raw_value(self, r: int, c: int) -> Any:
        if c >= self._s.row_len(r):
            return None
        value = self._s.cell_value(r, c)
        return value if value != "" else None

    def merged_ranges(self):
        for rlo, rhi, clo, chi in self._s.merged_cells:
            yield rlo, rhi, clo, chi


class OpenpyxlSheetAdapter:
    """Adapter for openpyxl worksheets (converts 1-based to 0-based)."""

    def __init__(self, ws) -> None:
        self._ws = ws
        self.title = ws.title
        self.nrows = ws.max_row
        self.ncols = ws.max_column

    def raw_value(self, r: int, c: int) -> Any:
        return self._ws.cell(r + 1, c + 1).value

    def merged_ranges(self):
        for merged_range in self._ws.merged_cells.ranges:
            yield (
                merged_range.min_row - 1,
                merged_range.max_row,
                merged_range.min_col - 1,
                merged_range.max_col,
            )


def _load_sheets(path: Path, file_type: FileType) -> list:
    """Load every sheet of an XLS or XLSX file."""
    if file_type == FileType.XLS:
        workbook = xlrd.open_workbook(str(path))
        return [XlrdSheetAdapter(sheet) for sheet in workbook.sheets()]
    workbook = load_workbook(path, data_only=True)
    return [OpenpyxlSheetAdapter(ws) for ws in workbook.worksheets]


def _build_merged_lookup(sheet) -> dict[tuple[int, int], Any]:
    """Build a lookup: (row, col) → top-left value for all merged cells."""
    lookup = {}
    for rlo, rhi, clo, chi in sheet.merged_ranges():
        top_left = sheet.raw_value(rlo, clo)
        for row in range(rlo, rhi):
            for col in range(clo, chi):
                lookup[(row, col)] = top_left
    return lookup


def _value_at(sheet, row: int, col: int, merged_lookup: dict) -> Any:
    """Get the effective value at (row, col), respecting merged cells."""
    value = sheet.raw_value(row, col)
    return value if value is not None else merged_lookup.get((row, col))


def _row_texts(sheet, row: int, merged_lookup: dict) -> list[str]:
    return [cell_text(_value_at(sheet, row, col, merged_lookup)) for col in range(sheet.ncols)]


# ═══════════════════════════════════════════════════════════
#  Extractor
# ═══════════════════════════════════════════════════════════

class SpreadsheetExtractor(BaseExtractor):
    """Extract matching rows from Excel workbooks."""

    name = "spreadsheet"

    def supports(self, path: Path) -> bool:
        return detect_file_type(path) in (FileType.XLSX, FileType.XLS)

    def extract(self, path: Path, keywords: AbstractSet[str]) -> list[Record]:
        path = self.validate(path)
        file_type = detect_file_type(path)

        try:
            sheets = _load_sheets(path, file_type)
        except Exception as exc:
            raise ExtractionError(
                f"Failed to parse spreadsheet {path.name}: {exc}",
                document=path,
                details={"file_type": str(file_type)},
            ) from exc

        records: list[Record] = []
        for sheet in sheets:
            records.extend(self._extract_sheet(sheet, path.name, keywords))

        # Most complete rows first; ties keep sheet/row order.
        records.sort(key=lambda r: r.filled_fields, reverse=True)

        logger.info(
            "Spreadsheet extraction complete",
            document=path.name,
            sheets=len(sheets),
            records=len(records),
        )
        return records

    def _extract_sheet(
        self, sheet, source: str, keywords: AbstractSet[str]
    ) -> Iterator[Record]:
        if sheet.nrows == 0 or sheet.ncols == 0:
            return

        merged_lookup = _build_merged_lookup(sheet)
        headers = [
            text or f"Column {col + 1}"
            for col, text in enumerate(_row_texts(sheet, 0, merged_lookup))
        ]

        for row_index in range(1, sheet.nrows):
            values = _row_texts(sheet, row_index, merged_lookup)
            if not any(values):
                continue
            if not matches_keywords(values, keywords):
                continue
            yield self._build_record(headers, values, source, sheet.title, row_index)

    @staticmethod
    def _build_record(
        headers: list[str],
        values: list[str],
        source: str,
        section: str,
        row_index: int,
    ) -> Record:
        fields = fields_from_row(headers, values)
        content = " | ".join(
            f"{header}: {value}" for header, value in zip(headers, values) if value
        )
        return Record(
            source=source,
            section=section,
            position=row_index,
            identifier=fields.get("identifier"),
            name=fields.get("name"),
            email=fields.get("email"),
            contact=fields.get("contact"),
            content=content,
            filled_fields=sum(1 for value in values if value),
        )
