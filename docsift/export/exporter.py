"""
Record export — writes a record list to an .xlsx workbook (openpyxl),
a .docx table (python-docx) or a paginated PDF listing (reportlab).

The pipeline core never imports this module; callers export whatever
record list they end up with (usually the deduplicated one).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

from docx import Document
from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from docsift.core.constants import ExportFormat
from docsift.core.logging import get_logger
from docsift.pipeline.record import Record

logger = get_logger(__name__)

EXPORT_COLUMNS = (
    "Source",
    "Section",
    "Position",
    "Identifier",
    "Name",
    "Email",
    "Contact",
    "Content",
)
SHEET_TITLE = "Matches"
MAX_COLUMN_WIDTH = 80

PDF_TITLE = "Extracted records"
PDF_LEFT_MARGIN = 50
PDF_BOTTOM_MARGIN = 100
PDF_LINE_SPACING = 30
PDF_CONTENT_CHARS = 60


def _row(record: Record) -> list[str | int]:
    return [
        record.source,
        record.section or "",
        record.position,
        record.identifier or "",
        record.name or "",
        record.email or "",
        record.contact or "",
        record.content,
    ]


def export_records(
    records: Iterable[Record],
    path: str | os.PathLike,
    fmt: ExportFormat | str = ExportFormat.SPREADSHEET,
) -> Path:
    """
    Write ``records`` to ``path`` in the given format.

    Args:
        fmt: "spreadsheet" / "excel" (xlsx), "word" (docx) or "pdf".

    Raises:
        ValueError: For any other format.
    """
    try:
        fmt = ExportFormat(str(fmt).lower())
    except ValueError:
        raise ValueError(f"Unsupported export format: {fmt}") from None

    path = Path(path)
    records = list(records)
    if fmt == ExportFormat.WORD:
        _export_word(records, path)
    elif fmt == ExportFormat.PDF:
        _export_pdf(records, path)
    else:
        _export_spreadsheet(records, path)

    logger.info("Records exported", path=str(path), format=str(fmt), records=len(records))
    return path


def _export_spreadsheet(records: list[Record], path: Path) -> None:
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    ws.append(list(EXPORT_COLUMNS))
    for cell in ws[1]:
        cell.font = Font(bold=True)

    widths = [len(h) for h in EXPORT_COLUMNS]
    for record in records:
        values = _row(record)
        ws.append(values)
        for i, value in enumerate(values):
            widths[i] = max(widths[i], len(str(value)))

    for i, width in enumerate(widths, start=1):
        ws.column_dimensions[get_column_letter(i)].width = min(width + 2, MAX_COLUMN_WIDTH)

    wb.save(path)


def _export_word(records: list[Record], path: Path) -> None:
    document = Document()
    document.add_heading("Extracted records", level=1)

    table = document.add_table(rows=1, cols=len(EXPORT_COLUMNS))
    table.style = "Table Grid"
    for cell, header in zip(table.rows[0].cells, EXPORT_COLUMNS):
        cell.text = header
        for run in cell.paragraphs[0].runs:
            run.bold = True

    for record in records:
        cells = table.add_row().cells
        for cell, value in zip(cells, _row(record)):
            cell.text = str(value)

    document.save(str(path))
def _pdf_line(record: Record) -> str:
    content = record.content
    if len(content) > PDF_CONTENT_CHARS:
        content = content[:PDF_CONTENT_CHARS] + "..."
    location = record.source + (f" [{record.section}]" if record.section else "")
    return f"{location} | #{record.position} | {content}"


def _export_pdf(records: list[Record], path: Path) -> None:
    """One line per record, starting a new page when the bottom margin is reached."""
    pdf = canvas.Canvas(str(path), pagesize=letter)
    _, height = letter

    pdf.setFont("Helvetica-Bold", 12)
    pdf.drawString(PDF_LEFT_MARGIN, height - 42, PDF_TITLE)
    y = height - 72

    for record in records:
        if y < PDF_BOTTOM_MARGIN:
            pdf.showPage()
            y = height - 42
        pdf.setFont("Helvetica", 10)
        pdf.drawString(PDF_LEFT_MARGIN, y, _pdf_line(record))
        y -= PDF_LINE_SPACING

    pdf.save()
