"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import AbstractSet, Callable, Iterable

import pytest
from docx import Document
from openpyxl import Workbook
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from docsift.pipeline.errors import ExtractionError
from docsift.pipeline.extractor import BaseExtractor
from docsift.pipeline.record import Record
from docsift.pipeline.registry import ExtractorRegistry


# ═══════════════════════════════════════════════════════════
#  Document builders
# ═══════════════════════════════════════════════════════════

def make_xlsx(path: Path, rows: list[list], title: str = "Sheet1", extra_sheets: dict | None = None) -> Path:
    """Write ``rows`` (header first) to a new workbook."""
    wb = Workbook()
    ws = wb.active
    ws.title = title
    for row in rows:
        ws.append(row)
    for sheet_title, sheet_rows in (extra_sheets or {}).items():
        sheet = wb.create_sheet(sheet_title)
        for row in sheet_rows:
            sheet.append(row)
    wb.save(path)
    return path


def make_docx(path: Path, paragraphs: Iterable[str] = (), tables: Iterable[list[list[str]]] = ()) -> Path:
    """Write paragraphs, then tables (first row is the header)."""
    document = Document()
    for text in paragraphs:
        document.add_paragraph(text)
    for rows in tables:
        table = document.add_table(rows=len(rows), cols=len(rows[0]))
        for r, row in enumerate(rows):
            for c, value in enumerate(row):
                table.cell(r, c).text = value
    document.save(str(path))
    return path


def make_pdf(path: Path, pages: list[list[tuple[float, str]]]) -> Path:
    """
    Write a text PDF with reportlab.

    Args:
        pages: One list per page of ``(y, text)`` lines drawn at x=72 in
               12pt Helvetica (y measured from the bottom of a letter page).
    """
    pdf = canvas.Canvas(str(path), pagesize=letter)
    for lines in pages:
        pdf.setFont("Helvetica", 12)
        for y, text in lines:
            pdf.drawString(72, y, text)
        pdf.showPage()
    pdf.save()
    return path


# ═══════════════════════════════════════════════════════════
#  Fake extractors
# ═══════════════════════════════════════════════════════════

class StaticExtractor(BaseExtractor):
    """
    Returns a fixed record per document; optionally sleeps or raises.

    Useful for exercising the engine without real decoders.
    """

    def __init__(
        self,
        name: str = "static",
        accepts: Callable[[Path], bool] = lambda path: True,
        delay: float | Callable[[Path], float] = 0.0,
        fail_on: Callable[[Path], bool] = lambda path: False,
    ) -> None:
        self.name = name
        self._accepts = accepts
        self._delay = delay
        self._fail_on = fail_on
        self.calls: list[Path] = []
        self._lock = threading.Lock()

    def supports(self, path: Path) -> bool:
        return self._accepts(path)

    def extract(self, path: Path, keywords: AbstractSet[str]) -> list[Record]:
        path = self.validate(path)
        with self._lock:
            self.calls.append(path)
        delay = self._delay(path) if callable(self._delay) else self._delay
        if delay:
            time.sleep(delay)
        if self._fail_on(path):
            raise ExtractionError(f"Failed to parse {path.name}", document=path)
        return [Record(source=path.name, position=1, content=path.read_text(errors="replace"), filled_fields=1)]


# ═══════════════════════════════════════════════════════════
#  Fixtures
# ═══════════════════════════════════════════════════════════

@pytest.fixture
def ann_xlsx(tmp_path) -> Path:
    """Spreadsheet with a single Ann row."""
    return make_xlsx(
        tmp_path / "ann.xlsx",
        [["ID", "Name", "Email"], ["7", "Ann", "ann@x.com"]],
    )


@pytest.fixture
def candidates_xlsx(tmp_path) -> Path:
    return make_xlsx(
        tmp_path / "candidates.xlsx",
        [
            ["Candidate ID", "Name", "Email", "Phone", "Skills"],
            ["C-1", "Ann Lee", "ann@x.com", None, "Python"],
            ["C-2", "Bob Stone", "bob@x.com", "555-123-4567", "Java, Python"],
            [None, None, None, None, None],
            ["C-3", "Cara Diaz", None, None, "Go"],
        ],
        title="Candidates",
        extra_sheets={"Archive": [["Name", "Notes"], ["Dan Moss", "python fan"]]},
    )


@pytest.fixture
def sample_docx(tmp_path) -> Path:
    return make_docx(
        tmp_path / "profile.docx",
        paragraphs=[
            "Senior engineer with Python experience.",
            "",
            "Reach me at eve@example.org or +1 (555) 010-9999.",
            "Hobbies: chess",
        ],
        tables=[[
            ["Employee ID", "Name", "Email", "Phone"],
            ["E-9", "Eve Park", "", "555-777-8888"],
            ["E-10", "Finn Roe", "finn@example.org", ""],
        ]],
    )


@pytest.fixture
def sample_pdf(tmp_path) -> Path:
    return make_pdf(
        tmp_path / "resume.pdf",
        [
            [
                (720, "Gina Holt"),
                (706, "gina@example.com"),
                (650, "Experienced Python developer"),
                (636, "Call 555-222-3333"),
            ],
            [
                (720, "References available on request"),
            ],
        ],
    )


@pytest.fixture
def text_documents(tmp_path) -> list[Path]:
    """Ten small text documents for engine tests with StaticExtractor."""
    paths = []
    for i in range(10):
        path = tmp_path / f"doc_{i}.txt"
        path.write_text(f"document {i}")
        paths.append(path)
    return paths


@pytest.fixture
def static_extractor() -> StaticExtractor:
    return StaticExtractor()


@pytest.fixture
def static_registry(static_extractor) -> ExtractorRegistry:
    return ExtractorRegistry([static_extractor])
