"""
Format Detector — identifies a document's type from its signature bytes,
falling back to the file extension.

ZIP containers (XLSX, DOCX, plain ZIP) share a signature; the extension
decides first, and when it is not conclusive the archive's member names
are inspected.
"""

from __future__ import annotations

import os
import zipfile
from pathlib import Path

from docsift.core.constants import FileType

PDF_SIGNATURE = b"%PDF"
ZIP_SIGNATURE = b"PK\x03\x04"
OLE2_SIGNATURE = b"\xd0\xcf\x11\xe0"

# Extension → type mapping
EXTENSION_MAP: dict[str, FileType] = {
    ".xlsx": FileType.XLSX,
    ".xls": FileType.XLS,
    ".pdf": FileType.PDF,
    ".docx": FileType.DOCX,
    ".doc": FileType.DOC,
    ".zip": FileType.ZIP,
}

MIME_TYPES: dict[FileType, str] = {
    FileType.XLSX: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    FileType.XLS: "application/vnd.ms-excel",
    FileType.PDF: "application/pdf",
    FileType.DOCX: "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    FileType.DOC: "application/msword",
    FileType.ZIP: "application/zip",
    FileType.UNKNOWN: "application/octet-stream",
}

DESCRIPTIONS: dict[FileType, str] = {
    FileType.XLSX: "Excel Spreadsheet",
    FileType.XLS: "Excel 97-2003 Spreadsheet",
    FileType.PDF: "PDF Document",
    FileType.DOCX: "Word Document",
    FileType.DOC: "Word 97-2003 Document",
    FileType.ZIP: "ZIP Archive",
    FileType.UNKNOWN: "Unknown",
}


def _read_signature(path: Path) -> bytes:
    with open(path, "rb") as f:
        return f.read(4)


def _sniff_zip_members(path: Path) -> FileType:
    """Tell OOXML packages from plain archives by their member names."""
    try:
        with zipfile.ZipFile(path) as archive:
            names = archive.namelist()
    except (zipfile.BadZipFile, OSError):
        return FileType.ZIP
    if any(n.startswith("word/") for n in names):
        return FileType.DOCX
    if any(n.startswith("xl/") for n in names):
        return FileType.XLSX
    return FileType.ZIP


def _detect_by_extension(path: Path) -> FileType:
    return EXTENSION_MAP.get(path.suffix.lower(), FileType.UNKNOWN)


def detect_file_type(path: str | os.PathLike) -> FileType:
    """
    Detect the document type.

    Returns FileType.UNKNOWN for missing paths, directories and
    unrecognised content.
    """
    path = Path(path)
    if not path.is_file():
        return FileType.UNKNOWN

    try:
        signature = _read_signature(path)
    except OSError:
        return _detect_by_extension(path)

    if signature == PDF_SIGNATURE:
        return FileType.PDF
    if signature == OLE2_SIGNATURE:
        # OLE2 covers both legacy Excel and legacy Word
        return FileType.DOC if path.suffix.lower() == ".doc" else FileType.XLS
    if signature == ZIP_SIGNATURE:
        by_extension = _detect_by_extension(path)
        if by_extension in (FileType.XLSX, FileType.DOCX, FileType.ZIP):
            return by_extension
        return _sniff_zip_members(path)

    return _detect_by_extension(path)


def mime_type(file_type: FileType) -> str:
    return MIME_TYPES[file_type]


def describe(file_type: FileType) -> str:
    return DESCRIPTIONS[file_type]


def is_spreadsheet(path: str | os.PathLike) -> bool:
    return detect_file_type(path) in (FileType.XLSX, FileType.XLS)


def is_pdf(path: str | os.PathLike) -> bool:
    return detect_file_type(path) == FileType.PDF


def is_word_document(path: str | os.PathLike) -> bool:
    return detect_file_type(path) in (FileType.DOCX, FileType.DOC)


def is_zip_archive(path: str | os.PathLike) -> bool:
    return detect_file_type(path) == FileType.ZIP
