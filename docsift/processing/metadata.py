"""
File metadata helpers — descriptive attributes of documents on disk.
"""

from __future__ import annotations

import os
from collections import Counter
from pathlib import Path
from typing import Any, Iterable

from docsift.core.config import settings
from docsift.core.constants import FileType
from docsift.processing.format_detector import describe, detect_file_type, mime_type

_SIZE_UNITS = "KMGTPE"


def format_file_size(size: int) -> str:
    """Human-readable size, e.g. ``1.5 KB``."""
    if size < 1024:
        return f"{size} B"
    value = float(size)
    exp = 0
    while value >= 1024 and exp < len(_SIZE_UNITS):
        value /= 1024
        exp += 1
    return f"{value:.1f} {_SIZE_UNITS[exp - 1]}B"


def extract_metadata(path: str | os.PathLike) -> dict[str, Any]:
    """Return descriptive attributes of ``path``; empty dict if it does not exist."""
    path = Path(path)
    if not path.exists():
        return {}

    stat = path.stat()
    file_type = detect_file_type(path)
    metadata: dict[str, Any] = {
        "name": path.name,
        "path": str(path.resolve()),
        "size": stat.st_size,
        "size_human": format_file_size(stat.st_size),
        "last_modified": stat.st_mtime,
        "can_read": os.access(path, os.R_OK),
        "can_write": os.access(path, os.W_OK),
        "is_hidden": path.name.startswith("."),
        "extension": path.suffix[1:].lower(),
        "detected_type": str(file_type),
        "mime_type": mime_type(file_type),
        "type_description": describe(file_type),
    }
    parent = path.resolve().parent
    metadata["parent_dir"] = parent.name
    metadata["parent_path"] = str(parent)
    return metadata


def is_processable(path: str | os.PathLike) -> bool:
    """True for readable regular files of a recognised type."""
    path = Path(path)
    if not path.is_file() or not os.access(path, os.R_OK):
        return False
    return detect_file_type(path) != FileType.UNKNOWN


def summarize_files(paths: Iterable[str | os.PathLike]) -> dict[str, Any]:
    """Aggregate size and type distribution for a set of files."""
    paths = [Path(p) for p in paths]
    if not paths:
        return {"total_files": 0, "total_size": 0}

    total_size = 0
    processable = 0
    types: Counter[str] = Counter()
    for path in paths:
        if not path.is_file():
            continue
        total_size += path.stat().st_size
        if is_processable(path):
            processable += 1
        types[str(detect_file_type(path))] += 1

    return {
        "total_files": len(paths),
        "processable_files": processable,
        "total_size": total_size,
        "total_size_human": format_file_size(total_size),
        "type_distribution": dict(types),
    }


def validate_file(path: str | os.PathLike) -> list[str]:
    """List everything wrong with ``path``; an empty list means it looks usable."""
    path = Path(path)
    if not path.exists():
        return [f"File does not exist: {path}"]

    problems: list[str] = []
    if not path.is_file():
        problems.append(f"Not a regular file: {path}")
        return problems
    if not os.access(path, os.R_OK):
        problems.append(f"Cannot read file: {path}")

    size = path.stat().st_size
    if size == 0:
        problems.append(f"File is empty: {path.name}")
    if size > settings.MAX_DOCUMENT_SIZE_MB * 1024 * 1024:
        problems.append(f"File is too large (> {settings.MAX_DOCUMENT_SIZE_MB}MB): {path.name}")
    if detect_file_type(path) == FileType.UNKNOWN:
        problems.append(f"Unknown or unsupported file type: {path.name}")
    return problems
