"""
Input collection — turns user-supplied paths into a flat document list.

Directories are walked recursively and ZIP archives are unpacked into a
temporary directory that lives as long as the ``expand_documents``
context.  An optional set of document kinds filters the result.
"""

from __future__ import annotations

import os
import tempfile
import zipfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator

from docsift.core.constants import DocumentKind
from docsift.core.logging import get_logger
from docsift.processing.format_detector import (
    is_pdf,
    is_spreadsheet,
    is_word_document,
    is_zip_archive,
)

logger = get_logger(__name__)

_KIND_CHECKS = {
    DocumentKind.SPREADSHEET: is_spreadsheet,
    DocumentKind.PDF: is_pdf,
    DocumentKind.WORD: is_word_document,
}


def matches_kinds(path: Path, kinds: Iterable[DocumentKind | str] | None) -> bool:
    """True when the document belongs to one of ``kinds`` (any known kind if empty)."""
    kinds = list(kinds or _KIND_CHECKS)
    return any(_KIND_CHECKS[DocumentKind(str(kind).upper())](path) for kind in kinds)


def _walk(directory: Path) -> Iterator[Path]:
    for child in sorted(directory.rglob("*")):
        if child.is_file():
            yield child


def _unpack(archive: Path, workdir: Path) -> Path:
    """Extract ``archive`` below ``workdir``, refusing members that escape it."""
    target = Path(tempfile.mkdtemp(prefix=f"{archive.stem}_", dir=workdir))
    with zipfile.ZipFile(archive) as zf:
        for member in zf.namelist():
            destination = (target / member).resolve()
            if not destination.is_relative_to(target.resolve()):
                raise ValueError(f"Unsafe path in archive {archive.name}: {member}")
        zf.extractall(target)
    logger.debug("Archive extracted", archive=archive.name, target=str(target))
    return target


@contextmanager
def expand_documents(
    paths: Iterable[str | os.PathLike],
    kinds: Iterable[DocumentKind | str] | None = None,
) -> Iterator[list[Path]]:
    """
    Expand files, directories and ZIP archives into document paths.

    Usage::

        with expand_documents(["inbox/", "batch.zip"], kinds={"pdf"}) as docs:
            results = engine.process_many(docs, keywords)

    Files found inside directories and archives are kept only when they
    are spreadsheets, PDFs or Word documents (restricted further by
    ``kinds``).  Paths named by the caller that do not exist, or are of
    an unknown type, are passed through unchanged so the engine reports
    them as FAILED results instead of silently dropping them.  Archives
    that are corrupt or hold members escaping the extraction directory are
    passed through the same way.
    Extracted archive contents are removed when the context exits.
    """
    if isinstance(paths, (str, os.PathLike)):
        paths = [paths]
    kinds = list(kinds or ())
    documents: list[Path] = []

    with tempfile.TemporaryDirectory(prefix="docsift_") as tmp:
        workdir = Path(tmp)
        # (path, named explicitly by the caller)
        pending = [(Path(p), True) for p in paths]

        while pending:
            path, explicit = pending.pop(0)
            if path.is_dir():
                pending[0:0] = [(child, False) for child in _walk(path)]
            elif path.is_file() and is_zip_archive(path):
                try:
                    extracted = _unpack(path, workdir)
                except (zipfile.BadZipFile, ValueError, OSError) as exc:
                    # The engine reports the archive itself as a failed document
                    logger.warning("Archive could not be unpacked", archive=path.name, error=str(exc))
                    documents.append(path)
                    continue
                pending[0:0] = [(child, False) for child in _walk(extracted)]
            elif explicit and not kinds:
                documents.append(path)
            elif not path.exists() or matches_kinds(path, kinds):
                documents.append(path)

        logger.info("Documents collected", documents=len(documents), kinds=[str(k) for k in kinds])
        yield documents
