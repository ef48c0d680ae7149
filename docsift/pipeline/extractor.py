"""
Abstract base class for all extractors.

An extractor is the format-specific capability the pipeline selects
for a document: it says whether it can read the document and turns
it into records matching a keyword set.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import AbstractSet

from docsift.pipeline.errors import PreconditionError
from docsift.pipeline.record import Record


def validate_document(path: str | os.PathLike | None) -> Path:
    """
    Shared precondition check: the document exists, is a regular file,
    is readable and is not empty.

    Returns:
        The document as a Path.

    Raises:
        PreconditionError: Chained to FileNotFoundError / PermissionError
            where the OS-level reason is known.
    """
    if path is None:
        raise PreconditionError("Document cannot be None")

    path = Path(path)
    if not path.exists():
        raise PreconditionError(
            f"File does not exist: {path}", document=path
        ) from FileNotFoundError(str(path))
    if not path.is_file():
        raise PreconditionError(f"Not a file: {path}", document=path)
    if not os.access(path, os.R_OK):
        raise PreconditionError(
            f"Cannot read file: {path}", document=path
        ) from PermissionError(str(path))
    if path.stat().st_size == 0:
        raise PreconditionError(f"File is empty: {path}", document=path)
    return path


class BaseExtractor(ABC):
    """
    Base interface for document extractors.

    Subclasses MUST implement:
        - name (str)             — stable identifier for logs/metadata
        - supports(path)         — pure classification, no side effects
        - extract(path, keywords) — decode the document into records

    Every implementation honours the same keyword contract: an empty
    keyword set returns every extractable unit; otherwise a unit is kept
    when any keyword is a case-insensitive substring of a field it reads.
    """

    name: str = "unnamed_extractor"

    @abstractmethod
    def supports(self, path: Path) -> bool:
        """Return True if this extractor can handle the document."""
        ...

    @abstractmethod
    def extract(self, path: Path, keywords: AbstractSet[str]) -> list[Record]:
        """
        Extract matching records.

        Raise ExtractionError (or let PreconditionError escape from
        validate()) on failure.
        """
        ...

    def validate(self, path: Path) -> Path:
        """Precondition check run before decoding.  Default: validate_document()."""
        return validate_document(path)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"
