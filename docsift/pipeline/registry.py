"""
ExtractorRegistry — ordered collection of extractors with first-match selection.

Registration order is the only precedence rule: resolve() walks the
extractors in the order they were registered and returns the first one
whose supports() accepts the document.

To add support for a new format:
    1. Implement BaseExtractor
    2. registry.register(MyExtractor()) (or engine.register_extractor)
    3. The engine picks it up on the next document

Mutation takes a lock and replaces the internal tuple, so resolution
always iterates a consistent snapshot even while another thread
registers.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Iterable

from docsift.core.logging import get_logger
from docsift.pipeline.extractor import BaseExtractor

logger = get_logger(__name__)


class ExtractorRegistry:
    """
    Resolves a document to the extractor that will process it.

    Lookup order:
        1. Extractors in registration order
        2. First whose supports(path) is True wins
        3. None when nothing matches
    """

    def __init__(self, extractors: Iterable[BaseExtractor] | None = None) -> None:
        self._lock = threading.Lock()
        self._extractors: tuple[BaseExtractor, ...] = ()
        for extractor in extractors or ():
            self.register(extractor)

    @classmethod
    def with_defaults(cls) -> ExtractorRegistry:
        """Registry holding the built-in spreadsheet, PDF and Word extractors."""
        registry = cls()
        registry.register_defaults()
        return registry

    # ─── Mutation ──────────────────────────────────────

    def register(self, extractor: BaseExtractor) -> bool:
        """
        Append ``extractor`` unless this exact instance is already registered.

        Returns:
            True if it was added.
        """
        if extractor is None:
            raise ValueError("extractor cannot be None")
        with self._lock:
            if any(existing is extractor for existing in self._extractors):
                return False
            self._extractors = (*self._extractors, extractor)
        logger.debug("Extractor registered", extractor=extractor.name)
        return True

    def register_defaults(self) -> None:
        """Append the built-in extractors (spreadsheet, PDF, Word)."""
        from docsift.processing.extractors import default_extractors

        for extractor in default_extractors():
            self.register(extractor)

    def clear(self) -> None:
        """Remove every extractor (useful for testing)."""
        with self._lock:
            self._extractors = ()

    def reset_to_defaults(self) -> None:
        """Drop custom extractors and restore the built-in set."""
        self.clear()
        self.register_defaults()

    # ─── Lookup ────────────────────────────────────────

    def extractors(self) -> list[BaseExtractor]:
        """Snapshot of the registered extractors, in precedence order."""
        return list(self._extractors)

    def resolve(self, path: str | Path) -> BaseExtractor | None:
        """Return the first extractor that supports ``path``, or None."""
        path = Path(path)
        for extractor in self._extractors:
            if extractor.supports(path):
                return extractor
        return None

    def can_process(self, path: str | Path) -> bool:
        return self.resolve(path) is not None

    def get_by_name(self, name: str) -> BaseExtractor | None:
        """Case-insensitive lookup by extractor name."""
        wanted = name.lower()
        for extractor in self._extractors:
            if extractor.name.lower() == wanted:
                return extractor
        return None

    def __len__(self) -> int:
        return len(self._extractors)

    def __iter__(self):
        return iter(self._extractors)
