"""
Record — one extracted unit of matched content.

A record is a spreadsheet row, a PDF paragraph, a Word paragraph or a
Word table row that matched the keyword set, together with whatever
identifying fields the extractor could pull out of it.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class Record:
    """
    Immutable extracted record.

    Args:
        source: Identifier of the document the record came from (file name).
        section: Sheet name, "Page N" or "Table N"; None for plain paragraphs.
        position: Ordinal of the unit within its source/section.
        identifier: Candidate/employee style ID, if one was found.
        name: Person name, if one was found.
        email: Email address, if one was found.
        contact: Phone / contact number, if one was found.
        content: Free-text body of the unit.
        filled_fields: Number of non-empty attributes at extraction time.
                       Used only as a sort key.
    """

    source: str
    position: int = 0
    section: str | None = None
    identifier: str | None = None
    name: str | None = None
    email: str | None = None
    contact: str | None = None
    content: str = ""
    filled_fields: int = 0

    def is_equivalent(self, other: Record | None) -> bool:
        """
        Deduplication identity: same identifier, same email (ignoring case)
        or same contact.  A field only counts when both sides have it.
        """
        if other is None:
            return False
        if self.identifier and other.identifier and self.identifier == other.identifier:
            return True
        if self.email and other.email and self.email.casefold() == other.email.casefold():
            return True
        if self.contact and other.contact and self.contact == other.contact:
            return True
        return False

    def to_dict(self) -> dict[str, Any]:
        """Serialise for JSON output / export."""
        return asdict(self)
