"""
Helpers shared by the extractors: keyword matching, cell formatting,
header → field classification and email / phone detection.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import AbstractSet, Any, Iterable

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

# Candidate phone numbers: digits with optional separators / parentheses.
PHONE_CANDIDATE_PATTERN = re.compile(r"\+?\(?\d[\d \t().-]{5,}\d")
ISO_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
PHONE_MIN_DIGITS = 7
PHONE_MAX_DIGITS = 15

_TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")


# ─── Keywords ─────────────────────────────────────────

def normalize_keywords(keywords: Iterable[str] | None) -> frozenset[str]:
    """Lower-case and strip keywords, dropping blank ones.  A bare string is one keyword."""
    if isinstance(keywords, str):
        keywords = [keywords]
    if not keywords:
        return frozenset()
    return frozenset(k.strip().lower() for k in keywords if k and k.strip())


def matches_keywords(texts: Iterable[str | None], keywords: AbstractSet[str]) -> bool:
    """
    True when ``keywords`` is empty, or when any keyword is a
    case-insensitive substring of any of ``texts``.
    """
    needles = normalize_keywords(keywords)
    if not needles:
        return True
    for text in texts:
        if not text:
            continue
        haystack = text.lower()
        if any(needle in haystack for needle in needles):
            return True
    return False


# ─── Cells ────────────────────────────────────────────

def cell_text(value: Any) -> str:
    """Render a spreadsheet / table cell as text ("" for empty cells)."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value).strip()


# ─── Header classification ────────────────────────────

def classify_header(header: str) -> str | None:
    """
    Map a column header to a record field name.

    Returns one of "email", "identifier", "name", "contact" or None.
    """
    h = header.strip().lower()
    if not h:
        return None
    tokens = set(_TOKEN_SPLIT.split(h))

    if "email" in h or "e-mail" in h:
        return "email"
    if "id" in tokens or ("candidate" in h and "id" in h):
        return "identifier"
    if "name" in h and "file" not in h:
        return "name"
    if "contact" in h or "phone" in h or "mobile" in h:
        return "contact"
    return None


def fields_from_row(headers: list[str], values: list[str]) -> dict[str, str]:
    """
    Pick record fields out of a header/value row.  The first non-empty
    value wins for each field.
    """
    found: dict[str, str] = {}
    for header, value in zip(headers, values):
        if not value:
            continue
        field_name = classify_header(header)
        if field_name and field_name not in found:
            found[field_name] = value
    return found


# ─── Free text ────────────────────────────────────────

def find_email(text: str) -> str | None:
    match = EMAIL_PATTERN.search(text)
    return match.group() if match else None


def find_phone(text: str) -> str | None:
    """First run of 7–15 digits that looks like a phone number."""
    for match in PHONE_CANDIDATE_PATTERN.finditer(text):
        candidate = match.group().strip()
        if ISO_DATE_PATTERN.fullmatch(candidate):
            continue
        digits = sum(ch.isdigit() for ch in candidate)
        if PHONE_MIN_DIGITS <= digits <= PHONE_MAX_DIGITS:
            return candidate
    return None
