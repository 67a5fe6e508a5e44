"""
Redirect table reconciliation.

Builds :class:`RedirectRecord` objects from parsed CSV rows, normalizes
destinations to leading-slash paths and supports bulk / per-row destination
overrides. Every operation returns a new list; inputs are never mutated.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence

from .errors import EmptyTable, IndexOutOfRange, MissingRequiredColumns, NoSitemapLoaded
from .models import RedirectRecord
from .rules import (
    DEFAULT_REDIRECT_TYPE,
    DESTINATION_COLUMN_ANCHOR,
    OLD_COLUMN_ANCHOR,
    REDIRECT_EXPORT_HEADER,
    REDIRECT_TYPE_COLUMN_ANCHOR,
    SLUG_EXPORT_HEADER,
)

logger = logging.getLogger(__name__)

_SCHEME_HOST_RE = re.compile(r"^https?://[^/]+", re.IGNORECASE)
_LEADING_SLASHES_RE = re.compile(r"^/*")


def ensure_leading_slash(value: Optional[str]) -> str:
    """
    Normalize a destination to a rooted path.

    - empty -> empty (no forced slash)
    - already rooted -> unchanged
    - otherwise drop an ``http(s)://host`` prefix and any leading slashes,
      then prepend a single ``/``
    """
    if not value:
        return ""
    if value.startswith("/"):
        return value
    stripped = _SCHEME_HOST_RE.sub("", value, count=1)
    stripped = _LEADING_SLASHES_RE.sub("", stripped, count=1)
    return "/" + stripped


def find_column(header: Sequence[str], anchor: str) -> Optional[int]:
    """Index of the leftmost header cell containing ``anchor`` (case-insensitive)."""
    for index, cell in enumerate(header):
        if anchor in cell.lower():
            return index
    return None


def _cell(row: Sequence[str], index: Optional[int]) -> str:
    if index is None or index >= len(row):
        return ""
    return row[index] or ""


def build_redirects(rows: Sequence[Sequence[str]], available_slugs: Sequence[str]) -> List[RedirectRecord]:
    """
    Build redirect records from CSV rows whose first row is the header.

    ``available_slugs`` must be non-empty (a sitemap has been loaded); the
    slugs are not used to validate destinations.
    """
    if not available_slugs:
        raise NoSitemapLoaded()
    if not rows:
        raise EmptyTable()

    header, body = rows[0], rows[1:]
    old_index = find_column(header, OLD_COLUMN_ANCHOR)
    destination_index = find_column(header, DESTINATION_COLUMN_ANCHOR)
    type_index = find_column(header, REDIRECT_TYPE_COLUMN_ANCHOR)

    missing = []
    if old_index is None:
        missing.append("Old Page URL")
    if type_index is None:
        missing.append("Redirect Type")
    if missing:
        raise MissingRequiredColumns(
            "CSV must include Old Page URL and Redirect Type columns (missing: %s)" % ", ".join(missing)
        )

    records = [
        RedirectRecord(
            old=_cell(row, old_index),
            destination=ensure_leading_slash(_cell(row, destination_index)),
            type=_cell(row, type_index) or DEFAULT_REDIRECT_TYPE,
        )
        for row in body
    ]

    if destination_index is None:
        logger.info("no destination column found; destinations left empty")
    logger.info("built %d redirect records", len(records))
    return records


def apply_bulk_destination(records: List[RedirectRecord], value: Optional[str]) -> List[RedirectRecord]:
    """Set every record's destination to ``value``; no-op when it normalizes to empty."""
    destination = ensure_leading_slash(value or "")
    if not destination:
        return records
    return [record.model_copy(update={"destination": destination}) for record in records]


def set_destination(records: List[RedirectRecord], index: int, raw_value: Optional[str]) -> List[RedirectRecord]:
    """Replace the destination of the record at ``index``."""
    if index < 0 or index >= len(records):
        raise IndexOutOfRange(f"Redirect index {index} out of range for {len(records)} redirects")
    updated = list(records)
    updated[index] = records[index].model_copy(update={"destination": ensure_leading_slash(raw_value or "")})
    return updated


def export_redirects(records: Sequence[RedirectRecord]) -> List[List[str]]:
    """Rows for the formatted redirect download, header first."""
    rows = [list(REDIRECT_EXPORT_HEADER)]
    for record in records:
        rows.append([record.old, ensure_leading_slash(record.destination), record.type or DEFAULT_REDIRECT_TYPE])
    return rows


def export_slugs(slugs: Sequence[str]) -> List[List[str]]:
    """Rows for the slug download, header first."""
    return [list(SLUG_EXPORT_HEADER)] + [[slug] for slug in slugs]
