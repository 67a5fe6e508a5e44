"""
Session state for one sitemap / redirect table pair.

The transforms in :mod:`slugmap.sitemap`, :mod:`slugmap.csv_codec` and
:mod:`slugmap.redirects` are pure; this class owns their outputs. Every
operation computes its result first and only then replaces the stored list,
so a failing call leaves the previous slugs and records untouched.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .csv_codec import parse_csv, stringify_csv
from .errors import NothingToExport
from .models import RedirectRecord
from .redirects import (
    apply_bulk_destination,
    build_redirects,
    export_redirects,
    export_slugs,
    set_destination,
)
from .sitemap import extract_slugs

logger = logging.getLogger(__name__)


class Workspace:
    def __init__(self, allowed_host: Optional[str] = None) -> None:
        self.allowed_host = allowed_host
        self.slugs: List[str] = []
        self.records: List[RedirectRecord] = []

    def load_sitemap(self, markup_text: str) -> List[str]:
        slugs = extract_slugs(markup_text, allowed_host=self.allowed_host)
        self.slugs = slugs
        return slugs

    def load_redirects(self, csv_text: str) -> List[RedirectRecord]:
        records = build_redirects(parse_csv(csv_text), self.slugs)
        self.records = records
        return records

    def apply_bulk(self, value: Optional[str]) -> List[RedirectRecord]:
        self.records = apply_bulk_destination(self.records, value)
        return self.records

    def edit_destination(self, index: int, value: Optional[str]) -> List[RedirectRecord]:
        self.records = set_destination(self.records, index, value)
        return self.records

    def slug_preview(self, limit: int = 20) -> List[str]:
        """First ``limit`` slugs, plus a ``+N more`` marker when truncated."""
        limit = max(limit, 0)
        preview = self.slugs[:limit]
        remaining = len(self.slugs) - limit
        if remaining > 0:
            preview.append(f"+{remaining} more")
        return preview

    def slugs_csv(self) -> str:
        if not self.slugs:
            raise NothingToExport("No slugs loaded")
        return stringify_csv(export_slugs(self.slugs))

    def redirects_csv(self) -> str:
        if not self.records:
            raise NothingToExport("No redirects loaded")
        return stringify_csv(export_redirects(self.records))
