"""
Error kinds raised by the sitemap, CSV and redirect transforms.

Each error carries a stable ``code`` so the HTTP layer (or any other caller)
can tell failures apart without matching on message text.
"""

from __future__ import annotations

from typing import Dict


class SlugmapError(Exception):
    code = "slugmap_error"
    message = "Operation failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message

    def as_detail(self) -> Dict[str, str]:
        return {"code": self.code, "message": self.message}


class ParseError(SlugmapError):
    code = "parse_error"


class MalformedMarkup(ParseError):
    code = "malformed_markup"
    message = "Unable to read sitemap XML"


class ReconcileError(SlugmapError):
    code = "reconcile_error"


class NoSitemapLoaded(ReconcileError):
    code = "no_sitemap_loaded"
    message = "Upload a sitemap first"


class EmptyTable(ReconcileError):
    code = "empty_table"
    message = "Empty CSV"


class MissingRequiredColumns(ReconcileError):
    code = "missing_required_columns"
    message = "CSV must include Old Page URL and Redirect Type columns"


class IndexOutOfRange(ReconcileError):
    code = "index_out_of_range"
    message = "Redirect index out of range"


class NothingToExport(SlugmapError):
    code = "nothing_to_export"
    message = "Nothing to export"
