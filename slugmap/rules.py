"""
Deterministic codec and reconciliation rules.

This file exists to make the fixed dialect and column conventions explicit.
"""

CSV_DELIMITER = ","
CSV_QUOTE = '"'

DEFAULT_REDIRECT_TYPE = "301"

# Header anchors, matched case-insensitively as substrings of header cells.
OLD_COLUMN_ANCHOR = "old"
DESTINATION_COLUMN_ANCHOR = "destination"
REDIRECT_TYPE_COLUMN_ANCHOR = "redirect"

SLUG_EXPORT_HEADER = ["Slug"]
REDIRECT_EXPORT_HEADER = ["Old Page URL", "Destination Page URL", "Redirect Type"]

DEFAULT_PORTS = {"http": 80, "https": 443}

# Characters left as-is when percent-encoding slug paths ("%" keeps existing escapes).
PATH_SAFE_CHARS = "/%:@!$&'()*+,;=~-._[]^|"
