"""
Comma-delimited text codec.

Parsing is line-first: the text is split on LF / CRLF and blank lines are
discarded before each line is tokenized. A quoted field containing a literal
newline is therefore split into two rows; multi-line fields are not
supported by this dialect.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional, Sequence

from .rules import CSV_DELIMITER, CSV_QUOTE

logger = logging.getLogger(__name__)

Row = List[str]

_LINE_BREAK_RE = re.compile(r"\r?\n")
_NEEDS_QUOTING_RE = re.compile(r'[",\n]')


def parse_csv_line(line: str) -> Row:
    """
    Tokenize a single line into trimmed cells.

    Rules:
    - Outside quotes, a quote opens a quoted section and a comma ends the cell.
    - Inside quotes, a doubled quote is a literal quote; a lone quote closes
      the section; commas are literal.
    - An unterminated quote at end of line is tolerated.
    """
    cells: Row = []
    current: List[str] = []
    in_quotes = False

    i = 0
    length = len(line)
    while i < length:
        char = line[i]

        if char == CSV_QUOTE:
            if in_quotes and i + 1 < length and line[i + 1] == CSV_QUOTE:
                current.append(CSV_QUOTE)
                i += 2
                continue
            in_quotes = not in_quotes
        elif char == CSV_DELIMITER and not in_quotes:
            cells.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1

    cells.append("".join(current))
    return [cell.strip() for cell in cells]


def parse_csv(text: str) -> List[Row]:
    """Parse delimited text into one row per non-blank line, in input order."""
    lines = [line for line in _LINE_BREAK_RE.split(text) if line]
    rows = [parse_csv_line(line) for line in lines]
    logger.debug("parsed %d csv rows", len(rows))
    return rows


def _format_cell(cell: Optional[str]) -> str:
    value = "" if cell is None else cell
    if _NEEDS_QUOTING_RE.search(value):
        return CSV_QUOTE + value.replace(CSV_QUOTE, CSV_QUOTE * 2) + CSV_QUOTE
    return value


def stringify_csv(rows: Iterable[Sequence[Optional[str]]]) -> str:
    """
    Serialize rows into delimited text.

    Cells holding a quote, comma or newline are quoted with inner quotes
    doubled. Rows are joined with LF and there is no trailing newline.
    """
    return "\n".join(CSV_DELIMITER.join(_format_cell(cell) for cell in row) for row in rows)
