"""
Uploaded file decoding.

Browsers hand the original tool text; here uploads arrive as bytes, so the
encoding is detected best-effort before the text reaches the parsers.
"""

from __future__ import annotations

import logging

from charset_normalizer import from_bytes

logger = logging.getLogger(__name__)

_UTF8_BOM = b"\xef\xbb\xbf"


def decode_upload(raw: bytes) -> str:
    """
    Decode uploaded bytes to text.

    Rules:
    - A UTF-8 BOM is honoured and stripped.
    - Otherwise detect the encoding via charset-normalizer, trying utf-8 when
      detection yields nothing.
    - If the guess fails to decode, fall back to utf-8 with replacement
      characters so parsing can proceed deterministically.
    """
    if raw.startswith(_UTF8_BOM):
        return raw.decode("utf-8-sig", errors="replace")

    match = from_bytes(raw).best()
    encoding = match.encoding if match is not None else "utf-8"

    try:
        return raw.decode(encoding)
    except (LookupError, UnicodeDecodeError):
        logger.warning("could not decode upload as %s; using utf-8 with replacement", encoding)
        return raw.decode("utf-8", errors="replace")
