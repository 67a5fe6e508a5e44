"""
Sitemap slug extraction.

Responsibilities:
- strict XML parsing (no recovery; malformed input is an error)
- ``url > loc`` collection, namespace agnostic
- reference host inference from the first absolute location
- path normalization, cross-host filtering and first-seen deduplication
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional
from urllib.parse import SplitResult, quote, urlsplit

from lxml import etree

from .errors import MalformedMarkup
from .rules import DEFAULT_PORTS, PATH_SAFE_CHARS

logger = logging.getLogger(__name__)

_LOC_XPATH = etree.XPath("//*[local-name()='url']/*[local-name()='loc']")


def _make_parser() -> etree.XMLParser:
    # Input is already decoded text; force utf-8 so an encoding declaration
    # in the prolog cannot disagree with the bytes we hand to libxml2.
    return etree.XMLParser(
        encoding="utf-8",
        resolve_entities=False,
        no_network=True,
        recover=False,
    )


def _split_absolute(value: str) -> Optional[SplitResult]:
    """Return the split URL when ``value`` is absolute (scheme and host), else None."""
    try:
        parts = urlsplit(value)
        # Accessing .port validates it; bad ports make the URL unparseable.
        parts.port
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc or not parts.hostname:
        return None
    return parts


def _ascii_host(host: str) -> str:
    """Lower-cased, IDNA-encoded host; invalid labels are left as given."""
    try:
        return host.lower().encode("idna").decode("ascii")
    except UnicodeError:
        return host.lower()


def _host_of(parts: SplitResult) -> str:
    host = _ascii_host(parts.hostname or "")
    port = parts.port
    if port is not None and DEFAULT_PORTS.get(parts.scheme.lower()) != port:
        return f"{host}:{port}"
    return host


def _remove_dot_segments(path: str) -> str:
    segments = path.split("/")[1:]
    output: List[str] = []
    for segment in segments:
        if segment == "..":
            if output:
                output.pop()
        elif segment != ".":
            output.append(segment)
    if segments and segments[-1] in (".", ".."):
        output.append("")
    return "/" + "/".join(output)


def canonical_path(path: str) -> str:
    """
    Canonical form of an absolute URL path, as a browser reports it.

    Dot segments are resolved and characters outside the path set (spaces,
    non-ASCII) are percent-encoded; existing escapes are kept.
    """
    if not path:
        return "/"
    return quote(_remove_dot_segments(path), safe=PATH_SAFE_CHARS)


def collect_locations(markup_text: str) -> List[str]:
    """
    Parse sitemap markup and return every ``url/loc`` text, stripped.

    Empty ``loc`` elements produce an empty string rather than being dropped.
    Raises :class:`MalformedMarkup` when the document is not well-formed XML.
    """
    try:
        root = etree.fromstring(markup_text.encode("utf-8"), parser=_make_parser())
    except (etree.XMLSyntaxError, ValueError) as exc:
        raise MalformedMarkup(f"Unable to read sitemap XML: {exc}") from exc

    return [node.xpath("string()").strip() for node in _LOC_XPATH(root)]


def reference_host(locations: Iterable[str]) -> Optional[str]:
    """Host of the first location that parses as an absolute URL."""
    for loc in locations:
        parts = _split_absolute(loc)
        if parts is not None:
            return _host_of(parts)
    return None


def normalize_slug(loc: str, allowed_host: Optional[str] = None) -> Optional[str]:
    """
    Map a sitemap location to a slug, or None when it should be dropped.

    Absolute URLs on a different host than ``allowed_host`` are rejected;
    otherwise their canonical path is returned, an empty path becoming ``/``.
    Relative locations are kept only when rooted (start with ``/``), so an
    empty string is rejected here even though an empty absolute path is not.
    """
    parts = _split_absolute(loc)
    if parts is not None:
        if allowed_host and _host_of(parts) != _ascii_host(allowed_host):
            return None
        return canonical_path(parts.path)

    if loc.startswith("/"):
        return loc
    return None


def extract_slugs(markup_text: str, allowed_host: Optional[str] = None) -> List[str]:
    """
    Extract unique slugs from sitemap markup in first-seen order.

    ``allowed_host`` replaces the inferred reference host when given.
    """
    locations = collect_locations(markup_text)
    host = allowed_host or reference_host(locations)

    slugs: List[str] = []
    seen = set()
    dropped = 0
    for loc in locations:
        slug = normalize_slug(loc, host)
        if slug is None:
            dropped += 1
            continue
        if slug not in seen:
            seen.add(slug)
            slugs.append(slug)

    logger.info(
        "extracted %d slugs from %d locations (host=%s, dropped=%d)",
        len(slugs),
        len(locations),
        host,
        dropped,
    )
    return slugs
