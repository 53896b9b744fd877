"""Link list parsing for catalog ingestion (core domain)."""

from __future__ import annotations

import re
from typing import Iterable, Iterator, Optional, Sequence
from urllib.parse import unquote_plus

from romscope.core.models import CatalogRecord

DEFAULT_LINK_PREFIX = "https://myrient.erista.me/files/"
DEFAULT_EXTENSIONS = (".zip",)

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def _unescape(part: str) -> Optional[str]:
    """Query-unescape one path segment; None when it holds a broken escape."""

    if _BAD_ESCAPE.search(part):
        return None
    return unquote_plus(part, errors="strict")


def record_from_url(
    url: str,
    prefix: str = DEFAULT_LINK_PREFIX,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
) -> Optional[CatalogRecord]:
    """Build a catalog record from ``<prefix><section>/<console>/<file>``.

    Returns None for links outside the prefix, with another extension, with
    fewer than three path parts or with undecodable escapes. The file part
    keeps any further slashes.
    """

    if not url.startswith(prefix):
        return None
    if not url.endswith(tuple(extensions)):
        return None
    parts = url[len(prefix):].split("/", 2)
    if len(parts) != 3:
        return None
    try:
        decoded = [_unescape(part) for part in parts]
    except UnicodeDecodeError:
        return None
    if any(value is None for value in decoded):
        return None
    section, console, file = decoded
    return CatalogRecord(section=section, console=console, file=file, resource_url=url)


def records_from_lines(
    lines: Iterable[str],
    prefix: str = DEFAULT_LINK_PREFIX,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
) -> Iterator[CatalogRecord]:
    """Yield a record for every usable line of a link list."""

    for line in lines:
        record = record_from_url(line.rstrip("\r\n"), prefix, extensions)
        if record is not None:
            yield record
