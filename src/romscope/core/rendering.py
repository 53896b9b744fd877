"""Result batch rendering.

Keeping formatting here prevents drift between adapters: every transport
receives the same plain and HTML bodies for a batch.
"""

from __future__ import annotations

import html
from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple

from romscope.core.models import CatalogRecord


@dataclass(frozen=True)
class DeliveryBatch:
    """A contiguous slice of the result set rendered for one message."""

    records: Tuple[CatalogRecord, ...]
    body: str
    html: str

    def __len__(self) -> int:
        return len(self.records)


def format_plain_line(record: CatalogRecord) -> str:
    return f"{record.section} - {record.console} - {record.file}\n"


def format_html_line(record: CatalogRecord) -> str:
    # The URL goes in raw; only the displayed fields are escaped.
    return (
        f"{html.escape(record.section)} - {html.escape(record.console)} - "
        f"<a href=\"{record.resource_url}\">{html.escape(record.file)}</a><br>"
    )


def render_batch(records: Sequence[CatalogRecord]) -> DeliveryBatch:
    """Render one batch into its plain and HTML bodies."""

    return DeliveryBatch(
        records=tuple(records),
        body="".join(format_plain_line(record) for record in records),
        html="".join(format_html_line(record) for record in records),
    )


def iter_batches(records: Sequence[CatalogRecord], batch_size: int) -> Iterator[DeliveryBatch]:
    """Yield rendered batches of at most ``batch_size`` records, in order."""

    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    for start in range(0, len(records), batch_size):
        yield render_batch(records[start : start + batch_size])
