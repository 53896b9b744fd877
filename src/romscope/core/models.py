"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, Sequence, Tuple

CATALOG_FIELDS: Tuple[str, ...] = ("section", "console", "file")


@dataclass(frozen=True)
class CatalogRecord:
    """One catalog entry, keyed uniquely by its resource URL."""

    section: str
    console: str
    file: str
    resource_url: str

    @classmethod
    def from_row(cls, row: Sequence[object]) -> "CatalogRecord":
        """Decode a (section, console, file, resource_url) row.

        Raises ValueError when the row does not hold exactly four strings.
        """

        if len(row) != 4:
            raise ValueError(f"Expected 4 columns, got {len(row)}")
        if not all(isinstance(value, str) for value in row):
            raise ValueError(f"Non-text column in row: {tuple(row)!r}")
        section, console, file, resource_url = row
        return cls(section=section, console=console, file=file, resource_url=resource_url)

    def sort_key(self) -> Tuple[str, str, str]:
        return (self.section, self.console, self.file)

    def field(self, name: str) -> str:
        if name not in CATALOG_FIELDS:
            raise ValueError(f"Unknown catalog field: {name}")
        return getattr(self, name)


@dataclass(frozen=True)
class ResultSet:
    """Ordered records for one query plus the true number of matches.

    ``records`` holds at most ``max_results + 1`` entries; ``total_matches``
    only differs from ``len(records)`` when the cap was exceeded.
    """

    records: Tuple[CatalogRecord, ...]
    total_matches: int

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[CatalogRecord]:
        return iter(self.records)


@dataclass(frozen=True)
class IncomingCommand:
    """Minimal inbound chat message used by the dispatcher."""

    text: str
    message_id: int
    room_id: int
    room_key: str
    sender_id: int
    date: datetime
