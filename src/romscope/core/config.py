"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_COMMAND = "!roms"
DEFAULT_MAX_RESULTS = 1000
DEFAULT_BATCH_SIZE = 100


@dataclass(frozen=True)
class SearchConfig:
    """Command verb and result limits used by the dispatcher."""

    command: str = DEFAULT_COMMAND
    max_results: int = DEFAULT_MAX_RESULTS
    batch_size: int = DEFAULT_BATCH_SIZE

    def __post_init__(self) -> None:
        if not self.command or any(ch.isspace() for ch in self.command):
            raise ValueError(f"Command must be a single word: {self.command!r}")
        if self.max_results < 1:
            raise ValueError("max_results must be at least 1")
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")


@dataclass(frozen=True)
class ReactionConfig:
    """Glyphs the transport uses for the accept/reject acknowledgements."""

    accept: str = "👍"
    reject: str = "👎"
