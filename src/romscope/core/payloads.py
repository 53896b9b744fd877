"""Outgoing message payloads.

One dataclass per message kind, validated when built, so adapters never
receive a half-filled payload.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ReactionKey(str, Enum):
    """Symbolic acknowledgement markers; adapters map them to glyphs."""

    ACCEPT = "accept"
    REJECT = "reject"


def _require_message_id(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{name} must be a positive message id, got {value!r}")


@dataclass(frozen=True)
class ReactionAnnotation:
    """Accept/reject marker attached to the triggering message."""

    target_id: int
    key: ReactionKey

    def __post_init__(self) -> None:
        _require_message_id("target_id", self.target_id)
        if not isinstance(self.key, ReactionKey):
            raise ValueError(f"Unsupported reaction key: {self.key!r}")


@dataclass(frozen=True)
class ThreadedReply:
    """One result batch, linked under the thread root and the previous batch."""

    body: str
    html: str
    thread_root_id: int
    reply_to_id: int
    is_falling_back: bool = True

    def __post_init__(self) -> None:
        if not self.body.strip():
            raise ValueError("ThreadedReply body must not be empty")
        if not self.html.strip():
            raise ValueError("ThreadedReply html must not be empty")
        _require_message_id("thread_root_id", self.thread_root_id)
        _require_message_id("reply_to_id", self.reply_to_id)


@dataclass(frozen=True)
class OverflowNotice:
    """Plain reply telling the user how many records matched."""

    count: int
    reply_to_id: int

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError("Overflow count must not be negative")
        _require_message_id("reply_to_id", self.reply_to_id)

    @property
    def body(self) -> str:
        return f"Too many results: {self.count}"


@dataclass(frozen=True)
class ErrorNotice:
    """Plain, unthreaded message reporting a failed search."""

    message: str

    def __post_init__(self) -> None:
        if not self.message.strip():
            raise ValueError("ErrorNotice message must not be empty")

    @property
    def body(self) -> str:
        return self.message
