"""Helpers for working with romscope room keys.

A room key is either ``@username`` for public chats or ``chat_id:<id>``.
Telegram exposes the same chat under several numeric ids, so configured keys
are expanded to every equivalent form before membership checks.
"""

from __future__ import annotations

from typing import Iterable, Optional

CHAT_ID_PREFIX = "chat_id:"
CHANNEL_PREFIX = "-100"


def build_room_key(chat_id: int, username: Optional[str] = None) -> str:
    """Normalize a room key using a single rule enforced across the app."""

    if isinstance(username, str) and username:
        return f"@{username.lower()}"
    return f"{CHAT_ID_PREFIX}{chat_id}"


def _chat_id_variants(raw_chat_id: int) -> set[int]:
    """Return equivalent chat id variants (peer id, chat id, channel id)."""

    variants: set[int] = {raw_chat_id}
    if raw_chat_id < 0:
        raw_text = str(raw_chat_id)
        if raw_text.startswith(CHANNEL_PREFIX):
            channel_part = raw_text[len(CHANNEL_PREFIX):]
            if channel_part.isdigit():
                variants.add(int(channel_part))
        else:
            variants.add(abs(raw_chat_id))
        return variants

    variants.add(-raw_chat_id)
    variants.add(-1000000000000 - raw_chat_id)
    return variants


def expand_room_key(room_key: str) -> set[str]:
    """Expand a room key to include equivalent chat_id variants."""

    room_key = room_key.strip()
    if room_key.startswith("@"):
        return {room_key.lower()}
    if not room_key.startswith(CHAT_ID_PREFIX):
        return {room_key}
    try:
        raw_chat_id = int(room_key[len(CHAT_ID_PREFIX):])
    except ValueError:
        return {room_key}
    return {f"{CHAT_ID_PREFIX}{variant}" for variant in _chat_id_variants(raw_chat_id)}


def expand_room_keys(room_keys: Iterable[str]) -> set[str]:
    allowed: set[str] = set()
    for room_key in room_keys:
        if room_key:
            allowed.update(expand_room_key(room_key))
    return allowed
