"""Telegram-to-core message mapping adapter.

This keeps Telethon-specific details out of the command dispatcher.
"""

from __future__ import annotations

from telethon.tl.custom import Message
from telethon.tl.types import PeerChannel, PeerChat, PeerUser

from romscope.core.models import IncomingCommand
from romscope.core.room_keys import build_room_key


def _sender_id(message: Message) -> int:
    sender_id = getattr(message, "sender_id", None)
    if sender_id is not None:
        return int(sender_id)
    # Anonymous admins and channel posts carry the peer in from_id only.
    from_id = getattr(message, "from_id", None)
    if isinstance(from_id, PeerUser):
        return from_id.user_id
    if isinstance(from_id, PeerChannel):
        return from_id.channel_id
    if isinstance(from_id, PeerChat):
        return from_id.chat_id
    return 0


def build_command(message: Message) -> IncomingCommand:
    """Build a core IncomingCommand from a Telethon Message."""

    chat = getattr(message, "chat", None)
    return IncomingCommand(
        text=message.raw_text or "",
        message_id=message.id,
        room_id=message.chat_id,
        room_key=build_room_key(message.chat_id, getattr(chat, "username", None)),
        sender_id=_sender_id(message),
        date=message.date,
    )
