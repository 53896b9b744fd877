"""Telegram chat transport adapter.

Implements the core TransportPort with a Telethon client, so the same code
path serves both bot-token and user sessions.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from telethon import errors, functions, types

from romscope.core.config import ReactionConfig
from romscope.core.errors import DeliverySendError
from romscope.core.payloads import (
    ErrorNotice,
    OverflowNotice,
    ReactionAnnotation,
    ReactionKey,
    ThreadedReply,
)
from romscope.core.ports import MessagePayload

LOGGER = logging.getLogger(__name__)

# Telegram rejects messages whose visible text exceeds this many characters.
MAX_MESSAGE_CHARS = 4096
HTML_LINE_BREAK = "<br>"

_SEND_ERRORS = (errors.RPCError, ConnectionError, ValueError)


def split_reply(reply: ThreadedReply, limit: int = MAX_MESSAGE_CHARS) -> List[str]:
    """Split a batch into Telegram-sized HTML chunks, one record per line.

    Telegram HTML has no line-break tag, so ``<br>`` becomes a newline. Chunk
    sizes are measured on the markup, which is never shorter than the visible
    text. Displayed fields are escaped, so ``<br>`` only ever ends a record.
    """

    html_lines = [line for line in reply.html.split(HTML_LINE_BREAK) if line]

    chunks: List[str] = []
    current: List[str] = []
    size = 0
    for markup in html_lines:
        line_size = len(markup) + 1
        if current and size + line_size > limit:
            chunks.append("\n".join(current))
            current, size = [], 0
        current.append(markup)
        size += line_size
    if current:
        chunks.append("\n".join(current))
    return chunks


class TelegramTransport:
    """Transport adapter that reacts and replies through Telethon."""

    def __init__(self, client, reactions: ReactionConfig) -> None:
        self._client = client
        self._glyphs = {ReactionKey.ACCEPT: reactions.accept, ReactionKey.REJECT: reactions.reject}

    async def send_reaction(self, room_id: int, payload: ReactionAnnotation) -> Optional[int]:
        """Attach the configured glyph to the target message.

        Reactions are not messages in Telegram, so there is no id to return.
        """

        request = functions.messages.SendReactionRequest(
            peer=room_id,
            msg_id=payload.target_id,
            reaction=[types.ReactionEmoji(emoticon=self._glyphs[payload.key])],
        )
        try:
            await self._client(request)
        except _SEND_ERRORS as exc:
            raise DeliverySendError(f"Reaction on {payload.target_id} failed: {exc}") from exc
        return None

    async def send_message(self, room_id: int, payload: MessagePayload) -> int:
        """Send one payload and return the id of the last message sent."""

        if isinstance(payload, ThreadedReply):
            return await self._send_threaded(room_id, payload)
        if isinstance(payload, OverflowNotice):
            return await self._send(room_id, payload.body, reply_to=payload.reply_to_id)
        if isinstance(payload, ErrorNotice):
            return await self._send(room_id, payload.body)
        raise ValueError(f"Unsupported payload: {payload!r}")

    async def _send_threaded(self, room_id: int, reply: ThreadedReply) -> int:
        # Telegram threads are reply chains: each chunk answers the previous one.
        reply_to = reply.reply_to_id
        for chunk in split_reply(reply):
            reply_to = await self._send(room_id, chunk, reply_to=reply_to, parse_mode="html")
        return reply_to

    async def _send(
        self,
        room_id: int,
        text: str,
        reply_to: Optional[int] = None,
        parse_mode: Optional[str] = None,
    ) -> int:
        try:
            message = await self._client.send_message(
                room_id,
                text,
                reply_to=reply_to,
                parse_mode=parse_mode,
                link_preview=False,
            )
        except _SEND_ERRORS as exc:
            raise DeliverySendError(f"Send to {room_id} failed: {exc}") from exc
        LOGGER.debug("Sent message %s to %s", message.id, room_id)
        return message.id
