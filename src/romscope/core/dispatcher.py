"""Command dispatch pipeline.

This module is integration-agnostic. It only relies on ports for the catalog
and the chat transport, enabling other frontends without changes here.
"""

from __future__ import annotations

import logging
from datetime import datetime
from functools import partial
from typing import Iterable, Optional

from romscope.core.config import SearchConfig
from romscope.core.delivery import DeliveryReport, deliver
from romscope.core.errors import DeliverySendError, QueryError
from romscope.core.executor import CatalogQueryExecutor
from romscope.core.filters import compile_filter
from romscope.core.models import IncomingCommand
from romscope.core.payloads import ErrorNotice
from romscope.core.ports import TransportPort
from romscope.core.room_keys import CHAT_ID_PREFIX, expand_room_keys
from romscope.core.terms import parse_terms

LOGGER = logging.getLogger(__name__)


def extract_query(text: str, command: str) -> Optional[str]:
    """Return the query following ``command``, or None if it is not that verb."""

    words = text.split()
    if not words or words[0] != command:
        return None
    return text.strip()[len(command):].strip()


class CommandDispatcher:
    """Filters chat events and runs parse, compile, query and deliver."""

    def __init__(
        self,
        executor: CatalogQueryExecutor,
        transport: TransportPort,
        own_id: int,
        allowed_rooms: Iterable[str],
        started_at: datetime,
        search_config: SearchConfig,
    ) -> None:
        self._executor = executor
        self._transport = transport
        self._own_id = own_id
        self._allowed_rooms = expand_room_keys(allowed_rooms)
        # Telegram dates carry whole seconds only.
        self._started_at = started_at.replace(microsecond=0)
        self._search = search_config

    def _accepts(self, command: IncomingCommand) -> bool:
        if command.sender_id == self._own_id:
            return False
        if (
            command.room_key not in self._allowed_rooms
            and f"{CHAT_ID_PREFIX}{command.room_id}" not in self._allowed_rooms
        ):
            return False
        # Backlog delivered on reconnect predates this run and is not answered.
        return command.date >= self._started_at

    async def handle(self, command: IncomingCommand) -> Optional[DeliveryReport]:
        """Process one incoming message; returns None when it was ignored."""

        if not self._accepts(command):
            return None

        query = extract_query(command.text, self._search.command)
        if query is None:
            return None
        LOGGER.info("%s command: %r", self._search.command, query)

        terms = parse_terms(query)
        spec = compile_filter(terms.positives, terms.negatives, self._search.max_results)
        try:
            results = self._executor.execute(spec)
        except QueryError as exc:
            LOGGER.error("Search failed for %r: %s", query, exc)
            await self._send_error(command, f"Search error: {exc}")
            return None

        report = await deliver(
            results,
            command.message_id,
            self._search.max_results,
            self._search.batch_size,
            partial(self._transport.send_reaction, command.room_id),
            partial(self._transport.send_message, command.room_id),
        )
        if report.overflow:
            LOGGER.info("Rejected %r: %s matches", query, results.total_matches)
        else:
            LOGGER.info(
                "Delivered %s records in %s batches for %r",
                report.records_sent,
                report.batches_sent,
                query,
            )
        return report

    async def _send_error(self, command: IncomingCommand, message: str) -> None:
        try:
            await self._transport.send_message(command.room_id, ErrorNotice(message))
        except DeliverySendError as exc:
            LOGGER.warning("Failed to report search error to %s: %s", command.room_key, exc)
