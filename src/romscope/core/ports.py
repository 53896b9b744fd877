"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for catalog and chat transport adapters
so that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence, Tuple, Union

from romscope.core.filters import AllOf
from romscope.core.payloads import ErrorNotice, OverflowNotice, ReactionAnnotation, ThreadedReply

MessagePayload = Union[ThreadedReply, OverflowNotice, ErrorNotice]


class CatalogPort(Protocol):
    """Read operations required by the query executor.

    Implementations raise QueryError when the storage call fails.
    """

    def query(
        self, where: AllOf, order_by: Tuple[str, ...], limit: int
    ) -> Iterable[Sequence[object]]:
        ...

    def count(self, where: AllOf) -> int:
        ...


class TransportPort(Protocol):
    """Chat operations required by the dispatcher and delivery engine.

    Implementations raise DeliverySendError when a send fails.
    """

    async def send_reaction(self, room_id: int, payload: ReactionAnnotation) -> Optional[int]:
        ...

    async def send_message(self, room_id: int, payload: MessagePayload) -> int:
        ...
