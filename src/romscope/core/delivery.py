"""Result delivery engine (core domain).

Delivery for one command follows a fixed order:
1) Overflow check: reject reaction + overflow notice, then stop
2) Accept reaction on the triggering message
3) Batch, render and send each batch as a threaded reply
4) Each sent batch becomes the reply target of the next one
5) The first failed batch send ends the run

All I/O goes through the two injected send callables.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Union

from romscope.core.errors import DeliverySendError
from romscope.core.models import ResultSet
from romscope.core.payloads import OverflowNotice, ReactionAnnotation, ReactionKey, ThreadedReply
from romscope.core.rendering import iter_batches

LOGGER = logging.getLogger(__name__)

SendReaction = Callable[[ReactionAnnotation], Awaitable[Optional[int]]]
SendMessage = Callable[[Union[ThreadedReply, OverflowNotice]], Awaitable[Optional[int]]]


@dataclass
class DeliveryReport:
    """What one delivery run actually sent."""

    overflow: bool = False
    batches_sent: int = 0
    records_sent: int = 0
    error: Optional[DeliverySendError] = None

    @property
    def completed(self) -> bool:
        return self.error is None


async def _react(send_reaction: SendReaction, target_id: int, key: ReactionKey) -> None:
    # Acknowledgements are best effort: a failed reaction never blocks results.
    try:
        await send_reaction(ReactionAnnotation(target_id=target_id, key=key))
    except DeliverySendError as exc:
        LOGGER.warning("Failed to send %s reaction to %s: %s", key.value, target_id, exc)


async def deliver(
    results: ResultSet,
    trigger_message_id: int,
    max_results: int,
    batch_size: int,
    send_reaction: SendReaction,
    send_message: SendMessage,
) -> DeliveryReport:
    """Send ``results`` back as reply-linked batches under the trigger message."""

    report = DeliveryReport()

    if len(results) > max_results:
        report.overflow = True
        await _react(send_reaction, trigger_message_id, ReactionKey.REJECT)
        notice = OverflowNotice(count=results.total_matches, reply_to_id=trigger_message_id)
        try:
            await send_message(notice)
        except DeliverySendError as exc:
            LOGGER.warning("Failed to send overflow notice for %s: %s", trigger_message_id, exc)
            report.error = exc
        return report

    await _react(send_reaction, trigger_message_id, ReactionKey.ACCEPT)

    reply_to_id = trigger_message_id
    for batch in iter_batches(results.records, batch_size):
        reply = ThreadedReply(
            body=batch.body,
            html=batch.html,
            thread_root_id=trigger_message_id,
            reply_to_id=reply_to_id,
        )
        try:
            sent_id = await send_message(reply)
        except DeliverySendError as exc:
            LOGGER.error(
                "Failed to send batch %s for %s, stopping: %s",
                report.batches_sent + 1,
                trigger_message_id,
                exc,
            )
            report.error = exc
            break
        report.batches_sent += 1
        report.records_sent += len(batch)
        if sent_id:
            reply_to_id = sent_id

    return report
