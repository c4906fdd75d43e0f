"""Large message offloading."""

from __future__ import annotations

import logging

from autocontext.context.compaction.base import CompactionStrategy, StrategyContext, StrategyResult
from autocontext.context.events import CompressionEvent, CompressionEventType
from autocontext.context.offload import new_offload_uuid
from autocontext.context.prompts import offload_hint
from autocontext.messages import Message, payload_char_count, payload_text, replace_payload

logger = logging.getLogger(__name__)


class LargeMessageOffloadStrategy(CompactionStrategy):
    """Offload historical messages with a large payload.

    Each message whose payload reaches ``large_payload_threshold_chars``
    is archived and replaced in place by a preview of its first
    ``offload_preview_chars`` characters plus a reload hint. No summarizer
    is involved.

    The latest final assistant response and everything after it are
    always protected. With ``protect_last_keep`` (the default) the
    ``last_keep`` tail is protected too.
    """

    def __init__(self, protect_last_keep: bool = True) -> None:
        """Initialize the strategy.

        Args:
            protect_last_keep: Also leave the ``last_keep`` tail untouched.
        """
        self._protect_last_keep = protect_last_keep

    @property
    def name(self) -> str:
        if self._protect_last_keep:
            return "large_message_offload_with_protection"
        return "large_message_offload"

    @property
    def event_type(self) -> CompressionEventType:
        if self._protect_last_keep:
            return CompressionEventType.LARGE_MESSAGE_OFFLOAD_WITH_PROTECTION
        return CompressionEventType.LARGE_MESSAGE_OFFLOAD

    def _do_apply(self, messages: list[Message], context: StrategyContext) -> StrategyResult:
        config = context.config
        end = context.window.historical_end(protect_last_keep=self._protect_last_keep)
        result = StrategyResult(strategy=self.name, applied=False, messages=messages)

        for i in range(end):
            msg = messages[i]
            if msg.compress_meta.get("offload_uuid"):
                continue
            size = payload_char_count(msg)
            if size < config.large_payload_threshold_chars:
                continue

            uuid = new_offload_uuid()
            preview = payload_text(msg)[: config.offload_preview_chars]
            replacement = replace_payload(
                msg,
                preview + "..." + offload_hint(uuid),
                {"offload_uuid": uuid, "strategy": self.name},
            )
            tokens_before = context.estimator.count_messages([msg])
            tokens_after = context.estimator.count_messages([replacement])

            result.events.append(
                CompressionEvent.for_span(
                    self.event_type,
                    messages,
                    i,
                    i,
                    compressed_message=replacement,
                    metadata={
                        "tokens_before": tokens_before,
                        "tokens_after": tokens_after,
                        "offload_uuid": uuid,
                    },
                )
            )
            result.offload_writes[uuid] = [msg]
            result.messages[i] = replacement
            result.applied = True
            logger.info(
                "Strategy %s: offloaded message %d (%d chars, %d -> %d tokens) uuid=%s",
                self.name,
                i,
                size,
                tokens_before,
                tokens_after,
                uuid,
            )

        return result
