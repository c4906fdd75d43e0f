"""Current round large message summarization."""

from __future__ import annotations

import logging

from autocontext.context.compaction.base import CompactionStrategy, StrategyContext, StrategyResult
from autocontext.context.events import CompressionEvent, CompressionEventType
from autocontext.context.offload import new_offload_uuid
from autocontext.context.prompts import (
    CURRENT_ROUND_LARGE_MESSAGE_FORMAT,
    current_round_large_message_prompt,
    offload_hint,
)
from autocontext.messages import Message, payload_char_count, replace_payload

logger = logging.getLogger(__name__)


class CurrentRoundLargeMessageStrategy(CompactionStrategy):
    """Summarize oversized messages of the current round one by one.

    Unlike plain offloading the payload is replaced by a summary, since
    the current round is still being worked on. Role, name and tool-call
    identity of each message are preserved.
    """

    @property
    def name(self) -> str:
        return "current_round_large_message_summary"

    def _do_apply(self, messages: list[Message], context: StrategyContext) -> StrategyResult:
        start = context.window.current_round_start
        if start is None:
            return self._not_applied(messages)

        config = context.config
        prompt = current_round_large_message_prompt(config.prompts)
        result = StrategyResult(strategy=self.name, applied=False, messages=messages)

        for i in range(start, len(messages)):
            msg = messages[i]
            if msg.compress_meta.get("offload_uuid"):
                continue
            size = payload_char_count(msg)
            if size < config.large_payload_threshold_chars:
                continue

            uuid = new_offload_uuid()
            summary = self._summarize(context, prompt, [msg])
            replacement = replace_payload(
                msg,
                CURRENT_ROUND_LARGE_MESSAGE_FORMAT.format(summary=summary.text) + offload_hint(uuid),
                {"offload_uuid": uuid, "strategy": self.name},
            )

            result.events.append(
                CompressionEvent.for_span(
                    CompressionEventType.CURRENT_ROUND_LARGE_MESSAGE_SUMMARY,
                    messages,
                    i,
                    i,
                    compressed_message=replacement,
                    metadata={**summary.usage.as_event_metadata(), "offload_uuid": uuid},
                )
            )
            result.offload_writes[uuid] = [msg]
            result.usage.append(summary.usage)
            result.messages[i] = replacement
            result.applied = True
            logger.info(
                "Strategy %s: summarized message %d (%d chars) uuid=%s", self.name, i, size, uuid
            )

        return result
