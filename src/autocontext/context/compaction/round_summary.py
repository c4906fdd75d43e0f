"""Historical round summarization."""

from __future__ import annotations

import logging

from autocontext.context.compaction.base import (
    CompactionStrategy,
    StrategyContext,
    StrategyResult,
    replace_span,
    summary_message,
)
from autocontext.context.events import CompressionEvent, CompressionEventType
from autocontext.context.offload import new_offload_uuid
from autocontext.context.prompts import (
    PREVIOUS_ROUND_SUMMARY_FORMAT,
    offload_hint,
    previous_round_summary_prompt,
)
from autocontext.messages import Message, MessageRole, is_final_assistant_response

logger = logging.getLogger(__name__)


def find_completed_rounds(messages: list[Message], end: int) -> list[tuple[int, int]]:
    """Pair each user message with the final assistant response closing its round.

    Only rounds closed before ``end`` are returned, and only those with
    intermediate messages between the two; a bare question/answer pair has
    nothing to summarize.

    Returns:
        ``(user_index, assistant_index)`` pairs in ascending order.
    """
    pairs: list[tuple[int, int]] = []
    user_index = None
    for i in range(end):
        msg = messages[i]
        if msg.role == MessageRole.USER:
            user_index = i
        elif user_index is not None and is_final_assistant_response(msg):
            if i - user_index > 1:
                pairs.append((user_index, i))
            user_index = None
    return pairs


class RoundSummaryStrategy(CompactionStrategy):
    """Summarize completed rounds before the latest final assistant response.

    Everything after a round's user message, up to and including the
    final assistant response, is archived and replaced by one assistant
    message. The round then reads as a clean user/assistant pair.
    """

    @property
    def name(self) -> str:
        return "previous_round_conversation_summary"

    def _do_apply(self, messages: list[Message], context: StrategyContext) -> StrategyResult:
        latest_final = context.window.latest_final_assistant_index
        if latest_final is None:
            return self._not_applied(messages)

        rounds = find_completed_rounds(messages, latest_final)
        if not rounds:
            return self._not_applied(messages)

        logger.info(
            "Strategy %s: found %d round(s) to summarize before index %d",
            self.name,
            len(rounds),
            latest_final,
        )
        prompt = previous_round_summary_prompt(context.config.prompts)
        result = StrategyResult(strategy=self.name, applied=True, messages=messages)

        for user_index, assistant_index in reversed(rounds):
            start = user_index + 1
            span = result.messages[start : assistant_index + 1]
            uuid = new_offload_uuid()

            summary = self._summarize(context, prompt, span)
            text = PREVIOUS_ROUND_SUMMARY_FORMAT.format(summary=summary.text) + offload_hint(uuid)
            replacement = summary_message(
                text, replaced=span, offload_uuid=uuid, strategy=self.name
            )

            result.events.append(
                CompressionEvent.for_span(
                    CompressionEventType.PREVIOUS_ROUND_CONVERSATION_SUMMARY,
                    result.messages,
                    start,
                    assistant_index,
                    compressed_message=replacement,
                    metadata={**summary.usage.as_event_metadata(), "offload_uuid": uuid},
                )
            )
            result.offload_writes[uuid] = span
            result.usage.append(summary.usage)
            result.messages = replace_span(result.messages, start, assistant_index, replacement)
            logger.info(
                "Strategy %s: replaced %d message(s) [%d-%d] with round summary uuid=%s",
                self.name,
                len(span),
                start,
                assistant_index,
                uuid,
            )

        return result
