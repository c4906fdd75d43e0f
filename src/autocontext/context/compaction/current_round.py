"""Current round compression, the last resort."""

from __future__ import annotations

import logging

from autocontext.context.compaction.base import (
    CompactionStrategy,
    StrategyContext,
    StrategyResult,
    plan_tools_in,
    replace_span,
    summary_message,
)
from autocontext.context.events import CompressionEvent, CompressionEventType
from autocontext.context.offload import new_offload_uuid
from autocontext.context.prompts import (
    CURRENT_ROUND_PLAN_TOOL_INSTRUCTION,
    current_round_compress_prompt,
    offload_hint,
    render_char_requirement,
)
from autocontext.messages import (
    Message,
    is_final_assistant_response,
    is_tool_result_message,
    is_tool_use_message,
    messages_char_count,
)

logger = logging.getLogger(__name__)


def current_round_span(messages: list[Message], start: int) -> tuple[int, int] | None:
    """Inclusive span of current round messages that may be merged.

    A trailing tool call still waiting for its result is excluded, and so
    is a trailing final assistant response.
    """
    end = len(messages) - 1
    if end >= start and is_final_assistant_response(messages[end]):
        end -= 1
    if end >= start and is_tool_use_message(messages[end]) and not is_tool_result_message(
        messages[end]
    ):
        end -= 1
    if end < start:
        return None
    return start, end


class CurrentRoundCompressionStrategy(CompactionStrategy):
    """Merge the current round into a single compact message.

    The summarizer gets an explicit character target of
    ``current_round_compression_ratio`` times the original size. Plan tool
    calls are asked to be summarized in a few words.
    """

    @property
    def name(self) -> str:
        return "current_round_message_compress"

    def _do_apply(self, messages: list[Message], context: StrategyContext) -> StrategyResult:
        round_start = context.window.current_round_start
        if round_start is None:
            return self._not_applied(messages)

        bounds = current_round_span(messages, round_start)
        if bounds is None:
            return self._not_applied(messages)
        start, end = bounds
        span = messages[start : end + 1]
        if len(span) == 1 and span[0].compress_meta.get("compressed_current_round"):
            return self._not_applied(messages)

        config = context.config
        ratio = config.current_round_compression_ratio
        original_chars = messages_char_count(span)
        target_chars = max(1, round(original_chars * ratio))

        extra = []
        plan_tools = plan_tools_in(span, config.plan_tool_names)
        if plan_tools:
            extra.append(CURRENT_ROUND_PLAN_TOOL_INSTRUCTION.format(tool_names=", ".join(plan_tools)))

        logger.info(
            "Strategy %s: compressing %d message(s) [%d-%d], %d chars -> target %d chars",
            self.name,
            len(span),
            start,
            end,
            original_chars,
            target_chars,
        )
        uuid = new_offload_uuid()
        summary = self._summarize(
            context,
            current_round_compress_prompt(config.prompts),
            span,
            final_instruction=render_char_requirement(original_chars, target_chars, ratio),
            extra=extra,
        )
        replacement = summary_message(
            summary.text + offload_hint(uuid),
            replaced=span,
            offload_uuid=uuid,
            strategy=self.name,
            compressed_current_round=True,
        )

        event = CompressionEvent.for_span(
            CompressionEventType.CURRENT_ROUND_MESSAGE_COMPRESS,
            messages,
            start,
            end,
            compressed_message=replacement,
            metadata={
                **summary.usage.as_event_metadata(),
                "offload_uuid": uuid,
                "original_chars": original_chars,
                "target_chars": target_chars,
            },
        )
        return StrategyResult(
            strategy=self.name,
            applied=True,
            messages=replace_span(messages, start, end, replacement),
            events=[event],
            offload_writes={uuid: span},
            usage=[summary.usage],
        )
