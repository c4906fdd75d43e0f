"""Historical tool invocation compression."""

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
    PLAN_TOOL_COMPRESS_INSTRUCTION,
    TOOL_INVOCATION_SUMMARY_FORMAT,
    offload_hint,
    tool_invocation_prompt,
)
from autocontext.messages import (
    Message,
    is_tool_message,
    is_tool_result_message,
    is_tool_use_message,
)

logger = logging.getLogger(__name__)


def find_tool_runs(messages: list[Message], end: int, min_length: int) -> list[tuple[int, int]]:
    """Locate runs of consecutive tool messages before ``end``.

    Each run is trimmed so that it starts on a tool call and ends on a
    tool result, keeping call/result pairs together.

    Args:
        messages: Working set.
        end: Exclusive end of the searchable region.
        min_length: Minimum messages in a run after trimming.

    Returns:
        Inclusive ``(start, end)`` index pairs in ascending order.
    """
    runs: list[tuple[int, int]] = []
    i = 0
    while i < end:
        if not is_tool_message(messages[i]):
            i += 1
            continue
        j = i
        while j + 1 < end and is_tool_message(messages[j + 1]):
            j += 1

        start, stop = i, j
        while start <= stop and not is_tool_use_message(messages[start]):
            start += 1
        while stop >= start and not is_tool_result_message(messages[stop]):
            stop -= 1
        if stop - start + 1 >= min_length:
            runs.append((start, stop))
        i = j + 1
    return runs


class ToolInvocationCompressionStrategy(CompactionStrategy):
    """Summarize long runs of historical tool calls and results.

    Only messages before both the ``last_keep`` tail and the latest final
    assistant response are considered. Each qualifying run is archived in
    the offload store and replaced by one assistant message holding the
    summary. Runs that involve plan tools ask for one-line summaries of
    those calls.
    """

    @property
    def name(self) -> str:
        return "tool_invocation_compress"

    def _do_apply(self, messages: list[Message], context: StrategyContext) -> StrategyResult:
        config = context.config
        end = context.window.historical_end(protect_last_keep=True)
        runs = find_tool_runs(messages, end, config.min_consecutive_tool_messages)
        if not runs:
            return self._not_applied(messages)

        logger.info("Strategy %s: found %d tool run(s) before index %d", self.name, len(runs), end)
        prompt = tool_invocation_prompt(config.prompts)
        result = StrategyResult(strategy=self.name, applied=True, messages=messages)

        # Back to front so earlier indices stay valid
        for start, stop in reversed(runs):
            span = result.messages[start : stop + 1]
            uuid = new_offload_uuid()

            extra = []
            plan_tools = plan_tools_in(span, config.plan_tool_names)
            if plan_tools:
                extra.append(PLAN_TOOL_COMPRESS_INSTRUCTION.format(tool_names=", ".join(plan_tools)))

            summary = self._summarize(context, prompt, span, extra=extra)
            text = TOOL_INVOCATION_SUMMARY_FORMAT.format(summary=summary.text) + offload_hint(uuid)
            replacement = summary_message(
                text,
                replaced=span,
                offload_uuid=uuid,
                strategy=self.name,
                compressed_tool_run=True,
            )

            result.events.append(
                CompressionEvent.for_span(
                    CompressionEventType.TOOL_INVOCATION_COMPRESS,
                    result.messages,
                    start,
                    stop,
                    compressed_message=replacement,
                    metadata={**summary.usage.as_event_metadata(), "offload_uuid": uuid},
                )
            )
            result.offload_writes[uuid] = span
            result.usage.append(summary.usage)
            result.messages = replace_span(result.messages, start, stop, replacement)
            logger.info(
                "Strategy %s: replaced %d tool message(s) [%d-%d] with summary uuid=%s",
                self.name,
                len(span),
                start,
                stop,
                uuid,
            )

        return result
