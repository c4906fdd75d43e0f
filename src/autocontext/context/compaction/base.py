"""Base class for compaction strategies."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from autocontext.context.events import CompressionEvent
from autocontext.context.prompts import DEFAULT_FINAL_INSTRUCTION, compose_final_instructions
from autocontext.errors import SummarizationError
from autocontext.messages import COMPRESS_META_KEY, Message, MessageRole, TextBlock

if TYPE_CHECKING:
    from autocontext.context.config import CompressionConfig
    from autocontext.context.protection import ProtectionWindow
    from autocontext.context.summarizer import Summarizer, SummaryResult, SummaryUsage
    from autocontext.tokens.counter import TokenEstimator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrategyContext:
    """Everything a strategy may read while it runs.

    Attributes:
        config: Engine configuration.
        window: Protection window of the messages being compacted.
        estimator: Token estimator.
        summarizer: Summarization capability, if any.
        plan_hint: Rendered plan hint, if a plan is attached.
    """

    config: CompressionConfig
    window: ProtectionWindow
    estimator: TokenEstimator
    summarizer: Summarizer | None = None
    plan_hint: str | None = None


@dataclass
class StrategyResult:
    """Outcome of one strategy application.

    Nothing here is committed yet. The orchestrator writes ``messages``,
    ``events`` and ``offload_writes`` to its stores once the whole pass
    is done.

    Attributes:
        strategy: Strategy name.
        applied: Whether the strategy changed anything.
        messages: The resulting working set.
        events: One event per replaced span.
        offload_writes: Originals to archive, keyed by offload uuid.
        usage: Summarizer usage, one entry per call.
    """

    strategy: str
    applied: bool
    messages: list[Message]
    events: list[CompressionEvent] = field(default_factory=list)
    offload_writes: dict[str, list[Message]] = field(default_factory=dict)
    usage: list[SummaryUsage] = field(default_factory=list)


class CompactionStrategy(ABC):
    """Abstract base class for compaction strategies.

    Strategies are pure: they read the working set and return a
    :class:`StrategyResult` without touching any store.

    This class uses the Template Method pattern. Subclasses implement
    `_do_apply()` with strategy-specific logic, while the base class
    handles the empty case and turns summarizer failures into a result
    that reports the strategy as not applied.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the strategy name.

        Returns:
            Strategy identifier.
        """
        ...

    def apply(self, messages: Sequence[Message], context: StrategyContext) -> StrategyResult:
        """Apply the strategy to ``messages``.

        Args:
            messages: Current working set.
            context: Config, protection window and capabilities.

        Returns:
            StrategyResult. ``applied`` is False when nothing qualified or
            a summarizer call failed; the input is then returned as is.
        """
        if not messages:
            return self._not_applied(messages)
        try:
            return self._do_apply(list(messages), context)
        except SummarizationError as e:
            e.details.setdefault("strategy", self.name)
            logger.warning("Strategy %s: FAILED - %s", self.name, e)
            return self._not_applied(messages)

    @abstractmethod
    def _do_apply(self, messages: list[Message], context: StrategyContext) -> StrategyResult:
        """Strategy-specific logic.

        Args:
            messages: A copy of the working set, free to modify.
            context: Config, protection window and capabilities.

        Returns:
            StrategyResult for the pass.
        """
        ...

    def _not_applied(self, messages: Sequence[Message]) -> StrategyResult:
        return StrategyResult(strategy=self.name, applied=False, messages=list(messages))

    def _summarize(
        self,
        context: StrategyContext,
        prompt: str,
        messages: Sequence[Message],
        *,
        final_instruction: str = DEFAULT_FINAL_INSTRUCTION,
        extra: list[str] | None = None,
    ) -> SummaryResult:
        """Call the summarizer with the plan hint placed before the final instruction."""
        if context.summarizer is None:
            raise SummarizationError("No summarizer configured", strategy=self.name)
        instructions = compose_final_instructions(
            context.plan_hint, final_instruction=final_instruction, extra=extra
        )
        result = context.summarizer.summarize(prompt, messages, extra_instructions=instructions)
        logger.debug(
            "Strategy %s: summarized %d message(s), input tokens: %d, output tokens: %d",
            self.name,
            len(messages),
            result.usage.input_tokens,
            result.usage.output_tokens,
        )
        return result


def summary_message(
    text: str,
    *,
    replaced: Sequence[Message],
    offload_uuid: str,
    strategy: str,
    **flags: Any,
) -> Message:
    """Build the assistant message that stands in for a summarized span."""
    meta = {
        "offload_uuid": offload_uuid,
        "strategy": strategy,
        "replaced_ids": [m.id for m in replaced],
        **flags,
    }
    return Message(
        role=MessageRole.ASSISTANT,
        name="assistant",
        content=[TextBlock(text=text)],
        metadata={COMPRESS_META_KEY: meta},
    )


def replace_span(
    messages: list[Message], start: int, end: int, replacement: Message
) -> list[Message]:
    """Return ``messages`` with the inclusive span ``[start, end]`` replaced."""
    return messages[:start] + [replacement] + messages[end + 1 :]


def plan_tools_in(messages: Sequence[Message], plan_tool_names: frozenset[str]) -> list[str]:
    """Sorted plan tool names called or answered in ``messages``."""
    names = set()
    for msg in messages:
        names.update(block.name for block in msg.tool_uses)
        names.update(block.name for block in msg.tool_results)
    return sorted(names & plan_tool_names)
