"""Ordered strategy chain."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from autocontext.context.compaction.base import CompactionStrategy, StrategyContext, StrategyResult
from autocontext.context.compaction.current_round import CurrentRoundCompressionStrategy
from autocontext.context.compaction.large_message import CurrentRoundLargeMessageStrategy
from autocontext.context.compaction.large_payload import LargeMessageOffloadStrategy
from autocontext.context.compaction.round_summary import RoundSummaryStrategy
from autocontext.context.compaction.tool_invocation import ToolInvocationCompressionStrategy
from autocontext.context.protection import ProtectionWindow
from autocontext.messages import Message

if TYPE_CHECKING:
    from autocontext.context.config import CompressionConfig
    from autocontext.context.summarizer import Summarizer
    from autocontext.tokens.counter import TokenEstimator

logger = logging.getLogger(__name__)


def default_strategies() -> list[CompactionStrategy]:
    """The six strategies, from lightweight to heavyweight."""
    return [
        ToolInvocationCompressionStrategy(),
        LargeMessageOffloadStrategy(protect_last_keep=True),
        LargeMessageOffloadStrategy(protect_last_keep=False),
        RoundSummaryStrategy(),
        CurrentRoundLargeMessageStrategy(),
        CurrentRoundCompressionStrategy(),
    ]


@dataclass
class ChainResult:
    """Staged outcome of a chain run.

    Attributes:
        messages: Working set after every applied strategy.
        applied: Results of the strategies that changed something, in order.
        exhausted: True when every strategy ran and the budget was still
            exceeded afterwards.
    """

    messages: list[Message]
    applied: list[StrategyResult] = field(default_factory=list)
    exhausted: bool = False

    @property
    def strategies_used(self) -> list[str]:
        return [r.strategy for r in self.applied]


class StrategyChain:
    """Strategies applied in sequence until the budget is satisfied.

    Each strategy sees the output of the previous one, with a protection
    window recomputed for it. The chain only stages results; committing
    them is left to the caller.
    """

    def __init__(self, strategies: Sequence[CompactionStrategy] | None = None) -> None:
        """Initialize the chain.

        Args:
            strategies: Strategies to apply in order.
                       If None, uses the default six.
        """
        if strategies is None:
            self._strategies = default_strategies()
        else:
            self._strategies = list(strategies)

    @property
    def strategies(self) -> list[CompactionStrategy]:
        return list(self._strategies)

    def run(
        self,
        messages: Sequence[Message],
        *,
        config: CompressionConfig,
        estimator: TokenEstimator,
        over_budget: Callable[[Sequence[Message]], bool],
        summarizer: Summarizer | None = None,
        plan_hint: str | None = None,
    ) -> ChainResult:
        """Run the strategies in order.

        After each applied strategy ``over_budget`` is re-evaluated and
        the run stops as soon as it is False. A strategy that raises is
        logged and skipped, and so is an outcome whose token estimate is
        higher than its input's.

        Args:
            messages: Working set to compact.
            config: Engine configuration.
            estimator: Token estimator.
            over_budget: Trigger predicate.
            summarizer: Summarization capability, if any.
            plan_hint: Rendered plan hint, if any.

        Returns:
            ChainResult with the staged outcome.
        """
        result = ChainResult(messages=list(messages))
        tokens = estimator.count_messages(result.messages)

        for index, strategy in enumerate(self._strategies, start=1):
            context = StrategyContext(
                config=config,
                window=ProtectionWindow.compute(result.messages, config),
                estimator=estimator,
                summarizer=summarizer,
                plan_hint=plan_hint,
            )
            try:
                outcome = strategy.apply(result.messages, context)
            except Exception:
                logger.exception("Strategy %d (%s): ERROR - skipped", index, strategy.name)
                continue

            if not outcome.applied:
                logger.info("Strategy %d (%s): SKIPPED", index, strategy.name)
                continue

            tokens_after = estimator.count_messages(outcome.messages)
            if tokens_after > tokens:
                logger.warning(
                    "Strategy %d (%s): DISCARDED - token estimate grew %d -> %d",
                    index,
                    strategy.name,
                    tokens,
                    tokens_after,
                )
                continue

            logger.info(
                "Strategy %d (%s): APPLIED - %d -> %d messages, %d -> %d tokens, %d event(s)",
                index,
                strategy.name,
                len(result.messages),
                len(outcome.messages),
                tokens,
                tokens_after,
                len(outcome.events),
            )
            result.messages = outcome.messages
            tokens = tokens_after
            result.applied.append(outcome)
            if not over_budget(result.messages):
                return result

        result.exhausted = True
        return result
