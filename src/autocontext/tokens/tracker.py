"""Summarizer token usage tracking."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from autocontext.context.summarizer import SummaryUsage


@dataclass
class UsageRecord:
    """A single summarizer call.

    Attributes:
        timestamp: When the usage was recorded.
        prompt_tokens: Tokens in the summarization prompt.
        completion_tokens: Tokens in the summary.
        total_tokens: Total tokens used.
        elapsed_seconds: Wall-clock duration of the call.
        strategy: Strategy that issued the call.
    """

    timestamp: datetime
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int
    elapsed_seconds: float = 0.0
    strategy: str | None = None


@dataclass
class TokenUsage:
    """Aggregate token usage statistics.

    Attributes:
        prompt_tokens: Total prompt tokens.
        completion_tokens: Total completion tokens.
        total_tokens: Total tokens.
        request_count: Number of summarizer calls.
        elapsed_seconds: Total time spent in summarizer calls.
    """

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    request_count: int = 0
    elapsed_seconds: float = 0.0


class UsageTracker:
    """Track summarizer usage across compression passes.

    Keeps per-call records, session aggregates and a per-strategy
    breakdown.
    """

    def __init__(self) -> None:
        self._records: list[UsageRecord] = []
        self._totals = TokenUsage()
        self._strategy_totals: dict[str, TokenUsage] = {}

    def record_usage(self, usage: SummaryUsage, strategy: str | None = None) -> None:
        """Record usage reported by a summarizer.

        Args:
            usage: Usage from a summarizer result.
            strategy: Optional name of the strategy that made the call.
        """
        prompt_tokens = usage.input_tokens or 0
        completion_tokens = usage.output_tokens or 0
        total_tokens = prompt_tokens + completion_tokens
        elapsed = usage.elapsed_seconds or 0.0

        self._records.append(
            UsageRecord(
                timestamp=datetime.now(),
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=total_tokens,
                elapsed_seconds=elapsed,
                strategy=strategy,
            )
        )

        _accumulate(self._totals, prompt_tokens, completion_tokens, elapsed)
        if strategy is not None:
            if strategy not in self._strategy_totals:
                self._strategy_totals[strategy] = TokenUsage()
            _accumulate(self._strategy_totals[strategy], prompt_tokens, completion_tokens, elapsed)

    def get_total_usage(self) -> TokenUsage:
        """Get total usage statistics.

        Returns:
            TokenUsage with aggregate statistics.
        """
        return self._totals

    def get_usage_history(self) -> list[UsageRecord]:
        """Get usage history.

        Returns:
            List of all usage records.
        """
        return self._records.copy()

    def get_strategy_usage(self) -> dict[str, TokenUsage]:
        """Get usage broken down by strategy.

        Only records tagged with a strategy are included.

        Returns:
            Dictionary mapping strategy names to usage.
        """
        return dict(self._strategy_totals)

    def reset(self) -> None:
        """Reset all tracking data."""
        self._records.clear()
        self._totals = TokenUsage()
        self._strategy_totals.clear()


def _accumulate(target: TokenUsage, prompt: int, completion: int, elapsed: float) -> None:
    target.prompt_tokens += prompt
    target.completion_tokens += completion
    target.total_tokens += prompt + completion
    target.request_count += 1
    target.elapsed_seconds += elapsed
