"""Tests for the strategy chain."""

from __future__ import annotations

import logging

import pytest

from autocontext.context.compaction import (
    CompactionStrategy,
    CurrentRoundCompressionStrategy,
    CurrentRoundLargeMessageStrategy,
    LargeMessageOffloadStrategy,
    RoundSummaryStrategy,
    StrategyChain,
    StrategyContext,
    StrategyResult,
    ToolInvocationCompressionStrategy,
    default_strategies,
)
from autocontext.context.config import CompressionConfig
from autocontext.messages import Message
from autocontext.tokens.counter import ApproximateTokenCounter


class DropFirstStrategy(CompactionStrategy):
    """Removes the first message and records the window it was given."""

    def __init__(self, label: str) -> None:
        self.label = label
        self.windows = []

    @property
    def name(self) -> str:
        return self.label

    def _do_apply(self, messages: list[Message], context: StrategyContext) -> StrategyResult:
        self.windows.append(context.window)
        return StrategyResult(strategy=self.name, applied=True, messages=messages[1:])


class NoopStrategy(CompactionStrategy):
    @property
    def name(self) -> str:
        return "noop"

    def _do_apply(self, messages: list[Message], context: StrategyContext) -> StrategyResult:
        return self._not_applied(messages)


class PadStrategy(CompactionStrategy):
    """Rewrites the first message into a much longer one."""

    @property
    def name(self) -> str:
        return "pad"

    def _do_apply(self, messages: list[Message], context: StrategyContext) -> StrategyResult:
        padded = Message.text_message("assistant", "p" * 1000)
        return StrategyResult(strategy=self.name, applied=True, messages=[padded, *messages[1:]])


class BrokenStrategy(CompactionStrategy):
    @property
    def name(self) -> str:
        return "broken"

    def _do_apply(self, messages: list[Message], context: StrategyContext) -> StrategyResult:
        raise RuntimeError("boom")


def _run(chain: StrategyChain, messages: list[Message], limit: int):
    return chain.run(
        messages,
        config=CompressionConfig(),
        estimator=ApproximateTokenCounter(),
        over_budget=lambda msgs: len(msgs) >= limit,
    )


class TestDefaultStrategies:
    """Tests for default_strategies()."""

    def test_order(self) -> None:
        """Test the six strategies run from lightweight to heavyweight."""
        names = [s.name for s in default_strategies()]

        assert names == [
            "tool_invocation_compress",
            "large_message_offload_with_protection",
            "large_message_offload",
            "previous_round_conversation_summary",
            "current_round_large_message_summary",
            "current_round_message_compress",
        ]

    def test_types(self) -> None:
        """Test the strategy classes in the default chain."""
        kinds = [type(s) for s in StrategyChain().strategies]

        assert kinds == [
            ToolInvocationCompressionStrategy,
            LargeMessageOffloadStrategy,
            LargeMessageOffloadStrategy,
            RoundSummaryStrategy,
            CurrentRoundLargeMessageStrategy,
            CurrentRoundCompressionStrategy,
        ]


class TestStrategyChain:
    """Tests for StrategyChain.run()."""

    def test_stops_when_budget_met(self, make) -> None:
        """Test later strategies do not run once the trigger is false."""
        first, second = DropFirstStrategy("first"), DropFirstStrategy("second")
        messages = [make.user(str(i)) for i in range(5)]

        result = _run(StrategyChain([first, second]), messages, limit=5)

        assert result.strategies_used == ["first"]
        assert result.messages == messages[1:]
        assert not result.exhausted
        assert second.windows == []

    def test_continues_until_budget_met(self, make) -> None:
        """Test each strategy sees the output of the previous one."""
        first, second = DropFirstStrategy("first"), DropFirstStrategy("second")
        messages = [make.user(str(i)) for i in range(5)]

        result = _run(StrategyChain([first, NoopStrategy(), second]), messages, limit=4)

        assert result.strategies_used == ["first", "second"]
        assert result.messages == messages[2:]
        assert first.windows[0].size == 5
        assert second.windows[0].size == 4

    def test_exhausted(self, make) -> None:
        """Test the result is marked exhausted when the trigger still fires."""
        messages = [make.user(str(i)) for i in range(5)]

        result = _run(StrategyChain([DropFirstStrategy("only")]), messages, limit=1)

        assert result.exhausted
        assert result.strategies_used == ["only"]

    def test_nothing_applied(self, make) -> None:
        """Test a chain where nothing applies returns the input."""
        messages = [make.user()]

        result = _run(StrategyChain([NoopStrategy()]), messages, limit=1)

        assert result.applied == []
        assert result.messages == messages
        assert result.exhausted

    def test_raising_strategy_skipped(self, make, caplog: pytest.LogCaptureFixture) -> None:
        """Test an unexpected error in one strategy does not stop the chain."""
        messages = [make.user(str(i)) for i in range(3)]
        chain = StrategyChain([BrokenStrategy(), DropFirstStrategy("after")])

        with caplog.at_level(logging.ERROR, logger="autocontext"):
            result = _run(chain, messages, limit=3)

        assert result.strategies_used == ["after"]
        assert "broken" in caplog.text

    def test_growing_outcome_discarded(self, make, caplog: pytest.LogCaptureFixture) -> None:
        """Test an outcome with a higher token estimate is not kept."""
        messages = [make.user(str(i)) for i in range(3)]
        chain = StrategyChain([PadStrategy(), DropFirstStrategy("after")])

        with caplog.at_level(logging.WARNING, logger="autocontext"):
            result = _run(chain, messages, limit=3)

        assert result.strategies_used == ["after"]
        assert result.messages == messages[1:]
        assert "DISCARDED" in caplog.text
