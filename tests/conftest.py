"""Shared test fixtures and configuration for autocontext tests."""

from __future__ import annotations

import itertools
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import pytest
from pydantic_ai import models
from pydantic_ai.models.test import TestModel

from autocontext.context.compaction.base import StrategyContext
from autocontext.context.config import CompressionConfig
from autocontext.context.protection import ProtectionWindow
from autocontext.context.summarizer import SummaryResult, SummaryUsage
from autocontext.errors import SummarizationError
from autocontext.messages import Message, MessageRole, TextBlock, ToolResultBlock, ToolUseBlock
from autocontext.tokens.counter import ApproximateTokenCounter

# Block all real model requests globally for safety
models.ALLOW_MODEL_REQUESTS = False


@pytest.fixture
def test_model() -> TestModel:
    """Provide a TestModel for deterministic testing."""
    return TestModel(custom_output_text="compressed summary")


@dataclass
class SummarizeCall:
    """One recorded call to the fake summarizer."""

    prompt: str
    messages: list[Message]
    extra_instructions: str | None


class FakeSummarizer:
    """Scripted summarizer.

    Returns ``"<text> <n>"`` for the n-th call and fails the calls listed
    in ``fail_on`` (1-based). ``fail_always`` fails every call.
    """

    def __init__(
        self,
        text: str = "summary",
        *,
        fail_on: Sequence[int] = (),
        fail_always: bool = False,
        usage: SummaryUsage | None = None,
    ) -> None:
        self.text = text
        self.fail_on = set(fail_on)
        self.fail_always = fail_always
        self.usage = usage or SummaryUsage(input_tokens=100, output_tokens=20, elapsed_seconds=0.5)
        self.calls: list[SummarizeCall] = []

    def summarize(
        self,
        prompt: str,
        messages: Sequence[Message],
        extra_instructions: str | None = None,
    ) -> SummaryResult:
        self.calls.append(SummarizeCall(prompt, list(messages), extra_instructions))
        n = len(self.calls)
        if self.fail_always or n in self.fail_on:
            raise SummarizationError("scripted failure", retryable=True)
        return SummaryResult(text=f"{self.text} {n}", usage=self.usage)


class MessageFactory:
    """Builds conversation messages for tests."""

    def __init__(self) -> None:
        self._call_ids = itertools.count(1)

    def user(self, text: str = "question") -> Message:
        return Message.text_message(MessageRole.USER, text, name="user")

    def assistant(self, text: str = "answer") -> Message:
        """A final assistant response."""
        return Message.text_message(MessageRole.ASSISTANT, text, name="assistant")

    def tool_call(
        self,
        name: str = "read_file",
        args: dict[str, Any] | None = None,
        call_id: str | None = None,
    ) -> Message:
        call_id = call_id or f"call_{next(self._call_ids)}"
        return Message(
            role=MessageRole.ASSISTANT,
            name="assistant",
            content=[ToolUseBlock(id=call_id, name=name, input=args or {"path": "a.txt"})],
        )

    def tool_result(self, call: Message, output: str = "ok") -> Message:
        use = call.tool_uses[0]
        return Message(
            role=MessageRole.TOOL,
            name=use.name,
            content=[ToolResultBlock(id=use.id, name=use.name, output=[TextBlock(text=output)])],
        )

    def tool_pair(self, name: str = "read_file", output: str = "ok") -> list[Message]:
        call = self.tool_call(name)
        return [call, self.tool_result(call, output)]

    def tool_pairs(self, count: int, name: str = "read_file", output: str = "ok") -> list[Message]:
        messages: list[Message] = []
        for _ in range(count):
            messages.extend(self.tool_pair(name, output))
        return messages


@pytest.fixture
def make() -> MessageFactory:
    """Provide a message factory."""
    return MessageFactory()


@pytest.fixture
def fake_summarizer() -> FakeSummarizer:
    """Provide a scripted summarizer that always succeeds."""
    return FakeSummarizer()


@pytest.fixture
def failing_summarizer() -> FakeSummarizer:
    """Provide a scripted summarizer that always fails."""
    return FakeSummarizer(fail_always=True)


@pytest.fixture
def summarizer_factory() -> type[FakeSummarizer]:
    """Factory fixture to create scripted summarizers.

    Usage:
        def test_something(summarizer_factory):
            summarizer = summarizer_factory(fail_on=[2])
    """
    return FakeSummarizer


@pytest.fixture
def strategy_context():
    """Factory fixture building a StrategyContext for a message list."""

    def build(
        messages: Sequence[Message],
        config: CompressionConfig | None = None,
        summarizer: Any = None,
        plan_hint: str | None = None,
    ) -> StrategyContext:
        config = config or CompressionConfig()
        return StrategyContext(
            config=config,
            window=ProtectionWindow.compute(messages, config),
            estimator=ApproximateTokenCounter(),
            summarizer=summarizer,
            plan_hint=plan_hint,
        )

    return build
