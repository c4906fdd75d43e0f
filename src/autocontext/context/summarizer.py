"""Summarization capability.

Strategies delegate summarization through the :class:`Summarizer`
protocol. :class:`PydanticAISummarizer` implements it on top of a
pydantic-ai agent; tests and hosts can supply any other object with a
matching ``summarize`` method.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import httpx
from pydantic_ai import Agent
from pydantic_ai.settings import ModelSettings

from autocontext.context.prompts import COMPRESSION_MESSAGE_LIST_END
from autocontext.errors import SummarizationError
from autocontext.messages import Message, render_transcript

if TYPE_CHECKING:
    from pydantic_ai.models import Model

logger = logging.getLogger(__name__)

SUMMARIZER_SYSTEM_PROMPT = (
    "You compress conversation history for an autonomous agent. Follow the instructions"
    " in the user prompt exactly and reply with the compressed text only."
)


@dataclass(frozen=True)
class SummaryUsage:
    """Accounting for one summarizer call.

    Attributes:
        input_tokens: Prompt tokens consumed.
        output_tokens: Tokens generated.
        elapsed_seconds: Wall-clock duration of the call.
    """

    input_tokens: int = 0
    output_tokens: int = 0
    elapsed_seconds: float = 0.0

    def as_event_metadata(self) -> dict[str, float | int]:
        """Metadata keys recorded on compression events."""
        return {
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "time": self.elapsed_seconds,
        }


@dataclass(frozen=True)
class SummaryResult:
    """Compressed text plus usage."""

    text: str
    usage: SummaryUsage


@runtime_checkable
class Summarizer(Protocol):
    """Summarization contract consumed by the compaction strategies.

    ``summarize`` must raise :class:`SummarizationError` on provider
    failure or timeout.
    """

    def summarize(
        self,
        prompt: str,
        messages: Sequence[Message],
        extra_instructions: str | None = None,
    ) -> SummaryResult: ...


def build_summary_prompt(
    prompt: str,
    messages: Sequence[Message],
    extra_instructions: str | None = None,
) -> str:
    """Assemble the full summarization prompt.

    Layout: instruction prompt, transcript of ``messages``, the list-end
    marker, then ``extra_instructions`` (closing instructions, which
    already carry any plan hint).
    """
    sections = [prompt, render_transcript(messages), COMPRESSION_MESSAGE_LIST_END]
    if extra_instructions:
        sections.append(extra_instructions)
    return "\n\n".join(sections)


class PydanticAISummarizer:
    """Summarizer backed by a pydantic-ai agent.

    Calls are synchronous (``Agent.run_sync``); every failure, including
    timeouts, is re-raised as :class:`SummarizationError`.

    Example:
        >>> from pydantic_ai.models.test import TestModel
        >>> summarizer = PydanticAISummarizer(TestModel(custom_output_text="short"))
        >>> summarizer.summarize("Compress this.", []).text
        'short'
    """

    def __init__(
        self,
        model: Model | str,
        *,
        timeout_seconds: float | None = 60.0,
        system_prompt: str = SUMMARIZER_SYSTEM_PROMPT,
    ) -> None:
        """Initialize the summarizer.

        Args:
            model: pydantic-ai model instance or model name
                (e.g. ``"openai:gpt-4o-mini"``).
            timeout_seconds: Per-call timeout; ``None`` disables it.
            system_prompt: System prompt for the summarization agent.
        """
        self._agent: Agent[None, str] = Agent(
            model,
            output_type=str,
            system_prompt=system_prompt,
            defer_model_check=True,
        )
        self._timeout = timeout_seconds

    def summarize(
        self,
        prompt: str,
        messages: Sequence[Message],
        extra_instructions: str | None = None,
    ) -> SummaryResult:
        user_prompt = build_summary_prompt(prompt, messages, extra_instructions)
        settings = ModelSettings(timeout=self._timeout) if self._timeout is not None else None

        started = time.perf_counter()
        try:
            result = self._agent.run_sync(user_prompt, model_settings=settings)
        except Exception as e:
            elapsed = time.perf_counter() - started
            logger.warning("Summarizer call failed after %.2fs: %s", elapsed, e)
            raise SummarizationError(
                "Summarizer call failed",
                cause=e,
                retryable=isinstance(e, (TimeoutError, httpx.TimeoutException)),
            ) from e
        elapsed = time.perf_counter() - started

        usage = result.usage()
        # input_tokens/output_tokens with fallback to the older names
        input_tokens = (
            getattr(usage, "input_tokens", None) or getattr(usage, "request_tokens", None) or 0
        )
        output_tokens = (
            getattr(usage, "output_tokens", None) or getattr(usage, "response_tokens", None) or 0
        )
        return SummaryResult(
            text=str(result.output).strip(),
            usage=SummaryUsage(
                input_tokens=input_tokens,
                output_tokens=output_tokens,
                elapsed_seconds=elapsed,
            ),
        )
