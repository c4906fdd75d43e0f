"""Compression configuration."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from autocontext.errors import ConfigurationError

# Tools exposed by a plan notebook. Their calls recur constantly and only
# the resulting plan state matters, so their summaries are kept terse.
DEFAULT_PLAN_TOOL_NAMES: frozenset[str] = frozenset(
    {
        "create_plan",
        "update_plan_info",
        "revise_current_plan",
        "update_subtask_state",
        "finish_subtask",
        "view_subtasks",
        "get_subtask_count",
        "finish_plan",
        "view_historical_plans",
        "recover_historical_plan",
    }
)


class CompressionPrompts(BaseModel):
    """Optional prompt overrides for the summarizing strategies.

    A field left as ``None`` (or set to an empty string) falls back to the
    built-in prompt.

    Attributes:
        tool_invocation: Strategy 1, historical tool runs.
        previous_round_summary: Strategy 4, historical rounds.
        current_round_large_message: Strategy 5, single large messages.
        current_round_compress: Strategy 6, current round merge.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    tool_invocation: str | None = Field(
        default=None,
        description="Prompt for compressing historical tool invocations",
    )
    previous_round_summary: str | None = Field(
        default=None,
        description="Prompt for summarizing historical conversation rounds",
    )
    current_round_large_message: str | None = Field(
        default=None,
        description="Prompt for summarizing large messages of the current round",
    )
    current_round_compress: str | None = Field(
        default=None,
        description="Prompt for compressing the current round",
    )


class CompressionConfig(BaseModel):
    """Configuration for the compression engine.

    Units are part of the field names: thresholds on the payload are in
    characters, the budget is in tokens, and the remaining counts are in
    messages. The two units are never mixed.

    Compression triggers when the working set holds at least
    ``msg_threshold`` messages or its estimated tokens reach
    ``max_tokens * token_ratio``.

    Attributes:
        msg_threshold: Message count that triggers compression.
        max_tokens: Token budget of the model context.
        token_ratio: Fraction of ``max_tokens`` that triggers compression.
        last_keep: Trailing messages protected from strategies 1 and 2.
        large_payload_threshold_chars: Payload size (characters) that
            qualifies a message as large.
        offload_preview_chars: Characters kept as a preview when a large
            message is offloaded.
        min_consecutive_tool_messages: Minimum run length of tool messages
            eligible for compression.
        current_round_compression_ratio: Target size of the compressed
            current round as a fraction of its original characters.
        prompts: Prompt overrides.
        plan_tool_names: Tool names treated as plan-related.

    Example:
        >>> config = CompressionConfig(msg_threshold=50, last_keep=10)
        >>> config.token_threshold
        98304
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    msg_threshold: int = Field(
        default=100,
        description="Message count that triggers compression",
    )
    max_tokens: int = Field(
        default=128 * 1024,
        description="Token budget of the model context",
    )
    token_ratio: float = Field(
        default=0.75,
        description="Fraction of max_tokens that triggers compression (0-1]",
    )
    last_keep: int = Field(
        default=50,
        description="Trailing messages protected from tool compression and offloading",
    )
    large_payload_threshold_chars: int = Field(
        default=5 * 1024,
        description="Payload size in characters that qualifies a message as large",
    )
    offload_preview_chars: int = Field(
        default=200,
        description="Characters kept as preview of an offloaded message",
    )
    min_consecutive_tool_messages: int = Field(
        default=6,
        description="Minimum consecutive tool messages to compress as a run",
    )
    current_round_compression_ratio: float = Field(
        default=0.3,
        description="Target size of the compressed current round (0-1]",
    )
    prompts: CompressionPrompts = Field(
        default_factory=CompressionPrompts,
        description="Prompt overrides for strategies 1, 4, 5 and 6",
    )
    plan_tool_names: frozenset[str] = Field(
        default=DEFAULT_PLAN_TOOL_NAMES,
        description="Tool names treated as plan-related",
    )

    @model_validator(mode="after")
    def _validate_ranges(self) -> CompressionConfig:
        """Reject out-of-range values at construction."""
        positive = (
            "msg_threshold",
            "max_tokens",
            "large_payload_threshold_chars",
            "offload_preview_chars",
            "min_consecutive_tool_messages",
        )
        for key in positive:
            value = getattr(self, key)
            if value <= 0:
                _reject(key, "a positive integer", value)

        if self.last_keep < 0:
            _reject("last_keep", "a non-negative integer", self.last_keep)

        for key in ("token_ratio", "current_round_compression_ratio"):
            value = getattr(self, key)
            if not 0.0 < value <= 1.0:
                _reject(key, "a ratio in (0, 1]", value)

        if self.offload_preview_chars >= self.large_payload_threshold_chars:
            _reject(
                "offload_preview_chars",
                f"less than large_payload_threshold_chars ({self.large_payload_threshold_chars})",
                self.offload_preview_chars,
            )
        return self

    @property
    def token_threshold(self) -> int:
        """Token count that triggers compression."""
        return int(self.max_tokens * self.token_ratio)


def _reject(key: str, expected: str, actual: Any) -> None:
    raise ConfigurationError(
        f"Invalid compression config: {key} must be {expected}, got {actual!r}",
        config_key=key,
        expected=expected,
        actual=actual,
    )
