"""Token counting."""

from __future__ import annotations

import json
import math
from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import tiktoken

from autocontext.messages import (
    Message,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
    message_char_count,
)

if TYPE_CHECKING:
    from tiktoken import Encoding

# Per-message overhead for role markers and separators
MESSAGE_OVERHEAD_TOKENS = 4


@runtime_checkable
class TokenEstimator(Protocol):
    """Anything that can estimate the token cost of messages.

    Implementations must be deterministic for a fixed message list and
    monotonic: adding a message never lowers the estimate.
    """

    def count_messages(self, messages: Sequence[Message]) -> int: ...


class ApproximateTokenCounter:
    """Character-based token estimate.

    Assumes ``chars_per_token`` characters per token and adds a fixed
    per-message overhead. Needs no tokenizer data, so it is the default.
    """

    def __init__(self, chars_per_token: float = 4.0) -> None:
        if chars_per_token <= 0:
            raise ValueError("chars_per_token must be positive")
        self._chars_per_token = chars_per_token

    def count(self, text: str) -> int:
        return math.ceil(len(text) / self._chars_per_token)

    def count_message(self, message: Message) -> int:
        chars = message_char_count(message)
        return math.ceil(chars / self._chars_per_token) + MESSAGE_OVERHEAD_TOKENS

    def count_messages(self, messages: Sequence[Message]) -> int:
        return sum(self.count_message(m) for m in messages)


class TokenCounter:
    """Tokenizer-backed counter using tiktoken.

    The encoding is loaded on first use.

    Example:
        >>> counter = TokenCounter(encoding="cl100k_base")
        >>> counter.count("Hello, world!")
        4
    """

    def __init__(self, encoding: str = "cl100k_base") -> None:
        self._encoding_name = encoding
        self._encoding: Encoding | None = None

    @property
    def encoding(self) -> Encoding:
        if self._encoding is None:
            self._encoding = tiktoken.get_encoding(self._encoding_name)
        return self._encoding

    def count(self, text: str) -> int:
        if not text:
            return 0
        return len(self.encoding.encode(text, disallowed_special=()))

    def count_message(self, message: Message) -> int:
        total = MESSAGE_OVERHEAD_TOKENS
        for block in message.content:
            if isinstance(block, TextBlock):
                total += self.count(block.text)
            elif isinstance(block, ToolUseBlock):
                total += self.count(block.name)
                total += self.count(json.dumps(block.input, ensure_ascii=False, default=str))
            elif isinstance(block, ToolResultBlock):
                total += self.count(block.name) + self.count(block.text)
        return total

    def count_messages(self, messages: Sequence[Message]) -> int:
        return sum(self.count_message(m) for m in messages)
