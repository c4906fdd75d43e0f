"""Tests for token estimators."""

from __future__ import annotations

import pytest

from autocontext.tokens.counter import (
    MESSAGE_OVERHEAD_TOKENS,
    ApproximateTokenCounter,
    TokenCounter,
    TokenEstimator,
)


class _FakeEncoding:
    """One token per whitespace-separated word."""

    def __init__(self) -> None:
        self.calls = 0

    def encode(self, text: str, disallowed_special=()) -> list[int]:
        self.calls += 1
        return list(range(len(text.split())))


class TestApproximateTokenCounter:
    """Tests for the character-based estimator."""

    def test_count_rounds_up(self) -> None:
        """Test partial tokens round up."""
        counter = ApproximateTokenCounter()

        assert counter.count("") == 0
        assert counter.count("abcd") == 1
        assert counter.count("abcde") == 2

    def test_message_includes_overhead(self, make) -> None:
        """Test each message adds a fixed overhead."""
        counter = ApproximateTokenCounter()

        assert counter.count_message(make.user("x" * 40)) == 10 + MESSAGE_OVERHEAD_TOKENS

    def test_monotonic(self, make) -> None:
        """Test adding a message never lowers the estimate."""
        counter = ApproximateTokenCounter()
        messages = [make.user("hello"), *make.tool_pair(), make.assistant("done")]

        counts = [counter.count_messages(messages[:i]) for i in range(len(messages) + 1)]

        assert counts == sorted(counts)
        assert counts[0] == 0

    def test_custom_ratio(self, make) -> None:
        """Test chars_per_token changes the estimate."""
        counter = ApproximateTokenCounter(chars_per_token=2.0)
        assert counter.count("abcd") == 2

    def test_invalid_ratio(self) -> None:
        """Test a non-positive ratio is rejected."""
        with pytest.raises(ValueError):
            ApproximateTokenCounter(chars_per_token=0)

    def test_satisfies_protocol(self) -> None:
        """Test the estimator satisfies TokenEstimator."""
        assert isinstance(ApproximateTokenCounter(), TokenEstimator)


class TestTokenCounter:
    """Tests for the tiktoken-backed counter."""

    @pytest.fixture
    def encoding(self, monkeypatch) -> _FakeEncoding:
        fake = _FakeEncoding()
        monkeypatch.setattr(
            "autocontext.tokens.counter.tiktoken.get_encoding", lambda name: fake
        )
        return fake

    def test_count(self, encoding: _FakeEncoding) -> None:
        """Test text is counted through the encoding."""
        counter = TokenCounter()

        assert counter.count("one two three") == 3
        assert counter.count("") == 0

    def test_encoding_loaded_lazily(self, monkeypatch) -> None:
        """Test the encoding is loaded once, on first use."""
        loaded: list[str] = []

        def get_encoding(name: str) -> _FakeEncoding:
            loaded.append(name)
            return _FakeEncoding()

        monkeypatch.setattr("autocontext.tokens.counter.tiktoken.get_encoding", get_encoding)
        counter = TokenCounter(encoding="o200k_base")
        assert loaded == []

        counter.count("a b")
        counter.count("c d")

        assert loaded == ["o200k_base"]

    def test_count_messages(self, encoding: _FakeEncoding, make) -> None:
        """Test message counts include text, tool names and overhead."""
        counter = TokenCounter()
        call = make.tool_call("grep", {"pattern": "x"})
        result = make.tool_result(call, "one two")

        assert counter.count_message(make.user("a b c")) == 3 + MESSAGE_OVERHEAD_TOKENS
        assert counter.count_message(result) == 1 + 2 + MESSAGE_OVERHEAD_TOKENS
        assert counter.count_messages([call, result]) == (
            counter.count_message(call) + counter.count_message(result)
        )

    def test_satisfies_protocol(self) -> None:
        """Test the counter satisfies TokenEstimator."""
        assert isinstance(TokenCounter(), TokenEstimator)
