"""Tests for CompressionConfig and CompressionPrompts."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from autocontext.context.config import (
    DEFAULT_PLAN_TOOL_NAMES,
    CompressionConfig,
    CompressionPrompts,
)
from autocontext.errors import ConfigurationError


class TestCompressionConfigDefaults:
    """Tests for default values."""

    def test_defaults(self) -> None:
        """Test all defaults."""
        config = CompressionConfig()

        assert config.msg_threshold == 100
        assert config.max_tokens == 131072
        assert config.token_ratio == 0.75
        assert config.last_keep == 50
        assert config.large_payload_threshold_chars == 5120
        assert config.offload_preview_chars == 200
        assert config.min_consecutive_tool_messages == 6
        assert config.current_round_compression_ratio == 0.3
        assert config.plan_tool_names == DEFAULT_PLAN_TOOL_NAMES

    def test_token_threshold(self) -> None:
        """Test token_threshold is max_tokens * token_ratio."""
        config = CompressionConfig(max_tokens=1000, token_ratio=0.5)
        assert config.token_threshold == 500

    def test_frozen(self) -> None:
        """Test the config cannot be mutated."""
        config = CompressionConfig()
        with pytest.raises(ValidationError):
            config.msg_threshold = 5

    def test_unknown_field_rejected(self) -> None:
        """Test extra fields are rejected."""
        with pytest.raises(ValidationError):
            CompressionConfig(msg_treshold=5)


class TestCompressionConfigValidation:
    """Tests for range validation at construction."""

    @pytest.mark.parametrize("ratio", [0.0, -0.1, 1.5])
    def test_token_ratio_out_of_range(self, ratio: float) -> None:
        """Test token_ratio outside (0, 1] is rejected."""
        with pytest.raises(ConfigurationError) as exc_info:
            CompressionConfig(token_ratio=ratio)

        assert exc_info.value.config_key == "token_ratio"
        assert exc_info.value.actual == ratio

    def test_token_ratio_one_allowed(self) -> None:
        """Test a ratio of exactly 1 is accepted."""
        assert CompressionConfig(token_ratio=1.0).token_threshold == 131072

    def test_current_round_ratio_out_of_range(self) -> None:
        """Test current_round_compression_ratio outside (0, 1] is rejected."""
        with pytest.raises(ConfigurationError) as exc_info:
            CompressionConfig(current_round_compression_ratio=2.0)
        assert exc_info.value.config_key == "current_round_compression_ratio"

    @pytest.mark.parametrize(
        "key",
        [
            "msg_threshold",
            "max_tokens",
            "large_payload_threshold_chars",
            "min_consecutive_tool_messages",
        ],
    )
    def test_non_positive_rejected(self, key: str) -> None:
        """Test thresholds must be positive."""
        with pytest.raises(ConfigurationError) as exc_info:
            CompressionConfig(**{key: 0})
        assert exc_info.value.config_key == key

    def test_negative_last_keep_rejected(self) -> None:
        """Test last_keep must not be negative."""
        with pytest.raises(ConfigurationError):
            CompressionConfig(last_keep=-1)

    def test_zero_last_keep_allowed(self) -> None:
        """Test last_keep may be zero."""
        assert CompressionConfig(last_keep=0).last_keep == 0

    def test_preview_must_be_smaller_than_threshold(self) -> None:
        """Test the preview cannot be as large as the payload threshold."""
        with pytest.raises(ConfigurationError) as exc_info:
            CompressionConfig(large_payload_threshold_chars=100, offload_preview_chars=100)
        assert exc_info.value.config_key == "offload_preview_chars"


class TestCompressionPrompts:
    """Tests for prompt overrides."""

    def test_defaults_are_none(self) -> None:
        """Test no prompt is overridden by default."""
        prompts = CompressionPrompts()

        assert prompts.tool_invocation is None
        assert prompts.previous_round_summary is None
        assert prompts.current_round_large_message is None
        assert prompts.current_round_compress is None

    def test_nested_in_config(self) -> None:
        """Test prompts can be given as a dict."""
        config = CompressionConfig(prompts={"tool_invocation": "Custom"})
        assert config.prompts.tool_invocation == "Custom"
