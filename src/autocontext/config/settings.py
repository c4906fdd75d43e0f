"""Root settings, loaded from the environment."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from autocontext.config.logging_config import LoggingConfig
from autocontext.context.config import CompressionConfig


class AutoContextSettings(BaseSettings):
    """Root configuration for the compression engine.

    Values come from (highest priority first) constructor arguments,
    ``AUTOCONTEXT_*`` environment variables, and a ``.env`` file. Nested
    fields use ``__`` as delimiter.

    Attributes:
        compression: Compression engine configuration.
        logging: Logging configuration.
        summarizer_model: pydantic-ai model name for the summarizer.
        summarizer_timeout_seconds: Per-call summarizer timeout.

    Example:
        ``AUTOCONTEXT_COMPRESSION__MSG_THRESHOLD=50`` sets
        ``settings.compression.msg_threshold``.
    """

    model_config = SettingsConfigDict(
        env_prefix="AUTOCONTEXT_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    compression: CompressionConfig = Field(
        default_factory=CompressionConfig,
        description="Compression engine configuration",
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration",
    )
    summarizer_model: str | None = Field(
        default=None,
        description="pydantic-ai model name used for summarization (e.g. 'openai:gpt-4o-mini')",
    )
    summarizer_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Timeout for one summarizer call",
    )
