"""Logging configuration."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class LoggingConfig(BaseModel):
    """Configuration for engine logging.

    Attributes:
        level: Log level for the ``autocontext`` logger.
        format: ``text`` for human-readable lines, ``json`` for one JSON
            object per record.
        redact_sensitive: Whether to mask API keys and tokens in messages.
        sensitive_patterns: Extra regular expressions to redact.
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level for the autocontext logger",
    )
    format: Literal["text", "json"] = Field(
        default="text",
        description="Output format",
    )
    redact_sensitive: bool = Field(
        default=True,
        description="Whether to mask API keys and tokens in log messages",
    )
    sensitive_patterns: list[str] = Field(
        default_factory=list,
        description="Additional regular expressions to redact",
    )
