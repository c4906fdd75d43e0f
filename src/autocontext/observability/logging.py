"""Logging setup for the compression engine."""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any

from autocontext.config.logging_config import LoggingConfig

LOGGER_NAME = "autocontext"
_HANDLER_FLAG = "_autocontext_handler"

_TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s - %(message)s"

_DEFAULT_SENSITIVE_PATTERNS = (
    r"sk-[A-Za-z0-9_\-]{8,}",
    r"(?i)(api[_-]?key|token|secret|password)(\s*[=:]\s*)\S+",
    r"(?i)bearer\s+[A-Za-z0-9._\-]+",
)

# Attributes every LogRecord has; anything else was passed through ``extra``
_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class SensitiveDataFilter(logging.Filter):
    """Mask API keys, tokens and similar secrets in log messages."""

    def __init__(self, patterns: list[str] | None = None) -> None:
        super().__init__()
        self._patterns = [
            re.compile(p) for p in (*_DEFAULT_SENSITIVE_PATTERNS, *(patterns or []))
        ]

    def redact(self, text: str) -> str:
        for pattern in self._patterns:
            if pattern.groups >= 2:
                text = pattern.sub(lambda m: f"{m.group(1)}{m.group(2)}***", text)
            else:
                text = pattern.sub("***", text)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = self.redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class StructuredFormatter(logging.Formatter):
    """Format records as one JSON object per line.

    Fields passed through ``extra`` are included as top-level keys.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, ensure_ascii=False)


def setup_logging(config: LoggingConfig | None = None) -> logging.Logger:
    """Configure the ``autocontext`` logger.

    Calling it again reconfigures the handler it installed instead of
    adding another one.

    Args:
        config: Logging configuration. Uses defaults if not provided.

    Returns:
        The configured ``autocontext`` logger.
    """
    config = config or LoggingConfig()
    logger = logging.getLogger(LOGGER_NAME)
    level = getattr(logging, config.level)
    logger.setLevel(level)

    handler = next((h for h in logger.handlers if getattr(h, _HANDLER_FLAG, False)), None)
    if handler is None:
        handler = logging.StreamHandler()
        setattr(handler, _HANDLER_FLAG, True)
        logger.addHandler(handler)

    handler.setLevel(level)
    if config.format == "json":
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))

    for existing in list(handler.filters):
        if isinstance(existing, SensitiveDataFilter):
            handler.removeFilter(existing)
    if config.redact_sensitive:
        handler.addFilter(SensitiveDataFilter(config.sensitive_patterns))

    return logger
