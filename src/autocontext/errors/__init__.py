"""Error handling."""

from autocontext.errors.exceptions import (
    AutoContextError,
    ConfigurationError,
    OffloadNotFoundError,
    SummarizationError,
)

__all__ = [
    "AutoContextError",
    "ConfigurationError",
    "OffloadNotFoundError",
    "SummarizationError",
]
