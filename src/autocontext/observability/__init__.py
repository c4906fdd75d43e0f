"""Logging utilities.

Exports:
- LOGGER_NAME, SensitiveDataFilter, StructuredFormatter, setup_logging
"""

from autocontext.observability.logging import (
    LOGGER_NAME,
    SensitiveDataFilter,
    StructuredFormatter,
    setup_logging,
)

__all__ = [
    "LOGGER_NAME",
    "SensitiveDataFilter",
    "StructuredFormatter",
    "setup_logging",
]
