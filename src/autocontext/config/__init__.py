"""Configuration system for autocontext.

Main exports:
- AutoContextSettings: Root configuration class
- LoggingConfig: Logging configuration

The engine itself is configured with ``CompressionConfig`` from
``autocontext.context``; the settings class only loads it from the
environment.
"""

from autocontext.config.logging_config import LoggingConfig
from autocontext.config.settings import AutoContextSettings

__all__ = [
    "AutoContextSettings",
    "LoggingConfig",
]
