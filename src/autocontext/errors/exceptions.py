"""Custom exception hierarchy for the compression engine."""

from __future__ import annotations

from typing import Any, ClassVar


class AutoContextError(Exception):
    """Base exception for all autocontext errors.

    All custom exceptions in this package inherit from this class,
    allowing for easy catching of all engine-related errors.

    Attributes:
        message: Human-readable error message.
        cause: Original exception that caused this error.
        details: Additional error context as key-value pairs.

    Details can be accessed as attributes (e.g., error.config_key).
    """

    # Map attribute names to default values when not in details
    _defaults: ClassVar[dict[str, Any]] = {}

    def __init__(
        self,
        message: str,
        *,
        cause: Exception | None = None,
        **details: Any,
    ) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
            cause: Original exception that caused this error.
            **details: Additional error context.
        """
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = details

    def __getattr__(self, name: str) -> Any:
        """Access details as attributes."""
        if name in ("details", "message", "cause"):
            raise AttributeError(name)
        if name in self.details:
            return self.details[name]
        if name in self._defaults:
            return self._defaults[name]
        raise AttributeError(f"'{type(self).__name__}' has no attribute '{name}'")

    def __str__(self) -> str:
        """Return string representation."""
        if self.cause:
            return f"{self.message} (caused by: {self.cause})"
        return self.message


class ConfigurationError(AutoContextError):
    """Error in engine configuration.

    Raised at construction time when a configuration value is out of
    range or incompatible with another value. Never raised while
    compressing.

    Attributes from details: config_key, expected, actual.
    """


class SummarizationError(AutoContextError):
    """The summarization capability failed.

    Raised by summarizers on provider errors and timeouts. Strategies
    catch it at their boundary and report themselves as not applied.

    Attributes from details: strategy, retryable (default: False).
    """

    _defaults: ClassVar[dict[str, Any]] = {"retryable": False, "strategy": None}


class OffloadNotFoundError(AutoContextError):
    """No offloaded content exists for the requested UUID.

    Raised by reload operations when the UUID is unknown or was cleared.

    Attributes from details: uuid.
    """

    def __init__(self, uuid: str, **kwargs: Any) -> None:
        super().__init__(f"No offloaded content found for uuid '{uuid}'", uuid=uuid, **kwargs)

    def __reduce__(self) -> tuple:
        """Support pickling with custom constructor arguments."""
        return (type(self), (self.details["uuid"],))
