"""
autocontext - Adaptive context compression for LLM agents.

Keeps a growing conversation history within a bounded token budget by
applying an ordered chain of compaction strategies, archiving replaced
content for on-demand reload and recording every change.

Quick Start:
    >>> from autocontext import CompressionConfig, ContextManager, Message
    >>> from autocontext import PydanticAISummarizer
    >>> manager = ContextManager(
    ...     CompressionConfig(msg_threshold=50, last_keep=10),
    ...     summarizer=PydanticAISummarizer("openai:gpt-4o-mini"),
    ... )
    >>> manager.add_message(Message.text_message("user", "Fix the failing build"))
    >>> messages, compressed = manager.compress_if_needed()

With Settings:
    >>> from autocontext import AutoContextSettings, ContextManager
    >>> settings = AutoContextSettings()  # Loads AUTOCONTEXT_* env vars and .env
    >>> manager = ContextManager.from_settings(settings)

Reload Tool:
    >>> from autocontext.tools import create_context_reload_tool
    >>> reload_tool = create_context_reload_tool(manager)

Key Features:
    - Six strategies, from tool-run compression to current round merging
    - Offload store with uuid-based reload
    - Compression event log with token and latency accounting
    - Plan-aware summarization hints
    - Snapshot/restore of all state

See Also:
    - examples/ directory for runnable scripts
"""

from importlib.metadata import PackageNotFoundError, version

from autocontext.config import AutoContextSettings, LoggingConfig
from autocontext.context import (
    CompactionResult,
    CompressionConfig,
    CompressionEvent,
    CompressionEventType,
    CompressionPrompts,
    ContextManager,
    ContextSnapshot,
    ContextState,
    OffloadStore,
    Plan,
    PlanState,
    PydanticAISummarizer,
    SubTask,
    SubTaskState,
    Summarizer,
    SummaryResult,
    SummaryUsage,
)
from autocontext.errors import (
    AutoContextError,
    ConfigurationError,
    OffloadNotFoundError,
    SummarizationError,
)
from autocontext.messages import (
    Message,
    MessageRole,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
)
from autocontext.tokens import ApproximateTokenCounter, TokenCounter, TokenUsage, UsageTracker

try:
    __version__ = version("autocontext")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"

__all__ = [
    # Engine
    "ContextManager",
    "CompactionResult",
    "ContextSnapshot",
    "ContextState",
    # Configuration
    "AutoContextSettings",
    "CompressionConfig",
    "CompressionPrompts",
    "LoggingConfig",
    # Messages
    "Message",
    "MessageRole",
    "TextBlock",
    "ToolResultBlock",
    "ToolUseBlock",
    # Offload and events
    "CompressionEvent",
    "CompressionEventType",
    "OffloadStore",
    # Summarization
    "PydanticAISummarizer",
    "Summarizer",
    "SummaryResult",
    "SummaryUsage",
    # Plan awareness
    "Plan",
    "PlanState",
    "SubTask",
    "SubTaskState",
    # Tokens
    "ApproximateTokenCounter",
    "TokenCounter",
    "TokenUsage",
    "UsageTracker",
    # Errors
    "AutoContextError",
    "ConfigurationError",
    "OffloadNotFoundError",
    "SummarizationError",
    "__version__",
]
