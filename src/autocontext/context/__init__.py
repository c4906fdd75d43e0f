"""Context window management.

Keeps a growing conversation inside its token budget by walking an
ordered chain of compaction strategies, from lightweight to heavyweight:

Compaction Strategies:
    - tool_invocation_compress: Summarize long runs of historical tool calls
    - large_message_offload_with_protection: Offload large historical
      payloads outside the ``last_keep`` tail
    - large_message_offload: Same, ignoring the ``last_keep`` tail
    - previous_round_conversation_summary: Summarize completed rounds
    - current_round_large_message_summary: Summarize large current round
      messages one by one
    - current_round_message_compress: Merge the current round into one message

Replaced content is archived in an offload store and can be reloaded by
uuid; every change is recorded as a compression event.

Standalone Usage:
    >>> from autocontext.context import CompressionConfig, ContextManager
    >>> from autocontext.context import PydanticAISummarizer
    >>> manager = ContextManager(
    ...     CompressionConfig(msg_threshold=50, last_keep=10),
    ...     summarizer=PydanticAISummarizer("openai:gpt-4o-mini"),
    ... )
    >>> manager.add_messages([...])
    >>> messages, compressed = manager.compress_if_needed()

See Also:
    - examples/context_compaction.py for a runnable example
"""

from autocontext.context.compaction import (
    CompactionStrategy,
    CurrentRoundCompressionStrategy,
    CurrentRoundLargeMessageStrategy,
    LargeMessageOffloadStrategy,
    RoundSummaryStrategy,
    StrategyChain,
    StrategyResult,
    ToolInvocationCompressionStrategy,
)
from autocontext.context.config import CompressionConfig, CompressionPrompts
from autocontext.context.events import CompressionEvent, CompressionEventLog, CompressionEventType
from autocontext.context.history import MessageHistory
from autocontext.context.manager import (
    CompactionResult,
    ContextManager,
    ContextSnapshot,
    ContextState,
)
from autocontext.context.offload import OffloadStore
from autocontext.context.plan import Plan, PlanState, SubTask, SubTaskState, build_plan_hint
from autocontext.context.protection import ProtectionWindow
from autocontext.context.summarizer import (
    PydanticAISummarizer,
    Summarizer,
    SummaryResult,
    SummaryUsage,
)

__all__ = [
    "CompactionResult",
    "CompactionStrategy",
    "CompressionConfig",
    "CompressionEvent",
    "CompressionEventLog",
    "CompressionEventType",
    "CompressionPrompts",
    "ContextManager",
    "ContextSnapshot",
    "ContextState",
    "CurrentRoundCompressionStrategy",
    "CurrentRoundLargeMessageStrategy",
    "LargeMessageOffloadStrategy",
    "MessageHistory",
    "OffloadStore",
    "Plan",
    "PlanState",
    "ProtectionWindow",
    "PydanticAISummarizer",
    "RoundSummaryStrategy",
    "StrategyChain",
    "StrategyResult",
    "SubTask",
    "SubTaskState",
    "Summarizer",
    "SummaryResult",
    "SummaryUsage",
    "ToolInvocationCompressionStrategy",
    "build_plan_hint",
]
