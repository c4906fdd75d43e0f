"""Context manager: the compaction orchestrator."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from autocontext.context.compaction.base import CompactionStrategy, StrategyResult
from autocontext.context.compaction.chain import StrategyChain
from autocontext.context.config import CompressionConfig
from autocontext.context.events import CompressionEvent, CompressionEventLog, CompressionEventType
from autocontext.context.history import MessageHistory
from autocontext.context.offload import OffloadStore
from autocontext.context.plan import PlanSource, build_plan_hint, resolve_plan
from autocontext.context.summarizer import PydanticAISummarizer, Summarizer
from autocontext.messages import Message, MessageRole, is_final_assistant_response
from autocontext.tokens.counter import ApproximateTokenCounter, TokenEstimator
from autocontext.tokens.tracker import TokenUsage, UsageTracker

if TYPE_CHECKING:
    from autocontext.config.settings import AutoContextSettings

logger = logging.getLogger(__name__)


@dataclass
class ContextState:
    """Current state of the managed context.

    Attributes:
        message_count: Messages in the working set.
        original_message_count: Messages in the original log.
        token_count: Estimated tokens of the working set.
        token_threshold: Token count that triggers compression.
        msg_threshold: Message count that triggers compression.
        offload_count: Entries in the offload store.
        compaction_count: Compression passes that changed the working set.
        event_count: Events in the compression log.
    """

    message_count: int
    original_message_count: int
    token_count: int
    token_threshold: int
    msg_threshold: int
    offload_count: int
    compaction_count: int
    event_count: int


@dataclass
class CompactionResult:
    """Result of one compression pass.

    Attributes:
        messages: The working set after the pass.
        compressed: Whether the working set changed.
        strategies: Names of the strategies that applied, in order.
        events: Events committed by the pass.
        messages_before: Working set size before the pass.
        messages_after: Working set size after the pass.
        tokens_before: Estimated tokens before the pass.
        tokens_after: Estimated tokens after the pass.
        exhausted: True when every strategy ran and the trigger still fired.
    """

    messages: list[Message]
    compressed: bool
    strategies: list[str] = field(default_factory=list)
    events: list[CompressionEvent] = field(default_factory=list)
    messages_before: int = 0
    messages_after: int = 0
    tokens_before: int = 0
    tokens_after: int = 0
    exhausted: bool = False


class ContextSnapshot(BaseModel):
    """Serializable state of the four stores.

    Round-trips through ``model_dump_json`` / ``model_validate_json``.
    """

    working_messages: list[Message] = Field(default_factory=list)
    original_messages: list[Message] = Field(default_factory=list)
    offload_context: dict[str, list[Message]] = Field(default_factory=dict)
    compression_events: list[CompressionEvent] = Field(default_factory=list)


class ContextManager:
    """Keeps a conversation within its token budget.

    Owns the working set, the original log, the offload store and the
    compression event log. Messages are added without compressing;
    :meth:`compress_if_needed` is called once per reasoning turn and walks
    the strategy chain when the trigger fires.

    One manager serves one conversation and assumes a single writer. It
    is not thread-safe.

    Example:
        >>> manager = ContextManager(CompressionConfig(msg_threshold=10))
        >>> manager.add_message(Message.text_message("user", "hi"))
        >>> messages, compressed = manager.compress_if_needed()
        >>> compressed
        False
    """

    def __init__(
        self,
        config: CompressionConfig | None = None,
        summarizer: Summarizer | None = None,
        *,
        estimator: TokenEstimator | None = None,
        plan: PlanSource | None = None,
        strategies: Sequence[CompactionStrategy] | None = None,
    ) -> None:
        """Initialize the context manager.

        Args:
            config: Compression configuration. Uses defaults if not provided.
            summarizer: Summarization capability. Without one only the
                offloading strategies can apply.
            estimator: Token estimator. Defaults to the character heuristic.
            plan: Plan, or callable returning the current plan.
            strategies: Strategy chain override, mainly for tests.
        """
        self._config = config or CompressionConfig()
        self._summarizer = summarizer
        self._estimator: TokenEstimator = estimator or ApproximateTokenCounter()
        self._plan = plan
        self._chain = StrategyChain(strategies)

        self._working = MessageHistory()
        self._original = MessageHistory()
        self._offload = OffloadStore()
        self._events = CompressionEventLog()
        self._usage = UsageTracker()
        self._compaction_count = 0

    @classmethod
    def from_settings(
        cls,
        settings: AutoContextSettings,
        *,
        estimator: TokenEstimator | None = None,
        plan: PlanSource | None = None,
    ) -> ContextManager:
        """Build a manager from loaded settings.

        A pydantic-ai summarizer is created when ``summarizer_model`` is set.
        """
        summarizer = None
        if settings.summarizer_model:
            summarizer = PydanticAISummarizer(
                settings.summarizer_model,
                timeout_seconds=settings.summarizer_timeout_seconds,
            )
        return cls(settings.compression, summarizer, estimator=estimator, plan=plan)

    @property
    def config(self) -> CompressionConfig:
        return self._config

    @property
    def offload_store(self) -> OffloadStore:
        return self._offload

    # Messages ---------------------------------------------------------------

    def add_message(self, message: Message) -> None:
        """Append a message to the working set and the original log.

        Never compresses; see :meth:`compress_if_needed`.
        """
        self._working.append(message)
        if not self._original.contains(message.id):
            self._original.append(message)

    def add_messages(self, messages: Sequence[Message]) -> None:
        for message in messages:
            self.add_message(message)

    def get_messages(self) -> list[Message]:
        """Get a copy of the working set."""
        return self._working.to_list()

    def get_original_messages(self) -> list[Message]:
        """Get the complete, uncompressed history."""
        return self._original.to_list()

    def get_interaction_messages(self) -> list[Message]:
        """User messages and final assistant responses from the original log.

        Tool calls, tool results and other intermediate messages are left
        out, giving the conversation as the user saw it.
        """
        return [
            msg
            for msg in self._original
            if msg.role == MessageRole.USER or is_final_assistant_response(msg)
        ]

    def delete_message(self, index: int) -> None:
        """Remove the working set message at ``index``.

        The original log keeps it. Out-of-range indices are ignored.
        """
        removed = self._working.delete(index)
        if removed is None:
            logger.warning(
                "delete_message: index %d out of range (size %d)", index, len(self._working)
            )

    def clear(self) -> None:
        """Clear the working set and the original log.

        Offloaded content and compression events are kept.
        """
        self._working.clear()
        self._original.clear()

    # Plan -------------------------------------------------------------------

    def attach_plan(self, plan: PlanSource | None) -> None:
        """Attach a plan (or plan provider) to bias summaries; ``None`` detaches."""
        self._plan = plan

    # Compression ------------------------------------------------------------

    def get_token_count(self, messages: Sequence[Message] | None = None) -> int:
        """Estimated tokens of ``messages`` (default: the working set)."""
        if messages is None:
            messages = self._working.to_list()
        return self._estimator.count_messages(messages)

    def should_compress(self, messages: Sequence[Message] | None = None) -> bool:
        """Whether the compression trigger fires.

        The trigger fires when the message count reaches ``msg_threshold``
        or the estimated tokens reach ``max_tokens * token_ratio``.
        """
        if messages is None:
            messages = self._working.to_list()
        if len(messages) >= self._config.msg_threshold:
            return True
        return self.get_token_count(messages) >= self._config.token_threshold

    def compress(self) -> CompactionResult:
        """Run one compression pass over the working set.

        When the trigger does not fire the working set is returned as is.
        Otherwise the strategy chain runs until the trigger is false or
        every strategy has had its turn. All staged changes are committed
        together at the end. This method never raises.

        Returns:
            CompactionResult describing the pass.
        """
        messages = self._working.to_list()
        count_before = len(messages)
        try:
            tokens_before = self.get_token_count(messages)
            triggered = self.should_compress(messages)
        except Exception:
            logger.exception("Token estimation failed, working set left unchanged")
            return _unchanged(messages, 0)

        if not triggered:
            return _unchanged(messages, tokens_before)

        logger.info(
            "Compression triggered - msgCount: %d/%d, tokenCount: %d/%d",
            count_before,
            self._config.msg_threshold,
            tokens_before,
            self._config.token_threshold,
        )

        try:
            plan_hint = build_plan_hint(resolve_plan(self._plan))
        except Exception:
            logger.exception("Failed to resolve plan state, compressing without plan hint")
            plan_hint = None

        try:
            outcome = self._chain.run(
                messages,
                config=self._config,
                estimator=self._estimator,
                over_budget=self.should_compress,
                summarizer=self._summarizer,
                plan_hint=plan_hint,
            )
            tokens_after = self.get_token_count(outcome.messages)
            events = self._commit(outcome.applied, outcome.messages)
        except Exception:
            logger.exception("Compression pass failed, working set left unchanged")
            return _unchanged(messages, tokens_before)

        if outcome.exhausted:
            logger.warning(
                "All compression strategies exhausted but context still exceeds threshold"
                " - msgCount: %d/%d, tokenCount: %d/%d",
                len(outcome.messages),
                self._config.msg_threshold,
                tokens_after,
                self._config.token_threshold,
            )

        return CompactionResult(
            messages=outcome.messages,
            compressed=bool(outcome.applied),
            strategies=outcome.strategies_used,
            events=events,
            messages_before=count_before,
            messages_after=len(outcome.messages),
            tokens_before=tokens_before,
            tokens_after=tokens_after,
            exhausted=outcome.exhausted,
        )

    def compress_if_needed(
        self, messages: Sequence[Message] | None = None
    ) -> tuple[list[Message], bool]:
        """Compress the working set when the trigger fires.

        Args:
            messages: If given, becomes the working set first. Messages not
                yet in the original log, other than compaction output, are
                appended to it.

        Returns:
            Tuple of (messages to send to the model, whether compression
            changed them).
        """
        if messages is not None:
            try:
                self._adopt(messages)
            except ValueError:
                logger.exception("Rejected working set with duplicate message ids")
                return list(messages), False
        result = self.compress()
        return result.messages, result.compressed

    def _adopt(self, messages: Sequence[Message]) -> None:
        self._working.replace(messages)
        for msg in messages:
            if not msg.compress_meta and not self._original.contains(msg.id):
                self._original.append(msg)

    def _commit(
        self, applied: list[StrategyResult], messages: list[Message]
    ) -> list[CompressionEvent]:
        """Write staged strategy output to every store in one step."""
        if not applied:
            return []
        events: list[CompressionEvent] = []
        offload_writes: dict[str, list[Message]] = {}
        for result in applied:
            events.extend(result.events)
            offload_writes.update(result.offload_writes)

        # Validate before touching any store
        working = MessageHistory(messages)

        for uuid, originals in offload_writes.items():
            self._offload.offload(uuid, originals)
        self._events.extend(events)
        self._working = working
        for result in applied:
            for usage in result.usage:
                self._usage.record_usage(usage, strategy=result.strategy)
        self._compaction_count += 1
        return events

    # Offload ----------------------------------------------------------------

    def reload(self, uuid: str) -> list[Message]:
        """Return the original messages offloaded under ``uuid``.

        Raises:
            OffloadNotFoundError: If ``uuid`` is unknown or was cleared.
        """
        return self._offload.reload(uuid)

    def clear_offload(self, uuid: str) -> None:
        """Drop an offload entry. Clearing twice is a no-op."""
        self._offload.clear(uuid)

    def get_offload_context(self) -> dict[str, list[Message]]:
        return self._offload.snapshot()

    # Events and usage -------------------------------------------------------

    def get_compression_events(
        self, event_type: CompressionEventType | None = None
    ) -> list[CompressionEvent]:
        return self._events.events(event_type)

    def get_usage(self) -> TokenUsage:
        """Summarizer usage across all passes."""
        return self._usage.get_total_usage()

    def get_strategy_usage(self) -> dict[str, TokenUsage]:
        return self._usage.get_strategy_usage()

    def get_context_state(self) -> ContextState:
        """Get the current context state.

        Returns:
            ContextState with counts and token estimate.
        """
        return ContextState(
            message_count=len(self._working),
            original_message_count=len(self._original),
            token_count=self.get_token_count(),
            token_threshold=self._config.token_threshold,
            msg_threshold=self._config.msg_threshold,
            offload_count=len(self._offload),
            compaction_count=self._compaction_count,
            event_count=len(self._events),
        )

    # Persistence ------------------------------------------------------------

    def save_state(self) -> ContextSnapshot:
        """Snapshot the working set, original log, offload store and events."""
        return ContextSnapshot(
            working_messages=self._working.to_list(),
            original_messages=self._original.to_list(),
            offload_context=self._offload.snapshot(),
            compression_events=self._events.events(),
        )

    def load_state(self, snapshot: ContextSnapshot) -> None:
        """Replace all four stores with the contents of ``snapshot``.

        Raises:
            ValueError: If the snapshot holds duplicate message ids.
        """
        working = MessageHistory(snapshot.working_messages)
        original = MessageHistory(snapshot.original_messages)
        self._working = working
        self._original = original
        self._offload.restore(snapshot.offload_context)
        self._events.restore(snapshot.compression_events)
        logger.debug(
            "Loaded context state: %d working, %d original, %d offloaded, %d events",
            len(working),
            len(original),
            len(self._offload),
            len(self._events),
        )


def _unchanged(messages: list[Message], tokens: int) -> CompactionResult:
    return CompactionResult(
        messages=messages,
        compressed=False,
        messages_before=len(messages),
        messages_after=len(messages),
        tokens_before=tokens,
        tokens_after=tokens,
    )
