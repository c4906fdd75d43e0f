"""Compression event ledger."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from autocontext.messages import Message


class CompressionEventType(str, Enum):
    """Kind of compaction an event records, one per strategy."""

    TOOL_INVOCATION_COMPRESS = "tool_invocation_compress"
    LARGE_MESSAGE_OFFLOAD_WITH_PROTECTION = "large_message_offload_with_protection"
    LARGE_MESSAGE_OFFLOAD = "large_message_offload"
    PREVIOUS_ROUND_CONVERSATION_SUMMARY = "previous_round_conversation_summary"
    CURRENT_ROUND_LARGE_MESSAGE_SUMMARY = "current_round_large_message_summary"
    CURRENT_ROUND_MESSAGE_COMPRESS = "current_round_message_compress"


class CompressionEvent(BaseModel):
    """Audit record of one committed compaction.

    Attributes:
        event_type: Which strategy produced the change.
        timestamp: When the change was made (UTC).
        compressed_message_count: Number of messages affected.
        previous_message_id: Id of the message right before the span.
        next_message_id: Id of the message right after the span.
        compressed_message_id: Id of the produced message, if any.
        metadata: Accounting data. Summarizing events carry
            ``input_tokens``, ``output_tokens`` and ``time`` (seconds);
            offload events carry ``tokens_before`` and ``tokens_after``.
    """

    model_config = ConfigDict(frozen=True)

    event_type: CompressionEventType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    compressed_message_count: int
    previous_message_id: str | None = None
    next_message_id: str | None = None
    compressed_message_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def for_span(
        cls,
        event_type: CompressionEventType,
        messages: Sequence[Message],
        start: int,
        end: int,
        *,
        compressed_message: Message | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> CompressionEvent:
        """Build an event for the inclusive span ``messages[start:end + 1]``.

        ``messages`` must be the list as it was before the span was
        replaced, so the neighbour ids point at surviving messages.
        """
        return cls(
            event_type=event_type,
            compressed_message_count=end - start + 1,
            previous_message_id=messages[start - 1].id if start > 0 else None,
            next_message_id=messages[end + 1].id if end < len(messages) - 1 else None,
            compressed_message_id=compressed_message.id if compressed_message else None,
            metadata=dict(metadata or {}),
        )


class CompressionEventLog:
    """Append-only list of compression events."""

    def __init__(self, events: Iterable[CompressionEvent] | None = None) -> None:
        self._events: list[CompressionEvent] = list(events or [])

    def record(self, event: CompressionEvent) -> None:
        self._events.append(event)

    def extend(self, events: Iterable[CompressionEvent]) -> None:
        self._events.extend(events)

    def events(self, event_type: CompressionEventType | None = None) -> list[CompressionEvent]:
        """Events in chronological order, optionally filtered by type."""
        if event_type is None:
            return list(self._events)
        return [e for e in self._events if e.event_type == event_type]

    def restore(self, events: Iterable[CompressionEvent]) -> None:
        self._events = list(events)

    def __len__(self) -> int:
        return len(self._events)
