"""Protection window derived for each compaction attempt."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from autocontext.context.config import CompressionConfig
from autocontext.messages import Message, MessageRole, is_final_assistant_response


@dataclass(frozen=True)
class ProtectionWindow:
    """Boundaries that decide which messages a strategy may alter.

    Attributes:
        size: Length of the working set the window was computed for.
        last_keep_start: Index of the first message in the ``last_keep`` tail.
        latest_final_assistant_index: Index of the latest final assistant
            response, or ``None``.
        latest_user_index: Index of the latest user message, or ``None``.
            Everything after it is the current round.
    """

    size: int
    last_keep_start: int
    latest_final_assistant_index: int | None
    latest_user_index: int | None

    @classmethod
    def compute(cls, messages: Sequence[Message], config: CompressionConfig) -> ProtectionWindow:
        latest_final = None
        latest_user = None
        for i in range(len(messages) - 1, -1, -1):
            msg = messages[i]
            if latest_final is None and is_final_assistant_response(msg):
                latest_final = i
            if latest_user is None and msg.role == MessageRole.USER:
                latest_user = i
            if latest_final is not None and latest_user is not None:
                break
        return cls(
            size=len(messages),
            last_keep_start=max(0, len(messages) - config.last_keep),
            latest_final_assistant_index=latest_final,
            latest_user_index=latest_user,
        )

    def historical_end(self, *, protect_last_keep: bool) -> int:
        """Exclusive end of the region open to historical strategies.

        Messages at or after the latest final assistant response are always
        protected. With ``protect_last_keep`` the ``last_keep`` tail is too.
        Without a final assistant response only the tail bounds the region,
        and with neither protection nothing is open.
        """
        if protect_last_keep:
            if self.latest_final_assistant_index is None:
                return self.last_keep_start
            return min(self.last_keep_start, self.latest_final_assistant_index)
        if self.latest_final_assistant_index is None:
            return 0
        return self.latest_final_assistant_index

    @property
    def current_round_start(self) -> int | None:
        """Index of the first message after the latest user message."""
        if self.latest_user_index is None:
            return None
        return self.latest_user_index + 1
