"""Ordered message storage."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence

from autocontext.messages import Message


class MessageHistory:
    """An ordered sequence of messages with unique identifiers.

    Used for both the working set and the original log. The original log
    is append-only; the working set is replaced wholesale by compaction
    through :meth:`replace`.

    Example:
        >>> history = MessageHistory()
        >>> history.append(Message.text_message("user", "hi"))
        >>> len(history)
        1
    """

    def __init__(self, messages: Iterable[Message] | None = None) -> None:
        self._messages: list[Message] = []
        self._ids: set[str] = set()
        if messages is not None:
            self.extend(messages)

    def append(self, message: Message) -> None:
        """Append a message.

        Raises:
            ValueError: If a message with the same id is already present.
        """
        if message.id in self._ids:
            raise ValueError(f"Duplicate message id: {message.id}")
        self._messages.append(message)
        self._ids.add(message.id)

    def extend(self, messages: Iterable[Message]) -> None:
        for message in messages:
            self.append(message)

    def replace(self, messages: Sequence[Message]) -> None:
        """Replace the full contents, keeping the id uniqueness check."""
        ids = [m.id for m in messages]
        if len(set(ids)) != len(ids):
            raise ValueError("Duplicate message ids in replacement sequence")
        self._messages = list(messages)
        self._ids = set(ids)

    def delete(self, index: int) -> Message | None:
        """Remove the message at ``index``; out-of-range indices are ignored."""
        if 0 <= index < len(self._messages):
            removed = self._messages.pop(index)
            self._ids.discard(removed.id)
            return removed
        return None

    def clear(self) -> None:
        self._messages.clear()
        self._ids.clear()

    def contains(self, message_id: str) -> bool:
        return message_id in self._ids

    def to_list(self) -> list[Message]:
        """Return a shallow copy of the messages."""
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))

    def __getitem__(self, index: int) -> Message:
        return self._messages[index]
