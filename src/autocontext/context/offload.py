"""Offload store for evicted message payloads."""

from __future__ import annotations

import logging
import uuid as uuid_lib
from collections.abc import Mapping, Sequence

from autocontext.errors import OffloadNotFoundError
from autocontext.messages import Message

logger = logging.getLogger(__name__)


def new_offload_uuid() -> str:
    """Generate the key for a new offload entry."""
    return str(uuid_lib.uuid4())


class OffloadStore:
    """UUID-keyed archive of the original messages that compaction replaced.

    Entries are only removed by an explicit :meth:`clear`. The store is
    not thread-safe: it assumes one writer per conversation, and callers
    sharing an instance across threads must synchronize externally.
    """

    def __init__(self) -> None:
        self._entries: dict[str, list[Message]] = {}

    def offload(self, uuid: str, messages: Sequence[Message]) -> None:
        """Store ``messages`` verbatim under ``uuid``."""
        self._entries[uuid] = list(messages)
        logger.debug("Offloaded %d message(s) under uuid=%s", len(messages), uuid)

    def reload(self, uuid: str) -> list[Message]:
        """Return the messages stored under ``uuid``.

        Raises:
            OffloadNotFoundError: If ``uuid`` is unknown or was cleared.
        """
        try:
            return list(self._entries[uuid])
        except KeyError:
            raise OffloadNotFoundError(uuid) from None

    def clear(self, uuid: str) -> None:
        """Remove the entry for ``uuid``. Clearing twice is a no-op."""
        if self._entries.pop(uuid, None) is not None:
            logger.debug("Cleared offload entry uuid=%s", uuid)

    def contains(self, uuid: str) -> bool:
        return uuid in self._entries

    def uuids(self) -> list[str]:
        return list(self._entries)

    def snapshot(self) -> dict[str, list[Message]]:
        """Copy of the full mapping, for persistence."""
        return {key: list(value) for key, value in self._entries.items()}

    def restore(self, entries: Mapping[str, Sequence[Message]]) -> None:
        """Replace the store contents with ``entries``."""
        self._entries = {key: list(value) for key, value in entries.items()}

    def __len__(self) -> int:
        return len(self._entries)
