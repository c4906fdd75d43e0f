"""Tests for the offload store."""

from __future__ import annotations

import pytest

from autocontext.context.offload import OffloadStore, new_offload_uuid
from autocontext.errors import OffloadNotFoundError


class TestOffloadStore:
    """Tests for OffloadStore."""

    def test_offload_and_reload(self, make) -> None:
        """Test stored messages are returned verbatim and in order."""
        store = OffloadStore()
        messages = [make.user("a"), *make.tool_pair()]

        store.offload("u1", messages)

        assert store.reload("u1") == messages
        assert store.contains("u1")
        assert store.uuids() == ["u1"]
        assert len(store) == 1

    def test_reload_unknown_uuid(self) -> None:
        """Test reloading an unknown uuid raises OffloadNotFoundError."""
        store = OffloadStore()

        with pytest.raises(OffloadNotFoundError) as exc_info:
            store.reload("nonexistent-uuid")

        assert exc_info.value.uuid == "nonexistent-uuid"

    def test_clear(self, make) -> None:
        """Test clear removes the entry and is idempotent."""
        store = OffloadStore()
        store.offload("u1", [make.user()])

        store.clear("u1")
        store.clear("u1")

        assert not store.contains("u1")
        with pytest.raises(OffloadNotFoundError):
            store.reload("u1")

    def test_reload_returns_copy(self, make) -> None:
        """Test callers cannot mutate stored entries."""
        store = OffloadStore()
        store.offload("u1", [make.user()])

        store.reload("u1").clear()

        assert len(store.reload("u1")) == 1

    def test_snapshot_and_restore(self, make) -> None:
        """Test snapshot output can rebuild an equivalent store."""
        store = OffloadStore()
        store.offload("u1", [make.user("x")])
        store.offload("u2", [make.assistant("y")])

        restored = OffloadStore()
        restored.restore(store.snapshot())

        assert restored.snapshot() == store.snapshot()

    def test_new_uuid_unique(self) -> None:
        """Test generated uuids do not repeat."""
        assert len({new_offload_uuid() for _ in range(50)}) == 50
