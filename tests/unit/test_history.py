"""Tests for MessageHistory."""

from __future__ import annotations

import pytest

from autocontext.context.history import MessageHistory


class TestMessageHistory:
    """Tests for ordered message storage."""

    def test_append_and_order(self, make) -> None:
        """Test messages keep insertion order."""
        a, b = make.user("a"), make.assistant("b")
        history = MessageHistory([a, b])

        assert history.to_list() == [a, b]
        assert len(history) == 2
        assert history[1] is b

    def test_duplicate_id_rejected(self, make) -> None:
        """Test the same message cannot be appended twice."""
        msg = make.user()
        history = MessageHistory([msg])

        with pytest.raises(ValueError, match="Duplicate"):
            history.append(msg)

    def test_replace(self, make) -> None:
        """Test replace swaps the contents and the id index."""
        old, new = make.user("old"), make.user("new")
        history = MessageHistory([old])

        history.replace([new])

        assert history.to_list() == [new]
        assert not history.contains(old.id)
        assert history.contains(new.id)

    def test_replace_rejects_duplicates(self, make) -> None:
        """Test replace refuses repeated ids and keeps the old contents."""
        msg = make.user()
        history = MessageHistory([make.assistant()])

        with pytest.raises(ValueError):
            history.replace([msg, msg])
        assert len(history) == 1

    def test_delete(self, make) -> None:
        """Test delete removes by index and ignores out-of-range."""
        a, b = make.user("a"), make.user("b")
        history = MessageHistory([a, b])

        assert history.delete(0) is a
        assert history.delete(5) is None
        assert history.delete(-1) is None
        assert history.to_list() == [b]
        assert not history.contains(a.id)

    def test_clear(self, make) -> None:
        """Test clear empties the history."""
        history = MessageHistory([make.user()])
        history.clear()
        assert len(history) == 0

    def test_to_list_is_a_copy(self, make) -> None:
        """Test the returned list is detached from the history."""
        history = MessageHistory([make.user()])
        history.to_list().clear()
        assert len(history) == 1
