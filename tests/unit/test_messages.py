"""Tests for message records and classification helpers."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from autocontext.messages import (
    COMPRESS_META_KEY,
    Message,
    MessageRole,
    TextBlock,
    ToolResultBlock,
    is_final_assistant_response,
    is_tool_message,
    is_tool_result_message,
    is_tool_use_message,
    message_char_count,
    new_message_id,
    payload_char_count,
    render_transcript,
    replace_payload,
)


class TestMessageIdentity:
    """Tests for message identifiers."""

    def test_ids_are_unique_and_ordered(self) -> None:
        """Test ids sort in creation order."""
        ids = [new_message_id() for _ in range(100)]

        assert len(set(ids)) == 100
        assert ids == sorted(ids)

    def test_message_is_frozen(self, make) -> None:
        """Test a message cannot be mutated."""
        msg = make.user("hi")
        with pytest.raises(ValidationError):
            msg.role = MessageRole.ASSISTANT

    def test_content_union_round_trip(self, make) -> None:
        """Test content blocks are restored with their concrete types."""
        call = make.tool_call("grep", {"pattern": "TODO"})
        result = make.tool_result(call, "3 matches")

        restored = Message.model_validate_json(result.model_dump_json())

        assert restored == result
        assert isinstance(restored.content[0], ToolResultBlock)


class TestClassification:
    """Tests for tool and final response predicates."""

    def test_tool_call(self, make) -> None:
        """Test an assistant tool call is a tool use message."""
        call = make.tool_call()

        assert is_tool_use_message(call)
        assert not is_tool_result_message(call)
        assert is_tool_message(call)
        assert not is_final_assistant_response(call)

    def test_tool_result(self, make) -> None:
        """Test a tool result is a tool message but not a final response."""
        result = make.tool_result(make.tool_call())

        assert is_tool_result_message(result)
        assert is_tool_message(result)
        assert not is_final_assistant_response(result)

    def test_final_assistant_response(self, make) -> None:
        """Test a plain assistant reply is a final response."""
        assert is_final_assistant_response(make.assistant("Done."))
        assert not is_final_assistant_response(make.user("Thanks"))

    @pytest.mark.parametrize("flag", ["compressed_current_round", "compressed_tool_run"])
    def test_compaction_output_is_not_final(self, flag: str) -> None:
        """Test messages produced from tool runs or the current round are not replies."""
        msg = Message.text_message(
            "assistant", "summary", metadata={COMPRESS_META_KEY: {flag: True}}
        )
        assert not is_final_assistant_response(msg)


class TestCharCounts:
    """Tests for payload and message sizes."""

    def test_payload_counts_text_and_results(self, make) -> None:
        """Test payload includes tool result output but not tool call input."""
        call = make.tool_call("write_file", {"content": "x" * 500})
        result = make.tool_result(call, "y" * 300)

        assert payload_char_count(call) == 0
        assert payload_char_count(result) == 300
        assert message_char_count(call) > 500

    def test_text_message(self, make) -> None:
        """Test a text message counts its text."""
        assert payload_char_count(make.user("hello")) == 5
        assert message_char_count(make.user("hello")) == 5


class TestReplacePayload:
    """Tests for replace_payload()."""

    def test_text_message(self, make) -> None:
        """Test a text message gets new text and a fresh id."""
        original = make.user("z" * 1000)

        replaced = replace_payload(original, "short", {"offload_uuid": "u1"})

        assert replaced.id != original.id
        assert replaced.role == MessageRole.USER
        assert replaced.text_content == "short"
        assert replaced.compress_meta == {"offload_uuid": "u1", "replaced_ids": [original.id]}

    def test_tool_result_keeps_identity(self, make) -> None:
        """Test tool result id and name survive the replacement."""
        call = make.tool_call("read_file", call_id="call_9")
        result = make.tool_result(call, "big" * 1000)

        replaced = replace_payload(result, "preview", {"offload_uuid": "u2"})

        assert replaced.role == MessageRole.TOOL
        block = replaced.tool_results[0]
        assert block.id == "call_9"
        assert block.name == "read_file"
        assert block.text == "preview"

    def test_multiple_results_use_placeholder(self) -> None:
        """Test only the first result carries the new text."""
        msg = Message(
            role=MessageRole.TOOL,
            content=[
                ToolResultBlock(id="a", name="t", output=[TextBlock(text="1" * 100)]),
                ToolResultBlock(id="b", name="t", output=[TextBlock(text="2" * 100)]),
            ],
        )

        replaced = replace_payload(msg, "new", {})

        assert [b.text for b in replaced.tool_results] == ["new", "[offloaded]"]

    def test_other_metadata_kept(self) -> None:
        """Test unrelated metadata is carried over."""
        msg = Message.text_message("user", "text", metadata={"source": "cli"})

        replaced = replace_payload(msg, "new", {})

        assert replaced.metadata["source"] == "cli"


class TestRenderTranscript:
    """Tests for render_transcript()."""

    def test_renders_roles_and_tools(self, make) -> None:
        """Test headers, tool calls and results are rendered."""
        call = make.tool_call("grep", {"pattern": "x"}, call_id="c1")
        transcript = render_transcript([make.user("find x"), call, make.tool_result(call, "found")])

        assert "[user:user]" in transcript
        assert "find x" in transcript
        assert 'tool_use grep(c1): {"pattern": "x"}' in transcript
        assert "tool_result grep(c1): found" in transcript
