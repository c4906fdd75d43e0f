#!/usr/bin/env python3
"""Context compaction example.

This example demonstrates:
- Configuring the compression thresholds
- Running compression once per reasoning turn
- Inspecting compression events and the context state
- Reloading offloaded content through the context_reload tool

Prerequisites:
- Set OPENAI_API_KEY to summarize with a real model. Without it a
  pydantic-ai TestModel stands in and returns a fixed summary.
"""

import os

from pydantic_ai.models.test import TestModel

from autocontext import CompressionConfig, ContextManager, Message, PydanticAISummarizer
from autocontext.messages import MessageRole, TextBlock, ToolResultBlock, ToolUseBlock
from autocontext.observability import setup_logging
from autocontext.tools import create_context_reload_tool


def tool_round(index: int) -> list[Message]:
    """One tool call and its (large) result."""
    call_id = f"call_{index}"
    call = Message(
        role=MessageRole.ASSISTANT,
        content=[ToolUseBlock(id=call_id, name="read_file", input={"path": f"src/mod_{index}.py"})],
    )
    result = Message(
        role=MessageRole.TOOL,
        content=[
            ToolResultBlock(
                id=call_id,
                name="read_file",
                output=[TextBlock(text=f"# module {index}\n" + "def f():\n    pass\n" * 40)],
            )
        ],
    )
    return [call, result]


def main():
    setup_logging()

    if os.environ.get("OPENAI_API_KEY"):
        model = "openai:gpt-4o-mini"
    else:
        print("OPENAI_API_KEY not set, using TestModel\n")
        model = TestModel(custom_output_text="Read 10 modules; each defines an empty f().")

    print("Compression strategies, lightweight first:")
    print("  1. tool_invocation_compress: Summarize long historical tool runs")
    print("  2. large_message_offload_with_protection: Offload large old payloads")
    print("  3. large_message_offload: Same, ignoring the last_keep tail")
    print("  4. previous_round_conversation_summary: Summarize completed rounds")
    print("  5. current_round_large_message_summary: Summarize large current messages")
    print("  6. current_round_message_compress: Merge the current round")
    print()

    config = CompressionConfig(
        msg_threshold=20,  # Low threshold for demo
        last_keep=4,
        min_consecutive_tool_messages=6,
    )
    manager = ContextManager(config, summarizer=PydanticAISummarizer(model))

    # Build up a conversation with one long tool-driven round
    manager.add_message(Message.text_message("user", "Review every module under src/"))
    for i in range(10):
        manager.add_messages(tool_round(i))
    manager.add_message(Message.text_message("assistant", "All modules reviewed."))
    manager.add_message(Message.text_message("user", "Now summarize the findings."))

    state = manager.get_context_state()
    print(f"Before: {state.message_count} messages, {state.token_count} tokens")

    # Once per reasoning turn, before calling the model
    messages, compressed = manager.compress_if_needed()

    state = manager.get_context_state()
    print(f"After:  {state.message_count} messages, {state.token_count} tokens")
    print(f"Compressed: {compressed}\n")

    for event in manager.get_compression_events():
        print(f"Event {event.event_type.value}: {event.compressed_message_count} message(s)")
        print(f"  metadata: {event.metadata}")

    # The summary carries a uuid the agent can reload with the tool
    reload_tool = create_context_reload_tool(manager)
    for msg in messages:
        uuid = msg.compress_meta.get("offload_uuid")
        if uuid:
            print(f"\nReloading uuid={uuid}:")
            print(reload_tool(uuid)[:300] + "...")
            break


if __name__ == "__main__":
    main()
