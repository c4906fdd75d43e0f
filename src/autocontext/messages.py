"""Message records and content blocks.

A message is an immutable record with a stable identifier. Content is a
list of blocks drawn from a tagged union discriminated on ``type``:

Models:
    TextBlock: Plain text content.
    ToolUseBlock: A tool invocation issued by the assistant.
    ToolResultBlock: The output of a tool invocation.
    Message: One conversation record (user/assistant/system/tool turn).

The helpers at the bottom classify messages the way the compaction
strategies need them (tool call, tool result, final assistant response)
and measure payload sizes in characters.
"""

from __future__ import annotations

import itertools
import json
import time
from collections.abc import Iterable, Sequence
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

COMPRESS_META_KEY = "_compress_meta"

# Process-wide tiebreaker for ids minted within one clock tick. It carries no
# engine state; every ContextManager keeps its own stores.
_id_sequence = itertools.count()


def new_message_id() -> str:
    """Generate a unique, time-ordered message identifier.

    Identifiers sort lexicographically in creation order within a process.

    Returns:
        A 24-character hexadecimal identifier.
    """
    return f"{time.time_ns():016x}{next(_id_sequence) & 0xFFFFFFFF:08x}"


class MessageRole(str, Enum):
    """Role of a message author.

    Attributes:
        USER: Human turn.
        ASSISTANT: Model turn (final response or tool call).
        SYSTEM: System instruction.
        TOOL: Tool execution result.
    """

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    TOOL = "tool"


class TextBlock(BaseModel):
    """Plain text content."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str


class ToolUseBlock(BaseModel):
    """A tool invocation.

    Attributes:
        id: Tool call identifier, shared with the matching result.
        name: Tool name.
        input: Tool arguments.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


class ToolResultBlock(BaseModel):
    """Output of a tool invocation.

    Attributes:
        id: Tool call identifier this result answers.
        name: Tool name.
        output: Result content.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["tool_result"] = "tool_result"
    id: str
    name: str
    output: list[TextBlock] = Field(default_factory=list)

    @property
    def text(self) -> str:
        """Concatenated text of the result output."""
        return "\n".join(block.text for block in self.output)


ContentBlock = Annotated[
    Union[TextBlock, ToolUseBlock, ToolResultBlock],
    Field(discriminator="type"),
]


class Message(BaseModel):
    """An immutable conversation record.

    Attributes:
        id: Stable, unique identifier.
        role: Author role.
        name: Optional author name.
        content: Ordered content blocks.
        metadata: Arbitrary metadata. Compression provenance lives under
            the ``_compress_meta`` key.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_message_id)
    role: MessageRole
    name: str | None = None
    content: list[ContentBlock] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def text_message(
        cls,
        role: MessageRole | str,
        text: str,
        *,
        name: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Message:
        """Build a message holding a single text block."""
        return cls(
            role=MessageRole(role),
            name=name,
            content=[TextBlock(text=text)],
            metadata=metadata or {},
        )

    @property
    def text_content(self) -> str:
        """Concatenated text of all text blocks."""
        return "\n".join(block.text for block in self.content if isinstance(block, TextBlock))

    @property
    def tool_uses(self) -> list[ToolUseBlock]:
        return [block for block in self.content if isinstance(block, ToolUseBlock)]

    @property
    def tool_results(self) -> list[ToolResultBlock]:
        return [block for block in self.content if isinstance(block, ToolResultBlock)]

    @property
    def compress_meta(self) -> dict[str, Any]:
        """Compression provenance recorded on this message, if any."""
        meta = self.metadata.get(COMPRESS_META_KEY)
        return meta if isinstance(meta, dict) else {}


def is_tool_use_message(msg: Message) -> bool:
    """An assistant message carrying at least one tool call."""
    return msg.role == MessageRole.ASSISTANT and bool(msg.tool_uses)


def is_tool_result_message(msg: Message) -> bool:
    """A tool-role message or any message carrying a tool result."""
    return msg.role == MessageRole.TOOL or bool(msg.tool_results)


def is_tool_message(msg: Message) -> bool:
    return is_tool_use_message(msg) or is_tool_result_message(msg)


def is_final_assistant_response(msg: Message) -> bool:
    """Whether ``msg`` is an assistant reply sent to the user.

    Tool calls are intermediate steps, not final responses. Messages that
    compaction produced from tool runs or from the current round are
    bookkeeping, not replies, and are excluded as well.
    """
    if msg.role != MessageRole.ASSISTANT:
        return False
    meta = msg.compress_meta
    if meta.get("compressed_current_round") or meta.get("compressed_tool_run"):
        return False
    return not msg.tool_uses and not msg.tool_results


def payload_text(msg: Message) -> str:
    """The offloadable payload: text blocks plus tool result output."""
    parts = []
    for block in msg.content:
        if isinstance(block, TextBlock):
            parts.append(block.text)
        elif isinstance(block, ToolResultBlock):
            parts.append(block.text)
    return "\n".join(parts)


def payload_char_count(msg: Message) -> int:
    """Character size of the offloadable payload of ``msg``."""
    return len(payload_text(msg))


def message_char_count(msg: Message) -> int:
    """Total character count across every content block.

    Tool calls count their name, id and JSON-serialized input; tool
    results count their name, id and output text.
    """
    count = 0
    for block in msg.content:
        if isinstance(block, TextBlock):
            count += len(block.text)
        elif isinstance(block, ToolUseBlock):
            count += len(block.name) + len(block.id)
            if block.input:
                count += len(json.dumps(block.input, ensure_ascii=False, default=str))
        elif isinstance(block, ToolResultBlock):
            count += len(block.name) + len(block.id) + len(block.text)
    return count


def messages_char_count(messages: Iterable[Message]) -> int:
    return sum(message_char_count(msg) for msg in messages)


def replace_payload(
    msg: Message,
    text: str,
    compress_meta: dict[str, Any],
    *,
    placeholder: str = "[offloaded]",
) -> Message:
    """Build a replacement for ``msg`` whose payload is ``text``.

    Role, name and tool-call identity are preserved so tool calls and
    their results stay paired. Tool calls are kept as they are, text blocks
    collapse into ``text`` and tool results keep their id and name with the
    new output. When the message has several results, the first carries
    ``text`` and the rest carry ``placeholder``.

    Args:
        msg: Message to replace.
        text: New payload text.
        compress_meta: Provenance stored under ``_compress_meta``.
        placeholder: Output for additional tool results.

    Returns:
        A new message with a fresh identifier.
    """
    content: list[Any] = []
    text_written = False
    for block in msg.content:
        if isinstance(block, ToolUseBlock):
            content.append(block)
        elif isinstance(block, ToolResultBlock):
            output = placeholder if text_written else text
            content.append(
                ToolResultBlock(id=block.id, name=block.name, output=[TextBlock(text=output)])
            )
            text_written = True
    if not text_written:
        content.insert(0, TextBlock(text=text))

    meta = {k: v for k, v in msg.metadata.items() if k != COMPRESS_META_KEY}
    meta[COMPRESS_META_KEY] = {**compress_meta, "replaced_ids": [msg.id]}
    return Message(role=msg.role, name=msg.name, content=content, metadata=meta)


def render_transcript(messages: Sequence[Message]) -> str:
    """Render messages as a plain-text transcript for summarization.

    Each message starts with a ``[role]`` header; tool calls render as
    ``tool_use name(id): {json}`` and results as ``tool_result name(id): text``.
    """
    lines: list[str] = []
    for msg in messages:
        header = f"[{msg.role.value}]" if msg.name is None else f"[{msg.role.value}:{msg.name}]"
        lines.append(header)
        for block in msg.content:
            if isinstance(block, TextBlock):
                lines.append(block.text)
            elif isinstance(block, ToolUseBlock):
                args = json.dumps(block.input, ensure_ascii=False, default=str)
                lines.append(f"tool_use {block.name}({block.id}): {args}")
            elif isinstance(block, ToolResultBlock):
                lines.append(f"tool_result {block.name}({block.id}): {block.text}")
        lines.append("")
    return "\n".join(lines).rstrip()
