"""Prompt texts for the summarizing strategies.

Prompts are grouped by strategy, from lightweight to heavyweight:

1. Historical tool invocation compression
2-3. Large message offloading (no prompt, preview only)
4. Historical round summary
5. Current round large message summary
6. Current round compression

Templated fragments are rendered with Jinja2.
"""

from __future__ import annotations

from jinja2 import Environment, StrictUndefined

from autocontext.context.config import CompressionPrompts

_env = Environment(undefined=StrictUndefined, keep_trailing_newline=True, autoescape=False)

# Boundary between the messages to compress and the closing instructions
COMPRESSION_MESSAGE_LIST_END = "Above is the message list that needs to be compressed."

# Closing instruction used when a strategy has no specific one
DEFAULT_FINAL_INSTRUCTION = "Write the compressed content now, following the instructions above."

CONTEXT_OFFLOAD_TAG = "<!-- CONTEXT_OFFLOAD: uuid={uuid} -->"

OFFLOAD_HINT = (
    "\n" + CONTEXT_OFFLOAD_TAG + "\n"
    "The original content was offloaded. Call the `context_reload` tool with "
    'uuid="{uuid}" to retrieve it if the details are needed.'
)

# Strategy 1 ---------------------------------------------------------------

TOOL_INVOCATION_COMPRESS_PROMPT = (
    "You are an expert content compression specialist. Your task is to intelligently"
    " compress and summarize the following tool invocation history:\n"
    "    - Preserve: tool name, exact arguments (with values), and a concise factual"
    " summary of the output.\n"
    "    - For repeated calls to the same tool, consolidate identical calls (same args,"
    " same result) into one entry with a frequency note, and only list distinct argument"
    " combinations that led to different outcomes.\n"
    "    - Treat a tool as a write/change operation if its name or output implies side"
    " effects (e.g. 'write', 'update', 'delete', 'create'). For such operations preserve"
    " file paths, data keys, content snippets, state changes and success/error indicators.\n"
    "    - Output must be plain text with no markdown, JSON, bullets, headers or"
    " meta-comments.\n"
    "    - If any tool output appears truncated or corrupted, include '[TRUNCATED]'."
)

PLAN_TOOL_COMPRESS_INSTRUCTION = (
    "Some of these calls are plan management tools ({tool_names}). Reduce each of them to"
    " one terse line stating the resulting plan or subtask state; drop their arguments and"
    " echoed plan text."
)

TOOL_INVOCATION_SUMMARY_FORMAT = "<compressed_tool_invocations>{summary}</compressed_tool_invocations>"

# Strategy 4 ---------------------------------------------------------------

PREVIOUS_ROUND_SUMMARY_PROMPT = (
    "You are an expert dialogue compressor for autonomous agents. Rewrite the assistant's"
    " final response from a previous round as a self-contained, concise reply that"
    " incorporates all essential facts learned during the round, without referencing"
    " tools, functions or internal execution steps.\n"
    "\n"
    "Your output will REPLACE the assistant messages of that round, forming a clean"
    " USER -> ASSISTANT pair for future context.\n"
    "\n"
    "Guidelines:\n"
    "  - State findings as direct, factual knowledge.\n"
    "  - Preserve file paths, exact diagnostic error messages, IDs, URLs, ports, status"
    " codes, configuration values and the outcome of every write/change operation.\n"
    "  - If something failed or was incomplete, state the limitation.\n"
    "  - Consolidate redundant information and omit generic success messages.\n"
    "  - Output plain text: no markdown, bullets, JSON, XML or section headers."
)

PREVIOUS_ROUND_SUMMARY_FORMAT = "<conversation_summary>{summary}</conversation_summary>"

# Strategy 5 ---------------------------------------------------------------

CURRENT_ROUND_LARGE_MESSAGE_PROMPT = (
    "You are an expert content compression specialist. Summarize the following message,"
    " which exceeds the size threshold, while preserving all critical information.\n"
    "\n"
    "IMPORTANT: this content belongs to the CURRENT ROUND and is actively used. Be"
    " conservative and keep as much as the requirements below allow.\n"
    "\n"
    "The summary must:\n"
    "    - Preserve all critical information and key details\n"
    "    - Keep context needed for future reference\n"
    "    - Highlight outcomes, results and status information\n"
    "    - Retain tool call information if present (tool names, IDs, key parameters)"
)

CURRENT_ROUND_LARGE_MESSAGE_FORMAT = "<compressed_large_message>{summary}</compressed_large_message>"

# Strategy 6 ---------------------------------------------------------------

CURRENT_ROUND_COMPRESS_PROMPT = (
    "You are an expert context consolidator for autonomous agents. Integrate the tool"
    " execution results of the current turn into one compact context block.\n"
    "\n"
    "INPUT: optionally a prior compressed context block ending with"
    " <!-- CONTEXT_OFFLOAD: uuid=... -->, followed by tool_use and tool_result messages."
    " There is no user message in the input.\n"
    "\n"
    "WORKFLOW:\n"
    "1. If the input contains a <!-- CONTEXT_OFFLOAD: uuid=... --> line, keep the text"
    " before it as prior context and process only the tool calls after it.\n"
    "2. Summarize each tool_use/tool_result pair as a factual first-person statement:"
    ' "I called [tool_name] with [arg=value, ...]; it returned: [key details]."\n'
    "3. Preserve technical specifics: file paths, IDs, error codes, config values, state"
    " changes. Prefix truncated or malformed results with [UNPARSED OUTPUT].\n"
    "\n"
    "OUTPUT: a single plain-text block of prior context (if any) followed by the new"
    " tool summaries. Do not include any CONTEXT_OFFLOAD tag, raw tool JSON, markdown or"
    " bullets, and do not mention user requests."
)

CURRENT_ROUND_PLAN_TOOL_INSTRUCTION = (
    "Plan management calls ({tool_names}) are the most likely to recur: summarize each in"
    " at most a few words naming the resulting plan state."
)

_CHAR_REQUIREMENT_TEMPLATE = _env.from_string(
    "COMPRESSION REQUIREMENT:\n"
    "The original content contains approximately {{ original_chars }} characters. You MUST"
    " compress it to approximately {{ target_chars }} characters ({{ percent }}% of"
    " original). This is a STRICT requirement.\n"
    "\n"
    "Ensure your output meets this character limit while following the compression"
    " principles above."
)


def render_char_requirement(original_chars: int, target_chars: int, ratio: float) -> str:
    """Render the explicit size instruction used by current round compression."""
    return _CHAR_REQUIREMENT_TEMPLATE.render(
        original_chars=original_chars,
        target_chars=target_chars,
        percent=round(ratio * 100),
    )


def offload_hint(uuid: str) -> str:
    return OFFLOAD_HINT.format(uuid=uuid)


def compose_final_instructions(
    plan_hint: str | None,
    final_instruction: str = DEFAULT_FINAL_INSTRUCTION,
    extra: list[str] | None = None,
) -> str:
    """Assemble the closing section of a summarization prompt.

    Strategy-specific ``extra`` notes come first, the plan hint (when
    present) follows, and ``final_instruction`` always comes last.
    """
    parts = [p for p in (extra or []) if p]
    if plan_hint:
        parts.append(plan_hint)
    parts.append(final_instruction)
    return "\n\n".join(parts)


def resolve_prompt(override: str | None, default: str) -> str:
    """Use ``override`` unless it is missing or blank."""
    if override is not None and override.strip():
        return override
    return default


def tool_invocation_prompt(prompts: CompressionPrompts) -> str:
    return resolve_prompt(prompts.tool_invocation, TOOL_INVOCATION_COMPRESS_PROMPT)


def previous_round_summary_prompt(prompts: CompressionPrompts) -> str:
    return resolve_prompt(prompts.previous_round_summary, PREVIOUS_ROUND_SUMMARY_PROMPT)


def current_round_large_message_prompt(prompts: CompressionPrompts) -> str:
    return resolve_prompt(prompts.current_round_large_message, CURRENT_ROUND_LARGE_MESSAGE_PROMPT)


def current_round_compress_prompt(prompts: CompressionPrompts) -> str:
    return resolve_prompt(prompts.current_round_compress, CURRENT_ROUND_COMPRESS_PROMPT)
