"""Tools exposed to the agent.

Reload Tool:
    context_reload - Return offloaded content by uuid

Usage with pydantic-ai:
    >>> from pydantic_ai import Agent
    >>> from autocontext.tools import create_context_reload_tool
    >>> agent = Agent("openai:gpt-4o", tools=[create_context_reload_tool(manager)])
"""

from autocontext.tools.context_reload import CONTEXT_RELOAD_TOOL_NAME, create_context_reload_tool

__all__ = [
    "CONTEXT_RELOAD_TOOL_NAME",
    "create_context_reload_tool",
]
