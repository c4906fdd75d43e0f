"""Context reload tool."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Union

from autocontext.context.offload import OffloadStore
from autocontext.messages import render_transcript

if TYPE_CHECKING:
    from autocontext.context.manager import ContextManager

logger = logging.getLogger(__name__)

CONTEXT_RELOAD_TOOL_NAME = "context_reload"


def create_context_reload_tool(
    source: Union[ContextManager, OffloadStore],
) -> Callable[[str], str]:
    """Create the ``context_reload`` tool for an agent.

    The returned function is a plain callable and can be registered with
    pydantic-ai (``Agent(tools=[...])`` or ``agent.tool_plain``).

    Args:
        source: Context manager or offload store holding the offloaded
            messages.

    Returns:
        A ``context_reload(uuid)`` function returning the original
        messages as a transcript.

    Example:
        >>> reload_tool = create_context_reload_tool(manager)
        >>> agent = Agent("openai:gpt-4o", tools=[reload_tool])
    """
    store = source if isinstance(source, OffloadStore) else source.offload_store

    def context_reload(uuid: str) -> str:
        """Reload the original content of a compressed or offloaded message.

        Use this when a message contains a CONTEXT_OFFLOAD marker and the
        omitted details are needed.

        Args:
            uuid: The uuid shown in the CONTEXT_OFFLOAD marker.

        Returns:
            The original messages as a transcript.

        Raises:
            OffloadNotFoundError: If nothing is stored under ``uuid``.
        """
        messages = store.reload(uuid)
        logger.debug("context_reload: returning %d message(s) for uuid=%s", len(messages), uuid)
        return render_transcript(messages)

    return context_reload
