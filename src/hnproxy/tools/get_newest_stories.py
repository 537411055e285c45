"""Tool handler for get_newest_stories.

Receives AppState, validates and clamps the paging input, delegates to the
query engine, and returns a structured dict. No MCP or FastMCP imports —
server.py handles the MCP wiring.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from hnproxy.errors import ErrorCode, HnProxyError
from hnproxy.models.query import StoryQuery
from hnproxy.query import get_newest_stories

if TYPE_CHECKING:
    from hnproxy.state import AppState


async def handle(page: int, page_size: int, search: str | None, state: AppState) -> dict:
    """Handle a get_newest_stories tool call."""
    log = structlog.get_logger().bind(tool="get_newest_stories")
    log.info("handler_called", page=page, page_size=page_size, search=search)

    # Validate input
    try:
        validated = StoryQuery(page=page, page_size=page_size, search=search)
    except ValidationError as exc:
        raise HnProxyError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Use page >= 1, page_size between 1 and 100, and a search term under 500 chars.",
            recoverable=False,
        ) from exc

    if state.stories is None:
        raise RuntimeError("Story service not initialized")

    result = await get_newest_stories(
        validated,
        state.stories,
        max_stories=state.settings.query.max_stories,
    )
    return result.model_dump(mode="json")
