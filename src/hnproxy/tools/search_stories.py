"""Tool handler for search_stories.

Same pipeline as get_newest_stories, but the term also matches story
authors. A blank query returns the unfiltered newest listing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from hnproxy.errors import ErrorCode, HnProxyError
from hnproxy.models.query import StoryQuery
from hnproxy.query import search_stories

if TYPE_CHECKING:
    from hnproxy.state import AppState


async def handle(query: str | None, page: int, page_size: int, state: AppState) -> dict:
    """Handle a search_stories tool call."""
    log = structlog.get_logger().bind(tool="search_stories")
    log.info("handler_called", query=query, page=page, page_size=page_size)

    try:
        validated = StoryQuery(page=page, page_size=page_size, query=query)
    except ValidationError as exc:
        raise HnProxyError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Use page >= 1, page_size between 1 and 100, and a query under 500 chars.",
            recoverable=False,
        ) from exc

    if state.stories is None:
        raise RuntimeError("Story service not initialized")

    result = await search_stories(
        validated,
        state.stories,
        max_stories=state.settings.query.max_stories,
    )
    return result.model_dump(mode="json")
