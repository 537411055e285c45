"""Filter-and-paginate engine over the newest stories.

Receives a validated StoryQuery and a story service, returns a StoryPage.
No knowledge of AppState, MCP, or HTTP.

Ordering is always the upstream newest-list order; filtering is stable and
no secondary sort is applied, so identical inputs page identically. Only the
first ``max_stories`` ids are retrieved, so older stories are never
searchable.
"""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING

import structlog

from hnproxy.models.query import StoryPage

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from hnproxy.models.query import StoryQuery
    from hnproxy.models.story import Story
    from hnproxy.stories import StoryService

log = structlog.get_logger()

DEFAULT_MAX_STORIES = 500


def _contains(field: str | None, term: str) -> bool:
    return field is not None and term in field.lower()


def matches_search(story: Story, term: str) -> bool:
    """Case-insensitive substring match over title or text."""
    term = term.lower()
    return _contains(story.title, term) or _contains(story.text, term)


def matches_query(story: Story, term: str) -> bool:
    """Case-insensitive substring match over title, text or author."""
    term = term.lower()
    return (
        _contains(story.title, term)
        or _contains(story.text, term)
        or _contains(story.author, term)
    )


def paginate(stories: Sequence[Story], page: int, page_size: int) -> StoryPage:
    """Slice one page out of the full match set.

    Pages past the end give an empty ``stories`` list with the totals still
    populated.
    """
    total_count = len(stories)
    offset = (page - 1) * page_size
    return StoryPage(
        stories=list(stories[offset : offset + page_size]),
        total_count=total_count,
        page=page,
        page_size=page_size,
        total_pages=StoryPage.count_pages(total_count, page_size),
    )


async def _filtered_page(
    query: StoryQuery,
    service: StoryService,
    predicate: Callable[[Story], bool] | None,
    *,
    max_stories: int,
) -> StoryPage:
    story_ids = await service.get_newest_story_ids()
    if not story_ids:
        log.warning("no_story_ids_available")
        return StoryPage.empty(query.page, query.page_size)

    stories = await service.get_stories(story_ids[:max_stories])
    if predicate is not None:
        stories = [story for story in stories if predicate(story)]

    return paginate(stories, query.page, query.page_size)


async def get_newest_stories(
    query: StoryQuery,
    service: StoryService,
    *,
    max_stories: int = DEFAULT_MAX_STORIES,
) -> StoryPage:
    """Newest stories, optionally narrowed by ``query.search`` (title or text).

    Never raises: an unexpected failure is logged and yields an empty page.
    """
    log.info(
        "newest_stories_requested",
        page=query.page,
        page_size=query.page_size,
        search=query.search,
    )
    term = query.search
    predicate = None
    if term is not None and term.strip():
        predicate = partial(matches_search, term=term)

    try:
        result = await _filtered_page(query, service, predicate, max_stories=max_stories)
    except Exception:
        log.error("newest_stories_failed", exc_info=True)
        return StoryPage.empty(query.page, query.page_size)

    log.info(
        "newest_stories_complete",
        returned=len(result.stories),
        total_count=result.total_count,
    )
    return result


async def search_stories(
    query: StoryQuery,
    service: StoryService,
    *,
    max_stories: int = DEFAULT_MAX_STORIES,
) -> StoryPage:
    """Newest stories matching ``query.query`` in title, text or author.

    A blank query is the unfiltered newest listing. Never raises: an
    unexpected failure is logged and yields an empty page.
    """
    term = query.query
    if term is None or not term.strip():
        newest = query.model_copy(update={"search": None, "query": None})
        return await get_newest_stories(newest, service, max_stories=max_stories)

    log.info(
        "search_stories_requested",
        query=term,
        page=query.page,
        page_size=query.page_size,
    )
    try:
        result = await _filtered_page(
            query,
            service,
            partial(matches_query, term=term),
            max_stories=max_stories,
        )
    except Exception:
        log.error("search_stories_failed", exc_info=True)
        return StoryPage.empty(query.page, query.page_size)

    log.info(
        "search_stories_complete",
        returned=len(result.stories),
        total_count=result.total_count,
    )
    return result
