"""Story retrieval: the cached newest-id list plus bounded fan-out per id.

Receives a fetcher and a cache, returns clean lists of live stories.
No knowledge of AppState, MCP, paging or filtering.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from hnproxy.cache import IDLIST_KEY
from hnproxy.errors import HnProxyError
from hnproxy.models.cache import CachePriority

if TYPE_CHECKING:
    from collections.abc import Iterable

    from hnproxy.config import Settings
    from hnproxy.models.story import Story
    from hnproxy.protocols import CacheProtocol, FetcherProtocol

log = structlog.get_logger()


class StoryService:
    """Orchestrates id-list caching and concurrent story retrieval."""

    def __init__(
        self,
        fetcher: FetcherProtocol,
        cache: CacheProtocol,
        settings: Settings,
    ) -> None:
        self._fetcher = fetcher
        self._cache = cache
        self._idlist_ttl_seconds = settings.cache.duration_minutes * 60

    async def get_newest_story_ids(self) -> list[int]:
        """Return the newest story ids in upstream order.

        An empty list means "no data" — upstream failures are logged and
        never cached, so the next call retries.
        """
        cached = await self._cache.get(IDLIST_KEY)
        if cached is not None:
            log.debug("story_ids_cache_hit", count=len(cached))
            return cached

        try:
            story_ids = await self._fetcher.fetch_story_ids()
        except HnProxyError as exc:
            log.error(
                "story_ids_fetch_failed",
                code=exc.code,
                message=exc.message,
                exc_info=True,
            )
            return []

        await self._cache.set(
            IDLIST_KEY, story_ids, self._idlist_ttl_seconds, priority=CachePriority.HIGH
        )
        log.info("story_ids_cached", count=len(story_ids), ttl_seconds=self._idlist_ttl_seconds)
        return story_ids

    async def get_stories(self, story_ids: Iterable[int]) -> list[Story]:
        """Fetch every id concurrently and keep the live stories, in input order.

        Waits for all fetches to finish. Failed, deleted and dead stories are
        dropped without error.
        """
        ids = list(story_ids)
        # gather returns results positionally, whatever the completion order
        results = await asyncio.gather(*(self._fetcher.fetch_story(i) for i in ids))
        stories = [story for story in results if story is not None and story.is_live]

        log.info(
            "stories_retrieved",
            requested=len(ids),
            live=len(stories),
            dropped=len(ids) - len(stories),
        )
        return stories
