"""Concurrency-bounded HTTP fetcher for the Hacker News API.

All upstream I/O goes through a single Fetcher instance. The Fetcher receives
an httpx.AsyncClient via constructor injection — the lifespan owns the client
lifecycle. Every upstream call holds one permit from a shared semaphore, so no
more than ``upstream.max_concurrent_requests`` requests are ever in flight.

The Fetcher is the only writer of per-story cache entries. A story fetch never
raises: network, status and parse failures are logged and reported as
``None`` so one bad id cannot sink a whole batch.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError

from hnproxy import __version__
from hnproxy.cache import story_key
from hnproxy.errors import ErrorCode, HnProxyError
from hnproxy.models.cache import CachePriority
from hnproxy.models.story import Story

if TYPE_CHECKING:
    from hnproxy.config import Settings, UpstreamSettings
    from hnproxy.protocols import CacheProtocol

log = structlog.get_logger()

_STORY_IDS = TypeAdapter(list[int])


def build_http_client(settings: UpstreamSettings) -> httpx.AsyncClient:
    """Create the shared httpx client. Called once at startup."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.request_timeout_seconds),
        headers={"User-Agent": f"hnproxy/{__version__}"},
        limits=httpx.Limits(
            max_connections=settings.max_concurrent_requests,
            max_keepalive_connections=settings.max_concurrent_requests,
        ),
    )


class Fetcher:
    """Bounded upstream fetcher with read-through story caching."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        cache: CacheProtocol,
        settings: Settings,
    ) -> None:
        self._client = client
        self._cache = cache
        self._base_url = settings.upstream.base_url.rstrip("/")
        self._permits = asyncio.Semaphore(settings.upstream.max_concurrent_requests)
        # Stories change less often than the newest list, keep them twice as long
        self._story_ttl_seconds = settings.cache.duration_minutes * 60 * 2

    async def fetch_story(self, story_id: int) -> Story | None:
        """Return a story from cache or upstream, or ``None`` on any failure."""
        key = story_key(story_id)
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        url = f"{self._base_url}/item/{story_id}.json"
        try:
            async with self._permits:
                response = await self._client.get(url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError:
            log.warning("story_fetch_failed", story_id=story_id, url=url, exc_info=True)
            return None
        except ValueError:
            log.warning("story_parse_failed", story_id=story_id, url=url, exc_info=True)
            return None

        if payload is None:
            # Upstream answers unknown ids with a literal JSON null
            log.info("story_not_found", story_id=story_id)
            return None

        try:
            story = Story.model_validate(payload)
        except ValidationError:
            log.warning("story_parse_failed", story_id=story_id, url=url, exc_info=True)
            return None

        await self._cache.set(
            key, story, self._story_ttl_seconds, priority=CachePriority.NORMAL
        )
        return story

    async def fetch_story_ids(self) -> list[int]:
        """Fetch the newest story ids in upstream order.

        Raises HnProxyError(UPSTREAM_UNAVAILABLE) on network, status and
        parse failures.
        """
        url = f"{self._base_url}/newstories.json"
        try:
            async with self._permits:
                response = await self._client.get(url)
            if not response.is_success:
                raise HnProxyError(
                    code=ErrorCode.UPSTREAM_UNAVAILABLE,
                    message=f"HTTP {response.status_code} fetching {url}",
                    suggestion="The Hacker News API may be temporarily unavailable.",
                    recoverable=True,
                )
            story_ids = _STORY_IDS.validate_json(response.content)
        except httpx.HTTPError as exc:
            raise HnProxyError(
                code=ErrorCode.UPSTREAM_UNAVAILABLE,
                message=f"Network error fetching {url}: {exc}",
                suggestion="The Hacker News API may be temporarily unavailable.",
                recoverable=True,
            ) from exc
        except ValidationError as exc:
            raise HnProxyError(
                code=ErrorCode.UPSTREAM_UNAVAILABLE,
                message=f"Malformed id list from {url}",
                suggestion="The Hacker News API returned an unexpected payload.",
                recoverable=True,
            ) from exc

        log.info("story_ids_fetched", url=url, count=len(story_ids))
        return story_ids
