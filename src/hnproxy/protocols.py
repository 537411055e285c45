"""Protocol interfaces for swappable components.

The story service, query engine and AppState reference these protocols, not
the concrete implementations. This allows:
- Tests to use lightweight fakes (e.g. a fetcher that records calls)
- Future backends (e.g. a shared Redis cache) to be swapped without
  changing the pipeline
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from hnproxy.models.cache import CachePriority
    from hnproxy.models.story import Story


class CacheProtocol(Protocol):
    """Interface for the TTL cache backend."""

    def __len__(self) -> int: ...

    async def get(self, key: str) -> Any | None: ...

    async def set(
        self,
        key: str,
        value: Any,
        ttl_seconds: float,
        *,
        priority: CachePriority = ...,
    ) -> None: ...

    async def sweep_expired(self) -> int: ...


class FetcherProtocol(Protocol):
    """Interface for the bounded upstream fetcher."""

    async def fetch_story(self, story_id: int) -> Story | None: ...

    async def fetch_story_ids(self) -> list[int]: ...
