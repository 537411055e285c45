"""In-memory TTL cache for the newest-id list and individual stories.

Entries carry an absolute expiry and are checked lazily on read: an expired
entry behaves as absent and is superseded by the next ``set``. The optional
sweeper (see schedulers.py) only reclaims memory, correctness never depends
on it.

There is no size bound. Memory grows with the number of distinct story ids
fetched within one expiry window; the process memory limit is the ceiling.
Nothing survives a restart — a cold cache is rebuilt from upstream.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Any

import structlog

from hnproxy.models.cache import CacheEntry, CachePriority

if TYPE_CHECKING:
    from collections.abc import Callable

log = structlog.get_logger()

IDLIST_KEY = "idlist"


def story_key(story_id: int) -> str:
    """Cache key for a single story: ``'item:<id>'``."""
    return f"item:{story_id}"


class TTLCache:
    """Async-safe key/value store with per-entry expiry, implementing CacheProtocol."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> Any | None:
        """Return the cached value, or ``None`` if missing or expired."""
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                return None
            return entry.value

    async def set(
        self,
        key: str,
        value: Any,
        ttl_seconds: float,
        *,
        priority: CachePriority = CachePriority.NORMAL,
    ) -> None:
        """Store a value, replacing any existing entry and resetting its expiry."""
        entry = CacheEntry(
            value=value,
            expires_at=self._clock() + ttl_seconds,
            priority=priority,
        )
        async with self._lock:
            self._entries[key] = entry

    async def sweep_expired(self) -> int:
        """Drop every expired entry. Returns the number removed."""
        async with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]
            remaining = len(self._entries)

        log.info("cache_sweep_complete", removed=len(expired), remaining=remaining)
        return len(expired)

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()
