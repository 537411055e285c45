from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class CachePriority(StrEnum):
    """Retention hint recorded on each entry. Expiry is the only eviction."""

    HIGH = "high"
    NORMAL = "normal"


@dataclass(slots=True)
class CacheEntry:
    """Single cached value with an absolute expiry on the cache's clock."""

    value: Any
    expires_at: float  # Clock seconds (time.monotonic by default)
    priority: CachePriority = CachePriority.NORMAL

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at
