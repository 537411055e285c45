from __future__ import annotations

from hnproxy.models.cache import CacheEntry, CachePriority
from hnproxy.models.query import MAX_PAGE_SIZE, StoryPage, StoryQuery
from hnproxy.models.story import Story

__all__ = [
    # stories
    "Story",
    # queries
    "StoryQuery",
    "StoryPage",
    "MAX_PAGE_SIZE",
    # cache
    "CacheEntry",
    "CachePriority",
]
