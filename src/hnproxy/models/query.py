from __future__ import annotations

import math

from pydantic import BaseModel, Field, field_validator

from hnproxy.models.story import Story

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 20
MAX_TERM_LENGTH = 500


class StoryQuery(BaseModel):
    """Validated paging and filter parameters for one query.

    ``search`` drives get_newest_stories, ``query`` drives search_stories.
    Oversized pages are clamped here so the query engine never sees more
    than MAX_PAGE_SIZE.
    """

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)
    search: str | None = Field(default=None, max_length=MAX_TERM_LENGTH)
    query: str | None = Field(default=None, max_length=MAX_TERM_LENGTH)

    @field_validator("page_size")
    @classmethod
    def clamp_page_size(cls, v: int) -> int:
        return min(v, MAX_PAGE_SIZE)


class StoryPage(BaseModel):
    """One page of filtered stories plus the totals of the whole match set."""

    stories: list[Story] = []
    total_count: int = 0
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    total_pages: int = 0

    @classmethod
    def empty(cls, page: int, page_size: int) -> StoryPage:
        return cls(stories=[], total_count=0, page=page, page_size=page_size, total_pages=0)

    @staticmethod
    def count_pages(total_count: int, page_size: int) -> int:
        """ceil(total_count / page_size); zero when nothing matched."""
        return math.ceil(total_count / page_size) if total_count else 0
