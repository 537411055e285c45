from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Story(BaseModel):
    """Single Hacker News item as returned by ``/item/<id>.json``.

    Validated from upstream JSON by alias (``by``, ``time``, ``kids``...) and
    serialised by field name. Frozen: a story is never patched in place, it is
    re-fetched wholesale once its cache entry expires.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    title: str = ""
    url: str | None = None
    score: int = 0
    author: str = Field(default="", alias="by")
    created_at: int = Field(default=0, alias="time")  # Unix seconds
    descendant_count: int | None = Field(default=None, alias="descendants")
    kind: str = Field(default="", alias="type")
    text: str | None = None
    child_ids: tuple[int, ...] | None = Field(default=None, alias="kids")
    deleted: bool | None = None
    dead: bool | None = None

    @property
    def is_live(self) -> bool:
        return self.deleted is not True and self.dead is not True
