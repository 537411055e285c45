"""Unit tests for hnproxy.stories."""

from __future__ import annotations

from typing import TYPE_CHECKING

from hnproxy.cache import IDLIST_KEY, TTLCache
from hnproxy.models.cache import CachePriority
from hnproxy.stories import StoryService
from tests.fakes import FakeClock, FakeFetcher

if TYPE_CHECKING:
    from hnproxy.config import Settings
    from hnproxy.models.story import Story


def _service(fetcher: FakeFetcher, settings: Settings, clock: FakeClock | None = None):
    cache = TTLCache(clock=clock) if clock is not None else TTLCache()
    return StoryService(fetcher, cache, settings), cache


# ---------------------------------------------------------------------------
# get_newest_story_ids
# ---------------------------------------------------------------------------


class TestGetNewestStoryIds:
    async def test_returns_upstream_order(self, settings: Settings) -> None:
        fetcher = FakeFetcher(story_ids=[9, 3, 7])
        service, _ = _service(fetcher, settings)
        assert await service.get_newest_story_ids() == [9, 3, 7]

    async def test_cached_within_duration(self, settings: Settings, clock: FakeClock) -> None:
        fetcher = FakeFetcher(story_ids=[1, 2])
        service, _ = _service(fetcher, settings, clock)

        await service.get_newest_story_ids()
        clock.advance(5 * 60 - 1)
        await service.get_newest_story_ids()

        assert fetcher.id_list_calls == 1

    async def test_refetched_after_duration(self, settings: Settings, clock: FakeClock) -> None:
        fetcher = FakeFetcher(story_ids=[1, 2])
        service, _ = _service(fetcher, settings, clock)

        await service.get_newest_story_ids()
        fetcher.story_ids = [3, 1, 2]
        clock.advance(5 * 60)

        assert await service.get_newest_story_ids() == [3, 1, 2]
        assert fetcher.id_list_calls == 2

    async def test_cached_with_high_priority(self, settings: Settings) -> None:
        service, cache = _service(FakeFetcher(story_ids=[1]), settings)
        await service.get_newest_story_ids()
        assert cache._entries[IDLIST_KEY].priority == CachePriority.HIGH

    async def test_upstream_failure_returns_empty_list(self, settings: Settings) -> None:
        fetcher = FakeFetcher(ids_error=True)
        service, _ = _service(fetcher, settings)
        assert await service.get_newest_story_ids() == []

    async def test_failure_is_not_cached(self, settings: Settings) -> None:
        fetcher = FakeFetcher(story_ids=[4, 5], ids_error=True)
        service, _ = _service(fetcher, settings)

        assert await service.get_newest_story_ids() == []
        fetcher.ids_error = False

        assert await service.get_newest_story_ids() == [4, 5]
        assert fetcher.id_list_calls == 2


# ---------------------------------------------------------------------------
# get_stories
# ---------------------------------------------------------------------------


class TestGetStories:
    async def test_preserves_input_order_not_completion_order(
        self, settings: Settings, sample_stories: dict[int, Story]
    ) -> None:
        # id 1 finishes last, id 3 first
        fetcher = FakeFetcher(sample_stories, delays={1: 0.03, 2: 0.02, 3: 0.01})
        service, _ = _service(fetcher, settings)

        stories = await service.get_stories([1, 2, 3])

        assert [story.id for story in stories] == [1, 2, 3]

    async def test_order_follows_ids_argument(
        self, settings: Settings, sample_stories: dict[int, Story]
    ) -> None:
        service, _ = _service(FakeFetcher(sample_stories), settings)
        stories = await service.get_stories([3, 1, 2])
        assert [story.id for story in stories] == [3, 1, 2]

    async def test_missing_stories_dropped(
        self, settings: Settings, sample_stories: dict[int, Story]
    ) -> None:
        stories_by_id: dict[int, Story | None] = {**sample_stories, 99: None}
        fetcher = FakeFetcher(stories_by_id, delays={99: 0.01})
        service, _ = _service(fetcher, settings)

        stories = await service.get_stories([1, 99, 2, 404, 3])

        assert [story.id for story in stories] == [1, 2, 3]
        # Every id was attempted; no early exit on the first failure
        assert sorted(fetcher.story_calls) == [1, 2, 3, 99, 404]

    async def test_deleted_and_dead_dropped(
        self, settings: Settings, sample_stories: dict[int, Story]
    ) -> None:
        deleted = sample_stories[2].model_copy(update={"deleted": True})
        dead = sample_stories[3].model_copy(update={"dead": True})
        flagged_false = sample_stories[1].model_copy(update={"deleted": False, "dead": False})
        fetcher = FakeFetcher({1: flagged_false, 2: deleted, 3: dead})
        service, _ = _service(fetcher, settings)

        stories = await service.get_stories([1, 2, 3])

        assert [story.id for story in stories] == [1]

    async def test_empty_ids(self, settings: Settings) -> None:
        fetcher = FakeFetcher()
        service, _ = _service(fetcher, settings)
        assert await service.get_stories([]) == []
        assert fetcher.story_calls == []
