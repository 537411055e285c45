"""Integration test fixtures.

Provides a fully wired AppState (real TTLCache, Fetcher and StoryService over
an httpx client intercepted by respx) plus an upstream mock seeded with the
shared sample stories.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import httpx
import pytest
import respx

from hnproxy.cache import TTLCache
from hnproxy.fetcher import Fetcher
from hnproxy.state import AppState
from hnproxy.stories import StoryService
from tests.fakes import BASE_URL

if TYPE_CHECKING:
    from collections.abc import Iterator

    from hnproxy.config import Settings


@pytest.fixture()
def upstream(story_payloads: dict[int, dict]) -> Iterator[respx.MockRouter]:
    """Mocked Hacker News API serving stories 1..3 in that order."""
    with respx.mock(base_url=BASE_URL, assert_all_called=False) as router:
        router.get("/newstories.json", name="newstories").mock(
            return_value=httpx.Response(200, json=list(story_payloads))
        )
        for story_id, payload in story_payloads.items():
            router.get(f"/item/{story_id}.json", name=f"item_{story_id}").mock(
                return_value=httpx.Response(200, json=payload)
            )
        yield router


@pytest.fixture()
async def app_state(settings: Settings) -> AppState:
    """Full AppState wired the same way as the server lifespan."""
    async with httpx.AsyncClient() as client:
        cache = TTLCache()
        fetcher = Fetcher(client, cache, settings)
        yield AppState(
            settings=settings,
            http_client=client,
            cache=cache,
            fetcher=fetcher,
            stories=StoryService(fetcher, cache, settings),
        )


@pytest.fixture()
def subprocess_env() -> dict[str, str]:
    """Baseline env for subprocess-based MCP tests.

    Forces stdio transport and points upstream at a closed local port so the
    server runs without network access.
    """
    env = os.environ.copy()
    env["HNPROXY__SERVER__TRANSPORT"] = "stdio"
    env["HNPROXY__UPSTREAM__BASE_URL"] = "http://127.0.0.1:1/v0"
    env["HNPROXY__UPSTREAM__REQUEST_TIMEOUT_SECONDS"] = "2"
    env["HNPROXY__CACHE__SWEEP_INTERVAL_MINUTES"] = "0"
    return env
