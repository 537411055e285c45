"""Shared test fixtures for the hnproxy test suite."""

from __future__ import annotations

import pytest

from hnproxy.config import Settings
from hnproxy.models.story import Story
from tests.fakes import BASE_URL, FakeClock


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        upstream={"base_url": BASE_URL, "max_concurrent_requests": 10},
        cache={"duration_minutes": 5, "sweep_interval_minutes": 10},
    )


@pytest.fixture()
def story_payloads() -> dict[int, dict]:
    """Raw upstream item payloads, keyed by id, in upstream field names."""
    return {
        1: {
            "id": 1,
            "title": "Angular Tutorial",
            "url": "https://example.com/angular",
            "score": 42,
            "by": "alice",
            "time": 1_700_000_000,
            "descendants": 2,
            "type": "story",
            "kids": [11, 12],
        },
        2: {
            "id": 2,
            "title": "React Guide",
            "score": 17,
            "by": "bob",
            "time": 1_700_000_100,
            "type": "story",
            "text": "Hooks in depth, from useState to useTransition.",
        },
        3: {
            "id": 3,
            "title": "Vue.js Tips",
            "url": "https://example.com/vue",
            "score": 8,
            "by": "angularfan",
            "time": 1_700_000_200,
            "descendants": 0,
            "type": "story",
        },
    }


@pytest.fixture()
def sample_stories(story_payloads: dict[int, dict]) -> dict[int, Story]:
    return {story_id: Story.model_validate(p) for story_id, p in story_payloads.items()}
