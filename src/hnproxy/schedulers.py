"""Background scheduler coroutine for cache sweeping."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from hnproxy.state import AppState

log = structlog.get_logger()


async def run_cache_sweep_scheduler(state: AppState) -> None:
    """Drop expired cache entries on the configured interval.

    Expiry is already enforced on read; sweeping only reclaims memory held by
    stories nobody asks for again. An interval of 0 disables the loop.
    """
    interval_minutes = state.settings.cache.sweep_interval_minutes
    if interval_minutes <= 0 or state.cache is None:
        log.info("cache_sweep_disabled")
        return

    while True:
        await asyncio.sleep(interval_minutes * 60)
        try:
            await state.cache.sweep_expired()
        except Exception:
            log.warning("cache_sweep_error", exc_info=True)
