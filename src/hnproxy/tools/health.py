"""Tool handler for health."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from hnproxy import __version__

if TYPE_CHECKING:
    from hnproxy.state import AppState


async def handle(state: AppState) -> dict:
    """Report liveness. Does not touch upstream."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "version": __version__,
        "cached_entries": len(state.cache) if state.cache is not None else 0,
    }
