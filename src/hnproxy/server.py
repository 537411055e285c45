"""MCP server entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Create AppState via the FastMCP lifespan context manager
- Register tools
- Start the correct transport (stdio or HTTP)
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from contextlib import asynccontextmanager, suppress
from typing import TYPE_CHECKING

import structlog
from mcp.server.fastmcp import Context, FastMCP
from mcp.types import CallToolResult, TextContent

import hnproxy.tools.get_newest_stories as t_newest
import hnproxy.tools.health as t_health
import hnproxy.tools.search_stories as t_search
from hnproxy import __version__
from hnproxy.cache import TTLCache
from hnproxy.config import Settings
from hnproxy.errors import HnProxyError
from hnproxy.fetcher import Fetcher, build_http_client
from hnproxy.models.query import DEFAULT_PAGE_SIZE
from hnproxy.schedulers import run_cache_sweep_scheduler
from hnproxy.state import AppState
from hnproxy.stories import StoryService
from hnproxy.transport import run_http_server

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # Logs go to stderr — stdout is reserved for the MCP JSON-RPC stream
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


def build_state(settings: Settings) -> AppState:
    """Wire the HTTP client, cache, fetcher and story service."""
    http_client = build_http_client(settings.upstream)
    cache = TTLCache()
    fetcher = Fetcher(http_client, cache, settings)
    return AppState(
        settings=settings,
        http_client=http_client,
        cache=cache,
        fetcher=fetcher,
        stories=StoryService(fetcher, cache, settings),
    )


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncGenerator[AppState, None]:
    """Create and tear down all shared resources for the server's lifetime."""
    settings = Settings()
    _setup_logging(settings)

    log.info(
        "server_starting",
        version=__version__,
        transport=settings.server.transport,
    )

    state = build_state(settings)
    cache_sweep_task = asyncio.create_task(run_cache_sweep_scheduler(state))

    log.info(
        "server_started",
        version=__version__,
        transport=settings.server.transport,
        upstream=settings.upstream.base_url,
        max_concurrent_requests=settings.upstream.max_concurrent_requests,
        cache_duration_minutes=settings.cache.duration_minutes,
    )

    try:
        yield state
    finally:
        cache_sweep_task.cancel()
        with suppress(asyncio.CancelledError):
            await cache_sweep_task
        if state.http_client is not None:
            await state.http_client.aclose()
        log.info("server_stopping")


# ---------------------------------------------------------------------------
# FastMCP instance and tool registration
# ---------------------------------------------------------------------------

mcp = FastMCP("hnproxy", lifespan=lifespan)
# FastMCP doesn't expose a version kwarg — set it on the underlying Server
# so the MCP initialize handshake reports our version, not the SDK's.
mcp._mcp_server.version = __version__  # pyright: ignore[reportPrivateUsage]


def _serialise_tool_error(error: HnProxyError) -> CallToolResult:
    """Convert an HnProxyError to the MCP tool error result envelope."""
    return CallToolResult(
        content=[TextContent(type="text", text=json.dumps(error.to_dict()))],
        isError=True,
    )


@mcp.tool()
async def get_newest_stories(
    ctx: Context,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
    search: str | None = None,
) -> object:
    """List the newest Hacker News stories, optionally filtered by a search term.

    The term matches story titles and text (case-insensitive). page_size is
    capped at 100. Only the 500 most recent stories are considered.
    """
    state: AppState = ctx.request_context.lifespan_context
    try:
        return await t_newest.handle(page, page_size, search, state)
    except HnProxyError as exc:
        log.warning(
            "tool_error",
            tool="get_newest_stories",
            code=exc.code,
            message=exc.message,
            recoverable=exc.recoverable,
        )
        return _serialise_tool_error(exc)
    except Exception:
        log.error("tool_unexpected_error", tool="get_newest_stories", exc_info=True)
        raise


@mcp.tool()
async def search_stories(
    ctx: Context,
    query: str | None = None,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> object:
    """Search the newest Hacker News stories by title, text or author.

    An empty query returns the unfiltered newest listing.
    """
    state: AppState = ctx.request_context.lifespan_context
    try:
        return await t_search.handle(query, page, page_size, state)
    except HnProxyError as exc:
        log.warning(
            "tool_error",
            tool="search_stories",
            code=exc.code,
            message=exc.message,
            recoverable=exc.recoverable,
        )
        return _serialise_tool_error(exc)
    except Exception:
        log.error("tool_unexpected_error", tool="search_stories", exc_info=True)
        raise


@mcp.tool()
async def health(ctx: Context) -> object:
    """Report server liveness, version and cache size."""
    state: AppState = ctx.request_context.lifespan_context
    return await t_health.handle(state)


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main() -> None:
    settings = Settings()

    if settings.server.transport == "http":
        _setup_logging(settings)
        run_http_server(mcp, settings)
        return

    mcp.run()


if __name__ == "__main__":
    main()
