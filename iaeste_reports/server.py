"""
JSON API serving the latest scraped snapshot.

The first scrape starts together with the server and is repeated every
refresh interval. Until the first scrape succeeds every data request is
answered with HTTP 500; a failed refresh keeps the previous snapshot.
"""

import asyncio
import functools
import json
from typing import Awaitable, Callable, Optional

import structlog
from aiohttp import web

from .config.loader import Settings
from .core.http_client import HttpClient
from .core.models import AllReviewData
from .orchestrator import get_data_dump

logger = structlog.get_logger(__name__)

NOT_READY_MESSAGE = "The server has not fetched the data yet, try again in a minute or two."

dumps = functools.partial(json.dumps, ensure_ascii=False)


class SnapshotStore:
    """Holds the dataset currently being served."""

    def __init__(self):
        self.data: Optional[AllReviewData] = None
        self.payload: Optional[dict] = None

    @property
    def ready(self) -> bool:
        return self.payload is not None

    def replace(self, data: AllReviewData) -> None:
        """Swap in a complete dataset."""
        payload = data.to_dict()
        self.data = data
        self.payload = payload


STORE_KEY = web.AppKey("store", SnapshotStore)
REFRESH_TASK_KEY = web.AppKey("refresh_task", asyncio.Task)

Scrape = Callable[[], Awaitable[AllReviewData]]


def make_http_client(settings: Settings) -> HttpClient:
    return HttpClient(
        timeout=settings.timeout,
        max_attempts=settings.max_attempts,
        backoff_base_ms=settings.backoff_base_ms,
        requests_per_second=settings.requests_per_second or None,
        user_agent=settings.user_agent,
    )


def make_scrape(settings: Settings) -> Scrape:
    """Full scrape with a fresh HTTP client configured from settings."""
    async def scrape() -> AllReviewData:
        async with make_http_client(settings) as client:
            return await get_data_dump(client, **settings.concurrency_limits)

    return scrape


async def refresh_snapshot(store: SnapshotStore, scrape: Scrape) -> bool:
    """
    Run one scrape and publish it on success.

    Returns:
        True if the snapshot was replaced
    """
    logger.info("refresh_started")
    try:
        data = await scrape()
    except Exception as e:
        logger.exception("refresh_failed", error=str(e), serving_stale=store.ready)
        return False

    store.replace(data)
    logger.info("refresh_complete", reviews=len(data.reviews), fields=len(data.categories.fields))
    return True


async def refresh_periodically(store: SnapshotStore, scrape: Scrape, interval: float) -> None:
    while True:
        await refresh_snapshot(store, scrape)
        await asyncio.sleep(interval)


async def handle_index(request: web.Request) -> web.Response:
    """Whole dataset."""
    store = request.app[STORE_KEY]
    if not store.ready:
        return web.json_response({"error": NOT_READY_MESSAGE}, status=500, dumps=dumps)
    return web.json_response(store.payload, dumps=dumps)


async def handle_categories(request: web.Request) -> web.Response:
    """Country categories and fields only."""
    store = request.app[STORE_KEY]
    if not store.ready:
        return web.json_response({"error": NOT_READY_MESSAGE}, status=500, dumps=dumps)
    return web.json_response(store.data.categories.to_dict(), dumps=dumps)


async def handle_health(request: web.Request) -> web.Response:
    return web.Response(text="OK", status=200)


def create_app(
    store: Optional[SnapshotStore] = None,
    scrape: Optional[Scrape] = None,
    refresh_interval: float = 12 * 3600,
) -> web.Application:
    """
    Build the aiohttp application.

    Args:
        store: Snapshot store (a new empty one if not provided)
        scrape: Scrape coroutine; when given, it runs in the background for
                the lifetime of the app
        refresh_interval: Seconds between scrapes
    """
    app = web.Application()
    app[STORE_KEY] = store or SnapshotStore()

    app.router.add_get("/", handle_index)
    app.router.add_get("/categories", handle_categories)
    app.router.add_get("/health", handle_health)

    if scrape is not None:
        async def background_refresh(app: web.Application):
            app[REFRESH_TASK_KEY] = asyncio.create_task(
                refresh_periodically(app[STORE_KEY], scrape, refresh_interval)
            )
            yield
            app[REFRESH_TASK_KEY].cancel()
            try:
                await app[REFRESH_TASK_KEY]
            except asyncio.CancelledError:
                pass

        app.cleanup_ctx.append(background_refresh)

    return app


async def run_server(settings: Settings) -> None:
    """Start the API server and refresh loop; runs until cancelled."""
    app = create_app(
        scrape=make_scrape(settings),
        refresh_interval=settings.refresh_interval_seconds,
    )

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, settings.host, settings.port)
    await site.start()

    logger.info("listening", host=settings.host, port=settings.port)

    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()
