"""
Async HTTP client turning site URLs into parsed HTML documents.

Built on httpx with:
- Bounded retry loop with backoff that grows as attempts run out
- Optional per-host rate limiting
- Optional per-run document cache supplied by the caller
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, TypeVar
from urllib.parse import urlparse

import httpx
import structlog
from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
)
from tenacity.wait import wait_base

from .errors import FetchError

logger = structlog.get_logger(__name__)

DEFAULT_USER_AGENT = "iaeste-reports/0.1 (+https://www.iaeste.cz/student-report)"

# URL -> pending or finished parse, scoped to one traversal.
# Concurrent requests for the same URL share one fetch.
DocumentCache = dict[str, "asyncio.Future[BeautifulSoup]"]

# Failures of a single attempt that are worth another request
RETRYABLE_ERRORS = (httpx.HTTPStatusError, httpx.TransportError, ParserRejectedMarkup)

T = TypeVar("T")


def backoff_seconds(retries_left: int, base_ms: float = 50_000) -> float:
    """Delay before the next attempt when `retries_left` attempts remain."""
    return base_ms / max(retries_left, 1) ** 1.5 / 1000


class wait_for_remaining_attempts(wait_base):
    """tenacity wait strategy: the fewer attempts remain, the longer the wait."""

    def __init__(self, max_attempts: int, base_ms: float = 50_000):
        self.max_attempts = max_attempts
        self.base_ms = base_ms

    def __call__(self, retry_state: RetryCallState) -> float:
        retries_left = self.max_attempts - retry_state.attempt_number + 1
        return backoff_seconds(retries_left, self.base_ms)


@dataclass
class RateLimiter:
    """Per-host rate limiter."""
    requests_per_second: float
    last_request: float = 0.0
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    async def acquire(self) -> None:
        """Wait for rate limit slot."""
        async with self.lock:
            min_interval = 1.0 / self.requests_per_second
            elapsed = time.monotonic() - self.last_request
            if elapsed < min_interval:
                await asyncio.sleep(min_interval - elapsed)
            self.last_request = time.monotonic()


class HttpClient:
    """
    Async HTTP client for the report site.

    Usage:
        async with HttpClient() as client:
            doc = await client.fetch_document(url)
    """

    def __init__(
        self,
        timeout: float = 30.0,
        max_attempts: int = 5,
        backoff_base_ms: float = 50_000,
        requests_per_second: Optional[float] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize HTTP client.

        Args:
            timeout: Request timeout in seconds
            max_attempts: Attempts per URL before giving up
            backoff_base_ms: Wait numerator, divided by retries_left ** 1.5
            requests_per_second: Per-host rate limit (None disables it)
            user_agent: User-Agent header value
            transport: Custom httpx transport (tests use httpx.MockTransport)
            sleep: Coroutine used for backoff waits
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.timeout = timeout
        self.max_attempts = max_attempts
        self.backoff_base_ms = backoff_base_ms
        self.requests_per_second = requests_per_second
        self.user_agent = user_agent
        self.transport = transport
        self._sleep = sleep

        self._client: Optional[httpx.AsyncClient] = None
        self._rate_limiters: dict[str, RateLimiter] = {}
        self.requests_made = 0

    async def __aenter__(self) -> "HttpClient":
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            headers={"User-Agent": self.user_agent, "Accept-Language": "cs,en;q=0.9"},
            transport=self.transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _get_rate_limiter(self, url: str) -> Optional[RateLimiter]:
        if not self.requests_per_second:
            return None
        host = urlparse(url).netloc
        if host not in self._rate_limiters:
            self._rate_limiters[host] = RateLimiter(self.requests_per_second)
        return self._rate_limiters[host]

    async def _do_request(self, url: str) -> httpx.Response:
        """Single GET attempt; non-2xx responses raise httpx.HTTPStatusError."""
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'async with' context.")

        limiter = self._get_rate_limiter(url)
        if limiter:
            await limiter.acquire()

        self.requests_made += 1
        response = await self._client.get(url)
        response.raise_for_status()
        return response

    async def _with_retries(self, url: str, attempt_once: Callable[[], Awaitable[T]]) -> T:
        """
        Run one fetch attempt up to max_attempts times.

        Raises:
            FetchError: when every attempt failed
        """
        def log_retry(retry_state: RetryCallState) -> None:
            logger.warning(
                "fetch_retry",
                url=url,
                attempt=retry_state.attempt_number,
                wait=round(retry_state.next_action.sleep, 2),
                error=str(retry_state.outcome.exception()),
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_for_remaining_attempts(self.max_attempts, self.backoff_base_ms),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            before_sleep=log_retry,
            sleep=self._sleep,
        )

        logger.debug("http_get", url=url)

        try:
            async for attempt in retrying:
                with attempt:
                    result = await attempt_once()
        except RetryError as e:
            last_error = e.last_attempt.exception()
            logger.error("fetch_failed", url=url, attempts=self.max_attempts, error=str(last_error))
            raise FetchError(url, self.max_attempts, last_error) from last_error

        return result

    async def get(self, url: str) -> httpx.Response:
        """
        GET request retried up to max_attempts times.

        Raises:
            FetchError: when every attempt failed
        """
        return await self._with_retries(url, lambda: self._do_request(url))

    async def get_text(self, url: str) -> str:
        """GET request returning text content."""
        response = await self.get(url)
        return response.text

    async def fetch_document(
        self,
        url: str,
        cache: Optional[DocumentCache] = None,
    ) -> BeautifulSoup:
        """
        Fetch and parse an HTML page.

        Args:
            url: URL to fetch
            cache: Optional per-traversal cache; a URL already present
                   is never requested again

        Returns:
            Parsed BeautifulSoup document
        """
        if cache is None:
            return await self._fetch_and_parse(url)

        if url in cache:
            logger.debug("cache_hit", url=url)
        else:
            cache[url] = asyncio.ensure_future(self._fetch_and_parse(url))
        return await cache[url]

    async def _fetch_and_parse(self, url: str) -> BeautifulSoup:
        """Request and parse as one attempt, so a rejected body is fetched again."""
        async def attempt_once() -> BeautifulSoup:
            response = await self._do_request(url)
            return BeautifulSoup(response.text, "lxml")

        return await self._with_retries(url, attempt_once)
