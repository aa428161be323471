# ABOUTME: Async HTTP client abstraction for metadata provider calls and cover downloads.
# ABOUTME: Provides rate limiting, retry with backoff, and injectable transport for testing.

import asyncio
import logging
import time
from typing import Any, Protocol, runtime_checkable

import httpx

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
_TIMEOUT_SECONDS = 30.0
_VERSION = "0.1.0"

# Goodreads serves a reduced page to unknown agents, so scraping uses a browser string.
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


class MetadataFetchError(Exception):
    """Raised when an HTTP request to a metadata provider fails."""


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP GET operations against metadata sources."""

    async def get_json(
        self,
        url: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any: ...

    async def get_text(
        self,
        url: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> str: ...

    async def get_bytes(
        self,
        url: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> bytes: ...


class _Throttle:
    """Spaces request starts at least `interval` seconds apart across tasks."""

    def __init__(self, interval: float) -> None:
        self._interval = interval
        self._lock = asyncio.Lock()
        self._last_start: float | None = None

    async def wait(self) -> None:
        if self._interval <= 0:
            return
        async with self._lock:
            if self._last_start is not None:
                remaining = self._interval - (time.monotonic() - self._last_start)
                if remaining > 0:
                    await asyncio.sleep(remaining)
            self._last_start = time.monotonic()


class BooknoteHttpClient:
    """Shared async client for provider searches, detail pages and cover images.

    Use it as an async context manager so the underlying httpx.AsyncClient is
    closed. Responses with status 429 or 5xx are retried with exponential
    backoff; any other non-200 status fails at once.
    """

    def __init__(
        self,
        *,
        min_request_interval: float = 0.1,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            headers={"User-Agent": f"booknote/{_VERSION}"},
            timeout=_TIMEOUT_SECONDS,
            follow_redirects=True,
            transport=transport,
        )
        self._throttle = _Throttle(min_request_interval)
        self._max_retries = max_retries
        self._retry_delay = retry_delay

    async def __aenter__(self) -> "BooknoteHttpClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_json(
        self,
        url: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """GET url and decode the body as JSON.

        Raises:
            MetadataFetchError: When the request fails or the body is not JSON.
        """
        response = await self._fetch(url, params, _with_accept(headers, "application/json"))
        try:
            return response.json()
        except ValueError as exc:
            raise MetadataFetchError(f"Malformed JSON from {url}: {exc}") from exc

    async def get_text(
        self,
        url: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> str:
        return (await self._fetch(url, params, headers)).text

    async def get_bytes(
        self,
        url: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> bytes:
        return (await self._fetch(url, params, _with_accept(headers, "image/*"))).content

    async def _fetch(
        self,
        url: str,
        params: dict[str, str] | None,
        headers: dict[str, str] | None,
    ) -> httpx.Response:
        await self._throttle.wait()

        total = self._max_retries + 1
        for attempt in range(1, total + 1):
            try:
                response = await self._client.get(url, params=params, headers=headers)
            except httpx.HTTPError as exc:
                raise MetadataFetchError(f"Request failed: {url}: {exc}") from exc

            status = response.status_code
            if status == 200:
                return response
            if status not in _RETRYABLE_STATUS_CODES:
                raise MetadataFetchError(f"HTTP {status} from {url}")
            if attempt == total:
                break

            backoff = self._retry_delay * 2 ** (attempt - 1)
            logger.warning(
                "Retrying %s in %.1fs after HTTP %d (%d of %d retries)",
                url,
                backoff,
                status,
                attempt,
                self._max_retries,
            )
            await asyncio.sleep(backoff)

        raise MetadataFetchError(f"HTTP {status} from {url} after {total} attempts")


def _with_accept(headers: dict[str, str] | None, accept: str) -> dict[str, str]:
    return {"Accept": accept, **(headers or {})}
