import asyncio
import logging
import time

import httpx

logger = logging.getLogger(__name__)

# Upper bound on a server-requested pause, so a bogus header cannot stall a run
MAX_RETRY_AFTER_SECONDS = 60.0


def _parse_retry_after(value: str | None) -> float | None:
    """Retry-After in seconds. HTTP-date values are not used by RPC providers and are ignored."""
    if value is None:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    if seconds < 0:
        return None
    return min(seconds, MAX_RETRY_AFTER_SECONDS)


class RateLimitedClient:
    """Async httpx client for RPC traffic.

    Requests are spaced at least 1/rate seconds apart. When the node answers
    429 with a Retry-After header, the next request is held back until that
    pause has elapsed.
    """

    def __init__(self, rate_per_second: float = 5.0, timeout: float = 30.0) -> None:
        if rate_per_second <= 0:
            raise ValueError("rate_per_second must be positive")
        self._min_interval = 1.0 / rate_per_second
        self._next_slot = 0.0
        self._lock = asyncio.Lock()
        self._client = httpx.AsyncClient(timeout=timeout)

    async def _wait_for_slot(self) -> None:
        async with self._lock:
            delay = self._next_slot - time.monotonic()
            if delay > 0:
                logger.debug("Rate limit: waiting %.3fs", delay)
                await asyncio.sleep(delay)
            self._next_slot = time.monotonic() + self._min_interval

    def _note_response(self, resp: httpx.Response) -> None:
        if resp.status_code != 429:
            return
        pause = _parse_retry_after(resp.headers.get("Retry-After"))
        if pause is None:
            return
        logger.warning("RPC node asked to back off for %.1fs", pause)
        self._next_slot = max(self._next_slot, time.monotonic() + pause)

    async def post(self, url: str, json: dict | list | None = None) -> httpx.Response:
        await self._wait_for_slot()
        resp = await self._client.post(url, json=json)
        self._note_response(resp)
        return resp

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "RateLimitedClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
