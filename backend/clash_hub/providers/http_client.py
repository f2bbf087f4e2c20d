import asyncio
import logging
from typing import Optional
from urllib.parse import urlparse

import httpx

logger = logging.getLogger("clash_hub.http_client")

# Network failures worth another attempt. HTTP status codes are never retried:
# the gateway relays them to the caller untouched.
_RETRYABLE_ERRORS = (httpx.TimeoutException, httpx.ConnectError, httpx.RemoteProtocolError)


def _safe_url(url: str) -> str:
    """Strip query params (may contain search text) for safe logging."""
    parsed = urlparse(str(url))
    return f"{parsed.scheme}://{parsed.netloc}{parsed.path}"


class UpstreamClient:
    """httpx.AsyncClient wrapper with a bounded timeout and an optional network retry budget."""

    def __init__(
        self,
        name: str,
        timeout: float = 10.0,
        max_retries: int = 0,
        base_delay: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._name = name
        self._max_retries = max(0, int(max_retries))
        self._base_delay = base_delay

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Execute an HTTP request, retrying only on network errors."""
        last_exc: Optional[Exception] = None

        for attempt in range(self._max_retries + 1):
            try:
                resp = await self._client.request(method, url, **kwargs)
                if resp.status_code >= 400:
                    logger.info(
                        "[%s] Upstream %d on %s %s",
                        self._name, resp.status_code, method, _safe_url(url),
                    )
                return resp

            except _RETRYABLE_ERRORS as exc:
                last_exc = exc
                logger.warning(
                    "[%s] Network error on %s %s (attempt %d/%d): %s",
                    self._name, method, _safe_url(url),
                    attempt + 1, self._max_retries + 1, exc,
                )
                if attempt < self._max_retries:
                    delay = min(self._base_delay * (2 ** attempt), 30.0)
                    await asyncio.sleep(delay)

        logger.error(
            "[%s] All %d attempts failed for %s %s: %s",
            self._name, self._max_retries + 1, method, _safe_url(url), last_exc,
        )
        raise last_exc  # type: ignore[misc]

    async def get(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()
