"""
Retrying Transport

Performs one outbound HTTP call with resilience to transient network failure.

Only connection-level errors (connect/read/write errors, timeouts) are
retried. An HTTP response with any status, including 4xx/5xx, is returned
to the caller unchanged: rate limits and server errors need distinct
handling upstream and must not be replayed blindly.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable

import httpx

logger = logging.getLogger(__name__)

MAX_RETRIES = 2
RETRY_DELAY_SECONDS = 1.0


class RetryingTransport:
    """
    Wraps an httpx.AsyncClient with bounded retry-on-network-failure.

    With the defaults a call is attempted at most 3 times (1 + 2 retries),
    waiting a fixed delay between attempts.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        max_retries: int = MAX_RETRIES,
        retry_delay_seconds: float = RETRY_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Initialize the transport.

        Args:
            client: HTTP client used for every attempt
            max_retries: Additional attempts after the first failure
            retry_delay_seconds: Fixed wait between attempts
            sleep: Awaitable sleep function (injectable for tests)
        """
        self._client = client
        self._max_retries = max_retries
        self._retry_delay = retry_delay_seconds
        self._sleep = sleep

    @property
    def max_attempts(self) -> int:
        return self._max_retries + 1

    async def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        """
        Send a request, retrying on network-level errors.

        Args:
            method: HTTP method
            url: Absolute target URL
            headers: Request headers
            json: JSON body (omitted when None)

        Returns:
            The raw response, whatever its status

        Raises:
            httpx.TransportError: The last network error once retries are exhausted
        """
        retries_left = self._max_retries

        while True:
            try:
                return await self._client.request(method, url, headers=headers, json=json)
            except httpx.TransportError as e:
                if retries_left <= 0:
                    logger.error(
                        f"{method} {url} failed after {self.max_attempts} attempts: {e!r}"
                    )
                    raise

                attempt = self._max_retries - retries_left + 1
                logger.warning(
                    f"{method} {url} failed ({e!r}), retrying... "
                    f"({attempt}/{self._max_retries})"
                )
                retries_left -= 1
                await self._sleep(self._retry_delay)
