"""
Account Service Connection Manager
----------------------------------

This file contains the `AccountServiceConnector` class, which has the
Single Responsibility of owning the HTTP client used to reach the
remote account service and its lifecycle.

The base URL is not fixed here: callers pass the endpoint that is
committed at the moment of the call, so a configuration change takes
effect on the next request.
"""

import asyncio
import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0


class AccountServiceConnector:
    """
    Handles the lifecycle of the shared `httpx.AsyncClient`.
    No retries: one request per call, bounded by the client timeout.
    """

    def __init__(self,
                 timeout: float = DEFAULT_TIMEOUT_SECONDS,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self._timeout = timeout
        self._lock = asyncio.Lock()
        # Use a single, persistent async client
        self._http_client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )
        self._closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    @staticmethod
    def url_for(base_url: str, path: str) -> str:
        return f"{base_url.rstrip('/')}/{path.lstrip('/')}"

    async def request(self,
                      method: str,
                      base_url: str,
                      path: str,
                      **kwargs: Any) -> httpx.Response:
        """
        Issues one request. Transport failures and timeouts propagate as
        `httpx.HTTPError`; status handling is left to the caller.
        """
        url = self.url_for(base_url, path)
        logger.debug(f"{method} {url}")
        return await self._http_client.request(method, url, **kwargs)

    async def close(self) -> None:
        """Closes the underlying HTTP client."""
        async with self._lock:
            if self._closed:
                return
            await self._http_client.aclose()
            self._closed = True
            logger.info("Account service connector closed.")
