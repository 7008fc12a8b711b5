"""
connectivity.py
Liveness checks against the remote account service.

The prober never raises: a transport error, a timeout, a non-2xx status
or an unreadable body all end up as OFFLINE. The most recent probe
always wins.
"""

import logging
from typing import Optional

import httpx

from accounts import AccountServiceConnector, ConnectionStatus, HEALTH_PATH

logger = logging.getLogger(__name__)


class ConnectivityProber:
    """Issues one GET to `/health` per probe and remembers the outcome."""

    def __init__(self, connector: AccountServiceConnector):
        self._connector = connector
        self._status = ConnectionStatus.UNKNOWN
        self._platform_label: Optional[str] = None
        self._last_error: Optional[str] = None
        self._last_url: Optional[str] = None

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    @property
    def platform_label(self) -> Optional[str]:
        """Label reported by the last successful probe, display only."""
        return self._platform_label

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def last_url(self) -> Optional[str]:
        return self._last_url

    def invalidate(self) -> None:
        """Forgets the cached status so the next probe starts from scratch."""
        self._status = ConnectionStatus.UNKNOWN
        self._platform_label = None
        self._last_error = None
        self._last_url = None

    async def probe(self, url: str) -> ConnectionStatus:
        self._last_url = url
        try:
            response = await self._connector.request("GET", url, HEALTH_PATH)
            # Raise HTTPStatusError for non-2xx responses
            response.raise_for_status()
            self._platform_label = self._read_label(response)
        except Exception as e:
            # Any failure, including a closed client, reads as offline.
            self._status = ConnectionStatus.OFFLINE
            self._platform_label = None
            self._last_error = str(e) or "Could not connect to server"
            logger.warning(f"Health check failed for {url}: {self._last_error}")
            return self._status

        self._status = ConnectionStatus.ONLINE
        self._last_error = None
        logger.info(f"Connected to {self._platform_label or 'trading'} server at {url}")
        return self._status

    @staticmethod
    def _read_label(response: httpx.Response) -> Optional[str]:
        if not response.content:
            return None
        try:
            data = response.json()
        except ValueError:
            return None
        if isinstance(data, dict) and isinstance(data.get("platform"), str):
            return data["platform"]
        return None
