"""
endpoint_config.py
Holds the single base URL of the remote account service for the session.

A new URL is normalized locally, verified with the connectivity prober
and only then committed. Committing invalidates the prober's cached
status.
"""

import logging

from accounts import ConnectionStatus, normalize_endpoint
from config import DEFAULT_API_URL
from connectivity import ConnectivityProber

logger = logging.getLogger(__name__)


class EndpointConfigStore:

    def __init__(self, prober: ConnectivityProber, default_url: str = DEFAULT_API_URL):
        self._prober = prober
        self._endpoint = normalize_endpoint(default_url)

    def get_endpoint(self) -> str:
        return self._endpoint

    async def set_endpoint(self, url: str) -> ConnectionStatus:
        """
        Normalizes `url`, probes it and commits it if the probe comes back
        ONLINE. Returns the probe outcome; the committed value is left
        alone on OFFLINE.

        Raises:
            ConfigError: `url` is empty or whitespace. No request is made.
        """
        normalized = normalize_endpoint(url)

        status = await self._prober.probe(normalized)
        if status is not ConnectionStatus.ONLINE:
            logger.warning(f"Endpoint {normalized} is unreachable; keeping {self._endpoint}")
            return status

        self._commit(normalized)
        return status

    def _commit(self, url: str) -> None:
        previous = self._endpoint
        self._endpoint = url
        self._prober.invalidate()
        logger.info(f"API endpoint changed: {previous} -> {url}")
