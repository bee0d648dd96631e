"""
Base class for components that read pages of the report site.
"""

from typing import Optional

import structlog

from .http_client import HttpClient

logger = structlog.get_logger(__name__)


class SiteReader:
    """
    Holds the HTTP client shared by navigators and parsers.

    Readers created without a client open their own one when used as an
    async context manager.
    """

    def __init__(self, http_client: Optional[HttpClient] = None):
        """
        Initialize reader.

        Args:
            http_client: Shared HTTP client (creates own if not provided)
        """
        self.http_client = http_client
        self._owns_client = http_client is None
        self.logger = logger.bind(reader=self.__class__.__name__)

    async def __aenter__(self):
        if self._owns_client:
            self.http_client = HttpClient()
            await self.http_client.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._owns_client and self.http_client:
            await self.http_client.__aexit__(exc_type, exc_val, exc_tb)
            self.http_client = None

    @property
    def client(self) -> HttpClient:
        if not self.http_client:
            raise RuntimeError("Reader not initialized. Use 'async with' context.")
        return self.http_client
