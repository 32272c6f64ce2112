"""Async HTTP client for batched cover lookups."""
import asyncio
import httpx
from typing import List, Optional, Tuple
import logging

from bookseed.client import cover_query, extract_cover_url

logger = logging.getLogger(__name__)


class AsyncCoverClient:
    """Async client for looking up many covers in small batches."""

    BASE_URL = "https://www.googleapis.com/books/v1/volumes"

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: int = 10,
        max_concurrent: int = 5,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize async client.

        Args:
            api_key: Optional API key
            timeout: Request timeout
            max_concurrent: Maximum concurrent requests
            transport: Optional httpx transport (used by tests)
        """
        self.api_key = api_key
        self.timeout = timeout
        self.semaphore = asyncio.Semaphore(max_concurrent)

        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def lookup_cover(self, title: str, author: str) -> Optional[str]:
        """
        Find a cover image URL asynchronously.

        Returns:
            Image URL or None on any failure
        """
        params = {"q": cover_query(title, author), "maxResults": 1}
        if self.api_key:
            params["key"] = self.api_key

        async with self.semaphore:
            try:
                response = await self.client.get(self.BASE_URL, params=params)

                if response.status_code == 200:
                    return extract_cover_url(response.json())

                logger.warning(f"Google Books API error for {title}: {response.status_code}")
                return None

            except (httpx.HTTPError, ValueError) as e:
                logger.warning(f"Error fetching cover for {title}: {e}")
                return None

    async def lookup_batch(
        self,
        pairs: List[Tuple[str, str]]
    ) -> List[Optional[str]]:
        """
        Look up a batch of (title, author) pairs in parallel.

        Returns:
            Cover URLs aligned with ``pairs``
        """
        tasks = [self.lookup_cover(title, author) for title, author in pairs]
        return await asyncio.gather(*tasks)

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
