"""HTTP client for cover-image lookups with resilience patterns."""
import time
import random
import requests
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

IMAGE_LINK_PREFERENCE = ("extraLarge", "large", "medium", "thumbnail")

# Statuses worth another attempt; anything else non-200 is final
RETRYABLE_STATUS = {429, 500, 502, 503, 504}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def extract_cover_url(response_json: Any) -> Optional[str]:
    """
    Pick the best cover image from a volumes search response.

    Unexpected shapes (nulls, lists, strings) are treated as no cover.

    Args:
        response_json: Decoded Google Books API response (may be None)

    Returns:
        HTTPS image URL or None if the first hit has no thumbnail
    """
    items = _as_dict(response_json).get("items")
    if not isinstance(items, list) or not items:
        return None

    volume_info = _as_dict(_as_dict(items[0]).get("volumeInfo"))
    image_links = _as_dict(volume_info.get("imageLinks"))
    if not image_links.get("thumbnail"):
        return None

    for size in IMAGE_LINK_PREFERENCE:
        url = image_links.get(size)
        if isinstance(url, str) and url:
            return url.replace("http://", "https://")
    return None


def cover_query(title: str, author: str) -> str:
    return f"{title} {author}".strip()


class CoverClient:
    """Best-effort cover lookup with timeouts, retries, and backoff."""

    BASE_URL = "https://www.googleapis.com/books/v1/volumes"

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: int = 10,
        max_retries: int = 3,
        base_backoff: float = 1.0
    ):
        """
        Initialize cover lookup client.

        Args:
            api_key: Optional API key (increases rate limits)
            timeout: Request timeout in seconds
            max_retries: Maximum number of attempts per lookup
            base_backoff: Base delay for exponential backoff
        """
        self.api_key = api_key
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_backoff = base_backoff
        self.session = requests.Session()

    def lookup_cover(self, title: str, author: str) -> Optional[str]:
        """
        Find a cover image URL for a title/author pair.

        Never raises for API problems; a failed lookup yields None.
        """
        params = {"q": cover_query(title, author), "maxResults": 1}
        if self.api_key:
            params["key"] = self.api_key

        cover = extract_cover_url(self._fetch(params))
        if cover is None:
            logger.info(f"No cover found for {title!r}")
        return cover

    def _fetch(self, params: Dict[str, Any]) -> Optional[Any]:
        """GET the volumes endpoint, retrying throttling and server errors."""
        for attempt in range(1, self.max_retries + 1):
            try:
                response = self.session.get(self.BASE_URL, params=params, timeout=self.timeout)
            except requests.exceptions.RequestException as e:
                logger.warning(f"Cover lookup failed on attempt {attempt}: {e}")
            else:
                if response.status_code == 200:
                    try:
                        return response.json()
                    except ValueError as e:
                        logger.warning(f"Invalid JSON from cover lookup: {e}")
                        return None
                if response.status_code not in RETRYABLE_STATUS:
                    logger.warning(f"Cover lookup error ({response.status_code}) for {params['q']!r}")
                    return None
                logger.warning(f"Cover lookup status {response.status_code} on attempt {attempt}")

            if attempt < self.max_retries:
                self._backoff(attempt)

        logger.warning(f"Giving up on {params['q']!r} after {self.max_retries} attempts")
        return None

    def _backoff(self, attempt: int):
        # base * 2^(attempt-1) plus up to the same again in jitter
        delay = self.base_backoff * (2 ** (attempt - 1))
        time.sleep(delay + random.uniform(0, delay))

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
