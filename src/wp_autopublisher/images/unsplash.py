"""Unsplash Image Provider.

Implements IImageSearchProvider for the Unsplash API.
API Reference: https://unsplash.com/documentation#search-photos

Rate Limits: 50 requests/hour (demo), 5,000 requests/hour (production)
"""

from __future__ import annotations

import asyncio
import logging
import os

import httpx

from .base import IImageSearchProvider, ImageSearchResult

logger = logging.getLogger("ai_calls")


class UnsplashImageProvider(IImageSearchProvider):
    """Unsplash photo search provider."""

    UNSPLASH_API_URL = "https://api.unsplash.com"

    # Retry configuration
    MAX_RETRIES = 3
    RETRY_BASE_DELAY = 2.0
    RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

    def __init__(
        self,
        api_key: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        """Initialize Unsplash provider.

        Args:
            api_key: Unsplash access key. If None, reads from UNSPLASH_ACCESS_KEY env var.
            http_client: Optional pre-built client.
            timeout: Request timeout in seconds.
        """
        self.api_key = api_key or os.environ.get("UNSPLASH_ACCESS_KEY")
        self._client = http_client
        self._owns_client = http_client is None
        self._timeout = timeout

    @property
    def provider_name(self) -> str:
        """Return provider name."""
        return "unsplash"

    def is_available(self) -> bool:
        return bool(self.api_key)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            if not self.api_key:
                raise ValueError(
                    "Unsplash access key not found. Set UNSPLASH_ACCESS_KEY environment variable."
                )
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _request_with_retry(
        self,
        url: str,
        params: dict,
    ) -> dict | None:
        """Make API request with retry and exponential backoff."""
        client = await self._get_client()
        headers = {"Authorization": f"Client-ID {self.api_key}", "Accept-Version": "v1"}

        for attempt in range(self.MAX_RETRIES):
            try:
                response = await client.get(url, params=params, headers=headers)

                if response.status_code == 200:
                    return response.json()

                if response.status_code in self.RETRYABLE_STATUS_CODES and attempt < self.MAX_RETRIES - 1:
                    delay = self.RETRY_BASE_DELAY * (2 ** attempt)
                    logger.debug(f"Unsplash {response.status_code}, retrying in {delay:.0f}s")
                    await asyncio.sleep(delay)
                    continue

                logger.warning(f"Unsplash API error: {response.status_code}")
                return None

            except httpx.HTTPError as e:
                if attempt < self.MAX_RETRIES - 1:
                    delay = self.RETRY_BASE_DELAY * (2 ** attempt)
                    await asyncio.sleep(delay)
                    continue
                logger.warning(f"Unsplash HTTP error: {e}")
                return None

        return None

    async def search(
        self,
        query: str,
        per_page: int = 5,
        orientation: str | None = None,
    ) -> list[ImageSearchResult]:
        """Search for photos on Unsplash.

        Args:
            query: Search query string.
            per_page: Number of results (max 30).
            orientation: Filter by orientation ('landscape', 'portrait', 'squarish').

        Returns:
            List of ImageSearchResult objects.
        """
        params = {
            "query": query,
            "per_page": min(per_page, 30),
            "page": 1,
        }

        if orientation:
            params["orientation"] = orientation

        url = f"{self.UNSPLASH_API_URL}/search/photos"
        result = await self._request_with_retry(url, params)

        if not result or "results" not in result:
            return []

        results = []
        for photo in result["results"]:
            urls = photo.get("urls", {})
            user = photo.get("user", {})
            image_url = urls.get("regular") or urls.get("full") or urls.get("raw", "")
            if not image_url:
                continue
            results.append(ImageSearchResult(
                id=str(photo.get("id", "")),
                url=image_url,
                thumbnail_url=urls.get("thumb", ""),
                width=photo.get("width", 0),
                height=photo.get("height", 0),
                description=photo.get("alt_description") or photo.get("description") or "",
                photographer=user.get("name", "Unknown"),
                photographer_url=(user.get("links") or {}).get("html", ""),
                source="unsplash",
            ))

        logger.info(f"IMAGE_SEARCH | provider:unsplash | query:{query} | results:{len(results)}")
        return results
