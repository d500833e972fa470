"""Interfaces and value types for featured image acquisition.

Defines the contracts every image stage implements so the pipeline can
try a search provider, then a generator, then a placeholder.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from ..constants.status import ImageSource

PLACEHOLDER_WIDTHS = {"large": 1200, "medium": 800, "small": 600}


@dataclass
class ImageSearchResult:
    """Result from an image search.

    Attributes:
        id: Provider-specific image ID.
        url: URL to download the image.
        thumbnail_url: URL for thumbnail preview.
        width: Image width in pixels.
        height: Image height in pixels.
        description: Image description/alt text.
        photographer: Photographer name (for attribution).
        photographer_url: Link to photographer's profile.
        source: Provider name.
    """
    id: str
    url: str
    thumbnail_url: str
    width: int
    height: int
    description: str
    photographer: str
    photographer_url: str
    source: str


@dataclass(frozen=True)
class ImageRequest:
    """What the article needs an image for."""

    title: str
    content: str = ""
    style: str = "photo"
    size: str = "large"
    custom_prompt: str | None = None


@dataclass
class GeneratedImage:
    """A usable image URL from one acquisition stage.

    ``url`` is usually temporary (provider hosted, may expire) and must be
    re-hosted before it is considered durable.
    """

    url: str
    width: int
    height: int
    alt_text: str
    source: ImageSource
    author: str | None = None
    prompt: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def caption(self) -> str | None:
        """Attribution caption, when the source credits an author."""
        return f"Photo by {self.author}" if self.author else None


@dataclass
class ImageFile:
    """Downloaded image held in memory for upload."""

    content: bytes
    filename: str
    mime_type: str
    width: int | None = None
    height: int | None = None

    @property
    def size(self) -> int:
        return len(self.content)


class ImageDownloadError(Exception):
    """Image download failure with a stable code."""

    def __init__(self, message: str, code: str, is_retryable: bool = False):
        super().__init__(message)
        self.code = code
        self.is_retryable = is_retryable


class ImageGenerationError(Exception):
    """AI image generation failure."""

    def __init__(self, message: str, code: str = "GENERATION_FAILED", is_retryable: bool = False):
        super().__init__(message)
        self.code = code
        self.is_retryable = is_retryable


class IImageSearchProvider(ABC):
    """Abstract interface for free-image search providers."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name (e.g., 'unsplash')."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the provider is configured (API key present)."""
        pass

    @abstractmethod
    async def search(
        self,
        query: str,
        per_page: int = 5,
        orientation: str | None = None,
    ) -> list[ImageSearchResult]:
        """Search for images matching the query.

        Args:
            query: Search query string.
            per_page: Number of results to return.
            orientation: Image orientation filter ('landscape', 'portrait', 'squarish').

        Returns:
            List of ImageSearchResult objects, empty on failure.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections/clients."""
        pass

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()


class IImageGenerator(ABC):
    """Abstract interface for AI image generators."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        pass

    @abstractmethod
    def is_available(self) -> bool:
        pass

    @abstractmethod
    async def generate(self, request: ImageRequest) -> GeneratedImage:
        """Generate an image for the request.

        Raises:
            ImageGenerationError: If generation fails.
        """
        pass

    async def close(self) -> None:
        """Release provider resources."""
        return None


def get_image_search_provider(
    provider_name: str,
    api_key: str | None = None,
    timeout: float = 30.0,
) -> IImageSearchProvider:
    """Factory function to get an image search provider by name.

    Raises:
        ValueError: If provider name is not recognized.
    """
    from .unsplash import UnsplashImageProvider

    providers = {
        "unsplash": UnsplashImageProvider,
    }

    provider_name = provider_name.lower()
    if provider_name not in providers:
        available = ", ".join(providers.keys())
        raise ValueError(
            f"Unknown image provider: {provider_name}. "
            f"Available providers: {available}"
        )

    return providers[provider_name](api_key=api_key, timeout=timeout)
