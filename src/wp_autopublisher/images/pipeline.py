"""Featured image acquisition: search, generate, or fall back to a placeholder.

Stages are tried in order and each one either yields a usable image or
falls through. The placeholder stage cannot fail, so acquisition only
fails when the placeholder is disabled.

Downloads are bounded by a fixed ceiling; a slow or hanging host yields a
typed DOWNLOAD_TIMEOUT failure instead of blocking the flow.
"""

from __future__ import annotations

import asyncio
import logging
import time
from io import BytesIO
from typing import Any, Awaitable, Callable

import httpx
from PIL import Image, UnidentifiedImageError

from ..constants.status import ImageSource
from ..core.types import Failure, Result, Success, failure
from .base import (
    GeneratedImage,
    IImageGenerator,
    IImageSearchProvider,
    ImageDownloadError,
    ImageFile,
    ImageGenerationError,
    ImageRequest,
    get_image_search_provider,
)
from .placeholder import PlaceholderImageSource
from .prompts import build_search_query

logger = logging.getLogger("ai_calls")

# Type for AI event callback
AIEventCallback = Callable[[dict[str, Any]], Awaitable[None]] | None

DOWNLOAD_TIMEOUT_SECONDS = 30.0
USER_AGENT = "wp-autopublisher/0.1 (+featured-image-fetch)"
SEARCH_RESULTS = 5
SEARCH_ORIENTATION = "landscape"
SEARCH_SOURCES = {"unsplash": ImageSource.UNSPLASH}


def format_file_size(size_bytes: int) -> str:
    """Format file size for display.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Formatted string (e.g., "245 KB").
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes // 1024} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.1f} MB"


class ImageAcquisitionPipeline:
    """Acquires and downloads featured images.

    Usage:
        pipeline = ImageAcquisitionPipeline(search_provider, generator)
        result = await pipeline.acquire(ImageRequest(title="..."))
        if result.is_success():
            file_result = await pipeline.download(result.value.url)
    """

    def __init__(
        self,
        search_provider: IImageSearchProvider | None = None,
        generator: IImageGenerator | None = None,
        placeholder: PlaceholderImageSource | None = None,
        placeholder_enabled: bool = True,
        http_client: httpx.AsyncClient | None = None,
        download_timeout: float = DOWNLOAD_TIMEOUT_SECONDS,
        event_callback: AIEventCallback = None,
    ):
        self.search_provider = search_provider
        self.generator = generator
        self.placeholder = placeholder or PlaceholderImageSource()
        self.placeholder_enabled = placeholder_enabled
        self.download_timeout = download_timeout
        self._http_client = http_client
        self._owns_client = http_client is None
        self._event_callback = event_callback

    @classmethod
    def from_config(cls, config: Any, event_callback: AIEventCallback = None) -> "ImageAcquisitionPipeline":
        """Build the pipeline from enabled image providers in a ProviderConfig."""
        from ..providers.image import DalleImageGenerator

        search_provider = None
        generator = None
        placeholder_enabled = False

        for _name, provider_config in config.get_enabled_image_providers():
            if provider_config.type in SEARCH_SOURCES and search_provider is None:
                search_provider = get_image_search_provider(
                    provider_config.type,
                    api_key=provider_config.get_api_key(),
                    timeout=float(provider_config.timeout),
                )
            elif provider_config.type == "dalle" and generator is None:
                generator = DalleImageGenerator(provider_config)
            elif provider_config.type == "placeholder":
                placeholder_enabled = True

        return cls(
            search_provider=search_provider,
            generator=generator,
            placeholder_enabled=placeholder_enabled,
            event_callback=event_callback,
        )

    async def _emit_event(self, event: dict[str, Any]) -> None:
        """Emit an event if callback is set."""
        if self._event_callback:
            await self._event_callback(event)

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(follow_redirects=True)
        return self._http_client

    async def close(self) -> None:
        """Close owned HTTP client and stage providers."""
        if self._http_client and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None
        if self.search_provider:
            await self.search_provider.close()
        if self.generator:
            await self.generator.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # ------------------------------------------------------------------
    # Acquisition
    # ------------------------------------------------------------------

    async def acquire(self, request: ImageRequest) -> Result[GeneratedImage]:
        """Find or create an image for the request.

        Returns:
            Success with the first usable image, or Failure when every
            enabled stage failed.
        """
        attempts: list[str] = []

        image = await self._try_search(request, attempts)
        if image is None:
            image = await self._try_generate(request, attempts)
        if image is None and self.placeholder_enabled:
            image = self.placeholder.generate(request)
            attempts.append("placeholder:ok")

        if image is None:
            logger.warning(f"IMAGE_ACQUIRE | failed | attempts:{attempts}")
            return failure("IMAGE_UNAVAILABLE", "No image stage produced an image", attempts=attempts)

        logger.info(f"IMAGE_ACQUIRE | source:{image.source.value} | url:{image.url[:80]} | attempts:{attempts}")
        await self._emit_event({
            "type": "image_acquired",
            "source": image.source.value,
            "url": image.url,
            "attempts": attempts,
        })
        return Success(image)

    async def _try_search(self, request: ImageRequest, attempts: list[str]) -> GeneratedImage | None:
        if self.search_provider is None or not self.search_provider.is_available():
            return None

        query = build_search_query(request.title)
        try:
            results = await self.search_provider.search(
                query, per_page=SEARCH_RESULTS, orientation=SEARCH_ORIENTATION
            )
        except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as e:
            # Malformed provider payloads fall through to the next stage
            logger.warning(f"Image search failed ({self.search_provider.provider_name}): {e}")
            attempts.append(f"{self.search_provider.provider_name}:error")
            return None

        if not results:
            attempts.append(f"{self.search_provider.provider_name}:no_results")
            return None

        best = results[0]
        attempts.append(f"{self.search_provider.provider_name}:ok")
        return GeneratedImage(
            url=best.url,
            width=best.width,
            height=best.height,
            alt_text=(best.description or request.title).strip()[:250],
            source=SEARCH_SOURCES.get(best.source, ImageSource.UNSPLASH),
            author=best.photographer or None,
            prompt=query,
            metadata={"id": best.id, "photographer_url": best.photographer_url},
        )

    async def _try_generate(self, request: ImageRequest, attempts: list[str]) -> GeneratedImage | None:
        if self.generator is None or not self.generator.is_available():
            return None

        try:
            image = await self.generator.generate(request)
        except ImageGenerationError as e:
            logger.warning(f"Image generation failed ({self.generator.provider_name}): {e.code} | {e}")
            attempts.append(f"{self.generator.provider_name}:{e.code}")
            return None

        attempts.append(f"{self.generator.provider_name}:ok")
        return image

    # ------------------------------------------------------------------
    # Download
    # ------------------------------------------------------------------

    async def download(self, url: str, filename: str | None = None) -> Result[ImageFile]:
        """Fetch an image into memory.

        Args:
            url: Image URL (often temporary).
            filename: Target filename; derived from the format if omitted.

        Returns:
            Success with the in-memory file, or Failure with code
            DOWNLOAD_TIMEOUT, DOWNLOAD_FAILED or INVALID_IMAGE.
        """
        try:
            image_file = await self._download(url, filename)
        except ImageDownloadError as e:
            logger.warning(f"IMAGE_DOWNLOAD | failed | code:{e.code} | url:{url[:80]} | {e}")
            return Failure(str(e), {"code": e.code, "is_retryable": e.is_retryable, "url": url})

        logger.info(
            f"IMAGE_DOWNLOAD | ok | {image_file.filename} | {image_file.mime_type} | "
            f"{image_file.width}x{image_file.height} | {format_file_size(image_file.size)}"
        )
        return Success(image_file)

    async def _download(self, url: str, filename: str | None) -> ImageFile:
        client = await self._get_http_client()
        ceiling = self.download_timeout

        try:
            response = await asyncio.wait_for(
                client.get(url, headers={"User-Agent": USER_AGENT}, follow_redirects=True, timeout=ceiling),
                timeout=ceiling,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise ImageDownloadError(
                f"Image download timed out after {ceiling:g} seconds",
                code="DOWNLOAD_TIMEOUT",
                is_retryable=True,
            ) from e
        except httpx.HTTPError as e:
            raise ImageDownloadError(f"Image download error: {e}", code="DOWNLOAD_FAILED", is_retryable=True) from e

        if response.status_code != 200:
            raise ImageDownloadError(
                f"Failed to download image: HTTP {response.status_code}",
                code="DOWNLOAD_FAILED",
                is_retryable=response.status_code >= 500 or response.status_code == 429,
            )

        content = response.content
        try:
            with Image.open(BytesIO(content)) as img:
                width, height = img.size
                image_format = (img.format or "JPEG").upper()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            raise ImageDownloadError(
                f"Downloaded content is not a readable image ({len(content)} bytes)",
                code="INVALID_IMAGE",
            ) from e

        mime_type = Image.MIME.get(image_format) or response.headers.get("content-type", "image/jpeg").split(";")[0]
        extension = "jpg" if image_format == "JPEG" else image_format.lower()

        return ImageFile(
            content=content,
            filename=filename or f"featured-{int(time.time() * 1000)}.{extension}",
            mime_type=mime_type,
            width=width,
            height=height,
        )
