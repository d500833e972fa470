"""Placeholder image source that never fails."""

from __future__ import annotations

import time
from typing import Callable

from ..constants.status import ImageSource
from .base import PLACEHOLDER_WIDTHS, GeneratedImage, ImageRequest

PLACEHOLDER_BASE_URL = "https://picsum.photos"
ASPECT_RATIO = 0.6


class PlaceholderImageSource:
    """Builds a picsum.photos URL sized for the request.

    Args:
        clock: Returns milliseconds, used as the cache-busting seed.
    """

    provider_name = "placeholder"

    def __init__(self, clock: Callable[[], int] | None = None):
        self._clock = clock or (lambda: int(time.time() * 1000))

    def generate(self, request: ImageRequest) -> GeneratedImage:
        width = PLACEHOLDER_WIDTHS.get(request.size, PLACEHOLDER_WIDTHS["small"])
        height = int(width * ASPECT_RATIO)
        return GeneratedImage(
            url=f"{PLACEHOLDER_BASE_URL}/{width}/{height}?random={self._clock()}",
            width=width,
            height=height,
            alt_text=request.title.strip()[:250] or "Featured image",
            source=ImageSource.LOCAL,
        )
