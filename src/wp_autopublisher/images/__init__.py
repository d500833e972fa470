"""Featured image acquisition: search, AI generation and placeholder stages."""

from .base import (
    GeneratedImage,
    IImageGenerator,
    IImageSearchProvider,
    ImageDownloadError,
    ImageFile,
    ImageGenerationError,
    ImageRequest,
    ImageSearchResult,
    get_image_search_provider,
)
from .pipeline import DOWNLOAD_TIMEOUT_SECONDS, ImageAcquisitionPipeline
from .placeholder import PlaceholderImageSource
from .prompts import build_dalle_prompt, build_search_query, extract_keywords
from .unsplash import UnsplashImageProvider

__all__ = [
    "GeneratedImage",
    "IImageGenerator",
    "IImageSearchProvider",
    "ImageDownloadError",
    "ImageFile",
    "ImageGenerationError",
    "ImageRequest",
    "ImageSearchResult",
    "get_image_search_provider",
    "DOWNLOAD_TIMEOUT_SECONDS",
    "ImageAcquisitionPipeline",
    "PlaceholderImageSource",
    "build_dalle_prompt",
    "build_search_query",
    "extract_keywords",
    "UnsplashImageProvider",
]
