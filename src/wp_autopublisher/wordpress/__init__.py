"""WordPress REST API adapter: transport, media library and posts."""

from .client import WordPressClient, looks_like_html, normalize_site_url
from .errors import WORDPRESS_ERROR_CODES, WordPressAPIError, error_code_for_status, is_retryable_status
from .media import MediaUploadPort, UploadedMedia, WordPressMediaService
from .publishing import (
    PublishingContent,
    PublishingResult,
    WordPressPublishingService,
    map_wordpress_status,
    prepare_post_data,
)

__all__ = [
    "WordPressClient",
    "looks_like_html",
    "normalize_site_url",
    "WORDPRESS_ERROR_CODES",
    "WordPressAPIError",
    "error_code_for_status",
    "is_retryable_status",
    "MediaUploadPort",
    "UploadedMedia",
    "WordPressMediaService",
    "PublishingContent",
    "PublishingResult",
    "WordPressPublishingService",
    "map_wordpress_status",
    "prepare_post_data",
]
