"""Shared constants."""

from .status import (
    IMAGE_TRANSITIONS,
    PUBLICATION_PLATFORMS,
    PUBLICATION_TRANSITIONS,
    WORDPRESS_POST_STATUSES,
    ExtractionStrategy,
    ImageSource,
    ImageStatus,
    PayloadShape,
    PublicationStatus,
    SeoSource,
    can_transition,
)

__all__ = [
    "IMAGE_TRANSITIONS",
    "PUBLICATION_PLATFORMS",
    "PUBLICATION_TRANSITIONS",
    "WORDPRESS_POST_STATUSES",
    "ExtractionStrategy",
    "ImageSource",
    "ImageStatus",
    "PayloadShape",
    "PublicationStatus",
    "SeoSource",
    "can_transition",
]
