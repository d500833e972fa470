"""Domain entities, aggregates and invariant errors."""

from .errors import (
    DomainError,
    InvalidStateTransition,
    InvariantViolation,
    MaxRetriesExceeded,
    ValidationError,
)
from .featured_image import FeaturedImage, ImageAltText, ImageFilename
from .publication import (
    Publication,
    PublicationCompleted,
    PublicationError,
    PublicationEvent,
    PublicationFailed,
    PublicationMetadata,
    PublicationStarted,
    PublicationTarget,
)

__all__ = [
    "DomainError",
    "InvalidStateTransition",
    "InvariantViolation",
    "MaxRetriesExceeded",
    "ValidationError",
    "FeaturedImage",
    "ImageAltText",
    "ImageFilename",
    "Publication",
    "PublicationCompleted",
    "PublicationError",
    "PublicationEvent",
    "PublicationFailed",
    "PublicationMetadata",
    "PublicationStarted",
    "PublicationTarget",
]
