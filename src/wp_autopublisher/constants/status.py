"""Status enums and state constants for the publishing pipeline.

This module contains all status enums and state definitions:
- Featured image lifecycle states
- Publication lifecycle states and the legal transition table
- Extraction strategies and recognized payload shapes

MODIFICATION GUIDE:
------------------
- Add new enum values at the END to maintain backwards compatibility
- PUBLICATION_TRANSITIONS is the single source of truth for legal moves
"""

from enum import Enum
from typing import Final


# =============================================================================
# FEATURED IMAGE STATUS
# =============================================================================

class ImageStatus(str, Enum):
    """Status of a featured image through its lifecycle.

    Workflow:
        PENDING -> SEARCHING -> FOUND -> UPLOADED
                       |          |
                       v          v
                     FAILED <-----+
    """

    PENDING = "pending"
    """Image record created, no search started."""

    SEARCHING = "searching"
    """Search or generation in progress."""

    FOUND = "found"
    """Temporary provider URL available (may expire)."""

    FAILED = "failed"
    """Search and generation failed (final)."""

    UPLOADED = "uploaded"
    """Re-hosted on the publishing target with a permanent URL."""

    def is_terminal(self) -> bool:
        """Whether no further transition is possible."""
        return self in (ImageStatus.FAILED, ImageStatus.UPLOADED)

    def has_url(self) -> bool:
        """Whether an image in this status must carry a URL."""
        return self in (ImageStatus.FOUND, ImageStatus.UPLOADED)


IMAGE_TRANSITIONS: Final[dict[ImageStatus, frozenset[ImageStatus]]] = {
    ImageStatus.PENDING: frozenset({ImageStatus.SEARCHING, ImageStatus.FOUND, ImageStatus.FAILED}),
    ImageStatus.SEARCHING: frozenset({ImageStatus.FOUND, ImageStatus.FAILED}),
    ImageStatus.FOUND: frozenset({ImageStatus.UPLOADED, ImageStatus.FAILED}),
    ImageStatus.FAILED: frozenset(),
    ImageStatus.UPLOADED: frozenset(),
}


# =============================================================================
# PUBLICATION STATUS
# =============================================================================

class PublicationStatus(str, Enum):
    """Status of one publish attempt of one article to one target.

    Workflow:
        SCHEDULED -> PENDING -> IN_PROGRESS -> COMPLETED
                        ^           |
                        |           v
                        +------- FAILED
        (any non-terminal) -> CANCELLED
    """

    PENDING = "pending"
    """Ready to be executed."""

    SCHEDULED = "scheduled"
    """Waiting for its scheduled time."""

    IN_PROGRESS = "in_progress"
    """External publish call issued."""

    COMPLETED = "completed"
    """Target confirmed the publish. Terminal."""

    FAILED = "failed"
    """Last attempt failed. Retryable while under the retry limit."""

    CANCELLED = "cancelled"
    """Cancelled by an operator. Terminal."""

    def is_terminal(self) -> bool:
        """Whether no further mutation is allowed."""
        return self in (PublicationStatus.COMPLETED, PublicationStatus.CANCELLED)


PUBLICATION_TRANSITIONS: Final[dict[PublicationStatus, frozenset[PublicationStatus]]] = {
    PublicationStatus.PENDING: frozenset({PublicationStatus.IN_PROGRESS, PublicationStatus.CANCELLED}),
    PublicationStatus.SCHEDULED: frozenset({PublicationStatus.PENDING, PublicationStatus.CANCELLED}),
    PublicationStatus.IN_PROGRESS: frozenset({
        PublicationStatus.COMPLETED,
        PublicationStatus.FAILED,
        PublicationStatus.CANCELLED,
    }),
    PublicationStatus.FAILED: frozenset({PublicationStatus.PENDING, PublicationStatus.CANCELLED}),
    PublicationStatus.COMPLETED: frozenset(),
    PublicationStatus.CANCELLED: frozenset(),
}


def can_transition(source: PublicationStatus, target: PublicationStatus) -> bool:
    """Check the publication transition table."""
    return target in PUBLICATION_TRANSITIONS[source]


# =============================================================================
# EXTRACTION
# =============================================================================

class ExtractionStrategy(str, Enum):
    """Which parsing tier recovered the article payload."""

    DIRECT = "direct"
    FENCED_BLOCK = "fenced_block"
    BRACE_SCAN = "brace_scan"
    QUOTED_JSON = "quoted_json"
    LINE_SCAN = "line_scan"
    HEURISTIC = "heuristic"
    """No JSON recovered. Low confidence."""


class PayloadShape(str, Enum):
    """Recognized JSON shapes of a model response."""

    ADVANCED = "advanced"
    SIMPLE = "simple"
    ALIASES = "aliases"
    TEXT = "text"
    """Heuristic text extraction, no JSON shape."""


class SeoSource(str, Enum):
    """Where meta description and tags were taken from."""

    ADVANCED = "advanced"
    LEGACY = "legacy"
    REGEX = "regex"
    """Label scan over raw text. Best effort, may be a false positive."""

    NONE = "none"


# =============================================================================
# IMAGE SOURCES
# =============================================================================

class ImageSource(str, Enum):
    """Which acquisition stage produced an image."""

    UNSPLASH = "unsplash"
    DALLE = "dalle"
    LOCAL = "local"


PUBLICATION_PLATFORMS: Final[tuple[str, ...]] = ("wordpress",)
WORDPRESS_POST_STATUSES: Final[tuple[str, ...]] = ("draft", "publish", "pending", "private")
