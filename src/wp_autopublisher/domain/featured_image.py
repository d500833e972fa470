"""Featured image entity and its value objects.

One featured image exists per article. It moves through
pending -> searching -> found -> uploaded (or failed) and the URL is only
present while the image is found or uploaded.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from ..constants.status import IMAGE_TRANSITIONS, ImageStatus
from .errors import InvalidStateTransition, InvariantViolation, ValidationError

MAX_FILENAME_LENGTH = 255
MAX_ALT_TEXT_LENGTH = 250


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ImageFilename:
    """Sanitized filename safe for a media library."""

    value: str

    @classmethod
    def create(cls, raw: str) -> "ImageFilename":
        """Sanitize a raw filename.

        Illegal characters become underscores, runs of underscores are
        collapsed, edges are trimmed and ``.jpg`` is appended when there is
        no extension.

        Raises:
            ValidationError: If nothing usable remains.
        """
        if not raw or not raw.strip():
            raise ValidationError("Filename cannot be empty", field="filename")

        name = re.sub(r"[^a-zA-Z0-9._-]", "_", raw.strip())
        name = re.sub(r"_+", "_", name).strip("_")
        if not name or name == ".":
            raise ValidationError(f"Filename has no usable characters: {raw!r}", field="filename")

        if "." not in name:
            name = f"{name}.jpg"

        if len(name) > MAX_FILENAME_LENGTH:
            stem, _, ext = name.rpartition(".")
            name = f"{stem[:MAX_FILENAME_LENGTH - len(ext) - 1]}.{ext}"

        return cls(name)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ImageAltText:
    """Accessible alt text for an image."""

    value: str

    @classmethod
    def create(cls, raw: str) -> "ImageAltText":
        text = (raw or "").strip()
        if not text:
            raise ValidationError("Alt text cannot be empty", field="alt_text")
        if len(text) > MAX_ALT_TEXT_LENGTH:
            raise ValidationError(
                f"Alt text cannot exceed {MAX_ALT_TEXT_LENGTH} characters", field="alt_text"
            )
        return cls(text)

    def __str__(self) -> str:
        return self.value


@dataclass
class FeaturedImage:
    """Featured image of one article.

    Mutate only through the ``mark_as_*`` methods. Direct field assignment
    bypasses the status/URL invariant.
    """

    id: str
    article_id: str
    ai_prompt: str
    filename: ImageFilename
    alt_text: ImageAltText
    status: ImageStatus = ImageStatus.PENDING
    url: str | None = None
    media_id: int | None = None
    search_query: str | None = None
    error_message: str | None = None
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    @classmethod
    def create(
        cls,
        article_id: str,
        ai_prompt: str,
        filename: str,
        alt_text: str,
        image_id: str | None = None,
    ) -> "FeaturedImage":
        """Create a new pending image.

        Raises:
            ValidationError: If any field is invalid.
        """
        if not article_id or not article_id.strip():
            raise ValidationError("Article ID is required", field="article_id")
        if not ai_prompt or not ai_prompt.strip():
            raise ValidationError("AI prompt is required", field="ai_prompt")

        return cls(
            id=image_id or str(uuid.uuid4()),
            article_id=article_id.strip(),
            ai_prompt=ai_prompt.strip(),
            filename=ImageFilename.create(filename),
            alt_text=ImageAltText.create(alt_text),
        )

    @classmethod
    def reconstitute(
        cls,
        id: str,
        article_id: str,
        ai_prompt: str,
        filename: str,
        alt_text: str,
        status: str,
        url: str | None = None,
        media_id: int | None = None,
        search_query: str | None = None,
        error_message: str | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ) -> "FeaturedImage":
        """Rebuild an image from persisted state.

        Stored values are trusted as already sanitized, but the status/URL
        invariant is still checked.
        """
        image = cls(
            id=id,
            article_id=article_id,
            ai_prompt=ai_prompt,
            filename=ImageFilename(filename),
            alt_text=ImageAltText(alt_text),
            status=ImageStatus(status),
            url=url,
            media_id=media_id,
            search_query=search_query,
            error_message=error_message,
            created_at=created_at or _now(),
            updated_at=updated_at or _now(),
        )
        image._check_invariants()
        return image

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _move_to(self, target: ImageStatus) -> None:
        if target not in IMAGE_TRANSITIONS[self.status]:
            raise InvalidStateTransition("image", self.status.value, target.value)
        self.status = target
        self.updated_at = _now()

    def mark_as_searching(self, search_query: str) -> None:
        """Record the query and start searching."""
        self._move_to(ImageStatus.SEARCHING)
        self.search_query = search_query
        self.url = None
        self.error_message = None
        self._check_invariants()

    def mark_as_found(self, url: str) -> None:
        """Store the temporary provider URL."""
        if not url or not url.strip():
            raise ValidationError("Image URL cannot be empty", field="url")
        self._move_to(ImageStatus.FOUND)
        self.url = url.strip()
        self._check_invariants()

    def mark_as_uploaded(self, media_id: int, url: str) -> None:
        """Replace the temporary URL with the permanent target-hosted one."""
        if not url or not url.strip():
            raise ValidationError("Uploaded URL cannot be empty", field="url")
        self._move_to(ImageStatus.UPLOADED)
        self.media_id = media_id
        self.url = url.strip()
        self._check_invariants()

    def mark_as_failed(self, error_message: str) -> None:
        """Record the failure and drop any temporary URL."""
        self._move_to(ImageStatus.FAILED)
        self.error_message = error_message
        self.url = None
        self._check_invariants()

    def update_details(
        self,
        ai_prompt: str | None = None,
        filename: str | None = None,
        alt_text: str | None = None,
    ) -> None:
        if ai_prompt:
            self.ai_prompt = ai_prompt.strip()
        if filename:
            self.filename = ImageFilename.create(filename)
        if alt_text:
            self.alt_text = ImageAltText.create(alt_text)
        self.updated_at = _now()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_ready_for_upload(self) -> bool:
        return self.status == ImageStatus.FOUND and bool(self.url)

    def is_uploaded(self) -> bool:
        return self.status == ImageStatus.UPLOADED

    def _check_invariants(self) -> None:
        if self.status.has_url() != bool(self.url):
            raise InvariantViolation(
                f"Image {self.id}: url must be set iff status is found or uploaded "
                f"(status={self.status.value}, url={'set' if self.url else 'unset'})"
            )

    def to_dict(self) -> dict[str, Any]:
        """Serialize for storage and display."""
        return {
            "id": self.id,
            "article_id": self.article_id,
            "ai_prompt": self.ai_prompt,
            "filename": self.filename.value,
            "alt_text": self.alt_text.value,
            "status": self.status.value,
            "url": self.url,
            "media_id": self.media_id,
            "search_query": self.search_query,
            "error_message": self.error_message,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FeaturedImage":
        """Inverse of ``to_dict``."""
        fields = dict(data)
        for key in ("created_at", "updated_at"):
            if isinstance(fields.get(key), str):
                fields[key] = datetime.fromisoformat(fields[key])
        return cls.reconstitute(**fields)
