"""Media upload: re-host an image on the publishing target.

A successful upload is the only way an ephemeral provider URL becomes a
permanent, target-hosted reference.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Any

import httpx

from ..core.types import Result, Success
from ..images.base import ImageFile
from .client import WordPressClient
from .errors import WordPressAPIError

_logger = logging.getLogger("wordpress_api")


@dataclass
class UploadedMedia:
    """Permanent reference to an uploaded media item."""

    id: int
    url: str
    title: str
    alt_text: str
    media_type: str
    mime_type: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class MediaUploadPort(ABC):
    """Uploads binary assets to a publishing target."""

    @abstractmethod
    async def upload_media(
        self,
        target: Any,
        file: ImageFile,
        title: str | None = None,
        alt_text: str | None = None,
        caption: str | None = None,
    ) -> Result[UploadedMedia]:
        """Upload a file and return its permanent id and URL."""
        pass


def _media_id(data: Any) -> int | None:
    """Positive integer id from a media body, or None when absent or malformed."""
    if not isinstance(data, dict):
        return None
    raw = data.get("id")
    if isinstance(raw, bool):
        return None
    try:
        media_id = int(raw)
    except (TypeError, ValueError):
        return None
    return media_id if media_id > 0 else None


def _media_from_json(
    data: dict[str, Any], media_id: int, fallback_title: str, fallback_alt: str, fallback_mime: str
) -> UploadedMedia:
    title = data.get("title")
    rendered = title.get("rendered") if isinstance(title, dict) else title
    return UploadedMedia(
        id=media_id,
        url=data.get("source_url") or "",
        title=rendered or fallback_title,
        alt_text=data.get("alt_text") or fallback_alt,
        media_type=data.get("media_type") or "image",
        mime_type=data.get("mime_type") or fallback_mime,
    )


class WordPressMediaService(MediaUploadPort):
    """Media library operations through ``/wp-json/wp/v2/media``."""

    def __init__(self, http_client: httpx.AsyncClient | None = None):
        self._http_client = http_client

    def _client(self, target: Any) -> WordPressClient:
        return WordPressClient.from_target(target, http_client=self._http_client)

    async def upload_media(
        self,
        target: Any,
        file: ImageFile,
        title: str | None = None,
        alt_text: str | None = None,
        caption: str | None = None,
    ) -> Result[UploadedMedia]:
        """Upload a file to the WordPress media library.

        Args:
            target: PublicationTarget carrying site URL and credentials.
            file: In-memory image.
            title: Media title.
            alt_text: Alternative text.
            caption: Caption (usually photographer attribution).

        Returns:
            Success with the uploaded media, or Failure coded
            NETWORK_ERROR, AUTHENTICATION_FAILED, PLATFORM_ERROR,
            MALFORMED_RESPONSE, ...
        """
        form: dict[str, Any] = {}
        if title:
            form["title"] = title
        if alt_text:
            form["alt_text"] = alt_text
        if caption:
            form["caption"] = caption

        files = {"file": (file.filename, file.content, file.mime_type)}

        async with self._client(target) as client:
            try:
                data = await client.request("POST", "wp/v2/media", data=form, files=files)
            except WordPressAPIError as e:
                _logger.warning(f"MEDIA_UPLOAD | failed | {file.filename} | {e.code} | {e}")
                return e.to_failure(filename=file.filename)

        media_id = _media_id(data)
        if media_id is None or not data.get("source_url"):
            _logger.error(f"MEDIA_UPLOAD | malformed | {file.filename} | body: {str(data)[:200]}")
            return WordPressAPIError(
                "Media upload response is missing id or source_url", code="MALFORMED_RESPONSE"
            ).to_failure(filename=file.filename)

        media = _media_from_json(data, media_id, title or "Uploaded Image", alt_text or "", file.mime_type)
        _logger.info(f"MEDIA_UPLOAD | ok | id:{media.id} | {media.url}")
        return Success(media)

    async def get_media(self, target: Any, media_id: int) -> Result[UploadedMedia]:
        """Fetch a media item by id."""
        async with self._client(target) as client:
            try:
                data = await client.request("GET", f"wp/v2/media/{media_id}")
            except WordPressAPIError as e:
                return e.to_failure(media_id=media_id)

        parsed_id = _media_id(data)
        if parsed_id is None:
            return WordPressAPIError(
                "Media response is missing a valid id", code="MALFORMED_RESPONSE"
            ).to_failure(media_id=media_id)
        return Success(_media_from_json(data, parsed_id, "Media", "", "unknown"))

    async def delete_media(self, target: Any, media_id: int, force: bool = True) -> Result[None]:
        """Delete a media item; ``force`` bypasses the trash."""
        params = {"force": "true"} if force else None
        async with self._client(target) as client:
            try:
                await client.request("DELETE", f"wp/v2/media/{media_id}", params=params)
            except WordPressAPIError as e:
                return e.to_failure(media_id=media_id)
        _logger.info(f"MEDIA_DELETE | id:{media_id} | force:{force}")
        return Success(None)
