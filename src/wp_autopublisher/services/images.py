"""Featured image use cases.

``SearchAndGenerateImage`` drives a FeaturedImage from pending to found
(or failed). ``UploadImageToWordPress`` re-hosts a found image on the
target, replacing the temporary provider URL with a permanent one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ..constants.status import ImageStatus
from ..core.types import Failure, Result, Success, failure
from ..domain.errors import ValidationError
from ..domain.featured_image import FeaturedImage
from ..images.base import ImageRequest
from ..images.pipeline import ImageAcquisitionPipeline
from ..images.prompts import build_search_query
from ..repositories.base import FeaturedImageRepository
from ..wordpress.media import MediaUploadPort

_logger = logging.getLogger("publishing")

MIN_PROMPT_LENGTH = 10
MAX_PROMPT_LENGTH = 500


class SearchAndGenerateImage:
    """Find or generate the featured image for an article."""

    def __init__(self, image_repository: FeaturedImageRepository, pipeline: ImageAcquisitionPipeline):
        self.image_repository = image_repository
        self.pipeline = pipeline

    @staticmethod
    def _validate(article_id: str, ai_prompt: str, filename: str, alt_text: str) -> str | None:
        if not article_id or not article_id.strip():
            return "Article ID is required"
        prompt = (ai_prompt or "").strip()
        if len(prompt) < MIN_PROMPT_LENGTH:
            return f"AI prompt must be at least {MIN_PROMPT_LENGTH} characters"
        if len(prompt) > MAX_PROMPT_LENGTH:
            return f"AI prompt must be at most {MAX_PROMPT_LENGTH} characters"
        if not filename or not filename.strip():
            return "Filename is required"
        if not alt_text or not alt_text.strip():
            return "Alt text is required"
        return None

    async def execute(
        self,
        article_id: str,
        ai_prompt: str,
        filename: str,
        alt_text: str,
        force_regenerate: bool = False,
        title: str | None = None,
        content: str = "",
    ) -> Result[FeaturedImage]:
        """Create the image record and run acquisition.

        Args:
            article_id: Owning article.
            ai_prompt: Prompt used for generation (10-500 chars).
            filename: Desired upload filename.
            alt_text: Alternative text.
            force_regenerate: Replace an existing image for the article. A
                failed image is final and is always replaced.
            title: Article title for the search query; defaults to the prompt.
            content: Article content, for generated-prompt themes.

        Returns:
            Success with the image in ``found`` state, or Failure. An
            acquisition failure is persisted as a ``failed`` image.
        """
        error = self._validate(article_id, ai_prompt, filename, alt_text)
        if error:
            return failure("VALIDATION_ERROR", error)

        existing = self.image_repository.find_by_article_id(article_id)
        if isinstance(existing, Failure):
            return existing
        if existing.value is not None:
            if not force_regenerate and existing.value.status != ImageStatus.FAILED:
                return failure(
                    "ALREADY_EXISTS",
                    f"Article {article_id} already has a featured image ({existing.value.status.value})",
                    image_id=existing.value.id,
                )
            deleted = self.image_repository.delete(existing.value.id)
            if isinstance(deleted, Failure):
                return deleted
            _logger.info(f"IMAGE | replaced | article:{article_id} | old:{existing.value.id}")

        try:
            image = FeaturedImage.create(article_id, ai_prompt, filename, alt_text)
        except ValidationError as e:
            return failure("VALIDATION_ERROR", str(e), field=e.field)

        saved = self.image_repository.save(image)
        if isinstance(saved, Failure):
            return saved

        search_title = title or ai_prompt
        image.mark_as_searching(build_search_query(search_title))
        updated = self.image_repository.update(image)
        if isinstance(updated, Failure):
            return updated

        acquired = await self.pipeline.acquire(
            ImageRequest(title=search_title, content=content, custom_prompt=ai_prompt)
        )
        if isinstance(acquired, Failure):
            image.mark_as_failed(acquired.error)
            self.image_repository.update(image)
            _logger.warning(f"IMAGE | failed | article:{article_id} | {acquired.error}")
            return acquired

        image.mark_as_found(acquired.value.url)
        updated = self.image_repository.update(image)
        if isinstance(updated, Failure):
            return updated

        _logger.info(f"IMAGE | found | article:{article_id} | source:{acquired.value.source.value}")
        return Success(image)


@dataclass
class ImageUploadOutcome:
    """Result of re-hosting an image."""

    image_id: str
    original_url: str
    wordpress_url: str
    media_id: int
    persisted: bool = True


class UploadImageToWordPress:
    """Download a found image and upload it to the WordPress media library."""

    def __init__(
        self,
        image_repository: FeaturedImageRepository,
        pipeline: ImageAcquisitionPipeline,
        media_port: MediaUploadPort,
    ):
        self.image_repository = image_repository
        self.pipeline = pipeline
        self.media_port = media_port

    async def execute(
        self,
        target: Any,
        image_id: str | None = None,
        article_id: str | None = None,
    ) -> Result[ImageUploadOutcome]:
        """Upload by image id, or by article id when no image id is given."""
        if image_id:
            found = self.image_repository.find_by_id(image_id)
        elif article_id:
            found = self.image_repository.find_by_article_id(article_id)
        else:
            return failure("VALIDATION_ERROR", "Either image_id or article_id is required")
        if isinstance(found, Failure):
            return found

        image = found.value
        if image is None:
            return failure("NOT_FOUND", "Featured image not found")
        if image.status == ImageStatus.UPLOADED:
            return failure("ALREADY_UPLOADED", "Image already uploaded to WordPress", media_id=image.media_id)
        if not image.is_ready_for_upload() or not image.url:
            return failure("IMAGE_NOT_READY", f"No image URL available (status {image.status.value})")

        original_url = image.url
        downloaded = await self.pipeline.download(original_url, image.filename.value)
        if isinstance(downloaded, Failure):
            return downloaded

        alt_text = image.alt_text.value
        uploaded = await self.media_port.upload_media(
            target, downloaded.value, title=alt_text, alt_text=alt_text, caption=alt_text
        )
        if isinstance(uploaded, Failure):
            _logger.warning(f"IMAGE | upload failed | image:{image.id} | {uploaded.code} | {uploaded.error}")
            return uploaded

        media = uploaded.value
        image.mark_as_uploaded(media.id, media.url)
        updated = self.image_repository.update(image)
        persisted = not isinstance(updated, Failure)
        if not persisted:
            # Upload succeeded; the media exists on WordPress regardless
            _logger.warning(f"IMAGE | uploaded but not persisted | image:{image.id} | {updated.error}")

        _logger.info(f"IMAGE | uploaded | image:{image.id} | media:{media.id} | {media.url}")
        return Success(ImageUploadOutcome(
            image_id=image.id,
            original_url=original_url,
            wordpress_url=media.url,
            media_id=media.id,
            persisted=persisted,
        ))
