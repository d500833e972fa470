"""Feed item to article payload in one orchestrated call.

Sequence: unified prompt -> one provider call -> structured extraction ->
optional featured image (acquire, download, upload). The image stage never
fails the generation; the provider call is not retried here.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Callable

from ..core.types import Failure, Result, Success, failure
from ..extraction.extractor import StructuredResponseExtractor
from ..extraction.models import ArticlePayload, ContentStatistics
from ..images.base import ImageRequest
from ..images.pipeline import ImageAcquisitionPipeline
from ..providers.text import TextProvider
from ..wordpress.media import MediaUploadPort, UploadedMedia
from .models import CustomPrompts, FeedItem, GenerationResult, GenerationSettings
from .prompts import build_unified_prompt

_logger = logging.getLogger("ai_calls")

# Type for AI event callback
AIEventCallback = Callable[[dict[str, Any]], Awaitable[None]] | None

DEFAULT_MAX_TOKENS = 24000


class GenerationOrchestrator:
    """Generates one article from one feed item.

    Dependencies are passed in explicitly; build them once at process start.

    Usage:
        orchestrator = GenerationOrchestrator(text_provider, image_pipeline=pipeline,
                                              media_port=WordPressMediaService())
        result = await orchestrator.generate(feed_item, settings=settings, target=target)
    """

    def __init__(
        self,
        text_provider: TextProvider,
        extractor: StructuredResponseExtractor | None = None,
        image_pipeline: ImageAcquisitionPipeline | None = None,
        media_port: MediaUploadPort | None = None,
        event_callback: AIEventCallback = None,
    ):
        self.text_provider = text_provider
        self.extractor = extractor or StructuredResponseExtractor()
        self.image_pipeline = image_pipeline
        self.media_port = media_port
        self._event_callback = event_callback

    async def _emit_event(self, event: dict[str, Any]) -> None:
        """Emit an event if callback is set."""
        if self._event_callback:
            await self._event_callback(event)

    async def generate(
        self,
        feed_item: FeedItem,
        custom_prompts: CustomPrompts | None = None,
        settings: GenerationSettings | None = None,
        target: Any = None,
    ) -> Result[GenerationResult]:
        """Generate an article and, if requested, its featured image.

        Args:
            feed_item: Source title, content and optional URL.
            custom_prompts: Title/content/image instruction suffixes.
            settings: Model and style parameters.
            target: PublicationTarget for the featured image upload.

        Returns:
            Success with the article, or the provider Failure when the
            generation call itself failed.
        """
        settings = settings or GenerationSettings()
        start = time.time()

        prompt = build_unified_prompt(feed_item, custom_prompts, settings)
        _logger.info(
            f"GENERATION_START | title:{feed_item.title[:60]} | model:{settings.model} | "
            f"prompt_chars:{len(prompt)} | image:{settings.generate_featured_image}"
        )
        await self._emit_event({"type": "generation_started", "title": feed_item.title, "model": settings.model})

        response_result = await self.text_provider.generate(
            prompt,
            task="article_generation",
            temperature=settings.temperature,
            max_tokens=settings.max_tokens or DEFAULT_MAX_TOKENS,
            model=settings.model,
        )
        if isinstance(response_result, Failure):
            _logger.error(f"GENERATION_FAILED | code:{response_result.code} | {response_result.error}")
            await self._emit_event({
                "type": "generation_failed",
                "code": response_result.code,
                "error": response_result.error,
            })
            return response_result

        response = response_result.value
        payload = self.extractor.extract(response.text)

        media: UploadedMedia | None = None
        image_warning: str | None = None
        if settings.generate_featured_image and target is not None:
            try:
                media_result = await self._featured_image(payload, feed_item, target)
            except Exception as e:
                _logger.exception("FEATURED_IMAGE | unexpected error")
                media_result = failure("IMAGE_STAGE_ERROR", f"{type(e).__name__}: {e}")
            if isinstance(media_result, Failure):
                image_warning = f"{media_result.code}: {media_result.error}"
                _logger.warning(f"FEATURED_IMAGE | skipped | {image_warning}")
            else:
                media = media_result.value

        elapsed_ms = int((time.time() - start) * 1000)
        result = GenerationResult(
            title=payload.title,
            content=payload.content,
            meta_description=payload.meta_description,
            seo_tags=payload.tags,
            slug=payload.slug,
            category=payload.category,
            image_prompt=payload.image_prompt,
            image_alt_text=payload.image_alt_text,
            featured_image_id=media.id if media else None,
            featured_image_url=media.url if media else None,
            image_warning=image_warning,
            statistics=ContentStatistics.from_content(payload.content),
            cost=response.cost,
            generation_time_ms=elapsed_ms,
            model=response.model or settings.model,
            provider=response.provider,
            strategy=payload.strategy,
            shape=payload.shape,
            seo_source=payload.seo_source,
            low_confidence=payload.low_confidence,
            raw_response=payload.parsed if payload.parsed is not None else response.text,
            prompt_sent=prompt,
        )

        _logger.info(
            f"GENERATION_DONE | strategy:{payload.strategy.value} | shape:{payload.shape.value} | "
            f"words:{result.statistics.word_count} | cost:${result.cost:.4f} | {elapsed_ms}ms | "
            f"image:{result.featured_image_id or '-'}"
        )
        await self._emit_event({
            "type": "generation_completed",
            "title": result.title,
            "strategy": payload.strategy.value,
            "low_confidence": result.low_confidence,
            "featured_image_id": result.featured_image_id,
            "duration_ms": elapsed_ms,
        })
        return Success(result)

    async def _featured_image(
        self,
        payload: ArticlePayload,
        feed_item: FeedItem,
        target: Any,
    ) -> Result[UploadedMedia]:
        """Acquire, download and upload an image.

        The filename is left to the download step so its extension matches
        the detected format.
        """
        if self.image_pipeline is None or self.media_port is None:
            return failure("IMAGE_STAGE_DISABLED", "No image pipeline or media uploader configured")

        title = payload.title or feed_item.title
        request = ImageRequest(
            title=title,
            content=payload.content or feed_item.content,
            style="photo",
            size="large",
            custom_prompt=payload.image_prompt,
        )

        acquired = await self.image_pipeline.acquire(request)
        if isinstance(acquired, Failure):
            return acquired
        image = acquired.value

        downloaded = await self.image_pipeline.download(image.url)
        if isinstance(downloaded, Failure):
            return downloaded

        return await self.media_port.upload_media(
            target,
            downloaded.value,
            title=f"Featured Image - {title}",
            alt_text=image.alt_text,
            caption=image.caption,
        )
