"""Stateless services behind the article commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

from ...core.types import Failure, Result, Success, failure
from ...domain.publication import Publication, PublicationMetadata
from ...images.pipeline import ImageAcquisitionPipeline
from ...providers.config import ProviderConfig
from ...providers.text import TextProvider
from ...services.models import CustomPrompts, FeedItem, GenerationResult, GenerationSettings
from ...services.orchestrator import AIEventCallback, GenerationOrchestrator
from ...services.images import SearchAndGenerateImage, UploadImageToWordPress
from ...services.publishing import PublicationEventHandler, PublishArticle
from ...wordpress.media import WordPressMediaService
from ...wordpress.publishing import PublishingContent, WordPressPublishingService
from ..core.wiring import build_target, load_config, open_repositories
from .params import GenerateParams, ImageParams, PublishParams


def read_json_file(path: Path, what: str) -> Result[dict[str, Any]]:
    """Read a JSON object from ``path``."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        return failure("FILE_ERROR", f"Cannot read {what} file: {e}", path=str(path))
    except json.JSONDecodeError as e:
        return failure("INVALID_JSON", f"Invalid JSON in {what} file: {e}", path=str(path))
    if not isinstance(data, dict):
        return failure("INVALID_JSON", f"The {what} file must contain a JSON object", path=str(path))
    return Success(data)


def article_record(result: GenerationResult, article_id: str) -> dict[str, Any]:
    """JSON document written by ``generate`` and read back by ``publish``."""
    record = result.model_dump(mode="json")
    record["article_id"] = article_id
    return record


class ArticleGeneratorService:
    """Stateless service for feed item to article generation.

    All state is passed via params - no instance state.
    """

    def _feed_item(self, params: GenerateParams) -> Result[FeedItem]:
        if params.feed_file is None:
            return Success(FeedItem(title=params.title or "", content=params.content or "", url=params.url))

        loaded = read_json_file(params.feed_file, "feed")
        if isinstance(loaded, Failure):
            return loaded
        data = loaded.value
        if not data.get("title") or not data.get("content"):
            return failure("VALIDATION_ERROR", "Feed file needs non-empty 'title' and 'content'")
        return Success(FeedItem(
            title=str(data["title"]),
            content=str(data["content"]),
            url=params.url or data.get("url"),
        ))

    @staticmethod
    def _settings(config: ProviderConfig, params: GenerateParams) -> GenerationSettings:
        defaults = config.generation
        return GenerationSettings(
            model=params.model or defaults.model,
            temperature=params.temperature if params.temperature is not None else defaults.temperature,
            max_tokens=params.max_tokens or defaults.max_tokens,
            language=params.language or defaults.language,
            tone=params.tone or defaults.tone,
            style=defaults.style,
            target_audience=defaults.target_audience,
            generate_featured_image=params.featured_image,
        )

    @staticmethod
    def _prompts(params: GenerateParams) -> CustomPrompts:
        overrides = {
            "title_prompt": params.title_prompt,
            "content_prompt": params.content_prompt,
            "image_prompt": params.image_prompt,
        }
        return CustomPrompts(**{k: v for k, v in overrides.items() if v})

    async def generate(
        self,
        params: GenerateParams,
        event_callback: AIEventCallback = None,
    ) -> Result[GenerationResult]:
        """Generate one article and optionally write it to ``params.output``.

        Returns:
            Result containing the GenerationResult or Failure
        """
        feed = self._feed_item(params)
        if isinstance(feed, Failure):
            return feed

        config = load_config(params.config_path)
        target = None
        if params.site:
            resolved = build_target(config, params.site)
            if isinstance(resolved, Failure):
                return resolved
            target = resolved.value

        text_provider = TextProvider(config, event_callback=event_callback)
        pipeline: Optional[ImageAcquisitionPipeline] = None
        if params.featured_image:
            pipeline = ImageAcquisitionPipeline.from_config(config, event_callback=event_callback)

        orchestrator = GenerationOrchestrator(
            text_provider,
            image_pipeline=pipeline,
            media_port=WordPressMediaService() if pipeline else None,
            event_callback=event_callback,
        )
        try:
            result = await orchestrator.generate(
                feed.value,
                custom_prompts=self._prompts(params),
                settings=self._settings(config, params),
                target=target,
            )
        finally:
            await text_provider.close()
            if pipeline:
                await pipeline.close()

        if isinstance(result, Failure) or params.output is None:
            return result

        article = result.value
        record = article_record(article, article.slug or params.output.stem)
        try:
            params.output.parent.mkdir(parents=True, exist_ok=True)
            with open(params.output, "w", encoding="utf-8") as f:
                json.dump(record, f, indent=2, ensure_ascii=False)
        except OSError as e:
            return failure("FILE_ERROR", f"Cannot write article file: {e}", path=str(params.output))
        return result


class ArticlePublisherService:
    """Stateless service for publishing a generated article file."""

    @staticmethod
    def _content(article: dict[str, Any]) -> Result[PublishingContent]:
        title = str(article.get("title") or "").strip()
        body = str(article.get("content") or "")
        if not title or not body.strip():
            return failure("VALIDATION_ERROR", "Article file needs non-empty 'title' and 'content'")
        return Success(PublishingContent(
            title=title,
            content=body,
            excerpt=article.get("excerpt") or article.get("meta_description"),
        ))

    @staticmethod
    def _metadata(article: dict[str, Any], content: PublishingContent, params: PublishParams) -> PublicationMetadata:
        return PublicationMetadata(
            title=content.title,
            content=content.content,
            excerpt=content.excerpt,
            featured_image_id=article.get("featured_image_id"),
            featured_image_url=article.get("featured_image_url"),
            tags=list(params.tags),
            categories=list(params.categories),
            seo_title=article.get("seo_title"),
            seo_description=article.get("meta_description"),
        )

    async def publish(
        self,
        params: PublishParams,
        event_handler: PublicationEventHandler = None,
    ) -> Result[Publication]:
        """Publish (or schedule) the article in ``params.article_file``.

        Returns:
            Result containing the Publication or Failure
        """
        loaded = read_json_file(params.article_file, "article")
        if isinstance(loaded, Failure):
            return loaded
        article = loaded.value

        content = self._content(article)
        if isinstance(content, Failure):
            return content

        config = load_config(params.config_path)
        resolved = build_target(config, params.site, status=params.status)
        if isinstance(resolved, Failure):
            return resolved

        article_id = (
            params.article_id
            or article.get("article_id")
            or article.get("slug")
            or params.article_file.stem
        )

        _, publications = open_repositories()
        use_case = PublishArticle(publications, WordPressPublishingService(), event_handler=event_handler)
        return await use_case.execute(
            article_id=str(article_id),
            target=resolved.value,
            content=content.value,
            metadata=self._metadata(article, content.value, params),
            scheduled_at=params.scheduled_at,
            allow_duplicate=params.allow_duplicate,
            max_retries=params.max_retries,
        )


class ArticleImageService:
    """Stateless service for finding an article's featured image and re-hosting it."""

    async def acquire(
        self,
        params: ImageParams,
        event_callback: AIEventCallback = None,
    ) -> Result[dict[str, Any]]:
        """Find or generate the image; upload it when ``params.site`` is set.

        Returns:
            Success with ``{"image": FeaturedImage, "upload": ImageUploadOutcome | None}``
            or Failure. An upload failure leaves the image in ``found`` state
            so a later run with ``--site`` can pick it up.
        """
        config = load_config(params.config_path)
        target = None
        if params.site:
            resolved = build_target(config, params.site)
            if isinstance(resolved, Failure):
                return resolved
            target = resolved.value

        images, _ = open_repositories()
        pipeline = ImageAcquisitionPipeline.from_config(config, event_callback=event_callback)
        try:
            found = await SearchAndGenerateImage(images, pipeline).execute(
                article_id=params.article_id,
                ai_prompt=params.prompt,
                filename=params.filename,
                alt_text=params.alt_text,
                force_regenerate=params.force,
                title=params.title,
            )
            if isinstance(found, Failure):
                return found
            if target is None:
                return Success({"image": found.value, "upload": None})

            uploaded = await UploadImageToWordPress(images, pipeline, WordPressMediaService()).execute(
                target, image_id=found.value.id
            )
        finally:
            await pipeline.close()

        if isinstance(uploaded, Failure):
            return uploaded
        return Success({"image": found.value, "upload": uploaded.value})
