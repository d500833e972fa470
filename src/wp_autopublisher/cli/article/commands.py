"""Article CLI commands - thin wrappers orchestrating params, validation, display, and service."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional

import typer

from ...core.types import Failure
from ..core.console import console
from ..core.events import print_ai_event, print_publication_event
from .display import (
    show_article_error,
    show_generate_config,
    show_generate_result,
    show_image_result,
    show_publication_result,
    show_publish_config,
)
from .params import GenerateParams, ImageParams, PublishParams
from .service import ArticleGeneratorService, ArticleImageService, ArticlePublisherService
from .validators import validate_generate_params, validate_image_params, validate_publish_params


def generate(
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Feed item title"),
    content: Optional[str] = typer.Option(None, "--content", "-c", help="Feed item content"),
    url: Optional[str] = typer.Option(None, "--url", help="Source URL"),
    feed_file: Optional[Path] = typer.Option(None, "--feed-file", "-f", help="JSON file with title/content/url"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the article JSON here"),
    site: Optional[str] = typer.Option(None, "--site", "-s", help="WordPress site for the featured image"),
    featured_image: bool = typer.Option(False, "--featured-image", help="Acquire and upload a featured image"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Generation model"),
    temperature: Optional[float] = typer.Option(None, "--temperature", help="Sampling temperature"),
    max_tokens: Optional[int] = typer.Option(None, "--max-tokens", help="Max tokens for the response"),
    language: Optional[str] = typer.Option(None, "--language", help="Article language"),
    tone: Optional[str] = typer.Option(None, "--tone", help="Article tone"),
    title_prompt: Optional[str] = typer.Option(None, "--title-prompt", help="Custom title instruction"),
    content_prompt: Optional[str] = typer.Option(None, "--content-prompt", help="Custom content instruction"),
    image_prompt: Optional[str] = typer.Option(None, "--image-prompt", help="Custom image instruction"),
    config: Optional[Path] = typer.Option(None, "--config", help="Provider config YAML"),
) -> None:
    """Generate an article from a feed item.

    The model is asked for a JSON article; whatever it returns is recovered
    into title, content and SEO fields.
    """
    params = GenerateParams.from_cli(
        title=title,
        content=content,
        url=url,
        feed_file=feed_file,
        output=output,
        site=site,
        featured_image=featured_image,
        model=model,
        temperature=temperature,
        max_tokens=max_tokens,
        language=language,
        tone=tone,
        title_prompt=title_prompt,
        content_prompt=content_prompt,
        image_prompt=image_prompt,
        config_path=config,
    )

    validation = validate_generate_params(params)
    if isinstance(validation, Failure):
        show_article_error(console, validation.error, validation.details)
        raise typer.Exit(1)

    show_generate_config(console, params)

    result = asyncio.run(ArticleGeneratorService().generate(params, event_callback=print_ai_event))
    if isinstance(result, Failure):
        show_article_error(console, result.error, result.details)
        raise typer.Exit(1)

    show_generate_result(console, result.value, params.output)


def publish(
    article_file: Path = typer.Argument(..., help="Article JSON produced by generate"),
    site: str = typer.Option(..., "--site", "-s", help="WordPress site id from the config"),
    article_id: Optional[str] = typer.Option(None, "--article-id", help="Article id (default: from file)"),
    status: Optional[str] = typer.Option(None, "--status", help="Post status: draft, publish, pending, private"),
    schedule: Optional[str] = typer.Option(None, "--schedule", help="Publish at this ISO 8601 time"),
    allow_duplicate: bool = typer.Option(False, "--allow-duplicate", help="Publish even if already published"),
    max_retries: int = typer.Option(3, "--max-retries", help="Retry budget for this publication"),
    category: Optional[List[int]] = typer.Option(None, "--category", help="WordPress category id (repeatable)"),
    tag: Optional[List[int]] = typer.Option(None, "--tag", help="WordPress tag id (repeatable)"),
    config: Optional[Path] = typer.Option(None, "--config", help="Provider config YAML"),
) -> None:
    """Publish a generated article to WordPress."""
    params = PublishParams.from_cli(
        article_file=article_file,
        site=site,
        article_id=article_id,
        status=status,
        schedule=schedule,
        allow_duplicate=allow_duplicate,
        max_retries=max_retries,
        categories=category,
        tags=tag,
        config_path=config,
    )

    validation = validate_publish_params(params)
    if isinstance(validation, Failure):
        show_article_error(console, validation.error, validation.details)
        raise typer.Exit(1)

    show_publish_config(console, params)

    result = asyncio.run(ArticlePublisherService().publish(params, event_handler=print_publication_event))
    if isinstance(result, Failure):
        show_article_error(console, result.error, result.details)
        raise typer.Exit(1)

    show_publication_result(console, result.value)


def image(
    article_id: str = typer.Argument(..., help="Article the image belongs to"),
    prompt: str = typer.Option(..., "--prompt", "-p", help="Image description (10-500 characters)"),
    title: Optional[str] = typer.Option(None, "--title", help="Article title for the stock search"),
    filename: Optional[str] = typer.Option(None, "--filename", help="Upload filename (default: <article_id>.jpg)"),
    alt_text: Optional[str] = typer.Option(None, "--alt", help="Alt text (default: the prompt)"),
    site: Optional[str] = typer.Option(None, "--site", "-s", help="Upload to this WordPress site"),
    force: bool = typer.Option(False, "--force", help="Replace an existing image for the article"),
    config: Optional[Path] = typer.Option(None, "--config", help="Provider config YAML"),
) -> None:
    """Find or generate a featured image, optionally uploading it to WordPress."""
    params = ImageParams.from_cli(
        article_id=article_id,
        prompt=prompt,
        filename=filename,
        alt_text=alt_text,
        title=title,
        site=site,
        force=force,
        config_path=config,
    )

    validation = validate_image_params(params)
    if isinstance(validation, Failure):
        show_article_error(console, validation.error, validation.details)
        raise typer.Exit(1)

    result = asyncio.run(ArticleImageService().acquire(params, event_callback=print_ai_event))
    if isinstance(result, Failure):
        show_article_error(console, result.error, result.details)
        raise typer.Exit(1)

    show_image_result(console, result.value["image"], result.value["upload"])
