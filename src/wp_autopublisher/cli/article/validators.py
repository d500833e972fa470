"""Article command validators."""

from __future__ import annotations

from ...constants.status import WORDPRESS_POST_STATUSES
from ...core.types import Failure, Result, Success
from .params import GenerateParams, ImageParams, PublishParams


def validate_generate_params(params: GenerateParams) -> Result[GenerateParams]:
    """Validate article generation parameters.

    Returns Result with params if valid, or Failure with error.
    """
    if params.feed_file is None:
        if not params.title:
            return Failure(
                "Missing feed item title",
                {"hint": "Pass --title and --content, or --feed-file"},
            )
        if not params.content or not params.content.strip():
            return Failure(
                "Missing feed item content",
                {"hint": "Pass --title and --content, or --feed-file"},
            )
    elif not params.feed_file.is_file():
        return Failure(f"Feed file not found: {params.feed_file}", {"path": str(params.feed_file)})

    if params.featured_image and not params.site:
        return Failure(
            "A featured image needs a WordPress site to upload to",
            {"hint": "Pass --site with --featured-image"},
        )

    if params.temperature is not None and not 0.0 <= params.temperature <= 2.0:
        return Failure(
            f"Invalid temperature: {params.temperature}",
            {"hint": "Temperature must be between 0.0 and 2.0"},
        )

    if params.max_tokens is not None and params.max_tokens <= 0:
        return Failure(f"Invalid max tokens: {params.max_tokens}", {"hint": "Must be a positive integer"})

    if params.config_path is not None and not params.config_path.is_file():
        return Failure(f"Config file not found: {params.config_path}", {"path": str(params.config_path)})

    return Success(params)


def validate_publish_params(params: PublishParams) -> Result[PublishParams]:
    """Validate publish parameters.

    Returns Result with params if valid, or Failure with error.
    """
    if not params.article_file.is_file():
        return Failure(f"Article file not found: {params.article_file}", {"path": str(params.article_file)})

    if not params.site or not params.site.strip():
        return Failure("WordPress site is required", {"hint": "Pass --site <site_id>"})

    if params.status is not None and params.status not in WORDPRESS_POST_STATUSES:
        return Failure(
            f"Invalid post status: {params.status}",
            {"valid_statuses": ", ".join(WORDPRESS_POST_STATUSES)},
        )

    if params.schedule_raw and params.scheduled_at is None:
        return Failure(
            f"Invalid schedule: {params.schedule_raw}",
            {"hint": "Use ISO 8601, e.g. 2026-01-31T09:00:00Z"},
        )

    if params.max_retries < 0:
        return Failure(f"Invalid max retries: {params.max_retries}", {"hint": "Must be zero or more"})

    if params.config_path is not None and not params.config_path.is_file():
        return Failure(f"Config file not found: {params.config_path}", {"path": str(params.config_path)})

    return Success(params)


def validate_image_params(params: ImageParams) -> Result[ImageParams]:
    """Validate featured image parameters.

    Prompt length limits are checked by the use case itself.
    """
    if not params.article_id:
        return Failure("Article ID is required", {"hint": "Pass the article id as the first argument"})

    if not params.prompt:
        return Failure("Image prompt is required", {"hint": "Pass --prompt"})

    if params.site is not None and not params.site.strip():
        return Failure("WordPress site is empty", {"hint": "Pass --site <site_id> or omit it"})

    if params.config_path is not None and not params.config_path.is_file():
        return Failure(f"Config file not found: {params.config_path}", {"path": str(params.config_path)})

    return Success(params)
