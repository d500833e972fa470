"""Immutable parameter dataclasses for article commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class GenerateParams:
    """Immutable parameters for article generation."""

    title: Optional[str]
    content: Optional[str]
    url: Optional[str]
    feed_file: Optional[Path]
    output: Optional[Path]
    site: Optional[str]
    featured_image: bool
    model: Optional[str]
    temperature: Optional[float]
    max_tokens: Optional[int]
    language: Optional[str]
    tone: Optional[str]
    title_prompt: Optional[str]
    content_prompt: Optional[str]
    image_prompt: Optional[str]
    config_path: Optional[Path]

    @classmethod
    def from_cli(
        cls,
        title: Optional[str] = None,
        content: Optional[str] = None,
        url: Optional[str] = None,
        feed_file: Optional[Path] = None,
        output: Optional[Path] = None,
        site: Optional[str] = None,
        featured_image: bool = False,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        language: Optional[str] = None,
        tone: Optional[str] = None,
        title_prompt: Optional[str] = None,
        content_prompt: Optional[str] = None,
        image_prompt: Optional[str] = None,
        config_path: Optional[Path] = None,
        **kwargs,
    ) -> "GenerateParams":
        """Create from CLI arguments."""
        return cls(
            title=title.strip() if title else None,
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
            config_path=config_path,
        )


@dataclass(frozen=True)
class PublishParams:
    """Immutable parameters for publishing a generated article."""

    article_file: Path
    site: str
    article_id: Optional[str]
    status: Optional[str]
    scheduled_at: Optional[datetime]
    schedule_raw: Optional[str]
    allow_duplicate: bool
    max_retries: int
    categories: tuple[int, ...] = field(default_factory=tuple)
    tags: tuple[int, ...] = field(default_factory=tuple)
    config_path: Optional[Path] = None

    @classmethod
    def from_cli(
        cls,
        article_file: Path,
        site: str,
        article_id: Optional[str] = None,
        status: Optional[str] = None,
        schedule: Optional[str] = None,
        allow_duplicate: bool = False,
        max_retries: int = 3,
        categories: Optional[list[int]] = None,
        tags: Optional[list[int]] = None,
        config_path: Optional[Path] = None,
        **kwargs,
    ) -> "PublishParams":
        """Create from CLI arguments; an unparseable schedule is left for validation."""
        return cls(
            article_file=article_file,
            site=site,
            article_id=article_id,
            status=status,
            scheduled_at=parse_schedule(schedule) if schedule else None,
            schedule_raw=schedule,
            allow_duplicate=allow_duplicate,
            max_retries=max_retries,
            categories=tuple(categories or ()),
            tags=tuple(tags or ()),
            config_path=config_path,
        )


def parse_schedule(value: str) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp; naive values are taken as UTC.

    Returns None when the value is not a valid timestamp.
    """
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class ImageParams:
    """Immutable parameters for acquiring an article's featured image."""

    article_id: str
    prompt: str
    filename: str
    alt_text: str
    title: Optional[str]
    site: Optional[str]
    force: bool
    config_path: Optional[Path]

    @classmethod
    def from_cli(
        cls,
        article_id: str,
        prompt: str,
        filename: Optional[str] = None,
        alt_text: Optional[str] = None,
        title: Optional[str] = None,
        site: Optional[str] = None,
        force: bool = False,
        config_path: Optional[Path] = None,
        **kwargs,
    ) -> "ImageParams":
        """Create from CLI arguments; filename and alt text default from the article id and prompt."""
        article_id = article_id.strip()
        prompt = prompt.strip()
        return cls(
            article_id=article_id,
            prompt=prompt,
            filename=(filename or f"{article_id}.jpg").strip(),
            alt_text=(alt_text or prompt[:120]).strip(),
            title=title,
            site=site,
            force=force,
            config_path=config_path,
        )
