"""Data models for article generation requests and results."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from ..constants.status import ExtractionStrategy, PayloadShape, SeoSource
from ..extraction.models import ContentStatistics

DEFAULT_TITLE_PROMPT = "make it catchy, SEO-friendly, clear and informative."
DEFAULT_CONTENT_PROMPT = (
    "make it complete, well structured, original and engaging. Use clear paragraphs, "
    "avoid rigid structures and do not label sections \"introduction\" or \"conclusion\". "
    "Write at least 500 words between one h2 and the next."
)
DEFAULT_IMAGE_PROMPT = (
    "in cartoon style. Pick one representative detail of the article's core idea. "
    "Do not use text or symbols."
)


class FeedItem(BaseModel):
    """Source content unit to be turned into an article."""

    title: str
    content: str
    url: str | None = None


class CustomPrompts(BaseModel):
    """Customizable suffixes appended to the fixed instruction framing."""

    title_prompt: str = DEFAULT_TITLE_PROMPT
    content_prompt: str = DEFAULT_CONTENT_PROMPT
    image_prompt: str = DEFAULT_IMAGE_PROMPT


class GenerationSettings(BaseModel):
    """Model and style parameters for one generation call."""

    model: str = "sonar-pro"
    temperature: float = 0.7
    max_tokens: int | None = None
    language: str = "English"
    tone: str = "professional"
    style: str = "journalistic"
    target_audience: str = "general"
    generate_featured_image: bool = False

    @property
    def target_word_count(self) -> int:
        return int(self.max_tokens * 0.75) if self.max_tokens else 4000


class GenerationResult(BaseModel):
    """Article produced by one orchestrated generation."""

    title: str
    content: str
    format: str = "html"
    meta_description: str | None = None
    seo_tags: list[str] = Field(default_factory=list)
    slug: str | None = None
    category: str | None = None
    image_prompt: str | None = None
    image_alt_text: str | None = None

    featured_image_id: int | None = None
    featured_image_url: str | None = None
    image_warning: str | None = None

    statistics: ContentStatistics = Field(default_factory=ContentStatistics)
    cost: float = 0.0
    generation_time_ms: int = 0
    model: str = ""
    provider: str | None = None

    # Observability
    strategy: ExtractionStrategy
    shape: PayloadShape
    seo_source: SeoSource = SeoSource.NONE
    low_confidence: bool = False
    raw_response: Any = None
    prompt_sent: str = ""
