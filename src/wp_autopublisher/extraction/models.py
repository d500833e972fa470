"""Data models for extracted article payloads."""

from __future__ import annotations

import math
import re
from typing import Any

from pydantic import BaseModel, Field

from ..constants.status import ExtractionStrategy, PayloadShape, SeoSource

WORDS_PER_MINUTE = 200


class ContentStatistics(BaseModel):
    """Size and reading-time figures for generated content."""

    character_count: int = 0
    word_count: int = 0
    sentence_count: int = 0
    paragraph_count: int = 0
    reading_time: int = 0  # minutes

    @classmethod
    def from_content(cls, content: str) -> "ContentStatistics":
        words = [w for w in content.strip().split() if w]
        sentences = [s for s in re.split(r"[.!?]+", content) if s.strip()]
        paragraphs = [p for p in re.split(r"\n\s*\n", content) if p.strip()]
        return cls(
            character_count=len(content),
            word_count=len(words),
            sentence_count=len(sentences),
            paragraph_count=len(paragraphs),
            reading_time=math.ceil(len(words) / WORDS_PER_MINUTE),
        )


class ArticlePayload(BaseModel):
    """Typed article recovered from a model response.

    Owned by the generation call that produced it. ``strategy`` and
    ``shape`` record which parsing tier succeeded so callers can flag
    low-confidence results.
    """

    title: str
    content: str
    meta_description: str | None = None
    tags: list[str] = Field(default_factory=list)
    image_prompt: str | None = None
    image_alt_text: str | None = None
    image_filename: str | None = None
    slug: str | None = None
    category: str | None = None
    focus_keyword: str | None = None

    strategy: ExtractionStrategy
    shape: PayloadShape
    seo_source: SeoSource = SeoSource.NONE
    raw_response: str = ""
    parsed: dict[str, Any] | None = None

    @property
    def is_fallback(self) -> bool:
        """True when no JSON was recovered and text heuristics were used."""
        return self.strategy == ExtractionStrategy.HEURISTIC

    @property
    def low_confidence(self) -> bool:
        """True when either the body or the SEO fields came from heuristics."""
        return self.is_fallback or self.seo_source == SeoSource.REGEX
