"""Recognized JSON shapes of a model response.

A parsed object is matched against a closed set of shapes in priority
order. Each shape has its own presence predicate and reader, so no code
outside this module reads arbitrary keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..constants.status import PayloadShape

TITLE_ALIASES = ("title", "headline", "subject", "name")
CONTENT_ALIASES = ("content", "body", "text", "article", "description")


def _str(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


@dataclass(frozen=True)
class RecognizedPayload:
    """Fields read from one recognized shape."""

    shape: PayloadShape
    title: str
    content: str
    extras: dict[str, Any] = field(default_factory=dict)


class AdvancedShape:
    """``{"article": {"basic_data": {...}, "content": "...", ...}}``."""

    shape = PayloadShape.ADVANCED

    @staticmethod
    def matches(obj: dict[str, Any]) -> bool:
        article = _dict(obj.get("article"))
        return bool(_dict(article.get("basic_data"))) and bool(article.get("content"))

    @staticmethod
    def read(obj: dict[str, Any]) -> RecognizedPayload:
        article = obj["article"]
        basic = _dict(article.get("basic_data"))
        seo = _dict(article.get("seo_critical"))
        image = _dict(article.get("featured_image"))
        internal = _dict(article.get("internal_seo"))

        tags = _str_list(basic.get("tags")) or _str_list(internal.get("related_keywords"))[:5]

        return RecognizedPayload(
            shape=PayloadShape.ADVANCED,
            title=_str(basic.get("title")) or _str(seo.get("seo_title")),
            content=_str(article.get("content")),
            extras={
                "meta_description": _str(seo.get("meta_description")) or _str(basic.get("meta_description")) or None,
                "tags": tags,
                "image_prompt": _str(image.get("ai_prompt")) or None,
                "image_alt_text": _str(image.get("alt_text")) or None,
                "image_filename": _str(image.get("filename")) or None,
                "slug": _str(basic.get("slug")) or None,
                "category": _str(basic.get("category")) or None,
                "focus_keyword": _str(seo.get("focus_keyword")) or None,
            },
        )


class SimpleShape:
    """Flat ``{"title": "...", "content": "..."}`` with optional legacy SEO keys."""

    shape = PayloadShape.SIMPLE

    @staticmethod
    def matches(obj: dict[str, Any]) -> bool:
        return bool(_str(obj.get("title"))) and bool(_str(obj.get("content")))

    @staticmethod
    def read(obj: dict[str, Any]) -> RecognizedPayload:
        return RecognizedPayload(
            shape=PayloadShape.SIMPLE,
            title=_str(obj.get("title")),
            content=_str(obj.get("content")),
            extras={
                "image_prompt": _str(obj.get("imagePrompt")) or _str(obj.get("image_prompt")) or None,
            },
        )


class AliasShape:
    """First string field among the title and content aliases."""

    shape = PayloadShape.ALIASES

    @staticmethod
    def _first(obj: dict[str, Any], names: tuple[str, ...]) -> str:
        for name in names:
            value = _str(obj.get(name))
            if value:
                return value
        return ""

    @classmethod
    def matches(cls, obj: dict[str, Any]) -> bool:
        return bool(cls._first(obj, TITLE_ALIASES)) and bool(cls._first(obj, CONTENT_ALIASES))

    @classmethod
    def read(cls, obj: dict[str, Any]) -> RecognizedPayload:
        return RecognizedPayload(
            shape=PayloadShape.ALIASES,
            title=cls._first(obj, TITLE_ALIASES),
            content=cls._first(obj, CONTENT_ALIASES),
        )


SHAPES = (AdvancedShape, SimpleShape, AliasShape)


def recognize(obj: Any) -> RecognizedPayload | None:
    """Match ``obj`` against the known shapes in priority order.

    Returns:
        The first recognized payload with non-empty title and content, or
        None if no shape fits.
    """
    if not isinstance(obj, dict):
        return None

    for shape in SHAPES:
        if not shape.matches(obj):
            continue
        payload = shape.read(obj)
        if payload.title and payload.content:
            return payload
    return None


def read_legacy_seo(obj: dict[str, Any]) -> tuple[str | None, list[str]] | None:
    """Read flat ``metaDescription`` / ``seoTags`` keys if present."""
    meta = _str(obj.get("metaDescription")) or _str(obj.get("meta_description"))
    tags = _str_list(obj.get("seoTags")) or _str_list(obj.get("seo_tags")) or _str_list(obj.get("tags"))
    if not meta and not tags:
        return None
    return meta or None, tags
