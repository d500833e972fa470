"""Structured extraction of article payloads from model output."""

from .extractor import (
    PLACEHOLDER_CONTENT,
    PLACEHOLDER_TITLE,
    StructuredResponseExtractor,
    find_matching_brace,
)
from .models import ArticlePayload, ContentStatistics
from .shapes import RecognizedPayload, recognize

__all__ = [
    "PLACEHOLDER_CONTENT",
    "PLACEHOLDER_TITLE",
    "StructuredResponseExtractor",
    "find_matching_brace",
    "ArticlePayload",
    "ContentStatistics",
    "RecognizedPayload",
    "recognize",
]
