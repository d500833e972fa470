"""Structured article extraction from free-form model output.

Model responses are asked to be JSON but frequently arrive wrapped in
markdown fences, prefixed with chatter, double-encoded as a JSON string,
or not JSON at all. Extraction tries a fixed list of strategies and, for
each parseable candidate, the known payload shapes. When nothing parses it
degrades to text heuristics. It never raises.

Usage:
    extractor = StructuredResponseExtractor()
    payload = extractor.extract(response_text)
    if payload.low_confidence:
        ...
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Iterator

from ..constants.status import ExtractionStrategy, PayloadShape, SeoSource
from .models import ArticlePayload
from .shapes import RecognizedPayload, read_legacy_seo, recognize

_logger = logging.getLogger("ai_calls")

PLACEHOLDER_TITLE = "Generated Article"
PLACEHOLDER_CONTENT = "Content generated automatically."

MIN_TITLE_LENGTH = 10
MAX_TITLE_LENGTH = 200

FENCED_JSON_PATTERN = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)
QUOTED_JSON_PATTERN = re.compile(r'"\{[\s\S]*\}"')

TITLE_PATTERNS = (
    re.compile(r"(?:^|\n)#+\s*(.+?)(?:\n|$)"),  # markdown heading
    re.compile(r"(?:^|\n)Title[:\s]*(.+?)(?:\n|$)", re.IGNORECASE),
    re.compile(r"(?:^|\n)(.{10,100})(?:\n\n|\n[^\n]{100})"),  # first substantial line
)
FENCE_MARKER_PATTERN = re.compile(r"```[a-z]*\n?")
SURROUNDING_QUOTES_PATTERN = re.compile(r"^[\"'`]+(.*?)[\"'`]+$", re.DOTALL)

# Label scans over raw text. Only used when no structured SEO is present.
META_DESCRIPTION_PATTERN = re.compile(r"\bmeta.{0,20}description[:\s]*([^.\n]{50,160})", re.IGNORECASE)
TAGS_PATTERN = re.compile(r"\btags?\s*[:=\-]\s*([^.\n]+)", re.IGNORECASE)
MAX_REGEX_TAGS = 10
MAX_TAG_LENGTH = 50


def find_matching_brace(text: str, start: int) -> int | None:
    """Find the index of the ``}`` closing the ``{`` at ``start``.

    Braces inside JSON string literals are ignored. Nesting is tracked
    across the whole remaining text, newlines included.

    Returns:
        Index of the closing brace, or None if depth never returns to zero.
    """
    depth = 0
    in_string = False
    escaped = False

    for i in range(start, len(text)):
        char = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return i
    return None


def _loads(candidate: str) -> Any:
    try:
        return json.loads(candidate)
    except (ValueError, RecursionError):
        return None


class StructuredResponseExtractor:
    """Recovers a typed article payload from model output."""

    def extract(self, raw_text: str) -> ArticlePayload:
        """Extract title, content and SEO fields.

        Args:
            raw_text: Raw model response.

        Returns:
            Best-effort payload. Title and content are never empty.
        """
        text = raw_text if isinstance(raw_text, str) else str(raw_text or "")

        for strategy, candidate in self._candidates(text):
            parsed = _loads(candidate)
            recognized = recognize(parsed)
            if recognized is None:
                continue

            payload = self._build(text, strategy, recognized, parsed)
            _logger.info(
                f"EXTRACTION | strategy:{strategy.value} | shape:{recognized.shape.value} | "
                f"seo:{payload.seo_source.value} | title_len:{len(payload.title)} | "
                f"content_len:{len(payload.content)}"
            )
            return payload

        payload = self._fallback(text)
        _logger.warning(
            f"EXTRACTION | strategy:heuristic | no JSON recovered | "
            f"placeholder_title:{payload.title == PLACEHOLDER_TITLE} | preview:{text[:200]!r}"
        )
        return payload

    # ------------------------------------------------------------------
    # Candidate strategies
    # ------------------------------------------------------------------

    def _candidates(self, text: str) -> Iterator[tuple[ExtractionStrategy, str]]:
        """Yield candidate JSON documents in strategy order, lazily."""
        stripped = text.strip()
        if not stripped:
            return

        # 1. Whole text
        yield ExtractionStrategy.DIRECT, stripped

        # 2. Fenced ```json block
        fenced = FENCED_JSON_PATTERN.search(text)
        if fenced:
            yield ExtractionStrategy.FENCED_BLOCK, fenced.group(1).strip()

        # 3. First balanced {...}
        start = text.find("{")
        if start != -1:
            end = find_matching_brace(text, start)
            if end is not None:
                yield ExtractionStrategy.BRACE_SCAN, text[start:end + 1]

        # 4. JSON encoded inside a JSON string literal
        quoted = QUOTED_JSON_PATTERN.search(text)
        if quoted:
            unquoted = _loads(quoted.group(0))
            if isinstance(unquoted, str):
                yield ExtractionStrategy.QUOTED_JSON, unquoted

        # 5. First line starting with "{", accumulated until balanced
        line_block = self._line_scan(text)
        if line_block:
            yield ExtractionStrategy.LINE_SCAN, line_block

    @staticmethod
    def _line_scan(text: str) -> str | None:
        offset = 0
        for line in text.split("\n"):
            if line.strip().startswith("{"):
                start = offset + line.index("{")
                end = find_matching_brace(text, start)
                if end is None:
                    return None
                return text[start:end + 1].strip()
            offset += len(line) + 1
        return None

    # ------------------------------------------------------------------
    # Payload assembly
    # ------------------------------------------------------------------

    def _build(
        self,
        text: str,
        strategy: ExtractionStrategy,
        recognized: RecognizedPayload,
        parsed: dict[str, Any],
    ) -> ArticlePayload:
        extras = dict(recognized.extras)
        meta_description, tags, seo_source = self._extract_seo(text, recognized, parsed)
        extras["meta_description"] = meta_description
        extras["tags"] = tags

        return ArticlePayload(
            title=recognized.title,
            content=recognized.content,
            strategy=strategy,
            shape=recognized.shape,
            seo_source=seo_source,
            raw_response=text,
            parsed=parsed,
            **extras,
        )

    def _extract_seo(
        self,
        text: str,
        recognized: RecognizedPayload | None,
        parsed: dict[str, Any] | None,
    ) -> tuple[str | None, list[str], SeoSource]:
        """Pick meta description and tags from the best available source."""
        if recognized is not None and recognized.shape == PayloadShape.ADVANCED:
            return (
                recognized.extras.get("meta_description"),
                list(recognized.extras.get("tags") or []),
                SeoSource.ADVANCED,
            )

        if parsed is not None:
            legacy = read_legacy_seo(parsed)
            if legacy is not None:
                meta, tags = legacy
                return meta, tags, SeoSource.LEGACY

        meta, tags = self.scan_seo_labels(text)
        if meta or tags:
            return meta, tags, SeoSource.REGEX
        return None, [], SeoSource.NONE

    @staticmethod
    def scan_seo_labels(text: str) -> tuple[str | None, list[str]]:
        """Best-effort ``meta description:`` / ``tags:`` label scan.

        May produce false positives; callers see ``SeoSource.REGEX``.
        """
        meta_match = META_DESCRIPTION_PATTERN.search(text)
        meta = meta_match.group(1).strip() if meta_match else None

        tags: list[str] = []
        tags_match = TAGS_PATTERN.search(text)
        if tags_match:
            for raw_tag in tags_match.group(1).split(","):
                tag = raw_tag.strip().strip("\"'#[]")
                if tag and len(tag) <= MAX_TAG_LENGTH:
                    tags.append(tag)
            tags = tags[:MAX_REGEX_TAGS]

        return meta or None, tags

    # ------------------------------------------------------------------
    # Heuristic fallback
    # ------------------------------------------------------------------

    def _fallback(self, text: str) -> ArticlePayload:
        title = self._guess_title(text)

        content = text
        if title:
            index = text.find(title)
            if index >= 0:
                content = text[index + len(title):]

        content = content.lstrip()
        content = FENCE_MARKER_PATTERN.sub("", content)
        content = SURROUNDING_QUOTES_PATTERN.sub(r"\1", content).strip()

        meta, tags = self.scan_seo_labels(text)

        return ArticlePayload(
            title=title or PLACEHOLDER_TITLE,
            content=content or PLACEHOLDER_CONTENT,
            meta_description=meta,
            tags=tags,
            strategy=ExtractionStrategy.HEURISTIC,
            shape=PayloadShape.TEXT,
            seo_source=SeoSource.REGEX if (meta or tags) else SeoSource.NONE,
            raw_response=text,
        )

    @staticmethod
    def _guess_title(text: str) -> str:
        """First title candidate within the accepted length bounds, or ''."""
        for pattern in TITLE_PATTERNS:
            match = pattern.search(text)
            if not match:
                continue
            candidate = re.sub(r"[\"'`]", "", match.group(1)).strip()
            if MIN_TITLE_LENGTH <= len(candidate) <= MAX_TITLE_LENGTH:
                return candidate
        return ""
