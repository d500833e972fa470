"""Search queries and generation prompts derived from article text."""

from __future__ import annotations

import re

# English and Italian function words; feeds arrive in both.
STOP_WORDS = frozenset({
    "the", "and", "for", "are", "but", "not", "you", "your", "with", "from", "that", "this",
    "what", "when", "where", "why", "how", "who", "will", "into", "over", "after", "about",
    "il", "la", "le", "lo", "gli", "un", "una", "dei", "delle", "del", "della", "di", "da",
    "in", "con", "su", "per", "tra", "fra", "a", "e", "o", "ma", "che", "se", "come",
    "quando", "dove", "perché", "cosa", "tutto", "tutti", "molto", "più", "anche", "solo",
    "ancora", "già", "sempre", "mai",
})

MAX_DALLE_PROMPT_LENGTH = 400
DALLE_STYLE_SUFFIX = ". Professional style, clean composition, suitable for article featured image."


def extract_keywords(text: str, min_length: int = 3, limit: int = 3) -> list[str]:
    """Lowercased words longer than ``min_length - 1`` chars, stop-words removed.

    Args:
        text: Source text.
        min_length: Minimum keyword length.
        limit: Maximum number of keywords.

    Returns:
        Keywords in order of appearance.
    """
    cleaned = re.sub(r"[^\w\s]", "", (text or "").lower())
    words = [w for w in cleaned.split() if len(w) >= min_length and w not in STOP_WORDS]
    return words[:limit]


def build_search_query(title: str) -> str:
    """First three title keywords, or the title itself if none survive."""
    keywords = extract_keywords(title, min_length=3, limit=3)
    return " ".join(keywords) if keywords else (title or "").strip()


def _finalize_prompt(prompt: str) -> str:
    optimized = prompt.strip()
    if "high quality" not in optimized and "professional" not in optimized:
        optimized += ", high quality, professional"
    if len(optimized) > MAX_DALLE_PROMPT_LENGTH:
        optimized = optimized[:MAX_DALLE_PROMPT_LENGTH - 3] + "..."
    return optimized


def build_dalle_prompt(title: str, content: str = "", custom_prompt: str | None = None) -> str:
    """Build an image generation prompt for an article.

    A custom prompt wins. Otherwise the main title concepts are combined
    with up to two content themes.
    """
    if custom_prompt and custom_prompt.strip():
        return _finalize_prompt(custom_prompt)

    main_concepts = " ".join(extract_keywords(title, min_length=3, limit=4)) or title.strip()
    prompt = f"A professional, high-quality image representing: {main_concepts}"

    if content and len(content) >= 50:
        # Strip markup so HTML tag names do not become themes
        plain = re.sub(r"<[^>]+>", " ", content)
        themes = extract_keywords(plain, min_length=4, limit=3)
        if themes:
            prompt += f", incorporating themes of {' and '.join(themes[:2])}"

    prompt += DALLE_STYLE_SUFFIX
    return _finalize_prompt(prompt)
