"""Unified article prompt.

One instruction block carries the source, the three customizable
instructions (title, content, image), the JSON schema the model must fill,
per-section guidance, style parameters and technical requirements.
"""

from __future__ import annotations

from .models import CustomPrompts, FeedItem, GenerationSettings

TITLE_FRAMING = "Write the title for the article generated from the source,"
CONTENT_FRAMING = "Write an article generated from the source,"
IMAGE_FRAMING = "Write the prompt for generating the article's featured image,"

ARTICLE_SCHEMA = """```json
{
  "article": {
    "basic_data": {
      "title": "",
      "slug": "",
      "category": "",
      "tags": [],
      "status": "draft"
    },

    "seo_critical": {
      "focus_keyword": "",
      "seo_title": "",
      "meta_description": "",
      "h1_tag": ""
    },

    "content": "",

    "featured_image": {
      "ai_prompt": "",
      "alt_text": "",
      "filename": ""
    },

    "internal_seo": {
      "internal_links": [
        {
          "anchor_text": "",
          "url": ""
        }
      ],
      "related_keywords": [],
      "entities": []
    },

    "user_engagement": {
      "reading_time": "",
      "cta": "",
      "key_takeaways": []
    }
  }
}
```"""

SECTION_GUIDE = """SECTION-BY-SECTION INSTRUCTIONS:

BASIC_DATA:
- title: Apply the title instructions given above
- slug: An SEO-friendly slug (e.g. "denmark-drones-eu-summit")
- category: The most fitting category (e.g. "Politics", "News", "Sports")
- tags: Array of 5-8 relevant, specific tags
- status: "draft" (default)

SEO_CRITICAL:
- focus_keyword: Main SEO keyword (2-3 words max)
- seo_title: SERP-optimized title (50-60 characters)
- meta_description: Optimized meta description (150-160 characters)
- h1_tag: Main H1 of the article

CONTENT:
- content: Apply the content instructions given above. A complete, well structured HTML article with at least 3-4 H2 sections, paragraphs, lists and semantic formatting.

FEATURED_IMAGE:
- ai_prompt: Apply the image instructions given above
- alt_text: SEO-friendly alternative text for the image
- filename: Suggested file name (e.g. "article-image-2025.jpg")

INTERNAL_SEO:
- internal_links: 3-5 internal link suggestions with anchor text
- related_keywords: 10-15 related keywords for semantic SEO
- entities: Main entities mentioned in the article

USER_ENGAGEMENT:
- reading_time: Estimated reading time (e.g. "5 minutes")
- cta: Closing call-to-action for the reader
- key_takeaways: 3-5 key points of the article"""

TECHNICAL_REQUIREMENTS = """TECHNICAL REQUIREMENTS:
- Respond ONLY with the valid JSON, no additional text
- All HTML content must be complete and well formed
- Use semantic HTML tags: <h2>, <h3>, <p>, <strong>, <em>, <ul>, <ol>, <li>, <blockquote>
- Use divs with CSS classes: <div class="intro">, <div class="section">, <div class="conclusion">
- Every section must stand on its own
- Optimize for on-page SEO and user experience
- The focus keyword must appear in the title, the H1, the meta description and the first paragraph
- Spread related keywords naturally through the text"""


def build_unified_prompt(
    feed_item: FeedItem,
    custom_prompts: CustomPrompts | None = None,
    settings: GenerationSettings | None = None,
) -> str:
    """Build the single instruction string sent to the generation provider."""
    prompts = custom_prompts or CustomPrompts()
    settings = settings or GenerationSettings()

    source_url = f"Original URL: {feed_item.url}\n" if feed_item.url else ""

    return f"""SOURCE TO PROCESS:
Original title: {feed_item.title}
Content: {feed_item.content}
{source_url}
INSTRUCTIONS:
1. TITLE: {TITLE_FRAMING} {prompts.title_prompt}
2. CONTENT: {CONTENT_FRAMING} {prompts.content_prompt}
3. IMAGE: {IMAGE_FRAMING} {prompts.image_prompt}

Generate a complete professional article as JSON with this detailed structure:

{ARTICLE_SCHEMA}

{SECTION_GUIDE}

STYLE PARAMETERS:
- Language: {settings.language}
- Tone: {settings.tone}
- Style: {settings.style}
- Target audience: {settings.target_audience}
- Target length: {settings.target_word_count} words

{TECHNICAL_REQUIREMENTS}

GENERATE THE ARTICLE NOW:"""
