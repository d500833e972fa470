"""Shared test fixtures and configuration.

Provides targets, repositories, fake HTTP transports and image bytes for
testing the publishing pipeline. Async collaborators are AsyncMocks so
they can be awaited directly.
"""

from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Callable
from unittest.mock import AsyncMock

import httpx
import pytest
from PIL import Image

from wp_autopublisher.core.types import Success
from wp_autopublisher.domain.publication import Publication, PublicationMetadata, PublicationTarget
from wp_autopublisher.providers.config import ProviderConfig, WordPressSiteConfig
from wp_autopublisher.repositories.memory import in_memory_repositories
from wp_autopublisher.wordpress.publishing import PublishingContent, PublishingResult

SITE_URL = "https://blog.example.com"


@pytest.fixture
def wp_target() -> PublicationTarget:
    """WordPress target with draft posts."""
    return PublicationTarget.wordpress(
        site_id="blog",
        site_url=SITE_URL,
        username="editor",
        password="abcd efgh ijkl mnop",
    )


@pytest.fixture
def make_publication(wp_target: PublicationTarget) -> Callable[..., Publication]:
    """Factory for immediate publications.

    Usage:
        publication = make_publication(article_id="a-2", max_retries=1)
    """
    def _make(article_id: str = "article-1", max_retries: int = 3) -> Publication:
        return Publication.create_immediate(
            article_id,
            wp_target,
            metadata=PublicationMetadata(title="Hello", content="<p>World</p>"),
            max_retries=max_retries,
        )

    return _make


@pytest.fixture
def repositories():
    """In-memory (image repository, publication repository) pair."""
    return in_memory_repositories()


@pytest.fixture
def publishing_content() -> PublishingContent:
    return PublishingContent(title="Hello", content="<p>World</p>", excerpt="Short summary")


@pytest.fixture
def mock_publishing_service() -> AsyncMock:
    """Create a mock WordPressPublishingService that accepts any target."""
    service = AsyncMock()
    service.validate_target.return_value = Success({
        "is_valid": True,
        "errors": [],
        "warnings": [],
        "capabilities": {},
    })
    service.publish.return_value = Success(PublishingResult(
        external_id="101",
        external_url=f"{SITE_URL}/?p=101",
        status="published",
    ))
    return service


@pytest.fixture
def png_bytes() -> bytes:
    """A small valid PNG."""
    buffer = io.BytesIO()
    Image.new("RGB", (32, 16), (200, 40, 40)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def mock_transport() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Build an AsyncClient whose requests go to ``handler``.

    Usage:
        client = mock_transport(lambda request: httpx.Response(200, json={}))
    """
    def _client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _client


@pytest.fixture
def provider_config() -> ProviderConfig:
    """Config with one WordPress site whose password is inline."""
    return ProviderConfig(
        wordpress_sites={
            "blog": WordPressSiteConfig(
                site_id="blog",
                site_url=SITE_URL,
                username="editor",
                password="abcd efgh ijkl mnop",
                default_status="draft",
                author=7,
            ),
        },
    )


@pytest.fixture
def article_file(tmp_path: Path) -> Path:
    """Article JSON as written by the generate command."""
    path = tmp_path / "article.json"
    path.write_text(json.dumps({
        "article_id": "drones-summit",
        "title": "Drones Over The Summit",
        "content": "<h2>What happened</h2><p>Leaders met.</p>",
        "meta_description": "Leaders met to discuss drones.",
        "featured_image_id": 55,
    }), encoding="utf-8")
    return path
