"""Publishing posts to WordPress through ``/wp-json/wp/v2/posts``."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlparse

import httpx

from ..core.types import Result, Success, failure
from ..domain.publication import PublicationMetadata, PublicationTarget
from .client import WordPressClient
from .errors import WordPressAPIError

_logger = logging.getLogger("wordpress_api")

SUPPORTED_PLATFORMS = ("wordpress",)

# WordPress post status -> our status
WORDPRESS_STATUS_MAP = {
    "publish": "published",
    "pending": "pending",
    "future": "scheduled",
}

WORDPRESS_CAPABILITIES: dict[str, Any] = {
    "supports_scheduling": True,
    "supports_featured_images": True,
    "supports_categories": True,
    "supports_tags": True,
    "supports_custom_fields": True,
    "supports_excerpts": True,
    "supports_attachments": True,
    "max_title_length": 255,
    "max_content_length": None,
    "max_excerpt_length": 320,
    "allowed_file_types": ["image/jpeg", "image/png", "image/gif", "image/webp"],
    "max_file_size": 10 * 1024 * 1024,
}


def map_wordpress_status(wp_status: str | None) -> str:
    """Map a WordPress post status; draft, private and unknown become draft."""
    return WORDPRESS_STATUS_MAP.get(wp_status or "", "draft")


@dataclass
class PublishingContent:
    """Article body handed to the publishing service."""

    title: str
    content: str
    excerpt: str | None = None


@dataclass
class PublishingResult:
    """Outcome of a publish or update call."""

    external_id: str
    external_url: str | None
    status: str
    metadata: dict[str, Any] = field(default_factory=dict)


def prepare_post_data(
    content: PublishingContent,
    metadata: PublicationMetadata,
    target: PublicationTarget,
) -> dict[str, Any]:
    """Build the JSON body for a create or update call."""
    config = target.configuration
    post: dict[str, Any] = {
        "title": metadata.title or content.title,
        "content": content.content,
        "status": target.post_status,
    }

    excerpt = content.excerpt or metadata.excerpt
    if excerpt:
        post["excerpt"] = excerpt
    if metadata.categories:
        post["categories"] = list(metadata.categories)
    if metadata.tags:
        post["tags"] = list(metadata.tags)
    if config.get("author"):
        post["author"] = config["author"]
    if metadata.featured_image_id:
        post["featured_media"] = metadata.featured_image_id

    meta = {**(config.get("custom_fields") or {}), **metadata.custom_fields}
    if meta:
        post["meta"] = meta

    return post


def _result_from_post(post: dict[str, Any]) -> PublishingResult:
    return PublishingResult(
        external_id=str(post["id"]),
        external_url=post.get("link"),
        status=map_wordpress_status(post.get("status")),
        metadata={
            "wordpress_id": post["id"],
            "slug": post.get("slug"),
            "permalink": post.get("link"),
            "date_created": post.get("date"),
            "date_modified": post.get("modified"),
        },
    )


def _is_post(body: Any) -> bool:
    return isinstance(body, dict) and body.get("id") not in (None, "")


def _malformed(action: str, target: PublicationTarget, **extra: Any):
    return WordPressAPIError(
        f"{action} response is missing the post id", code="MALFORMED_RESPONSE"
    ).to_failure(platform=target.platform, **extra)


def _rendered(value: Any) -> Any:
    return value.get("rendered") if isinstance(value, dict) else value


class WordPressPublishingService:
    """Creates, updates and inspects posts on a WordPress site.

    Every operation returns a Result; HTTP and transport errors never
    escape as exceptions.
    """

    def __init__(self, http_client: httpx.AsyncClient | None = None):
        self._http_client = http_client

    def get_supported_platforms(self) -> list[str]:
        return list(SUPPORTED_PLATFORMS)

    def is_platform_supported(self, platform: str) -> bool:
        return platform in SUPPORTED_PLATFORMS

    def _client(self, target: PublicationTarget) -> WordPressClient:
        return WordPressClient.from_target(target, http_client=self._http_client)

    def _unsupported(self, target: PublicationTarget):
        return failure(
            "UNSUPPORTED_FEATURE",
            f"Platform {target.platform} is not supported by WordPress service",
            platform=target.platform,
        )

    async def publish(
        self,
        target: PublicationTarget,
        content: PublishingContent,
        metadata: PublicationMetadata,
    ) -> Result[PublishingResult]:
        """Create a post.

        Returns:
            Success with external id and URL, or Failure with a stable
            code and retry eligibility.
        """
        if not self.is_platform_supported(target.platform):
            return self._unsupported(target)

        post_data = prepare_post_data(content, metadata, target)
        async with self._client(target) as client:
            try:
                post = await client.request("POST", "wp/v2/posts", json=post_data)
            except WordPressAPIError as e:
                _logger.warning(f"PUBLISH | failed | {target} | {e.code} | {e}")
                return e.to_failure(platform=target.platform)

        if not _is_post(post):
            return _malformed("Publish", target)

        result = _result_from_post(post)
        _logger.info(f"PUBLISH | ok | {target} | id:{result.external_id} | {result.external_url}")
        return Success(result)

    async def update(
        self,
        target: PublicationTarget,
        external_id: str,
        content: PublishingContent,
        metadata: PublicationMetadata,
    ) -> Result[PublishingResult]:
        """Replace an existing post's content and metadata."""
        post_data = prepare_post_data(content, metadata, target)
        async with self._client(target) as client:
            try:
                post = await client.request("POST", f"wp/v2/posts/{external_id}", json=post_data)
            except WordPressAPIError as e:
                return e.to_failure(platform=target.platform, external_id=external_id)

        if not _is_post(post):
            return _malformed("Update", target, external_id=external_id)
        return Success(_result_from_post(post))

    async def delete(self, target: PublicationTarget, external_id: str) -> Result[None]:
        """Delete a post permanently."""
        async with self._client(target) as client:
            try:
                await client.request("DELETE", f"wp/v2/posts/{external_id}", params={"force": "true"})
            except WordPressAPIError as e:
                return e.to_failure(platform=target.platform, external_id=external_id)
        _logger.info(f"DELETE | {target} | id:{external_id}")
        return Success(None)

    async def get_status(self, target: PublicationTarget, external_id: str) -> Result[dict[str, Any]]:
        """Read a post's current state; a missing post reports ``deleted``."""
        async with self._client(target) as client:
            try:
                post = await client.request("GET", f"wp/v2/posts/{external_id}")
            except WordPressAPIError as e:
                if e.status_code == 404:
                    return Success({"external_id": external_id, "status": "deleted"})
                return e.to_failure(platform=target.platform, external_id=external_id)

        if not _is_post(post):
            return _malformed("Status", target, external_id=external_id)
        return Success({
            "external_id": str(post["id"]),
            "status": map_wordpress_status(post.get("status")),
            "published_at": post.get("date"),
            "last_modified": post.get("modified"),
            "url": post.get("link"),
            "metadata": {
                "slug": post.get("slug"),
                "title": _rendered(post.get("title")),
                "excerpt": _rendered(post.get("excerpt")),
                "categories": post.get("categories"),
                "tags": post.get("tags"),
            },
        })

    async def validate_target(self, target: PublicationTarget) -> Result[dict[str, Any]]:
        """Check a target's configuration without calling the site."""
        errors: list[str] = []
        warnings: list[str] = []

        if not self.is_platform_supported(target.platform):
            errors.append(f"Platform {target.platform} is not supported")
        if not target.username:
            errors.append("WordPress username is required")
        if not target.password:
            errors.append("WordPress password is required")

        if not target.site_url:
            errors.append("Site URL is required")
        else:
            parsed = urlparse(target.site_url)
            if not parsed.scheme:
                warnings.append("Site URL has no scheme; https:// will be assumed")
            elif parsed.scheme not in ("http", "https") or not parsed.netloc:
                errors.append("Invalid site URL format")
            elif parsed.scheme == "http":
                warnings.append("Site URL uses plain http; credentials are sent unencrypted")

        return Success({
            "is_valid": not errors,
            "errors": errors,
            "warnings": warnings,
            "capabilities": dict(WORDPRESS_CAPABILITIES),
        })

    async def test_connection(self, target: PublicationTarget) -> Result[dict[str, Any]]:
        """Fetch the REST index and report reachability and platform info.

        An HTTP error answer is still a successful test run; only a
        transport failure is returned as Failure.
        """
        start = time.perf_counter()
        async with self._client(target) as client:
            try:
                site_info = await client.request("GET", "")
                user = await client.request("GET", "wp/v2/users/me", params={"context": "edit"})
            except WordPressAPIError as e:
                response_time = round((time.perf_counter() - start) * 1000)
                if e.status_code is None:
                    return e.to_failure(platform=target.platform)
                return Success({
                    "is_successful": False,
                    "response_time": response_time,
                    "last_checked": time.time(),
                    "error": f"HTTP {e.status_code}: {e}",
                    "code": e.code,
                })

        response_time = round((time.perf_counter() - start) * 1000)
        info = site_info if isinstance(site_info, dict) else {}
        user = user if isinstance(user, dict) else {}
        return Success({
            "is_successful": True,
            "response_time": response_time,
            "last_checked": time.time(),
            "authenticated_as": user.get("slug") or user.get("name"),
            "roles": user.get("roles") or [],
            "platform_info": {
                "name": info.get("name") or "WordPress",
                "version": info.get("version") or "unknown",
                "features": list(info.get("namespaces") or []),
            },
        })
