"""Tests for WordPressPublishingService.

Tests cover:
- Post body preparation from content, metadata and target
- publish/update/delete/get_status over a mocked transport
- Target validation and connection testing
"""

from __future__ import annotations

import json

import httpx
import pytest

from wp_autopublisher.core.types import Failure, Success
from wp_autopublisher.domain.publication import PublicationMetadata, PublicationTarget
from wp_autopublisher.wordpress.publishing import (
    PublishingContent,
    WordPressPublishingService,
    map_wordpress_status,
    prepare_post_data,
)

SITE_URL = "https://blog.example.com"


def post_json(**overrides) -> dict:
    data = {
        "id": 101,
        "status": "draft",
        "link": f"{SITE_URL}/?p=101",
        "slug": "hello",
        "date": "2026-10-19T08:00:00",
        "modified": "2026-10-19T08:05:00",
        "title": {"rendered": "Hello"},
        "excerpt": {"rendered": "<p>Short</p>"},
        "categories": [4],
        "tags": [9],
    }
    data.update(overrides)
    return data


class TestPreparePostData:
    """Tests for prepare_post_data()."""

    def test_minimal(self, wp_target, publishing_content):
        post = prepare_post_data(publishing_content, PublicationMetadata(), wp_target)

        assert post == {
            "title": "Hello",
            "content": "<p>World</p>",
            "status": "draft",
            "excerpt": "Short summary",
        }

    def test_full(self, publishing_content):
        target = PublicationTarget.wordpress(
            "blog", SITE_URL, "editor", "pw", status="publish", author=7, custom_fields={"source": "feed"},
        )
        metadata = PublicationMetadata(
            title="Override",
            featured_image_id=55,
            categories=[4],
            tags=[9, 10],
            custom_fields={"lang": "en"},
        )

        post = prepare_post_data(publishing_content, metadata, target)

        assert post["title"] == "Override"
        assert post["status"] == "publish"
        assert post["author"] == 7
        assert post["featured_media"] == 55
        assert post["categories"] == [4]
        assert post["tags"] == [9, 10]
        assert post["meta"] == {"source": "feed", "lang": "en"}

    def test_metadata_excerpt_used_when_content_has_none(self, wp_target):
        content = PublishingContent(title="T", content="C")

        post = prepare_post_data(content, PublicationMetadata(excerpt="From metadata"), wp_target)

        assert post["excerpt"] == "From metadata"


class TestStatusMapping:
    @pytest.mark.parametrize(
        "wp_status,expected",
        [
            ("publish", "published"),
            ("future", "scheduled"),
            ("pending", "pending"),
            ("draft", "draft"),
            ("private", "draft"),
            ("trash", "draft"),
            (None, "draft"),
        ],
    )
    def test_mapping(self, wp_status, expected):
        assert map_wordpress_status(wp_status) == expected


class TestPublish:
    """Tests for publish() and update()."""

    @pytest.mark.asyncio
    async def test_publish(self, wp_target, publishing_content, mock_transport):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json=post_json())

        service = WordPressPublishingService(http_client=mock_transport(handler))

        result = await service.publish(wp_target, publishing_content, PublicationMetadata(tags=[9]))

        assert isinstance(result, Success)
        assert result.value.external_id == "101"
        assert result.value.external_url == f"{SITE_URL}/?p=101"
        assert result.value.status == "draft"
        assert result.value.metadata["slug"] == "hello"
        assert seen["path"] == "/wp-json/wp/v2/posts"
        assert seen["body"]["tags"] == [9]

    @pytest.mark.asyncio
    async def test_publish_auth_failure(self, wp_target, publishing_content, mock_transport):
        client = mock_transport(lambda request: httpx.Response(401, json={"message": "Sorry"}))
        service = WordPressPublishingService(http_client=client)

        result = await service.publish(wp_target, publishing_content, PublicationMetadata())

        assert isinstance(result, Failure)
        assert result.code == "AUTHENTICATION_FAILED"
        assert result.details["platform"] == "wordpress"

    @pytest.mark.asyncio
    async def test_publish_server_error_retryable(self, wp_target, publishing_content, mock_transport):
        client = mock_transport(lambda request: httpx.Response(500, json={"message": "Fatal"}))
        service = WordPressPublishingService(http_client=client)

        result = await service.publish(wp_target, publishing_content, PublicationMetadata())

        assert result.code == "PLATFORM_ERROR"
        assert result.is_retryable

    @pytest.mark.asyncio
    async def test_publish_without_id(self, wp_target, publishing_content, mock_transport):
        client = mock_transport(lambda request: httpx.Response(201, json={"status": "draft"}))
        service = WordPressPublishingService(http_client=client)

        result = await service.publish(wp_target, publishing_content, PublicationMetadata())

        assert result.code == "MALFORMED_RESPONSE"

    @pytest.mark.asyncio
    async def test_update_posts_to_item(self, wp_target, publishing_content, mock_transport):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["path"] = request.url.path
            return httpx.Response(200, json=post_json(status="publish"))

        service = WordPressPublishingService(http_client=mock_transport(handler))

        result = await service.update(wp_target, "101", publishing_content, PublicationMetadata())

        assert result.value.status == "published"
        assert seen == {"method": "POST", "path": "/wp-json/wp/v2/posts/101"}

    @pytest.mark.parametrize("body", [[post_json()], {"status": "publish"}, {"id": None}])
    @pytest.mark.asyncio
    async def test_update_malformed_body(self, wp_target, publishing_content, mock_transport, body):
        client = mock_transport(lambda request: httpx.Response(200, json=body))
        service = WordPressPublishingService(http_client=client)

        result = await service.update(wp_target, "101", publishing_content, PublicationMetadata())

        assert isinstance(result, Failure)
        assert result.code == "MALFORMED_RESPONSE"
        assert result.details["external_id"] == "101"


class TestInspect:
    """Tests for delete() and get_status()."""

    @pytest.mark.asyncio
    async def test_delete(self, wp_target, mock_transport):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["force"] = request.url.params.get("force")
            return httpx.Response(200, json={"deleted": True})

        service = WordPressPublishingService(http_client=mock_transport(handler))

        result = await service.delete(wp_target, "101")

        assert isinstance(result, Success)
        assert seen["force"] == "true"

    @pytest.mark.asyncio
    async def test_get_status(self, wp_target, mock_transport):
        client = mock_transport(lambda request: httpx.Response(200, json=post_json(status="future")))
        service = WordPressPublishingService(http_client=client)

        result = await service.get_status(wp_target, "101")

        assert result.value["status"] == "scheduled"
        assert result.value["url"] == f"{SITE_URL}/?p=101"
        assert result.value["metadata"]["title"] == "Hello"
        assert result.value["metadata"]["excerpt"] == "<p>Short</p>"

    @pytest.mark.asyncio
    async def test_missing_post_is_deleted(self, wp_target, mock_transport):
        client = mock_transport(lambda request: httpx.Response(404, json={"code": "rest_post_invalid_id"}))
        service = WordPressPublishingService(http_client=client)

        result = await service.get_status(wp_target, "101")

        assert result.value == {"external_id": "101", "status": "deleted"}

    @pytest.mark.parametrize("body", [[post_json()], {"status": "publish"}])
    @pytest.mark.asyncio
    async def test_get_status_malformed_body(self, wp_target, mock_transport, body):
        client = mock_transport(lambda request: httpx.Response(200, json=body))
        service = WordPressPublishingService(http_client=client)

        result = await service.get_status(wp_target, "101")

        assert result.code == "MALFORMED_RESPONSE"

    @pytest.mark.asyncio
    async def test_get_status_other_error(self, wp_target, mock_transport):
        client = mock_transport(lambda request: httpx.Response(403, json={"message": "Forbidden"}))
        service = WordPressPublishingService(http_client=client)

        result = await service.get_status(wp_target, "101")

        assert result.code == "AUTHORIZATION_FAILED"


class TestValidateTarget:
    """Tests for validate_target()."""

    @pytest.mark.asyncio
    async def test_valid(self, wp_target):
        result = await WordPressPublishingService().validate_target(wp_target)

        assert result.value["is_valid"] is True
        assert result.value["warnings"] == []
        assert result.value["capabilities"]["supports_scheduling"] is True

    @pytest.mark.asyncio
    async def test_plain_http_warns(self):
        target = PublicationTarget.wordpress("blog", "http://blog.example.com", "editor", "pw")

        result = await WordPressPublishingService().validate_target(target)

        assert result.value["is_valid"] is True
        assert "unencrypted" in result.value["warnings"][0]

    @pytest.mark.asyncio
    async def test_missing_scheme_warns(self):
        target = PublicationTarget.wordpress("blog", "blog.example.com", "editor", "pw")

        result = await WordPressPublishingService().validate_target(target)

        assert result.value["is_valid"] is True
        assert "https://" in result.value["warnings"][0]

    @pytest.mark.asyncio
    async def test_bad_scheme_invalid(self):
        target = PublicationTarget.wordpress("blog", "ftp://blog.example.com", "editor", "pw")

        result = await WordPressPublishingService().validate_target(target)

        assert result.value["is_valid"] is False
        assert result.value["errors"] == ["Invalid site URL format"]


class TestConnection:
    """Tests for test_connection()."""

    @pytest.mark.asyncio
    async def test_connected(self, wp_target, mock_transport):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/wp-json":
                return httpx.Response(200, json={"name": "Blog", "namespaces": ["wp/v2"]})
            return httpx.Response(200, json={"slug": "editor", "roles": ["editor"]})

        service = WordPressPublishingService(http_client=mock_transport(handler))

        result = await service.test_connection(wp_target)

        report = result.value
        assert report["is_successful"] is True
        assert report["authenticated_as"] == "editor"
        assert report["platform_info"]["name"] == "Blog"
        assert report["platform_info"]["version"] == "unknown"
        assert report["platform_info"]["features"] == ["wp/v2"]

    @pytest.mark.asyncio
    async def test_rejected_credentials_still_success(self, wp_target, mock_transport):
        """An HTTP error answer is a completed, unsuccessful test."""
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/wp-json":
                return httpx.Response(200, json={"name": "Blog"})
            return httpx.Response(401, json={"message": "Not logged in"})

        service = WordPressPublishingService(http_client=mock_transport(handler))

        result = await service.test_connection(wp_target)

        assert isinstance(result, Success)
        assert result.value["is_successful"] is False
        assert result.value["code"] == "AUTHENTICATION_FAILED"
        assert result.value["error"].startswith("HTTP 401")

    @pytest.mark.asyncio
    async def test_unreachable(self, wp_target, mock_transport):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        service = WordPressPublishingService(http_client=mock_transport(handler))

        result = await service.test_connection(wp_target)

        assert isinstance(result, Failure)
        assert result.code == "NETWORK_ERROR"
