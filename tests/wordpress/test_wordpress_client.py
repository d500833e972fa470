"""Tests for WordPressClient and status classification."""

from __future__ import annotations

import base64

import httpx
import pytest

from wp_autopublisher.wordpress.client import WordPressClient, looks_like_html, normalize_site_url
from wp_autopublisher.wordpress.errors import WordPressAPIError, error_code_for_status, is_retryable_status


def make_client(mock_transport, handler) -> WordPressClient:
    return WordPressClient(
        "blog.example.com/", "editor", "abcd efgh", http_client=mock_transport(handler)
    )


class TestNormalizeSiteUrl:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("example.com", "https://example.com"),
            ("https://example.com/", "https://example.com"),
            ("  http://example.com/blog/ ", "http://example.com/blog"),
        ],
    )
    def test_normalized(self, raw, expected):
        assert normalize_site_url(raw) == expected


class TestRequest:
    """Tests for request()."""

    @pytest.mark.asyncio
    async def test_auth_and_url(self, mock_transport):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["authorization"]
            return httpx.Response(200, json={"id": 42})

        client = make_client(mock_transport, handler)

        body = await client.request("GET", "/wp/v2/posts/42")

        assert body == {"id": 42}
        assert seen["url"] == "https://blog.example.com/wp-json/wp/v2/posts/42"
        expected = base64.b64encode(b"editor:abcd efgh").decode()
        assert seen["auth"] == f"Basic {expected}"

    @pytest.mark.asyncio
    async def test_root_endpoint(self, mock_transport):
        client = make_client(mock_transport, lambda request: httpx.Response(200, json={}))

        assert client.url_for("") == "https://blog.example.com/wp-json"

    @pytest.mark.parametrize(
        "status,code,retryable",
        [
            (401, "AUTHENTICATION_FAILED", False),
            (403, "AUTHORIZATION_FAILED", False),
            (404, "EXTERNAL_ID_NOT_FOUND", False),
            (413, "CONTENT_TOO_LARGE", False),
            (429, "RATE_LIMIT_EXCEEDED", True),
            (500, "PLATFORM_ERROR", True),
            (503, "PLATFORM_ERROR", True),
        ],
    )
    @pytest.mark.asyncio
    async def test_status_errors(self, mock_transport, status, code, retryable):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, json={"code": "rest_error", "message": "Something went wrong"})

        client = make_client(mock_transport, handler)

        with pytest.raises(WordPressAPIError) as exc_info:
            await client.request("POST", "wp/v2/posts", json={"title": "x"})

        error = exc_info.value
        assert error.code == code
        assert error.status_code == status
        assert error.is_retryable is retryable
        assert str(error) == "Something went wrong"
        assert error.details["wp_code"] == "rest_error"

    @pytest.mark.asyncio
    async def test_html_success_is_malformed(self, mock_transport):
        """A 200 theme page is not a valid API answer."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<!DOCTYPE html><html>Blog</html>", headers={"content-type": "text/html"})

        client = make_client(mock_transport, handler)

        with pytest.raises(WordPressAPIError) as exc_info:
            await client.request("GET", "wp/v2/posts")

        assert exc_info.value.code == "MALFORMED_RESPONSE"
        assert "HTML" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_html_error_page(self, mock_transport):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="<html>Bad gateway</html>")

        client = make_client(mock_transport, handler)

        with pytest.raises(WordPressAPIError) as exc_info:
            await client.request("GET", "wp/v2/posts")

        assert exc_info.value.code == "PLATFORM_ERROR"
        assert exc_info.value.details["html_response"] is True

    @pytest.mark.asyncio
    async def test_invalid_json(self, mock_transport):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="{broken", headers={"content-type": "application/json"})

        client = make_client(mock_transport, handler)

        with pytest.raises(WordPressAPIError) as exc_info:
            await client.request("GET", "wp/v2/posts")

        assert exc_info.value.code == "MALFORMED_RESPONSE"

    @pytest.mark.asyncio
    async def test_transport_error(self, mock_transport):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = make_client(mock_transport, handler)

        with pytest.raises(WordPressAPIError) as exc_info:
            await client.request("GET", "wp/v2/posts")

        assert exc_info.value.code == "NETWORK_ERROR"
        assert exc_info.value.is_retryable
        assert exc_info.value.status_code is None


class TestClassification:
    def test_unknown_client_error(self):
        assert error_code_for_status(418) == "NETWORK_ERROR"
        assert is_retryable_status(418) is False

    def test_request_timeout_retryable(self):
        assert is_retryable_status(408) is True

    def test_to_failure(self):
        failure = WordPressAPIError("nope", code="PLATFORM_ERROR", status_code=500, is_retryable=True).to_failure(
            platform="wordpress"
        )

        assert failure.code == "PLATFORM_ERROR"
        assert failure.is_retryable
        assert failure.details["platform"] == "wordpress"

    def test_looks_like_html_by_body(self):
        response = httpx.Response(200, text="  <html><body>hi</body></html>")

        assert looks_like_html(response)
