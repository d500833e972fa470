"""WordPress REST API client.

Thin transport over ``/wp-json``: Basic auth with an application password,
numbered call logging to the ``wordpress_api`` logger, and one place where
HTTP failures become :class:`WordPressAPIError`.

API Reference:
https://developer.wordpress.org/rest-api/reference/
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .errors import WordPressAPIError, error_code_for_status, is_retryable_status

_api_logger = logging.getLogger("wordpress_api")

API_PREFIX = "/wp-json"


def normalize_site_url(site_url: str) -> str:
    """Normalize a site URL to ``scheme://host[/path]`` without trailing slash.

    >>> normalize_site_url("example.com/")
    'https://example.com'
    """
    url = site_url.strip()
    if not url.lower().startswith(("http://", "https://")):
        url = f"https://{url}"
    return url.rstrip("/")


def looks_like_html(response: httpx.Response) -> bool:
    """Whether the response body is an HTML document instead of JSON."""
    content_type = response.headers.get("content-type", "").lower()
    if "text/html" in content_type:
        return True
    head = response.text[:200].lstrip().lower()
    return head.startswith("<!doctype") or head.startswith("<html")


class WordPressClient:
    """Authenticated client for one WordPress site.

    Usage:
        async with WordPressClient("example.com", "editor", "app-pass") as client:
            post = await client.request("GET", "wp/v2/posts/42")
    """

    def __init__(
        self,
        site_url: str,
        username: str,
        password: str,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ):
        self.site_url = normalize_site_url(site_url)
        self._auth = httpx.BasicAuth(username, password)
        self._username = username
        self._http_client = http_client
        self._owns_client = http_client is None
        self._timeout = timeout

        # API call counter for logging
        self._api_call_count = 0

    @classmethod
    def from_target(cls, target: Any, http_client: httpx.AsyncClient | None = None) -> "WordPressClient":
        """Build a client from a PublicationTarget."""
        return cls(
            target.site_url,
            target.username,
            target.password,
            http_client=http_client,
            timeout=float(target.configuration.get("timeout", 60.0)),
        )

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client if we created it."""
        if self._http_client and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def url_for(self, endpoint: str) -> str:
        """Absolute URL for a REST endpoint such as ``wp/v2/posts``."""
        endpoint = endpoint.lstrip("/")
        if not endpoint:
            return f"{self.site_url}{API_PREFIX}"
        return f"{self.site_url}{API_PREFIX}/{endpoint}"

    async def request(
        self,
        method: str,
        endpoint: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
    ) -> Any:
        """Make a request to the WordPress REST API.

        Args:
            method: HTTP method.
            endpoint: Endpoint below ``/wp-json`` (e.g. ``wp/v2/posts``).
            json: JSON body.
            params: Query parameters.
            data: Multipart form fields.
            files: Multipart files.

        Returns:
            Decoded JSON body.

        Raises:
            WordPressAPIError: On transport failure, non-2xx status or a
                body that is not JSON.
        """
        self._api_call_count += 1
        call = self._api_call_count
        url = self.url_for(endpoint)
        _api_logger.info(f"API CALL #{call} | {method} {endpoint} | site: {self.site_url} | params: {params or {}}")

        client = await self._get_http_client()
        try:
            response = await client.request(
                method,
                url,
                json=json,
                params=params,
                data=data,
                files=files,
                auth=self._auth,
                headers={"Accept": "application/json"},
            )
        except httpx.TimeoutException as e:
            _api_logger.error(f"API CALL #{call} | TIMEOUT: {e}")
            raise WordPressAPIError(
                f"Request to {url} timed out", code="NETWORK_ERROR", is_retryable=True
            ) from e
        except httpx.HTTPError as e:
            _api_logger.error(f"API CALL #{call} | NETWORK ERROR: {e}")
            raise WordPressAPIError(
                f"Network error calling {url}: {e}", code="NETWORK_ERROR", is_retryable=True
            ) from e

        if response.status_code >= 400:
            raise self._error_from_response(call, response)

        if looks_like_html(response):
            _api_logger.error(f"API CALL #{call} | HTML RESPONSE | status: {response.status_code}")
            raise WordPressAPIError(
                f"Expected JSON from {url} but received an HTML document "
                f"(status {response.status_code}); check the site URL and that the REST API is enabled",
                code="MALFORMED_RESPONSE",
                status_code=response.status_code,
                details={"body_preview": response.text[:200]},
            )

        try:
            result = response.json()
        except ValueError as e:
            _api_logger.error(f"API CALL #{call} | INVALID JSON | status: {response.status_code}")
            raise WordPressAPIError(
                f"Invalid JSON from {url}",
                code="MALFORMED_RESPONSE",
                status_code=response.status_code,
                details={"body_preview": response.text[:200]},
            ) from e

        summary = list(result.keys())[:8] if isinstance(result, dict) else f"list[{len(result)}]"
        _api_logger.info(f"API CALL #{call} | SUCCESS {response.status_code}: {summary}")
        return result

    def _error_from_response(self, call: int, response: httpx.Response) -> WordPressAPIError:
        status = response.status_code
        code = error_code_for_status(status)
        details: dict[str, Any] = {}

        if looks_like_html(response):
            # Misconfigured endpoints answer with a theme or proxy page
            message = f"WordPress returned HTTP {status} with an HTML document instead of JSON"
            details["body_preview"] = response.text[:200]
            details["html_response"] = True
        else:
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                message = body.get("message") or f"WordPress returned HTTP {status}"
                if body.get("code"):
                    details["wp_code"] = body["code"]
            else:
                message = f"WordPress returned HTTP {status}"

        _api_logger.error(f"API CALL #{call} | ERROR {status} | {code} | {message}")
        return WordPressAPIError(
            message,
            code=code,
            status_code=status,
            is_retryable=is_retryable_status(status),
            details=details,
        )
