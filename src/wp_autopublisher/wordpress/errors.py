"""WordPress REST API errors and status-code classification."""

from __future__ import annotations

from typing import Any

from ..core.types import Failure


class WordPressAPIError(Exception):
    """Error raised by the WordPress REST client."""

    def __init__(
        self,
        message: str,
        code: str = "NETWORK_ERROR",
        status_code: int | None = None,
        is_retryable: bool = False,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.status_code = status_code
        self.is_retryable = is_retryable
        self.details = details or {}

    def to_failure(self, **extra: Any) -> Failure:
        """Convert to a Failure at the service boundary."""
        details = {
            "code": self.code,
            "is_retryable": self.is_retryable,
            "status_code": self.status_code,
            **self.details,
            **extra,
        }
        return Failure(str(self), details)


# Known WordPress error classes with explanations and retry guidance
WORDPRESS_ERROR_CODES: dict[str, dict[str, Any]] = {
    "AUTHENTICATION_FAILED": {
        "description": "Invalid username or application password",
        "user_message": "WordPress rejected the credentials. Check the username and application password.",
        "is_retryable": False,
    },
    "AUTHORIZATION_FAILED": {
        "description": "The user lacks the capability for this action",
        "user_message": "The WordPress user is not allowed to do this. Check the user's role.",
        "is_retryable": False,
    },
    "EXTERNAL_ID_NOT_FOUND": {
        "description": "Post or media item does not exist",
        "user_message": "The post no longer exists on WordPress.",
        "is_retryable": False,
    },
    "CONTENT_TOO_LARGE": {
        "description": "Request body exceeds the server limit",
        "user_message": "The content or file is too large for this WordPress site.",
        "is_retryable": False,
    },
    "RATE_LIMIT_EXCEEDED": {
        "description": "Too many requests",
        "user_message": "WordPress is rate limiting requests. Will retry later.",
        "is_retryable": True,
    },
    "PLATFORM_ERROR": {
        "description": "WordPress returned a server error",
        "user_message": "WordPress had an internal error. This is usually temporary.",
        "is_retryable": True,
    },
    "NETWORK_ERROR": {
        "description": "Request could not be completed",
        "user_message": "Could not reach the WordPress site.",
        "is_retryable": True,
    },
    "MALFORMED_RESPONSE": {
        "description": "Response is not the expected JSON",
        "user_message": "WordPress answered with HTML instead of JSON. Is the REST API enabled?",
        "is_retryable": False,
    },
}

RETRYABLE_STATUS_CODES = {408, 429}


def error_code_for_status(status_code: int) -> str:
    """Map an HTTP status to a WordPress error code."""
    if status_code == 401:
        return "AUTHENTICATION_FAILED"
    if status_code == 403:
        return "AUTHORIZATION_FAILED"
    if status_code == 404:
        return "EXTERNAL_ID_NOT_FOUND"
    if status_code == 413:
        return "CONTENT_TOO_LARGE"
    if status_code == 429:
        return "RATE_LIMIT_EXCEEDED"
    if status_code >= 500:
        return "PLATFORM_ERROR"
    return "NETWORK_ERROR"


def is_retryable_status(status_code: int) -> bool:
    """Server errors, rate limits and request timeouts are worth retrying."""
    return status_code >= 500 or status_code in RETRYABLE_STATUS_CODES
