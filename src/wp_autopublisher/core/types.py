"""Result type shared by every fallible operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful result containing a value."""

    value: T

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False


@dataclass(frozen=True)
class Failure:
    """Failed result containing an error message.

    ``details`` conventionally carries ``code`` (stable error code) and
    ``is_retryable`` so callers can decide without parsing the message.
    """

    error: str
    details: dict[str, Any] | None = None

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    @property
    def code(self) -> str | None:
        """Stable error code, if one was recorded."""
        if self.details:
            return self.details.get("code")
        return None

    @property
    def is_retryable(self) -> bool:
        """Whether the caller may retry the failed operation."""
        if self.details:
            return bool(self.details.get("is_retryable", False))
        return False


# Result type - either Success[T] or Failure
Result = Union[Success[T], Failure]


def failure(code: str, message: str, is_retryable: bool = False, **extra: Any) -> Failure:
    """Build a Failure carrying a stable error code.

    Args:
        code: Stable error code (e.g. ``NETWORK_ERROR``).
        message: Human readable message.
        is_retryable: Whether the operation may be retried.
        **extra: Additional detail fields.

    Returns:
        Failure with ``code`` and ``is_retryable`` in its details.
    """
    details: dict[str, Any] = {"code": code, "is_retryable": is_retryable}
    details.update(extra)
    return Failure(message, details)
