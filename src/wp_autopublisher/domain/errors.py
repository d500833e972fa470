"""Domain errors.

These are invariant violations and programming errors. Expected failure
modes (network, provider, parse) are returned as ``Failure`` instead.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for aggregate invariant violations."""


class ValidationError(DomainError):
    """A value object or entity was given invalid data."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class InvalidStateTransition(DomainError):
    """A transition not present in the state table was attempted."""

    def __init__(self, entity: str, source: str, target: str):
        super().__init__(f"Illegal {entity} transition: {source} -> {target}")
        self.entity = entity
        self.source = source
        self.target = target


class MaxRetriesExceeded(DomainError):
    """retry() was called after the retry budget was spent."""

    def __init__(self, retry_count: int, max_retries: int):
        super().__init__(f"Max retries exceeded ({retry_count}/{max_retries})")
        self.retry_count = retry_count
        self.max_retries = max_retries


class InvariantViolation(DomainError):
    """The aggregate would be left in an inconsistent state."""
