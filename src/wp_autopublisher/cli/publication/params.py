"""Immutable parameter dataclasses for publication commands."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class RetryParams:
    """Parameters for retrying a failed publication."""

    publication_id: str

    @classmethod
    def from_cli(cls, publication_id: str, **kwargs) -> "RetryParams":
        return cls(publication_id=publication_id.strip())


@dataclass(frozen=True)
class StatusParams:
    """Parameters for listing or inspecting publications."""

    publication_id: Optional[str]
    article_id: Optional[str]
    status: Optional[str]
    retryable_only: bool
    remote: bool

    @classmethod
    def from_cli(
        cls,
        publication_id: Optional[str] = None,
        article_id: Optional[str] = None,
        status: Optional[str] = None,
        retryable_only: bool = False,
        remote: bool = False,
        **kwargs,
    ) -> "StatusParams":
        """Create from CLI arguments."""
        return cls(
            publication_id=publication_id,
            article_id=article_id,
            status=status.lower() if status else None,
            retryable_only=retryable_only,
            remote=remote,
        )


@dataclass(frozen=True)
class ConnectionTestParams:
    """Parameters for checking a WordPress site."""

    site: str
    config_path: Optional[Path]

    @classmethod
    def from_cli(cls, site: str, config_path: Optional[Path] = None, **kwargs) -> "ConnectionTestParams":
        return cls(site=site, config_path=config_path)


@dataclass(frozen=True)
class PublishDueParams:
    """Parameters for running due publications."""

    limit: Optional[int]

    @classmethod
    def from_cli(cls, limit: Optional[int] = None, **kwargs) -> "PublishDueParams":
        return cls(limit=limit)


@dataclass(frozen=True)
class CancelParams:
    """Parameters for cancelling a publication."""

    publication_id: str

    @classmethod
    def from_cli(cls, publication_id: str, **kwargs) -> "CancelParams":
        return cls(publication_id=publication_id.strip())
