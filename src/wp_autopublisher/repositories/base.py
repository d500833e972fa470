"""Persistence for featured images and publications.

Repositories speak in aggregates and Results; a :class:`RecordStore`
underneath only knows JSON-compatible dicts keyed by id. Writes are
last-write-wins: callers own single-writer discipline per aggregate.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable

from ..constants.status import PublicationStatus
from ..core.types import Failure, Result, Success, failure
from ..domain.featured_image import FeaturedImage
from ..domain.publication import Publication, PublicationTarget

_logger = logging.getLogger("publishing")

# Errors a record store may raise for I/O or corrupt data
STORAGE_ERRORS = (OSError, ValueError, KeyError, TypeError)


class RecordStore(ABC):
    """Dict records keyed by id."""

    @abstractmethod
    def load(self, record_id: str) -> dict[str, Any] | None:
        pass

    @abstractmethod
    def load_all(self) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    def store(self, record_id: str, data: dict[str, Any]) -> None:
        pass

    @abstractmethod
    def remove(self, record_id: str) -> bool:
        """Delete a record; returns whether it existed."""
        pass


def _storage_failure(action: str, error: Exception) -> Failure:
    _logger.error(f"STORAGE | {action} | {type(error).__name__}: {error}")
    return failure("STORAGE_ERROR", f"Storage {action} failed: {error}", is_retryable=True)


class _Repository:
    """Shared Result plumbing over a record store."""

    entity = "record"

    def __init__(self, store: RecordStore):
        self._store = store

    def _guard(self, action: str, fn: Callable[[], Any]) -> Result[Any]:
        try:
            return Success(fn())
        except STORAGE_ERRORS as e:
            return _storage_failure(f"{self.entity} {action}", e)

    def _insert(self, record_id: str, data: dict[str, Any]) -> Result[None]:
        def insert() -> bool:
            if self._store.load(record_id) is not None:
                return False
            self._store.store(record_id, data)
            return True

        result = self._guard("save", insert)
        if isinstance(result, Failure):
            return result
        if not result.value:
            return failure("DUPLICATE", f"{self.entity} {record_id} already exists")
        return Success(None)

    def _overwrite(self, record_id: str, data: dict[str, Any]) -> Result[None]:
        def overwrite() -> bool:
            if self._store.load(record_id) is None:
                return False
            self._store.store(record_id, data)
            return True

        result = self._guard("update", overwrite)
        if isinstance(result, Failure):
            return result
        if not result.value:
            return failure("NOT_FOUND", f"{self.entity} {record_id} not found")
        return Success(None)

    def delete(self, record_id: str) -> Result[bool]:
        return self._guard("delete", lambda: self._store.remove(record_id))


class FeaturedImageRepository(_Repository):
    """Featured images, at most one per article."""

    entity = "featured_image"

    def save(self, image: FeaturedImage) -> Result[None]:
        """Insert a new image.

        Returns:
            Failure DUPLICATE if the id exists or the article already has
            an image.
        """
        existing = self.find_by_article_id(image.article_id)
        if isinstance(existing, Failure):
            return existing
        if existing.value is not None and existing.value.id != image.id:
            return failure("DUPLICATE", f"Article {image.article_id} already has a featured image")
        return self._insert(image.id, image.to_dict())

    def update(self, image: FeaturedImage) -> Result[None]:
        return self._overwrite(image.id, image.to_dict())

    def find_by_id(self, image_id: str) -> Result[FeaturedImage | None]:
        def find() -> FeaturedImage | None:
            data = self._store.load(image_id)
            return FeaturedImage.from_dict(data) if data else None

        return self._guard("find_by_id", find)

    def find_by_article_id(self, article_id: str) -> Result[FeaturedImage | None]:
        def find() -> FeaturedImage | None:
            for data in self._store.load_all():
                if data.get("article_id") == article_id:
                    return FeaturedImage.from_dict(data)
            return None

        return self._guard("find_by_article_id", find)


class PublicationRepository(_Repository):
    """Publications, one per (article, target) pair."""

    entity = "publication"

    def _all(self) -> list[Publication]:
        return [Publication.reconstitute(data) for data in self._store.load_all()]

    def save(self, publication: Publication) -> Result[None]:
        """Insert a new publication.

        Uniqueness per (article, target) is the caller's decision; see
        ``exists_for_article_and_target``.
        """
        return self._insert(publication.id, publication.to_dict())

    def update(self, publication: Publication) -> Result[None]:
        return self._overwrite(publication.id, publication.to_dict())

    def find_by_id(self, publication_id: str) -> Result[Publication | None]:
        def find() -> Publication | None:
            data = self._store.load(publication_id)
            return Publication.reconstitute(data) if data else None

        return self._guard("find_by_id", find)

    def find_by_article_id(self, article_id: str) -> Result[list[Publication]]:
        return self._guard(
            "find_by_article_id",
            lambda: [p for p in self._all() if p.article_id == article_id],
        )

    def list_all(self) -> Result[list[Publication]]:
        """Every publication, newest first."""
        return self._guard(
            "list_all",
            lambda: sorted(self._all(), key=lambda p: p.created_at, reverse=True),
        )

    def find_by_status(self, status: PublicationStatus) -> Result[list[Publication]]:
        return self._guard("find_by_status", lambda: [p for p in self._all() if p.status == status])

    def exists_for_article_and_target(self, article_id: str, target: PublicationTarget) -> Result[bool]:
        def exists() -> bool:
            for data in self._store.load_all():
                stored = data.get("target") or {}
                if (
                    data.get("article_id") == article_id
                    and stored.get("platform") == target.platform
                    and stored.get("site_id") == target.site_id
                ):
                    return True
            return False

        return self._guard("exists_for_article_and_target", exists)

    def find_ready(self, now: datetime | None = None) -> Result[list[Publication]]:
        """Pending publications plus scheduled ones whose time has come."""
        now = now or datetime.now(timezone.utc)
        return self._guard(
            "find_ready",
            lambda: [p for p in self._all() if p.is_ready_for_execution(now)],
        )

    def find_retryable(self) -> Result[list[Publication]]:
        return self._guard("find_retryable", lambda: [p for p in self._all() if p.can_retry()])
