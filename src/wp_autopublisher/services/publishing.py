"""Publication use cases.

``PublishArticle`` creates a publication and, unless it is scheduled for
later, runs it. ``RetryPublication`` returns a failed publication to
pending and runs it again. ``ExecuteDuePublications`` runs what is
pending or scheduled and due. These persist after every aggregate
mutation and forward lifecycle events to an optional async handler.
``CancelPublication`` stops a publication that has not finished.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from ..core.types import Failure, Result, Success, failure
from ..domain.errors import InvalidStateTransition, MaxRetriesExceeded, ValidationError
from ..domain.publication import (
    DEFAULT_MAX_RETRIES,
    Publication,
    PublicationError,
    PublicationEvent,
    PublicationMetadata,
    PublicationTarget,
)
from ..repositories.base import PublicationRepository
from ..wordpress.publishing import PublishingContent, WordPressPublishingService

_logger = logging.getLogger("publishing")

# Type for lifecycle event handler
PublicationEventHandler = Callable[[PublicationEvent], Awaitable[None]] | None


def content_from_snapshot(publication: Publication) -> PublishingContent | None:
    """Rebuild the post body from the stored metadata snapshot."""
    snapshot = publication.metadata
    if not snapshot.content:
        return None
    return PublishingContent(title=snapshot.title or "", content=snapshot.content, excerpt=snapshot.excerpt)


class _PublicationRunner:
    """Shared start -> publish -> complete/fail path."""

    def __init__(
        self,
        repository: PublicationRepository,
        publishing_service: WordPressPublishingService,
        event_handler: PublicationEventHandler = None,
    ):
        self.repository = repository
        self.publishing_service = publishing_service
        self._event_handler = event_handler

    async def _dispatch(self, publication: Publication) -> None:
        events = publication.pull_events()
        if self._event_handler:
            for event in events:
                await self._event_handler(event)

    def _persist(self, publication: Publication) -> Result[None]:
        result = self.repository.update(publication)
        if isinstance(result, Failure):
            _logger.error(f"PERSIST_FAILED | publication:{publication.id} | status:{publication.status.value} | {result.error}")
        return result

    async def _run(self, publication: Publication, content: PublishingContent) -> Result[Publication]:
        publication.start()
        persisted = self._persist(publication)
        if isinstance(persisted, Failure):
            return persisted
        await self._dispatch(publication)

        published = await self.publishing_service.publish(publication.target, content, publication.metadata)

        if isinstance(published, Failure):
            publication.fail(PublicationError(
                code=published.code or "UNKNOWN_ERROR",
                message=published.error,
                is_retryable=published.is_retryable,
                details={k: v for k, v in (published.details or {}).items() if k not in ("code", "is_retryable")},
            ))
            self._persist(publication)
            await self._dispatch(publication)
            return failure(
                published.code or "UNKNOWN_ERROR",
                published.error,
                is_retryable=published.is_retryable,
                publication_id=publication.id,
                can_retry=publication.can_retry(),
                publication=publication.summary(),
            )

        result = published.value
        publication.complete(result.external_id, result.external_url)
        persisted = self._persist(publication)
        await self._dispatch(publication)
        if isinstance(persisted, Failure):
            # The post exists on the target; surface the id so it is not lost
            return failure(
                "STORAGE_ERROR",
                f"Published as {result.external_id} but the publication could not be saved: {persisted.error}",
                is_retryable=False,
                publication_id=publication.id,
                external_id=result.external_id,
                external_url=result.external_url,
            )
        return Success(publication)


class PublishArticle(_PublicationRunner):
    """Publish an article to a target, now or at a scheduled time."""

    async def execute(
        self,
        article_id: str,
        target: PublicationTarget,
        content: PublishingContent,
        metadata: PublicationMetadata | None = None,
        scheduled_at: datetime | None = None,
        allow_duplicate: bool = False,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> Result[Publication]:
        """Create and (unless scheduled for later) run a publication.

        Returns:
            Success with the completed or scheduled publication. Failure
            when validation fails, a duplicate exists, or the publish call
            failed; in the last case details carry ``publication_id`` and
            ``can_retry``.
        """
        validation = await self.publishing_service.validate_target(target)
        if isinstance(validation, Failure):
            return validation
        if not validation.value["is_valid"]:
            return failure(
                "INVALID_TARGET",
                "; ".join(validation.value["errors"]),
                errors=validation.value["errors"],
            )

        if not allow_duplicate:
            exists = self.repository.exists_for_article_and_target(article_id, target)
            if isinstance(exists, Failure):
                return exists
            if exists.value:
                return failure(
                    "DUPLICATE_PUBLICATION",
                    f"Article {article_id} already has a publication for {target}",
                )

        metadata = metadata or PublicationMetadata(
            title=content.title, content=content.content, excerpt=content.excerpt
        )
        try:
            if scheduled_at is not None:
                publication = Publication.create_scheduled(
                    article_id, target, scheduled_at, metadata=metadata, max_retries=max_retries
                )
            else:
                publication = Publication.create_immediate(
                    article_id, target, metadata=metadata, max_retries=max_retries
                )
        except ValidationError as e:
            return failure("VALIDATION_ERROR", str(e), field=e.field)

        saved = self.repository.save(publication)
        if isinstance(saved, Failure):
            return saved

        _logger.info(
            f"PUBLISH_ARTICLE | publication:{publication.id} | article:{article_id} | target:{target} | "
            f"status:{publication.status.value}"
        )

        if not publication.is_ready_for_execution():
            return Success(publication)

        return await self._run(publication, content)


class RetryPublication(_PublicationRunner):
    """Retry a failed publication."""

    async def execute(
        self,
        publication_id: str,
        content: PublishingContent | None = None,
    ) -> Result[Publication]:
        """Return the publication to pending and run it again.

        Args:
            publication_id: Publication to retry.
            content: Body to publish; defaults to the metadata snapshot.

        Returns:
            Success with the completed publication, or Failure. Retry-budget
            and state violations come back as MAX_RETRIES_EXCEEDED and
            INVALID_STATE without mutating the stored publication.
        """
        found = self.repository.find_by_id(publication_id)
        if isinstance(found, Failure):
            return found
        publication = found.value
        if publication is None:
            return failure("NOT_FOUND", f"Publication {publication_id} not found")

        if content is None:
            content = content_from_snapshot(publication)
            if content is None:
                return failure("VALIDATION_ERROR", "No content to publish in the metadata snapshot")

        try:
            publication.retry()
        except MaxRetriesExceeded as e:
            return failure("MAX_RETRIES_EXCEEDED", str(e), publication_id=publication_id)
        except InvalidStateTransition as e:
            return failure("INVALID_STATE", str(e), publication_id=publication_id)

        persisted = self._persist(publication)
        if isinstance(persisted, Failure):
            return persisted

        return await self._run(publication, content)


@dataclass
class DueRunReport:
    """Outcome of one pass over due publications."""

    completed: list[Publication] = field(default_factory=list)
    failed: list[dict[str, Any]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.completed) + len(self.failed)


class ExecuteDuePublications(_PublicationRunner):
    """Run pending publications and scheduled ones whose time has come.

    Publications run one after another. A failure is recorded on its
    publication and in the report; it never stops the pass.
    """

    async def execute(self, now: datetime | None = None, limit: int | None = None) -> Result[DueRunReport]:
        """Publish everything that is ready at ``now``.

        Args:
            now: Reference time; defaults to the current UTC time.
            limit: Maximum number of publications to run, oldest first.

        Returns:
            Success with the report, or the repository Failure when the
            due publications could not be listed.
        """
        now = now or datetime.now(timezone.utc)
        ready = self.repository.find_ready(now)
        if isinstance(ready, Failure):
            return ready

        due = sorted(ready.value, key=lambda p: p.scheduled_at or p.created_at)
        if limit is not None:
            due = due[:limit]
        _logger.info(f"DUE_RUN | start | ready:{len(ready.value)} | running:{len(due)}")

        report = DueRunReport()
        for publication in due:
            content = content_from_snapshot(publication)
            if content is None:
                publication.fail(PublicationError(
                    code="VALIDATION_ERROR",
                    message="No content to publish in the metadata snapshot",
                    is_retryable=False,
                ))
                self._persist(publication)
                await self._dispatch(publication)
                report.failed.append({
                    "publication_id": publication.id,
                    "code": "VALIDATION_ERROR",
                    "error": "No content to publish in the metadata snapshot",
                })
                continue

            try:
                result = await self._run(publication, content)
            except InvalidStateTransition as e:
                result = failure("INVALID_STATE", str(e), publication_id=publication.id)
            if isinstance(result, Failure):
                report.failed.append({
                    "publication_id": publication.id,
                    "code": result.code,
                    "error": result.error,
                })
            else:
                report.completed.append(result.value)

        _logger.info(f"DUE_RUN | done | completed:{len(report.completed)} | failed:{len(report.failed)}")
        return Success(report)


class CancelPublication:
    """Cancel a publication that has not reached a final state."""

    def __init__(self, repository: PublicationRepository):
        self.repository = repository

    def execute(self, publication_id: str) -> Result[Publication]:
        """Move the publication to ``cancelled`` and persist it.

        Returns:
            Success with the cancelled publication, NOT_FOUND, or
            INVALID_STATE when it is already completed or cancelled.
        """
        found = self.repository.find_by_id(publication_id)
        if isinstance(found, Failure):
            return found
        publication = found.value
        if publication is None:
            return failure("NOT_FOUND", f"Publication {publication_id} not found")

        try:
            publication.cancel()
        except InvalidStateTransition as e:
            return failure("INVALID_STATE", str(e), publication_id=publication_id)

        updated = self.repository.update(publication)
        if isinstance(updated, Failure):
            return updated
        return Success(publication)
