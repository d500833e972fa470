"""Stateless services behind the publication commands."""

from __future__ import annotations

from typing import Any

from ...constants.status import PublicationStatus
from ...core.types import Failure, Result, Success, failure
from ...domain.publication import Publication
from ...services.publishing import (
    CancelPublication,
    DueRunReport,
    ExecuteDuePublications,
    PublicationEventHandler,
    RetryPublication,
)
from ...wordpress.publishing import WordPressPublishingService
from ..core.wiring import build_target, load_config, open_repositories
from .params import CancelParams, ConnectionTestParams, PublishDueParams, RetryParams, StatusParams


class PublicationService:
    """Retry, inspect and connection-check operations.

    All state is passed via params - no instance state.
    """

    async def retry(
        self,
        params: RetryParams,
        event_handler: PublicationEventHandler = None,
    ) -> Result[Publication]:
        """Retry a failed publication using its stored content snapshot."""
        _, publications = open_repositories()
        use_case = RetryPublication(publications, WordPressPublishingService(), event_handler=event_handler)
        return await use_case.execute(params.publication_id)

    async def publish_due(
        self,
        params: PublishDueParams,
        event_handler: PublicationEventHandler = None,
    ) -> Result[DueRunReport]:
        """Run pending and due scheduled publications from storage."""
        _, publications = open_repositories()
        use_case = ExecuteDuePublications(publications, WordPressPublishingService(), event_handler=event_handler)
        return await use_case.execute(limit=params.limit)

    def cancel(self, params: CancelParams) -> Result[Publication]:
        _, publications = open_repositories()
        return CancelPublication(publications).execute(params.publication_id)

    def find(self, params: StatusParams) -> Result[list[Publication]]:
        """Publications matching the single selector in ``params``."""
        _, publications = open_repositories()

        if params.publication_id:
            found = publications.find_by_id(params.publication_id)
            if isinstance(found, Failure):
                return found
            if found.value is None:
                return failure("NOT_FOUND", f"Publication {params.publication_id} not found")
            return Success([found.value])
        if params.article_id:
            return publications.find_by_article_id(params.article_id)
        if params.status:
            return publications.find_by_status(PublicationStatus(params.status))
        if params.retryable_only:
            return publications.find_retryable()
        return publications.list_all()

    async def remote_status(self, publication: Publication) -> Result[dict[str, Any]]:
        """Ask the target for the current state of a published post."""
        if not publication.external_id:
            return failure("NOT_PUBLISHED", f"Publication {publication.id} has no remote post yet")
        return await WordPressPublishingService().get_status(publication.target, publication.external_id)

    async def test_connection(self, params: ConnectionTestParams) -> Result[dict[str, Any]]:
        """Validate the configured site and call its REST API."""
        config = load_config(params.config_path)
        resolved = build_target(config, params.site)
        if isinstance(resolved, Failure):
            return resolved
        target = resolved.value

        service = WordPressPublishingService()
        validation = await service.validate_target(target)
        if isinstance(validation, Failure):
            return validation
        if not validation.value["is_valid"]:
            return failure("INVALID_TARGET", "; ".join(validation.value["errors"]))

        tested = await service.test_connection(target)
        if isinstance(tested, Failure):
            return tested
        report = dict(tested.value)
        report["site_url"] = target.site_url
        report["warnings"] = validation.value["warnings"]
        return Success(report)
