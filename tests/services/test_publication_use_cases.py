"""Tests for PublishArticle and RetryPublication.

Tests cover:
- Immediate publish: persisted states, events, completed result
- Scheduled publish: persisted, not run
- Duplicate and invalid-target guards
- Publish failure: failed publication with retry info
- Retry: snapshot content, budget exhaustion without mutation
- Due run: pending and due scheduled publications, failures recorded per item
- Cancel: non-final publications only
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from wp_autopublisher.constants.status import PublicationStatus
from wp_autopublisher.core.types import Failure, Success, failure
from wp_autopublisher.domain.publication import (
    Publication,
    PublicationCompleted,
    PublicationFailed,
    PublicationMetadata,
    PublicationStarted,
)
from wp_autopublisher.services.publishing import (
    CancelPublication,
    ExecuteDuePublications,
    PublishArticle,
    RetryPublication,
)
from wp_autopublisher.wordpress.publishing import PublishingResult

SERVER_ERROR = failure("PLATFORM_ERROR", "WordPress returned HTTP 500", is_retryable=True, status_code=500)
RETRIED_POST = PublishingResult(external_id="202", external_url="https://blog.example.com/?p=202", status="draft")


@pytest.fixture
def publications(repositories):
    return repositories[1]


class TestPublishArticle:
    """Tests for PublishArticle.execute()."""

    @pytest.mark.asyncio
    async def test_publish_now(self, publications, mock_publishing_service, wp_target, publishing_content):
        handler = AsyncMock()
        use_case = PublishArticle(publications, mock_publishing_service, handler)

        result = await use_case.execute("article-1", wp_target, publishing_content)

        assert isinstance(result, Success)
        publication = result.value
        assert publication.status == PublicationStatus.COMPLETED
        assert publication.external_id == "101"
        stored = publications.find_by_id(publication.id).value
        assert stored.status == PublicationStatus.COMPLETED
        assert [type(call.args[0]) for call in handler.await_args_list] == [
            PublicationStarted, PublicationCompleted,
        ]

    @pytest.mark.asyncio
    async def test_metadata_defaults_to_content(self, publications, mock_publishing_service, wp_target,
                                                publishing_content):
        result = await PublishArticle(publications, mock_publishing_service).execute(
            "article-1", wp_target, publishing_content
        )

        metadata = result.value.metadata
        assert metadata.title == "Hello"
        assert metadata.excerpt == "Short summary"

    @pytest.mark.asyncio
    async def test_metadata_passed_to_service(self, publications, mock_publishing_service, wp_target,
                                              publishing_content):
        metadata = PublicationMetadata(title="Hello", content="<p>World</p>", featured_image_id=55, tags=[9])

        await PublishArticle(publications, mock_publishing_service).execute(
            "article-1", wp_target, publishing_content, metadata=metadata
        )

        target, content, sent = mock_publishing_service.publish.await_args.args
        assert target is wp_target
        assert content is publishing_content
        assert sent.featured_image_id == 55

    @pytest.mark.asyncio
    async def test_scheduled_not_run(self, publications, mock_publishing_service, wp_target, publishing_content):
        when = datetime.now(timezone.utc) + timedelta(days=1)

        result = await PublishArticle(publications, mock_publishing_service).execute(
            "article-1", wp_target, publishing_content, scheduled_at=when
        )

        assert result.value.status == PublicationStatus.SCHEDULED
        assert publications.find_by_id(result.value.id).value.scheduled_at == when
        mock_publishing_service.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_past_schedule_rejected(self, publications, mock_publishing_service, wp_target,
                                          publishing_content):
        when = datetime.now(timezone.utc) - timedelta(minutes=5)

        result = await PublishArticle(publications, mock_publishing_service).execute(
            "article-1", wp_target, publishing_content, scheduled_at=when
        )

        assert result.code == "VALIDATION_ERROR"
        assert publications.list_all().value == []

    @pytest.mark.asyncio
    async def test_duplicate_blocked(self, publications, mock_publishing_service, wp_target, publishing_content):
        use_case = PublishArticle(publications, mock_publishing_service)
        await use_case.execute("article-1", wp_target, publishing_content)

        result = await use_case.execute("article-1", wp_target, publishing_content)

        assert result.code == "DUPLICATE_PUBLICATION"
        assert len(publications.list_all().value) == 1

    @pytest.mark.asyncio
    async def test_duplicate_allowed(self, publications, mock_publishing_service, wp_target, publishing_content):
        use_case = PublishArticle(publications, mock_publishing_service)
        await use_case.execute("article-1", wp_target, publishing_content)

        result = await use_case.execute("article-1", wp_target, publishing_content, allow_duplicate=True)

        assert isinstance(result, Success)
        assert len(publications.list_all().value) == 2

    @pytest.mark.asyncio
    async def test_invalid_target(self, publications, mock_publishing_service, wp_target, publishing_content):
        mock_publishing_service.validate_target.return_value = Success({
            "is_valid": False, "errors": ["Invalid site URL format"], "warnings": [], "capabilities": {},
        })

        result = await PublishArticle(publications, mock_publishing_service).execute(
            "article-1", wp_target, publishing_content
        )

        assert result.code == "INVALID_TARGET"
        assert result.details["errors"] == ["Invalid site URL format"]
        mock_publishing_service.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_publish_failure(self, publications, mock_publishing_service, wp_target, publishing_content):
        mock_publishing_service.publish.return_value = SERVER_ERROR
        handler = AsyncMock()

        result = await PublishArticle(publications, mock_publishing_service, handler).execute(
            "article-1", wp_target, publishing_content, max_retries=2
        )

        assert isinstance(result, Failure)
        assert result.code == "PLATFORM_ERROR"
        assert result.is_retryable
        assert result.details["can_retry"] is True
        stored = publications.find_by_id(result.details["publication_id"]).value
        assert stored.status == PublicationStatus.FAILED
        assert stored.error.code == "PLATFORM_ERROR"
        assert stored.error.details == {"status_code": 500}
        failed_event = handler.await_args_list[-1].args[0]
        assert isinstance(failed_event, PublicationFailed)
        assert failed_event.can_retry is True

    @pytest.mark.asyncio
    async def test_storage_failure_after_publish_keeps_external_id(
        self, publications, mock_publishing_service, wp_target, publishing_content
    ):
        use_case = PublishArticle(publications, mock_publishing_service)
        original_update = publications.update
        calls = {"n": 0}

        def flaky_update(publication):
            calls["n"] += 1
            if calls["n"] == 2:
                return failure("STORAGE_ERROR", "disk full", is_retryable=True)
            return original_update(publication)

        publications.update = flaky_update

        result = await use_case.execute("article-1", wp_target, publishing_content)

        assert result.code == "STORAGE_ERROR"
        assert result.details["external_id"] == "101"


class TestRetryPublication:
    """Tests for RetryPublication.execute()."""

    async def _failed_publication(self, publications, service, wp_target, content, max_retries=3):
        service.publish.return_value = SERVER_ERROR
        result = await PublishArticle(publications, service).execute(
            "article-1", wp_target, content, max_retries=max_retries
        )
        return result.details["publication_id"]

    @pytest.mark.asyncio
    async def test_retry_succeeds(self, publications, mock_publishing_service, wp_target, publishing_content):
        publication_id = await self._failed_publication(
            publications, mock_publishing_service, wp_target, publishing_content
        )
        mock_publishing_service.publish.return_value = Success(RETRIED_POST)

        result = await RetryPublication(publications, mock_publishing_service).execute(publication_id)

        assert result.value.status == PublicationStatus.COMPLETED
        assert result.value.retry_count == 1
        content = mock_publishing_service.publish.await_args.args[1]
        assert content.title == "Hello"
        assert content.content == "<p>World</p>"

    @pytest.mark.asyncio
    async def test_retry_fails_again(self, publications, mock_publishing_service, wp_target, publishing_content):
        publication_id = await self._failed_publication(
            publications, mock_publishing_service, wp_target, publishing_content, max_retries=1
        )

        result = await RetryPublication(publications, mock_publishing_service).execute(publication_id)

        assert result.code == "PLATFORM_ERROR"
        assert result.details["can_retry"] is False
        assert publications.find_by_id(publication_id).value.retry_count == 1

    @pytest.mark.asyncio
    async def test_budget_exhausted_without_mutation(self, publications, mock_publishing_service, wp_target,
                                                     publishing_content):
        publication_id = await self._failed_publication(
            publications, mock_publishing_service, wp_target, publishing_content, max_retries=0
        )
        before = publications.find_by_id(publication_id).value.to_dict()
        mock_publishing_service.publish.reset_mock()

        result = await RetryPublication(publications, mock_publishing_service).execute(publication_id)

        assert result.code == "MAX_RETRIES_EXCEEDED"
        assert publications.find_by_id(publication_id).value.to_dict() == before
        mock_publishing_service.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_completed_is_invalid_state(self, publications, mock_publishing_service, wp_target,
                                              publishing_content):
        done = await PublishArticle(publications, mock_publishing_service).execute(
            "article-1", wp_target, publishing_content
        )

        result = await RetryPublication(publications, mock_publishing_service).execute(done.value.id)

        assert result.code == "INVALID_STATE"

    @pytest.mark.asyncio
    async def test_unknown_publication(self, publications, mock_publishing_service):
        result = await RetryPublication(publications, mock_publishing_service).execute("missing")

        assert result.code == "NOT_FOUND"



def scheduled(wp_target, article_id: str, minutes_from_now: int, content: str = "<p>World</p>") -> Publication:
    """A scheduled publication whose time is ``minutes_from_now`` (negative means due)."""
    publication = Publication.create_scheduled(
        article_id,
        wp_target,
        datetime.now(timezone.utc) + timedelta(days=1),
        metadata=PublicationMetadata(title="Hello", content=content),
    )
    data = publication.to_dict()
    data["scheduled_at"] = (datetime.now(timezone.utc) + timedelta(minutes=minutes_from_now)).isoformat()
    return Publication.reconstitute(data)


class TestExecuteDuePublications:
    """Tests for ExecuteDuePublications.execute()."""

    @pytest.mark.asyncio
    async def test_runs_pending_and_due(self, publications, mock_publishing_service, wp_target, make_publication):
        pending = make_publication("article-1")
        due = scheduled(wp_target, "article-2", minutes_from_now=-5)
        later = scheduled(wp_target, "article-3", minutes_from_now=60)
        for publication in (pending, due, later):
            publications.save(publication)
        handler = AsyncMock()

        result = await ExecuteDuePublications(publications, mock_publishing_service, handler).execute()

        report = result.value
        assert sorted(p.id for p in report.completed) == sorted([pending.id, due.id])
        assert report.failed == []
        assert publications.find_by_id(due.id).value.status == PublicationStatus.COMPLETED
        assert publications.find_by_id(later.id).value.status == PublicationStatus.SCHEDULED
        assert mock_publishing_service.publish.await_count == 2
        assert len(handler.await_args_list) == 4

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_the_pass(self, publications, mock_publishing_service, wp_target):
        first = scheduled(wp_target, "article-1", minutes_from_now=-10)
        second = scheduled(wp_target, "article-2", minutes_from_now=-5)
        publications.save(first)
        publications.save(second)
        mock_publishing_service.publish.side_effect = [SERVER_ERROR, Success(RETRIED_POST)]

        result = await ExecuteDuePublications(publications, mock_publishing_service).execute()

        report = result.value
        assert report.total == 2
        assert [p.id for p in report.completed] == [second.id]
        assert report.failed == [{"publication_id": first.id, "code": "PLATFORM_ERROR",
                                  "error": "WordPress returned HTTP 500"}]
        stored = publications.find_by_id(first.id).value
        assert stored.status == PublicationStatus.FAILED
        assert stored.can_retry()

    @pytest.mark.asyncio
    async def test_limit_takes_oldest_first(self, publications, mock_publishing_service, wp_target):
        older = scheduled(wp_target, "article-1", minutes_from_now=-30)
        newer = scheduled(wp_target, "article-2", minutes_from_now=-1)
        publications.save(newer)
        publications.save(older)

        result = await ExecuteDuePublications(publications, mock_publishing_service).execute(limit=1)

        assert [p.id for p in result.value.completed] == [older.id]
        assert publications.find_by_id(newer.id).value.status == PublicationStatus.SCHEDULED

    @pytest.mark.asyncio
    async def test_missing_snapshot_content_fails_publication(self, publications, mock_publishing_service,
                                                               wp_target):
        empty = scheduled(wp_target, "article-1", minutes_from_now=-5, content="")
        publications.save(empty)

        result = await ExecuteDuePublications(publications, mock_publishing_service).execute()

        assert result.value.failed[0]["code"] == "VALIDATION_ERROR"
        assert publications.find_by_id(empty.id).value.status == PublicationStatus.FAILED
        mock_publishing_service.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_nothing_due(self, publications, mock_publishing_service, wp_target):
        publications.save(scheduled(wp_target, "article-1", minutes_from_now=60))

        result = await ExecuteDuePublications(publications, mock_publishing_service).execute()

        assert result.value.total == 0
        mock_publishing_service.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_listing_failure_returned(self, publications, mock_publishing_service):
        publications.find_ready = lambda now: failure("STORAGE_ERROR", "disk gone", is_retryable=True)

        result = await ExecuteDuePublications(publications, mock_publishing_service).execute()

        assert result.code == "STORAGE_ERROR"


class TestCancelPublication:
    """Tests for CancelPublication.execute()."""

    def test_cancel_scheduled(self, publications, wp_target):
        later = scheduled(wp_target, "article-1", minutes_from_now=60)
        publications.save(later)

        result = CancelPublication(publications).execute(later.id)

        assert result.value.status == PublicationStatus.CANCELLED
        assert publications.find_by_id(later.id).value.status == PublicationStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_completed_cannot_be_cancelled(self, publications, mock_publishing_service, wp_target,
                                                 publishing_content):
        done = await PublishArticle(publications, mock_publishing_service).execute(
            "article-1", wp_target, publishing_content
        )

        result = CancelPublication(publications).execute(done.value.id)

        assert result.code == "INVALID_STATE"
        assert publications.find_by_id(done.value.id).value.status == PublicationStatus.COMPLETED

    def test_unknown_publication(self, publications):
        assert CancelPublication(publications).execute("missing").code == "NOT_FOUND"
