"""Tests for the publication CLI feature and the typer app wiring."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from wp_autopublisher.cli.app import app
from wp_autopublisher.cli.publication import service as publication_service
from wp_autopublisher.cli.publication.params import (
    CancelParams,
    ConnectionTestParams,
    PublishDueParams,
    RetryParams,
    StatusParams,
)
from wp_autopublisher.cli.publication.service import PublicationService
from wp_autopublisher.cli.publication.validators import (
    validate_cancel_params,
    validate_connection_params,
    validate_publish_due_params,
    validate_status_params,
)
from wp_autopublisher.core.types import Failure, Success
from wp_autopublisher.constants.status import PublicationStatus
from wp_autopublisher.domain.publication import PublicationError
from wp_autopublisher.services.publishing import DueRunReport

runner = CliRunner()


class TestStatusValidation:
    """Tests for validate_status_params."""

    def test_no_selector_lists_all(self):
        assert isinstance(validate_status_params(StatusParams.from_cli()), Success)

    def test_one_selector_only(self):
        params = StatusParams.from_cli(article_id="a", status="failed")

        assert isinstance(validate_status_params(params), Failure)

    def test_status_lowercased_and_checked(self):
        assert validate_status_params(StatusParams.from_cli(status="FAILED")).value.status == "failed"
        assert isinstance(validate_status_params(StatusParams.from_cli(status="done")), Failure)

    def test_remote_needs_id(self):
        assert isinstance(validate_status_params(StatusParams.from_cli(remote=True)), Failure)

    def test_connection_needs_site(self):
        assert isinstance(validate_connection_params(ConnectionTestParams.from_cli(site=" ")), Failure)

    def test_due_limit_positive(self):
        assert isinstance(validate_publish_due_params(PublishDueParams.from_cli()), Success)
        assert isinstance(validate_publish_due_params(PublishDueParams.from_cli(limit=2)), Success)
        assert isinstance(validate_publish_due_params(PublishDueParams.from_cli(limit=0)), Failure)

    def test_cancel_needs_id(self):
        assert isinstance(validate_cancel_params(CancelParams.from_cli("  ")), Failure)

class TestPublicationService:
    """Tests for PublicationService with in-memory storage."""

    @pytest.fixture
    def stored(self, repositories, make_publication):
        """One completed and one failed publication."""
        _, publications = repositories
        done = make_publication("article-1")
        done.start()
        done.complete("101")
        failed = make_publication("article-2")
        failed.start()
        failed.fail(PublicationError(code="PLATFORM_ERROR", message="500", is_retryable=True))
        publications.save(done)
        publications.save(failed)
        return done, failed

    def test_find_selectors(self, repositories, stored):
        done, failed = stored
        service = PublicationService()

        with patch.object(publication_service, "open_repositories", return_value=repositories):
            by_id = service.find(StatusParams.from_cli(publication_id=done.id)).value
            by_article = service.find(StatusParams.from_cli(article_id="article-2")).value
            by_status = service.find(StatusParams.from_cli(status="completed")).value
            retryable = service.find(StatusParams.from_cli(retryable_only=True)).value
            everything = service.find(StatusParams.from_cli()).value
            missing = service.find(StatusParams.from_cli(publication_id="nope"))

        assert [p.id for p in by_id] == [done.id]
        assert [p.id for p in by_article] == [failed.id]
        assert [p.id for p in by_status] == [done.id]
        assert [p.id for p in retryable] == [failed.id]
        assert len(everything) == 2
        assert missing.code == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_remote_status_needs_external_id(self, stored):
        _, failed = stored

        result = await PublicationService().remote_status(failed)

        assert result.code == "NOT_PUBLISHED"

    @pytest.mark.asyncio
    async def test_retry(self, repositories, stored, mock_publishing_service):
        _, failed = stored

        with patch.object(publication_service, "open_repositories", return_value=repositories), \
                patch.object(publication_service, "WordPressPublishingService", return_value=mock_publishing_service):
            result = await PublicationService().retry(RetryParams.from_cli(failed.id))

        assert result.value.retry_count == 1
        assert result.value.external_id == "101"

    @pytest.mark.asyncio
    async def test_connection_report(self, provider_config, mock_publishing_service):
        mock_publishing_service.validate_target.return_value = Success({
            "is_valid": True, "errors": [], "warnings": ["plain http"], "capabilities": {},
        })
        mock_publishing_service.test_connection.return_value = Success({
            "is_successful": True, "response_time": 12, "platform_info": {"name": "Blog"},
        })

        with patch.object(publication_service, "load_config", return_value=provider_config), \
                patch.object(publication_service, "WordPressPublishingService", return_value=mock_publishing_service):
            result = await PublicationService().test_connection(ConnectionTestParams.from_cli("blog"))

        assert result.value["site_url"] == "https://blog.example.com"
        assert result.value["warnings"] == ["plain http"]

    @pytest.mark.asyncio
    async def test_connection_invalid_target(self, provider_config, mock_publishing_service):
        mock_publishing_service.validate_target.return_value = Success({
            "is_valid": False, "errors": ["Invalid site URL format"], "warnings": [], "capabilities": {},
        })

        with patch.object(publication_service, "load_config", return_value=provider_config), \
                patch.object(publication_service, "WordPressPublishingService", return_value=mock_publishing_service):
            result = await PublicationService().test_connection(ConnectionTestParams.from_cli("blog"))

        assert result.code == "INVALID_TARGET"
        mock_publishing_service.test_connection.assert_not_awaited()


    @pytest.mark.asyncio
    async def test_publish_due_runs_pending(self, repositories, stored, make_publication, mock_publishing_service):
        _, publications = repositories
        pending = make_publication("article-3")
        publications.save(pending)

        with patch.object(publication_service, "open_repositories", return_value=repositories), \
                patch.object(publication_service, "WordPressPublishingService", return_value=mock_publishing_service):
            result = await PublicationService().publish_due(PublishDueParams.from_cli())

        assert [p.id for p in result.value.completed] == [pending.id]
        assert result.value.failed == []
        assert publications.find_by_id(pending.id).value.status == PublicationStatus.COMPLETED

    def test_cancel(self, repositories, stored, make_publication):
        done, _ = stored
        _, publications = repositories
        pending = make_publication("article-3")
        publications.save(pending)

        with patch.object(publication_service, "open_repositories", return_value=repositories):
            cancelled = PublicationService().cancel(CancelParams.from_cli(pending.id))
            refused = PublicationService().cancel(CancelParams.from_cli(done.id))

        assert cancelled.value.status == PublicationStatus.CANCELLED
        assert publications.find_by_id(pending.id).value.status == PublicationStatus.CANCELLED
        assert refused.code == "INVALID_STATE"

class TestApp:
    """Smoke tests through typer's CliRunner."""

    def test_commands_registered(self):
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("generate", "publish", "image", "retry", "status", "test-wordpress", "publish-due", "cancel"):
            assert command in result.output

    def test_generate_validation_error_exits_1(self):
        result = runner.invoke(app, ["generate", "--title", "Only a title"])

        assert result.exit_code == 1
        assert "Missing feed item content" in result.output

    def test_status_conflicting_selectors_exits_1(self):
        result = runner.invoke(app, ["status", "--article", "a", "--retryable"])

        assert result.exit_code == 1

    def test_retry_reports_failure(self):
        with patch.object(
            PublicationService,
            "retry",
            AsyncMock(return_value=Failure("Publication x not found", {"code": "NOT_FOUND"})),
        ):
            result = runner.invoke(app, ["retry", "x"])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_publish_due_exits_1_on_failures(self):
        report = DueRunReport(failed=[{"publication_id": "abc", "code": "AUTH_ERROR", "error": "401"}])
        with patch.object(PublicationService, "publish_due", AsyncMock(return_value=Success(report))):
            result = runner.invoke(app, ["publish-due", "--limit", "5"])

        assert result.exit_code == 1
        assert "AUTH_ERROR" in result.output

    def test_publish_due_nothing_due(self):
        with patch.object(PublicationService, "publish_due", AsyncMock(return_value=Success(DueRunReport()))):
            result = runner.invoke(app, ["publish-due"])

        assert result.exit_code == 0
        assert "No publications due" in result.output

    def test_cancel_reports_invalid_state(self):
        with patch.object(
            PublicationService,
            "cancel",
            return_value=Failure("Publication x is completed", {"code": "INVALID_STATE"}),
        ):
            result = runner.invoke(app, ["cancel", "x"])

        assert result.exit_code == 1
        assert "INVALID_STATE" in result.output
