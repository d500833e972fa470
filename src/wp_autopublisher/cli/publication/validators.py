"""Publication command validators."""

from __future__ import annotations

from ...constants.status import PublicationStatus
from ...core.types import Failure, Result, Success
from .params import CancelParams, ConnectionTestParams, PublishDueParams, RetryParams, StatusParams

VALID_STATUSES = [status.value for status in PublicationStatus]


def validate_retry_params(params: RetryParams) -> Result[RetryParams]:
    if not params.publication_id:
        return Failure("Publication ID is required", {"hint": "See `wp-autopublisher status --retryable`"})
    return Success(params)


def validate_status_params(params: StatusParams) -> Result[StatusParams]:
    """Validate status filters.

    Only one selector may be used at a time, and ``--remote`` needs a
    single publication.
    """
    selectors = [params.publication_id, params.article_id, params.status, params.retryable_only or None]
    if sum(1 for s in selectors if s) > 1:
        return Failure(
            "Use only one of: publication id, --article, --status, --retryable",
        )
    if params.status is not None and params.status not in VALID_STATUSES:
        return Failure(f"Invalid status: {params.status}", {"valid_statuses": ", ".join(VALID_STATUSES)})
    if params.remote and not params.publication_id:
        return Failure("--remote needs a publication id", {"hint": "wp-autopublisher status <id> --remote"})
    return Success(params)


def validate_connection_params(params: ConnectionTestParams) -> Result[ConnectionTestParams]:
    if not params.site or not params.site.strip():
        return Failure("WordPress site is required", {"hint": "Pass --site <site_id>"})
    if params.config_path is not None and not params.config_path.is_file():
        return Failure(f"Config file not found: {params.config_path}", {"path": str(params.config_path)})
    return Success(params)


def validate_publish_due_params(params: PublishDueParams) -> Result[PublishDueParams]:
    if params.limit is not None and params.limit < 1:
        return Failure(f"--limit must be at least 1, got {params.limit}")
    return Success(params)


def validate_cancel_params(params: CancelParams) -> Result[CancelParams]:
    if not params.publication_id:
        return Failure("Publication ID is required", {"hint": "See `wp-autopublisher status`"})
    return Success(params)
