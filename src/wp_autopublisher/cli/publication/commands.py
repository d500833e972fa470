"""Publication CLI commands - thin wrappers orchestrating params, validation, display, and service."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer

from ...core.types import Failure
from ..core.events import print_publication_event
from ..core.console import console
from .display import (
    show_cancel_result,
    show_connection_result,
    show_due_report,
    show_publication_detail,
    show_publication_error,
    show_publications,
    show_remote_status,
    show_retry_result,
)
from .params import CancelParams, ConnectionTestParams, PublishDueParams, RetryParams, StatusParams
from .service import PublicationService
from .validators import (
    validate_cancel_params,
    validate_connection_params,
    validate_publish_due_params,
    validate_retry_params,
    validate_status_params,
)


def retry(
    publication_id: str = typer.Argument(..., help="ID of the failed publication"),
) -> None:
    """Retry a failed publication with its stored content."""
    params = RetryParams.from_cli(publication_id=publication_id)

    validation = validate_retry_params(params)
    if isinstance(validation, Failure):
        show_publication_error(console, validation.error, validation.details)
        raise typer.Exit(1)

    result = asyncio.run(PublicationService().retry(params, event_handler=print_publication_event))
    if isinstance(result, Failure):
        show_publication_error(console, result.error, result.details)
        raise typer.Exit(1)

    show_retry_result(console, result.value)


def status(
    publication_id: Optional[str] = typer.Argument(None, help="Show one publication"),
    article: Optional[str] = typer.Option(None, "--article", "-a", help="Filter by article id"),
    state: Optional[str] = typer.Option(None, "--status", help="Filter by status"),
    retryable: bool = typer.Option(False, "--retryable", help="Only failed publications that can be retried"),
    remote: bool = typer.Option(False, "--remote", help="Also ask WordPress for the post's state"),
) -> None:
    """List publications or show one in detail."""
    params = StatusParams.from_cli(
        publication_id=publication_id,
        article_id=article,
        status=state,
        retryable_only=retryable,
        remote=remote,
    )

    validation = validate_status_params(params)
    if isinstance(validation, Failure):
        show_publication_error(console, validation.error, validation.details)
        raise typer.Exit(1)

    service = PublicationService()
    result = service.find(params)
    if isinstance(result, Failure):
        show_publication_error(console, result.error, result.details)
        raise typer.Exit(1)

    if not params.publication_id:
        show_publications(console, result.value)
        return

    publication = result.value[0]
    show_publication_detail(console, publication)

    if params.remote:
        remote_result = asyncio.run(service.remote_status(publication))
        if isinstance(remote_result, Failure):
            show_publication_error(console, remote_result.error, remote_result.details)
            raise typer.Exit(1)
        show_remote_status(console, remote_result.value)


def test_wordpress(
    site: str = typer.Option(..., "--site", "-s", help="WordPress site id from the config"),
    config: Optional[Path] = typer.Option(None, "--config", help="Provider config YAML"),
) -> None:
    """Check credentials and reachability of a WordPress site."""
    params = ConnectionTestParams.from_cli(site=site, config_path=config)

    validation = validate_connection_params(params)
    if isinstance(validation, Failure):
        show_publication_error(console, validation.error, validation.details)
        raise typer.Exit(1)

    result = asyncio.run(PublicationService().test_connection(params))
    if isinstance(result, Failure):
        show_publication_error(console, result.error, result.details)
        raise typer.Exit(1)

    show_connection_result(console, params.site, result.value)
    if not result.value.get("is_successful"):
        raise typer.Exit(1)


def publish_due(
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Publish at most this many (oldest first)"),
) -> None:
    """Publish pending publications and scheduled ones whose time has come."""
    params = PublishDueParams.from_cli(limit=limit)

    validation = validate_publish_due_params(params)
    if isinstance(validation, Failure):
        show_publication_error(console, validation.error, validation.details)
        raise typer.Exit(1)

    result = asyncio.run(PublicationService().publish_due(params, event_handler=print_publication_event))
    if isinstance(result, Failure):
        show_publication_error(console, result.error, result.details)
        raise typer.Exit(1)

    show_due_report(console, result.value)
    if result.value.failed:
        raise typer.Exit(1)


def cancel(
    publication_id: str = typer.Argument(..., help="ID of the publication to cancel"),
) -> None:
    """Cancel a pending, scheduled or failed publication."""
    params = CancelParams.from_cli(publication_id=publication_id)

    validation = validate_cancel_params(params)
    if isinstance(validation, Failure):
        show_publication_error(console, validation.error, validation.details)
        raise typer.Exit(1)

    result = PublicationService().cancel(params)
    if isinstance(result, Failure):
        show_publication_error(console, result.error, result.details)
        raise typer.Exit(1)

    show_cancel_result(console, result.value)
