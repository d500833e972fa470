"""Display functions for publication commands - pure functions for Rich output."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ...constants.status import PublicationStatus
from ...domain.publication import Publication
from ...services.publishing import DueRunReport

STATUS_STYLES = {
    PublicationStatus.PENDING: "cyan",
    PublicationStatus.SCHEDULED: "blue",
    PublicationStatus.IN_PROGRESS: "yellow",
    PublicationStatus.COMPLETED: "green",
    PublicationStatus.FAILED: "red",
    PublicationStatus.CANCELLED: "dim",
}


def _when(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "-"


def show_publications(console: Console, publications: list[Publication]) -> None:
    """Display publications as a table."""
    if not publications:
        console.print("[dim]No publications found[/dim]")
        return

    table = Table(title=f"Publications ({len(publications)})")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Article")
    table.add_column("Target")
    table.add_column("Status")
    table.add_column("Retries", justify="right")
    table.add_column("Post")
    table.add_column("Created")

    for publication in publications:
        style = STATUS_STYLES.get(publication.status, "white")
        table.add_row(
            publication.id[:8],
            publication.article_id,
            str(publication.target),
            f"[{style}]{publication.status.value}[/{style}]",
            f"{publication.retry_count}/{publication.max_retries}",
            publication.external_id or "-",
            _when(publication.created_at),
        )
    console.print(table)


def show_publication_detail(console: Console, publication: Publication) -> None:
    """Display a single publication with its last error."""
    summary = publication.summary()
    style = STATUS_STYLES.get(publication.status, "white")

    lines = [
        f"[bold]Article:[/] {summary['article_id']}",
        f"[bold]Target:[/] {publication.target} ({summary['target']['site_url']})",
        f"[bold]Status:[/] [{style}]{summary['status']}[/{style}]",
        f"[bold]Retries:[/] {summary['retry_count']}/{summary['max_retries']}"
        f" (can retry: {summary['can_retry']})",
        f"[bold]Scheduled:[/] {summary['scheduled_at'] or '-'}",
        f"[bold]Started:[/] {summary['started_at'] or '-'}",
        f"[bold]Completed:[/] {summary['completed_at'] or '-'}",
    ]
    if summary["duration_seconds"] is not None:
        lines.append(f"[bold]Duration:[/] {summary['duration_seconds']:.1f}s")
    if publication.external_id:
        lines.append(f"[bold]Post:[/] {publication.external_id} {publication.external_url or ''}")
    if publication.error:
        retry_hint = "retryable" if publication.error.is_retryable else "not retryable"
        lines.append(f"[bold red]Error:[/] {publication.error.code} ({retry_hint}): {publication.error.message}")

    console.print(Panel("\n".join(lines), title=f"Publication {publication.id}"))


def show_remote_status(console: Console, status: dict[str, Any]) -> None:
    """Display the post state reported by WordPress."""
    metadata = status.get("metadata") or {}
    console.print(Panel(
        f"[bold]Remote status:[/] {status.get('status')}\n"
        f"[bold]Title:[/] {metadata.get('title') or '-'}\n"
        f"[bold]URL:[/] {status.get('url') or '-'}\n"
        f"[bold]Last modified:[/] {status.get('last_modified') or '-'}",
        title=f"WordPress post {status.get('external_id')}",
    ))


def show_retry_result(console: Console, publication: Publication) -> None:
    console.print(Panel(
        f"[bold green]Retry succeeded![/bold green]\n\n"
        f"[bold]Publication:[/] {publication.id}\n"
        f"[bold]Attempts used:[/] {publication.retry_count}/{publication.max_retries}\n"
        f"[bold]Post ID:[/] {publication.external_id}\n"
        f"[bold]URL:[/] {publication.external_url or '-'}",
        title="Published",
        border_style="green",
    ))


def show_due_report(console: Console, report: DueRunReport) -> None:
    """Display the outcome of a due-publication pass."""
    if not report.total:
        console.print("[dim]No publications due[/dim]")
        return

    table = Table(title=f"Due run ({len(report.completed)} published, {len(report.failed)} failed)")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Result")
    table.add_column("Detail")

    for publication in report.completed:
        table.add_row(
            publication.id[:8],
            "[green]completed[/green]",
            publication.external_url or publication.external_id or "-",
        )
    for entry in report.failed:
        table.add_row(
            str(entry.get("publication_id", ""))[:8],
            f"[red]{entry.get('code')}[/red]",
            entry.get("error") or "-",
        )
    console.print(table)


def show_cancel_result(console: Console, publication: Publication) -> None:
    console.print(f"[dim]Publication {publication.id} cancelled (was for article {publication.article_id})[/dim]")


def show_connection_result(console: Console, site: str, report: dict[str, Any]) -> None:
    """Display a WordPress connection test report."""
    for warning in report.get("warnings") or []:
        console.print(f"[yellow]Warning: {warning}[/yellow]")

    if not report.get("is_successful"):
        console.print(Panel(
            f"[bold red]Connection failed[/bold red]\n\n"
            f"[bold]Site:[/] {report.get('site_url')}\n"
            f"[bold]Error:[/] {report.get('error')}\n"
            f"[bold]Code:[/] {report.get('code')}\n"
            f"[bold]Response time:[/] {report.get('response_time')} ms",
            title=site,
            border_style="red",
        ))
        return

    platform = report.get("platform_info") or {}
    namespaces = ", ".join(platform.get("features") or []) or "-"
    console.print(Panel(
        f"[bold green]Connected[/bold green]\n\n"
        f"[bold]Site:[/] {platform.get('name')} ({report.get('site_url')})\n"
        f"[bold]Version:[/] {platform.get('version')}\n"
        f"[bold]User:[/] {report.get('authenticated_as') or '-'}"
        f" ({', '.join(report.get('roles') or []) or 'no roles'})\n"
        f"[bold]Namespaces:[/] {namespaces}\n"
        f"[bold]Response time:[/] {report.get('response_time')} ms",
        title=site,
        border_style="green",
    ))


def show_publication_error(console: Console, error: str, details: Optional[dict] = None) -> None:
    """Display a publication command error."""
    console.print(f"\n[red]Error: {error}[/red]")
    if details:
        for key, value in details.items():
            if key in ("is_retryable", "publication"):
                continue
            console.print(f"  [dim]{key}:[/dim] [yellow]{value}[/yellow]")
