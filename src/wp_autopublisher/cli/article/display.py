"""Display functions for article commands - pure functions for Rich output."""

from __future__ import annotations

from typing import Any, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ...domain.publication import Publication
from ...services.models import GenerationResult
from .params import GenerateParams, ImageParams, PublishParams


def show_generate_config(console: Console, params: GenerateParams) -> None:
    """Display generation configuration panel."""
    source = str(params.feed_file) if params.feed_file else (params.title or "")
    image_info = f"upload to {params.site}" if params.featured_image else "Disabled"
    image_style = "green" if params.featured_image else "dim"

    console.print(Panel(
        f"Source: [cyan]{source[:80]}[/cyan]\n"
        f"Model: [yellow]{params.model or 'default'}[/yellow]\n"
        f"Language: [yellow]{params.language or 'default'}[/yellow]\n"
        f"Featured image: [{image_style}]{image_info}[/{image_style}]\n"
        f"Output: [yellow]{params.output or 'console only'}[/yellow]",
        title="Article Generation",
    ))


def show_generate_result(console: Console, result: GenerationResult, output: Optional[Any] = None) -> None:
    """Display a generated article summary."""
    stats = result.statistics
    confidence = "[yellow]low (regex SEO fields)[/yellow]" if result.low_confidence else "[green]normal[/green]"

    table = Table(show_header=False, box=None)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Title", result.title)
    table.add_row("Slug", result.slug or "-")
    table.add_row("Meta description", result.meta_description or "-")
    table.add_row("Tags", ", ".join(result.seo_tags) or "-")
    table.add_row("Words", f"{stats.word_count} (~{stats.reading_time} min read)")
    table.add_row("Extraction", f"{result.strategy.value} / {result.shape.value} / seo:{result.seo_source.value}")
    table.add_row("Confidence", confidence)
    table.add_row("Model", f"{result.provider or '-'} / {result.model}")
    table.add_row("Cost", f"${result.cost:.4f}")
    table.add_row("Duration", f"{result.generation_time_ms} ms")
    if result.featured_image_id:
        table.add_row("Featured image", f"#{result.featured_image_id} {result.featured_image_url or ''}")
    if output:
        table.add_row("Saved to", str(output))

    console.print(Panel(table, title="Complete", border_style="green"))

    if result.image_warning:
        console.print(f"[yellow]Warning: featured image skipped ({result.image_warning})[/yellow]")


def show_publish_config(console: Console, params: PublishParams) -> None:
    """Display publish configuration panel."""
    when = params.scheduled_at.isoformat() if params.scheduled_at else "now"
    console.print(Panel(
        f"Article: [cyan]{params.article_file}[/cyan]\n"
        f"Site: [yellow]{params.site}[/yellow]\n"
        f"Post status: [yellow]{params.status or 'site default'}[/yellow]\n"
        f"When: [yellow]{when}[/yellow]\n"
        f"Max retries: [yellow]{params.max_retries}[/yellow]",
        title="WordPress Publish",
    ))


def show_publication_result(console: Console, publication: Publication) -> None:
    """Display a completed or scheduled publication."""
    if publication.external_id:
        body = (
            f"[bold green]Published successfully![/bold green]\n\n"
            f"[bold]Publication:[/] {publication.id}\n"
            f"[bold]Post ID:[/] {publication.external_id}\n"
            f"[bold]URL:[/] {publication.external_url or '-'}"
        )
        title = "Published"
    else:
        body = (
            f"[bold cyan]Publication {publication.status.value}[/bold cyan]\n\n"
            f"[bold]Publication:[/] {publication.id}\n"
            f"[bold]Scheduled for:[/] {publication.scheduled_at.isoformat() if publication.scheduled_at else '-'}"
        )
        title = "Scheduled"
    console.print(Panel(body, title=title, border_style="green"))


def show_image_result(console: Console, image: Any, upload: Optional[Any] = None) -> None:
    """Display an acquired featured image and, if uploaded, its media entry."""
    lines = [
        f"[bold]Article:[/] {image.article_id}",
        f"[bold]Image:[/] {image.id}",
        f"[bold]Status:[/] {image.status.value}",
        f"[bold]Search query:[/] {image.search_query or '-'}",
        f"[bold]Source URL:[/] {upload.original_url if upload else image.url}",
    ]
    if upload:
        lines.append(f"[bold]Media ID:[/] {upload.media_id}")
        lines.append(f"[bold]WordPress URL:[/] {upload.wordpress_url}")
        if not upload.persisted:
            lines.append("[yellow]Uploaded, but the local record was not updated[/yellow]")
    else:
        lines.append("[dim]Not uploaded (pass --site to upload)[/dim]")
    console.print(Panel("\n".join(lines), title="Featured image", border_style="green"))


def show_article_error(console: Console, error: str, details: Optional[dict] = None) -> None:
    """Display an article command error."""
    console.print(f"\n[red]Error: {error}[/red]")
    if details:
        for key, value in details.items():
            if key in ("is_retryable", "publication"):
                continue
            console.print(f"  [dim]{key}:[/dim] [yellow]{value}[/yellow]")
        if details.get("can_retry"):
            console.print(f"[dim]Retry with: wp-autopublisher retry {details.get('publication_id')}[/dim]")
