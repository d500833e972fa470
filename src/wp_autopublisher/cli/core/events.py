"""Async event callbacks that print progress lines to the console."""

from __future__ import annotations

from typing import Any

from ...domain.publication import PublicationEvent
from .console import console


async def print_ai_event(event: dict[str, Any]) -> None:
    """Print one progress line for a generation or image event."""
    kind = event.get("type", "")
    if kind == "text_call":
        console.print(f"[dim]  -> {event.get('provider')} / {event.get('model')}[/dim]")
    elif kind == "text_error":
        console.print(f"[yellow]  !! {event.get('provider')}: {event.get('error')}[/yellow]")
    elif kind == "text_response":
        console.print(f"[dim]  <- {event.get('provider')} responded[/dim]")
    elif kind == "image_acquired":
        console.print(f"[dim]  image from {event.get('source')}[/dim]")
    elif kind == "generation_failed":
        console.print(f"[red]  generation failed: {event.get('error')}[/red]")


async def print_publication_event(event: PublicationEvent) -> None:
    """Print one progress line for a publication lifecycle event."""
    if event.event_type == "publication.started":
        console.print(f"[dim]  publishing {event.publication_id}...[/dim]")
    elif event.event_type == "publication.completed":
        console.print(f"[dim]  post {event.external_id} created[/dim]")
    elif event.event_type == "publication.failed":
        console.print(
            f"[yellow]  attempt failed ({event.error.code}), "
            f"retries used {event.retry_count}, can retry: {event.can_retry}[/yellow]"
        )
