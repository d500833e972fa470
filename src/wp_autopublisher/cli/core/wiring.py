"""Process-start wiring shared by the CLI services.

Configuration, repositories and publication targets are built here once
per command and handed to the use cases explicitly.
"""

from __future__ import annotations

from pathlib import Path

from ...core.types import Result, Success, failure
from ...domain.errors import ValidationError
from ...domain.publication import PublicationTarget
from ...providers.config import AppSettings, ProviderConfig, load_provider_config
from ...repositories.base import FeaturedImageRepository, PublicationRepository
from ...repositories.json_store import json_repositories


def load_config(config_path: Path | None = None) -> ProviderConfig:
    """Load provider config from ``config_path`` or the configured default."""
    return load_provider_config(config_path)


def open_repositories(data_dir: Path | None = None) -> tuple[FeaturedImageRepository, PublicationRepository]:
    """JSON-backed repositories under ``data_dir`` (default from settings)."""
    return json_repositories(data_dir or AppSettings().data_dir)


def build_target(
    config: ProviderConfig,
    site_id: str,
    status: str | None = None,
) -> Result[PublicationTarget]:
    """Resolve a configured WordPress site into a publication target.

    Args:
        config: Loaded provider configuration.
        site_id: Key under ``wordpress_sites``.
        status: Post status override; defaults to the site's default.

    Returns:
        Success with the target, or Failure when the site is unknown or
        its credentials are incomplete.
    """
    site = config.get_wordpress_site(site_id)
    if site is None:
        return failure(
            "SITE_NOT_FOUND",
            f"WordPress site not configured: {site_id}",
            available=sorted(config.wordpress_sites),
        )

    password = site.get_password()
    if not password:
        hint = f"Set {site.password_env}" if site.password_env else "Add password or password_env to the site"
        return failure("MISSING_CREDENTIALS", f"No application password for site {site_id}", hint=hint)

    extra = {}
    if site.author:
        extra["author"] = site.author
    if site.custom_fields:
        extra["custom_fields"] = dict(site.custom_fields)

    try:
        target = PublicationTarget.wordpress(
            site_id=site.site_id,
            site_url=site.site_url,
            username=site.username,
            password=password,
            status=status or site.default_status,
            **extra,
        )
    except ValidationError as e:
        return failure("VALIDATION_ERROR", str(e), field=e.field)
    return Success(target)
