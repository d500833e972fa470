"""Typer app configuration and logging setup."""

from __future__ import annotations

import logging
import warnings

import typer
from dotenv import load_dotenv

from ..providers.config import AppSettings

# Load environment variables from .env file
load_dotenv()

# Suppress httpx cleanup warnings at interpreter exit
warnings.filterwarnings("ignore", category=ResourceWarning)

# Create Typer app
app = typer.Typer(
    name="wp-autopublisher",
    help="AI-generated articles from feed items, published to WordPress",
    add_completion=False,
)

# Named loggers and the file each one writes to
LOG_FILES = {
    "ai_calls": "ai_calls.log",
    "wordpress_api": "wordpress_api.log",
    "publishing": "publishing.log",
}


def register_commands() -> None:
    """Register all commands from feature modules."""
    from .article.commands import generate, image, publish

    app.command(name="generate")(generate)
    app.command(name="publish")(publish)
    app.command(name="image")(image)

    from .publication.commands import cancel, publish_due, retry, status, test_wordpress

    app.command(name="retry")(retry)
    app.command(name="status")(status)
    app.command(name="test-wordpress")(test_wordpress)
    app.command(name="publish-due")(publish_due)
    app.command(name="cancel")(cancel)


def setup_logging() -> None:
    """Configure logging for CLI.

    - Suppresses console output from libraries
    - Sends AI calls, WordPress API calls and publication lifecycle to files
    """
    log_dir = AppSettings().log_dir
    log_dir.mkdir(parents=True, exist_ok=True)

    # Remove any default console handlers from root logger
    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(logging.CRITICAL)

    # Suppress loggers that might print to console
    for logger_name in ["httpx", "httpcore", "urllib3", "asyncio", "openai", "agno"]:
        logger = logging.getLogger(logger_name)
        logger.setLevel(logging.WARNING)
        logger.propagate = False

    formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")
    for logger_name, filename in LOG_FILES.items():
        logger = logging.getLogger(logger_name)
        logger.setLevel(logging.DEBUG)
        logger.propagate = False
        logger.handlers = []  # Clear any existing handlers
        file_handler = logging.FileHandler(log_dir / filename, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)


# Initialize logging on module import
setup_logging()

# Register all commands
register_commands()


def main() -> None:
    """CLI entry point."""
    app()
