"""Publication commands: retry, status and test-wordpress."""

from .commands import retry, status, test_wordpress
from .service import PublicationService

__all__ = ["retry", "status", "test_wordpress", "PublicationService"]
