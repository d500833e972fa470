"""Shared rich console for CLI output."""

import sys

from rich.console import Console

# safe_box avoids box-drawing characters the Windows cp1252 codepage lacks
console = Console(safe_box=sys.platform == "win32")
