"""AI article generation and WordPress publishing pipeline."""

__version__ = "0.1.0"
