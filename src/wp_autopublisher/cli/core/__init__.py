"""Shared CLI plumbing: console, event printing and wiring."""

from .console import console

__all__ = ["console"]
