"""Core shared types."""

from .types import Failure, Result, Success, failure

__all__ = [
    "Result",
    "Success",
    "Failure",
    "failure",
]
