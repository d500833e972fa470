"""Featured image and publication repositories."""

from .base import FeaturedImageRepository, PublicationRepository, RecordStore
from .json_store import JsonFileRecordStore, json_repositories
from .memory import InMemoryRecordStore, in_memory_repositories

__all__ = [
    "FeaturedImageRepository",
    "PublicationRepository",
    "RecordStore",
    "JsonFileRecordStore",
    "json_repositories",
    "InMemoryRecordStore",
    "in_memory_repositories",
]
