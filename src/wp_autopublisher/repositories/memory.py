"""In-process record store, used by tests and one-shot CLI runs."""

from __future__ import annotations

import copy
from typing import Any

from .base import FeaturedImageRepository, PublicationRepository, RecordStore


class InMemoryRecordStore(RecordStore):
    """Keeps deep copies so callers never alias stored state."""

    def __init__(self) -> None:
        self._records: dict[str, dict[str, Any]] = {}

    def load(self, record_id: str) -> dict[str, Any] | None:
        data = self._records.get(record_id)
        return copy.deepcopy(data) if data is not None else None

    def load_all(self) -> list[dict[str, Any]]:
        return [copy.deepcopy(data) for data in self._records.values()]

    def store(self, record_id: str, data: dict[str, Any]) -> None:
        self._records[record_id] = copy.deepcopy(data)

    def remove(self, record_id: str) -> bool:
        return self._records.pop(record_id, None) is not None

    def __len__(self) -> int:
        return len(self._records)


def in_memory_repositories() -> tuple[FeaturedImageRepository, PublicationRepository]:
    """Fresh image and publication repositories sharing nothing."""
    return (
        FeaturedImageRepository(InMemoryRecordStore()),
        PublicationRepository(InMemoryRecordStore()),
    )
