"""JSON-file record store.

Storage structure:
    data/
        featured_images/
            <id>.json
        publications/
            <id>.json
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

from .base import FeaturedImageRepository, PublicationRepository, RecordStore

_logger = logging.getLogger("publishing")

_SAFE_ID = re.compile(r"^[A-Za-z0-9_.\-]+$")


class JsonFileRecordStore(RecordStore):
    """One pretty-printed JSON file per record."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, record_id: str) -> Path:
        if not _SAFE_ID.match(record_id) or record_id.startswith("."):
            raise ValueError(f"Invalid record id: {record_id!r}")
        return self.directory / f"{record_id}.json"

    def load(self, record_id: str) -> dict[str, Any] | None:
        path = self._path(record_id)
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def load_all(self) -> list[dict[str, Any]]:
        records = []
        for path in sorted(self.directory.glob("*.json")):
            with open(path, "r", encoding="utf-8") as f:
                records.append(json.load(f))
        return records

    def store(self, record_id: str, data: dict[str, Any]) -> None:
        path = self._path(record_id)
        tmp_path = path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        tmp_path.replace(path)
        _logger.debug(f"STORAGE | wrote {path.name} in {self.directory.name}")

    def remove(self, record_id: str) -> bool:
        path = self._path(record_id)
        if not path.exists():
            return False
        path.unlink()
        return True


def json_repositories(data_dir: Path) -> tuple[FeaturedImageRepository, PublicationRepository]:
    """Image and publication repositories under ``data_dir``."""
    data_dir = Path(data_dir)
    return (
        FeaturedImageRepository(JsonFileRecordStore(data_dir / "featured_images")),
        PublicationRepository(JsonFileRecordStore(data_dir / "publications")),
    )
