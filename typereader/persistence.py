"""Named JSON blobs on disk.

Each collection (documents, dictionary, folders) is one file holding a JSON
array. Reads never fail: a missing or unreadable blob loads as an empty list.
Writes are best-effort and only log on failure.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Protocol

logger = logging.getLogger(__name__)

DOCUMENTS = "documents"
DICTIONARY = "dictionary"
FOLDERS = "folders"


class BlobStore(Protocol):
    def load(self, name: str) -> List[Any]: ...

    def save(self, name: str, items: List[Any]) -> None: ...


class JsonFileBlobStore:
    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    def path_for(self, name: str) -> Path:
        return self.data_dir / f"{name}.json"

    def exists(self, name: str) -> bool:
        return self.path_for(name).exists()

    def load(self, name: str) -> List[Any]:
        path = self.path_for(name)
        if not path.exists():
            return []
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error("Failed to parse %s: %s", path, e)
            return []
        if not isinstance(raw, list):
            logger.error("Expected a JSON array in %s, got %s", path, type(raw).__name__)
            return []
        return raw

    def save(self, name: str, items: List[Any]) -> None:
        path = self.path_for(name)
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(
                json.dumps(items, ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to save %s: %s", path, e)


class MemoryBlobStore:
    """Blob store kept in a dict; used when nothing should touch the disk."""

    def __init__(self):
        self.blobs: dict[str, List[Any]] = {}

    def load(self, name: str) -> List[Any]:
        return list(self.blobs.get(name, []))

    def save(self, name: str, items: List[Any]) -> None:
        self.blobs[name] = list(items)
