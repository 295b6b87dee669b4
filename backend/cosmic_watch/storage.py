"""Key-value persistence for overrides, watchlists and the user registry.

Values are strings (JSON documents serialised by the caller), mirroring the
browser local-storage contract the dashboard was built around. Two backends:

- InMemoryStore — dict-backed, used in tests
- JsonFileStore — one JSON file holding every key, written through on each set
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

DEFAULT_STORE_PATH = "data/cosmic_store.json"


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class InMemoryStore:
    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStore:
    """File-backed store. Every set() rewrites the file before returning.

    Writes go to a sibling temp file and are renamed into place, so a crash
    mid-write leaves the previous document intact. OSErrors propagate.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._lock = threading.Lock()
        self._data: dict[str, str] = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, ValueError) as exc:
            logger.warning("Store file %s unreadable, starting empty: %s", self._path, exc)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Store file %s is not a JSON object, starting empty", self._path)
            return {}
        return {str(k): v for k, v in raw.items() if isinstance(v, str)}

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            updated = {**self._data, key: value}
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp.write_text(json.dumps(updated, indent=2) + "\n", encoding="utf-8")
            os.replace(tmp, self._path)
            self._data = updated


# Singleton
_store: KeyValueStore | None = None


def get_store() -> KeyValueStore:
    global _store
    if _store is None:
        path = os.getenv("COSMIC_STORE_PATH", DEFAULT_STORE_PATH)
        logger.info("Opening key-value store at %s", path)
        _store = JsonFileStore(path)
    return _store
