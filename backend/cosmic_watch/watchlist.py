"""Per-user watchlists of NEO ids, toggled on and off from the telemetry grid."""

from __future__ import annotations

import json
import logging
import threading

from cosmic_watch.storage import KeyValueStore

logger = logging.getLogger(__name__)

WATCHLIST_KEY_PREFIX = "cosmic_watchlist"

# Serialises toggles across request threads
_write_lock = threading.Lock()


def _key(user_id: str) -> str:
    return f"{WATCHLIST_KEY_PREFIX}:{user_id}"


class Watchlist:
    def __init__(self, store: KeyValueStore):
        self._store = store

    def ids(self, user_id: str) -> list[str]:
        raw = self._store.get(_key(user_id))
        if not raw:
            return []
        try:
            doc = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Watchlist for %s is not valid JSON, ignoring: %s", user_id, exc)
            return []
        if not isinstance(doc, list):
            return []
        return [str(i) for i in doc]

    def contains(self, user_id: str, neo_id: str) -> bool:
        return neo_id in self.ids(user_id)

    def toggle(self, user_id: str, neo_id: str) -> bool:
        """Add or remove one id. Returns True if the object is now watched."""
        with _write_lock:
            current = self.ids(user_id)
            if neo_id in current:
                updated = [i for i in current if i != neo_id]
                watched = False
            else:
                updated = [*current, neo_id]
                watched = True
            self._store.set(_key(user_id), json.dumps(updated))
        return watched
