"""NASA NeoWs feed client — fetches close-approach data and scores it at ingest."""

from __future__ import annotations

import logging
import os
import threading
import time
from datetime import date, datetime, timezone
from typing import Any

import httpx

from cosmic_watch.risk import compute_risk_score

logger = logging.getLogger(__name__)

NEOWS_FEED_URL = "https://api.nasa.gov/neo/rest/v1/feed"

# Distinct date windows kept in the feed cache
MAX_CACHE_ENTRIES = 32


class FeedError(Exception):
    """Upstream feed could not be fetched. Message is safe to show users."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def _today_utc() -> date:
    return datetime.now(timezone.utc).date()


class NeoWsClient:
    """Caching NeoWs client. The API key never leaves the server."""

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        cache_ttl: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.api_key = api_key or os.getenv("NASA_API_KEY", "DEMO_KEY")
        self.timeout = timeout if timeout is not None else float(os.getenv("NEOWS_TIMEOUT", "30"))
        self.cache_ttl = cache_ttl if cache_ttl is not None else float(os.getenv("NEOWS_CACHE_TTL", "300"))
        self._client = httpx.Client(timeout=self.timeout, transport=transport)
        # Cache: (start, end) -> (fetched_at, payload)
        self._cache: dict[tuple[str, str | None], tuple[float, dict]] = {}
        self._cache_lock = threading.Lock()

    def close(self) -> None:
        self._client.close()

    def fetch_feed(self, start_date: date | None = None, end_date: date | None = None) -> dict:
        """Fetch the raw feed JSON for a date window (NeoWs caps it at 7 days)."""
        start = (start_date or _today_utc()).isoformat()
        end = end_date.isoformat() if end_date else None
        cache_key = (start, end)

        now = time.time()
        with self._cache_lock:
            self._evict_expired(now)
            cached = self._cache.get(cache_key)
        if cached:
            return cached[1]

        params = {"start_date": start, "api_key": self.api_key}
        if end:
            params["end_date"] = end

        logger.info("Fetching NeoWs feed start=%s end=%s", start, end or "-")
        try:
            resp = self._client.get(NEOWS_FEED_URL, params=params)
        except httpx.HTTPError as exc:
            logger.error("NeoWs request failed: %s", exc)
            raise FeedError(f"NASA network error: {exc}") from exc

        if resp.status_code == 403:
            raise FeedError("NASA API: Forbidden. Uplink key invalid.", resp.status_code)
        if resp.status_code == 429:
            raise FeedError("NASA API: Rate limit exceeded.", resp.status_code)
        if resp.is_error:
            logger.error("NeoWs returned %s: %s", resp.status_code, resp.text[:200])
            raise FeedError(f"NASA network error: {resp.status_code}", resp.status_code)

        try:
            data = resp.json()
        except ValueError as exc:
            raise FeedError("NASA network error: malformed feed payload") from exc

        if self.cache_ttl > 0:
            with self._cache_lock:
                if cache_key not in self._cache and len(self._cache) >= MAX_CACHE_ENTRIES:
                    oldest = min(self._cache, key=lambda k: self._cache[k][0])
                    del self._cache[oldest]
                self._cache[cache_key] = (now, data)
        return data

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def _evict_expired(self, now: float) -> None:
        """Drop stale windows. Caller holds the cache lock."""
        expired = [k for k, (fetched_at, _) in self._cache.items() if now - fetched_at >= self.cache_ttl]
        for key in expired:
            del self._cache[key]


# Singleton
_client: NeoWsClient | None = None


def get_client() -> NeoWsClient:
    global _client
    if _client is None:
        _client = NeoWsClient()
    return _client


# --- Ingestion ---

def ingest_feed(payload: dict[str, Any]) -> list[dict]:
    """Flatten the date-keyed feed into one list and attach risk_score.

    Records keep upstream order (date keys as served, objects within a day as
    served). The payload itself is not modified.
    """
    by_date = payload.get("near_earth_objects") if isinstance(payload, dict) else None
    if not isinstance(by_date, dict):
        return []

    neos: list[dict] = []
    for day_neos in by_date.values():
        if not isinstance(day_neos, list):
            continue
        for neo in day_neos:
            if not isinstance(neo, dict):
                continue
            neos.append({**neo, "risk_score": compute_risk_score(neo)})
    return neos
