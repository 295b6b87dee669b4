"""Researcher risk overrides — manual (score, notes) pairs that supersede the
computed risk score for display.

Stored as one JSON object under a fixed key: {neo_id: {"score": int, "notes": str}}.
Last write wins; a set() fully replaces any previous entry for that id.
"""

from __future__ import annotations

import json
import logging
import threading

from cosmic_watch.models import DisplayScore, Override
from cosmic_watch.storage import KeyValueStore

logger = logging.getLogger(__name__)

OVERRIDES_KEY = "cosmic_researcher_overrides"

# Serialises read-modify-write of the override table across request threads
_write_lock = threading.Lock()

MIN_SCORE = 0
MAX_SCORE = 100


class InvalidOverrideError(ValueError):
    """Override score is not an integer in [0, 100]."""


def validate_score(score: object) -> int:
    # bool is an int subclass; True is not a score
    if isinstance(score, bool) or not isinstance(score, int):
        raise InvalidOverrideError(f"Override score must be an integer, got {score!r}")
    if not MIN_SCORE <= score <= MAX_SCORE:
        raise InvalidOverrideError(
            f"Override score must be between {MIN_SCORE} and {MAX_SCORE}, got {score}"
        )
    return score


class OverrideStore:
    def __init__(self, store: KeyValueStore):
        self._store = store

    def _read(self) -> dict[str, Override]:
        raw = self._store.get(OVERRIDES_KEY)
        if not raw:
            return {}
        try:
            doc = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Stored overrides are not valid JSON, ignoring: %s", exc)
            return {}
        if not isinstance(doc, dict):
            logger.warning("Stored overrides are not a JSON object, ignoring")
            return {}

        overrides: dict[str, Override] = {}
        for neo_id, entry in doc.items():
            try:
                overrides[neo_id] = Override(
                    score=validate_score(entry.get("score")),
                    notes=str(entry.get("notes") or ""),
                )
            except (AttributeError, InvalidOverrideError) as exc:
                logger.warning("Dropping invalid stored override for %s: %s", neo_id, exc)
        return overrides

    def _write(self, overrides: dict[str, Override]) -> None:
        doc = {neo_id: o.model_dump() for neo_id, o in overrides.items()}
        self._store.set(OVERRIDES_KEY, json.dumps(doc))

    def get(self, neo_id: str) -> Override | None:
        return self._read().get(neo_id)

    def get_all(self) -> dict[str, Override]:
        return self._read()

    def set(self, neo_id: str, score: int, notes: str) -> Override:
        override = Override(score=validate_score(score), notes=notes)
        with _write_lock:
            overrides = self._read()
            overrides[neo_id] = override
            self._write(overrides)
        logger.info("Override stored for %s (score=%d)", neo_id, override.score)
        return override

    def delete(self, neo_id: str) -> bool:
        with _write_lock:
            overrides = self._read()
            if neo_id not in overrides:
                return False
            del overrides[neo_id]
            self._write(overrides)
        logger.info("Override removed for %s", neo_id)
        return True

    def display(self, neo: dict) -> DisplayScore:
        return display_for(neo, self._read())


def display_for(neo: dict, overrides: dict[str, Override]) -> DisplayScore:
    """Merge one NEO with the override table: the override wins when present."""
    override = overrides.get(str(neo.get("id")))
    if override is None:
        return DisplayScore(score=neo.get("risk_score", 0), verified=False, notes=None)
    return DisplayScore(score=override.score, verified=True, notes=override.notes)
