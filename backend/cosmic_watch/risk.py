"""Risk scoring for near-Earth objects.

Computes a bounded 0-100 threat score from a raw NeoWs record as a weighted sum:
- Hazard: 40 points if the feed flags the object as potentially hazardous
- Size: up to 30 points, linear in max diameter, saturating at 1 km
- Proximity: up to 30 points, linear in miss distance, 0 at 7.5M km

Each term is clamped on its own before summing, so malformed fields only
zero out their own contribution.
"""

from __future__ import annotations

import math
from typing import Any

from cosmic_watch.models import RiskLevel

HAZARD_POINTS = 40.0
SIZE_POINTS = 30.0
PROXIMITY_POINTS = 30.0

# Diameter at which the size term saturates (km)
SIZE_SATURATION_KM = 1.0

# Close-approach hazard threshold (km); proximity term reaches 0 here
PROXIMITY_THRESHOLD_KM = 7_500_000.0

# Display bands
CRITICAL_THRESHOLD = 75
ELEVATED_THRESHOLD = 40


def _to_float(value: Any) -> float | None:
    """Parse a feed number (often string-encoded). None when unusable."""
    if isinstance(value, bool):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(parsed):
        return None
    return parsed


def _dig(record: Any, *path: str) -> Any:
    for key in path:
        if not isinstance(record, dict):
            return None
        record = record.get(key)
    return record


def first_approach(neo: dict) -> dict | None:
    """Return the soonest close-approach event, if the feed supplied one."""
    approaches = neo.get("close_approach_data") if isinstance(neo, dict) else None
    if not isinstance(approaches, list) or not approaches:
        return None
    first = approaches[0]
    return first if isinstance(first, dict) else None


def miss_distance_km(neo: dict) -> float | None:
    return _to_float(_dig(first_approach(neo), "miss_distance", "kilometers"))


def velocity_kph(neo: dict) -> float | None:
    return _to_float(_dig(first_approach(neo), "relative_velocity", "kilometers_per_hour"))


def hazard_term(neo: dict) -> float:
    return HAZARD_POINTS if _dig(neo, "is_potentially_hazardous_asteroid") is True else 0.0


def size_term(neo: dict) -> float:
    diameter_km = _to_float(
        _dig(neo, "estimated_diameter", "kilometers", "estimated_diameter_max")
    )
    if diameter_km is None:
        return 0.0
    return max(0.0, min(SIZE_POINTS, (diameter_km / SIZE_SATURATION_KM) * SIZE_POINTS))


def proximity_term(neo: dict) -> float:
    km = miss_distance_km(neo)
    if km is None:
        return 0.0
    return max(0.0, min(PROXIMITY_POINTS, (1.0 - km / PROXIMITY_THRESHOLD_KM) * PROXIMITY_POINTS))


def compute_risk_score(neo: dict) -> int:
    """Full risk score for one NEO record. Always an int in [0, 100]."""
    total = hazard_term(neo) + size_term(neo) + proximity_term(neo)
    # Round half up
    return int(math.floor(total + 0.5))


def risk_level(score: int) -> RiskLevel:
    """Map a display score to its band: CRITICAL, ELEVATED or LOW."""
    if score >= CRITICAL_THRESHOLD:
        return RiskLevel.CRITICAL
    if score >= ELEVATED_THRESHOLD:
        return RiskLevel.ELEVATED
    return RiskLevel.LOW
