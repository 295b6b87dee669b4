"""Telemetry grid, watchlist and orbit-scene views over ingested NEOs.

Every view merges researcher overrides first, so filters, sorting and colour
bands all work from the display score rather than the computed one.
"""

from __future__ import annotations

import math
from datetime import date

from cosmic_watch.models import (
    DashboardPage,
    DashboardStats,
    DisplayNeo,
    HazardFilter,
    OrbitBody,
    OrbitScene,
    Override,
    RiskFilter,
    RiskLevel,
    SizeFilter,
    SortBy,
    VelocityFilter,
)
from cosmic_watch.overrides import display_for
from cosmic_watch.risk import (
    CRITICAL_THRESHOLD,
    ELEVATED_THRESHOLD,
    compute_risk_score,
    first_approach,
    miss_distance_km,
    risk_level,
    velocity_kph,
)

ITEMS_PER_PAGE = 6

# Size bands on max diameter (m)
SMALL_MAX_M = 50.0
LARGE_MIN_M = 500.0

# Velocity bands (km/h)
SLOW_MAX_KPH = 30_000.0
FAST_MIN_KPH = 70_000.0

# Orbit scene
ORBIT_SCENE_LIMIT = 50
LEVEL_COLORS = {RiskLevel.CRITICAL: "#ef4444", RiskLevel.ELEVATED: "#eab308", RiskLevel.LOW: "#0ea5e9"}
LEVEL_BODY_SCALE = {RiskLevel.CRITICAL: 2.5, RiskLevel.ELEVATED: 1.8, RiskLevel.LOW: 1.2}


def _normalized(neo: dict) -> dict:
    """Coerce the fields the views rely on; everything else passes through."""
    diameter = neo.get("estimated_diameter")
    approaches = neo.get("close_approach_data")
    score = neo.get("risk_score")
    return {
        **neo,
        "id": str(neo.get("id", "")),
        "name": str(neo.get("name") or ""),
        "is_potentially_hazardous_asteroid": neo.get("is_potentially_hazardous_asteroid") is True,
        "estimated_diameter": diameter if isinstance(diameter, dict) else {},
        "close_approach_data": approaches if isinstance(approaches, list) else [],
        "risk_score": score if isinstance(score, int) else compute_risk_score(neo),
    }


def merge_display(neos: list[dict], overrides: dict[str, Override]) -> list[DisplayNeo]:
    merged = []
    for neo in neos:
        record = _normalized(neo)
        shown = display_for(record, overrides)
        merged.append(DisplayNeo(
            **record,
            display_score=shown.score,
            is_verified=shown.verified,
            researcher_notes=shown.notes,
            risk_level=risk_level(shown.score),
        ))
    return merged


def _diameter_m(neo: DisplayNeo) -> float:
    meters = neo.estimated_diameter.get("meters")
    if not isinstance(meters, dict):
        return 0.0
    try:
        return float(meters.get("estimated_diameter_max") or 0.0)
    except (TypeError, ValueError):
        return 0.0


def _as_dict(neo: DisplayNeo) -> dict:
    return {"close_approach_data": neo.close_approach_data}


def _approach_date(neo: DisplayNeo) -> date | None:
    approach = first_approach(_as_dict(neo))
    raw = approach.get("close_approach_date") if approach else None
    try:
        return date.fromisoformat(raw) if raw else None
    except (TypeError, ValueError):
        return None


# ── Filters ─────────────────────────────────────────────────────────

def _matches_size(diameter_m: float, size: SizeFilter) -> bool:
    if size is SizeFilter.SMALL:
        return diameter_m < SMALL_MAX_M
    if size is SizeFilter.MEDIUM:
        return SMALL_MAX_M <= diameter_m <= LARGE_MIN_M
    if size is SizeFilter.LARGE:
        return diameter_m > LARGE_MIN_M
    return True


def _matches_risk(neo: DisplayNeo, risk: RiskFilter) -> bool:
    if risk is RiskFilter.ALL:
        return True
    # Risk bands only apply to researcher-verified objects
    if not neo.is_verified:
        return False
    score = neo.display_score
    if risk is RiskFilter.LOW:
        return score < ELEVATED_THRESHOLD
    if risk is RiskFilter.ELEVATED:
        return ELEVATED_THRESHOLD <= score < CRITICAL_THRESHOLD
    return score >= CRITICAL_THRESHOLD


def _matches_velocity(kph: float, velocity: VelocityFilter) -> bool:
    if velocity is VelocityFilter.SLOW:
        return kph < SLOW_MAX_KPH
    if velocity is VelocityFilter.MODERATE:
        return SLOW_MAX_KPH <= kph <= FAST_MIN_KPH
    if velocity is VelocityFilter.FAST:
        return kph > FAST_MIN_KPH
    return True


def filter_neos(
    neos: list[DisplayNeo],
    search: str = "",
    hazard: HazardFilter = HazardFilter.ALL,
    size: SizeFilter = SizeFilter.ALL,
    risk: RiskFilter = RiskFilter.ALL,
    velocity: VelocityFilter = VelocityFilter.ALL,
) -> list[DisplayNeo]:
    needle = search.strip().lower()
    out = []
    for neo in neos:
        if needle and needle not in neo.name.lower():
            continue
        if hazard is HazardFilter.HAZARDOUS and not neo.is_potentially_hazardous_asteroid:
            continue
        if not _matches_size(_diameter_m(neo), size):
            continue
        if not _matches_risk(neo, risk):
            continue
        if not _matches_velocity(velocity_kph(_as_dict(neo)) or 0.0, velocity):
            continue
        out.append(neo)
    return out


# ── Sorting ─────────────────────────────────────────────────────────

def sort_neos(neos: list[DisplayNeo], sort_by: SortBy = SortBy.NONE) -> list[DisplayNeo]:
    """Stable sort; objects missing the sort field go last."""
    if sort_by is SortBy.NONE:
        return list(neos)

    if sort_by in (SortBy.DATE_DESC, SortBy.DATE_ASC):
        dated = [n for n in neos if _approach_date(n) is not None]
        undated = [n for n in neos if _approach_date(n) is None]
        dated.sort(key=_approach_date, reverse=sort_by is SortBy.DATE_DESC)
        return dated + undated

    if sort_by is SortBy.RISK_DESC:
        return sorted(neos, key=lambda n: n.display_score, reverse=True)

    # MISS_ASC
    return sorted(neos, key=_miss_or_inf)


def _miss_or_inf(neo: DisplayNeo) -> float:
    km = miss_distance_km(_as_dict(neo))
    return km if km is not None else math.inf


# ── Stats & pagination ──────────────────────────────────────────────

def compute_stats(neos: list[DisplayNeo]) -> DashboardStats:
    velocities = [velocity_kph(_as_dict(n)) or 0.0 for n in neos]
    misses = [km for km in (miss_distance_km(_as_dict(n)) for n in neos) if km is not None]
    return DashboardStats(
        total=len(neos),
        hazardous_count=sum(1 for n in neos if n.is_potentially_hazardous_asteroid),
        avg_velocity_kph=sum(velocities) / len(neos) if neos else 0.0,
        closest_miss_km=min(misses) if misses else None,
    )


def paginate(items: list[DisplayNeo], page: int) -> tuple[list[DisplayNeo], int]:
    total_pages = math.ceil(len(items) / ITEMS_PER_PAGE)
    start = (page - 1) * ITEMS_PER_PAGE
    return items[start:start + ITEMS_PER_PAGE], total_pages


def build_dashboard(
    neos: list[dict],
    overrides: dict[str, Override],
    search: str = "",
    hazard: HazardFilter = HazardFilter.ALL,
    size: SizeFilter = SizeFilter.ALL,
    risk: RiskFilter = RiskFilter.ALL,
    velocity: VelocityFilter = VelocityFilter.ALL,
    sort_by: SortBy = SortBy.NONE,
    page: int = 1,
) -> DashboardPage:
    merged = merge_display(neos, overrides)
    matches = sort_neos(filter_neos(merged, search, hazard, size, risk, velocity), sort_by)
    items, total_pages = paginate(matches, page)
    return DashboardPage(
        items=items,
        page=page,
        total_pages=total_pages,
        total_matches=len(matches),
        stats=compute_stats(merged),
    )


# ── Watchlist view ──────────────────────────────────────────────────

def watched_neos(neos: list[dict], watchlist: list[str], overrides: dict[str, Override]) -> list[DisplayNeo]:
    watched = set(watchlist)
    return merge_display([n for n in neos if str(n.get("id")) in watched], overrides)


# ── Orbit scene ─────────────────────────────────────────────────────

def orbit_radius(miss_km: float | None) -> float:
    """Scene distance from Earth: 20 units per million km, floor of 70."""
    return max(70.0, ((miss_km or 0.0) / 1_000_000) * 20 + 80)


def build_orbit_scene(neos: list[dict], overrides: dict[str, Override]) -> OrbitScene:
    merged = merge_display(neos, overrides)
    prioritized = sorted(merged, key=lambda n: n.display_score, reverse=True)[:ORBIT_SCENE_LIMIT]

    bodies = []
    for neo in prioritized:
        level = neo.risk_level
        bodies.append(OrbitBody(
            id=neo.id,
            name=neo.name,
            score=neo.display_score,
            level=level,
            color=LEVEL_COLORS[level],
            orbit_radius=round(orbit_radius(miss_distance_km(_as_dict(neo))), 2),
            body_radius=round(_diameter_m(neo) / 250 * LEVEL_BODY_SCALE[level] + 1.8, 2),
            labelled=level is RiskLevel.CRITICAL,
        ))

    return OrbitScene(
        bodies=bodies,
        critical_count=sum(1 for b in bodies if b.level is RiskLevel.CRITICAL),
        elevated_count=sum(1 for b in bodies if b.level is RiskLevel.ELEVATED),
        low_count=sum(1 for b in bodies if b.level is RiskLevel.LOW),
    )
