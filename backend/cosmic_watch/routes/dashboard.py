"""Dashboard views: /api/dashboard (telemetry grid) and /api/orbit (3D scene payload)."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from cosmic_watch.dashboard import build_dashboard, build_orbit_scene
from cosmic_watch.dependencies import get_feed_client, get_override_store
from cosmic_watch.models import (
    DashboardPage,
    HazardFilter,
    OrbitScene,
    RiskFilter,
    SizeFilter,
    SortBy,
    VelocityFilter,
)
from cosmic_watch.neows import NeoWsClient
from cosmic_watch.overrides import OverrideStore
from cosmic_watch.routes.feed import fetch_scored

router = APIRouter(prefix="/api", tags=["dashboard"])


@router.get("/dashboard", response_model=DashboardPage)
async def dashboard(
    start_date: date | None = Query(default=None),
    search: str = Query(default="", max_length=200),
    hazard: HazardFilter = HazardFilter.ALL,
    size: SizeFilter = SizeFilter.ALL,
    risk: RiskFilter = RiskFilter.ALL,
    velocity: VelocityFilter = VelocityFilter.ALL,
    sort: SortBy = SortBy.NONE,
    page: int = Query(default=1, ge=1),
    client: NeoWsClient = Depends(get_feed_client),
    overrides: OverrideStore = Depends(get_override_store),
) -> DashboardPage:
    neos = await fetch_scored(client, start_date)
    return build_dashboard(
        neos,
        overrides.get_all(),
        search=search,
        hazard=hazard,
        size=size,
        risk=risk,
        velocity=velocity,
        sort_by=sort,
        page=page,
    )


@router.get("/orbit", response_model=OrbitScene)
async def orbit(
    start_date: date | None = Query(default=None),
    client: NeoWsClient = Depends(get_feed_client),
    overrides: OverrideStore = Depends(get_override_store),
) -> OrbitScene:
    neos = await fetch_scored(client, start_date)
    return build_orbit_scene(neos, overrides.get_all())
