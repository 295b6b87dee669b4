"""Watchlist endpoints: the researcher view and the per-object toggle."""

from __future__ import annotations

import asyncio
import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from cosmic_watch.accounts import can_toggle_watchlist
from cosmic_watch.dashboard import watched_neos
from cosmic_watch.dependencies import (
    current_user,
    get_feed_client,
    get_override_store,
    get_watchlist,
    require_watchlist_viewer,
)
from cosmic_watch.models import UserProfile, WatchlistResponse, WatchlistToggleResponse
from cosmic_watch.neows import NeoWsClient
from cosmic_watch.overrides import OverrideStore
from cosmic_watch.routes.feed import fetch_scored
from cosmic_watch.watchlist import Watchlist

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/watchlist", tags=["watchlist"])


@router.get("", response_model=WatchlistResponse)
async def get_watchlist_view(
    start_date: date | None = Query(default=None),
    user: UserProfile = Depends(require_watchlist_viewer),
    watchlist: Watchlist = Depends(get_watchlist),
    overrides: OverrideStore = Depends(get_override_store),
    client: NeoWsClient = Depends(get_feed_client),
) -> WatchlistResponse:
    ids = await asyncio.to_thread(watchlist.ids, user.id)
    if not ids:
        return WatchlistResponse(watchlist=[], objects=[])
    neos = await fetch_scored(client, start_date)
    return WatchlistResponse(watchlist=ids, objects=watched_neos(neos, ids, overrides.get_all()))


@router.post("/{neo_id}/toggle", response_model=WatchlistToggleResponse)
async def toggle(
    neo_id: str,
    user: UserProfile = Depends(current_user),
    watchlist: Watchlist = Depends(get_watchlist),
) -> WatchlistToggleResponse:
    if not can_toggle_watchlist(user.role):
        raise HTTPException(status_code=403, detail="Watchlist not available for this role")
    try:
        watched = await asyncio.to_thread(watchlist.toggle, user.id, neo_id)
    except OSError as exc:
        logger.exception("Could not persist watchlist for %s", user.username)
        raise HTTPException(status_code=500, detail="Watchlist could not be saved") from exc
    return WatchlistToggleResponse(neo_id=neo_id, watched=watched, watchlist=watchlist.ids(user.id))
