"""Feed endpoints: /feed (verbatim NeoWs proxy) and /api/neos (scored + merged)."""

from __future__ import annotations

import asyncio
import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from cosmic_watch.dashboard import merge_display
from cosmic_watch.dependencies import get_feed_client, get_override_store
from cosmic_watch.models import DisplayNeo
from cosmic_watch.neows import FeedError, NeoWsClient, ingest_feed
from cosmic_watch.overrides import OverrideStore

logger = logging.getLogger(__name__)

router = APIRouter()


async def fetch_raw(client: NeoWsClient, start_date: date | None, end_date: date | None = None) -> dict:
    """Fetch the feed off the event loop; upstream failures become 502s."""
    try:
        return await asyncio.to_thread(client.fetch_feed, start_date, end_date)
    except FeedError as exc:
        logger.warning("Feed fetch failed: %s", exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc


async def fetch_scored(client: NeoWsClient, start_date: date | None, end_date: date | None = None) -> list[dict]:
    return ingest_feed(await fetch_raw(client, start_date, end_date))


@router.get("/feed")
async def feed(
    start_date: date | None = Query(default=None, description="YYYY-MM-DD, defaults to today (UTC)"),
    end_date: date | None = Query(default=None, description="YYYY-MM-DD, at most 7 days after start"),
    client: NeoWsClient = Depends(get_feed_client),
) -> dict:
    """Upstream feed JSON, untouched."""
    return await fetch_raw(client, start_date, end_date)


@router.get("/api/neos", response_model=list[DisplayNeo])
async def list_neos(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    client: NeoWsClient = Depends(get_feed_client),
    overrides: OverrideStore = Depends(get_override_store),
) -> list[DisplayNeo]:
    """Flattened feed with risk_score attached and researcher overrides merged."""
    neos = await fetch_scored(client, start_date, end_date)
    return merge_display(neos, overrides.get_all())
