"""Researcher override endpoints under /api/overrides."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException

from cosmic_watch.dependencies import current_user, get_override_store, require_researcher
from cosmic_watch.models import Override, OverrideRequest, UserProfile
from cosmic_watch.overrides import InvalidOverrideError, OverrideStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/overrides", tags=["overrides"])


@router.get("", response_model=dict[str, Override])
async def list_overrides(
    _: UserProfile = Depends(current_user),
    store: OverrideStore = Depends(get_override_store),
) -> dict[str, Override]:
    return await asyncio.to_thread(store.get_all)


@router.get("/{neo_id}", response_model=Override)
async def get_override(
    neo_id: str,
    _: UserProfile = Depends(current_user),
    store: OverrideStore = Depends(get_override_store),
) -> Override:
    override = await asyncio.to_thread(store.get, neo_id)
    if override is None:
        raise HTTPException(status_code=404, detail=f"No override for {neo_id}")
    return override


@router.put("/{neo_id}", response_model=Override)
async def put_override(
    neo_id: str,
    body: OverrideRequest,
    user: UserProfile = Depends(require_researcher),
    store: OverrideStore = Depends(get_override_store),
) -> Override:
    try:
        override = await asyncio.to_thread(store.set, neo_id, body.score, body.notes)
    except InvalidOverrideError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except OSError as exc:
        logger.exception("Could not persist override for %s", neo_id)
        raise HTTPException(status_code=500, detail="Override could not be saved") from exc
    logger.info("%s assessed %s at %d", user.username, neo_id, override.score)
    return override


@router.delete("/{neo_id}", status_code=204)
async def delete_override(
    neo_id: str,
    user: UserProfile = Depends(require_researcher),
    store: OverrideStore = Depends(get_override_store),
) -> None:
    try:
        removed = await asyncio.to_thread(store.delete, neo_id)
    except OSError as exc:
        logger.exception("Could not persist override removal for %s", neo_id)
        raise HTTPException(status_code=500, detail="Override could not be saved") from exc
    if removed:
        logger.info("%s cleared the override on %s", user.username, neo_id)
