"""Shared FastAPI dependencies — service singletons and session/role checks.

Tests swap these out through ``app.dependency_overrides``.
"""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException

from cosmic_watch.accounts import AccountRegistry, SessionManager, can_override, can_view_watchlist
from cosmic_watch.agents.cosmo_chat import CosmoChat
from cosmic_watch.models import UserProfile
from cosmic_watch.neows import NeoWsClient, get_client
from cosmic_watch.overrides import OverrideStore
from cosmic_watch.storage import KeyValueStore, get_store
from cosmic_watch.watchlist import Watchlist

SESSION_HEADER = "X-Session-Token"


def get_kv_store() -> KeyValueStore:
    return get_store()


def get_override_store(store: KeyValueStore = Depends(get_kv_store)) -> OverrideStore:
    return OverrideStore(store)


def get_watchlist(store: KeyValueStore = Depends(get_kv_store)) -> Watchlist:
    return Watchlist(store)


def get_registry(store: KeyValueStore = Depends(get_kv_store)) -> AccountRegistry:
    return AccountRegistry(store)


# Singleton
_sessions: SessionManager | None = None


def get_sessions() -> SessionManager:
    global _sessions
    if _sessions is None:
        _sessions = SessionManager()
    return _sessions


def get_feed_client() -> NeoWsClient:
    return get_client()


def get_chat() -> CosmoChat:
    return CosmoChat()


def current_user(
    token: str | None = Header(default=None, alias=SESSION_HEADER),
    sessions: SessionManager = Depends(get_sessions),
    registry: AccountRegistry = Depends(get_registry),
) -> UserProfile:
    user_id = sessions.resolve(token)
    user = registry.find(user_id) if user_id else None
    if user is None:
        raise HTTPException(status_code=401, detail="Sign in required")
    return user


def require_researcher(user: UserProfile = Depends(current_user)) -> UserProfile:
    if not can_override(user.role):
        raise HTTPException(status_code=403, detail="Researcher clearance required")
    return user


def require_watchlist_viewer(user: UserProfile = Depends(current_user)) -> UserProfile:
    if not can_view_watchlist(user.role):
        raise HTTPException(status_code=403, detail="Researcher clearance required")
    return user
