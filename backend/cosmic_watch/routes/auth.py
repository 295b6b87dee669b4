"""Account endpoints: sign-up, sign-in, sign-out and the current profile."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, Header, HTTPException

from cosmic_watch.accounts import AccessDenied, AccountRegistry, CredentialConflict, SessionManager
from cosmic_watch.dependencies import SESSION_HEADER, current_user, get_registry, get_sessions
from cosmic_watch.models import LoginRequest, SessionResponse, SignupRequest, UserProfile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/signup", response_model=SessionResponse, status_code=201)
async def signup(
    body: SignupRequest,
    registry: AccountRegistry = Depends(get_registry),
    sessions: SessionManager = Depends(get_sessions),
) -> SessionResponse:
    # Password hashing and the registry write both block
    try:
        user = await asyncio.to_thread(registry.signup, body.email, body.password, body.role)
    except CredentialConflict as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except OSError as exc:
        logger.exception("Could not persist account for %s", body.email)
        raise HTTPException(status_code=500, detail="Account could not be saved") from exc
    return SessionResponse(token=sessions.open(user), user=user)


@router.post("/login", response_model=SessionResponse)
async def login(
    body: LoginRequest,
    registry: AccountRegistry = Depends(get_registry),
    sessions: SessionManager = Depends(get_sessions),
) -> SessionResponse:
    try:
        user = await asyncio.to_thread(registry.login, body.email, body.password)
    except AccessDenied as exc:
        logger.info("Failed sign-in for %s", body.email)
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    return SessionResponse(token=sessions.open(user), user=user)


@router.post("/logout", status_code=204)
async def logout(
    token: str | None = Header(default=None, alias=SESSION_HEADER),
    sessions: SessionManager = Depends(get_sessions),
) -> None:
    if token:
        sessions.close(token)


@router.get("/me", response_model=UserProfile)
async def me(user: UserProfile = Depends(current_user)) -> UserProfile:
    return user
