"""POST /chat — relays one message to CosmoAI and returns its reply."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from cosmic_watch.agents.cosmo_chat import ChatError, ChatNotConfigured, CosmoChat
from cosmic_watch.dependencies import get_chat
from cosmic_watch.models import ChatRequest, ChatResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/chat", response_model=ChatResponse)
async def chat(body: ChatRequest, cosmo: CosmoChat = Depends(get_chat)) -> ChatResponse:
    message = body.message.strip()
    if not message:
        raise HTTPException(status_code=422, detail="Message must not be blank")

    try:
        text = await cosmo.reply(message)
    except ChatNotConfigured as exc:
        logger.error("Chat relay unavailable: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except ChatError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return ChatResponse(text=text)
