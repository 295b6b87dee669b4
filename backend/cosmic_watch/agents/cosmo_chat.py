"""CosmoAI chat relay — forwards one user message to Claude and returns the reply text."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any

from anthropic import Anthropic, APIError

logger = logging.getLogger(__name__)

DEFAULT_MODEL_ID = "claude-sonnet-4-20250514"
DEFAULT_MAX_TOKENS = 1024

SYSTEM_PROMPT = """You are CosmoAI, an expert system for Near-Earth Object tracking and orbital analysis embedded in the Cosmic Watch dashboard.

Provide scientific, technical and concise answers about asteroid close approaches, orbital mechanics and planetary defense. Use technical terminology where it helps, but stay accessible to observers without a specialist background. When asked about a specific object's risk, explain that dashboard scores are a display heuristic combining the hazard flag, estimated size and miss distance, and that researcher-verified scores take precedence."""

FALLBACK_TEXT = "Communication link failure. Unable to process telemetry."


class ChatNotConfigured(Exception):
    """No API key available for the completion service."""


class ChatError(Exception):
    """The completion service failed or returned something unusable."""


def _get_client() -> Anthropic:
    api_key = os.getenv("ANTHROPIC_API_KEY")
    if not api_key:
        raise ChatNotConfigured("AI uplink key not configured")
    return Anthropic(api_key=api_key)


class CosmoChat:
    """Single-turn relay. The SDK is synchronous, so calls run in a worker thread."""

    def __init__(self, client: Any = None):
        self._client = client
        self.model = os.getenv("COSMO_MODEL", DEFAULT_MODEL_ID)
        self.max_tokens = int(os.getenv("COSMO_MAX_TOKENS", str(DEFAULT_MAX_TOKENS)))

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = _get_client()
        return self._client

    async def reply(self, message: str) -> str:
        client = self.client
        try:
            response = await asyncio.to_thread(
                client.messages.create,
                model=self.model,
                max_tokens=self.max_tokens,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": message}],
            )
        except APIError as exc:
            logger.exception("Completion request failed")
            raise ChatError("Neural link interrupted") from exc

        text = "".join(block.text for block in response.content if block.type == "text")
        return text.strip() or FALLBACK_TEXT
