"""FastAPI application — CORS, route registration, health check."""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cosmic_watch.models import HealthResponse
from cosmic_watch.routes.auth import router as auth_router
from cosmic_watch.routes.chat import router as chat_router
from cosmic_watch.routes.dashboard import router as dashboard_router
from cosmic_watch.routes.feed import router as feed_router
from cosmic_watch.routes.overrides import router as overrides_router
from cosmic_watch.routes.watchlist import router as watchlist_router

# Load .env before anything else
load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:5173"

app = FastAPI(
    title="Cosmic Watch",
    description="Near-Earth object telemetry, risk scoring and researcher assessments",
    version="1.0.0",
)

# CORS: browser dashboard dev servers by default
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("COSMIC_CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(",") if o.strip()],
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "X-Session-Token"],
)

# Register routes
app.include_router(feed_router)
app.include_router(chat_router)
app.include_router(auth_router)
app.include_router(overrides_router)
app.include_router(watchlist_router)
app.include_router(dashboard_router)


@app.get("/api/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(status="ok")
