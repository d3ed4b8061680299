"""
conclave.api.main — FastAPI application entry point
====================================================

Normally served by ``python -m conclave.bot`` next to the bot, sharing its
record store and automation engine through ``app.state``.  For dashboard
development it can run alone::

    uvicorn conclave.api.main:app --reload --port 8000

in which case the lifespan opens the store itself and lifecycle
notifications are skipped (no chat connection).
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from conclave.api.auth import router as auth_router  # noqa: E402
from conclave.api.routes.admin import router as admin_router  # noqa: E402
from conclave.api.routes.public import router as public_router  # noqa: E402
from conclave.engine.automation import AutomationEngine  # noqa: E402
from conclave.store.engine import open_store, run_store  # noqa: E402

logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    """Resolve allowed CORS origins from env with safe defaults.

    Priority:
      1) CORS_ALLOW_ORIGINS (comma-separated)
      2) FRONTEND_URL (single origin)
    """
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if raw:
        return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]

    frontend_url = os.getenv("FRONTEND_URL", "").strip()
    if frontend_url:
        return [frontend_url.rstrip("/")]

    return []


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the store when running without the bot process wiring."""
    if getattr(app.state, "store", None) is None:
        store = open_store()
        await run_store(store.initialize)
        app.state.store = store
        app.state.automation = AutomationEngine(store)
        logger.info("Standalone API — no chat connection, notifications disabled")
    logger.info("Conclave API started — store %s", app.state.store.path)
    yield
    logger.info("Conclave API shutting down")


app = FastAPI(
    title="Conclave Dashboard API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router, prefix="/api")
app.include_router(public_router, prefix="/api")
app.include_router(admin_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}


@app.get("/api/health/bot")
def bot_health():
    """Report whether the chat connection is live."""
    automation: AutomationEngine | None = getattr(app.state, "automation", None)
    return {"connected": bool(automation and automation.is_live)}
