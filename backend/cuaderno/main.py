# cuaderno/main.py
"""
FastAPI application entry point.
Sets up middleware, database migrations, the assistant gateway check and API routes.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cuaderno.routers import agenda, auth, chat, health, materials, programs, storage
from cuaderno.database import log_where_am_i
from cuaderno.deps import get_mabot_client
from cuaderno.config import settings

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

ALEMBIC_INI = Path(__file__).resolve().parents[1] / "alembic.ini"

app = FastAPI(title="Cuaderno API", version="0.1.0")

# ---- CORS Middleware ----
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---- Database Migration Function ----
def run_migrations() -> None:
    """Run Alembic database migrations on startup."""
    # Ensure Alembic sees DATABASE_URL
    os.environ.setdefault("DATABASE_URL", settings.DATABASE_URL)
    logger.warning("Running Alembic migrations...")
    subprocess.check_call(["alembic", "-c", str(ALEMBIC_INI), "upgrade", "head"])
    logger.warning("Migrations complete.")

# ---- Startup / Shutdown ----
@app.on_event("startup")
def _bootstrap() -> None:
    if settings.RUN_MIGRATIONS:
        run_migrations()
    log_where_am_i()
    warning = get_mabot_client().config.warning()
    if warning:
        # logged once; the UI shows the same text via GET /chat/status
        logger.warning(warning)

@app.on_event("shutdown")
def _teardown() -> None:
    get_mabot_client().close()

# ---- API Routes ----
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(programs.router)
app.include_router(materials.router)
app.include_router(agenda.router)
app.include_router(chat.router)
app.include_router(storage.router)

# ---- Root Endpoint ----
@app.get("/")
def root():
    return {"status": "ok", "message": "Cuaderno backend is running"}
