"""
Database connection and session management.
Handles SQLAlchemy setup, connection pooling, and session lifecycle.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, Session

from .config import settings

logger = logging.getLogger(__name__)


def _engine_kwargs(dsn: str) -> dict:
    """
    Pool settings per backend.
    - sqlite needs check_same_thread=False because FastAPI runs sync routes in a threadpool
    - server databases get a bounded pool with pre-ping and recycle
    """
    if make_url(dsn).get_backend_name() == "sqlite":
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": 10,
        "max_overflow": 20,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
    }


engine = create_engine(
    settings.DATABASE_URL,
    future=True,
    echo=settings.SQL_ECHO,
    **_engine_kwargs(settings.DATABASE_URL),
)

# ---- Session factory ----
# expire_on_commit=False keeps attributes accessible after repo commits
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    future=True,
)

from .models import Base  # noqa: E402,F401


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a DB session.
    - On normal exit: commits (no-op if repos already committed).
    - On exception: rollbacks.
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception as e:
        logger.error(f"Database session error: {e}")
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """
    Context manager for manual session management (scripts, startup tasks).
    Mirrors get_db() semantics.
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception as e:
        logger.error(f"Database context error: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def redacted_dsn(dsn: str) -> str:
    """
    Redact password in a DATABASE_URL for safe logging.
    """
    try:
        url = make_url(dsn)
        if url.password:
            url = url.set(password="***")
        return url.render_as_string(hide_password=False)
    except Exception:
        return "<unparsable DSN>"


def log_where_am_i() -> None:
    """Log which database the engine points at. Safe to call in app startup."""
    url = make_url(settings.DATABASE_URL)
    logger.warning(
        f"DB configured -> dsn={redacted_dsn(settings.DATABASE_URL)} | backend={url.get_backend_name()} | db={url.database}"
    )
