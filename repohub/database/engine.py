"""
repohub.database.engine — Database Connection & Async Helper
=============================================================

SQLAlchemy + psycopg2 is **synchronous**.  The API routes are plain ``def``
functions (FastAPI runs them on its thread pool), and async callers go
through :func:`run_db`, which ships the synchronous work to a thread via
``asyncio.to_thread()`` so the event loop is suspended, not blocked, while
the store answers.

Usage::

    from repohub.database.engine import create_db_engine, init_db, run_db

    engine = create_db_engine()          # reads DATABASE_URL from .env
    init_db(engine)                      # CREATE TABLE IF NOT EXISTS …

    result = await run_db(check_and_award_badges, engine, user_id)
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from contextlib import contextmanager
from typing import ParamSpec, TypeVar

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session

from repohub.database.models import Base

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


# ---------------------------------------------------------------------------
# Engine creation
# ---------------------------------------------------------------------------
def create_db_engine(timeout_seconds: float = 10.0) -> Engine:
    """Build a SQLAlchemy :class:`Engine` from the ``DATABASE_URL`` env var.

    *timeout_seconds* bounds both the wait for a pooled connection and, on
    PostgreSQL, every statement (``statement_timeout``).  Exceeding either
    surfaces from the store adapter as :class:`~repohub.errors.StoreTimeout`.

    Raises
    ------
    RuntimeError
        If ``DATABASE_URL`` is not set.
    """
    url = os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError(
            "DATABASE_URL is not set.  "
            "Copy .env.example → .env and set a valid PostgreSQL URL."
        )

    connect_args: dict = {}
    if make_url(url).get_backend_name() == "postgresql":
        connect_args["options"] = f"-c statement_timeout={int(timeout_seconds * 1000)}"

    engine = create_engine(
        url,
        echo=False,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        pool_timeout=timeout_seconds,
        pool_recycle=3600,
        connect_args=connect_args,
    )
    logger.info("Database engine created → %s", engine.url.host)
    return engine


# ---------------------------------------------------------------------------
# Schema initialization
# ---------------------------------------------------------------------------
def init_db(engine: Engine) -> None:
    """Create all tables and make sure the badge catalog is seeded.

    Safe to call on every startup.  In production the schema is managed by
    Alembic (``alembic upgrade head``); ``create_all`` covers dev/test.
    """
    Base.metadata.create_all(engine)
    logger.info("Database tables verified / created.")

    from repohub.services.catalog import ensure_seeded

    ensure_seeded(engine)


# ---------------------------------------------------------------------------
# Session helper
# ---------------------------------------------------------------------------
@contextmanager
def get_session(engine: Engine):
    """Yield a :class:`Session` that commits on success and rolls back on
    exception.

    Usage::

        with get_session(engine) as session:
            session.add(Project(name="fastapi"))
    """
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# ---------------------------------------------------------------------------
# Async bridge
# ---------------------------------------------------------------------------
async def run_db(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
    """Run a **synchronous** database function on a background thread.

    The awaiting coroutine suspends until *func* returns; failures propagate
    unchanged, and nothing is retried.
    """
    return await asyncio.to_thread(func, *args, **kwargs)
