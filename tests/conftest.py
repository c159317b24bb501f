"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Ensure a valid JWT_SECRET is always set for test runs.
# This must happen before any import of repohub.api.deps which validates
# the secret at module-load time.
# ---------------------------------------------------------------------------
_TEST_JWT_SECRET = "test-secret-for-pytest-only-" + "x" * 40  # > 32 chars
os.environ.setdefault("JWT_SECRET", _TEST_JWT_SECRET)

import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine  # noqa: E402

# ---------------------------------------------------------------------------
# Make JSONB columns work in SQLite for testing.
# SQLite doesn't support JSONB natively, but SQLAlchemy's JSON type works.
# We register a custom type compiler so SQLite renders JSONB as TEXT.
# ---------------------------------------------------------------------------
from sqlalchemy.dialects.postgresql import JSONB as PG_JSONB  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from repohub.database.models import Base, Comment, Rating, User  # noqa: E402

_jsonb_sqlite_registered = False


def _register_jsonb_sqlite_compat():
    """Register SQLite compilation for PG JSONB type (idempotent)."""
    global _jsonb_sqlite_registered
    if _jsonb_sqlite_registered:
        return
    from sqlalchemy.ext.compiler import compiles

    @compiles(PG_JSONB, "sqlite")
    def _compile_jsonb_as_text(type_, compiler, **kw):
        return "TEXT"

    _jsonb_sqlite_registered = True


_register_jsonb_sqlite_compat()


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all Repohub tables.

    JSONB columns are transparently mapped to TEXT for SQLite compatibility.
    Uses StaticPool so all threads (TestClient, ``asyncio.to_thread``)
    share the same in-memory database.
    """
    from sqlalchemy.pool import StaticPool

    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(db_engine: Engine):
    """Provide a transactional session that rolls back after each test."""
    with Session(db_engine) as session:
        yield session
        session.rollback()


# ---------------------------------------------------------------------------
# Row factories
# ---------------------------------------------------------------------------
def make_user(
    engine: Engine,
    user_id: str = "user_1",
    *,
    points: int = 10,
    level: int = 1,
    badges: list[str] | None = None,
    username: str | None = None,
) -> User:
    """Insert a user row directly, bypassing registration."""
    with Session(engine, expire_on_commit=False) as session:
        user = User(
            id=user_id,
            username=username or user_id,
            email=f"{user_id}@example.com",
            display_name=username or user_id,
            points=points,
            level=level,
            badges=list(badges if badges is not None else ["newcomer"]),
        )
        session.add(user)
        session.commit()
        return user


def add_ratings(engine: Engine, user_id: str, count: int, *, start: int = 0) -> None:
    """Insert *count* ratings by *user_id* on distinct projects."""
    with Session(engine) as session:
        for i in range(start, start + count):
            session.add(Rating(
                id=f"rating_{user_id}_{i}",
                project_name=f"project-{i}",
                user_id=user_id,
                rating=4,
            ))
        session.commit()


def add_comments(engine: Engine, user_id: str, count: int, *, project: str = "project-0") -> None:
    with Session(engine) as session:
        for i in range(count):
            session.add(Comment(
                id=f"comment_{user_id}_{i}",
                project_name=project,
                user_id=user_id,
                text=f"comment {i}",
                likes=[],
            ))
        session.commit()


def load_user(engine: Engine, user_id: str) -> User:
    with Session(engine, expire_on_commit=False) as session:
        return session.get(User, user_id)


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------
@pytest.fixture
def admin_token():
    """Generate a valid admin JWT for use in API integration tests."""
    return make_admin_token()


def make_admin_token(sub: str = "admin_1", username: str = "FixtureAdmin", *, is_admin: bool = True) -> str:
    """Create a JWT.  Usable as both a fixture and a factory function."""
    import jwt

    from repohub.api.deps import JWT_ALGORITHM, JWT_SECRET

    return jwt.encode(
        {"sub": sub, "username": username, "is_admin": is_admin},
        JWT_SECRET,
        algorithm=JWT_ALGORITHM,
    )


@pytest.fixture
def client(db_engine: Engine):
    """FastAPI TestClient bound to the in-memory engine.

    Created without a ``with`` block, so the lifespan (which would build a
    PostgreSQL engine from DATABASE_URL) never runs.
    """
    from fastapi.testclient import TestClient

    from repohub.api.deps import get_engine
    from repohub.api.main import app

    app.dependency_overrides[get_engine] = lambda: db_engine
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
