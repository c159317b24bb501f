"""
repohub.api.deps — FastAPI dependency injection
================================================

Shared dependencies for the Repohub routers:

* ``EngineDep`` hands every route the process-wide engine.  Its pool and
  statement timeouts come from ``store_timeout_seconds`` in config.yaml.
* ``AdminDep`` guards the point-correction and catalog-seeding endpoints
  with an HS256 bearer token whose payload carries ``is_admin``.  The
  ``sub`` claim is recorded as the acting admin in correction logs.

Tests swap the engine through ``app.dependency_overrides[get_engine]``.
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Annotated

import jwt
from fastapi import Depends, Header, HTTPException, status
from jwt.exceptions import InvalidTokenError
from sqlalchemy import Engine

from repohub.config import RepohubConfig, load_config
from repohub.database.engine import create_db_engine

_WEAK_SECRETS = frozenset({
    "repohub-dev-secret-change-me",
    "change-me",
    "secret",
    "dev",
    "",
})

_MIN_SECRET_LENGTH = 32

JWT_ALGORITHM = "HS256"


def _load_jwt_secret() -> str:
    """Load and validate JWT_SECRET from the environment.

    Raises RuntimeError at import time if the secret is missing, blank,
    too short (< 32 chars), or a known weak default.
    """
    secret = os.getenv("JWT_SECRET", "")
    if not secret:
        raise RuntimeError(
            "JWT_SECRET environment variable is not set. "
            "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(64))\""
        )
    if secret in _WEAK_SECRETS:
        raise RuntimeError(
            f"JWT_SECRET is set to a known weak default ('{secret}'). "
            "Please set a strong, unique secret."
        )
    if len(secret) < _MIN_SECRET_LENGTH:
        raise RuntimeError(
            f"JWT_SECRET is too short ({len(secret)} chars). "
            f"Minimum length is {_MIN_SECRET_LENGTH} characters."
        )
    return secret


JWT_SECRET: str = _load_jwt_secret()


@lru_cache(maxsize=1)
def get_config() -> RepohubConfig:
    return load_config(os.getenv("REPOHUB_CONFIG", "config.yaml"))


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine(timeout_seconds=get_config().store_timeout_seconds)


def get_current_admin(
    authorization: Annotated[str | None, Header()] = None,
) -> dict:
    """Validate the bearer JWT and return the admin payload.

    401 for a missing or invalid token, 403 when ``is_admin`` is not set.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Missing token")
    token = authorization.split(" ", 1)[1]
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except InvalidTokenError:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token")
    if not payload.get("is_admin"):
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Not admin")
    return payload


EngineDep = Annotated[Engine, Depends(get_engine)]
AdminDep = Annotated[dict, Depends(get_current_admin)]
