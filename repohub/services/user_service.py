"""
repohub.services.user_service — Registration, Lookup & Leaderboard
===================================================================

Registration grants the starting balance and the ``newcomer`` badge in the
same INSERT that creates the user.  Credential material is opaque here:
hashing and session issuance happen outside this package.
"""

from __future__ import annotations

import logging
import re
import uuid

from sqlalchemy import Engine, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from repohub.constants import (
    MAX_USERNAME_LENGTH,
    NEWCOMER_BADGE_ID,
    POINTS_REGISTRATION,
    level_for_points,
    points_for_level,
)
from repohub.database import store
from repohub.database.models import User
from repohub.errors import Conflict, NotFound, ValidationError

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_USERNAME_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------
def user_dict(u: User, *, include_email: bool = False) -> dict:
    """Public representation of a user (credential material never included).

    The next-level threshold comes from the point total, not the stored
    level, which lags behind hook awards until the next badge check.
    """
    data = {
        "id": u.id,
        "username": u.username,
        "display_name": u.display_name,
        "avatar_url": u.avatar_url,
        "points": u.points,
        "level": u.level,
        "badges": list(u.badges or []),
        "points_for_next_level": points_for_level(level_for_points(u.points) + 1),
        "created_at": u.created_at.isoformat() if u.created_at else None,
    }
    if include_email:
        data["email"] = u.email
    return data


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------
def _clean_username(username: str | None) -> str:
    username = (username or "").strip()
    if not username:
        raise ValidationError("Username is required")
    if len(username) > MAX_USERNAME_LENGTH:
        raise ValidationError(f"Username must be at most {MAX_USERNAME_LENGTH} characters")
    if not _USERNAME_RE.match(username):
        raise ValidationError("Username may only contain letters, digits, '.', '_' and '-'")
    return username


def _clean_email(email: str | None) -> str:
    email = (email or "").strip()
    if not email:
        raise ValidationError("Email is required")
    if not _EMAIL_RE.match(email):
        raise ValidationError("Email address is not valid")
    return email


def _email_taken(session: Session, email: str, *, exclude_id: str | None = None) -> bool:
    stmt = select(User.id).where(func.lower(User.email) == email.lower())
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    return session.scalar(stmt.limit(1)) is not None


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------
def register_user(
    engine: Engine,
    *,
    username: str,
    email: str,
    display_name: str | None = None,
    password_hash: str | None = None,
    avatar_url: str | None = None,
) -> User:
    """Create a user with the starting balance and the newcomer badge.

    Raises
    ------
    ValidationError
        Missing or malformed username/email.
    Conflict
        Username or email already registered (case-insensitive).
    """
    username = _clean_username(username)
    email = _clean_email(email)

    with store.store_errors("register user"), Session(engine, expire_on_commit=False) as session:
        taken = session.scalar(
            select(User.id).where(func.lower(User.username) == username.lower()).limit(1)
        )
        if taken is not None:
            raise Conflict("Username already exists")
        if _email_taken(session, email):
            raise Conflict("Email already exists")

        user = User(
            id=f"user_{uuid.uuid4().hex}",
            username=username,
            email=email,
            display_name=(display_name or "").strip() or username,
            password_hash=password_hash,
            avatar_url=avatar_url or f"https://api.dicebear.com/7.x/bottts/svg?seed={username}",
            points=POINTS_REGISTRATION,
            level=level_for_points(POINTS_REGISTRATION),
            badges=[NEWCOMER_BADGE_ID],
        )
        session.add(user)
        try:
            session.commit()
        except IntegrityError as exc:
            # Lost a race against a concurrent registration
            session.rollback()
            raise Conflict("Username or email already exists") from exc
        session.refresh(user)

    logger.info("Registered user %s (%s)", user.id, user.username)
    return user


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------
def get_user(engine: Engine, user_id: str) -> User:
    with store.store_errors("get user"), Session(engine, expire_on_commit=False) as session:
        return store.get_user(session, user_id)


def get_user_by_username(engine: Engine, username: str) -> User:
    """Case-insensitive lookup by username."""
    with store.store_errors("get user by name"), Session(engine, expire_on_commit=False) as session:
        user = session.scalar(
            select(User).where(func.lower(User.username) == (username or "").strip().lower())
        )
    if user is None:
        raise NotFound(f"User {username!r} not found")
    return user


def list_users(engine: Engine) -> list[User]:
    with store.store_errors("list users"), Session(engine, expire_on_commit=False) as session:
        return list(session.scalars(select(User).order_by(User.created_at, User.id)).all())


def get_leaderboard(engine: Engine, limit: int = 10) -> list[User]:
    """Top *limit* users by points (ties broken by id for a stable order)."""
    with store.store_errors("leaderboard"), Session(engine, expire_on_commit=False) as session:
        return list(session.scalars(
            select(User).order_by(User.points.desc(), User.id).limit(limit)
        ).all())


# ---------------------------------------------------------------------------
# Profile updates
# ---------------------------------------------------------------------------
def update_profile(
    engine: Engine,
    user_id: str,
    *,
    display_name: str | None = None,
    avatar_url: str | None = None,
    email: str | None = None,
) -> User:
    """Update display fields.  Points, level and badges are not touchable here."""
    if not user_id:
        raise ValidationError("User ID is required")

    with store.store_errors("update profile"), Session(engine, expire_on_commit=False) as session:
        user = store.get_user(session, user_id)
        changes: dict[str, str] = {}
        if display_name and display_name.strip():
            changes["display_name"] = display_name.strip()
        if avatar_url:
            changes["avatar_url"] = avatar_url
        if email and email.strip().lower() != user.email.lower():
            email = _clean_email(email)
            if _email_taken(session, email, exclude_id=user_id):
                raise Conflict("Email already exists")
            changes["email"] = email

        try:
            user = store.update_user(session, user_id, **changes)
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            raise Conflict("Email already exists") from exc

    if changes:
        logger.info("Updated profile for user %s: %s", user_id, sorted(changes))
    return user
