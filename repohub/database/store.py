"""
repohub.database.store — Row-level Store Adapter
=================================================

Thin CRUD helpers over the five tables.  Every helper takes an open
:class:`~sqlalchemy.orm.Session`; the caller owns the transaction, so a
sequence of helper calls inside one ``with Session(...)`` block commits or
rolls back as a unit.

Point changes are always written as ``points = points + :delta`` so a
concurrent writer's increment is never overwritten by a stale snapshot.

Driver failures are translated by :func:`store_errors` into
:class:`~repohub.errors.PersistenceError` / :class:`~repohub.errors.StoreTimeout`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from repohub.database.models import Badge, User
from repohub.errors import NotFound, PersistenceError, StoreTimeout

logger = logging.getLogger(__name__)

# Columns a caller may set through update_user().  Identity columns and
# points (increment-only, see add_points) are excluded.
UPDATABLE_USER_FIELDS: frozenset[str] = frozenset({
    "display_name",
    "email",
    "avatar_url",
    "password_hash",
    "level",
    "badges",
})

# PostgreSQL SQLSTATE for query_canceled (statement_timeout)
_PG_QUERY_CANCELED = "57014"


def _is_timeout(exc: OperationalError) -> bool:
    if getattr(exc.orig, "pgcode", None) == _PG_QUERY_CANCELED:
        return True
    return "timeout" in str(exc.orig).lower()


@contextmanager
def store_errors(action: str) -> Iterator[None]:
    """Translate SQLAlchemy/driver exceptions raised inside the block.

    Domain errors (``NotFound`` etc.) pass through untouched.
    """
    try:
        yield
    except PoolTimeoutError as exc:
        logger.error("Store timeout during %s: %s", action, exc)
        raise StoreTimeout(f"{action}: no database connection available") from exc
    except OperationalError as exc:
        if _is_timeout(exc):
            logger.error("Store timeout during %s: %s", action, exc)
            raise StoreTimeout(f"{action}: store did not answer in time") from exc
        logger.error("Store failure during %s: %s", action, exc)
        raise PersistenceError(f"{action} failed") from exc
    except DBAPIError as exc:
        logger.error("Store failure during %s: %s", action, exc)
        raise PersistenceError(f"{action} failed") from exc


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
def get_user(session: Session, user_id: str, *, for_update: bool = False) -> User:
    """Fetch a user row or raise :class:`NotFound`.

    With *for_update* the row is locked until the transaction ends
    (``SELECT … FOR UPDATE``; a no-op on SQLite).
    """
    stmt = select(User).where(User.id == user_id)
    if for_update:
        stmt = stmt.with_for_update()
    user = session.scalar(stmt.execution_options(populate_existing=True))
    if user is None:
        raise NotFound(f"User {user_id!r} not found")
    return user


def update_user(
    session: Session,
    user_id: str,
    *,
    add_points: int = 0,
    **fields: Any,
) -> User:
    """Apply *fields* and an optional point increment as one UPDATE.

    Returns the refreshed row.  Raises :class:`NotFound` if no row matched
    and :class:`ValueError` for fields outside :data:`UPDATABLE_USER_FIELDS`.
    """
    unknown = set(fields) - UPDATABLE_USER_FIELDS
    if unknown:
        raise ValueError(f"Cannot update user fields: {sorted(unknown)}")

    values: dict[str, Any] = dict(fields)
    if add_points:
        values["points"] = User.points + add_points
    if not values:
        return get_user(session, user_id)

    result = session.execute(
        update(User)
        .where(User.id == user_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFound(f"User {user_id!r} not found")
    return get_user(session, user_id)


def increment_points(session: Session, user_id: str, delta: int) -> int:
    """Atomically add *delta* to a user's points and return the new total."""
    return update_user(session, user_id, add_points=delta).points


# ---------------------------------------------------------------------------
# Generic counting
# ---------------------------------------------------------------------------
def count_where(session: Session, model: type, **filters: Any) -> int:
    """``SELECT COUNT(*) FROM <model> WHERE col = value AND …``."""
    stmt = select(func.count()).select_from(model)
    for column, value in filters.items():
        stmt = stmt.where(getattr(model, column) == value)
    return session.scalar(stmt) or 0


# ---------------------------------------------------------------------------
# Badges
# ---------------------------------------------------------------------------
def list_badges(session: Session) -> list[Badge]:
    return list(session.scalars(select(Badge).order_by(Badge.points, Badge.id)).all())


def insert_badges(session: Session, badges: Iterable[dict]) -> int:
    """Add catalog rows and flush.  Primary-key collisions raise
    :class:`sqlalchemy.exc.IntegrityError` for the caller to handle."""
    count = 0
    for data in badges:
        session.add(Badge(**data))
        count += 1
    session.flush()
    return count
