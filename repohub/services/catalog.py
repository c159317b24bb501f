"""
repohub.services.catalog — Badge Catalog
=========================================

Default badge catalog plus the ensure-seeded read path.

The catalog is seeded in a single transaction, and only while the
``badges`` table is empty.  If another seeder wins the race (or an earlier
run left rows behind) the primary key on ``badges.id`` rejects the insert
and :class:`~repohub.errors.PartialSeedError` is raised instead of writing
duplicates.
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from repohub.database import store
from repohub.database.models import Badge
from repohub.errors import NotFound, PartialSeedError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Default catalog
# ---------------------------------------------------------------------------
DEFAULT_BADGES: tuple[dict, ...] = (
    {
        "id": "newcomer",
        "name": "Newcomer",
        "description": "Create an account",
        "icon": "Gift",
        "points": 10,
    },
    {
        "id": "first_rating",
        "name": "Critic",
        "description": "Submit your first rating",
        "icon": "Star",
        "points": 20,
    },
    {
        "id": "first_comment",
        "name": "Commentator",
        "description": "Write your first comment",
        "icon": "MessageSquare",
        "points": 20,
    },
    {
        "id": "project_submitter",
        "name": "Explorer",
        "description": "Submit your first project",
        "icon": "Search",
        "points": 50,
    },
    {
        "id": "rating_10",
        "name": "Rating Master",
        "description": "Submit 10 ratings",
        "icon": "Award",
        "points": 100,
    },
    {
        "id": "comment_10",
        "name": "Discussion Master",
        "description": "Write 10 comments",
        "icon": "MessageCircle",
        "points": 100,
    },
    {
        "id": "level_5",
        "name": "Advanced",
        "description": "Reach level 5",
        "icon": "TrendingUp",
        "points": 100,
    },
    {
        "id": "level_10",
        "name": "Expert",
        "description": "Reach level 10",
        "icon": "Award",
        "points": 150,
    },
)


# ---------------------------------------------------------------------------
# Seeder
# ---------------------------------------------------------------------------
def ensure_seeded(engine: Engine) -> int:
    """Insert :data:`DEFAULT_BADGES` if the catalog is empty.

    Returns the number of rows inserted (0 when already seeded).

    Raises
    ------
    PartialSeedError
        If the inserts collide with existing rows.
    PersistenceError
        If the store fails for any other reason.
    """
    with store.store_errors("seed badge catalog"), Session(engine) as session:
        if session.scalar(select(Badge.id).limit(1)) is not None:
            return 0
        try:
            inserted = store.insert_badges(session, DEFAULT_BADGES)
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            logger.error("Badge catalog seeding collided with existing rows: %s", exc)
            raise PartialSeedError(
                "Badge catalog already partially seeded; resolve manually"
            ) from exc

    logger.info("Seeded %d default badges.", inserted)
    return inserted


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def list_badges(engine: Engine) -> list[Badge]:
    """Return the whole catalog, seeding it first when empty."""
    ensure_seeded(engine)
    with store.store_errors("list badges"), Session(engine, expire_on_commit=False) as session:
        return store.list_badges(session)


def get_badge(engine: Engine, badge_id: str) -> Badge:
    """Return one catalog entry or raise :class:`NotFound`."""
    ensure_seeded(engine)
    with store.store_errors("get badge"), Session(engine, expire_on_commit=False) as session:
        badge = session.get(Badge, badge_id)
    if badge is None:
        raise NotFound(f"Badge {badge_id!r} not found")
    return badge
