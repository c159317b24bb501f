"""
repohub.services.gamification_service — Badge Check
====================================================

``check_and_award_badges`` is the only operation that unlocks badges
automatically.  Steps:

1. Lock and load the user row, load the badge catalog.
2. Count the user's ratings and comments.
3. Evaluate every active badge rule against that snapshot.
4. Add unlocked badge points, record badge ids, derive the level.
5. Persist points (as an increment), badges and level in one transaction.

Running it twice with no activity in between changes nothing the second
time, because every rule skips badges the user already holds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy import Engine
from sqlalchemy.orm import Session

from repohub.constants import level_for_points
from repohub.database import store
from repohub.database.models import Badge
from repohub.engine.badges import ActivitySnapshot, plan_awards
from repohub.engine.locks import USER_LOCKS, UserLockRegistry
from repohub.errors import ValidationError
from repohub.services import activity, catalog

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BadgeCheckResult:
    """What a badge check changed for one user."""

    earned_badges: list[Badge] = field(default_factory=list)
    level_up: bool = False
    current_level: int = 1
    current_points: int = 0

    def to_dict(self) -> dict:
        return {
            "earnedBadges": [badge.to_dict() for badge in self.earned_badges],
            "levelUp": self.level_up,
            "currentLevel": self.current_level,
            "currentPoints": self.current_points,
        }


def check_and_award_badges(
    engine: Engine,
    user_id: str,
    *,
    locks: UserLockRegistry = USER_LOCKS,
) -> BadgeCheckResult:
    """Evaluate badge rules for *user_id* and persist any unlocks.

    Raises
    ------
    ValidationError
        If *user_id* is empty.
    NotFound
        If the user does not exist (nothing is written).
    PersistenceError
        If the store fails; the user's state is then unchanged.
    """
    if not user_id or not str(user_id).strip():
        raise ValidationError("User ID is required")

    catalog.ensure_seeded(engine)

    with locks.hold(user_id), store.store_errors("badge check"), Session(
        engine, expire_on_commit=False,
    ) as session:
        user = store.get_user(session, user_id, for_update=True)
        badges = store.list_badges(session)
        snap = ActivitySnapshot(
            points=user.points,
            level=user.level,
            ratings=activity.count_ratings(session, user_id),
            comments=activity.count_comments(session, user_id),
        )
        plan = plan_awards(badges, user.badges or [], snap)

        current_points = plan.points
        current_level = plan.level
        if plan.earned or plan.level != user.level or plan.badges != list(user.badges or []):
            updated = store.update_user(
                session,
                user_id,
                add_points=plan.points_delta,
                badges=plan.badges,
            )
            # Re-derive from the stored total in case another process
            # incremented the row between our read and write.
            current_points = updated.points
            current_level = level_for_points(current_points)
            store.update_user(session, user_id, level=current_level)
        session.commit()

    for badge in plan.earned:
        logger.info(
            "Badge earned: %s (+%d points) for user %s",
            badge.id, badge.points, user_id,
        )
    if current_level > snap.level:
        logger.info("User %s reached level %d", user_id, current_level)

    return BadgeCheckResult(
        earned_badges=plan.earned,
        level_up=current_level > snap.level,
        current_level=current_level,
        current_points=current_points,
    )
