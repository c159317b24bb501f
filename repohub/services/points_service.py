"""
repohub.services.points_service — Points-on-Action Hooks & Corrections
=======================================================================

Fixed point awards attached directly to content creation (+5 for a new
rating, +2 for a comment), bypassing badge evaluation.  Each award is one
``points = points + delta`` UPDATE taken under the user's lock, so it can
neither lose nor overwrite a concurrent badge check.

A failed award never fails the content write it belongs to: the hook logs
the under-count and reports it in :class:`PointsOutcome`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import Engine
from sqlalchemy.orm import Session

from repohub.constants import POINTS_NEW_COMMENT, POINTS_NEW_RATING, level_for_points
from repohub.database import store
from repohub.database.models import User
from repohub.engine.locks import USER_LOCKS, UserLockRegistry
from repohub.errors import RepohubError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PointsOutcome:
    """Result of a point hook attached to a content write."""

    awarded: int = 0
    total: int | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def award_action_points(
    engine: Engine,
    user_id: str,
    delta: int,
    *,
    action: str,
    locks: UserLockRegistry = USER_LOCKS,
) -> int:
    """Add *delta* points to *user_id* and return the new total.

    Raises ``NotFound`` / ``PersistenceError``; see :func:`apply_action_hook`
    for the non-fatal wrapper.
    """
    if delta < 0:
        raise ValueError(f"Action awards must be non-negative, got {delta}")

    with locks.hold(user_id), store.store_errors(f"award {action} points"), Session(
        engine,
    ) as session:
        total = store.increment_points(session, user_id, delta)
        session.commit()

    logger.info("Awarded %d points to user %s for %s (total %d)", delta, user_id, action, total)
    return total


def apply_action_hook(
    engine: Engine,
    user_id: str,
    delta: int,
    *,
    action: str,
    locks: UserLockRegistry = USER_LOCKS,
) -> PointsOutcome:
    """Run :func:`award_action_points`, converting failures into an outcome."""
    try:
        total = award_action_points(engine, user_id, delta, action=action, locks=locks)
    except RepohubError as exc:
        logger.exception(
            "Failed to award %d points to user %s for %s; balance is under-counted",
            delta, user_id, action,
        )
        return PointsOutcome(awarded=0, error=str(exc))
    return PointsOutcome(awarded=delta, total=total)


def award_rating_points(engine: Engine, user_id: str, **kwargs) -> PointsOutcome:
    return apply_action_hook(engine, user_id, POINTS_NEW_RATING, action="new rating", **kwargs)


def award_comment_points(engine: Engine, user_id: str, **kwargs) -> PointsOutcome:
    return apply_action_hook(engine, user_id, POINTS_NEW_COMMENT, action="new comment", **kwargs)


# ---------------------------------------------------------------------------
# Administrative correction
# ---------------------------------------------------------------------------
def correct_points(
    engine: Engine,
    user_id: str,
    points: int,
    *,
    reason: str,
    admin_id: str,
    locks: UserLockRegistry = USER_LOCKS,
) -> User:
    """Set a user's point total and re-derive the level.

    The only path allowed to lower points.  Runs under the same lock and
    row lock as the badge check.
    """
    if points < 0:
        raise ValidationError("Points cannot be negative")
    if not reason or not reason.strip():
        raise ValidationError("A reason is required for point corrections")

    with locks.hold(user_id), store.store_errors("correct points"), Session(
        engine, expire_on_commit=False,
    ) as session:
        user = store.get_user(session, user_id, for_update=True)
        before = user.points
        user = store.update_user(
            session,
            user_id,
            add_points=points - before,
            level=level_for_points(points),
        )
        session.commit()

    logger.warning(
        "Admin %s corrected points for user %s: %d → %d (%s)",
        admin_id, user_id, before, user.points, reason,
    )
    return user
