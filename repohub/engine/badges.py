"""
repohub.engine.badges — Badge Unlock Rules
===========================================

Handler-registry implementation of badge unlocking.  Each catalog badge id
maps to a pure predicate over an :class:`ActivitySnapshot`, or to ``None``
when the badge exists in the catalog but has no active rule (it is then
never auto-unlocked by a badge check).

This module is pure calculation with no database I/O.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from repohub.constants import level_for_points

logger = logging.getLogger(__name__)


class BadgeLike(Protocol):
    id: str
    points: int


# ---------------------------------------------------------------------------
# Snapshot passed to every rule
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class ActivitySnapshot:
    """User state read once at the start of a badge check.

    Parameters
    ----------
    points : Point total before this check.
    level : Stored level before this check.
    ratings : Number of ratings authored by the user.
    comments : Number of comments (replies included) authored by the user.
    """

    points: int = 0
    level: int = 1
    ratings: int = 0
    comments: int = 0


# ---------------------------------------------------------------------------
# Rules: pure functions (snapshot) → bool
# ---------------------------------------------------------------------------
def _check_first_rating(snap: ActivitySnapshot) -> bool:
    return snap.ratings >= 1


def _check_rating_10(snap: ActivitySnapshot) -> bool:
    return snap.ratings >= 10


def _check_first_comment(snap: ActivitySnapshot) -> bool:
    return snap.comments >= 1


# ---------------------------------------------------------------------------
# Rule registry (evaluation order = insertion order)
# ---------------------------------------------------------------------------
BADGE_RULES: dict[str, Callable[[ActivitySnapshot], bool] | None] = {
    "first_rating": _check_first_rating,
    "rating_10": _check_rating_10,
    "first_comment": _check_first_comment,
    # Catalog entries without an active rule.
    "newcomer": None,           # granted at registration
    "project_submitter": None,
    "comment_10": None,
    "level_5": None,
    "level_10": None,
}


# ---------------------------------------------------------------------------
# Award plan
# ---------------------------------------------------------------------------
@dataclass(slots=True)
class AwardPlan:
    """Outcome of evaluating every rule against one snapshot."""

    earned: list = field(default_factory=list)
    badges: list[str] = field(default_factory=list)
    points_delta: int = 0
    points: int = 0
    level: int = 1
    level_up: bool = False


def plan_awards(
    catalog: Sequence[BadgeLike],
    held: Iterable[str],
    snap: ActivitySnapshot,
) -> AwardPlan:
    """Evaluate every active rule and compute the resulting user state.

    Parameters
    ----------
    catalog : Every badge in the catalog.  Rules whose badge is missing
        from the catalog are skipped.
    held : Badge ids the user already has (duplicates tolerated).
    snap : Activity snapshot taken at the start of the check.

    Returns
    -------
    AwardPlan with newly earned badges (catalog objects, in rule order),
    the de-duplicated badge id list, and the derived points/level.
    """
    by_id = {badge.id: badge for badge in catalog}
    held_ids = list(dict.fromkeys(held))
    already = set(held_ids)

    plan = AwardPlan(badges=held_ids)
    for badge_id, rule in BADGE_RULES.items():
        if rule is None or badge_id in already:
            continue
        badge = by_id.get(badge_id)
        if badge is None:
            continue
        if rule(snap):
            plan.earned.append(badge)
            plan.badges.append(badge_id)
            plan.points_delta += badge.points
            logger.debug("Badge rule %s unlocked (+%d points)", badge_id, badge.points)

    plan.points = snap.points + plan.points_delta
    plan.level = level_for_points(plan.points)
    plan.level_up = plan.level > snap.level
    return plan
