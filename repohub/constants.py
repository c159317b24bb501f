"""
repohub.constants — Shared Constants & Helpers
===============================================

Single source of truth for point awards and the leveling formula.
Import from here instead of duplicating in services, routes, and tests.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Points-on-action awards
# ---------------------------------------------------------------------------
POINTS_NEW_RATING: int = 5
"""Awarded once per (user, project) pair when the rating is first created."""

POINTS_NEW_COMMENT: int = 2
"""Awarded for every comment, replies included."""

POINTS_REGISTRATION: int = 10
"""Starting balance of a freshly registered user."""

NEWCOMER_BADGE_ID: str = "newcomer"

# ---------------------------------------------------------------------------
# Leveling formula: single canonical implementation
# ---------------------------------------------------------------------------
POINTS_PER_LEVEL: int = 100


def level_for_points(points: int) -> int:
    """Level reached with *points* total.

    Linear formula::

        level = points // 100 + 1

    Negative totals are clamped to zero, so the result is always ≥ 1.
    """
    return max(points, 0) // POINTS_PER_LEVEL + 1


def points_for_level(level: int) -> int:
    """Minimum point total needed to sit at *level*."""
    return max(level - 1, 0) * POINTS_PER_LEVEL


# ---------------------------------------------------------------------------
# Field limits shared by the models and request validation
# ---------------------------------------------------------------------------
MIN_RATING: int = 1
MAX_RATING: int = 5
MAX_COMMENT_LENGTH: int = 5000
MAX_USERNAME_LENGTH: int = 50
