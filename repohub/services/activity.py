"""
repohub.services.activity — Activity Counters
==============================================

Fresh per-user counts of ratings and comments.  No caching: the badge
check runs once per user action, so it always re-queries.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from repohub.database import store
from repohub.database.models import Comment, Rating


def count_ratings(session: Session, user_id: str) -> int:
    """Ratings whose ``user_id`` is exactly *user_id*."""
    return store.count_where(session, Rating, user_id=user_id)


def count_comments(session: Session, user_id: str) -> int:
    """Comments (replies included) whose ``user_id`` is exactly *user_id*."""
    return store.count_where(session, Comment, user_id=user_id)
