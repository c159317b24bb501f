"""
repohub.services.rating_service — Project Ratings
==================================================

One rating per (user, project).  Submitting again updates the score and
review instead of inserting; only the first submission earns points.

The pair is enforced by the ``uq_ratings_user_project`` constraint.  When
two first submissions race, the loser's INSERT fails inside a SAVEPOINT
and is replayed as an update, so points are still awarded exactly once.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime

from sqlalchemy import Engine, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from repohub.constants import MAX_RATING, MIN_RATING
from repohub.database import store
from repohub.database.engine import get_session
from repohub.database.models import Rating
from repohub.errors import NotFound, ValidationError
from repohub.services.points_service import PointsOutcome, award_rating_points

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RatingOutcome:
    rating: Rating
    created: bool
    points: PointsOutcome = field(default_factory=PointsOutcome)


def rating_dict(r: Rating) -> dict:
    return {
        "id": r.id,
        "project_name": r.project_name,
        "user_id": r.user_id,
        "rating": r.rating,
        "review": r.review or "",
        "created_at": r.created_at.isoformat() if r.created_at else None,
        "updated_at": r.updated_at.isoformat() if r.updated_at else None,
    }


def _validate(user_id: str, project_name: str, rating: int) -> None:
    if not project_name or not project_name.strip():
        raise ValidationError("Project name is required")
    if not user_id or not user_id.strip():
        raise ValidationError("User ID is required")
    if rating is None:
        raise ValidationError("Rating is required")
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError("Rating must be an integer")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")


def _find(session: Session, user_id: str, project_name: str) -> Rating | None:
    return session.scalar(
        select(Rating).where(Rating.user_id == user_id, Rating.project_name == project_name)
    )


def _apply_update(existing: Rating, rating: int, review: str | None) -> None:
    existing.rating = rating
    if review:
        existing.review = review
    existing.updated_at = datetime.now(UTC)


def submit_rating(
    engine: Engine,
    *,
    user_id: str,
    project_name: str,
    rating: int,
    review: str | None = None,
) -> RatingOutcome:
    """Create or update the caller's rating for *project_name*.

    A newly created rating triggers the +5 point hook.  A failed award is
    logged and reported in ``outcome.points``; the rating itself is kept.
    """
    _validate(user_id, project_name, rating)
    project_name = project_name.strip()
    review = review.strip() if review else None

    with store.store_errors("submit rating"), Session(engine, expire_on_commit=False) as session:
        store.get_user(session, user_id)

        created = False
        existing = _find(session, user_id, project_name)
        if existing is not None:
            _apply_update(existing, rating, review)
            row = existing
        else:
            row = Rating(
                id=f"rating_{uuid.uuid4().hex}",
                project_name=project_name,
                user_id=user_id,
                rating=rating,
                review=review,
            )
            try:
                with session.begin_nested():   # SAVEPOINT
                    session.add(row)
                    session.flush()
                created = True
            except IntegrityError:
                # A concurrent submission created the pair first.
                row = _find(session, user_id, project_name)
                if row is None:
                    raise
                _apply_update(row, rating, review)
        session.commit()
        session.refresh(row)

    outcome = RatingOutcome(rating=row, created=created)
    if created:
        logger.info("New rating %s by %s for %s", row.id, user_id, project_name)
        outcome.points = award_rating_points(engine, user_id)
    return outcome


def list_ratings(
    engine: Engine,
    *,
    project_name: str | None = None,
    user_id: str | None = None,
) -> list[Rating]:
    """All ratings, filtered by project (takes precedence) or by user."""
    stmt = select(Rating).order_by(Rating.created_at, Rating.id)
    if project_name:
        stmt = stmt.where(Rating.project_name == project_name)
    elif user_id:
        stmt = stmt.where(Rating.user_id == user_id)
    with store.store_errors("list ratings"), Session(engine, expire_on_commit=False) as session:
        return list(session.scalars(stmt).all())


def delete_rating(engine: Engine, rating_id: str) -> None:
    """Delete a rating.  Points already awarded for it are kept."""
    if not rating_id:
        raise ValidationError("Rating ID is required")
    with store.store_errors("delete rating"), get_session(engine) as session:
        row = session.get(Rating, rating_id)
        if row is None:
            raise NotFound(f"Rating {rating_id!r} not found")
        session.delete(row)
    logger.info("Deleted rating %s", rating_id)
