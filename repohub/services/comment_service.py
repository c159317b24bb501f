"""
repohub.services.comment_service — Threaded Project Comments
=============================================================

Create, like/unlike, edit and delete comments.  Every created comment
(replies included) triggers the +2 point hook after the comment row is
committed; a failed award is logged and reported, never rolled into the
comment write.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime

from sqlalchemy import Engine, delete, select
from sqlalchemy.orm import Session

from repohub.constants import MAX_COMMENT_LENGTH
from repohub.database import store
from repohub.database.engine import get_session
from repohub.database.models import Comment
from repohub.errors import Forbidden, NotFound, ValidationError
from repohub.services.points_service import PointsOutcome, award_comment_points

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CommentOutcome:
    comment: Comment
    points: PointsOutcome = field(default_factory=PointsOutcome)


def comment_dict(c: Comment) -> dict:
    return {
        "id": c.id,
        "project_name": c.project_name,
        "user_id": c.user_id,
        "text": c.text,
        "parent_id": c.parent_id,
        "likes": list(c.likes or []),
        "edited": bool(c.edited),
        "created_at": c.created_at.isoformat() if c.created_at else None,
        "updated_at": c.updated_at.isoformat() if c.updated_at else None,
    }


def _require(value: str | None, label: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{label} is required")
    return value.strip()


def _clean_text(text: str | None) -> str:
    text = _require(text, "Comment text")
    if len(text) > MAX_COMMENT_LENGTH:
        raise ValidationError(f"Comment text must be at most {MAX_COMMENT_LENGTH} characters")
    return text


def _get_comment(session: Session, comment_id: str) -> Comment:
    comment = session.get(Comment, comment_id)
    if comment is None:
        raise NotFound(f"Comment {comment_id!r} not found")
    return comment


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------
def create_comment(
    engine: Engine,
    *,
    user_id: str,
    project_name: str,
    text: str,
    parent_id: str | None = None,
) -> CommentOutcome:
    """Post a comment (or a reply when *parent_id* is given)."""
    project_name = _require(project_name, "Project name")
    user_id = _require(user_id, "User ID")
    text = _clean_text(text)

    with store.store_errors("create comment"), Session(engine, expire_on_commit=False) as session:
        store.get_user(session, user_id)
        if parent_id:
            parent = session.get(Comment, parent_id)
            if parent is None:
                raise NotFound("Parent comment not found")

        comment = Comment(
            id=f"comment_{uuid.uuid4().hex}",
            project_name=project_name,
            user_id=user_id,
            text=text,
            parent_id=parent_id or None,
            likes=[],
            edited=False,
        )
        session.add(comment)
        session.commit()
        session.refresh(comment)

    logger.info("New comment %s by %s on %s", comment.id, user_id, project_name)
    return CommentOutcome(comment=comment, points=award_comment_points(engine, user_id))


# ---------------------------------------------------------------------------
# Update (like / unlike / edit)
# ---------------------------------------------------------------------------
def like_comment(engine: Engine, comment_id: str, user_id: str) -> Comment:
    """Add *user_id* to the comment's likes (no-op if already present)."""
    user_id = _require(user_id, "User ID")
    with store.store_errors("like comment"), Session(engine, expire_on_commit=False) as session:
        comment = _get_comment(session, comment_id)
        likes = list(comment.likes or [])
        if user_id not in likes:
            comment.likes = likes + [user_id]
        session.commit()
        return comment


def unlike_comment(engine: Engine, comment_id: str, user_id: str) -> Comment:
    user_id = _require(user_id, "User ID")
    with store.store_errors("unlike comment"), Session(engine, expire_on_commit=False) as session:
        comment = _get_comment(session, comment_id)
        comment.likes = [uid for uid in (comment.likes or []) if uid != user_id]
        session.commit()
        return comment


def edit_comment(engine: Engine, comment_id: str, user_id: str, text: str) -> Comment:
    """Replace the text.  Only the author may edit."""
    user_id = _require(user_id, "User ID")
    text = _clean_text(text)
    with store.store_errors("edit comment"), Session(engine, expire_on_commit=False) as session:
        comment = _get_comment(session, comment_id)
        if comment.user_id != user_id:
            raise Forbidden("Not authorized to edit this comment")
        comment.text = text
        comment.edited = True
        comment.updated_at = datetime.now(UTC)
        session.commit()
        return comment


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------
def delete_comment(engine: Engine, comment_id: str, user_id: str) -> int:
    """Delete a comment and its direct replies.  Only the author may delete.

    Returns the number of rows removed.  Points already awarded are kept.
    """
    comment_id = _require(comment_id, "Comment ID")
    user_id = _require(user_id, "User ID")
    with store.store_errors("delete comment"), get_session(engine) as session:
        comment = _get_comment(session, comment_id)
        if comment.user_id != user_id:
            raise Forbidden("Not authorized to delete this comment")
        replies = session.execute(
            delete(Comment).where(Comment.parent_id == comment_id)
        ).rowcount
        session.delete(comment)

    logger.info("Deleted comment %s with %d replies", comment_id, replies)
    return replies + 1


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------
def list_comments(
    engine: Engine,
    *,
    project_name: str | None = None,
    user_id: str | None = None,
) -> list[Comment]:
    """All comments, filtered by project (takes precedence) or by user."""
    stmt = select(Comment).order_by(Comment.created_at, Comment.id)
    if project_name:
        stmt = stmt.where(Comment.project_name == project_name)
    elif user_id:
        stmt = stmt.where(Comment.user_id == user_id)
    with store.store_errors("list comments"), Session(engine, expire_on_commit=False) as session:
        return list(session.scalars(stmt).all())
