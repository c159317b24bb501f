"""
repohub.database.models — SQLAlchemy 2.0 Data Models
=====================================================

Tables:
- users     : Community members with points, level and earned badge ids
- badges    : Badge catalog (seeded with defaults on first read)
- projects  : Open-source projects listed on the platform
- ratings   : One score per (user, project) pair
- comments  : Threaded project comments with likes

Content rows reference users by id only.  No foreign keys are declared
between them, so activity counts must always filter by ``user_id``.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from repohub.constants import MAX_RATING, MAX_USERNAME_LENGTH, MIN_RATING


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all repohub ORM models."""


# ---------------------------------------------------------------------------
# Users: one row per registered member
# ---------------------------------------------------------------------------
class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    username: Mapped[str] = mapped_column(String(MAX_USERNAME_LENGTH), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    # Opaque credential material; produced and checked outside this package.
    password_hash: Mapped[str | None] = mapped_column(String(255), default=None)
    avatar_url: Mapped[str | None] = mapped_column(String(500), default=None)
    points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    level: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    badges: Mapped[list[str]] = mapped_column(JSONB, default=list, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("points >= 0", name="ck_users_points_non_negative"),
        CheckConstraint("level >= 1", name="ck_users_level_positive"),
        Index("ix_users_points_desc", "points"),
    )

    def __repr__(self) -> str:
        return f"<User id={self.id!r} name={self.username!r} pts={self.points} lvl={self.level}>"


# Case-insensitive uniqueness for login names and addresses
Index("uq_users_username_lower", func.lower(User.username), unique=True)
Index("uq_users_email_lower", func.lower(User.email), unique=True)


# ---------------------------------------------------------------------------
# Badges: reference catalog
# ---------------------------------------------------------------------------
class Badge(Base):
    """A point-valued achievement a user can unlock once.

    The string primary key is what ``User.badges`` stores.  It also acts as
    the uniqueness guard that makes a racing second seeder fail loudly.
    """
    __tablename__ = "badges"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    icon: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("points >= 0", name="ck_badges_points_non_negative"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "points": self.points,
        }

    def __repr__(self) -> str:
        return f"<Badge id={self.id!r} points={self.points}>"


# ---------------------------------------------------------------------------
# Projects: listed repositories
# ---------------------------------------------------------------------------
class Project(Base):
    __tablename__ = "projects"

    name: Mapped[str] = mapped_column(String(200), primary_key=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    url: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    stars: Mapped[int] = mapped_column(Integer, default=0)
    forks: Mapped[int] = mapped_column(Integer, default=0)
    tags: Mapped[list[str]] = mapped_column(JSONB, default=list)
    languages: Mapped[dict[str, int]] = mapped_column(JSONB, default=dict)
    submitted_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<Project name={self.name!r}>"


# ---------------------------------------------------------------------------
# Ratings: one per (user, project)
# ---------------------------------------------------------------------------
class Rating(Base):
    __tablename__ = "ratings"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    project_name: Mapped[str] = mapped_column(String(200), nullable=False)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    review: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        UniqueConstraint("user_id", "project_name", name="uq_ratings_user_project"),
        CheckConstraint(
            f"rating BETWEEN {MIN_RATING} AND {MAX_RATING}",
            name="ck_ratings_range",
        ),
        Index("ix_ratings_project", "project_name"),
        Index("ix_ratings_user", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Rating id={self.id!r} user={self.user_id!r} project={self.project_name!r}>"


# ---------------------------------------------------------------------------
# Comments: threaded discussion
# ---------------------------------------------------------------------------
class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    project_name: Mapped[str] = mapped_column(String(200), nullable=False)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    parent_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    likes: Mapped[list[str]] = mapped_column(JSONB, default=list, nullable=False)
    edited: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )

    __table_args__ = (
        Index("ix_comments_project", "project_name"),
        Index("ix_comments_user", "user_id"),
        Index("ix_comments_parent", "parent_id"),
    )

    def __repr__(self) -> str:
        return f"<Comment id={self.id!r} user={self.user_id!r} project={self.project_name!r}>"
