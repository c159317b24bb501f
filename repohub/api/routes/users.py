"""
repohub.api.routes.users — Registration, profiles & leaderboard
================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from repohub.api.deps import EngineDep, get_config
from repohub.config import RepohubConfig
from repohub.services import user_service

router = APIRouter(tags=["users"])


class UserCreate(BaseModel):
    username: str | None = None
    email: str | None = None
    display_name: str | None = Field(default=None, alias="displayName")
    avatar_url: str | None = Field(default=None, alias="avatarUrl")


class UserUpdate(BaseModel):
    display_name: str | None = Field(default=None, alias="displayName")
    avatar_url: str | None = Field(default=None, alias="avatarUrl")
    email: str | None = None


@router.post("/users", status_code=201)
def register(body: UserCreate, engine: EngineDep):
    user = user_service.register_user(
        engine,
        username=body.username or "",
        email=body.email or "",
        display_name=body.display_name,
        avatar_url=body.avatar_url,
    )
    return user_service.user_dict(user, include_email=True)


@router.get("/users")
def list_users(engine: EngineDep):
    return [user_service.user_dict(u) for u in user_service.list_users(engine)]


@router.get("/users/by-name/{username}")
def get_user_by_username(username: str, engine: EngineDep):
    return user_service.user_dict(user_service.get_user_by_username(engine, username))


@router.get("/users/{user_id}")
def get_user(user_id: str, engine: EngineDep):
    return user_service.user_dict(user_service.get_user(engine, user_id), include_email=True)


@router.put("/users/{user_id}")
def update_user(user_id: str, body: UserUpdate, engine: EngineDep):
    user = user_service.update_profile(
        engine,
        user_id,
        display_name=body.display_name,
        avatar_url=body.avatar_url,
        email=body.email,
    )
    return user_service.user_dict(user, include_email=True)


@router.get("/leaderboard")
def leaderboard(
    engine: EngineDep,
    limit: int | None = Query(None, ge=1, le=100),
    cfg: RepohubConfig = Depends(get_config),
):
    """Top users by points."""
    rows = user_service.get_leaderboard(engine, limit or cfg.leaderboard_size)
    return [
        {"rank": rank, **user_service.user_dict(u)}
        for rank, u in enumerate(rows, start=1)
    ]
