"""
repohub.api.routes.badges — Badge catalog & badge check
========================================================
"""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel, Field

from repohub.api.deps import EngineDep
from repohub.services import catalog, gamification_service

router = APIRouter(tags=["badges"])


class BadgeCheckRequest(BaseModel):
    user_id: str | None = Field(default=None, alias="userId")


@router.get("/badges")
def list_badges(engine: EngineDep):
    return [badge.to_dict() for badge in catalog.list_badges(engine)]


@router.get("/badges/{badge_id}")
def get_badge(badge_id: str, engine: EngineDep):
    return catalog.get_badge(engine, badge_id).to_dict()


@router.post("/badges/check")
def check_badges(body: BadgeCheckRequest, engine: EngineDep):
    """Run the badge check for ``userId`` and report what changed."""
    result = gamification_service.check_and_award_badges(engine, body.user_id or "")
    return result.to_dict()
