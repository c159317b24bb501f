"""
repohub.api.routes.admin — Admin endpoints (JWT-protected)
===========================================================
"""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel, Field

from repohub.api.deps import AdminDep, EngineDep
from repohub.services import catalog, points_service, user_service

router = APIRouter(prefix="/admin", tags=["admin"])


class PointsCorrection(BaseModel):
    points: int = Field(ge=0)
    reason: str


@router.post("/users/{user_id}/points")
def correct_points(user_id: str, body: PointsCorrection, engine: EngineDep, admin: AdminDep):
    """Set a user's point total (the level is re-derived)."""
    user = points_service.correct_points(
        engine,
        user_id,
        body.points,
        reason=body.reason,
        admin_id=str(admin.get("sub", "")),
    )
    return user_service.user_dict(user, include_email=True)


@router.post("/badges/seed")
def seed_badges(engine: EngineDep, admin: AdminDep):
    """Seed the default badge catalog if it is empty."""
    return {"inserted": catalog.ensure_seeded(engine)}
