"""
repohub.api.routes.content — Ratings, comments & projects
==========================================================

Rating and comment creation run their point hooks in the same request.
A failed award is reported as ``pointsError`` but never fails the write.
"""

from __future__ import annotations

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from repohub.api.deps import EngineDep
from repohub.services import comment_service, project_service, rating_service
from repohub.services.points_service import PointsOutcome

router = APIRouter(tags=["content"])


def _points_payload(points: PointsOutcome) -> dict:
    return {"pointsAwarded": points.awarded, "pointsError": points.failed}


# ---------------------------------------------------------------------------
# Ratings
# ---------------------------------------------------------------------------
class RatingSubmit(BaseModel):
    project_name: str | None = Field(default=None, alias="projectName")
    user_id: str | None = Field(default=None, alias="userId")
    rating: int | None = None
    review: str | None = None


@router.get("/ratings")
def list_ratings(
    engine: EngineDep,
    project: str | None = Query(None),
    user_id: str | None = Query(None, alias="userId"),
):
    rows = rating_service.list_ratings(engine, project_name=project, user_id=user_id)
    return [rating_service.rating_dict(r) for r in rows]


@router.post("/ratings")
def submit_rating(body: RatingSubmit, engine: EngineDep):
    outcome = rating_service.submit_rating(
        engine,
        user_id=body.user_id or "",
        project_name=body.project_name or "",
        rating=body.rating,
        review=body.review,
    )
    return {
        "success": True,
        "created": outcome.created,
        "rating": rating_service.rating_dict(outcome.rating),
        **_points_payload(outcome.points),
    }


@router.delete("/ratings/{rating_id}")
def delete_rating(rating_id: str, engine: EngineDep):
    rating_service.delete_rating(engine, rating_id)
    return {"success": True}


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------
class CommentCreate(BaseModel):
    project_name: str | None = Field(default=None, alias="projectName")
    user_id: str | None = Field(default=None, alias="userId")
    text: str | None = None
    parent_id: str | None = Field(default=None, alias="parentId")


class CommentEdit(BaseModel):
    user_id: str | None = Field(default=None, alias="userId")
    text: str | None = None


class CommentLike(BaseModel):
    user_id: str | None = Field(default=None, alias="userId")


@router.get("/comments")
def list_comments(
    engine: EngineDep,
    project: str | None = Query(None),
    user_id: str | None = Query(None, alias="userId"),
):
    rows = comment_service.list_comments(engine, project_name=project, user_id=user_id)
    return [comment_service.comment_dict(c) for c in rows]


@router.post("/comments", status_code=201)
def create_comment(body: CommentCreate, engine: EngineDep):
    outcome = comment_service.create_comment(
        engine,
        user_id=body.user_id or "",
        project_name=body.project_name or "",
        text=body.text or "",
        parent_id=body.parent_id,
    )
    return {
        **comment_service.comment_dict(outcome.comment),
        **_points_payload(outcome.points),
    }


@router.put("/comments/{comment_id}")
def edit_comment(comment_id: str, body: CommentEdit, engine: EngineDep):
    comment = comment_service.edit_comment(engine, comment_id, body.user_id or "", body.text or "")
    return comment_service.comment_dict(comment)


@router.post("/comments/{comment_id}/likes")
def like_comment(comment_id: str, body: CommentLike, engine: EngineDep):
    comment = comment_service.like_comment(engine, comment_id, body.user_id or "")
    return comment_service.comment_dict(comment)


@router.delete("/comments/{comment_id}/likes/{user_id}")
def unlike_comment(comment_id: str, user_id: str, engine: EngineDep):
    comment = comment_service.unlike_comment(engine, comment_id, user_id)
    return comment_service.comment_dict(comment)


@router.delete("/comments/{comment_id}")
def delete_comment(
    comment_id: str,
    engine: EngineDep,
    user_id: str = Query("", alias="userId"),
):
    removed = comment_service.delete_comment(engine, comment_id, user_id)
    return {"success": True, "removed": removed}


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------
class ProjectSubmit(BaseModel):
    name: str | None = None
    url: str | None = None
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    languages: dict[str, int] = Field(default_factory=dict)
    stars: int = Field(default=0, ge=0)
    forks: int = Field(default=0, ge=0)
    submitted_by: str | None = Field(default=None, alias="submittedBy")


@router.get("/projects")
def list_projects(engine: EngineDep, tag: str | None = Query(None)):
    return [project_service.project_dict(p) for p in project_service.list_projects(engine, tag=tag)]


@router.get("/projects/{name}")
def get_project(name: str, engine: EngineDep):
    return project_service.project_dict(project_service.get_project(engine, name))


@router.post("/projects", status_code=201)
def submit_project(body: ProjectSubmit, engine: EngineDep):
    project = project_service.submit_project(
        engine,
        name=body.name or "",
        url=body.url or "",
        description=body.description,
        tags=body.tags,
        languages=body.languages,
        stars=body.stars,
        forks=body.forks,
        submitted_by=body.submitted_by,
    )
    return project_service.project_dict(project)
