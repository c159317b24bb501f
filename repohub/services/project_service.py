"""
repohub.services.project_service — Project Listing
===================================================

Plain CRUD over the ``projects`` table.
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from repohub.database import store
from repohub.database.models import Project
from repohub.errors import Conflict, NotFound, ValidationError

logger = logging.getLogger(__name__)


def project_dict(p: Project) -> dict:
    return {
        "name": p.name,
        "description": p.description,
        "url": p.url,
        "stars": p.stars,
        "forks": p.forks,
        "tags": list(p.tags or []),
        "languages": dict(p.languages or {}),
        "submitted_by": p.submitted_by,
    }


def list_projects(engine: Engine, *, tag: str | None = None) -> list[Project]:
    """Every project by stars (desc).  *tag* filters in Python because
    JSON containment differs between PostgreSQL and SQLite."""
    with store.store_errors("list projects"), Session(engine, expire_on_commit=False) as session:
        projects = list(session.scalars(
            select(Project).order_by(Project.stars.desc(), Project.name)
        ).all())
    if tag:
        projects = [p for p in projects if tag in (p.tags or [])]
    return projects


def get_project(engine: Engine, name: str) -> Project:
    with store.store_errors("get project"), Session(engine, expire_on_commit=False) as session:
        project = session.get(Project, name)
    if project is None:
        raise NotFound(f"Project {name!r} not found")
    return project


def submit_project(
    engine: Engine,
    *,
    name: str,
    url: str,
    description: str = "",
    tags: list[str] | None = None,
    languages: dict[str, int] | None = None,
    stars: int = 0,
    forks: int = 0,
    submitted_by: str | None = None,
) -> Project:
    """Add a project.  Names are unique."""
    name = (name or "").strip()
    if not name:
        raise ValidationError("Project name is required")
    if not url or not url.strip():
        raise ValidationError("Project URL is required")

    with store.store_errors("submit project"), Session(engine, expire_on_commit=False) as session:
        if session.get(Project, name) is not None:
            raise Conflict(f"Project {name!r} already exists")
        project = Project(
            name=name,
            url=url.strip(),
            description=description or "",
            tags=list(tags or []),
            languages=dict(languages or {}),
            stars=stars,
            forks=forks,
            submitted_by=submitted_by,
        )
        session.add(project)
        try:
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            raise Conflict(f"Project {name!r} already exists") from exc

    logger.info("Project %s submitted by %s", name, submitted_by or "anonymous")
    return project
