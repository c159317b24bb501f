"""
tests/test_catalog.py — Badge Catalog Seeding Tests
====================================================
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from repohub.database.engine import init_db
from repohub.database.models import Badge
from repohub.errors import NotFound, PartialSeedError
from repohub.services import catalog


def _badge_count(engine) -> int:
    with Session(engine) as session:
        return session.scalar(select(func.count()).select_from(Badge))


class TestEnsureSeeded:
    def test_first_list_seeds_default_catalog(self, db_engine):
        badges = catalog.list_badges(db_engine)
        assert len(badges) == 8
        assert {b.id for b in badges} == {d["id"] for d in catalog.DEFAULT_BADGES}

    def test_second_list_does_not_duplicate(self, db_engine):
        first = catalog.list_badges(db_engine)
        second = catalog.list_badges(db_engine)
        assert [b.id for b in first] == [b.id for b in second]
        assert _badge_count(db_engine) == 8

    def test_returns_inserted_count(self, db_engine):
        assert catalog.ensure_seeded(db_engine) == 8
        assert catalog.ensure_seeded(db_engine) == 0

    def test_non_empty_catalog_left_alone(self, db_engine):
        with Session(db_engine) as session:
            session.add(Badge(id="custom", name="Custom", description="", icon="", points=5))
            session.commit()
        assert catalog.ensure_seeded(db_engine) == 0
        assert [b.id for b in catalog.list_badges(db_engine)] == ["custom"]

    def test_ordered_by_points(self, db_engine):
        points = [b.points for b in catalog.list_badges(db_engine)]
        assert points == sorted(points)

    def test_collision_raises_partial_seed_error(self, db_engine):
        collision = IntegrityError("INSERT INTO badges", {}, Exception("duplicate key"))
        with patch("repohub.services.catalog.store.insert_badges", side_effect=collision):
            with pytest.raises(PartialSeedError):
                catalog.ensure_seeded(db_engine)
        assert _badge_count(db_engine) == 0

    def test_init_db_creates_tables_and_seeds(self, db_engine):
        init_db(db_engine)
        init_db(db_engine)
        assert _badge_count(db_engine) == 8


class TestDefaultCatalog:
    def test_default_values(self):
        by_id = {d["id"]: d for d in catalog.DEFAULT_BADGES}
        assert by_id["newcomer"]["points"] == 10
        assert by_id["first_rating"]["points"] == 20
        assert by_id["first_comment"]["points"] == 20
        assert by_id["project_submitter"]["points"] == 50
        assert by_id["rating_10"]["points"] == 100
        assert by_id["comment_10"]["points"] == 100
        assert by_id["level_5"]["points"] == 100
        assert by_id["level_10"]["points"] == 150

    def test_ids_unique(self):
        ids = [d["id"] for d in catalog.DEFAULT_BADGES]
        assert len(ids) == len(set(ids))


class TestGetBadge:
    def test_known_badge(self, db_engine):
        badge = catalog.get_badge(db_engine, "rating_10")
        assert badge.to_dict()["points"] == 100

    def test_unknown_badge(self, db_engine):
        with pytest.raises(NotFound):
            catalog.get_badge(db_engine, "nope")
