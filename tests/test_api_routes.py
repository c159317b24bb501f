"""
tests/test_api_routes.py — FastAPI Route Integration Tests
============================================================

Uses the FastAPI TestClient with ``get_engine`` overridden to the shared
in-memory SQLite engine.  Verifies:
- Health endpoint availability
- Error taxonomy → HTTP status mapping
- Badge check response shape
- Auth guards on admin endpoints
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from conftest import add_comments, add_ratings, load_user, make_admin_token, make_user


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


# ===========================================================================
# Health endpoint
# ===========================================================================
class TestHealthEndpoint:
    def test_health_returns_ok(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


# ===========================================================================
# Badges
# ===========================================================================
class TestBadgeRoutes:
    def test_list_badges_seeds_catalog(self, client):
        resp = client.get("/api/badges")
        assert resp.status_code == 200
        assert len(resp.json()) == 8
        assert len(client.get("/api/badges").json()) == 8

    def test_get_badge(self, client):
        resp = client.get("/api/badges/first_rating")
        assert resp.status_code == 200
        assert resp.json()["points"] == 20

    def test_get_unknown_badge_404(self, client):
        assert client.get("/api/badges/nope").status_code == 404

    def test_check_awards_and_reports(self, client, db_engine):
        make_user(db_engine, points=15)
        add_ratings(db_engine, "user_1", 1)

        resp = client.post("/api/badges/check", json={"userId": "user_1"})

        assert resp.status_code == 200
        data = resp.json()
        assert [b["id"] for b in data["earnedBadges"]] == ["first_rating"]
        assert data["currentPoints"] == 35
        assert data["currentLevel"] == 1
        assert data["levelUp"] is False

    def test_check_without_user_id_400(self, client):
        resp = client.post("/api/badges/check", json={})
        assert resp.status_code == 400
        assert "User ID" in resp.json()["detail"]

    def test_check_unknown_user_404(self, client):
        assert client.post("/api/badges/check", json={"userId": "ghost"}).status_code == 404


# ===========================================================================
# Users
# ===========================================================================
class TestUserRoutes:
    def test_register_and_fetch(self, client):
        resp = client.post("/api/users", json={"username": "alice", "email": "a@example.com"})
        assert resp.status_code == 201
        user = resp.json()
        assert user["points"] == 10
        assert user["badges"] == ["newcomer"]
        assert "password_hash" not in user

        assert client.get(f"/api/users/{user['id']}").json()["username"] == "alice"
        assert client.get("/api/users/by-name/ALICE").json()["id"] == user["id"]

    def test_register_conflict_409(self, client):
        client.post("/api/users", json={"username": "alice", "email": "a@example.com"})
        resp = client.post("/api/users", json={"username": "Alice", "email": "b@example.com"})
        assert resp.status_code == 409

    def test_register_invalid_400(self, client):
        resp = client.post("/api/users", json={"username": "alice"})
        assert resp.status_code == 400

    def test_update_profile(self, client, db_engine):
        make_user(db_engine)
        resp = client.put("/api/users/user_1", json={"displayName": "Alice"})
        assert resp.status_code == 200
        assert resp.json()["display_name"] == "Alice"

    def test_leaderboard_ranks(self, client, db_engine):
        make_user(db_engine, "user_a", points=50)
        make_user(db_engine, "user_b", points=300)
        rows = client.get("/api/leaderboard").json()
        assert [(r["rank"], r["id"]) for r in rows] == [(1, "user_b"), (2, "user_a")]
        assert len(client.get("/api/leaderboard?limit=1").json()) == 1


# ===========================================================================
# Ratings, comments, projects
# ===========================================================================
class TestContentRoutes:
    def test_rating_create_then_update(self, client, db_engine):
        make_user(db_engine)
        body = {"userId": "user_1", "projectName": "fastapi", "rating": 4}

        first = client.post("/api/ratings", json=body).json()
        second = client.post("/api/ratings", json={**body, "rating": 5}).json()

        assert first["created"] is True
        assert first["pointsAwarded"] == 5
        assert second["created"] is False
        assert second["pointsAwarded"] == 0
        assert second["rating"]["rating"] == 5
        assert load_user(db_engine, "user_1").points == 15

    def test_rating_out_of_range_400(self, client, db_engine):
        make_user(db_engine)
        resp = client.post(
            "/api/ratings", json={"userId": "user_1", "projectName": "fastapi", "rating": 9},
        )
        assert resp.status_code == 400

    def test_rating_list_and_delete(self, client, db_engine):
        make_user(db_engine)
        created = client.post(
            "/api/ratings", json={"userId": "user_1", "projectName": "fastapi", "rating": 4},
        ).json()
        assert len(client.get("/api/ratings?project=fastapi").json()) == 1
        assert client.delete(f"/api/ratings/{created['rating']['id']}").status_code == 200
        assert client.get("/api/ratings?userId=user_1").json() == []

    def test_comment_lifecycle(self, client, db_engine):
        make_user(db_engine, "user_1")
        make_user(db_engine, "user_2")

        resp = client.post(
            "/api/comments", json={"userId": "user_1", "projectName": "fastapi", "text": "Nice"},
        )
        assert resp.status_code == 201
        comment = resp.json()
        assert comment["pointsAwarded"] == 2
        cid = comment["id"]

        liked = client.post(f"/api/comments/{cid}/likes", json={"userId": "user_2"}).json()
        assert liked["likes"] == ["user_2"]
        unliked = client.delete(f"/api/comments/{cid}/likes/user_2").json()
        assert unliked["likes"] == []

        forbidden = client.put(f"/api/comments/{cid}", json={"userId": "user_2", "text": "x"})
        assert forbidden.status_code == 403
        edited = client.put(f"/api/comments/{cid}", json={"userId": "user_1", "text": "Edited"})
        assert edited.json()["edited"] is True

        assert client.delete(f"/api/comments/{cid}?userId=user_1").json()["removed"] == 1
        assert client.get("/api/comments?project=fastapi").json() == []

    def test_comment_reports_failed_award(self, client, db_engine):
        make_user(db_engine)
        boom = OperationalError("UPDATE users", {}, Exception("connection reset"))
        with patch("repohub.services.points_service.store.increment_points", side_effect=boom):
            resp = client.post(
                "/api/comments", json={"userId": "user_1", "projectName": "fastapi", "text": "Nice"},
            )

        assert resp.status_code == 201
        assert resp.json()["pointsError"] is True
        assert resp.json()["pointsAwarded"] == 0
        assert len(client.get("/api/comments?project=fastapi").json()) == 1
        assert load_user(db_engine, "user_1").points == 10

    def test_projects(self, client):
        resp = client.post("/api/projects", json={
            "name": "fastapi",
            "url": "https://github.com/fastapi/fastapi",
            "tags": ["web", "python"],
            "stars": 70000,
        })
        assert resp.status_code == 201
        client.post("/api/projects", json={"name": "pytest", "url": "https://x", "tags": ["testing"]})

        assert [p["name"] for p in client.get("/api/projects").json()] == ["fastapi", "pytest"]
        assert [p["name"] for p in client.get("/api/projects?tag=testing").json()] == ["pytest"]
        assert client.get("/api/projects/fastapi").json()["stars"] == 70000
        assert client.get("/api/projects/missing").status_code == 404
        dup = client.post("/api/projects", json={"name": "fastapi", "url": "https://x"})
        assert dup.status_code == 409

    def test_badge_check_after_activity(self, client, db_engine):
        make_user(db_engine)
        add_comments(db_engine, "user_1", 1)
        data = client.post("/api/badges/check", json={"userId": "user_1"}).json()
        assert [b["id"] for b in data["earnedBadges"]] == ["first_comment"]


# ===========================================================================
# Admin: JWT guard + operations
# ===========================================================================
class TestAdminRoutes:
    ADMIN_POSTS = [
        ("/api/admin/users/user_1/points", {"points": 50, "reason": "fix"}),
        ("/api/admin/badges/seed", None),
    ]

    @pytest.mark.parametrize("endpoint,body", ADMIN_POSTS)
    def test_rejects_no_auth(self, client, endpoint, body):
        assert client.post(endpoint, json=body).status_code == 401

    @pytest.mark.parametrize("endpoint,body", ADMIN_POSTS)
    def test_rejects_invalid_token(self, client, endpoint, body):
        resp = client.post(endpoint, json=body, headers={"Authorization": "Bearer invalid"})
        assert resp.status_code == 401

    @pytest.mark.parametrize("endpoint,body", ADMIN_POSTS)
    def test_rejects_non_admin(self, client, endpoint, body):
        token = make_admin_token(sub="user_9", is_admin=False)
        assert client.post(endpoint, json=body, headers=_auth(token)).status_code == 403

    def test_correct_points(self, client, db_engine, admin_token):
        make_user(db_engine, points=340, level=4)
        resp = client.post(
            "/api/admin/users/user_1/points",
            json={"points": 150, "reason": "duplicate awards"},
            headers=_auth(admin_token),
        )
        assert resp.status_code == 200
        assert resp.json()["points"] == 150
        assert resp.json()["level"] == 2

    def test_correct_points_requires_reason(self, client, db_engine, admin_token):
        make_user(db_engine)
        resp = client.post(
            "/api/admin/users/user_1/points",
            json={"points": 5, "reason": ""},
            headers=_auth(admin_token),
        )
        assert resp.status_code == 400

    def test_seed(self, client, admin_token):
        first = client.post("/api/admin/badges/seed", headers=_auth(admin_token))
        second = client.post("/api/admin/badges/seed", headers=_auth(admin_token))
        assert first.json() == {"inserted": 8}
        assert second.json() == {"inserted": 0}
