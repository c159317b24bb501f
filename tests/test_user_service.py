"""
tests/test_user_service.py — Registration, Profiles & Leaderboard
==================================================================
"""

from __future__ import annotations

import pytest

from conftest import make_user
from repohub.errors import Conflict, NotFound, ValidationError
from repohub.services import user_service


def _register(engine, username="alice", email="alice@example.com", **kw):
    return user_service.register_user(engine, username=username, email=email, **kw)


class TestRegister:
    def test_starting_state(self, db_engine):
        user = _register(db_engine)
        assert user.id.startswith("user_")
        assert user.points == 10
        assert user.level == 1
        assert user.badges == ["newcomer"]
        assert user.display_name == "alice"
        assert "dicebear" in user.avatar_url

    def test_explicit_display_name_and_avatar(self, db_engine):
        user = _register(db_engine, display_name="Alice A.", avatar_url="https://img/a.png")
        assert user.display_name == "Alice A."
        assert user.avatar_url == "https://img/a.png"

    def test_duplicate_username_case_insensitive(self, db_engine):
        _register(db_engine)
        with pytest.raises(Conflict, match="Username"):
            _register(db_engine, username="ALICE", email="other@example.com")

    def test_duplicate_email_case_insensitive(self, db_engine):
        _register(db_engine)
        with pytest.raises(Conflict, match="Email"):
            _register(db_engine, username="bob", email="Alice@Example.com")

    @pytest.mark.parametrize("username", ["", "  ", "has space", "x" * 51, "semi;colon"])
    def test_invalid_username(self, db_engine, username):
        with pytest.raises(ValidationError):
            _register(db_engine, username=username)

    @pytest.mark.parametrize("email", ["", "no-at-sign", "a@b", "a @b.com"])
    def test_invalid_email(self, db_engine, email):
        with pytest.raises(ValidationError):
            _register(db_engine, email=email)


class TestLookup:
    def test_get_user(self, db_engine):
        user = _register(db_engine)
        assert user_service.get_user(db_engine, user.id).username == "alice"

    def test_get_unknown(self, db_engine):
        with pytest.raises(NotFound):
            user_service.get_user(db_engine, "user_missing")

    def test_by_username_case_insensitive(self, db_engine):
        user = _register(db_engine)
        assert user_service.get_user_by_username(db_engine, "Alice").id == user.id

    def test_by_username_unknown(self, db_engine):
        with pytest.raises(NotFound):
            user_service.get_user_by_username(db_engine, "nobody")

    def test_user_dict_hides_credentials(self, db_engine):
        user = _register(db_engine, password_hash="opaque")
        data = user_service.user_dict(user)
        assert "password_hash" not in data
        assert "email" not in data
        assert data["points_for_next_level"] == 100
        assert user_service.user_dict(user, include_email=True)["email"] == "alice@example.com"

    def test_next_level_follows_points_not_stored_level(self, db_engine):
        user = make_user(db_engine, points=101, level=1)
        assert user_service.user_dict(user)["points_for_next_level"] == 200


class TestLeaderboard:
    def test_ordered_by_points(self, db_engine):
        make_user(db_engine, "user_a", points=50)
        make_user(db_engine, "user_b", points=300)
        make_user(db_engine, "user_c", points=120)
        board = user_service.get_leaderboard(db_engine)
        assert [u.id for u in board] == ["user_b", "user_c", "user_a"]

    def test_limit_and_tie_break(self, db_engine):
        for uid in ("user_c", "user_a", "user_b"):
            make_user(db_engine, uid, points=100)
        board = user_service.get_leaderboard(db_engine, limit=2)
        assert [u.id for u in board] == ["user_a", "user_b"]


class TestUpdateProfile:
    def test_updates_display_fields(self, db_engine):
        user = _register(db_engine)
        updated = user_service.update_profile(
            db_engine, user.id, display_name="Alice", avatar_url="https://img/new.png",
        )
        assert updated.display_name == "Alice"
        assert updated.avatar_url == "https://img/new.png"
        assert updated.points == 10

    def test_email_change_conflict(self, db_engine):
        _register(db_engine)
        bob = _register(db_engine, username="bob", email="bob@example.com")
        with pytest.raises(Conflict):
            user_service.update_profile(db_engine, bob.id, email="ALICE@example.com")

    def test_same_email_different_case_is_not_a_change(self, db_engine):
        user = _register(db_engine)
        updated = user_service.update_profile(db_engine, user.id, email="ALICE@example.com")
        assert updated.email == "alice@example.com"

    def test_unknown_user(self, db_engine):
        with pytest.raises(NotFound):
            user_service.update_profile(db_engine, "user_missing", display_name="x")
