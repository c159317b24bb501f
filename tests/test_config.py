"""
tests/test_config.py — YAML Configuration Loader
=================================================
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from repohub.api import __main__ as entry
from repohub.config import RepohubConfig, load_config


def _write(tmp_path, text: str):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        cfg = load_config(tmp_path / "absent.yaml")
        assert cfg == RepohubConfig()
        assert cfg.store_timeout_seconds == 10.0
        assert cfg.leaderboard_size == 10

    def test_empty_file_gives_defaults(self, tmp_path):
        assert load_config(_write(tmp_path, "")) == RepohubConfig()

    def test_values_are_coerced(self, tmp_path):
        cfg = load_config(_write(tmp_path, (
            "community_name: OSS Hub\n"
            "api_port: '9000'\n"
            "leaderboard_size: 25\n"
            "store_timeout_seconds: 2\n"
            "cors_origins:\n"
            "  - http://localhost:5173/\n"
            "  - https://hub.example.com\n"
        )))
        assert cfg.community_name == "OSS Hub"
        assert cfg.api_port == 9000
        assert cfg.leaderboard_size == 25
        assert cfg.store_timeout_seconds == 2.0
        assert cfg.cors_origins == ("http://localhost:5173", "https://hub.example.com")

    def test_comma_separated_origins(self, tmp_path):
        cfg = load_config(_write(tmp_path, "cors_origins: 'http://a, http://b'\n"))
        assert cfg.cors_origins == ("http://a", "http://b")

    @pytest.mark.parametrize("value", ["0", "-1"])
    def test_rejects_non_positive_timeout(self, tmp_path, value):
        with pytest.raises(ValueError, match="store_timeout_seconds"):
            load_config(_write(tmp_path, f"store_timeout_seconds: {value}\n"))

    def test_rejects_empty_leaderboard(self, tmp_path):
        with pytest.raises(ValueError, match="leaderboard_size"):
            load_config(_write(tmp_path, "leaderboard_size: 0\n"))

    def test_frozen(self):
        cfg = RepohubConfig()
        with pytest.raises(AttributeError):
            cfg.api_port = 1


class TestEntryPoint:
    def test_serves_on_configured_port(self, tmp_path, monkeypatch):
        monkeypatch.setenv("REPOHUB_CONFIG", str(_write(tmp_path, "api_port: 9100\n")))
        monkeypatch.setenv("API_HOST", "127.0.0.1")
        with patch("uvicorn.run") as run:
            entry.main()

        run.assert_called_once_with(
            "repohub.api.main:app", host="127.0.0.1", port=9100, log_config=None,
        )
