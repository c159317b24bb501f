"""
repohub.config — YAML Configuration Loader
===========================================

Reads ``config.yaml`` for **deployment** settings (community identity, API
port, store timeout, CORS).  Secrets (``DATABASE_URL``, ``JWT_SECRET``) are
read from the environment, never from this file.  Gameplay constants live
in :mod:`repohub.constants`.

Usage::

    from repohub.config import load_config

    cfg = load_config()               # reads ./config.yaml by default
    print(cfg.community_name)         # "Repohub"
    print(cfg.store_timeout_seconds)  # 10.0
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass(frozen=True, slots=True)
class RepohubConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    community_name: str = "Repohub"

    # API
    api_port: int = 8000
    cors_origins: tuple[str, ...] = field(default_factory=tuple)

    # Leaderboard
    leaderboard_size: int = 10

    # Store: applied as pool timeout and PostgreSQL statement_timeout
    store_timeout_seconds: float = 10.0


def load_config(path: str | Path = "config.yaml") -> RepohubConfig:
    """Read *path* and return a :class:`RepohubConfig` instance.

    A missing file yields the defaults so tests and local runs work without
    one.  Keys that are present are type-coerced; unknown keys are ignored.

    Raises
    ------
    ValueError
        If a value cannot be coerced or is out of range.
    """
    config_path = Path(path)
    if not config_path.exists():
        return RepohubConfig()

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    defaults = RepohubConfig()
    timeout = float(raw.get("store_timeout_seconds", defaults.store_timeout_seconds))
    if timeout <= 0:
        raise ValueError(f"store_timeout_seconds must be positive, got {timeout}")

    leaderboard_size = int(raw.get("leaderboard_size", defaults.leaderboard_size))
    if leaderboard_size < 1:
        raise ValueError(f"leaderboard_size must be at least 1, got {leaderboard_size}")

    origins = raw.get("cors_origins") or []
    if isinstance(origins, str):
        origins = origins.split(",")

    return RepohubConfig(
        community_name=str(raw.get("community_name", defaults.community_name)),
        api_port=int(raw.get("api_port", defaults.api_port)),
        cors_origins=tuple(o.strip().rstrip("/") for o in origins if o.strip()),
        leaderboard_size=leaderboard_size,
        store_timeout_seconds=timeout,
    )
