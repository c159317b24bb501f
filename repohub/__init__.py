"""
Repohub — Gamification for an Open-Source Project Community
=============================================================
Members rate and discuss open-source projects; every contribution earns
points, unlocks badges and moves them up a linear level ladder.

Package layout::

    repohub/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Point awards + leveling formula
    ├── errors.py          # Domain error taxonomy
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   ├── models.py      # ORM models (5 tables)
    │   └── store.py       # Row-level store adapter
    ├── engine/
    │   ├── badges.py      # Badge rule registry + award planning
    │   └── locks.py       # Per-user single-writer locks
    ├── services/
    │   ├── catalog.py               # Default badges + ensure-seeded reads
    │   ├── activity.py              # Rating / comment counters
    │   ├── gamification_service.py  # check_and_award_badges
    │   ├── points_service.py        # +5 / +2 hooks, admin corrections
    │   ├── user_service.py          # Registration, profiles, leaderboard
    │   ├── rating_service.py        # One rating per (user, project)
    │   ├── comment_service.py       # Threaded comments + likes
    │   └── project_service.py       # Project listing
    └── api/
        ├── main.py        # FastAPI app
        ├── deps.py        # Engine + admin JWT dependencies
        └── routes/        # Public + admin REST endpoints
"""

__version__ = "0.1.0"
