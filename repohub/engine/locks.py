"""
repohub.engine.locks — Per-user single-writer locks
====================================================

Every operation that mutates a user's points, level or badges (badge check,
action hooks, admin correction) runs while holding that user's lock, so two
mutations for the same user never interleave inside this process.  Across
processes the store's row lock (``FOR UPDATE``) and increment-only point
writes take over.

Locks are reference counted and dropped as soon as nobody holds or waits
on them, so the registry stays proportional to in-flight users.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from threading import Lock

logger = logging.getLogger(__name__)


class UserLockRegistry:
    """Thread-safe mapping of user id → :class:`threading.Lock`."""

    def __init__(self) -> None:
        self._guard = Lock()
        # user_id → [lock, holders + waiters]
        self._locks: dict[str, list] = {}

    @contextmanager
    def hold(self, user_id: str) -> Iterator[None]:
        """Block until *user_id*'s lock is acquired; release on exit."""
        with self._guard:
            entry = self._locks.get(user_id)
            if entry is None:
                entry = [Lock(), 0]
                self._locks[user_id] = entry
            entry[1] += 1

        lock: Lock = entry[0]
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[user_id]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


# Process-wide registry shared by the gamification and points services
USER_LOCKS = UserLockRegistry()
