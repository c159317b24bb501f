"""
repohub.errors — Error taxonomy
================================

Every service raises one of these so callers (routes, scripts, tests) can
tell *why* an operation failed without inspecting driver exceptions.
"""

from __future__ import annotations


class RepohubError(Exception):
    """Base class for all domain errors."""


class NotFound(RepohubError):
    """A referenced user, badge, rating, comment or project does not exist."""


class ValidationError(RepohubError):
    """Required input is missing or malformed."""


class Conflict(RepohubError):
    """A uniqueness rule would be violated (duplicate username, email, ...)."""


class Forbidden(RepohubError):
    """The caller is not allowed to mutate the target row."""


class PersistenceError(RepohubError):
    """A store read or write failed.  Nothing from the operation is visible."""


class StoreTimeout(PersistenceError):
    """The store did not answer within the configured timeout."""


class PartialSeedError(RepohubError):
    """Badge catalog seeding collided with rows that already exist.

    Raised when the catalog looked empty but an insert hit the primary-key
    constraint, i.e. another seeder got there first or a previous run left
    a partial catalog behind.  Not recovered automatically.
    """
