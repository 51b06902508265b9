"""Tutoring sessions between a teacher and a learner.

Components:
- Session: Dataclass mapping to the sessions table
- SessionRepository: lookups, status writes and completed-session queries
- SessionService (skillswap.sessions.service): schedule and complete
"""

from skillswap.sessions.repository import SessionRepository
from skillswap.sessions.schemas import (
    COMPLETABLE_STATUSES,
    VALID_MODES,
    VALID_ROLES,
    VALID_STATUSES,
    Session,
)

__all__ = [
    "COMPLETABLE_STATUSES",
    "Session",
    "SessionRepository",
    "VALID_MODES",
    "VALID_ROLES",
    "VALID_STATUSES",
]
