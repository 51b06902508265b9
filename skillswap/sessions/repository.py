"""Session repository: lookups, status writes, and the completed-session
queries the scoring pipeline relies on."""

import logging
from datetime import datetime
from typing import Any

from skillswap.sessions.schemas import VALID_ROLES, Session
from skillswap.storage.database import Database

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS sessions (
    session_id     TEXT PRIMARY KEY,
    teacher_id     TEXT NOT NULL,
    learner_id     TEXT NOT NULL,
    teacher_name   TEXT NOT NULL DEFAULT '',
    learner_name   TEXT NOT NULL DEFAULT '',
    skill_id       TEXT NOT NULL,
    skill_name     TEXT NOT NULL,
    mode           TEXT NOT NULL DEFAULT 'single',
    learner_skill  TEXT,
    status         TEXT NOT NULL DEFAULT 'scheduled',
    scheduled_at   TIMESTAMPTZ,
    completed_at   TIMESTAMPTZ,
    created_at     TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    CHECK (teacher_id <> learner_id)
);

CREATE INDEX IF NOT EXISTS idx_sessions_skill_status
    ON sessions(skill_id, status);
CREATE INDEX IF NOT EXISTS idx_sessions_teacher_status
    ON sessions(teacher_id, status);
CREATE INDEX IF NOT EXISTS idx_sessions_learner_status
    ON sessions(learner_id, status);
"""

# Role -> column holding that participant's id
_ROLE_COLUMNS = {"teacher": "teacher_id", "learner": "learner_id"}


def _role_column(role: str) -> str:
    if role not in VALID_ROLES:
        raise ValueError(f"Invalid role {role!r}. Must be one of: {sorted(VALID_ROLES)}")
    return _ROLE_COLUMNS[role]


def _row_to_session(row: Any) -> Session:
    """Convert an asyncpg Record to a Session."""
    return Session(
        session_id=row["session_id"],
        teacher_id=row["teacher_id"],
        learner_id=row["learner_id"],
        teacher_name=row.get("teacher_name") or "",
        learner_name=row.get("learner_name") or "",
        skill_id=row["skill_id"],
        skill_name=row["skill_name"],
        mode=row.get("mode") or "single",
        learner_skill=row.get("learner_skill"),
        status=row["status"],
        scheduled_at=row.get("scheduled_at"),
        completed_at=row.get("completed_at"),
        created_at=row["created_at"],
    )


class SessionRepository:
    """Persistence for the ``sessions`` table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_table(self) -> None:
        """Create the sessions table and indexes (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("Sessions table ensured")

    async def create(self, session: Session) -> Session:
        sql = """
            INSERT INTO sessions (
                session_id, teacher_id, learner_id, teacher_name, learner_name,
                skill_id, skill_name, mode, learner_skill, status,
                scheduled_at, completed_at, created_at
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13)
            RETURNING *
        """
        row = await self._db.fetchrow(
            sql,
            session.session_id,
            session.teacher_id,
            session.learner_id,
            session.teacher_name,
            session.learner_name,
            session.skill_id,
            session.skill_name,
            session.mode,
            session.learner_skill,
            session.status,
            session.scheduled_at,
            session.completed_at,
            session.created_at,
        )
        return _row_to_session(row)

    async def get_by_id(self, session_id: str) -> Session | None:
        row = await self._db.fetchrow(
            "SELECT * FROM sessions WHERE session_id = $1", session_id,
        )
        return _row_to_session(row) if row else None

    async def update_schedule(
        self, session_id: str, scheduled_at: datetime
    ) -> Session | None:
        row = await self._db.fetchrow(
            """
            UPDATE sessions SET scheduled_at = $2
            WHERE session_id = $1
            RETURNING *
            """,
            session_id,
            scheduled_at,
        )
        return _row_to_session(row) if row else None

    async def mark_completed(
        self, session_id: str, completed_at: datetime
    ) -> Session | None:
        row = await self._db.fetchrow(
            """
            UPDATE sessions SET status = 'completed', completed_at = $2
            WHERE session_id = $1
            RETURNING *
            """,
            session_id,
            completed_at,
        )
        return _row_to_session(row) if row else None

    async def list_completed_for_skill(self, skill_id: str) -> list[Session]:
        """All completed sessions for a skill, regardless of participants."""
        rows = await self._db.fetch(
            "SELECT * FROM sessions WHERE skill_id = $1 AND status = 'completed'",
            skill_id,
        )
        return [_row_to_session(row) for row in rows]

    async def list_completed_by_role(
        self, user_id: str, role: str
    ) -> list[Session]:
        """Completed sessions where the user held the given role."""
        column = _role_column(role)
        rows = await self._db.fetch(
            f"SELECT * FROM sessions WHERE {column} = $1 AND status = 'completed'",
            user_id,
        )
        return [_row_to_session(row) for row in rows]

    async def count_completed_by_role(self, user_id: str, role: str) -> int:
        column = _role_column(role)
        count = await self._db.fetchval(
            f"SELECT COUNT(*) FROM sessions WHERE {column} = $1 AND status = 'completed'",
            user_id,
        )
        return count or 0

    async def list_upcoming_by_role(
        self, user_id: str, role: str, limit: int = 5
    ) -> list[Session]:
        """Scheduled sessions for the user in a role, soonest first."""
        column = _role_column(role)
        rows = await self._db.fetch(
            f"""
            SELECT * FROM sessions
            WHERE {column} = $1 AND status = 'scheduled'
            ORDER BY scheduled_at ASC NULLS LAST
            LIMIT $2
            """,
            user_id,
            limit,
        )
        return [_row_to_session(row) for row in rows]
