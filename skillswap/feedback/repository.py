"""Feedback repository for session ratings.

Provides storage and the recipient-scoped reads used by the skill
score calculator and the credibility aggregator.
"""

import logging
from typing import Any

from skillswap.feedback.schemas import Feedback
from skillswap.storage.database import Database

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS feedback (
    feedback_id   TEXT PRIMARY KEY,
    session_id    TEXT NOT NULL,
    from_user_id  TEXT NOT NULL,
    to_user_id    TEXT NOT NULL,
    role          TEXT NOT NULL CHECK (role IN ('teacher', 'learner')),
    rating        INTEGER NOT NULL CHECK (rating BETWEEN 1 AND 5),
    comment       TEXT NOT NULL DEFAULT '',
    created_at    TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    UNIQUE (session_id, from_user_id)
);

CREATE INDEX IF NOT EXISTS idx_feedback_to_user
    ON feedback(to_user_id);
CREATE INDEX IF NOT EXISTS idx_feedback_session
    ON feedback(session_id);
"""


class FeedbackRepository:
    """Repository for feedback persistence and querying."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_table(self) -> None:
        """Create the feedback table and indexes (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("Feedback table ensured")

    async def create(self, feedback: Feedback) -> Feedback:
        """Insert a new feedback record.

        Args:
            feedback: Feedback to persist.

        Returns:
            The created Feedback with DB-assigned defaults.
        """
        sql = """
            INSERT INTO feedback (
                feedback_id, session_id, from_user_id, to_user_id,
                role, rating, comment, created_at
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
            RETURNING *
        """
        row = await self._db.fetchrow(
            sql,
            feedback.feedback_id,
            feedback.session_id,
            feedback.from_user_id,
            feedback.to_user_id,
            feedback.role,
            feedback.rating,
            feedback.comment,
            feedback.created_at,
        )
        return _row_to_feedback(row)

    async def list_for_recipient(self, user_id: str) -> list[Feedback]:
        """All feedback addressed to a user."""
        rows = await self._db.fetch(
            "SELECT * FROM feedback WHERE to_user_id = $1", user_id,
        )
        return [_row_to_feedback(row) for row in rows]

    async def list_for_recipient_by_role(
        self, user_id: str, role: str
    ) -> list[Feedback]:
        """Feedback addressed to a user where the giver held ``role``."""
        rows = await self._db.fetch(
            "SELECT * FROM feedback WHERE to_user_id = $1 AND role = $2",
            user_id,
            role,
        )
        return [_row_to_feedback(row) for row in rows]

    async def list_for_session(self, session_id: str) -> list[Feedback]:
        rows = await self._db.fetch(
            "SELECT * FROM feedback WHERE session_id = $1 ORDER BY created_at",
            session_id,
        )
        return [_row_to_feedback(row) for row in rows]

    async def exists_from_user(self, session_id: str, user_id: str) -> bool:
        """Whether the user already rated this session."""
        found = await self._db.fetchval(
            """
            SELECT EXISTS (
                SELECT 1 FROM feedback WHERE session_id = $1 AND from_user_id = $2
            )
            """,
            session_id,
            user_id,
        )
        return bool(found)


def _row_to_feedback(row: Any) -> Feedback:
    """Convert an asyncpg Record to a Feedback."""
    return Feedback(
        feedback_id=row["feedback_id"],
        session_id=row["session_id"],
        from_user_id=row["from_user_id"],
        to_user_id=row["to_user_id"],
        role=row["role"],
        rating=row["rating"],
        comment=row.get("comment") or "",
        created_at=row["created_at"],
    )
