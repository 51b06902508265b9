"""Assignment repository: creation, submission and grading writes, and the
graded-assignment scan used by the skill score calculator."""

import logging
from datetime import datetime
from typing import Any

from skillswap.assignments.schemas import Assignment, Question
from skillswap.storage.database import Database

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS assignments (
    assignment_id   TEXT PRIMARY KEY,
    session_id      TEXT NOT NULL,
    user_id         TEXT NOT NULL,
    skill_id        TEXT NOT NULL,
    skill_name      TEXT NOT NULL,
    questions       JSONB NOT NULL DEFAULT '[]',
    answers         JSONB NOT NULL DEFAULT '{}',
    submitted       BOOLEAN NOT NULL DEFAULT FALSE,
    submitted_at    TIMESTAMPTZ,
    graded          BOOLEAN NOT NULL DEFAULT FALSE,
    graded_by       TEXT,
    graded_at       TIMESTAMPTZ,
    scores          JSONB NOT NULL DEFAULT '{}',
    final_score     REAL CHECK (final_score BETWEEN 1 AND 5),
    grader_comment  TEXT NOT NULL DEFAULT '',
    created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    UNIQUE (session_id, user_id)
);

CREATE INDEX IF NOT EXISTS idx_assignments_user_skill
    ON assignments(user_id, skill_id) WHERE graded = TRUE;
CREATE INDEX IF NOT EXISTS idx_assignments_session
    ON assignments(session_id);
"""


def _row_to_assignment(row: Any) -> Assignment:
    """Convert an asyncpg Record to an Assignment."""
    return Assignment(
        assignment_id=row["assignment_id"],
        session_id=row["session_id"],
        user_id=row["user_id"],
        skill_id=row["skill_id"],
        skill_name=row["skill_name"],
        questions=[Question.from_dict(q) for q in (row.get("questions") or [])],
        answers=dict(row.get("answers") or {}),
        submitted=row.get("submitted", False),
        submitted_at=row.get("submitted_at"),
        graded=row.get("graded", False),
        graded_by=row.get("graded_by"),
        graded_at=row.get("graded_at"),
        scores=dict(row.get("scores") or {}),
        final_score=row.get("final_score"),
        grader_comment=row.get("grader_comment") or "",
        created_at=row["created_at"],
    )


class AssignmentRepository:
    """Persistence for the ``assignments`` table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_table(self) -> None:
        """Create the assignments table and indexes (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("Assignments table ensured")

    async def create(self, assignment: Assignment) -> Assignment:
        sql = """
            INSERT INTO assignments (
                assignment_id, session_id, user_id, skill_id, skill_name,
                questions, created_at
            ) VALUES ($1, $2, $3, $4, $5, $6, $7)
            RETURNING *
        """
        row = await self._db.fetchrow(
            sql,
            assignment.assignment_id,
            assignment.session_id,
            assignment.user_id,
            assignment.skill_id,
            assignment.skill_name,
            [q.to_dict() for q in assignment.questions],
            assignment.created_at,
        )
        return _row_to_assignment(row)

    async def get_by_id(self, assignment_id: str) -> Assignment | None:
        row = await self._db.fetchrow(
            "SELECT * FROM assignments WHERE assignment_id = $1", assignment_id,
        )
        return _row_to_assignment(row) if row else None

    async def find_for_session_user(
        self, session_id: str, user_id: str
    ) -> Assignment | None:
        row = await self._db.fetchrow(
            "SELECT * FROM assignments WHERE session_id = $1 AND user_id = $2",
            session_id,
            user_id,
        )
        return _row_to_assignment(row) if row else None

    async def list_for_user(self, user_id: str) -> list[Assignment]:
        """A user's assignments, newest first."""
        rows = await self._db.fetch(
            "SELECT * FROM assignments WHERE user_id = $1 ORDER BY created_at DESC",
            user_id,
        )
        return [_row_to_assignment(row) for row in rows]

    async def list_for_session(self, session_id: str) -> list[Assignment]:
        rows = await self._db.fetch(
            "SELECT * FROM assignments WHERE session_id = $1", session_id,
        )
        return [_row_to_assignment(row) for row in rows]

    async def list_graded(self, user_id: str, skill_id: str) -> list[Assignment]:
        """Graded assignments for one user and skill."""
        rows = await self._db.fetch(
            """
            SELECT * FROM assignments
            WHERE user_id = $1 AND skill_id = $2 AND graded = TRUE
            """,
            user_id,
            skill_id,
        )
        return [_row_to_assignment(row) for row in rows]

    async def save_submission(
        self,
        assignment_id: str,
        answers: dict[str, str],
        submitted_at: datetime,
    ) -> Assignment | None:
        row = await self._db.fetchrow(
            """
            UPDATE assignments
            SET answers = $2, submitted = TRUE, submitted_at = $3
            WHERE assignment_id = $1
            RETURNING *
            """,
            assignment_id,
            answers,
            submitted_at,
        )
        return _row_to_assignment(row) if row else None

    async def save_grade(
        self,
        assignment_id: str,
        *,
        graded_by: str,
        graded_at: datetime,
        scores: dict[str, float],
        final_score: float,
        comment: str,
    ) -> Assignment | None:
        row = await self._db.fetchrow(
            """
            UPDATE assignments
            SET graded = TRUE, graded_by = $2, graded_at = $3,
                scores = $4, final_score = $5, grader_comment = $6
            WHERE assignment_id = $1
            RETURNING *
            """,
            assignment_id,
            graded_by,
            graded_at,
            scores,
            final_score,
            comment,
        )
        return _row_to_assignment(row) if row else None
