"""Score record storage.

SkillScoreRepository owns the authoritative ``skill_scores`` table; each
write is a full-row upsert keyed by (user_id, skill_id), so the last
recomputation always wins. UserSkillScoreRepository owns the legacy
``user_skill_scores`` running-average table.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from skillswap.scoring.schemas import SkillScore, UserSkillScore
from skillswap.storage.database import Database

logger = logging.getLogger(__name__)

_CREATE_SKILL_SCORES_SQL = """
CREATE TABLE IF NOT EXISTS skill_scores (
    user_id         TEXT NOT NULL,
    skill_id        TEXT NOT NULL,
    skill_name      TEXT NOT NULL,
    assignment_avg  INTEGER NOT NULL DEFAULT 0,
    feedback_avg    INTEGER NOT NULL DEFAULT 0,
    session_count   INTEGER NOT NULL DEFAULT 0,
    final_score     INTEGER NOT NULL DEFAULT 0
        CHECK (final_score BETWEEN 0 AND 100),
    updated_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    PRIMARY KEY (user_id, skill_id)
);

CREATE INDEX IF NOT EXISTS idx_skill_scores_user
    ON skill_scores(user_id, final_score DESC);
"""

_CREATE_USER_SKILL_SCORES_SQL = """
CREATE TABLE IF NOT EXISTS user_skill_scores (
    user_id       TEXT NOT NULL,
    skill_id      TEXT NOT NULL,
    skill_name    TEXT NOT NULL,
    score         DOUBLE PRECISION NOT NULL DEFAULT 0,
    sessions      INTEGER NOT NULL DEFAULT 0,
    last_updated  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    PRIMARY KEY (user_id, skill_id)
);
"""


def _row_to_skill_score(row: Any) -> SkillScore:
    """Convert an asyncpg Record to a SkillScore."""
    return SkillScore(
        user_id=row["user_id"],
        skill_id=row["skill_id"],
        skill_name=row["skill_name"],
        assignment_avg=row["assignment_avg"],
        feedback_avg=row["feedback_avg"],
        session_count=row["session_count"],
        final_score=row["final_score"],
        updated_at=row["updated_at"],
    )


def _row_to_user_skill_score(row: Any) -> UserSkillScore:
    return UserSkillScore(
        user_id=row["user_id"],
        skill_id=row["skill_id"],
        skill_name=row["skill_name"],
        score=row["score"],
        sessions=row["sessions"],
        last_updated=row["last_updated"],
    )


class SkillScoreRepository:
    """Persistence for per-(user, skill) score snapshots."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_table(self) -> None:
        """Create the skill_scores table and index (idempotent)."""
        await self._db.execute(_CREATE_SKILL_SCORES_SQL)
        logger.info("Skill scores table ensured")

    async def upsert(self, score: SkillScore) -> SkillScore:
        """Insert or fully overwrite the record for (user_id, skill_id)."""
        sql = """
            INSERT INTO skill_scores (
                user_id, skill_id, skill_name,
                assignment_avg, feedback_avg, session_count,
                final_score, updated_at
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
            ON CONFLICT (user_id, skill_id) DO UPDATE SET
                skill_name = EXCLUDED.skill_name,
                assignment_avg = EXCLUDED.assignment_avg,
                feedback_avg = EXCLUDED.feedback_avg,
                session_count = EXCLUDED.session_count,
                final_score = EXCLUDED.final_score,
                updated_at = EXCLUDED.updated_at
            RETURNING *
        """
        row = await self._db.fetchrow(
            sql,
            score.user_id,
            score.skill_id,
            score.skill_name,
            score.assignment_avg,
            score.feedback_avg,
            score.session_count,
            score.final_score,
            score.updated_at,
        )
        return _row_to_skill_score(row)

    async def get(self, user_id: str, skill_id: str) -> SkillScore | None:
        row = await self._db.fetchrow(
            "SELECT * FROM skill_scores WHERE user_id = $1 AND skill_id = $2",
            user_id,
            skill_id,
        )
        return _row_to_skill_score(row) if row else None

    async def list_for_user(self, user_id: str) -> list[SkillScore]:
        """All of a user's skill scores, best first."""
        rows = await self._db.fetch(
            """
            SELECT * FROM skill_scores
            WHERE user_id = $1
            ORDER BY final_score DESC, skill_name
            """,
            user_id,
        )
        return [_row_to_skill_score(row) for row in rows]

    async def top_for_user(self, user_id: str, limit: int = 3) -> list[SkillScore]:
        rows = await self._db.fetch(
            """
            SELECT * FROM skill_scores
            WHERE user_id = $1
            ORDER BY final_score DESC
            LIMIT $2
            """,
            user_id,
            limit,
        )
        return [_row_to_skill_score(row) for row in rows]


class UserSkillScoreRepository:
    """Persistence for the legacy running-average scores."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_table(self) -> None:
        await self._db.execute(_CREATE_USER_SKILL_SCORES_SQL)
        logger.info("Legacy user skill scores table ensured")

    async def get(self, user_id: str, skill_id: str) -> UserSkillScore | None:
        row = await self._db.fetchrow(
            "SELECT * FROM user_skill_scores WHERE user_id = $1 AND skill_id = $2",
            user_id,
            skill_id,
        )
        return _row_to_user_skill_score(row) if row else None

    async def get_or_create(
        self, user_id: str, skill_id: str, skill_name: str
    ) -> UserSkillScore:
        """Return the existing record, or an unsaved zeroed one."""
        existing = await self.get(user_id, skill_id)
        if existing is not None:
            return existing
        return UserSkillScore(user_id=user_id, skill_id=skill_id, skill_name=skill_name)

    async def save(self, score: UserSkillScore) -> UserSkillScore:
        score.last_updated = datetime.now(timezone.utc)
        row = await self._db.fetchrow(
            """
            INSERT INTO user_skill_scores (
                user_id, skill_id, skill_name, score, sessions, last_updated
            ) VALUES ($1, $2, $3, $4, $5, $6)
            ON CONFLICT (user_id, skill_id) DO UPDATE SET
                skill_name = EXCLUDED.skill_name,
                score = EXCLUDED.score,
                sessions = EXCLUDED.sessions,
                last_updated = EXCLUDED.last_updated
            RETURNING *
            """,
            score.user_id,
            score.skill_id,
            score.skill_name,
            score.score,
            score.sessions,
            score.last_updated,
        )
        return _row_to_user_skill_score(row)

    async def list_for_user(self, user_id: str) -> list[UserSkillScore]:
        rows = await self._db.fetch(
            "SELECT * FROM user_skill_scores WHERE user_id = $1 ORDER BY score DESC",
            user_id,
        )
        return [_row_to_user_skill_score(row) for row in rows]
