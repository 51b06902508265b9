"""User repository for profile reads and credibility writes."""

import logging
from typing import Any

from skillswap.errors import NotFoundError
from skillswap.storage.database import Database
from skillswap.users.schemas import CredibilityStats, SkillListing, User

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS users (
    user_id            TEXT PRIMARY KEY,
    name               TEXT NOT NULL,
    email              TEXT NOT NULL UNIQUE,
    credibility_score  INTEGER NOT NULL DEFAULT 50
        CHECK (credibility_score BETWEEN 0 AND 100),
    credibility_stats  JSONB,
    created_at         TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS user_skills (
    user_id     TEXT NOT NULL REFERENCES users(user_id),
    skill_id    TEXT NOT NULL,
    skill_name  TEXT NOT NULL,
    kind        TEXT NOT NULL CHECK (kind IN ('teach', 'learn')),
    created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    PRIMARY KEY (user_id, skill_id, kind)
);

CREATE INDEX IF NOT EXISTS idx_user_skills_user_kind
    ON user_skills(user_id, kind);
"""


def _row_to_user(row: Any) -> User:
    """Convert an asyncpg Record to a User."""
    stats = row.get("credibility_stats")
    return User(
        user_id=row["user_id"],
        name=row["name"],
        email=row["email"],
        credibility_score=row["credibility_score"],
        credibility_stats=CredibilityStats.from_dict(stats) if stats else None,
        created_at=row["created_at"],
    )


def _row_to_listing(row: Any) -> SkillListing:
    return SkillListing(
        user_id=row["user_id"],
        skill_id=row["skill_id"],
        skill_name=row["skill_name"],
        kind=row["kind"],
        created_at=row["created_at"],
    )


class UserRepository:
    """CRUD for the ``users`` and ``user_skills`` tables."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_table(self) -> None:
        """Create the users tables and indexes (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("Users tables ensured")

    async def create(self, user: User) -> User:
        """Insert a new user with the neutral default credibility."""
        sql = """
            INSERT INTO users (user_id, name, email, credibility_score, created_at)
            VALUES ($1, $2, $3, $4, $5)
            RETURNING *
        """
        row = await self._db.fetchrow(
            sql,
            user.user_id,
            user.name,
            user.email,
            user.credibility_score,
            user.created_at,
        )
        return _row_to_user(row)

    async def get_by_id(self, user_id: str) -> User | None:
        row = await self._db.fetchrow(
            "SELECT * FROM users WHERE user_id = $1", user_id,
        )
        return _row_to_user(row) if row else None

    async def update_credibility(
        self,
        user_id: str,
        score: int,
        stats: CredibilityStats,
    ) -> None:
        """Overwrite the credibility score and stats on a user.

        Raises:
            NotFoundError: If the user does not exist.
        """
        status = await self._db.execute(
            """
            UPDATE users
            SET credibility_score = $2, credibility_stats = $3
            WHERE user_id = $1
            """,
            user_id,
            score,
            stats.to_dict(),
        )
        if status.endswith(" 0"):
            raise NotFoundError(f"User {user_id} not found")

    async def get_by_email(self, email: str) -> User | None:
        row = await self._db.fetchrow(
            "SELECT * FROM users WHERE lower(email) = lower($1)", email,
        )
        return _row_to_user(row) if row else None

    async def add_skill_listing(self, listing: SkillListing) -> SkillListing:
        """List a skill the user can teach or wants to learn (upsert)."""
        row = await self._db.fetchrow(
            """
            INSERT INTO user_skills (user_id, skill_id, skill_name, kind, created_at)
            VALUES ($1, $2, $3, $4, $5)
            ON CONFLICT (user_id, skill_id, kind) DO UPDATE SET
                skill_name = EXCLUDED.skill_name
            RETURNING *
            """,
            listing.user_id,
            listing.skill_id,
            listing.skill_name,
            listing.kind,
            listing.created_at,
        )
        return _row_to_listing(row)

    async def get_skill_listing(
        self, user_id: str, skill_id: str, kind: str
    ) -> SkillListing | None:
        row = await self._db.fetchrow(
            """
            SELECT * FROM user_skills
            WHERE user_id = $1 AND skill_id = $2 AND kind = $3
            """,
            user_id,
            skill_id,
            kind,
        )
        return _row_to_listing(row) if row else None

    async def list_skills(
        self, user_id: str, kind: str | None = None
    ) -> list[SkillListing]:
        """A user's listings, optionally only one kind, by name."""
        if kind is None:
            rows = await self._db.fetch(
                "SELECT * FROM user_skills WHERE user_id = $1 ORDER BY skill_name",
                user_id,
            )
        else:
            rows = await self._db.fetch(
                """
                SELECT * FROM user_skills
                WHERE user_id = $1 AND kind = $2
                ORDER BY skill_name
                """,
                user_id,
                kind,
            )
        return [_row_to_listing(row) for row in rows]

    async def remove_skill_listing(self, user_id: str, skill_id: str, kind: str) -> bool:
        """Delete a listing; False when there was nothing to delete."""
        status = await self._db.execute(
            "DELETE FROM user_skills WHERE user_id = $1 AND skill_id = $2 AND kind = $3",
            user_id,
            skill_id,
            kind,
        )
        return not status.endswith(" 0")

    async def count_skills(self, user_id: str, kind: str) -> int:
        """Count a user's teach or learn listings."""
        count = await self._db.fetchval(
            "SELECT COUNT(*) FROM user_skills WHERE user_id = $1 AND kind = $2",
            user_id,
            kind,
        )
        return count or 0
