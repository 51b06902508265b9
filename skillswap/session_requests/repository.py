"""Session request repository.

Every status change is a conditional UPDATE on the expected current
state, so two concurrent accepts or confirms cannot both succeed.
"""

import logging
from datetime import datetime
from typing import Any

from skillswap.session_requests.schemas import SessionRequest
from skillswap.storage.database import Database

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS session_requests (
    request_id      TEXT PRIMARY KEY,
    from_user_id    TEXT NOT NULL,
    from_user_name  TEXT NOT NULL DEFAULT '',
    to_user_id      TEXT NOT NULL,
    to_user_name    TEXT NOT NULL DEFAULT '',
    skill_id        TEXT NOT NULL,
    skill_name      TEXT NOT NULL,
    message         TEXT NOT NULL DEFAULT '',
    status          TEXT NOT NULL DEFAULT 'pending',
    mode            TEXT,
    learner_skill   TEXT,
    confirmed       BOOLEAN NOT NULL DEFAULT FALSE,
    confirmed_by    TEXT,
    session_id      TEXT,
    created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    accepted_at     TIMESTAMPTZ,
    confirmed_at    TIMESTAMPTZ,
    CHECK (from_user_id <> to_user_id)
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_session_requests_one_pending
    ON session_requests(from_user_id, to_user_id, skill_id)
    WHERE status = 'pending';
CREATE INDEX IF NOT EXISTS idx_session_requests_to_status
    ON session_requests(to_user_id, status);
CREATE INDEX IF NOT EXISTS idx_session_requests_from_status
    ON session_requests(from_user_id, status);
"""


def _row_to_request(row: Any) -> SessionRequest:
    """Convert an asyncpg Record to a SessionRequest."""
    return SessionRequest(
        request_id=row["request_id"],
        from_user_id=row["from_user_id"],
        from_user_name=row.get("from_user_name") or "",
        to_user_id=row["to_user_id"],
        to_user_name=row.get("to_user_name") or "",
        skill_id=row["skill_id"],
        skill_name=row["skill_name"],
        message=row.get("message") or "",
        status=row["status"],
        mode=row.get("mode"),
        learner_skill=row.get("learner_skill"),
        confirmed=bool(row.get("confirmed")),
        confirmed_by=row.get("confirmed_by"),
        session_id=row.get("session_id"),
        created_at=row["created_at"],
        accepted_at=row.get("accepted_at"),
        confirmed_at=row.get("confirmed_at"),
    )


class SessionRequestRepository:
    """Persistence for the ``session_requests`` table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_table(self) -> None:
        """Create the session_requests table and indexes (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("Session requests table ensured")

    async def create(self, request: SessionRequest) -> SessionRequest:
        sql = """
            INSERT INTO session_requests (
                request_id, from_user_id, from_user_name, to_user_id,
                to_user_name, skill_id, skill_name, message, status, created_at
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
            RETURNING *
        """
        row = await self._db.fetchrow(
            sql,
            request.request_id,
            request.from_user_id,
            request.from_user_name,
            request.to_user_id,
            request.to_user_name,
            request.skill_id,
            request.skill_name,
            request.message,
            request.status,
            request.created_at,
        )
        return _row_to_request(row)

    async def get_by_id(self, request_id: str) -> SessionRequest | None:
        row = await self._db.fetchrow(
            "SELECT * FROM session_requests WHERE request_id = $1", request_id,
        )
        return _row_to_request(row) if row else None

    async def find_pending(
        self, from_user_id: str, to_user_id: str, skill_id: str
    ) -> SessionRequest | None:
        row = await self._db.fetchrow(
            """
            SELECT * FROM session_requests
            WHERE from_user_id = $1 AND to_user_id = $2 AND skill_id = $3
              AND status = 'pending'
            """,
            from_user_id,
            to_user_id,
            skill_id,
        )
        return _row_to_request(row) if row else None

    async def list_pending(self, user_id: str, direction: str) -> list[SessionRequest]:
        """Pending requests sent to (``incoming``) or by (``outgoing``) a
        user, newest first."""
        if direction == "incoming":
            column = "to_user_id"
        elif direction == "outgoing":
            column = "from_user_id"
        else:
            raise ValueError(
                f"Invalid direction {direction!r}. Must be 'incoming' or 'outgoing'"
            )
        rows = await self._db.fetch(
            f"""
            SELECT * FROM session_requests
            WHERE {column} = $1 AND status = 'pending'
            ORDER BY created_at DESC
            """,
            user_id,
        )
        return [_row_to_request(row) for row in rows]

    async def mark_accepted(
        self, request_id: str, accepted_at: datetime
    ) -> SessionRequest | None:
        """pending -> accepted. None when the request was no longer pending."""
        row = await self._db.fetchrow(
            """
            UPDATE session_requests
            SET status = 'accepted', accepted_at = $2
            WHERE request_id = $1 AND status = 'pending'
            RETURNING *
            """,
            request_id,
            accepted_at,
        )
        return _row_to_request(row) if row else None

    async def mark_rejected(self, request_id: str) -> SessionRequest | None:
        """pending -> rejected. None when the request was no longer pending."""
        row = await self._db.fetchrow(
            """
            UPDATE session_requests
            SET status = 'rejected'
            WHERE request_id = $1 AND status = 'pending'
            RETURNING *
            """,
            request_id,
        )
        return _row_to_request(row) if row else None

    async def claim_confirmation(
        self,
        request_id: str,
        confirmed_by: str,
        mode: str,
        learner_skill: str | None,
        confirmed_at: datetime,
    ) -> SessionRequest | None:
        """Mark an accepted request confirmed.

        Returns None when it is not accepted or another confirmation won.
        """
        row = await self._db.fetchrow(
            """
            UPDATE session_requests
            SET confirmed = TRUE, confirmed_by = $2, mode = $3,
                learner_skill = $4, confirmed_at = $5
            WHERE request_id = $1 AND status = 'accepted' AND confirmed = FALSE
            RETURNING *
            """,
            request_id,
            confirmed_by,
            mode,
            learner_skill,
            confirmed_at,
        )
        return _row_to_request(row) if row else None

    async def release_confirmation(self, request_id: str) -> None:
        """Undo a claim whose session could not be created."""
        await self._db.execute(
            """
            UPDATE session_requests
            SET confirmed = FALSE, confirmed_by = NULL, mode = NULL,
                learner_skill = NULL, confirmed_at = NULL
            WHERE request_id = $1 AND session_id IS NULL
            """,
            request_id,
        )

    async def link_session(self, request_id: str, session_id: str) -> SessionRequest | None:
        row = await self._db.fetchrow(
            """
            UPDATE session_requests SET session_id = $2
            WHERE request_id = $1
            RETURNING *
            """,
            request_id,
            session_id,
        )
        return _row_to_request(row) if row else None

    async def delete_pending(self, request_id: str) -> bool:
        """Delete a still-pending request; False when nothing was deleted."""
        status = await self._db.execute(
            "DELETE FROM session_requests WHERE request_id = $1 AND status = 'pending'",
            request_id,
        )
        return not status.endswith(" 0")
