"""
asyncpg pool shared by every repository.

Repositories only need four calls (execute, fetch, fetchrow, fetchval);
each borrows a pooled connection for the length of one statement.
JSONB columns (credibility stats, assignment questions and answers) come
back as Python objects through a codec registered on each connection.
"""

import json
import logging
from types import TracebackType
from typing import Any

import asyncpg

from skillswap.config.settings import get_settings
from skillswap.errors import UnexpectedError

logger = logging.getLogger(__name__)


async def _register_jsonb(conn: asyncpg.Connection) -> None:
    await conn.set_type_codec(
        "jsonb",
        encoder=json.dumps,
        decoder=json.loads,
        schema="pg_catalog",
    )


class Database:
    """
    Connection pool wrapper handed to repositories as ``db``.

    Usage:
        async with Database() as db:
            users = UserRepository(db)
            user = await users.get_by_id("u1")
    """

    def __init__(
        self,
        database_url: str | None = None,
        min_size: int | None = None,
        max_size: int | None = None,
        command_timeout: float | None = None,
    ):
        settings = get_settings()

        self._database_url = database_url or str(settings.database_url)
        self._min_size = min_size or settings.db_pool_min_size
        self._max_size = max_size or settings.db_pool_max_size
        self._command_timeout = command_timeout or settings.db_command_timeout

        self._pool: asyncpg.Pool | None = None

    @property
    def connected(self) -> bool:
        return self._pool is not None

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise UnexpectedError("Database not connected. Call connect() first.")
        return self._pool

    async def connect(self) -> None:
        """Open the pool. Connection failures propagate to the caller."""
        if self._pool is not None:
            return
        try:
            self._pool = await asyncpg.create_pool(
                self._database_url,
                min_size=self._min_size,
                max_size=self._max_size,
                command_timeout=self._command_timeout,
                init=_register_jsonb,
            )
        except (OSError, asyncpg.PostgresError) as e:
            logger.error("Failed to connect to database: %s", e)
            raise
        logger.info("Database pool open (%d-%d connections)", self._min_size, self._max_size)

    async def close(self) -> None:
        if self._pool is None:
            return
        pool, self._pool = self._pool, None
        await pool.close()
        logger.info("Database pool closed")

    async def __aenter__(self) -> "Database":
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def execute(self, query: str, *args: Any) -> str:
        """Run a write; returns the status tag, e.g. ``UPDATE 1``."""
        return await self.pool.execute(query, *args)

    async def fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        return await self.pool.fetch(query, *args)

    async def fetchrow(self, query: str, *args: Any) -> asyncpg.Record | None:
        return await self.pool.fetchrow(query, *args)

    async def fetchval(self, query: str, *args: Any) -> Any:
        return await self.pool.fetchval(query, *args)

    async def health_check(self) -> bool:
        """True when ``SELECT 1`` round-trips."""
        try:
            return await self.fetchval("SELECT 1") == 1
        except Exception as e:
            logger.warning("Database health check failed: %s", e)
            return False


_database: Database | None = None


async def get_database() -> Database:
    """Process-wide Database, connected on first use."""
    global _database

    if _database is None:
        database = Database()
        await database.connect()
        _database = database

    return _database


async def close_database() -> None:
    global _database

    if _database is not None:
        await _database.close()
        _database = None
