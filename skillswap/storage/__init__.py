"""PostgreSQL access through an asyncpg connection pool."""

from skillswap.storage.database import Database, close_database, get_database

__all__ = ["Database", "close_database", "get_database"]
