"""Caches for generated assignment questions.

The question generator receives a cache object instead of holding
module-level state, so each process (and each test) owns its cache
explicitly. Keys are normalized skill names: case-insensitive with
surrounding and repeated whitespace collapsed, so "  Guitar ", "guitar"
and "GUITAR" share one entry.

Implementations:
- MemoryQuestionCache: per-process TTL + LRU cache
- RedisQuestionCache: shared cache using SETEX with a key prefix
- NullQuestionCache: disables caching
"""

import json
import logging
import time
from collections import OrderedDict
from typing import Any, Protocol

logger = logging.getLogger(__name__)


def normalize_skill_key(skill_name: str) -> str:
    """Normalize a skill name into a cache key."""
    return " ".join(skill_name.split()).lower()


class QuestionCache(Protocol):
    """Async cache of question texts keyed by skill name."""

    async def get(self, skill_name: str) -> list[str] | None: ...

    async def set(self, skill_name: str, questions: list[str]) -> None: ...

    async def clear(self) -> None: ...


class NullQuestionCache:
    """Cache that never stores anything."""

    async def get(self, skill_name: str) -> list[str] | None:
        return None

    async def set(self, skill_name: str, questions: list[str]) -> None:
        return None

    async def clear(self) -> None:
        return None


class MemoryQuestionCache:
    """In-process cache with per-entry TTL and LRU eviction.

    Args:
        ttl_seconds: Entry lifetime. 0 keeps entries until evicted.
        max_entries: Capacity; the least recently used entry is evicted
            when a new key would exceed it.
    """

    def __init__(self, ttl_seconds: int = 86400, max_entries: int = 512) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._entries: OrderedDict[str, tuple[float, list[str]]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def _expired(self, stored_at: float) -> bool:
        return self._ttl > 0 and (time.monotonic() - stored_at) >= self._ttl

    async def get(self, skill_name: str) -> list[str] | None:
        key = normalize_skill_key(skill_name)
        entry = self._entries.get(key)
        if entry is None:
            return None

        stored_at, questions = entry
        if self._expired(stored_at):
            del self._entries[key]
            return None

        self._entries.move_to_end(key)
        return list(questions)

    async def set(self, skill_name: str, questions: list[str]) -> None:
        key = normalize_skill_key(skill_name)
        self._entries[key] = (time.monotonic(), list(questions))
        self._entries.move_to_end(key)
        while len(self._entries) > self._max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Question cache evicted %r", evicted)

    async def clear(self) -> None:
        self._entries.clear()


class RedisQuestionCache:
    """Question cache shared across processes through Redis.

    Redis failures degrade to cache misses; generation still proceeds.
    """

    def __init__(
        self,
        redis_client: Any,
        ttl_seconds: int = 86400,
        key_prefix: str = "questions:",
    ) -> None:
        self._redis = redis_client
        self._ttl = ttl_seconds
        self._prefix = key_prefix

    def _make_key(self, skill_name: str) -> str:
        return f"{self._prefix}{normalize_skill_key(skill_name)}"

    async def get(self, skill_name: str) -> list[str] | None:
        key = self._make_key(skill_name)
        try:
            cached = await self._redis.get(key)
        except Exception as e:
            logger.warning("Question cache retrieval failed: %s", e)
            return None
        if not cached:
            return None
        return json.loads(cached)

    async def set(self, skill_name: str, questions: list[str]) -> None:
        key = self._make_key(skill_name)
        try:
            if self._ttl > 0:
                await self._redis.setex(key, self._ttl, json.dumps(questions))
            else:
                await self._redis.set(key, json.dumps(questions))
        except Exception as e:
            logger.warning("Question cache storage failed: %s", e)

    async def clear(self) -> None:
        try:
            async for key in self._redis.scan_iter(match=f"{self._prefix}*"):
                await self._redis.delete(key)
        except Exception as e:
            logger.warning("Question cache clear failed: %s", e)


def build_question_cache(config: Any, redis_client: Any = None) -> QuestionCache:
    """Create the cache selected by ``AssignmentConfig.cache_backend``.

    The redis backend needs a client; without one it degrades to memory.
    """
    if config.cache_backend == "none":
        return NullQuestionCache()
    if config.cache_backend == "redis":
        if redis_client is not None:
            return RedisQuestionCache(
                redis_client,
                ttl_seconds=config.cache_ttl_seconds,
                key_prefix=config.cache_key_prefix,
            )
        logger.warning("Redis question cache requested without a client, using memory")
    return MemoryQuestionCache(
        ttl_seconds=config.cache_ttl_seconds,
        max_entries=config.cache_max_entries,
    )
