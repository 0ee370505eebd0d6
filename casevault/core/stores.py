"""
Key-value stores with per-entry TTL.

The sync debounce cache and the request rate limit counters live behind
this interface so a single process can use the in-memory store while
multi-instance deployments share state through Redis.

Dependencies: redis (redis.asyncio) for the shared backend
System role: Process-local or shared TTL state for ingestion and throttling
"""

import json
import logging
from collections import OrderedDict
from typing import Any, Protocol

import redis.asyncio as redis_asyncio

from casevault.core.scheduling import Clock, SystemClock

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Async JSON-value store with expiry."""

    async def get(self, key: str) -> dict[str, Any] | None: ...

    async def set(self, key: str, value: dict[str, Any], ttl_seconds: int) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def incr(self, key: str, ttl_seconds: int) -> tuple[int, float]:
        """Increment a counter, starting its TTL on first use; returns (count, seconds left)."""
        ...


class InMemoryKeyValueStore:
    """In-process store with TTL expiry and a size cap (oldest evicted first)."""

    def __init__(self, clock: Clock | None = None, max_size: int = 10_000) -> None:
        self._clock = clock or SystemClock()
        self.max_size = max_size
        self._data: OrderedDict[str, tuple[dict[str, Any], float]] = OrderedDict()

    async def get(self, key: str) -> dict[str, Any] | None:
        item = self._data.get(key)
        if item is None:
            return None

        value, expiry = item
        if self._clock.now() >= expiry:
            del self._data[key]
            return None

        self._data.move_to_end(key)
        return dict(value)

    async def set(self, key: str, value: dict[str, Any], ttl_seconds: int) -> None:
        expiry = self._clock.now() + ttl_seconds
        if key in self._data:
            self._data.move_to_end(key)
        elif len(self._data) >= self.max_size:
            self._data.popitem(last=False)
        self._data[key] = (dict(value), expiry)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def incr(self, key: str, ttl_seconds: int) -> tuple[int, float]:
        now = self._clock.now()
        item = self._data.get(key)
        if item is None or now >= item[1]:
            await self.set(key, {"count": 1}, ttl_seconds)
            return 1, float(ttl_seconds)

        value, expiry = item
        count = int(value.get("count", 0)) + 1
        self._data[key] = ({"count": count}, expiry)
        self._data.move_to_end(key)
        return count, expiry - now

    async def close(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)


class RedisKeyValueStore:
    """
    Redis-backed store. Values are JSON encoded and expire via ``SET ... EX``.

    Args:
        redis_client: ``redis.asyncio.Redis`` instance
        key_prefix: Namespace prepended to every key
    """

    def __init__(self, redis_client: Any, key_prefix: str = "casevault") -> None:
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}:{key}"

    async def get(self, key: str) -> dict[str, Any] | None:
        raw = await self.redis.get(self._key(key))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Discarding undecodable cache entry", extra={"key": key})
            await self.delete(key)
            return None

    async def set(self, key: str, value: dict[str, Any], ttl_seconds: int) -> None:
        await self.redis.set(self._key(key), json.dumps(value), ex=ttl_seconds)

    async def delete(self, key: str) -> None:
        await self.redis.delete(self._key(key))

    async def incr(self, key: str, ttl_seconds: int) -> tuple[int, float]:
        """
        ``INCR`` the counter and ``EXPIRE`` it when the increment created it.

        A counter left without expiry (negative ``TTL``) gets one re-applied.
        """
        name = self._key(key)
        count = int(await self.redis.incr(name))
        if count == 1:
            await self.redis.expire(name, ttl_seconds)
            return count, float(ttl_seconds)

        ttl = await self.redis.ttl(name)
        if ttl is None or ttl < 0:
            await self.redis.expire(name, ttl_seconds)
            ttl = ttl_seconds
        return count, float(ttl)

    async def close(self) -> None:
        await self.redis.aclose()


def create_key_value_store(
    backend: str,
    redis_url: str = "",
    key_prefix: str = "casevault",
) -> InMemoryKeyValueStore | RedisKeyValueStore:
    """
    Build the configured store.

    Args:
        backend: "memory" or "redis"
        redis_url: Connection URL, required for the redis backend
        key_prefix: Key namespace for the redis backend

    Returns:
        Store instance

    Raises:
        ValueError: If the backend name is unknown or redis_url is missing
    """
    if backend == "memory":
        return InMemoryKeyValueStore()
    if backend == "redis":
        if not redis_url:
            raise ValueError("CACHE_REDIS_URL is required when CACHE_BACKEND=redis")
        client = redis_asyncio.from_url(redis_url, decode_responses=True)
        logger.info("Using Redis key-value store", extra={"key_prefix": key_prefix})
        return RedisKeyValueStore(client, key_prefix=key_prefix)
    raise ValueError(f"Unknown cache backend: {backend}")
