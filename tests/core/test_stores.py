"""
Test suite for the TTL key-value stores.

Tests expiry and eviction of the in-memory store and the JSON encoding
of the Redis store (against an AsyncMock redis client).

System role: Verification of sync debounce state storage
"""

import json
from unittest.mock import AsyncMock

import pytest

from casevault.core.stores import (
    InMemoryKeyValueStore,
    RedisKeyValueStore,
    create_key_value_store,
)


class TestInMemoryKeyValueStore:
    """Test suite for InMemoryKeyValueStore."""

    @pytest.mark.asyncio
    async def test_get_should_return_stored_value(self, manual_clock) -> None:
        store = InMemoryKeyValueStore(clock=manual_clock)

        await store.set("sync:a", {"last_sync": 1.0}, ttl_seconds=60)

        assert await store.get("sync:a") == {"last_sync": 1.0}

    @pytest.mark.asyncio
    async def test_get_should_expire_after_ttl(self, manual_clock) -> None:
        """Test entries disappear once their TTL has elapsed."""
        # Arrange
        store = InMemoryKeyValueStore(clock=manual_clock)
        await store.set("sync:a", {"last_sync": 1.0}, ttl_seconds=60)

        # Act
        manual_clock.advance(59)
        before = await store.get("sync:a")
        manual_clock.advance(1)
        after = await store.get("sync:a")

        # Assert
        assert before is not None
        assert after is None
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_set_should_evict_oldest_when_full(self, manual_clock) -> None:
        # Arrange
        store = InMemoryKeyValueStore(clock=manual_clock, max_size=2)
        await store.set("a", {"v": 1}, ttl_seconds=60)
        await store.set("b", {"v": 2}, ttl_seconds=60)
        await store.get("a")

        # Act
        await store.set("c", {"v": 3}, ttl_seconds=60)

        # Assert
        assert await store.get("b") is None
        assert await store.get("a") == {"v": 1}
        assert await store.get("c") == {"v": 3}

    @pytest.mark.asyncio
    async def test_returned_value_should_be_a_copy(self, manual_clock) -> None:
        store = InMemoryKeyValueStore(clock=manual_clock)
        await store.set("a", {"v": 1}, ttl_seconds=60)

        value = await store.get("a")
        value["v"] = 99

        assert await store.get("a") == {"v": 1}

    @pytest.mark.asyncio
    async def test_delete_should_ignore_missing_key(self, manual_clock) -> None:
        store = InMemoryKeyValueStore(clock=manual_clock)

        await store.delete("missing")

        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_incr_should_count_within_ttl(self, manual_clock) -> None:
        store = InMemoryKeyValueStore(clock=manual_clock)

        first = await store.incr("ratelimit:ip", ttl_seconds=60)
        manual_clock.advance(15)
        second = await store.incr("ratelimit:ip", ttl_seconds=60)

        assert first == (1, 60.0)
        assert second == (2, 45.0)

    @pytest.mark.asyncio
    async def test_incr_should_restart_after_expiry(self, manual_clock) -> None:
        store = InMemoryKeyValueStore(clock=manual_clock)
        await store.incr("ratelimit:ip", ttl_seconds=60)
        await store.incr("ratelimit:ip", ttl_seconds=60)

        manual_clock.advance(60)

        assert await store.incr("ratelimit:ip", ttl_seconds=60) == (1, 60.0)


class TestRedisKeyValueStore:
    """Test suite for RedisKeyValueStore."""

    @pytest.fixture
    def redis_client(self) -> AsyncMock:
        """Provide mock redis.asyncio client."""
        return AsyncMock()

    @pytest.mark.asyncio
    async def test_set_should_write_prefixed_json_with_expiry(self, redis_client) -> None:
        store = RedisKeyValueStore(redis_client, key_prefix="cv")

        await store.set("sync:abc", {"last_sync": 5.0, "had_processing": True}, ttl_seconds=60)

        redis_client.set.assert_awaited_once()
        args, kwargs = redis_client.set.call_args
        assert args[0] == "cv:sync:abc"
        assert json.loads(args[1]) == {"last_sync": 5.0, "had_processing": True}
        assert kwargs == {"ex": 60}

    @pytest.mark.asyncio
    async def test_get_should_decode_json(self, redis_client) -> None:
        redis_client.get.return_value = '{"last_sync": 5.0}'
        store = RedisKeyValueStore(redis_client, key_prefix="cv")

        assert await store.get("sync:abc") == {"last_sync": 5.0}
        redis_client.get.assert_awaited_once_with("cv:sync:abc")

    @pytest.mark.asyncio
    async def test_get_should_drop_undecodable_entry(self, redis_client) -> None:
        """Test a corrupt entry is deleted and treated as missing."""
        redis_client.get.return_value = "not-json"
        store = RedisKeyValueStore(redis_client, key_prefix="cv")

        result = await store.get("sync:abc")

        assert result is None
        redis_client.delete.assert_awaited_once_with("cv:sync:abc")

    @pytest.mark.asyncio
    async def test_get_should_return_none_for_missing_key(self, redis_client) -> None:
        redis_client.get.return_value = None
        store = RedisKeyValueStore(redis_client)

        assert await store.get("nope") is None

    @pytest.mark.asyncio
    async def test_incr_should_set_expiry_on_first_increment(self, redis_client) -> None:
        redis_client.incr.return_value = 1
        store = RedisKeyValueStore(redis_client, key_prefix="cv")

        result = await store.incr("ratelimit:ip", ttl_seconds=60)

        assert result == (1, 60.0)
        redis_client.incr.assert_awaited_once_with("cv:ratelimit:ip")
        redis_client.expire.assert_awaited_once_with("cv:ratelimit:ip", 60)
        redis_client.ttl.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_incr_should_read_remaining_ttl(self, redis_client) -> None:
        redis_client.incr.return_value = 3
        redis_client.ttl.return_value = 42
        store = RedisKeyValueStore(redis_client, key_prefix="cv")

        result = await store.incr("ratelimit:ip", ttl_seconds=60)

        assert result == (3, 42.0)
        redis_client.expire.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_incr_should_repair_counter_without_expiry(self, redis_client) -> None:
        """Test a counter whose EXPIRE was lost gets the window re-applied."""
        redis_client.incr.return_value = 5
        redis_client.ttl.return_value = -1
        store = RedisKeyValueStore(redis_client, key_prefix="cv")

        result = await store.incr("ratelimit:ip", ttl_seconds=60)

        assert result == (5, 60.0)
        redis_client.expire.assert_awaited_once_with("cv:ratelimit:ip", 60)


class TestCreateKeyValueStore:
    def test_memory_backend(self) -> None:
        assert isinstance(create_key_value_store("memory"), InMemoryKeyValueStore)

    def test_redis_backend_requires_url(self) -> None:
        with pytest.raises(ValueError):
            create_key_value_store("redis", redis_url="")

    def test_unknown_backend(self) -> None:
        with pytest.raises(ValueError):
            create_key_value_store("memcached")
