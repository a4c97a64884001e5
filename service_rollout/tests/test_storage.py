"""
Unit tests for key-value store adapters.
"""

from unittest.mock import MagicMock

import fakeredis
import pytest
import redis

from shared.errors import StoreConnectionError
from service_rollout.app.storage.base import KeyValueStore
from service_rollout.app.storage.memory import InMemoryStore
from service_rollout.app.storage.redis_store import RedisStore


class TestInMemoryStore:
    """Test cases for InMemoryStore."""

    @pytest.fixture
    def store(self):
        """Create InMemoryStore instance."""
        return InMemoryStore()

    def test_get_missing(self, store):
        """Test a missing key reads as None."""
        assert store.get("feature:chat") is None

    def test_set_and_get(self, store):
        """Test values round trip."""
        store.set("feature:chat", "100|||")

        assert store.get("feature:chat") == "100|||"

    def test_delete(self, store):
        """Test deleting present and missing keys."""
        store.set("feature:chat", "100|||")
        store.delete("feature:chat")
        store.delete("feature:missing")

        assert store.get("feature:chat") is None
        assert store.keys() == []

    def test_initial_data(self):
        """Test seeding the store."""
        store = InMemoryStore({"feature:chat": "5|||"})

        assert store.get("feature:chat") == "5|||"

    def test_is_key_value_store(self, store):
        """Test the adapter implements the store contract."""
        assert isinstance(store, KeyValueStore)


class TestRedisStore:
    """Test cases for RedisStore."""

    @pytest.fixture
    def client(self):
        """Create a fake Redis client."""
        return fakeredis.FakeRedis(decode_responses=True)

    @pytest.fixture
    def store(self, client):
        """Create a started RedisStore."""
        store = RedisStore(client=client)
        store.start()
        return store

    def test_set_and_get(self, store, client):
        """Test values are written to Redis."""
        store.set("feature:chat", "50|alice||")

        assert store.get("feature:chat") == "50|alice||"
        assert client.get("feature:chat") == "50|alice||"

    def test_get_missing(self, store):
        """Test a missing key reads as None."""
        assert store.get("feature:missing") is None

    def test_get_decodes_bytes(self):
        """Test byte responses are decoded."""
        store = RedisStore(client=fakeredis.FakeRedis())
        store.set("feature:chat", "100|||")

        assert store.get("feature:chat") == "100|||"

    def test_delete(self, store):
        """Test deleting a key."""
        store.set("feature:chat", "100|||")
        store.delete("feature:chat")

        assert store.get("feature:chat") is None

    def test_health_check(self, store):
        """Test a reachable Redis is healthy."""
        assert store.health_check() is True

    def test_start_failure(self):
        """Test connection failures raise StoreConnectionError."""
        client = MagicMock()
        client.ping.side_effect = redis.ConnectionError("refused")
        store = RedisStore(client=client)

        with pytest.raises(StoreConnectionError) as exc_info:
            store.start()

        assert exc_info.value.code == "STORE_CONNECTION_ERROR"
        assert "refused" in exc_info.value.message

    def test_unhealthy(self):
        """Test an unreachable Redis is unhealthy."""
        client = MagicMock()
        client.ping.side_effect = redis.ConnectionError("refused")

        assert RedisStore(client=client).health_check() is False

    def test_not_started(self):
        """Test using the store before start raises."""
        store = RedisStore("redis://localhost:6379/0")

        with pytest.raises(StoreConnectionError):
            store.get("feature:chat")
        assert store.health_check() is False

    def test_operation_errors_propagate(self):
        """Test errors from individual commands are not wrapped."""
        client = MagicMock()
        client.set.side_effect = redis.TimeoutError("slow")
        store = RedisStore(client=client)

        with pytest.raises(redis.TimeoutError):
            store.set("feature:chat", "100|||")

    def test_stop(self):
        """Test stopping closes the client."""
        client = MagicMock()
        store = RedisStore(client=client)

        store.stop()

        client.close.assert_called_once()
