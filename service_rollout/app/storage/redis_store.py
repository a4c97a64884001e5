"""
Redis-backed key-value store.
"""

from typing import Optional

import redis

from shared.logging import get_logger
from shared.errors import StoreConnectionError
from .base import KeyValueStore


class RedisStore(KeyValueStore):
    """Store feature records in Redis.

    Errors raised by individual reads and writes are not caught; they
    reach the caller unchanged.
    """

    def __init__(self, redis_url: Optional[str] = None, client: Optional[redis.Redis] = None):
        self.redis_url = redis_url
        self.logger = get_logger("rollout.storage.redis")
        self.redis: Optional[redis.Redis] = client

    @classmethod
    def from_url(cls, redis_url: str) -> "RedisStore":
        store = cls(redis_url=redis_url)
        store.start()
        return store

    def start(self) -> None:
        """Connect to Redis and verify the connection."""
        try:
            if self.redis is None:
                self.redis = redis.from_url(
                    self.redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                    socket_connect_timeout=5,
                    socket_timeout=5,
                    retry_on_timeout=True,
                    health_check_interval=30
                )

            self.redis.ping()

            self.logger.info("Redis store started")

        except redis.RedisError as e:
            self.logger.error("Failed to start Redis store", error=str(e))
            raise StoreConnectionError("redis", str(e))

    def stop(self) -> None:
        """Close the Redis connection."""
        if self.redis is not None:
            self.redis.close()
            self.logger.info("Redis store stopped")

    def get(self, key: str) -> Optional[str]:
        value = self._client().get(key)
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def set(self, key: str, value: str) -> None:
        self._client().set(key, value)

    def delete(self, key: str) -> None:
        self._client().delete(key)

    def health_check(self) -> bool:
        """Check Redis health."""
        try:
            return bool(self._client().ping())
        except (redis.RedisError, StoreConnectionError):
            return False

    def _client(self) -> redis.Redis:
        if self.redis is None:
            raise StoreConnectionError("redis", "Store not started")
        return self.redis
