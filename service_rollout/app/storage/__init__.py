"""
Storage package.

Key-value store adapters the engine persists feature records into. Any
object exposing `get(key)`, `set(key, value)` and `delete(key)` with
string values works; a `redis.Redis` client created with
`decode_responses=True` qualifies as-is.
"""

from .base import KeyValueStore
from .memory import InMemoryStore
from .redis_store import RedisStore

__all__ = ["KeyValueStore", "InMemoryStore", "RedisStore"]
