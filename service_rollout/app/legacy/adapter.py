"""
Legacy feature layout reader.

The legacy layout spreads a feature across several Redis keys:

- `feature:<name>:percentage`: integer string
- `feature:<name>:groups`: set of group names
- `feature:<name>:users`: set of user ids
- `feature:__global__`: set of globally enabled feature names
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, List, Set

import redis

from shared.logging import get_logger
from ..rules.codec import parse_int


@dataclass
class LegacyInfo:
    """A feature's state as recorded by the legacy layout."""
    percentage: int = 0
    global_features: Set[str] = field(default_factory=set)
    groups: List[str] = field(default_factory=list)
    users: List[str] = field(default_factory=list)


class LegacyInfoSource(ABC):
    """Abstract source of legacy feature state."""

    @abstractmethod
    def info(self, name: str) -> LegacyInfo:
        """Get the legacy state of a feature."""
        pass


def _as_text(values: Iterable) -> List[str]:
    return sorted(
        value.decode("utf-8") if isinstance(value, bytes) else str(value)
        for value in values
    )


class RedisLegacyStore(LegacyInfoSource):
    """Read legacy feature state from Redis."""

    GLOBAL_KEY = "feature:__global__"

    def __init__(self, client: redis.Redis):
        self.redis = client
        self.logger = get_logger("rollout.legacy")

    @classmethod
    def from_url(cls, redis_url: str) -> "RedisLegacyStore":
        return cls(redis.from_url(redis_url, encoding="utf-8", decode_responses=True))

    def info(self, name: str) -> LegacyInfo:
        raw_percentage = self.redis.get(self._key(name, "percentage"))
        if isinstance(raw_percentage, bytes):
            raw_percentage = raw_percentage.decode("utf-8")

        info = LegacyInfo(
            percentage=parse_int(raw_percentage),
            global_features=set(_as_text(self.redis.smembers(self.GLOBAL_KEY))),
            groups=_as_text(self.redis.smembers(self._key(name, "groups"))),
            users=_as_text(self.redis.smembers(self._key(name, "users"))),
        )
        self.logger.debug("Legacy feature read", feature=name, percentage=info.percentage)
        return info

    @staticmethod
    def _key(name: str, suffix: str) -> str:
        return f"feature:{name}:{suffix}"
