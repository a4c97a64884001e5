"""
Rollout engine: store-backed feature flag orchestration.
"""

import time
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional, Union

from shared.config import RolloutConfig
from shared.errors import ConfigurationError
from shared.logging import get_logger
from shared.metrics import MetricsCollector, get_metrics_collector
from .codec import decode_index, encode_index, has_reserved_characters
from .models import Feature, FeatureOptions
from .predicates import Predicate, PredicateRegistry
from ..legacy.adapter import LegacyInfoSource, RedisLegacyStore
from ..storage.base import KeyValueStore
from ..storage.redis_store import RedisStore

KEY_PREFIX = "feature:"
FEATURES_KEY = "feature:__features__"


class Rollout:
    """Feature flag engine over a key-value store.

    Every mutating call is a read-modify-write of one feature record
    followed by a rewrite of the feature index. Nothing is locked across
    that cycle: concurrent writers to the same feature race and the last
    write wins.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        registry: Optional[PredicateRegistry] = None,
        options: Optional[FeatureOptions] = None,
        legacy: Optional[LegacyInfoSource] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.store = store
        self.registry = registry or PredicateRegistry()
        self.options = options or FeatureOptions()
        self.legacy = legacy
        self.metrics = metrics
        self.logger = get_logger("rollout.engine")

    @classmethod
    def from_config(
        cls,
        config: RolloutConfig,
        *,
        registry: Optional[PredicateRegistry] = None,
        metrics: Optional[MetricsCollector] = None,
    ) -> "Rollout":
        """Build an engine on Redis as described by `config`."""
        store = RedisStore.from_url(config.redis_url)

        legacy = None
        if config.migrate:
            if not config.effective_legacy_redis_url:
                raise ConfigurationError("Legacy migration requires a Redis URL")
            legacy = RedisLegacyStore.from_url(config.effective_legacy_redis_url)

        if metrics is None and config.enable_metrics:
            metrics = get_metrics_collector("rollout")

        return cls(
            store,
            registry=registry,
            options=FeatureOptions(
                id_user_by=config.id_user_by,
                randomize_percentage=config.randomize_percentage,
            ),
            legacy=legacy,
            metrics=metrics,
        )

    # Whole-feature state

    def activate(self, feature: str) -> None:
        with self._feature(feature) as f:
            f.percentage = 100

    def deactivate(self, feature: str) -> None:
        with self._feature(feature) as f:
            f.clear()

    def set(self, feature: str, desired_state: bool) -> None:
        with self._feature(feature) as f:
            if desired_state:
                f.percentage = 100
            else:
                f.clear()

    def activate_percentage(self, feature: str, percentage: int) -> None:
        with self._feature(feature) as f:
            f.percentage = int(percentage)

    def deactivate_percentage(self, feature: str) -> None:
        with self._feature(feature) as f:
            f.percentage = 0

    # Users, groups and locales

    def activate_user(self, feature: str, user: Any) -> None:
        with self._feature(feature) as f:
            self._warn_reserved("user", f.user_id(user))
            f.add_user(user)

    def deactivate_user(self, feature: str, user: Any) -> None:
        with self._feature(feature) as f:
            f.remove_user(user)

    def activate_group(self, feature: str, group: str) -> None:
        with self._feature(feature) as f:
            self._warn_reserved("group", str(group))
            f.add_group(group)

    def deactivate_group(self, feature: str, group: str) -> None:
        with self._feature(feature) as f:
            f.remove_group(group)

    def activate_locale(self, feature: str, locale: str, percentage: Optional[int] = None) -> None:
        with self._feature(feature) as f:
            self._warn_reserved("locale", str(locale))
            f.add_locale(locale, int(percentage) if percentage is not None else None)

    def deactivate_locale(self, feature: str, locale: str) -> None:
        with self._feature(feature) as f:
            f.remove_locale(locale)

    # Predicates

    def define_group(self, group: str, predicate: Optional[Predicate] = None) -> Union[Predicate, Callable[[Predicate], Predicate]]:
        """Register a group predicate; usable as a decorator."""
        return self._define(self.registry.define_group, group, predicate)

    def define_locale(self, locale: str, predicate: Optional[Predicate] = None) -> Union[Predicate, Callable[[Predicate], Predicate]]:
        """Register a locale predicate; usable as a decorator."""
        return self._define(self.registry.define_locale, locale, predicate)

    def active_in_group(self, group: str, user: Any) -> bool:
        return self.registry.active_in_group(group, user)

    def active_in_locale(self, locale: str, user: Any) -> bool:
        return self.registry.active_in_locale(locale, user)

    # Reads

    def is_active(self, feature: str, user: Any = None) -> bool:
        """Check whether a feature is active, optionally for a user.

        With metrics enabled each distinct feature name is its own label
        value on `rollout_feature_checks_total`, so the series count grows
        with the number of flags checked.
        """
        start_time = time.time()
        active = self.get(feature).is_active(self, user)

        if self.metrics is not None:
            self.metrics.increment_counter(
                "rollout_feature_checks_total",
                feature=str(feature),
                decision="active" if active else "inactive"
            )
            self.metrics.observe_histogram(
                "rollout_feature_check_duration_seconds",
                time.time() - start_time
            )

        self.logger.debug("Feature checked", feature=str(feature), active=active)
        return active

    def get(self, feature: str) -> Feature:
        """Load a feature, migrating it from the legacy layout on first read."""
        raw = self.store.get(self._key(feature))
        if raw is not None or self.legacy is None:
            return Feature.from_record(str(feature), raw, self.options)

        return self._migrate(str(feature))

    def features(self) -> List[str]:
        """Names of every feature ever saved."""
        return decode_index(self.store.get(FEATURES_KEY))

    def clear(self) -> None:
        """Clear and delete every known feature, then the index itself."""
        names = self.features()
        for name in names:
            with self._feature(name) as f:
                f.clear()
            self.store.delete(self._key(name))

        self.store.delete(FEATURES_KEY)
        self.logger.info("All features cleared", count=len(names))

    # Persistence

    def save(self, feature: Feature) -> None:
        """Write the feature record, then add its name to the index."""
        self.store.set(self._key(feature.name), feature.serialize())
        self._record_write("feature")

        names = self.features()
        if feature.name not in names:
            names.append(feature.name)
        self.store.set(FEATURES_KEY, encode_index(names))
        self._record_write("index")

        self.logger.debug("Feature saved", feature=feature.name, percentage=feature.percentage)

    @contextmanager
    def _feature(self, feature: str) -> Iterator[Feature]:
        f = self.get(feature)
        yield f
        self.save(f)

    def _migrate(self, name: str) -> Feature:
        info = self.legacy.info(name)

        f = Feature(name=name, options=self.options)
        f.percentage = int(info.percentage)
        if name in info.global_features:
            f.percentage = 100
        f.groups = [str(group) for group in info.groups]
        f.users = [str(user) for user in info.users]

        self.save(f)

        if self.metrics is not None:
            self.metrics.increment_counter("rollout_legacy_migrations_total")
        self.logger.info("Feature migrated from legacy layout", feature=name, percentage=f.percentage)
        return f

    def _define(self, register, name: str, predicate: Optional[Predicate]):
        if predicate is not None:
            register(name, predicate)
            return predicate

        def decorator(func: Predicate) -> Predicate:
            register(name, func)
            return func

        return decorator

    def _record_write(self, kind: str) -> None:
        if self.metrics is not None:
            self.metrics.increment_counter("rollout_store_writes_total", kind=kind)

    def _warn_reserved(self, kind: str, value: str) -> None:
        if has_reserved_characters(value):
            self.logger.warning("Value contains reserved separator characters", kind=kind, value=value)

    @staticmethod
    def _key(name: str) -> str:
        return f"{KEY_PREFIX}{name}"
