"""
Feature model for the rollout engine.
"""

import numbers
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from .bucketing import in_percentage
from .codec import decode_record, encode_record
from .predicates import ALL, PredicateLookup


@dataclass(frozen=True)
class FeatureOptions:
    """How a feature identifies users.

    `id_user_by` is the attribute read from structured user objects, or a
    callable taking the user. With `randomize_percentage` the feature name
    is appended to the identity before bucketing, so one user lands in
    different buckets for different features.
    """
    id_user_by: Union[str, Callable[[Any], Any]] = "id"
    randomize_percentage: bool = False


@dataclass
class Feature:
    """Rule set of a single feature."""
    name: str
    percentage: int = 0
    users: List[str] = field(default_factory=list)
    groups: List[str] = field(default_factory=list)
    locales: Dict[str, int] = field(default_factory=dict)
    options: FeatureOptions = field(default_factory=FeatureOptions, compare=False, repr=False)

    @classmethod
    def from_record(cls, name: str, raw: Optional[str], options: Optional[FeatureOptions] = None) -> "Feature":
        """Build a feature from its stored record, or a cleared one when there is none."""
        record = decode_record(raw)
        return cls(
            name=name,
            percentage=record.percentage,
            users=record.users,
            groups=record.groups,
            locales=record.locales,
            options=options or FeatureOptions(),
        )

    def serialize(self) -> str:
        return encode_record(self.percentage, self.users, self.groups, self.locales)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "percentage": self.percentage,
            "groups": list(self.groups),
            "users": list(self.users),
            "locales": [f"{name}:{pct}" for name, pct in self.locales.items()],
        }

    # Mutators

    def add_user(self, user: Any) -> None:
        user_id = self.user_id(user)
        if user_id not in self.users:
            self.users.append(user_id)

    def remove_user(self, user: Any) -> None:
        user_id = self.user_id(user)
        if user_id in self.users:
            self.users.remove(user_id)

    def add_group(self, group: str) -> None:
        group = str(group)
        if group not in self.groups:
            self.groups.append(group)

    def remove_group(self, group: str) -> None:
        group = str(group)
        if group in self.groups:
            self.groups.remove(group)

    def add_locale(self, locale: str, percentage: Optional[int] = None) -> None:
        locale = str(locale)
        # Re-adding moves the entry to the end with the new percentage
        self.locales.pop(locale, None)
        self.locales[locale] = percentage or 0

    def remove_locale(self, locale: str) -> None:
        self.locales.pop(str(locale), None)

    def clear(self) -> None:
        self.percentage = 0
        self.users = []
        self.groups = []
        self.locales = {}

    # Evaluation

    def is_active(self, lookup: PredicateLookup, user: Any = None) -> bool:
        """Check whether the feature is active for `user`.

        Without a user only a fully rolled out feature is active. With
        one, the gates are checked in order and the first that fires
        wins: percentage, locales, explicit users, groups.
        """
        if user is None:
            return self.percentage == 100

        user_id = self.user_id(user)
        return (
            self._user_in_percentage(user_id)
            or self._user_in_active_locale(user, user_id, lookup)
            or user_id in self.users
            or self._user_in_active_group(user, lookup)
        )

    def user_id(self, user: Any) -> str:
        """Resolve a user to the identity string stored and bucketed."""
        if isinstance(user, (str, numbers.Number)):
            return str(user)
        accessor = self.options.id_user_by
        if callable(accessor):
            return str(accessor(user))
        return str(getattr(user, accessor))

    def _bucketing_identity(self, user_id: str) -> str:
        if self.options.randomize_percentage:
            return user_id + str(self.name)
        return user_id

    def _user_in_percentage(self, user_id: str) -> bool:
        return in_percentage(self._bucketing_identity(user_id), self.percentage)

    def _user_in_active_locale(self, user: Any, user_id: str, lookup: PredicateLookup) -> bool:
        for locale, percentage in self.locales.items():
            if not lookup.active_in_locale(locale, user):
                continue
            if locale == ALL or in_percentage(self._bucketing_identity(user_id), percentage):
                return True
        return False

    def _user_in_active_group(self, user: Any, lookup: PredicateLookup) -> bool:
        return any(lookup.active_in_group(group, user) for group in self.groups)
