"""
Named group and locale predicates.
"""

from typing import Any, Callable, Dict, Optional, Protocol

from shared.logging import get_logger

Predicate = Callable[[Any], bool]

ALL = "all"


def _always(user: Any) -> bool:
    return True


class PredicateLookup(Protocol):
    """Anything that can answer group and locale membership for a user."""

    def active_in_group(self, group: str, user: Any) -> bool: ...

    def active_in_locale(self, locale: str, user: Any) -> bool: ...


class PredicateRegistry:
    """Registry of group and locale predicates.

    Both mappings start with `all`, which is true for every user,
    including no user at all. Registering a name again replaces the
    previous predicate. Looking up an unregistered name is false.
    """

    def __init__(self):
        self.logger = get_logger("rollout.predicates")
        self.groups: Dict[str, Predicate] = {ALL: _always}
        self.locales: Dict[str, Predicate] = {ALL: _always}

    def define_group(self, group: str, predicate: Predicate) -> None:
        self.groups[str(group)] = predicate
        self.logger.debug("Group defined", group=str(group))

    def define_locale(self, locale: str, predicate: Predicate) -> None:
        self.locales[str(locale)] = predicate
        self.logger.debug("Locale defined", locale=str(locale))

    def active_in_group(self, group: str, user: Any) -> bool:
        return self._check(self.groups.get(str(group)), user)

    def active_in_locale(self, locale: str, user: Any) -> bool:
        return self._check(self.locales.get(str(locale)), user)

    @staticmethod
    def _check(predicate: Optional[Predicate], user: Any) -> bool:
        if predicate is None:
            return False
        return bool(predicate(user))
