"""
Rollout engine package.

This package decides whether a named feature is enabled for a given
user. Rule sets are persisted one record per feature in an external
key-value store. It provides:

- app.rules: Feature model, record codec, bucketing, predicates and the
  Rollout engine.
- app.storage: Key-value store adapters (in-memory and Redis).
- app.legacy: Read-only access to features stored in the legacy layout.

Guidelines:
- The engine is stateless between calls; every read goes to the store.
- Bucketing must stay bit-exact with CRC-32 so persisted rollouts keep
  the same users enabled.
"""

from .rules.engine import Rollout
from .rules.models import Feature, FeatureOptions
from .rules.predicates import PredicateRegistry

__all__ = ["Rollout", "Feature", "FeatureOptions", "PredicateRegistry"]
