"""
Shared utilities for the rollout engine.

This package aggregates common building blocks consumed by the engine
and by any process embedding it:

- config: Engine configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses

Do not import from service_rollout into shared/.
"""
