"""
Rollout engine: feature flags backed by a key-value store.
"""
