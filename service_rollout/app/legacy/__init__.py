"""
Legacy package.

Read access to features stored in the layout used before single-record
feature values. The engine consults it once per feature, on the first
read that finds no current record, and persists the converted result.
"""

from .adapter import LegacyInfo, LegacyInfoSource, RedisLegacyStore

__all__ = ["LegacyInfo", "LegacyInfoSource", "RedisLegacyStore"]
