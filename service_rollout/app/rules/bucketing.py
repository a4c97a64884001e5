"""
Deterministic user bucketing.
"""

import zlib


def bucket(identity: str) -> int:
    """Return the unsigned CRC-32 of the UTF-8 encoded identity."""
    return zlib.crc32(identity.encode("utf-8")) & 0xFFFFFFFF


def in_percentage(identity: str, percentage: int) -> bool:
    """Check whether the identity falls inside the first `percentage` buckets of 100."""
    return bucket(identity) % 100 < percentage
