"""
Unit tests for the legacy layout reader.
"""

import fakeredis
import pytest

from service_rollout.app.legacy.adapter import LegacyInfo, RedisLegacyStore


class TestRedisLegacyStore:
    """Test cases for RedisLegacyStore."""

    @pytest.fixture
    def client(self):
        """Create a fake Redis client with legacy data."""
        client = fakeredis.FakeRedis(decode_responses=True)
        client.set("feature:chat:percentage", "30")
        client.sadd("feature:chat:groups", "beta", "admins")
        client.sadd("feature:chat:users", "1", "2")
        client.sadd("feature:__global__", "chat", "video")
        return client

    @pytest.fixture
    def legacy(self, client):
        """Create RedisLegacyStore instance."""
        return RedisLegacyStore(client)

    def test_info(self, legacy):
        """Test reading a legacy feature."""
        info = legacy.info("chat")

        assert info == LegacyInfo(
            percentage=30,
            global_features={"chat", "video"},
            groups=["admins", "beta"],
            users=["1", "2"],
        )

    def test_info_missing_feature(self, legacy):
        """Test a feature without legacy keys reads as empty."""
        info = legacy.info("search")

        assert info.percentage == 0
        assert info.groups == []
        assert info.users == []
        assert "search" not in info.global_features

    def test_info_with_byte_responses(self):
        """Test clients without response decoding are supported."""
        client = fakeredis.FakeRedis()
        client.set("feature:chat:percentage", "15")
        client.sadd("feature:chat:users", "alice")

        info = RedisLegacyStore(client).info("chat")

        assert info.percentage == 15
        assert info.users == ["alice"]
        assert info.global_features == set()
