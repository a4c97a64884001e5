"""
Shared configuration management for the rollout engine.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RolloutConfig(BaseSettings):
    """Engine configuration read from the environment and `.env`."""

    model_config = SettingsConfigDict(
        env_prefix="ROLLOUT_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Storage
    redis_url: str = Field(default="redis://localhost:6379/0")

    # Legacy migration
    migrate: bool = Field(default=False)
    legacy_redis_url: Optional[str] = Field(default=None)

    # Feature options
    randomize_percentage: bool = Field(default=False)
    id_user_by: str = Field(default="id")

    # Observability
    enable_metrics: bool = Field(default=False)

    @property
    def effective_legacy_redis_url(self) -> str:
        """Legacy store URL, defaulting to the current store."""
        return self.legacy_redis_url or self.redis_url


def get_config(**overrides) -> RolloutConfig:
    """Get engine configuration."""
    return RolloutConfig(**overrides)
