"""
Settings for the membership engine.

Environment-driven configuration shared by the repository adapters, the
membership cache and the invalidation bus.
"""
from typing import Optional
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

from .constants import CacheKeys, DisplayNameSyntax


class MembershipSettings(BaseSettings):
    """Membership engine settings, read from ``MEMBERSHIP_*`` variables."""

    model_config = SettingsConfigDict(
        env_prefix="MEMBERSHIP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Database Configuration
    database_url: Optional[str] = Field(default=None)
    db_pool_min_size: int = Field(default=2, ge=1)
    db_pool_max_size: int = Field(default=10, ge=1)
    db_command_timeout: float = Field(default=30.0, gt=0)

    # Redis Invalidation Configuration
    redis_url: Optional[str] = Field(default=None)
    invalidation_channel: str = Field(default=CacheKeys.INVALIDATION_CHANNEL)

    # Cache Configuration
    cache_max_age_seconds: int = Field(default=0, ge=0)  # 0 = never expires

    # Display names
    args_delimiter: str = Field(
        default=DisplayNameSyntax.DEFAULT_ARGS_DELIMITER,
        min_length=1,
        max_length=1
    )

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="simple")

    @property
    def database_dsn(self) -> Optional[str]:
        """Database URL usable by asyncpg (SQLAlchemy driver suffix stripped)."""
        if self.database_url and "+asyncpg" in self.database_url:
            return self.database_url.replace("+asyncpg", "")
        return self.database_url


@lru_cache()
def get_settings() -> MembershipSettings:
    """Get cached membership settings."""
    return MembershipSettings()
