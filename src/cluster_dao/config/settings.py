"""
Configuration management for cluster-dao.

This module provides environment-based configuration using Pydantic BaseSettings,
so role tokens, pool sizing and the cluster node file can be changed per
deployment without code changes.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Determine project root for resolving .env by default
PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_ENV_FILE = PROJECT_ROOT / ".env"
ENV_FILE_OVERRIDE = os.getenv("DAO_ENV_FILE")
if ENV_FILE_OVERRIDE:
    env_file_candidate = Path(ENV_FILE_OVERRIDE).expanduser()
    if not env_file_candidate.is_absolute():
        env_file_candidate = PROJECT_ROOT / env_file_candidate
    SETTINGS_ENV_FILE = env_file_candidate
else:
    SETTINGS_ENV_FILE = DEFAULT_ENV_FILE


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Environment variables are automatically loaded with the DAO_ prefix.
    For example, DAO_SLAVE_ROLE will override the slave_role setting.

    Fields without prefix:
    - LOG_LEVEL: Logging level (uppercase)
    """

    LOG_LEVEL: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level (uppercase)",
    )

    # Routing
    master_role: str = Field(
        default="master",
        description="Pool pattern for write and strong-read traffic",
    )
    slave_role: str = Field(
        default="slave*",
        description="Pool pattern for read traffic (wildcards allowed)",
    )

    # Cluster
    cluster_config: str = Field(
        default="./config/cluster.yml",
        description="Path to the YAML file listing cluster nodes",
    )
    pool_selector: Literal["RR", "RANDOM", "ORDER"] = Field(
        default="RR",
        description="Node selection when a pattern matches several nodes",
    )
    pool_size: int = Field(
        default=10, ge=1, description="Maximum connections per node"
    )
    acquire_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Seconds to wait for a free connection in a full pool",
    )
    connect_timeout: int = Field(
        default=10, description="MySQL connect timeout in seconds"
    )
    read_timeout: int = Field(default=30, description="MySQL read timeout in seconds")
    charset: str = Field(default="utf8mb4", description="Connection charset")

    # Normalization
    timezone: Optional[str] = Field(
        default=None,
        description="IANA zone for formatted utime/ctime; local zone when unset",
    )

    @field_validator("timezone")
    @classmethod
    def _validate_timezone(cls, value: Optional[str]) -> Optional[str]:
        if value is None or value == "":
            return None
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value

    @model_validator(mode="after")
    def validate_roles(self) -> "Settings":
        """Reject empty role tokens, which would match no pool."""
        if not self.master_role.strip() or not self.slave_role.strip():
            raise ValueError("master_role and slave_role must be non-empty")
        return self

    model_config = SettingsConfigDict(
        env_prefix="DAO_",
        env_file=str(SETTINGS_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance with loaded configuration
    """
    return Settings()
