"""
Configuration and settings for the vault backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the vault service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")

    # Persistence: SQL (Postgres expected) or Redis; in-memory otherwise
    database_url: Optional[str] = Field(default=None, alias="VAULT_DATABASE_URL")
    redis_url: Optional[str] = Field(default=None, alias="REDIS_URL")
    redis_key_prefix: str = Field(default="vault:", alias="VAULT_REDIS_KEY_PREFIX")

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, alias="VAULT_USE_IN_MEMORY_BACKENDS"
    )
    seed_on_startup: bool = Field(default=True, alias="VAULT_SEED_ON_STARTUP")

    # The single publishing account
    owner_email: str = Field(default="sagar.sahu@example.com", alias="VAULT_OWNER_EMAIL")
    owner_profile_id: str = Field(
        default="Admin_Sagar_Sahu", alias="VAULT_OWNER_PROFILE_ID"
    )
    owner_display_name: str = Field(
        default="Sagar Sahu", alias="VAULT_OWNER_DISPLAY_NAME"
    )

    # S3-compatible upload storage
    s3_endpoint: Optional[str] = Field(default=None, alias="S3_ENDPOINT")
    s3_region: Optional[str] = Field(default=None, alias="S3_REGION")
    s3_bucket: Optional[str] = Field(default=None, alias="S3_BUCKET")
    aws_access_key_id: Optional[str] = Field(default=None, alias="AWS_ACCESS_KEY_ID")
    aws_secret_access_key: Optional[str] = Field(
        default=None, alias="AWS_SECRET_ACCESS_KEY"
    )

    notification_feed: Literal["polling", "in_process"] = Field(
        default="polling", alias="VAULT_NOTIFICATION_FEED"
    )

    # Upper bound on remembered (viewer session, work) view markers
    view_marker_limit: int = Field(default=10_000, ge=1, alias="VAULT_VIEW_MARKER_LIMIT")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
