"""
Configuration and settings for the posts API.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Same path the Cloud Endpoints deployment served the API under.
    api_prefix: str = Field(default="/_ah/api/posts/v1")

    # Deployment identity; referers must come from <app_id>.appspot.com.
    app_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("POSTS_APP_ID", "GOOGLE_CLOUD_PROJECT"),
    )

    # Local development accepts any referer.
    dev_mode: bool = Field(
        default=False,
        validation_alias=AliasChoices("POSTS_DEV_MODE", "FUNCTIONS_EMULATOR"),
    )

    # Database (any SQLAlchemy URL, Postgres expected)
    database_url: Optional[str] = Field(default=None)

    # Firestore
    use_firestore: bool = Field(
        default=False,
        validation_alias=AliasChoices("POSTS_USE_FIRESTORE"),
    )
    firestore_collection: str = Field(default="Post")

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False,
        validation_alias=AliasChoices("POSTS_USE_IN_MEMORY_BACKENDS"),
    )

    log_level: str = Field(default="INFO")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
