"""Configuration for the todo API.

Created: 2026-10-18

Settings are read from the process environment and an optional ``.env`` file
in the working directory. Field names map to upper-case environment variables
(``mongo_uri`` -> ``MONGO_URI``), so a deployment only needs to export:

    MONGO_URI, PORT, CLIENT_URL, AUTH0_DOMAIN, AUTH0_AUDIENCE

Usage:
    from todoapi.config import get_settings

    settings = get_settings()
    print(settings.jwks_uri)
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Runtime settings for the API server."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Environment ("test" skips the store connection entirely)
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("APP_ENV", "ENVIRONMENT"),
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 5001
    client_url: str = "http://localhost:3000"
    log_level: str = "INFO"

    # Document store
    store_backend: Literal["mongo", "memory"] = "mongo"
    mongo_uri: str = "mongodb://localhost:27017/todos"
    mongo_db: str = "todos"
    mongo_collection: str = "todos"

    # Identity provider
    auth0_domain: str = ""
    auth0_audience: str = ""
    jwks_requests_per_minute: int = Field(default=5, ge=1)
    jwks_cache_ttl: float = Field(default=600.0, gt=0)

    @property
    def is_test(self) -> bool:
        return self.environment.lower() == "test"

    @property
    def issuer(self) -> str:
        return f"https://{self.auth0_domain}/"

    @property
    def jwks_uri(self) -> str:
        return f"https://{self.auth0_domain}/.well-known/jwks.json"

    @classmethod
    def load(cls) -> Settings:
        """Load settings from the environment and ``.env``."""
        settings = cls()
        if not settings.auth0_domain and not settings.is_test:
            logger.warning("AUTH0_DOMAIN is not set; every token will be rejected")
        return settings


@lru_cache
def get_settings() -> Settings:
    """Get the process-wide settings (cached after first load)."""
    return Settings.load()
