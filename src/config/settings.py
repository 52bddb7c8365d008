"""Environment configuration and validation.

This module defines strongly-typed application settings loaded from environment variables
(optionally via a local `.env` file).

Only the concept database and the Telegram bot need secrets; the translator itself runs with
defaults alone.
"""

from __future__ import annotations

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.search.client import DEFAULT_SEARCH_URL


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    search_api_url: str = Field(default=DEFAULT_SEARCH_URL, alias="SEARCH_API_URL")
    search_timeout_s: float = Field(default=15.0, gt=0, alias="SEARCH_TIMEOUT_S")
    search_max_retries: int = Field(default=2, ge=0, le=5, alias="SEARCH_MAX_RETRIES")
    search_user_agent: str = Field(default="card-query-translator/0.1", alias="SEARCH_USER_AGENT")
    request_timeout_s: float = Field(default=20.0, gt=0, alias="REQUEST_TIMEOUT_S")

    validate_with_search: bool = Field(default=False, alias="VALIDATE_WITH_SEARCH")
    overly_broad_threshold: int = Field(default=1500, ge=0, alias="OVERLY_BROAD_THRESHOLD")
    max_query_length: int = Field(default=400, ge=50, alias="MAX_QUERY_LENGTH")

    concept_db_enabled: bool = Field(default=False, alias="CONCEPT_DB_ENABLED")
    database_url: str | None = Field(default=None, alias="DATABASE_URL")
    db_statement_timeout_ms: int = Field(default=2000, gt=0, alias="DB_STATEMENT_TIMEOUT_MS")

    telegram_bot_token: str | None = Field(default=None, alias="TELEGRAM_BOT_TOKEN")

    @field_validator("search_api_url")
    @classmethod
    def validate_search_api_url(cls, value: str) -> str:
        """Require an absolute http(s) URL without a query string."""

        url = value.strip()
        if not url.startswith(("http://", "https://")):
            raise ValueError("SEARCH_API_URL must be an http(s) URL")
        if "?" in url:
            raise ValueError("SEARCH_API_URL must not contain a query string")
        return url

    @model_validator(mode="after")
    def validate_concept_db_config(self) -> Settings:
        """If the concept database is enabled, a database URL must be provided."""

        if self.concept_db_enabled and not self.database_url:
            raise ValueError("DATABASE_URL is required when CONCEPT_DB_ENABLED=true")
        return self


def load_settings() -> Settings:
    """Load and validate settings from environment variables.

    Raises:
        RuntimeError: If the environment configuration is missing or invalid.
    """

    try:
        return Settings()
    except ValidationError as exc:
        raise RuntimeError(f"Invalid environment configuration: {exc}") from exc
