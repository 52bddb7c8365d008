"""Tests for environment configuration loading and validation."""

from __future__ import annotations

import pytest

from src.config.settings import load_settings
from src.search.client import DEFAULT_SEARCH_URL

_ENV_KEYS = (
    "SEARCH_API_URL",
    "SEARCH_TIMEOUT_S",
    "VALIDATE_WITH_SEARCH",
    "CONCEPT_DB_ENABLED",
    "DATABASE_URL",
    "TELEGRAM_BOT_TOKEN",
    "MAX_QUERY_LENGTH",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    # Keep a developer's local `.env` out of the picture.
    monkeypatch.chdir(tmp_path)
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults() -> None:
    settings = load_settings()

    assert settings.search_api_url == DEFAULT_SEARCH_URL
    assert settings.validate_with_search is False
    assert settings.max_query_length == 400
    assert settings.concept_db_enabled is False
    assert settings.database_url is None
    assert settings.telegram_bot_token is None


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VALIDATE_WITH_SEARCH", "true")
    monkeypatch.setenv("SEARCH_TIMEOUT_S", "2.5")
    monkeypatch.setenv("SEARCH_API_URL", " https://search.test/cards/search ")

    settings = load_settings()

    assert settings.validate_with_search is True
    assert settings.search_timeout_s == 2.5
    assert settings.search_api_url == "https://search.test/cards/search"


def test_concept_db_requires_database_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CONCEPT_DB_ENABLED", "true")
    with pytest.raises(RuntimeError, match="DATABASE_URL"):
        load_settings()


def test_search_url_must_be_http(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SEARCH_API_URL", "ftp://search.test")
    with pytest.raises(RuntimeError, match="Invalid environment configuration"):
        load_settings()


def test_query_length_has_a_floor(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MAX_QUERY_LENGTH", "10")
    with pytest.raises(RuntimeError):
        load_settings()
