"""Tests for release-year helpers (UTC calendar years)."""

from __future__ import annotations

from datetime import UTC, datetime

from src.intent.dates import current_year, resolve_relative_year

_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


def test_current_year_uses_given_time() -> None:
    assert current_year(_NOW) == 2024


def test_this_year_and_last_year() -> None:
    assert resolve_relative_year("this year", now=_NOW) == 2024
    assert resolve_relative_year("last  year", now=_NOW) == 2023


def test_years_ago() -> None:
    assert resolve_relative_year("3 years ago", now=_NOW) == 2021
    assert resolve_relative_year("1 year ago", now=_NOW) == 2023


def test_naive_base_is_treated_as_utc() -> None:
    assert resolve_relative_year("2 years ago", now=datetime(2024, 6, 1)) == 2022


def test_unsupported_phrases_return_none() -> None:
    assert resolve_relative_year("next year", now=_NOW) is None
    assert resolve_relative_year("", now=_NOW) is None
