"""Release-year helpers (UTC calendar years).

Year constraints are expressed as calendar years. Relative phrases ("last year", "3 years ago") are
resolved with `dateparser` against the current UTC date, preferring past dates.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime

import dateparser
from dateparser.conf import Settings as DateparserSettings

_DATEPARSER_SETTINGS = DateparserSettings().replace(
    PREFER_DATES_FROM="past",
    TIMEZONE="UTC",
    TO_TIMEZONE="UTC",
    RETURN_AS_TIMEZONE_AWARE=True,
)

_THIS_YEAR_RE = re.compile(r"^this\s+year$")
_LAST_YEAR_RE = re.compile(r"^last\s+year$")
_YEARS_AGO_RE = re.compile(r"^(\d{1,3})\s+years?\s+ago$")

RELATIVE_YEAR_PATTERN = r"this\s+year|last\s+year|\d{1,3}\s+years?\s+ago"


def current_year(now: datetime | None = None) -> int:
    """Return the current UTC calendar year."""

    return (now or datetime.now(UTC)).year


def resolve_relative_year(phrase: str, *, now: datetime | None = None) -> int | None:
    """Resolve a relative year phrase to a calendar year.

    Returns:
        The year, or `None` when the phrase is not a supported relative expression.
    """

    value = re.sub(r"\s+", " ", (phrase or "").strip().lower())
    if not value:
        return None

    base = now or datetime.now(UTC)
    if base.tzinfo is None:
        base = base.replace(tzinfo=UTC)

    if _THIS_YEAR_RE.match(value):
        return base.year
    if _LAST_YEAR_RE.match(value):
        value = "1 year ago"
    if not _YEARS_AGO_RE.match(value):
        return None

    settings = _DATEPARSER_SETTINGS.replace(RELATIVE_BASE=base.replace(tzinfo=None))
    dt = dateparser.parse(value, languages=["en"], settings=settings)
    if not dt:
        return None
    return dt.year
