"""Search backend client.

The backend answers `GET <base_url>?q=<query>` with:
    - 200 and `{"total_cards": int, "warnings": [...]}`
    - 404 when the query is valid but matches nothing
    - any other status with `{"details": str, "warnings": [...]}`

Network and parse failures never raise out of `validate`; they become an invalid result with status
500, so the caller can keep its best query.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from time import monotonic
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from src.search.schema import ValidationResult

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_URL = "https://api.scryfall.com/cards/search"
DEFAULT_OVERLY_BROAD_THRESHOLD = 1500
RETRY_STATUSES: frozenset[int] = frozenset({429, 500, 502, 503, 504})
BACKOFF_STEP_S = 0.4


class SearchClientError(RuntimeError):
    """Raised when the backend could not be reached or answered garbage."""


@dataclass
class SearchClient:
    """Blocking HTTP client for the card search backend."""

    base_url: str = DEFAULT_SEARCH_URL
    timeout_s: float = 15.0
    max_retries: int = 2
    user_agent: str = "card-query-translator/0.1"
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def _url(self, query: str) -> str:
        return f"{self.base_url}?{urlencode({'q': query})}"

    def _get(self, url: str, timeout: float) -> tuple[int, bytes]:
        req = Request(url, method="GET", headers={"User-Agent": self.user_agent, "Accept": "application/json"})
        try:
            with urlopen(req, timeout=timeout) as resp:  # noqa: S310 (configured backend URL)
                return resp.status, resp.read()
        except HTTPError as exc:
            return exc.code, exc.read()

    def fetch(self, query: str, *, deadline: float | None = None) -> tuple[int, bytes]:
        """GET the search URL with bounded retries and linear backoff.

        Retries network errors and statuses 429/500/502/503/504, at most `max_retries` times, and
        never sleeps past `deadline` (a `time.monotonic()` timestamp).

        Raises:
            SearchClientError: If the backend stays unreachable or the deadline has passed.
        """

        url = self._url(query)
        last_error: Exception | None = None

        for attempt in range(self.max_retries + 1):
            timeout = self.timeout_s
            if deadline is not None:
                remaining = deadline - monotonic()
                if remaining <= 0:
                    raise SearchClientError("Validation deadline exceeded")
                timeout = min(timeout, remaining)

            try:
                status, body = self._get(url, timeout)
            except (URLError, TimeoutError, OSError) as exc:
                last_error = exc
                status, body = None, b""

            if status is not None and (status not in RETRY_STATUSES or attempt == self.max_retries):
                return status, body
            if attempt == self.max_retries:
                break

            delay = BACKOFF_STEP_S * (attempt + 1)
            if deadline is not None and monotonic() + delay >= deadline:
                break
            logger.info("search retry attempt=%s status=%s delay_s=%.1f", attempt + 1, status, delay)
            self.sleep(delay)

        if last_error is not None:
            raise SearchClientError(f"Search backend unreachable: {last_error}") from last_error
        raise SearchClientError("Validation deadline exceeded")

    def validate(
        self,
        query: str,
        *,
        overly_broad_threshold: int = DEFAULT_OVERLY_BROAD_THRESHOLD,
        deadline: float | None = None,
    ) -> ValidationResult:
        """Check a query against the backend and map the answer to a `ValidationResult`."""

        try:
            status, body = self.fetch(query, deadline=deadline)
            if status == 404:
                return ValidationResult(valid=True, status=404, total_cards=0, zero_results=True)
            data = _decode(body)
        except SearchClientError as exc:
            logger.warning("search validation failed query=%r error=%s", query, exc)
            return ValidationResult(valid=False, status=500, error=str(exc))

        warnings = [str(w) for w in data.get("warnings") or []]
        if status == 200:
            total = int(data.get("total_cards") or 0)
            return ValidationResult(
                valid=True,
                status=200,
                total_cards=total,
                overly_broad=total > overly_broad_threshold,
                zero_results=total == 0,
                warnings=warnings,
            )

        return ValidationResult(
            valid=False,
            status=status,
            error=str(data.get("details") or "Unknown search backend error"),
            warnings=warnings,
        )


def _decode(body: bytes) -> dict[str, Any]:
    try:
        data = json.loads(body or b"{}")
    except ValueError as exc:
        raise SearchClientError("Unexpected search backend response format") from exc
    if not isinstance(data, dict):
        raise SearchClientError("Unexpected search backend response format")
    return data
