"""Tests for the search backend client (network is faked via `monkeypatch`)."""

from __future__ import annotations

import io
import json
from time import monotonic
from typing import Any
from urllib.error import HTTPError, URLError

import pytest

from src.search.client import SearchClient


class _FakeResponse:
    def __init__(self, status: int, body: bytes) -> None:
        self.status = status
        self._body = body

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> _FakeResponse:
        return self

    def __exit__(self, *_exc: Any) -> None:
        return None



class _FakeBackend:
    """Replays a scripted list of answers; each item is `(status, payload)` or an exception."""

    def __init__(self, answers: list[Any]) -> None:
        self.answers = list(answers)
        self.urls: list[str] = []
        self.timeouts: list[float] = []

    def __call__(self, req: Any, timeout: float) -> _FakeResponse:
        self.urls.append(req.full_url)
        self.timeouts.append(timeout)
        answer = self.answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        status, payload = answer
        body = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
        if status >= 400:
            raise HTTPError(req.full_url, status, "error", None, io.BytesIO(body))  # type: ignore[arg-type]
        return _FakeResponse(status, body)


def _client(sleeps: list[float], **kwargs: Any) -> SearchClient:
    return SearchClient(base_url="https://search.test/cards/search", sleep=sleeps.append, **kwargs)


def test_ok_response(monkeypatch: pytest.MonkeyPatch) -> None:
    backend = _FakeBackend([(200, {"total_cards": 42, "warnings": ["note"]})])
    monkeypatch.setattr("src.search.client.urlopen", backend)

    result = _client([]).validate("t:creature c:r")

    assert result.valid
    assert result.status == 200
    assert result.total_cards == 42
    assert result.overly_broad is False
    assert result.zero_results is False
    assert result.warnings == ["note"]
    assert backend.urls == ["https://search.test/cards/search?q=t%3Acreature+c%3Ar"]


def test_overly_broad_threshold(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("src.search.client.urlopen", _FakeBackend([(200, {"total_cards": 42})]))
    assert _client([]).validate("t:creature", overly_broad_threshold=10).overly_broad is True


def test_not_found_is_valid_and_empty(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("src.search.client.urlopen", _FakeBackend([(404, {"details": "no cards"})]))

    result = _client([]).validate("t:creature usd<0")

    assert result.valid
    assert result.total_cards == 0
    assert result.zero_results is True
    assert not result.has_results


def test_bad_request_is_invalid(monkeypatch: pytest.MonkeyPatch) -> None:
    backend = _FakeBackend([(400, {"details": 'Unknown keyword "foo"', "warnings": ["w"]})])
    monkeypatch.setattr("src.search.client.urlopen", backend)

    result = _client([]).validate("foo:bar")

    assert not result.valid
    assert result.status == 400
    assert result.error == 'Unknown keyword "foo"'
    assert result.warnings == ["w"]
    assert len(backend.urls) == 1


def test_retries_with_linear_backoff(monkeypatch: pytest.MonkeyPatch) -> None:
    backend = _FakeBackend([(503, {}), (429, {}), (200, {"total_cards": 3})])
    monkeypatch.setattr("src.search.client.urlopen", backend)
    sleeps: list[float] = []

    result = _client(sleeps, max_retries=2).validate("t:creature")

    assert result.valid
    assert result.total_cards == 3
    assert sleeps == pytest.approx([0.4, 0.8])


def test_last_retry_status_is_returned(monkeypatch: pytest.MonkeyPatch) -> None:
    backend = _FakeBackend([(503, {"details": "busy"}), (503, {"details": "busy"})])
    monkeypatch.setattr("src.search.client.urlopen", backend)

    result = _client([], max_retries=1).validate("t:creature")

    assert not result.valid
    assert result.status == 503
    assert result.error == "busy"


def test_network_failure_becomes_invalid_result(monkeypatch: pytest.MonkeyPatch) -> None:
    backend = _FakeBackend([URLError("down"), URLError("down"), URLError("down")])
    monkeypatch.setattr("src.search.client.urlopen", backend)
    sleeps: list[float] = []

    result = _client(sleeps, max_retries=2).validate("t:creature")

    assert not result.valid
    assert result.status == 500
    assert "unreachable" in (result.error or "")
    assert len(backend.urls) == 3
    assert sleeps == pytest.approx([0.4, 0.8])


def test_expired_deadline_makes_no_call(monkeypatch: pytest.MonkeyPatch) -> None:
    backend = _FakeBackend([])
    monkeypatch.setattr("src.search.client.urlopen", backend)

    result = _client([]).validate("t:creature", deadline=monotonic() - 1)

    assert not result.valid
    assert result.status == 500
    assert result.error == "Validation deadline exceeded"
    assert backend.urls == []


def test_timeout_is_capped_by_deadline(monkeypatch: pytest.MonkeyPatch) -> None:
    backend = _FakeBackend([(200, {"total_cards": 1})])
    monkeypatch.setattr("src.search.client.urlopen", backend)

    _client([], timeout_s=15.0).validate("t:creature", deadline=monotonic() + 2)

    assert backend.timeouts[0] <= 2


def test_garbage_body_becomes_invalid_result(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("src.search.client.urlopen", _FakeBackend([(200, b"<html>")]))

    result = _client([]).validate("t:creature")

    assert not result.valid
    assert result.status == 500
    assert result.error == "Unexpected search backend response format"
