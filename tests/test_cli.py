"""Tests for the one-shot translation CLI."""

from __future__ import annotations

import json

import pytest

from src.cli import build_parser, main, parse_filters

_ENV_KEYS = ("VALIDATE_WITH_SEARCH", "CONCEPT_DB_ENABLED", "DATABASE_URL", "MAX_QUERY_LENGTH", "LOG_LEVEL")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_parse_filters_splits_color_letters() -> None:
    args = build_parser().parse_args(["elves", "--color-identity", "GW", "--max-cmc", "2"])

    filters = parse_filters(args)

    assert filters.color_identity == ["g", "w"]
    assert filters.max_cmc == 2
    assert filters.format is None
    assert args.validate is None


def test_main_prints_result_json(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["mono red creatures", "--format", "modern", "--max-cmc", "3"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["final_query"] == "ci=r t:creature f:modern mv<=3"
    assert payload["validation"] is None
    assert payload["debug"] is None


def test_main_debug_includes_slots(capsys: pytest.CaptureFixture[str]) -> None:
    main(["mono red creatures", "--debug"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["debug"]["slots"]["types"]["include"] == ["creature"]


def test_main_rejects_unknown_color_codes() -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["elves", "--color-identity", "xz"])

    assert exc_info.value.code == 2
