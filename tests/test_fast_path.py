"""Tests for the keyword fast path."""

from __future__ import annotations

from src.intent.fast_path import KeywordFastPath


def test_types_supertypes_and_keywords() -> None:
    result = KeywordFastPath().translate("legendary creatures with flying")
    assert result.deterministic_query == "t:legendary t:creature kw:flying"
    assert result.intent.remaining_query == ""
    assert result.intent.warnings == []


def test_exclusions_and_leftovers() -> None:
    result = KeywordFastPath().translate("non-land artifacts that draw")
    assert result.deterministic_query == "t:artifact -t:land"
    assert result.intent.remaining_query == "draw"


def test_multiword_keyword() -> None:
    result = KeywordFastPath().translate("creatures with first strike")
    assert result.deterministic_query == "t:creature kw:first-strike"


def test_included_and_excluded_type_warns() -> None:
    result = KeywordFastPath().translate("lands that aren't lands")
    assert result.deterministic_query == "-t:land"
    assert result.intent.warnings == ["Ignored t:land because it is also excluded"]


def test_unrecognized_request() -> None:
    result = KeywordFastPath().translate("budget board wipes under $5")
    assert result.deterministic_query == ""
    assert result.intent.remaining_query == "budget board wipes under $5"


def test_or_between_types_makes_a_group() -> None:
    result = KeywordFastPath().translate("creatures, artifacts, or lands")
    assert result.deterministic_query == "(t:creature or t:artifact or t:land)"
    assert result.intent.remaining_query == ""


def test_and_between_types_stays_conjunctive() -> None:
    result = KeywordFastPath().translate("artifact and creature")
    assert result.deterministic_query == "t:artifact t:creature"


def test_or_without_second_type_is_left_over() -> None:
    result = KeywordFastPath().translate("artifacts or ramp")
    assert result.deterministic_query == "t:artifact"
    assert result.intent.remaining_query == "or ramp"
