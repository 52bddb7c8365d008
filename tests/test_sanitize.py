"""Tests for the final query sanitizer."""

from __future__ import annotations

from src.query.clauses import dedupe_clauses, split_clauses
from src.query.sanitize import normalize_or_groups, sanitize_query


def test_split_clauses_respects_groups_and_quotes() -> None:
    assert split_clauses('t:creature (t:artifact or t:land) o:"draw a card"') == [
        "t:creature",
        "(t:artifact or t:land)",
        'o:"draw a card"',
    ]
    assert split_clauses("  ") == []


def test_dedupe_keeps_boolean_words() -> None:
    assert dedupe_clauses(["t:a", "or", "T:A", "or", "t:b"]) == ["t:a", "or", "or", "t:b"]


def test_clean_query_is_valid() -> None:
    result = sanitize_query("t:creature c:r")
    assert result.valid
    assert result.sanitized == "t:creature c:r"
    assert result.issues == []


def test_whitespace_and_unsafe_characters_are_silent() -> None:
    result = sanitize_query("t:creature\n\nc:r @#")
    assert result.sanitized == "t:creature c:r"
    assert result.valid


def test_uppercase_or_chain_gets_parentheses() -> None:
    assert normalize_or_groups("t:creature OR t:artifact c:r") == "(t:creature OR t:artifact) c:r"
    result = sanitize_query("t:creature OR t:artifact")
    assert result.sanitized == "(t:creature OR t:artifact)"
    assert result.issues == ["Normalized OR groups with parentheses"]
    assert not result.valid


def test_set_year_is_rewritten() -> None:
    result = sanitize_query("e:2020 t:creature")
    assert result.sanitized == "year=2020 t:creature"
    assert result.issues == ["Replaced invalid year set syntax with year=YYYY"]


def test_power_toughness_math_is_removed() -> None:
    result = sanitize_query("pow+tou>=10 t:creature")
    assert result.sanitized == "t:creature"
    assert result.issues == ["Removed unsupported power+toughness math"]


def test_unknown_keys_are_removed_outside_quotes() -> None:
    result = sanitize_query('foo:bar t:creature o:"baz:qux"')
    assert result.sanitized == 't:creature o:"baz:qux"'
    assert result.issues == ["Unknown search key(s): foo"]


def test_unbalanced_parentheses_are_dropped() -> None:
    result = sanitize_query("(t:creature")
    assert result.sanitized == "t:creature"
    assert result.issues == ["Removed unbalanced parentheses"]


def test_missing_quote_is_closed() -> None:
    result = sanitize_query('o:"draw a card')
    assert result.sanitized == 'o:"draw a card"'
    assert result.issues == ["Added missing closing quote"]


def test_apostrophes_are_not_quotes() -> None:
    result = sanitize_query('o:"can\'t be countered"')
    assert result.valid


def test_missing_brace_is_added() -> None:
    result = sanitize_query("m:{2")
    assert result.sanitized == "m:{2}"
    assert result.issues == ["Added missing closing brace(s)"]


def test_long_query_is_truncated_at_clause_boundary() -> None:
    result = sanitize_query("t:creature t:artifact usd<5", max_length=20)
    assert result.sanitized == "t:creature"
    assert result.issues == ["Query truncated to 20 characters"]
