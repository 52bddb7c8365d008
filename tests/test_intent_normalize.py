"""Tests for request normalization and raw-syntax detection."""

from __future__ import annotations

from src.intent.normalize import extract_card_name_candidates, is_raw_syntax, normalize_query
from src.intent.schema import ColorMapping, NumberMapping


def test_price_phrases_become_usd_comparisons() -> None:
    result = normalize_query("Budget board wipes under $5")
    assert result.normalized == "cheap board wipes usd<5"
    assert result.original == "Budget board wipes under $5"


def test_dollar_words_take_precedence_over_plain_comparisons() -> None:
    assert normalize_query("rocks over 20 dollars").normalized == "rocks usd>20"
    assert normalize_query("lands $3 or less").normalized == "land usd<=3"


def test_number_words_and_comparisons() -> None:
    result = normalize_query("creatures with three or more power")
    assert result.normalized == "creature with >=3 power"
    assert result.number_mappings == (NumberMapping(source="three", value=3),)


def test_shorthand_is_expanded() -> None:
    assert normalize_query("CMC 3 or less").normalized == "mana value <=3"
    assert normalize_query("etb creatures").normalized == "enters the battlefield creature"


def test_bare_dollar_amount_is_spelled_out() -> None:
    assert normalize_query("$5 rares").normalized == "5 dollars rares"


def test_quoted_phrases_survive_every_rewrite() -> None:
    result = normalize_query('spells "Two Creatures"')
    assert result.normalized == 'spell "two creatures"'
    assert result.preserved_phrases == ("two creatures",)
    assert result.number_mappings == ()


def test_multicolor_names_are_recorded() -> None:
    result = normalize_query("esper commanders")
    assert ColorMapping(source="esper", codes="wub") in result.color_mappings


def test_normalization_is_idempotent() -> None:
    for text in (
        "Budget board wipes under $5",
        "creatures with three or more power",
        "utility lands for commander in esper under $5",
        'spells "Two Creatures"',
    ):
        once = normalize_query(text).normalized
        assert normalize_query(once).normalized == once


def test_raw_syntax_detection() -> None:
    assert is_raw_syntax("t:creature c:r")
    assert is_raw_syntax("-t:land")
    assert is_raw_syntax("cmc<=3")
    assert not is_raw_syntax("mono red creatures")
    assert not is_raw_syntax("budget board wipes under $5")


def test_card_name_candidates() -> None:
    assert extract_card_name_candidates("what about Sol Ring") == ["Sol Ring"]
    assert extract_card_name_candidates('find "sol ring" please') == ["sol ring"]
    assert extract_card_name_candidates("mono red creatures") == []


def test_curly_quoted_phrases_are_recorded_verbatim() -> None:
    result = normalize_query("creatures “Urza’s tower”")
    assert result.normalized == 'creature "urza’s tower"'
    assert result.preserved_phrases == ("urza’s tower",)
