"""Tests for intent classification and ambiguity detection."""

from __future__ import annotations

from src.intent.classify import classify_intent, detect_ambiguity
from src.intent.schema import CardFunction, IntentMode


def test_function_rules_tag_board_wipes() -> None:
    intent = classify_intent("cheap board wipes usd<5")
    assert intent.mode == IntentMode.find_cards
    assert [f.function for f in intent.functions] == [CardFunction.wipe]
    assert not intent.is_card_name_search


def test_functions_are_ranked_by_confidence() -> None:
    intent = classify_intent("ramp and card draw")
    assert [f.function for f in intent.functions] == [CardFunction.ramp, CardFunction.draw]
    assert intent.functions[0].confidence >= intent.functions[1].confidence


def test_rules_question_beats_name_rule() -> None:
    assert classify_intent("how does ward work").mode == IntentMode.rules_question


def test_famous_card_name_is_a_name_search() -> None:
    intent = classify_intent("sol ring")
    assert intent.mode == IntentMode.find_card_by_name
    assert intent.card_name_candidate == "sol ring"
    assert intent.is_card_name_search


def test_deck_help_mode() -> None:
    intent = classify_intent("removal for my deck usd<10")
    assert intent.mode == IntentMode.deck_help
    assert CardFunction.removal in {f.function for f in intent.functions}


def test_counterspell_is_ambiguous() -> None:
    result = detect_ambiguity("counterspell")
    assert result.is_ambiguous
    assert [s.query for s in result.suggestions] == ['!"Counterspell"', "otag:counterspell"]


def test_tribe_is_ambiguous() -> None:
    result = detect_ambiguity("elves")
    assert [s.query for s in result.suggestions] == ["t:elf", 'o:"elf" -t:elf']


def test_long_requests_are_never_ambiguous() -> None:
    assert not detect_ambiguity("mono blue counterspell deck").is_ambiguous
    assert not detect_ambiguity("").is_ambiguous
