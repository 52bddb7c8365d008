"""Tests for concept matching over residual text."""

from __future__ import annotations

import logging

import pytest

from src.intent.normalize import normalize_query
from src.intent.slots import extract_slots
from src.query.concept_library import CONCEPTS, Concept
from src.query.concepts import (
    EXACT_MATCH_CONFIDENCE,
    AliasTableSource,
    ConceptSourceError,
    find_concept_matches,
)
from src.query.schema import ConceptMatch


def _alias_match(concept_id: str, *, confidence: float = 0.8, priority: int = 50) -> ConceptMatch:
    return ConceptMatch(
        concept_id=concept_id,
        pattern=concept_id,
        templates=[f"otag:{concept_id}"],
        confidence=confidence,
        priority=priority,
        similarity=0.85,
        match_type="alias",
    )


class _FakeSource:
    def __init__(self, matches: list[ConceptMatch]) -> None:
        self.matches = matches
        self.terms: list[str] = []

    def lookup(self, term: str, limit: int) -> list[ConceptMatch]:
        self.terms.append(term)
        return self.matches[:limit]


class _FailingSource:
    def lookup(self, term: str, limit: int) -> list[ConceptMatch]:
        raise ConceptSourceError("database unavailable")


def test_concept_ids_are_unique() -> None:
    ids = [c.concept_id for c in CONCEPTS]
    assert len(ids) == len(set(ids))
    assert all(c.templates and c.aliases for c in CONCEPTS)


def test_plural_forms_match_singular_alias() -> None:
    matches = AliasTableSource().match("board wipes")
    assert [m.concept_id for m in matches] == ["board_wipe"]
    assert matches[0].match_type == "exact"
    assert matches[0].confidence == EXACT_MATCH_CONFIDENCE
    assert matches[0].similarity == 1.0


def test_each_concept_matches_once() -> None:
    matches = AliasTableSource().match("wrath sweeper board wipe")
    assert [m.concept_id for m in matches] == ["board_wipe"]


def test_aliases_are_normalized_like_requests() -> None:
    table = AliasTableSource(
        [Concept("etb_payoff", ("ETB triggers",), ("otag:etb",), "Enter triggers", "general", 50)]
    )
    assert [m.concept_id for m in table.match("enters the battlefield triggers")] == ["etb_payoff"]


def test_several_concepts() -> None:
    matches = find_concept_matches("ramp and card draw")
    assert {m.concept_id for m in matches} == {"ramp", "card_draw"}


def test_no_match_and_empty_input() -> None:
    assert find_concept_matches("mono red") == []
    assert find_concept_matches("") == []
    assert find_concept_matches("ramp", max_matches=0) == []


def test_external_source_adds_new_concepts_after_exact_ones() -> None:
    source = _FakeSource([_alias_match("ramp"), _alias_match("cultivate_effects", priority=99)])
    matches = find_concept_matches("ramp spells", external=source)

    assert source.terms == ["ramp"]
    assert [m.concept_id for m in matches] == ["ramp", "cultivate_effects"]
    assert matches[0].match_type == "exact"
    assert matches[1].match_type == "alias"


def test_low_confidence_matches_are_dropped() -> None:
    source = _FakeSource([_alias_match("weak", confidence=0.5)])
    matches = find_concept_matches("ramp", external=source, min_confidence=0.7)
    assert [m.concept_id for m in matches] == ["ramp"]


def test_max_matches_truncates() -> None:
    source = _FakeSource([_alias_match("a"), _alias_match("b"), _alias_match("c")])
    matches = find_concept_matches("ramp", external=source, max_matches=2)
    assert [m.concept_id for m in matches] == ["ramp", "a"]


def test_source_failure_keeps_exact_matches(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="src.query.concepts"):
        matches = find_concept_matches("board wipes", external=_FailingSource())

    assert [m.concept_id for m in matches] == ["board_wipe"]
    assert "concept source failed" in caplog.text


def test_destroy_all_matches_after_type_extraction() -> None:
    slots = extract_slots(normalize_query("destroy all creatures").normalized)
    assert slots.residual == "destroy all"
    assert [m.concept_id for m in find_concept_matches(slots.residual)] == ["board_wipe"]
