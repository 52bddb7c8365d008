"""Tests for query assembly from slots and concepts."""

from __future__ import annotations

from src.intent.schema import ColorSlot, ExtractedSlots, NumericConstraint, TypeSlots
from src.query.assemble import (
    apply_external_filters,
    assemble_query,
    balance_parentheses,
    build_color_clause,
    truncate_clauses,
)
from src.query.schema import ConceptMatch


def _concept(concept_id: str, template: str, *, priority: int = 50, negative: list[str] | None = None) -> ConceptMatch:
    return ConceptMatch(
        concept_id=concept_id,
        pattern=concept_id,
        templates=[template],
        negative_templates=negative or [],
        confidence=0.95,
        priority=priority,
        similarity=1.0,
        match_type="exact",
    )


def test_clause_order() -> None:
    slots = ExtractedSlots(
        format="commander",
        colors=ColorSlot(values=["w", "u", "b"], mode="identity", operator="within"),
        types=TypeSlots(include=["land"], exclude=["basic"]),
        price=NumericConstraint(op="<", value=5),
    )
    result = assemble_query(slots, [])
    assert result.query == "f:commander ci<=wub t:land -t:basic usd<5"
    assert result.warnings == []


def test_numeric_rarity_and_text_clauses() -> None:
    slots = ExtractedSlots(
        subtypes=["goblin"],
        mv=NumericConstraint(op="<=", value=3),
        power=NumericConstraint(op=">=", value=2),
        year=NumericConstraint(op=">", value=2020),
        rarity="rare",
        exclude_text=["flying"],
    )
    result = assemble_query(slots, [])
    assert result.query == 't:goblin mv<=3 pow>=2 year>2020 r:rare -o:"flying"'


def test_color_clause_operators() -> None:
    assert build_color_clause(ColorSlot(values=["w", "u"], mode="color", operator="or")) == "(c:w or c:u)"
    assert build_color_clause(ColorSlot(values=["w", "u"], mode="color", operator="and")) == "c:wu"
    assert build_color_clause(ColorSlot(values=["r"], mode="identity", operator="exact")) == "ci=r"
    assert build_color_clause(ColorSlot(values=["g"], mode="identity", operator="include")) == "ci>=g"


def test_instant_and_sorcery_collapse_to_or() -> None:
    result = assemble_query(ExtractedSlots(types=TypeSlots(include=["instant", "sorcery"])), [])
    assert result.query == "(t:instant or t:sorcery)"


def test_or_types_form_one_group() -> None:
    result = assemble_query(ExtractedSlots(types=TypeSlots(include_or=["artifact", "land"])), [])
    assert result.query == "(t:artifact or t:land)"


def test_concepts_are_ordered_by_priority() -> None:
    concepts = [_concept("low", "otag:low", priority=10), _concept("high", "otag:high", priority=90)]
    result = assemble_query(ExtractedSlots(), concepts)
    assert result.query == "otag:high otag:low"
    assert result.concepts_applied == ["high", "low"]


def test_concept_types_already_specified() -> None:
    slots = ExtractedSlots(types=TypeSlots(include=["creature"]))
    concepts = [_concept("lord", "t:creature otag:lord"), _concept("plain", "t:creature")]
    result = assemble_query(slots, concepts)

    assert result.query == "t:creature otag:lord"
    assert result.concepts_applied == ["lord"]
    assert result.warnings == ['Skipped concept "plain" - types already specified']


def test_negative_templates_follow_their_template() -> None:
    result = assemble_query(ExtractedSlots(), [_concept("rock", "otag:mana-rock", negative=["-t:land"])])
    assert result.query == "otag:mana-rock -t:land"


def test_concept_skipped_when_too_long() -> None:
    slots = ExtractedSlots(format="commander")
    result = assemble_query(slots, [_concept("long", "otag:a-very-long-tag-name")], max_query_length=20)
    assert result.query == "f:commander"
    assert result.warnings == ['Skipped concept "long" due to query length limit']


def test_duplicate_clauses_are_removed() -> None:
    slots = ExtractedSlots(tags=["otag:ramp"])
    result = assemble_query(slots, [_concept("ramp", "otag:ramp")])
    assert result.query == "otag:ramp"


def test_balance_parentheses() -> None:
    assert balance_parentheses("((t:a or t:b)") == "((t:a or t:b))"
    assert balance_parentheses("t:a)") == "t:a"


def test_truncate_drops_trailing_clauses() -> None:
    assert truncate_clauses("t:creature t:artifact usd<5", 20) == "t:creature"
    assert truncate_clauses("t:creature", 20) == "t:creature"
    assert truncate_clauses('o:"a very long oracle phrase"', 10) == 'o:"a very'


def test_external_filters_fill_gaps_only() -> None:
    assert (
        apply_external_filters("t:creature", format="modern", color_identity=["w", "u"], max_cmc=3)
        == "t:creature f:modern ci<=wu mv<=3"
    )
    assert apply_external_filters("f:commander t:land", format="modern") == "f:commander t:land"
    assert apply_external_filters("ci=r", color_identity=["g"]) == "ci=r"
    assert apply_external_filters("", max_cmc=2) == "mv<=2"
