"""Tests for conflict detection over top-level clauses."""

from __future__ import annotations

from src.query.conflicts import (
    detect_query_conflicts,
    filter_concept_template_types,
    has_impossible_type_combination,
)


def test_simple_type_inside_or_group_is_redundant() -> None:
    report = detect_query_conflicts(["t:creature", "(t:creature or t:artifact)"])
    assert report.deduplicated == ["(t:creature or t:artifact)"]
    assert report.conflicts == ["Removed redundant type constraints: creature"]


def test_impossible_and_becomes_or() -> None:
    report = detect_query_conflicts(["ci=r", "t:creature", "t:instant"])
    assert report.deduplicated == ["ci=r", "(t:creature or t:instant)"]
    assert report.warnings == ["Impossible combination: cards cannot be both creature AND instant"]
    assert report.conflicts == ["Converted impossible AND to OR: creature, instant"]


def test_possible_type_pairs_are_kept() -> None:
    report = detect_query_conflicts(["t:artifact", "t:creature"])
    assert report.deduplicated == ["t:artifact", "t:creature"]
    assert report.conflicts == []


def test_equivalent_or_groups_are_deduplicated() -> None:
    report = detect_query_conflicts(["(t:artifact or t:land)", "(t:land or t:artifact)"])
    assert report.deduplicated == ["(t:artifact or t:land)"]


def test_negated_tag_loses_to_tag() -> None:
    report = detect_query_conflicts(["otag:ramp", "-otag:ramp"])
    assert report.deduplicated == ["otag:ramp"]
    assert report.conflicts == ["Removed contradictory tag constraint: otag:ramp and -otag:ramp"]


def test_case_insensitive_duplicates() -> None:
    assert detect_query_conflicts(["usd<5", "USD<5"]).deduplicated == ["usd<5"]


def test_excluded_type_wins_over_included() -> None:
    report = detect_query_conflicts(["t:land", "-t:land"])
    assert report.deduplicated == ["-t:land"]
    assert report.warnings == ['Contradictory constraint: both includes and excludes type "land"']


def test_filter_concept_template_types() -> None:
    template = "t:artifact (produces:w or produces:u) -t:creature"
    assert filter_concept_template_types(template, ["artifact"]) == "(produces:w or produces:u) -t:creature"
    assert filter_concept_template_types(template, []) == template
    assert filter_concept_template_types("t:creature", ["creature"]) == ""


def test_impossible_type_combination() -> None:
    assert has_impossible_type_combination("t:land t:sorcery")
    assert not has_impossible_type_combination("t:artifact t:creature")
    assert not has_impossible_type_combination("(t:land or t:sorcery)")


def test_instant_and_sorcery_become_one_group() -> None:
    report = detect_query_conflicts(["t:instant", "t:sorcery"])
    assert report.deduplicated == ["(t:instant or t:sorcery)"]
    assert report.warnings == ["Impossible combination: cards cannot be both instant AND sorcery"]
    assert has_impossible_type_combination("t:instant t:sorcery")
