"""Tests for concept → `translation_rules` row conversion."""

from __future__ import annotations

import pytest

from src.db.concept_rows import ROW_COLUMNS, concept_from_json, iter_concept_rows
from src.query.concept_library import CONCEPTS


def test_concept_from_json_applies_defaults() -> None:
    concept = concept_from_json(
        {"concept_id": "mill", "aliases": ["Mill", "self mill"], "templates": ["otag:mill"]}
    )

    assert concept.concept_id == "mill"
    assert concept.category == "general"
    assert concept.priority == 50
    assert concept.negative_templates == ()


@pytest.mark.parametrize(
    "item",
    [
        {"aliases": ["mill"], "templates": ["otag:mill"]},
        {"concept_id": "mill", "aliases": [], "templates": ["otag:mill"]},
    ],
)
def test_concept_from_json_rejects_incomplete_items(item: dict) -> None:
    with pytest.raises(ValueError):
        concept_from_json(item)


def test_rows_follow_column_order() -> None:
    concept = concept_from_json(
        {"concept_id": "mill", "aliases": ["Mill", "self mill"], "templates": ["otag:mill"], "priority": 70}
    )

    (row,) = list(iter_concept_rows([concept], confidence=0.8))

    assert len(row) == len(ROW_COLUMNS)
    values = dict(zip(ROW_COLUMNS, row))
    assert values["pattern"] == "Mill"
    assert values["aliases"] == ["mill", "self mill"]
    assert values["scryfall_syntax"] == "otag:mill"
    assert values["confidence"] == 0.8
    assert values["priority"] == 70


def test_builtin_library_converts() -> None:
    rows = list(iter_concept_rows(CONCEPTS))

    assert len(rows) == len(CONCEPTS)
    assert len({row[0] for row in rows}) == len(rows)
