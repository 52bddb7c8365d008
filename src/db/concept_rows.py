"""Concept-to-row conversion helpers.

Both the seed loader and the integration tests need to turn concepts (built-in or from a JSON file)
into row tuples matching the `translation_rules` table. Keeping the conversion in one place keeps
the loader and the test fixtures in step.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from src.query.concept_library import Concept

ROW_COLUMNS: tuple[str, ...] = (
    "concept_id",
    "pattern",
    "scryfall_syntax",
    "scryfall_templates",
    "negative_templates",
    "aliases",
    "description",
    "confidence",
    "category",
    "priority",
)

DEFAULT_SEED_CONFIDENCE = 0.9


def concept_from_json(item: dict[str, Any]) -> Concept:
    """Build a `Concept` from a JSON object with the `Concept` field names."""

    try:
        templates = tuple(item["templates"])
        aliases = tuple(item["aliases"])
        concept_id = str(item["concept_id"])
    except KeyError as exc:
        raise ValueError(f"concept is missing field {exc}") from exc
    if not templates or not aliases:
        raise ValueError(f"concept {concept_id!r} needs at least one template and one alias")
    return Concept(
        concept_id=concept_id,
        aliases=aliases,
        templates=templates,
        description=str(item.get("description") or ""),
        category=str(item.get("category") or "general"),
        priority=int(item.get("priority", 50)),
        negative_templates=tuple(item.get("negative_templates") or ()),
    )


def iter_concept_rows(
    concepts: Sequence[Concept], *, confidence: float = DEFAULT_SEED_CONFIDENCE
) -> Iterable[tuple[Any, ...]]:
    """Yield row tuples (in `ROW_COLUMNS` order) for inserting into `translation_rules`."""

    for concept in concepts:
        yield (
            concept.concept_id,
            concept.aliases[0],
            concept.templates[0],
            list(concept.templates),
            list(concept.negative_templates),
            [a.lower() for a in concept.aliases],
            concept.description,
            confidence,
            concept.category,
            concept.priority,
        )
