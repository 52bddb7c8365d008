"""Confidence score and readable explanation for a translation."""

from __future__ import annotations

from collections.abc import Sequence

from src.intent.dictionaries import color_codes_to_names
from src.intent.schema import ExtractedSlots
from src.query.schema import ConceptMatch

BASE_CONFIDENCE = 0.5
FAST_PATH_BONUS = 0.3
CONCEPT_BONUS = 0.1
VALIDATION_BONUS = 0.05
REPAIR_BONUS = 0.05


def calculate_confidence(
    *,
    has_fast_path: bool,
    concept_count: int,
    validation_passed: bool = True,
    repair_succeeded: bool = True,
) -> float:
    """Score a translation.

    `validation_passed` and `repair_succeeded` default to true: a stage that did not run did not fail.
    """

    confidence = BASE_CONFIDENCE
    if has_fast_path:
        confidence += FAST_PATH_BONUS
    if concept_count > 0:
        confidence += CONCEPT_BONUS
    if validation_passed:
        confidence += VALIDATION_BONUS
    if repair_succeeded:
        confidence += REPAIR_BONUS
    return round(min(confidence, 1.0), 4)


def build_readable_explanation(
    original_query: str, slots: ExtractedSlots, concepts: Sequence[ConceptMatch]
) -> str:
    """One line: "Searching for commander-legal white/blue land Cards that ..."."""

    parts: list[str] = []
    if slots.format:
        parts.append(f"{slots.format}-legal")
    if slots.colors and slots.colors.values:
        parts.append("/".join(color_codes_to_names(slots.colors.values)))
    if slots.types.include:
        parts.append("/".join(slots.types.include))
    if concepts:
        parts.append(", ".join(c.description or c.concept_id for c in concepts))

    if not parts:
        return f"Searching for: {original_query}"
    return "Searching for " + " ".join(parts)
