"""Concept matching over residual text.

Two sources are merged:
    1. `AliasTableSource`, the in-process concept library, matched against the whole residual
       (fixed confidence 0.95, `match_type="exact"`).
    2. An optional external `ConceptSource` (the Postgres alias matcher, or a vector service) asked
       about the first residual word. Concepts already found are skipped; failures are logged and
       matching continues with the exact results only.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from functools import lru_cache
from typing import Protocol

from src.intent.normalize import normalize_query
from src.intent.slots import strip_stop_words
from src.query.concept_library import CONCEPTS, Concept
from src.query.schema import ConceptMatch

logger = logging.getLogger(__name__)

EXACT_MATCH_CONFIDENCE = 0.95
DEFAULT_MAX_MATCHES = 5
DEFAULT_MIN_CONFIDENCE = 0.7


class ConceptSourceError(RuntimeError):
    """Raised by a concept source that could not answer."""


class ConceptSource(Protocol):
    """Capability interface for concept lookups."""

    def lookup(self, term: str, limit: int) -> list[ConceptMatch]:
        ...


@dataclass(frozen=True)
class _AliasRule:
    concept: Concept
    alias: str
    pattern: re.Pattern[str]


def _normalize_alias(alias: str) -> str:
    return strip_stop_words(normalize_query(alias).normalized)


def _to_match(concept: Concept, alias: str) -> ConceptMatch:
    return ConceptMatch(
        concept_id=concept.concept_id,
        pattern=alias,
        templates=list(concept.templates),
        negative_templates=list(concept.negative_templates),
        description=concept.description,
        confidence=EXACT_MATCH_CONFIDENCE,
        category=concept.category,
        priority=concept.priority,
        similarity=1.0,
        match_type="exact",
    )


class AliasTableSource:
    """In-process alias table built from the concept library.

    Aliases go through the same normalization as request text, so "draw cards" and "card draw"
    meet in the middle. A match needs a word boundary before the alias only, which lets plural
    forms match ("board wipes" matches "board wipe").
    """

    def __init__(self, concepts: Iterable[Concept] = CONCEPTS) -> None:
        rules: list[_AliasRule] = []
        for concept in concepts:
            for alias in concept.aliases:
                normalized = _normalize_alias(alias)
                if not normalized:
                    continue
                rules.append(_AliasRule(concept, normalized, re.compile(rf"\b{re.escape(normalized)}")))
        # Longer aliases first, so the most specific phrase names the match.
        self._rules = tuple(sorted(rules, key=lambda r: -len(r.alias)))

    def match(self, text: str) -> list[ConceptMatch]:
        """Return every concept with an alias found in `text`, once per concept."""

        value = strip_stop_words((text or "").lower())
        if not value:
            return []
        matches: dict[str, ConceptMatch] = {}
        for rule in self._rules:
            if rule.concept.concept_id in matches:
                continue
            if rule.pattern.search(value):
                matches[rule.concept.concept_id] = _to_match(rule.concept, rule.alias)
        return list(matches.values())

    def lookup(self, term: str, limit: int) -> list[ConceptMatch]:
        return self.match(term)[:limit]


@lru_cache(maxsize=1)
def default_alias_table() -> AliasTableSource:
    return AliasTableSource()


def find_concept_matches(
    residual: str,
    *,
    max_matches: int = DEFAULT_MAX_MATCHES,
    min_confidence: float = DEFAULT_MIN_CONFIDENCE,
    alias_table: AliasTableSource | None = None,
    external: ConceptSource | None = None,
) -> list[ConceptMatch]:
    """Match residual text against the alias table and, optionally, an external source.

    Results are ordered by similarity, then priority, then confidence (all descending), filtered
    to `confidence >= min_confidence`, and truncated to `max_matches`.
    """

    text = (residual or "").strip().lower()
    if not text or max_matches <= 0:
        return []

    table = alias_table or default_alias_table()
    matches = table.match(text)

    if external is not None:
        first_word = text.split()[0]
        found = {m.concept_id for m in matches}
        try:
            extra = external.lookup(first_word, max_matches)
        except Exception as exc:
            logger.warning("concept source failed term=%r error=%s", first_word, exc)
            extra = []
        for match in extra:
            if match.concept_id in found:
                continue
            found.add(match.concept_id)
            matches.append(match)

    ranked = sorted(matches, key=lambda m: (m.similarity, m.priority, m.confidence), reverse=True)
    return [m for m in ranked if m.confidence >= min_confidence][:max_matches]
