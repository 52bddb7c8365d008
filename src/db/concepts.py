"""Postgres-backed concept source.

Wraps the `match_concepts_by_alias(search_term, match_count)` SQL function. Rows become
`ConceptMatch`es with `match_type="alias"` and a fixed similarity of 0.85; missing confidence,
category and priority fall back to 0.8, `general` and 50.
"""

from __future__ import annotations

import logging
from typing import Any, LiteralString

import psycopg
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool, PoolTimeout
from pydantic import ValidationError

from src.query.concepts import ConceptSourceError
from src.query.schema import ConceptMatch

logger = logging.getLogger(__name__)

ALIAS_SIMILARITY = 0.85
DEFAULT_CONFIDENCE = 0.8
DEFAULT_CATEGORY = "general"
DEFAULT_PRIORITY = 50

MATCH_CONCEPTS_SQL: LiteralString = """
    SELECT concept_id, pattern, scryfall_syntax, scryfall_templates, negative_templates,
           description, confidence, category, priority
    FROM match_concepts_by_alias(%s, %s)
"""


def row_to_match(row: dict[str, Any]) -> ConceptMatch:
    """Convert one `match_concepts_by_alias` row to a `ConceptMatch`."""

    templates = [t for t in (row.get("scryfall_templates") or []) if t]
    if not templates and row.get("scryfall_syntax"):
        templates = [row["scryfall_syntax"]]
    confidence = row.get("confidence")
    return ConceptMatch(
        concept_id=row.get("concept_id") or row["pattern"],
        pattern=row["pattern"],
        templates=templates,
        negative_templates=[t for t in (row.get("negative_templates") or []) if t],
        description=row.get("description") or "",
        confidence=float(confidence) if confidence is not None else DEFAULT_CONFIDENCE,
        category=row.get("category") or DEFAULT_CATEGORY,
        priority=row.get("priority") or DEFAULT_PRIORITY,
        similarity=ALIAS_SIMILARITY,
        match_type="alias",
    )


class DatabaseConceptSource:
    """Concept lookups against the `translation_rules` table."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def lookup(self, term: str, limit: int) -> list[ConceptMatch]:
        """Return up to `limit` concepts for a single search term.

        Raises:
            ConceptSourceError: If the database is unavailable or times out.
        """

        value = (term or "").strip().lower()
        if not value or limit <= 0:
            return []

        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    # The term is always a bound parameter, never part of the SQL text.
                    cur.execute(MATCH_CONCEPTS_SQL, (value, limit))
                    rows = cur.fetchall()
        except (psycopg.Error, PoolTimeout) as exc:
            raise ConceptSourceError(f"concept lookup failed: {exc}") from exc

        matches: list[ConceptMatch] = []
        for row in rows:
            try:
                matches.append(row_to_match(row))
            except (KeyError, ValidationError) as exc:
                logger.warning("skipped concept row concept_id=%r error=%s", row.get("concept_id"), exc)
        return matches
