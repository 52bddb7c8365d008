"""Load concept rules into Postgres.

By default the built-in concept library is loaded. `--path` loads a JSON file instead: a list of
objects with `concept_id`, `aliases`, `templates` and optionally `negative_templates`,
`description`, `category` and `priority`.
"""

from __future__ import annotations

import argparse
import json
from collections.abc import Iterable
from pathlib import Path

from src.db.concept_rows import concept_from_json, iter_concept_rows
from src.db.connection import connect
from src.query.concept_library import CONCEPTS, Concept


def _load_concepts(path: str | None) -> list[Concept]:
    if not path:
        return list(CONCEPTS)

    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, list):
        raise ValueError("Unexpected concepts format: expected a JSON list of concept objects")
    return [concept_from_json(item) for item in payload]


def _chunks(iterable: Iterable[tuple], size: int) -> Iterable[list[tuple]]:
    chunk: list[tuple] = []
    for item in iterable:
        chunk.append(item)
        if len(chunk) >= size:
            yield chunk
            chunk = []
    if chunk:
        yield chunk


def load_concepts(*, path: str | None, truncate: bool, batch_size: int) -> int:
    """Upsert concepts into `translation_rules`; return the number of concepts written."""

    if batch_size <= 0:
        raise ValueError("--batch-size must be a positive integer")

    concepts = _load_concepts(path)

    with connect() as conn:
        with conn.transaction():
            with conn.cursor() as cur:
                if truncate:
                    cur.execute("TRUNCATE translation_rules", prepare=False)

                for batch in _chunks(iter_concept_rows(concepts), batch_size):
                    cur.executemany(
                        """
                        INSERT INTO translation_rules (concept_id, pattern, scryfall_syntax,
                                                       scryfall_templates, negative_templates, aliases,
                                                       description, confidence, category, priority)
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s) ON CONFLICT (concept_id) DO
                        UPDATE SET
                            pattern = EXCLUDED.pattern,
                            scryfall_syntax = EXCLUDED.scryfall_syntax,
                            scryfall_templates = EXCLUDED.scryfall_templates,
                            negative_templates = EXCLUDED.negative_templates,
                            aliases = EXCLUDED.aliases,
                            description = EXCLUDED.description,
                            confidence = EXCLUDED.confidence,
                            category = EXCLUDED.category,
                            priority = EXCLUDED.priority,
                            is_active = TRUE
                        """,
                        batch,
                    )
    return len(concepts)


def main() -> None:
    """CLI entry point for loading concept rules into Postgres."""

    parser = argparse.ArgumentParser(description="Load concept rules into Postgres.")
    parser.add_argument("--path", help="Path to a concepts JSON file (default: built-in library).")
    parser.add_argument(
        "--truncate",
        action="store_true",
        help="TRUNCATE translation_rules before loading (destructive).",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=500,
        help="Number of rows per insert batch.",
    )
    args = parser.parse_args()

    count = load_concepts(path=args.path, truncate=args.truncate, batch_size=args.batch_size)
    print(f"loaded {count} concepts")


if __name__ == "__main__":
    main()
