"""Apply SQL migrations to the concept database.

Migrations are plain `.sql` files under `src/db/migrations/`, applied in lexicographic order.
Applied filenames are recorded in `schema_migrations`, so re-running is a no-op.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import LiteralString, cast

import psycopg
from src.db.connection import connect

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"

DROP_ALL_SQL = """
DROP FUNCTION IF EXISTS match_concepts_by_alias(TEXT, INTEGER);
DROP TABLE IF EXISTS translation_rules;
DROP TABLE IF EXISTS schema_migrations;
"""


def _ensure_schema_migrations(conn: psycopg.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS schema_migrations (
            filename TEXT PRIMARY KEY,
            applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );
        """,
        prepare=False,
    )


def list_migration_files(directory: Path = MIGRATIONS_DIR) -> list[Path]:
    """Return migration files in apply order."""

    if not directory.exists():
        raise RuntimeError(f"Migrations directory does not exist: {directory}")

    files = sorted(p for p in directory.iterdir() if p.is_file() and p.suffix == ".sql")
    if not files:
        raise RuntimeError(f"No .sql migration files found in {directory}")
    return files


def _get_applied_migrations(conn: psycopg.Connection) -> set[str]:
    rows = conn.execute("SELECT filename FROM schema_migrations", prepare=False).fetchall()
    return {r[0] for r in rows}


def _apply_migration(conn: psycopg.Connection, filename: str, sql_text: str) -> None:
    with conn.transaction():
        conn.execute(cast(LiteralString, sql_text), prepare=False)
        conn.execute(
            "INSERT INTO schema_migrations(filename) VALUES (%s)",
            (filename,),
            prepare=False,
        )


def apply_migrations(conn: psycopg.Connection, *, recreate: bool = False) -> list[str]:
    """Apply pending migrations on an open connection; return the filenames applied."""

    files = list_migration_files()
    if recreate:
        with conn.transaction():
            conn.execute(DROP_ALL_SQL, prepare=False)

    with conn.transaction():
        _ensure_schema_migrations(conn)
    applied = _get_applied_migrations(conn)

    newly_applied: list[str] = []
    for file_path in files:
        if file_path.name in applied:
            continue
        _apply_migration(conn, file_path.name, file_path.read_text(encoding="utf-8"))
        newly_applied.append(file_path.name)
    return newly_applied


def migrate(*, recreate: bool) -> list[str]:
    """Run migrations against the database pointed to by `DATABASE_URL`."""

    with connect() as conn:
        return apply_migrations(conn, recreate=recreate)


def main() -> None:
    """CLI entry point for applying migrations."""

    parser = argparse.ArgumentParser(description="Apply SQL migrations to Postgres.")
    parser.add_argument(
        "--recreate",
        action="store_true",
        help="Drop the concept tables and re-apply all migrations (destructive).",
    )
    args = parser.parse_args()

    for filename in migrate(recreate=args.recreate):
        print(f"applied {filename}")


if __name__ == "__main__":
    main()
