"""Direct (non-pooled) Postgres connections for the maintenance commands.

`migrate` and `load_concepts` run once and exit, so they open a single connection instead of a
pool. Sessions get the same UTC / statement-timeout setup as pooled ones.
"""

from __future__ import annotations

import os

import psycopg
from dotenv import load_dotenv

from src.db.session import configure_session


def require_database_url() -> str:
    """Read `DATABASE_URL` from the environment or raise a clear error."""

    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        raise RuntimeError("DATABASE_URL is required (set it in .env or environment)")
    return database_url


def connect(database_url: str | None = None, *, statement_timeout_ms: int | None = None) -> psycopg.Connection:
    """Open a configured connection.

    If `database_url` is omitted, `.env` is loaded and `DATABASE_URL` is used. Maintenance commands
    pass no statement timeout: migrations and bulk loads may legitimately run long.
    """

    if database_url is None:
        load_dotenv(".env")
        database_url = require_database_url()

    conn = psycopg.connect(database_url)
    configure_session(conn, statement_timeout_ms=statement_timeout_ms)
    return conn
