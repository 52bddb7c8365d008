"""DB session configuration helpers.

Concept lookups run inside a request budget. Every session therefore gets a `statement_timeout`
next to the UTC timezone; a lookup that exceeds it raises instead of blocking the request.
"""

from __future__ import annotations

from functools import partial
from typing import Callable

from psycopg import Connection, sql

DEFAULT_STATEMENT_TIMEOUT_MS = 2000


def configure_session(conn: Connection, *, statement_timeout_ms: int | None = DEFAULT_STATEMENT_TIMEOUT_MS) -> None:
    """Set the session timezone to UTC and, optionally, a statement timeout."""

    with conn.cursor() as cur:
        cur.execute("SET TIME ZONE 'UTC'", prepare=False)
        if statement_timeout_ms:
            cur.execute(
                sql.SQL("SET statement_timeout = {}").format(sql.Literal(int(statement_timeout_ms))),
                prepare=False,
            )
    # `SET` starts a transaction when autocommit is disabled; commit so the pool doesn't see INTRANS.
    conn.commit()


def session_configurator(statement_timeout_ms: int | None) -> Callable[[Connection], None]:
    """Return a `configure` callback for `psycopg_pool.ConnectionPool`."""

    return partial(configure_session, statement_timeout_ms=statement_timeout_ms)
