"""Connection pool for concept lookups.

Lookups happen inside the synchronous pipeline, which the bot runs in worker threads, so the pool is
psycopg_pool's thread-safe `ConnectionPool`. Each lookup is one short query; the pool
stays small and both connecting and acquiring are bounded by timeouts.
"""

from __future__ import annotations

from dotenv import load_dotenv
from psycopg_pool import ConnectionPool

from src.db.connection import require_database_url
from src.db.session import DEFAULT_STATEMENT_TIMEOUT_MS, session_configurator

APPLICATION_NAME = "card-query-translator"
DEFAULT_POOL_SIZE = 4
DEFAULT_ACQUIRE_TIMEOUT_S = 5.0
DEFAULT_CONNECT_TIMEOUT_S = 5


def create_pool(
        database_url: str | None = None,
        *,
        max_size: int = DEFAULT_POOL_SIZE,
        acquire_timeout_s: float = DEFAULT_ACQUIRE_TIMEOUT_S,
        statement_timeout_ms: int = DEFAULT_STATEMENT_TIMEOUT_MS,
) -> ConnectionPool:
    """Create the concept lookup pool.

    Notes:
        - The pool is created with `open=False`; open it at startup and close it on shutdown.
        - If `database_url` is omitted, `.env` is loaded and `DATABASE_URL` is used.
        - `acquire_timeout_s` bounds the wait for a free connection; `PoolTimeout` is raised after it.
    """

    if database_url is None:
        load_dotenv(".env")
        database_url = require_database_url()

    return ConnectionPool(
        conninfo=database_url,
        min_size=1,
        max_size=max_size,
        timeout=acquire_timeout_s,
        open=False,
        name="concepts",
        kwargs={"application_name": APPLICATION_NAME, "connect_timeout": DEFAULT_CONNECT_TIMEOUT_S},
        configure=session_configurator(statement_timeout_ms),
    )
