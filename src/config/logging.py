"""Logging configuration for the translator processes (CLI and bot)."""

from __future__ import annotations

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Third-party loggers that are chatty at INFO.
QUIET_LOGGERS: tuple[str, ...] = ("aiogram.event", "psycopg.pool")


def configure_logging(level: str | None = None) -> None:
    """Configure Python logging for the process.

    Records go to stderr: the CLI prints its JSON result on stdout, and bot replies never include
    log text.
    """

    log_level = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(level=log_level, format=LOG_FORMAT, stream=sys.stderr)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
