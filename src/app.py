"""Application composition root.

This module wires together configuration, the search client, the fast path and the concept
source for the CLI and the bot runtime.
"""

from __future__ import annotations

from dataclasses import dataclass
from time import monotonic

from psycopg_pool import ConnectionPool

from src.config.settings import Settings
from src.db.concepts import DatabaseConceptSource
from src.db.pool import create_pool
from src.intent.fast_path import FastPath, KeywordFastPath
from src.pipeline.runner import run_pipeline
from src.pipeline.schema import PipelineContext, PipelineFilters, PipelineOptions, PipelineResult
from src.query.concepts import ConceptSource
from src.search.client import SearchClient


@dataclass(frozen=True)
class App:
    """Shared application dependencies for handlers."""

    settings: Settings
    search_client: SearchClient
    fast_path: FastPath
    concept_source: ConceptSource | None = None
    pool: ConnectionPool | None = None

    def options(self, *, validate: bool | None = None, debug: bool = False) -> PipelineOptions:
        """Pipeline options derived from settings, with per-request overrides."""

        return PipelineOptions(
            validate_with_search=self.settings.validate_with_search if validate is None else validate,
            overly_broad_threshold=self.settings.overly_broad_threshold,
            max_query_length=self.settings.max_query_length,
            debug=debug,
        )

    def translate(
        self,
        text: str,
        *,
        validate: bool | None = None,
        filters: PipelineFilters | None = None,
        debug: bool = False,
    ) -> PipelineResult:
        """Run the pipeline for one request under the configured time budget."""

        context = PipelineContext(
            options=self.options(validate=validate, debug=debug),
            filters=filters or PipelineFilters(),
            deadline=monotonic() + self.settings.request_timeout_s,
        )
        return run_pipeline(
            text,
            context,
            fast_path=self.fast_path,
            concept_source=self.concept_source,
            search_client=self.search_client,
        )


def create_app(settings: Settings) -> App:
    """Create the application container.

    Note:
        When the concept database is enabled the returned pool is not opened.
        Call `app.pool.open()` at startup and `app.pool.close()` on shutdown.
    """

    search_client = SearchClient(
        base_url=settings.search_api_url,
        timeout_s=settings.search_timeout_s,
        max_retries=settings.search_max_retries,
        user_agent=settings.search_user_agent,
    )

    pool: ConnectionPool | None = None
    concept_source: ConceptSource | None = None
    if settings.concept_db_enabled:
        pool = create_pool(settings.database_url, statement_timeout_ms=settings.db_statement_timeout_ms)
        concept_source = DatabaseConceptSource(pool)

    return App(
        settings=settings,
        search_client=search_client,
        fast_path=KeywordFastPath(),
        concept_source=concept_source,
        pool=pool,
    )
