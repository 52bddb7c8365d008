"""Command-line translation of one request.

Example:
    python -m src.cli "budget board wipes under $5" --format commander --validate
"""

from __future__ import annotations

import argparse
import sys

from pydantic import ValidationError

from src.app import create_app
from src.config.logging import configure_logging
from src.config.settings import load_settings
from src.pipeline.schema import PipelineFilters


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Translate a card search request into query syntax.")
    parser.add_argument("text", help="Free-text request, e.g. 'mono red creatures under 3 mana'.")
    parser.add_argument(
        "--validate",
        action="store_true",
        default=None,
        help="Validate (and repair/broaden) the query against the search backend.",
    )
    parser.add_argument("--format", help="Restrict to a format unless the request names one.")
    parser.add_argument(
        "--color-identity",
        help="Color identity codes, e.g. WUB, applied unless the request names colors.",
    )
    parser.add_argument("--max-cmc", type=int, help="Maximum mana value unless the request names one.")
    parser.add_argument("--debug", action="store_true", help="Include slots, concepts and repair steps.")
    parser.add_argument("--log-level", help="Override LOG_LEVEL for this run.")
    return parser


def parse_filters(args: argparse.Namespace) -> PipelineFilters:
    colors = list((args.color_identity or "").lower())
    return PipelineFilters(format=args.format, color_identity=colors, max_cmc=args.max_cmc)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point; prints the pipeline result as JSON."""

    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    settings = load_settings()

    try:
        filters = parse_filters(args)
    except ValidationError as exc:
        parser.error(str(exc))

    app = create_app(settings)
    if app.pool is not None:
        app.pool.open(wait=True)
    try:
        result = app.translate(args.text, validate=args.validate, filters=filters, debug=args.debug)
    finally:
        if app.pool is not None:
            app.pool.close()

    print(result.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
