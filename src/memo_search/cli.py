"""Command line front-end: query a JSON dump of notes.

The notes file holds either a JSON array of note objects or an object with a
``notes`` array. Results are written to stdout as JSON; logs go to stderr.
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence
import logging
from pathlib import Path
import sys
from typing import Any

import orjson
from pydantic import ValidationError

from memo_search.config import get_settings
from memo_search.domain.model import Document, SearchFilters, SearchOptions
from memo_search.engine import SearchEngine
from memo_search.observability.logging import configure_logging


logger = logging.getLogger(__name__)


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="memo-search", description="Relevance search over a JSON file of notes.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    search = subparsers.add_parser("search", help="Rank notes against a query")
    search.add_argument("notes", type=Path, help="Path to the notes JSON file")
    search.add_argument("query", help="Search query")
    search.add_argument("--limit", type=int, default=None, help="Maximum number of results")
    search.add_argument("--min-score", type=float, default=None, help="Discard results scoring at or below this")
    search.add_argument("--sort", choices=("relevance", "date", "title"), default="relevance")
    search.add_argument("--category", default=None)
    search.add_argument("--importance", choices=("high", "medium", "low"), default=None)
    search.add_argument("--tag", dest="tags", action="append", default=[], help="Require a tag (repeatable)")

    similar = subparsers.add_parser("similar", help="Find notes similar to one note")
    similar.add_argument("notes", type=Path)
    similar.add_argument("document_id")
    similar.add_argument("--limit", type=int, default=None)
    similar.add_argument("--threshold", type=float, default=None)

    suggest = subparsers.add_parser("suggest", help="Complete a partial query")
    suggest.add_argument("notes", type=Path)
    suggest.add_argument("prefix")
    suggest.add_argument("--limit", type=int, default=None)

    stats = subparsers.add_parser("stats", help="Show corpus statistics")
    stats.add_argument("notes", type=Path)
    return parser


def load_documents(path: Path) -> list[Document]:
    """Read and validate a notes file; raises ValueError on bad content."""
    payload: Any = orjson.loads(path.read_bytes())
    if isinstance(payload, dict):
        payload = payload.get("notes", [])
    if not isinstance(payload, list):
        raise ValueError("expected a JSON array of notes or an object with a 'notes' array")
    return [Document.model_validate(item) for item in payload]


def _run(engine: SearchEngine, args: argparse.Namespace, documents: list[Document]) -> Any:
    if args.command == "search":
        filters = SearchFilters(category=args.category, importance=args.importance, tags=tuple(args.tags))
        options = SearchOptions(
            filters=None if filters.is_empty() else filters,
            limit=engine.settings.default_limit if args.limit is None else args.limit,
            min_score=engine.settings.min_score if args.min_score is None else args.min_score,
            sort_by=args.sort,
        )
        results = engine.search(args.query, documents, options)
        return [result.model_dump(mode="json") for result in results]
    if args.command == "similar":
        results = engine.find_similar(args.document_id, documents, limit=args.limit, threshold=args.threshold)
        return [result.model_dump(mode="json") for result in results]
    if args.command == "suggest":
        return engine.autocomplete(args.prefix, documents, limit=args.limit)
    return engine.get_stats(documents).model_dump(mode="json")


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level, settings.log_json, stream=sys.stderr)

    try:
        documents = load_documents(args.notes)
    except FileNotFoundError as exc:
        logger.error("Notes file not found: %s", exc)
        return 1
    except (ValidationError, ValueError) as exc:
        logger.error("Invalid notes file %s: %s", args.notes, exc)
        return 1

    engine = SearchEngine(settings=settings)
    output = _run(engine, args, documents)
    sys.stdout.write(orjson.dumps(output, option=orjson.OPT_INDENT_2).decode() + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
