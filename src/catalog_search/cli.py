"""Command-line entry point for operating the scene index.

Operators can canonicalize filenames, rebuild the index from a JSON catalog
dump, and run fuzzy searches without writing Python.
"""

# ruff: noqa: T201  # CLI intentionally prints operator feedback

from __future__ import annotations

import argparse
from collections.abc import Sequence
from pathlib import Path
import sys
import textwrap

from catalog_search.adapters.scene_repository import CatalogLoadError, load_scenes_json
from catalog_search.config import Settings
from catalog_search.observability.logging import configure_logging
from catalog_search.observability.metrics import get_metrics
from catalog_search.search.canonicalize import canonicalize_filename
from catalog_search.search.locks import LockRegistry
from catalog_search.service_layer.indexing_service import IndexingService, IndexingStatus
from catalog_search.service_layer.search_service import SearchService


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="catalog-search",
        description="Build and query the scene search index",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent(
            """
            Examples:
              catalog-search canonicalize "PXVR.258_8K_h265.mp4"
              catalog-search rebuild --catalog scenes.json
              catalog-search rebuild --catalog scenes.json --metrics
              catalog-search search "JaneDoe" --catalog scenes.json
              catalog-search search "title:beach" --catalog scenes.json --index-root ./indexes
            """
        ).strip(),
    )
    parser.add_argument("--index-root", type=Path, help="Directory holding search indexes (overrides settings)")
    parser.add_argument("--log-level", help="Root log level (overrides settings)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    canonicalize = subparsers.add_parser("canonicalize", help="Print canonical search text for filenames")
    canonicalize.add_argument("filenames", nargs="+", metavar="FILENAME")

    rebuild = subparsers.add_parser("rebuild", help="Index every scene of a catalog dump")
    rebuild.add_argument("--catalog", type=Path, required=True, help="JSON array of scene records")
    rebuild.add_argument(
        "--metrics", action="store_true", help="Print the Prometheus metrics exposition after the rebuild"
    )

    search = subparsers.add_parser("search", help="Run a fuzzy search")
    search.add_argument("query")
    search.add_argument("--catalog", type=Path, required=True, help="JSON array of scene records")
    search.add_argument("--canonicalize", action="store_true", help="Treat the query as a raw filename")
    return parser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    overrides = {}
    if args.index_root is not None:
        overrides["index_root"] = args.index_root
    if args.log_level:
        overrides["log_level"] = args.log_level
    return Settings(**overrides)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    if args.command == "canonicalize":
        for filename in args.filenames:
            print(canonicalize_filename(filename))
        return 0

    settings = _settings_from_args(args)
    configure_logging(settings.log_level, settings.log_json)

    try:
        repository = load_scenes_json(args.catalog)
    except CatalogLoadError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    if args.command == "rebuild":
        service = IndexingService(repository, LockRegistry(), settings)
        result = service.rebuild_index()
        print(
            f"{result.status.value}: {result.indexed} indexed, {result.processed}/{result.total} processed, "
            f"{result.failed} failed"
        )
        print(f"Index: {settings.index_path}")
        if args.metrics:
            print(get_metrics().decode("utf-8"), end="")
        return 0 if result.status is IndexingStatus.COMPLETED and not result.failed else 1

    query = canonicalize_filename(args.query) if args.canonicalize else args.query
    results = SearchService(repository, settings).fuzzy_search(query)
    if not results:
        print("No scenes found.")
        return 0
    for scored in results:
        scene = scored.scene
        print(f"{scored.score:8.3f}  {scene.scene_id:<24} {scene.title}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
