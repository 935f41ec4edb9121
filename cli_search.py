"""Terminal client that runs the download search in-process."""
from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Iterable, List

from app.cache import InMemoryCache, QueryCache
from app.catalog import CatalogQueryAdapter, ElasticsearchCatalog, InMemoryCatalog
from app.config import settings
from app.es_client import get_client
from app.importer import load_downloads
from app.models import ResultItem
from app.params import parse_exclude_ids
from app.search import DownloadSearch


def build_handler(catalog_path: Path | None) -> DownloadSearch:
    catalog: CatalogQueryAdapter
    if catalog_path is not None:
        catalog = InMemoryCatalog(load_downloads(catalog_path))
    else:
        catalog = ElasticsearchCatalog(get_client(), settings.es_index)
    return DownloadSearch(catalog=catalog, cache=QueryCache(InMemoryCache()))


def perform_query(handler: DownloadSearch, query: str, args: argparse.Namespace) -> List[ResultItem]:
    return asyncio.run(
        handler.handle(
            query,
            parse_exclude_ids(args.exclude),
            no_bundles=args.no_bundles,
            variations=args.variations,
            variations_only=args.variations_only,
            can_see_all_statuses=args.all_statuses,
        )
    )


def pretty_print_results(query: str, results: List[ResultItem]) -> None:
    print(f"Query: {query} | results: {len(results)}")
    for idx, item in enumerate(results, start=1):
        print(f"  {idx:02d}. {item.id} | {item.name}")


def interactive_shell(handler: DownloadSearch, args: argparse.Namespace) -> None:
    print("Interactive download search. Type 'exit' to quit.")
    while True:
        try:
            query = input("> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return
        if query.lower() in {"exit", "quit"}:
            return
        pretty_print_results(query, perform_query(handler, query, args))


def batch_mode(handler: DownloadSearch, file_path: Path, args: argparse.Namespace) -> None:
    with file_path.open("r", encoding="utf-8") as fh:
        for line in fh:
            query = line.strip()
            if not query:
                continue
            pretty_print_results(query, perform_query(handler, query, args))


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="CLI client for the download search")
    parser.add_argument("query", nargs="?", help="Search text. If omitted, starts REPL mode.")
    parser.add_argument("--batch", type=Path, help="File with queries to execute line by line")
    parser.add_argument("--catalog", type=Path, help="Search a downloads JSON file instead of Elasticsearch")
    parser.add_argument("--exclude", action="append", default=[], help="Download id to leave out (repeatable)")
    parser.add_argument("--no-bundles", action="store_true", help="Leave out bundle downloads")
    parser.add_argument("--variations", action="store_true", help="Add one row per named price option")
    parser.add_argument("--variations-only", action="store_true", help="Drop parent rows of variable-price downloads")
    parser.add_argument("--all-statuses", action="store_true", help="Include draft, private and scheduled downloads")
    args = parser.parse_args(list(argv) if argv is not None else None)

    handler = build_handler(args.catalog)
    if args.batch:
        batch_mode(handler, args.batch, args)
        return 0
    if args.query:
        pretty_print_results(args.query, perform_query(handler, args.query, args))
        return 0
    interactive_shell(handler, args)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
