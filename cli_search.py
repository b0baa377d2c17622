"""Terminal client that reuses the in-process search logic."""
from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Iterable

from catalog_search.config import settings
from catalog_search.models import SearchRequest, SearchResult
from catalog_search.repository import JsonCatalogRepository
from catalog_search.search_service import SearchService

MAX_RESULTS = 100
GREEN = "\033[92m"
RED = "\033[91m"
RESET = "\033[0m"


def build_service(catalog_path: Path) -> SearchService:
    repository = JsonCatalogRepository(catalog_path)
    return SearchService(repository, repository)


def perform_query(service: SearchService, query: str, args: argparse.Namespace) -> SearchResult:
    request = SearchRequest(
        query=query,
        brand=args.brand,
        category=args.category,
        min_price=args.min_price,
        max_price=args.max_price,
        in_stock=args.in_stock,
        sort_by=args.sort_by,
        sort_order=args.sort_order,
        limit=args.limit,
    )
    return asyncio.run(service.search_products(request))


def interactive_shell(service: SearchService, args: argparse.Namespace) -> None:
    print("Interactive catalog search. Type 'exit' to quit.")
    while True:
        try:
            query = input("> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return
        if not query:
            continue
        if query.lower() in {"exit", "quit"}:
            return
        pretty_print_response(query, perform_query(service, query, args))


def pretty_print_response(query: str, payload: SearchResult) -> None:
    eta = payload.durationMs
    color = GREEN if eta < 200 else RED
    eta_label = f"{color}{eta:.1f} ms{RESET}"
    print(f"Query: {query} | results: {payload.total} | ETA: {eta_label}")
    for idx, item in enumerate(payload.results[:MAX_RESULTS], start=payload.offset + 1):
        brand = item.brand.name if item.brand else "-"
        print(
            f"  {idx:02d}. score={item.score:.2f} | {brand} | "
            f"{item.model or '-'} | {item.name} | {item.price_display} | {item.stock_status}"
        )


def batch_mode(service: SearchService, file_path: Path, args: argparse.Namespace) -> None:
    with file_path.open("r", encoding="utf-8") as fh:
        for line in fh:
            query = line.strip()
            if not query:
                continue
            pretty_print_response(query, perform_query(service, query, args))


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="CLI client for the catalog search engine")
    parser.add_argument("query", nargs="?", help="Query string. If omitted, starts REPL mode.")
    parser.add_argument("--batch", type=Path, help="File with queries to execute line by line")
    parser.add_argument("--catalog", type=Path, default=Path(settings.catalog_path), help="JSON catalog file")
    parser.add_argument("--brand", help="Brand slug filter")
    parser.add_argument("--category", help="Category slug filter")
    parser.add_argument("--min-price", type=float, default=0.0)
    parser.add_argument("--max-price", type=float)
    parser.add_argument("--in-stock", action="store_true", help="Only items with stock")
    parser.add_argument("--sort-by", default="relevance", help="relevance, price, name, rating, date or stock")
    parser.add_argument("--sort-order", default="desc", choices=["asc", "desc"])
    parser.add_argument("--limit", type=int, default=20)
    args = parser.parse_args(list(argv) if argv is not None else None)

    service = build_service(args.catalog)
    if args.batch:
        batch_mode(service, args.batch, args)
        return 0
    if args.query:
        pretty_print_response(args.query, perform_query(service, args.query, args))
        return 0
    interactive_shell(service, args)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
