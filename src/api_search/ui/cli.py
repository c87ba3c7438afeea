"""Command-line interface for the API search engine."""

import argparse
import json
import sys
from typing import List, Optional


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="api-search",
        description="API Search Engine - find and call the right API for a request",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s index --endpoints endpoints.json --output index.json
  %(prog)s index --spec-dir ./specs --output index.json
  %(prog)s search --index index.json "send a text message"
  %(prog)s search --index index.json -i            # Interactive mode
  %(prog)s solve --index index.json "book a table for two tonight"
  %(prog)s cache-stats
  %(prog)s datagen --companies-file companies.txt --output ./specs
        """,
    )
    sub = parser.add_subparsers(dest="command")

    index = sub.add_parser("index", help="Build an index from catalogue endpoints or spec files")
    source = index.add_mutually_exclusive_group(required=True)
    source.add_argument("--endpoints", help="JSON file listing catalogue endpoints")
    source.add_argument("--spec-dir", help="Directory of *.json API specs")
    index.add_argument("-o", "--output", help="Where to write the index (default: INDEX_FILE)")
    index.add_argument("-c", "--max-concurrency", type=int, help="Entries indexed at once")
    index.add_argument("-t", "--timeout", type=float, help="Overall deadline in seconds")

    search = sub.add_parser("search", help="Search the index")
    search.add_argument("query", nargs="?", help="Search query")
    search.add_argument("-i", "--interactive", action="store_true", help="Interactive mode")
    search.add_argument("--index", help="Index file (default: INDEX_FILE)")
    search.add_argument("-n", "--top-n", type=int, help="Number of results")
    search.add_argument("--no-verify", action="store_true", help="Skip LLM verification")
    search.add_argument("-t", "--timeout", type=float, help="Deadline in seconds")
    search.add_argument("--json", action="store_true", help="Output as JSON")

    solve = sub.add_parser("solve", help="Pick an API for a request and draft the call")
    solve.add_argument("query", help="What the user wants done")
    solve.add_argument("--index", help="Index file (default: INDEX_FILE)")
    solve.add_argument("--json", action="store_true", help="Output as JSON")

    stats = sub.add_parser("cache-stats", help="Show cache statistics")
    stats.add_argument("--json", action="store_true", help="Output as JSON")

    sub.add_parser("cache-clear", help="Clear the cache")

    datagen = sub.add_parser("datagen", help="Generate synthetic OpenAPI specs for --spec-dir")
    datagen.add_argument("--companies-file", required=True, help="Text file with one company per line")
    datagen.add_argument("-o", "--output", required=True, help="Directory to write specs into")
    datagen.add_argument("-n", type=int, default=0, help="Only the first N companies (0 = all)")
    datagen.add_argument("-c", "--max-concurrency", type=int, default=5, help="Specs generated at once")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point. Returns the process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 2

    # Lazy import to avoid slow startup for help text
    from api_search.config import Settings, create_components
    from api_search.core.exceptions import ApiSearchError, ConfigurationError

    try:
        settings = Settings()
        if getattr(args, "index", None):
            settings.index_file = args.index
        components = create_components(settings)
        return _COMMANDS[args.command](args, components)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    except (ApiSearchError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _index(args, components) -> int:
    from api_search.catalogue import load_endpoints
    from api_search.core.cancellation import CancelScope
    from api_search.indexing import save_index
    from api_search.search import RefreshIndexOptions

    settings = components["settings"]
    engine = components["engine"]
    output = args.output or settings.index_file
    if not output:
        print("Error: provide --output or set INDEX_FILE", file=sys.stderr)
        return 2
    max_concurrency = args.max_concurrency or settings.max_concurrency

    if args.endpoints:
        documents = engine.refresh_index(
            load_endpoints(args.endpoints),
            RefreshIndexOptions(max_concurrency=max_concurrency, timeout=args.timeout),
        )
    else:
        documents = engine.indexer.index_spec_directory(
            args.spec_dir, max_concurrency, CancelScope(timeout=args.timeout)
        )
        engine.set_index(documents)
        engine.cache.save_to_disk()

    save_index(output, documents)
    print(f"Indexed {len(documents)} APIs into {output}")
    return 0


def _search(args, components) -> int:
    from api_search.config.factory import default_search_options
    from api_search.core.exceptions import ApiSearchError

    options = default_search_options(components["settings"])
    if args.top_n:
        options.top_n = args.top_n
    if args.no_verify:
        options.verify = False
    options.timeout = args.timeout
    engine = components["engine"]

    if not args.interactive:
        if not args.query:
            print("Error: a query is required unless --interactive is set", file=sys.stderr)
            return 2
        _print_results(engine.search(args.query, options), args.json)
        return 0

    print("\n=== API Search Engine (Interactive Mode) ===")
    print("Type 'quit' or 'exit' to stop\n")
    while True:
        try:
            query = input("Query: ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\nGoodbye!")
            return 0
        if query.lower() in ("quit", "exit", "q"):
            print("Goodbye!")
            return 0
        if not query:
            continue
        try:
            _print_results(engine.search(query, options), args.json)
        except (ApiSearchError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)


def _solve(args, components) -> int:
    from api_search.agent import SolveStatus
    from api_search.config.factory import create_browser

    browser = create_browser(components["engine"], components["settings"])
    result = components["agent"].solve(args.query, browser)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    elif result.status is SolveStatus.NO_RELEVANT_API:
        print("No relevant API found.")
    else:
        print(f"Using: {result.chosen.title}")
        print(result.to_json())
    return 0


def _cache_stats(args, components) -> int:
    stats = components["engine"].get_cache_stats()
    if args.json:
        print(json.dumps(stats.to_dict(), indent=2))
    else:
        print("\n=== Cache Statistics ===")
        print(f"Lookups:    {stats.lookups}")
        print(f"Hits:       {stats.hits}")
        print(f"Hit Rate:   {stats.hit_rate_percent:.1f}%")
        print(f"Cache Size: {stats.cache_size} entries")
    return 0


def _cache_clear(args, components) -> int:
    components["engine"].clear_cache()
    print("Cache cleared successfully")
    return 0


def _datagen(args, components) -> int:
    from api_search.indexing import SpecGenerator, read_companies

    companies = read_companies(args.companies_file)
    if args.n > 0:
        companies = companies[: args.n]
    paths = SpecGenerator(components["model_api"]).generate_all(
        companies, args.output, max_concurrency=args.max_concurrency
    )
    written = [p for p in paths if p is not None]
    print(f"Generated {len(written)} of {len(companies)} specs in {args.output}")
    return 0 if len(written) == len(companies) else 1


def _print_results(results, as_json: bool) -> None:
    if as_json:
        print(json.dumps([r.to_dict() for r in results], indent=2))
        return

    if not results:
        print("No matching APIs.")
        return
    print(f"\n{'=' * 60}")
    for rank, result in enumerate(results, 1):
        where = f"  [{result.endpoint.url}]" if result.endpoint else ""
        print(f"{rank}. {result.title} ({result.score:.3f}){where}")
        print(f"   {result.summary}")
    print("=" * 60)


_COMMANDS = {
    "index": _index,
    "search": _search,
    "solve": _solve,
    "cache-stats": _cache_stats,
    "cache-clear": _cache_clear,
    "datagen": _datagen,
}


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
