# =============================================================================
# src/cli/ingest.py - CLI for bootstrapping and querying the vector index
# =============================================================================
#
# Operator tool for the lexsearch corpus.  The same bootstrap orchestrator
# and search service the API uses are assembled locally, so a run from the
# command line behaves exactly like POST /api/ingest.
#
# Subcommands:
#
#   run      - Bootstrap an index from the local docs directory
#   search   - Run an MMR search and print the hits
#   stats    - Print the record count of an index
#   trigger  - Ask a deployed instance to bootstrap (POST /api/bootstrap)
#
# Usage examples:
#   python -m src.cli.ingest run --index contracts
#   python -m src.cli.ingest search "breach of contract"
#   python -m src.cli.ingest stats
#   python -m src.cli.ingest trigger --base-url https://lexsearch.example.com
# =============================================================================

"""Standalone CLI for the lexsearch vector index.

Usage::

    python -m src.cli.ingest run [--index NAME]
    python -m src.cli.ingest search QUERY
    python -m src.cli.ingest stats [--index NAME]
    python -m src.cli.ingest trigger [--base-url URL]
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Any

import httpx

from src.config.settings import Settings

_LOCAL_BASE_URL = "http://localhost:8000"
_TRIGGER_TIMEOUT_SECONDS = 30.0
_SNIPPET_CHARS = 200


def _build_components(app_settings: Settings) -> dict[str, Any]:
    """Assemble providers and services the same way the web app does.

    Imports are deferred so ``trigger`` (which only needs httpx) starts
    without loading the Pinecone and Voyage SDKs.
    """
    from src.config.loader import load_config
    from src.main import build_components

    return build_components(app_settings, load_config(settings=app_settings))


def _resolve_base_url(explicit: str | None, app_settings: Settings) -> str:
    """Pick the service URL: ``--base-url``, then ``https://$PRODUCTION_URL``, then localhost."""
    if explicit:
        return explicit.rstrip("/")
    if app_settings.production_url:
        host = app_settings.production_url.rstrip("/")
        return host if "://" in host else f"https://{host}"
    return _LOCAL_BASE_URL


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


async def _handle_run(index_name: str, components: dict[str, Any]) -> int:
    """Bootstrap *index_name* and print the outcome."""
    from src.models.document import BootstrapStatus
    from src.utils.errors import ConnectionTimeoutError

    print(f"Bootstrapping index: {index_name}")
    try:
        result = await components["bootstrap_service"].run(index_name)
    except ConnectionTimeoutError as exc:
        print(f"Error: connection timeout ({exc}). Please try again later.", file=sys.stderr)
        return 1

    print(f"\n{result.message}")
    print(f"  Status:           {result.status.value}")
    print(f"  Pages loaded:     {result.documents_loaded}")
    print(f"  Valid pages:      {result.valid_documents}")
    print(f"  Chunks created:   {result.chunks_created}")
    print(f"  Batches:          {result.batches_total} ({result.batches_skipped} skipped)")
    print(f"  Vectors upserted: {result.vectors_upserted}")
    print(f"  Time:             {result.ingestion_time:.2f}s")
    return 1 if result.status == BootstrapStatus.FAILED else 0


async def _handle_search(query: str, components: dict[str, Any]) -> int:
    """Run a search and print each hit with a text snippet."""
    try:
        hits = await components["search_service"].search(query)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if not hits:
        print("No results.")
        return 0

    for rank, hit in enumerate(hits, start=1):
        snippet = " ".join(hit.page_content.split())[:_SNIPPET_CHARS]
        source = hit.metadata.get("source", "")
        print(f"{rank:>2}. [{hit.score:.3f}] {hit.id}  {source}")
        print(f"    {snippet}")
    return 0


async def _handle_stats(index_name: str, components: dict[str, Any]) -> int:
    """Print the record count of *index_name*."""
    vector_store = components["vector_store"]
    if not vector_store.is_available():
        print("Vector store not configured; set PINECONE_API_KEY.", file=sys.stderr)
        return 1

    count = await vector_store.get_record_count(index_name)
    print("Index Statistics")
    print("=" * 40)
    print(f"  Index:    {index_name}")
    print(f"  Records:  {count}")
    return 0


async def _handle_trigger(
    base_url: str,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    """POST to ``/api/bootstrap`` on a running instance."""
    print(f"Triggering bootstrap at {base_url}/api/bootstrap")
    try:
        async with httpx.AsyncClient(
            base_url=base_url,
            timeout=_TRIGGER_TIMEOUT_SECONDS,
            transport=transport,
        ) as client:
            response = await client.post("/api/bootstrap")
    except httpx.HTTPError as exc:
        print(f"Error: request failed: {exc}", file=sys.stderr)
        return 1

    try:
        body = response.json()
    except ValueError:
        body = {}

    if response.is_success:
        print(body.get("message", f"HTTP {response.status_code}"))
        return 0

    print(
        f"Error: HTTP {response.status_code}: {body.get('error', response.text)}",
        file=sys.stderr,
    )
    return 1


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m src.cli.ingest",
        description="Bootstrap and query the lexsearch vector index.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    run_parser = subparsers.add_parser("run", help="Bootstrap an index from the docs directory")
    run_parser.add_argument("--index", help="Index name (default: PINECONE_INDEX)")

    search_parser = subparsers.add_parser("search", help="Search the configured index")
    search_parser.add_argument("query", help="Natural-language query")

    stats_parser = subparsers.add_parser("stats", help="Show the record count of an index")
    stats_parser.add_argument("--index", help="Index name (default: PINECONE_INDEX)")

    trigger_parser = subparsers.add_parser(
        "trigger", help="Ask a deployed instance to bootstrap its index"
    )
    trigger_parser.add_argument(
        "--base-url",
        dest="base_url",
        help="Service URL (default: https://$PRODUCTION_URL, else http://localhost:8000)",
    )

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """Parse arguments, dispatch to a handler and exit with its status code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    app_settings = Settings()

    if args.command == "trigger":
        base_url = _resolve_base_url(args.base_url, app_settings)
        sys.exit(asyncio.run(_handle_trigger(base_url)))

    index_name = getattr(args, "index", None) or app_settings.pinecone_index
    if args.command in ("run", "stats") and not index_name:
        print("Error: no index given; pass --index or set PINECONE_INDEX.", file=sys.stderr)
        sys.exit(1)

    components = _build_components(app_settings)

    if args.command == "run":
        exit_code = asyncio.run(_handle_run(index_name, components))
    elif args.command == "search":
        exit_code = asyncio.run(_handle_search(args.query, components))
    else:
        exit_code = asyncio.run(_handle_stats(index_name, components))

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
