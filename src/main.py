# src/main.py — v3
"""CLI entry point — ask, init, cache and health commands.

Usage:
    newsrag ask "<question>" [--session ID] [--stream]
    newsrag init
    newsrag cache stats
    newsrag cache clear [embeddings|queries|searches|all]
    newsrag cache warm [query ...]
    newsrag health
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from newsrag.cache.models import CLEAR_TYPES
from newsrag.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(_run(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="newsrag",
        description=f"newsrag v{__version__} — Retrieval-augmented news chat",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- ask ---
    p_ask = subparsers.add_parser("ask", help="Ask a question about the news")
    p_ask.add_argument("question", help="Question text")
    p_ask.add_argument(
        "--session", default=None,
        help="Session ID to record the exchange in (default: new session)",
    )
    p_ask.add_argument(
        "--stream", action="store_true",
        help="Print the answer token by token",
    )
    p_ask.set_defaults(func=_cmd_ask)

    # --- init ---
    p_init = subparsers.add_parser("init", help="Create the news collection if missing")
    p_init.set_defaults(func=_cmd_init)

    # --- cache ---
    p_cache = subparsers.add_parser("cache", help="Inspect or manage the cache")
    cache_sub = p_cache.add_subparsers(dest="cache_command")

    p_stats = cache_sub.add_parser("stats", help="Show key counts per namespace")
    p_stats.set_defaults(func=_cmd_cache_stats)

    p_clear = cache_sub.add_parser("clear", help="Delete cached entries")
    p_clear.add_argument(
        "type", nargs="?", default="all", choices=sorted(CLEAR_TYPES),
        help="Namespace to clear (default: all)",
    )
    p_clear.set_defaults(func=_cmd_cache_clear)

    p_warm = cache_sub.add_parser("warm", help="Pre-compute query embeddings")
    p_warm.add_argument(
        "queries", nargs="*",
        help="Queries to warm (default: CACHE_WARM_QUERIES)",
    )
    p_warm.set_defaults(func=_cmd_cache_warm)

    # --- health ---
    p_health = subparsers.add_parser("health", help="Check every dependency")
    p_health.set_defaults(func=_cmd_health)

    return parser


async def _run(args: argparse.Namespace) -> int:
    """Load settings, configure logging, run the command, release clients."""
    from newsrag.api.container import build_service
    from newsrag.config.settings import load_settings
    from newsrag.logging.logger import setup_logging

    settings = load_settings()
    setup_logging(
        level="DEBUG" if args.verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
        stream=sys.stderr,
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    service = build_service(settings)
    try:
        return await args.func(args, service, settings)
    finally:
        await service.aclose()


async def _cmd_ask(args, service, settings) -> int:
    """Answer one question and print it with its sources."""
    session_id = args.session
    if session_id is None or await service.conversations.get_session(session_id) is None:
        session_id = await service.create_session(session_id)

    def on_token(token: str) -> None:
        sys.stdout.write(token)
        sys.stdout.flush()

    reply = await service.send_message(
        session_id, args.question, on_token=on_token if args.stream else None,
    )
    if args.stream:
        print()
    else:
        print(reply.content)

    if reply.sources:
        print("\nSources:")
        for i, source in enumerate(reply.sources, start=1):
            line = f"  [{i}] {source.title} ({source.relevance_score:.2f})"
            if source.url:
                line += f" {source.url}"
            print(line)
    print(f"\nSession: {session_id}")
    return 0


async def _cmd_init(args, service, settings) -> int:
    created = await service.initialize()
    state = "created" if created else "already exists"
    print(f"Collection {settings.vector_db_collection}: {state}")
    print(f"Documents: {await service.orchestrator.gateway.count()}")
    return 0


async def _cmd_cache_stats(args, service, settings) -> int:
    stats = await service.orchestrator.cache.stats()
    if stats is None:
        logger.error("Cache backend unavailable")
        return 1
    print("\nCache statistics:")
    print(f"  Total keys:    {stats.total_keys}")
    print(f"  Embeddings:    {stats.embeddings}")
    print(f"  Queries:       {stats.queries}")
    print(f"  Searches:      {stats.searches}")
    print(f"  Sessions:      {stats.sessions}")
    print(f"  Chat history:  {stats.chat_history}")
    return 0


async def _cmd_cache_clear(args, service, settings) -> int:
    removed = await service.orchestrator.cache.clear(args.type)
    print(f"Cleared {removed} {args.type} entries")
    return 0


async def _cmd_cache_warm(args, service, settings) -> int:
    queries = args.queries or settings.cache_warm_queries_list
    if not queries:
        logger.error("No queries to warm")
        return 1
    warmed = await service.orchestrator.resolver.warm(queries)
    print(f"Warmed embeddings for {warmed} queries")
    return 0


async def _cmd_health(args, service, settings) -> int:
    report = await service.status()
    print(f"\nStatus: {report.status}")
    for name, health in (
        ("Cache", report.cache),
        ("Vector DB", report.vector_db),
        ("Embeddings", report.embeddings),
    ):
        detail = f" ({health.detail})" if health.detail else ""
        print(f"  {name + ':':<12} {health.status}{detail}")
    print(f"  {'Documents:':<12} {report.collection.points_count}")
    return 0 if report.status == "ok" else 1


if __name__ == "__main__":
    sys.exit(main())
