import argparse
import sys

from scrapers import loader
from ui.components import console
from utils.exceptions import AniMatchError
from utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ani-match",
        description="Match AniList titles to provider episode lists.",
    )
    parser.add_argument("--debug", "-d", action="store_true", help="Verbose logging on stderr")
    parser.add_argument("--clear-cache", action="store_true", help="Clear the on-disk cache and exit")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    episodes_parser = subparsers.add_parser("episodes", help="Reconcile AniList ids into provider episodes")
    episodes_parser.add_argument("ids", nargs="+", metavar="ANILIST_ID")
    episodes_parser.add_argument("--audio", "-a", default="sub", help="sub (default) or dub")
    episodes_parser.add_argument("--provider", "-p", help="Provider name (default from settings)")
    episodes_parser.add_argument("--filler", "-f", action="store_true", help="Add filler flags")
    episodes_parser.add_argument("--no-cache", action="store_true", help="Bypass the on-disk cache")

    search_parser = subparsers.add_parser("search", help="Search AniList")
    search_parser.add_argument("query")
    search_parser.add_argument("--page", type=int, default=1)

    for name, help_text in (("trending", "Trending anime"), ("popular", "Popular anime")):
        listing_parser = subparsers.add_parser(name, help=help_text)
        listing_parser.add_argument("--page", type=int, default=1)

    recent_parser = subparsers.add_parser("recent", help="Recently aired episodes")
    recent_parser.add_argument("--provider", "-p", default="gogoanime")
    recent_parser.add_argument("--page", type=int, default=1)

    sources_parser = subparsers.add_parser("sources", help="Playable sources for an episode id")
    sources_parser.add_argument("episode_id")
    sources_parser.add_argument("--server", "-s", help="Streaming server name")
    sources_parser.add_argument("--provider", "-p", help="Provider name (default from settings)")

    return parser


def cli(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(debug=args.debug)

    if args.clear_cache:
        from utils.cache_manager import clear_cache

        removed = clear_cache()
        console.print(f"[success]✓ Cache cleared ({removed} entries)[/success]")
        return 0

    if not args.command:
        parser.print_help()
        return 0

    import commands

    handlers = {
        "episodes": commands.episodes,
        "search": commands.search,
        "trending": commands.trending,
        "popular": commands.popular,
        "recent": commands.recent,
        "sources": commands.sources,
    }

    loader.load_plugins()
    try:
        return handlers[args.command](args)
    except AniMatchError as e:
        logger.error(str(e))
        console.print(f"[error]✗ {e}[/error]")
        return 1


if __name__ == "__main__":
    sys.exit(cli())
