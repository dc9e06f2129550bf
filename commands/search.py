"""AniList listing command handlers (search, trending, popular)."""

from services.anilist_service import anilist_client
from ui.components import console, loading, results_table


def search(args) -> int:
    with loading(f"Searching '{args.query}'..."):
        page = anilist_client.search(args.query, page=args.page)
    if not page.results:
        console.print(f"[warning]No results for '{args.query}'[/warning]")
        return 0
    console.print(results_table(page.results, f"Search: {args.query} (page {page.current_page})"))
    return 0


def trending(args) -> int:
    with loading("Fetching trending anime..."):
        page = anilist_client.fetch_trending_anime(page=args.page)
    console.print(results_table(page.results, f"Trending (page {page.current_page})"))
    return 0


def popular(args) -> int:
    with loading("Fetching popular anime..."):
        page = anilist_client.fetch_popular_anime(page=args.page)
    console.print(results_table(page.results, f"Popular (page {page.current_page})"))
    return 0
