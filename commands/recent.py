"""Recent episodes command handler."""

from services.anilist_service import anilist_client
from ui.components import console, loading, recent_table


def recent(args) -> int:
    with loading(f"Fetching recent episodes ({args.provider})..."):
        page = anilist_client.fetch_recent_episodes(args.provider, page=args.page)
    console.print(recent_table(page.results, args.provider))
    return 0
