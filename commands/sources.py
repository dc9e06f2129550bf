"""Episode sources command handler.

Looks up playable sources and servers for an episode id produced by
`ani-match episodes`, on the same provider.
"""

from models.config import settings
from services.anilist_service import AniListClient
from services.repository import rep
from ui.components import console, loading, sources_table


def sources(args) -> int:
    client = AniListClient(rep.get_provider(args.provider or settings.providers.default_provider))
    with loading(f"Fetching sources for '{args.episode_id}'..."):
        found = client.fetch_episode_sources(args.episode_id, args.server)
        servers = client.fetch_episode_servers(args.episode_id)
    console.print(sources_table(found, servers))
    return 0
