"""Episode reconciliation command handler.

This module handles:
- Reconciling one or more AniList ids against a provider
- Caching non-empty results on disk (caller-side cache)
- Rendering the episode tables
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from os import cpu_count

from models.config import settings
from models.models import AnimeInfo
from services.anilist_service import AniListClient
from services.reconciler import requested_track
from services.repository import rep
from ui.components import console, episode_table, loading
from utils.cache_manager import cache_episodes
from utils.exceptions import AniMatchError
from utils.logging import get_logger

logger = get_logger(__name__)


@cache_episodes
def fetch_episodes(anilist_id, provider: str, audio: str, fetch_filler: bool = False) -> AnimeInfo:
    """Canonical metadata plus reconciled episodes for one AniList id."""
    client = AniListClient(rep.get_provider(provider))
    return client.fetch_anime_info(anilist_id, audio, fetch_filler)


def episodes(args) -> int:
    """Reconcile every requested id; ids are independent and run concurrently.

    Returns:
        Exit code (1 if any id failed with a hard error)
    """
    provider = (args.provider or settings.providers.default_provider).lower()
    rep.get_provider(provider)  # fail fast on unknown provider
    audio = requested_track(args.audio).value

    failed = 0
    results: dict[str, AnimeInfo] = {}
    workers = max(1, min(len(args.ids), cpu_count() or 4))

    with loading(f"Reconciling {len(args.ids)} title(s) on {provider}..."):
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(fetch_episodes, anilist_id, provider, audio, args.filler, not args.no_cache): anilist_id
                for anilist_id in args.ids
            }
            for future in as_completed(futures):
                anilist_id = futures[future]
                try:
                    results[anilist_id] = future.result()
                except AniMatchError as e:
                    failed += 1
                    logger.error(f"AniList id {anilist_id}: {e}")
                    console.print(f"[error]✗ {anilist_id}: {e}[/error]")

    # Print in the order requested
    for anilist_id in args.ids:
        info = results.get(anilist_id)
        if info is None:
            continue
        if not info.episodes:
            console.print(f"[warning]No {audio} episodes for '{info.title.display()}' on {provider}[/warning]")
            continue
        console.print(episode_table(info, provider))

    return 1 if failed else 0
