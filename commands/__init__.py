"""Command handlers for ani-match CLI.

Each module handles one subcommand:
- episodes.py: Reconcile AniList ids into provider episode lists
- search.py: AniList search, trending and popular listings
- recent.py: Latest episode ids from the recent feed
- sources.py: Playable sources and servers for an episode id
"""

from commands.episodes import episodes
from commands.recent import recent
from commands.search import popular, search, trending
from commands.sources import sources

__all__ = ["episodes", "popular", "recent", "search", "sources", "trending"]
