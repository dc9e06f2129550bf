"""Reusable UI components: tables and loading()

This module consolidates terminal output for the CLI:
- episode_table() / results_table() / recent_table() - Rich tables
- loading() - Rich spinners for API calls
"""

from contextlib import contextmanager

from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner
from rich.table import Table
from rich.theme import Theme

from models.models import AnimeInfo, AnimeResult, EpisodeServer, EpisodeSources, RecentEpisode

# Catppuccin Mocha Theme
CATPPUCCIN_MOCHA = Theme(
    {
        "menu.title": "bold #cba6f7",  # Purple header
        "menu.text": "#cdd6f4",  # Light text
        "menu.muted": "#6c7086",  # Muted gray
        "info": "#89dceb",  # Sky blue for info
        "success": "#a6e3a1",  # Green for success
        "warning": "#f9e2af",  # Yellow for warnings
        "error": "#f38ba8",  # Red for errors
    }
)

# Global console with theme
console = Console(theme=CATPPUCCIN_MOCHA)


def episode_table(info: AnimeInfo, provider: str) -> Table:
    """Table of reconciled episodes for one title."""
    table = Table(
        title=f"[menu.title]{info.title.display()}[/menu.title] [menu.muted]({provider}, AniList {info.id})[/menu.muted]",
        header_style="menu.title",
    )
    table.add_column("#", justify="right")
    table.add_column("Episode id", style="info")
    table.add_column("Title", style="menu.text")
    table.add_column("Audio", style="menu.muted")
    table.add_column("Filler", justify="center")

    for episode in info.episodes:
        filler = "" if episode.is_filler is None else ("[warning]yes[/warning]" if episode.is_filler else "no")
        table.add_row(str(episode.number), episode.id, episode.title or "", episode.audio or "", filler)
    return table


def results_table(results: list[AnimeResult], title: str) -> Table:
    """Table of AniList results (search, trending, popular)."""
    table = Table(title=f"[menu.title]{title}[/menu.title]", header_style="menu.title")
    table.add_column("AniList", justify="right", style="info")
    table.add_column("MAL", justify="right", style="menu.muted")
    table.add_column("Title", style="menu.text")
    table.add_column("Status")
    table.add_column("Episodes", justify="right")

    for result in results:
        table.add_row(
            result.id,
            str(result.mal_id or ""),
            result.title.display(),
            result.status.value,
            str(result.total_episodes or "?"),
        )
    return table


def recent_table(results: list[RecentEpisode], provider: str) -> Table:
    table = Table(title=f"[menu.title]Recent episodes ({provider})[/menu.title]", header_style="menu.title")
    table.add_column("AniList", justify="right", style="info")
    table.add_column("Title", style="menu.text")
    table.add_column("#", justify="right")
    table.add_column("Episode id", style="info")

    for result in results:
        table.add_row(result.id, result.title.display(), str(result.episode_number or ""), result.episode_id)
    return table


def sources_table(sources: EpisodeSources, servers: list[EpisodeServer]) -> Table:
    table = Table(title="[menu.title]Sources[/menu.title]", header_style="menu.title")
    table.add_column("Kind", style="menu.muted")
    table.add_column("Name / quality", style="menu.text")
    table.add_column("URL", style="info")

    for source in sources.sources:
        table.add_row("source", str(source.get("quality") or ""), str(source.get("url") or ""))
    for server in servers:
        table.add_row("server", server.name, server.url)
    return table


@contextmanager
def loading(msg: str = "Loading..."):
    """Context manager for displaying loading indicators during operations.

    Args:
        msg: The message to display alongside the spinner

    Usage:
        with loading("Fetching episodes..."):
            info = client.fetch_anime_info(anilist_id)

    """
    with Live(
        Spinner("dots", text=msg),
        console=console,
        refresh_per_second=12.5,
        transient=True,  # Spinner disappears after completion
    ):
        yield
