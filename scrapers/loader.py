import importlib
import sys
from os import listdir
from os.path import abspath, dirname, isfile, join
from typing import Protocol

from models.config import settings
from models.models import EpisodeEncoding, EpisodeServer, EpisodeSources, ProviderListing, SearchResult
from utils.logging import get_logger

logger = get_logger(__name__)


class ProviderProtocol(Protocol):
    """Protocol for content provider adapters.

    Providers implementing this protocol host playable episodes.
    Uses structural typing (duck typing) - no inheritance required.
    The reconciliation engine only ever talks to this contract.
    """

    name: str  # Provider identifier (e.g., "gogoanime"), matched against cross-reference sites
    encoding: EpisodeEncoding  # How raw episode records encode sub/dub
    dub_in_title: bool  # Dubbed listings are separate titles marked "(Dub)"

    def search(self, query: str) -> list[SearchResult]:
        """Search the provider for a title.

        Args:
            query: Normalized title slug
        """
        ...

    def fetch_info(self, listing_id: str) -> ProviderListing:
        """Fetch a listing with its raw episode records.

        Args:
            listing_id: Provider-local id from search or a cross-reference URL
        """
        ...

    def fetch_episode_sources(self, episode_id: str, server: str | None = None) -> EpisodeSources:
        """Fetch playable sources for an episode id produced by reconciliation."""
        ...

    def fetch_episode_servers(self, episode_id: str) -> list[EpisodeServer]:
        """List the streaming servers offering an episode."""
        ...


def get_resource_path(relative_path):
    """Get the path to resources, whether running as script or executable."""
    if hasattr(sys, "_MEIPASS"):
        # PyInstaller executable
        return join(sys._MEIPASS, relative_path)
    return join(dirname(abspath(__file__)), relative_path)


def available_plugins() -> list[str]:
    """Names of all plugin modules shipped in scrapers/plugins/."""
    path = get_resource_path("plugins/")
    system = {"__init__.py", "utils.py"}
    return sorted(
        file[:-3]
        for file in listdir(path)
        if isfile(join(path, file)) and file.endswith(".py") and file not in system
    )


def load_plugins(plugins: list[str] | None = None) -> None:
    """Load provider plugins.

    Args:
        plugins: Optional list of specific plugins to load (overrides settings)
                 If None, loads all plugins except settings.plugins.disabled_plugins
    """
    if plugins is None:
        disabled = set(settings.plugins.disabled_plugins)
        plugins = [p for p in available_plugins() if p not in disabled]

    for plugin in plugins:
        plugin_module = importlib.import_module("scrapers.plugins." + plugin)
        plugin_module.load()
        logger.debug(f"Loaded plugin '{plugin}'")
