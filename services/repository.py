from scrapers.loader import ProviderProtocol
from utils.exceptions import ProviderNotFoundError


class Repository:
    """SingletonRepository
    get for methods that look up registered providers
    register should be called by a plugin load() function.

    Holds no per-call state: reconciliation calls only read the registry.
    """

    _instance = None

    def __init__(self) -> None:
        if getattr(self, "_initialized", False):
            return
        self.sources: dict[str, ProviderProtocol] = {}
        self._initialized = True

    def __new__(cls):
        if not Repository._instance:
            Repository._instance = super().__new__(cls)
        return Repository._instance

    def register(self, plugin: ProviderProtocol) -> None:
        self.sources[plugin.name.lower()] = plugin

    def unregister(self, name: str) -> None:
        self.sources.pop(name.lower(), None)

    def clear(self) -> None:
        """Forget every registered provider."""
        self.sources.clear()

    def get_active_sources(self) -> list[str]:
        """Get list of currently registered provider names.

        Returns:
            List of provider names (e.g., ["gogoanime", "zoro"])
        """
        return sorted(self.sources.keys())

    def get_provider(self, name: str) -> ProviderProtocol:
        """Look up a registered provider by name (case-insensitive).

        Raises:
            ProviderNotFoundError: If no provider with that name is registered
        """
        provider = self.sources.get(name.strip().lower())
        if provider is None:
            active = ", ".join(self.get_active_sources()) or "none"
            raise ProviderNotFoundError(f"Unknown provider '{name}' (registered: {active})")
        return provider


rep = Repository()
