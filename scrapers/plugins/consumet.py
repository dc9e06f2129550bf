from urllib.parse import quote

import requests

from models.config import settings
from models.models import EpisodeEncoding, EpisodeServer, EpisodeSources, ProviderListing, SearchResult
from services.repository import rep
from utils.exceptions import ProviderError
from utils.http import get_json
from utils.logging import get_logger

from .utils import parse_title

logger = get_logger(__name__)


class ConsumetProvider:
    """Adapter for one provider behind a consumet-compatible JSON API.

    Routes (relative to {api_url}/anime/{name}):
        /{query}                     search
        /info?id=...                 listing with raw episodes
        /watch?episodeId=&server=    playable sources
        /servers?episodeId=          server list
    """

    def __init__(
        self,
        name: str,
        encoding: EpisodeEncoding = EpisodeEncoding.GENERIC,
        dub_in_title: bool = False,
        api_url: str | None = None,
    ) -> None:
        self.name = name
        self.encoding = encoding
        self.dub_in_title = dub_in_title
        self._api_url = api_url

    @property
    def base_url(self) -> str:
        return f"{(self._api_url or settings.providers.api_url).rstrip('/')}/anime/{self.name}"

    def _get(self, path: str, params: dict | None = None):
        url = f"{self.base_url}/{path}"
        try:
            return get_json(url, params=params)
        except (requests.RequestException, ValueError) as e:
            raise ProviderError(f"{self.name}: request to {url} failed: {e}") from e

    def search(self, query: str) -> list[SearchResult]:
        data = self._get(quote(query, safe=""))
        results = []
        for item in data.get("results") or []:
            if not item.get("id"):
                continue
            results.append(
                SearchResult(
                    id=str(item["id"]),
                    title=parse_title(item.get("title")),
                    url=item.get("url"),
                    image=item.get("image"),
                )
            )
        logger.debug(f"{self.name}: {len(results)} results for '{query}'")
        return results

    def fetch_info(self, listing_id: str) -> ProviderListing:
        data = self._get("info", {"id": listing_id})
        return ProviderListing(
            id=str(data.get("id") or listing_id),
            title=parse_title(data.get("title")),
            sub_or_dub=data.get("subOrDub"),
            episodes=data.get("episodes") or [],
        )

    def fetch_episode_sources(self, episode_id: str, server: str | None = None) -> EpisodeSources:
        params = {"episodeId": episode_id}
        if server:
            params["server"] = server
        return EpisodeSources.model_validate(self._get("watch", params))

    def fetch_episode_servers(self, episode_id: str) -> list[EpisodeServer]:
        data = self._get("servers", {"episodeId": episode_id})
        return [EpisodeServer(name=s["name"], url=s["url"]) for s in data or [] if s.get("url")]

    def __repr__(self) -> str:
        return f"<ConsumetProvider(name='{self.name}', encoding={self.encoding.value})>"


# (name, encoding, dub listed as a separate "(Dub)" title)
PROVIDERS = [
    ("gogoanime", EpisodeEncoding.GENERIC, True),
    ("zoro", EpisodeEncoding.SUFFIXED_ID, False),
    ("9anime", EpisodeEncoding.DUAL_FIELD, False),
    ("crunchyroll", EpisodeEncoding.GROUPED_BY_KEY, False),
    ("animepahe", EpisodeEncoding.GENERIC, False),
]


def load() -> None:
    for name, encoding, dub_in_title in PROVIDERS:
        rep.register(ConsumetProvider(name, encoding, dub_in_title))
