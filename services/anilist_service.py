"""AniList metadata client.

GraphQL client for the canonical side of reconciliation:
- fetch_media(): canonical metadata (the only hard failure in the flow)
- fetch_anime_info(): canonical metadata plus reconciled episodes
- search() / advanced_search() / fetch_trending_anime() / fetch_popular_anime()
- fetch_recent_episodes(): latest episode ids from the recent feed
- fetch_episode_sources() / fetch_episode_servers(): delegate to the provider
"""

from typing import Any
from urllib.parse import quote

import requests

from models.config import settings
from models.models import (
    GENRES,
    AnimeInfo,
    AnimeResult,
    AudioTrack,
    CanonicalMedia,
    EpisodeServer,
    EpisodeSources,
    MediaStatus,
    MediaTitle,
    RecentEpisode,
    SearchPage,
    StreamingServer,
)
from scrapers.loader import ProviderProtocol
from services.anify_service import provider_episodes
from services.reconciler import EpisodeReconciler
from services.repository import rep
from utils.exceptions import (
    AniListError,
    AnifyError,
    InvalidEpisodeIdError,
    InvalidGenreError,
    ProviderError,
    ProviderNotFoundError,
)
from utils.http import get_json, hash_image, post_json
from utils.logging import get_logger

logger = get_logger(__name__)

MEDIA_FIELDS = """
    id
    idMal
    title { romaji english native userPreferred }
    coverImage { extraLarge large medium color }
    bannerImage
    status
    season
    seasonYear
    episodes
    nextAiringEpisode { episode }
    format
    description
    genres
    synonyms
    averageScore
    popularity
"""

MEDIA_QUERY = (
    """
query ($id: Int) {
    Media(id: $id, type: ANIME) {
"""
    + MEDIA_FIELDS
    + """
    }
}
"""
)

PAGE_QUERY = (
    """
query ($page: Int, $perPage: Int, $search: String, $type: MediaType, $format: MediaFormat,
       $sort: [MediaSort], $genres: [String], $id: Int, $year: String, $status: MediaStatus,
       $season: MediaSeason) {
    Page(page: $page, perPage: $perPage) {
        pageInfo { total currentPage lastPage hasNextPage }
        media(search: $search, type: $type, format: $format, sort: $sort, genre_in: $genres,
              id: $id, startDate_like: $year, status: $status, season: $season, isAdult: false) {
"""
    + MEDIA_FIELDS
    + """
        }
    }
}
"""
)

_STATUS = {
    "RELEASING": MediaStatus.ONGOING,
    "FINISHED": MediaStatus.COMPLETED,
    "NOT_YET_RELEASED": MediaStatus.NOT_YET_AIRED,
    "CANCELLED": MediaStatus.CANCELLED,
    "HIATUS": MediaStatus.HIATUS,
}


def parse_media_status(status: str | None) -> MediaStatus:
    """Translate an AniList status into MediaStatus (UNKNOWN when unrecognized)."""
    return _STATUS.get(status or "", MediaStatus.UNKNOWN)


def _parse_title(raw: dict | None) -> MediaTitle:
    raw = raw or {}
    return MediaTitle(
        romaji=raw.get("romaji"),
        english=raw.get("english"),
        native=raw.get("native"),
        user_preferred=raw.get("userPreferred"),
    )


def _episode_counts(item: dict) -> tuple[int | None, int | None]:
    """(total, current) episodes; airing shows count up to the next airing episode."""
    next_airing = (item.get("nextAiringEpisode") or {}).get("episode")
    aired = next_airing - 1 if next_airing else None
    total = item.get("episodes") or aired
    current = aired or item.get("episodes")
    return total, current


def _cover(item: dict) -> str | None:
    cover = item.get("coverImage") or {}
    return cover.get("extraLarge") or cover.get("large") or cover.get("medium")


def media_to_canonical(item: dict) -> CanonicalMedia:
    """Map an AniList Media object to CanonicalMedia."""
    total, current = _episode_counts(item)
    image = _cover(item)
    return CanonicalMedia(
        id=str(item["id"]),
        mal_id=item.get("idMal"),
        title=_parse_title(item.get("title")),
        status=parse_media_status(item.get("status")),
        season=item.get("season"),
        release_date=item.get("seasonYear"),
        image=image,
        image_hash=hash_image(image),
        cover=item.get("bannerImage"),
        cover_hash=hash_image(item.get("bannerImage")),
        total_episodes=total,
        current_episode=current,
        genres=item.get("genres") or [],
        description=item.get("description"),
        rating=item.get("averageScore"),
        popularity=item.get("popularity"),
        type=item.get("format"),
        color=(item.get("coverImage") or {}).get("color"),
        synonyms=item.get("synonyms") or [],
    )


def media_to_result(item: dict) -> AnimeResult:
    """Map an AniList Media object to a search result."""
    total, current = _episode_counts(item)
    image = _cover(item)
    return AnimeResult(
        id=str(item["id"]),
        mal_id=item.get("idMal"),
        title=_parse_title(item.get("title")),
        status=parse_media_status(item.get("status")),
        image=image,
        image_hash=hash_image(image),
        cover=item.get("bannerImage"),
        cover_hash=hash_image(item.get("bannerImage")),
        popularity=item.get("popularity"),
        description=item.get("description"),
        rating=item.get("averageScore"),
        genres=item.get("genres") or [],
        color=(item.get("coverImage") or {}).get("color"),
        total_episodes=total,
        current_episode=current,
        type=item.get("format"),
        release_date=item.get("seasonYear"),
    )


def latest_episode_id(item: dict, provider: str) -> str:
    """Id of the last episode the recent feed lists for a provider.

    The feed is assumed to list episodes oldest first; that ordering is not
    checked.
    """
    episodes = provider_episodes(item, provider)
    return str(episodes[-1].get("id", "")) if episodes else ""


def mal_id_from_mappings(item: dict) -> int | None:
    """MAL id from an Anify item's META mappings."""
    mal_id = next(
        (
            mapping.get("id")
            for mapping in item.get("mappings") or []
            if mapping.get("providerType") == "META" and mapping.get("providerId") == "mal"
        ),
        None,
    )
    return int(mal_id) if mal_id else None


def anify_to_result(item: dict) -> AnimeResult:
    """Map an Anify search item to a search result."""
    image = item.get("coverImage")
    return AnimeResult(
        id=str(item["id"]),
        mal_id=mal_id_from_mappings(item),
        title=_parse_title(item.get("title")),
        status=parse_media_status(item.get("status")),
        image=image,
        image_hash=hash_image(image),
        cover=item.get("bannerImage"),
        cover_hash=hash_image(item.get("bannerImage")),
        description=item.get("description"),
        rating=item.get("averageScore"),
        genres=item.get("genres") or [],
        color=item.get("color"),
        total_episodes=item.get("totalEpisodes"),
        current_episode=item.get("currentEpisode"),
        type=item.get("format"),
        release_date=item.get("year"),
    )


def anify_search(query: str, page: int = 1, per_page: int = 15) -> SearchPage:
    """Search Anify; used when AniList itself is unavailable.

    Raises:
        AnifyError: On transport, status or decoding failures
    """
    url = f"{settings.anify.api_url.rstrip('/')}/search/anime/{quote(query, safe='')}/{page}"
    try:
        data = get_json(url, params={"perPage": per_page})
    except (requests.RequestException, ValueError) as e:
        raise AnifyError(f"Anify search for '{query}' failed: {e}") from e

    if isinstance(data, list):
        items, info = data, {}
    elif isinstance(data, dict):
        items, info = data.get("results") or [], data
    else:
        raise AnifyError(f"Unexpected Anify search payload for '{query}'")

    last_page = info.get("lastPage")
    return SearchPage(
        current_page=info.get("currentPage") or page,
        has_next_page=bool(last_page and page < last_page),
        total_pages=last_page,
        total_results=info.get("total", len(items)),
        results=[anify_to_result(item) for item in items if isinstance(item, dict) and item.get("id")],
    )


def upstream_unavailable(error: AniListError) -> bool:
    """AniList answered 5xx or 429 (as opposed to a bad query or a missing title)."""
    status = error.status_code
    return status is not None and (status >= 500 or status == 429)


def recent_to_episode(item: dict, provider: str) -> RecentEpisode:
    image = item.get("coverImage") or item.get("bannerImage")
    latest = ((item.get("episodes") or {}).get("latest") or {}).get("latestTitle")
    return RecentEpisode(
        id=str(item["id"]),
        mal_id=mal_id_from_mappings(item),
        title=_parse_title(item.get("title")),
        image=image,
        image_hash=hash_image(image),
        rating=item.get("averageScore"),
        color=(item.get("anime") or {}).get("color"),
        episode_id=latest_episode_id(item, provider),
        episode_title=latest or f"Episode {item.get('currentEpisode')}",
        episode_number=item.get("currentEpisode"),
        genres=item.get("genres") or item.get("genre") or [],
        type=item.get("format"),
    )


class AniListClient:
    """GraphQL client for AniList, bound to one content provider."""

    def __init__(self, provider: ProviderProtocol | None = None) -> None:
        """Initialize the AniList client.

        Args:
            provider: Provider to reconcile against. Defaults to
                settings.providers.default_provider from the registry.
        """
        self._provider = provider

    @property
    def api_url(self) -> str:
        return settings.anilist.api_url

    @property
    def provider(self) -> ProviderProtocol:
        if self._provider is None:
            self._provider = rep.get_provider(settings.providers.default_provider)
        return self._provider

    def _query(self, query: str, variables: dict[str, Any] | None = None) -> dict:
        """Execute GraphQL query.

        Raises:
            AniListError: On transport errors or GraphQL errors
        """
        try:
            result = post_json(self.api_url, {"query": query, "variables": variables or {}})
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise AniListError(f"AniList request failed: {e}", status_code=status) from e
        except (requests.RequestException, ValueError) as e:
            raise AniListError(f"AniList request failed: {e}") from e

        if result.get("errors"):
            raise AniListError(f"GraphQL error: {result['errors']}")

        return result.get("data") or {}

    def _page(self, variables: dict[str, Any]) -> SearchPage:
        page = self._query(PAGE_QUERY, variables).get("Page") or {}
        info = page.get("pageInfo") or {}
        return SearchPage(
            current_page=info.get("currentPage") or variables.get("page", 1),
            has_next_page=bool(info.get("hasNextPage")),
            total_pages=info.get("lastPage"),
            total_results=info.get("total"),
            results=[media_to_result(item) for item in page.get("media") or []],
        )

    # ========== Canonical metadata ==========

    def fetch_media(self, anilist_id: str | int) -> CanonicalMedia:
        """Fetch canonical metadata for an AniList id.

        Raises:
            AniListError: If the request fails or the media does not exist
        """
        try:
            variables = {"id": int(anilist_id)}
        except (TypeError, ValueError):
            raise AniListError(f"Invalid AniList id: {anilist_id!r}") from None

        media = self._query(MEDIA_QUERY, variables).get("Media")
        if not media:
            raise AniListError(f"AniList media {anilist_id} not found")
        return media_to_canonical(media)

    def fetch_anime_info(
        self,
        anilist_id: str | int,
        audio: AudioTrack | str | bool = AudioTrack.SUB,
        fetch_filler: bool = False,
    ) -> AnimeInfo:
        """Canonical metadata plus the episodes reconciled on the active provider.

        An empty episode list means the provider has no matching listing.
        """
        canonical = self.fetch_media(anilist_id)
        episodes = EpisodeReconciler(self.provider).reconcile(canonical, audio, fetch_filler)
        return AnimeInfo(**canonical.model_dump(), episodes=episodes)

    # ========== Listings ==========

    def _anify_fallback(self, error: AniListError, query: str | None, page: int, per_page: int) -> SearchPage:
        """Answer a search from Anify when AniList is down or rate limiting.

        Raises:
            AniListError: The original error when no fallback applies, or a
                new one when the fallback fails too
        """
        if not (query and settings.anify.search_fallback and upstream_unavailable(error)):
            raise error
        logger.warning(f"AniList unavailable (HTTP {error.status_code}), searching Anify for '{query}'")
        try:
            return anify_search(query, page, per_page)
        except AnifyError as e:
            raise AniListError(f"{error}; Anify fallback failed: {e}", status_code=error.status_code) from e

    def search(self, query: str, page: int = 1, per_page: int | None = None) -> SearchPage:
        """AniList search, answered by Anify when AniList returns 5xx or 429."""
        per_page = per_page or settings.anilist.per_page
        try:
            return self._page({"search": query, "type": "ANIME", "page": page, "perPage": per_page})
        except AniListError as e:
            return self._anify_fallback(e, query, page, per_page)

    def advanced_search(
        self,
        query: str | None = None,
        type: str = "ANIME",
        page: int = 1,
        per_page: int = 20,
        format: str | None = None,
        sort: list[str] | None = None,
        genres: list[str] | None = None,
        id: str | int | None = None,
        year: int | None = None,
        status: str | None = None,
        season: str | None = None,
    ) -> SearchPage:
        """Filtered AniList search.

        With a query, an unavailable AniList (5xx/429) falls back to a plain
        Anify search; the other filters are not applied there.

        Raises:
            InvalidGenreError: If a genre is not one of GENRES
        """
        for genre in genres or []:
            if genre not in GENRES:
                raise InvalidGenreError(f"Invalid genre: {genre}")

        variables = {
            "search": query,
            "type": type,
            "page": page,
            "perPage": per_page,
            "format": format,
            "sort": sort,
            "genres": genres or None,
            "id": int(id) if id is not None else None,
            "year": f"{year}%" if year else None,
            "status": status,
            "season": season,
        }
        try:
            return self._page({key: value for key, value in variables.items() if value is not None})
        except AniListError as e:
            return self._anify_fallback(e, query, page, per_page)

    def fetch_trending_anime(self, page: int = 1, per_page: int = 10) -> SearchPage:
        return self._page({"type": "ANIME", "sort": ["TRENDING_DESC", "POPULARITY_DESC"], "page": page, "perPage": per_page})

    def fetch_popular_anime(self, page: int = 1, per_page: int = 10) -> SearchPage:
        return self._page({"type": "ANIME", "sort": ["POPULARITY_DESC"], "page": page, "perPage": per_page})

    def fetch_recent_episodes(self, provider: str = "gogoanime", page: int = 1, per_page: int = 25) -> SearchPage:
        """Recently aired episodes with their latest episode id on a provider.

        Raises:
            ProviderNotFoundError: If the feed does not track the provider
            ProviderError: If the feed request fails
        """
        provider = provider.lower()
        if provider not in settings.anify.recent_providers:
            supported = ", ".join(settings.anify.recent_providers)
            raise ProviderNotFoundError(f"Recent episodes are not available for '{provider}' (supported: {supported})")

        url = f"{settings.anify.api_url.rstrip('/')}/recent"
        try:
            data = get_json(url, params={"page": page, "perPage": per_page, "type": "anime"})
        except (requests.RequestException, ValueError) as e:
            raise ProviderError(f"Failed to fetch recent episodes: {e}") from e

        items = data if isinstance(data, list) else []
        return SearchPage(
            current_page=page,
            total_results=len(items),
            results=[recent_to_episode(item, provider) for item in items],
        )

    # ========== Playback delegation ==========

    def fetch_episode_sources(self, episode_id: str, server: StreamingServer | str | None = None) -> EpisodeSources:
        """Playable sources for an episode id produced by reconciliation.

        Raises:
            InvalidEpisodeIdError: If episode_id is empty
            InvalidServerError: If server is not a known streaming server
        """
        if not episode_id:
            raise InvalidEpisodeIdError("Episode ID is required")
        server_name = StreamingServer.parse(server).value if server else None
        return self.provider.fetch_episode_sources(episode_id, server_name)

    def fetch_episode_servers(self, episode_id: str) -> list[EpisodeServer]:
        if not episode_id:
            raise InvalidEpisodeIdError("Episode ID is required")
        return self.provider.fetch_episode_servers(episode_id)


# Shared client bound to the default provider (resolved on first use)
anilist_client = AniListClient()
