"""
Shared test fixtures and configuration for ani-match test suite.

This module provides:
- A fake provider adapter recording every call
- Sample canonical media and provider listings
- Registry cleanup and cache isolation fixtures
"""

import pytest

from models.config import settings
from models.models import (
    CanonicalMedia,
    EpisodeEncoding,
    EpisodeSources,
    MediaTitle,
    ProviderListing,
    SearchResult,
)
from services.repository import Repository


# ========== Fake Provider ==========


class FakeProvider:
    """In-memory provider adapter.

    search_results maps a query to the results it returns; listings maps a
    listing id to what fetch_info returns. Every call is appended to calls.
    """

    def __init__(
        self,
        name: str = "fakeprovider",
        encoding: EpisodeEncoding = EpisodeEncoding.GENERIC,
        dub_in_title: bool = False,
        search_results: dict | None = None,
        listings: dict | None = None,
        fail_search: bool = False,
    ) -> None:
        self.name = name
        self.encoding = encoding
        self.dub_in_title = dub_in_title
        self.search_results = search_results or {}
        self.listings = listings or {}
        self.fail_search = fail_search
        self.calls: list[tuple[str, str]] = []

    def search(self, query: str) -> list[SearchResult]:
        self.calls.append(("search", query))
        if self.fail_search:
            raise ConnectionError("search unavailable")
        return self.search_results.get(query, [])

    def fetch_info(self, listing_id: str) -> ProviderListing:
        self.calls.append(("fetch_info", listing_id))
        if listing_id not in self.listings:
            raise KeyError(listing_id)
        return self.listings[listing_id]

    def fetch_episode_sources(self, episode_id: str, server: str | None = None):
        self.calls.append(("fetch_episode_sources", episode_id))
        return EpisodeSources(sources=[{"url": f"https://cdn.example/{episode_id}.m3u8", "quality": server or "default"}])

    def fetch_episode_servers(self, episode_id: str):
        self.calls.append(("fetch_episode_servers", episode_id))
        return []


def raw_episodes(count: int, prefix: str = "ep") -> list[dict]:
    """Raw provider episode records numbered from 1."""
    return [{"id": f"{prefix}{i}", "number": i, "title": f"Episode {i}"} for i in range(1, count + 1)]


# ========== Sample Data Fixtures ==========


@pytest.fixture
def canonical_test_anime():
    """Canonical media whose romaji and English titles are identical."""
    return CanonicalMedia(
        id="100",
        mal_id=555,
        title=MediaTitle(romaji="Test Anime", english="Test Anime"),
        image="https://img.anili.st/media/100.jpg",
        image_hash="abc123",
    )


@pytest.fixture
def canonical_attack_on_titan():
    """Canonical media with distinct romaji and English titles."""
    return CanonicalMedia(
        id="16498",
        mal_id=16498,
        title=MediaTitle(romaji="Shingeki no Kyojin", english="Attack on Titan", native="進撃の巨人"),
        image="https://img.anili.st/media/16498.jpg",
    )


@pytest.fixture
def test_anime_listing():
    """Generic listing with three episodes and no declared track."""
    return ProviderListing(id="x1", title="Test Anime", episodes=raw_episodes(3))


@pytest.fixture
def malsync_record_naruto():
    """Cross-reference record with dub and sub pages on two sites."""
    return {
        "id": 20,
        "title": "Naruto",
        "Sites": {
            "Gogoanime": {
                "naruto": {"page": "Gogoanime", "url": "https://gogoanime.example/category/naruto", "title": "Naruto"},
                "naruto-dub": {
                    "page": "Gogoanime",
                    "url": "https://gogoanime.example/category/naruto-dub",
                    "title": "Naruto (Dub)",
                },
            },
            "Zoro": {
                "677": {"page": "Zoro", "url": "https://zoro.example/naruto-677", "title": "Naruto"},
            },
        },
    }


# ========== Cleanup Fixtures ==========


@pytest.fixture(autouse=True)
def reset_repository():
    """Auto-reset the provider registry before and after each test."""
    repo = Repository()
    repo.clear()
    yield
    repo.clear()


@pytest.fixture(autouse=True)
def isolated_cache(tmp_path, monkeypatch):
    """Point the on-disk cache at a temporary directory."""
    import utils.cache_manager as cache_manager

    monkeypatch.setattr(settings.cache, "cache_dir", tmp_path / "cache")
    monkeypatch.setattr(cache_manager, "_cache", None)
    yield
    if cache_manager._cache is not None:
        cache_manager._cache.close()
