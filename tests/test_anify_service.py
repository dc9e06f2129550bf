"""
Tests for services/anify_service.py

Coverage:
- Which titles and providers are looked up on Anify
- Per-provider episode extraction
- Episode mapping and failures
"""

from datetime import date
from unittest.mock import patch

import pytest
import requests

from models.models import CanonicalMedia, MediaStatus, MediaTitle
from services.anify_service import fetch_episodes, provider_episodes, should_use_anify
from utils.exceptions import AnifyError


def media(status: MediaStatus = MediaStatus.COMPLETED, year: int | None = None) -> CanonicalMedia:
    return CanonicalMedia(id="100", title=MediaTitle(romaji="Test Anime"), status=status, release_date=year)


@pytest.fixture
def info_payload():
    return {
        "id": "100",
        "episodes": {
            "latest": {},
            "data": [
                {
                    "providerId": "zoro",
                    "episodes": [{"id": "test-anime-1?ep=1", "number": 1}],
                },
                {
                    "providerId": "GogoAnime",
                    "episodes": [
                        {
                            "id": "/test-anime-episode-1",
                            "number": 1,
                            "title": "Start",
                            "description": "First.",
                            "img": "https://img.example/1.jpg",
                        },
                        {"id": "/test-anime-episode-2", "number": 2, "title": "Next"},
                        "not an episode",
                    ],
                },
            ],
        },
    }


class TestShouldUseAnify:
    """Test the gating of Anify lookups."""

    def test_ongoing_title(self):
        assert should_use_anify(media(MediaStatus.ONGOING), "gogoanime") is True

    @pytest.mark.parametrize("year", [2000, 2015])
    def test_recent_release_year(self, year):
        assert should_use_anify(media(year=year), "zoro") is True

    @pytest.mark.parametrize("year", [None, 1999])
    def test_old_or_undated_finished_title(self, year):
        assert should_use_anify(media(year=year), "gogoanime") is False

    def test_far_future_year_ignored(self):
        assert should_use_anify(media(year=date.today().year + 5), "gogoanime") is False

    @pytest.mark.parametrize("name", ["animepahe", "9anime"])
    def test_provider_not_indexed(self, name):
        assert should_use_anify(media(MediaStatus.ONGOING), name) is False

    def test_provider_name_case_insensitive(self):
        assert should_use_anify(media(MediaStatus.ONGOING), "Zoro") is True


class TestProviderEpisodes:
    """Test per-provider extraction from an Anify info record."""

    def test_matches_provider_case_insensitively(self, info_payload):
        episodes = provider_episodes(info_payload, "gogoanime")
        assert [episode["id"] for episode in episodes] == ["/test-anime-episode-1", "/test-anime-episode-2"]

    def test_missing_provider(self, info_payload):
        assert provider_episodes(info_payload, "animepahe") == []

    def test_missing_episodes(self):
        assert provider_episodes({"id": "100", "episodes": None}, "zoro") == []


class TestFetchEpisodes:
    """Test fetch_episodes()."""

    def test_maps_episodes(self, info_payload):
        with patch("services.anify_service.get_json", return_value=info_payload) as mock_get:
            episodes = fetch_episodes("100", "gogoanime")

        assert mock_get.call_args[0][0] == "https://api.anify.tv/info/100"
        assert mock_get.call_args[1]["params"] == {"fields": "[id,episodes]"}
        first, second = episodes
        assert first["title"] == "Start"
        assert first["image"] == "https://img.example/1.jpg"
        assert len(first["imageHash"]) == 16
        assert second["image"] is None
        assert second["imageHash"] is None

    def test_transport_error(self):
        with patch("services.anify_service.get_json", side_effect=requests.ConnectionError("down")):
            with pytest.raises(AnifyError, match="100"):
                fetch_episodes("100", "gogoanime")

    def test_undecodable_body(self):
        with patch("services.anify_service.get_json", side_effect=ValueError("not json")):
            with pytest.raises(AnifyError):
                fetch_episodes("100", "gogoanime")

    def test_unexpected_payload(self):
        with patch("services.anify_service.get_json", return_value=["unexpected"]):
            with pytest.raises(AnifyError):
                fetch_episodes("100", "gogoanime")
