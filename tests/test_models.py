"""
Tests for models/models.py

Coverage:
- AudioTrack / StreamingServer parsing and validation errors
- CanonicalMedia immutability
- SearchResult display titles
- ProviderListing track coercion and episode presence
- NormalizedEpisode validation
"""

import pytest
from pydantic import ValidationError

from models.models import (
    AudioTrack,
    CanonicalMedia,
    MediaTitle,
    NormalizedEpisode,
    ProviderListing,
    SearchResult,
    StreamingServer,
)
from utils.exceptions import InvalidAudioTrackError, InvalidServerError


class TestAudioTrack:
    """Test AudioTrack parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("sub", AudioTrack.SUB),
            ("DUB", AudioTrack.DUB),
            (" Both ", AudioTrack.BOTH),
            (True, AudioTrack.DUB),
            (False, AudioTrack.SUB),
            (AudioTrack.DUB, AudioTrack.DUB),
        ],
    )
    def test_parse_valid(self, value, expected):
        """Should accept names, booleans and members."""
        assert AudioTrack.parse(value) == expected

    @pytest.mark.parametrize("value", ["dubbed", "", None, 1])
    def test_parse_invalid_raises(self, value):
        """Should raise a descriptive error instead of defaulting."""
        with pytest.raises(InvalidAudioTrackError, match="Invalid audio track"):
            AudioTrack.parse(value)

    def test_invalid_track_is_value_error(self):
        """Validation errors should also be ValueErrors."""
        with pytest.raises(ValueError):
            AudioTrack.parse("raw")


class TestStreamingServer:
    """Test StreamingServer parsing."""

    def test_parse_known_server(self):
        """Should parse case-insensitively."""
        assert StreamingServer.parse("VidCloud") == StreamingServer.VIDCLOUD

    def test_parse_unknown_server(self):
        """Should raise InvalidServerError naming the server."""
        with pytest.raises(InvalidServerError, match="myserver"):
            StreamingServer.parse("myserver")


class TestCanonicalMedia:
    """Test CanonicalMedia model."""

    def test_is_frozen(self, canonical_test_anime):
        """Canonical media should not be mutable."""
        with pytest.raises(ValidationError):
            canonical_test_anime.image = "https://example.com/other.jpg"

    def test_id_required(self):
        """Should require a non-empty id."""
        with pytest.raises(ValidationError):
            CanonicalMedia(id="")


class TestSearchResult:
    """Test SearchResult display titles."""

    def test_plain_title(self):
        result = SearchResult(id="x1", title="Test Anime")
        assert result.display_title == "Test Anime"

    def test_structured_title_prefers_english(self):
        """Should prefer English, then romaji."""
        result = SearchResult(id="x1", title=MediaTitle(romaji="Shingeki no Kyojin", english="Attack on Titan"))
        assert result.display_title == "Attack on Titan"

    def test_structured_title_falls_back_to_romaji(self):
        result = SearchResult(id="x1", title=MediaTitle(romaji="Shingeki no Kyojin"))
        assert result.display_title == "Shingeki no Kyojin"


class TestProviderListing:
    """Test ProviderListing model."""

    @pytest.mark.parametrize(
        "raw,expected",
        [("SUB", AudioTrack.SUB), ("Dub", AudioTrack.DUB), ("both", AudioTrack.BOTH), ("", None), (None, None)],
    )
    def test_sub_or_dub_coercion(self, raw, expected):
        """Should accept provider spellings of the declared track."""
        assert ProviderListing(id="x", sub_or_dub=raw).sub_or_dub == expected

    def test_has_episodes_list(self):
        assert ProviderListing(id="x", episodes=[{"id": "1"}]).has_episodes
        assert not ProviderListing(id="x", episodes=[]).has_episodes

    def test_has_episodes_groups(self):
        """Grouped listings count as non-empty when any group has episodes."""
        assert ProviderListing(id="x", episodes={"dub": [], "sub": [{"id": "1"}]}).has_episodes
        assert not ProviderListing(id="x", episodes={"dub": []}).has_episodes


class TestNormalizedEpisode:
    """Test NormalizedEpisode model."""

    def test_number_must_be_positive(self):
        with pytest.raises(ValidationError):
            NormalizedEpisode(id="ep1", number=0)

    def test_id_required(self):
        with pytest.raises(ValidationError):
            NormalizedEpisode(id="", number=1)
