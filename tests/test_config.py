"""
Tests for models/config.py

Coverage:
- Default values (endpoints, excluded providers, cache duration)
- Path resolution (cross-platform get_data_path())
- Environment variable overrides
- Config validation (invalid values rejected)
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from models.config import AnifySettings, AppSettings, CrossReferenceSettings, get_data_path, settings


class TestConfigDefaults:
    """Test default configuration values."""

    def test_default_api_urls(self):
        """Should point every service at an https endpoint."""
        assert "anilist" in settings.anilist.api_url
        assert settings.cross_reference.api_url.startswith("https://")
        assert settings.filler.api_url.startswith("https://")
        assert settings.providers.api_url.startswith("https://")
        assert settings.anify.api_url.startswith("https://")

    def test_default_excluded_providers(self):
        """Crunchyroll and Bilibili are skipped by the cross-reference lookup."""
        assert AppSettings().cross_reference.excluded_providers == ["crunchyroll", "bilibili"]

    def test_default_cache_duration(self):
        """Should have reasonable default cache duration."""
        assert 1 <= settings.cache.duration_hours <= 720

    def test_default_provider(self):
        assert AppSettings().providers.default_provider == "gogoanime"

    def test_default_anify(self):
        """Anify serves gogoanime and zoro, for titles from 2000 on, with search fallback on."""
        anify = AppSettings().anify
        assert anify.api_url.startswith("https://")
        assert anify.episode_providers == ["gogoanime", "zoro"]
        assert anify.recent_providers == ["gogoanime", "zoro"]
        assert anify.min_release_year == 2000
        assert anify.search_fallback is True


class TestPathResolution:
    """Test get_data_path() for cross-platform support."""

    def test_get_data_path_absolute(self):
        path = get_data_path()
        assert isinstance(path, Path)
        assert path.is_absolute()

    def test_get_data_path_contains_app_name(self):
        assert "ani-match" in get_data_path().as_posix()

    def test_cache_dir_under_data_path(self):
        assert AppSettings().cache.cache_dir == get_data_path() / "cache"


class TestEnvironmentVariableOverride:
    """Test environment variable configuration."""

    def test_env_override_nested_value(self):
        """Should allow overriding nested settings via ANI_MATCH__ variables."""
        with patch.dict(os.environ, {"ANI_MATCH__CACHE__DURATION_HOURS": "12"}):
            assert AppSettings().cache.duration_hours == 12

    def test_env_override_default_provider(self):
        with patch.dict(os.environ, {"ANI_MATCH__PROVIDERS__DEFAULT_PROVIDER": "zoro"}):
            assert AppSettings().providers.default_provider == "zoro"

    def test_env_override_list(self):
        """Lists are given as JSON."""
        with patch.dict(os.environ, {"ANI_MATCH__CROSS_REFERENCE__EXCLUDED_PROVIDERS": '["Crunchyroll"]'}):
            assert AppSettings().cross_reference.excluded_providers == ["crunchyroll"]


class TestConfigValidation:
    """Test rejection of invalid values."""

    def test_invalid_cache_duration(self):
        with patch.dict(os.environ, {"ANI_MATCH__CACHE__DURATION_HOURS": "0"}):
            with pytest.raises(ValidationError):
                AppSettings()

    def test_invalid_timeout(self):
        with patch.dict(os.environ, {"ANI_MATCH__PROVIDERS__TIMEOUT_SECONDS": "-1"}):
            with pytest.raises(ValidationError):
                AppSettings()

    def test_excluded_providers_lowercased(self):
        assert CrossReferenceSettings(excluded_providers=["BiliBili"]).excluded_providers == ["bilibili"]

    def test_anify_providers_lowercased(self):
        assert AnifySettings(episode_providers=["Zoro"]).episode_providers == ["zoro"]

    def test_empty_dub_marker_rejected(self):
        with pytest.raises(ValidationError):
            CrossReferenceSettings(dub_marker="")

    def test_log_levels_uppercased(self):
        with patch.dict(os.environ, {"ANI_MATCH__LOGGING__CONSOLE_LEVEL": "info"}):
            assert AppSettings().logging.console_level == "INFO"
