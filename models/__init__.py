"""Data models and configuration.

Pydantic models and configuration:
- models: Canonical media, provider listing and episode data models
- config: Centralized configuration (Pydantic Settings)
"""

from models.config import settings, get_data_path
from models.models import (
    AnimeInfo,
    AudioTrack,
    CanonicalMedia,
    EpisodeEncoding,
    MediaStatus,
    NormalizedEpisode,
    ProviderListing,
    SearchResult,
)

__all__ = [
    "AnimeInfo",
    "AudioTrack",
    "CanonicalMedia",
    "EpisodeEncoding",
    "MediaStatus",
    "NormalizedEpisode",
    "ProviderListing",
    "SearchResult",
    "settings",
    "get_data_path",
]
