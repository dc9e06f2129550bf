"""Application configuration using Pydantic v2.

Centralized settings for ani-match including:
- Metadata (AniList) endpoint
- Cross-reference index, filler dataset and Anify endpoints
- Content provider API and HTTP settings
- Caller-side cache settings
- OS-specific data paths

Configuration can be overridden via environment variables:
    ANI_MATCH__PROVIDERS__DEFAULT_PROVIDER=zoro
    ANI_MATCH__CACHE__DURATION_HOURS=12
    ANI_MATCH__CROSS_REFERENCE__EXCLUDED_PROVIDERS='["crunchyroll"]'
"""

import os
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_data_path() -> Path:
    """Get OS-specific data directory for ani-match.

    Returns:
        Path: ~/.local/state/ani-match (Linux/macOS) or %LOCALAPPDATA%\\ani-match (Windows)
    """
    if os.name == "nt":
        return Path(os.environ.get("LOCALAPPDATA", Path.home())) / "ani-match"
    return Path.home() / ".local" / "state" / "ani-match"


class AniListSettings(BaseModel):
    """AniList API configuration."""

    api_url: str = Field(
        "https://graphql.anilist.co",
        description="AniList GraphQL API endpoint",
    )
    per_page: int = Field(
        15,
        ge=1,
        le=50,
        description="Default page size for search requests",
    )


class CrossReferenceSettings(BaseModel):
    """MAL-Sync cross-reference index configuration."""

    api_url: str = Field(
        "https://api.malsync.moe",
        description="Cross-reference index base URL",
    )
    excluded_providers: list[str] = Field(
        default_factory=lambda: ["crunchyroll", "bilibili"],
        description="Providers never looked up through the cross-reference index",
    )
    dub_marker: str = Field(
        "dub",
        min_length=1,
        description="Substring marking dubbed listings on dub-in-title providers",
    )

    @field_validator("excluded_providers")
    @classmethod
    def lowercase_names(cls, v: list[str]) -> list[str]:
        """Provider names are compared case-insensitively."""
        return [name.lower() for name in v]


class FillerSettings(BaseModel):
    """Static filler dataset configuration."""

    api_url: str = Field(
        "https://raw.githubusercontent.com/saikou-app/mal-id-filler-list/main/fillers",
        description="Base URL of the per-MAL-id filler JSON files",
    )


class AnifySettings(BaseModel):
    """Anify index configuration (recent feed, episode lists, search fallback)."""

    api_url: str = Field(
        "https://api.anify.tv",
        description="Anify API base URL",
    )
    recent_providers: list[str] = Field(
        default_factory=lambda: ["gogoanime", "zoro"],
        description="Providers whose latest episode ids the recent feed exposes",
    )
    episode_providers: list[str] = Field(
        default_factory=lambda: ["gogoanime", "zoro"],
        description="Providers whose episode lists are read from Anify before reconciling",
    )
    min_release_year: int = Field(
        2000,
        description="Finished titles released before this year skip the Anify episode lookup",
    )
    search_fallback: bool = Field(
        True,
        description="Search Anify when AniList answers 5xx or 429",
    )

    @field_validator("recent_providers", "episode_providers")
    @classmethod
    def lowercase_names(cls, v: list[str]) -> list[str]:
        return [name.lower() for name in v]


class ProviderSettings(BaseModel):
    """Content provider (episode host) configuration."""

    api_url: str = Field(
        "https://api.consumet.org",
        description="Base URL of a consumet-compatible provider API",
    )
    default_provider: str = Field(
        "gogoanime",
        min_length=1,
        description="Provider used when none is requested",
    )
    timeout_seconds: float = Field(
        15.0,
        gt=0,
        le=120,
        description="Timeout applied to every outgoing HTTP request",
    )
    user_agent: str = Field(
        "ani-match/0.1 (+https://github.com/levyvix/ani-match)",
        description="User-Agent header sent with every request",
    )


class LoggingSettings(BaseModel):
    """Log handler configuration (loguru)."""

    console_level: str = Field("WARNING", description="stderr level when --debug is not given")
    file_level: str = Field("DEBUG", description="Level written to the log file")
    rotation: str = Field("50 MB", description="Rotate the log file at this size")
    retention: int = Field(10, ge=1, description="Rotated log files kept")
    log_dir: Path = Field(
        default_factory=get_data_path,
        description="Directory holding ani-match.log",
    )

    @field_validator("console_level", "file_level")
    @classmethod
    def uppercase_level(cls, v: str) -> str:
        return v.upper()


class PluginSettings(BaseModel):
    """Plugin/provider loading settings."""

    disabled_plugins: list[str] = Field(
        default_factory=list,
        description="List of disabled plugin modules (e.g., ['consumet'])",
    )


class CacheSettings(BaseModel):
    """Caller-side cache configuration (SQLite via diskcache)."""

    enabled: bool = Field(True, description="Cache CLI lookups on disk")
    duration_hours: int = Field(
        24,
        ge=1,
        le=720,
        description="Cache validity duration in hours (default 1 day, max 30 days)",
    )
    cache_dir: Path = Field(
        default_factory=lambda: get_data_path() / "cache",
        description="Path to SQLite cache directory (diskcache)",
    )


class AppSettings(BaseSettings):
    """Root application settings with environment variable support.

    Environment variables use the prefix ANI_MATCH__ with nested delimiters:
    - ANI_MATCH__ANILIST__API_URL=https://graphql.anilist.co
    - ANI_MATCH__PROVIDERS__TIMEOUT_SECONDS=30

    Can also be configured via .env file in project root.
    """

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_prefix="ANI_MATCH__",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    anilist: AniListSettings = Field(default_factory=AniListSettings)
    cross_reference: CrossReferenceSettings = Field(default_factory=CrossReferenceSettings)
    filler: FillerSettings = Field(default_factory=FillerSettings)
    anify: AnifySettings = Field(default_factory=AnifySettings)
    providers: ProviderSettings = Field(default_factory=ProviderSettings)
    plugins: PluginSettings = Field(default_factory=PluginSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)


# Singleton instance - import and use throughout the app
settings = AppSettings()
