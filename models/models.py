"""Pydantic data models for structured data transfer.

Defines DTOs (Data Transfer Objects) for:
- CanonicalMedia: Authoritative metadata from AniList
- SearchResult / ProviderListing: What content providers return
- CandidateMatch: Transient scored candidate during matching
- NormalizedEpisode: Uniform episode shape produced by reconciliation
- AnimeInfo / AnimeResult / SearchPage / RecentEpisode: Metadata client results
- EpisodeServer / EpisodeSources: Provider pass-throughs for playback
"""

from enum import Enum
from typing import Any, NamedTuple, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator

from utils.exceptions import InvalidAudioTrackError, InvalidServerError

# Type aliases for common patterns
RawEpisode: TypeAlias = dict[str, Any]
EpisodeGroups: TypeAlias = dict[str, list[RawEpisode]]
AniListID: TypeAlias = str
MalID: TypeAlias = int | None


class MediaStatus(str, Enum):
    """Airing status of a title."""

    ONGOING = "Ongoing"
    COMPLETED = "Completed"
    NOT_YET_AIRED = "Not yet aired"
    CANCELLED = "Cancelled"
    HIATUS = "Hiatus"
    UNKNOWN = "Unknown"


class AudioTrack(str, Enum):
    """Audio variant of an episode listing."""

    SUB = "sub"
    DUB = "dub"
    BOTH = "both"

    @classmethod
    def parse(cls, value: "AudioTrack | str | bool") -> "AudioTrack":
        """Parse a user-supplied audio track.

        Accepts enum members, case-insensitive names ("dub", "SUB") and
        booleans (True means dubbed).

        Raises:
            InvalidAudioTrackError: If the value is not a known track
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return cls.DUB if value else cls.SUB
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        valid = ", ".join(track.value for track in cls)
        raise InvalidAudioTrackError(f"Invalid audio track {value!r} (expected one of: {valid})")


class EpisodeEncoding(str, Enum):
    """How a provider encodes sub/dub variants in its raw episode records.

    - SUFFIXED_ID: one id per episode with a trailing track marker ("ep1$both")
    - DUAL_FIELD: separate "id" and "dubId" fields per episode
    - GROUPED_BY_KEY: episodes grouped under keys naming track and season
    - GENERIC: the whole listing has at most one declared track
    """

    SUFFIXED_ID = "suffixed-id"
    DUAL_FIELD = "dual-field"
    GROUPED_BY_KEY = "grouped-by-key"
    GENERIC = "generic"


class StreamingServer(str, Enum):
    """Streaming servers a provider may be asked for."""

    ASIANLOAD = "asianload"
    GOGOCDN = "gogocdn"
    STREAMSB = "streamsb"
    MIXDROP = "mixdrop"
    UPCLOUD = "upcloud"
    VIDCLOUD = "vidcloud"
    STREAMTAPE = "streamtape"
    VIZCLOUD = "vizcloud"
    MYCLOUD = "mycloud"
    FILEMOON = "filemoon"
    VIDSTREAMING = "vidstreaming"
    MEGACLOUD = "megacloud"

    @classmethod
    def parse(cls, value: "StreamingServer | str") -> "StreamingServer":
        """Parse a server name, raising InvalidServerError when unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(server.value for server in cls)
            raise InvalidServerError(
                f"Unsupported server {value!r} (expected one of: {valid})"
            ) from None


GENRES = (
    "Action",
    "Adventure",
    "Cars",
    "Comedy",
    "Drama",
    "Fantasy",
    "Horror",
    "Mahou Shoujo",
    "Mecha",
    "Music",
    "Mystery",
    "Psychological",
    "Romance",
    "Sci-Fi",
    "Slice of Life",
    "Sports",
    "Supernatural",
    "Thriller",
)


class MediaTitle(BaseModel):
    """Title variants of a media entry."""

    romaji: str | None = None
    english: str | None = None
    native: str | None = None
    user_preferred: str | None = None

    def display(self) -> str:
        """Best human-readable title (english, romaji, native)."""
        return self.english or self.romaji or self.native or self.user_preferred or ""


class CanonicalMedia(BaseModel):
    """Canonical metadata for a title, as returned by AniList.

    Immutable: the reconciliation core reads it but never changes it.
    """

    model_config = ConfigDict(frozen=True)

    id: AniListID = Field(..., min_length=1, description="AniList id")
    mal_id: MalID = Field(None, description="MyAnimeList id (cross-reference key)")
    title: MediaTitle = Field(default_factory=MediaTitle)
    status: MediaStatus = MediaStatus.UNKNOWN
    season: str | None = None
    release_date: int | None = Field(None, description="Season year")
    image: str | None = None
    image_hash: str | None = None
    cover: str | None = None
    cover_hash: str | None = None
    total_episodes: int | None = None
    current_episode: int | None = None
    genres: list[str] = Field(default_factory=list)
    description: str | None = None
    rating: int | None = None
    popularity: int | None = None
    type: str | None = Field(None, description="Media format (TV, MOVIE, OVA...)")
    color: str | None = None
    synonyms: list[str] = Field(default_factory=list)


class SearchResult(BaseModel):
    """One result of a provider search."""

    id: str = Field(..., min_length=1)
    title: str | MediaTitle = ""
    url: str | None = None
    image: str | None = None

    @property
    def display_title(self) -> str:
        if isinstance(self.title, MediaTitle):
            return self.title.display()
        return self.title


class ProviderListing(BaseModel):
    """A provider-local listing of a title with its raw episodes.

    Raw episode records are opaque except for their id fields and, for
    grouped-by-key providers, the group key they live under.
    """

    id: str = Field(..., min_length=1)
    title: str | MediaTitle = ""
    sub_or_dub: AudioTrack | None = Field(None, description="Track declared for the listing")
    episodes: list[RawEpisode] | EpisodeGroups = Field(default_factory=list)

    @field_validator("sub_or_dub", mode="before")
    @classmethod
    def lenient_track(cls, v: Any) -> Any:
        """Provider payloads use "SUB"/"Dub"/... or leave the field empty."""
        if v is None or v == "":
            return None
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def has_episodes(self) -> bool:
        if isinstance(self.episodes, dict):
            return any(self.episodes.values())
        return bool(self.episodes)


class CandidateMatch(NamedTuple):
    """A scored candidate; higher scores win, ties go to the first seen."""

    candidate: Any
    score: float


class NormalizedEpisode(BaseModel):
    """Uniform episode shape produced by the reconciliation engine."""

    id: str = Field(..., min_length=1, description="Provider episode id for source lookups")
    number: int = Field(..., ge=1, description="Sequence number within the list")
    title: str | None = None
    description: str | None = None
    url: str | None = None
    image: str | None = None
    image_hash: str | None = None
    is_filler: bool | None = None
    audio: str | None = Field(None, description="Audio label for grouped-by-key providers")
    season_number: int | None = None
    provider_number: float | None = Field(None, description="Episode number as the provider reports it")


class AnimeResult(BaseModel):
    """An AniList media entry as listed by search/trending/popular."""

    id: str
    mal_id: MalID = None
    title: MediaTitle = Field(default_factory=MediaTitle)
    status: MediaStatus = MediaStatus.UNKNOWN
    image: str | None = None
    image_hash: str | None = None
    cover: str | None = None
    cover_hash: str | None = None
    popularity: int | None = None
    description: str | None = None
    rating: int | None = None
    genres: list[str] = Field(default_factory=list)
    color: str | None = None
    total_episodes: int | None = None
    current_episode: int | None = None
    type: str | None = None
    release_date: int | None = None


class RecentEpisode(BaseModel):
    """Latest aired episode of a title, as reported by the recent feed."""

    id: str
    mal_id: MalID = None
    title: MediaTitle = Field(default_factory=MediaTitle)
    image: str | None = None
    image_hash: str | None = None
    rating: int | None = None
    color: str | None = None
    episode_id: str = ""
    episode_title: str | None = None
    episode_number: int | None = None
    genres: list[str] = Field(default_factory=list)
    type: str | None = None


class SearchPage(BaseModel):
    """One page of metadata results."""

    current_page: int = 1
    has_next_page: bool = False
    total_pages: int | None = None
    total_results: int | None = None
    results: list[AnimeResult] | list[RecentEpisode] = Field(default_factory=list)


class AnimeInfo(CanonicalMedia):
    """Canonical media together with its reconciled episode list."""

    episodes: list[NormalizedEpisode] = Field(default_factory=list)


class EpisodeServer(BaseModel):
    """A streaming server offering an episode."""

    name: str
    url: str


class EpisodeSources(BaseModel):
    """Playable sources for one episode, as returned by a provider."""

    model_config = ConfigDict(extra="allow")

    headers: dict[str, str] | None = None
    sources: list[dict[str, Any]] = Field(default_factory=list)
    subtitles: list[dict[str, Any]] = Field(default_factory=list)
    download: str | None = None
