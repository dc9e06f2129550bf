"""Episode reconciliation engine.

Turns canonical AniList metadata into a provider's episode list:

1. For airing or recent titles on an Anify-indexed provider, read the
   episode list from Anify by AniList id (sub only).
2. Otherwise build title slugs (romaji first, then English when it differs)
   and run the ordered strategies (cross-reference, then direct search) for
   each slug; the first listing with episodes wins.
3. Normalize the raw episodes according to the provider's episode
   encoding (see NORMALIZERS).
4. Optionally overlay filler flags, then inherit missing images from the
   canonical media.

No match is not an error: reconcile() returns an empty list and the caller
decides what "not found" means.
"""

import re
from collections.abc import Callable

from models.models import (
    AudioTrack,
    CanonicalMedia,
    EpisodeEncoding,
    NormalizedEpisode,
    ProviderListing,
    RawEpisode,
    SearchResult,
)
from scrapers.loader import ProviderProtocol
from services.anify_service import fetch_episodes as fetch_anify_episodes
from services.anify_service import should_use_anify
from services.cross_reference import CrossReferenceResolver
from services.filler_service import apply_filler
from utils.exceptions import AnifyError, InvalidAudioTrackError
from utils.logging import get_logger
from utils.title_utils import normalize, similarity, title_slugs

logger = get_logger(__name__)

Strategy = Callable[[CanonicalMedia, str, AudioTrack], ProviderListing | None]
MediaStrategy = Callable[[CanonicalMedia, AudioTrack], ProviderListing | None]

# Trailing id markers of suffixed-id providers ("<episode>$both")
SUFFIX_MARKERS = {
    AudioTrack.SUB: "$sub",
    AudioTrack.DUB: "$dub",
    AudioTrack.BOTH: "$both",
}

_DIGITS = re.compile(r"\d+")
_WORDS = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+")


def requested_track(audio: AudioTrack | str | bool) -> AudioTrack:
    """Validate the track a caller asks for. BOTH describes listings, it cannot be requested."""
    track = AudioTrack.parse(audio)
    if track == AudioTrack.BOTH:
        raise InvalidAudioTrackError("Request either 'sub' or 'dub'; 'both' only describes listings")
    return track


def best_match(results: list[SearchResult], slug: str) -> SearchResult | None:
    """Highest-scoring search result for the slug; the first one wins ties."""
    best, best_score = None, -1.0
    for result in results:
        score = similarity(slug, normalize(result.display_title))
        if score > best_score:
            best, best_score = result, score
    return best


# ========== Per-encoding normalization ==========


def _flat(episodes: list[RawEpisode] | dict[str, list[RawEpisode]]) -> list[RawEpisode]:
    if isinstance(episodes, dict):
        return [episode for group in episodes.values() for episode in group or []]
    return list(episodes)


def normalize_suffixed_id(listing: ProviderListing, track: AudioTrack) -> list[RawEpisode]:
    """Rewrite "$both" ids to the requested track when the listing offers both."""
    episodes = _flat(listing.episodes)
    if listing.sub_or_dub != AudioTrack.BOTH:
        return episodes

    both, wanted = SUFFIX_MARKERS[AudioTrack.BOTH], SUFFIX_MARKERS[track]
    rewritten = []
    for episode in episodes:
        episode_id = str(episode.get("id") or "")
        if episode_id.endswith(both):
            episode = {**episode, "id": episode_id[: -len(both)] + wanted}
        rewritten.append(episode)
    return rewritten


def normalize_dual_field(listing: ProviderListing, track: AudioTrack) -> list[RawEpisode]:
    """Use "dubId" for dubs and "id" for subs; episodes without that field are dropped."""
    field = "dubId" if track == AudioTrack.DUB else "id"
    return [
        {**episode, "id": episode[field]}
        for episode in _flat(listing.episodes)
        if episode.get(field)
    ]


def season_ordinal(key: str, group: list[RawEpisode]) -> int:
    """Season of an episode group: its first episode's season_number, else digits in the key."""
    if group and isinstance(group[0], dict) and group[0].get("season_number") is not None:
        try:
            return int(group[0]["season_number"])
        except (TypeError, ValueError):
            pass
    digits = _DIGITS.search(key)
    return int(digits.group()) if digits else 0


def audio_label(key: str) -> str:
    """Human-readable audio label from a group key ("Season1Dub" -> "Dub", "english dub" -> "English Dub")."""
    words = _WORDS.findall(_DIGITS.sub(" ", key))
    return " ".join(word.capitalize() for word in words if word.lower() != "season")


def normalize_grouped_by_key(listing: ProviderListing, track: AudioTrack) -> list[RawEpisode]:
    """Keep the groups whose key names the track, ordered by season, flattened and labelled."""
    groups = listing.episodes if isinstance(listing.episodes, dict) else {}
    marker = track.value

    keys = [key for key in groups if marker in key.lower()]
    keys.sort(key=lambda key: season_ordinal(key, groups[key]))

    episodes = []
    for key in keys:
        label = audio_label(key)
        episodes.extend({**episode, "audio": label} for episode in groups[key] or [])
    return episodes


def normalize_generic(listing: ProviderListing, track: AudioTrack) -> list[RawEpisode]:
    """Pass episodes through unless the listing is fixed to the other track."""
    declared = listing.sub_or_dub
    if declared and declared != AudioTrack.BOTH and declared != track:
        return []
    return _flat(listing.episodes)


NORMALIZERS: dict[EpisodeEncoding, Callable[[ProviderListing, AudioTrack], list[RawEpisode]]] = {
    EpisodeEncoding.SUFFIXED_ID: normalize_suffixed_id,
    EpisodeEncoding.DUAL_FIELD: normalize_dual_field,
    EpisodeEncoding.GROUPED_BY_KEY: normalize_grouped_by_key,
    EpisodeEncoding.GENERIC: normalize_generic,
}


# ========== Episode building ==========


def _to_int(value) -> int | None:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _to_float(value) -> float | None:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _to_text(value) -> str | None:
    """Scalar fields as text; nested objects and lists are dropped."""
    if isinstance(value, (str, int, float)):
        return str(value)
    return None


def build_episodes(raw_episodes: list[RawEpisode]) -> list[NormalizedEpisode]:
    """Number raw episodes 1..n, skipping records without an id and repeated ids."""
    episodes: list[NormalizedEpisode] = []
    seen: set[str] = set()

    for raw in raw_episodes:
        episode_id = str(raw.get("id") or "")
        if not episode_id:
            continue
        if episode_id in seen:
            logger.debug(f"Dropping repeated episode id '{episode_id}'")
            continue
        seen.add(episode_id)

        is_filler = raw.get("isFiller")
        episodes.append(
            NormalizedEpisode(
                id=episode_id,
                number=len(episodes) + 1,
                title=_to_text(raw.get("title")),
                description=_to_text(raw.get("description")),
                url=_to_text(raw.get("url")),
                image=_to_text(raw.get("image")),
                image_hash=_to_text(raw.get("imageHash")),
                is_filler=bool(is_filler) if is_filler is not None else None,
                audio=_to_text(raw.get("audio")),
                season_number=_to_int(raw.get("season_number", raw.get("season"))),
                provider_number=_to_float(raw.get("number")),
            )
        )
    return episodes


def inherit_images(episodes: list[NormalizedEpisode], canonical: CanonicalMedia) -> list[NormalizedEpisode]:
    return [
        episode.model_copy(
            update={
                "image": episode.image or canonical.image,
                "image_hash": episode.image_hash or canonical.image_hash,
            }
        )
        for episode in episodes
    ]


# ========== Engine ==========


class EpisodeReconciler:
    """Reconcile canonical media against one provider.

    Holds no per-call state, so one instance can serve concurrent calls.
    """

    def __init__(self, provider: ProviderProtocol, resolver: CrossReferenceResolver | None = None) -> None:
        self.provider = provider
        self.resolver = resolver or CrossReferenceResolver(provider)
        # Keyed by AniList id, tried once before any title matching
        self.media_strategies: list[tuple[str, MediaStrategy]] = [
            ("anify", self.from_anify),
        ]
        # Cheapest/most targeted lookup first
        self.strategies: list[tuple[str, Strategy]] = [
            ("cross-reference", self.from_cross_reference),
            ("search", self.from_search),
        ]

    @property
    def encoding(self) -> EpisodeEncoding:
        return self.provider.encoding

    def from_anify(self, canonical: CanonicalMedia, audio: AudioTrack) -> ProviderListing | None:
        # Anify lists the provider's subbed episode ids only
        if audio != AudioTrack.SUB or not should_use_anify(canonical, self.provider.name):
            return None
        try:
            episodes = fetch_anify_episodes(canonical.id, self.provider.name)
        except AnifyError as e:
            logger.warning(str(e))
            return None
        return ProviderListing(id=canonical.id, sub_or_dub=AudioTrack.SUB, episodes=episodes)

    def from_cross_reference(self, canonical: CanonicalMedia, slug: str, audio: AudioTrack) -> ProviderListing | None:
        return self.resolver.resolve(canonical.mal_id, slug, audio)

    def from_search(self, canonical: CanonicalMedia, slug: str, audio: AudioTrack) -> ProviderListing | None:
        try:
            results = self.provider.search(slug)
        except Exception as e:
            logger.warning(f"{self.provider.name}: search for '{slug}' failed: {e}")
            return None

        best = best_match(results, slug)
        if best is None:
            return None

        logger.debug(f"{self.provider.name}: best search match for '{slug}' is '{best.display_title}' ({best.id})")
        try:
            return self.provider.fetch_info(best.id)
        except Exception as e:
            logger.warning(f"{self.provider.name}: fetching listing '{best.id}' failed: {e}")
            return None

    def find_listing(self, canonical: CanonicalMedia, audio: AudioTrack) -> ProviderListing | None:
        """Run the media strategies, then every strategy for every slug, until one yields episodes."""
        for name, media_strategy in self.media_strategies:
            listing = media_strategy(canonical, audio)
            if listing is not None and listing.has_episodes:
                logger.info(f"{self.provider.name}: matched AniList id {canonical.id} via {name}")
                return listing

        for slug in title_slugs(canonical.title.romaji, canonical.title.english):
            for name, strategy in self.strategies:
                listing = strategy(canonical, slug, audio)
                if listing is not None and listing.has_episodes:
                    logger.info(f"{self.provider.name}: matched '{slug}' via {name} -> listing '{listing.id}'")
                    return listing
                logger.debug(f"{self.provider.name}: {name} found nothing for '{slug}'")
        return None

    def reconcile(
        self,
        canonical: CanonicalMedia,
        audio: AudioTrack | str | bool = AudioTrack.SUB,
        fetch_filler: bool = False,
    ) -> list[NormalizedEpisode]:
        """Produce the normalized episode list of canonical media on this provider.

        Args:
            canonical: Canonical media (never modified)
            audio: Requested track (sub or dub)
            fetch_filler: Overlay filler flags from the filler dataset

        Returns:
            Episodes numbered 1..n, or [] when no listing matched

        Raises:
            InvalidAudioTrackError: If the requested track is invalid
        """
        track = requested_track(audio)

        listing = self.find_listing(canonical, track)
        if listing is None:
            logger.info(f"{self.provider.name}: no listing found for AniList id {canonical.id}")
            return []

        normalizer = NORMALIZERS.get(self.encoding, normalize_generic)
        episodes = build_episodes(normalizer(listing, track))

        if fetch_filler and canonical.mal_id:
            episodes = apply_filler(episodes, canonical.mal_id)

        return inherit_images(episodes, canonical)


def reconcile(
    canonical: CanonicalMedia,
    provider: ProviderProtocol,
    audio: AudioTrack | str | bool = AudioTrack.SUB,
    fetch_filler: bool = False,
) -> list[NormalizedEpisode]:
    """Shortcut for EpisodeReconciler(provider).reconcile(...)."""
    return EpisodeReconciler(provider).reconcile(canonical, audio, fetch_filler)
