"""Anify episode index.

Anify is keyed by AniList id and keeps per-provider episode lists for
airing and recent titles. For those titles the reconciler reads the list
straight from Anify before trying any title matching; a miss or a failure
falls back to the usual cross-reference and search chain.
"""

from datetime import date
from typing import Any

import requests

from models.config import settings
from models.models import CanonicalMedia, MediaStatus, RawEpisode
from utils.exceptions import AnifyError
from utils.http import get_json, hash_image
from utils.logging import get_logger

logger = get_logger(__name__)


def should_use_anify(canonical: CanonicalMedia, provider_name: str) -> bool:
    """Anify is asked only for its providers, and only for airing or recent titles."""
    if provider_name.lower() not in settings.anify.episode_providers:
        return False
    if canonical.status == MediaStatus.ONGOING:
        return True
    year = canonical.release_date
    return year is not None and settings.anify.min_release_year <= year <= date.today().year + 1


def provider_episodes(item: dict[str, Any], provider_name: str) -> list[dict[str, Any]]:
    """Episodes Anify lists for one provider under item["episodes"]["data"]."""
    provider_name = provider_name.lower()
    for source in (item.get("episodes") or {}).get("data") or []:
        if str(source.get("providerId", "")).lower() == provider_name:
            return [episode for episode in source.get("episodes") or [] if isinstance(episode, dict)]
    return []


def fetch_episodes(anilist_id: str, provider_name: str) -> list[RawEpisode]:
    """Raw episode records Anify holds for a title on one provider.

    Raises:
        AnifyError: On transport, status or decoding failures
    """
    url = f"{settings.anify.api_url.rstrip('/')}/info/{anilist_id}"
    try:
        data = get_json(url, params={"fields": "[id,episodes]"})
    except (requests.RequestException, ValueError) as e:
        raise AnifyError(f"Anify lookup for AniList id {anilist_id} failed: {e}") from e
    if not isinstance(data, dict):
        raise AnifyError(f"Unexpected Anify payload for AniList id {anilist_id}")

    episodes = []
    for episode in provider_episodes(data, provider_name):
        image = episode.get("img") or episode.get("image")
        episodes.append(
            {
                "id": episode.get("id"),
                "title": episode.get("title"),
                "description": episode.get("description"),
                "number": episode.get("number"),
                "image": image,
                "imageHash": hash_image(image) if isinstance(image, str) else None,
            }
        )
    logger.debug(f"Anify lists {len(episodes)} {provider_name} episodes for AniList id {anilist_id}")
    return episodes
