"""Filler enrichment from the static per-MAL-id filler dataset.

Flags are aligned by position: episode i takes entry i of the dataset.
Nothing checks that both lists describe the same episodes, so a provider
list that skips or merges episodes shifts every flag after that point.
"""

import requests

from models.config import settings
from models.models import NormalizedEpisode
from utils.exceptions import FillerError
from utils.http import get_json
from utils.logging import get_logger

logger = get_logger(__name__)


def fetch_filler_flags(external_id: int) -> list[bool] | None:
    """Fetch per-position filler flags for a MAL id.

    Returns:
        List of flags, or None when the dataset has no episode list

    Raises:
        FillerError: If the dataset cannot be fetched or decoded
    """
    url = f"{settings.filler.api_url.rstrip('/')}/{external_id}.json"
    try:
        data = get_json(url)
    except (requests.RequestException, ValueError) as e:
        raise FillerError(f"Filler dataset for MAL id {external_id} unavailable: {e}") from e

    entries = data.get("episodes") if isinstance(data, dict) else None
    if not entries:
        return None
    return [bool(entry.get("filler-bool")) if isinstance(entry, dict) else False for entry in entries]


def apply_filler(episodes: list[NormalizedEpisode], external_id: int | None) -> list[NormalizedEpisode]:
    """Overlay filler flags on an episode list.

    Failures leave the list untouched. Episodes past the end of the
    dataset are marked as not filler.
    """
    if not external_id or not episodes:
        return episodes

    try:
        flags = fetch_filler_flags(external_id)
    except FillerError as e:
        logger.warning(str(e))
        return episodes

    if flags is None:
        logger.debug(f"No filler data for MAL id {external_id}")
        return episodes

    if len(flags) != len(episodes):
        logger.debug(f"Filler dataset has {len(flags)} entries for {len(episodes)} episodes (MAL id {external_id})")

    return [
        episode.model_copy(update={"is_filler": flags[index] if index < len(flags) else False})
        for index, episode in enumerate(episodes)
    ]
