"""Cross-reference resolver backed by the MAL-Sync index.

Given a MyAnimeList id, the index lists same-title pages on many content
sites. The resolver ranks every page by similarity to the canonical title
slug, keeps the ones hosted by the active provider and fetches the first
survivor's listing. The lookup is an optimization: any failure means "no
match" and the caller falls back to searching the provider directly.
"""

from typing import Any, NamedTuple

import requests

from models.config import settings
from models.models import AudioTrack, CandidateMatch, ProviderListing
from scrapers.loader import ProviderProtocol
from utils.exceptions import CrossReferenceError
from utils.http import get_json
from utils.logging import get_logger
from utils.title_utils import normalize, similarity

logger = get_logger(__name__)


class CrossReferenceSite(NamedTuple):
    """One page of the index: the hosting site, its URL and its local title."""

    page: str
    url: str
    title: str


def fetch_record(external_id: int) -> dict[str, Any]:
    """Fetch the raw cross-reference record for a MAL id.

    Raises:
        CrossReferenceError: On transport, status or decoding failures
    """
    url = f"{settings.cross_reference.api_url.rstrip('/')}/mal/anime/{external_id}"
    try:
        record = get_json(url)
    except (requests.RequestException, ValueError) as e:
        raise CrossReferenceError(f"Cross-reference lookup for MAL id {external_id} failed: {e}") from e
    if not isinstance(record, dict) or not isinstance(record.get("Sites") or {}, dict):
        raise CrossReferenceError(f"Unexpected cross-reference payload for MAL id {external_id}")
    return record


def flatten_sites(record: dict[str, Any]) -> list[CrossReferenceSite]:
    """Flatten {"Sites": {site: {key: entry}}} into one list, in encounter order.

    Site groups may also be plain lists of entries.
    """
    sites = []
    for group in (record.get("Sites") or {}).values():
        entries = group.values() if isinstance(group, dict) else group or []
        for entry in entries:
            if not isinstance(entry, dict) or not entry.get("url"):
                continue
            sites.append(
                CrossReferenceSite(
                    page=str(entry.get("page") or ""),
                    url=str(entry["url"]),
                    title=str(entry.get("title") or ""),
                )
            )
    return sites


def rank_sites(sites: list[CrossReferenceSite], slug: str) -> list[CandidateMatch]:
    """Score every site against the slug, best first (stable on ties)."""
    scored = [CandidateMatch(site, similarity(slug, normalize(site.title))) for site in sites]
    return sorted(scored, key=lambda match: match.score, reverse=True)


def listing_id_from_url(url: str) -> str:
    """Last path segment of a listing URL ("https://site/category/naruto-dub" -> "naruto-dub")."""
    return url.rstrip("/").split("/")[-1]


class CrossReferenceResolver:
    """Resolve a canonical MAL id to a listing on one provider."""

    def __init__(self, provider: ProviderProtocol) -> None:
        self.provider = provider

    @property
    def enabled(self) -> bool:
        return self.provider.name.lower() not in settings.cross_reference.excluded_providers

    def accepts(self, site: CrossReferenceSite, audio: AudioTrack) -> bool:
        """Whether an index page belongs to the active provider and audio track."""
        if site.page.lower() != self.provider.name.lower():
            return False
        if self.provider.dub_in_title:
            is_dub = settings.cross_reference.dub_marker in site.title.lower()
            return is_dub if audio == AudioTrack.DUB else not is_dub
        return True

    def pick_site(self, ranked: list[CandidateMatch], audio: AudioTrack) -> CrossReferenceSite | None:
        for match in ranked:
            if self.accepts(match.candidate, audio):
                return match.candidate
        return None

    def resolve(self, external_id: int | None, slug: str, audio: AudioTrack) -> ProviderListing | None:
        """Find the provider listing for a MAL id, or None.

        Args:
            external_id: MAL id of the canonical media (None/0 skips the lookup)
            slug: Normalized canonical title used for ranking
            audio: Requested audio track
        """
        if not external_id:
            return None
        if not self.enabled:
            logger.debug(f"Cross-reference skipped for provider '{self.provider.name}'")
            return None

        try:
            record = fetch_record(external_id)
        except CrossReferenceError as e:
            logger.warning(str(e))
            return None

        try:
            site = self.pick_site(rank_sites(flatten_sites(record), slug), audio)
        except (AttributeError, TypeError) as e:
            logger.warning(f"Malformed cross-reference record for MAL id {external_id}: {e}")
            return None
        if site is None:
            logger.debug(f"No '{self.provider.name}' page for MAL id {external_id} ({audio.value})")
            return None

        logger.debug(f"Cross-reference matched '{site.title}' -> {site.url}")
        try:
            return self.provider.fetch_info(listing_id_from_url(site.url))
        except Exception as e:
            logger.warning(f"{self.provider.name}: fetching cross-referenced listing {site.url} failed: {e}")
            return None
