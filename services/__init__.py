"""Business logic services layer.

Core services for ani-match:
- anilist_service: AniList metadata client
- reconciler: Episode reconciliation engine
- cross_reference: MAL-Sync cross-reference resolver
- filler_service: Filler flag enrichment
- repository: Provider registry
"""

from services import anilist_service, cross_reference, filler_service, reconciler, repository

__all__ = [
    "anilist_service",
    "cross_reference",
    "filler_service",
    "reconciler",
    "repository",
]
