"""Cache manager using diskcache with FanoutCache (SQLite backend).

Caller-side cache for the CLI. The reconciliation core never reads it;
commands wrap their lookups with this decorator:
- cache_episodes: reconciled episode lists per provider and audio track
"""

from functools import wraps

from diskcache import FanoutCache

from models.config import settings
from models.models import AnimeInfo
from utils.logging import get_logger

logger = get_logger(__name__)

# Cache global (FanoutCache = 4 shards SQLite for concurrency)
_cache = None


def get_cache() -> FanoutCache:
    """Lazy init of global cache."""
    global _cache
    if _cache is None:
        cache_dir = settings.cache.cache_dir
        _cache = FanoutCache(
            directory=str(cache_dir),
            shards=4,  # 4 SQLite files = less contention
            timeout=1.0,
        )
    return _cache


def default_ttl() -> int:
    """Default TTL in seconds."""
    return settings.cache.duration_hours * 3600


def clear_cache() -> int:
    """Remove every cached entry. Returns the number of entries removed."""
    return get_cache().clear()


def cache_episodes(func):
    """Decorator to cache anime info with reconciled episodes.

    Empty episode lists are not cached so a later run can still find a match.
    use_cache=False bypasses the cache for one call without touching settings.
    """

    @wraps(func)
    def wrapper(anilist_id, provider: str, audio: str, fetch_filler: bool = False, use_cache: bool = True):
        if not (use_cache and settings.cache.enabled):
            return func(anilist_id, provider, audio, fetch_filler)

        cache = get_cache()
        key = f"episodes:{anilist_id}:{provider}:{audio}:{int(fetch_filler)}"

        cached = cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit for {key}")
            return AnimeInfo.model_validate(cached)

        info = func(anilist_id, provider, audio, fetch_filler)
        if info.episodes:
            cache.set(key, info.model_dump(mode="json"), expire=default_ttl())
        return info

    return wrapper
