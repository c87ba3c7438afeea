"""Redis-backed key-value cache."""

import json
import logging
import threading
from typing import Any, Optional, Tuple

from api_search.core.interfaces import BaseCache
from api_search.core.models import CacheStats
from api_search.core.exceptions import CacheError

logger = logging.getLogger(__name__)


class RedisCache(BaseCache):
    """Stores cache entries as JSON strings in Redis.

    Writes go straight to Redis, so ``save_to_disk`` only asks the server to
    snapshot its dataset (``SAVE``) when ``snapshot_on_save`` is set. The
    client's connection pool is thread-safe; hit/miss counters are kept per
    process.

    Example:
        cache = RedisCache(redis_url="redis://localhost:6379", ttl_seconds=7 * 86400)
        cache.set("catalogue-entry-ab12...", document.to_dict())
        value, found = cache.get("catalogue-entry-ab12...")
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379",
        redis_db: int = 0,
        key_prefix: str = "api_search:",
        ttl_seconds: Optional[int] = None,
        snapshot_on_save: bool = False,
    ):
        """Initialize Redis cache.

        Args:
            redis_url: Redis connection URL.
            redis_db: Redis database number.
            key_prefix: Prefix for every key this cache writes.
            ttl_seconds: Time-to-live for entries (None = no expiration).
            snapshot_on_save: Issue ``SAVE`` from ``save_to_disk``.

        Raises:
            CacheError: If the redis package is missing or the server is unreachable.
        """
        self._redis_url = redis_url
        self._redis_db = redis_db
        self._key_prefix = key_prefix
        self._ttl_seconds = ttl_seconds
        self._snapshot_on_save = snapshot_on_save
        self._stats = CacheStats()
        self._stats_lock = threading.Lock()

        try:
            import redis
        except ImportError as e:
            raise CacheError("redis package not installed. Run: pip install redis") from e

        self._errors = redis.RedisError
        try:
            self._redis = redis.from_url(redis_url, db=redis_db, decode_responses=True)
            self._redis.ping()
        except redis.RedisError as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise CacheError(f"Redis connection failed: {e}") from e
        logger.info(f"Connected to Redis at {redis_url}")

    @property
    def name(self) -> str:
        return "redis"

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    def get(self, key: str) -> Tuple[Optional[Any], bool]:
        try:
            raw = self._redis.get(self._key(key))
        except self._errors as e:
            raise CacheError(f"Redis GET failed for {key}: {e}") from e

        with self._stats_lock:
            self._stats.lookups += 1
            if raw is None:
                self._stats.misses += 1
            else:
                self._stats.hits += 1

        if raw is None:
            return None, False
        try:
            return json.loads(raw), True
        except ValueError as e:
            raise CacheError(f"Corrupt cache entry {key}: {e}") from e

    def set(self, key: str, value: Any) -> None:
        try:
            self._redis.set(self._key(key), json.dumps(value), ex=self._ttl_seconds)
        except self._errors as e:
            raise CacheError(f"Redis SET failed for {key}: {e}") from e

    def save_to_disk(self) -> None:
        if not self._snapshot_on_save:
            return
        try:
            self._redis.save()
        except self._errors as e:
            raise CacheError(f"Redis SAVE failed: {e}") from e

    def _keys(self):
        return list(self._redis.scan_iter(match=f"{self._key_prefix}*"))

    def get_stats(self) -> CacheStats:
        try:
            size = len(self._keys())
        except self._errors as e:
            raise CacheError(f"Redis SCAN failed: {e}") from e
        with self._stats_lock:
            return CacheStats(
                lookups=self._stats.lookups,
                hits=self._stats.hits,
                misses=self._stats.misses,
                cache_size=size,
            )

    def clear(self) -> None:
        """Delete every key under this cache's prefix."""
        try:
            keys = self._keys()
            if keys:
                self._redis.delete(*keys)
        except self._errors as e:
            raise CacheError(f"Failed to clear Redis cache: {e}") from e
        with self._stats_lock:
            self._stats = CacheStats()
        logger.info("Redis cache cleared")
