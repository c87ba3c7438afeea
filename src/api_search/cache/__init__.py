"""Cache implementations."""

from api_search.cache.disk_cache import DiskCache
from api_search.cache.redis_cache import RedisCache
from api_search.cache.keys import content_key

__all__ = ["DiskCache", "RedisCache", "content_key"]
