"""JSON-file backed key-value cache."""

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from api_search.core.interfaces import BaseCache
from api_search.core.models import CacheStats
from api_search.core.exceptions import CacheError

logger = logging.getLogger(__name__)

DEFAULT_CACHE_FILE = Path.home() / ".cache" / "api-search" / "search-engine.json"


class DiskCache(BaseCache):
    """In-memory dict flushed to a JSON file on ``save_to_disk``.

    Writes are buffered: ``set`` only touches memory, and the file is
    replaced atomically on flush. A missing file starts an empty cache (and
    creates its directory); an unreadable one is logged and ignored.

    Example:
        cache = DiskCache("~/.cache/api-search/search-engine.json")
        value, found = cache.get("catalogue-entry-ab12...")
        cache.set("catalogue-entry-ab12...", document.to_dict())
        cache.save_to_disk()
    """

    def __init__(
        self,
        cache_file: Optional[str] = str(DEFAULT_CACHE_FILE),
        persist: bool = True,
    ):
        """Initialize the cache.

        Args:
            cache_file: Path of the JSON file. None keeps the cache in memory.
            persist: Whether ``save_to_disk`` writes the file.

        Raises:
            CacheError: If the cache directory cannot be created.
        """
        self._path = Path(cache_file).expanduser() if cache_file else None
        self._persist = persist and self._path is not None
        self._lock = threading.Lock()
        self._entries: Dict[str, Any] = {}
        self._stats = CacheStats()

        if self._path is not None:
            self._load()

    @property
    def name(self) -> str:
        return "disk"

    @property
    def path(self) -> Optional[Path]:
        return self._path

    def _load(self) -> None:
        if not self._path.exists():
            logger.info(f"Cache not found at {self._path}, starting with empty cache")
            if self._persist:
                try:
                    self._path.parent.mkdir(parents=True, exist_ok=True)
                except OSError as e:
                    raise CacheError(f"Cannot create cache directory {self._path.parent}: {e}") from e
            return

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load cache from {self._path}, starting empty: {e}")
            return

        if not isinstance(data, dict):
            logger.warning(f"Cache file {self._path} does not hold an object, starting empty")
            return

        self._entries = data
        logger.info(f"Loaded cache from {self._path}: {len(data)} entries")

    def get(self, key: str) -> Tuple[Optional[Any], bool]:
        with self._lock:
            self._stats.lookups += 1
            if key in self._entries:
                self._stats.hits += 1
                return self._entries[key], True
            self._stats.misses += 1
            return None, False

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = value

    def save_to_disk(self) -> None:
        """Atomically replace the cache file with the current entries.

        Raises:
            CacheError: If the file cannot be written.
        """
        if not self._persist:
            return

        with self._lock:
            snapshot = dict(self._entries)

        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(snapshot, f, indent=2)
            os.replace(tmp_path, self._path)
        except (OSError, TypeError, ValueError) as e:
            raise CacheError(f"Failed to save cache to {self._path}: {e}") from e

        logger.info(f"Saved {len(snapshot)} cache entries to {self._path}")

    def get_stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                lookups=self._stats.lookups,
                hits=self._stats.hits,
                misses=self._stats.misses,
                cache_size=len(self._entries),
            )

    def clear(self) -> None:
        """Drop every entry and reset statistics, flushing if persistent."""
        with self._lock:
            self._entries = {}
            self._stats = CacheStats()
        self.save_to_disk()
        logger.info("Cache cleared")
