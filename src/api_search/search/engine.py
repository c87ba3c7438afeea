"""Search engine facade - index refresh, similarity search and verification.

The engine owns the current index and swaps it atomically on refresh, so a
search running during a refresh sees either the old index or the new one,
never a mix.
"""

import logging
import threading
from dataclasses import dataclass
from typing import List, Optional, Sequence

from api_search.capabilities.api import ModelAPI
from api_search.core.cancellation import CancelScope, ensure_scope
from api_search.core.exceptions import (
    CacheError,
    EmptyIndexError,
    IndexNotInitializedError,
)
from api_search.core.interfaces import BaseCache
from api_search.core.logging import log_duration
from api_search.core.models import CacheStats, CatalogueEndpoint, Document, SearchResult
from api_search.indexing.indexer import Indexer
from api_search.indexing.store import validate_dimensions
from api_search.search.similarity import SimilarityFn, cosine_similarity, rank
from api_search.search.verifier import Verifier

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 8
DEFAULT_TOP_N = 5


@dataclass
class SearchOptions:
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    top_n: int = DEFAULT_TOP_N
    verify: bool = True
    timeout: Optional[float] = None


@dataclass
class RefreshIndexOptions:
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    timeout: Optional[float] = None


class SearchEngine:
    """Dense-embedding search over catalogue entries.

    Example:
        engine = SearchEngine(model_api, DiskCache())
        engine.refresh_index(load_endpoints("endpoints.json"))
        for result in engine.search("send a text message"):
            print(result.title, result.score)
    """

    def __init__(
        self,
        model_api: ModelAPI,
        cache: BaseCache,
        index: Optional[Sequence[Document]] = None,
        indexer: Optional[Indexer] = None,
        verifier: Optional[Verifier] = None,
        similarity_fn: SimilarityFn = cosine_similarity,
    ):
        self.model_api = model_api
        self.cache = cache
        self.indexer = indexer or Indexer(model_api, cache)
        self.verifier = verifier or Verifier(model_api)
        self.similarity_fn = similarity_fn
        self._index_lock = threading.Lock()
        self._index: Optional[List[Document]] = None
        if index is not None:
            self.set_index(index)

    @property
    def index(self) -> Optional[List[Document]]:
        with self._index_lock:
            return self._index

    def set_index(self, documents: Sequence[Document]) -> None:
        """Replace the index after checking embedding dimensions."""
        documents = list(documents)
        validate_dimensions(documents)
        with self._index_lock:
            self._index = documents
        logger.info(f"Index set with {len(documents)} documents")

    def search(
        self,
        query: str,
        options: Optional[SearchOptions] = None,
        scope: Optional[CancelScope] = None,
    ) -> List[SearchResult]:
        """Find catalogue entries relevant to ``query``.

        Args:
            query: Natural-language request.
            options: Result count, verification and concurrency settings.
            scope: Caller scope for cancellation and deadlines.

        Returns:
            Ranked (and, when enabled, verified) results.

        Raises:
            ValueError: If ``query`` is blank or options are out of range.
            IndexNotInitializedError: If no index has been built or set.
            EmptyIndexError: If the index holds no documents.
            SearchCancelledError: If the scope is cancelled or times out.
        """
        options = options or SearchOptions()
        if not query or not query.strip():
            raise ValueError("Query cannot be empty")
        if options.top_n < 1:
            raise ValueError(f"top_n must be >= 1, got {options.top_n}")
        if options.max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {options.max_concurrency}")

        documents = self.index
        if documents is None:
            raise IndexNotInitializedError("Index is not initialized")
        if not documents:
            raise EmptyIndexError("Index is empty")

        scope = ensure_scope(scope, options.timeout)
        with log_duration(logger, "search_completed", query=query, verify=options.verify):
            query_embedding = self.model_api.embed(query, scope=scope)
            results = rank(query_embedding, documents, options.top_n, self.similarity_fn)
            if options.verify:
                results = self.verifier.verify(query, results, options.max_concurrency, scope)
        return results

    def refresh_index(
        self,
        endpoints: Sequence[CatalogueEndpoint],
        options: Optional[RefreshIndexOptions] = None,
        scope: Optional[CancelScope] = None,
    ) -> List[Document]:
        """Rebuild the index from ``endpoints`` and flush the cache.

        The new index is installed before the cache flush, so a flush failure
        leaves the new index in place and still raises.

        Raises:
            IndexingError: If any entry fails; the old index is kept.
            SearchCancelledError: If the scope is cancelled or times out.
            CacheError: If the cache flush fails.
        """
        options = options or RefreshIndexOptions()
        scope = ensure_scope(scope, options.timeout)

        documents = self.indexer.build_index(endpoints, options.max_concurrency, scope)
        with self._index_lock:
            self._index = documents
        logger.info(f"Index refreshed with {len(documents)} documents")

        try:
            self.cache.save_to_disk()
        except CacheError:
            logger.error("Index refreshed but cache flush failed")
            raise
        return documents

    def get_cache_stats(self) -> CacheStats:
        return self.cache.get_stats()

    def clear_cache(self) -> None:
        self.cache.clear()
