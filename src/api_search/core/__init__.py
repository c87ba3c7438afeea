"""Core contracts, data models and primitives for the API search engine."""

from api_search.core.interfaces import (
    BaseLLM,
    BaseEmbedding,
    BaseRequestRouter,
    BaseCache,
    Browser,
    GeneralModel,
)
from api_search.core.models import (
    Capability,
    CatalogueEndpoint,
    Document,
    SearchResult,
    CacheStats,
    GeoLocation,
)
from api_search.core.cancellation import CancelScope
from api_search.core.exceptions import (
    ApiSearchError,
    LLMError,
    EmbeddingError,
    MalformedResponseError,
    RouterError,
    NoModelAvailableError,
    CatalogueError,
    LocationError,
    CacheError,
    ConfigurationError,
    IndexNotInitializedError,
    EmptyIndexError,
    InvalidEmbeddingError,
    EmbeddingDimensionError,
    SearchCancelledError,
    IndexingError,
)

__all__ = [
    # Interfaces
    "BaseLLM",
    "BaseEmbedding",
    "BaseRequestRouter",
    "BaseCache",
    "Browser",
    "GeneralModel",
    # Models
    "Capability",
    "CatalogueEndpoint",
    "Document",
    "SearchResult",
    "CacheStats",
    "GeoLocation",
    "CancelScope",
    # Exceptions
    "ApiSearchError",
    "LLMError",
    "EmbeddingError",
    "MalformedResponseError",
    "RouterError",
    "NoModelAvailableError",
    "CatalogueError",
    "LocationError",
    "CacheError",
    "ConfigurationError",
    "IndexNotInitializedError",
    "EmptyIndexError",
    "InvalidEmbeddingError",
    "EmbeddingDimensionError",
    "SearchCancelledError",
    "IndexingError",
]
