"""Custom exceptions for the API search engine."""

from typing import Optional


class ApiSearchError(Exception):
    """Base exception for all API search errors."""
    pass


class LLMError(ApiSearchError):
    """Error in LLM provider operations."""
    pass


class EmbeddingError(ApiSearchError):
    """Error in embedding operations."""
    pass


class MalformedResponseError(ApiSearchError):
    """A model answered, but the answer could not be decoded.

    Raised for invalid JSON, schema mismatches and unknown classification
    labels. Never defaulted to a fallback value.
    """
    pass


class RouterError(ApiSearchError):
    """Error in request routing operations."""
    pass


class NoModelAvailableError(RouterError):
    """The candidate pool for a capability was empty."""
    pass


class CatalogueError(ApiSearchError):
    """Error fetching or decoding a catalogue entry's self-description."""
    pass


class LocationError(ApiSearchError):
    """The caller's location could not be determined."""
    pass


class CacheError(ApiSearchError):
    """Error in cache operations."""
    pass


class ConfigurationError(ApiSearchError):
    """Error in configuration or initialization."""
    pass


class IndexNotInitializedError(ApiSearchError):
    """The search engine has no index yet."""
    pass


class EmptyIndexError(ApiSearchError):
    """The search engine's index holds no documents."""
    pass


class InvalidEmbeddingError(ApiSearchError):
    """An embedding is empty, zero-norm or otherwise unusable."""
    pass


class EmbeddingDimensionError(InvalidEmbeddingError):
    """Embeddings of different lengths were mixed."""
    pass


class SearchCancelledError(ApiSearchError):
    """The surrounding operation was cancelled or ran past its deadline."""
    pass


class IndexingError(ApiSearchError):
    """Indexing a catalogue entry failed, aborting the refresh."""

    def __init__(self, message: str, endpoint: Optional[str] = None):
        super().__init__(message)
        self.endpoint = endpoint
