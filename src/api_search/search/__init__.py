"""Similarity search, verification and the search engine facade."""

from api_search.search.engine import RefreshIndexOptions, SearchEngine, SearchOptions
from api_search.search.similarity import cosine_similarity, rank
from api_search.search.verifier import Verifier

__all__ = [
    "SearchEngine",
    "SearchOptions",
    "RefreshIndexOptions",
    "Verifier",
    "cosine_similarity",
    "rank",
]
