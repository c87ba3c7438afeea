"""Index construction and persistence."""

from api_search.indexing.datagen import SpecGenerator, read_companies
from api_search.indexing.indexer import Indexer
from api_search.indexing.store import load_index, save_index, validate_dimensions

__all__ = [
    "Indexer",
    "SpecGenerator",
    "load_index",
    "read_companies",
    "save_index",
    "validate_dimensions",
]
