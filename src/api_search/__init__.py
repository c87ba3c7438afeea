"""
API Search Engine - find the right API for a request and draft the call.

This package provides:
- Catalogue indexing with LLM summaries and dense embeddings
- Cosine-similarity search with optional LLM verification
- Capability-based model access (classify, score, generate, parse) with
  pluggable request routers
- Content-addressed caching with disk or Redis backends
- A browsing agent that picks an API and drafts a request against it
"""

from api_search.core.models import CatalogueEndpoint, Document, SearchResult
from api_search.capabilities.api import ModelAPI
from api_search.search.engine import SearchEngine, SearchOptions, RefreshIndexOptions
from api_search.agent.browser_agent import LLMBrowserAgent
from api_search.config.factory import create_search_engine

__version__ = "1.0.0"

__all__ = [
    "CatalogueEndpoint",
    "Document",
    "SearchResult",
    "ModelAPI",
    "SearchEngine",
    "SearchOptions",
    "RefreshIndexOptions",
    "LLMBrowserAgent",
    "create_search_engine",
]
