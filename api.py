#!/usr/bin/env python
"""
FastAPI server for API search and request drafting.

Run with: uvicorn api:app --reload --port 8000

Endpoints:
    POST /search          - Find catalogue APIs for a query
    POST /index/refresh   - Rebuild the index from catalogue endpoints
    POST /solve           - Pick an API for a request and draft the call
    GET  /cache/stats     - Cache statistics
    POST /cache/clear     - Clear the cache
    GET  /health          - Health check
"""
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

# Add src to path
src_path = Path(__file__).parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from api_search.config.settings import Settings
from api_search.core.exceptions import (
    ApiSearchError,
    CatalogueError,
    EmbeddingError,
    EmptyIndexError,
    IndexNotInitializedError,
    IndexingError,
    LLMError,
    LocationError,
    MalformedResponseError,
    SearchCancelledError,
)
from api_search.core.middleware import RequestIDMiddleware
from api_search.core.models import CatalogueEndpoint

logger = logging.getLogger(__name__)

# Global singletons (lazy loaded)
_settings = None
_components = None


def get_settings() -> Settings:
    """Get settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def get_components() -> Dict[str, Any]:
    """Get or create the search engine components."""
    global _components
    if _components is None:
        from api_search.config.factory import create_components
        logger.info("Creating search engine components...")
        _components = create_components(get_settings())
        logger.info("Search engine ready")
    return _components


def get_engine():
    return get_components()["engine"]


def get_agent():
    return get_components()["agent"]


def get_browser():
    from api_search.config.factory import create_browser
    return create_browser(get_engine(), get_settings())


# Initialize FastAPI app
app = FastAPI(
    title="API Search Engine",
    description="Find catalogue APIs for a request and draft the call",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIDMiddleware)


# ----- Request/Response Models -----

class EndpointModel(BaseModel):
    """A catalogue entry's network address."""
    host: str = Field(..., description="Host name or IP address")
    port: int = Field(..., ge=1, le=65535, description="TCP port")
    protocol: str = Field("http", description="URL scheme")
    path: str = Field("/", description="Path of the self-description")

    def to_endpoint(self) -> CatalogueEndpoint:
        return CatalogueEndpoint(host=self.host, port=self.port, protocol=self.protocol, path=self.path)


class SearchRequest(BaseModel):
    """Request for API search."""
    query: str = Field(..., description="Natural-language request")
    top_n: Optional[int] = Field(None, ge=1, description="Number of results")
    verify: Optional[bool] = Field(None, description="Filter results with the LLM verifier")
    timeout: Optional[float] = Field(None, gt=0, description="Deadline in seconds")


class SearchResponse(BaseModel):
    """Response from API search."""
    query: str
    results: List[dict] = Field(default_factory=list, description="Ranked catalogue entries")
    timing: dict = Field(default_factory=dict, description="Timing breakdown in ms")


class RefreshIndexRequest(BaseModel):
    """Request to rebuild the index."""
    endpoints: List[EndpointModel] = Field(..., description="Catalogue entries to index")
    max_concurrency: Optional[int] = Field(None, ge=1, description="Entries indexed at once")
    timeout: Optional[float] = Field(None, gt=0, description="Deadline in seconds")


class RefreshIndexResponse(BaseModel):
    """Response from an index refresh."""
    indexed: int
    titles: List[str]
    timing: dict = Field(default_factory=dict)


class SolveRequest(BaseModel):
    """Request to draft a call for a user request."""
    query: str = Field(..., description="What the user wants done")


# ----- Helpers -----

def _http_error(error: Exception) -> HTTPException:
    """Map a domain error to an HTTP status."""
    if isinstance(error, (IndexNotInitializedError, EmptyIndexError)):
        status = 409
    elif isinstance(error, SearchCancelledError):
        status = 504
    elif isinstance(error, (
        LLMError, MalformedResponseError, EmbeddingError, CatalogueError, LocationError, IndexingError,
    )):
        status = 502
    elif isinstance(error, ValueError):
        status = 400
    else:
        status = 500
    logger.error(f"Request failed with {status}: {error}")
    return HTTPException(status_code=status, detail=str(error))


# ----- Endpoints -----

@app.get("/health")
def health_check():
    """Health check endpoint."""
    index = get_engine().index
    return {
        "status": "healthy",
        "chat_provider": get_settings().chat_provider,
        "index_size": None if index is None else len(index),
    }


@app.post("/search", response_model=SearchResponse)
def search(request: SearchRequest):
    """
    Find catalogue APIs relevant to a query.

    Example:
        curl -X POST http://localhost:8000/search \
             -H "Content-Type: application/json" \
             -d '{"query": "send a text message"}'
    """
    from api_search.config.factory import default_search_options

    options = default_search_options(get_settings())
    if request.top_n is not None:
        options.top_n = request.top_n
    if request.verify is not None:
        options.verify = request.verify
    options.timeout = request.timeout

    start = time.perf_counter()
    try:
        results = get_engine().search(request.query, options)
    except (ApiSearchError, ValueError) as e:
        raise _http_error(e) from e

    return SearchResponse(
        query=request.query,
        results=[r.to_dict() for r in results],
        timing={"total_ms": round((time.perf_counter() - start) * 1000, 2)},
    )


@app.post("/index/refresh", response_model=RefreshIndexResponse)
def refresh_index(request: RefreshIndexRequest):
    """
    Rebuild the index from catalogue endpoints. The old index stays in
    place if any entry fails.

    Example:
        curl -X POST http://localhost:8000/index/refresh \
             -H "Content-Type: application/json" \
             -d '{"endpoints": [{"host": "10.0.0.5", "port": 8080}]}'
    """
    from api_search.indexing import save_index
    from api_search.search import RefreshIndexOptions

    settings = get_settings()
    options = RefreshIndexOptions(
        max_concurrency=request.max_concurrency or settings.max_concurrency,
        timeout=request.timeout,
    )

    start = time.perf_counter()
    try:
        documents = get_engine().refresh_index([e.to_endpoint() for e in request.endpoints], options)
        if settings.index_file:
            save_index(settings.index_file, documents)
    except (ApiSearchError, ValueError) as e:
        raise _http_error(e) from e

    return RefreshIndexResponse(
        indexed=len(documents),
        titles=[d.title for d in documents],
        timing={"total_ms": round((time.perf_counter() - start) * 1000, 2)},
    )


@app.post("/solve")
def solve(request: SolveRequest):
    """Pick the best API for a request and draft the call against it."""
    try:
        result = get_agent().solve(request.query, get_browser())
    except (ApiSearchError, ValueError) as e:
        raise _http_error(e) from e
    return result.to_dict()


@app.get("/cache/stats")
def cache_stats():
    """Get cache statistics."""
    try:
        return get_engine().get_cache_stats().to_dict()
    except ApiSearchError as e:
        raise _http_error(e) from e


@app.post("/cache/clear")
def clear_cache():
    """Clear the cache."""
    try:
        get_engine().clear_cache()
    except ApiSearchError as e:
        raise _http_error(e) from e
    return {"status": "cleared"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
