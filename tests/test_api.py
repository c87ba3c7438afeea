"""Tests for FastAPI endpoints."""

import pytest
from unittest.mock import MagicMock, patch
from fastapi.testclient import TestClient

from api_search.agent.browser_agent import SolveResult, SolveStatus
from api_search.config.settings import Settings
from api_search.core.exceptions import (
    CatalogueError,
    EmptyIndexError,
    IndexingError,
    IndexNotInitializedError,
    SearchCancelledError,
)


@pytest.fixture
def mock_agent():
    agent = MagicMock()
    agent.solve = MagicMock(return_value=SolveResult(status=SolveStatus.NO_RELEVANT_API))
    return agent


@pytest.fixture
def client(mock_engine, mock_agent):
    """Create test client with mocked dependencies."""
    settings = Settings(openai_api_key="sk-test", index_file=None)
    with patch('api.get_engine', return_value=mock_engine), \
         patch('api.get_agent', return_value=mock_agent), \
         patch('api.get_browser', return_value=MagicMock()), \
         patch('api.get_settings', return_value=settings):
        from api import app
        yield TestClient(app)


class TestHealthEndpoint:
    def test_health_check(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["index_size"] == 0

    def test_request_id_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

    def test_request_id_generated(self, client):
        assert client.get("/health").headers["X-Request-ID"]


class TestSearchEndpoint:
    def test_search(self, client, mock_engine):
        response = client.post("/search", json={"query": "rain tomorrow", "top_n": 2, "verify": False})

        assert response.status_code == 200
        data = response.json()
        assert data["query"] == "rain tomorrow"
        assert data["results"][0]["title"] == "Weather API"
        assert "total_ms" in data["timing"]
        options = mock_engine.search.call_args[0][1]
        assert options.top_n == 2
        assert options.verify is False

    def test_missing_query(self, client):
        assert client.post("/search", json={}).status_code == 422

    @pytest.mark.parametrize("error,status", [
        (IndexNotInitializedError("no index"), 409),
        (EmptyIndexError("empty"), 409),
        (SearchCancelledError("deadline exceeded"), 504),
        (CatalogueError("unreachable"), 502),
        (ValueError("Query cannot be empty"), 400),
    ])
    def test_error_mapping(self, client, mock_engine, error, status):
        mock_engine.search.side_effect = error
        response = client.post("/search", json={"query": "rain"})

        assert response.status_code == status
        assert response.json()["detail"] == str(error)


class TestIndexRefreshEndpoint:
    def test_refresh(self, client, mock_engine, sample_documents):
        mock_engine.refresh_index.return_value = sample_documents

        response = client.post("/index/refresh", json={
            "endpoints": [{"host": "10.0.0.1", "port": 8080}],
            "max_concurrency": 4,
        })

        assert response.status_code == 200
        assert response.json()["indexed"] == 3
        endpoints, options = mock_engine.refresh_index.call_args[0]
        assert endpoints[0].url == "http://10.0.0.1:8080/"
        assert options.max_concurrency == 4

    def test_refresh_failure(self, client, mock_engine):
        mock_engine.refresh_index.side_effect = IndexingError("Failed to index", endpoint="http://10.0.0.1:8080/")
        response = client.post("/index/refresh", json={"endpoints": [{"host": "10.0.0.1", "port": 8080}]})
        assert response.status_code == 502

    def test_invalid_port(self, client):
        response = client.post("/index/refresh", json={"endpoints": [{"host": "x", "port": 0}]})
        assert response.status_code == 422


class TestSolveEndpoint:
    def test_no_relevant_api(self, client, mock_agent):
        response = client.post("/solve", json={"query": "order pizza"})

        assert response.status_code == 200
        assert response.json()["status"] == "no_relevant_api"
        assert mock_agent.solve.call_args[0][0] == "order pizza"


class TestCacheEndpoints:
    def test_cache_stats(self, client):
        response = client.get("/cache/stats")

        assert response.status_code == 200
        assert response.json()["cache_size"] == 3

    def test_clear_cache(self, client, mock_engine):
        response = client.post("/cache/clear")

        assert response.status_code == 200
        assert response.json()["status"] == "cleared"
        mock_engine.clear_cache.assert_called_once()
