"""Pytest configuration and shared fixtures."""

import sys
import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional
from unittest.mock import MagicMock

import numpy as np
import pytest

# Add src to path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from api_search.core.interfaces import BaseEmbedding, BaseLLM, GeneralModel
from api_search.core.models import CatalogueEndpoint, Document, LLMResponse


class FakeLLM(BaseLLM):
    """Chat provider replying from a queue (the last reply repeats)."""

    def __init__(self, replies: Optional[List[str]] = None):
        self.replies = list(replies or ["{}"])
        self.calls: List[dict] = []

    @property
    def name(self) -> str:
        return "fake"

    @property
    def model(self) -> str:
        return "fake-1"

    def chat(self, messages, temperature=0.0, max_tokens=None, json_mode=False, timeout=None, **kwargs):
        self.calls.append({
            "messages": list(messages),
            "temperature": temperature,
            "max_tokens": max_tokens,
            "json_mode": json_mode,
            "timeout": timeout,
        })
        content = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        return LLMResponse(content=content, model=self.model)


class FakeGeneralModel(GeneralModel):
    """Capability model with scripted answers and thread-safe call counters."""

    def __init__(
        self,
        name: str = "fake-general",
        summarize: Optional[Callable[[str], str]] = None,
        relevant: Optional[Callable[[str], bool]] = None,
        choose: Optional[Callable[[str, List[str]], int]] = None,
        parse: Optional[Callable[[str], dict]] = None,
    ):
        self._name = name
        self._summarize = summarize or (lambda text: f"Summary: {text.splitlines()[0]}")
        self._relevant = relevant or (lambda text: True)
        self._choose = choose or (lambda text, options: 0)
        self._parse = parse or (lambda text: {})
        self._lock = threading.Lock()
        self.counts: Dict[str, int] = {}
        self.calls: List[tuple] = []

    @property
    def name(self) -> str:
        return self._name

    def _record(self, capability: str, *args) -> None:
        with self._lock:
            self.counts[capability] = self.counts.get(capability, 0) + 1
            self.calls.append((capability,) + args)

    def binary_classify(self, instruction, text, examples=None, timeout=None):
        self._record("binary_classify", instruction, text)
        return self._relevant(text)

    def classify(self, instruction, text, options, examples=None, timeout=None):
        self._record("classify", instruction, text, list(options))
        return self._choose(text, list(options))

    def score(self, instruction, text, min_value, max_value, examples=None, timeout=None):
        self._record("score", instruction, text)
        return min_value

    def generate(self, instruction, text, examples=None, timeout=None):
        self._record("generate", instruction, text)
        return self._summarize(text)

    def parse_force(self, instruction, text, target, examples=None, timeout=None):
        self._record("parse_force", instruction, text)
        return target.model_validate(self._parse(text))


class FakeEmbedding(BaseEmbedding):
    """Embeds by looking text up in a table; unknown text gets ``default``."""

    def __init__(self, vectors: Optional[Dict[str, List[float]]] = None, default=None):
        self.vectors = vectors or {}
        self.default = default or [1.0, 0.0]
        self.calls: List[str] = []
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return "fake_embedding"

    @property
    def dimension(self) -> int:
        return len(self.default)

    def encode(self, texts, timeout=None, **kwargs):
        with self._lock:
            self.calls.extend(texts)
        return np.array([self.vectors.get(t, self.default) for t in texts], dtype=np.float32)


@pytest.fixture
def fake_model():
    return FakeGeneralModel()


@pytest.fixture
def fake_embedding():
    return FakeEmbedding()


@pytest.fixture
def model_api(fake_model, fake_embedding):
    from api_search.capabilities.api import ModelAPI

    return ModelAPI.from_general_model(fake_model, fake_embedding)


@pytest.fixture
def memory_cache():
    """In-memory cache that never touches the filesystem."""
    from api_search.cache.disk_cache import DiskCache

    return DiskCache(cache_file=None)


@pytest.fixture
def endpoints():
    return [CatalogueEndpoint(host=f"10.0.0.{i}", port=8080) for i in range(1, 4)]


def make_spec(title: str, description: str = "", paths=("/items",)) -> dict:
    return {
        "openapi": "3.0.0",
        "info": {"title": title, "description": description},
        "paths": {p: {"get": {}} for p in paths},
    }


@pytest.fixture
def sample_documents():
    """Three documents whose embeddings point along x, y and the diagonal."""
    return [
        Document(
            title="Weather API",
            summary="Forecasts and current conditions",
            embedding=[1.0, 0.0],
            endpoint=CatalogueEndpoint(host="10.0.0.1", port=8080),
        ),
        Document(
            title="Payments API",
            summary="Charge cards and issue refunds",
            embedding=[0.0, 1.0],
            endpoint=CatalogueEndpoint(host="10.0.0.2", port=8080),
        ),
        Document(
            title="Travel API",
            summary="Flights with weather-aware delay estimates",
            embedding=[0.7, 0.7],
            endpoint=CatalogueEndpoint(host="10.0.0.3", port=8080),
        ),
    ]


@pytest.fixture
def mock_engine():
    """Mock search engine for CLI and HTTP tests."""
    from api_search.core.models import CacheStats, SearchResult

    engine = MagicMock()
    engine.index = []
    engine.search = MagicMock(return_value=[
        SearchResult(
            title="Weather API",
            score=0.93,
            summary="Forecasts and current conditions",
            endpoint=CatalogueEndpoint(host="10.0.0.1", port=8080),
        )
    ])
    engine.get_cache_stats = MagicMock(return_value=CacheStats(lookups=4, hits=3, misses=1, cache_size=3))
    engine.clear_cache = MagicMock()
    return engine
