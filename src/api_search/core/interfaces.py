"""Abstract base classes defining the plugin interfaces.

All extensible components implement these interfaces, enabling:
- Swappable chat providers behind the capability models
- Different embedding models
- Custom request routing across model pools
- Alternative cache backends
- Alternative browsers for the agent
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence, Tuple, Type, TypeVar

import numpy as np
from pydantic import BaseModel

from api_search.core.models import (
    Capability,
    CacheStats,
    CatalogueEndpoint,
    GeoLocation,
    LLMResponse,
    Message,
    SearchResult,
)

T = TypeVar("T", bound=BaseModel)


class BaseLLM(ABC):
    """Abstract base class for chat providers.

    Implement this interface to add support for new providers. The
    capability models only need a single chat call.

    Example:
        class EchoLLM(BaseLLM):
            name = "echo"
            model = "echo-1"

            def chat(self, messages, **kwargs) -> LLMResponse:
                return LLMResponse(content=messages[-1].content, model=self.model)
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the provider name (e.g., 'openai', 'anthropic')."""
        pass

    @property
    @abstractmethod
    def model(self) -> str:
        """Return the model identifier being used."""
        pass

    @abstractmethod
    def chat(
        self,
        messages: List[Message],
        temperature: float = 0.0,
        max_tokens: Optional[int] = None,
        json_mode: bool = False,
        timeout: Optional[float] = None,
        **kwargs,
    ) -> LLMResponse:
        """Send a conversation and return the assistant reply.

        Args:
            messages: Ordered conversation, system messages first.
            temperature: Sampling temperature (0.0 = deterministic).
            max_tokens: Maximum tokens in response (None = provider default).
            json_mode: Ask the provider for a JSON object reply.
            timeout: Per-request timeout in seconds.
            **kwargs: Provider-specific parameters.

        Returns:
            LLMResponse with generated content and metadata.

        Raises:
            LLMError: On transport or provider failure.
        """
        pass


class BaseEmbedding(ABC):
    """Abstract base class for embedding providers.

    Implementations must return one row per input text, in input order, so
    summaries and queries land in the same vector space.

    Example:
        class CharCountEmbedding(BaseEmbedding):
            name = "char_count"
            dimension = 2

            def encode(self, texts, timeout=None, **kwargs) -> np.ndarray:
                return np.array([[len(t), t.count(" ") + 1] for t in texts], dtype=np.float32)
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the embedding provider name."""
        pass

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Return the embedding dimension."""
        pass

    @abstractmethod
    def encode(
        self,
        texts: List[str],
        timeout: Optional[float] = None,
        **kwargs,
    ) -> np.ndarray:
        """Encode texts into embeddings.

        Args:
            texts: List of texts to encode.
            timeout: Per-request timeout in seconds, where supported.
            **kwargs: Provider-specific parameters.

        Returns:
            NumPy array of shape (len(texts), dimension).
        """
        pass

    def encode_single(self, text: str, **kwargs) -> np.ndarray:
        """Encode a single text into an embedding.

        Returns:
            NumPy array of shape (dimension,).
        """
        return self.encode([text], **kwargs)[0]


class BinaryClassifyModel(ABC):
    @abstractmethod
    def binary_classify(
        self,
        instruction: str,
        text: str,
        examples: Optional[Sequence[Any]] = None,
        timeout: Optional[float] = None,
    ) -> bool:
        """Answer a yes/no question about ``text``."""
        pass


class ClassifyModel(ABC):
    @abstractmethod
    def classify(
        self,
        instruction: str,
        text: str,
        options: List[str],
        examples: Optional[Sequence[Any]] = None,
        timeout: Optional[float] = None,
    ) -> int:
        """Pick one of ``options`` and return its index."""
        pass


class ScoreModel(ABC):
    @abstractmethod
    def score(
        self,
        instruction: str,
        text: str,
        min_value: int,
        max_value: int,
        examples: Optional[Sequence[Any]] = None,
        timeout: Optional[float] = None,
    ) -> int:
        """Score ``text`` as an integer in the advertised range.

        The range is advisory; values outside it are returned unchanged.
        """
        pass


class GenerateModel(ABC):
    @abstractmethod
    def generate(
        self,
        instruction: str,
        text: str,
        examples: Optional[Sequence[Any]] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """Return free text answering ``instruction`` about ``text``."""
        pass


class ParseForceModel(ABC):
    @abstractmethod
    def parse_force(
        self,
        instruction: str,
        text: str,
        target: Type[T],
        examples: Optional[Sequence[Any]] = None,
        timeout: Optional[float] = None,
    ) -> T:
        """Extract an instance of ``target`` from ``text``.

        Raises:
            MalformedResponseError: If the reply does not fit ``target``.
        """
        pass


class GeneralModel(
    BinaryClassifyModel,
    ClassifyModel,
    ScoreModel,
    GenerateModel,
    ParseForceModel,
):
    """A model serving every text capability."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass


class BaseRequestRouter(ABC):
    """Chooses which model in a candidate pool serves a request.

    Example:
        class CheapestRouter(BaseRequestRouter):
            name = "cheapest"

            def route(self, capability, datapoint, models):
                return min(models, key=lambda m: m.cost)
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the router name."""
        pass

    @abstractmethod
    def route(
        self,
        capability: Capability,
        datapoint: Any,
        models: Sequence[Any],
    ) -> Any:
        """Pick a model for ``datapoint``.

        Args:
            capability: The capability being requested.
            datapoint: The request, for content-aware routing.
            models: Candidate pool.

        Returns:
            One member of ``models``.

        Raises:
            NoModelAvailableError: If ``models`` is empty.
        """
        pass


class BaseCache(ABC):
    """Key-value store making indexing idempotent.

    Values are JSON-compatible dicts. ``save_to_disk`` flushes buffered
    writes; backends that write through may treat it as a durability hint.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the cache backend name."""
        pass

    @abstractmethod
    def get(self, key: str) -> Tuple[Optional[Any], bool]:
        """Look up ``key``.

        Returns:
            Tuple of (value, found). If not found, value is None.
        """
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        pass

    @abstractmethod
    def save_to_disk(self) -> None:
        """Flush entries to durable storage.

        Raises:
            CacheError: If the flush fails.
        """
        pass

    @abstractmethod
    def get_stats(self) -> CacheStats:
        pass

    @abstractmethod
    def clear(self) -> None:
        """Clear all entries from the cache."""
        pass


class Browser(ABC):
    """The agent's view of the world: search, location and page loads."""

    @abstractmethod
    def search(self, query: str, scope=None) -> List[SearchResult]:
        pass

    @abstractmethod
    def get_location(self, scope=None) -> GeoLocation:
        pass

    @abstractmethod
    def navigate(self, endpoint: CatalogueEndpoint, scope=None) -> str:
        """Load the page for ``endpoint`` and return it as text."""
        pass
