"""OpenAI embedding provider implementation."""

import logging
from typing import Dict, List, Optional

import numpy as np
from openai import OpenAI, OpenAIError

from api_search.core.interfaces import BaseEmbedding
from api_search.core.exceptions import EmbeddingError

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 0
DEFAULT_EMBEDDING_MODEL = "text-embedding-3-large"

_KNOWN_DIMENSIONS: Dict[str, int] = {
    "text-embedding-3-large": 3072,
    "text-embedding-3-small": 1536,
    "text-embedding-ada-002": 1536,
}


class OpenAIEmbedding(BaseEmbedding):
    """Embeds text with the OpenAI embeddings endpoint.

    Example:
        embedding = OpenAIEmbedding(api_key="sk-...")
        vector = embedding.encode_single("Book a table at a restaurant")
        print(vector.shape)  # (3072,)
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_EMBEDDING_MODEL,
        **kwargs,
    ):
        if not api_key:
            raise EmbeddingError("OpenAI API key is required")

        # Failures surface to the caller; the SDK retries only when asked.
        kwargs.setdefault("max_retries", DEFAULT_MAX_RETRIES)
        self._client = OpenAI(api_key=api_key, **kwargs)
        self._model = model
        self._dimension: Optional[int] = _KNOWN_DIMENSIONS.get(model)
        logger.info(f"Initialized OpenAI embedding with model: {model}")

    @property
    def name(self) -> str:
        return "openai"

    @property
    def model(self) -> str:
        return self._model

    @property
    def dimension(self) -> int:
        if self._dimension is None:
            self._dimension = int(self.encode_single("dimension check").shape[0])
        return self._dimension

    def encode(
        self,
        texts: List[str],
        timeout: Optional[float] = None,
        **kwargs,
    ) -> np.ndarray:
        """Encode texts into embeddings, in input order.

        Raises:
            EmbeddingError: If the API call fails or returns no vectors.
        """
        params = {"model": self._model, "input": texts, **kwargs}
        if timeout is not None:
            params["timeout"] = timeout

        try:
            response = self._client.embeddings.create(**params)
        except OpenAIError as e:
            logger.error(f"OpenAI embedding error: {e}")
            raise EmbeddingError(f"OpenAI embedding call failed: {e}") from e

        if len(response.data) != len(texts):
            raise EmbeddingError(
                f"Expected {len(texts)} embeddings, got {len(response.data)}"
            )
        ordered = sorted(response.data, key=lambda item: item.index)
        return np.array([item.embedding for item in ordered], dtype=np.float32)
