"""Local embedding provider backed by sentence-transformers."""

import logging
import threading
from typing import Dict, List, Optional

import numpy as np

from api_search.core.interfaces import BaseEmbedding
from api_search.core.exceptions import EmbeddingError

logger = logging.getLogger(__name__)


class SentenceTransformerEmbedding(BaseEmbedding):
    """Embeds text with a locally loaded sentence-transformers model.

    The model is loaded on first use and shared between instances with the
    same model name. Loading is guarded by a lock because indexing workers
    embed concurrently. Request timeouts do not apply to local inference and
    are ignored.

    Example:
        embedding = SentenceTransformerEmbedding("all-MiniLM-L6-v2")
        vectors = embedding.encode(["weather forecast API", "flight booking API"])
        print(vectors.shape)  # (2, 384)

    Note:
        Requires the ``local`` extra: pip install "api-search-engine[local]"
    """

    _models: Dict[str, object] = {}
    _load_lock = threading.Lock()

    def __init__(
        self,
        model_name: str = "all-MiniLM-L6-v2",
        device: Optional[str] = None,
        trust_remote_code: bool = False,
    ):
        self._model_name = model_name
        self._device = device or "cpu"
        self._trust_remote_code = trust_remote_code
        self._model = None

    def _load_model(self):
        if self._model is not None:
            return self._model

        with self._load_lock:
            model = self._models.get(self._model_name)
            if model is None:
                try:
                    from sentence_transformers import SentenceTransformer
                except ImportError as e:
                    raise EmbeddingError(
                        "sentence-transformers not installed. "
                        'Run: pip install "api-search-engine[local]"'
                    ) from e

                logger.info(f"Loading embedding model: {self._model_name}")
                try:
                    model = SentenceTransformer(
                        self._model_name,
                        device=self._device,
                        trust_remote_code=self._trust_remote_code,
                    )
                except (OSError, ValueError, RuntimeError) as e:
                    raise EmbeddingError(f"Failed to load model {self._model_name}: {e}") from e
                self._models[self._model_name] = model

        self._model = model
        return model

    @property
    def name(self) -> str:
        return "sentence_transformer"

    @property
    def dimension(self) -> int:
        return self._load_model().get_sentence_embedding_dimension()

    def encode(
        self,
        texts: List[str],
        timeout: Optional[float] = None,
        batch_size: int = 32,
        **kwargs,
    ) -> np.ndarray:
        """Encode texts into unnormalised embeddings.

        Raises:
            EmbeddingError: If the model cannot be loaded or inference fails.
        """
        model = self._load_model()
        try:
            embeddings = model.encode(
                texts,
                batch_size=batch_size,
                show_progress_bar=False,
                **kwargs,
            )
        except (RuntimeError, ValueError) as e:
            logger.error(f"Failed to encode texts: {e}")
            raise EmbeddingError(f"Encoding failed: {e}") from e
        return np.asarray(embeddings, dtype=np.float32)

    @classmethod
    def clear_cache(cls) -> None:
        """Drop every loaded model to free memory."""
        with cls._load_lock:
            cls._models.clear()
