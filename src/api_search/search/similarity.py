"""Vector similarity and ranking."""

from typing import Callable, List, Sequence

import numpy as np

from api_search.core.exceptions import (
    EmbeddingDimensionError,
    EmptyIndexError,
    InvalidEmbeddingError,
)
from api_search.core.models import Document, SearchResult

SimilarityFn = Callable[[Sequence[float], Sequence[float]], float]


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between ``a`` and ``b``, in [-1, 1].

    Raises:
        InvalidEmbeddingError: If either vector is empty or has zero norm.
        EmbeddingDimensionError: If the vectors differ in length.
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.size == 0 or vb.size == 0:
        raise InvalidEmbeddingError("Cannot compare empty embeddings")
    if va.shape != vb.shape:
        raise EmbeddingDimensionError(f"Embedding lengths differ: {va.size} vs {vb.size}")

    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        raise InvalidEmbeddingError("Cannot compare zero-norm embeddings")

    score = float(np.dot(va, vb) / (norm_a * norm_b))
    return max(-1.0, min(1.0, score))


def rank(
    query_embedding: Sequence[float],
    documents: Sequence[Document],
    top_n: int,
    similarity_fn: SimilarityFn = cosine_similarity,
) -> List[SearchResult]:
    """Score every document against the query and keep the best ``top_n``.

    Returns:
        ``min(top_n, len(documents))`` results, highest score first.

    Raises:
        EmptyIndexError: If ``documents`` is empty.
        ValueError: If ``top_n`` is below 1.
    """
    if not documents:
        raise EmptyIndexError("Cannot rank against an empty index")
    if top_n < 1:
        raise ValueError(f"top_n must be >= 1, got {top_n}")

    scores = [similarity_fn(query_embedding, doc.embedding) for doc in documents]
    order = sorted(range(len(documents)), key=lambda i: scores[i], reverse=True)

    return [
        SearchResult(
            title=documents[i].title,
            score=scores[i],
            summary=documents[i].summary,
            endpoint=documents[i].endpoint,
        )
        for i in order[:top_n]
    ]
