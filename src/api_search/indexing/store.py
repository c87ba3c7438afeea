"""Saving and loading a built index as a JSON file."""

import json
import logging
import os
from pathlib import Path
from typing import List, Sequence, Union

from api_search.core.exceptions import (
    ApiSearchError,
    EmbeddingDimensionError,
    InvalidEmbeddingError,
)
from api_search.core.models import Document

logger = logging.getLogger(__name__)


def validate_dimensions(documents: Sequence[Document]) -> int:
    """Check every embedding is non-empty and of the same length.

    Returns:
        The shared dimension, or 0 for an empty sequence.

    Raises:
        InvalidEmbeddingError: If a document has an empty embedding.
        EmbeddingDimensionError: If embedding lengths differ.
    """
    dimension = 0
    for doc in documents:
        if not doc.embedding:
            raise InvalidEmbeddingError(f"Document {doc.title!r} has an empty embedding")
        if dimension == 0:
            dimension = len(doc.embedding)
        elif len(doc.embedding) != dimension:
            raise EmbeddingDimensionError(
                f"Document {doc.title!r} has embedding length {len(doc.embedding)}, "
                f"expected {dimension}"
            )
    return dimension


def save_index(path: Union[str, Path], documents: Sequence[Document]) -> None:
    """Write ``documents`` to ``path`` as a JSON array, replacing it atomically."""
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump([doc.to_dict() for doc in documents], f)
    os.replace(tmp_path, path)
    logger.info(f"Saved {len(documents)} documents to {path}")


def load_index(path: Union[str, Path]) -> List[Document]:
    """Read an index written by ``save_index``.

    Raises:
        ApiSearchError: If the file cannot be read or is not a JSON array.
        EmbeddingDimensionError: If stored embeddings disagree in length.
    """
    path = Path(path).expanduser()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ApiSearchError(f"Cannot load index from {path}: {e}") from e

    if not isinstance(data, list):
        raise ApiSearchError(f"Index file {path} must hold a JSON array")

    documents = [Document.from_dict(entry) for entry in data]
    validate_dimensions(documents)
    logger.info(f"Loaded {len(documents)} documents from {path}")
    return documents
